# py/tdms_dump/log.py
"""Shared logging setup for all tdms_dump modules"""

import logging


class LogManager(object):
    """Keeps every module logger of the package on one level.

    Examples:
        >>> import logging
        >>> from tdms_dump.log import log_manager
        >>> log_manager.set_level(logging.DEBUG)
    """

    def __init__(self):
        self.log_level = logging.WARNING
        self.loggers = {}
        self.handler = logging.StreamHandler()
        self.handler.setFormatter(logging.Formatter('[%(name)s %(levelname)s] %(message)s'))

    def get_logger(self, module_name: str) -> logging.Logger:
        logger = logging.getLogger(module_name)
        logger.setLevel(self.log_level)
        if self.handler not in logger.handlers:
            logger.addHandler(self.handler)
        self.loggers[module_name] = logger
        return logger

    def set_level(self, level: int) -> None:
        self.log_level = level
        for logger in self.loggers.values():
            logger.setLevel(level)


log_manager = LogManager()
