# py/tdms_dump/errors.py
"""Exceptions raised while walking a TDMS file.

Every error is fatal to the walk: nothing is retried and no partial
result is returned by the decoder itself.
"""


class TdmsStructureError(ValueError):
    """Base class for all TDMS structure decoding errors"""


class TruncatedReadError(TdmsStructureError, EOFError):
    """Fewer bytes were left in the source than a read required"""

    def __init__(self, requested: int, available: int, offset: int):
        super().__init__(
            f"Failed to read {requested} bytes at offset {offset}, "
            f"only {available} available")
        self.requested = requested
        self.available = available
        self.offset = offset


class FormatError(TdmsStructureError):
    """Bytes do not follow the TDMS layout (bad segment tag, bad UTF-8)"""


class UnsupportedVersionError(TdmsStructureError):
    """Segment declares a format version other than TDMS 2.0"""

    def __init__(self, version: int):
        super().__init__(
            f"Only TDMS 2.0 (0x1269) is supported, segment has version 0x{version:x}")
        self.version = version


class MissingInheritedDescriptorError(TdmsStructureError):
    """Raw data index 0 used for an object that was never defined before"""

    def __init__(self, path: str):
        super().__init__(f"There is no raw info for object {path} in a previous segment")
        self.path = path


class UnsupportedRawIndexModeError(TdmsStructureError):
    """Raw data index header is none of the recognized values"""

    def __init__(self, raw_data_index: int, path: str):
        super().__init__(
            f"Raw data index 0x{raw_data_index:08x} of object {path} is not supported")
        self.raw_data_index = raw_data_index
        self.path = path


class InvalidPropertyTypeError(TdmsStructureError):
    """Data type is valid for raw data but not for a property value"""

    def __init__(self, data_type: int, name: str):
        super().__init__(
            f"Property '{name}' can not have data type 0x{data_type:x}")
        self.data_type = data_type
        self.name = name


class UnknownDataTypeError(TdmsStructureError):
    """Type code is not part of the TDMS data type registry"""

    def __init__(self, data_type: int):
        super().__init__(f"Unknown data type 0x{data_type:x}")
        self.data_type = data_type
