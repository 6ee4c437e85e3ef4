# py/tdms_dump/cli.py
"""Command line entry point: tdms-dump-structure TDMSFILEPATH [XMLFILEPATH]"""

from argparse import ArgumentParser
import logging
import sys
from typing import List, Optional

from .errors import TdmsStructureError
from .log import log_manager
from .structure import STRUCTURE_SUFFIX, dump_structure


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="tdms-dump-structure",
        description="Write the internal structure of an NI TDMS file into a human readable XML file.")
    parser.add_argument(
        '-d', '--debug', action="store_true",
        help="Print debugging information to stderr.")
    parser.add_argument(
        'tdms_file',
        help="TDMS file to read.")
    parser.add_argument(
        'xml_file', nargs='?', default=None,
        help=f"XML file to write, defaults to the TDMS path with '{STRUCTURE_SUFFIX}' appended.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.debug:
        log_manager.set_level(logging.DEBUG)

    try:
        dump_structure(args.tdms_file, args.xml_file)
    except (TdmsStructureError, OSError) as e:
        print(f"EXCEPTION: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
