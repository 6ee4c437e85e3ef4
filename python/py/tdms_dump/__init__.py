# py/tdms_dump/__init__.py
"""
TDMS structure dump - human readable traces of NI TDMS file internals

This package walks the segments of a TDMS (Technical Data Management
Streaming) file, the native format for National Instruments LabVIEW and
other NI software, and reports everything it finds: segment lead ins,
table of contents flags, object lists, raw data indexes (including DAQmx
scalers), typed properties and the chunk layout of the raw data. Channel
values themselves are never decoded.

Examples:
    Writing the structure of a file as XML:

    >>> import tdms_dump
    >>> tdms_dump.dump_structure("input.tdms")
    'input.tdms.structure.xml'

    Inspecting the structure from Python:

    >>> with tdms_dump.TdmsStructureReader("input.tdms") as reader:
    ...     for segment in reader.segments:
    ...         print(segment.index, segment.toc, len(segment.objects))
"""

from .errors import (
    TdmsStructureError,
    TruncatedReadError,
    FormatError,
    UnsupportedVersionError,
    MissingInheritedDescriptorError,
    UnsupportedRawIndexModeError,
    InvalidPropertyTypeError,
    UnknownDataTypeError,
)
from .types import DataType, TdmsTimestamp, name_of, fixed_size_of
from .reader import FileSource, BytesSource, SegmentReader
from .sink import StructureSink, NullSink, XmlStructureSink
from .segment import SegmentInfo, SegmentWalker, TableOfContents, walk_segments
from .structure import TdmsStructureReader, dump_structure, __version__

__all__ = [
    'TdmsStructureReader',
    'dump_structure',
    'walk_segments',
    'SegmentWalker',
    'SegmentInfo',
    'TableOfContents',
    'DataType',
    'TdmsTimestamp',
    'name_of',
    'fixed_size_of',
    'FileSource',
    'BytesSource',
    'SegmentReader',
    'StructureSink',
    'NullSink',
    'XmlStructureSink',
    'TdmsStructureError',
    'TruncatedReadError',
    'FormatError',
    'UnsupportedVersionError',
    'MissingInheritedDescriptorError',
    'UnsupportedRawIndexModeError',
    'InvalidPropertyTypeError',
    'UnknownDataTypeError',
    '__version__',
]
