# py/tdms_dump/structure.py
"""High-level Python API for inspecting the segment structure of TDMS files"""

import os
from typing import Any, Dict, List, Optional, Union

from .log import log_manager
from .reader import FileSource
from .segment import SegmentInfo, SegmentWalker
from .sink import StructureSink, XmlStructureSink

__version__ = "0.1.0"

STRUCTURE_SUFFIX = ".structure.xml"

log = log_manager.get_logger(__name__)

PathType = Union[str, os.PathLike]


class TdmsStructureReader:
    """
    Decodes the segment and metadata structure of a TDMS file.

    The whole file is walked once when the reader is created; raw
    channel values are never read, only where they are and how many.

    Examples:
        >>> with TdmsStructureReader("input.tdms") as reader:
        ...     print(f"Found {reader.segment_count} segments")
        ...     for path in reader.list_channels():
        ...         print(path, reader.number_of_values(path))
    """

    def __init__(self, path: PathType, sink: Optional[StructureSink] = None):
        """
        Open and walk a TDMS file.

        Args:
            path: Path to the TDMS file to read
            sink: Optional structure sink receiving the decoded hierarchy
        """
        self._source = FileSource(path)
        try:
            self._segments = SegmentWalker(self._source, sink).walk()
        except Exception:
            self._source.close()
            raise

    @property
    def segments(self) -> List[SegmentInfo]:
        """Decoded segments in file order"""
        return self._segments

    @property
    def segment_count(self) -> int:
        """Get the number of segments in the file"""
        return len(self._segments)

    @property
    def channel_count(self) -> int:
        """Get the number of channels with raw data in the file"""
        return len(self.list_channels())

    def list_channels(self) -> List[str]:
        """
        List all objects that have raw data in at least one segment.

        Returns:
            Object paths in format "/'Group'/'Channel'", in order of first appearance
        """
        paths: Dict[str, None] = {}
        for segment in self._segments:
            if segment.channel_layout is None:
                continue
            for channel in segment.channel_layout.channels:
                paths.setdefault(channel.path)
        return list(paths)

    def list_objects(self) -> List[str]:
        """List the paths of all objects named in any segment metadata"""
        paths: Dict[str, None] = {}
        for segment in self._segments:
            for obj in segment.objects:
                paths.setdefault(obj.path)
        return list(paths)

    def get_object_properties(self, path: str) -> Optional[Dict[str, Any]]:
        """
        Get the properties of an object, later segments overriding earlier ones.

        Args:
            path: Object path, "/" for the file itself

        Returns:
            Dictionary mapping property names to values, or None if the object doesn't exist
        """
        properties = None
        for segment in self._segments:
            for obj in segment.objects:
                if obj.path == path:
                    properties = properties if properties is not None else {}
                    properties.update(obj.properties)
        return properties

    def number_of_values(self, path: str) -> int:
        """Total number of values a channel has across all segments"""
        total = 0
        for segment in self._segments:
            if segment.channel_layout is None:
                continue
            for channel in segment.channel_layout.channels:
                if channel.path == path:
                    total += channel.number_of_values_in_segment
        return total

    def close(self) -> None:
        """Close the reader"""
        self._source.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def default_structure_path(tdms_path: PathType) -> str:
    """Output path used when none is given: the TDMS path with a suffix appended"""
    return os.fspath(tdms_path) + STRUCTURE_SUFFIX


def dump_structure(tdms_path: PathType, xml_path: Optional[PathType] = None) -> str:
    """
    Write the structure of a TDMS file into a human readable XML file.

    The XML document is written even when decoding fails part way
    through, so the trace shows how far the walk got. The error is
    raised afterwards and the document must then be treated as incomplete.

    Args:
        tdms_path: Path of the TDMS file
        xml_path: Path of the XML file to write, defaults to "<tdms_path>.structure.xml"

    Returns:
        Path of the written XML file

    Examples:
        >>> dump_structure("input.tdms")
        'input.tdms.structure.xml'
    """
    xml_path = os.fspath(xml_path) if xml_path is not None else default_structure_path(tdms_path)
    sink = XmlStructureSink()
    try:
        with FileSource(tdms_path) as source:
            SegmentWalker(source, sink).walk()
    finally:
        if sink.root is not None:
            sink.write(xml_path)
    log.debug("Wrote structure of %s to %s", os.fspath(tdms_path), xml_path)
    return xml_path
