# py/tdms_dump/segment.py
"""Walks the segments of a TDMS file from the first byte to the end"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional

import numpy as np

from .errors import FormatError, UnsupportedVersionError
from .log import log_manager
from .metadata import (
    ChannelLayout, ObjectRawInfos, SegmentObject, compute_channel_layout, read_objects)
from .reader import FileSource, SegmentReader
from .sink import NullSink, StructureSink
from .types import fixed_size_of, name_of


log = log_manager.get_logger(__name__)

SEGMENT_TAG = b'TDSm'
TDMS_VERSION_2_0 = 0x1269
LEAD_IN_SIZE = 28
TO_END_OF_FILE = 0xFFFFFFFFFFFFFFFF

_TOC_DTYPE = np.dtype('<u4')


@dataclass(frozen=True)
class TableOfContents:
    """Flags of the table of contents bitfield of a lead in"""
    meta_data: bool
    new_obj_list: bool
    raw_data: bool
    interleaved_data: bool
    big_endian: bool
    daqmx_raw_data: bool

    META_DATA = 1 << 1
    NEW_OBJ_LIST = 1 << 2
    RAW_DATA = 1 << 3
    INTERLEAVED_DATA = 1 << 5
    BIG_ENDIAN = 1 << 6
    DAQMX_RAW_DATA = 1 << 7

    @classmethod
    def from_mask(cls, mask: int) -> 'TableOfContents':
        return cls(
            meta_data=bool(mask & cls.META_DATA),
            new_obj_list=bool(mask & cls.NEW_OBJ_LIST),
            raw_data=bool(mask & cls.RAW_DATA),
            interleaved_data=bool(mask & cls.INTERLEAVED_DATA),
            big_endian=bool(mask & cls.BIG_ENDIAN),
            daqmx_raw_data=bool(mask & cls.DAQMX_RAW_DATA))


@dataclass
class SegmentInfo:
    """Everything decoded from one segment"""
    index: int
    offset: int
    toc: TableOfContents
    version: int
    next_segment_offset: int
    raw_data_offset: int
    next_segment_absolute: int
    raw_data_absolute: int
    objects: List[SegmentObject] = field(default_factory=list)
    channel_layout: Optional[ChannelLayout] = None

    @property
    def segment_start(self) -> int:
        return self.offset + LEAD_IN_SIZE


class SegmentWalker:
    """
    Decodes a TDMS file segment by segment.

    The walker owns the two raw info maps of a pass: one with the
    channels active in the segment being read, and one with the latest
    definition of every object seen so far, used to resolve raw data
    indexes that refer to a previous segment.

    Examples:
        >>> with FileSource("input.tdms") as source:
        ...     segments = SegmentWalker(source).walk()
    """

    def __init__(self, source: FileSource, sink: Optional[StructureSink] = None):
        """
        Args:
            source: Byte source of the whole file
            sink: Receiver of the decoded structure, nothing is recorded if None
        """
        self._source = source
        self._sink = sink if sink is not None else NullSink()
        self.current_objects: ObjectRawInfos = {}
        self.all_objects: ObjectRawInfos = {}

    def walk(self) -> List[SegmentInfo]:
        """
        Walk the whole file, recording its structure into the sink.

        Returns:
            Decoded segments in file order

        Raises:
            TdmsStructureError: On the first decoding error, the walk stops there
        """
        sink = self._sink
        sink.enter("file")
        sink.record("filepath", self._source.path)
        sink.record("size_in_byte", self._source.size)
        sink.enter("segments")
        segments = list(self._iter_segments())
        sink.leave()
        sink.record("segments_count", len(segments))
        sink.leave()
        return segments

    def _iter_segments(self) -> Iterator[SegmentInfo]:
        file_size = self._source.size
        offset = 0
        index = 0
        while offset != file_size:
            segment = self._read_segment(index, offset)
            if segment is None:
                return
            yield segment
            offset = segment.next_segment_absolute
            index += 1
            if offset > file_size:
                log.warning(
                    "Segment %d claims the next segment at %d, beyond the end of the file (%d bytes)",
                    segment.index, offset, file_size)
                return

    def _read_segment(self, index: int, offset: int) -> Optional[SegmentInfo]:
        source = self._source
        sink = self._sink
        source.seek(offset)
        tag = source.read_upto(1)
        if not tag:
            return None
        tag += source.read_exact(len(SEGMENT_TAG) - 1)
        if tag != SEGMENT_TAG:
            raise FormatError(f"Segment at offset {offset} starts with {tag!r} instead of {SEGMENT_TAG!r}")
        toc_mask = int(np.frombuffer(source.read_exact(4), dtype=_TOC_DTYPE)[0])
        toc = TableOfContents.from_mask(toc_mask)
        log.debug("Reading segment %d at offset %d, toc mask 0x%08x", index, offset, toc_mask)

        sink.enter("segment")
        sink.record("index", index)

        reader = SegmentReader(source, toc.big_endian)
        version = reader.read_u32()
        if version != TDMS_VERSION_2_0:
            raise UnsupportedVersionError(version)
        sink.record("version", version)

        sink.enter("table_of_content")
        sink.record("meta_data", toc.meta_data)
        sink.record("new_obj_list", toc.new_obj_list)
        sink.record("raw_data", toc.raw_data)
        sink.record("interleaved_data", toc.interleaved_data)
        sink.record("big_endian", toc.big_endian)
        sink.record("daqmx_raw_data", toc.daqmx_raw_data)
        sink.leave()

        next_segment_offset = reader.read_u64()
        sink.record("next_segment_offset", next_segment_offset)
        raw_data_offset = reader.read_u64()
        sink.record("raw_data_offset", raw_data_offset)

        segment_start = offset + LEAD_IN_SIZE
        if next_segment_offset == TO_END_OF_FILE:
            next_segment_offset = source.size - segment_start
        next_segment_absolute = segment_start + next_segment_offset
        raw_data_absolute = segment_start + raw_data_offset
        sink.record("absolut_segment_offset", offset)
        sink.record("absolut_raw_data_offset", raw_data_absolute)
        sink.record("absolut_next_segment_byte_offset", next_segment_absolute)

        segment = SegmentInfo(
            index, offset, toc, version, next_segment_offset, raw_data_offset,
            next_segment_absolute, raw_data_absolute)

        if toc.new_obj_list:
            self.current_objects.clear()

        # A raw data offset of zero means the segment has no metadata at all
        if raw_data_offset > 0:
            segment.objects = read_objects(reader, sink, self.current_objects, self.all_objects)

        if self.current_objects:
            segment.channel_layout = compute_channel_layout(
                self.current_objects, segment_start, next_segment_offset,
                raw_data_offset, toc.interleaved_data)
            self._record_channel_layout(segment.channel_layout)

        sink.leave()
        return segment

    def _record_channel_layout(self, layout: ChannelLayout) -> None:
        sink = self._sink
        sink.enter("channel_data")
        sink.record("absolut_raw_data_byte_start", layout.raw_data_start)
        sink.record("absolut_raw_data_byte_end", layout.raw_data_end)
        sink.record("interleaved", layout.interleaved)
        sink.record("number_of_chunks", layout.number_of_chunks)
        sink.record("channels_count", len(layout.channels))
        sink.enter("channels")
        for channel in layout.channels:
            sink.enter("channel")
            sink.record("path", channel.path)
            sink.record("data_type", channel.data_type)
            sink.record("data_type_string", name_of(channel.data_type))
            sink.record("data_type_single_value_size", fixed_size_of(channel.data_type) or 0)
            sink.record("number_of_values_in_chunk", channel.number_of_values_in_chunk)
            sink.record("number_of_values_in_segment", channel.number_of_values_in_segment)
            sink.leave()
        sink.leave()
        sink.leave()


def walk_segments(source: FileSource, sink: Optional[StructureSink] = None) -> List[SegmentInfo]:
    """Walk all segments of a byte source with a fresh SegmentWalker"""
    return SegmentWalker(source, sink).walk()
