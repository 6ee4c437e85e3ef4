# py/tdms_dump/metadata.py
"""Decoding of segment object lists, raw data indexes and properties"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from .errors import (
    InvalidPropertyTypeError, MissingInheritedDescriptorError,
    UnknownDataTypeError, UnsupportedRawIndexModeError)
from .log import log_manager
from .reader import SegmentReader
from .sink import StructureSink
from .types import (
    DataType, TdmsTimestamp, as_data_type, daqmx_type_name, fixed_size_of,
    name_of, numpy_dtype_of)


log = log_manager.get_logger(__name__)

NO_RAW_DATA = 0xFFFFFFFF
SAME_AS_PREVIOUS = 0x00000000
RAW_DATA = 0x14
RAW_DATA_WITH_SIZE = 0x1C
DAQMX_FORMAT_CHANGING_SCALER = 0x1269
DAQMX_DIGITAL_LINE_SCALER = 0x1369

DAQMX_DESCRIPTIONS = {
    DAQMX_FORMAT_CHANGING_SCALER: "raw data contains DAQmx Format Changing scaler",
    DAQMX_DIGITAL_LINE_SCALER: "raw data contains DAQmx Digital Line scaler",
}


@dataclass(frozen=True)
class DaqmxScaler:
    """One DAQmx scaler record of a channel"""
    data_type: int
    buffer_index: int
    byte_offset_within_stride: int
    sample_format_bitmap: int
    scale_id: int


@dataclass(frozen=True)
class ObjectRawInfo:
    """Describes the raw data of one channel within a chunk"""
    path: str
    data_type: int
    dimension: int = 1
    number_of_values: int = 0
    # Only set for variable size types such as strings
    total_size_in_byte: int = 0
    raw_data_index: int = RAW_DATA
    scalers: Tuple[DaqmxScaler, ...] = ()
    raw_data_widths: Tuple[int, ...] = ()

    @property
    def is_daqmx(self) -> bool:
        return self.raw_data_index in DAQMX_DESCRIPTIONS


ObjectRawInfos = Dict[str, ObjectRawInfo]


@dataclass
class SegmentObject:
    """An object as listed in the metadata of one segment"""
    index: int
    path: str
    raw_data_index: int
    raw_info: Optional[ObjectRawInfo] = None
    properties: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ChannelInfo:
    """Amount of raw data one channel has in a segment"""
    path: str
    data_type: int
    byte_size_in_chunk: int
    number_of_values_in_chunk: int
    number_of_values_in_segment: int


@dataclass(frozen=True)
class ChannelLayout:
    """Chunk bookkeeping of the raw data region of a segment"""
    raw_data_start: int
    raw_data_end: int
    interleaved: bool
    chunk_size: int
    number_of_chunks: int
    channels: List[ChannelInfo]


def read_objects(reader: SegmentReader, sink: StructureSink,
                 current: ObjectRawInfos, all_objects: ObjectRawInfos) -> List[SegmentObject]:
    """
    Read the object list of a segment.

    Raw data descriptors found are stored in both maps, inherited
    descriptors only in the current one.

    Args:
        reader: Reader positioned at the object count of the segment metadata
        sink: Structure sink receiving the decoded objects
        current: Raw infos active for the segment being read
        all_objects: Latest raw info of every object seen in the file so far

    Returns:
        The objects in the order they are listed
    """
    number_of_objects = reader.read_u32()
    sink.record("objects_count", number_of_objects)
    sink.enter("objects")
    objects = []
    for index in range(number_of_objects):
        sink.enter("object")
        sink.record("index", index)
        objects.append(_read_object(reader, sink, index, current, all_objects))
        sink.leave()
    sink.leave()
    return objects


def _read_object(reader, sink, index, current, all_objects):
    path = reader.read_string()
    sink.record("object_path", path)
    raw_data_index = reader.read_u32()
    sink.record("raw_data_index", raw_data_index)
    log.debug("Reading metadata for object %s with index header 0x%08x", path, raw_data_index)

    raw_info = None
    if raw_data_index == NO_RAW_DATA:
        pass
    elif raw_data_index == SAME_AS_PREVIOUS:
        raw_info = all_objects.get(path)
        if raw_info is None:
            raise MissingInheritedDescriptorError(path)
        current[path] = raw_info
    elif raw_data_index in (RAW_DATA, RAW_DATA_WITH_SIZE):
        raw_info = _read_raw_info(reader, sink, path, raw_data_index)
    elif raw_data_index in DAQMX_DESCRIPTIONS:
        raw_info = _read_daqmx_info(reader, sink, path, raw_data_index)
    else:
        raise UnsupportedRawIndexModeError(raw_data_index, path)

    if raw_data_index not in (NO_RAW_DATA, SAME_AS_PREVIOUS):
        current[path] = raw_info
        all_objects[path] = raw_info

    segment_object = SegmentObject(index, path, raw_data_index, raw_info)
    segment_object.properties = read_properties(reader, sink)
    return segment_object


def _read_data_type(reader, sink):
    code = reader.read_u32()
    sink.record("data_type", code)
    sink.record("data_type_string", name_of(code))
    if as_data_type(code) is None:
        raise UnknownDataTypeError(code)
    return code


def _read_raw_info(reader, sink, path, raw_data_index):
    sink.enter("raw")
    data_type = _read_data_type(reader, sink)
    dimension = reader.read_u32()
    sink.record("array_dimension", dimension)
    number_of_values = reader.read_u64()
    sink.record("number_of_values", number_of_values)
    total_size_in_byte = 0
    if raw_data_index == RAW_DATA_WITH_SIZE:
        total_size_in_byte = reader.read_u64()
        sink.record("total_size_in_byte", total_size_in_byte)
    sink.leave()
    return ObjectRawInfo(path, data_type, dimension, number_of_values,
                         total_size_in_byte, raw_data_index)


def _read_daqmx_info(reader, sink, path, raw_data_index):
    sink.enter("daqmx")
    sink.record("type", DAQMX_DESCRIPTIONS[raw_data_index])
    data_type = _read_data_type(reader, sink)
    dimension = reader.read_u32()
    sink.record("array_dimension", dimension)
    chunk_size = reader.read_u64()
    sink.record("chunk_size", chunk_size)

    number_of_scalers = reader.read_u32()
    sink.record("format_changing_scalers_size", number_of_scalers)
    sink.enter("format_changing_scalers")
    scalers = []
    for _ in range(number_of_scalers):
        sink.enter("format_changing_scaler")
        scaler_type = reader.read_u32()
        sink.record("data_type", scaler_type)
        sink.record("data_type_string", daqmx_type_name(scaler_type))
        buffer_index = reader.read_u32()
        sink.record("buffer_index", buffer_index)
        byte_offset = reader.read_u32()
        sink.record("byte_offset_within_the_stride", byte_offset)
        sample_format_bitmap = reader.read_u32()
        sink.record("sample_format_bitmap", sample_format_bitmap)
        scale_id = reader.read_u32()
        sink.record("scale_id", scale_id)
        sink.leave()
        scaler = DaqmxScaler(scaler_type, buffer_index, byte_offset, sample_format_bitmap, scale_id)
        log.debug("DAQmx scaler: scale_id=%d data_type=%s buffer_index=%d byte_offset=%d",
                  scale_id, daqmx_type_name(scaler_type), buffer_index, byte_offset)
        scalers.append(scaler)
    sink.leave()

    number_of_widths = reader.read_u32()
    sink.record("data_with_size_vector_size", number_of_widths)
    sink.enter("data_with_size_vector")
    widths = []
    for _ in range(number_of_widths):
        width = reader.read_u32()
        sink.record("size", width)
        widths.append(width)
    sink.leave()
    sink.leave()
    return ObjectRawInfo(path, data_type, dimension, chunk_size, 0, raw_data_index,
                         tuple(scalers), tuple(widths))


def read_properties(reader: SegmentReader, sink: StructureSink) -> Dict[str, Any]:
    """Read the property count and that many typed properties"""
    number_of_properties = reader.read_u32()
    sink.record("properties_count", number_of_properties)
    sink.enter("properties")
    properties = {}
    for _ in range(number_of_properties):
        name, value = read_property(reader, sink)
        properties[name] = value
    sink.leave()
    return properties


def read_property(reader: SegmentReader, sink: StructureSink) -> Tuple[str, Any]:
    """
    Read one property: name, type code and a value of that type.

    Returns:
        Tuple of property name and decoded value

    Raises:
        InvalidPropertyTypeError: If the type is only valid for raw data
        UnknownDataTypeError: If the type code is not a TDMS data type
    """
    sink.enter("property")
    name = reader.read_string()
    sink.record("name", name)
    code = reader.read_u32()
    sink.record("data_type", code)
    sink.record("data_type_string", name_of(code))
    data_type = as_data_type(code)
    if data_type is None:
        raise UnknownDataTypeError(code)
    value = _PROPERTY_READERS[data_type](reader, sink, data_type, name)
    sink.leave()
    return name, value


def _invalid_property(reader, sink, data_type, name):
    raise InvalidPropertyTypeError(data_type, name)


def _read_scalar_property(reader, sink, data_type, name):
    value = reader.read_value(numpy_dtype_of(data_type))
    sink.record("value", value)
    return value


def _read_blob_property(reader, sink, data_type, name):
    value = reader.read_blob(fixed_size_of(data_type))
    sink.record("value", value)
    return value


def _read_string_property(reader, sink, data_type, name):
    value = reader.read_string()
    sink.record("value", value)
    return value


def _read_boolean_property(reader, sink, data_type, name):
    stored = reader.read_value(numpy_dtype_of(data_type))
    value = bool(stored != 0)
    sink.record("value", value)
    sink.record("raw_value", stored)
    return value


def _read_timestamp_property(reader, sink, data_type, name):
    timestamp = TdmsTimestamp(reader.read_i64(), reader.read_u64())
    sink.enter("value")
    sink.record("seconds", timestamp.seconds)
    sink.record("fraction", timestamp.fraction)
    sink.record("datetime", timestamp)
    sink.leave()
    return timestamp


def _read_complex_property(reader, sink, data_type, name):
    dtype = numpy_dtype_of(data_type)
    real = reader.read_value(dtype)
    imaginary = reader.read_value(dtype)
    sink.enter("value")
    sink.record("real", real)
    sink.record("imaginary", imaginary)
    sink.leave()
    return complex(real, imaginary)


_PropertyReader = Callable[[SegmentReader, StructureSink, DataType, str], Any]

_PROPERTY_READERS: Dict[DataType, _PropertyReader] = {
    DataType.VOID: _invalid_property,
    DataType.I8: _read_scalar_property,
    DataType.I16: _read_scalar_property,
    DataType.I32: _read_scalar_property,
    DataType.I64: _read_scalar_property,
    DataType.U8: _read_scalar_property,
    DataType.U16: _read_scalar_property,
    DataType.U32: _read_scalar_property,
    DataType.U64: _read_scalar_property,
    DataType.SINGLE_FLOAT: _read_scalar_property,
    DataType.DOUBLE_FLOAT: _read_scalar_property,
    DataType.EXTENDED_FLOAT: _read_blob_property,
    DataType.SINGLE_FLOAT_WITH_UNIT: _invalid_property,
    DataType.DOUBLE_FLOAT_WITH_UNIT: _invalid_property,
    DataType.EXTENDED_FLOAT_WITH_UNIT: _invalid_property,
    DataType.STRING: _read_string_property,
    DataType.BOOLEAN: _read_boolean_property,
    DataType.TIMESTAMP: _read_timestamp_property,
    DataType.FIXED_POINT: _read_blob_property,
    DataType.COMPLEX_SINGLE_FLOAT: _read_complex_property,
    DataType.COMPLEX_DOUBLE_FLOAT: _read_complex_property,
    DataType.DAQMX_RAW_DATA: _invalid_property,
}

if set(_PROPERTY_READERS) != set(DataType):
    raise RuntimeError(
        f"Data types without a property reader: "
        f"{sorted(set(DataType) - set(_PROPERTY_READERS))}")


def channel_byte_size(raw_info: ObjectRawInfo) -> int:
    """
    Bytes one channel occupies in a single chunk.

    The total size in bytes wins when it is set, otherwise the size is
    type size x array dimension x number of values. Types without a
    fixed size count as zero, as do DAQmx channels, whose data lives in
    the shared buffers counted by daqmx_chunk_size().
    """
    if raw_info.is_daqmx:
        return 0
    if raw_info.total_size_in_byte:
        return raw_info.total_size_in_byte
    type_size = fixed_size_of(raw_info.data_type) or 0
    return type_size * raw_info.dimension * raw_info.number_of_values


def daqmx_chunk_size(raw_infos: List[ObjectRawInfo]) -> int:
    """
    Bytes the DAQmx raw buffers occupy in a single chunk.

    DAQmx channels share their raw buffers, so each buffer is counted
    once with the widest width any channel declares for it.
    """
    widths: Dict[int, int] = {}
    number_of_values = 0
    for raw_info in raw_infos:
        if not raw_info.is_daqmx:
            continue
        number_of_values = max(number_of_values, raw_info.number_of_values)
        for buffer_index, width in enumerate(raw_info.raw_data_widths):
            widths[buffer_index] = max(widths.get(buffer_index, 0), width)
    return number_of_values * sum(widths.values())


def compute_channel_layout(current: ObjectRawInfos, segment_start: int,
                           next_segment_offset: int, raw_data_offset: int,
                           interleaved: bool = False) -> ChannelLayout:
    """
    Work out chunk size, chunk count and values per channel of a segment.

    Args:
        current: Raw infos active for the segment
        segment_start: Absolute offset of the first byte after the lead in
        next_segment_offset: Resolved offset of the next segment, relative to segment_start
        raw_data_offset: Offset of the raw data, relative to segment_start
        interleaved: Whether the segment stores its raw data interleaved

    Returns:
        ChannelLayout with one ChannelInfo per active channel
    """
    raw_infos = list(current.values())
    chunk_size = sum(channel_byte_size(raw_info) for raw_info in raw_infos)
    chunk_size += daqmx_chunk_size(raw_infos)

    total_chunk_bytes = next_segment_offset - raw_data_offset
    if total_chunk_bytes < 0:
        log.warning("Raw data offset %d lies beyond the next segment offset %d",
                    raw_data_offset, next_segment_offset)
        total_chunk_bytes = 0

    number_of_chunks = total_chunk_bytes // chunk_size if chunk_size else 1
    if chunk_size and total_chunk_bytes % chunk_size:
        log.debug("Raw data of %d bytes is not a multiple of the chunk size %d",
                  total_chunk_bytes, chunk_size)

    channels = [
        ChannelInfo(
            raw_info.path,
            raw_info.data_type,
            channel_byte_size(raw_info),
            raw_info.number_of_values,
            raw_info.number_of_values * number_of_chunks)
        for raw_info in raw_infos]
    return ChannelLayout(
        segment_start + raw_data_offset,
        segment_start + next_segment_offset,
        interleaved,
        chunk_size,
        number_of_chunks,
        channels)
