# python/tests/tdms_builder.py
"""Helpers to build synthetic TDMS files byte by byte for tests"""

import struct

from tdms_dump import BytesSource, DataType, XmlStructureSink, walk_segments

TOC_FLAGS = {
    "kTocMetaData": 1 << 1,
    "kTocNewObjList": 1 << 2,
    "kTocRawData": 1 << 3,
    "kTocInterleavedData": 1 << 5,
    "kTocBigEndian": 1 << 6,
    "kTocDAQmxRawData": 1 << 7,
}

TO_END_OF_FILE = 0xFFFFFFFFFFFFFFFF

_VALUE_FORMATS = {
    DataType.I8: "b",
    DataType.I16: "h",
    DataType.I32: "i",
    DataType.I64: "q",
    DataType.U8: "B",
    DataType.U16: "H",
    DataType.U32: "I",
    DataType.U64: "Q",
    DataType.SINGLE_FLOAT: "f",
    DataType.DOUBLE_FLOAT: "d",
    DataType.BOOLEAN: "B",
    DataType.TIMESTAMP: "qQ",
    DataType.COMPLEX_SINGLE_FLOAT: "ff",
    DataType.COMPLEX_DOUBLE_FLOAT: "dd",
}


def order_prefix(big_endian):
    return ">" if big_endian else "<"


def pack(fmt, *values, big_endian=False):
    return struct.pack(order_prefix(big_endian) + fmt, *values)


def string_bytes(value, big_endian=False):
    data = value.encode("utf-8")
    return pack("I", len(data), big_endian=big_endian) + data


def toc_mask(*flags):
    mask = 0
    for flag in flags:
        mask |= TOC_FLAGS[flag]
    return mask


def lead_in(toc, next_segment_offset, raw_data_offset, version=0x1269, tag=b"TDSm"):
    """Lead in bytes; the byte order follows the kTocBigEndian flag in toc"""
    big_endian = "kTocBigEndian" in toc
    return (
        tag +
        struct.pack("<I", toc_mask(*toc)) +
        pack("IQQ", version, next_segment_offset, raw_data_offset, big_endian=big_endian))


def property_bytes(name, data_type, value, big_endian=False):
    """One property; value is raw bytes for ExtendedFloat and FixedPoint"""
    data = string_bytes(name, big_endian) + pack("I", int(data_type), big_endian=big_endian)
    if data_type == DataType.STRING:
        return data + string_bytes(value, big_endian)
    if isinstance(value, bytes):
        return data + value
    if data_type == DataType.TIMESTAMP:
        return data + pack("qQ", *value, big_endian=big_endian)
    if data_type in (DataType.COMPLEX_SINGLE_FLOAT, DataType.COMPLEX_DOUBLE_FLOAT):
        return data + pack(_VALUE_FORMATS[data_type], value.real, value.imag, big_endian=big_endian)
    return data + pack(_VALUE_FORMATS[data_type], value, big_endian=big_endian)


def properties_bytes(properties, big_endian=False):
    properties = properties or []
    return pack("I", len(properties), big_endian=big_endian) + b"".join(
        property_bytes(*prop, big_endian=big_endian) for prop in properties)


def object_bytes(path, raw_index, properties=None, big_endian=False):
    """
    One object list entry.

    raw_index is either an int raw data index header without further
    data (0xFFFFFFFF or 0), or the bytes from raw_index_bytes/daqmx_index_bytes.
    """
    if isinstance(raw_index, int):
        raw_index = pack("I", raw_index, big_endian=big_endian)
    return string_bytes(path, big_endian) + raw_index + properties_bytes(properties, big_endian)


def raw_index_bytes(data_type, number_of_values, dimension=1, total_size=None, big_endian=False):
    if total_size is None:
        return pack("IIIQ", 0x14, int(data_type), dimension, number_of_values, big_endian=big_endian)
    return pack("IIIQQ", 0x1C, int(data_type), dimension, number_of_values, total_size,
                big_endian=big_endian)


def daqmx_scaler_bytes(data_type, buffer_index, byte_offset, scale_id, sample_format_bitmap=0,
                       big_endian=False):
    return pack("IIIII", data_type, buffer_index, byte_offset, sample_format_bitmap, scale_id,
                big_endian=big_endian)


def daqmx_index_bytes(number_of_values, scalers, raw_data_widths, digital_line_scaler=False,
                      data_type=DataType.DAQMX_RAW_DATA, big_endian=False):
    header = 0x1369 if digital_line_scaler else 0x1269
    return (
        pack("IIIQ", header, int(data_type), 1, number_of_values, big_endian=big_endian) +
        pack("I", len(scalers), big_endian=big_endian) +
        b"".join(scalers) +
        pack("I", len(raw_data_widths), big_endian=big_endian) +
        b"".join(pack("I", width, big_endian=big_endian) for width in raw_data_widths))


def metadata_bytes(objects, big_endian=False):
    return pack("I", len(objects), big_endian=big_endian) + b"".join(objects)


class GeneratedFile:
    """
    Collects segments and joins them into a TDMS file.

    Examples:
        >>> test_file = GeneratedFile()
        >>> test_file.add_segment(
        ...     ("kTocMetaData", "kTocRawData", "kTocNewObjList"),
        ...     [object_bytes("/'Group'/'Channel1'", raw_index_bytes(DataType.I32, 2))],
        ...     struct.pack("<ii", 1, 2))
        >>> data = test_file.to_bytes()
    """

    def __init__(self):
        self._segments = []

    def add_segment(self, toc, objects, data=b"", next_segment_offset=None, version=0x1269,
                    tag=b"TDSm"):
        """
        Args:
            toc: Names of the table of contents flags to set
            objects: Object list entries, or None for a segment without metadata
            data: Raw data bytes following the metadata
            next_segment_offset: Value stored in the lead in, computed if None
        """
        big_endian = "kTocBigEndian" in toc
        metadata = b"" if objects is None else metadata_bytes(objects, big_endian)
        if next_segment_offset is None:
            next_segment_offset = len(metadata) + len(data)
        self._segments.append(
            lead_in(toc, next_segment_offset, len(metadata), version, tag) + metadata + data)

    def to_bytes(self):
        return b"".join(self._segments)

    def write(self, path):
        with open(path, "wb") as f:
            f.write(self.to_bytes())


def walk_bytes(data, sink=None):
    """Walk in-memory TDMS bytes, returning the decoded segments"""
    return walk_segments(BytesSource(data, "generated.tdms"), sink)


def walk_to_xml(data):
    """Walk in-memory TDMS bytes, returning the segments and the XML root element"""
    sink = XmlStructureSink()
    segments = walk_bytes(data, sink)
    return segments, sink.root
