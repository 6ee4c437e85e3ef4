# py/tdms_dump/reader.py
"""Byte sources and the per-segment endian aware reader"""

import io
import os
import sys
from typing import Union

import numpy as np

from .errors import FormatError, TruncatedReadError

_U32 = np.dtype('uint32')
_U64 = np.dtype('uint64')
_I64 = np.dtype('int64')


class FileSource:
    """
    Random access byte source over a file on disk.

    Examples:
        >>> with FileSource("input.tdms") as source:
        ...     source.seek(0)
        ...     lead_in = source.read_exact(4)
    """

    def __init__(self, path: Union[str, os.PathLike]):
        """
        Open the file in binary mode for reading.

        Args:
            path: Path of the file to read
        """
        self.path = os.fspath(path)
        self._file = open(self.path, 'rb')
        self._size = os.fstat(self._file.fileno()).st_size

    @property
    def size(self) -> int:
        """Total length of the file in bytes"""
        return self._size

    def seek(self, offset: int) -> None:
        self._file.seek(offset, io.SEEK_SET)

    def tell(self) -> int:
        return self._file.tell()

    def read_upto(self, count: int) -> bytes:
        """Read at most count bytes, fewer at end of file"""
        return self._file.read(count)

    def read_exact(self, count: int) -> bytes:
        """
        Read exactly count bytes at the current position.

        Raises:
            TruncatedReadError: If the file ends before count bytes were read
        """
        offset = self._file.tell()
        data = self._file.read(count)
        if len(data) != count:
            raise TruncatedReadError(count, len(data), offset)
        return data

    def close(self) -> None:
        self._file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class BytesSource(FileSource):
    """Byte source over data that is already in memory"""

    def __init__(self, data: bytes, path: str = "<memory>"):
        self.path = path
        self._file = io.BytesIO(data)
        self._size = len(data)


class SegmentReader:
    """
    Reads values of one segment, swapping byte order when the segment
    was stored in a different order than the host uses.

    Byte swapping is a plain reversal of the bytes of each value, no
    matter what type the value has.
    """

    def __init__(self, source: FileSource, big_endian: bool):
        """
        Args:
            source: Byte source positioned inside the segment
            big_endian: Whether the segment table of contents flags big endian storage
        """
        self._source = source
        self.big_endian = big_endian
        self.swap = big_endian != (sys.byteorder == 'big')

    def read_bytes(self, count: int) -> bytes:
        return self._source.read_exact(count)

    def read_blob(self, count: int) -> bytes:
        """Read an opaque fixed size value, byte order corrected as a whole"""
        data = self._source.read_exact(count)
        if self.swap:
            data = data[::-1]
        return data

    def read_value(self, dtype: np.dtype) -> np.generic:
        """
        Read one value of a fixed size numpy dtype.

        Args:
            dtype: Native order numpy dtype of the value

        Returns:
            numpy scalar holding the value
        """
        data = self.read_blob(dtype.itemsize)
        return np.frombuffer(data, dtype=dtype)[0]

    def read_u32(self) -> int:
        return int(self.read_value(_U32))

    def read_u64(self) -> int:
        return int(self.read_value(_U64))

    def read_i64(self) -> int:
        return int(self.read_value(_I64))

    def read_string(self) -> str:
        """Read a uint32 byte count followed by that many bytes of UTF-8 text"""
        offset = self._source.tell()
        length = self.read_u32()
        data = self._source.read_exact(length)
        try:
            return data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise FormatError(f"String at offset {offset} is not valid UTF-8: {e}") from e
