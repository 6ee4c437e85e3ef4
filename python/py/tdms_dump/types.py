# py/tdms_dump/types.py
"""TDMS data type registry: type codes, names, value sizes and numpy dtypes"""

from enum import IntEnum
from typing import Dict, NamedTuple, Optional

import numpy as np


class DataType(IntEnum):
    """TDMS data type codes as stored in raw data indexes and properties"""
    VOID = 0x0
    I8 = 0x1
    I16 = 0x2
    I32 = 0x3
    I64 = 0x4
    U8 = 0x5
    U16 = 0x6
    U32 = 0x7
    U64 = 0x8
    SINGLE_FLOAT = 0x9
    DOUBLE_FLOAT = 0xA
    EXTENDED_FLOAT = 0xB
    SINGLE_FLOAT_WITH_UNIT = 0x19
    DOUBLE_FLOAT_WITH_UNIT = 0x1A
    EXTENDED_FLOAT_WITH_UNIT = 0x1B
    STRING = 0x20
    BOOLEAN = 0x21
    TIMESTAMP = 0x44
    FIXED_POINT = 0x4F
    COMPLEX_SINGLE_FLOAT = 0x08000C
    COMPLEX_DOUBLE_FLOAT = 0x10000D
    DAQMX_RAW_DATA = 0xFFFFFFFF

    # Friendly aliases
    F32 = SINGLE_FLOAT
    F64 = DOUBLE_FLOAT
    BOOL = BOOLEAN


_NAMES = {
    DataType.VOID: "Void",
    DataType.I8: "I8",
    DataType.I16: "I16",
    DataType.I32: "I32",
    DataType.I64: "I64",
    DataType.U8: "U8",
    DataType.U16: "U16",
    DataType.U32: "U32",
    DataType.U64: "U64",
    DataType.SINGLE_FLOAT: "SingleFloat",
    DataType.DOUBLE_FLOAT: "DoubleFloat",
    DataType.EXTENDED_FLOAT: "ExtendedFloat",
    DataType.SINGLE_FLOAT_WITH_UNIT: "SingleFloatWithUnit",
    DataType.DOUBLE_FLOAT_WITH_UNIT: "DoubleFloatWithUnit",
    DataType.EXTENDED_FLOAT_WITH_UNIT: "ExtendedFloatWithUnit",
    DataType.STRING: "String",
    DataType.BOOLEAN: "Boolean",
    DataType.TIMESTAMP: "TimeStamp",
    DataType.FIXED_POINT: "FixedPoint",
    DataType.COMPLEX_SINGLE_FLOAT: "ComplexSingleFloat",
    DataType.COMPLEX_DOUBLE_FLOAT: "ComplexDoubleFloat",
    DataType.DAQMX_RAW_DATA: "DAQmxRawData",
}

# None means the size is not fixed by the type (strings, DAQmx raw data)
_SIZES = {
    DataType.VOID: 0,
    DataType.I8: 1,
    DataType.I16: 2,
    DataType.I32: 4,
    DataType.I64: 8,
    DataType.U8: 1,
    DataType.U16: 2,
    DataType.U32: 4,
    DataType.U64: 8,
    DataType.SINGLE_FLOAT: 4,
    DataType.DOUBLE_FLOAT: 8,
    DataType.EXTENDED_FLOAT: 10,
    DataType.SINGLE_FLOAT_WITH_UNIT: 4,
    DataType.DOUBLE_FLOAT_WITH_UNIT: 8,
    DataType.EXTENDED_FLOAT_WITH_UNIT: 10,
    DataType.STRING: None,
    DataType.BOOLEAN: 1,
    DataType.TIMESTAMP: 16,
    DataType.FIXED_POINT: 16,
    DataType.COMPLEX_SINGLE_FLOAT: 8,
    DataType.COMPLEX_DOUBLE_FLOAT: 16,
    DataType.DAQMX_RAW_DATA: None,
}

# Scalar dtype read for one value; complex types read two components of this dtype
_NUMPY_DTYPES = {
    DataType.I8: np.dtype('int8'),
    DataType.I16: np.dtype('int16'),
    DataType.I32: np.dtype('int32'),
    DataType.I64: np.dtype('int64'),
    DataType.U8: np.dtype('uint8'),
    DataType.U16: np.dtype('uint16'),
    DataType.U32: np.dtype('uint32'),
    DataType.U64: np.dtype('uint64'),
    DataType.SINGLE_FLOAT: np.dtype('float32'),
    DataType.DOUBLE_FLOAT: np.dtype('float64'),
    DataType.SINGLE_FLOAT_WITH_UNIT: np.dtype('float32'),
    DataType.DOUBLE_FLOAT_WITH_UNIT: np.dtype('float64'),
    DataType.BOOLEAN: np.dtype('uint8'),
    DataType.COMPLEX_SINGLE_FLOAT: np.dtype('float32'),
    DataType.COMPLEX_DOUBLE_FLOAT: np.dtype('float64'),
}

for _table, _what in ((_NAMES, "name"), (_SIZES, "size entry")):
    if set(_table) != set(DataType):
        raise RuntimeError(
            f"Data types without a {_what}: {sorted(set(DataType) - set(_table))}")


def as_data_type(code: int) -> Optional[DataType]:
    """Map a raw type code to a DataType, or None if it is not a TDMS type"""
    try:
        return DataType(code)
    except ValueError:
        return None


def name_of(code: int) -> str:
    """
    Human readable name of a data type code.

    Args:
        code: Raw type code as read from the file

    Returns:
        Name such as "I32" or "DoubleFloat", "Unknown" for codes outside the registry
    """
    data_type = as_data_type(code)
    if data_type is None:
        return "Unknown"
    return _NAMES[data_type]


def fixed_size_of(code: int) -> Optional[int]:
    """
    Size in bytes of a single value of a data type.

    Args:
        code: Raw type code as read from the file

    Returns:
        Byte count, or None for strings, DAQmx raw data and unknown codes
    """
    data_type = as_data_type(code)
    if data_type is None:
        return None
    return _SIZES[data_type]


def numpy_dtype_of(code: int) -> Optional[np.dtype]:
    """Native order numpy dtype of one value (one component for complex types)"""
    data_type = as_data_type(code)
    if data_type is None:
        return None
    return _NUMPY_DTYPES.get(data_type)


_DATETIME64_MIN = -2**63
_DATETIME64_MAX = 2**63 - 1


class TdmsTimestamp(NamedTuple):
    """TDMS timestamp: seconds since 1904-01-01 UTC plus 2^-64 fractions of a second"""
    seconds: int
    fraction: int

    def as_datetime64(self, resolution: str = 'us') -> np.datetime64:
        """
        Convert to a numpy datetime64.

        Args:
            resolution: numpy time unit of the result, precision beyond it is truncated

        Returns:
            numpy datetime64 in the requested resolution

        Raises:
            OverflowError: If the time can not be represented in that resolution
        """
        epoch_units = int(np.datetime64('1904-01-01T00:00:00', resolution).astype(np.int64))
        units_per_second = int(np.timedelta64(1, 's') / np.timedelta64(1, resolution))
        units = (epoch_units
                 + self.seconds * units_per_second
                 + ((self.fraction * units_per_second) >> 64))
        # The smallest int64 is NaT
        if not _DATETIME64_MIN < units <= _DATETIME64_MAX:
            raise OverflowError(
                f"Timestamp {self.seconds} s after 1904-01-01 is out of range "
                f"for datetime64[{resolution}]")
        return np.datetime64(units, resolution)

    def __str__(self):
        try:
            return str(self.as_datetime64())
        except OverflowError:
            return f"out of range ({self.seconds} s after 1904-01-01)"


# DAQmx scalers use their own type ids, these do not match the TDMS type codes
DAQMX_TYPE_NAMES: Dict[int, str] = {
    0: "U8",
    1: "I8",
    2: "U16",
    3: "I16",
    4: "U32",
    5: "I32",
    6: "U64",
    7: "I64",
    8: "SingleFloat",
    9: "DoubleFloat",
    0xFFFFFFFF: "TimeStamp",
}


def daqmx_type_name(code: int) -> str:
    """Name of a DAQmx scaler data type id, "Unknown" if not recognized"""
    return DAQMX_TYPE_NAMES.get(code, "Unknown")
