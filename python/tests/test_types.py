# python/tests/test_types.py
"""Tests for the TDMS data type registry"""

import numpy as np
import pytest

from tdms_dump import DataType, TdmsTimestamp, fixed_size_of, name_of
from tdms_dump.metadata import _PROPERTY_READERS
from tdms_dump.types import _NAMES, _SIZES, daqmx_type_name, numpy_dtype_of


@pytest.mark.parametrize("code, name", [
    (0x0, "Void"),
    (0x3, "I32"),
    (0x8, "U64"),
    (0xA, "DoubleFloat"),
    (0x1B, "ExtendedFloatWithUnit"),
    (0x20, "String"),
    (0x44, "TimeStamp"),
    (0x08000C, "ComplexSingleFloat"),
    (0xFFFFFFFF, "DAQmxRawData"),
])
def test_name_of(code, name):
    assert name_of(code) == name


def test_name_of_unknown_code():
    assert name_of(0x1234) == "Unknown"


@pytest.mark.parametrize("data_type, size", [
    (DataType.VOID, 0),
    (DataType.I8, 1),
    (DataType.I16, 2),
    (DataType.U32, 4),
    (DataType.I64, 8),
    (DataType.SINGLE_FLOAT, 4),
    (DataType.EXTENDED_FLOAT, 10),
    (DataType.BOOLEAN, 1),
    (DataType.TIMESTAMP, 16),
    (DataType.FIXED_POINT, 16),
    (DataType.COMPLEX_SINGLE_FLOAT, 8),
    (DataType.COMPLEX_DOUBLE_FLOAT, 16),
])
def test_fixed_size_of(data_type, size):
    assert fixed_size_of(data_type) == size


def test_variable_size_types_have_no_fixed_size():
    """Strings and DAQmx data must be sized by other means, not as zero"""
    assert fixed_size_of(DataType.STRING) is None
    assert fixed_size_of(DataType.DAQMX_RAW_DATA) is None
    assert fixed_size_of(0x1234) is None


def test_complex_size_is_twice_component_size():
    assert fixed_size_of(DataType.COMPLEX_SINGLE_FLOAT) == 2 * fixed_size_of(DataType.SINGLE_FLOAT)
    assert fixed_size_of(DataType.COMPLEX_DOUBLE_FLOAT) == 2 * fixed_size_of(DataType.DOUBLE_FLOAT)


def test_numpy_dtypes_match_sizes():
    for data_type in (DataType.I8, DataType.I16, DataType.I32, DataType.I64,
                      DataType.U8, DataType.U16, DataType.U32, DataType.U64,
                      DataType.SINGLE_FLOAT, DataType.DOUBLE_FLOAT):
        assert numpy_dtype_of(data_type).itemsize == fixed_size_of(data_type)
    assert numpy_dtype_of(DataType.COMPLEX_DOUBLE_FLOAT) == np.dtype('float64')
    assert numpy_dtype_of(DataType.STRING) is None


def test_aliases():
    assert DataType.F64 is DataType.DOUBLE_FLOAT
    assert DataType.BOOL is DataType.BOOLEAN


def test_timestamp_as_datetime64():
    timestamp = TdmsTimestamp(0, 1 << 63)
    assert timestamp.as_datetime64() == np.datetime64('1904-01-01T00:00:00.500000')


def test_timestamp_after_epoch():
    # 2000-01-01T00:00:00 is 3029529600 seconds after the TDMS epoch
    timestamp = TdmsTimestamp(3029529600, 0)
    assert timestamp.as_datetime64('s') == np.datetime64('2000-01-01T00:00:00')
    assert str(timestamp) == '2000-01-01T00:00:00.000000'


def test_timestamp_before_epoch():
    timestamp = TdmsTimestamp(-1, 0)
    assert timestamp.as_datetime64() == np.datetime64('1903-12-31T23:59:59.000000')


@pytest.mark.parametrize("seconds", [2**62, 2**63 - 1, -2**63])
def test_timestamp_out_of_datetime64_range(seconds):
    timestamp = TdmsTimestamp(seconds, 0)
    with pytest.raises(OverflowError):
        timestamp.as_datetime64()
    assert str(timestamp) == f"out of range ({seconds} s after 1904-01-01)"


def test_timestamp_range_depends_on_resolution():
    timestamp = TdmsTimestamp(2**40, 0)
    with pytest.raises(OverflowError):
        timestamp.as_datetime64('ns')
    assert timestamp.as_datetime64('s') == \
        np.datetime64('1904-01-01T00:00:00', 's') + np.timedelta64(2**40, 's')


@pytest.mark.parametrize("table", [_NAMES, _SIZES, _PROPERTY_READERS])
def test_tables_cover_every_data_type(table):
    assert set(table) == set(DataType)


def test_daqmx_type_names():
    assert daqmx_type_name(3) == "I16"
    assert daqmx_type_name(2) == "U16"
    assert daqmx_type_name(0xFFFFFFFF) == "TimeStamp"
    assert daqmx_type_name(42) == "Unknown"
