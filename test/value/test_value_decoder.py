import math

import pytest

from devicecfg.exception import ConfigurationRangeError
from devicecfg.model.enum.value_type_enum import ValueType
from devicecfg.schema.visitor_schema import CustomVisitor, ModbusVisitor, OpcuaVisitor
from devicecfg.util.value_decoder import ValueDecoder


def _modbus(**fields) -> ModbusVisitor:
    return ModbusVisitor.model_validate({"function": 3, "address": "0", **fields})


# ---------- register order ----------
@pytest.mark.parametrize(
    "swap_register, swap_byte, expected_words, expected_value",
    [
        (False, False, [0x1234, 0x5678], 0x12345678),
        (True, False, [0x5678, 0x1234], 0x56781234),
        (False, True, [0x3412, 0x7856], 0x34127856),
        (True, True, [0x7856, 0x3412], 0x78563412),
    ],
)
def test_swap_flags_compose_register_first_then_byte(swap_register, swap_byte, expected_words, expected_value):
    visitor = _modbus(quantity=2, type="int32", swapRegister=swap_register, swapByte=swap_byte)

    assert ValueDecoder.arrange_registers([0x1234, 0x5678], swap_register, swap_byte) == expected_words
    assert ValueDecoder.decode_modbus([0x1234, 0x5678], visitor) == expected_value


def test_byte_swap_on_single_register():
    visitor = _modbus(quantity=1, type="int16", swapByte=True)

    assert ValueDecoder.decode_modbus([0x0100], visitor) == 1


def test_float32_with_register_swap():
    visitor = _modbus(quantity=2, type="float32", swapRegister=True)

    assert math.isclose(ValueDecoder.decode_modbus([0xF5C3, 0x4048], visitor), 3.14, rel_tol=1e-6)


# ---------- reinterpretation ----------
def test_int16_is_signed():
    assert ValueDecoder.decode_modbus([0xFFFF], _modbus(quantity=1, type="int16")) == -1


def test_int64_uses_four_registers():
    visitor = _modbus(type="int64")

    assert ValueDecoder.decode_modbus([0x0000, 0x0000, 0x0001, 0x0000], visitor) == 0x10000
    assert ValueDecoder.decode_modbus([0xFFFF] * 4, visitor) == -1


def test_float64_uses_four_registers():
    assert ValueDecoder.decode_modbus([0x3FF0, 0, 0, 0], _modbus(type="float64")) == 1.0


def test_string_trims_trailing_nuls():
    visitor = _modbus(quantity=3, type="string")

    assert ValueDecoder.decode_modbus([0x4142, 0x4300, 0x0000], visitor) == "ABC"


def test_bool_is_true_when_any_bit_set():
    visitor = _modbus(quantity=2, type="bool")

    assert ValueDecoder.decode_modbus([0, 0], visitor) is False
    assert ValueDecoder.decode_modbus([0, 0x0100], visitor) is True


def test_untyped_visitor_returns_selected_words():
    visitor = _modbus(quantity=2)

    assert ValueDecoder.decode_modbus([7, 8, 9], visitor) == [7, 8]


def test_untyped_visitor_uses_caller_type():
    visitor = _modbus(quantity=2)

    assert ValueDecoder.decode_modbus([0x1234, 0x5678], visitor, value_type="int32") == 0x12345678


def test_visitor_type_wins_over_caller_type():
    visitor = _modbus(quantity=1, type="int16")

    assert ValueDecoder.decode_modbus([0xFFFF], visitor, value_type=ValueType.BOOL) == -1


def test_unknown_caller_type_is_rejected():
    with pytest.raises(ConfigurationRangeError):
        ValueDecoder.decode_modbus([1], _modbus(quantity=1), value_type="uint8")


# ---------- scale ----------
def test_zero_scale_matches_absent_scale():
    absent = _modbus(quantity=1, type="int16")
    zero = _modbus(quantity=1, type="int16", scale=0)

    assert ValueDecoder.decode_modbus([215], absent) == ValueDecoder.decode_modbus([215], zero) == 215


def test_scale_multiplies_and_returns_float():
    value = ValueDecoder.decode_modbus([215], _modbus(quantity=1, type="int16", scale=0.1))

    assert value == pytest.approx(21.5)


def test_unit_scale_still_returns_float():
    value = ValueDecoder.decode_modbus([215], _modbus(quantity=1, type="int16", scale=1))

    assert isinstance(value, float)
    assert value == 215.0


def test_scale_is_ignored_for_strings():
    visitor = _modbus(quantity=1, type="string", scale=2)

    assert ValueDecoder.decode_modbus([0x4F4B], visitor) == "OK"


# ---------- buffer selection ----------
def test_offset_selects_registers_inside_block_read():
    visitor = _modbus(quantity=2, type="int32")

    assert ValueDecoder.decode_modbus([0x0009, 0x1234, 0x5678, 0x0000], visitor, offset=1) == 0x12345678


def test_short_buffer_raises_value_error():
    with pytest.raises(ValueError):
        ValueDecoder.decode_modbus([0x1234], _modbus(quantity=2, type="int32"))


def test_negative_offset_raises_value_error():
    with pytest.raises(ValueError):
        ValueDecoder.select_registers([1, 2], quantity=1, offset=-1)


# ---------- OPC-UA and custom ----------
def test_opcua_value_is_coerced_to_declared_type():
    visitor = OpcuaVisitor.model_validate({"nodeId": "ns=2;s=Count", "type": "int32"})

    assert ValueDecoder.decode("42", visitor) == 42


def test_opcua_untyped_value_is_returned_as_is():
    visitor = OpcuaVisitor.model_validate({"nodeId": "ns=2;s=Any"})
    payload = {"x": 1}

    assert ValueDecoder.decode(payload, visitor) is payload


def test_opcua_float32_is_rounded_to_single_precision():
    visitor = OpcuaVisitor.model_validate({"nodeId": "i=1", "type": "float32"})

    value = ValueDecoder.decode(0.1, visitor)

    assert value != 0.1
    assert math.isclose(value, 0.1, rel_tol=1e-6)


def test_custom_visitor_passes_raw_value_through():
    raw = b"\x00\x01"

    assert ValueDecoder.decode(raw, CustomVisitor("point-17")) is raw


# ---------- coerce ----------
@pytest.mark.parametrize(
    "value, value_type, expected",
    [
        ("true", ValueType.BOOL, True),
        ("OFF", ValueType.BOOL, False),
        (0, ValueType.BOOL, False),
        (b"AB\x00\x00", ValueType.STRING, "AB"),
        (12, ValueType.STRING, "12"),
        (3.0, ValueType.INT32, 3),
        ("7", ValueType.FLOAT64, 7.0),
        (-32768, ValueType.INT16, -32768),
    ],
)
def test_coerce_accepts_compatible_values(value, value_type, expected):
    assert ValueDecoder.coerce(value, value_type) == expected


@pytest.mark.parametrize(
    "value, value_type",
    [
        ("maybe", ValueType.BOOL),
        (2.5, ValueType.INT16),
        (40000, ValueType.INT16),
        (1e40, ValueType.FLOAT32),
    ],
)
def test_coerce_rejects_incompatible_values(value, value_type):
    with pytest.raises(ValueError):
        ValueDecoder.coerce(value, value_type)
