from pymodbus.client.mixin import ModbusClientMixin

from devicecfg.exception import WidthMismatchError
from devicecfg.model.device_constant import REGISTER_MASK
from devicecfg.model.enum.value_type_enum import ValueType

_DATATYPE_MAP = {
    ValueType.INT16: ModbusClientMixin.DATATYPE.INT16,
    ValueType.INT32: ModbusClientMixin.DATATYPE.INT32,
    ValueType.INT64: ModbusClientMixin.DATATYPE.INT64,
    ValueType.FLOAT32: ModbusClientMixin.DATATYPE.FLOAT32,
    ValueType.FLOAT64: ModbusClientMixin.DATATYPE.FLOAT64,
}


def swap_registers(words: list[int]) -> list[int]:
    """Reverse register order: [W0, W1, ...] -> [..., W1, W0]."""
    return list(reversed(words))


def swap_bytes(words: list[int]) -> list[int]:
    """Swap the two bytes inside every register: 0x1234 -> 0x3412."""
    return [((w & 0x00FF) << 8) | ((w & 0xFF00) >> 8) for w in words]


def registers_to_bytes(words: list[int]) -> bytes:
    """Serialize registers high byte first."""
    return b"".join((w & REGISTER_MASK).to_bytes(2, "big") for w in words)


def decode_modbus_registers(raw: list[int], value_type: ValueType) -> int | float | str | bool:
    """
    Reinterpret already-ordered 16-bit registers as a scalar.

    Registers are read high word first and high byte first; any word/byte
    order correction must be applied before calling this.

        - int16/int32/int64  → signed two's complement (1/2/4 registers)
        - float32/float64    → IEEE-754 (2/4 registers)
        - string             → bytes with trailing NULs trimmed
        - bool               → True when any bit is set
    """
    words = [int(w) & REGISTER_MASK for w in raw]

    match value_type:
        case ValueType.STRING:
            return registers_to_bytes(words).rstrip(b"\x00").decode("utf-8", errors="replace")

        case ValueType.BOOL:
            return any(words)

        case _:
            expected = value_type.word_count
            if len(words) != expected:
                raise WidthMismatchError(
                    f"{value_type} needs {expected} register(s), got {len(words)}",
                    value_type=value_type.value,
                    quantity=len(words),
                )
            return ModbusClientMixin.convert_from_registers(
                words, data_type=_DATATYPE_MAP[value_type], word_order="big"
            )
