import struct
from typing import Any

from devicecfg.exception import ConfigurationRangeError
from devicecfg.model.enum.value_type_enum import ValueType
from devicecfg.schema.visitor_schema import CustomVisitor, ModbusVisitor, OpcuaVisitor, PropertyVisitor
from devicecfg.util.data_decoder import decode_modbus_registers, swap_bytes, swap_registers

_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off", ""})


def _resolve_type(value_type: ValueType | str | None, fallback: ValueType | None) -> ValueType | None:
    if value_type is None or value_type == "":
        return fallback
    resolved = ValueType.from_string(value_type)
    if resolved is None:
        raise ConfigurationRangeError(f"unsupported value type: {value_type!r}", field="type", value=value_type)
    return resolved


class ValueDecoder:
    """Turn raw wire values into typed application values according to a visitor."""

    @staticmethod
    def select_registers(words: list[int], quantity: int, offset: int = 0) -> list[int]:
        """Take `quantity` registers starting at `offset` of a read buffer."""
        if offset < 0:
            raise ValueError(f"offset must be >= 0, got {offset}")
        end = offset + quantity
        if len(words) < end:
            raise ValueError(f"register buffer too short: need {end} word(s), got {len(words)}")
        return list(words[offset:end])

    @staticmethod
    def arrange_registers(words: list[int], swap_register: bool = False, swap_byte: bool = False) -> list[int]:
        """Apply register-order reversal first, then the per-register byte swap."""
        arranged = list(words)
        if swap_register:
            arranged = swap_registers(arranged)
        if swap_byte:
            arranged = swap_bytes(arranged)
        return arranged

    @staticmethod
    def apply_scale(value: float | int, scale: float | None) -> float | int:
        """Multiply by `scale`; a zero or missing scale leaves the value untouched."""
        if not scale:
            return value
        return float(value) * scale

    @staticmethod
    def register_count(visitor: ModbusVisitor, value_type: ValueType | None) -> int:
        if visitor.quantity is not None:
            return visitor.quantity
        if value_type is not None and value_type.word_count is not None:
            return value_type.word_count
        return 1

    @classmethod
    def decode_modbus(
        cls,
        words: list[int],
        visitor: ModbusVisitor,
        value_type: ValueType | str | None = None,
        offset: int = 0,
    ) -> int | float | str | bool | list[int]:
        """
        Decode registers read for a Modbus visitor.

        The visitor's own type wins; `value_type` fills in when the visitor
        leaves it unspecified. With no type at all the selected registers are
        returned unchanged.
        """
        resolved = visitor.type or _resolve_type(value_type, None)
        selected = cls.select_registers(words, cls.register_count(visitor, resolved), offset)
        arranged = cls.arrange_registers(selected, visitor.swap_register, visitor.swap_byte)

        if resolved is None:
            return arranged

        value = decode_modbus_registers(arranged, resolved)
        if resolved.is_numeric:
            return cls.apply_scale(value, visitor.scale)
        return value

    @staticmethod
    def coerce(value: Any, value_type: ValueType | None) -> Any:
        """Coerce a natively typed value to the declared scalar type."""
        if value_type is None:
            return value

        match value_type:
            case ValueType.STRING:
                if isinstance(value, (bytes, bytearray)):
                    return bytes(value).rstrip(b"\x00").decode("utf-8", errors="replace")
                return str(value)

            case ValueType.BOOL:
                if isinstance(value, str):
                    text = value.strip().lower()
                    if text in _TRUE_STRINGS:
                        return True
                    if text in _FALSE_STRINGS:
                        return False
                    raise ValueError(f"cannot coerce {value!r} to bool")
                return bool(value)

            case ValueType.FLOAT32:
                try:
                    return struct.unpack(">f", struct.pack(">f", float(value)))[0]
                except OverflowError as e:
                    raise ValueError(f"{value!r} out of float32 range") from e

            case ValueType.FLOAT64:
                return float(value)

            case _:
                if isinstance(value, float) and not value.is_integer():
                    raise ValueError(f"cannot coerce non-integral {value!r} to {value_type}")
                number = int(value)
                bits = value_type.word_count * 16
                low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
                if not low <= number <= high:
                    raise ValueError(f"{number} out of {value_type} range [{low}, {high}]")
                return number

    @classmethod
    def coerce_opcua(cls, value: Any, visitor: OpcuaVisitor, value_type: ValueType | str | None = None) -> Any:
        """OPC-UA values arrive typed; only coerce to the declared type, no scale or swap."""
        return cls.coerce(value, visitor.type or _resolve_type(value_type, None))

    @classmethod
    def decode(cls, raw: Any, visitor: PropertyVisitor, value_type: ValueType | str | None = None, offset: int = 0):
        """Dispatch on the visitor variant; custom visitors hand the raw value back to their driver."""
        match visitor:
            case ModbusVisitor():
                return cls.decode_modbus(raw, visitor, value_type, offset)
            case OpcuaVisitor():
                return cls.coerce_opcua(raw, visitor, value_type)
            case CustomVisitor():
                return raw
            case _:
                raise TypeError(f"unsupported visitor: {type(visitor).__name__}")
