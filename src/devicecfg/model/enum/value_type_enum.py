from enum import StrEnum


class ValueType(StrEnum):
    """Scalar domain a property value is decoded into."""

    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    STRING = "string"
    BOOL = "bool"

    @classmethod
    def from_string(cls, s: "str | ValueType | None") -> "ValueType | None":
        if isinstance(s, cls):
            return s
        if not s:
            return None
        try:
            return cls(str(s).strip().lower())
        except ValueError:
            return None

    @property
    def is_numeric(self) -> bool:
        return self not in (ValueType.STRING, ValueType.BOOL)

    @property
    def word_count(self) -> int | None:
        """Exact number of 16-bit registers for fixed-width types, None for variable width."""
        match self:
            case ValueType.INT16:
                return 1
            case ValueType.INT32 | ValueType.FLOAT32:
                return 2
            case ValueType.INT64 | ValueType.FLOAT64:
                return 4
            case _:
                return None
