from datetime import timedelta

REGISTER_MASK = 0xFFFF

# Modbus access defaults
DEFAULT_MODBUS_TIMEOUT = timedelta(seconds=10)
DEFAULT_MODBUS_IDLE_TIMEOUT = timedelta(minutes=1)

# RTU serial line defaults
DEFAULT_RTU_BAUDRATE = 19200
DEFAULT_RTU_PARITY = "E"
DEFAULT_RTU_DATA_BIT = 8
DEFAULT_RTU_STOP_BIT = 1

# Pydantic error types raised by declared field bounds; anything else is structural
RANGE_ERROR_TYPES = frozenset(
    {
        "greater_than",
        "greater_than_equal",
        "less_than",
        "less_than_equal",
        "string_pattern_mismatch",
        "enum",
        "literal_error",
        "required_field",
        "transport_conflict",
        "duration_range",
    }
)
WIDTH_ERROR_TYPES = frozenset({"width_mismatch"})
