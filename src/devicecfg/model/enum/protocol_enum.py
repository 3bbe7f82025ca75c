from enum import IntEnum, StrEnum


class Protocol(StrEnum):
    MODBUS = "modbus"
    OPCUA = "opcua"
    CUSTOM = "custom"


class Parity(StrEnum):
    EVEN = "E"
    NONE = "N"
    ODD = "O"


class PropertyMode(StrEnum):
    READ_ONLY = "ro"
    READ_WRITE = "rw"


class ModbusFunction(IntEnum):
    """Read function codes a Modbus visitor may address."""

    READ_COILS = 1
    READ_DISCRETE_INPUTS = 2
    READ_HOLDING_REGISTERS = 3
    READ_INPUT_REGISTERS = 4

    @property
    def reads_bits(self) -> bool:
        return self in (ModbusFunction.READ_COILS, ModbusFunction.READ_DISCRETE_INPUTS)
