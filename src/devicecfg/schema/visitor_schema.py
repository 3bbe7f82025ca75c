"""
Property Visitor Schema

A visitor tells a driver how to address one property on the device and how
to turn the raw value into a typed application value.

Example configuration:
    visitor:
      function: 3
      address: "40001"
      quantity: 2
      type: float32
      scale: 0.1
      swapRegister: true

    visitor:
      nodeId: ns=2;s=Line1.Temperature
      type: float64

    visitor: "custom-point-17"
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, RootModel, field_validator, model_validator
from pydantic_core import PydanticCustomError

from devicecfg.model.enum.protocol_enum import ModbusFunction, Protocol
from devicecfg.model.enum.value_type_enum import ValueType
from devicecfg.schema.access_schema import STRUCT_CONFIG


def normalize_value_type(v: Any) -> Any:
    """Empty type means "unspecified"; anything else must name a scalar type."""
    if v is None:
        return None
    if isinstance(v, str):
        v = v.strip().lower()
        return v or None
    return v


def width_error(value_type: ValueType | None, quantity: int | None) -> PydanticCustomError | None:
    """Return the load-time error for a type/quantity combination, or None when they agree."""
    if value_type is None or quantity is None:
        return None
    expected = value_type.word_count
    if expected is not None and quantity != expected:
        return PydanticCustomError(
            "width_mismatch",
            "type {value_type} needs {expected} register(s), quantity is {quantity}",
            {"value_type": value_type.value, "expected": expected, "quantity": quantity},
        )
    return None


class ModbusVisitor(BaseModel):
    model_config = STRUCT_CONFIG

    protocol: ClassVar[Protocol] = Protocol.MODBUS

    function: int = Field(..., ge=1, le=4, description="Modbus read function code")
    address: str = Field(default="", description="Driver-defined register address")
    quantity: int | None = Field(default=None, ge=1, le=65535, description="Register/coil count")
    type: ValueType | None = None
    scale: float = Field(default=0.0, description="Multiplier after decode; 0 disables scaling")
    swap_byte: bool = Field(default=False, alias="swapByte", validation_alias=AliasChoices("swapByte", "swapbyte"))
    swap_register: bool = Field(
        default=False, alias="swapRegister", validation_alias=AliasChoices("swapRegister", "swapregister")
    )

    @field_validator("address", mode="before")
    @classmethod
    def _coerce_address(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, v: Any) -> Any:
        return normalize_value_type(v)

    @field_validator("scale", mode="before")
    @classmethod
    def _null_scale(cls, v: Any) -> Any:
        return 0.0 if v is None else v

    @model_validator(mode="after")
    def _check_width(self) -> ModbusVisitor:
        error = width_error(self.type, self.quantity)
        if error is not None:
            raise error
        if self.quantity is None and self.type is not None and self.type.word_count is not None:
            object.__setattr__(self, "quantity", self.type.word_count)
        return self

    @property
    def function_code(self) -> ModbusFunction:
        return ModbusFunction(self.function)

    @property
    def scaled(self) -> bool:
        return self.scale != 0.0


class OpcuaVisitor(BaseModel):
    model_config = STRUCT_CONFIG

    protocol: ClassVar[Protocol] = Protocol.OPCUA

    node_id: str = Field(..., alias="nodeId", validation_alias=AliasChoices("nodeId", "nodeid", "node_id"))
    type: ValueType | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, v: Any) -> Any:
        return normalize_value_type(v)


class CustomVisitor(RootModel[str]):
    """Opaque point reference interpreted by a custom driver."""

    model_config = ConfigDict(frozen=True)

    protocol: ClassVar[Protocol] = Protocol.CUSTOM


PropertyVisitor = ModbusVisitor | OpcuaVisitor | CustomVisitor
