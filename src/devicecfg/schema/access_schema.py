"""
Access Descriptor Schema

Per-device connection configuration. Exactly one protocol variant describes
a device; the variant classes below are the members of `AccessDescriptor`.

Example configuration:
    access:
      id: 1
      interval: 5s
      timeout: 10s
      idleTimeout: 1m
      rtu:
        port: /dev/ttyUSB0
        baudRate: 9600
        parity: N

    access:
      endpoint: opc.tcp://10.0.0.8:4840
      interval: 2s
      security:
        policy: Basic256Sha256
        mode: SignAndEncrypt

    access: "vendor-gateway://plant-a"
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Annotated, Any, ClassVar

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    RootModel,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic_core import PydanticCustomError

from devicecfg.model.device_constant import (
    DEFAULT_MODBUS_IDLE_TIMEOUT,
    DEFAULT_MODBUS_TIMEOUT,
    DEFAULT_RTU_BAUDRATE,
    DEFAULT_RTU_DATA_BIT,
    DEFAULT_RTU_PARITY,
    DEFAULT_RTU_STOP_BIT,
)
from devicecfg.model.enum.protocol_enum import Parity, Protocol
from devicecfg.util.duration_util import DurationRangeError, format_duration, parse_duration

logger = logging.getLogger(__name__)


def _validate_duration(value: Any) -> timedelta:
    try:
        return parse_duration(value)
    except DurationRangeError as e:
        raise PydanticCustomError("duration_range", str(e)) from e


def _default_when_empty(cls: type[BaseModel], v: Any, info: ValidationInfo) -> Any:
    """An empty or null value keeps the field default."""
    if v is None or (isinstance(v, str) and not v.strip()):
        return cls.model_fields[info.field_name].get_default(call_default_factory=True)
    return v


Duration = Annotated[
    timedelta,
    BeforeValidator(_validate_duration),
    PlainSerializer(format_duration, return_type=str, when_used="json"),
]

# Structured variants reject unknown keys so that a fragment only matches the shape it was written for.
STRUCT_CONFIG = ConfigDict(
    extra="forbid", frozen=True, str_strip_whitespace=True, populate_by_name=True, coerce_numbers_to_str=True
)


# ---------- Modbus ----------
class TcpConfig(BaseModel):
    model_config = STRUCT_CONFIG

    address: str = Field(default="", description="Host name or IP of the Modbus TCP server")
    port: int = Field(default=0, ge=0, le=65535, description="TCP port (required, non-zero)")

    @model_validator(mode="after")
    def _check_required(self) -> TcpConfig:
        if not self.address:
            raise PydanticCustomError("required_field", "tcp.address is required")
        if self.port == 0:
            raise PydanticCustomError("required_field", "tcp.port is required")
        return self


class RtuConfig(BaseModel):
    model_config = STRUCT_CONFIG

    port: str = Field(default="", description="Serial port path (e.g., /dev/ttyUSB0)")
    baud_rate: int = Field(
        default=DEFAULT_RTU_BAUDRATE,
        gt=0,
        alias="baudRate",
        validation_alias=AliasChoices("baudRate", "baudrate", "baud_rate"),
    )
    parity: Parity = Field(default=Parity(DEFAULT_RTU_PARITY))
    data_bit: int = Field(
        default=DEFAULT_RTU_DATA_BIT,
        ge=5,
        le=8,
        alias="dataBit",
        validation_alias=AliasChoices("dataBit", "databit", "data_bit"),
    )
    stop_bit: int = Field(
        default=DEFAULT_RTU_STOP_BIT,
        ge=1,
        le=2,
        alias="stopBit",
        validation_alias=AliasChoices("stopBit", "stopbit", "stop_bit"),
    )

    @field_validator("parity", mode="before")
    @classmethod
    def _normalize_parity(cls, v: Any) -> Any:
        if v is None or v == "":
            return DEFAULT_RTU_PARITY
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("baud_rate", "data_bit", "stop_bit", mode="before")
    @classmethod
    def _default_when_null(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            return cls.model_fields[info.field_name].default
        return v

    @model_validator(mode="after")
    def _check_required(self) -> RtuConfig:
        if not self.port:
            raise PydanticCustomError("required_field", "rtu.port is required")
        return self


class ModbusAccessConfig(BaseModel):
    model_config = STRUCT_CONFIG

    protocol: ClassVar[Protocol] = Protocol.MODBUS

    id: int = Field(default=0, ge=0, le=255, description="Unit identifier (slave id)")
    interval: Duration = Field(default=timedelta(0), description="Polling interval")
    timeout: Duration = Field(default=DEFAULT_MODBUS_TIMEOUT)
    idle_timeout: Duration = Field(
        default=DEFAULT_MODBUS_IDLE_TIMEOUT,
        alias="idleTimeout",
        validation_alias=AliasChoices("idleTimeout", "idletimeout", "idle_timeout"),
    )
    tcp: TcpConfig | None = None
    rtu: RtuConfig | None = None

    @field_validator("interval", "timeout", "idle_timeout", mode="before")
    @classmethod
    def _default_duration(cls, v: Any, info: ValidationInfo) -> Any:
        return _default_when_empty(cls, v, info)

    @model_validator(mode="after")
    def _check_transport(self) -> ModbusAccessConfig:
        if self.tcp is not None and self.rtu is not None:
            raise PydanticCustomError("transport_conflict", "modbus access must set only one of tcp or rtu")
        if self.tcp is None and self.rtu is None:
            logger.warning(f"[ACCESS] modbus access id={self.id} has no tcp/rtu transport; driver must supply one")
        return self

    @property
    def transport(self) -> TcpConfig | RtuConfig | None:
        return self.tcp if self.tcp is not None else self.rtu


# ---------- OPC-UA ----------
class OpcuaSecurity(BaseModel):
    model_config = STRUCT_CONFIG

    policy: str = ""
    mode: str = ""


class OpcuaAuth(BaseModel):
    model_config = STRUCT_CONFIG

    username: str = ""
    password: str = Field(default="", repr=False)


class OpcuaCertificate(BaseModel):
    model_config = STRUCT_CONFIG

    cert_file: str = Field(default="", alias="certFile", validation_alias=AliasChoices("certFile", "certfile", "cert"))
    key_file: str = Field(default="", alias="keyFile", validation_alias=AliasChoices("keyFile", "keyfile", "key"))


class OpcuaAccessConfig(BaseModel):
    model_config = STRUCT_CONFIG

    protocol: ClassVar[Protocol] = Protocol.OPCUA

    id: int = Field(default=0, ge=0, le=255)
    endpoint: str = Field(default="", description="Server endpoint URL (opc.tcp://host:port/path)")
    interval: Duration = Field(default=timedelta(0))
    timeout: Duration = Field(default=timedelta(0))
    security: OpcuaSecurity = Field(default_factory=OpcuaSecurity)
    auth: OpcuaAuth = Field(default_factory=OpcuaAuth)
    certificate: OpcuaCertificate = Field(default_factory=OpcuaCertificate)

    @field_validator("interval", "timeout", mode="before")
    @classmethod
    def _default_duration(cls, v: Any, info: ValidationInfo) -> Any:
        return _default_when_empty(cls, v, info)

    @field_validator("security", "auth", "certificate", mode="before")
    @classmethod
    def _empty_block_to_default(cls, v: Any) -> Any:
        return {} if v is None else v


# ---------- Custom ----------
class CustomAccessConfig(RootModel[str]):
    """Opaque handle interpreted by a custom driver."""

    model_config = ConfigDict(frozen=True)

    protocol: ClassVar[Protocol] = Protocol.CUSTOM


AccessDescriptor = ModbusAccessConfig | OpcuaAccessConfig | CustomAccessConfig
