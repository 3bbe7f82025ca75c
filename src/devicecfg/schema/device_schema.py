"""
Device / Property Aggregate Schema

Root of a driver configuration document.

Example configuration:
    driver: modbus
    devices:
      - name: boiler-1
        version: "1"
        report: {topic: thing/boiler-1/report, qos: 1}
        delta: thing/boiler-1/delta
        access:
          id: 1
          tcp: {address: 10.0.0.5, port: 502}
        properties:
          - name: temperature
            mode: ro
            visitor:
              function: 3
              address: "0"
              quantity: 2
              type: float32
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from devicecfg.model.enum.protocol_enum import PropertyMode, Protocol
from devicecfg.model.enum.value_type_enum import ValueType
from devicecfg.schema.access_schema import AccessDescriptor
from devicecfg.schema.visitor_schema import ModbusVisitor, PropertyVisitor, normalize_value_type, width_error
from devicecfg.util.value_decoder import ValueDecoder
from devicecfg.util.variant_decoder import decode_access, decode_visitor

logger = logging.getLogger(__name__)

AGGREGATE_CONFIG = ConfigDict(extra="ignore", frozen=True, str_strip_whitespace=True, populate_by_name=True)


class QOSTopic(BaseModel):
    """Transport topic handle; a bare string is shorthand for qos 0."""

    model_config = AGGREGATE_CONFIG

    qos: int = Field(default=0, ge=0, le=1)
    topic: str = ""

    @model_validator(mode="before")
    @classmethod
    def _from_bare_topic(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"topic": data}
        if data is None:
            return {}
        return data


class Topic(BaseModel):
    model_config = AGGREGATE_CONFIG

    delta: QOSTopic = Field(default_factory=QOSTopic)
    report: QOSTopic = Field(default_factory=QOSTopic)
    event: QOSTopic = Field(default_factory=QOSTopic)
    get: QOSTopic = Field(default_factory=QOSTopic)
    get_response: QOSTopic = Field(
        default_factory=QOSTopic,
        alias="getResponse",
        validation_alias=AliasChoices("getResponse", "getresponse", "get_response"),
    )


class DeviceProperty(BaseModel):
    model_config = AGGREGATE_CONFIG

    name: str = ""
    type: ValueType | None = None
    mode: PropertyMode = PropertyMode.READ_ONLY
    visitor: PropertyVisitor | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, v: Any) -> Any:
        return normalize_value_type(v)

    @field_validator("mode", mode="before")
    @classmethod
    def _default_mode(cls, v: Any) -> Any:
        if v is None or v == "":
            return PropertyMode.READ_ONLY
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("visitor", mode="before")
    @classmethod
    def _decode_visitor(cls, v: Any, info: ValidationInfo) -> Any:
        return decode_visitor(v, location=f"property {info.data.get('name', '')!r} visitor")

    @model_validator(mode="after")
    def _check_type_against_visitor(self) -> DeviceProperty:
        visitor_type = getattr(self.visitor, "type", None)
        if self.type and visitor_type and self.type != visitor_type:
            logger.warning(
                f"[PROPERTY] {self.name}: type {self.type} differs from visitor type {visitor_type}; "
                f"wire decode follows the visitor"
            )
        if isinstance(self.visitor, ModbusVisitor) and visitor_type is None:
            error = width_error(self.type, self.visitor.quantity)
            if error is not None:
                raise error
        return self

    @property
    def writable(self) -> bool:
        return self.mode == PropertyMode.READ_WRITE

    @property
    def effective_type(self) -> ValueType | None:
        """Declared property type, inheriting the visitor's when left empty."""
        return self.type or getattr(self.visitor, "type", None)

    @property
    def wire_type(self) -> ValueType | None:
        """Type the raw value is reinterpreted as: the visitor's, else the property's."""
        return getattr(self.visitor, "type", None) or self.type

    def decode(self, raw: Any, offset: int = 0) -> Any:
        """Apply this property's visitor to a raw read."""
        if self.visitor is None:
            raise ValueError(f"property {self.name!r} has no visitor")
        return ValueDecoder.decode(raw, self.visitor, self.wire_type, offset)


class DeviceInfo(Topic):
    name: str = ""
    version: str = ""
    access: AccessDescriptor | None = None
    properties: tuple[DeviceProperty, ...] = ()

    @field_validator("access", mode="before")
    @classmethod
    def _decode_access(cls, v: Any, info: ValidationInfo) -> Any:
        return decode_access(v, location=f"device {info.data.get('name', '')!r} access")

    @field_validator("properties", mode="before")
    @classmethod
    def _null_properties(cls, v: Any) -> Any:
        return () if v is None else v

    @property
    def protocol(self) -> Protocol | None:
        return self.access.protocol if self.access is not None else None

    @property
    def topic(self) -> Topic:
        return Topic(
            delta=self.delta, report=self.report, event=self.event, get=self.get, get_response=self.get_response
        )

    def get_property(self, name: str) -> DeviceProperty | None:
        return next((p for p in self.properties if p.name == name), None)


class DriverConfig(BaseModel):
    """
    Top-level driver configuration.

    Device names are not required to be unique; lookups return the first match.
    """

    model_config = AGGREGATE_CONFIG

    driver: str = ""
    devices: tuple[DeviceInfo, ...] = ()

    @field_validator("devices", mode="before")
    @classmethod
    def _null_devices(cls, v: Any) -> Any:
        return () if v is None else v

    def find_device(self, name: str) -> DeviceInfo | None:
        return next((d for d in self.devices if d.name == name), None)

    def devices_by_protocol(self, protocol: Protocol | str) -> list[DeviceInfo]:
        return [d for d in self.devices if d.protocol == protocol]


class Event(BaseModel):
    """Device-originated event; the payload is owned by the event publisher."""

    model_config = AGGREGATE_CONFIG

    type: str = ""
    payload: Any = None


class DeviceShadow(BaseModel):
    model_config = AGGREGATE_CONFIG

    name: str = ""
    report: dict[str, Any] = Field(default_factory=dict)
    desire: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def for_device(cls, device: DeviceInfo) -> DeviceShadow:
        return cls(name=device.name)
