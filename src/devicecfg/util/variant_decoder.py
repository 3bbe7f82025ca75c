"""
Discriminated decoding of access and visitor fragments.

A fragment is tried against each structured candidate in a fixed order and
the first structural match wins; a bound violation in a matched candidate is
surfaced instead of being treated as a mismatch. When no structured candidate
matches, the opaque custom variant absorbs any scalar.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, RootModel, ValidationError

from devicecfg.exception import MalformedDocumentError, ShapeMismatchError
from devicecfg.model.enum.protocol_enum import Protocol
from devicecfg.schema.access_schema import (
    AccessDescriptor,
    CustomAccessConfig,
    ModbusAccessConfig,
    OpcuaAccessConfig,
)
from devicecfg.schema.visitor_schema import CustomVisitor, ModbusVisitor, OpcuaVisitor, PropertyVisitor
from devicecfg.util.validation_util import classify_validation_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    protocol: Protocol
    model: type[BaseModel]


# Tried in order before the custom fallback.
ACCESS_CANDIDATES: tuple[Candidate, ...] = (
    Candidate(Protocol.MODBUS, ModbusAccessConfig),
    Candidate(Protocol.OPCUA, OpcuaAccessConfig),
)
VISITOR_CANDIDATES: tuple[Candidate, ...] = (
    Candidate(Protocol.MODBUS, ModbusVisitor),
    Candidate(Protocol.OPCUA, OpcuaVisitor),
)


def is_empty_fragment(fragment: Any) -> bool:
    if fragment is None:
        return True
    if isinstance(fragment, (str, Mapping)) and not fragment:
        return True
    return False


def render_scalar(fragment: Any) -> str | None:
    """Render a scalar fragment as the opaque string it stands for, or None for non-scalars."""
    if isinstance(fragment, str):
        return fragment
    if isinstance(fragment, bool):
        return "true" if fragment else "false"
    if isinstance(fragment, (int, float)):
        return str(fragment)
    return None


class VariantDecoder:
    """Classify an untyped fragment into exactly one protocol variant."""

    def __init__(self, kind: str, candidates: tuple[Candidate, ...], fallback: type[RootModel]):
        self.kind = kind
        self.candidates = candidates
        self.fallback = fallback
        self.variant_types: tuple[type[BaseModel], ...] = tuple(c.model for c in candidates) + (fallback,)

    @property
    def order(self) -> tuple[Protocol, ...]:
        return tuple(c.protocol for c in self.candidates) + (self.fallback.protocol,)

    def decode(self, fragment: Any, location: str = "") -> Any:
        """
        Returns the committed variant, or None for an absent/empty fragment.

        Raises:
            ConfigurationRangeError / WidthMismatchError: a candidate matched structurally but a bound is violated
            MalformedDocumentError: no structured candidate matched and the fragment is not a scalar
        """
        if is_empty_fragment(fragment):
            return None
        if isinstance(fragment, self.variant_types):
            return fragment

        where = location or self.kind
        mismatches: list[ShapeMismatchError] = []
        for candidate in self.candidates:
            try:
                variant = self._attempt(candidate, fragment, where)
            except ShapeMismatchError as e:
                logger.debug(f"[DECODE] {where}: not {candidate.protocol}: {e}")
                mismatches.append(e)
                continue
            logger.debug(f"[DECODE] {where}: committed to {candidate.protocol}")
            return variant

        return self._fallback(fragment, where, mismatches)

    def _attempt(self, candidate: Candidate, fragment: Any, where: str) -> BaseModel:
        if not isinstance(fragment, Mapping):
            raise ShapeMismatchError(
                f"{where}: {candidate.protocol} expects a mapping, got {type(fragment).__name__}",
                candidate=candidate.protocol,
            )
        try:
            return candidate.model.model_validate(fragment)
        except ValidationError as e:
            raise classify_validation_error(e, where, candidate=candidate.protocol) from e

    def _fallback(self, fragment: Any, where: str, mismatches: list[ShapeMismatchError]) -> RootModel:
        text = render_scalar(fragment)
        if text is None:
            reasons = "; ".join(f"{m.candidate}: {m}" for m in mismatches)
            raise MalformedDocumentError(
                f"{where}: {type(fragment).__name__} fragment matches no {self.kind} variant ({reasons})",
                location=where,
            )
        if not isinstance(fragment, str):
            logger.warning(f"[DECODE] {where}: non-string scalar {fragment!r} taken as {self.fallback.protocol}")
        logger.debug(f"[DECODE] {where}: committed to {self.fallback.protocol}")
        return self.fallback(text)


access_decoder = VariantDecoder("access", ACCESS_CANDIDATES, CustomAccessConfig)
visitor_decoder = VariantDecoder("visitor", VISITOR_CANDIDATES, CustomVisitor)


def decode_access(fragment: Any, location: str = "") -> AccessDescriptor | None:
    return access_decoder.decode(fragment, location)


def decode_visitor(fragment: Any, location: str = "") -> PropertyVisitor | None:
    return visitor_decoder.decode(fragment, location)
