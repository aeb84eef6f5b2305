"""Typed reports decoded from SBS (BaseStation) MSG lines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .geo import GeodeticPosition

_HEX_DIGITS = frozenset("0123456789ABCDEF")
_MAX_ADDRESS = 0xFFFFFF


class InvalidTransponderId(ValueError):
    """Raised when a Mode S address cannot be decoded."""


@dataclass(frozen=True)
class TransponderId:
    """24-bit Mode S transponder address."""

    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= _MAX_ADDRESS:
            raise InvalidTransponderId(f"address out of range ({self.value})")

    @classmethod
    def from_hex(cls, text: str) -> "TransponderId":
        """Decode the 6-character hexadecimal form used on the wire."""

        if len(text) != 6:
            raise InvalidTransponderId(f"invalid input length ({len(text)})")
        normalized = text.upper()
        if not _HEX_DIGITS.issuperset(normalized):
            raise InvalidTransponderId("input contains invalid character(s)")
        return cls(int(normalized, 16))

    @property
    def hex(self) -> str:
        return f"{self.value:06X}"

    def __str__(self) -> str:
        return self.hex


class _Report(BaseModel):
    id: TransponderId

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class IdentificationAndCategory(_Report):
    """MSG,1: callsign announcement."""

    kind: Literal["identification"] = "identification"
    callsign: str


class AirbornePosition(_Report):
    """MSG,3: altitude and position, either of which may be missing."""

    kind: Literal["airborne_position"] = "airborne_position"
    altitude: Optional[float] = Field(default=None, description="Altitude in metres")
    position: Optional[GeodeticPosition] = None


class AirborneVelocity(_Report):
    """MSG,4: ground speed (m/s) and track (degrees from true north)."""

    kind: Literal["airborne_velocity"] = "airborne_velocity"
    ground_speed: float
    track: float


class SurveillanceAltitude(_Report):
    """MSG,5: altitude in metres."""

    kind: Literal["surveillance_altitude"] = "surveillance_altitude"
    altitude: float


Report = Annotated[
    Union[
        IdentificationAndCategory,
        AirbornePosition,
        AirborneVelocity,
        SurveillanceAltitude,
    ],
    Field(discriminator="kind"),
]


__all__ = [
    "AirbornePosition",
    "AirborneVelocity",
    "IdentificationAndCategory",
    "InvalidTransponderId",
    "Report",
    "SurveillanceAltitude",
    "TransponderId",
]
