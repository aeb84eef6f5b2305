"""Pydantic models and record types for the plane tracker."""

from .aircraft import AircraftRecord, AircraftSummary, SelectionState, TimedPosition
from .geo import GeodeticPosition
from .status import ConnectRequest, ProgramStatus, RangeRing, SettingsUpdate
from .reports import (
    AirbornePosition,
    AirborneVelocity,
    IdentificationAndCategory,
    InvalidTransponderId,
    Report,
    SurveillanceAltitude,
    TransponderId,
)

__all__ = [
    "AirbornePosition",
    "AirborneVelocity",
    "AircraftRecord",
    "AircraftSummary",
    "ConnectRequest",
    "GeodeticPosition",
    "IdentificationAndCategory",
    "ProgramStatus",
    "RangeRing",
    "InvalidTransponderId",
    "Report",
    "SelectionState",
    "SettingsUpdate",
    "SurveillanceAltitude",
    "TimedPosition",
    "TransponderId",
]
