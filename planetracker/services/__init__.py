"""Service-layer objects for the plane tracker."""

from .program import ProgramState
from .runtime import TrackerRuntime
from .telemetry import OutboundListener, OutboundSinks, TargetInfoMessage, encode_target_info
from .tracker import AircraftStore, UnknownAircraftError

__all__ = [
    "AircraftStore",
    "OutboundListener",
    "OutboundSinks",
    "ProgramState",
    "TargetInfoMessage",
    "TrackerRuntime",
    "UnknownAircraftError",
    "encode_target_info",
]
