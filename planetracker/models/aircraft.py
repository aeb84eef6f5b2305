"""Tracked aircraft records and their API representation."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import NamedTuple, Optional

from pydantic import BaseModel, Field

from .geo import GeodeticPosition
from .reports import TransponderId


class SelectionState(str, enum.Enum):
    NORMAL = "normal"
    SELECTED = "selected"


class TimedPosition(NamedTuple):
    position: GeodeticPosition
    timestamp: float  # monotonic seconds


@dataclass
class AircraftRecord:
    """Live state of one aircraft, merged from all reports seen for its address.

    Optional fields stay ``None`` until first reported and are only ever
    overwritten afterwards. ``observed`` is the last received fix;
    ``estimated`` is the dead-reckoned position, restarted from every new fix.
    Units: metres, metres per second, degrees.
    """

    id: TransponderId
    last_update: float
    selection: SelectionState = SelectionState.NORMAL
    callsign: Optional[str] = None
    observed: Optional[TimedPosition] = None
    estimated: Optional[TimedPosition] = None
    track: Optional[float] = None
    altitude: Optional[float] = None
    ground_speed: Optional[float] = None

    @property
    def is_selected(self) -> bool:
        return self.selection is SelectionState.SELECTED

    @property
    def is_displayable(self) -> bool:
        return self.observed is not None and self.track is not None

    def best_position(self) -> GeodeticPosition | None:
        """Estimated position when one exists, else the last observed one."""

        if self.estimated is not None:
            return self.estimated.position
        if self.observed is not None:
            return self.observed.position
        return None


class AircraftSummary(BaseModel):
    """Read-only view of a tracked aircraft for renderers and API clients."""

    id: str = Field(..., description="Mode S address as 6 hex digits")
    callsign: Optional[str] = None
    lat: Optional[float] = Field(default=None, description="Best-known latitude")
    lon: Optional[float] = Field(default=None, description="Best-known longitude")
    observed_lat: Optional[float] = None
    observed_lon: Optional[float] = None
    interpolated: bool = Field(
        default=False, description="Whether lat/lon come from dead reckoning"
    )
    track: Optional[float] = Field(default=None, description="Degrees from true north")
    altitude_m: Optional[float] = None
    ground_speed_mps: Optional[float] = None
    distance_m: Optional[float] = Field(
        default=None, description="Straight-line distance from the observer"
    )
    x_m: Optional[float] = Field(default=None, description="Projected east offset")
    y_m: Optional[float] = Field(default=None, description="Projected north offset")
    selected: bool = False
    inactive: bool = False
    seconds_since_update: float = 0.0


__all__ = ["AircraftRecord", "AircraftSummary", "SelectionState", "TimedPosition"]
