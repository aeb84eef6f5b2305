"""Status and command models for the control API."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class ProgramStatus(BaseModel):
    """Snapshot of connection state, counters and toggles."""

    server_address: Optional[str] = None
    connection: str = Field(..., description="Receiver state of the SBS connection")
    aircraft: int = Field(..., description="Aircraft currently tracked")
    displayable: int = Field(..., description="Aircraft with both position and track")
    max_displayable: int
    max_distance_m: float
    rejected_reports: int = Field(..., description="Position reports dropped as out of order")
    pending_reports: int
    interpolate_positions: bool
    filter_out_of_order: bool
    recording: bool
    recording_path: Optional[str] = None
    outbound_sinks: int


class ConnectRequest(BaseModel):
    address: str = Field(..., description="SBS server as host:port")


class SettingsUpdate(BaseModel):
    interpolate_positions: Optional[bool] = None
    filter_out_of_order: Optional[bool] = None
    recording: Optional[bool] = None


class RangeRing(BaseModel):
    surface_distance_m: float
    projected_radius_m: float


__all__ = ["ConnectRequest", "ProgramStatus", "RangeRing", "SettingsUpdate"]
