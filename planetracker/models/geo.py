"""Geodetic value types shared by the parser, the store and the geometry code."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GeodeticPosition(BaseModel):
    """Point on the reference sphere, optionally raised above it."""

    lat: float = Field(..., description="Latitude in decimal degrees")
    lon: float = Field(..., description="Longitude in decimal degrees")
    elevation: float = Field(
        default=0.0, description="Elevation above the reference sphere in metres"
    )

    model_config = ConfigDict(frozen=True)


__all__ = ["GeodeticPosition"]
