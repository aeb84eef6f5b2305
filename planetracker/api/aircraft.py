"""Read endpoints for tracked aircraft and renderer helpers."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from planetracker.domain.geometry import projected_range_of_surface_distance
from planetracker.models import AircraftSummary, ProgramStatus, RangeRing
from planetracker.services import ProgramState

from .deps import get_program, parse_aircraft_id

router = APIRouter(prefix="/api/v1", tags=["aircraft"])


@router.get("/aircraft", response_model=list[AircraftSummary], summary="List tracked aircraft")
def list_aircraft(program: ProgramState = Depends(get_program)) -> list[AircraftSummary]:
    return program.aircraft()


@router.get(
    "/aircraft/{aircraft_id}",
    response_model=AircraftSummary,
    summary="Get one tracked aircraft",
)
def get_aircraft(
    aircraft_id: str, program: ProgramState = Depends(get_program)
) -> AircraftSummary:
    wanted = parse_aircraft_id(aircraft_id).hex
    for summary in program.aircraft():
        if summary.id == wanted:
            return summary
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Aircraft not tracked")


@router.get("/status", response_model=ProgramStatus, summary="Tracker status")
def get_status(program: ProgramState = Depends(get_program)) -> ProgramStatus:
    return program.status()


@router.get(
    "/range-rings",
    response_model=list[RangeRing],
    summary="Projected radii of range rings at true surface distances",
)
def range_rings(
    plot_range_km: float = Query(100.0, gt=0, le=5000),
    step_km: float = Query(20.0, gt=0),
) -> list[RangeRing]:
    rings: list[RangeRing] = []
    radius_km = step_km
    while radius_km < plot_range_km:
        radius_m = radius_km * 1000.0
        rings.append(
            RangeRing(
                surface_distance_m=radius_m,
                projected_radius_m=projected_range_of_surface_distance(radius_m),
            )
        )
        radius_km += step_km
    return rings
