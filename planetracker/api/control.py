"""Command endpoints: connection, selection and tracking toggles."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from planetracker.ingestors import ReceiverConnectionError
from planetracker.models import AircraftSummary, ConnectRequest, ProgramStatus, SettingsUpdate
from planetracker.services import ProgramState, UnknownAircraftError

from .deps import get_program, parse_aircraft_id

router = APIRouter(prefix="/api/v1", tags=["control"])

logger = logging.getLogger("planetracker.api.control")


@router.post("/connect", response_model=ProgramStatus, summary="Connect to an SBS server")
def connect(
    request: ConnectRequest, program: ProgramState = Depends(get_program)
) -> ProgramStatus:
    try:
        program.connect(request.address)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ReceiverConnectionError as exc:
        logger.error("Connect to %s failed: %s", request.address, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    return program.status()


@router.post("/disconnect", response_model=ProgramStatus, summary="Disconnect from the SBS server")
def disconnect(program: ProgramState = Depends(get_program)) -> ProgramStatus:
    program.disconnect()
    return program.status()


@router.post(
    "/aircraft/{aircraft_id}/select",
    response_model=AircraftSummary,
    summary="Select the aircraft whose telemetry is sent out",
)
def select_aircraft(
    aircraft_id: str, program: ProgramState = Depends(get_program)
) -> AircraftSummary:
    parsed = parse_aircraft_id(aircraft_id)
    try:
        record = program.select(parsed)
    except UnknownAircraftError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Aircraft not tracked"
        ) from exc
    return program.store.summarize(record, interpolated=program.interpolate_positions)


@router.delete("/selection", status_code=status.HTTP_204_NO_CONTENT, summary="Clear selection")
def clear_selection(program: ProgramState = Depends(get_program)) -> None:
    program.clear_selection()


@router.put("/settings", response_model=ProgramStatus, summary="Update tracking toggles")
def update_settings(
    update: SettingsUpdate, program: ProgramState = Depends(get_program)
) -> ProgramStatus:
    if update.interpolate_positions is not None:
        program.set_interpolation(update.interpolate_positions)
    if update.filter_out_of_order is not None:
        program.set_out_of_order_filter(update.filter_out_of_order)
    if update.recording is not None and update.recording != program.recording:
        try:
            program.set_recording(update.recording)
        except OSError as exc:
            logger.error("Unable to start recording: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Unable to open recording file",
            ) from exc
    return program.status()
