"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from planetracker.models import InvalidTransponderId, TransponderId
from planetracker.services import ProgramState


def get_program(request: Request) -> ProgramState:
    program = getattr(request.app.state, "program", None)
    if program is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Tracker not initialized",
        )
    return program


def parse_aircraft_id(aircraft_id: str) -> TransponderId:
    try:
        return TransponderId.from_hex(aircraft_id)
    except InvalidTransponderId as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid aircraft id: {exc}",
        ) from exc
