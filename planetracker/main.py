from __future__ import annotations

import asyncio
import contextlib
import logging
import time

from fastapi import FastAPI, Request

from planetracker.api import api_router
from planetracker.config import settings
from planetracker.ingestors import ReceiverConnectionError
from planetracker.services import OutboundListener, OutboundSinks, ProgramState, TrackerRuntime

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger("planetracker")


def build_program() -> ProgramState:
    """Create the tracking state from the startup configuration."""

    return ProgramState(
        settings.observer,
        interpolate_positions=settings.interpolate_positions,
        filter_out_of_order=settings.filter_out_of_order,
        recording_dir=settings.recording_dir,
        sinks=OutboundSinks(),
    )


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown lifecycle."""

    # ----- Startup logic -----
    program = build_program()
    app.state.program = program
    logger.info(
        "Observer at %.5f, %.5f (%.0f m)",
        program.observer.lat,
        program.observer.lon,
        program.observer.elevation,
    )

    runtime = TrackerRuntime(program, tick_interval=settings.tick_interval)
    app.state.runtime = runtime
    await runtime.start()

    if settings.outbound_port:
        listener = OutboundListener(program.sinks, settings.outbound_port)
        listener.start()
        app.state.listener = listener

    if settings.autoconnect and settings.server_address:
        try:
            await asyncio.to_thread(program.connect, settings.server_address)
        except (ReceiverConnectionError, ValueError) as exc:
            logger.warning("Autoconnect to %s failed: %s", settings.server_address, exc)

    try:
        # Yield control to application (request handling, tests, etc.)
        yield
    finally:
        # ----- Shutdown logic -----
        await runtime.stop()

        listener: OutboundListener | None = getattr(app.state, "listener", None)
        if listener:
            listener.stop()

        program.shutdown()


app = FastAPI(title="Plane Tracker", lifespan=lifespan)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log basic request information for observability."""

    start_time = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        "HTTP %s %s -> %s (%.2f ms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


app.include_router(api_router)


@app.get("/", summary="Root")
def read_root(request: Request) -> dict[str, object]:
    """Short tracker summary: connection state and how many aircraft are tracked."""

    program: ProgramState | None = getattr(request.app.state, "program", None)
    if program is None:
        return {"service": "planetracker", "connection": None, "aircraft": 0}
    status = program.status()
    return {
        "service": "planetracker",
        "connection": status.connection,
        "server_address": status.server_address,
        "aircraft": status.aircraft,
        "selected": [summary.id for summary in program.aircraft() if summary.selected],
    }
