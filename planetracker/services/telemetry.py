"""Outbound telemetry for the selected aircraft.

Each update is one ASCII line::

    x;y;z;vx;vy;vz;track;altitude\n

Position (metres) and velocity (m/s) are in the observer's east/north/up
frame, track is in degrees from true north and altitude in metres. The field
order is relied upon by downstream pointing clients.
"""

from __future__ import annotations

import logging
import socket
import threading
from dataclasses import dataclass
from typing import Iterable, Protocol

import numpy as np

from planetracker.domain import geometry
from planetracker.models import AircraftRecord, GeodeticPosition

logger = logging.getLogger("planetracker.services.telemetry")

# Longest a client that stopped reading may hold up one telemetry write.
SEND_TIMEOUT_S = 0.05


class Sink(Protocol):
    def sendall(self, data: bytes) -> None: ...


@dataclass(frozen=True)
class TargetInfoMessage:
    position: tuple[float, float, float]
    velocity: tuple[float, float, float]
    track: float
    altitude: float

    def encode(self) -> bytes:
        values = (*self.position, *self.velocity, self.track, self.altitude)
        return (";".join(repr(float(value)) for value in values) + "\n").encode("ascii")


def encode_target_info(
    aircraft: AircraftRecord, observer: GeodeticPosition
) -> TargetInfoMessage | None:
    """Build the outbound message, or None while the aircraft is incomplete."""

    position = aircraft.best_position()
    if (
        position is None
        or aircraft.altitude is None
        or aircraft.track is None
        or aircraft.ground_speed is None
    ):
        return None

    aircraft_global = geometry.to_global(position, aircraft.altitude)
    local_position = geometry.to_local_point(observer, aircraft_global)
    local_velocity = geometry.to_local_vector(
        observer,
        geometry.to_global_velocity(position, aircraft.track, aircraft.ground_speed),
    )
    return TargetInfoMessage(
        position=_as_tuple(local_position),
        velocity=_as_tuple(local_velocity),
        track=aircraft.track,
        altitude=aircraft.altitude,
    )


def _as_tuple(vector: np.ndarray) -> tuple[float, float, float]:
    return float(vector[0]), float(vector[1]), float(vector[2])


class OutboundSinks:
    """Connected telemetry clients, shared between the listener and the consumer."""

    def __init__(self, sinks: Iterable[Sink] = ()) -> None:
        self._lock = threading.Lock()
        self._sinks: list[Sink] = list(sinks)

    def add(self, sink: Sink) -> None:
        with self._lock:
            self._sinks.append(sink)

    def remove(self, sink: Sink) -> None:
        with self._lock:
            if sink in self._sinks:
                self._sinks.remove(sink)

    def snapshot(self) -> list[Sink]:
        with self._lock:
            return list(self._sinks)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sinks)

    def send(self, payload: bytes) -> int:
        """Write ``payload`` to every sink; returns how many writes succeeded.

        A failing sink, including one whose write timed out, is logged and
        kept; closing it is the owner's job.
        """

        delivered = 0
        for sink in self.snapshot():
            try:
                sink.sendall(payload)
            except OSError as exc:
                logger.warning("Telemetry write to %r failed: %s", sink, exc)
                continue
            delivered += 1
        return delivered


class OutboundListener:
    """Accepts telemetry clients on a local TCP port and registers them as sinks."""

    def __init__(self, sinks: OutboundSinks, port: int, host: str = "localhost") -> None:
        self.sinks = sinks
        self.host = host
        self.port = port
        self._server: socket.socket | None = None
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        self._server = socket.create_server((self.host, self.port))
        self.port = self._server.getsockname()[1]
        self._thread = threading.Thread(
            target=self._accept_loop, name="telemetry-listener", daemon=True
        )
        self._thread.start()
        logger.info("Telemetry listener on %s:%s", self.host, self.port)

    def stop(self) -> None:
        server, self._server = self._server, None
        if server is not None:
            try:
                server.shutdown(socket.SHUT_RDWR)
            except OSError:
                # Listening sockets are not connected on every platform.
                pass
            server.close()
        if self._thread is not None:
            self._thread.join(timeout=1.0)
            self._thread = None

    def _accept_loop(self) -> None:
        server = self._server
        while server is not None:
            try:
                client, address = server.accept()
            except OSError:
                break
            client.settimeout(SEND_TIMEOUT_S)
            logger.info("Telemetry client connected from %s:%s", *address[:2])
            self.sinks.add(client)


__all__ = [
    "OutboundListener",
    "OutboundSinks",
    "SEND_TIMEOUT_S",
    "Sink",
    "TargetInfoMessage",
    "encode_target_info",
]
