"""SBS (BaseStation) ingestor: line parser, socket reader and raw-feed recorder."""

from __future__ import annotations

import enum
import logging
import queue
import socket
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, TextIO

from planetracker.models.geo import GeodeticPosition
from planetracker.models.reports import (
    AirbornePosition,
    AirborneVelocity,
    IdentificationAndCategory,
    InvalidTransponderId,
    Report,
    SurveillanceAltitude,
    TransponderId,
)

logger = logging.getLogger("planetracker.ingestors.sbs")

METERS_PER_FOOT = 0.3048
MPS_PER_KNOT = 1852.0 / 3600.0

MSG_IDENTIFICATION = 1
MSG_AIRBORNE_POSITION = 3
MSG_AIRBORNE_VELOCITY = 4
MSG_SURVEILLANCE_ALTITUDE = 5


class SbsParseError(ValueError):
    """A MSG line that cannot be decoded."""


class ReceiverConnectionError(ConnectionError):
    """The SBS server could not be reached."""


def _field(fields: list[str], index: int) -> str:
    return fields[index] if index < len(fields) else ""


def _parse_feet(raw: str) -> float:
    value = int(raw)
    if value < 0:
        raise ValueError(f"negative altitude ({value})")
    return value * METERS_PER_FOOT


def _parse_optional_feet(raw: str) -> float | None:
    try:
        return _parse_feet(raw)
    except ValueError:
        return None


def _parse_required(fields: list[str], index: int, msg_type: int, parse: Callable):
    raw = _field(fields, index)
    try:
        return parse(raw)
    except ValueError as exc:
        raise SbsParseError(
            f"MSG,{msg_type} has invalid field {index + 1} ({raw!r}): {exc}"
        ) from exc


def _parse_position(fields: list[str]) -> GeodeticPosition | None:
    lat_raw = _field(fields, 14)
    lon_raw = _field(fields, 15)
    try:
        lat = float(lat_raw)
    except ValueError:
        lat = None
    try:
        lon = float(lon_raw)
    except ValueError:
        lon = None

    if lat is None and lon is None:
        return None
    if lat is None or lon is None:
        raise SbsParseError(
            f"MSG,{MSG_AIRBORNE_POSITION} has unpaired coordinates "
            f"(lat={lat_raw!r}, lon={lon_raw!r})"
        )
    return GeodeticPosition(lat=lat, lon=lon)


def parse_sbs_line(line: str) -> Report | None:
    """Decode one SBS line.

    Returns ``None`` for lines that are not tracking messages or carry an
    unsupported message type. Raises :class:`SbsParseError` for malformed
    MSG lines.
    """

    fields = line.rstrip("\r\n").split(",")

    if fields[0] != "MSG":
        return None

    if len(fields) < 5:
        raise SbsParseError(f"too few fields ({len(fields)})")

    try:
        msg_type = int(fields[1])
    except ValueError as exc:
        raise SbsParseError(f"invalid message type {fields[1]!r}") from exc

    if not fields[4]:
        raise SbsParseError(f"MSG,{msg_type} has empty field 5")
    try:
        aircraft_id = TransponderId.from_hex(fields[4])
    except InvalidTransponderId as exc:
        raise SbsParseError(f"MSG,{msg_type} has invalid transponder id: {exc}") from exc

    if msg_type == MSG_IDENTIFICATION:
        if len(fields) < 11:
            raise SbsParseError(f"MSG,{msg_type} has too few fields ({len(fields)})")
        callsign = fields[10].strip()
        if not callsign:
            raise SbsParseError(f"MSG,{msg_type} has empty field 11")
        return IdentificationAndCategory(id=aircraft_id, callsign=callsign)

    if msg_type == MSG_AIRBORNE_POSITION:
        return AirbornePosition(
            id=aircraft_id,
            altitude=_parse_optional_feet(_field(fields, 11)),
            position=_parse_position(fields),
        )

    if msg_type == MSG_AIRBORNE_VELOCITY:
        ground_speed = _parse_required(fields, 12, msg_type, float)
        track = _parse_required(fields, 13, msg_type, float)
        return AirborneVelocity(
            id=aircraft_id, ground_speed=ground_speed * MPS_PER_KNOT, track=track
        )

    if msg_type == MSG_SURVEILLANCE_ALTITUDE:
        altitude = _parse_required(fields, 11, msg_type, _parse_feet)
        return SurveillanceAltitude(id=aircraft_id, altitude=altitude)

    return None


def parse_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` into its parts."""

    host, sep, port = address.strip().rpartition(":")
    if not sep or not host:
        raise ValueError(f"address must have the form host:port ({address!r})")
    try:
        return host.strip("[]"), int(port)
    except ValueError as exc:
        raise ValueError(f"invalid port in address {address!r}") from exc


class ReportChannel:
    """Unbounded single-producer/single-consumer hand-off for parsed reports.

    ``send`` never blocks. The consumer either polls with :meth:`drain` or
    registers a wake-up callback with :meth:`bind`, which is invoked from the
    producer thread after every send.
    """

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[Report] = queue.SimpleQueue()
        self._notify: Callable[[], None] | None = None

    def bind(self, notify: Callable[[], None] | None) -> None:
        self._notify = notify

    def send(self, report: Report) -> None:
        self._queue.put(report)
        notify = self._notify
        if notify is not None:
            notify()

    def drain(self) -> list[Report]:
        reports: list[Report] = []
        while True:
            try:
                reports.append(self._queue.get_nowait())
            except queue.Empty:
                return reports

    def __len__(self) -> int:
        return self._queue.qsize()


class RecordingSink:
    """Best-effort append-only copy of the raw feed, one file per session."""

    TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"
    SEPARATOR = ";"

    def __init__(self, stream: TextIO, path: Path | None = None) -> None:
        self._stream = stream
        self._lock = threading.Lock()
        self.path = path

    @classmethod
    def create(cls, directory: str | Path) -> "RecordingSink":
        """Open a fresh recording file in ``directory``."""

        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / datetime.now().strftime("sbs-%Y%m%d-%H%M%S-%f.log")
        logger.info("Recording raw feed to %s", path)
        return cls(path.open("w", encoding="utf-8"), path)

    def write_line(self, line: str, now: datetime | None = None) -> None:
        stamp = (now or datetime.now()).strftime(self.TIMESTAMP_FORMAT)
        raw = line.rstrip("\r\n")
        try:
            with self._lock:
                self._stream.write(f"{stamp}{self.SEPARATOR}{raw}\n")
                self._stream.flush()
        except (OSError, ValueError) as exc:
            # ValueError covers writes after close.
            logger.debug("Recording write failed: %s", exc)

    def close(self) -> None:
        with self._lock:
            try:
                self._stream.close()
            except OSError as exc:  # pragma: no cover - best effort close
                logger.debug("Recording close failed: %s", exc)


class ReceiverState(str, enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    STOPPING = "stopping"


class SbsReceiver:
    """Owns one SBS connection and the worker thread reading it."""

    def __init__(
        self,
        channel: ReportChannel,
        *,
        connect: Callable[[tuple[str, int]], socket.socket] | None = None,
    ) -> None:
        self.channel = channel
        self.recorder: Optional[RecordingSink] = None
        self.address: str | None = None
        self._state = ReceiverState.DISCONNECTED
        self.lines_received = 0
        self.parse_errors = 0
        self._connect = connect or socket.create_connection
        self._socket: socket.socket | None = None
        self._worker: threading.Thread | None = None
        self._attempt: object | None = None
        self._lock = threading.Lock()

    @property
    def is_streaming(self) -> bool:
        """True while the worker thread is alive."""

        worker = self._worker
        return worker is not None and worker.is_alive()

    @property
    def state(self) -> ReceiverState:
        # A worker that exited on its own (server hung up) reads as disconnected.
        if self._state is ReceiverState.STREAMING and not self.is_streaming:
            return ReceiverState.DISCONNECTED
        return self._state

    def start(self, address: str, recorder: RecordingSink | None = None) -> None:
        """Connect to ``address`` and begin streaming.

        Any existing connection is fully stopped first. The connection attempt
        runs without holding the receiver lock, so :meth:`stop` and ``state``
        stay available meanwhile; a :meth:`stop` during the attempt cancels it.
        Raises :class:`ReceiverConnectionError` when the server is unreachable.
        """

        host, port = parse_address(address)
        self.stop()

        attempt = object()
        with self._lock:
            self._attempt = attempt
            self._state = ReceiverState.CONNECTING

        try:
            sock = self._connect((host, port))
        except OSError as exc:
            with self._lock:
                if self._attempt is attempt:
                    self._attempt = None
                    self._state = ReceiverState.DISCONNECTED
            logger.warning("Failed to connect to SBS server %s: %s", address, exc)
            raise ReceiverConnectionError(
                f"unable to connect to {address}: {exc}"
            ) from exc

        with self._lock:
            if self._attempt is not attempt:
                sock.close()
                logger.info("Connection to SBS server %s cancelled", address)
                raise ReceiverConnectionError(f"connection to {address} was cancelled")
            self._attempt = None
            self._socket = sock
            self.address = address
            self.recorder = recorder
            self.lines_received = 0
            self.parse_errors = 0
            self._worker = threading.Thread(
                target=self._read_loop,
                args=(sock,),
                name=f"sbs-receiver-{address}",
                daemon=True,
            )
            self._worker.start()
            self._state = ReceiverState.STREAMING
        logger.info("Connected to SBS server at %s", address)

    def stop(self) -> None:
        """Shut the socket down and join the worker. No-op when stopped."""

        with self._lock:
            sock, worker = self._socket, self._worker
            if sock is None and worker is None:
                if self._attempt is not None:
                    self._attempt = None
                    self._state = ReceiverState.DISCONNECTED
                return
            self._state = ReceiverState.STOPPING
            if sock is not None:
                try:
                    sock.shutdown(socket.SHUT_RDWR)
                except OSError:
                    # Already disconnected by the peer.
                    pass
                sock.close()
            if worker is not None and worker is not threading.current_thread():
                worker.join()
            self._socket = None
            self._worker = None
            self._state = ReceiverState.DISCONNECTED
        logger.info("Disconnected from SBS server at %s", self.address)

    def _read_loop(self, sock: socket.socket) -> None:
        try:
            with sock.makefile("r", encoding="ascii", errors="replace", newline="\n") as stream:
                for line in stream:
                    self._handle_line(line)
        except (OSError, ValueError) as exc:
            # ValueError: reading a file object whose socket was closed by stop().
            logger.info("SBS stream ended: %s", exc)
        else:
            logger.info("SBS server %s closed the connection", self.address)

    def _handle_line(self, line: str) -> None:
        self.lines_received += 1
        recorder = self.recorder
        if recorder is not None:
            recorder.write_line(line)

        try:
            report = parse_sbs_line(line)
        except SbsParseError as exc:
            self.parse_errors += 1
            logger.warning("Error parsing SBS message %r: %s", line.strip(), exc)
            return

        if report is not None:
            self.channel.send(report)


__all__ = [
    "METERS_PER_FOOT",
    "MPS_PER_KNOT",
    "ReceiverConnectionError",
    "ReceiverState",
    "RecordingSink",
    "ReportChannel",
    "SbsParseError",
    "SbsReceiver",
    "parse_address",
    "parse_sbs_line",
]
