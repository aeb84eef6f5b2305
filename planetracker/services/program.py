"""Program state: the single owner of all tracking data and its commands."""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path

from planetracker.ingestors.sbs import (
    RecordingSink,
    ReportChannel,
    SbsReceiver,
)
from planetracker.models import (
    AircraftRecord,
    AircraftSummary,
    GeodeticPosition,
    ProgramStatus,
    TransponderId,
)
from planetracker.services.telemetry import OutboundSinks, encode_target_info
from planetracker.services.tracker import AircraftStore

logger = logging.getLogger("planetracker.services.program")


class ProgramState:
    """Tracking state plus the commands the surrounding application may issue.

    Reports arrive from the receiver thread through ``channel`` and are
    applied by :meth:`process_pending`; public methods take the same lock so
    commands, report processing and ticks are serialized. Only the network
    wait inside :meth:`connect` happens outside it.
    """

    def __init__(
        self,
        observer: GeodeticPosition,
        *,
        interpolate_positions: bool = True,
        filter_out_of_order: bool = True,
        recording_dir: str | Path = "recordings",
        sinks: OutboundSinks | None = None,
        receiver: SbsReceiver | None = None,
    ) -> None:
        self.observer = observer
        self.store = AircraftStore(observer, filter_out_of_order=filter_out_of_order)
        self.interpolate_positions = interpolate_positions
        self.recording_dir = Path(recording_dir)
        self.sinks = sinks if sinks is not None else OutboundSinks()
        self.channel = receiver.channel if receiver is not None else ReportChannel()
        self.receiver = receiver if receiver is not None else SbsReceiver(self.channel)
        self._recorder: RecordingSink | None = None
        self._lock = threading.RLock()

    # Commands

    def connect(self, address: str) -> None:
        """Start streaming from ``address``; raises ReceiverConnectionError.

        The blocking connection attempt runs outside the program lock, so
        report processing and ticks continue while it is in flight.
        """

        with self._lock:
            recorder = self._recorder
        self.receiver.start(address, recorder=recorder)
        with self._lock:
            # Recording may have been toggled while the connection was opening.
            self.receiver.recorder = self._recorder

    def disconnect(self) -> None:
        """Stop streaming and forget every tracked aircraft."""

        with self._lock:
            self.receiver.stop()
            self.channel.drain()
            self.store.clear()

    def select(self, aircraft_id: TransponderId) -> AircraftRecord:
        with self._lock:
            return self.store.select(aircraft_id)

    def clear_selection(self) -> None:
        with self._lock:
            self.store.clear_selection()

    def set_recording(self, enabled: bool) -> None:
        """Enable recording into a fresh file, or stop recording."""

        with self._lock:
            previous = self._recorder
            self._recorder = RecordingSink.create(self.recording_dir) if enabled else None
            self.receiver.recorder = self._recorder
            if previous is not None:
                previous.close()

    def set_interpolation(self, enabled: bool) -> None:
        with self._lock:
            self.interpolate_positions = enabled

    def set_out_of_order_filter(self, enabled: bool) -> None:
        with self._lock:
            self.store.filter_out_of_order = enabled

    @property
    def recording(self) -> bool:
        return self._recorder is not None

    # Consumer side

    def process_pending(self, now: float | None = None) -> int:
        """Apply every report queued by the receiver; returns how many were applied."""

        with self._lock:
            reports = self.channel.drain()
            return sum(1 for report in reports if self.store.apply(report, now))

    def tick(self, now: float | None = None) -> None:
        """Periodic work: interpolate, send telemetry, collect stale aircraft."""

        now = time.monotonic() if now is None else now
        with self._lock:
            if self.interpolate_positions:
                self.store.estimate_all(now)
            for aircraft in self.store.selected():
                self._send_telemetry(aircraft)
            self.store.garbage_collect(now)

    def _send_telemetry(self, aircraft: AircraftRecord) -> None:
        message = encode_target_info(aircraft, self.observer)
        if message is None:
            logger.debug("Selected aircraft %s lacks data for telemetry", aircraft.id)
            return
        self.sinks.send(message.encode())

    # Read accessors

    def aircraft(self, now: float | None = None) -> list[AircraftSummary]:
        now = time.monotonic() if now is None else now
        with self._lock:
            return [
                self.store.summarize(record, now, interpolated=self.interpolate_positions)
                for record in self.store
            ]

    def status(self) -> ProgramStatus:
        with self._lock:
            recorder = self._recorder
            return ProgramStatus(
                server_address=self.receiver.address,
                connection=self.receiver.state.value,
                aircraft=len(self.store),
                displayable=self.store.displayable_count,
                max_displayable=self.store.max_displayable_count,
                max_distance_m=self.store.max_distance,
                rejected_reports=self.store.rejected_count,
                pending_reports=len(self.channel),
                interpolate_positions=self.interpolate_positions,
                filter_out_of_order=self.store.filter_out_of_order,
                recording=recorder is not None,
                recording_path=str(recorder.path) if recorder and recorder.path else None,
                outbound_sinks=len(self.sinks),
            )

    def shutdown(self) -> None:
        with self._lock:
            self.receiver.stop()
            if self._recorder is not None:
                self._recorder.close()
                self._recorder = None


__all__ = ["ProgramState"]
