"""Aircraft state store: merges reports, filters out-of-order fixes, dead-reckons."""

from __future__ import annotations

import logging
import time
from typing import Iterator

import numpy as np

from planetracker.domain import geometry
from planetracker.models import (
    AirbornePosition,
    AirborneVelocity,
    AircraftRecord,
    AircraftSummary,
    GeodeticPosition,
    IdentificationAndCategory,
    Report,
    SelectionState,
    SurveillanceAltitude,
    TimedPosition,
    TransponderId,
)

logger = logging.getLogger("planetracker.services.tracker")

STALE_AFTER_S = 60.0
GC_INTERVAL_S = 10.0
INACTIVE_AFTER_S = 10.0


class UnknownAircraftError(KeyError):
    """No aircraft with the requested address is being tracked."""


def is_behind(
    reference: GeodeticPosition, track: float, candidate: GeodeticPosition
) -> bool:
    """Whether ``candidate`` lies behind an aircraft at ``reference`` flying ``track``.

    Assumes level, locally flat flight between consecutive fixes.
    """

    ref = geometry.to_unit_cartesian(reference)
    forward = geometry.forward_direction(ref, track)
    offset = geometry.to_unit_cartesian(candidate) - ref
    return bool(np.dot(offset, forward) < 0.0)


class AircraftStore:
    """Tracked aircraft keyed by transponder address.

    Single-owner object: callers serialize access (see ``ProgramState``).
    ``now`` arguments are monotonic seconds and default to ``time.monotonic()``.
    """

    def __init__(
        self,
        observer: GeodeticPosition,
        *,
        filter_out_of_order: bool = True,
        now: float | None = None,
    ) -> None:
        self.observer = observer
        self.filter_out_of_order = filter_out_of_order
        self._aircraft: dict[TransponderId, AircraftRecord] = {}
        self._last_gc = time.monotonic() if now is None else now
        self.displayable_count = 0
        self.max_displayable_count = 0
        self.max_distance = 0.0
        self.rejected_count = 0

    def __len__(self) -> int:
        return len(self._aircraft)

    def __iter__(self) -> Iterator[AircraftRecord]:
        return iter(list(self._aircraft.values()))

    def __contains__(self, aircraft_id: object) -> bool:
        return aircraft_id in self._aircraft

    def get(self, aircraft_id: TransponderId) -> AircraftRecord | None:
        return self._aircraft.get(aircraft_id)

    def clear(self) -> None:
        self._aircraft.clear()
        self.displayable_count = 0

    def apply(self, report: Report, now: float | None = None) -> bool:
        """Merge one report. Returns False when the report was discarded."""

        now = time.monotonic() if now is None else now
        record = self._aircraft.get(report.id)
        if record is None:
            record = AircraftRecord(id=report.id, last_update=now)
            self._aircraft[report.id] = record
            logger.debug("Tracking new aircraft %s", report.id)

        if isinstance(report, IdentificationAndCategory):
            record.callsign = report.callsign
        elif isinstance(report, AirbornePosition):
            if not self._apply_position(record, report, now):
                return False
        elif isinstance(report, AirborneVelocity):
            record.ground_speed = report.ground_speed
            record.track = report.track
        elif isinstance(report, SurveillanceAltitude):
            record.altitude = report.altitude
        else:  # pragma: no cover - closed union
            raise TypeError(f"unsupported report type {type(report).__name__}")

        record.last_update = now
        self._update_statistics(record)
        return True

    def _apply_position(
        self, record: AircraftRecord, report: AirbornePosition, now: float
    ) -> bool:
        if report.position is not None:
            if (
                self.filter_out_of_order
                and record.observed is not None
                and record.track is not None
                and record.altitude is not None
            ):
                reference = record.best_position()
                if is_behind(reference, record.track, report.position):
                    self.rejected_count += 1
                    logger.debug(
                        "Discarding out-of-order position for %s", record.id
                    )
                    return False

            record.observed = TimedPosition(report.position, now)
            if record.estimated is not None:
                record.estimated = record.observed

        if report.altitude is not None:
            record.altitude = report.altitude
        return True

    def _update_statistics(self, record: AircraftRecord) -> None:
        self.displayable_count = sum(
            1 for aircraft in self._aircraft.values() if aircraft.is_displayable
        )
        self.max_displayable_count = max(
            self.max_displayable_count, self.displayable_count
        )
        if record.observed is not None and record.altitude is not None:
            observed_distance = geometry.distance(
                self.observer, record.observed.position, record.altitude
            )
            self.max_distance = max(self.max_distance, observed_distance)

    def estimate_all(self, now: float | None = None) -> None:
        """Advance the dead-reckoned position of every aircraft with a known velocity."""

        now = time.monotonic() if now is None else now
        for record in self._aircraft.values():
            if record.track is None or record.ground_speed is None:
                continue
            start = record.estimated or record.observed
            if start is None:
                continue
            position = geometry.estimate_position(
                start.position, record.track, record.ground_speed, now - start.timestamp
            )
            record.estimated = TimedPosition(position, now)

    def garbage_collect(self, now: float | None = None) -> list[TransponderId]:
        """Drop aircraft not updated for ``STALE_AFTER_S``.

        Runs at most once per ``GC_INTERVAL_S``; other calls are no-ops.
        """

        now = time.monotonic() if now is None else now
        if now - self._last_gc < GC_INTERVAL_S:
            return []

        stale = [
            aircraft_id
            for aircraft_id, record in self._aircraft.items()
            if now - record.last_update > STALE_AFTER_S
        ]
        for aircraft_id in stale:
            del self._aircraft[aircraft_id]
        self._last_gc = now

        if stale:
            self.displayable_count = sum(
                1 for aircraft in self._aircraft.values() if aircraft.is_displayable
            )
            logger.debug("Garbage collected %d stale aircraft", len(stale))
        return stale

    def select(self, aircraft_id: TransponderId) -> AircraftRecord:
        """Mark one aircraft as selected, demoting any previous selection."""

        record = self._aircraft.get(aircraft_id)
        if record is None:
            raise UnknownAircraftError(aircraft_id)
        self.clear_selection()
        record.selection = SelectionState.SELECTED
        return record

    def clear_selection(self) -> None:
        for record in self._aircraft.values():
            record.selection = SelectionState.NORMAL

    def selected(self) -> list[AircraftRecord]:
        return [record for record in self._aircraft.values() if record.is_selected]

    def distance_to(
        self, record: AircraftRecord, *, interpolated: bool = True
    ) -> float | None:
        if record.altitude is None or record.observed is None:
            return None
        position = (
            record.best_position() if interpolated else record.observed.position
        )
        return geometry.distance(self.observer, position, record.altitude)

    def summarize(
        self,
        record: AircraftRecord,
        now: float | None = None,
        *,
        interpolated: bool = True,
    ) -> AircraftSummary:
        now = time.monotonic() if now is None else now
        use_estimate = interpolated and record.estimated is not None
        position = record.best_position() if use_estimate else (
            record.observed.position if record.observed is not None else None
        )
        x = y = None
        if position is not None:
            x, y = geometry.project(self.observer, position)
        age = now - record.last_update

        return AircraftSummary(
            id=record.id.hex,
            callsign=record.callsign,
            lat=position.lat if position is not None else None,
            lon=position.lon if position is not None else None,
            observed_lat=record.observed.position.lat if record.observed else None,
            observed_lon=record.observed.position.lon if record.observed else None,
            interpolated=use_estimate,
            track=record.track,
            altitude_m=record.altitude,
            ground_speed_mps=record.ground_speed,
            distance_m=self.distance_to(record, interpolated=use_estimate),
            x_m=x,
            y_m=y,
            selected=record.is_selected,
            inactive=age > INACTIVE_AFTER_S,
            seconds_since_update=age,
        )


__all__ = [
    "AircraftStore",
    "GC_INTERVAL_S",
    "INACTIVE_AFTER_S",
    "STALE_AFTER_S",
    "UnknownAircraftError",
    "is_behind",
]
