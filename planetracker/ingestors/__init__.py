"""Data ingestors for the plane tracker."""

from .sbs import (
    ReceiverConnectionError,
    ReceiverState,
    RecordingSink,
    ReportChannel,
    SbsParseError,
    SbsReceiver,
    parse_address,
    parse_sbs_line,
)

__all__ = [
    "ReceiverConnectionError",
    "ReceiverState",
    "RecordingSink",
    "ReportChannel",
    "SbsParseError",
    "SbsReceiver",
    "parse_address",
    "parse_sbs_line",
]
