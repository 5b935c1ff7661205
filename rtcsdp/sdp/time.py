"""SDP time section and fields definitions and implementations."""

from __future__ import annotations

import re
from abc import ABC
from dataclasses import dataclass, field as dataclass_field

from typing_extensions import Self, override

from rtcsdp.exceptions import SDPParseError
from rtcsdp.helpers import slots_dataclass

from .common import SDPField, SDPSection, split_field_tokens


__all__ = [
    "parse_typed_time",
    "SDPTimeFields",
    "SDPTimeTime",
    "SDPTimeRepeat",
    "SDPTimeZoneAdjustment",
    "SDPTimeZone",
    "SDPTime",
]


TIME_UNITS: dict[str, int] = {"d": 86400, "h": 3600, "m": 60, "s": 1}

_TYPED_TIME_RE = re.compile(rf"(-?[0-9]+)([{''.join(TIME_UNITS)}])?")


def parse_typed_time(time_str: str, *, allow_negative: bool = False) -> int:
    """
    Parse a time value with an optional unit suffix, into seconds.

    Spec::
        typed-time = 1*DIGIT [fixed-len-time-unit]
        fixed-len-time-unit = "d" / "h" / "m" / "s"
    """
    match = _TYPED_TIME_RE.fullmatch(time_str)
    if not match or (not allow_negative and time_str.startswith("-")):
        raise SDPParseError(f'Invalid time string "{time_str}"')
    time, unit = match.groups()
    return int(time) * TIME_UNITS[unit or "s"]


@dataclass
class SDPTimeFields(SDPField, ABC, registry=True, registry_attr="_type"):
    """Base class for SDP time description fields."""


@slots_dataclass
class SDPTimeTime(SDPTimeFields):
    """
    SDP time field, defined in :rfc:`8866#section-5.9`.

    Spec::
        t=<start-time> <stop-time>
    """

    _type = "t"
    _description = "time the session is active"

    start_time: int
    stop_time: int

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        start_time, stop_time = split_field_tokens(raw_value, 2)
        return cls(
            start_time=parse_typed_time(start_time), stop_time=parse_typed_time(stop_time)
        )

    def serialize(self) -> str:  # noqa: D102
        return f"{self.start_time} {self.stop_time}"


@slots_dataclass
class SDPTimeRepeat(SDPTimeFields):
    """
    SDP time repeat field, defined in :rfc:`8866#section-5.10`.

    Spec::
        r=<repeat interval> <active duration> <offsets from start-time>

    Values can carry a ``d``, ``h``, ``m`` or ``s`` unit suffix, and are stored in seconds.
    """

    _type = "r"
    _description = "zero or more repeat times"

    interval: int
    duration: int
    offsets: list[int]

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        values = raw_value.split(" ")
        if len(values) < 3 or not all(values):
            raise SDPParseError(f"Repeat field needs interval, duration and offsets: {raw_value}")
        interval, duration, *offsets = values
        return cls(
            interval=parse_typed_time(interval),
            duration=parse_typed_time(duration),
            offsets=[parse_typed_time(offset) for offset in offsets],
        )

    def serialize(self) -> str:  # noqa: D102
        return " ".join(map(str, (self.interval, self.duration, *self.offsets)))


@slots_dataclass
class SDPTimeZoneAdjustment:
    """
    A single time zone adjustment, as part of definition in :rfc:`8866#section-5.11`.

    Spec::
        <adjustment time> <offset>
    """

    adjustment_time: int
    offset: int

    def __str__(self) -> str:
        return f"{self.adjustment_time} {self.offset}"


@slots_dataclass
class SDPTimeZone(SDPTimeFields):
    """
    SDP time zone field, defined in :rfc:`8866#section-5.11`.

    Spec::
        z=<adjustment time> <offset> <adjustment time> <offset> ....

    Offsets can be negative, and can carry a unit suffix like repeat times.
    """

    _type = "z"
    _description = "time zone adjustments"

    adjustments: list[SDPTimeZoneAdjustment]

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        tokens = raw_value.split(" ")
        if len(tokens) % 2 or not all(tokens):
            raise SDPParseError(
                f"Time zone field needs adjustment time and offset pairs: {raw_value}"
            )
        pairs = iter(tokens)
        adjustments = [
            SDPTimeZoneAdjustment(
                adjustment_time=parse_typed_time(adjustment_time),
                offset=parse_typed_time(offset, allow_negative=True),
            )
            for adjustment_time, offset in zip(pairs, pairs)
        ]
        return cls(adjustments=adjustments)

    def serialize(self) -> str:  # noqa: D102
        return " ".join(str(adjustment) for adjustment in self.adjustments)


@dataclass
class SDPTime(SDPSection):
    """
    SDP section for time description fields, defined in :rfc:`8866#section-5.9`.

    Each time section carries its own optional repeat times and time zone adjustments.
    """

    _fields_base = SDPTimeFields
    _start_field = SDPTimeTime

    time: SDPTimeTime
    repeats: list[SDPTimeRepeat] = dataclass_field(default_factory=list)
    timezone: SDPTimeZone | None = None
