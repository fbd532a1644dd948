"""SDP time description fields definitions and implementations."""

from __future__ import annotations

from typing_extensions import Self, override

from webrtcredux.exceptions import SDPMalformedLineError
from webrtcredux.helpers import slots_dataclass

from .common import SDPSessionFields, Tokens, parse_uint


__all__ = [
    "SDPSessionTiming",
    "SDPSessionRepeatTimes",
    "SDPTimezoneAdjustment",
    "SDPSessionTimezone",
]


@slots_dataclass(frozen=True)
class SDPSessionTiming(SDPSessionFields):
    """
    SDP timing field, defined in :rfc:`4566#section-5.9`.

    Spec::
        t=<start-time> <stop-time>
    """

    _type = "t"
    _description = "time the session is active"

    start: int
    stop: int

    @classmethod
    @override
    def from_raw_value(cls, raw_value: str) -> Self:
        start, stop = Tokens(raw_value).expect(2)
        return cls(start=parse_uint(start), stop=parse_uint(stop))

    def serialize(self) -> str:  # noqa: D102
        return f"{self.start} {self.stop}"


@slots_dataclass(frozen=True)
class SDPSessionRepeatTimes(SDPSessionFields):
    """
    SDP repeat times field, defined in :rfc:`4566#section-5.10`.

    Spec::
        r=<repeat interval> <active duration> <offsets from start-time>

    Values can use the compact ``d``/``h``/``m``/``s`` unit suffixes
    (e.g. ``7d``), so they are kept as strings, exactly as written.
    """

    _type = "r"
    _description = "zero or more repeat times"

    interval: str
    active_duration: str
    start_offsets: tuple[str, ...] = ()

    @classmethod
    @override
    def from_raw_value(cls, raw_value: str) -> Self:
        tokens = Tokens(raw_value).expect(min_count=2)
        return cls(
            interval=tokens[0],
            active_duration=tokens[1],
            start_offsets=tuple(tokens[2:]),
        )

    def serialize(self) -> str:  # noqa: D102
        return " ".join((self.interval, self.active_duration, *self.start_offsets))


@slots_dataclass(frozen=True)
class SDPTimezoneAdjustment:
    """
    A single SDP timezone adjustment, as part of definition in :rfc:`4566#section-5.11`.

    Spec::
        <adjustment time> <offset>
    """

    time: int
    offset: str

    def serialize(self) -> str:  # noqa: D102
        return f"{self.time} {self.offset}"

    def __str__(self) -> str:
        return self.serialize()


@slots_dataclass(frozen=True)
class SDPSessionTimezone(SDPSessionFields):
    """
    SDP timezone adjustments field, defined in :rfc:`4566#section-5.11`.

    Spec::
        z=<adjustment time> <offset> <adjustment time> <offset> ....
    """

    _type = "z"
    _description = "time zone adjustments"

    adjustments: tuple[SDPTimezoneAdjustment, ...]

    @classmethod
    @override
    def from_raw_value(cls, raw_value: str) -> Self:
        tokens = Tokens(raw_value)
        if len(tokens) % 2 != 0:
            raise SDPMalformedLineError(
                f"Number of values in timezone field is not even (got {len(tokens)}): "
                f"{raw_value!r}"
            )
        adjustments = tuple(
            SDPTimezoneAdjustment(time=parse_uint(time), offset=offset)
            for time, offset in zip(tokens[::2], tokens[1::2])
        )
        return cls(adjustments=adjustments)

    def serialize(self) -> str:  # noqa: D102
        return " ".join(adjustment.serialize() for adjustment in self.adjustments)
