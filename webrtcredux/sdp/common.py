"""Common base classes for SDP fields, and the line grammar primitives they share."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, ClassVar, Iterator, cast, overload

from typing_extensions import Self, override

from webrtcredux.exceptions import (
    SDPMalformedLineError,
    SDPNumericConversionError,
    SDPParseError,
    SDPUnknownKeyError,
    SDPUnknownTokenError,
)
from webrtcredux.helpers import ParseableSerializable, Registry, StrValueMixin

from .enums import AddressType, BandwidthType, EncryptionMethod, LineEnding, NetworkType


__all__ = [
    "split_line",
    "parse_uint",
    "attach_line",
    "Tokens",
    "SDPField",
    "SDPSessionFields",
    "SDPMediaFields",
    "SDPInformationField",
    "SDPConnectionField",
    "SDPBandwidthField",
    "SDPEncryptionField",
    "SDPAttributeField",
]


_UINT_PATTERN: re.Pattern[str] = re.compile(r"[0-9]+")


def split_line(line: str) -> tuple[str, str]:
    """
    Split an SDP line into its type key and its raw value.

    :param line: the SDP line, in the form ``<type>=<value>``.
    The type key must be exactly one character: a line such as ``ab=1`` is
    rejected rather than read as type ``a``, so no text is silently dropped.

    :return: a tuple of the single-character type key and the value.
        The value is everything after the first ``=``.
    :raises SDPMalformedLineError: if the line is not a ``<type>=<value>`` pair,
        or if its type key is longer than one character.
    """
    field_type, separator, raw_value = line.partition("=")
    if not separator or len(field_type) != 1:
        raise SDPMalformedLineError(
            "Invalid SDP line, expected <type>=<value>", line=line
        )
    return field_type, raw_value


def parse_uint(token: str, *, max_value: int | None = None) -> int:
    """
    Parse a non-negative decimal integer token.

    :param token: the token to parse.
    :param max_value: optional inclusive upper bound for the value.
    :return: the parsed integer.
    :raises SDPNumericConversionError: if the token is not made only of ASCII digits,
        or if the value is above `max_value`.
    """
    if not _UINT_PATTERN.fullmatch(token):
        raise SDPNumericConversionError(token)
    value = int(token)
    if max_value is not None and value > max_value:
        raise SDPNumericConversionError(
            token, f"Value {value} is out of range (max {max_value})"
        )
    return value


@contextmanager
def attach_line(line: str) -> Iterator[None]:
    """Attach `line` to SDP parse errors raised within the context that don't have one yet."""
    try:
        yield
    except SDPParseError as exc:
        if exc.line is None:
            exc.line = line
        raise


class Tokens(Sequence[str]):
    """
    Bounds-checked view of the tokens of an SDP field value.

    Accessing a missing token raises :class:`SDPMalformedLineError`
    instead of :class:`IndexError`.
    """

    __slots__ = ("raw_value", "separator", "_tokens")

    def __init__(self, raw_value: str, separator: str = " "):
        self.raw_value: str = raw_value
        self.separator: str = separator
        self._tokens: list[str] = raw_value.split(separator)

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens)

    @overload
    def __getitem__(self, index: int) -> str: ...

    @overload
    def __getitem__(self, index: slice) -> list[str]: ...

    def __getitem__(self, index: int | slice) -> str | list[str]:
        if isinstance(index, slice):
            return self._tokens[index]
        try:
            return self._tokens[index]
        except IndexError:
            raise SDPMalformedLineError(
                f"Missing token #{index} in SDP value {self.raw_value!r}"
            ) from None

    def expect(
        self,
        count: int | None = None,
        *,
        min_count: int | None = None,
        max_count: int | None = None,
    ) -> Self:
        """
        Check the number of tokens.

        :param count: the exact number of tokens expected.
        :param min_count: the minimum number of tokens expected.
        :param max_count: the maximum number of tokens expected.
        :return: this same object, for chaining.
        :raises SDPMalformedLineError: if the number of tokens doesn't match.
        """
        length = len(self._tokens)
        if (
            (count is not None and length != count)
            or (min_count is not None and length < min_count)
            or (max_count is not None and length > max_count)
        ):
            raise SDPMalformedLineError(
                f"Unexpected number of {self.separator!r}-separated tokens ({length}) "
                f"in SDP value {self.raw_value!r}"
            )
        return self

    def tail(self, start: int) -> str | None:
        """
        The verbatim remainder of the value after the first `start` tokens.

        :param start: the number of leading tokens to skip.
        :return: the remainder, or None if there are no more than `start` tokens.
        """
        parts = self.raw_value.split(self.separator, start)
        return parts[start] if len(parts) > start else None


@dataclass(frozen=True)
class SDPField(Registry[str, "SDPField"], ParseableSerializable, ABC):
    """Abstract base dataclass for SDP fields."""

    _type: ClassVar[str]
    _description: ClassVar[str]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)

        if ABC not in cls.__bases__ and not getattr(cls, "_description", None):
            raise ValueError(f"SDPField class {cls} must have a _description attribute")

    @property
    def type(self) -> str:
        """The type of the field."""
        return self._type

    @classmethod
    def parse(cls, raw_data: str) -> Self:
        """
        Parse an SDP line into the registered field class for its type key.

        Must be called on a registry class, i.e. :class:`SDPSessionFields`
        or :class:`SDPMediaFields`.

        :param raw_data: the SDP line.
        :return: the parsed field.
        :raises SDPUnknownKeyError: if no field is registered for the line type key.
        """
        field_type, raw_value = split_line(raw_data)

        try:
            field_cls = cls.__registry_get_class_for__(field_type)
        except KeyError:
            raise SDPUnknownKeyError(field_type, raw_value, line=raw_data) from None

        with attach_line(raw_data):
            return cast(Self, field_cls.from_raw_value(raw_value))

    @classmethod
    @abstractmethod
    def from_raw_value(cls, raw_value: str) -> Self:
        """
        Parse the raw value of the field into a field object.

        :param raw_value: the raw value of the field, after ``<type>=``.
        :return: the field object.
        """

    @abstractmethod
    def serialize(self) -> str:
        """
        Serialize the field value to a string.

        :return: The serialized field value string, without the ``<type>=`` prefix.
        """

    def serialize_line(self, line_ending: LineEnding) -> str:
        """
        Serialize the whole field to SDP text.

        :param line_ending: the line terminator used between lines, for fields
            that span multiple lines.
        :return: the ``<type>=<value>`` text, without a trailing terminator.
        """
        return str(self)

    def __str__(self) -> str:
        return f"{self.type}={self.serialize()}"


@dataclass(frozen=True)
class SDPSessionFields(SDPField, ABC, registry=True, registry_attr="_type"):
    """Base class for session-level SDP fields, the top-level records of a description."""


@dataclass(frozen=True)
class SDPMediaFields(SDPField, ABC, registry=True, registry_attr="_type"):
    """Base class for media-level SDP fields, nested within a media description."""


@dataclass(frozen=True)
class SDPInformationField(StrValueMixin, SDPField, ABC):
    """
    SDP information field, defined in :rfc:`4566#section-5.4`.

    Spec::
        i=<session description>
    """

    _type = "i"


@dataclass(frozen=True)
class SDPConnectionField(SDPField, ABC):
    """
    SDP connection field, defined in :rfc:`4566#section-5.7`.

    Spec::
        c=<nettype> <addrtype> <connection-address>

    The TTL and the number of addresses are both optional ``/``-separated suffixes
    of the connection address. Any tokens after the connection address are kept
    as an opaque `suffix`.
    """

    _type = "c"

    net_type: NetworkType
    address_type: AddressType
    address: str
    ttl: int | None = None
    num_addresses: int | None = None
    suffix: str | None = None

    @property
    def connection_address(self) -> str:
        """The connection address as string, with optional TTL and number of addresses."""
        parts = [self.address]
        if self.ttl is not None:
            parts.append(str(self.ttl))
        if self.num_addresses is not None:
            parts.append(str(self.num_addresses))
        return "/".join(parts)

    @classmethod
    @override
    def from_raw_value(cls, raw_value: str) -> Self:
        tokens = Tokens(raw_value).expect(min_count=3)
        address_parts = Tokens(tokens[2], "/").expect(max_count=3)
        ttl = parse_uint(address_parts[1]) if len(address_parts) > 1 else None
        num_addresses = parse_uint(address_parts[2]) if len(address_parts) > 2 else None
        return cls(
            net_type=NetworkType.parse(tokens[0]),
            address_type=AddressType.parse(tokens[1]),
            address=address_parts[0],
            ttl=ttl,
            num_addresses=num_addresses,
            suffix=tokens.tail(3),
        )

    def serialize(self) -> str:  # noqa: D102
        value = " ".join((
            self.net_type.serialize(),
            self.address_type.serialize(),
            self.connection_address,
        ))
        if self.suffix is not None:
            value = f"{value} {self.suffix}"
        return value


@dataclass(frozen=True)
class SDPBandwidthField(SDPField, ABC):
    """
    SDP bandwidth field, defined in :rfc:`4566#section-5.8`.

    Spec::
        b=<bwtype>:<bandwidth>
    """

    _type = "b"

    bandwidth_type: BandwidthType
    bandwidth: int

    @classmethod
    @override
    def from_raw_value(cls, raw_value: str) -> Self:
        bandwidth_type, bandwidth = Tokens(raw_value, ":").expect(2)
        return cls(
            bandwidth_type=BandwidthType.parse(bandwidth_type),
            bandwidth=parse_uint(bandwidth),
        )

    def serialize(self) -> str:  # noqa: D102
        return f"{self.bandwidth_type.serialize()}:{self.bandwidth}"


@dataclass(frozen=True)
class SDPEncryptionField(SDPField, ABC):
    """
    SDP encryption keys field, defined in :rfc:`4566#section-5.12`.

    Spec::
        k=<method>
        k=<method>:<encryption key>

    The ``prompt`` method never carries a key, the others carry everything
    after the first ``:`` as key.
    """

    _type = "k"

    method: EncryptionMethod
    key: str | None = None

    @classmethod
    @override
    def from_raw_value(cls, raw_value: str) -> Self:
        if raw_value == EncryptionMethod.PROMPT.value:
            return cls(method=EncryptionMethod.PROMPT)
        method_token, separator, key = raw_value.partition(":")
        method = EncryptionMethod.parse(method_token)
        if method is EncryptionMethod.PROMPT:
            raise SDPUnknownTokenError(
                raw_value, f"Encryption method prompt takes no key: {raw_value!r}"
            )
        return cls(method=method, key=key if separator else None)

    def serialize(self) -> str:  # noqa: D102
        if self.key is None:
            return self.method.serialize()
        return f"{self.method.serialize()}:{self.key}"


@dataclass(frozen=True)
class SDPAttributeField(SDPField, ABC):
    """
    SDP attribute field, defined in :rfc:`4566#section-5.13`.

    Spec::
        a=<attribute>
        a=<attribute>:<value>

    Attributes without a value are flags (e.g. ``a=recvonly``). The value of
    the other attributes is everything after the first ``:``.
    """

    _type = "a"

    key: str
    value: str | None = None

    @property
    def is_flag(self) -> bool:
        """Whether the attribute is a flag, i.e. has no value."""
        return self.value is None

    @classmethod
    @override
    def from_raw_value(cls, raw_value: str) -> Self:
        key, separator, value = raw_value.partition(":")
        return cls(key=key, value=value if separator else None)

    def serialize(self) -> str:  # noqa: D102
        return self.key if self.value is None else f"{self.key}:{self.value}"
