"""SDP session description fields, and the whole session description document."""

from __future__ import annotations

import logging
from dataclasses import field as dataclass_field
from typing import Iterator

from typing_extensions import Self, override

from webrtcredux.constants import MAX_SDP_VERSION, SDP_MIMETYPE, SUPPORTED_SDP_VERSIONS
from webrtcredux.exceptions import SDPMalformedLineError
from webrtcredux.helpers import StrValueMixin, slots_dataclass

from .common import (
    SDPAttributeField,
    SDPBandwidthField,
    SDPConnectionField,
    SDPEncryptionField,
    SDPInformationField,
    SDPSessionFields,
    Tokens,
    parse_uint,
)
from .enums import AddressType, LineEnding, MediaFlowType, NetworkType
from .media import SDPMedia, get_media_flow_type
from .time import SDPSessionRepeatTimes, SDPSessionTimezone, SDPSessionTiming  # noqa: F401


__all__ = [
    "SDPSessionVersion",
    "SDPSessionOrigin",
    "SDPSessionName",
    "SDPSessionInformation",
    "SDPSessionURI",
    "SDPSessionEmail",
    "SDPSessionPhone",
    "SDPSessionConnection",
    "SDPSessionBandwidth",
    "SDPSessionEncryption",
    "SDPSessionAttribute",
    "group_records",
    "SDPSession",
    "parse_sdp",
    "serialize_sdp",
]


_logger = logging.getLogger(__name__)


@slots_dataclass(frozen=True)
class SDPSessionVersion(SDPSessionFields):
    """
    SDP version field, defined in :rfc:`4566#section-5.1`.

    Spec::
        v=0
    """

    _type = "v"
    _description = "protocol version"

    version: int

    @classmethod
    @override
    def from_raw_value(cls, raw_value: str) -> Self:
        version = parse_uint(raw_value, max_value=MAX_SDP_VERSION)
        if version not in SUPPORTED_SDP_VERSIONS:
            _logger.warning(f"Unsupported SDP version {version}, parsing anyway")
        return cls(version=version)

    def serialize(self) -> str:  # noqa: D102
        return str(self.version)


@slots_dataclass(frozen=True)
class SDPSessionOrigin(SDPSessionFields):
    """
    SDP origin field, defined in :rfc:`4566#section-5.2`.

    Spec::
        o=<username> <sess-id> <sess-version> <nettype> <addrtype> <unicast-address>
    """

    _type = "o"
    _description = "originator and session identifier"

    username: str
    session_id: str
    session_version: int
    net_type: NetworkType
    address_type: AddressType
    address: str

    @classmethod
    @override
    def from_raw_value(cls, raw_value: str) -> Self:
        (
            username,
            session_id,
            session_version,
            net_type,
            address_type,
            address,
        ) = Tokens(raw_value).expect(6)
        return cls(
            username=username,
            session_id=session_id,
            session_version=parse_uint(session_version),
            net_type=NetworkType.parse(net_type),
            address_type=AddressType.parse(address_type),
            address=address,
        )

    def serialize(self) -> str:  # noqa: D102
        return " ".join((
            self.username,
            self.session_id,
            str(self.session_version),
            self.net_type.serialize(),
            self.address_type.serialize(),
            self.address,
        ))


@slots_dataclass(frozen=True)
class SDPSessionName(StrValueMixin, SDPSessionFields):
    """
    SDP session name field, defined in :rfc:`4566#section-5.3`.

    Spec::
        s=<session name>
    """

    _type = "s"
    _description = "session name"


@slots_dataclass(frozen=True)
class SDPSessionInformation(SDPInformationField, SDPSessionFields):
    """
    SDP session information field, defined in :rfc:`4566#section-5.4`.

    Spec::
        i=<session description>
    """

    _description = "session information"


@slots_dataclass(frozen=True)
class SDPSessionURI(StrValueMixin, SDPSessionFields):
    """
    SDP session URI field, defined in :rfc:`4566#section-5.5`.

    Spec::
        u=<uri>
    """

    _type = "u"
    _description = "URI of description"


@slots_dataclass(frozen=True)
class SDPSessionEmail(StrValueMixin, SDPSessionFields):
    """
    SDP session email field, defined in :rfc:`4566#section-5.6`.

    Spec::
        e=<email-address>
    """

    _type = "e"
    _description = "email address"


@slots_dataclass(frozen=True)
class SDPSessionPhone(StrValueMixin, SDPSessionFields):
    """
    SDP session phone field, defined in :rfc:`4566#section-5.6`.

    Spec::
        p=<phone-number>
    """

    _type = "p"
    _description = "phone number"


@slots_dataclass(frozen=True)
class SDPSessionConnection(SDPConnectionField, SDPSessionFields):
    """
    SDP session connection field, defined in :rfc:`4566#section-5.7`.

    Spec::
        c=<nettype> <addrtype> <connection-address>
    """

    _description = "connection information -- not required if included in all media"


@slots_dataclass(frozen=True)
class SDPSessionBandwidth(SDPBandwidthField, SDPSessionFields):
    """
    SDP session bandwidth field, defined in :rfc:`4566#section-5.8`.

    Spec::
        b=<bwtype>:<bandwidth>
    """

    _description = "zero or more bandwidth information lines"


@slots_dataclass(frozen=True)
class SDPSessionEncryption(SDPEncryptionField, SDPSessionFields):
    """
    SDP session encryption keys field, defined in :rfc:`4566#section-5.12`.

    Spec::
        k=<method>
        k=<method>:<encryption key>
    """

    _description = "encryption key"


@slots_dataclass(frozen=True)
class SDPSessionAttribute(SDPAttributeField, SDPSessionFields):
    """
    SDP session attribute field, defined in :rfc:`4566#section-5.13`.

    Spec::
        a=<attribute>
        a=<attribute>:<value>
    """

    _description = "zero or more session attribute lines"


def group_records(raw_sdp: str) -> list[str]:
    """
    Split SDP text into records, one per top-level field.

    Every line following a media (``m=``) line, up to the next media line
    or the end of the text, is joined with ``\\n`` into that media record.
    Both ``\\r\\n`` and ``\\n`` line endings are accepted, blank lines are dropped.

    :param raw_sdp: the SDP text.
    :return: the list of records, in order.
    """
    records: list[str] = []
    in_media = False
    for line in raw_sdp.replace("\r\n", "\n").split("\n"):
        if not line.strip():
            continue
        if line.startswith(SDPMedia._type):  # noqa: SLF001
            in_media = True
            records.append(line)
        elif in_media:
            records[-1] = f"{records[-1]}\n{line}"
        else:
            records.append(line)
    return records


@slots_dataclass(frozen=True)
class SDPSession:
    """
    SDP session description, defined in :rfc:`4566#section-5`.

    An immutable, ordered sequence of top-level fields, exactly in wire order.
    Media descriptions hold their own media-level fields.
    """

    fields: tuple[SDPSessionFields, ...] = dataclass_field(default_factory=tuple)

    @classmethod
    def parse(cls, raw_value: str | bytes) -> Self:
        """
        Parse an SDP session description.

        :param raw_value: the SDP text, with either ``\\r\\n`` or ``\\n`` line endings.
            Bytes are decoded as UTF-8.
        :return: the parsed session description.
        :raises SDPParseError: if any of the lines cannot be parsed.
        """
        if isinstance(raw_value, bytes):
            try:
                raw_value = raw_value.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise SDPMalformedLineError(f"Invalid UTF-8 SDP data: {exc}") from exc

        fields: list[SDPSessionFields] = []
        for record in group_records(raw_value):
            fields.append(SDPSessionFields.parse(record))

        session = cls(fields=tuple(fields))
        _logger.debug(
            f"Parsed SDP session with {len(session.fields)} fields "
            f"and {len(session.media)} media descriptions"
        )
        return session

    def serialize(self, line_ending: LineEnding | str) -> str:
        """
        Serialize the SDP session description to text.

        :param line_ending: the line terminator to use, either a :class:`LineEnding`
            or its literal string value.
        :return: the SDP text, ending with exactly one line terminator.
        """
        line_ending = LineEnding(line_ending)
        lines = [field.serialize_line(line_ending) for field in self.fields]
        return line_ending.value.join(lines) + line_ending.value

    def __iter__(self) -> Iterator[SDPSessionFields]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    @property
    def mimetype(self) -> str:
        """The mimetype of the SDP session data. Always ``application/sdp``."""
        return SDP_MIMETYPE

    def _first(self, field_cls: type[SDPSessionFields]) -> SDPSessionFields | None:
        return next((f for f in self.fields if isinstance(f, field_cls)), None)

    @property
    def version(self) -> SDPSessionVersion | None:
        """The protocol version field, if any."""
        return self._first(SDPSessionVersion)  # type: ignore[return-value]

    @property
    def origin(self) -> SDPSessionOrigin | None:
        """The origin field, if any."""
        return self._first(SDPSessionOrigin)  # type: ignore[return-value]

    @property
    def name(self) -> SDPSessionName | None:
        """The session name field, if any."""
        return self._first(SDPSessionName)  # type: ignore[return-value]

    @property
    def connection(self) -> SDPSessionConnection | None:
        """The session-level connection field, if any."""
        return self._first(SDPSessionConnection)  # type: ignore[return-value]

    @property
    def timing(self) -> tuple[SDPSessionTiming, ...]:
        """The timing fields."""
        return tuple(f for f in self.fields if isinstance(f, SDPSessionTiming))

    @property
    def attributes(self) -> tuple[SDPSessionAttribute, ...]:
        """The session-level attribute fields, in order."""
        return tuple(f for f in self.fields if isinstance(f, SDPSessionAttribute))

    def get_attributes(self, key: str) -> tuple[SDPSessionAttribute, ...]:
        """Return all the session-level attributes with the given key, in order."""
        return tuple(attr for attr in self.attributes if attr.key == key)

    @property
    def media(self) -> tuple[SDPMedia, ...]:
        """The media descriptions, in order."""
        return tuple(f for f in self.fields if isinstance(f, SDPMedia))

    @property
    def media_flow_type(self) -> MediaFlowType | None:
        """The session-level media flow type, if any."""
        return get_media_flow_type(self.attributes)

    @property
    def connection_address(self) -> tuple[str, int] | None:
        """The advertised connection address and port to be used for media streams, if any."""
        addresses: list[tuple[str, int]] = [
            (connection.address, media.port)
            for media in self.media
            if (connection := media.connection or self.connection)
        ]
        if not addresses:
            return None
        if len(addresses) > 1:
            _logger.warning(
                "Multiple connection addresses found in SDP session, returning first one"
            )
        return addresses[0]


def parse_sdp(raw_value: str | bytes) -> SDPSession:
    """Parse SDP text into a :class:`SDPSession`. See :meth:`SDPSession.parse`."""
    return SDPSession.parse(raw_value)


def serialize_sdp(session: SDPSession, line_ending: LineEnding | str) -> str:
    """Serialize a :class:`SDPSession` to text. See :meth:`SDPSession.serialize`."""
    return session.serialize(line_ending)
