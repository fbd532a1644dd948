"""SDP media description and related fields definitions and implementations."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from frozendict import frozendict
from typing_extensions import Self, override

from webrtcredux.constants import MAX_PORT
from webrtcredux.exceptions import SDPMalformedLineError, SDPParseError
from webrtcredux.helpers import slots_dataclass

from .common import (
    SDPAttributeField,
    SDPBandwidthField,
    SDPConnectionField,
    SDPEncryptionField,
    SDPInformationField,
    SDPMediaFields,
    SDPSessionFields,
    Tokens,
    attach_line,
    parse_uint,
)
from .enums import LineEnding, MediaFlowType, MediaType, TransportProtocol, is_rtp_protocol


__all__ = [
    "SDPMediaTitle",
    "SDPMediaConnection",
    "SDPMediaBandwidth",
    "SDPMediaEncryption",
    "SDPMediaAttribute",
    "RTPMap",
    "FormatParameters",
    "MediaFormat",
    "get_media_flow_type",
    "SDPMedia",
]


_logger = logging.getLogger(__name__)


@slots_dataclass(frozen=True)
class SDPMediaTitle(SDPInformationField, SDPMediaFields):
    """
    SDP media title field, defined in :rfc:`4566#section-5.4`.

    Spec::
        i=<media title>
    """

    _description = "media title"

    @property
    def title(self) -> str:
        """The media title."""
        return self.value


@slots_dataclass(frozen=True)
class SDPMediaConnection(SDPConnectionField, SDPMediaFields):
    """
    SDP media connection field, defined in :rfc:`4566#section-5.7`.

    Spec::
        c=<nettype> <addrtype> <connection-address>
    """

    _description = "connection information -- optional if included at session-level"


@slots_dataclass(frozen=True)
class SDPMediaBandwidth(SDPBandwidthField, SDPMediaFields):
    """
    SDP media bandwidth field, defined in :rfc:`4566#section-5.8`.

    Spec::
        b=<bwtype>:<bandwidth>
    """

    _description = "zero or more bandwidth information lines"


@slots_dataclass(frozen=True)
class SDPMediaEncryption(SDPEncryptionField, SDPMediaFields):
    """
    SDP media encryption keys field, defined in :rfc:`4566#section-5.12`.

    Spec::
        k=<method>
        k=<method>:<encryption key>
    """

    _description = "encryption key"


@slots_dataclass(frozen=True)
class SDPMediaAttribute(SDPAttributeField, SDPMediaFields):
    """
    SDP media attribute field, defined in :rfc:`4566#section-5.13`.

    Spec::
        a=<attribute>
        a=<attribute>:<value>
    """

    _description = "zero or more media attribute lines"


@slots_dataclass(frozen=True)
class RTPMap:
    """
    Value of the rtpmap attribute, defined in :rfc:`4566#section-6`.

    Spec::
        rtpmap:<payload type> <encoding name>/<clock rate>[/<encoding parameters>]
    """

    payload_type: int
    encoding_name: str
    clock_rate: int
    encoding_parameters: str | None = None

    @classmethod
    def parse(cls, raw_value: str) -> Self:  # noqa: D102
        payload_type, separator, encoding = raw_value.partition(" ")
        if not separator:
            raise SDPMalformedLineError(f"Invalid rtpmap value {raw_value!r}")
        encoding_tokens = Tokens(encoding, "/").expect(min_count=2)
        return cls(
            payload_type=parse_uint(payload_type),
            encoding_name=encoding_tokens[0],
            clock_rate=parse_uint(encoding_tokens[1]),
            encoding_parameters=encoding_tokens.tail(2),
        )

    def serialize(self) -> str:  # noqa: D102
        data = f"{self.payload_type} {self.encoding_name}/{self.clock_rate}"
        if self.encoding_parameters is not None:
            data += f"/{self.encoding_parameters}"
        return data


@slots_dataclass(frozen=True)
class FormatParameters:
    """
    Value of the fmtp attribute, defined in :rfc:`4566#section-6`.

    Spec::
        fmtp:<format> <format specific parameters>

    Parameters are commonly written as ``;``-separated ``key=value`` pairs,
    which are also exposed as a read-only mapping.
    """

    format: int
    parameters: str

    @property
    def parameters_map(self) -> Mapping[str, str | None]:
        """The ``;``-separated parameters as a mapping, with None for valueless ones."""
        items: dict[str, str | None] = {}
        for parameter in self.parameters.split(";"):
            parameter = parameter.strip()
            if not parameter:
                continue
            key, separator, value = parameter.partition("=")
            items[key.strip()] = value.strip() if separator else None
        return frozendict(items)

    @classmethod
    def parse(cls, raw_value: str) -> Self:  # noqa: D102
        format_, separator, parameters = raw_value.partition(" ")
        if not separator:
            raise SDPMalformedLineError(f"Invalid fmtp value {raw_value!r}")
        return cls(format=parse_uint(format_), parameters=parameters)

    def serialize(self) -> str:  # noqa: D102
        return f"{self.format} {self.parameters}"


@slots_dataclass(frozen=True)
class MediaFormat:
    """A codec of a media description, merged from its rtpmap and fmtp attributes."""

    payload_type: int
    media_type: MediaType
    encoding_name: str
    clock_rate: int
    channels: int | None = None
    format_specific_parameters: str | None = None

    @property
    def mimetype(self) -> str:
        """The mimetype of the format, e.g. ``audio/opus``."""
        return f"{self.media_type.value}/{self.encoding_name}".lower()


def get_media_flow_type(
    attributes: Iterable[SDPAttributeField],
) -> MediaFlowType | None:
    """
    Return the media flow type from the given attributes, if any.

    :raises SDPParseError: if more than one media flow attribute is found.
    """
    flow_tokens = {flow_type.value for flow_type in MediaFlowType}
    media_flow_type: MediaFlowType | None = None
    for attribute in attributes:
        if attribute.is_flag and attribute.key in flow_tokens:
            if media_flow_type is not None:
                raise SDPParseError(
                    f"Multiple media flow attributes: {media_flow_type.value}, {attribute.key}"
                )
            media_flow_type = MediaFlowType.parse(attribute.key)
    return media_flow_type


@slots_dataclass(frozen=True)
class SDPMedia(SDPSessionFields):
    """
    SDP media description, defined in :rfc:`4566#section-5.14`.

    Spec::
        m=<media> <port> <proto> <fmt> ...
        m=<media> <port>/<number of ports> <proto> <fmt> ...

    Holds the media-level fields that follow the ``m=`` line, up to the next
    media description, in their original order as :attr:`props`.
    """

    _type = "m"
    _description = "media name and transport address"

    media_type: MediaType
    ports: tuple[int, ...]
    protocol: str
    format: str | None = None
    props: tuple[SDPMediaFields, ...] = ()

    @classmethod
    @override
    def from_raw_value(cls, raw_value: str) -> Self:
        """
        Parse a media block: the ``m=`` line value, followed by its nested lines.

        :param raw_value: the media line value, optionally followed by ``\\n``
            and the ``\\n``-separated media-level lines.
        :return: the media description.
        """
        header, _, nested = raw_value.partition("\n")
        with attach_line(f"{cls._type}={header}"):
            tokens = Tokens(header).expect(min_count=3)
            media_type = MediaType.parse(tokens[0])
            ports = tuple(
                parse_uint(port, max_value=MAX_PORT) for port in Tokens(tokens[1], "/")
            )
        props: tuple[SDPMediaFields, ...] = ()
        if nested:
            props = tuple(SDPMediaFields.parse(line) for line in nested.split("\n"))
        return cls(
            media_type=media_type,
            ports=ports,
            protocol=tokens[2],
            format=tokens.tail(3),
            props=props,
        )

    def serialize(self) -> str:
        """Serialize the media line value, without the nested media-level fields."""
        parts = [
            self.media_type.serialize(),
            "/".join(str(port) for port in self.ports),
            self.protocol,
        ]
        if self.format is not None:
            parts.append(self.format)
        return " ".join(parts)

    def serialize_line(self, line_ending: LineEnding | str) -> str:
        """Serialize the media line, followed by all the nested media-level fields."""
        line_ending = LineEnding(line_ending)
        return line_ending.value.join([
            str(self),
            *(prop.serialize_line(line_ending) for prop in self.props),
        ])

    @property
    def port(self) -> int:
        """The first (usually the only) port of the media description."""
        return self.ports[0]

    @property
    def formats(self) -> tuple[str, ...]:
        """The media format tokens (e.g. RTP payload types) of the media description."""
        return tuple(self.format.split()) if self.format else ()

    @property
    def transport_protocol(self) -> TransportProtocol:
        """The transport protocol, as a known enum value."""
        return TransportProtocol.parse(self.protocol)

    @property
    def title(self) -> SDPMediaTitle | None:
        """The media title field, if any."""
        return next((p for p in self.props if isinstance(p, SDPMediaTitle)), None)

    @property
    def connection(self) -> SDPMediaConnection | None:
        """The media-level connection field, if any."""
        return next((p for p in self.props if isinstance(p, SDPMediaConnection)), None)

    @property
    def bandwidths(self) -> tuple[SDPMediaBandwidth, ...]:
        """The media-level bandwidth fields."""
        return tuple(p for p in self.props if isinstance(p, SDPMediaBandwidth))

    @property
    def encryption(self) -> SDPMediaEncryption | None:
        """The media-level encryption keys field, if any."""
        return next((p for p in self.props if isinstance(p, SDPMediaEncryption)), None)

    @property
    def attributes(self) -> tuple[SDPMediaAttribute, ...]:
        """The media-level attribute fields, in order."""
        return tuple(p for p in self.props if isinstance(p, SDPMediaAttribute))

    def get_attributes(self, key: str) -> tuple[SDPMediaAttribute, ...]:
        """Return all the media attributes with the given key, in order."""
        return tuple(attr for attr in self.attributes if attr.key == key)

    def get_attribute(self, key: str) -> SDPMediaAttribute | None:
        """Return the first media attribute with the given key, if any."""
        return next(iter(self.get_attributes(key)), None)

    @property
    def media_flow_type(self) -> MediaFlowType | None:
        """Media flow type, extracted from the media attributes."""
        return get_media_flow_type(self.attributes)

    @property
    def rtpmaps(self) -> dict[int, RTPMap]:
        """The rtpmap attributes values, by payload type."""
        return {
            rtpmap.payload_type: rtpmap
            for rtpmap in (
                RTPMap.parse(attr.value or "") for attr in self.get_attributes("rtpmap")
            )
        }

    @property
    def format_parameters(self) -> dict[int, FormatParameters]:
        """The fmtp attributes values, by payload type."""
        return {
            fmtp.format: fmtp
            for fmtp in (
                FormatParameters.parse(attr.value or "")
                for attr in self.get_attributes("fmtp")
            )
        }

    @property
    def media_formats(self) -> list[MediaFormat]:
        """
        List of media formats, built from the rtpmap and fmtp attributes.

        Only RTP media descriptions have media formats. Attributes referring
        to payload types that are not listed in the media line are skipped.
        """
        # raw protocol, so that unlisted RTP profiles still have formats
        if not is_rtp_protocol(self.protocol):
            return []

        known_formats = set(self.formats)
        rtpmap_map = self.rtpmaps
        fmtp_map = self.format_parameters
        for payload_type in fmtp_map.keys() - rtpmap_map.keys():
            _logger.warning(f"fmtp attribute refers to a format without rtpmap: {payload_type}")

        formats: list[MediaFormat] = []
        for payload_type, rtpmap in rtpmap_map.items():
            if str(payload_type) not in known_formats:
                _logger.warning(
                    f"rtpmap attribute refers to unknown format (known: {sorted(known_formats)}): "
                    f"{payload_type}"
                )
                continue
            fmtp: FormatParameters | None = fmtp_map.get(payload_type)
            channels: int | None = None
            if rtpmap.encoding_parameters and rtpmap.encoding_parameters.isdigit():
                channels = int(rtpmap.encoding_parameters)
            formats.append(
                MediaFormat(
                    payload_type=payload_type,
                    media_type=self.media_type,
                    encoding_name=rtpmap.encoding_name,
                    clock_rate=rtpmap.clock_rate,
                    channels=channels,
                    format_specific_parameters=fmtp.parameters if fmtp else None,
                )
            )
        return formats
