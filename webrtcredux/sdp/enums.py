"""Closed vocabularies of SDP tokens, and serialization options."""

from __future__ import annotations

import enum

from typing_extensions import Self

from webrtcredux.constants import RTP_PROTOCOL_MARKER
from webrtcredux.exceptions import SDPUnknownTokenError


__all__ = [
    "TokenEnum",
    "NetworkType",
    "AddressType",
    "BandwidthType",
    "MediaType",
    "TransportProtocol",
    "is_rtp_protocol",
    "EncryptionMethod",
    "MediaFlowType",
    "LineEnding",
]


class TokenEnum(enum.Enum):
    """
    Base enum class for SDP tokens.

    Members' values are the exact textual tokens used on the wire.
    Parsing is case-sensitive and doesn't do any normalization.
    """

    @classmethod
    def parse(cls, token: str) -> Self:
        """
        Parse a token into a member of this enum.

        :param token: the raw token.
        :return: the matching enum member.
        :raises SDPUnknownTokenError: if the token doesn't match any member.
        """
        for member in cls:
            if member.value == token:
                return member
        raise SDPUnknownTokenError(token, f"Unknown {cls.__name__} token {token!r}")

    def serialize(self) -> str:
        """Serialize the member back to its textual token."""
        return str(self.value)

    def __str__(self) -> str:
        return self.serialize()


class NetworkType(TokenEnum):
    """SDP network type, defined in :rfc:`4566#section-5.2`."""

    INTERNET = "IN"


class AddressType(TokenEnum):
    """SDP address type, defined in :rfc:`4566#section-5.2`."""

    IP4 = "IP4"
    IP6 = "IP6"


class BandwidthType(TokenEnum):
    """SDP bandwidth type, defined in :rfc:`4566#section-5.8` and :rfc:`3890`."""

    CONFERENCE_TOTAL = "CT"
    APPLICATION_SPECIFIC = "AS"
    TRANSPORT_INDEPENDENT = "TIAS"


class MediaType(TokenEnum):
    """SDP media type, defined in :rfc:`4566#section-5.14`."""

    AUDIO = "audio"
    VIDEO = "video"
    TEXT = "text"
    APPLICATION = "application"
    MESSAGE = "message"


class TransportProtocol(TokenEnum):
    """Transport protocols found in SDP media descriptions."""

    UDP = "udp"
    RTP_AVP = "RTP/AVP"
    RTP_SAVP = "RTP/SAVP"
    RTP_AVPF = "RTP/AVPF"
    RTP_SAVPF = "RTP/SAVPF"
    UDP_TLS_RTP_SAVP = "UDP/TLS/RTP/SAVP"
    UDP_TLS_RTP_SAVPF = "UDP/TLS/RTP/SAVPF"
    TCP_TLS_RTP_SAVPF = "TCP/TLS/RTP/SAVPF"
    DTLS_SCTP = "DTLS/SCTP"
    UDP_DTLS_SCTP = "UDP/DTLS/SCTP"
    TCP_DTLS_SCTP = "TCP/DTLS/SCTP"

    @property
    def is_rtp(self) -> bool:
        """Whether the protocol carries RTP media."""
        return is_rtp_protocol(self.value)


def is_rtp_protocol(protocol: str) -> bool:
    """Whether a raw transport protocol token, known or not, carries RTP media."""
    return RTP_PROTOCOL_MARKER in protocol


class EncryptionMethod(TokenEnum):
    """SDP encryption key method, defined in :rfc:`4566#section-5.12`."""

    CLEAR = "clear"
    BASE64 = "base64"
    URI = "uri"
    PROMPT = "prompt"


class MediaFlowType(TokenEnum):
    """SDP media flow direction attributes, defined in :rfc:`4566#section-6`."""

    SENDRECV = "sendrecv"
    SENDONLY = "sendonly"
    RECVONLY = "recvonly"
    INACTIVE = "inactive"


class LineEnding(enum.Enum):
    """Line terminators that can be used when serializing SDP."""

    LF = "\n"
    CRLF = "\r\n"
