"""Various constants used by the webrtcredux library."""

from __future__ import annotations


SUPPORTED_SDP_VERSIONS: list[int] = [0]
MAX_SDP_VERSION: int = 255
MAX_PORT: int = 65535

SDP_MIMETYPE: str = "application/sdp"

RTP_PROTOCOL_MARKER: str = "RTP/"
