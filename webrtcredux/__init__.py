"""webrtcredux is a Session Description Protocol (SDP) library for WebRTC negotiation."""

from ._package_metadata import get_metadata as _metadata


__title__ = _metadata("Name", ["project", "name"])
__description__ = _metadata("Summary", ["project", "description"])
__url__ = _metadata("Home-page", ["project", "urls", "homepage"])
__author__ = _metadata("Author", ["project", "authors", 0, "name"])
__version__ = _metadata("Version", ["project", "version"])
__license__ = _metadata("License", ["project", "license", "text"])


from .sdp import *
