"""Exception classes for the webrtcredux library."""

from __future__ import annotations

from typing import Any


class WebRTCReduxException(Exception):
    """Base class for all custom library exceptions."""


class ParseError(WebRTCReduxException, ValueError):
    """Raised when some data cannot be parsed."""


class SDPException(WebRTCReduxException):
    """Base class for all exceptions raised by the SDP module."""


class SDPParseError(SDPException, ParseError):
    """
    Exception related to SDP data parsing.

    The offending SDP line, when known, is available as :attr:`line`.
    """

    def __init__(self, *args: Any, line: str | None = None):
        """Initialize the exception, with an optional `line` that failed parsing."""
        self.line: str | None = line
        super().__init__(*args)

    def __str__(self) -> str:
        message = super().__str__()
        if self.line is not None:
            message = f"{message} (line: {self.line!r})"
        return message


class SDPMalformedLineError(SDPParseError):
    """Raised when an SDP line isn't a ``<type>=<value>`` pair, or has missing tokens."""


class SDPUnknownKeyError(SDPParseError):
    """Raised when an SDP line has a type key that is not supported."""

    def __init__(self, key: str, value: str, *, line: str | None = None):
        """Initialize the exception with the unsupported `key` and its raw `value`."""
        self.key: str = key
        self.value: str = value
        super().__init__(f"Unknown SDP field type {key!r} with value {value!r}", line=line)


class SDPUnknownTokenError(SDPParseError):
    """Raised when a token in an SDP field doesn't match any of the known values."""

    def __init__(self, token: str, *args: Any, line: str | None = None):
        """Initialize the exception with the unrecognized `token`."""
        self.token: str = token
        super().__init__(*(args or (f"Unknown SDP token {token!r}",)), line=line)


class SDPNumericConversionError(SDPParseError):
    """Raised when an SDP field expects a non-negative integer but gets something else."""

    def __init__(self, token: str, *args: Any, line: str | None = None):
        """Initialize the exception with the `token` that failed conversion."""
        self.token: str = token
        super().__init__(
            *(args or (f"Expected a non-negative integer, got {token!r}",)), line=line
        )
