"""Exception classes for the rtcsdp library."""

from __future__ import annotations

from typing import Any


__all__ = [
    "RTCSDPException",
    "ParseError",
    "SDPException",
    "SDPParseError",
    "SDPUnknownFieldError",
    "SDPSemanticError",
    "TransportError",
]


class RTCSDPException(Exception):
    """Base class for all custom library exceptions."""


class ParseError(RTCSDPException, ValueError):
    """Raised when some data cannot be parsed."""


class SDPException(RTCSDPException):
    """Base class for all exceptions raised by the SDP module."""


class SDPParseError(SDPException, ParseError):
    """
    Exception related to SDP data parsing.

    When raised while parsing a whole document, ``line_number`` (1-based)
    and ``line`` point to the offending line.
    """

    def __init__(self, *args: Any, **kwargs: Any):
        self.line_number: int | None = kwargs.pop("line_number", None)
        self.line: str | None = kwargs.pop("line", None)
        super().__init__(*args, **kwargs)

    def __str__(self) -> str:
        message = super().__str__()
        if self.line_number is not None:
            return f"line {self.line_number} ({self.line!r}): {message}"
        return message


class SDPUnknownFieldError(SDPParseError):
    """Exception raised when an unknown SDP field is encountered."""


class SDPSemanticError(SDPException, ValueError):
    """Raised when a well-formed SDP document cannot be projected onto the WebRTC session model."""


class TransportError(RTCSDPException):
    """Raised when the media transport engine fails during negotiation."""
