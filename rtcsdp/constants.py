"""Various constants used by the rtcsdp library."""

from __future__ import annotations

import re as _re
import typing as _typing


SUPPORTED_SDP_VERSIONS: list[str] = ["0"]
SDP_LINE_TERMINATOR: str = "\r\n"
SDP_MIMETYPE: str = "application/sdp"

ICE_UFRAG_LENGTH: int = 8
ICE_PWD_LENGTH: int = 24
SESSION_ID_MAX: int = 9_223_372_036_854_775_807

# placeholders used in JSEP bundled media sections, see RFC 8829 section 5.2.1
JSEP_DISCARD_PORT: int = 9
JSEP_DUMMY_ADDRESS: str = "0.0.0.0"
JSEP_ORIGIN_ADDRESS: str = "127.0.0.1"

# codecs and feedback supported by the media engine, per media kind
SUPPORTED_AUDIO_CODECS: frozenset[str] = frozenset({"opus", "pcmu", "pcma"})
SUPPORTED_VIDEO_CODECS: frozenset[str] = frozenset({"vp8", "vp9", "h264"})
SUPPORTED_H264_PACKETIZATION_MODES: frozenset[str] = frozenset({"1"})
SUPPORTED_VIDEO_RTCP_FEEDBACK: frozenset[tuple[str, str | None]] = frozenset({
    ("goog-remb", None),
    ("transport-cc", None),
    ("ccm", "fir"),
    ("nack", None),
    ("nack", "pli"),
})
SUPPORTED_AUDIO_EXTENSIONS: frozenset[str] = frozenset({
    "urn:ietf:params:rtp-hdrext:ssrc-audio-level",
    "urn:ietf:params:rtp-hdrext:sdes:mid",
    "urn:ietf:params:rtp-hdrext:sdes:rtp-stream-id",
    "http://www.webrtc.org/experiments/rtp-hdrext/abs-send-time",
})
SUPPORTED_VIDEO_EXTENSIONS: frozenset[str] = frozenset({
    "urn:3gpp:video-orientation",
    "http://www.ietf.org/id/draft-holmer-rmcat-transport-wide-cc-extensions-01",
    "urn:ietf:params:rtp-hdrext:sdes:mid",
    "urn:ietf:params:rtp-hdrext:sdes:rtp-stream-id",
    "urn:ietf:params:rtp-hdrext:sdes:repaired-rtp-stream-id",
    "http://www.webrtc.org/experiments/rtp-hdrext/abs-send-time",
})

# local host candidate advertised by the negotiator
HOST_CANDIDATE_FOUNDATION: str = "1"
HOST_CANDIDATE_COMPONENT: int = 1
HOST_CANDIDATE_PRIORITY: int = (2**24 * 126) + (2**8 * (65535 - 1)) + 255

PUBLIC_IP_LOOKUP_TIMEOUT: float = 5.0


def _cloudflare_trace_ip(body: str) -> str | None:
    match = _re.search(r"^ip=(\S+)$", body, _re.MULTILINE)
    return match.group(1) if match else None


PUBLIC_IP_RESOLVERS: list[tuple[str, _typing.Callable[[str], str | None] | None]] = [
    ("https://cloudflare.com/cdn-cgi/trace", _cloudflare_trace_ip),
    ("https://ident.me", None),
    ("https://ifconfig.me/ip", None),
    ("https://icanhazip.com/", None),
]

# DTLS fingerprint negotiated with the media engine
DEFAULT_FINGERPRINT_HASH: str = "sha-256"
