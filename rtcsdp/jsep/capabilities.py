"""Filtering of negotiated sessions to the media engine capabilities."""

from __future__ import annotations

import dataclasses
import logging

from rtcsdp.constants import (
    SUPPORTED_AUDIO_CODECS,
    SUPPORTED_AUDIO_EXTENSIONS,
    SUPPORTED_H264_PACKETIZATION_MODES,
    SUPPORTED_VIDEO_CODECS,
    SUPPORTED_VIDEO_EXTENSIONS,
    SUPPORTED_VIDEO_RTCP_FEEDBACK,
)
from rtcsdp.sdp import MediaType, RtpCodecName

from .session import RtpMediaDescription, RtpPayload, UnifiedBundleSession


__all__ = [
    "is_payload_supported",
    "filter_media_to_capabilities",
    "filter_to_capabilities",
]


_logger = logging.getLogger(__name__)


def is_payload_supported(kind: MediaType, payload: RtpPayload) -> bool:
    """Whether the payload codec is supported for the given media kind."""
    codec = payload.codec.value.lower()
    if kind == MediaType.AUDIO:
        return codec in SUPPORTED_AUDIO_CODECS
    if kind == MediaType.VIDEO:
        if payload.codec == RtpCodecName.H264:
            mode = payload.parameters.get("packetization-mode")
            return mode in SUPPORTED_H264_PACKETIZATION_MODES
        return codec in SUPPORTED_VIDEO_CODECS
    return False


def filter_media_to_capabilities(media: RtpMediaDescription) -> RtpMediaDescription:
    """
    Restrict a media description to the supported payloads, feedback and extensions.

    RTCP feedback is only supported on video. Media that are neither audio
    nor video keep no payloads and no extensions.
    """
    supported_extensions: frozenset[str] = frozenset()
    if media.kind == MediaType.AUDIO:
        supported_extensions = SUPPORTED_AUDIO_EXTENSIONS
    elif media.kind == MediaType.VIDEO:
        supported_extensions = SUPPORTED_VIDEO_EXTENSIONS

    payloads: list[RtpPayload] = []
    for payload in media.payloads:
        if not is_payload_supported(media.kind, payload):
            _logger.debug(
                f"Removing unsupported {media.kind} payload {payload.codec} ({payload.payload_type})"
            )
            continue
        feedback = (
            [item for item in payload.feedback if item in SUPPORTED_VIDEO_RTCP_FEEDBACK]
            if media.kind == MediaType.VIDEO
            else []
        )
        payloads.append(
            dataclasses.replace(payload, parameters=dict(payload.parameters), feedback=feedback)
        )

    return dataclasses.replace(
        media,
        bandwidths=dict(media.bandwidths),
        payloads=payloads,
        encodings=list(media.encodings),
        extensions={
            uri: extension_id
            for uri, extension_id in media.extensions.items()
            if uri in supported_extensions
        },
    )


def filter_to_capabilities(session: UnifiedBundleSession) -> UnifiedBundleSession:
    """
    Build a copy of the session restricted to the media engine capabilities.

    Anything unsupported is removed, the negotiation is never rejected.
    """
    return dataclasses.replace(
        session,
        candidates=list(session.candidates),
        fingerprints=list(session.fingerprints),
        media_descriptions=[
            filter_media_to_capabilities(media) for media in session.media_descriptions
        ],
    )
