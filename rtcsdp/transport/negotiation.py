"""Offer/answer negotiation of WebRTC sessions, driving a media engine."""

from __future__ import annotations

import logging
from dataclasses import field as dataclass_field
from typing import Optional

from rtcsdp.constants import (
    DEFAULT_FINGERPRINT_HASH,
    HOST_CANDIDATE_COMPONENT,
    HOST_CANDIDATE_FOUNDATION,
    HOST_CANDIDATE_PRIORITY,
)
from rtcsdp.exceptions import SDPSemanticError
from rtcsdp.helpers import get_public_ip, slots_dataclass
from rtcsdp.jsep import (
    RidEncoding,
    RtpMediaDescription,
    UnifiedBundleSession,
    filter_to_capabilities,
)
from rtcsdp.sdp import (
    CandidateAttribute,
    FingerprintHashFunction,
    IceCandidateType,
    IceTransportType,
    MediaType,
    SetupRole,
)
from rtcsdp.structures import CertificateFingerprint

from .base import Connection, MediaEngine, SourceGroup, Transport, TransportProperties


__all__ = [
    "NegotiationConfig",
    "NegotiatedSession",
    "ice_properties",
    "rtp_properties",
    "Negotiator",
]


_logger = logging.getLogger(__name__)


@slots_dataclass
class NegotiationConfig:
    """
    Runtime options of the negotiation.

    :param public_ip: the address advertised in the local host candidate.
        If None, it's resolved through public IP lookup services.
    :param fingerprint_hash: the hash function of the DTLS fingerprints.
    :param ice_lite: whether answers advertise an ICE lite implementation.
    :param local_port: the local port of created transports, or None for a random one.
    """

    public_ip: Optional[str] = None
    fingerprint_hash: FingerprintHashFunction = FingerprintHashFunction(DEFAULT_FINGERPRINT_HASH)
    ice_lite: bool = True
    local_port: Optional[int] = None

    def resolve_public_ip(self) -> str:
        """The configured public IP, or the one resolved for this machine."""
        return self.public_ip if self.public_ip is not None else get_public_ip()


@slots_dataclass
class NegotiatedSession:
    """The outcome of a negotiation: the answer, and the engine objects handling it."""

    offer: UnifiedBundleSession
    answer: UnifiedBundleSession
    transport: Transport
    connection: Connection
    source_groups: list[SourceGroup] = dataclass_field(default_factory=list)


def ice_properties(
    offer: UnifiedBundleSession,
    answer: UnifiedBundleSession,
    remote_fingerprint: CertificateFingerprint,
    config: NegotiationConfig,
) -> TransportProperties:
    """Build the ICE and DTLS properties of a new connection."""
    return TransportProperties({
        "ice.localUsername": answer.ice_ufrag,
        "ice.localPassword": answer.ice_pwd,
        "ice.remoteUsername": offer.ice_ufrag,
        "ice.remotePassword": offer.ice_pwd,
        "dtls.setup": str(offer.setup_role),
        "dtls.hash": str(config.fingerprint_hash).upper(),
        "dtls.fingerprint": str(remote_fingerprint),
        "disableSTUNKeepAlive": False,
        "srtpProtectionProfiles": "",
    })


def _add_media_properties(properties: TransportProperties, media: RtpMediaDescription) -> None:
    kind = media.kind
    for i, payload in enumerate(media.payloads):
        properties[f"{kind}.codecs.{i}.codec"] = str(payload.codec)
        properties[f"{kind}.codecs.{i}.pt"] = payload.payload_type
        if payload.rtx_payload_type is not None:
            properties[f"{kind}.codecs.{i}.rtx"] = payload.rtx_payload_type
    properties[f"{kind}.codecs.length"] = len(media.payloads)

    for i, (uri, extension_id) in enumerate(media.extensions.items()):
        properties[f"{kind}.ext.{i}.id"] = extension_id
        properties[f"{kind}.ext.{i}.uri"] = uri
    properties[f"{kind}.ext.length"] = len(media.extensions)


def rtp_properties(session: UnifiedBundleSession) -> TransportProperties:
    """Build the RTP properties (codecs and extensions) of the first audio and video media."""
    properties = TransportProperties()
    for kind in (MediaType.AUDIO, MediaType.VIDEO):
        media = next((md for md in session.media_descriptions if md.kind == kind), None)
        if media is not None:
            _add_media_properties(properties, media)
    return properties


class Negotiator:
    """
    Answers WebRTC offers, setting up the media engine transports for them.

    Errors raised by the engine are propagated as they are.
    """

    def __init__(self, engine: MediaEngine, config: Optional[NegotiationConfig] = None):
        self.engine: MediaEngine = engine
        self.config: NegotiationConfig = config if config is not None else NegotiationConfig()

    def host_candidate(self, port: int) -> CandidateAttribute:
        """The local host candidate, for the given transport port."""
        return CandidateAttribute(
            foundation=HOST_CANDIDATE_FOUNDATION,
            component=HOST_CANDIDATE_COMPONENT,
            transport=IceTransportType.UDP,
            priority=HOST_CANDIDATE_PRIORITY,
            address=self.config.resolve_public_ip(),
            port=port,
            type=IceCandidateType.HOST,
        )

    def build_answer(self, offer: UnifiedBundleSession, transport: Transport) -> UnifiedBundleSession:
        """
        Build the answer to an offer, restricted to the engine capabilities.

        An ``actpass`` offer is answered as ``passive``.
        """
        setup_role = SetupRole.PASSIVE if offer.setup_role == SetupRole.ACTPASS else None
        answer = filter_to_capabilities(offer.answer(setup_role=setup_role))
        answer.ice_lite = self.config.ice_lite
        answer.candidates.append(self.host_candidate(transport.local_port))

        hash_function = self.config.fingerprint_hash
        local_fingerprint = CertificateFingerprint.parse(
            self.engine.certificate_fingerprint(hash_function)
        )
        answer.fingerprints.append((hash_function, local_fingerprint))
        return answer

    def handle_offer(self, offer: UnifiedBundleSession) -> NegotiatedSession:
        """
        Answer an offer, creating the transport and connection that will handle it.

        :raises SDPSemanticError: if the offer has no fingerprint for the configured hash.
        """
        hash_function = self.config.fingerprint_hash
        remote_fingerprint = offer.fingerprint(hash_function)
        if remote_fingerprint is None:
            raise SDPSemanticError(f"{hash_function} dtls fingerprint missing from offer")

        transport = self.engine.create_transport(self.config.local_port)
        answer = self.build_answer(offer, transport)
        _logger.info(
            f"Answering offer {offer.id} with session {answer.id} on port {transport.local_port}"
        )

        username = f"{answer.ice_ufrag}:{offer.ice_ufrag}"
        connection = transport.add_connection(
            username, ice_properties(offer, answer, remote_fingerprint, self.config)
        )
        connection.set_remote_properties(rtp_properties(offer))
        connection.set_local_properties(rtp_properties(answer))

        source_groups: list[SourceGroup] = []
        for media in offer.media_descriptions:
            if media.kind not in {MediaType.AUDIO, MediaType.VIDEO}:
                continue
            for encoding in media.encodings:
                if isinstance(encoding, RidEncoding):
                    source_group = connection.add_incoming_source_group(
                        media.kind, mid=media.mid, rid=encoding.rid
                    )
                else:
                    source_group = connection.add_incoming_source_group(
                        media.kind, mid=media.mid, ssrc=encoding.ssrc, rtx_ssrc=encoding.rtx_ssrc
                    )
                source_groups.append(source_group)

        _logger.info(
            f"Connection {username} ready with {len(source_groups)} incoming source groups"
        )
        return NegotiatedSession(
            offer=offer,
            answer=answer,
            transport=transport,
            connection=connection,
            source_groups=source_groups,
        )
