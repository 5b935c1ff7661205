"""
Simplified JSEP view of WebRTC sessions, as described in :rfc:`8829#section-5`.

The model targets unified-plan sessions with a single bundled transport
(max-bundle), carrying RTP media only. It has enough to negotiate a
multi-track session with modern browsers, anything else is dropped.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import field as dataclass_field
from typing import Sequence, Union

from typing_extensions import Self

from rtcsdp.constants import (
    ICE_PWD_LENGTH,
    ICE_UFRAG_LENGTH,
    JSEP_DISCARD_PORT,
    JSEP_DUMMY_ADDRESS,
    JSEP_ORIGIN_ADDRESS,
    SESSION_ID_MAX,
)
from rtcsdp.exceptions import SDPSemanticError
from rtcsdp.helpers import SDPEnum, random_token, slots_dataclass
from rtcsdp.sdp import (
    AddressType,
    AttributeMap,
    BandwidthType,
    CandidateAttribute,
    ExtensionMapAllowMixedFlag,
    ExtensionMapAttribute,
    FingerprintAttribute,
    FingerprintHashFunction,
    FormatParametersAttribute,
    GroupAttribute,
    GroupSemantics,
    IceLiteFlag,
    IceOption,
    IceOptionsAttribute,
    IcePwdAttribute,
    IceUfragAttribute,
    InactiveFlag,
    MediaType,
    MidAttribute,
    NetworkType,
    RecvOnlyFlag,
    RidAttribute,
    RidDirection,
    RtcpAttribute,
    RtcpFeedbackAttribute,
    RtcpMuxFlag,
    RtcpMuxOnlyFlag,
    RtcpReducedSizeFlag,
    RtpCodecName,
    RtpMapAttribute,
    SDPAttribute,
    SDPMedia,
    SDPMediaBandwidth,
    SDPMediaConnection,
    SDPMediaMedia,
    SDPSession,
    SDPSessionName,
    SDPSessionOrigin,
    SDPSessionVersion,
    SDPTime,
    SDPTimeTime,
    SendOnlyFlag,
    SendRecvFlag,
    SetupAttribute,
    SetupRole,
    SimulcastAttribute,
    SsrcAttribute,
    SsrcGroupAttribute,
    SsrcGroupSemantics,
    TransportProtocol,
)
from rtcsdp.structures import CertificateFingerprint


__all__ = [
    "MediaDirection",
    "RtpPayload",
    "RidEncoding",
    "SsrcEncoding",
    "RtpEncoding",
    "RtpMediaDescription",
    "UnifiedBundleSession",
]


_logger = logging.getLogger(__name__)


NON_MEDIA_CODECS: frozenset[RtpCodecName] = frozenset({
    RtpCodecName.RTX,
    RtpCodecName.RED,
    RtpCodecName.ULPFEC,
    RtpCodecName.FLEXFEC,
})


def _random_session_id() -> int:
    return secrets.randbelow(SESSION_ID_MAX)


class MediaDirection(SDPEnum):
    """Media flow direction of a media description, defined in :rfc:`8866#section-6.7`."""

    SENDONLY = "sendonly"
    RECVONLY = "recvonly"
    SENDRECV = "sendrecv"
    INACTIVE = "inactive"

    def reverse(self) -> MediaDirection:
        """The direction seen from the other side of the session."""
        if self is MediaDirection.SENDONLY:
            return MediaDirection.RECVONLY
        if self is MediaDirection.RECVONLY:
            return MediaDirection.SENDONLY
        return self

    def to_attribute(self) -> SDPAttribute:
        """The flag attribute for this direction."""
        return {
            MediaDirection.SENDONLY: SendOnlyFlag,
            MediaDirection.RECVONLY: RecvOnlyFlag,
            MediaDirection.SENDRECV: SendRecvFlag,
            MediaDirection.INACTIVE: InactiveFlag,
        }[self]()

    @classmethod
    def from_attributes(cls, attributes: AttributeMap) -> MediaDirection:
        """
        Get the direction from the media flow attributes, ``sendrecv`` if there are none.

        :raises SDPSemanticError: if conflicting direction attributes are present.
        """
        present = {direction for direction in cls if direction.value in attributes}
        if not present or present == {cls.SENDRECV}:
            return cls.SENDRECV
        if len(present) > 1:
            raise SDPSemanticError("multiple direction attributes")
        return present.pop()


@slots_dataclass
class RtpPayload:
    """
    A payload (codec) entry of a media description.

    Joins the ``rtpmap``, ``fmtp`` and ``rtcp-fb`` attributes of a payload type,
    and the paired retransmission payload type, if any.
    """

    payload_type: int
    codec: RtpCodecName
    clock_rate: int
    channels: int | None = None
    parameters: dict[str, str] = dataclass_field(default_factory=dict)
    feedback: list[tuple[str, str | None]] = dataclass_field(default_factory=list)
    rtx_payload_type: int | None = None


@slots_dataclass(frozen=True)
class RidEncoding:
    """An encoding identified by an RTP stream id, used for simulcast."""

    rid: str
    direction: RidDirection


@slots_dataclass(frozen=True)
class SsrcEncoding:
    """An encoding sent with a fixed SSRC, and optionally its retransmission SSRC."""

    cname: str
    ssrc: int
    rtx_ssrc: int | None = None


RtpEncoding = Union[RidEncoding, SsrcEncoding]


@slots_dataclass
class RtpMediaDescription:
    """An RTP media section of a bundled session."""

    kind: MediaType
    protocol: TransportProtocol
    mid: str
    port: int = JSEP_DISCARD_PORT
    bandwidths: dict[BandwidthType, int] = dataclass_field(default_factory=dict)
    payloads: list[RtpPayload] = dataclass_field(default_factory=list)
    direction: MediaDirection = MediaDirection.SENDRECV
    encodings: list[RtpEncoding] = dataclass_field(default_factory=list)
    extensions: dict[str, int] = dataclass_field(default_factory=dict)
    rtcp_mux: bool = False
    rtcp_mux_only: bool = False
    rtcp_reduced_size: bool = False

    @property
    def rid_encodings(self) -> list[RidEncoding]:
        """The RID-based encodings, in order."""
        return [encoding for encoding in self.encodings if isinstance(encoding, RidEncoding)]

    @property
    def ssrc_encodings(self) -> list[SsrcEncoding]:
        """The SSRC-based encodings, in order."""
        return [encoding for encoding in self.encodings if isinstance(encoding, SsrcEncoding)]

    def answer(self) -> RtpMediaDescription:
        """
        Build the answering media description.

        Direction and RID directions are reversed, sender SSRCs are not
        reflected back, and bandwidths are cleared.
        """
        return RtpMediaDescription(
            kind=self.kind,
            protocol=self.protocol,
            mid=self.mid,
            port=self.port,
            bandwidths={},
            payloads=[
                RtpPayload(
                    payload_type=payload.payload_type,
                    codec=payload.codec,
                    clock_rate=payload.clock_rate,
                    channels=payload.channels,
                    parameters=dict(payload.parameters),
                    feedback=list(payload.feedback),
                    rtx_payload_type=payload.rtx_payload_type,
                )
                for payload in self.payloads
            ],
            direction=self.direction.reverse(),
            encodings=[
                RidEncoding(rid=encoding.rid, direction=encoding.direction.reverse())
                for encoding in self.rid_encodings
            ],
            extensions=dict(self.extensions),
            rtcp_mux=self.rtcp_mux,
            rtcp_mux_only=self.rtcp_mux_only,
            rtcp_reduced_size=self.rtcp_reduced_size,
        )

    @staticmethod
    def _payloads_from_attributes(formats: Sequence[str], attributes: AttributeMap) -> list[RtpPayload]:
        rtp_maps: dict[int, RtpMapAttribute] = {
            rtp_map.payload_type: rtp_map for rtp_map in attributes.get_all(RtpMapAttribute)
        }
        format_parameters: dict[int, dict[str, str]] = {
            fmtp.payload_type: fmtp.parameters_map()
            for fmtp in attributes.get_all(FormatParametersAttribute)
        }

        rtx_payload_types: dict[int, int] = {}
        for payload_type, rtp_map in rtp_maps.items():
            if rtp_map.codec != RtpCodecName.RTX:
                continue
            apt = format_parameters.get(payload_type, {}).get("apt")
            if apt is not None and apt.isascii() and apt.isdecimal():
                rtx_payload_types[int(apt)] = payload_type

        feedback: dict[int, list[tuple[str, str | None]]] = {}
        for rtcp_fb in attributes.get_all(RtcpFeedbackAttribute):
            # wildcard feedback is not attached to any payload
            if rtcp_fb.payload_type is not None:
                feedback.setdefault(rtcp_fb.payload_type, []).append(
                    (rtcp_fb.feedback_id, rtcp_fb.parameter)
                )

        payloads: list[RtpPayload] = []
        for fmt in formats:
            if not (fmt.isascii() and fmt.isdecimal()):
                continue
            payload_type = int(fmt)
            rtp_map = rtp_maps.get(payload_type)
            if rtp_map is None:
                _logger.debug(f"Skipping format {fmt} without rtpmap")
                continue
            if rtp_map.codec in NON_MEDIA_CODECS:
                continue
            payloads.append(
                RtpPayload(
                    payload_type=payload_type,
                    codec=rtp_map.codec,
                    clock_rate=rtp_map.clock_rate,
                    channels=rtp_map.channels,
                    parameters=dict(format_parameters.get(payload_type, {})),
                    feedback=list(feedback.get(payload_type, [])),
                    rtx_payload_type=rtx_payload_types.get(payload_type),
                )
            )
        return payloads

    @staticmethod
    def _encodings_from_attributes(attributes: AttributeMap) -> list[RtpEncoding]:
        encodings: list[RtpEncoding] = []

        # all the RIDs are assumed to be simulcast encodings
        for rid in attributes.get_all(RidAttribute):
            if rid.restrictions is not None:
                _logger.debug(f"Dropping restricted rid {rid.rid}: {rid.restrictions}")
                continue
            encodings.append(RidEncoding(rid=rid.rid, direction=rid.direction))

        source_attributes: dict[int, dict[str, str | None]] = {}
        for ssrc_attribute in attributes.get_all(SsrcAttribute):
            source_attributes.setdefault(ssrc_attribute.ssrc, {})[
                ssrc_attribute.attribute.lower()
            ] = ssrc_attribute.value

        ssrc: int | None = None
        rtx_ssrc: int | None = None
        fid_group = next(
            (
                group
                for group in attributes.get_all(SsrcGroupAttribute)
                if group.semantics == SsrcGroupSemantics.FID
            ),
            None,
        )
        if fid_group is not None:
            ssrc = fid_group.ssrcs[0]
            rtx_ssrc = fid_group.ssrcs[1] if len(fid_group.ssrcs) > 1 else None
        elif source_attributes:
            ssrc = next(iter(source_attributes))

        cname = source_attributes.get(ssrc, {}).get("cname") if ssrc is not None else None
        if ssrc is not None and cname is not None:
            encodings.append(SsrcEncoding(cname=cname, ssrc=ssrc, rtx_ssrc=rtx_ssrc))
        elif ssrc is not None:
            _logger.debug(f"Ignoring ssrc {ssrc} without cname")

        return encodings

    @staticmethod
    def _extensions_from_attributes(attributes: AttributeMap) -> dict[str, int]:
        extensions: dict[str, int] = {}
        for extmap in attributes.get_all(ExtensionMapAttribute):
            if extmap.direction is not None or extmap.extension_attributes:
                _logger.debug(f"Dropping directional or parametrized extension {extmap.uri}")
                continue
            extensions[extmap.uri] = extmap.id
        return extensions

    @classmethod
    def from_sdp(cls, media: SDPMedia) -> Self:
        """
        Build the media description from an SDP media section.

        :raises SDPSemanticError: if the ``mid`` is missing, or directions conflict.
        """
        attributes = media.attributes
        mid = attributes.get(MidAttribute)
        if mid is None:
            raise SDPSemanticError("mid is required")

        return cls(
            kind=media.kind,
            protocol=media.protocol,
            mid=mid.value,
            port=media.port,
            bandwidths=media.bandwidth_values(),
            payloads=cls._payloads_from_attributes(media.formats, attributes),
            direction=MediaDirection.from_attributes(attributes),
            encodings=cls._encodings_from_attributes(attributes),
            extensions=cls._extensions_from_attributes(attributes),
            rtcp_mux=RtcpMuxFlag._name in attributes,  # noqa: SLF001
            rtcp_mux_only=RtcpMuxOnlyFlag._name in attributes,  # noqa: SLF001
            rtcp_reduced_size=RtcpReducedSizeFlag._name in attributes,  # noqa: SLF001
        )

    def _payload_attributes(self) -> tuple[list[str], list[SDPAttribute]]:
        formats: list[str] = []
        attributes: list[SDPAttribute] = []
        for payload in self.payloads:
            formats.append(str(payload.payload_type))
            attributes.append(
                RtpMapAttribute(
                    payload_type=payload.payload_type,
                    codec=payload.codec,
                    clock_rate=payload.clock_rate,
                    channels=payload.channels,
                )
            )
            attributes.extend(
                RtcpFeedbackAttribute(
                    payload_type=payload.payload_type,
                    feedback_id=feedback_id,
                    parameter=parameter,
                )
                for feedback_id, parameter in payload.feedback
            )
            if payload.parameters:
                attributes.append(
                    FormatParametersAttribute(
                        payload_type=payload.payload_type,
                        parameters=";".join(f"{k}={v}" for k, v in payload.parameters.items()),
                    )
                )
            if payload.rtx_payload_type is not None:
                formats.append(str(payload.rtx_payload_type))
                attributes.append(
                    RtpMapAttribute(
                        payload_type=payload.rtx_payload_type,
                        codec=RtpCodecName.RTX,
                        clock_rate=payload.clock_rate,
                        channels=payload.channels,
                    )
                )
                attributes.append(
                    FormatParametersAttribute(
                        payload_type=payload.rtx_payload_type,
                        parameters=f"apt={payload.payload_type}",
                    )
                )
        return formats, attributes

    def _encoding_attributes(self) -> list[SDPAttribute]:
        attributes: list[SDPAttribute] = []
        for encoding in self.encodings:
            if isinstance(encoding, RidEncoding):
                attributes.append(RidAttribute(rid=encoding.rid, direction=encoding.direction))
                continue
            attributes.append(SsrcAttribute(ssrc=encoding.ssrc, attribute="cname", value=encoding.cname))
            if encoding.rtx_ssrc is not None:
                attributes.append(
                    SsrcAttribute(ssrc=encoding.rtx_ssrc, attribute="cname", value=encoding.cname)
                )
                attributes.append(
                    SsrcGroupAttribute(
                        semantics=SsrcGroupSemantics.FID,
                        ssrcs=[encoding.ssrc, encoding.rtx_ssrc],
                    )
                )

        streams: dict[RidDirection, list[list[str]]] = {}
        for direction in (RidDirection.SEND, RidDirection.RECV):
            rids = [[encoding.rid] for encoding in self.rid_encodings if encoding.direction == direction]
            if rids:
                streams[direction] = rids
        if streams:
            attributes.append(SimulcastAttribute(streams=streams))
        return attributes

    def to_sdp(self, session: UnifiedBundleSession) -> SDPMedia:
        """Build the SDP media section, repeating the session bundled transport parameters."""
        attributes = AttributeMap()
        attributes.append(
            RtcpAttribute(
                port=JSEP_DISCARD_PORT,
                nettype=NetworkType.IN,
                addrtype=AddressType.IP4,
                address=JSEP_DUMMY_ADDRESS,
            )
        )
        attributes.extend(session.transport_attributes())
        attributes.append(MidAttribute(value=self.mid))
        attributes.extend(
            ExtensionMapAttribute(id=extension_id, uri=uri)
            for uri, extension_id in self.extensions.items()
        )
        attributes.append(self.direction.to_attribute())
        if self.rtcp_mux:
            attributes.append(RtcpMuxFlag())
        if self.rtcp_mux_only:
            attributes.append(RtcpMuxOnlyFlag())
        if self.rtcp_reduced_size:
            attributes.append(RtcpReducedSizeFlag())

        formats, payload_attributes = self._payload_attributes()
        attributes.extend(payload_attributes)
        attributes.extend(self._encoding_attributes())

        return SDPMedia(
            media=SDPMediaMedia(
                media=self.kind,
                port=JSEP_DISCARD_PORT,
                protocol=self.protocol,
                formats=formats,
            ),
            connection=SDPMediaConnection(
                nettype=NetworkType.IN, addrtype=AddressType.IP4, address=JSEP_DUMMY_ADDRESS
            ),
            bandwidths={
                bwtype: SDPMediaBandwidth(bwtype=bwtype, bandwidth=bandwidth)
                for bwtype, bandwidth in self.bandwidths.items()
            },
            attributes=attributes,
        )


@slots_dataclass
class UnifiedBundleSession:
    """
    A unified-plan WebRTC session, with all the media bundled on a single transport.

    ICE and DTLS parameters are shared by all the media descriptions.
    """

    id: int
    version: int
    ice_ufrag: str
    ice_pwd: str
    ice_lite: bool = False
    ice_options: tuple[IceOption, ...] = ()
    candidates: list[CandidateAttribute] = dataclass_field(default_factory=list)
    fingerprints: list[tuple[FingerprintHashFunction, CertificateFingerprint]] = dataclass_field(
        default_factory=list
    )
    setup_role: SetupRole = SetupRole.ACTPASS
    allow_mixed_extension_maps: bool = False
    media_descriptions: list[RtpMediaDescription] = dataclass_field(default_factory=list)

    @classmethod
    def new(cls) -> Self:
        """Create a new, empty, offering session with random ICE credentials."""
        return cls(
            id=_random_session_id(),
            version=1,
            ice_ufrag=random_token(ICE_UFRAG_LENGTH),
            ice_pwd=random_token(ICE_PWD_LENGTH),
            ice_lite=True,
            setup_role=SetupRole.ACTPASS,
            allow_mixed_extension_maps=True,
        )

    def fingerprint(self, hash_function: FingerprintHashFunction) -> CertificateFingerprint | None:
        """The first fingerprint with the given hash function, if any."""
        return next(
            (fingerprint for function, fingerprint in self.fingerprints if function == hash_function),
            None,
        )

    def answer(self, setup_role: SetupRole | None = None) -> UnifiedBundleSession:
        """
        Build a new answering session for this (offered) session.

        The answer gets a new id and fresh ICE credentials, and has no candidates
        or fingerprints: these must be added by the caller before sending it.

        :param setup_role: the DTLS role to answer with. Defaults to the reverse
            of the offered role, which is only defined for ``active`` and ``passive``.
        :raises SDPSemanticError: if no role is given and the offered one cannot be reversed.
        """
        return UnifiedBundleSession(
            id=_random_session_id(),
            version=1,
            ice_ufrag=random_token(ICE_UFRAG_LENGTH),
            ice_pwd=random_token(ICE_PWD_LENGTH),
            ice_lite=False,
            ice_options=(),
            candidates=[],
            fingerprints=[],
            setup_role=setup_role if setup_role is not None else self.setup_role.reverse(),
            allow_mixed_extension_maps=self.allow_mixed_extension_maps,
            media_descriptions=[media.answer() for media in self.media_descriptions],
        )

    @classmethod
    def from_sdp(cls, sdp: SDPSession) -> Self:
        """
        Build the session from a parsed SDP session, see :rfc:`8829#section-5.8`.

        Transport parameters are taken from the first media section, falling back
        to the session level. Every media section must be an RTP one with a ``mid``.

        :raises SDPSemanticError: if the session cannot be represented.
        """
        if not sdp.media:
            raise SDPSemanticError("at least one m-line is required")
        media_attributes = sdp.media[0].attributes
        session_attributes = sdp.attributes

        def first_of(attribute_cls: type[SDPAttribute]) -> SDPAttribute | None:
            attribute = media_attributes.get(attribute_cls)
            if attribute is None:
                attribute = session_attributes.get(attribute_cls)
            return attribute

        ice_ufrag = first_of(IceUfragAttribute)
        if not isinstance(ice_ufrag, IceUfragAttribute):
            raise SDPSemanticError("ice-ufrag is required")
        ice_pwd = first_of(IcePwdAttribute)
        if not isinstance(ice_pwd, IcePwdAttribute):
            raise SDPSemanticError("ice-pwd is required")
        ice_options = first_of(IceOptionsAttribute)
        setup = first_of(SetupAttribute)

        fingerprints = [
            (fingerprint.hash_function, fingerprint.fingerprint)
            for fingerprint in [
                *media_attributes.get_all(FingerprintAttribute),
                *session_attributes.get_all(FingerprintAttribute),
            ]
        ]

        return cls(
            id=sdp.origin.sess_id,
            version=sdp.origin.sess_version,
            ice_ufrag=ice_ufrag.value,
            ice_pwd=ice_pwd.value,
            ice_lite=IceLiteFlag._name in session_attributes,  # noqa: SLF001
            ice_options=(
                tuple(ice_options.values) if isinstance(ice_options, IceOptionsAttribute) else ()
            ),
            candidates=media_attributes.get_all(CandidateAttribute),
            fingerprints=fingerprints,
            setup_role=setup.role if isinstance(setup, SetupAttribute) else SetupRole.ACTPASS,
            allow_mixed_extension_maps=(
                ExtensionMapAllowMixedFlag._name in media_attributes  # noqa: SLF001
                or ExtensionMapAllowMixedFlag._name in session_attributes  # noqa: SLF001
            ),
            media_descriptions=[RtpMediaDescription.from_sdp(media) for media in sdp.media],
        )

    def transport_attributes(self) -> list[SDPAttribute]:
        """The ICE and DTLS attributes, repeated in each bundled media section."""
        attributes: list[SDPAttribute] = [
            IceUfragAttribute(value=self.ice_ufrag),
            IcePwdAttribute(value=self.ice_pwd),
        ]
        if self.ice_options:
            attributes.append(IceOptionsAttribute(values=list(self.ice_options)))
        attributes.extend(self.candidates)
        attributes.extend(
            FingerprintAttribute(hash_function=hash_function, fingerprint=fingerprint)
            for hash_function, fingerprint in self.fingerprints
        )
        attributes.append(SetupAttribute(role=self.setup_role))
        return attributes

    def to_sdp(self) -> SDPSession:
        """Build the SDP session for this session."""
        attributes = AttributeMap()
        if self.ice_lite:
            attributes.append(IceLiteFlag())
        if self.media_descriptions:
            attributes.append(
                GroupAttribute(
                    semantics=GroupSemantics.BUNDLE,
                    mids=[media.mid for media in self.media_descriptions],
                )
            )
        if self.allow_mixed_extension_maps:
            attributes.append(ExtensionMapAllowMixedFlag())

        return SDPSession(
            version=SDPSessionVersion(value="0"),
            origin=SDPSessionOrigin(
                username=None,
                sess_id=self.id,
                sess_version=self.version,
                nettype=NetworkType.IN,
                addrtype=AddressType.IP4,
                unicast_address=JSEP_ORIGIN_ADDRESS,
            ),
            name=SDPSessionName(value=None),
            time=[SDPTime(time=SDPTimeTime(start_time=0, stop_time=0))],
            attributes=attributes,
            media=[media.to_sdp(self) for media in self.media_descriptions],
        )

    @classmethod
    def parse(cls, raw_value: str | bytes) -> Self:
        """Parse an SDP document into a session."""
        return cls.from_sdp(SDPSession.parse(raw_value))

    def __str__(self) -> str:
        return str(self.to_sdp())
