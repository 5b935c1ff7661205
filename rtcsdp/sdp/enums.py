"""Enumerations of SDP tokens, with support for unknown (unregistered) values."""

from __future__ import annotations

from rtcsdp.exceptions import SDPSemanticError
from rtcsdp.helpers import SDPEnum


__all__ = [
    "NetworkType",
    "AddressType",
    "BandwidthType",
    "MediaType",
    "TransportProtocol",
    "IceTransportType",
    "IceCandidateType",
    "IceOption",
    "IceTcpType",
    "SetupRole",
    "FingerprintHashFunction",
    "GroupSemantics",
    "SsrcGroupSemantics",
    "ExtensionMapDirection",
    "RidDirection",
    "RtpCodecName",
]


class NetworkType(SDPEnum):
    """Network type of connection and origin fields, defined in :rfc:`8866#section-8.2.6`."""

    IN = "IN"


class AddressType(SDPEnum):
    """Address type of connection and origin fields, defined in :rfc:`8866#section-8.2.7`."""

    IP4 = "IP4"
    IP6 = "IP6"


class BandwidthType(SDPEnum):
    """Bandwidth modifiers, defined in :rfc:`8866#section-5.8` and :rfc:`3890`."""

    __allow_unknown__ = True

    CT = "CT"
    AS = "AS"
    TIAS = "TIAS"


class MediaType(SDPEnum):
    """Media types of media descriptions, defined in :rfc:`8866#section-8.2.2`."""

    __allow_unknown__ = True

    AUDIO = "audio"
    VIDEO = "video"
    TEXT = "text"
    APPLICATION = "application"
    MESSAGE = "message"


class TransportProtocol(SDPEnum):
    """Media transport protocols, as registered in :rfc:`8866#section-8.2.3`."""

    __allow_unknown__ = True

    UDP = "udp"
    RTP_AVP = "RTP/AVP"
    RTP_AVPF = "RTP/AVPF"  # RFC 4585
    RTP_SAVP = "RTP/SAVP"  # RFC 3711
    RTP_SAVPF = "RTP/SAVPF"  # RFC 5124
    TCP_TLS_RTP_SAVP = "TCP/TLS/RTP/SAVP"  # RFC 7850
    TCP_TLS_RTP_SAVPF = "TCP/TLS/RTP/SAVPF"
    UDP_TLS_RTP_SAVP = "UDP/TLS/RTP/SAVP"  # RFC 5764
    UDP_TLS_RTP_SAVPF = "UDP/TLS/RTP/SAVPF"
    UDP_DTLS_SCTP = "UDP/DTLS/SCTP"  # RFC 8841
    TCP_DTLS_SCTP = "TCP/DTLS/SCTP"
    DTLS_SCTP = "DTLS/SCTP"


class IceTransportType(SDPEnum):
    """Transport of ICE candidates, defined in :rfc:`8839#section-5.1` and :rfc:`6544`."""

    UDP = "UDP"
    TCP = "TCP"


class IceCandidateType(SDPEnum):
    """ICE candidate types, defined in :rfc:`8839#section-5.1`."""

    __allow_unknown__ = True

    HOST = "host"
    SRFLX = "srflx"
    PRFLX = "prflx"
    RELAY = "relay"


class IceOption(SDPEnum):
    """ICE options, as registered in :rfc:`8839#section-10.3`."""

    __allow_unknown__ = True

    TRICKLE = "trickle"


class IceTcpType(SDPEnum):
    """TCP candidate types, defined in :rfc:`6544#section-4.5`."""

    ACTIVE = "active"
    PASSIVE = "passive"
    SO = "so"


class SetupRole(SDPEnum):
    """DTLS/TCP connection setup roles, defined in :rfc:`4145#section-4`."""

    ACTIVE = "active"
    PASSIVE = "passive"
    ACTPASS = "actpass"
    HOLDCONN = "holdconn"

    def reverse(self) -> SetupRole:
        """
        The role an answerer takes in reply to this offered role.

        Only ``active`` and ``passive`` have a single counterpart. The caller
        must pick the answering role itself for ``actpass`` and ``holdconn``.

        :raises SDPSemanticError: for ``actpass`` and ``holdconn``.
        """
        if self is SetupRole.ACTIVE:
            return SetupRole.PASSIVE
        if self is SetupRole.PASSIVE:
            return SetupRole.ACTIVE
        raise SDPSemanticError(f"Setup role {self} cannot be reversed")


class FingerprintHashFunction(SDPEnum):
    """Certificate fingerprint hash functions, defined in :rfc:`8122#section-5`."""

    __allow_unknown__ = True

    SHA_1 = "sha-1"
    SHA_224 = "sha-224"
    SHA_256 = "sha-256"
    SHA_384 = "sha-384"
    SHA_512 = "sha-512"
    MD5 = "md5"
    MD2 = "md2"


class GroupSemantics(SDPEnum):
    """Media grouping semantics, defined in :rfc:`5888` and :rfc:`8843`."""

    __allow_unknown__ = True

    LS = "LS"
    FID = "FID"
    BUNDLE = "BUNDLE"


class SsrcGroupSemantics(SDPEnum):
    """SSRC grouping semantics, defined in :rfc:`5576#section-4.2`."""

    __allow_unknown__ = True

    FID = "FID"
    FEC = "FEC"


class ExtensionMapDirection(SDPEnum):
    """Direction of RTP header extensions, defined in :rfc:`8285#section-8`."""

    SENDONLY = "sendonly"
    RECVONLY = "recvonly"
    SENDRECV = "sendrecv"
    INACTIVE = "inactive"


class RidDirection(SDPEnum):
    """Direction of RTP stream identifiers, defined in :rfc:`8851#section-4`."""

    SEND = "send"
    RECV = "recv"

    def reverse(self) -> RidDirection:
        """The direction seen from the other side of the session."""
        return RidDirection.RECV if self is RidDirection.SEND else RidDirection.SEND


class RtpCodecName(SDPEnum):
    """RTP payload format (codec) names, as used in ``rtpmap`` attributes."""

    __allow_unknown__ = True

    # audio
    PCMA = "PCMA"
    PCMU = "PCMU"
    G722 = "G722"
    OPUS = "opus"
    CN = "CN"
    TELEPHONE_EVENT = "telephone-event"

    # video
    H264 = "H264"
    VP8 = "VP8"
    VP9 = "VP9"

    # repaired / redundant data
    RTX = "rtx"
    RED = "red"
    ULPFEC = "ulpfec"
    FLEXFEC = "flexfec"
