"""
SDP attributes definitions and implementations.

All attribute classes are registered by name into the :class:`SDPAttribute` registry,
which is used to dispatch ``a=<name>[:<value>]`` lines to the right parser.
Attributes with unregistered names are parsed as :class:`UnknownAttribute`,
that keeps their raw value.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field as dataclass_field
from typing import ClassVar, Mapping, Union, cast

from frozendict import frozendict
from typing_extensions import Self, override

from rtcsdp.exceptions import SDPParseError
from rtcsdp.helpers import (
    DEFAULT,
    DefaultType,
    FieldsParser,
    IntValueMixin,
    ListValueMixin,
    OptionalStrValueMixin,
    ParseableSerializable,
    Registry,
    StrValueMixin,
    parse_int,
    slots_dataclass,
)
from rtcsdp.structures import CertificateFingerprint

from .enums import (
    AddressType,
    ExtensionMapDirection,
    FingerprintHashFunction,
    GroupSemantics,
    IceCandidateType,
    IceOption,
    IceTcpType,
    IceTransportType,
    NetworkType,
    RidDirection,
    RtpCodecName,
    SetupRole,
    SsrcGroupSemantics,
)


__all__ = [
    "SDPAttribute",
    "FlagAttribute",
    "ValueAttribute",
    "UnknownAttribute",
    "CandidateAttribute",
    "EndOfCandidatesFlag",
    "FingerprintAttribute",
    "GroupAttribute",
    "IceLiteFlag",
    "IceOptionsAttribute",
    "IcePwdAttribute",
    "IceUfragAttribute",
    "MidAttribute",
    "SetupAttribute",
    "ExtensionMapAttribute",
    "ExtensionMapAllowMixedFlag",
    "RtpMapAttribute",
    "FormatParametersAttribute",
    "RtcpFeedbackAttribute",
    "RtcpAttribute",
    "RtcpMuxFlag",
    "RtcpMuxOnlyFlag",
    "RtcpReducedSizeFlag",
    "MediaFlowAttribute",
    "SendOnlyFlag",
    "RecvOnlyFlag",
    "SendRecvFlag",
    "InactiveFlag",
    "MsidAttribute",
    "MsidSemanticAttribute",
    "SsrcAttribute",
    "SsrcGroupAttribute",
    "RidAttribute",
    "SimulcastAttribute",
    "PTimeAttribute",
    "MaxPTimeAttribute",
    "SctpPortAttribute",
    "MaxMessageSizeAttribute",
]


MAX_PAYLOAD_TYPE: int = 127
MAX_PORT: int = 65535
MAX_SSRC: int = 2**32 - 1


def split_tokens(raw_value: str, min_count: int, max_count: int | None = None) -> list[str]:
    """
    Split an attribute value into space-separated tokens, checking their number.

    When ``max_count`` is given, the last token keeps any remaining text, spaces included.
    """
    tokens = raw_value.split(" ", max_count - 1) if max_count is not None else raw_value.split(" ")
    if len(tokens) < min_count or not all(tokens):
        raise SDPParseError(
            f"Expected at least {min_count} space-separated values, got: {raw_value!r}"
        )
    return tokens


@dataclass
class SDPAttribute(
    Registry[Union[str, DefaultType], "SDPAttribute"],
    ParseableSerializable,
    ABC,
    registry=True,
    registry_attr="_name",
):
    """Abstract base dataclass for SDP attributes, defined in :rfc:`8866#section-5.13`."""

    _name: ClassVar[str | DefaultType]
    _is_flag: ClassVar[bool | None] = None

    @property
    def name(self) -> str:
        """The name of the attribute."""
        if self._name is DEFAULT:
            raise SyntaxError(
                f"Class {self.__class__} must override name() property when using _name = DEFAULT"
            )
        assert isinstance(self._name, str)
        return self._name

    @property
    def is_flag(self) -> bool:
        """Whether the attribute is a flag (property attribute) or not."""
        return bool(self._is_flag)

    @classmethod
    def get_class_for_attribute_name(cls, name: str) -> type[SDPAttribute]:
        """Get the attribute class for the given name, or the catch-all class if unregistered."""
        registry_name: str = name.lower()
        if registry_name in cls.__registry__:
            return cls.__registry_get_class_for__(registry_name)
        return cls.__registry_get_class_for__(DEFAULT)

    @classmethod
    def parse(cls, raw_data: str) -> Self:
        """Parse an attribute from the ``<name>[:<value>]`` text following ``a=``."""
        name: str
        raw_value: str | None
        name, raw_value = (
            raw_data.split(":", 1) if ":" in raw_data else (raw_data, None)  # type: ignore[assignment]
        )
        return cast(Self, cls.from_name_value(name, raw_value))

    @classmethod
    def from_name_value(cls, name: str, raw_value: str | None) -> SDPAttribute:
        """
        Build an attribute from its name and raw value, dispatching through the registry.

        :param name: the name of the attribute (any case).
        :param raw_value: the raw value of the attribute, or None if it has no value.
        :return: an instance of the registered class, or an :class:`UnknownAttribute`.
        :raises SDPParseError: if the value is malformed for the registered attribute.
        """
        if not name:
            raise SDPParseError(f"Missing attribute name: {name}:{raw_value}")
        attr_cls: type[SDPAttribute] = cls.get_class_for_attribute_name(name)

        if attr_cls._is_flag is not None:
            if attr_cls._is_flag and raw_value is not None:
                raise SDPParseError(f"Attribute {name} is a flag, but got a value: {raw_value}")
            if not attr_cls._is_flag and raw_value is None:
                raise SDPParseError(f"Attribute {name} is not a flag, but got no value")

        try:
            return attr_cls.from_raw_value(name, raw_value)
        except SDPParseError:
            raise
        except ValueError as e:
            raise SDPParseError(f"Invalid {name} attribute value {raw_value!r}: {e}") from e

    @classmethod
    @abstractmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:
        """
        Parse a raw value into an instance of this attribute class.

        :param name: the name of the attribute parsed from raw data
        :param raw_value: the raw value of the attribute parsed from raw data
        :return: the attribute object.
        """

    @abstractmethod
    def serialize(self) -> str | None:
        """Serialize the attribute value to a string, or None for flag attributes."""

    def __str__(self) -> str:
        """Serialize the whole attribute to a string."""
        value = self.serialize()
        return f"{self.name}:{value}" if value is not None else self.name


@dataclass
class FlagAttribute(SDPAttribute, ABC):
    """Abstract base dataclass for SDP flag (property) attributes."""

    _is_flag: ClassVar[bool] = True

    @classmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:  # noqa: D102
        return cls()

    def serialize(self) -> None:  # noqa: D102
        return None


@dataclass
class ValueAttribute(SDPAttribute, ABC):
    """Abstract base dataclass for SDP value attributes."""

    _is_flag: ClassVar[bool] = False

    @classmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:  # noqa: D102
        assert raw_value is not None
        if issubclass(cls, FieldsParser):
            return cls(**cls.parse_raw_value(raw_value))
        raise NotImplementedError


@slots_dataclass
class UnknownAttribute(OptionalStrValueMixin, SDPAttribute):
    """Catch-all class for unsupported SDP attributes, keeps the raw value verbatim."""

    _name = DEFAULT

    attribute: str

    @property
    def name(self) -> str:
        """The name of the attribute, as found in the parsed data."""
        return self.attribute

    @classmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:  # noqa: D102
        return cls(attribute=name, value=raw_value)


@slots_dataclass
class CandidateAttribute(ValueAttribute):
    """
    SDP attribute for ICE candidates, defined in :rfc:`8839#section-5.1`.

    Spec::
        candidate:<foundation> <component-id> <transport> <priority>
            <connection-address> <port> typ <cand-type>
            [raddr <connection-address>] [rport <port>]
            *(<extension-att-name> <extension-att-value>)
    """

    _name = "candidate"

    foundation: str
    component: int
    transport: IceTransportType
    priority: int
    address: str
    port: int
    type: IceCandidateType
    related_address: str | None = None
    related_port: int | None = None
    tcp_type: IceTcpType | None = None  # RFC 6544
    extensions: Mapping[str, str] = dataclass_field(default_factory=frozendict)

    @classmethod
    @override
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:
        assert raw_value is not None
        tokens = split_tokens(raw_value, 8)
        foundation, component, transport, priority, address, port, typ, kind, *rest = tokens
        if typ.lower() != "typ":
            raise SDPParseError(f"Expected 'typ' in candidate attribute, got: {typ!r}")
        if len(rest) % 2 != 0:
            raise SDPParseError(f"Unpaired extension in candidate attribute: {raw_value!r}")

        related_address: str | None = None
        related_port: int | None = None
        tcp_type: IceTcpType | None = None
        extensions: dict[str, str] = {}
        for key, value in zip(rest[::2], rest[1::2]):
            lowered_key = key.lower()
            if lowered_key == "raddr" and related_address is None:
                related_address = value
            elif lowered_key == "rport" and related_port is None:
                related_port = parse_int(value, max_value=MAX_PORT)
            elif lowered_key == "tcptype" and tcp_type is None:
                tcp_type = IceTcpType(value)
            else:
                extensions[key] = value

        return cls(
            foundation=foundation,
            component=parse_int(component, max_value=MAX_PORT),
            transport=IceTransportType(transport),
            priority=parse_int(priority, max_value=2**32 - 1),
            address=address,
            port=parse_int(port, max_value=MAX_PORT),
            type=IceCandidateType(kind),
            related_address=related_address,
            related_port=related_port,
            tcp_type=tcp_type,
            extensions=frozendict(extensions),
        )

    def serialize(self) -> str:  # noqa: D102
        parts = [
            self.foundation,
            str(self.component),
            str(self.transport),
            str(self.priority),
            self.address,
            str(self.port),
            "typ",
            str(self.type),
        ]
        if self.related_address is not None:
            parts += ["raddr", self.related_address]
        if self.related_port is not None:
            parts += ["rport", str(self.related_port)]
        if self.tcp_type is not None:
            parts += ["tcptype", str(self.tcp_type)]
        for key, value in self.extensions.items():
            parts += [key, value]
        return " ".join(parts)


@slots_dataclass
class EndOfCandidatesFlag(FlagAttribute):
    """SDP attribute signalling the end of trickled candidates, defined in :rfc:`8840#section-8.2`."""

    _name = "end-of-candidates"


@slots_dataclass
class FingerprintAttribute(ValueAttribute):
    """
    SDP attribute for DTLS certificate fingerprints, defined in :rfc:`8122#section-5`.

    Spec::
        fingerprint:<hash-func> <fingerprint>
    """

    _name = "fingerprint"

    hash_function: FingerprintHashFunction
    fingerprint: CertificateFingerprint

    @classmethod
    @override
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:
        assert raw_value is not None
        hash_function, fingerprint = split_tokens(raw_value, 2, 2)
        return cls(
            hash_function=FingerprintHashFunction(hash_function),
            fingerprint=CertificateFingerprint.parse(fingerprint),
        )

    def serialize(self) -> str:  # noqa: D102
        return f"{self.hash_function} {self.fingerprint}"


@slots_dataclass
class GroupAttribute(ValueAttribute):
    """
    SDP attribute for grouping media lines, defined in :rfc:`5888#section-5`.

    Spec::
        group:<semantics> *(SP <identification-tag>)
    """

    _name = "group"

    semantics: GroupSemantics
    mids: list[str]

    @classmethod
    @override
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:
        assert raw_value is not None
        semantics, *mids = split_tokens(raw_value, 2)
        return cls(semantics=GroupSemantics(semantics), mids=mids)

    def serialize(self) -> str:  # noqa: D102
        return " ".join([str(self.semantics), *self.mids])


@slots_dataclass
class IceLiteFlag(FlagAttribute):
    """SDP attribute for ICE lite implementations, defined in :rfc:`8839#section-5.3`."""

    _name = "ice-lite"


@slots_dataclass
class IceOptionsAttribute(ListValueMixin[IceOption], ValueAttribute):
    """
    SDP attribute for ICE options, defined in :rfc:`8839#section-5.6`.

    Spec::
        ice-options:<ice-option-tag> *(SP <ice-option-tag>)
    """

    _name = "ice-options"
    _values_type = IceOption


@slots_dataclass
class IcePwdAttribute(StrValueMixin, ValueAttribute):
    """SDP attribute for the ICE password, defined in :rfc:`8839#section-5.4`."""

    _name = "ice-pwd"


@slots_dataclass
class IceUfragAttribute(StrValueMixin, ValueAttribute):
    """SDP attribute for the ICE username fragment, defined in :rfc:`8839#section-5.4`."""

    _name = "ice-ufrag"


@slots_dataclass
class MidAttribute(StrValueMixin, ValueAttribute):
    """SDP attribute for the media stream identification tag, defined in :rfc:`5888#section-4`."""

    _name = "mid"


@slots_dataclass
class SetupAttribute(ValueAttribute):
    """
    SDP attribute for the connection setup role, defined in :rfc:`4145#section-4`.

    Spec::
        setup:<role>
    """

    _name = "setup"

    role: SetupRole

    @classmethod
    @override
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:
        assert raw_value is not None
        return cls(role=SetupRole(raw_value))

    def serialize(self) -> str:  # noqa: D102
        return str(self.role)


@slots_dataclass
class ExtensionMapAttribute(ValueAttribute):
    """
    SDP attribute for RTP header extensions mapping, defined in :rfc:`8285#section-8`.

    Spec::
        extmap:<value>["/"<direction>] <URI> <extensionattributes>
    """

    _name = "extmap"

    id: int
    uri: str
    direction: ExtensionMapDirection | None = None
    extension_attributes: list[str] = dataclass_field(default_factory=list)

    @classmethod
    @override
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:
        assert raw_value is not None
        id_spec, uri, *extension_attributes = split_tokens(raw_value, 2)
        raw_id, _, raw_direction = id_spec.partition("/")
        return cls(
            id=parse_int(raw_id, max_value=255),
            uri=uri,
            direction=ExtensionMapDirection(raw_direction) if raw_direction else None,
            extension_attributes=extension_attributes,
        )

    def serialize(self) -> str:  # noqa: D102
        id_spec = str(self.id)
        if self.direction is not None:
            id_spec += f"/{self.direction}"
        return " ".join([id_spec, self.uri, *self.extension_attributes])


@slots_dataclass
class ExtensionMapAllowMixedFlag(FlagAttribute):
    """SDP attribute allowing mixed one/two-byte header extensions, defined in :rfc:`8285#section-6`."""

    _name = "extmap-allow-mixed"


@slots_dataclass
class RtpMapAttribute(ValueAttribute):
    """
    SDP attribute for RTP payload type mapping, defined in :rfc:`8866#section-6.6`.

    Spec::
        rtpmap:<payload type> <encoding name>/<clock rate>[/<encoding parameters>]
    """

    _name = "rtpmap"

    payload_type: int
    codec: RtpCodecName
    clock_rate: int
    channels: int | None = None

    @classmethod
    @override
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:
        assert raw_value is not None
        payload_type, encoding = split_tokens(raw_value, 2, 2)
        codec, clock_rate, *more = encoding.split("/", 2)
        if not codec:
            raise SDPParseError(f"Missing encoding name in rtpmap attribute: {raw_value!r}")
        return cls(
            payload_type=parse_int(payload_type, max_value=MAX_PAYLOAD_TYPE),
            codec=RtpCodecName(codec),
            clock_rate=parse_int(clock_rate),
            channels=parse_int(more[0], max_value=255) if more else None,
        )

    def serialize(self) -> str:  # noqa: D102
        data = f"{self.payload_type} {self.codec}/{self.clock_rate}"
        if self.channels is not None:
            data += f"/{self.channels}"
        return data


@slots_dataclass
class FormatParametersAttribute(ValueAttribute):
    """
    SDP attribute for format specific parameters, defined in :rfc:`8866#section-6.15`.

    Spec::
        fmtp:<format> <format specific parameters>
    """

    _name = "fmtp"

    payload_type: int
    parameters: str

    @classmethod
    @override
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:
        assert raw_value is not None
        payload_type, parameters = split_tokens(raw_value, 2, 2)
        return cls(
            payload_type=parse_int(payload_type, max_value=MAX_PAYLOAD_TYPE),
            parameters=parameters,
        )

    def serialize(self) -> str:  # noqa: D102
        return f"{self.payload_type} {self.parameters}"

    def parameters_map(self) -> dict[str, str]:
        """
        The parameters as ``key=value`` pairs, in order.

        Parameters not in the ``key=value`` form are skipped.
        """
        parameters: dict[str, str] = {}
        for parameter in self.parameters.split(";"):
            key, sep, value = parameter.partition("=")
            if sep:
                parameters[key] = value
        return parameters


@slots_dataclass
class RtcpFeedbackAttribute(ValueAttribute):
    """
    SDP attribute for RTCP feedback capabilities, defined in :rfc:`4585#section-4.2`.

    Spec::
        rtcp-fb:<rtcp-fb-pt> <rtcp-fb-val>

    A ``None`` payload type stands for the ``*`` wildcard.
    """

    _name = "rtcp-fb"

    payload_type: int | None
    feedback_id: str
    parameter: str | None = None

    @classmethod
    @override
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:
        assert raw_value is not None
        payload_type, feedback_id, *more = split_tokens(raw_value, 2, 3)
        return cls(
            payload_type=(
                None if payload_type == "*" else parse_int(payload_type, max_value=MAX_PAYLOAD_TYPE)
            ),
            feedback_id=feedback_id,
            parameter=more[0] if more else None,
        )

    def serialize(self) -> str:  # noqa: D102
        payload_type = "*" if self.payload_type is None else str(self.payload_type)
        parts = [payload_type, self.feedback_id]
        if self.parameter is not None:
            parts.append(self.parameter)
        return " ".join(parts)


@slots_dataclass
class RtcpAttribute(ValueAttribute):
    """
    SDP attribute for the RTCP port and address, defined in :rfc:`3605#section-2.1`.

    Spec::
        rtcp:<port> [<nettype> <addrtype> <connection-address>]
    """

    _name = "rtcp"

    port: int
    nettype: NetworkType | None = None
    addrtype: AddressType | None = None
    address: str | None = None

    @classmethod
    @override
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:
        assert raw_value is not None
        tokens = split_tokens(raw_value, 1)
        if len(tokens) == 1:
            return cls(port=parse_int(tokens[0], max_value=MAX_PORT))
        if len(tokens) != 4:
            raise SDPParseError(f"Invalid rtcp attribute: {raw_value!r}")
        port, nettype, addrtype, address = tokens
        return cls(
            port=parse_int(port, max_value=MAX_PORT),
            nettype=NetworkType(nettype),
            addrtype=AddressType(addrtype),
            address=address,
        )

    def serialize(self) -> str:  # noqa: D102
        if self.nettype is None or self.addrtype is None or self.address is None:
            return str(self.port)
        return f"{self.port} {self.nettype} {self.addrtype} {self.address}"


@slots_dataclass
class RtcpMuxFlag(FlagAttribute):
    """SDP attribute for RTP/RTCP multiplexing, defined in :rfc:`5761#section-5.1.1`."""

    _name = "rtcp-mux"


@slots_dataclass
class RtcpMuxOnlyFlag(FlagAttribute):
    """SDP attribute for exclusive RTP/RTCP multiplexing, defined in :rfc:`8858#section-3`."""

    _name = "rtcp-mux-only"


@slots_dataclass
class RtcpReducedSizeFlag(FlagAttribute):
    """SDP attribute for reduced-size RTCP, defined in :rfc:`5506#section-5`."""

    _name = "rtcp-rsize"


@dataclass
class MediaFlowAttribute(FlagAttribute, ABC):
    """Abstract base dataclass for SDP media flow attributes, defined in :rfc:`8866#section-6.7`."""


@slots_dataclass
class RecvOnlyFlag(MediaFlowAttribute):
    """SDP media flow attribute for recvonly, defined in :rfc:`8866#section-6.7.1`."""

    _name = "recvonly"


@slots_dataclass
class SendRecvFlag(MediaFlowAttribute):
    """SDP media flow attribute for sendrecv, defined in :rfc:`8866#section-6.7.2`."""

    _name = "sendrecv"


@slots_dataclass
class SendOnlyFlag(MediaFlowAttribute):
    """SDP media flow attribute for sendonly, defined in :rfc:`8866#section-6.7.3`."""

    _name = "sendonly"


@slots_dataclass
class InactiveFlag(MediaFlowAttribute):
    """SDP media flow attribute for inactive, defined in :rfc:`8866#section-6.7.4`."""

    _name = "inactive"


@slots_dataclass
class MsidAttribute(ValueAttribute):
    """
    SDP attribute associating a media line to a media stream, defined in :rfc:`8830#section-2`.

    Spec::
        msid:<msid-id> [<msid-appdata>]
    """

    _name = "msid"

    stream_id: str
    track_id: str | None = None

    @classmethod
    @override
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:
        assert raw_value is not None
        stream_id, *more = split_tokens(raw_value, 1, 2)
        return cls(stream_id=stream_id, track_id=more[0] if more else None)

    def serialize(self) -> str:  # noqa: D102
        if self.track_id is None:
            return self.stream_id
        return f"{self.stream_id} {self.track_id}"


@slots_dataclass
class MsidSemanticAttribute(StrValueMixin, ValueAttribute):
    """SDP session attribute for the legacy WebRTC media stream semantic, kept verbatim."""

    _name = "msid-semantic"


@slots_dataclass
class SsrcAttribute(ValueAttribute):
    """
    SDP attribute for source-specific attributes, defined in :rfc:`5576#section-4.1`.

    Spec::
        ssrc:<ssrc-id> <attribute>
        ssrc:<ssrc-id> <attribute>:<value>
    """

    _name = "ssrc"

    ssrc: int
    attribute: str
    value: str | None = None

    @classmethod
    @override
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:
        assert raw_value is not None
        ssrc, source_attribute = split_tokens(raw_value, 2, 2)
        attribute, sep, value = source_attribute.partition(":")
        return cls(
            ssrc=parse_int(ssrc, max_value=MAX_SSRC),
            attribute=attribute,
            value=value if sep else None,
        )

    def serialize(self) -> str:  # noqa: D102
        if self.value is None:
            return f"{self.ssrc} {self.attribute}"
        return f"{self.ssrc} {self.attribute}:{self.value}"


@slots_dataclass
class SsrcGroupAttribute(ValueAttribute):
    """
    SDP attribute for grouping sources, defined in :rfc:`5576#section-4.2`.

    Spec::
        ssrc-group:<semantics> *(SP <ssrc-id>)
    """

    _name = "ssrc-group"

    semantics: SsrcGroupSemantics
    ssrcs: list[int]

    @classmethod
    @override
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:
        assert raw_value is not None
        semantics, *ssrcs = split_tokens(raw_value, 2)
        return cls(
            semantics=SsrcGroupSemantics(semantics),
            ssrcs=[parse_int(ssrc, max_value=MAX_SSRC) for ssrc in ssrcs],
        )

    def serialize(self) -> str:  # noqa: D102
        return " ".join([str(self.semantics), *map(str, self.ssrcs)])


@slots_dataclass
class RidAttribute(ValueAttribute):
    """
    SDP attribute for RTP stream identifiers, defined in :rfc:`8851#section-10`.

    Spec::
        rid:<rid-id> <rid-dir> [<rid-pt-param-list> / <rid-param-list>]
    """

    _name = "rid"

    rid: str
    direction: RidDirection
    restrictions: str | None = None

    @classmethod
    @override
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:
        assert raw_value is not None
        rid, direction, *more = split_tokens(raw_value, 2, 3)
        return cls(
            rid=rid,
            direction=RidDirection(direction),
            restrictions=more[0] if more else None,
        )

    def serialize(self) -> str:  # noqa: D102
        parts = [self.rid, str(self.direction)]
        if self.restrictions is not None:
            parts.append(self.restrictions)
        return " ".join(parts)


@slots_dataclass
class SimulcastAttribute(ValueAttribute):
    """
    SDP attribute for simulcast streams, defined in :rfc:`8853#section-5.1`.

    Spec::
        simulcast:<sc-str-list-dir> [SP <sc-str-list-dir>]
        sc-str-list-dir = ("send" / "recv") SP <sc-alt-list> *(";" <sc-alt-list>)
        sc-alt-list = <sc-id> *("," <sc-id>)

    Streams are kept per direction, in order, each as the list of its alternative
    RTP stream ids (paused ids keep their ``~`` prefix).
    """

    _name = "simulcast"

    streams: Mapping[RidDirection, list[list[str]]]

    @property
    def send(self) -> list[list[str]]:
        """The sent streams."""
        return self.streams.get(RidDirection.SEND, [])

    @property
    def recv(self) -> list[list[str]]:
        """The received streams."""
        return self.streams.get(RidDirection.RECV, [])

    @classmethod
    @override
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:
        assert raw_value is not None
        tokens = split_tokens(raw_value, 2)
        if len(tokens) not in {2, 4}:
            raise SDPParseError(f"Invalid simulcast attribute: {raw_value!r}")
        streams: dict[RidDirection, list[list[str]]] = {}
        for raw_direction, raw_streams in zip(tokens[::2], tokens[1::2]):
            direction = RidDirection(raw_direction)
            if direction in streams:
                raise SDPParseError(f"Duplicate {direction} in simulcast attribute")
            streams[direction] = [alternatives.split(",") for alternatives in raw_streams.split(";")]
        return cls(streams=frozendict(streams))

    def serialize(self) -> str:  # noqa: D102
        return " ".join(
            f"{direction} {';'.join(','.join(alternatives) for alternatives in streams)}"
            for direction, streams in self.streams.items()
        )


@slots_dataclass
class PTimeAttribute(IntValueMixin, ValueAttribute):
    """SDP media attribute for the packet time, defined in :rfc:`8866#section-6.4`."""

    _name = "ptime"


@slots_dataclass
class MaxPTimeAttribute(IntValueMixin, ValueAttribute):
    """SDP media attribute for the maximum packet time, defined in :rfc:`8866#section-6.5`."""

    _name = "maxptime"


@slots_dataclass
class SctpPortAttribute(IntValueMixin, ValueAttribute):
    """SDP media attribute for the SCTP port, defined in :rfc:`8841#section-5`."""

    _name = "sctp-port"


@slots_dataclass
class MaxMessageSizeAttribute(IntValueMixin, ValueAttribute):
    """SDP media attribute for the maximum SCTP message size, defined in :rfc:`8841#section-6`."""

    _name = "max-message-size"
