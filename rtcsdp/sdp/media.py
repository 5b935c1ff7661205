"""SDP media section and related fields definitions and implementations."""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field as dataclass_field

from typing_extensions import Self, override

from rtcsdp.exceptions import SDPParseError
from rtcsdp.helpers import parse_int, slots_dataclass

from .attribute_map import AttributeMap
from .enums import BandwidthType, MediaType, TransportProtocol
from .common import (
    SDPAttributeField,
    SDPBandwidthField,
    SDPConnectionField,
    SDPEncryptionField,
    SDPField,
    SDPInformationField,
    SDPSection,
)


__all__ = [
    "SDPMediaFields",
    "SDPMediaMedia",
    "SDPMediaTitle",
    "SDPMediaConnection",
    "SDPMediaBandwidth",
    "SDPMediaEncryption",
    "SDPMediaAttributeField",
    "SDPMedia",
]


@dataclass
class SDPMediaFields(SDPField, ABC, registry=True, registry_attr="_type"):
    """Base class for SDP media description fields."""


@slots_dataclass
class SDPMediaMedia(SDPMediaFields):
    """
    SDP media field, defined in :rfc:`8866#section-5.14`.

    Spec::
        m=<media> <port> <proto> <fmt> ...
        m=<media> <port>/<number of ports> <proto> <fmt> ...

    Formats are kept as verbatim strings, since their meaning depends on the protocol.
    """

    _type = "m"
    _description = "media name and transport address"

    media: MediaType
    port: int
    protocol: TransportProtocol
    formats: list[str]
    number_of_ports: int | None = None

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        values = raw_value.split(" ")
        if len(values) < 4 or not all(values):
            raise SDPParseError(f"Media field needs media, port, proto and formats: {raw_value}")
        media, ports_spec, protocol, *formats = values
        port, sep, number_of_ports = ports_spec.partition("/")
        return cls(
            media=MediaType(media),
            port=parse_int(port, max_value=65535),
            number_of_ports=parse_int(number_of_ports, min_value=1) if sep else None,
            protocol=TransportProtocol(protocol),
            formats=formats,
        )

    def serialize(self) -> str:  # noqa: D102
        ports_spec = str(self.port)
        if self.number_of_ports is not None:
            ports_spec += f"/{self.number_of_ports}"
        return " ".join([str(self.media), ports_spec, str(self.protocol), *self.formats])


@slots_dataclass
class SDPMediaTitle(SDPInformationField, SDPMediaFields):
    """The :class:`SDPInformationField` of the media description."""

    _description = "media title"


@slots_dataclass
class SDPMediaConnection(SDPConnectionField, SDPMediaFields):
    """The :class:`SDPConnectionField` of the media description."""

    _description = "connection information -- optional if included at session-level"


@slots_dataclass
class SDPMediaBandwidth(SDPBandwidthField, SDPMediaFields):
    """The :class:`SDPBandwidthField` of the media description."""

    _description = "zero or more bandwidth information lines"


@slots_dataclass
class SDPMediaEncryption(SDPEncryptionField, SDPMediaFields):
    """The :class:`SDPEncryptionField` of the media description."""

    _description = "encryption key"


@slots_dataclass
class SDPMediaAttributeField(SDPAttributeField, SDPMediaFields):
    """The :class:`SDPAttributeField` of the media description."""

    _description = "zero or more media attribute lines"


@dataclass
class SDPMedia(SDPSection):
    """SDP section for media description fields, defined in :rfc:`8866#section-5.14`."""

    _fields_base = SDPMediaFields
    _start_field = SDPMediaMedia

    media: SDPMediaMedia
    title: SDPMediaTitle | None = None
    connection: SDPMediaConnection | None = None
    bandwidths: dict[BandwidthType, SDPMediaBandwidth] = dataclass_field(default_factory=dict)
    encryption: SDPMediaEncryption | None = None
    attributes: AttributeMap = dataclass_field(default_factory=AttributeMap)

    @property
    def kind(self) -> MediaType:
        """The media type of the section."""
        return self.media.media

    @property
    def port(self) -> int:
        """The transport port of the media."""
        return self.media.port

    @property
    def protocol(self) -> TransportProtocol:
        """The transport protocol of the media."""
        return self.media.protocol

    @property
    def formats(self) -> list[str]:
        """The media formats, as found in the media field."""
        return self.media.formats

    def bandwidth_values(self) -> dict[BandwidthType, int]:
        """The bandwidths of the media, by type."""
        return {bwtype: field.bandwidth for bwtype, field in self.bandwidths.items()}
