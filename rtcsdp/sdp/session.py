"""SDP session section and fields definitions and implementations."""

from __future__ import annotations

import logging
from abc import ABC
from dataclasses import dataclass, field as dataclass_field

from typing_extensions import Self, override

from rtcsdp.constants import SDP_MIMETYPE, SUPPORTED_SDP_VERSIONS
from rtcsdp.exceptions import SDPParseError
from rtcsdp.helpers import StrValueMixin, parse_int, slots_dataclass

from .attribute_map import AttributeMap
from .common import (
    SDPAttributeField,
    SDPBandwidthField,
    SDPConnectionField,
    SDPEncryptionField,
    SDPField,
    SDPInformationField,
    SDPSection,
    split_field_tokens,
)
from .enums import AddressType, BandwidthType, NetworkType
from .media import SDPMedia
from .time import SDPTime


__all__ = [
    "SDPSessionFields",
    "SDPSessionVersion",
    "SDPSessionOrigin",
    "SDPSessionName",
    "SDPSessionInformation",
    "SDPSessionURI",
    "SDPSessionEmail",
    "SDPSessionPhone",
    "SDPSessionConnection",
    "SDPSessionBandwidth",
    "SDPSessionEncryption",
    "SDPSessionAttributeField",
    "SDPSession",
    "parse",
]


_logger = logging.getLogger(__name__)


MAX_SESSION_ID: int = 2**64 - 1
EMPTY_FIELD_VALUE: str = "-"


@dataclass
class SDPSessionFields(SDPField, ABC, registry=True, registry_attr="_type"):
    """Base class for SDP session description fields."""


@slots_dataclass
class SDPSessionVersion(StrValueMixin, SDPSessionFields):
    """
    SDP version field, defined in :rfc:`8866#section-5.1`.

    Spec::
        v=0
    """

    _type = "v"
    _description = "protocol version"

    def __post_init__(self) -> None:
        if self.value not in SUPPORTED_SDP_VERSIONS:
            raise SDPParseError(f"Unsupported SDP version {self.value}")


@slots_dataclass
class SDPSessionOrigin(SDPSessionFields):
    """
    SDP origin field, defined in :rfc:`8866#section-5.2`.

    Spec::
        o=<username> <sess-id> <sess-version> <nettype> <addrtype> <unicast-address>

    A ``-`` username is stored as ``None``.
    """

    _type = "o"
    _description = "originator and session identifier"

    username: str | None
    sess_id: int
    sess_version: int
    nettype: NetworkType
    addrtype: AddressType
    unicast_address: str

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        (
            username,
            sess_id,
            sess_version,
            nettype,
            addrtype,
            unicast_address,
        ) = split_field_tokens(raw_value, 6)
        return cls(
            username=None if username == EMPTY_FIELD_VALUE else username,
            sess_id=parse_int(sess_id, max_value=MAX_SESSION_ID),
            sess_version=parse_int(sess_version, max_value=MAX_SESSION_ID),
            nettype=NetworkType(nettype),
            addrtype=AddressType(addrtype),
            unicast_address=unicast_address,
        )

    def serialize(self) -> str:  # noqa: D102
        return " ".join((
            self.username if self.username is not None else EMPTY_FIELD_VALUE,
            str(self.sess_id),
            str(self.sess_version),
            str(self.nettype),
            str(self.addrtype),
            self.unicast_address,
        ))


@slots_dataclass
class SDPSessionName(SDPSessionFields):
    """
    SDP session name field, defined in :rfc:`8866#section-5.3`.

    Spec::
        s=<session name>

    An empty session name, written as ``-`` (or a single space), is stored as ``None``.
    """

    _type = "s"
    _description = "session name"

    value: str | None = None

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        if raw_value in {EMPTY_FIELD_VALUE, " "}:
            return cls(value=None)
        if not raw_value:
            raise SDPParseError("Empty session name")
        return cls(value=raw_value)

    def serialize(self) -> str:  # noqa: D102
        return self.value if self.value is not None else EMPTY_FIELD_VALUE

    @property
    def session_name(self) -> str | None:
        """The session name."""
        return self.value


@slots_dataclass
class SDPSessionInformation(SDPInformationField, SDPSessionFields):
    """The :class:`SDPInformationField` of the session description."""

    _description = "session information"


@slots_dataclass
class SDPSessionURI(StrValueMixin, SDPSessionFields):
    """
    SDP session URI field, defined in :rfc:`8866#section-5.5`.

    Spec::
        u=<uri>
    """

    _type = "u"
    _description = "URI of description"

    @property
    def uri(self) -> str:
        """The URI."""
        return self.value


@slots_dataclass
class SDPSessionEmail(StrValueMixin, SDPSessionFields):
    """
    SDP session email field, defined in :rfc:`8866#section-5.6`.

    Spec::
        e=<email-address>
    """

    _type = "e"
    _description = "email address"

    @property
    def email_address(self) -> str:
        """The email address."""
        return self.value


@slots_dataclass
class SDPSessionPhone(StrValueMixin, SDPSessionFields):
    """
    SDP session phone field, defined in :rfc:`8866#section-5.6`.

    Spec::
        p=<phone-number>
    """

    _type = "p"
    _description = "phone number"

    @property
    def phone_number(self) -> str:
        """The phone number."""
        return self.value


@slots_dataclass
class SDPSessionConnection(SDPConnectionField, SDPSessionFields):
    """The :class:`SDPConnectionField` of the session description."""

    _description = "connection information -- not required if included in all media"


@slots_dataclass
class SDPSessionBandwidth(SDPBandwidthField, SDPSessionFields):
    """The :class:`SDPBandwidthField` of the session description."""

    _description = "zero or more bandwidth information lines"


@slots_dataclass
class SDPSessionEncryption(SDPEncryptionField, SDPSessionFields):
    """The :class:`SDPEncryptionField` of the session description."""

    _description = "encryption key"


@slots_dataclass
class SDPSessionAttributeField(SDPAttributeField, SDPSessionFields):
    """The :class:`SDPAttributeField` of the session description."""

    _description = "zero or more session attribute lines"


@dataclass
class SDPSession(SDPSection):
    """
    SDP section for session description fields, defined in :rfc:`8866#section-5`.

    Fields must appear in the order they are declared here, time sections
    and media sections own the fields that follow their start line.
    """

    _fields_base = SDPSessionFields
    _start_field = SDPSessionVersion

    version: SDPSessionVersion
    origin: SDPSessionOrigin
    name: SDPSessionName
    information: SDPSessionInformation | None = None
    uri: SDPSessionURI | None = None
    email: SDPSessionEmail | None = None
    phone: SDPSessionPhone | None = None
    connection: SDPSessionConnection | None = None
    bandwidths: dict[BandwidthType, SDPSessionBandwidth] = dataclass_field(default_factory=dict)
    time: list[SDPTime] = dataclass_field(default_factory=list)
    encryption: SDPSessionEncryption | None = None
    attributes: AttributeMap = dataclass_field(default_factory=AttributeMap)
    media: list[SDPMedia] = dataclass_field(default_factory=list)

    def __post_init__(self) -> None:
        if not len(self.time):
            raise SDPParseError("SDP session must have at least one time field")

    @property
    def mimetype(self) -> str:
        """The mimetype of the SDP session data. Always ``application/sdp``."""
        return SDP_MIMETYPE

    def bandwidth_values(self) -> dict[BandwidthType, int]:
        """The session-level bandwidths, by type."""
        return {bwtype: field.bandwidth for bwtype, field in self.bandwidths.items()}

    @classmethod
    def parse(cls, raw_value: str | bytes) -> Self:
        """
        Parse a whole SDP document.

        :raises SDPParseError: if the document is malformed, pointing to the offending line.
        """
        session = super().parse(raw_value)
        _logger.debug(
            f"Parsed SDP session {session.origin.sess_id} with {len(session.media)} media sections"
        )
        return session


def parse(raw_value: str | bytes) -> SDPSession:
    """Parse an SDP document into an :class:`SDPSession`."""
    return SDPSession.parse(raw_value)
