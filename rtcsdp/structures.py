"""Common value structures shared by the SDP and WebRTC layers."""

from __future__ import annotations

import re

from typing_extensions import Self

from .exceptions import ParseError
from .helpers import ParseableSerializable, slots_dataclass


__all__ = [
    "CertificateFingerprint",
]


HEX_OCTET_PAT: str = r"[0-9A-Fa-f]{1,2}"
FINGERPRINT_PAT: str = rf"{HEX_OCTET_PAT}(?::{HEX_OCTET_PAT})*"


@slots_dataclass(frozen=True)
class CertificateFingerprint(ParseableSerializable):
    """
    A certificate fingerprint, as the raw digest bytes.

    Parsed from and serialized to colon-separated hex octets, defined in :rfc:`8122#section-5`.
    Serialization always uses upper-case hex digits.
    """

    digest: bytes

    @classmethod
    def parse(cls, raw_value: str) -> Self:  # noqa: D102
        if not re.fullmatch(FINGERPRINT_PAT, raw_value):
            raise ParseError(f"Invalid certificate fingerprint: {raw_value!r}")
        return cls(digest=bytes(int(octet, 16) for octet in raw_value.split(":")))

    def serialize(self) -> str:  # noqa: D102
        return ":".join(f"{octet:02X}" for octet in self.digest)

    def __str__(self) -> str:
        return self.serialize()
