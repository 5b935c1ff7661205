"""Interfaces of the media transport engine driven by the negotiation."""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Iterator, MutableMapping, Optional, Protocol, Union, runtime_checkable

from rtcsdp.sdp import FingerprintHashFunction, MediaType


__all__ = [
    "PropertyValue",
    "TransportProperties",
    "SourceGroup",
    "Connection",
    "Transport",
    "MediaEngine",
]


PropertyValue = Union[str, bool, int]


class TransportProperties(MutableMapping[str, PropertyValue]):
    """Flat, ordered, bag of properties passed to the transport engine."""

    __slots__ = ("_properties",)

    def __init__(self, *args: Any, **kwargs: PropertyValue):
        self._properties: dict[str, PropertyValue] = {}
        self.update(*args, **kwargs)

    def __setitem__(self, key: str, value: PropertyValue) -> None:
        if not isinstance(key, str):
            raise TypeError(f"Property names must be strings, got {key!r}")
        if not isinstance(value, (str, bool, int)):
            raise TypeError(f"Unsupported value for property {key}: {value!r}")
        self._properties[key] = value

    def __getitem__(self, key: str) -> PropertyValue:
        return self._properties[key]

    def __delitem__(self, key: str) -> None:
        del self._properties[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._properties)

    def __len__(self) -> int:
        return len(self._properties)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._properties!r})"


@runtime_checkable
class SourceGroup(Protocol):
    """An incoming group of RTP sources, as created by the engine."""


@runtime_checkable
class Connection(Protocol):
    """An ICE/DTLS connection with a remote peer, on a bundled transport."""

    @abstractmethod
    def add_incoming_source_group(
        self,
        kind: MediaType,
        mid: Optional[str] = None,
        rid: Optional[str] = None,
        ssrc: Optional[int] = None,
        rtx_ssrc: Optional[int] = None,
    ) -> SourceGroup:
        """Register an incoming source group, identified by mid and rid, or by ssrc."""

    @abstractmethod
    def add_remote_candidate(self, ip: str, port: int) -> None:
        """Add a remote ICE candidate."""

    @abstractmethod
    def set_remote_properties(self, properties: TransportProperties) -> None:
        """Set the RTP properties (codecs and extensions) of the remote peer."""

    @abstractmethod
    def set_local_properties(self, properties: TransportProperties) -> None:
        """Set the local RTP properties (codecs and extensions)."""


@runtime_checkable
class Transport(Protocol):
    """A bundled transport, listening on a single local port."""

    @property
    @abstractmethod
    def local_port(self) -> int:
        """The local UDP port of the transport."""

    @abstractmethod
    def add_connection(self, username: str, properties: TransportProperties) -> Connection:
        """Create a connection for the given ICE username, with ICE and DTLS properties."""


@runtime_checkable
class MediaEngine(Protocol):
    """
    The media engine, providing transports and the local DTLS certificate.

    Engines report their failures raising :class:`~rtcsdp.exceptions.TransportError`.
    """

    @abstractmethod
    def certificate_fingerprint(self, hash_function: FingerprintHashFunction) -> str:
        """The fingerprint of the local DTLS certificate, as colon-separated hex octets."""

    @abstractmethod
    def create_transport(self, local_port: Optional[int] = None) -> Transport:
        """Create a new bundled transport, on the given or a random port."""
