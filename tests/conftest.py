from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import pytest

from rtcsdp.exceptions import TransportError
from rtcsdp.sdp import FingerprintHashFunction, MediaType
from rtcsdp.transport import TransportProperties


_logger = logging.getLogger(__name__)


FIXTURES_PATH = Path(__file__).parent / "fixtures"

LOCAL_FINGERPRINT = (
    "3D:4C:65:7A:0E:1B:22:98:F0:11:D4:5C:9A:E2:37:60:8B:0D:42:AA:13:F5:C6:79:E8:21:04:BB:5D:C3:9F:17"
)


def read_fixture(name: str) -> str:
    """Read an SDP fixture file, keeping its CRLF line terminators."""
    with open(FIXTURES_PATH / name, encoding="utf-8", newline="") as fp:
        return fp.read()


@pytest.fixture()
def offer_raw() -> str:
    """A browser offer with bundled audio and simulcast video."""
    return read_fixture("offer.sdp")


@pytest.fixture()
def answer_raw() -> str:
    """An ICE lite media server answer, receiving simulcast video."""
    return read_fixture("answer.sdp")


@dataclass
class FakeSourceGroup:
    kind: MediaType
    mid: Optional[str] = None
    rid: Optional[str] = None
    ssrc: Optional[int] = None
    rtx_ssrc: Optional[int] = None


@dataclass
class FakeConnection:
    username: str
    properties: TransportProperties
    remote_properties: Optional[TransportProperties] = None
    local_properties: Optional[TransportProperties] = None
    remote_candidates: list[tuple[str, int]] = field(default_factory=list)
    source_groups: list[FakeSourceGroup] = field(default_factory=list)

    def add_incoming_source_group(
        self,
        kind: MediaType,
        mid: Optional[str] = None,
        rid: Optional[str] = None,
        ssrc: Optional[int] = None,
        rtx_ssrc: Optional[int] = None,
    ) -> FakeSourceGroup:
        source_group = FakeSourceGroup(kind=kind, mid=mid, rid=rid, ssrc=ssrc, rtx_ssrc=rtx_ssrc)
        self.source_groups.append(source_group)
        return source_group

    def add_remote_candidate(self, ip: str, port: int) -> None:
        self.remote_candidates.append((ip, port))

    def set_remote_properties(self, properties: TransportProperties) -> None:
        self.remote_properties = properties

    def set_local_properties(self, properties: TransportProperties) -> None:
        self.local_properties = properties


class FakeTransport:
    def __init__(self, local_port: int):
        self._local_port = local_port
        self.connections: list[FakeConnection] = []

    @property
    def local_port(self) -> int:
        return self._local_port

    def add_connection(self, username: str, properties: TransportProperties) -> FakeConnection:
        connection = FakeConnection(username=username, properties=properties)
        self.connections.append(connection)
        return connection


class FakeMediaEngine:
    """In-memory media engine, recording the transports it creates."""

    default_port: int = 40000

    def __init__(self, fail_transport: bool = False):
        self.fail_transport = fail_transport
        self.transports: list[FakeTransport] = []
        self.fingerprint_requests: list[FingerprintHashFunction] = []

    def certificate_fingerprint(self, hash_function: FingerprintHashFunction) -> str:
        self.fingerprint_requests.append(hash_function)
        return LOCAL_FINGERPRINT

    def create_transport(self, local_port: Optional[int] = None) -> FakeTransport:
        if self.fail_transport:
            raise TransportError("no ports available")
        transport = FakeTransport(local_port if local_port is not None else self.default_port)
        _logger.debug(f"Created fake transport on port {transport.local_port}")
        self.transports.append(transport)
        return transport


@pytest.fixture()
def media_engine() -> FakeMediaEngine:
    """A fake media engine."""
    return FakeMediaEngine()


@pytest.fixture()
def failing_media_engine() -> FakeMediaEngine:
    """A fake media engine that fails to create transports."""
    return FakeMediaEngine(fail_transport=True)


@pytest.fixture()
def local_fingerprint() -> str:
    """The certificate fingerprint reported by the fake media engine."""
    return LOCAL_FINGERPRINT
