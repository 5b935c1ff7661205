from __future__ import annotations

import pytest

from rtcsdp.exceptions import SDPParseError, SDPUnknownFieldError
from rtcsdp.sdp import (
    AttributeMap,
    BandwidthType,
    CandidateAttribute,
    ExtensionMapAttribute,
    ExtensionMapDirection,
    FingerprintAttribute,
    FingerprintHashFunction,
    IceCandidateType,
    IceTcpType,
    IceTransportType,
    MediaType,
    MidAttribute,
    RidDirection,
    RtcpAttribute,
    RtcpFeedbackAttribute,
    RtcpMuxFlag,
    RtpCodecName,
    RtpMapAttribute,
    SDPAttribute,
    SDPSession,
    SimulcastAttribute,
    TransportProtocol,
    UnknownAttribute,
    parse,
)


MINIMAL_SDP = "v=0\r\no=- 1 1 IN IP4 127.0.0.1\r\ns=-\r\nt=0 0\r\n"


def with_lines(raw: str, after: str, *new_lines: str) -> str:
    """Insert lines right after the first line equal to ``after``."""
    lines = raw.split("\r\n")
    index = lines.index(after) + 1
    lines[index:index] = new_lines
    return "\r\n".join(lines)


class TestSDPSession:
    def test_roundtrip_fixtures(self, offer_raw, answer_raw):
        """Test that parsing and serializing the sample documents gives back the same bytes."""
        for raw in (offer_raw, answer_raw):
            session = SDPSession.parse(raw)
            assert str(session) == raw
            assert session.serialize() == raw.encode("utf-8")

    def test_fixtures_attributes_known(self, offer_raw, answer_raw):
        """Test that every attribute of the sample documents has a dedicated class."""
        for raw in (offer_raw, answer_raw):
            session = parse(raw)
            attribute_maps = [session.attributes, *(media.attributes for media in session.media)]
            for attributes in attribute_maps:
                unknown = [name for name, attr in attributes if isinstance(attr, UnknownAttribute)]
                assert not unknown

    def test_parse_bytes_and_bare_lf(self, offer_raw):
        """Test that bytes input and LF-only line terminators are accepted."""
        from_bytes = SDPSession.parse(offer_raw.encode("utf-8"))
        from_lf = SDPSession.parse(offer_raw.replace("\r\n", "\n"))
        assert str(from_bytes) == offer_raw
        assert str(from_lf) == offer_raw

    def test_unterminated_last_line(self):
        """Test that the last line can miss its terminator."""
        session = SDPSession.parse(MINIMAL_SDP.rstrip("\r\n"))
        assert str(session) == MINIMAL_SDP

    def test_offer_structure(self, offer_raw):
        """Test the parsed values of the sample offer."""
        session = SDPSession.parse(offer_raw)
        assert session.version.value == "0"
        assert session.origin.username is None
        assert session.origin.sess_id == 6842575828159820380
        assert session.origin.sess_version == 2
        assert session.name.value is None
        assert len(session.time) == 1
        assert session.time[0].time.start_time == 0
        assert session.time[0].time.stop_time == 0
        assert session.mimetype == "application/sdp"

        assert [media.kind for media in session.media] == [MediaType.AUDIO, MediaType.VIDEO]
        audio, video = session.media
        assert audio.port == 9
        assert audio.protocol is TransportProtocol.UDP_TLS_RTP_SAVPF
        assert audio.formats == ["111", "0", "8", "126"]
        assert audio.connection is not None
        assert audio.connection.address == "0.0.0.0"
        assert video.bandwidth_values() == {BandwidthType.AS: 2500}
        assert audio.bandwidth_values() == {}

    def test_answer_session_connection(self, answer_raw):
        """Test that a session-level connection field is parsed before the time section."""
        session = SDPSession.parse(answer_raw)
        assert session.name.value == "semantic-sdp"
        assert session.connection is not None
        assert session.connection.address == "0.0.0.0"
        assert "ice-lite" in session.attributes

    def test_candidates(self, offer_raw):
        """Test that ICE candidates are parsed with their optional parts and extensions."""
        session = SDPSession.parse(offer_raw)
        candidates = session.media[0].attributes.get_all(CandidateAttribute)
        assert len(candidates) == 3
        host_udp, host_tcp, srflx = candidates

        assert host_udp.foundation == "3348164321"
        assert host_udp.component == 1
        assert host_udp.transport is IceTransportType.UDP
        assert host_udp.priority == 2122260223
        assert host_udp.address == "192.168.1.20"
        assert host_udp.port == 51515
        assert host_udp.type is IceCandidateType.HOST
        assert dict(host_udp.extensions) == {"generation": "0", "network-id": "1"}

        assert host_tcp.transport is IceTransportType.TCP
        assert host_tcp.tcp_type is IceTcpType.ACTIVE

        assert srflx.type is IceCandidateType.SRFLX
        assert srflx.related_address == "192.168.1.20"
        assert srflx.related_port == 51515
        assert "end-of-candidates" in session.media[0].attributes

    def test_multiple_media_sections(self):
        """Test that each media section owns the fields following its m= line."""
        raw = (
            MINIMAL_SDP
            + "m=audio 5004 RTP/AVP 0\r\n"
            + "c=IN IP4 192.0.2.1\r\n"
            + "a=sendrecv\r\n"
            + "m=video 5006 RTP/AVP 96\r\n"
            + "b=TIAS:128000\r\n"
            + "a=rtpmap:96 VP8/90000\r\n"
            + "m=application 9 UDP/DTLS/SCTP webrtc-datachannel\r\n"
            + "a=sctp-port:5000\r\n"
        )
        session = SDPSession.parse(raw)
        assert len(session.media) == 3
        audio, video, data = session.media
        assert audio.connection is not None and audio.connection.address == "192.0.2.1"
        assert "sendrecv" in audio.attributes
        assert video.connection is None
        assert video.bandwidth_values() == {BandwidthType.TIAS: 128000}
        assert video.attributes.get_raw("rtpmap") == "96 VP8/90000"
        assert data.formats == ["webrtc-datachannel"]
        assert data.attributes.get_raw("sctp-port") == "5000"
        assert str(session) == raw

    def test_time_units(self):
        """Test that repeat and time zone values with units are converted to seconds."""
        raw = MINIMAL_SDP + "r=7d 1h 0 25h\r\nz=2882844526 -1h 2898848070 0\r\n"
        session = SDPSession.parse(raw)
        time_section = session.time[0]
        assert len(time_section.repeats) == 1
        repeat = time_section.repeats[0]
        assert repeat.interval == 604800
        assert repeat.duration == 3600
        assert repeat.offsets == [0, 90000]
        assert time_section.timezone is not None
        adjustments = time_section.timezone.adjustments
        assert [(a.adjustment_time, a.offset) for a in adjustments] == [
            (2882844526, -3600),
            (2898848070, 0),
        ]
        assert "r=604800 3600 0 90000\r\n" in str(session)

    def test_multiple_time_sections(self):
        """Test that multiple time sections are kept in order."""
        raw = MINIMAL_SDP + "r=86400 3600 0\r\nt=3034423619 3042462419\r\n"
        session = SDPSession.parse(raw)
        assert [t.time.start_time for t in session.time] == [0, 3034423619]
        assert len(session.time[0].repeats) == 1
        assert not session.time[1].repeats
        assert str(session) == raw

    def test_negative_repeat_rejected(self):
        """Test that only time zone offsets can be negative."""
        with pytest.raises(SDPParseError) as exc_info:
            SDPSession.parse(MINIMAL_SDP + "r=-1d 1h 0\r\n")
        assert exc_info.value.line_number == 5

    def test_missing_version(self, offer_raw):
        """Test that a document must start with the version field."""
        raw = offer_raw.split("\r\n", 1)[1]
        with pytest.raises(SDPParseError) as exc_info:
            SDPSession.parse(raw)
        assert exc_info.value.line_number == 1
        assert str(exc_info.value).startswith("line 1 ")

    def test_unsupported_version(self):
        """Test that only version 0 is supported."""
        with pytest.raises(SDPParseError) as exc_info:
            SDPSession.parse(MINIMAL_SDP.replace("v=0", "v=1"))
        assert exc_info.value.line_number == 1

    def test_missing_time(self):
        """Test that a time section is required."""
        with pytest.raises(SDPParseError):
            SDPSession.parse("v=0\r\no=- 1 1 IN IP4 127.0.0.1\r\ns=-\r\n")

    def test_missing_origin(self):
        """Test that missing required fields are reported as parse errors."""
        with pytest.raises(SDPParseError):
            SDPSession.parse("v=0\r\ns=-\r\nt=0 0\r\n")

    def test_empty(self):
        """Test that empty documents are rejected."""
        with pytest.raises(SDPParseError):
            SDPSession.parse("")

    def test_empty_line(self):
        """Test that empty lines are rejected, with their line number."""
        raw = "v=0\r\no=- 1 1 IN IP4 127.0.0.1\r\n\r\ns=-\r\nt=0 0\r\n"
        with pytest.raises(SDPParseError) as exc_info:
            SDPSession.parse(raw)
        assert exc_info.value.line_number == 3

    def test_out_of_order_field(self):
        """Test that fields out of the defined order are rejected."""
        raw = "v=0\r\ns=-\r\no=- 1 1 IN IP4 127.0.0.1\r\nt=0 0\r\n"
        with pytest.raises(SDPParseError) as exc_info:
            SDPSession.parse(raw)
        assert exc_info.value.line_number == 3

    def test_duplicate_field(self):
        """Test that non-repeatable fields cannot appear twice."""
        raw = "v=0\r\no=- 1 1 IN IP4 127.0.0.1\r\ns=-\r\ns=again\r\nt=0 0\r\n"
        with pytest.raises(SDPParseError) as exc_info:
            SDPSession.parse(raw)
        assert exc_info.value.line_number == 4

    def test_session_field_after_media(self):
        """Test that session-level fields cannot follow a media section."""
        raw = MINIMAL_SDP + "m=audio 9 RTP/AVP 0\r\nu=http://example.com\r\n"
        with pytest.raises(SDPParseError) as exc_info:
            SDPSession.parse(raw)
        assert exc_info.value.line_number == 6

    def test_unknown_field_type(self):
        """Test that unknown field types are rejected."""
        raw = with_lines(MINIMAL_SDP, "s=-", "y=whatever")
        with pytest.raises(SDPUnknownFieldError) as exc_info:
            SDPSession.parse(raw)
        assert exc_info.value.line_number == 4
        assert exc_info.value.line == "y=whatever"

    def test_malformed_line(self):
        """Test that lines without a single-character type are rejected."""
        raw = with_lines(MINIMAL_SDP, "t=0 0", "attr=value")
        with pytest.raises(SDPParseError) as exc_info:
            SDPSession.parse(raw)
        assert exc_info.value.line_number == 5

    def test_invalid_media_port(self):
        """Test that media ports must be in range."""
        with pytest.raises(SDPParseError) as exc_info:
            SDPSession.parse(MINIMAL_SDP + "m=audio 70000 RTP/AVP 0\r\n")
        assert exc_info.value.line_number == 5

    def test_invalid_utf8(self):
        """Test that undecodable bytes are reported as a parse error on their line."""
        with pytest.raises(SDPParseError) as exc_info:
            SDPSession.parse(MINIMAL_SDP.encode() + b"a=x:\xff\xfe\r\n")
        assert exc_info.value.line_number == 5
        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)

    @pytest.mark.parametrize(
        "raw",
        [
            MINIMAL_SDP.replace("o=- 1 1", "o=- \u0661\u0662 1"),
            MINIMAL_SDP.replace("t=0 0", "t=\uff10 0"),
            MINIMAL_SDP + "r=\u0661d 1h 0\r\n",
            MINIMAL_SDP + "m=audio \u0669 RTP/AVP 0\r\n",
        ],
    )
    def test_non_ascii_digits(self, raw):
        """Test that numeric values only accept ASCII digits."""
        with pytest.raises(SDPParseError):
            SDPSession.parse(raw)

    def test_unknown_attributes_preserved(self, offer_raw):
        """Test that unregistered attributes keep their name case and raw value."""
        raw = with_lines(offer_raw, "a=mid:1", "a=X-Custom-Thing:some value: with colons", "a=x-google-flag")
        session = SDPSession.parse(raw)
        attributes = session.media[1].attributes
        custom = attributes.get_raw_all("x-custom-thing")
        assert custom == ["some value: with colons"]
        names = [attr.name for _, attr in attributes if isinstance(attr, UnknownAttribute)]
        assert names == ["X-Custom-Thing", "x-google-flag"]
        assert str(session) == raw

    def test_flag_with_value(self):
        """Test that flag attributes cannot carry a value."""
        with pytest.raises(SDPParseError) as exc_info:
            SDPSession.parse(MINIMAL_SDP + "a=rtcp-mux:1\r\n")
        assert exc_info.value.line_number == 5

    def test_value_attribute_without_value(self):
        """Test that value attributes require a value."""
        with pytest.raises(SDPParseError) as exc_info:
            SDPSession.parse(MINIMAL_SDP + "m=audio 9 RTP/AVP 0\r\na=mid\r\n")
        assert exc_info.value.line_number == 6

    def test_malformed_attribute_value(self):
        """Test that malformed values of registered attributes are reported with their line."""
        raw = MINIMAL_SDP + "m=audio 9 RTP/AVP 0\r\na=rtpmap:abc PCMU/8000\r\n"
        with pytest.raises(SDPParseError) as exc_info:
            SDPSession.parse(raw)
        assert exc_info.value.line_number == 6
        assert exc_info.value.line == "a=rtpmap:abc PCMU/8000"


class TestAttributes:
    def test_registry_dispatch(self):
        """Test that attribute names are looked up case-insensitively."""
        assert SDPAttribute.get_class_for_attribute_name("RTPMAP") is RtpMapAttribute
        assert SDPAttribute.get_class_for_attribute_name("x-whatever") is UnknownAttribute

    def test_rtpmap(self):
        """Test rtpmap attributes with and without encoding parameters."""
        opus = SDPAttribute.parse("rtpmap:111 opus/48000/2")
        assert isinstance(opus, RtpMapAttribute)
        assert opus.codec is RtpCodecName.OPUS
        assert opus.clock_rate == 48000
        assert opus.channels == 2
        custom = SDPAttribute.parse("rtpmap:98 X-Custom/90000")
        assert isinstance(custom, RtpMapAttribute)
        assert custom.codec.is_unknown
        assert custom.channels is None
        assert str(custom) == "rtpmap:98 X-Custom/90000"

    def test_rtcp_feedback_wildcard(self):
        """Test that the wildcard payload type of rtcp-fb is kept."""
        feedback = SDPAttribute.parse("rtcp-fb:* nack pli")
        assert isinstance(feedback, RtcpFeedbackAttribute)
        assert feedback.payload_type is None
        assert feedback.feedback_id == "nack"
        assert feedback.parameter == "pli"
        assert str(feedback) == "rtcp-fb:* nack pli"

    def test_rtcp_port_only(self):
        """Test that the rtcp attribute address is optional."""
        rtcp = SDPAttribute.parse("rtcp:53020")
        assert isinstance(rtcp, RtcpAttribute)
        assert rtcp.port == 53020
        assert rtcp.address is None
        assert str(rtcp) == "rtcp:53020"
        with pytest.raises(SDPParseError):
            SDPAttribute.parse("rtcp:53020 IN IP4")

    def test_fingerprint(self):
        """Test that fingerprints are parsed to digests, and serialized upper-case."""
        fingerprint = SDPAttribute.parse("fingerprint:SHA-256 0a:1B:2c")
        assert isinstance(fingerprint, FingerprintAttribute)
        assert fingerprint.hash_function == FingerprintHashFunction.SHA_256
        assert fingerprint.fingerprint.digest == b"\x0a\x1b\x2c"
        assert str(fingerprint) == "fingerprint:sha-256 0A:1B:2C"
        with pytest.raises(SDPParseError):
            SDPAttribute.parse("fingerprint:sha-256 zz:00")

    def test_extmap_direction_and_attributes(self):
        """Test that extmap directions and extension attributes are kept."""
        extmap = SDPAttribute.parse("extmap:5/sendonly urn:example:ext attr1 attr2")
        assert isinstance(extmap, ExtensionMapAttribute)
        assert extmap.id == 5
        assert extmap.direction is ExtensionMapDirection.SENDONLY
        assert extmap.uri == "urn:example:ext"
        assert extmap.extension_attributes == ["attr1", "attr2"]
        assert str(extmap) == "extmap:5/sendonly urn:example:ext attr1 attr2"

    def test_simulcast(self):
        """Test that simulcast streams are split by direction and alternatives."""
        simulcast = SDPAttribute.parse("simulcast:send 1,~4;2;3 recv c")
        assert isinstance(simulcast, SimulcastAttribute)
        assert simulcast.send == [["1", "~4"], ["2"], ["3"]]
        assert simulcast.recv == [["c"]]
        assert list(simulcast.streams) == [RidDirection.SEND, RidDirection.RECV]
        assert str(simulcast) == "simulcast:send 1,~4;2;3 recv c"
        with pytest.raises(SDPParseError):
            SDPAttribute.parse("simulcast:send 1 send 2")

    def test_candidate_errors(self):
        """Test that malformed candidates are rejected."""
        with pytest.raises(SDPParseError):
            SDPAttribute.parse("candidate:1 1 UDP 1 192.0.2.1 5000 type host")
        with pytest.raises(SDPParseError):
            SDPAttribute.parse("candidate:1 1 UDP 1 192.0.2.1 5000 typ host generation")
        with pytest.raises(SDPParseError):
            SDPAttribute.parse("candidate:1 1 SCTP 1 192.0.2.1 5000 typ host")


class TestAttributeMap:
    def test_append_and_get(self):
        """Test typed lookups of attributes."""
        attributes = AttributeMap()
        mid = attributes.append_raw("mid", "audio")
        attributes.append_raw("rtpmap", "0 PCMU/8000")
        attributes.append_raw("rtpmap", "8 PCMA/8000")
        attributes.append_raw("rtcp-mux")

        assert isinstance(mid, MidAttribute)
        assert attributes.get(MidAttribute) is mid
        assert [rtp_map.payload_type for rtp_map in attributes.get_all(RtpMapAttribute)] == [0, 8]
        assert attributes.get(CandidateAttribute) is None
        assert attributes.get_all(CandidateAttribute) == []
        assert len(attributes) == 4
        assert [name for name, _ in attributes] == ["mid", "rtpmap", "rtpmap", "rtcp-mux"]

    def test_raw_values(self):
        """Test raw lookups, presence checks and flags."""
        attributes = AttributeMap()
        attributes.append(RtcpMuxFlag())
        attributes.append_raw("X-Thing", "value")

        assert "rtcp-mux" in attributes
        assert "RTCP-MUX" in attributes
        assert attributes.get_raw("rtcp-mux") is None
        assert attributes.get_raw("x-thing") == "value"
        assert attributes.get_raw("missing") is None
        assert attributes.get_raw("missing", "default") == "default"
        assert "missing" not in attributes

    def test_unknown_class_lookup(self):
        """Test that the catch-all attribute class cannot be looked up by type."""
        with pytest.raises(TypeError):
            AttributeMap().get(UnknownAttribute)

    def test_remove_copy_and_str(self):
        """Test removal, copies and serialization."""
        attributes = AttributeMap()
        attributes.append_raw("sendrecv")
        attributes.append_raw("ptime", "20")
        attributes.append_raw("ptime", "40")
        copy = attributes.copy()

        attributes.remove_all("PTIME")
        assert "ptime" not in attributes
        assert copy.get_raw_all("ptime") == ["20", "40"]
        assert copy != attributes
        assert str(attributes) == "a=sendrecv\r\n"
        assert str(copy) == "a=sendrecv\r\na=ptime:20\r\na=ptime:40\r\n"

    def test_malformed_raw_value(self):
        """Test that malformed raw values are rejected and not stored."""
        attributes = AttributeMap()
        with pytest.raises(SDPParseError):
            attributes.append_raw("ptime", "twenty")
        assert len(attributes) == 0
