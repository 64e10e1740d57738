"""
Тесты кодека фреймов (RFC 6455, раздел 5).
"""
import logging
import struct

import pytest

from wsecho.errors import (
    ConnectionClosed,
    FrameTooLarge,
    TruncatedFrame,
    UnmaskedFrame,
    UnsupportedFrameKind,
    UnsupportedLengthEncoding,
)
from wsecho.frames import (
    FrameKind,
    apply_mask,
    decode_header_and_unmask,
    encode,
    encode_masked,
    read_server_frame,
)

MASK_KEY = bytes([0x37, 0xFA, 0x21, 0x3D])


class TestEncode:
    def test_rfc_unmasked_hello(self):
        # RFC 6455, раздел 5.7
        assert encode(b"Hello") == bytes([0x81, 0x05]) + b"Hello"

    def test_empty_payload(self):
        assert encode(b"") == bytes([0x81, 0x00])

    def test_125_bytes_uses_inline_length(self):
        frame = encode(b"a" * 125)
        assert frame[:2] == bytes([0x81, 125])
        assert len(frame) == 2 + 125

    def test_126_bytes_uses_16_bit_length(self):
        frame = encode(b"a" * 126)
        assert frame[:4] == bytes([0x81, 126, 0x00, 126])
        assert frame[4:] == b"a" * 126

    def test_65535_bytes_fits(self):
        frame = encode(b"a" * 65535)
        assert frame[1] == 126
        assert struct.unpack(">H", frame[2:4])[0] == 65535

    @pytest.mark.parametrize("n", [65536, 65537])
    def test_too_large(self, n):
        with pytest.raises(FrameTooLarge) as exc:
            encode(b"a" * n)
        assert exc.value.length == n

    def test_server_frames_are_unmasked(self):
        for n in (0, 7, 125, 126, 1000):
            assert not encode(b"x" * n)[1] & 0x80


class TestMask:
    def test_rfc_masked_hello(self):
        assert encode_masked(b"Hello", MASK_KEY) == bytes(
            [0x81, 0x85, 0x37, 0xFA, 0x21, 0x3D, 0x7F, 0x9F, 0x4D, 0x51, 0x58]
        )

    @pytest.mark.parametrize("key", [b"\x00\x00\x00\x00", b"\xff\xff\xff\xff", MASK_KEY])
    def test_mask_is_self_inverse(self, key):
        payload = bytes(range(256)) * 3
        assert apply_mask(apply_mask(payload, key), key) == payload

    def test_key_cycles_modulo_4(self):
        masked = apply_mask(b"\x00" * 9, b"\x01\x02\x03\x04")
        assert masked == b"\x01\x02\x03\x04\x01\x02\x03\x04\x01"

    def test_rejects_wrong_key_width(self):
        with pytest.raises(ValueError):
            apply_mask(b"abc", b"\x01\x02\x03")

    def test_random_key_when_not_given(self):
        frame = encode_masked(b"abc")
        assert frame[1] == 0x80 | 3
        assert apply_mask(frame[6:], frame[2:6]) == b"abc"


class TestDecode:
    def test_rfc_masked_hello(self, read_from):
        data = bytes([0x81, 0x85, 0x37, 0xFA, 0x21, 0x3D, 0x7F, 0x9F, 0x4D, 0x51, 0x58])
        assert read_from(decode_header_and_unmask, data) == b"Hello"

    @pytest.mark.parametrize("n", [0, 1, 125, 126, 500, 65535])
    def test_round_trip_and_length_class(self, read_from, n):
        payload = bytes(i % 251 for i in range(n))
        frame = encode_masked(payload, MASK_KEY)
        indicator = frame[1] & 0x7F
        assert indicator == (n if n <= 125 else 126)
        assert read_from(decode_header_and_unmask, frame) == payload

    def test_json_payload(self, read_from):
        assert read_from(decode_header_and_unmask, encode_masked(b'{"a":1}', b"\x10\x20\x30\x40")) == b'{"a":1}'

    def test_only_one_frame_is_consumed(self, read_from):
        async def two(reader):
            return await decode_header_and_unmask(reader), await decode_header_and_unmask(reader)

        data = encode_masked(b"first", MASK_KEY) + encode_masked(b"second", b"\x09\x08\x07\x06")
        assert read_from(two, data) == (b"first", b"second")

    def test_64_bit_length_is_unsupported(self, read_from):
        data = bytes([0x81, 0x80 | 127]) + struct.pack(">Q", 70000) + MASK_KEY
        with pytest.raises(UnsupportedLengthEncoding) as exc:
            read_from(decode_header_and_unmask, data)
        assert exc.value.indicator == 127

    def test_truncated_payload(self, read_from):
        data = bytes([0x81, 0x80 | 126]) + struct.pack(">H", 500) + MASK_KEY + b"x" * 10
        with pytest.raises(TruncatedFrame) as exc:
            read_from(decode_header_and_unmask, data)
        assert (exc.value.expected, exc.value.received) == (500, 10)

    @pytest.mark.parametrize("data", [
        bytes([0x81]),
        bytes([0x81, 0x80 | 126, 0x01]),
        bytes([0x81, 0x85, 0x37, 0xFA]),
    ])
    def test_truncated_header(self, read_from, data):
        with pytest.raises(TruncatedFrame):
            read_from(decode_header_and_unmask, data)

    def test_eof_at_frame_boundary(self, read_from):
        with pytest.raises(ConnectionClosed):
            read_from(decode_header_and_unmask, b"")

    def test_unmasked_client_frame(self, read_from):
        with pytest.raises(UnmaskedFrame):
            read_from(decode_header_and_unmask, encode(b"Hello"))

    @pytest.mark.parametrize("first_byte", [0x88, 0x89, 0x8A, 0x82, 0x80, 0x01])
    def test_non_text_frames_are_rejected(self, read_from, first_byte):
        data = bytes([first_byte, 0x80]) + MASK_KEY
        with pytest.raises(UnsupportedFrameKind) as exc:
            read_from(decode_header_and_unmask, data)
        assert exc.value.opcode == first_byte & 0x0F

    def test_unmask_trace_at_debug(self, read_from, caplog):
        caplog.set_level(logging.DEBUG, logger="wsecho")
        read_from(decode_header_and_unmask, encode_masked(b"Hi", MASK_KEY))
        trace = [r.getMessage() for r in caplog.records if "[MASK]" in r.getMessage()]
        assert len(trace) == 2
        assert f"{ord('H'):08b}" in trace[0]


class TestReadServerFrame:
    def test_round_trip(self, read_from):
        assert read_from(read_server_frame, encode(b"y" * 300)) == b"y" * 300

    def test_rejects_masked(self, read_from):
        with pytest.raises(UnmaskedFrame):
            read_from(read_server_frame, encode_masked(b"y", MASK_KEY))


def test_frame_kind_has_only_text():
    assert list(FrameKind) == [FrameKind.TEXT]
    assert FrameKind.TEXT == 0x1
