"""Tests for the GOOSE layer decoder."""

import pytest

from goose_decoder.protocol.errors import DecodeError, TruncatedHeaderError
from goose_decoder.protocol.goose import (
    GOOSE_HEADER_SIZE,
    GooseLayer,
    build_goose_header,
    decode_goose,
)
from goose_decoder.protocol.pipeline import OpaquePayload, PacketBuilder
from goose_decoder.protocol.registry import LayerType


def _decode(data, registry):
    builder = PacketBuilder(registry)
    directive = decode_goose(data, builder)
    assert len(builder.layers) == 1
    return builder.layers[0], directive


def test_decode_example(registry):
    """34 12 10 00 00 00 00 00 + AA BB CC -> appID 0x1234, length 16."""
    data = bytes.fromhex("3412100000000000AABBCC")
    layer, directive = _decode(data, registry)

    assert isinstance(layer, GooseLayer)
    assert layer.app_id == 0x1234 == 4660
    assert layer.length == 0x0010 == 16
    assert layer.reserved1 == 0
    assert layer.reserved2 == 0
    assert layer.payload == b"\xAA\xBB\xCC"
    assert list(layer.payload) == [0xAA, 0xBB, 0xCC]
    assert layer.layer_type == LayerType.GOOSE
    assert directive == OpaquePayload()


def test_contents_is_header_region(registry):
    data = bytes.fromhex("3412100000000000AABBCC")
    layer, _ = _decode(data, registry)
    assert layer.contents == data[:8]
    assert len(layer.contents) + len(layer.payload) == len(data)


@pytest.mark.parametrize("size", range(GOOSE_HEADER_SIZE))
def test_truncated_header(size, registry):
    """Anything shorter than 8 bytes fails without adding a layer."""
    builder = PacketBuilder(registry)
    with pytest.raises(TruncatedHeaderError) as exc_info:
        decode_goose(b"\x01" * size, builder)
    assert exc_info.value.needed == 8
    assert exc_info.value.available == size
    assert isinstance(exc_info.value, DecodeError)
    assert builder.layers == ()


def test_header_only_has_empty_payload(registry):
    layer, directive = _decode(bytes.fromhex("0100020000000000"), registry)
    assert layer.app_id == 1
    assert layer.length == 2
    assert len(layer.payload) == 0
    assert directive == OpaquePayload()


def test_reserved_bytes_are_not_decoded(registry):
    """Non-zero reserved words still decode as zero; the raw bytes stay in contents."""
    data = bytes.fromhex("0100020011223344") + b"\x00"
    layer, _ = _decode(data, registry)
    assert layer.reserved1 == 0
    assert layer.reserved2 == 0
    assert bytes(layer.contents[4:8]) == bytes.fromhex("11223344")


def test_payload_is_view_of_frame(registry):
    buf = bytearray(bytes.fromhex("3412100000000000AABBCC"))
    layer, _ = _decode(memoryview(buf), registry)
    assert isinstance(layer.payload, memoryview)
    buf[8] = 0x55
    assert layer.payload[0] == 0x55


def test_detach_copies_payload(registry):
    buf = bytearray(bytes.fromhex("3412100000000000AABBCC"))
    layer, _ = _decode(memoryview(buf), registry)
    detached = layer.detach()
    buf[8] = 0x55
    assert detached.payload == b"\xAA\xBB\xCC"
    assert detached.app_id == layer.app_id
    assert detached.length == layer.length


@pytest.mark.parametrize(
    "app_id,length",
    [(0, 0), (0x1234, 0x0010), (0xFFFF, 0xFFFF), (0x00FF, 0xFF00)],
)
def test_header_fields_reencode(app_id, length, registry):
    """Decoding then re-encoding reproduces app_id and length."""
    header = build_goose_header(app_id, length)
    layer, _ = _decode(header + b"\x01\x02", registry)
    assert (layer.app_id, layer.length) == (app_id, length)
    assert layer.header_bytes() == header


def test_build_header_layout():
    assert build_goose_header(0x1234, 0x0010) == bytes.fromhex("3412100000000000")
    assert len(build_goose_header(1, 2, 3, 4)) == GOOSE_HEADER_SIZE


@pytest.mark.parametrize("value", [-1, 0x10000])
def test_build_header_out_of_range(value):
    with pytest.raises(ValueError):
        build_goose_header(value, 0)
    with pytest.raises(ValueError):
        build_goose_header(0, value)


def test_repr():
    layer = GooseLayer(app_id=0x1234, length=16, payload=memoryview(b"\xAA"))
    r = repr(layer)
    assert "0x1234" in r
    assert "aa" in r


def test_to_dict(registry):
    layer, _ = _decode(bytes.fromhex("3412100000000000AABBCC"), registry)
    assert layer.to_dict() == {
        "app_id": 4660,
        "length": 16,
        "reserved1": 0,
        "reserved2": 0,
        "payload_hex": "aa bb cc",
        "payload_length": 3,
    }
