"""Shared fixtures: frame builders and capture writers."""

from __future__ import annotations

import struct

import dpkt
import pytest

from goose_decoder.protocol.registry import GOOSE_ETHERTYPE, default_registry

SRC_MAC = bytes.fromhex("001122334455")
DST_MAC = bytes.fromhex("010ccd010001")

# appID 0x1234, length 0x0010, reserved 0/0, payload AA BB CC
GOOSE_EXAMPLE = bytes.fromhex("3412100000000000") + b"\xAA\xBB\xCC"


def _ethernet_frame(
    payload: bytes,
    ethertype: int = GOOSE_ETHERTYPE,
    src: bytes = SRC_MAC,
    dst: bytes = DST_MAC,
) -> bytes:
    return dst + src + struct.pack(">H", ethertype) + payload


def _write_pcap(path, frames, linktype=dpkt.pcap.DLT_EN10MB):
    with open(path, "wb") as f:
        writer = dpkt.pcap.Writer(f, linktype=linktype)
        for i, frame in enumerate(frames):
            writer.writepkt(frame, ts=1_700_000_000 + i)
    return path


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def ethernet_frame():
    return _ethernet_frame


@pytest.fixture
def goose_frame():
    """Ethernet frame carrying the example GOOSE layer."""
    return _ethernet_frame(GOOSE_EXAMPLE)


@pytest.fixture
def write_pcap(tmp_path):
    def write(frames, name="capture.pcap", linktype=dpkt.pcap.DLT_EN10MB):
        return _write_pcap(tmp_path / name, frames, linktype)
    return write
