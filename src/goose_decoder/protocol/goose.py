"""GOOSE-style application layer.

Header layout (all fields little-endian)::

    +----------+----------+-----------+-----------+------------------+
    |  AppID   |  Length  | Reserved1 | Reserved2 |     Payload      |
    | 2 bytes  | 2 bytes  |  2 bytes  |  2 bytes  | variable length  |
    +----------+----------+-----------+-----------+------------------+

The reserved words are not read from the wire; decoded layers always carry
zero in both. The raw bytes stay available through ``contents``.
"""

from __future__ import annotations

from dataclasses import dataclass

import dpkt

from .errors import TruncatedHeaderError
from .pipeline import Directive, Layer, OpaquePayload, PacketBuilder
from .registry import LayerType

GOOSE_HEADER_SIZE = 8


class GooseHeader(dpkt.Packet):
    """Fixed 8-byte GOOSE header."""

    __byte_order__ = "<"
    __hdr__ = (
        ("appid", "H", 0),
        ("length", "H", 0),
        ("reserved1", "H", 0),
        ("reserved2", "H", 0),
    )


@dataclass
class GooseLayer(Layer):
    """A decoded GOOSE layer. ``payload`` is a view of the frame."""

    LAYER_TYPE = LayerType.GOOSE
    app_id: int = 0
    length: int = 0
    reserved1: int = 0
    reserved2: int = 0

    def header_bytes(self) -> bytes:
        """Re-encode the header fields."""
        return build_goose_header(
            self.app_id, self.length, self.reserved1, self.reserved2
        )

    def detach(self) -> GooseLayer:
        """Return a copy that owns its bytes and can outlive the frame."""
        return GooseLayer(
            contents=memoryview(bytes(self.contents)),
            payload=memoryview(bytes(self.payload)),
            app_id=self.app_id,
            length=self.length,
            reserved1=self.reserved1,
            reserved2=self.reserved2,
        )

    def to_dict(self) -> dict:
        return {
            "app_id": self.app_id,
            "length": self.length,
            "reserved1": self.reserved1,
            "reserved2": self.reserved2,
            "payload_hex": self.payload.hex(" "),
            "payload_length": len(self.payload),
        }

    def __repr__(self) -> str:
        return (
            f"GooseLayer(app_id=0x{self.app_id:04X}, length={self.length}, "
            f"payload={self.payload.hex(' ') if len(self.payload) else '(empty)'})"
        )


def build_goose_header(
    app_id: int, length: int, reserved1: int = 0, reserved2: int = 0
) -> bytes:
    """Encode an 8-byte GOOSE header.

    Raises:
        ValueError: If a field does not fit in 16 bits.
    """
    fields = {
        "app_id": app_id,
        "length": length,
        "reserved1": reserved1,
        "reserved2": reserved2,
    }
    for name, value in fields.items():
        if not 0 <= value <= 0xFFFF:
            raise ValueError(f"{name} must be 0-0xFFFF, got {value}")
    header = GooseHeader(
        appid=app_id, length=length, reserved1=reserved1, reserved2=reserved2
    )
    return bytes(header)


def decode_goose(data: memoryview, builder: PacketBuilder) -> Directive:
    """Decode a GOOSE layer and add it to ``builder``.

    Args:
        data: Bytes starting at the GOOSE header.
        builder: Packet being assembled.

    Returns:
        Always :class:`OpaquePayload`; nothing is decoded beneath GOOSE.

    Raises:
        TruncatedHeaderError: If fewer than 8 bytes are available.
    """
    data = memoryview(data)
    if len(data) < GOOSE_HEADER_SIZE:
        raise TruncatedHeaderError("GOOSE", GOOSE_HEADER_SIZE, len(data))

    header = GooseHeader(bytes(data[:GOOSE_HEADER_SIZE]))
    builder.add_layer(GooseLayer(
        contents=data[:GOOSE_HEADER_SIZE],
        payload=data[GOOSE_HEADER_SIZE:],
        app_id=header.appid,
        length=header.length,
    ))
    return OpaquePayload()
