"""Ethernet link layer, parsed with dpkt header definitions.

Only the Ethernet and 802.1Q headers are interpreted here; nothing above
them is unpacked. The payload is handed to whichever layer the registry
binds to the frame's EtherType, and VLAN tags count as part of the
Ethernet header.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import dpkt
from dpkt.utils import mac_to_str

from .errors import TruncatedHeaderError
from .pipeline import Continue, Directive, Layer, OpaquePayload, PacketBuilder
from .registry import LayerType

ETH_HEADER_SIZE = 14
VLAN_TAG_SIZE = 4
ETH_MAX_LENGTH_FIELD = 1500  # values up to here are 802.3 lengths, not EtherTypes
VLAN_ETHERTYPES = frozenset({0x8100, 0x88A8, 0x9100})
MAX_VLAN_TAGS = 2


class EthernetHeader(dpkt.Packet):
    """Ethernet II / 802.3 header without payload decoding."""

    __hdr__ = (
        ("dst", "6s", b""),
        ("src", "6s", b""),
        ("type", "H", 0),
    )


class VLANTag(dpkt.Packet):
    """802.1Q tag: priority/DEI/VLAN ID word followed by the next EtherType."""

    __hdr__ = (
        ("tci", "H", 0),
        ("type", "H", 0),
    )

    @property
    def vlan_id(self) -> int:
        return self.tci & 0x0FFF


@dataclass
class EthernetLayer(Layer):
    """A decoded Ethernet header."""

    LAYER_TYPE = LayerType.ETHERNET
    src: str = ""
    dst: str = ""
    ethertype: int = 0
    vlan_ids: tuple[int, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "src": self.src,
            "dst": self.dst,
            "ethertype": f"0x{self.ethertype:04X}",
            "vlan_ids": list(self.vlan_ids),
        }

    def __repr__(self) -> str:
        return (
            f"EthernetLayer(src={self.src}, dst={self.dst}, "
            f"ethertype=0x{self.ethertype:04X})"
        )


def decode_ethernet(data: memoryview, builder: PacketBuilder) -> Directive:
    """Decode an Ethernet header and pick the layer for its payload.

    Up to two VLAN tags (802.1Q / QinQ) are consumed as part of the header.

    Raises:
        TruncatedHeaderError: If the frame is shorter than its header,
            including any VLAN tags it announces.
    """
    data = memoryview(data)
    if len(data) < ETH_HEADER_SIZE:
        raise TruncatedHeaderError("Ethernet", ETH_HEADER_SIZE, len(data))

    eth = EthernetHeader(bytes(data[:ETH_HEADER_SIZE]))
    header_size = ETH_HEADER_SIZE
    ethertype = eth.type
    vlan_ids: list[int] = []

    while ethertype in VLAN_ETHERTYPES and len(vlan_ids) < MAX_VLAN_TAGS:
        needed = header_size + VLAN_TAG_SIZE
        if len(data) < needed:
            raise TruncatedHeaderError("Ethernet", needed, len(data))
        tag = VLANTag(bytes(data[header_size:needed]))
        vlan_ids.append(tag.vlan_id)
        ethertype = tag.type
        header_size = needed

    builder.add_layer(EthernetLayer(
        contents=data[:header_size],
        payload=data[header_size:],
        src=mac_to_str(eth.src),
        dst=mac_to_str(eth.dst),
        ethertype=ethertype,
        vlan_ids=tuple(vlan_ids),
    ))

    if ethertype <= ETH_MAX_LENGTH_FIELD:
        return OpaquePayload()
    next_type = builder.registry.layer_for_ethertype(ethertype)
    if next_type is None:
        return OpaquePayload()
    return Continue(next_type)
