"""Per-packet summaries.

Each packet is rendered on its own, with no state carried between packets.
"""

from __future__ import annotations

import logging
from typing import Any

from .protocol.ethernet import EthernetLayer
from .protocol.goose import GooseLayer
from .protocol.pipeline import Packet
from .protocol.registry import LayerRegistry, LayerType

logger = logging.getLogger(__name__)

GOOSE_DECODED_MESSAGE = "Packet was successfully decoded with Goose layer decoder."


def summarize_packet(packet: Packet, registry: LayerRegistry) -> list[str]:
    """Render a packet as summary lines.

    Lines, in order: Ethernet addressing, GOOSE fields, any decode failure,
    then one ``- <name>`` line per layer in decode order. Missing layers are
    skipped.
    """
    lines: list[str] = []

    ethernet = packet.layer(LayerType.ETHERNET)
    if isinstance(ethernet, EthernetLayer):
        lines.append(f"{ethernet.src} >> {ethernet.dst}")
    else:
        logger.debug("Ethernet layer not found")

    goose = packet.layer(LayerType.GOOSE)
    if isinstance(goose, GooseLayer):
        lines.append(GOOSE_DECODED_MESSAGE)
        lines.append(f"Payload: {_format_payload(goose.payload)}")
        lines.append(f"AppID: {goose.app_id}")
        lines.append(f"Length: {goose.length}")
    else:
        logger.debug("GOOSE layer not found")

    if packet.error is not None:
        lines.append(f"Decode failure: {packet.error}")

    for layer in packet.layers:
        lines.append(f"- {registry.name(layer.layer_type)}")
    return lines


def packet_to_dict(packet: Packet, registry: LayerRegistry) -> dict[str, Any]:
    """Convert a packet to a JSON-serializable dictionary."""
    result: dict[str, Any] = {
        "layers": [
            {"type": layer.layer_type, "name": registry.name(layer.layer_type), **layer.to_dict()}
            for layer in packet.layers
        ],
    }
    if packet.application_payload is not None:
        result["application_payload_length"] = len(packet.application_payload)
    if packet.unclassified is not None and len(packet.unclassified):
        result["unclassified_hex"] = packet.unclassified.hex(" ")
    if packet.error is not None:
        result["error"] = str(packet.error)
    return result


def _format_payload(payload: memoryview) -> str:
    if not len(payload):
        return "(empty)"
    return payload.hex(" ")
