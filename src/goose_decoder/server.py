"""MCP server entry point for the GOOSE capture decoder.

Exposes the packet inspector as tools and resources via the Model Context
Protocol using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

from mcp.server.fastmcp import FastMCP

from .inspector import packet_to_dict, summarize_packet
from .protocol.errors import SourceOpenError
from .protocol.pipeline import decode_packet
from .protocol.registry import BUILTIN_RANGE, LayerType, default_registry
from .transport.capture import PacketSource

logger = logging.getLogger(__name__)

MAX_PACKETS = 10_000

mcp = FastMCP(
    "goose-decoder",
    instructions="Decode GOOSE-style substation frames from pcap/pcapng captures",
)

# Built once at import; read-only afterwards
_registry = default_registry()


def _layer_types() -> list[dict[str, Any]]:
    return [
        {
            "id": int(layer_type),
            "name": metadata.name,
            "builtin": layer_type in BUILTIN_RANGE,
            "ethertypes": [
                f"0x{ethertype:04X}"
                for ethertype, bound in _registry.ethertypes.items()
                if bound == layer_type
            ],
        }
        for layer_type, metadata in _registry.items()
    ]


# ─── TOOLS ────────────────────────────────────────────────────────────

@mcp.tool()
def list_layer_types() -> dict[str, Any]:
    """List the layer types the decoder knows, with their EtherType bindings."""
    return {"layer_types": _layer_types()}


@mcp.tool()
def inspect_capture(path: str, limit: int = 100) -> dict[str, Any]:
    """Decode the packets in a pcap/pcapng capture file.

    Args:
        path: Path to the capture file.
        limit: Maximum number of packets to decode (1-10000, default 100).
    """
    if not 1 <= limit <= MAX_PACKETS:
        return {"error": f"limit must be 1-{MAX_PACKETS}"}

    packets = []
    try:
        with PacketSource(path) as source:
            for index, packet in enumerate(source.packets(_registry)):
                if index >= limit:
                    break
                entry = packet_to_dict(packet, _registry)
                entry["index"] = index
                entry["summary"] = summarize_packet(packet, _registry)
                packets.append(entry)
    except SourceOpenError as e:
        return {"error": str(e)}

    goose_count = sum(
        1 for p in packets
        if any(layer["type"] == LayerType.GOOSE for layer in p["layers"])
    )
    return {"path": path, "packet_count": len(packets), "goose_count": goose_count, "packets": packets}


@mcp.tool()
def decode_frame(hex_data: str) -> dict[str, Any]:
    """Decode a single Ethernet frame given as hex.

    Args:
        hex_data: Frame bytes as hex; spaces and colons are ignored.
    """
    cleaned = hex_data.replace(" ", "").replace(":", "")
    try:
        data = bytes.fromhex(cleaned)
    except ValueError as e:
        return {"error": f"Invalid hex data: {e}"}

    packet = decode_packet(data, LayerType.ETHERNET, _registry)
    result = packet_to_dict(packet, _registry)
    result["summary"] = summarize_packet(packet, _registry)
    return result


# ─── RESOURCES ────────────────────────────────────────────────────────

@mcp.resource("goose://layer-types")
def resource_layer_types() -> str:
    """Registered layer types as JSON."""
    return json.dumps(_layer_types(), indent=2)


def main():
    """Run the MCP server over stdio."""
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
