"""Tests for the MCP server tools."""

from __future__ import annotations

import json
import sys
from unittest.mock import MagicMock, patch

import pytest


@pytest.fixture
def server():
    """Import server module with FastMCP mocked to avoid init issues."""
    mock_fastmcp_cls = MagicMock()
    mock_fastmcp_instance = MagicMock()
    # Make the @mcp.tool() decorator a no-op that returns the function unchanged
    mock_fastmcp_instance.tool.return_value = lambda fn: fn
    mock_fastmcp_instance.resource.return_value = lambda fn: fn
    mock_fastmcp_cls.return_value = mock_fastmcp_instance

    with patch("mcp.server.fastmcp.FastMCP", mock_fastmcp_cls):
        sys.modules.pop("goose_decoder.server", None)
        import goose_decoder.server as server_mod

    yield server_mod
    sys.modules.pop("goose_decoder.server", None)


def test_list_layer_types(server):
    result = server.list_layer_types()
    by_name = {entry["name"]: entry for entry in result["layer_types"]}
    assert by_name["Ethernet"]["id"] == 1
    assert by_name["Ethernet"]["builtin"] is True
    assert by_name["GooseLayerType"]["id"] == 2001
    assert by_name["GooseLayerType"]["builtin"] is False
    assert by_name["GooseLayerType"]["ethertypes"] == ["0x88B8"]


def test_layer_types_resource(server):
    data = json.loads(server.resource_layer_types())
    assert [entry["name"] for entry in data] == ["Ethernet", "GooseLayerType"]


def test_decode_frame(server, goose_frame):
    result = server.decode_frame(goose_frame.hex(" "))
    assert [layer["name"] for layer in result["layers"]] == ["Ethernet", "GooseLayerType"]
    assert result["layers"][1]["app_id"] == 4660
    assert "- GooseLayerType" in result["summary"]


def test_decode_frame_accepts_colons(server, goose_frame):
    result = server.decode_frame(goose_frame.hex(":"))
    assert "error" not in result


def test_decode_frame_invalid_hex(server):
    assert "error" in server.decode_frame("zz")


def test_inspect_capture(server, write_pcap, goose_frame, ethernet_frame):
    other = ethernet_frame(b"\x00" * 10, ethertype=0x88CC)
    path = write_pcap([goose_frame, other, goose_frame])

    result = server.inspect_capture(str(path))
    assert result["packet_count"] == 3
    assert result["goose_count"] == 2
    assert [p["index"] for p in result["packets"]] == [0, 1, 2]


def test_inspect_capture_limit(server, write_pcap, goose_frame):
    path = write_pcap([goose_frame] * 4)
    result = server.inspect_capture(str(path), limit=2)
    assert result["packet_count"] == 2


def test_inspect_capture_bad_limit(server, write_pcap):
    path = write_pcap([])
    assert "error" in server.inspect_capture(str(path), limit=0)


def test_inspect_capture_missing_file(server, tmp_path):
    result = server.inspect_capture(str(tmp_path / "missing.pcap"))
    assert "error" in result
