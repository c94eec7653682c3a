"""Command-line entry point: print a summary of every packet in a capture."""

from __future__ import annotations

import argparse
import itertools
import logging
import sys

from .inspector import summarize_packet
from .protocol.errors import SourceOpenError
from .protocol.registry import GOOSE_ETHERTYPE, default_registry
from .transport.capture import PacketSource

logger = logging.getLogger(__name__)

DEFAULT_CAPTURE = "goose.pcap"


def _ethertype(value: str) -> int:
    try:
        ethertype = int(value, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid EtherType: {value!r}")
    if not 0 <= ethertype <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"EtherType must be 0-0xFFFF, got {value}")
    return ethertype


def _count(value: str) -> int:
    try:
        count = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid count: {value!r}")
    if count < 0:
        raise argparse.ArgumentTypeError(f"count must be 0 or more, got {count}")
    return count


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="goose-inspect",
        description="Decode GOOSE frames from a pcap/pcapng capture",
    )
    parser.add_argument(
        "capture", nargs="?", default=DEFAULT_CAPTURE,
        help=f"Capture file to read (default: {DEFAULT_CAPTURE})",
    )
    parser.add_argument(
        "-c", "--count", type=_count, default=None,
        help="Stop after this many packets",
    )
    parser.add_argument(
        "--ethertype", type=_ethertype, default=GOOSE_ETHERTYPE,
        help=f"EtherType carrying GOOSE frames (default: {GOOSE_ETHERTYPE:#06x})",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging",
    )
    return parser


def run(capture: str, count: int | None = None, ethertype: int = GOOSE_ETHERTYPE) -> int:
    """Print summaries for the packets in ``capture``.

    Returns:
        The number of packets processed.

    Raises:
        SourceOpenError: If the capture cannot be opened.
    """
    registry = default_registry(goose_ethertype=ethertype)
    processed = 0
    with PacketSource(capture) as source:
        packets = source.packets(registry)
        if count is not None:
            packets = itertools.islice(packets, count)
        for packet in packets:
            for line in summarize_packet(packet, registry):
                print(line)
            processed += 1
    logger.info("Processed %d packets from %s", processed, capture)
    return processed


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        run(args.capture, count=args.count, ethertype=args.ethertype)
    except SourceOpenError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
