"""Capture file source.

Reads frames from classic pcap (micro- or nanosecond) and pcapng files with
dpkt. The file stays open between :meth:`PacketSource.open` and
:meth:`PacketSource.close`; use the source as a context manager so it is
released on every exit path.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import dpkt

from ..protocol.errors import SourceOpenError
from ..protocol.pipeline import Packet, decode_packet
from ..protocol.registry import LayerRegistry, LayerType

logger = logging.getLogger(__name__)

PCAPNG_MAGIC = b"\x0a\x0d\x0d\x0a"
LINK_LAYER_TYPES: dict[int, LayerType] = {
    dpkt.pcap.DLT_EN10MB: LayerType.ETHERNET,
}


@dataclass(frozen=True)
class RawFrame:
    """One captured frame. ``data`` owns the bytes layer views point into."""

    data: bytes
    timestamp: float = 0.0
    link_type: int = dpkt.pcap.DLT_EN10MB

    def __repr__(self) -> str:
        return (
            f"RawFrame(timestamp={self.timestamp:.6f}, "
            f"link_type={self.link_type}, length={len(self.data)})"
        )


def first_layer_type(link_type: int) -> LayerType | None:
    """Map a capture link type (DLT) to the layer that starts each frame."""
    return LINK_LAYER_TYPES.get(link_type)


class PacketSource:
    """Lazily yields frames from a capture file.

    Usage::

        with PacketSource("goose.pcap") as source:
            for packet in source.packets(registry):
                ...
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._file = None
        self._reader = None
        self._link_type: int | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_open(self) -> bool:
        return self._reader is not None

    @property
    def link_type(self) -> int | None:
        return self._link_type

    def open(self) -> PacketSource:
        """Open the capture and read its file header.

        Raises:
            SourceOpenError: If the file is missing, unreadable, or not a
                pcap/pcapng capture.
        """
        if self.is_open:
            return self

        try:
            f = self._path.open("rb")
        except OSError as e:
            raise SourceOpenError(
                f"Could not open capture {self._path}: {e.strerror or e}"
            ) from e

        try:
            magic = f.read(4)
            f.seek(0)
            if magic == PCAPNG_MAGIC:
                reader = dpkt.pcapng.Reader(f)
            else:
                reader = dpkt.pcap.Reader(f)
            link_type = reader.datalink()
        except (ValueError, dpkt.UnpackError, OSError) as e:
            f.close()
            raise SourceOpenError(
                f"{self._path} is not a readable pcap/pcapng capture: {e}"
            ) from e

        self._file = f
        self._reader = reader
        self._link_type = link_type
        logger.info("Opened capture %s (link type %d)", self._path, link_type)
        return self

    def close(self) -> None:
        """Release the capture file. Safe to call more than once."""
        if self._file is None:
            return
        try:
            self._file.close()
        finally:
            self._file = None
            self._reader = None
            logger.info("Closed capture %s", self._path)

    def __enter__(self) -> PacketSource:
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[RawFrame]:
        if not self.is_open:
            raise SourceOpenError(f"Capture {self._path} is not open")
        return self._frames()

    def _frames(self) -> Iterator[RawFrame]:
        reader = self._reader
        link_type = self._link_type
        count = 0
        try:
            for timestamp, buf in reader:
                count += 1
                yield RawFrame(data=bytes(buf), timestamp=float(timestamp), link_type=link_type)
        except (ValueError, dpkt.UnpackError) as e:
            logger.warning(
                "Stopped reading %s after %d frames: unreadable data (%s)",
                self._path, count, e,
            )
        logger.debug("Read %d frames from %s", count, self._path)

    def packets(self, registry: LayerRegistry) -> Iterator[Packet]:
        """Yield each frame decoded with ``registry``."""
        for frame in self:
            yield decode_packet(frame.data, first_layer_type(frame.link_type), registry)
