"""Generic frame-to-packet decoding.

A frame is decoded one layer at a time. Each decoder adds a single layer to
the :class:`PacketBuilder` and returns a directive saying what the layer's
payload holds:

- :class:`Continue` -- another registered layer type
- :class:`OpaquePayload` -- application bytes, no further decoding
- :class:`Done` -- nothing further

Every byte of the frame ends up in exactly one layer header, the opaque
application payload, or the unclassified remainder.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import ClassVar, Union

from .errors import DecodeError
from .registry import LayerRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Continue:
    """Decode the layer payload as ``layer_type``."""

    layer_type: int


@dataclass(frozen=True)
class OpaquePayload:
    """The layer payload is opaque application data."""


@dataclass(frozen=True)
class Done:
    """Nothing follows the layer."""


Directive = Union[Continue, OpaquePayload, Done]


@dataclass
class Layer:
    """Base class for decoded layers.

    ``contents`` and ``payload`` are views into the frame buffer and are
    only valid while the frame is.
    """

    LAYER_TYPE: ClassVar[int] = -1
    contents: memoryview = field(default_factory=lambda: memoryview(b""), repr=False)
    payload: memoryview = field(default_factory=lambda: memoryview(b""), repr=False)

    @property
    def layer_type(self) -> int:
        return self.LAYER_TYPE

    def to_dict(self) -> dict:
        raise NotImplementedError


class PacketBuilder:
    """Accumulates the layers of one packet during decoding."""

    def __init__(self, registry: LayerRegistry) -> None:
        self.registry = registry
        self._layers: list[Layer] = []

    def add_layer(self, layer: Layer) -> None:
        self._layers.append(layer)

    def rollback(self, count: int) -> None:
        """Drop layers added after the first ``count``."""
        del self._layers[count:]

    @property
    def layers(self) -> tuple[Layer, ...]:
        return tuple(self._layers)


@dataclass(frozen=True)
class Packet:
    """Decoded layers of one frame, in decode order."""

    layers: tuple[Layer, ...] = ()
    application_payload: memoryview | None = field(default=None, repr=False)
    unclassified: memoryview | None = field(default=None, repr=False)
    error: DecodeError | None = None

    def layer(self, layer_type: int) -> Layer | None:
        """Return the first layer of ``layer_type``, or None if absent."""
        for layer in self.layers:
            if layer.layer_type == layer_type:
                return layer
        return None

    def layer_types(self) -> list[int]:
        return [layer.layer_type for layer in self.layers]

    @property
    def decode_failed(self) -> bool:
        return self.error is not None


def decode_packet(
    data: bytes | memoryview,
    first_layer_type: int | None,
    registry: LayerRegistry,
) -> Packet:
    """Decode a raw frame into a :class:`Packet`.

    Args:
        data: The frame bytes.
        first_layer_type: Layer type of the frame's outermost layer, or None
            if the link type is unknown.
        registry: Layer types available for decoding.

    Returns:
        The decoded packet. Decode errors are recorded on the packet rather
        than raised.
    """
    remaining = memoryview(data)
    builder = PacketBuilder(registry)
    layer_type = first_layer_type

    while True:
        metadata = registry.lookup(layer_type) if layer_type is not None else None
        if metadata is None:
            logger.debug("No decoder for layer type %s", layer_type)
            return _finish(builder, unclassified=remaining)

        count = len(builder.layers)
        try:
            directive = metadata.decode(remaining, builder)
            if len(builder.layers) != count + 1:
                raise DecodeError(
                    f"{metadata.name} decoder added "
                    f"{len(builder.layers) - count} layers, expected 1"
                )
            layer = builder.layers[-1]
            if isinstance(directive, Continue) and not len(layer.contents):
                raise DecodeError(f"{metadata.name} decoder consumed no bytes")
        except DecodeError as e:
            logger.debug("Decoding %s failed: %s", metadata.name, e)
            builder.rollback(count)
            return _finish(builder, unclassified=remaining, error=e)

        if isinstance(directive, Continue):
            layer_type = directive.layer_type
            remaining = layer.payload
        elif isinstance(directive, OpaquePayload):
            return _finish(builder, application_payload=layer.payload)
        elif isinstance(directive, Done):
            if len(layer.payload):
                return _finish(builder, unclassified=layer.payload)
            return _finish(builder)
        else:
            raise TypeError(
                f"{metadata.name} decoder returned unknown directive {directive!r}"
            )


def _finish(builder: PacketBuilder, **kwargs) -> Packet:
    return Packet(layers=builder.layers, **kwargs)
