"""Layer type registry.

Maps a numeric layer type to the metadata needed to decode it::

    +------------+------------------+-------------------------------+
    | Layer type | Name             | Decoder                       |
    +------------+------------------+-------------------------------+
    | 1          | Ethernet         | ethernet.decode_ethernet      |
    | 2001       | GooseLayerType   | goose.decode_goose            |
    +------------+------------------+-------------------------------+

IDs 0-1999 are reserved for built-in layers. Custom layers use 2000 and
above, or a negative ID.

The table is assembled once with :class:`RegistryBuilder` and frozen into a
:class:`LayerRegistry`, which is handed to the decoding pipeline explicitly.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from enum import IntEnum
from types import MappingProxyType
from typing import TYPE_CHECKING

from .errors import DuplicateLayerTypeError

if TYPE_CHECKING:
    from .pipeline import Directive, PacketBuilder

BUILTIN_RANGE = range(0, 2000)
GOOSE_ETHERTYPE = 0x88B8


class LayerType(IntEnum):
    """Layer type identifiers known to this package."""

    ETHERNET = 1
    # custom application layer, outside the built-in range
    GOOSE = 2001


@dataclass(frozen=True)
class LayerMetadata:
    """Display name and decode function for one layer type."""

    name: str
    decode: Callable[[memoryview, PacketBuilder], Directive]


class LayerRegistry(Mapping):
    """Read-only mapping of layer type to :class:`LayerMetadata`."""

    def __init__(
        self,
        layers: Mapping[int, LayerMetadata],
        ethertypes: Mapping[int, int] | None = None,
    ) -> None:
        self._layers = MappingProxyType(dict(layers))
        self._ethertypes = MappingProxyType(dict(ethertypes or {}))

    def __getitem__(self, layer_type: int) -> LayerMetadata:
        return self._layers[layer_type]

    def __iter__(self) -> Iterator[int]:
        return iter(self._layers)

    def __len__(self) -> int:
        return len(self._layers)

    def lookup(self, layer_type: int) -> LayerMetadata | None:
        """Return the metadata for ``layer_type``, or None if unregistered."""
        return self._layers.get(layer_type)

    def name(self, layer_type: int) -> str:
        metadata = self._layers.get(layer_type)
        if metadata is None:
            return f"Unknown({layer_type})"
        return metadata.name

    def layer_for_ethertype(self, ethertype: int) -> int | None:
        """Return the layer type bound to an EtherType, if any."""
        return self._ethertypes.get(ethertype)

    @property
    def ethertypes(self) -> Mapping[int, int]:
        return self._ethertypes

    def __repr__(self) -> str:
        names = ", ".join(f"{k}={v.name}" for k, v in self._layers.items())
        return f"LayerRegistry({names})"


class RegistryBuilder:
    """Collects layer registrations before freezing them.

    Usage::

        builder = RegistryBuilder()
        builder.register(2001, LayerMetadata("GooseLayerType", decode_goose))
        builder.bind_ethertype(0x88B8, 2001)
        registry = builder.build()
    """

    def __init__(self) -> None:
        self._layers: dict[int, LayerMetadata] = {}
        self._ethertypes: dict[int, int] = {}

    def register(
        self,
        layer_type: int,
        metadata: LayerMetadata,
        builtin: bool = False,
    ) -> int:
        """Register a layer type.

        Args:
            layer_type: Unique numeric ID.
            metadata: Name and decode function.
            builtin: Allow an ID inside the reserved built-in range.

        Returns:
            The registered layer type.

        Raises:
            DuplicateLayerTypeError: If the ID is already registered.
            ValueError: If a custom layer uses a reserved built-in ID.
        """
        if layer_type in self._layers:
            raise DuplicateLayerTypeError(
                f"Layer type {layer_type} already registered as "
                f"{self._layers[layer_type].name!r}"
            )
        if not builtin and layer_type in BUILTIN_RANGE:
            raise ValueError(
                f"Layer type {layer_type} is reserved for built-in layers; "
                f"custom layers must use 2000+ or a negative ID"
            )
        self._layers[layer_type] = metadata
        return layer_type

    def bind_ethertype(self, ethertype: int, layer_type: int) -> None:
        """Decode Ethernet payloads carrying ``ethertype`` as ``layer_type``."""
        if not 0 <= ethertype <= 0xFFFF:
            raise ValueError(f"EtherType must be 0-0xFFFF, got {ethertype:#x}")
        if layer_type not in self._layers:
            raise ValueError(f"Layer type {layer_type} is not registered")
        if ethertype in self._ethertypes:
            raise DuplicateLayerTypeError(
                f"EtherType {ethertype:#06x} already bound to layer type "
                f"{self._ethertypes[ethertype]}"
            )
        self._ethertypes[ethertype] = layer_type

    def build(self) -> LayerRegistry:
        return LayerRegistry(self._layers, self._ethertypes)


def default_registry(goose_ethertype: int = GOOSE_ETHERTYPE) -> LayerRegistry:
    """Build the registry used at startup: Ethernet plus the GOOSE layer."""
    from .ethernet import decode_ethernet
    from .goose import decode_goose

    builder = RegistryBuilder()
    builder.register(
        LayerType.ETHERNET,
        LayerMetadata("Ethernet", decode_ethernet),
        builtin=True,
    )
    builder.register(
        LayerType.GOOSE,
        LayerMetadata("GooseLayerType", decode_goose),
    )
    builder.bind_ethertype(goose_ethertype, LayerType.GOOSE)
    return builder.build()
