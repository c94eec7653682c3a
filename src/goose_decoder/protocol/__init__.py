"""Protocol layer: layer registry, decoders, and the decoding pipeline."""

from .errors import DecodeError, DuplicateLayerTypeError, TruncatedHeaderError
from .registry import LayerMetadata, LayerRegistry, LayerType, RegistryBuilder, default_registry
from .pipeline import Continue, Done, OpaquePayload, Packet, PacketBuilder, decode_packet
