"""Exceptions raised while registering layers and decoding frames."""

from __future__ import annotations


class DecodeError(ValueError):
    """A layer could not be decoded from the bytes it was given."""


class TruncatedHeaderError(DecodeError):
    """Fewer bytes were available than the layer's fixed header needs."""

    def __init__(self, layer: str, needed: int, available: int) -> None:
        super().__init__(
            f"{layer} header needs {needed} bytes, got {available}"
        )
        self.layer = layer
        self.needed = needed
        self.available = available


class DuplicateLayerTypeError(ValueError):
    """A layer type ID (or EtherType binding) was registered twice."""


class SourceOpenError(OSError):
    """The capture source could not be opened or read."""
