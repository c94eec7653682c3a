"""Transport layer: capture sources that produce raw frames."""

from .capture import PacketSource, RawFrame, first_layer_type
