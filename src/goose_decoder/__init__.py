"""Decode GOOSE-style substation frames from packet captures."""

__version__ = "0.1.0"
