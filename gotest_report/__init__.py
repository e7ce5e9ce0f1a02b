"""Streaming go test -json decoding and hierarchical result reporting."""

__version__ = "0.1.0"
