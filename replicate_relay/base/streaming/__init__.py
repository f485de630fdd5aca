"""Streaming package for the relay base layer."""

from .streaming_metrics import StreamMetrics

__all__ = ["StreamMetrics"]
