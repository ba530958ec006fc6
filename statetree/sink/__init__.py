"""
Reactive sinks: change observation and cached derived values.

This module provides:
- ReactiveSink: Abstract interface the store depends on
- SnapshotSink: Default polling implementation over plain dicts
"""

from .base import ReactiveSink, Unwatch, WatchCallback
from .snapshot import SnapshotSink

__all__ = [
    "ReactiveSink",
    "SnapshotSink",
    "Unwatch",
    "WatchCallback",
]
