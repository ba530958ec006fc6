"""
Store plugins.

A plugin is any callable taking the store; it runs once at construction.

This module provides:
- devtool_plugin: Bridge to an external inspection hook
- create_logger: Logs mutations and actions
- create_metrics_plugin: Prometheus counters and timings
"""

from .devtool import (
    DevtoolHook,
    devtool_plugin,
    get_global_hook,
    install_global_hook,
    resolve_devtool_hook,
)
from .logger import create_logger
from .metrics import StoreMetrics, create_metrics_plugin, init_metrics

__all__ = [
    "DevtoolHook",
    "devtool_plugin",
    "get_global_hook",
    "install_global_hook",
    "resolve_devtool_hook",
    "create_logger",
    "StoreMetrics",
    "create_metrics_plugin",
    "init_metrics",
]
