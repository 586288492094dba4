"""Resource-type plugins and the registry that dispatches to them."""

from plugins.base import Capability, ResourcePlugin
from plugins.registry import PluginHandle, PluginRegistry

__all__ = [
    "Capability",
    "ResourcePlugin",
    "PluginHandle",
    "PluginRegistry",
]
