"""Plugin lookup, built-in generators and plugin-list expansion.

Quick usage::

    from vuecreate.plugins import PluginExpander, PluginRegistry

    registry = PluginRegistry.with_builtins()
    descriptors = await PluginExpander(registry, engine, config).expand(
        preset.plugins, manifest
    )
"""

from vuecreate.plugins.expander import PluginDescriptor, PluginExpander
from vuecreate.plugins.registry import (
    PluginCapability,
    PluginLoadError,
    PluginRegistry,
    is_official_plugin,
)

__all__ = [
    "PluginCapability",
    "PluginDescriptor",
    "PluginExpander",
    "PluginLoadError",
    "PluginRegistry",
    "is_official_plugin",
]
