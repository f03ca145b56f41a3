"""Region plugins - discovery, loading and the federal/local registry"""

from regions.declarative import DeclarativeRegionPlugin
from regions.discovery import discover_region_configs
from regions.example import ExampleRegionProvider
from regions.loader import PluginLoader
from regions.placeholders import resolve_placeholders
from regions.registry import PluginRegistry, RegisteredPlugin, Slot

__all__ = [
    "DeclarativeRegionPlugin",
    "ExampleRegionProvider",
    "PluginLoader",
    "PluginRegistry",
    "RegisteredPlugin",
    "Slot",
    "discover_region_configs",
    "resolve_placeholders",
]
