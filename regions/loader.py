"""
Plugin Loader - build declarative plugins and install them into the registry

Holds no plugin state; the registry owns every instance it registers.
"""

from typing import Any, Dict, Optional

from config import get_logger
from exceptions import PluginLoadError
from regions.factory import create_plugin
from regions.protocol import PipelineService, RegionPlugin
from regions.registry import PluginRegistry, Slot

logger = get_logger(__name__).bind(component="loader")


class PluginLoader:
    def __init__(self, registry: PluginRegistry, pipeline: Optional[PipelineService] = None):
        self.registry = registry
        self.pipeline = pipeline

    async def load_plugin(self, name: str, config: Optional[Dict[str, Any]]) -> RegionPlugin:
        """Load a declarative plugin into the local slot

        Raises:
            PluginLoadError: plugin could not be built or initialized
        """
        return await self._load(name, config, Slot.LOCAL)

    async def load_federal_plugin(
        self, config: Optional[Dict[str, Any]], name: str = "federal"
    ) -> RegionPlugin:
        """Load a declarative plugin into the federal slot"""
        return await self._load(name, config, Slot.FEDERAL)

    async def load_example(self) -> RegionPlugin:
        """Install the example provider into the local slot"""
        plugin = create_plugin("example", "example")
        await self._register("example", plugin, None, Slot.LOCAL)
        return plugin

    async def unload_plugin(self) -> None:
        """Unload the local plugin"""
        await self.registry.unregister(Slot.LOCAL)

    async def _load(self, name: str, config: Optional[Dict[str, Any]], slot: Slot) -> RegionPlugin:
        logger.info("loading declarative plugin", name=name, slot=slot.value)

        plugin = create_plugin("declarative", name, config=config, pipeline=self.pipeline)
        await self._register(name, plugin, config, slot)

        logger.info(
            "declarative plugin loaded",
            name=name,
            slot=slot.value,
            version=plugin.get_version(),
            data_sources=len(plugin.region_config.data_sources),
        )
        return plugin

    async def _register(
        self, name: str, plugin: RegionPlugin, config: Optional[Dict[str, Any]], slot: Slot
    ) -> None:
        try:
            await self.registry.register(name, plugin, config, slot=slot)
        except Exception as e:
            raise PluginLoadError(
                f"Failed to initialize plugin {name}",
                plugin=name,
                slot=slot.value,
                original_error=e,
            ) from e
