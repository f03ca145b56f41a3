"""Plugin factory - build the right region plugin for each plugin type"""

from typing import Any, Dict, Optional

from config import get_logger
from exceptions import PluginLoadError
from regions.declarative import DeclarativeRegionPlugin
from regions.example import ExampleRegionProvider
from regions.protocol import PipelineService

logger = get_logger(__name__).bind(component="loader")

PLUGIN_TYPES = {
    "declarative": DeclarativeRegionPlugin,
    "example": ExampleRegionProvider,
}


def create_plugin(
    plugin_type: str,
    name: str,
    config: Optional[Dict[str, Any]] = None,
    pipeline: Optional[PipelineService] = None,
):
    """Instantiate a plugin. Raises PluginLoadError if it cannot be built.

    Declarative plugins need a pipeline service and a config with regionId
    and dataSources.
    """
    if plugin_type not in PLUGIN_TYPES:
        raise PluginLoadError(f"Unsupported plugin type: {plugin_type}", plugin=name)

    if plugin_type == "example":
        return ExampleRegionProvider()

    if pipeline is None:
        raise PluginLoadError(
            "Scraping pipeline service not available for declarative plugin",
            plugin=name,
        )

    config = config or {}
    if not config.get("regionId") and not config.get("region_id"):
        raise PluginLoadError("Region config missing regionId", plugin=name)
    if not config.get("dataSources") and not config.get("data_sources"):
        raise PluginLoadError("Region config missing dataSources", plugin=name)

    try:
        plugin = DeclarativeRegionPlugin(config, pipeline)
    except Exception as e:
        raise PluginLoadError(
            f"Invalid declarative config for {name}", plugin=name, original_error=e
        ) from e

    logger.debug("created plugin", plugin_type=plugin_type, name=name, region_id=plugin.get_name())
    return plugin
