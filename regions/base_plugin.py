"""Base Region Plugin - default lifecycle so subclasses only implement fetches."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from config import get_logger
from regions.types import (
    DataType,
    Meeting,
    PluginHealth,
    Proposition,
    RegionInfo,
    Representative,
)

logger = get_logger(__name__).bind(component="plugin")


class BaseRegionPlugin:
    """Base region plugin. Subclasses implement the get_* and fetch_* methods.

    Contract: initialize() stores config and marks the plugin ready,
    destroy() marks it not ready. Override either to add setup/cleanup.
    """

    def __init__(self, plugin_name: str):
        self.plugin_name = plugin_name
        self.config: Optional[Dict[str, Any]] = None
        self.initialized = False
        self.logger = logger.bind(plugin=plugin_name)

    def get_name(self) -> str:
        raise NotImplementedError

    def get_version(self) -> str:
        raise NotImplementedError

    def get_region_info(self) -> RegionInfo:
        raise NotImplementedError

    def get_supported_data_types(self) -> List[DataType]:
        raise NotImplementedError

    async def fetch_propositions(self) -> List[Proposition]:
        raise NotImplementedError

    async def fetch_meetings(self) -> List[Meeting]:
        raise NotImplementedError

    async def fetch_representatives(self) -> List[Representative]:
        raise NotImplementedError

    async def initialize(self, config: Optional[Dict[str, Any]] = None) -> None:
        self.logger.info("initializing plugin")
        self.config = config
        self.initialized = True

    async def health_check(self) -> PluginHealth:
        return PluginHealth(
            healthy=self.initialized,
            message="Plugin operational" if self.initialized else "Plugin not initialized",
            last_check=datetime.now(),
        )

    async def destroy(self) -> None:
        self.logger.info("destroying plugin")
        self.initialized = False
