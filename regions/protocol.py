"""Region Plugin Protocols - capability interfaces for providers and the scraping pipeline

Campaign finance is an optional capability. Callers detect it with
getattr(plugin, "fetch_campaign_finance", None) rather than isinstance.
"""

from typing import Any, Dict, List, Optional, Protocol

from regions.schemas import DataSourceConfig
from regions.types import (
    CampaignFinanceResult,
    DataType,
    ExtractionResult,
    Meeting,
    PluginHealth,
    Proposition,
    RegionInfo,
    Representative,
)


class RegionPlugin(Protocol):
    """A regional civic data provider with lifecycle hooks

    Lifecycle: initialize() once on load, health_check() on demand,
    destroy() exactly once on unload.
    """

    def get_name(self) -> str: ...
    def get_version(self) -> str: ...
    def get_region_info(self) -> RegionInfo: ...
    def get_supported_data_types(self) -> List[DataType]: ...

    async def fetch_propositions(self) -> List[Proposition]: ...
    async def fetch_meetings(self) -> List[Meeting]: ...
    async def fetch_representatives(self) -> List[Representative]: ...

    async def initialize(self, config: Optional[Dict[str, Any]] = None) -> None: ...
    async def health_check(self) -> PluginHealth: ...
    async def destroy(self) -> None: ...


class CampaignFinanceCapable(Protocol):
    async def fetch_campaign_finance(self) -> CampaignFinanceResult: ...


class PipelineService(Protocol):
    """Opaque scraping/ingest capability used by declarative plugins"""

    async def execute(self, source: DataSourceConfig, region_id: str) -> ExtractionResult: ...
