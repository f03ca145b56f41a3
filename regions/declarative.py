"""
Declarative Region Plugin

Bridges a DeclarativeRegionConfig to the region plugin interface. Instead of
custom scraper code, every fetch is delegated to the injected pipeline
service; region authors only describe data sources and content goals.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError as PydanticValidationError

from regions.base_plugin import BaseRegionPlugin
from regions.protocol import PipelineService
from regions.schemas import DataSourceConfig, DeclarativeRegionConfig
from regions.types import (
    CampaignFinanceResult,
    Committee,
    Contribution,
    DataType,
    Expenditure,
    IndependentExpenditure,
    Meeting,
    PluginHealth,
    Proposition,
    RegionInfo,
    Representative,
)

RecordT = TypeVar("RecordT", bound=BaseModel)

DECLARATIVE_VERSION = "1.0.0-declarative"


def campaign_finance_model(category: Optional[str]) -> Type[BaseModel]:
    """Pick the campaign finance record type from a data source category.

    Unrecognized categories default to contributions, the most common type.
    """
    cat = (category or "").lower()
    if "committee" in cat:
        return Committee
    if "independent" in cat or "s496" in cat:
        return IndependentExpenditure
    if "expenditure" in cat:
        return Expenditure
    return Contribution


class DeclarativeRegionPlugin(BaseRegionPlugin):
    """Config-driven plugin: data sources in, validated records out"""

    def __init__(
        self,
        config: Union[DeclarativeRegionConfig, Dict[str, Any]],
        pipeline: PipelineService,
    ):
        if not isinstance(config, DeclarativeRegionConfig):
            config = DeclarativeRegionConfig.model_validate(config)
        super().__init__(config.region_id)
        self.region_config = config
        self.pipeline = pipeline

    def get_name(self) -> str:
        return self.region_config.region_id

    def get_version(self) -> str:
        return DECLARATIVE_VERSION

    def get_region_info(self) -> RegionInfo:
        return RegionInfo(
            id=self.region_config.region_id,
            name=self.region_config.region_name,
            description=self.region_config.description,
            timezone=self.region_config.timezone,
            data_source_urls=[ds.url for ds in self.region_config.data_sources],
        )

    def get_supported_data_types(self) -> List[DataType]:
        # Unique, in first-seen order
        seen: Dict[DataType, None] = {}
        for ds in self.region_config.data_sources:
            seen.setdefault(ds.data_type, None)
        return list(seen)

    async def fetch_propositions(self) -> List[Proposition]:
        return await self._fetch_records(DataType.PROPOSITIONS, Proposition)

    async def fetch_meetings(self) -> List[Meeting]:
        return await self._fetch_records(DataType.MEETINGS, Meeting)

    async def fetch_representatives(self) -> List[Representative]:
        return await self._fetch_records(DataType.REPRESENTATIVES, Representative)

    async def fetch_campaign_finance(self) -> CampaignFinanceResult:
        """Fetch every campaign finance source, routed by source category"""
        result = CampaignFinanceResult()
        buckets = {
            Committee: result.committees,
            Contribution: result.contributions,
            Expenditure: result.expenditures,
            IndependentExpenditure: result.independent_expenditures,
        }

        for source, items in await self._fetch_by_data_type(DataType.CAMPAIGN_FINANCE):
            model = campaign_finance_model(source.category)
            buckets[model].extend(self._validate_items(items, model, source))

        self.logger.info(
            "fetched campaign finance",
            committees=len(result.committees),
            contributions=len(result.contributions),
            expenditures=len(result.expenditures),
            independent_expenditures=len(result.independent_expenditures),
        )
        return result

    async def health_check(self) -> PluginHealth:
        source_count = len(self.region_config.data_sources)
        return PluginHealth(
            healthy=self.initialized,
            message=(
                f"Declarative plugin operational, {source_count} data sources configured"
                if self.initialized
                else "Plugin not initialized"
            ),
            last_check=datetime.now(),
            metadata={
                "regionId": self.region_config.region_id,
                "dataSourceCount": source_count,
                "supportedTypes": [dt.value for dt in self.get_supported_data_types()],
            },
        )

    async def _fetch_records(self, data_type: DataType, model: Type[RecordT]) -> List[RecordT]:
        records: List[RecordT] = []
        for source, items in await self._fetch_by_data_type(data_type):
            records.extend(self._validate_items(items, model, source))
        return records

    async def _fetch_by_data_type(self, data_type: DataType) -> List[tuple]:
        """Run the pipeline for every source of a data type.

        A failing source is logged and skipped; partial results are kept.

        Returns:
            (source, raw items) pairs for the sources that succeeded
        """
        sources = [ds for ds in self.region_config.data_sources if ds.data_type == data_type]
        if not sources:
            self.logger.warning("no data sources configured", data_type=data_type.value)
            return []

        fetched = []
        total = 0
        for source in sources:
            try:
                self.logger.info(
                    "fetching from source",
                    data_type=data_type.value,
                    url=source.url,
                    category=source.category,
                )
                result = await self.pipeline.execute(source, self.region_config.region_id)
            except Exception as e:
                self.logger.error(
                    "source fetch failed",
                    data_type=data_type.value,
                    url=source.url,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue

            if result.warnings:
                self.logger.warning("pipeline warnings", url=source.url, warnings=result.warnings)
            if result.errors:
                self.logger.error("pipeline errors", url=source.url, errors=result.errors)

            fetched.append((source, result.items))
            total += len(result.items)

        self.logger.info(
            "fetched data type",
            data_type=data_type.value,
            item_count=total,
            source_count=len(sources),
        )
        return fetched

    def _validate_items(
        self,
        items: List[Dict[str, Any]],
        model: Type[RecordT],
        source: DataSourceConfig,
    ) -> List[RecordT]:
        valid = []
        for item in items:
            try:
                valid.append(model.model_validate(item))
            except PydanticValidationError as e:
                self.logger.warning(
                    "dropping invalid record",
                    record_type=model.__name__,
                    url=source.url,
                    external_id=item.get("externalId") if isinstance(item, dict) else None,
                    error=str(e.errors()[0]["msg"]) if e.errors() else str(e),
                )
        return valid
