"""
Pydantic schemas for region plugin descriptors.

A descriptor file carries the outer identity (name, displayName, version)
plus a DeclarativeRegionConfig handed to the scraping pipeline. JSON keys are
camelCase; attributes are snake_case via aliases.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from regions.types import DataType


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",  # Unknown keys are preserved for the pipeline
    )


class SourceType(str, Enum):
    API = "api"
    BULK_DOWNLOAD = "bulk_download"
    HTML_SCRAPE = "html_scrape"


class RateLimitConfig(_CamelModel):
    requests_per_second: float
    burst_size: Optional[int] = None


class ApiPaginationConfig(_CamelModel):
    type: str = "offset"  # offset, cursor, page
    page_param: Optional[str] = None
    limit_param: Optional[str] = None
    limit: Optional[int] = None


class ApiSourceConfig(_CamelModel):
    """REST/JSON API parameters - string leaves may hold ${key} tokens"""

    method: str = "GET"
    api_key_env_var: Optional[str] = None
    api_key_header: Optional[str] = None
    pagination: Optional[ApiPaginationConfig] = None
    results_path: Optional[str] = None
    query_params: Dict[str, Any] = {}


class BulkDownloadConfig(_CamelModel):
    """Bulk file parameters (csv, tsv, zip of delimited files)"""

    format: str = "csv"
    file_pattern: Optional[str] = None
    delimiter: Optional[str] = None
    header_lines: int = 1
    column_mappings: Dict[str, str] = {}
    filters: Dict[str, Any] = {}


class DataSourceConfig(_CamelModel):
    url: str
    data_type: DataType
    content_goal: str
    source_type: SourceType = SourceType.HTML_SCRAPE
    category: Optional[str] = None
    hints: Optional[List[str]] = None
    rate_limit_override: Optional[float] = None  # requests per second
    api: Optional[ApiSourceConfig] = None
    bulk: Optional[BulkDownloadConfig] = None

    @field_validator("url", "content_goal")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()


class DeclarativeRegionConfig(_CamelModel):
    """Config-driven region: data sources plus content goals, no custom code"""

    region_id: str
    region_name: str = ""
    description: str = ""
    timezone: str = "UTC"
    state_code: Optional[str] = None
    data_sources: List[DataSourceConfig]
    rate_limit: Optional[RateLimitConfig] = None
    cache_ttl_ms: Optional[int] = None
    request_timeout_ms: Optional[int] = None

    @field_validator("region_id")
    @classmethod
    def validate_region_id(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("regionId cannot be empty")
        return v

    @field_validator("data_sources")
    @classmethod
    def validate_data_sources(cls, v: List[DataSourceConfig]) -> List[DataSourceConfig]:
        if not v:
            raise ValueError("dataSources must have at least one entry")
        return v


class RegionPluginDescriptor(BaseModel):
    """One discovered descriptor file. Identity is name."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    name: str
    display_name: str
    description: str
    version: str
    config: DeclarativeRegionConfig

    def config_dict(self) -> Dict[str, Any]:
        """Config as camelCase JSON - the shape persisted in region_plugins.config"""
        return self.config.model_dump(mode="json", by_alias=True, exclude_none=True)
