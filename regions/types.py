"""
Region data types - records, results and plugin health.

Pydantic models validate provider output at the plugin boundary, before
anything reaches the repositories. JSON keys from declarative pipelines
arrive camelCase (externalId, scheduledAt); attributes are snake_case.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class DataType(str, Enum):
    """Civic data categories - each selects a persisted collection"""

    PROPOSITIONS = "propositions"
    MEETINGS = "meetings"
    REPRESENTATIVES = "representatives"
    CAMPAIGN_FINANCE = "campaign_finance"


class PropositionStatus(str, Enum):
    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"
    WITHDRAWN = "withdrawn"


class RegionInfo(BaseModel):
    """Region identity reported by a plugin"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    description: str = ""
    timezone: str = "UTC"
    data_source_urls: List[str] = []


class PluginHealth(BaseModel):
    """Result of a plugin health check"""

    healthy: bool
    message: Optional[str] = None
    last_check: datetime = Field(default_factory=datetime.now)
    metadata: Optional[Dict[str, Any]] = None


# --- External records (one model per persisted collection) ---


class ExternalRecord(BaseModel):
    """Base for upstream records - external_id is the only stable join key"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    external_id: str

    @field_validator("external_id", mode="before")
    @classmethod
    def validate_external_id(cls, v: Any) -> str:
        """Coerce numeric ids and reject blanks"""
        if v is None:
            raise ValueError("externalId is required")
        v = str(v).strip()
        if not v:
            raise ValueError("externalId cannot be empty")
        return v


class ContactInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None


class Proposition(ExternalRecord):
    title: str
    summary: str = ""
    full_text: Optional[str] = None
    status: PropositionStatus = PropositionStatus.PENDING
    election_date: Optional[datetime] = None
    source_url: Optional[str] = None


class Meeting(ExternalRecord):
    title: str
    body: str
    scheduled_at: datetime
    location: Optional[str] = None
    agenda_url: Optional[str] = None
    video_url: Optional[str] = None


class Representative(ExternalRecord):
    name: str
    chamber: str
    district: str
    party: str = ""
    photo_url: Optional[str] = None
    contact_info: Optional[ContactInfo] = None


class Committee(ExternalRecord):
    name: str
    type: str
    candidate_name: Optional[str] = None
    candidate_office: Optional[str] = None
    proposition_id: Optional[str] = None
    party: Optional[str] = None
    status: str = "active"
    source_system: str
    source_url: Optional[str] = None


class Contribution(ExternalRecord):
    committee_id: str
    donor_name: str
    donor_type: str
    donor_employer: Optional[str] = None
    donor_occupation: Optional[str] = None
    donor_city: Optional[str] = None
    donor_state: Optional[str] = None
    donor_zip: Optional[str] = None
    amount: Decimal
    date: date
    election_type: Optional[str] = None
    contribution_type: Optional[str] = None
    source_system: str


class Expenditure(ExternalRecord):
    committee_id: str
    payee_name: str
    amount: Decimal
    date: date
    purpose_description: Optional[str] = None
    expenditure_code: Optional[str] = None
    candidate_name: Optional[str] = None
    proposition_title: Optional[str] = None
    support_or_oppose: Optional[str] = None
    source_system: str


class IndependentExpenditure(ExternalRecord):
    committee_id: str
    committee_name: str
    candidate_name: Optional[str] = None
    proposition_title: Optional[str] = None
    support_or_oppose: str
    amount: Decimal
    date: date
    election_date: Optional[date] = None
    description: Optional[str] = None
    source_system: str


class CampaignFinanceResult(BaseModel):
    """The four campaign finance sub-collections from one fetch"""

    committees: List[Committee] = []
    contributions: List[Contribution] = []
    expenditures: List[Expenditure] = []
    independent_expenditures: List[IndependentExpenditure] = []


# --- Sync results ---


class SyncResult(BaseModel):
    """Outcome of one (plugin, data type) reconciliation attempt"""
    model_config = ConfigDict(frozen=True)

    data_type: DataType
    items_processed: int = 0
    items_created: int = 0
    items_updated: int = 0
    errors: Tuple[str, ...] = ()
    synced_at: datetime = Field(default_factory=datetime.now)
    plugin_name: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return not self.errors


class ExtractionResult(BaseModel):
    """Output of the scraping pipeline for one data source"""

    items: List[Dict[str, Any]] = []
    success: bool = True
    warnings: List[str] = []
    errors: List[str] = []
    extraction_time_ms: int = 0
