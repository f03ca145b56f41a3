"""
Database Models for civicsync

Persisted shapes of the region record types: each adds the surrogate id and
timestamps, and money is read back as float. Page and RegionPluginRow are
pydantic dataclasses with to_dict() for CLI/JSON output.
"""

from typing import Any, Dict, List, Optional
from datetime import datetime
from pydantic import BaseModel
from pydantic.dataclasses import dataclass
from dataclasses import asdict

from regions.types import (
    Committee,
    Contribution,
    Expenditure,
    IndependentExpenditure,
    Meeting,
    Proposition,
    Representative,
)


class StoredFields(BaseModel):
    id: str
    created_at: datetime
    updated_at: datetime

    def projection(self) -> Dict[str, Any]:
        """JSON-ready dict; null columns are omitted"""
        return self.model_dump(mode="json", exclude_none=True)


class StoredProposition(Proposition, StoredFields):
    pass


class StoredMeeting(Meeting, StoredFields):
    pass


class StoredRepresentative(Representative, StoredFields):
    pass


class StoredCommittee(Committee, StoredFields):
    pass


class StoredContribution(Contribution, StoredFields):
    amount: float


class StoredExpenditure(Expenditure, StoredFields):
    amount: float


class StoredIndependentExpenditure(IndependentExpenditure, StoredFields):
    amount: float


@dataclass
class Page:
    """One offset/limit slice of a collection"""
    items: List[Any]
    total: int
    has_more: bool

    def to_dict(self) -> dict:
        return {
            "items": [
                item.projection() if hasattr(item, "projection") else item
                for item in self.items
            ],
            "total": self.total,
            "has_more": self.has_more,
        }


@dataclass
class RegionPluginRow:
    """Persisted region plugin descriptor (region_plugins table)"""
    name: str
    display_name: str
    plugin_type: str
    version: str
    enabled: bool
    config: Dict[str, Any]
    description: Optional[str] = None
    last_sync_at: Optional[datetime] = None
    last_sync_status: Optional[str] = None
    last_error: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        for key in ("last_sync_at", "created_at", "updated_at"):
            if data[key]:
                data[key] = data[key].isoformat()
        return data
