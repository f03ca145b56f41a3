"""
Shared fixtures: in-memory storage, pipeline and plugin fakes.

No live PostgreSQL; the fakes count storage round trips so tests can
assert on the lookup/write budget of a reconciliation.
"""

import json
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from database.models import RegionPluginRow
from regions.base_plugin import BaseRegionPlugin
from regions.loader import PluginLoader
from regions.registry import PluginRegistry
from regions.types import (
    CampaignFinanceResult,
    Committee,
    Contribution,
    DataType,
    ExtractionResult,
    Meeting,
    Proposition,
    RegionInfo,
    Representative,
)


# --- Storage fakes ---


class FakeRecordRepository:
    """Stands in for an ExternalRecordRepository; counts storage calls"""

    def __init__(self, existing=()):
        self.rows: Dict[str, Any] = {eid: None for eid in existing}
        self.lookups = 0
        self.writes = 0
        self.write_error: Optional[Exception] = None

    @property
    def round_trips(self) -> int:
        return self.lookups + self.writes

    async def find_existing_external_ids(self, external_ids):
        self.lookups += 1
        return {eid for eid in external_ids if eid in self.rows}

    async def upsert_many(self, records):
        self.writes += 1
        if self.write_error:
            raise self.write_error
        records = list(records)
        for record in records:
            self.rows[record.external_id] = record
        return len(records)

    async def count(self, **filters):
        return len(self.rows)


class FakeRegionPluginRepository:
    def __init__(self):
        self.rows: Dict[str, RegionPluginRow] = {}
        self.sync_records: List[tuple] = []

    def add(self, name: str, config: Dict[str, Any], enabled: bool = False):
        self.rows[name] = RegionPluginRow(
            name=name,
            display_name=name.title(),
            plugin_type="declarative",
            version="1.0.0",
            enabled=enabled,
            config=config,
        )

    async def upsert_descriptor(self, descriptor, enabled_on_create=False):
        existing = self.rows.get(descriptor.name)
        enabled = existing.enabled if existing else enabled_on_create
        self.rows[descriptor.name] = RegionPluginRow(
            name=descriptor.name,
            display_name=descriptor.display_name,
            description=descriptor.description,
            plugin_type="declarative",
            version=descriptor.version,
            enabled=enabled,
            config=descriptor.config_dict(),
        )

    async def get_by_name(self, name):
        return self.rows.get(name)

    async def find_enabled_local(self, federal_name="federal"):
        for name in sorted(self.rows):
            row = self.rows[name]
            if row.enabled and name != federal_name:
                return row
        return None

    async def record_sync(self, name, status, error=None):
        self.sync_records.append((name, status, error))


class FakeDatabase:
    def __init__(self):
        self.propositions = FakeRecordRepository()
        self.meetings = FakeRecordRepository()
        self.representatives = FakeRecordRepository()
        self.committees = FakeRecordRepository()
        self.contributions = FakeRecordRepository()
        self.expenditures = FakeRecordRepository()
        self.independent_expenditures = FakeRecordRepository()
        self.region_plugins = FakeRegionPluginRepository()

    def record_repositories(self):
        return [
            self.propositions, self.meetings, self.representatives, self.committees,
            self.contributions, self.expenditures, self.independent_expenditures,
        ]

    async def get_stats(self):
        return {
            "propositions": len(self.propositions.rows),
            "meetings": len(self.meetings.rows),
            "representatives": len(self.representatives.rows),
        }


# --- Pipeline fake ---


class FakePipeline:
    """Returns canned items per source URL; records every call"""

    def __init__(self, items_by_url=None, fail_urls=()):
        self.items_by_url = items_by_url or {}
        self.fail_urls = set(fail_urls)
        self.calls: List[tuple] = []

    async def execute(self, source, region_id):
        self.calls.append((source, region_id))
        if source.url in self.fail_urls:
            raise RuntimeError(f"upstream unavailable: {source.url}")
        return ExtractionResult(items=list(self.items_by_url.get(source.url, [])))


# --- Plugin fakes ---


class StubPlugin(BaseRegionPlugin):
    """Plugin with scripted fetch results; an Exception value is raised"""

    def __init__(
        self,
        name: str = "stub",
        supported=(DataType.PROPOSITIONS,),
        responses=None,
        init_error: Optional[Exception] = None,
        destroy_error: Optional[Exception] = None,
    ):
        super().__init__(name)
        self.name = name
        self.supported = list(supported)
        self.responses = responses or {}
        self.init_error = init_error
        self.destroy_error = destroy_error
        self.initialize_calls = 0
        self.destroy_calls = 0

    def get_name(self):
        return self.name

    def get_version(self):
        return "0.0.1"

    def get_region_info(self):
        return RegionInfo(id=self.name, name=self.name.title())

    def get_supported_data_types(self):
        return self.supported

    async def initialize(self, config=None):
        self.initialize_calls += 1
        if self.init_error:
            raise self.init_error
        await super().initialize(config)

    async def destroy(self):
        self.destroy_calls += 1
        await super().destroy()
        if self.destroy_error:
            raise self.destroy_error

    async def _respond(self, data_type):
        value = self.responses.get(data_type, [])
        if isinstance(value, Exception):
            raise value
        return value

    async def fetch_propositions(self):
        return await self._respond(DataType.PROPOSITIONS)

    async def fetch_meetings(self):
        return await self._respond(DataType.MEETINGS)

    async def fetch_representatives(self):
        return await self._respond(DataType.REPRESENTATIVES)


class CampaignStubPlugin(StubPlugin):
    async def fetch_campaign_finance(self):
        return await self._respond(DataType.CAMPAIGN_FINANCE)


# --- Record builders ---


def make_propositions(count: int, prefix: str = "prop") -> List[Proposition]:
    return [
        Proposition(external_id=f"{prefix}-{i}", title=f"Proposition {i}")
        for i in range(count)
    ]


def make_meetings(count: int) -> List[Meeting]:
    return [
        Meeting(
            external_id=f"mtg-{i}",
            title=f"Hearing {i}",
            body="Assembly",
            scheduled_at=datetime(2025, 3, 1, 10, 0),
        )
        for i in range(count)
    ]


def make_representatives(count: int) -> List[Representative]:
    return [
        Representative(external_id=f"rep-{i}", name=f"Member {i}", chamber="Senate", district=str(i))
        for i in range(count)
    ]


def make_campaign_finance() -> CampaignFinanceResult:
    return CampaignFinanceResult(
        committees=[
            Committee(external_id="C001", name="Yes on 1", type="ballot_measure", source_system="fec"),
        ],
        contributions=[
            Contribution(
                external_id=f"SA-{i}",
                committee_id="C001",
                donor_name=f"Donor {i}",
                donor_type="individual",
                donor_state="CA",
                amount=Decimal("100.00"),
                date=date(2024, 10, 1),
                source_system="fec",
            )
            for i in range(3)
        ],
    )


# --- Descriptor files ---


FEDERAL_DESCRIPTOR = {
    "name": "federal",
    "displayName": "Federal",
    "description": "FEC campaign finance",
    "version": "1.0.0",
    "config": {
        "regionId": "federal",
        "regionName": "Federal",
        "dataSources": [
            {
                "url": "https://api.open.fec.gov/v1/schedules/schedule_a/",
                "dataType": "campaign_finance",
                "sourceType": "api",
                "category": "FEC Contributions",
                "contentGoal": "Individual contributions",
                "api": {
                    "queryParams": {
                        "sort": "-contribution_receipt_date",
                        "contributor_state": "${stateCode}",
                    }
                },
            }
        ],
    },
}

LOCAL_DESCRIPTOR = {
    "name": "california",
    "displayName": "California",
    "description": "California civic data",
    "version": "1.0.0",
    "config": {
        "regionId": "california",
        "regionName": "California",
        "stateCode": "CA",
        "dataSources": [
            {
                "url": "https://example.ca.gov/measures",
                "dataType": "propositions",
                "contentGoal": "Ballot measures",
            }
        ],
    },
}


def write_descriptor(directory: Path, file_name: str, data: Any) -> Path:
    path = directory / file_name
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return path


# --- Fixtures ---


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def registry():
    return PluginRegistry()


@pytest.fixture
def pipeline():
    return FakePipeline()


@pytest.fixture
def loader(registry, pipeline):
    return PluginLoader(registry, pipeline=pipeline)
