"""
Example Region Provider - mock civic data for development.

Registered into the local slot when no enabled local descriptor exists or
the configured one fails to load, so the sync engine always has a provider.
Also a template for hand-written providers: subclass BaseRegionPlugin and
replace the seed data with real scraping or API calls.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel

from exceptions import FetchFailure
from regions.base_plugin import BaseRegionPlugin
from regions.types import (
    DataType,
    Meeting,
    Proposition,
    RegionInfo,
    Representative,
)

RecordT = TypeVar("RecordT", bound=BaseModel)


EXAMPLE_PROPOSITIONS = [
    {
        "externalId": "prop-2024-001",
        "title": "Example Proposition A",
        "summary": "Example ballot measure showing the proposition record shape.",
        "fullText": "Full legal text of proposition A.",
        "status": "pending",
        "electionDate": "2024-11-05T00:00:00",
        "sourceUrl": "https://example.com/propositions/2024-001",
    },
    {
        "externalId": "prop-2024-002",
        "title": "Example Proposition B",
        "summary": "A measure approved by voters.",
        "fullText": "Full legal text of proposition B.",
        "status": "passed",
        "electionDate": "2024-03-05T00:00:00",
        "sourceUrl": "https://example.com/propositions/2024-002",
    },
    {
        "externalId": "prop-2024-003",
        "title": "Example Proposition C",
        "summary": "A measure rejected by voters.",
        "fullText": "Full legal text of proposition C.",
        "status": "failed",
        "electionDate": "2024-03-05T00:00:00",
        "sourceUrl": "https://example.com/propositions/2024-003",
    },
]


def _contact(handle: str, room: int, path: str) -> Dict[str, str]:
    return {
        "email": f"{handle}@example.gov",
        "phone": f"(555) 100-{room:04d}",
        "address": f"State Capitol, Room {room}",
        "website": f"https://example.com/{path}",
    }


EXAMPLE_REPRESENTATIVES = [
    {
        "externalId": "rep-senate-001",
        "name": "Jane Smith",
        "chamber": "Senate",
        "district": "District 1",
        "party": "Democratic",
        "photoUrl": "https://example.com/photos/jane-smith.jpg",
        "contactInfo": _contact("senator.smith", 100, "senators/smith"),
    },
    {
        "externalId": "rep-senate-002",
        "name": "John Doe",
        "chamber": "Senate",
        "district": "District 2",
        "party": "Republican",
        "photoUrl": "https://example.com/photos/john-doe.jpg",
        "contactInfo": _contact("senator.doe", 101, "senators/doe"),
    },
    {
        "externalId": "rep-assembly-001",
        "name": "Maria Garcia",
        "chamber": "Assembly",
        "district": "District 1",
        "party": "Democratic",
        "contactInfo": _contact("assembly.garcia", 200, "assembly/garcia"),
    },
    {
        "externalId": "rep-assembly-002",
        "name": "Robert Johnson",
        "chamber": "Assembly",
        "district": "District 2",
        "party": "Independent",
        "contactInfo": _contact("assembly.johnson", 201, "assembly/johnson"),
    },
]


class ExampleRegionProvider(BaseRegionPlugin):
    """Fallback provider returning fixed sample data (no campaign finance)"""

    def __init__(self):
        super().__init__("example")

    def get_name(self) -> str:
        return "example"

    def get_version(self) -> str:
        return "1.0.0"

    def get_region_info(self) -> RegionInfo:
        return RegionInfo(
            id="example",
            name="Example Region",
            description="A sample region with mock civic data for development and testing",
            timezone="America/Los_Angeles",
            data_source_urls=["https://example.com/civic-data"],
        )

    def get_supported_data_types(self) -> List[DataType]:
        return [DataType.PROPOSITIONS, DataType.MEETINGS, DataType.REPRESENTATIVES]

    async def fetch_propositions(self) -> List[Proposition]:
        return self._build(DataType.PROPOSITIONS, Proposition, EXAMPLE_PROPOSITIONS)

    async def fetch_meetings(self) -> List[Meeting]:
        now = datetime.now().replace(microsecond=0)
        meetings = [
            {
                "externalId": "mtg-2024-001",
                "title": "Senate Floor Session",
                "body": "Senate",
                "scheduledAt": now + timedelta(days=7),
                "location": "Senate Chamber, State Capitol",
                "agendaUrl": "https://example.com/meetings/senate-2024-001/agenda",
                "videoUrl": "https://example.com/meetings/senate-2024-001/video",
            },
            {
                "externalId": "mtg-2024-002",
                "title": "Assembly Budget Committee Hearing",
                "body": "Assembly",
                "scheduledAt": now + timedelta(days=3),
                "location": "Room 4202, State Capitol",
                "agendaUrl": "https://example.com/meetings/assembly-budget-2024/agenda",
            },
            {
                "externalId": "mtg-2024-003",
                "title": "Joint Legislative Audit Committee",
                "body": "Joint",
                "scheduledAt": now - timedelta(days=7),
                "location": "Room 113, State Capitol",
            },
        ]
        return self._build(DataType.MEETINGS, Meeting, meetings)

    async def fetch_representatives(self) -> List[Representative]:
        return self._build(DataType.REPRESENTATIVES, Representative, EXAMPLE_REPRESENTATIVES)

    def _build(
        self,
        data_type: DataType,
        model: Type[RecordT],
        rows: List[Dict[str, Any]],
    ) -> List[RecordT]:
        try:
            records = [model.model_validate(row) for row in rows]
        except Exception as e:
            raise FetchFailure(self.get_name(), data_type.value, e) from e

        self.logger.info("fetched example records", data_type=data_type.value, count=len(records))
        return records
