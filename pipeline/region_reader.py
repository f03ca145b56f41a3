"""Region Reader - paginated read accessors over synced civic data"""

from typing import List, Optional

from database.db_postgres import Database
from database.models import Page, StoredFields
from regions.registry import PluginRegistry
from regions.types import DataType, RegionInfo

DEFAULT_PAGE_SIZE = 10


class RegionReader:
    """Read side: region info from the local plugin, records from storage

    Pages report has_more = offset + limit < total. Items are persisted
    models; Page.to_dict() drops null columns and renders money as float.
    """

    def __init__(self, db: Database, registry: PluginRegistry):
        self.db = db
        self.registry = registry

    def get_region_info(self) -> Optional[RegionInfo]:
        plugin = self.registry.get_local()
        return plugin.get_region_info() if plugin else None

    def get_supported_data_types(self) -> List[DataType]:
        plugin = self.registry.get_local()
        return plugin.get_supported_data_types() if plugin else []

    async def get_propositions(self, offset: int = 0, limit: int = DEFAULT_PAGE_SIZE) -> Page:
        return await self.db.propositions.get_page(offset, limit)

    async def get_proposition(self, record_id: str) -> Optional[StoredFields]:
        return await self.db.propositions.get_by_id(record_id)

    async def get_meetings(self, offset: int = 0, limit: int = DEFAULT_PAGE_SIZE) -> Page:
        return await self.db.meetings.get_page(offset, limit)

    async def get_meeting(self, record_id: str) -> Optional[StoredFields]:
        return await self.db.meetings.get_by_id(record_id)

    async def get_representatives(
        self,
        offset: int = 0,
        limit: int = DEFAULT_PAGE_SIZE,
        chamber: Optional[str] = None,
    ) -> Page:
        return await self.db.representatives.get_page(offset, limit, chamber=chamber)

    async def get_representative(self, record_id: str) -> Optional[StoredFields]:
        return await self.db.representatives.get_by_id(record_id)

    async def get_committees(self, offset: int = 0, limit: int = DEFAULT_PAGE_SIZE) -> Page:
        return await self.db.committees.get_page(offset, limit)

    async def get_contributions(
        self,
        offset: int = 0,
        limit: int = DEFAULT_PAGE_SIZE,
        committee_id: Optional[str] = None,
    ) -> Page:
        return await self.db.contributions.get_page(offset, limit, committee_id=committee_id)

    async def get_expenditures(
        self,
        offset: int = 0,
        limit: int = DEFAULT_PAGE_SIZE,
        committee_id: Optional[str] = None,
    ) -> Page:
        return await self.db.expenditures.get_page(offset, limit, committee_id=committee_id)

    async def get_independent_expenditures(
        self,
        offset: int = 0,
        limit: int = DEFAULT_PAGE_SIZE,
        committee_id: Optional[str] = None,
    ) -> Page:
        return await self.db.independent_expenditures.get_page(offset, limit, committee_id=committee_id)
