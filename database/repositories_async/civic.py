"""Async repositories for synced civic records

One repository per external collection. Every collection is keyed by
external_id (unique), the only identifier shared with upstream providers.

Reconciliation touches storage through exactly two calls:
- find_existing_external_ids(): one SELECT ... WHERE external_id = ANY($1)
- upsert_many(): one transaction running a batched INSERT ... ON CONFLICT
"""

from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple, Type

from pydantic import BaseModel

from config import get_logger
from database.models import (
    Page,
    StoredCommittee,
    StoredContribution,
    StoredExpenditure,
    StoredFields,
    StoredIndependentExpenditure,
    StoredMeeting,
    StoredProposition,
    StoredRepresentative,
)
from database.repositories_async.base import BaseRepository

logger = get_logger(__name__).bind(component="civic_repository")


def _column_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


class ExternalRecordRepository(BaseRepository):
    """Repository for one external_id-keyed table

    Subclasses set:
        table: table name
        columns: data columns besides external_id, in insert order
        order_by: ORDER BY clause for get_page()
        filter_columns: columns accepted as equality filters
        stored_model: persisted record model returned by reads
    """

    table: str = ""
    columns: Tuple[str, ...] = ()
    order_by: str = "created_at DESC"
    filter_columns: Tuple[str, ...] = ()
    stored_model: Type[StoredFields] = StoredFields

    def _upsert_query(self) -> str:
        all_columns = ("external_id",) + self.columns
        placeholders = ", ".join(f"${i}" for i in range(1, len(all_columns) + 1))
        updates = ",\n                ".join(f"{col} = EXCLUDED.{col}" for col in self.columns)
        return f"""
            INSERT INTO {self.table} ({", ".join(all_columns)})
            VALUES ({placeholders})
            ON CONFLICT (external_id) DO UPDATE SET
                {updates},
                updated_at = NOW()
        """

    def _row_args(self, record: BaseModel) -> tuple:
        data = record.model_dump()
        return (data["external_id"],) + tuple(_column_value(data.get(col)) for col in self.columns)

    def _where(self, filters: Dict[str, Any]) -> Tuple[str, List[Any]]:
        clauses = []
        args: List[Any] = []
        for key, value in filters.items():
            if key not in self.filter_columns:
                raise ValueError(f"Unsupported filter for {self.table}: {key}")
            if value is None:
                continue
            args.append(value)
            clauses.append(f"{key} = ${len(args)}")
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, args

    async def find_existing_external_ids(self, external_ids: Sequence[str]) -> Set[str]:
        """Which of these external ids are already stored (single query)"""
        if not external_ids:
            return set()

        rows = await self._fetch(
            f"SELECT external_id FROM {self.table} WHERE external_id = ANY($1::text[])",
            list(external_ids),
        )
        return {row["external_id"] for row in rows}

    async def upsert_many(self, records: Iterable[BaseModel]) -> int:
        """Insert or update all records in one transaction

        Returns:
            Number of records written
        """
        args = [self._row_args(record) for record in records]
        if not args:
            return 0

        async with self.transaction() as conn:
            await conn.executemany(self._upsert_query(), args)

        logger.debug("upserted records", table=self.table, count=len(args))
        return len(args)

    async def count(self, **filters: Any) -> int:
        where, args = self._where(filters)
        return await self._fetchval(f"SELECT COUNT(*) FROM {self.table} {where}", *args)

    async def get_page(self, offset: int = 0, limit: int = 10, **filters: Any) -> Page:
        """Ordered slice plus total; has_more = offset + limit < total"""
        where, args = self._where(filters)
        total = await self.count(**filters)
        rows = await self._fetch(
            f"""
            SELECT * FROM {self.table}
            {where}
            ORDER BY {self.order_by}
            OFFSET ${len(args) + 1} LIMIT ${len(args) + 2}
            """,
            *args,
            offset,
            limit,
        )
        return Page(
            items=[self._to_model(row) for row in rows],
            total=total,
            has_more=offset + limit < total,
        )

    async def get_by_id(self, record_id: str) -> Optional[StoredFields]:
        row = await self._fetchrow(f"SELECT * FROM {self.table} WHERE id = $1", record_id)
        return self._to_model(row) if row else None

    def _to_model(self, row) -> StoredFields:
        return self.stored_model.model_validate(dict(row))


class PropositionRepository(ExternalRecordRepository):
    table = "propositions"
    columns = ("title", "summary", "full_text", "status", "election_date", "source_url")
    order_by = "election_date DESC NULLS LAST, created_at DESC"
    stored_model = StoredProposition


class MeetingRepository(ExternalRecordRepository):
    table = "meetings"
    columns = ("title", "body", "scheduled_at", "location", "agenda_url", "video_url")
    order_by = "scheduled_at DESC"
    stored_model = StoredMeeting


class RepresentativeRepository(ExternalRecordRepository):
    table = "representatives"
    columns = ("name", "chamber", "district", "party", "photo_url", "contact_info")
    order_by = "chamber ASC, name ASC"
    filter_columns = ("chamber",)
    stored_model = StoredRepresentative


class CommitteeRepository(ExternalRecordRepository):
    table = "committees"
    columns = (
        "name", "type", "candidate_name", "candidate_office", "proposition_id",
        "party", "status", "source_system", "source_url",
    )
    order_by = "name ASC"
    filter_columns = ("source_system",)
    stored_model = StoredCommittee


class ContributionRepository(ExternalRecordRepository):
    table = "contributions"
    columns = (
        "committee_id", "donor_name", "donor_type", "donor_employer", "donor_occupation",
        "donor_city", "donor_state", "donor_zip", "amount", "date", "election_type",
        "contribution_type", "source_system",
    )
    order_by = "date DESC, created_at DESC"
    filter_columns = ("committee_id", "source_system")
    stored_model = StoredContribution


class ExpenditureRepository(ExternalRecordRepository):
    table = "expenditures"
    columns = (
        "committee_id", "payee_name", "amount", "date", "purpose_description",
        "expenditure_code", "candidate_name", "proposition_title", "support_or_oppose",
        "source_system",
    )
    order_by = "date DESC, created_at DESC"
    filter_columns = ("committee_id", "source_system")
    stored_model = StoredExpenditure


class IndependentExpenditureRepository(ExternalRecordRepository):
    table = "independent_expenditures"
    columns = (
        "committee_id", "committee_name", "candidate_name", "proposition_title",
        "support_or_oppose", "amount", "date", "election_date", "description",
        "source_system",
    )
    order_by = "date DESC, created_at DESC"
    filter_columns = ("committee_id", "source_system")
    stored_model = StoredIndependentExpenditure
