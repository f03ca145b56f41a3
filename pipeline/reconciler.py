"""Reconciler - diff fetched records against storage and batch upsert

Storage cost per collection is fixed regardless of size: one existence
lookup, one transactional batch write. An empty batch touches nothing.
"""

from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence, Set

from pydantic import BaseModel

from config import get_logger

logger = get_logger(__name__).bind(component="reconciler")


class RecordRepository(Protocol):
    async def find_existing_external_ids(self, external_ids: Sequence[str]) -> Set[str]: ...
    async def upsert_many(self, records: Iterable[BaseModel]) -> int: ...


@dataclass
class ReconcileCounts:
    processed: int = 0
    created: int = 0
    updated: int = 0

    def __add__(self, other: "ReconcileCounts") -> "ReconcileCounts":
        return ReconcileCounts(
            processed=self.processed + other.processed,
            created=self.created + other.created,
            updated=self.updated + other.updated,
        )


class Reconciler:
    async def reconcile(
        self, repository: RecordRepository, records: Sequence[BaseModel]
    ) -> ReconcileCounts:
        """Upsert records, counting creates vs updates by external_id

        Storage errors propagate; the caller turns them into a SyncResult error.
        """
        if not records:
            return ReconcileCounts()

        external_ids = [record.external_id for record in records]
        existing = await repository.find_existing_external_ids(external_ids)

        created = sum(1 for eid in external_ids if eid not in existing)
        updated = len(external_ids) - created

        await repository.upsert_many(records)

        logger.debug(
            "reconciled records",
            repository=type(repository).__name__,
            processed=len(records),
            created=created,
            updated=updated,
        )
        return ReconcileCounts(processed=len(records), created=created, updated=updated)
