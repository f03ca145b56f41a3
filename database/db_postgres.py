"""PostgreSQL Database Layer with Repository Pattern

One asyncpg pool shared by a repository per civic collection, plus the
region plugin config table. Schema lives in database/migrations.
"""

import asyncpg
import json
from typing import Dict, Optional

from config import get_logger, config
from database.repositories_async import (
    CommitteeRepository,
    ContributionRepository,
    ExpenditureRepository,
    IndependentExpenditureRepository,
    MeetingRepository,
    PropositionRepository,
    RegionPluginRepository,
    RepresentativeRepository,
)
from exceptions import DatabaseConnectionError

logger = get_logger(__name__).bind(component="database_postgres")


def _jsonb_encoder(obj):
    """JSONB encoder that serializes pydantic models via model_dump()"""
    def default(o):
        if hasattr(o, 'model_dump'):
            return o.model_dump(mode="json")
        raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")

    return json.dumps(obj, default=default)


class Database:
    """Async PostgreSQL database with repository pattern

    Usage:
        db = await Database.create()
        page = await db.propositions.get_page(offset=0, limit=10)
        await db.close()
    """

    pool: asyncpg.Pool

    propositions: PropositionRepository
    meetings: MeetingRepository
    representatives: RepresentativeRepository
    committees: CommitteeRepository
    contributions: ContributionRepository
    expenditures: ExpenditureRepository
    independent_expenditures: IndependentExpenditureRepository
    region_plugins: RegionPluginRepository

    def __init__(self, pool: asyncpg.Pool):
        """Use Database.create() instead of direct instantiation."""
        self.pool = pool

        self.propositions = PropositionRepository(pool)
        self.meetings = MeetingRepository(pool)
        self.representatives = RepresentativeRepository(pool)
        self.committees = CommitteeRepository(pool)
        self.contributions = ContributionRepository(pool)
        self.expenditures = ExpenditureRepository(pool)
        self.independent_expenditures = IndependentExpenditureRepository(pool)
        self.region_plugins = RegionPluginRepository(pool)

        logger.info("database initialized with repositories")

    @classmethod
    async def create(
        cls,
        dsn: Optional[str] = None,
        min_size: int = config.POSTGRES_POOL_MIN_SIZE,
        max_size: int = config.POSTGRES_POOL_MAX_SIZE
    ) -> "Database":
        """Create database with connection pool

        Args:
            dsn: PostgreSQL connection string (defaults to config.get_postgres_dsn())
            min_size: Minimum pool size
            max_size: Maximum pool size

        Raises:
            DatabaseConnectionError: pool could not be created
        """
        if dsn is None:
            dsn = config.get_postgres_dsn()

        async def init_connection(conn):
            await conn.set_type_codec(
                'jsonb',
                encoder=_jsonb_encoder,
                decoder=json.loads,
                schema='pg_catalog'
            )

        try:
            pool = await asyncpg.create_pool(
                dsn,
                min_size=min_size,
                max_size=max_size,
                command_timeout=60,
                init=init_connection,
            )
            logger.info("connection pool created", min_size=min_size, max_size=max_size)
            return cls(pool)
        except (asyncpg.PostgresError, OSError, ConnectionError) as e:
            logger.error("failed to create connection pool", error=str(e))
            raise DatabaseConnectionError(f"Failed to connect to PostgreSQL: {e}") from e

    async def close(self):
        await self.pool.close()
        logger.info("connection pool closed")

    async def get_stats(self) -> Dict[str, int]:
        """Row counts per civic collection"""
        return {
            "propositions": await self.propositions.count(),
            "meetings": await self.meetings.count(),
            "representatives": await self.representatives.count(),
            "committees": await self.committees.count(),
            "contributions": await self.contributions.count(),
            "expenditures": await self.expenditures.count(),
            "independent_expenditures": await self.independent_expenditures.count(),
        }
