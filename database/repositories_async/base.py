"""Base repository with async PostgreSQL connection pooling

Repositories share one asyncpg pool and a small set of query helpers.

Return Type Conventions
-----------------------
    get_by_id(id) -> Optional[T]
        Single row by primary key, None when absent.

    get_page(offset, limit, ...) -> Page[T]
        Ordered slice plus total count.

    find_existing_external_ids(ids) -> Set[str]
        Subset of ids already stored. Missing ids are simply absent.

Connection Patterns
-------------------
    self.pool.acquire()
        Read-only queries that don't need atomicity.

    self.transaction()
        Writes, or multi-statement work that must commit together.
"""

import asyncpg
from asyncpg import Connection
from typing import Any, List, Optional
from contextlib import asynccontextmanager

from config import get_logger
from exceptions import DatabaseError

logger = get_logger(__name__).bind(component="repository")


class BaseRepository:
    """Base class for async PostgreSQL repositories

    - Pool is injected by the Database facade, never created here
    - Transactions are explicit (async with self.transaction())
    - Queries use $1, $2 placeholders
    """

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def _fetchrow(self, query: str, *args: Any) -> Optional[asyncpg.Record]:
        async with self.pool.acquire() as conn:
            return await conn.fetchrow(query, *args)

    async def _fetch(self, query: str, *args: Any) -> List[asyncpg.Record]:
        async with self.pool.acquire() as conn:
            return await conn.fetch(query, *args)

    async def _fetchval(self, query: str, *args: Any) -> Any:
        async with self.pool.acquire() as conn:
            return await conn.fetchval(query, *args)

    async def _execute(self, query: str, *args: Any) -> str:
        """Execute a statement without returning rows"""
        async with self.pool.acquire() as conn:
            return await conn.execute(query, *args)

    @asynccontextmanager
    async def transaction(self):
        """Connection with an open transaction

        Commits when the block exits cleanly, rolls back on exception.
        asyncpg errors are re-raised as DatabaseError.
        """
        async with self.pool.acquire() as conn:
            try:
                async with conn.transaction():
                    yield conn
            except asyncpg.PostgresError as e:
                logger.error("transaction rolled back", error=str(e), error_type=type(e).__name__)
                raise DatabaseError(f"Transaction failed: {e}") from e

    @asynccontextmanager
    async def _ensure_conn(self, conn: Optional[Connection] = None):
        """Join the caller's transaction when conn is given, else open one"""
        if conn:
            yield conn
        else:
            async with self.transaction() as c:
                yield c
