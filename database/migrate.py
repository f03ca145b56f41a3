"""
Database Migration Runner

Versioned SQL migrations for the civic data schema, applied with asyncpg.

Usage:
    python -m database.migrate up             # Apply pending migrations
    python -m database.migrate status         # Show migration status
    python -m database.migrate down --count 1 # Roll back (needs NNN_name.down.sql)

Pattern:
    - Migrations are numbered SQL files: 001_name.sql, 002_name.sql
    - Each migration runs in its own transaction
    - Applied versions are tracked in schema_migrations
"""

import asyncio
from pathlib import Path
from typing import List, Optional, Set, Tuple

import asyncpg
import click

from config import config, get_logger

logger = get_logger(__name__).bind(component="migrations")

MIGRATIONS_DIR = Path(__file__).parent / "migrations"

Migration = Tuple[str, str, Path]


async def ensure_migrations_table(conn: asyncpg.Connection) -> None:
    await conn.execute("""
        CREATE TABLE IF NOT EXISTS schema_migrations (
            version TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            applied_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)


async def get_applied_versions(conn: asyncpg.Connection) -> Set[str]:
    rows = await conn.fetch("SELECT version FROM schema_migrations ORDER BY version")
    return {row["version"] for row in rows}


def list_migrations(migrations_dir: Path = MIGRATIONS_DIR) -> List[Migration]:
    """All up-migrations as (version, name, path), sorted by version"""
    migrations = []
    for sql_file in sorted(migrations_dir.glob("*.sql")):
        if sql_file.name.endswith(".down.sql"):
            continue

        version, sep, name = sql_file.stem.partition("_")
        if not sep or not version.isdigit():
            logger.warning("skipping malformed migration", file=sql_file.name)
            continue
        migrations.append((version, name, sql_file))
    return migrations


def pending_migrations(applied: Set[str], migrations_dir: Path = MIGRATIONS_DIR) -> List[Migration]:
    return [m for m in list_migrations(migrations_dir) if m[0] not in applied]


async def apply_migration(conn: asyncpg.Connection, version: str, name: str, sql_file: Path) -> None:
    logger.info("applying migration", version=version, name=name)
    async with conn.transaction():
        await conn.execute(sql_file.read_text())
        await conn.execute(
            "INSERT INTO schema_migrations (version, name) VALUES ($1, $2)",
            version, name
        )
    logger.info("migration applied", version=version, name=name)


async def rollback_migration(conn: asyncpg.Connection, version: str, name: str) -> bool:
    down_file = MIGRATIONS_DIR / f"{version}_{name}.down.sql"
    if not down_file.exists():
        logger.error("no rollback file", version=version, file=down_file.name)
        return False

    logger.info("rolling back migration", version=version, name=name)
    async with conn.transaction():
        await conn.execute(down_file.read_text())
        await conn.execute("DELETE FROM schema_migrations WHERE version = $1", version)
    logger.info("migration rolled back", version=version, name=name)
    return True


async def migrate(dsn: Optional[str] = None) -> int:
    """Apply pending migrations in order; stops at the first failure

    Returns:
        Number of migrations applied
    """
    conn = await asyncpg.connect(dsn or config.get_postgres_dsn())
    try:
        await ensure_migrations_table(conn)
        pending = pending_migrations(await get_applied_versions(conn))
        if not pending:
            logger.info("no pending migrations")
            return 0

        applied = 0
        for version, name, sql_file in pending:
            try:
                await apply_migration(conn, version, name, sql_file)
            except asyncpg.PostgresError as e:
                logger.error("migration failed", version=version, name=name, error=str(e))
                break
            applied += 1
        return applied
    finally:
        await conn.close()


async def rollback(count: int = 1, dsn: Optional[str] = None) -> int:
    conn = await asyncpg.connect(dsn or config.get_postgres_dsn())
    try:
        await ensure_migrations_table(conn)
        rows = await conn.fetch(
            "SELECT version, name FROM schema_migrations ORDER BY version DESC LIMIT $1",
            count
        )
        rolled_back = 0
        for row in rows:
            if not await rollback_migration(conn, row["version"], row["name"]):
                break
            rolled_back += 1
        return rolled_back
    finally:
        await conn.close()


async def status(dsn: Optional[str] = None) -> None:
    conn = await asyncpg.connect(dsn or config.get_postgres_dsn())
    try:
        await ensure_migrations_table(conn)
        rows = await conn.fetch(
            "SELECT version, name, applied_at FROM schema_migrations ORDER BY version"
        )
        pending = pending_migrations({row["version"] for row in rows})
    finally:
        await conn.close()

    click.echo("\n=== Applied Migrations ===")
    for row in rows:
        click.echo(f"  [{row['version']}] {row['name']} - {row['applied_at']}")
    if not rows:
        click.echo("  (none)")

    click.echo("\n=== Pending Migrations ===")
    for version, name, _ in pending:
        click.echo(f"  [{version}] {name}")
    if not pending:
        click.echo("  (none)")


@click.group()
def main():
    """Database migrations"""


@main.command()
def up():
    """Apply pending migrations"""
    applied = asyncio.run(migrate())
    click.echo(f"Applied {applied} migration(s)")


@main.command()
@click.option("--count", default=1, show_default=True, help="Migrations to roll back")
def down(count: int):
    """Roll back the most recent migrations"""
    rolled_back = asyncio.run(rollback(count))
    click.echo(f"Rolled back {rolled_back} migration(s)")


@main.command(name="status")
def status_command():
    """Show applied and pending migrations"""
    asyncio.run(status())


if __name__ == "__main__":
    main()
