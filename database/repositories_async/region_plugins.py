"""Async RegionPluginRepository for persisted plugin descriptors

Rows are seeded from descriptor files at startup. The enabled flag is
runtime state owned by the database: descriptor syncs never overwrite it.
"""

from typing import Optional

from config import get_logger
from database.models import RegionPluginRow
from database.repositories_async.base import BaseRepository
from regions.schemas import RegionPluginDescriptor

logger = get_logger(__name__).bind(component="region_plugin_repository")

DECLARATIVE_PLUGIN_TYPE = "declarative"


class RegionPluginRepository(BaseRepository):
    """Repository for the region_plugins table"""

    async def get_by_name(self, name: str) -> Optional[RegionPluginRow]:
        row = await self._fetchrow(
            """
            SELECT name, display_name, description, plugin_type, version, enabled,
                   config, last_sync_at, last_sync_status, last_error,
                   created_at, updated_at
            FROM region_plugins
            WHERE name = $1
            """,
            name,
        )
        return self._to_row(row) if row else None

    async def find_enabled_local(self, federal_name: str = "federal") -> Optional[RegionPluginRow]:
        """First enabled plugin that is not the federal one"""
        row = await self._fetchrow(
            """
            SELECT name, display_name, description, plugin_type, version, enabled,
                   config, last_sync_at, last_sync_status, last_error,
                   created_at, updated_at
            FROM region_plugins
            WHERE enabled = TRUE AND name <> $1
            ORDER BY name
            LIMIT 1
            """,
            federal_name,
        )
        return self._to_row(row) if row else None

    async def upsert_descriptor(
        self,
        descriptor: RegionPluginDescriptor,
        enabled_on_create: bool = False,
    ) -> None:
        """Insert or refresh a descriptor row; enabled is only set on insert"""
        await self._execute(
            """
            INSERT INTO region_plugins (
                name, display_name, description, plugin_type, version, enabled, config
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7)
            ON CONFLICT (name) DO UPDATE SET
                display_name = EXCLUDED.display_name,
                description = EXCLUDED.description,
                plugin_type = EXCLUDED.plugin_type,
                version = EXCLUDED.version,
                config = EXCLUDED.config,
                updated_at = NOW()
            """,
            descriptor.name,
            descriptor.display_name,
            descriptor.description,
            DECLARATIVE_PLUGIN_TYPE,
            descriptor.version,
            enabled_on_create,
            descriptor.config_dict(),
        )
        logger.info("synced region config", name=descriptor.name, version=descriptor.version)

    async def record_sync(self, name: str, status: str, error: Optional[str] = None) -> None:
        """Stamp the outcome of the latest sync run on a plugin row"""
        await self._execute(
            """
            UPDATE region_plugins
            SET last_sync_at = NOW(), last_sync_status = $2, last_error = $3, updated_at = NOW()
            WHERE name = $1
            """,
            name,
            status,
            error,
        )

    @staticmethod
    def _to_row(row) -> RegionPluginRow:
        return RegionPluginRow(
            name=row["name"],
            display_name=row["display_name"],
            description=row["description"],
            plugin_type=row["plugin_type"],
            version=row["version"],
            enabled=row["enabled"],
            config=row["config"] or {},
            last_sync_at=row["last_sync_at"],
            last_sync_status=row["last_sync_status"],
            last_error=row["last_error"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
