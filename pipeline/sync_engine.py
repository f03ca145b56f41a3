"""Region Sync Engine - plugin bootstrap and civic data reconciliation

Startup:
    1. Seed region_plugins from descriptor files
    2. Load the federal plugin, scoped to the local region's placeholders
    3. Load the enabled local plugin, falling back to the example provider

Steady state:
    For each active plugin (federal first) and each data type it supports:
    fetch, diff by external_id, batch upsert. One SyncResult per pair;
    a failure in one pair never aborts the others.
"""

import time
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Union

import asyncpg

from config import config, get_logger
from database.db_postgres import Database
from database.models import RegionPluginRow
from exceptions import (
    CivicSyncError,
    ConfigurationError,
    DatabaseError,
    FetchFailure,
    PluginLoadError,
)
from pipeline.protocols import MetricsCollector, NullMetrics
from pipeline.reconciler import ReconcileCounts, Reconciler
from regions.discovery import discover_region_configs
from regions.loader import PluginLoader
from regions.placeholders import resolve_federal_config
from regions.protocol import RegionPlugin
from regions.registry import PluginRegistry
from regions.types import DataType, SyncResult

logger = get_logger(__name__).bind(component="sync")

SyncHandler = Callable[[RegionPlugin, str], Awaitable[ReconcileCounts]]


class RegionSyncEngine:
    """Loads region plugins and reconciles their data into storage"""

    def __init__(
        self,
        db: Database,
        registry: PluginRegistry,
        loader: PluginLoader,
        metrics: Optional[MetricsCollector] = None,
        regions_dir: Optional[Union[str, Path]] = None,
        federal_plugin_name: Optional[str] = None,
    ):
        self.db = db
        self.registry = registry
        self.loader = loader
        self.metrics = metrics or NullMetrics()
        self.regions_dir = Path(regions_dir or config.REGION_CONFIGS_DIR)
        self.federal_plugin_name = federal_plugin_name or config.FEDERAL_PLUGIN_NAME
        self.reconciler = Reconciler()

        self._handlers: Dict[DataType, SyncHandler] = {
            DataType.PROPOSITIONS: self._sync_propositions,
            DataType.MEETINGS: self._sync_meetings,
            DataType.REPRESENTATIVES: self._sync_representatives,
            DataType.CAMPAIGN_FINANCE: self._sync_campaign_finance,
        }

    # ==================
    # BOOTSTRAP
    # ==================

    async def bootstrap(self) -> None:
        """Load the federal and local plugins

        Raises:
            ConfigurationError: no local plugin is active afterwards
        """
        await self.sync_region_configs()

        local_row = await self.db.region_plugins.find_enabled_local(self.federal_plugin_name)
        local_config = local_row.config if local_row else None

        await self._load_federal(local_config)
        await self._load_local(local_row)

        if not self.registry.has_active():
            raise ConfigurationError("No local region plugin available after initialization")

        local = self.registry.get_local()
        info = local.get_region_info()
        logger.info(
            "region plugins loaded",
            local=self.registry.get_active_name(),
            region=info.name,
            federal="loaded" if self.registry.get_federal() else "not loaded",
        )

    async def sync_region_configs(self) -> int:
        """Upsert discovered descriptor files into region_plugins

        Discovery or storage failures are logged, never raised.

        Returns:
            Number of descriptors synced
        """
        try:
            descriptors = discover_region_configs(self.regions_dir)
            for descriptor in descriptors:
                await self.db.region_plugins.upsert_descriptor(
                    descriptor,
                    enabled_on_create=descriptor.name == self.federal_plugin_name,
                )
        except (CivicSyncError, OSError, asyncpg.PostgresError) as e:
            logger.warning(
                "failed to sync region configs",
                regions_dir=str(self.regions_dir),
                error=str(e),
                error_type=type(e).__name__,
            )
            return 0

        if descriptors:
            logger.info("synced region configs", count=len(descriptors), regions_dir=str(self.regions_dir))
        return len(descriptors)

    async def _load_federal(self, local_config: Optional[dict]) -> None:
        row = await self.db.region_plugins.get_by_name(self.federal_plugin_name)
        if row is None:
            logger.warning("federal region config not found - federal data will not be available")
            return

        federal_config = resolve_federal_config(row.config, local_config)
        try:
            await self.loader.load_federal_plugin(federal_config, name=self.federal_plugin_name)
        except PluginLoadError as e:
            logger.error("failed to load federal plugin", error=str(e))

    async def _load_local(self, row: Optional[RegionPluginRow]) -> None:
        if row is not None:
            try:
                await self.loader.load_plugin(row.name, row.config)
                return
            except PluginLoadError as e:
                logger.error("failed to load local plugin, falling back to example", name=row.name, error=str(e))
        else:
            logger.warning("no enabled local region plugin, falling back to example")

        try:
            await self.loader.load_example()
        except PluginLoadError as e:
            logger.error("failed to load example plugin", error=str(e))

    async def teardown(self) -> None:
        await self.registry.teardown()

    # ==================
    # SYNC
    # ==================

    async def sync_all(self) -> List[SyncResult]:
        """Sync every supported data type of every active plugin"""
        start = time.time()
        results: List[SyncResult] = []
        logger.info("starting full data sync")

        async with self.registry.pinned() as plugins:
            for registered in plugins:
                try:
                    data_types = registered.instance.get_supported_data_types()
                except Exception as e:
                    logger.error("could not list supported data types", plugin=registered.name, error=str(e))
                    self.metrics.record_error(component="sync", error=e)
                    continue

                plugin_results = []
                for data_type in data_types:
                    plugin_results.append(
                        await self._sync_guarded(registered.instance, registered.name, data_type)
                    )
                results.extend(plugin_results)
                await self._record_sync(registered.name, plugin_results)

        failed = sum(1 for r in results if r.errors)
        logger.info(
            "full data sync complete",
            results=len(results),
            failed=failed,
            duration_seconds=round(time.time() - start, 1),
        )
        return results

    async def sync_data_type(self, data_type: Union[DataType, str]) -> SyncResult:
        """Sync one data type from the active local plugin"""
        data_type = DataType(data_type)
        async with self.registry.pinned():
            plugin = self.registry.get_local()
            if plugin is None:
                logger.warning("no active local plugin", data_type=data_type.value)
                return SyncResult(data_type=data_type, errors=("No active local region plugin",))
            name = self.registry.get_active_name() or "local"
            return await self._sync_guarded(plugin, name, data_type)

    async def _sync_guarded(self, plugin: RegionPlugin, name: str, data_type: DataType) -> SyncResult:
        try:
            return await self._sync_from(plugin, name, data_type)
        except Exception as e:
            logger.error(
                "data type sync failed",
                plugin=name,
                data_type=data_type.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            self.metrics.sync_runs.labels(plugin=name, data_type=data_type.value, status="error").inc()
            self.metrics.record_error(component="sync", error=e)
            return SyncResult(data_type=data_type, errors=(str(e),), plugin_name=name)

    async def _sync_from(self, plugin: RegionPlugin, name: str, data_type: DataType) -> SyncResult:
        handler = self._handlers.get(data_type)
        if handler is None:
            message = f"No sync handler for data type: {data_type.value}"
            logger.warning("no sync handler", plugin=name, data_type=data_type.value)
            return SyncResult(data_type=data_type, errors=(message,), plugin_name=name)

        logger.info("syncing data type", plugin=name, data_type=data_type.value)
        start = time.time()
        with self.metrics.sync_duration.labels(plugin=name, data_type=data_type.value).time():
            counts = await handler(plugin, name)

        self.metrics.sync_runs.labels(plugin=name, data_type=data_type.value, status="success").inc()
        self.metrics.items_synced.labels(plugin=name, data_type=data_type.value, operation="created").inc(counts.created)
        self.metrics.items_synced.labels(plugin=name, data_type=data_type.value, operation="updated").inc(counts.updated)

        logger.info(
            "synced data type",
            plugin=name,
            data_type=data_type.value,
            processed=counts.processed,
            created=counts.created,
            updated=counts.updated,
            duration_ms=int((time.time() - start) * 1000),
        )
        return SyncResult(
            data_type=data_type,
            items_processed=counts.processed,
            items_created=counts.created,
            items_updated=counts.updated,
            plugin_name=name,
        )

    async def _fetch(self, plugin: RegionPlugin, name: str, data_type: DataType, method_name: str):
        """Call a plugin fetch method; None when the plugin lacks it"""
        fetch = getattr(plugin, method_name, None)
        if fetch is None:
            logger.debug("plugin lacks capability", plugin=name, capability=method_name)
            return None
        try:
            return await fetch()
        except FetchFailure:
            raise
        except Exception as e:
            raise FetchFailure(name, data_type.value, e) from e

    async def _sync_propositions(self, plugin: RegionPlugin, name: str) -> ReconcileCounts:
        records = await self._fetch(plugin, name, DataType.PROPOSITIONS, "fetch_propositions")
        return await self.reconciler.reconcile(self.db.propositions, records or [])

    async def _sync_meetings(self, plugin: RegionPlugin, name: str) -> ReconcileCounts:
        records = await self._fetch(plugin, name, DataType.MEETINGS, "fetch_meetings")
        return await self.reconciler.reconcile(self.db.meetings, records or [])

    async def _sync_representatives(self, plugin: RegionPlugin, name: str) -> ReconcileCounts:
        records = await self._fetch(plugin, name, DataType.REPRESENTATIVES, "fetch_representatives")
        return await self.reconciler.reconcile(self.db.representatives, records or [])

    async def _sync_campaign_finance(self, plugin: RegionPlugin, name: str) -> ReconcileCounts:
        data = await self._fetch(plugin, name, DataType.CAMPAIGN_FINANCE, "fetch_campaign_finance")
        if data is None:
            return ReconcileCounts()

        # Committees first; the money flows reference them
        totals = ReconcileCounts()
        for repository, records in (
            (self.db.committees, data.committees),
            (self.db.contributions, data.contributions),
            (self.db.expenditures, data.expenditures),
            (self.db.independent_expenditures, data.independent_expenditures),
        ):
            totals = totals + await self.reconciler.reconcile(repository, records)
        return totals

    async def _record_sync(self, name: str, results: List[SyncResult]) -> None:
        errors = [e for r in results for e in r.errors]
        try:
            await self.db.region_plugins.record_sync(
                name,
                "failed" if errors else "success",
                "; ".join(errors) if errors else None,
            )
        except (DatabaseError, asyncpg.PostgresError) as e:
            logger.warning("failed to record sync status", plugin=name, error=str(e))
