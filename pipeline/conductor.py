"""
Pipeline Conductor - wires storage, registry and sync engine; runs the CLI

Commands:
- discover: validate region descriptor files
- sync-all / sync DATA_TYPE: one-shot reconciliation
- status: registry and storage diagnostics
- daemon: scheduled sync loop until SIGINT/SIGTERM

Pure async - one event loop, no threads.
"""


import asyncio
import importlib
import json
import signal
from typing import Any, Dict, List, Optional

from config import config, get_logger
from database.db_postgres import Database
from pipeline.click_types import DATA_TYPE
from pipeline.protocols import MetricsCollector
from pipeline.region_reader import RegionReader
from pipeline.sync_engine import RegionSyncEngine
from regions.loader import PluginLoader
from regions.protocol import PipelineService
from regions.registry import PluginRegistry, Slot
from regions.types import DataType, SyncResult

logger = get_logger(__name__).bind(component="conductor")

# Retry delay after a failed sync cycle (seconds)
ERROR_RETRY_SECONDS = 2 * 60 * 60


def load_pipeline_service(path: str) -> Optional[PipelineService]:
    """Import a pipeline service factory given as "module:attribute"

    A class or zero-arg callable is called; any other object is used as-is.
    """
    if not path:
        return None

    module_name, _, attribute = path.partition(":")
    target = getattr(importlib.import_module(module_name), attribute)
    service = target() if callable(target) else target
    logger.info("pipeline service loaded", path=path, service=type(service).__name__)
    return service


class Conductor:
    """Owns one registry and engine for the life of the process"""

    def __init__(
        self,
        db: Database,
        pipeline: Optional[PipelineService] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.db = db
        self.registry = PluginRegistry()
        self.loader = PluginLoader(self.registry, pipeline=pipeline)
        self.engine = RegionSyncEngine(
            db=db,
            registry=self.registry,
            loader=self.loader,
            metrics=metrics,
        )
        self.reader = RegionReader(db, self.registry)
        self._shutdown_event = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return not self._shutdown_event.is_set()

    def stop(self) -> None:
        self._shutdown_event.set()

    async def close(self):
        """Destroy loaded plugins"""
        await self.engine.teardown()

    async def __aenter__(self):
        try:
            await self.engine.bootstrap()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    async def get_status(self) -> Dict[str, Any]:
        local_health = await self.registry.get_health(Slot.LOCAL)
        federal_health = await self.registry.get_health(Slot.FEDERAL)
        info = self.reader.get_region_info()
        return {
            "registry": self.registry.get_status(),
            "region": info.model_dump(mode="json") if info else None,
            "supported_data_types": [dt.value for dt in self.reader.get_supported_data_types()],
            "local_health": local_health.model_dump(mode="json") if local_health else None,
            "federal_health": federal_health.model_dump(mode="json") if federal_health else None,
            "records": await self.db.get_stats(),
        }

    async def run_daemon(self, interval_hours: int, sync_on_start: bool = True) -> None:
        """Sync every interval until stop() is called"""
        interval = interval_hours * 60 * 60
        run_now = sync_on_start

        while self.is_running:
            delay = interval
            if run_now:
                try:
                    results = await self.engine.sync_all()
                    failed = sum(1 for r in results if r.errors)
                    logger.info("sync cycle complete", results=len(results), failed=failed)
                except Exception as e:  # Intentionally broad: daemon resilience
                    logger.error("sync loop error", error=str(e), error_type=type(e).__name__)
                    delay = min(interval, ERROR_RETRY_SECONDS)
            run_now = True

            logger.info("sleeping until next sync", seconds=delay)
            try:
                await asyncio.wait_for(self._shutdown_event.wait(), timeout=delay)
            except asyncio.TimeoutError:
                pass

        logger.info("daemon stopped")


def _results_json(results: List[SyncResult]) -> str:
    return json.dumps([r.model_dump(mode="json") for r in results], indent=2)


def main():
    """Entry point for civicsync CLI"""
    import click

    from regions.discovery import discover_region_configs

    async def open_conductor(metrics: Optional[MetricsCollector] = None):
        db = await Database.create()
        pipeline = load_pipeline_service(config.PIPELINE_SERVICE)
        return db, Conductor(db, pipeline=pipeline, metrics=metrics)

    @click.group(invoke_without_command=True)
    @click.pass_context
    def cli(ctx):
        """Region plugin loader and civic data sync"""
        if ctx.invoked_subcommand is None:
            click.echo(ctx.get_help())

    @cli.command("discover")
    @click.option("--dir", "regions_dir", default=None, help="Descriptor directory (default: CIVICSYNC_REGION_CONFIGS_DIR)")
    def discover(regions_dir):
        """Validate region descriptor files and list them"""
        regions_dir = regions_dir or config.REGION_CONFIGS_DIR
        descriptors = discover_region_configs(regions_dir)
        if not descriptors:
            click.echo(f"No region configs found in {regions_dir}")
            return

        click.echo(f"\n{'Name':<20} {'Version':<12} {'Region':<16} {'Sources':<8} Display name")
        click.echo("-" * 80)
        for d in descriptors:
            click.echo(
                f"{d.name:<20} {d.version:<12} {d.config.region_id:<16} "
                f"{len(d.config.data_sources):<8} {d.display_name}"
            )

    @cli.command("sync-all")
    def sync_all():
        """Sync every data type from the federal and local plugins"""
        async def run():
            db, conductor = await open_conductor()
            try:
                async with conductor:
                    return await conductor.engine.sync_all()
            finally:
                await db.close()

        results = asyncio.run(run())
        click.echo(_results_json(results))

    @cli.command("sync")
    @click.argument("data_type", type=DATA_TYPE)
    def sync(data_type: DataType):
        """Sync one data type from the local plugin"""
        async def run():
            db, conductor = await open_conductor()
            try:
                async with conductor:
                    return await conductor.engine.sync_data_type(data_type)
            finally:
                await db.close()

        result = asyncio.run(run())
        click.echo(_results_json([result]))

    @cli.command("status")
    def status():
        """Show loaded plugins, health and record counts"""
        async def run():
            db, conductor = await open_conductor()
            try:
                async with conductor:
                    return await conductor.get_status()
            finally:
                await db.close()

        click.echo(json.dumps(asyncio.run(run()), indent=2, default=str))

    @cli.command("daemon")
    @click.option("--interval-hours", type=click.IntRange(min=1), default=None,
                  help="Hours between syncs (default: CIVICSYNC_SYNC_INTERVAL_HOURS)")
    @click.option("--metrics-port", type=int, default=None, help="Expose Prometheus metrics on this port")
    def daemon(interval_hours, metrics_port):
        """Run scheduled syncs until interrupted"""
        from prometheus_client import start_http_server

        from pipeline.metrics import metrics

        interval_hours = interval_hours or config.SYNC_INTERVAL_HOURS

        async def run():
            if metrics_port:
                start_http_server(metrics_port)
                logger.info("metrics server started", port=metrics_port)

            db, conductor = await open_conductor(metrics=metrics)
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGTERM, signal.SIGINT):
                loop.add_signal_handler(sig, conductor.stop)

            try:
                async with conductor:
                    logger.info(
                        "starting sync daemon",
                        interval_hours=interval_hours,
                        sync_enabled=config.SYNC_ENABLED,
                    )
                    await conductor.run_daemon(interval_hours, sync_on_start=config.SYNC_ENABLED)
            finally:
                await db.close()

        asyncio.run(run())

    cli()


if __name__ == "__main__":
    main()
