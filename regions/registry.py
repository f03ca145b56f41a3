"""
Plugin Registry - the two region plugin slots

Federal: nation-wide provider (campaign finance scoped to the local state),
loaded unconditionally at startup.
Local: jurisdiction provider (propositions, meetings, representatives,
state campaign finance), selected by the operator.

Each slot holds at most one plugin. Mutation (register/unregister) and
in-flight reconciliation (pinned) share one lock, so a plugin is never
destroyed while a sync is using it.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, AsyncIterator, Dict, List, Optional

from config import get_logger
from regions.protocol import RegionPlugin
from regions.types import PluginHealth

logger = get_logger(__name__).bind(component="registry")


class Slot(str, Enum):
    LOCAL = "local"
    FEDERAL = "federal"


class PluginStatus(str, Enum):
    ACTIVE = "active"
    ERROR = "error"


@dataclass
class RegisteredPlugin:
    name: str
    instance: RegionPlugin
    slot: Slot
    status: PluginStatus
    last_error: Optional[str] = None
    loaded_at: datetime = field(default_factory=datetime.now)

    @property
    def is_active(self) -> bool:
        return self.status == PluginStatus.ACTIVE


class PluginRegistry:
    """Owns the federal and local plugin slots

    Constructed once per process and passed to whatever needs it.
    Call teardown() on shutdown to destroy both plugins.
    """

    def __init__(self):
        self.federal: Optional[RegisteredPlugin] = None
        self.local: Optional[RegisteredPlugin] = None
        self._lock = asyncio.Lock()

    def _get_slot(self, slot: Slot) -> Optional[RegisteredPlugin]:
        return self.federal if slot == Slot.FEDERAL else self.local

    def _set_slot(self, slot: Slot, plugin: Optional[RegisteredPlugin]) -> None:
        if slot == Slot.FEDERAL:
            self.federal = plugin
        else:
            self.local = plugin

    # --- Mutation ---

    async def register(
        self,
        name: str,
        instance: RegionPlugin,
        config: Optional[Dict[str, Any]] = None,
        slot: Slot = Slot.LOCAL,
    ) -> None:
        """Install a plugin into a slot, replacing any previous occupant.

        The previous occupant is destroyed before the new instance is
        initialized. If initialize() raises, the slot records ERROR (never
        returned by the getters) and the exception propagates.
        """
        slot = Slot(slot)
        async with self._lock:
            await self._unregister_slot(slot)

            logger.info("registering plugin", slot=slot.value, name=name)
            try:
                await instance.initialize(config)
            except Exception as e:
                logger.error(
                    "plugin initialization failed",
                    slot=slot.value,
                    name=name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                self._set_slot(slot, RegisteredPlugin(
                    name=name,
                    instance=instance,
                    slot=slot,
                    status=PluginStatus.ERROR,
                    last_error=str(e),
                ))
                raise

            self._set_slot(slot, RegisteredPlugin(
                name=name,
                instance=instance,
                slot=slot,
                status=PluginStatus.ACTIVE,
            ))
            logger.info("plugin registered", slot=slot.value, name=name)

    async def register_local(
        self, name: str, instance: RegionPlugin, config: Optional[Dict[str, Any]] = None
    ) -> None:
        await self.register(name, instance, config, slot=Slot.LOCAL)

    async def register_federal(
        self, name: str, instance: RegionPlugin, config: Optional[Dict[str, Any]] = None
    ) -> None:
        await self.register(name, instance, config, slot=Slot.FEDERAL)

    async def unregister(self, slot: Slot = Slot.LOCAL) -> None:
        """Destroy and clear a slot. No-op when the slot is empty."""
        async with self._lock:
            await self._unregister_slot(Slot(slot))

    async def teardown(self) -> None:
        """Destroy both plugins (process shutdown)"""
        async with self._lock:
            await self._unregister_slot(Slot.FEDERAL)
            await self._unregister_slot(Slot.LOCAL)

    async def _unregister_slot(self, slot: Slot) -> None:
        plugin = self._get_slot(slot)
        if plugin is None:
            return

        logger.info("unregistering plugin", slot=slot.value, name=plugin.name)
        # Clear first so a failing destroy() never leaves the old plugin reachable
        self._set_slot(slot, None)
        try:
            await plugin.instance.destroy()
        except Exception as e:
            logger.error(
                "plugin destroy failed",
                slot=slot.value,
                name=plugin.name,
                error=str(e),
                error_type=type(e).__name__,
            )

    # --- Lookup ---

    def get_local(self) -> Optional[RegionPlugin]:
        if self.local is not None and self.local.is_active:
            return self.local.instance
        return None

    def get_federal(self) -> Optional[RegionPlugin]:
        if self.federal is not None and self.federal.is_active:
            return self.federal.instance
        return None

    def get_active(self) -> Optional[RegionPlugin]:
        """Alias for get_local()"""
        return self.get_local()

    def get_all(self) -> List[RegisteredPlugin]:
        """Active plugins, federal first then local"""
        return [p for p in (self.federal, self.local) if p is not None and p.is_active]

    def get_active_name(self) -> Optional[str]:
        """Name of the local slot occupant, including one in ERROR"""
        return self.local.name if self.local is not None else None

    def has_active(self) -> bool:
        return self.local is not None and self.local.is_active

    async def get_health(self, slot: Slot = Slot.LOCAL) -> Optional[PluginHealth]:
        """Health of a slot's active plugin; None if the slot has none"""
        registered = self._get_slot(Slot(slot))
        if registered is None or not registered.is_active:
            return None

        try:
            return await registered.instance.health_check()
        except Exception as e:
            logger.error("health check failed", slot=registered.slot.value, name=registered.name, error=str(e))
            return PluginHealth(healthy=False, message=str(e), last_check=datetime.now())

    def get_status(self) -> Dict[str, Any]:
        """Registry status for diagnostics"""
        local, federal = self.local, self.federal
        return {
            "has_plugin": local is not None,
            "plugin_name": local.name if local else None,
            "plugin_status": local.status.value if local else None,
            "last_error": local.last_error if local else None,
            "loaded_at": local.loaded_at.isoformat() if local else None,
            "federal_loaded": federal is not None and federal.is_active,
            "federal_name": federal.name if federal else None,
            "federal_status": federal.status.value if federal else None,
        }

    @asynccontextmanager
    async def pinned(self) -> AsyncIterator[List[RegisteredPlugin]]:
        """Hold the registry steady while reconciling.

        Yields the active plugins (federal first). register() and
        unregister() wait until the block exits. Do not mutate the registry
        from inside the block; the lock is not reentrant.
        """
        async with self._lock:
            yield self.get_all()
