"""
Tests for the two-slot plugin registry

Run with: pytest tests/test_registry.py -v
"""

import asyncio

import pytest

from regions.registry import PluginRegistry, PluginStatus, Slot
from tests.conftest import StubPlugin


class TestRegister:
    async def test_register_local(self, registry):
        plugin = StubPlugin("california")
        await registry.register("california", plugin, {"regionId": "california"})

        assert registry.get_local() is plugin
        assert registry.get_active() is plugin
        assert registry.get_active_name() == "california"
        assert registry.has_active()
        assert plugin.initialize_calls == 1
        assert plugin.config == {"regionId": "california"}

    async def test_replacing_slot_destroys_old_plugin_once(self, registry):
        old = StubPlugin("old")
        new = StubPlugin("new")

        await registry.register_local("old", old)
        await registry.register_local("new", new)

        assert old.destroy_calls == 1
        assert new.destroy_calls == 0
        assert registry.get_local() is new

    async def test_slots_independent(self, registry):
        federal = StubPlugin("federal")
        local = StubPlugin("california")

        await registry.register_federal("federal", federal)
        await registry.register_local("california", local)
        await registry.register_local("texas", StubPlugin("texas"))

        assert federal.destroy_calls == 0
        assert registry.get_federal() is federal

    async def test_failed_initialize_records_error(self, registry):
        plugin = StubPlugin("broken", init_error=RuntimeError("bad config"))

        with pytest.raises(RuntimeError, match="bad config"):
            await registry.register_local("broken", plugin)

        assert registry.local.status == PluginStatus.ERROR
        assert registry.local.last_error == "bad config"
        assert registry.get_local() is None
        assert not registry.has_active()
        assert registry.get_all() == []
        # Name still reports the occupant of the failed slot
        assert registry.get_active_name() == "broken"

    async def test_failed_replacement_still_destroys_previous(self, registry):
        old = StubPlugin("old")
        await registry.register_local("old", old)

        with pytest.raises(RuntimeError):
            await registry.register_local("broken", StubPlugin("broken", init_error=RuntimeError("x")))

        assert old.destroy_calls == 1
        assert registry.get_local() is None


class TestUnregister:
    async def test_unregister_empty_slot_is_noop(self, registry):
        await registry.unregister(Slot.LOCAL)
        assert registry.local is None

    async def test_destroy_error_swallowed(self, registry):
        plugin = StubPlugin("flaky", destroy_error=RuntimeError("socket closed"))
        await registry.register_local("flaky", plugin)

        await registry.unregister(Slot.LOCAL)

        assert plugin.destroy_calls == 1
        assert registry.local is None

    async def test_teardown_destroys_both(self, registry):
        federal = StubPlugin("federal")
        local = StubPlugin("california")
        await registry.register_federal("federal", federal)
        await registry.register_local("california", local)

        await registry.teardown()

        assert federal.destroy_calls == 1
        assert local.destroy_calls == 1
        assert registry.get_all() == []


class TestLookup:
    async def test_get_all_federal_first(self, registry):
        await registry.register_local("california", StubPlugin("california"))
        await registry.register_federal("federal", StubPlugin("federal"))

        assert [p.name for p in registry.get_all()] == ["federal", "california"]

    async def test_get_all_excludes_error_slot(self, registry):
        await registry.register_local("california", StubPlugin("california"))
        with pytest.raises(RuntimeError):
            await registry.register_federal("federal", StubPlugin("federal", init_error=RuntimeError("x")))

        assert [p.name for p in registry.get_all()] == ["california"]
        assert registry.get_federal() is None

    async def test_status(self, registry):
        await registry.register_local("california", StubPlugin("california"))

        status = registry.get_status()

        assert status["has_plugin"] is True
        assert status["plugin_name"] == "california"
        assert status["plugin_status"] == "active"
        assert status["federal_loaded"] is False


class TestHealth:
    async def test_inactive_slot_has_no_health(self, registry):
        assert await registry.get_health(Slot.LOCAL) is None

    async def test_healthy_plugin(self, registry):
        await registry.register_local("california", StubPlugin("california"))

        health = await registry.get_health(Slot.LOCAL)

        assert health.healthy
        assert health.message == "Plugin operational"

    async def test_health_check_exception_reported_unhealthy(self, registry):
        plugin = StubPlugin("california")

        async def explode():
            raise RuntimeError("upstream down")

        plugin.health_check = explode
        await registry.register_local("california", plugin)

        health = await registry.get_health(Slot.LOCAL)

        assert health.healthy is False
        assert health.message == "upstream down"


class TestPinned:
    async def test_register_waits_for_pinned_block(self):
        registry = PluginRegistry()
        old = StubPlugin("old")
        await registry.register_local("old", old)

        async with registry.pinned() as plugins:
            assert [p.instance for p in plugins] == [old]
            task = asyncio.create_task(registry.register_local("new", StubPlugin("new")))
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            # Replacement is blocked while pinned
            assert old.destroy_calls == 0
            assert registry.get_local() is old

        await task
        assert old.destroy_calls == 1
        assert registry.get_active_name() == "new"
