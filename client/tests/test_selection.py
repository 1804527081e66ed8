"""Tests for SelectionManager and best-effort bulk delete."""

import asyncio

from mediatheque_client.file_registry import FileRegistry
from mediatheque_client.selection import SelectionManager

from fakes import FakeGateway


def _manager(api: FakeGateway) -> SelectionManager:
    registry = FileRegistry(api)
    asyncio.run(registry.load(None))
    return SelectionManager(registry)


class TestSelection:

    def test_toggle(self):
        manager = _manager(FakeGateway())
        assert manager.toggle("med-1") is True
        assert manager.is_selected("med-1")
        assert manager.toggle("med-1") is False
        assert manager.selected == []

    def test_select_all_replaces_selection(self):
        manager = _manager(FakeGateway())
        manager.toggle("med-9")
        manager.select_all(["med-1", "med-2"])
        assert manager.selected == ["med-1", "med-2"]

    def test_clear(self):
        manager = _manager(FakeGateway())
        manager.select_all(["med-1", "med-2"])
        manager.clear()
        assert len(manager) == 0


class TestDeleteSelected:

    def test_one_missing_file_does_not_stop_the_others(self):
        api = FakeGateway()
        a = api.add_file("a.png")
        b = api.add_file("b.png")
        c = api.add_file("c.png")
        manager = _manager(api)
        api.missing_on_delete.add(b.id)

        manager.select_all([a.id, b.id, c.id])
        result = asyncio.run(manager.delete_selected())

        assert result.succeeded == [a.id, c.id]
        assert result.failed == [b.id]
        assert "not found" in result.errors[b.id]
        assert not result.ok
        assert manager.selected == []
        assert api.count("delete_file") == 3

    def test_all_succeed(self):
        api = FakeGateway()
        a = api.add_file("a.png")
        manager = _manager(api)
        manager.toggle(a.id)

        result = asyncio.run(manager.delete_selected())
        assert result.ok
        assert result.succeeded == [a.id]
        assert len(manager.registry) == 0
