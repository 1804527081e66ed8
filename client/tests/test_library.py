"""Tests for MediaLibrary: navigation, notifications, confirmation, stale responses."""

import asyncio

from mediatheque_client.errors import NetworkError
from mediatheque_client.library import MediaLibrary
from mediatheque_client.models import FileType
from mediatheque_client.notifications import Level, NotificationCenter

from fakes import FakeGateway, blob


def _library(api: FakeGateway) -> tuple[MediaLibrary, NotificationCenter]:
    center = NotificationCenter()
    library = MediaLibrary(api, center)
    asyncio.run(library.refresh())
    return library, center


def _yes(message: str) -> bool:
    return True


def _no(message: str) -> bool:
    return False


class TestNavigation:

    def test_navigation_clears_selection(self):
        api = FakeGateway()
        folder = api.add_folder("Logos")
        a = api.add_file("a.png")
        library, _ = _library(api)

        library.selection.toggle(a.id)
        asyncio.run(library.navigate(folder.id))

        assert library.selection.selected == []
        assert library.current_folder.name == "Logos"

    def test_views_follow_current_folder(self):
        api = FakeGateway()
        p = api.add_folder("Chantiers")
        child = api.add_folder("Lyon", parent_id=p.id)
        api.add_file("plan.pdf", FileType.DOCUMENT, folder_id=p.id)
        api.add_file("photo.png", folder_id=p.id)
        library, _ = _library(api)

        asyncio.run(library.navigate(p.id))
        library.set_filters(type=FileType.DOCUMENT)

        assert [f.name for f in library.subfolders()] == [child.name]
        assert [f.name for f in library.visible_files()] == ["plan.pdf"]
        assert [c.name for c in library.breadcrumbs()] == ["Root", "Chantiers"]

    def test_missing_folder_falls_back_to_root(self):
        api = FakeGateway()
        library, center = _library(api)

        ok = asyncio.run(library.navigate("fld-gone"))

        assert ok is True
        assert library.current_folder_id is None
        assert center.history[-1].level == Level.WARNING

    def test_stale_listing_is_discarded(self):
        api = FakeGateway()
        slow = api.add_folder("Slow")
        fast = api.add_folder("Fast")
        api.add_file("slow.png", folder_id=slow.id)
        api.add_file("fast.png", folder_id=fast.id)
        api.list_delays[slow.id] = 0.05
        library, _ = _library(api)

        async def scenario():
            first = asyncio.create_task(library.navigate(slow.id))
            await asyncio.sleep(0)
            second = await library.navigate(fast.id)
            return await first, second

        first_ok, second_ok = asyncio.run(scenario())

        assert first_ok is False
        assert second_ok is True
        assert library.current_folder_id == fast.id
        assert [f.name for f in library.visible_files()] == ["fast.png"]

    def test_stale_failure_is_not_notified(self):
        api = FakeGateway()
        broken = api.add_folder("Broken")
        fast = api.add_folder("Fast")
        api.list_delays[broken.id] = 0.05
        api.list_errors[broken.id] = NetworkError("Server unreachable")
        library, center = _library(api)

        async def scenario():
            first = asyncio.create_task(library.navigate(broken.id))
            await asyncio.sleep(0)
            second = await library.navigate(fast.id)
            return await first, second

        first_ok, second_ok = asyncio.run(scenario())

        assert first_ok is False
        assert second_ok is True
        assert library.current_folder_id == fast.id
        assert center.history == []


class TestFolderOperations:

    def test_create_folder_notifies_success(self):
        api = FakeGateway()
        library, center = _library(api)

        folder = asyncio.run(library.create_folder("Logos"))

        assert folder is not None
        assert center.last.level == Level.SUCCESS
        assert "Logos" in center.last.message

    def test_blank_name_becomes_error_notification(self):
        api = FakeGateway()
        library, center = _library(api)

        assert asyncio.run(library.create_folder("  ")) is None
        assert center.last.level == Level.ERROR
        assert api.count("create_folder") == 0

    def test_declined_confirmation_sends_nothing(self):
        api = FakeGateway()
        folder = api.add_folder("Keep")
        library, _ = _library(api)

        assert asyncio.run(library.delete_folder(folder.id, _no)) is False
        assert api.count("delete_folder") == 0

    def test_async_confirmation_is_awaited(self):
        api = FakeGateway()
        folder = api.add_folder("Old")
        library, _ = _library(api)
        prompts = []

        async def confirm(message: str) -> bool:
            prompts.append(message)
            return True

        assert asyncio.run(library.delete_folder(folder.id, confirm)) is True
        assert "Old" in prompts[0]
        assert folder.id not in api.folders

    def test_deleting_current_folder_returns_to_root(self):
        api = FakeGateway()
        parent = api.add_folder("Parent")
        child = api.add_folder("Child", parent_id=parent.id)
        library, _ = _library(api)
        asyncio.run(library.navigate(child.id))

        asyncio.run(library.delete_folder(parent.id, _yes))

        assert library.current_folder_id is None
        assert library.folders.all() == []

    def test_move_into_descendant_is_reported(self):
        api = FakeGateway()
        a = api.add_folder("A")
        b = api.add_folder("B", parent_id=a.id)
        library, center = _library(api)

        assert asyncio.run(library.move_folder(a.id, b.id)) is None
        assert center.last.level == Level.ERROR
        assert api.count("update_folder") == 0


class TestFileOperations:

    def test_not_found_triggers_refresh(self):
        api = FakeGateway()
        media = api.add_file("a.png")
        library, center = _library(api)
        del api.files[media.id]
        listings_before = api.count("list_files")

        assert asyncio.run(library.update_file(media.id, name="b.png")) is None

        assert center.history[-1].level == Level.ERROR
        assert api.count("list_files") == listings_before + 1
        assert library.visible_files() == []

    def test_upload_into_current_folder(self):
        api = FakeGateway()
        folder = api.add_folder("Docs")
        library, center = _library(api)
        asyncio.run(library.navigate(folder.id))

        files = asyncio.run(library.upload([blob("a.png"), blob("b.png")]))

        assert [f.folder_id for f in files] == [folder.id, folder.id]
        assert len(library.visible_files()) == 2
        assert center.last.message == "2 files uploaded"

    def test_failed_upload_is_notified(self):
        api = FakeGateway()
        library, center = _library(api)

        assert asyncio.run(library.upload([])) is None
        assert center.last.level == Level.ERROR

    def test_delete_file_with_confirmation(self):
        api = FakeGateway()
        media = api.add_file("a.png")
        library, _ = _library(api)
        library.selection.toggle(media.id)

        assert asyncio.run(library.delete_file(media.id, _yes)) is True
        assert library.visible_files() == []
        assert not library.selection.is_selected(media.id)

    def test_bulk_delete_reports_partial_failure(self):
        api = FakeGateway()
        ids = [api.add_file(f"{n}.png").id for n in "abc"]
        library, center = _library(api)
        api.missing_on_delete.add(ids[1])

        library.selection.select_all(ids)
        result = asyncio.run(library.delete_selected(_yes))

        assert len(result.succeeded) == 2
        assert result.failed == [ids[1]]
        assert library.selection.selected == []
        levels = [n.level for n in center.history]
        assert Level.SUCCESS in levels and Level.ERROR in levels

    def test_bulk_delete_with_empty_selection(self):
        api = FakeGateway()
        library, center = _library(api)
        assert asyncio.run(library.delete_selected(_yes)) is None
        assert center.last.level == Level.INFO

    def test_load_stats(self):
        api = FakeGateway()
        api.add_file("a.png", size=100)
        api.add_file("b.png", size=200)
        library, _ = _library(api)

        stats = asyncio.run(library.load_stats())
        assert stats.total_files == 2
        assert stats.total_size == 300
        assert stats.files_by_type.image == 2
        assert library.stats == stats
