"""Tests for per-owner locking."""

import asyncio

import pytest

from src.board.locks import OwnerLocks
from src.store.models import ColumnKind


class TestOwnerLocks:
    """Test the lock registry."""

    @pytest.mark.asyncio
    async def test_hold_serializes_same_key(self):
        """Two holders of one key never overlap."""
        locks = OwnerLocks()
        events: list[str] = []

        async def worker(name: str) -> None:
            async with locks.hold("owner"):
                events.append(f"{name}-start")
                await asyncio.sleep(0.01)
                events.append(f"{name}-end")

        await asyncio.gather(worker("a"), worker("b"))

        assert events in (
            ["a-start", "a-end", "b-start", "b-end"],
            ["b-start", "b-end", "a-start", "a-end"],
        )

    @pytest.mark.asyncio
    async def test_different_keys_do_not_contend(self):
        """Holding one owner's lock never blocks another owner."""
        locks = OwnerLocks()

        async with locks.hold(("application", "u1")):
            await asyncio.wait_for(self._enter(locks, ("application", "u2")), timeout=1)

    @pytest.mark.asyncio
    async def test_released_locks_are_dropped(self):
        """The registry only keeps keys that are held or awaited."""
        locks = OwnerLocks()
        seen: list[list] = []

        async def worker() -> None:
            async with locks.hold(("study", "u1")):
                seen.append(locks.active_keys())
                await asyncio.sleep(0.01)

        await asyncio.gather(worker(), worker())

        assert seen == [[("study", "u1")], [("study", "u1")]]
        assert locks.active_keys() == []

    @pytest.mark.asyncio
    async def test_lock_dropped_after_error(self):
        """An exception inside hold still releases and drops the key."""
        locks = OwnerLocks()

        with pytest.raises(RuntimeError):
            async with locks.hold("owner"):
                raise RuntimeError("boom")

        assert locks.active_keys() == []
        await asyncio.wait_for(self._enter(locks, "owner"), timeout=1)

    @pytest.mark.asyncio
    async def test_empty_registry_is_passed_through(self, repo):
        """Managers keep the registry they are given, even before first use."""
        from src.board.columns import StatusColumnManager
        from src.board.placement import ItemPlacementManager

        locks = OwnerLocks()

        assert StatusColumnManager(repo, ColumnKind.STUDY, locks=locks).locks is locks
        assert ItemPlacementManager(repo, locks=locks).locks is locks

    @staticmethod
    async def _enter(locks: OwnerLocks, key) -> None:
        async with locks.hold(key):
            pass


class TestConcurrentMutations:
    """Concurrent board mutations keep the ordering dense."""

    @pytest.mark.asyncio
    async def test_concurrent_creates_stay_dense(self, board, owner_id):
        """Parallel creates in one column produce 0..n-1."""
        manager = board.column_manager(ColumnKind.APPLICATION)
        [applied, *_] = await manager.seed_defaults(owner_id)

        await asyncio.gather(
            *(
                board.items.create_application(
                    owner_id,
                    applied,
                    company_name=f"Company {i}",
                    position="SWE",
                    date_applied="2024-01-01",
                )
                for i in range(8)
            )
        )

        items = await board.repository.list_scope(
            ColumnKind.APPLICATION, owner_id, applied, None
        )
        assert sorted(item.order_index for item in items) == list(range(8))

    @pytest.mark.asyncio
    async def test_concurrent_column_creates_stay_dense(self, board, owner_id):
        """Parallel column creates never reuse a position."""
        manager = board.column_manager(ColumnKind.STUDY)

        await asyncio.gather(
            *(manager.create_column(owner_id, f"Col {i}", "x") for i in range(6))
        )

        columns = await manager.list_columns(owner_id)
        assert [c.order for c in columns] == list(range(6))

    @pytest.mark.asyncio
    async def test_delete_column_racing_creates_leaves_no_orphans(self, board, owner_id):
        """Creates racing a column delete either land before it or fail."""
        from src.board.errors import NotFoundError

        manager = board.column_manager(ColumnKind.APPLICATION)
        await manager.seed_defaults(owner_id)

        for _ in range(5):
            doomed = await manager.create_column(owner_id, "Waitlist", "bg-gray-500")

            def create():
                return board.items.create_application(
                    owner_id,
                    doomed,
                    company_name="Initech",
                    position="SWE",
                    date_applied="2024-01-01",
                )

            results = await asyncio.gather(
                create(),
                create(),
                manager.delete_column(doomed),
                create(),
                create(),
                return_exceptions=True,
            )

            assert results[2] == doomed
            for result in results[:2] + results[3:]:
                assert isinstance(result, (str, NotFoundError))

        column_ids = {c.id for c in await manager.list_columns(owner_id)}
        items = await board.items.list_items(ColumnKind.APPLICATION, owner_id)
        assert all(item.status_id in column_ids for item in items)

    @pytest.mark.asyncio
    async def test_delete_column_racing_transfer_leaves_no_orphans(self, board, owner_id):
        """A transfer into a column being deleted never strands the item."""
        manager = board.column_manager(ColumnKind.APPLICATION)
        [applied, *_] = await manager.seed_defaults(owner_id)
        doomed = await manager.create_column(owner_id, "Waitlist", "bg-gray-500")
        item_id = await board.items.create_application(
            owner_id, applied, company_name="Initech", position="SWE", date_applied="2024-01-01"
        )

        await asyncio.gather(
            manager.delete_column(doomed),
            board.items.transfer_item(ColumnKind.APPLICATION, item_id, doomed),
            return_exceptions=True,
        )

        item = await board.items.get_item(ColumnKind.APPLICATION, item_id)
        assert item is None or item.status_id == applied
