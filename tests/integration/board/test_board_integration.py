"""Integration tests for the board, history and activity layers together.

These tests exercise a full user journey against a real SQLite file:
seeding, creating, moving, reordering, deleting columns, and reading
the activity feed and leaderboards afterwards.
"""

import pytest

from src.store.models import ColumnKind


async def assert_dense(board, kind, owner_id):
    """Every column sequence and item scope of the owner is 0..n-1."""
    columns = await board.column_manager(kind).list_columns(owner_id)
    assert [c.order for c in columns] == list(range(len(columns)))

    scopes: dict[tuple, list[int]] = {}
    for item in await board.repository.list_items(kind, owner_id=owner_id):
        scopes.setdefault(item.scope, []).append(item.order_index)
    for indices in scopes.values():
        assert sorted(indices) == list(range(len(indices)))


class TestApplicationJourney:
    """A user tracks applications through the pipeline."""

    @pytest.mark.asyncio
    async def test_full_pipeline(self, board, owner_id):
        """Creates, moves and deletes keep every scope dense."""
        from src.activity.service import ActivityService

        await board.seed_owner(owner_id)
        manager = board.column_manager(ColumnKind.APPLICATION)
        columns = {c.name: c.id for c in await manager.list_columns(owner_id)}

        ids = []
        for company in ("Acme", "Globex", "Initech", "Hooli"):
            ids.append(
                await board.items.create_application(
                    owner_id,
                    columns["Applied"],
                    company_name=company,
                    position="Engineer",
                    date_applied="2024-02-01",
                )
            )
        await assert_dense(board, ColumnKind.APPLICATION, owner_id)

        await board.items.transfer_item(ColumnKind.APPLICATION, ids[1], columns["Interview"])
        await board.items.transfer_item(ColumnKind.APPLICATION, ids[2], columns["Interview"])
        await board.items.transfer_item(ColumnKind.APPLICATION, ids[2], columns["Offer"])
        await assert_dense(board, ColumnKind.APPLICATION, owner_id)

        custom = await manager.create_column(owner_id, "On Hold", "bg-gray-500")
        await board.items.transfer_item(ColumnKind.APPLICATION, ids[0], custom)
        await manager.reposition_column(owner_id, custom, 1)
        await manager.delete_column(custom)
        await assert_dense(board, ColumnKind.APPLICATION, owner_id)

        remaining = await board.items.list_items(ColumnKind.APPLICATION, owner_id)
        assert {item.id for item in remaining} == {ids[1], ids[2], ids[3]}

        counts = await board.history.count_unique_status_entries(owner_id)
        assert counts == {"applied": 4, "interview": 2, "offer": 1, "on hold": 1}

        events = await ActivityService(board.repository).recent_activity(owner_id)
        actions = {e.company: e.action for e in events}
        assert actions == {
            "Globex": "Interview with",
            "Initech": "Received offer from",
            "Hooli": "Applied to",
        }


class TestStudyJourney:
    """A user schedules study problems across the week."""

    @pytest.mark.asyncio
    async def test_weekly_schedule(self, board, owner_id):
        """Day buckets stay independent and dense through moves and reorders."""
        await board.seed_owner(owner_id)
        manager = board.column_manager(ColumnKind.STUDY)
        days = {c.name: c.id for c in await manager.list_columns(owner_id)}

        monday = [
            await board.items.create_study_problem(
                owner_id, days["Monday"], 1, title=f"Problem {i}", score=i + 1
            )
            for i in range(3)
        ]
        friday = await board.items.create_study_problem(
            owner_id, days["Friday"], 5, title="Graphs", score=4
        )

        await board.items.reorder_batch(
            ColumnKind.STUDY, list(reversed(monday)), [2, 1, 0]
        )
        await board.items.transfer_item(ColumnKind.STUDY, monday[1], days["Friday"], 5)
        await board.items.delete_item(ColumnKind.STUDY, friday)
        await assert_dense(board, ColumnKind.STUDY, owner_id)

        counts = await board.items.count_by_status(ColumnKind.STUDY, owner_id)
        assert counts == {days["Monday"]: 2, days["Friday"]: 1}

        # Study problems never touch application history
        assert await board.history.list_history(owner_id) == []


class TestMultipleUsers:
    """Owners never see or disturb each other's boards."""

    @pytest.mark.asyncio
    async def test_owners_are_isolated(self, board):
        """Each owner's ordering is independent."""
        from src.activity.service import ActivityService

        for owner in ("alice", "bob"):
            await board.seed_owner(owner)
            [applied, *_] = [
                c.id
                for c in await board.column_manager(ColumnKind.APPLICATION).list_columns(owner)
            ]
            for _ in range(2 if owner == "alice" else 1):
                await board.items.create_application(
                    owner,
                    applied,
                    company_name="Acme",
                    position="SWE",
                    date_applied="2024-03-01",
                )

        for owner in ("alice", "bob"):
            await assert_dense(board, ColumnKind.APPLICATION, owner)

        entries = await ActivityService(board.repository).applications_leaderboard()
        assert [(e.user_id, e.score) for e in entries] == [("alice", 2), ("bob", 1)]
