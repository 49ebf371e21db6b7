"""Status column management.

This module provides the StatusColumnManager class which keeps each
owner's columns of one board kind as a dense, zero-based sequence:
- Create (append at the end)
- Rename / recolor, with default-column protection
- Delete with cascade to the column's items, then re-densify
- Reposition by shifting only the rows between old and new position
- Idempotent seeding and migration of default columns
"""

from __future__ import annotations

from collections.abc import Iterable

from src.board.errors import InvalidOperationError, NotFoundError
from src.board.locks import OwnerLocks
from src.board.templates import DEFAULT_COLUMNS, FALLBACK_COLOR, ColumnTemplate
from src.store.models import ColumnKind, StatusColumn, new_id, utcnow
from src.store.repository import BoardRepository
from src.utils.logging import get_logger

logger = get_logger("board.columns")


def sort_by_order(columns: Iterable[StatusColumn]) -> list[StatusColumn]:
    return sorted(columns, key=lambda column: column.order)


class StatusColumnManager:
    """Owns the ordered status columns of one board kind.

    Every structural mutation for an owner runs under that owner's lock,
    so the ``order`` values of the owner's columns stay exactly
    ``0..n-1`` before and after each call.
    """

    def __init__(
        self,
        repository: BoardRepository,
        kind: ColumnKind,
        locks: OwnerLocks | None = None,
        defaults: Iterable[ColumnTemplate] | None = None,
    ):
        """Initialize the manager.

        Args:
            repository: Store the columns live in.
            kind: Board kind this manager is responsible for.
            locks: Lock registry shared with the item manager of this board.
            defaults: Columns created by ``seed_defaults``; built-ins if omitted.
        """
        self.repository = repository
        self.kind = ColumnKind(kind)
        self.locks = locks if locks is not None else OwnerLocks()
        self.defaults = tuple(defaults) if defaults is not None else DEFAULT_COLUMNS[self.kind]

    async def list_columns(self, owner_id: str) -> list[StatusColumn]:
        """Return the owner's columns sorted ascending by ``order``."""
        return sort_by_order(await self.repository.list_columns(self.kind, owner_id))

    async def get_column(self, column_id: str) -> StatusColumn | None:
        """Return a column of this board kind, or None."""
        column = await self.repository.get_column(column_id)
        if column is None or column.kind != self.kind:
            return None
        return column

    async def create_column(
        self,
        owner_id: str,
        name: str,
        color: str,
        is_default: bool = False,
    ) -> str:
        """Append a new column after the owner's last one.

        Returns:
            The id of the new column.
        """
        async with self.locks.hold((self.kind, owner_id)):
            return await self._append(owner_id, name, color, is_default)

    async def rename_or_recolor(
        self,
        column_id: str,
        name: str | None = None,
        color: str | None = None,
    ) -> str:
        """Update a column's name and/or color.

        Raises:
            NotFoundError: If the column does not exist.
            InvalidOperationError: If a default column would be renamed.
        """
        owner_id = (await self._require(column_id)).owner_id

        async with self.locks.hold((self.kind, owner_id)):
            column = await self._require(column_id)
            if column.is_default and name and name != column.name:
                logger.warning("Refused rename of default column %s", column_id)
                raise InvalidOperationError("Cannot rename default status")

            changes: dict[str, str] = {}
            if name:
                changes["name"] = name
            if color:
                changes["color"] = color
            await self.repository.patch_column(column_id, **changes)
        return column_id

    async def delete_column(self, column_id: str) -> str:
        """Delete a column and every item in it, then re-densify the rest.

        Items are removed, not reassigned. Items in the surviving columns
        keep their ``order_index``.

        Raises:
            NotFoundError: If the column does not exist.
            InvalidOperationError: If the column is a default column.
        """
        owner_id = (await self._require(column_id)).owner_id

        async with self.locks.hold((self.kind, owner_id)):
            column = await self._require(column_id)
            if column.is_default:
                logger.warning("Refused delete of default column %s", column_id)
                raise InvalidOperationError("Cannot delete default status")

            items = await self.repository.list_items(
                self.kind, owner_id=column.owner_id, status_id=column_id
            )
            for item in items:
                await self.repository.delete_item(self.kind, item.id)

            await self.repository.delete_column(column_id)
            await self._densify(await self.list_columns(column.owner_id))

        logger.info(
            "Deleted %s column %s (%d items removed)",
            self.kind.value,
            column_id,
            len(items),
        )
        return column_id

    async def reposition_column(self, owner_id: str, column_id: str, new_order: int) -> str:
        """Move a column to ``new_order``, shifting the columns in between.

        ``new_order`` is clamped into ``[0, n-1]``. Moving to the current
        position writes nothing.

        Raises:
            NotFoundError: If the column does not exist for this owner.
        """
        async with self.locks.hold((self.kind, owner_id)):
            column = await self._require(column_id)
            if column.owner_id != owner_id:
                raise NotFoundError("Status", column_id)

            columns = await self.list_columns(owner_id)
            old_order = column.order
            target = max(0, min(new_order, len(columns) - 1))

            if old_order == target:
                return column_id

            if old_order < target:
                # Moving right: the columns it passes slide left
                for other in columns:
                    if old_order < other.order <= target:
                        await self.repository.patch_column(other.id, order=other.order - 1)
            else:
                for other in columns:
                    if target <= other.order < old_order:
                        await self.repository.patch_column(other.id, order=other.order + 1)

            await self.repository.patch_column(column_id, order=target)

        logger.debug("Moved column %s from %d to %d", column_id, old_order, target)
        return column_id

    async def seed_defaults(self, owner_id: str) -> list[str]:
        """Create the default columns for an owner who has none.

        Returns:
            Ids of the created columns; empty if the owner already had columns.
        """
        async with self.locks.hold((self.kind, owner_id)):
            if await self.repository.list_columns(self.kind, owner_id):
                return []

            created = [
                await self._append(owner_id, template.name, template.color, True)
                for template in self.defaults
            ]

        logger.info("Seeded %d %s columns for %s", len(created), self.kind.value, owner_id)
        return created

    async def migrate_defaults(self) -> dict[str, int]:
        """Bring every existing owner onto the standard default columns.

        For each owner with columns, a column whose name matches a default
        (case-insensitive) is marked default; missing defaults are created.
        Defaults then take the first positions in template order, followed
        by the owner's custom columns in their previous order.

        Returns:
            Counts of owners processed and columns updated / created.
        """
        results = {"processed": 0, "updated": 0, "created": 0}

        owners: dict[str, None] = {}
        for column in await self.repository.list_columns(self.kind):
            owners.setdefault(column.owner_id, None)

        for owner_id in owners:
            results["processed"] += 1
            async with self.locks.hold((self.kind, owner_id)):
                columns = await self.list_columns(owner_id)
                by_name = {column.name.lower(): column for column in reversed(columns)}
                default_ids: list[str] = []

                for index, template in enumerate(self.defaults):
                    existing = by_name.get(template.name.lower())
                    if existing is not None:
                        if not existing.is_default:
                            await self.repository.patch_column(existing.id, is_default=True)
                            results["updated"] += 1
                        default_ids.append(existing.id)
                    else:
                        column = StatusColumn(
                            id=new_id(),
                            owner_id=owner_id,
                            kind=self.kind,
                            name=template.name,
                            color=template.color or FALLBACK_COLOR,
                            order=index,
                            is_default=True,
                        )
                        await self.repository.insert_column(column)
                        default_ids.append(column.id)
                        results["created"] += 1

                ranked = {column_id: rank for rank, column_id in enumerate(default_ids)}
                columns = await self.repository.list_columns(self.kind, owner_id)
                columns.sort(
                    key=lambda c: (0, ranked[c.id]) if c.id in ranked else (1, c.order)
                )
                await self._densify(columns)

        logger.info("Default column migration finished: %s", results)
        return results

    async def _append(self, owner_id: str, name: str, color: str, is_default: bool) -> str:
        columns = await self.repository.list_columns(self.kind, owner_id)
        max_order = max((column.order for column in columns), default=-1)

        now = utcnow()
        column = StatusColumn(
            id=new_id(),
            owner_id=owner_id,
            kind=self.kind,
            name=name,
            color=color,
            order=max_order + 1,
            is_default=is_default,
            created_at=now,
            updated_at=now,
        )
        await self.repository.insert_column(column)
        logger.debug("Created %s column %s at %d", self.kind.value, column.id, column.order)
        return column.id

    async def _require(self, column_id: str) -> StatusColumn:
        column = await self.get_column(column_id)
        if column is None:
            raise NotFoundError("Status", column_id)
        return column

    async def _densify(self, columns: list[StatusColumn]) -> None:
        """Rewrite ``order`` to 0..n-1 following the given sequence."""
        for index, column in enumerate(columns):
            if column.order != index:
                await self.repository.patch_column(column.id, order=index)

