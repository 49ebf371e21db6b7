"""Item placement on the status boards.

This module provides the ItemPlacementManager class which handles:
- Creating applications and study problems at the top of their scope
- Moving items between status columns (and day buckets)
- Validated drag-and-drop reordering inside one scope
- Deleting items and closing the gap they leave
- Per-column counts

An item's scope is ``(owner_id, status_id, bucket)``; ``bucket`` is the
day of week for study problems and None for applications. Within a scope
``order_index`` runs 0..k-1 with the newest item at 0.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence
from typing import Any

from src.board.errors import InvalidOperationError, NotFoundError
from src.board.history import HistoryRecorder
from src.board.locks import OwnerLocks
from src.store.models import (
    ITEM_TYPES,
    ColumnKind,
    OrderedItem,
    StatusColumn,
    new_id,
    utcnow,
)
from src.store.repository import BoardRepository
from src.utils.logging import get_logger

logger = get_logger("board.placement")

# Fields owned by the placement rules; callers never set them directly
PLACEMENT_FIELDS = frozenset(
    {
        "id",
        "owner_id",
        "status_id",
        "order_index",
        "day_of_week",
        "created_at",
        "updated_at",
    }
)

ENTITY_NAMES = {
    ColumnKind.APPLICATION: "Application",
    ColumnKind.STUDY: "Problem",
}


class ItemPlacementManager:
    """Places applications and study problems in their status columns."""

    def __init__(
        self,
        repository: BoardRepository,
        locks: OwnerLocks | None = None,
        history: HistoryRecorder | None = None,
    ):
        """Initialize the manager.

        Args:
            repository: Store the items live in.
            locks: Lock registry shared with the column managers.
            history: Recorder for application status changes.
        """
        self.repository = repository
        self.locks = locks if locks is not None else OwnerLocks()
        self.history = history if history is not None else HistoryRecorder(repository)

    async def create_application(
        self,
        owner_id: str,
        status_id: str,
        *,
        company_name: str,
        position: str,
        date_applied: str,
        **fields: Any,
    ) -> str:
        """Create an application at the top of its status column."""
        return await self.create_item(
            ColumnKind.APPLICATION,
            owner_id,
            status_id,
            None,
            {
                "company_name": company_name,
                "position": position,
                "date_applied": date_applied,
                **fields,
            },
        )

    async def create_study_problem(
        self,
        owner_id: str,
        status_id: str,
        day_of_week: int,
        *,
        title: str,
        score: int,
        **fields: Any,
    ) -> str:
        """Create a study problem at the top of its (status, day) bucket."""
        return await self.create_item(
            ColumnKind.STUDY,
            owner_id,
            status_id,
            day_of_week,
            {"title": title, "score": score, **fields},
        )

    async def create_item(
        self,
        kind: ColumnKind,
        owner_id: str,
        status_id: str,
        bucket: int | None,
        fields: dict[str, Any],
    ) -> str:
        """Insert a new item at ``order_index`` 0 of its scope.

        Every item already in the scope moves down by one first.

        Raises:
            NotFoundError: If the status column is missing, belongs to
                another owner, or is of another board kind.
            InvalidOperationError: If ``fields`` sets placement fields or
                the bucket is invalid for this kind.
        """
        kind = ColumnKind(kind)
        self._check_fields(fields)
        self._check_bucket(kind, bucket)

        item_type = ITEM_TYPES[kind]
        now = utcnow()
        placement: dict[str, Any] = {
            "id": new_id(),
            "owner_id": owner_id,
            "status_id": status_id,
            "order_index": 0,
            "created_at": now,
            "updated_at": now,
        }
        if item_type.BUCKET_FIELD is not None:
            placement[item_type.BUCKET_FIELD] = bucket
        try:
            item = item_type(**fields, **placement)
        except (TypeError, ValueError) as e:
            raise InvalidOperationError(str(e)) from e

        async with self.locks.hold((kind, owner_id)):
            # Checked under the lock; delete_column cascades under the same key
            status = await self._require_column(kind, owner_id, status_id)
            for sibling in await self.repository.list_scope(kind, owner_id, status_id, bucket):
                await self.repository.patch_item(
                    kind, sibling.id, order_index=sibling.order_index + 1
                )
            await self.repository.insert_item(item)

        if kind == ColumnKind.APPLICATION:
            await self.history.record_transition(item.id, owner_id, status, created_at=now)

        logger.debug("Created %s %s in column %s", kind.value, item.id, status_id)
        return item.id

    async def get_item(self, kind: ColumnKind, item_id: str) -> OrderedItem | None:
        return await self.repository.get_item(ColumnKind(kind), item_id)

    async def update_item(self, kind: ColumnKind, item_id: str, **fields: Any) -> str:
        """Patch an item's descriptive fields.

        Status, bucket and position change only through ``transfer_item``
        and ``reorder_batch``. The patched record is validated like a new
        one before anything is written.

        Raises:
            NotFoundError: If the item does not exist.
            InvalidOperationError: If a field is unknown, is a placement
                field, or its new value fails validation.
        """
        kind = ColumnKind(kind)
        item_type = ITEM_TYPES[kind]
        self._check_fields(fields)
        unknown = fields.keys() - {f.name for f in dataclasses.fields(item_type)}
        if unknown:
            raise InvalidOperationError(f"Unknown fields: {', '.join(sorted(unknown))}")

        item = await self._require_item(kind, item_id)
        if not fields:
            return item_id
        try:
            item_type(**{**dataclasses.asdict(item), **fields})
        except (TypeError, ValueError) as e:
            raise InvalidOperationError(str(e)) from e

        await self.repository.patch_item(kind, item_id, **fields)
        return item_id

    async def transfer_item(
        self,
        kind: ColumnKind,
        item_id: str,
        new_status_id: str,
        new_bucket: int | None = None,
    ) -> str:
        """Move an item to another status column (and day bucket).

        The item leaves its old scope, whose later items move up by one,
        and lands at the top of the new scope. For study problems a
        ``new_bucket`` of None keeps the current day.

        Raises:
            NotFoundError: If the item or the destination column is missing.
        """
        kind = ColumnKind(kind)
        item = await self._require_item(kind, item_id)
        if kind == ColumnKind.STUDY and new_bucket is None:
            new_bucket = item.bucket
        self._check_bucket(kind, new_bucket)

        async with self.locks.hold((kind, item.owner_id)):
            item = await self._require_item(kind, item_id)
            status = await self._require_column(kind, item.owner_id, new_status_id)
            old_status_id, old_bucket = item.status_id, item.bucket
            if (old_status_id, old_bucket) == (new_status_id, new_bucket):
                return item_id

            for sibling in await self.repository.list_scope(
                kind, item.owner_id, old_status_id, old_bucket
            ):
                if sibling.id != item_id and sibling.order_index > item.order_index:
                    await self.repository.patch_item(
                        kind, sibling.id, order_index=sibling.order_index - 1
                    )
            for sibling in await self.repository.list_scope(
                kind, item.owner_id, new_status_id, new_bucket
            ):
                await self.repository.patch_item(
                    kind, sibling.id, order_index=sibling.order_index + 1
                )

            changes: dict[str, Any] = {"status_id": new_status_id, "order_index": 0}
            if item.BUCKET_FIELD is not None:
                changes[item.BUCKET_FIELD] = new_bucket
            await self.repository.patch_item(kind, item_id, **changes)

        if kind == ColumnKind.APPLICATION and old_status_id != new_status_id:
            await self.history.record_transition(item_id, item.owner_id, status)

        logger.debug(
            "Moved %s %s from %s/%s to %s/%s",
            kind.value,
            item_id,
            old_status_id,
            old_bucket,
            new_status_id,
            new_bucket,
        )
        return item_id

    async def reorder_batch(
        self,
        kind: ColumnKind,
        ids: Sequence[str],
        order_indices: Sequence[int],
    ) -> list[str]:
        """Assign ``order_indices[i]`` to ``ids[i]`` for one whole scope.

        The batch must name every item of a single scope exactly once and
        ``order_indices`` must be a permutation of ``0..k-1``, so the scope
        is still dense afterwards.

        Raises:
            InvalidOperationError: On length mismatch, repeated ids, mixed
                scopes, a partial scope, or indices that are not 0..k-1.
            NotFoundError: If an id does not exist.
        """
        kind = ColumnKind(kind)
        if len(ids) != len(order_indices):
            raise InvalidOperationError(
                "Item IDs and order indices must have the same length"
            )
        if not ids:
            return []
        if len(set(ids)) != len(ids):
            raise InvalidOperationError("Item IDs must be unique")
        if sorted(order_indices) != list(range(len(ids))):
            raise InvalidOperationError(
                f"Order indices must be a permutation of 0..{len(ids) - 1}"
            )

        first = await self._require_item(kind, ids[0])
        async with self.locks.hold((kind, first.owner_id)):
            items = [await self._require_item(kind, item_id) for item_id in ids]
            scopes = {item.scope for item in items}
            if len(scopes) != 1:
                raise InvalidOperationError("All items must share one status column")

            owner_id, status_id, bucket = scopes.pop()
            members = await self.repository.list_scope(kind, owner_id, status_id, bucket)
            if {member.id for member in members} != set(ids):
                raise InvalidOperationError("Batch must include every item in the column")

            for item, order_index in zip(items, order_indices, strict=True):
                if item.order_index != order_index:
                    await self.repository.patch_item(kind, item.id, order_index=order_index)

        return list(ids)

    async def delete_item(self, kind: ColumnKind, item_id: str) -> str:
        """Delete an item and close the gap in its scope."""
        kind = ColumnKind(kind)
        item = await self._require_item(kind, item_id)

        async with self.locks.hold((kind, item.owner_id)):
            item = await self._require_item(kind, item_id)
            await self.repository.delete_item(kind, item_id)
            for sibling in await self.repository.list_scope(
                kind, item.owner_id, item.status_id, item.bucket
            ):
                if sibling.order_index > item.order_index:
                    await self.repository.patch_item(
                        kind, sibling.id, order_index=sibling.order_index - 1
                    )
        return item_id

    async def list_items(self, kind: ColumnKind, owner_id: str) -> list[OrderedItem]:
        """Return the owner's items by position, newest first on ties."""
        items = await self.repository.list_items(ColumnKind(kind), owner_id=owner_id)
        items.sort(key=lambda item: item.created_at, reverse=True)
        items.sort(key=lambda item: item.order_index)
        return items

    async def count_by_status(self, kind: ColumnKind, owner_id: str) -> dict[str, int]:
        """Count the owner's items per status column in a single scan."""
        counts: dict[str, int] = {}
        for item in await self.repository.list_items(ColumnKind(kind), owner_id=owner_id):
            counts[item.status_id] = counts.get(item.status_id, 0) + 1
        return counts

    def _check_fields(self, fields: dict[str, Any]) -> None:
        protected = PLACEMENT_FIELDS & fields.keys()
        if protected:
            raise InvalidOperationError(
                f"Placement fields cannot be set directly: {', '.join(sorted(protected))}"
            )

    def _check_bucket(self, kind: ColumnKind, bucket: int | None) -> None:
        if ITEM_TYPES[kind].BUCKET_FIELD is None:
            if bucket is not None:
                raise InvalidOperationError(f"{kind.value} items have no day bucket")
        elif bucket is None or not 0 <= bucket <= 6:
            raise InvalidOperationError("day_of_week must be between 0 and 6")

    async def _require_item(self, kind: ColumnKind, item_id: str) -> Any:
        item = await self.repository.get_item(kind, item_id)
        if item is None:
            raise NotFoundError(ENTITY_NAMES[kind], item_id)
        return item

    async def _require_column(
        self, kind: ColumnKind, owner_id: str, status_id: str
    ) -> StatusColumn:
        column = await self.repository.get_column(status_id)
        if column is None or column.kind != kind or column.owner_id != owner_id:
            raise NotFoundError("Status", status_id)
        return column
