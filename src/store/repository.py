"""Database repository for the board store.

This module provides async SQLite operations over the board tables:
point lookups by id, owner/index scans, and single-row insert, patch
and delete. Every write is committed on its own; callers that need a
multi-row change issue a sequence of writes.
"""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import fields
from pathlib import Path
from typing import Any

import aiosqlite

from src.store.models import (
    ITEM_TYPES,
    ColumnKind,
    Company,
    MessageTemplate,
    Referral,
    StatusColumn,
    StatusHistoryEntry,
    UserProfile,
    utcnow,
)

CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS status_columns (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    kind TEXT NOT NULL,
    name TEXT NOT NULL,
    color TEXT NOT NULL,
    "order" INTEGER NOT NULL,
    is_default INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS applications (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    status_id TEXT NOT NULL,
    company_name TEXT NOT NULL,
    position TEXT NOT NULL,
    date_applied TEXT NOT NULL,
    order_index INTEGER NOT NULL DEFAULT 0,
    company_id TEXT,
    notes TEXT,
    salary TEXT,
    location TEXT,
    url TEXT,
    contact_name TEXT,
    contact_email TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS study_problems (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    status_id TEXT NOT NULL,
    title TEXT NOT NULL,
    day_of_week INTEGER NOT NULL,
    score INTEGER NOT NULL,
    order_index INTEGER NOT NULL DEFAULT 0,
    link TEXT,
    difficulty TEXT,
    notes TEXT,
    time_complexity TEXT,
    space_complexity TEXT,
    category TEXT,
    mastered INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS companies (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    name TEXT NOT NULL,
    description TEXT,
    website TEXT,
    logo TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS referrals (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    company_id TEXT NOT NULL,
    name TEXT NOT NULL,
    linkedin_url TEXT,
    email TEXT,
    notes TEXT,
    status TEXT NOT NULL DEFAULT 'pending',
    has_asked_for_final_referral INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS message_templates (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    "order" INTEGER NOT NULL,
    is_default INTEGER NOT NULL DEFAULT 0,
    tags TEXT NOT NULL DEFAULT '[]',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS user_profiles (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL UNIQUE,
    show_applications_in_community INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS status_history (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    item_id TEXT NOT NULL,
    status_id TEXT NOT NULL,
    status_name TEXT NOT NULL,
    created_at TEXT NOT NULL
);
"""

CREATE_INDEX_SQL = """
CREATE INDEX IF NOT EXISTS idx_columns_owner_kind ON status_columns(owner_id, kind, "order");
CREATE INDEX IF NOT EXISTS idx_applications_owner_status ON applications(owner_id, status_id);
CREATE INDEX IF NOT EXISTS idx_applications_status ON applications(status_id);
CREATE INDEX IF NOT EXISTS idx_problems_owner_status ON study_problems(owner_id, status_id, day_of_week);
CREATE INDEX IF NOT EXISTS idx_problems_status ON study_problems(status_id);
CREATE INDEX IF NOT EXISTS idx_companies_owner ON companies(owner_id);
CREATE INDEX IF NOT EXISTS idx_referrals_owner ON referrals(owner_id);
CREATE INDEX IF NOT EXISTS idx_templates_owner ON message_templates(owner_id);
CREATE INDEX IF NOT EXISTS idx_referrals_company ON referrals(company_id, owner_id);
CREATE INDEX IF NOT EXISTS idx_history_owner ON status_history(owner_id);
CREATE UNIQUE INDEX IF NOT EXISTS idx_history_item_status ON status_history(item_id, status_id);
"""

# Columns stored as JSON text
JSON_COLUMNS = {"tags"}


def _quote(name: str) -> str:
    return f'"{name}"'


def _encode(name: str, value: Any) -> Any:
    if name in JSON_COLUMNS:
        return json.dumps(value or [])
    return value


class BoardRepository:
    """Async SQLite repository for board records.

    This class provides the indexed record storage the board managers
    build on, using aiosqlite for async database access.
    """

    def __init__(self, db_path: Path | str):
        """Initialize the repository.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._connection: aiosqlite.Connection | None = None

    @asynccontextmanager
    async def _get_connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Get a database connection.

        Yields:
            An aiosqlite connection.
        """
        if self._connection is None:
            self._connection = await aiosqlite.connect(self.db_path)
            self._connection.row_factory = aiosqlite.Row
        yield self._connection

    async def initialize(self) -> None:
        """Initialize the database, creating tables if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        async with self._get_connection() as conn:
            await conn.executescript(CREATE_TABLES_SQL)
            await conn.executescript(CREATE_INDEX_SQL)
            await conn.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    # -- generic row operations -------------------------------------------

    async def _insert(self, table: str, record: Any) -> None:
        data = record.to_dict()
        names = list(data)
        placeholders = ", ".join("?" for _ in names)
        async with self._get_connection() as conn:
            await conn.execute(
                f"INSERT INTO {table} ({', '.join(_quote(n) for n in names)}) "
                f"VALUES ({placeholders})",
                tuple(_encode(n, data[n]) for n in names),
            )
            await conn.commit()

    async def _fetch_one(self, table: str, record_id: str) -> dict[str, Any] | None:
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT * FROM {table} WHERE id = ?",
                (record_id,),
            )
            row = await cursor.fetchone()

        if row is None:
            return None
        return self._row_to_dict(row)

    async def _fetch_all(
        self, table: str, where: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Scan ``table`` filtered by equality on ``where``, in insertion order.

        A ``None`` value in ``where`` matches SQL NULL.
        """
        clauses: list[str] = []
        params: list[Any] = []
        for name, value in (where or {}).items():
            if value is None:
                clauses.append(f"{_quote(name)} IS NULL")
            else:
                clauses.append(f"{_quote(name)} = ?")
                params.append(value.value if isinstance(value, ColumnKind) else value)

        sql = f"SELECT * FROM {table}"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY rowid"

        async with self._get_connection() as conn:
            cursor = await conn.execute(sql, tuple(params))
            rows = await cursor.fetchall()

        return [self._row_to_dict(row) for row in rows]

    async def _patch(
        self, table: str, record_type: type, record_id: str, changes: dict[str, Any]
    ) -> None:
        """Apply ``changes`` to one row and stamp ``updated_at``.

        Raises:
            ValueError: If a name in ``changes`` is not a field of ``record_type``.
        """
        unknown = changes.keys() - {f.name for f in fields(record_type)}
        if unknown:
            raise ValueError(f"Unknown {table} fields: {', '.join(sorted(unknown))}")
        changes = {**changes, "updated_at": utcnow().isoformat()}
        assignments = ", ".join(f"{_quote(name)} = ?" for name in changes)
        async with self._get_connection() as conn:
            await conn.execute(
                f"UPDATE {table} SET {assignments} WHERE id = ?",
                (*(_encode(n, v) for n, v in changes.items()), record_id),
            )
            await conn.commit()

    async def _delete(self, table: str, record_id: str) -> None:
        async with self._get_connection() as conn:
            await conn.execute(f"DELETE FROM {table} WHERE id = ?", (record_id,))
            await conn.commit()

    def _row_to_dict(self, row: aiosqlite.Row) -> dict[str, Any]:
        data = dict(row)
        for name in JSON_COLUMNS & data.keys():
            data[name] = json.loads(data[name]) if data[name] else []
        return data

    # -- status columns ------------------------------------------------------

    async def insert_column(self, column: StatusColumn) -> None:
        await self._insert("status_columns", column)

    async def get_column(self, column_id: str) -> StatusColumn | None:
        data = await self._fetch_one("status_columns", column_id)
        return StatusColumn.from_dict(data) if data else None

    async def list_columns(
        self, kind: ColumnKind, owner_id: str | None = None
    ) -> list[StatusColumn]:
        """List columns of one kind, for one owner or for everybody.

        Rows come back in insertion order; callers sort by ``order``.
        """
        where: dict[str, Any] = {"kind": kind}
        if owner_id is not None:
            where["owner_id"] = owner_id
        rows = await self._fetch_all("status_columns", where)
        return [StatusColumn.from_dict(row) for row in rows]

    async def patch_column(self, column_id: str, **changes: Any) -> None:
        await self._patch("status_columns", StatusColumn, column_id, changes)

    async def delete_column(self, column_id: str) -> None:
        await self._delete("status_columns", column_id)

    # -- board items -----------------------------------------------------------

    async def insert_item(self, item: Any) -> None:
        await self._insert(item.TABLE, item)

    async def get_item(self, kind: ColumnKind, item_id: str) -> Any | None:
        item_type = ITEM_TYPES[kind]
        data = await self._fetch_one(item_type.TABLE, item_id)
        return item_type.from_dict(data) if data else None

    async def list_items(
        self,
        kind: ColumnKind,
        owner_id: str | None = None,
        status_id: str | None = None,
    ) -> list[Any]:
        """Scan items of one kind, optionally by owner and/or status column."""
        item_type = ITEM_TYPES[kind]
        where: dict[str, Any] = {}
        if owner_id is not None:
            where["owner_id"] = owner_id
        if status_id is not None:
            where["status_id"] = status_id
        rows = await self._fetch_all(item_type.TABLE, where)
        return [item_type.from_dict(row) for row in rows]

    async def list_scope(
        self, kind: ColumnKind, owner_id: str, status_id: str, bucket: int | None
    ) -> list[Any]:
        """Scan the items sharing one ordering scope."""
        item_type = ITEM_TYPES[kind]
        where: dict[str, Any] = {"owner_id": owner_id, "status_id": status_id}
        if item_type.BUCKET_FIELD is not None:
            where[item_type.BUCKET_FIELD] = bucket
        rows = await self._fetch_all(item_type.TABLE, where)
        return [item_type.from_dict(row) for row in rows]

    async def patch_item(self, kind: ColumnKind, item_id: str, **changes: Any) -> None:
        item_type = ITEM_TYPES[kind]
        await self._patch(item_type.TABLE, item_type, item_id, changes)

    async def delete_item(self, kind: ColumnKind, item_id: str) -> None:
        await self._delete(ITEM_TYPES[kind].TABLE, item_id)

    # -- companies -------------------------------------------------------------

    async def insert_company(self, company: Company) -> None:
        await self._insert("companies", company)

    async def get_company(self, company_id: str) -> Company | None:
        data = await self._fetch_one("companies", company_id)
        return Company.from_dict(data) if data else None

    async def list_companies(self, owner_id: str) -> list[Company]:
        rows = await self._fetch_all("companies", {"owner_id": owner_id})
        return [Company.from_dict(row) for row in rows]

    async def patch_company(self, company_id: str, **changes: Any) -> None:
        await self._patch("companies", Company, company_id, changes)

    async def delete_company(self, company_id: str) -> None:
        await self._delete("companies", company_id)

    # -- referrals -------------------------------------------------------------

    async def insert_referral(self, referral: Referral) -> None:
        await self._insert("referrals", referral)

    async def get_referral(self, referral_id: str) -> Referral | None:
        data = await self._fetch_one("referrals", referral_id)
        return Referral.from_dict(data) if data else None

    async def patch_referral(self, referral_id: str, **changes: Any) -> None:
        await self._patch("referrals", Referral, referral_id, changes)

    async def list_referrals(self, owner_id: str | None = None) -> list[Referral]:
        """List referrals for one owner, or across all owners when ``None``."""
        where = {"owner_id": owner_id} if owner_id is not None else None
        rows = await self._fetch_all("referrals", where)
        return [Referral.from_dict(row) for row in rows]

    async def list_company_referrals(self, company_id: str, owner_id: str) -> list[Referral]:
        rows = await self._fetch_all(
            "referrals", {"company_id": company_id, "owner_id": owner_id}
        )
        return [Referral.from_dict(row) for row in rows]

    async def delete_referral(self, referral_id: str) -> None:
        await self._delete("referrals", referral_id)

    # -- message templates -----------------------------------------------------

    async def insert_template(self, template: MessageTemplate) -> None:
        await self._insert("message_templates", template)

    async def list_templates(self, owner_id: str) -> list[MessageTemplate]:
        rows = await self._fetch_all("message_templates", {"owner_id": owner_id})
        return [MessageTemplate.from_dict(row) for row in rows]

    async def get_template(self, template_id: str) -> MessageTemplate | None:
        data = await self._fetch_one("message_templates", template_id)
        return MessageTemplate.from_dict(data) if data else None

    async def patch_template(self, template_id: str, **changes: Any) -> None:
        await self._patch("message_templates", MessageTemplate, template_id, changes)

    async def delete_template(self, template_id: str) -> None:
        await self._delete("message_templates", template_id)

    # -- user profiles ---------------------------------------------------------

    async def insert_profile(self, profile: UserProfile) -> None:
        await self._insert("user_profiles", profile)

    async def get_profile(self, owner_id: str) -> UserProfile | None:
        rows = await self._fetch_all("user_profiles", {"owner_id": owner_id})
        return UserProfile.from_dict(rows[0]) if rows else None

    async def patch_profile(self, profile_id: str, **changes: Any) -> None:
        await self._patch("user_profiles", UserProfile, profile_id, changes)

    async def list_profiles(self) -> list[UserProfile]:
        rows = await self._fetch_all("user_profiles")
        return [UserProfile.from_dict(row) for row in rows]

    # -- status history --------------------------------------------------------

    async def insert_history(self, entry: StatusHistoryEntry) -> None:
        """Insert a history entry.

        Raises:
            sqlite3.IntegrityError: If the (item_id, status_id) pair exists.
        """
        await self._insert("status_history", entry)

    async def find_history(
        self, item_id: str, status_id: str
    ) -> StatusHistoryEntry | None:
        rows = await self._fetch_all(
            "status_history", {"item_id": item_id, "status_id": status_id}
        )
        return StatusHistoryEntry.from_dict(rows[0]) if rows else None

    async def list_history(self, owner_id: str | None = None) -> list[StatusHistoryEntry]:
        where = {"owner_id": owner_id} if owner_id is not None else None
        rows = await self._fetch_all("status_history", where)
        return [StatusHistoryEntry.from_dict(row) for row in rows]

    async def count_rows(self, table: str) -> int:
        """Return the number of rows in ``table``."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(f"SELECT COUNT(*) AS count FROM {table}")
            row = await cursor.fetchone()
        return int(row["count"]) if row is not None else 0
