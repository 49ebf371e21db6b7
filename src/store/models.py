"""Record types persisted by the board store."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, fields
from datetime import UTC, datetime
from enum import Enum
from typing import Any, ClassVar, Protocol


def utcnow() -> datetime:
    return datetime.now(UTC)


def new_id() -> str:
    """Return a fresh opaque record id."""
    return uuid.uuid4().hex


def parse_datetime(value: str | datetime | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class ColumnKind(str, Enum):
    """Which board a status column belongs to."""

    APPLICATION = "application"
    STUDY = "study"


class _Record:
    """Dict (de)serialization shared by every stored record.

    Datetimes become ISO-8601 strings and enums their values, so the
    output of ``to_dict`` is JSON-ready and maps 1:1 onto table columns.
    """

    _BOOL_FIELDS: ClassVar[frozenset[str]] = frozenset()
    _DATETIME_FIELDS: ClassVar[frozenset[str]] = frozenset({"created_at", "updated_at"})

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, list):
                value = list(value)
            data[f.name] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        kwargs: dict[str, Any] = {}
        for f in fields(cls):  # type: ignore[arg-type]
            if f.name not in data:
                continue
            value = data[f.name]
            if f.name in cls._DATETIME_FIELDS:
                value = parse_datetime(value)
            elif f.name in cls._BOOL_FIELDS:
                value = bool(value)
            kwargs[f.name] = value
        return cls(**kwargs)


@dataclass
class StatusColumn(_Record):
    """A user-defined board column (pipeline stage or schedule day).

    Attributes:
        id: Record id.
        owner_id: User the column belongs to.
        kind: Board the column is part of.
        name: Display name.
        color: UI color token (e.g. ``bg-blue-500``).
        order: Zero-based position; dense per ``(owner_id, kind)``.
        is_default: Seeded columns cannot be renamed or deleted.
    """

    _BOOL_FIELDS: ClassVar[frozenset[str]] = frozenset({"is_default"})

    id: str
    owner_id: str
    kind: ColumnKind
    name: str
    color: str
    order: int
    is_default: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.kind = ColumnKind(self.kind)


class OrderedItem(Protocol):
    """Anything placed in a status column at a dense ``order_index``."""

    KIND: ClassVar[ColumnKind]
    TABLE: ClassVar[str]
    BUCKET_FIELD: ClassVar[str | None]

    id: str
    owner_id: str
    status_id: str
    order_index: int
    created_at: datetime

    @property
    def bucket(self) -> int | None: ...

    @property
    def scope(self) -> tuple[str, str, int | None]: ...

    def to_dict(self) -> dict[str, Any]: ...


@dataclass
class Application(_Record):
    """A job application tracked on the pipeline board."""

    KIND: ClassVar[ColumnKind] = ColumnKind.APPLICATION
    TABLE: ClassVar[str] = "applications"
    BUCKET_FIELD: ClassVar[str | None] = None

    id: str
    owner_id: str
    status_id: str
    company_name: str
    position: str
    date_applied: str
    order_index: int = 0
    company_id: str | None = None
    notes: str | None = None
    salary: str | None = None
    location: str | None = None
    url: str | None = None
    contact_name: str | None = None
    contact_email: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def bucket(self) -> int | None:
        return None

    @property
    def scope(self) -> tuple[str, str, int | None]:
        return (self.owner_id, self.status_id, None)


@dataclass
class StudyProblem(_Record):
    """A practice problem scheduled on the study board.

    ``day_of_week`` (0 = Sunday) is the secondary bucket that, together
    with ``status_id``, scopes ``order_index``.
    """

    KIND: ClassVar[ColumnKind] = ColumnKind.STUDY
    TABLE: ClassVar[str] = "study_problems"
    BUCKET_FIELD: ClassVar[str | None] = "day_of_week"
    _BOOL_FIELDS: ClassVar[frozenset[str]] = frozenset({"mastered"})

    id: str
    owner_id: str
    status_id: str
    title: str
    day_of_week: int
    score: int
    order_index: int = 0
    link: str | None = None
    difficulty: str | None = None
    notes: str | None = None
    time_complexity: str | None = None
    space_complexity: str | None = None
    category: str | None = None
    mastered: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if not 0 <= self.day_of_week <= 6:
            raise ValueError("day_of_week must be between 0 and 6")
        if not 1 <= self.score <= 5:
            raise ValueError("score must be between 1 and 5")

    @property
    def bucket(self) -> int | None:
        return self.day_of_week

    @property
    def scope(self) -> tuple[str, str, int | None]:
        return (self.owner_id, self.status_id, self.day_of_week)


ITEM_TYPES: dict[ColumnKind, type[Application] | type[StudyProblem]] = {
    ColumnKind.APPLICATION: Application,
    ColumnKind.STUDY: StudyProblem,
}


@dataclass
class Company(_Record):
    """A company the user is targeting."""

    id: str
    owner_id: str
    name: str
    description: str | None = None
    website: str | None = None
    logo: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class Referral(_Record):
    """A contact who may refer the user at a company."""

    _BOOL_FIELDS: ClassVar[frozenset[str]] = frozenset({"has_asked_for_final_referral"})

    id: str
    owner_id: str
    company_id: str
    name: str
    linkedin_url: str | None = None
    email: str | None = None
    notes: str | None = None
    status: str = "pending"
    has_asked_for_final_referral: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class MessageTemplate(_Record):
    """An outreach message template."""

    _BOOL_FIELDS: ClassVar[frozenset[str]] = frozenset({"is_default"})

    id: str
    owner_id: str
    title: str
    content: str
    order: int
    is_default: bool = False
    tags: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class StatusHistoryEntry(_Record):
    """One status an item has entered. Never mutated after insert."""

    id: str
    owner_id: str
    item_id: str
    status_id: str
    status_name: str
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class UserProfile(_Record):
    """Per-user community preferences.

    Users without a profile are treated as sharing their applications.
    """

    _BOOL_FIELDS: ClassVar[frozenset[str]] = frozenset({"show_applications_in_community"})

    id: str
    owner_id: str
    show_applications_in_community: bool = True
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
