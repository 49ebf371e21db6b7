"""Read models produced by the activity aggregator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal


@dataclass(frozen=True)
class ActivityEvent:
    """One line of a user's activity feed.

    Attributes:
        id: Id of the application or referral the event comes from.
        type: Source collection.
        action: Human-readable verb phrase, e.g. "Interview with".
        company: Company name shown after the action.
        timestamp: When the source record was created.
        date: Relative-time label for ``timestamp``.
        position: Role applied for (applications only).
        candidate: Referrer's name (referrals only).
    """

    id: str
    type: Literal["application", "referral"]
    action: str
    company: str
    timestamp: datetime
    date: str
    position: str | None = None
    candidate: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "action": self.action,
            "company": self.company,
            "timestamp": self.timestamp.isoformat(),
            "date": self.date,
        }
        if self.position is not None:
            data["position"] = self.position
        if self.candidate is not None:
            data["candidate"] = self.candidate
        return data


@dataclass(frozen=True)
class LeaderboardEntry:
    """A ranked user; ``score`` is the number of counted records."""

    user_id: str
    display_name: str
    score: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "display_name": self.display_name,
            "score": self.score,
        }


@dataclass(frozen=True)
class CommunityApplication:
    """An application as shown on the shared community timeline."""

    id: str
    user_id: str
    user_name: str
    company_name: str
    position: str
    location: str
    date_applied: str
    status_name: str
    status_color: str
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "company_name": self.company_name,
            "position": self.position,
            "location": self.location,
            "date_applied": self.date_applied,
            "status_name": self.status_name,
            "status_color": self.status_color,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class CommunityPage:
    """One page of the community timeline.

    Attributes:
        applications: The applications on this page, newest first.
        total: Number of visible applications matching the search.
        has_more: Whether another page follows.
        next_skip: ``skip`` value for the next page, or None on the last one.
    """

    applications: list[CommunityApplication]
    total: int
    has_more: bool
    next_skip: int | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "applications": [application.to_dict() for application in self.applications],
            "total": self.total,
            "has_more": self.has_more,
            "next_skip": self.next_skip,
        }
