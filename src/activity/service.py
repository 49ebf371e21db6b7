"""Activity feed and leaderboards.

This module provides the ActivityService class which derives read-only
views from the raw board records on every call:
- A user's recent activity (applications and referrals, newest first)
- The referral leaderboard across all users
- The application leaderboard across all users
Nothing here is persisted.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from datetime import datetime

from src.activity.identity import IdentityProvider
from src.activity.models import ActivityEvent, LeaderboardEntry
from src.activity.relative_time import format_relative_time
from src.store.models import Application, ColumnKind, Referral, utcnow
from src.store.repository import BoardRepository
from src.utils.logging import get_logger

logger = get_logger("activity.service")

UNKNOWN_STATUS = "Unknown"
UNKNOWN_COMPANY = "Unknown Company"
DEFAULT_REFERRER_NAME = "Anonymous"
DEFAULT_APPLICANT_NAME = "User"
DEFAULT_FEED_LIMIT = 10


def application_action(status_name: str) -> str:
    """Verb phrase for an application, derived from its status name."""
    if "interview" in status_name.lower():
        return "Interview with"
    if status_name == "Offer":
        return "Received offer from"
    if status_name == "Rejected":
        return "Rejected by"
    return "Applied to"


def referral_action(referral: Referral) -> str:
    if referral.has_asked_for_final_referral:
        return "Successfully referred at"
    return "Referred"


def first_name(full_name: str) -> str | None:
    parts = full_name.split()
    return parts[0] if parts else None


class ActivityService:
    """Builds activity feeds and leaderboards from the board store."""

    def __init__(
        self,
        repository: BoardRepository,
        identity: IdentityProvider | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize the service.

        Args:
            repository: The BoardRepository instance for database access.
            identity: Optional provider used to resolve leaderboard names.
            clock: Source of "now" for relative-time labels.
        """
        self.repository = repository
        self.identity = identity
        self.clock = clock

    async def recent_activity(
        self, owner_id: str, limit: int = DEFAULT_FEED_LIMIT
    ) -> list[ActivityEvent]:
        """Return the owner's latest application and referral events.

        Args:
            owner_id: User whose records are scanned.
            limit: Maximum number of events returned; 0 means the default.

        Returns:
            Events sorted by creation time, newest first.
        """
        limit = limit or DEFAULT_FEED_LIMIT
        applications = await self.repository.list_items(
            ColumnKind.APPLICATION, owner_id=owner_id
        )
        referrals = await self.repository.list_referrals(owner_id)

        statuses = await self.repository.list_columns(ColumnKind.APPLICATION, owner_id)
        status_names = {status.id: status.name for status in statuses}

        company_ids: dict[str, None] = {}
        for application in applications:
            if application.company_id:
                company_ids.setdefault(application.company_id, None)
        for referral in referrals:
            company_ids.setdefault(referral.company_id, None)

        company_names: dict[str, str] = {}
        for company_id in company_ids:
            company = await self.repository.get_company(company_id)
            if company is not None:
                company_names[company_id] = company.name

        now = self.clock()
        events = [
            self._application_event(application, status_names, company_names, now)
            for application in applications
        ]
        events.extend(
            self._referral_event(referral, company_names, now) for referral in referrals
        )

        events.sort(key=lambda event: event.timestamp, reverse=True)
        logger.debug("Built %d activity events for %s", len(events), owner_id)
        return events[: max(limit, 0)]

    async def leaderboard(self, limit: int = 10) -> list[LeaderboardEntry]:
        """Rank every user by number of referrals recorded.

        Ties keep the order in which users first appear in the scan.
        Names come from the identity provider; users it does not know
        fall back to the first word of their first referral's name.
        """
        referrals = await self.repository.list_referrals()
        fallback_names: dict[str, str] = {}
        for referral in referrals:
            if referral.owner_id not in fallback_names:
                fallback_names[referral.owner_id] = (
                    first_name(referral.name) or DEFAULT_REFERRER_NAME
                )
        return await self._rank(
            (referral.owner_id for referral in referrals), fallback_names, limit
        )

    async def applications_leaderboard(self, limit: int = 100) -> list[LeaderboardEntry]:
        """Rank every user by number of applications tracked."""
        applications: list[Application] = await self.repository.list_items(
            ColumnKind.APPLICATION
        )
        return await self._rank(
            (application.owner_id for application in applications), {}, limit
        )

    async def _rank(
        self,
        user_ids: Iterable[str],
        fallback_names: Mapping[str, str],
        limit: int,
    ) -> list[LeaderboardEntry]:
        counts: dict[str, int] = {}
        for user_id in user_ids:
            counts[user_id] = counts.get(user_id, 0) + 1

        ranked = sorted(counts.items(), key=lambda pair: pair[1], reverse=True)
        ranked = ranked[: max(limit, 0)]

        resolved: Mapping[str, str] = {}
        if self.identity is not None and ranked:
            resolved = await self.identity.display_names([user_id for user_id, _ in ranked])

        return [
            LeaderboardEntry(
                user_id=user_id,
                display_name=resolved.get(user_id)
                or fallback_names.get(user_id)
                or DEFAULT_APPLICANT_NAME,
                score=count,
            )
            for user_id, count in ranked
        ]

    def _application_event(
        self,
        application: Application,
        status_names: Mapping[str, str],
        company_names: Mapping[str, str],
        now: datetime,
    ) -> ActivityEvent:
        status_name = status_names.get(application.status_id, UNKNOWN_STATUS)
        company = None
        if application.company_id:
            company = company_names.get(application.company_id)
        return ActivityEvent(
            id=application.id,
            type="application",
            action=application_action(status_name),
            company=company or application.company_name,
            position=application.position,
            timestamp=application.created_at,
            date=format_relative_time(application.created_at, now),
        )

    def _referral_event(
        self,
        referral: Referral,
        company_names: Mapping[str, str],
        now: datetime,
    ) -> ActivityEvent:
        return ActivityEvent(
            id=referral.id,
            type="referral",
            action=referral_action(referral),
            company=company_names.get(referral.company_id) or UNKNOWN_COMPANY,
            candidate=referral.name,
            timestamp=referral.created_at,
            date=format_relative_time(referral.created_at, now),
        )
