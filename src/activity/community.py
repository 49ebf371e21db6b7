"""Shared community timeline.

Every user's applications are visible to the community unless the user
has opted out through their profile. Pages are computed on each call from
the raw application records, with status names and colors joined in.
"""

from __future__ import annotations

from src.activity.identity import IdentityProvider
from src.activity.models import CommunityApplication, CommunityPage
from src.store.models import Application, ColumnKind, StatusColumn, UserProfile, new_id
from src.store.repository import BoardRepository
from src.utils.logging import get_logger

logger = get_logger("activity.community")

DEFAULT_PAGE_SIZE = 20
DEFAULT_LOCATION = "Remote"
DEFAULT_USER_NAME = "Anonymous"
UNKNOWN_STATUS = "Unknown"
UNKNOWN_STATUS_COLOR = "bg-gray-500"


def matches(application: Application, query: str) -> bool:
    """Case-insensitive substring match on company, position and location."""
    return (
        query in application.company_name.lower()
        or query in application.position.lower()
        or (application.location is not None and query in application.location.lower())
    )


class CommunityService:
    """Builds the community timeline and stores who takes part in it."""

    def __init__(self, repository: BoardRepository, identity: IdentityProvider | None = None):
        self.repository = repository
        self.identity = identity

    async def set_visibility(self, owner_id: str, visible: bool) -> str:
        """Opt a user's applications in to or out of the timeline.

        Returns:
            The id of the user's profile.
        """
        profile = await self.repository.get_profile(owner_id)
        if profile is None:
            profile = UserProfile(
                id=new_id(), owner_id=owner_id, show_applications_in_community=visible
            )
            await self.repository.insert_profile(profile)
        else:
            await self.repository.patch_profile(
                profile.id, show_applications_in_community=visible
            )
        logger.info("Community visibility for %s set to %s", owner_id, visible)
        return profile.id

    async def is_visible(self, owner_id: str) -> bool:
        profile = await self.repository.get_profile(owner_id)
        return profile is None or profile.show_applications_in_community

    async def timeline(
        self,
        limit: int = DEFAULT_PAGE_SIZE,
        skip: int = 0,
        search: str | None = None,
    ) -> CommunityPage:
        """Return one page of shared applications, newest first.

        Args:
            limit: Page size; 0 means the default page size.
            skip: Number of matching applications to skip.
            search: Optional filter on company, position or location.
        """
        limit = limit or DEFAULT_PAGE_SIZE
        skip = max(skip, 0)
        visible = await self._visible_applications(search)

        page = visible[skip : skip + limit]
        has_more = skip + limit < len(visible)
        return CommunityPage(
            applications=await self._present(page),
            total=len(visible),
            has_more=has_more,
            next_skip=skip + limit if has_more else None,
        )

    async def search(self, query: str, limit: int = DEFAULT_PAGE_SIZE) -> CommunityPage:
        """Return the first page of shared applications matching ``query``."""
        return await self.timeline(limit=limit, search=query)

    async def _visible_applications(self, search: str | None) -> list[Application]:
        applications: list[Application] = await self.repository.list_items(
            ColumnKind.APPLICATION
        )
        if search:
            query = search.lower()
            applications = [a for a in applications if matches(a, query)]

        hidden = {
            profile.owner_id
            for profile in await self.repository.list_profiles()
            if not profile.show_applications_in_community
        }
        visible = [a for a in applications if a.owner_id not in hidden]
        visible.sort(key=lambda application: application.created_at, reverse=True)
        return visible

    async def _present(self, applications: list[Application]) -> list[CommunityApplication]:
        statuses: dict[str, StatusColumn | None] = {}
        for application in applications:
            if application.status_id not in statuses:
                statuses[application.status_id] = await self.repository.get_column(
                    application.status_id
                )

        names: dict[str, str] = {}
        user_ids = list(dict.fromkeys(application.owner_id for application in applications))
        if self.identity is not None and user_ids:
            names = dict(await self.identity.display_names(user_ids))

        presented = []
        for application in applications:
            status = statuses[application.status_id]
            presented.append(
                CommunityApplication(
                    id=application.id,
                    user_id=application.owner_id,
                    user_name=names.get(application.owner_id) or DEFAULT_USER_NAME,
                    company_name=application.company_name,
                    position=application.position,
                    location=application.location or DEFAULT_LOCATION,
                    date_applied=application.date_applied,
                    status_name=status.name if status else UNKNOWN_STATUS,
                    status_color=status.color if status else UNKNOWN_STATUS_COLOR,
                    timestamp=application.created_at,
                )
            )
        return presented
