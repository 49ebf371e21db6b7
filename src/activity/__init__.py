"""Activity feed, leaderboards and the community timeline.

Public API:
- ActivityService: recent activity and leaderboards, computed on demand
- CommunityService: paginated, searchable timeline of shared applications
- ActivityEvent, LeaderboardEntry, CommunityApplication, CommunityPage:
  read models they return
- IdentityProvider, StaticIdentityProvider: display-name lookup
- format_relative_time: "3 hours ago" style labels
"""

from src.activity.community import CommunityService
from src.activity.identity import IdentityProvider, StaticIdentityProvider
from src.activity.models import (
    ActivityEvent,
    CommunityApplication,
    CommunityPage,
    LeaderboardEntry,
)
from src.activity.relative_time import format_relative_time
from src.activity.service import ActivityService

__all__ = [
    "ActivityService",
    "CommunityService",
    "ActivityEvent",
    "LeaderboardEntry",
    "CommunityApplication",
    "CommunityPage",
    "IdentityProvider",
    "StaticIdentityProvider",
    "format_relative_time",
]
