"""Display-name lookup through the identity provider."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Protocol


class IdentityProvider(Protocol):
    """Batch lookup of display names for user ids.

    Implementations return names only for the users they know; missing
    ids are left out of the mapping.
    """

    async def display_names(self, user_ids: Sequence[str]) -> Mapping[str, str]: ...


class StaticIdentityProvider:
    """Identity provider backed by a fixed mapping."""

    def __init__(self, names: Mapping[str, str]):
        self._names = dict(names)

    async def display_names(self, user_ids: Sequence[str]) -> Mapping[str, str]:
        return {user_id: self._names[user_id] for user_id in user_ids if user_id in self._names}
