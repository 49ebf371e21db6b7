"""Authorization for maintenance operations."""

from __future__ import annotations

import secrets
from collections.abc import Callable

from src.board.errors import UnauthorizedError

# Raises UnauthorizedError when the credential is not accepted
Authorizer = Callable[[str | None], None]


class SecretAuthorizer:
    """Accepts callers that present the configured admin secret.

    With no secret configured every caller is refused.
    """

    def __init__(self, secret: str | None):
        self._secret = secret

    def __call__(self, credential: str | None) -> None:
        if not self._secret or credential is None:
            raise UnauthorizedError("Unauthorized")
        if not secrets.compare_digest(credential.encode(), self._secret.encode()):
            raise UnauthorizedError("Unauthorized")


class AllowListAuthorizer:
    """Accepts callers whose user id is on an allow-list."""

    def __init__(self, user_ids: set[str] | frozenset[str]):
        self._user_ids = frozenset(user_ids)

    def __call__(self, credential: str | None) -> None:
        if credential is None or credential not in self._user_ids:
            raise UnauthorizedError("Unauthorized")
