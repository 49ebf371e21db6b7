"""Privileged maintenance operations.

Public API:
- AdminService: history backfill and default-status migration
- SecretAuthorizer, AllowListAuthorizer: pluggable authorization checks
"""

from src.admin.auth import AllowListAuthorizer, Authorizer, SecretAuthorizer
from src.admin.service import AdminService

__all__ = ["AdminService", "Authorizer", "SecretAuthorizer", "AllowListAuthorizer"]
