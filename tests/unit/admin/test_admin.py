"""Tests for admin authorization and maintenance jobs."""

import logging

import pytest

from src.admin.auth import AllowListAuthorizer, SecretAuthorizer
from src.board.errors import UnauthorizedError
from src.store.models import ColumnKind


class TestAuthorizers:
    """Test the pluggable authorization checks."""

    def test_secret_accepts_match(self):
        """The configured secret is accepted."""
        SecretAuthorizer("s3cret")("s3cret")

    @pytest.mark.parametrize("credential", [None, "", "wrong"])
    def test_secret_rejects_others(self, credential):
        """Anything but the secret is refused."""
        with pytest.raises(UnauthorizedError):
            SecretAuthorizer("s3cret")(credential)

    @pytest.mark.parametrize("secret", [None, ""])
    def test_no_secret_refuses_everyone(self, secret):
        """Without a configured secret nobody is admin."""
        with pytest.raises(UnauthorizedError):
            SecretAuthorizer(secret)("")

    def test_allow_list(self):
        """Allow-listed user ids pass, others do not."""
        authorize = AllowListAuthorizer({"admin_1"})

        authorize("admin_1")
        with pytest.raises(UnauthorizedError):
            authorize("user_1")
        with pytest.raises(UnauthorizedError):
            authorize(None)


class TestAdminService:
    """Test the guarded maintenance jobs."""

    @pytest.fixture
    def admin(self, board):
        from src.admin.service import AdminService

        return AdminService(board, SecretAuthorizer("s3cret"))

    @pytest.mark.asyncio
    async def test_backfill_requires_secret(self, admin, caplog):
        """An unauthorized backfill is refused and logged."""
        with caplog.at_level(logging.WARNING, logger="jobboard"):
            with pytest.raises(UnauthorizedError):
                await admin.run_history_backfill("wrong")

        assert "Refused history backfill" in caplog.text

    @pytest.mark.asyncio
    async def test_backfill_runs(self, admin, board, owner_id):
        """An authorized backfill reports the applications scanned."""
        [applied, *_] = await board.column_manager(ColumnKind.APPLICATION).seed_defaults(
            owner_id
        )
        await board.items.create_application(
            owner_id, applied, company_name="Acme", position="SWE", date_applied="2024-01-01"
        )

        result = await admin.run_history_backfill("s3cret")

        assert result == {"message": "Migration completed successfully", "count": 1}
        assert len(await board.history.list_history(owner_id)) == 1

    @pytest.mark.asyncio
    async def test_status_migration(self, admin, board, owner_id):
        """An authorized migration brings owners onto the defaults."""
        manager = board.column_manager(ColumnKind.APPLICATION)
        await manager.create_column(owner_id, "Interview", "x")

        result = await admin.run_status_migration("s3cret")

        assert result == {"processed": 1, "updated": 1, "created": 4}
        with pytest.raises(UnauthorizedError):
            await admin.run_status_migration(None)
