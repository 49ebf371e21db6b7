"""Companies and referral contacts."""

from __future__ import annotations

from collections.abc import Collection
from typing import Any

from src.board.errors import InvalidOperationError, NotFoundError
from src.store.models import Company, Referral, new_id
from src.store.repository import BoardRepository
from src.utils.logging import get_logger

logger = get_logger("network.service")

COMPANY_FIELDS = frozenset({"name", "description", "website", "logo"})
REFERRAL_FIELDS = frozenset({"name", "linkedin_url", "email", "notes", "status"})


def check_editable(changes: dict[str, Any], editable: Collection[str]) -> None:
    """Raise InvalidOperationError for names outside ``editable``."""
    rejected = changes.keys() - set(editable)
    if rejected:
        raise InvalidOperationError(f"Fields cannot be updated: {', '.join(sorted(rejected))}")


class NetworkService:
    """Records the companies a user targets and the people who refer them."""

    def __init__(self, repository: BoardRepository):
        self.repository = repository

    async def create_company(self, owner_id: str, name: str, **fields: Any) -> str:
        company = Company(id=new_id(), owner_id=owner_id, name=name, **fields)
        await self.repository.insert_company(company)
        return company.id

    async def list_companies(self, owner_id: str) -> list[Company]:
        """Return the owner's companies, newest first."""
        companies = await self.repository.list_companies(owner_id)
        return sorted(companies, key=lambda company: company.created_at, reverse=True)

    async def update_company(self, company_id: str, **changes: Any) -> str:
        """Patch a company's name, description, website or logo.

        Raises:
            NotFoundError: If the company does not exist.
            InvalidOperationError: If another field is given.
        """
        check_editable(changes, COMPANY_FIELDS)
        await self._require_company(company_id)
        if changes:
            await self.repository.patch_company(company_id, **changes)
        return company_id

    async def delete_company(self, company_id: str) -> str:
        """Delete a company. Its referral contacts are kept."""
        await self._require_company(company_id)
        await self.repository.delete_company(company_id)
        logger.info("Deleted company %s", company_id)
        return company_id

    async def create_referral(
        self,
        owner_id: str,
        company_id: str,
        name: str,
        **fields: Any,
    ) -> str:
        """Record a referral contact at one of the owner's companies.

        Raises:
            NotFoundError: If the company does not exist for this owner.
        """
        company = await self.repository.get_company(company_id)
        if company is None or company.owner_id != owner_id:
            raise NotFoundError("Company", company_id)

        referral = Referral(
            id=new_id(),
            owner_id=owner_id,
            company_id=company_id,
            name=name,
            **fields,
        )
        await self.repository.insert_referral(referral)
        return referral.id

    async def update_referral(self, referral_id: str, **changes: Any) -> str:
        """Patch a referral contact's details or status.

        Raises:
            NotFoundError: If the referral does not exist.
            InvalidOperationError: If a field outside the contact details is given.
        """
        check_editable(changes, REFERRAL_FIELDS)
        await self._require_referral(referral_id)
        if changes:
            await self.repository.patch_referral(referral_id, **changes)
        return referral_id

    async def mark_final_referral(self, referral_id: str, asked: bool = True) -> str:
        """Flag that the contact was asked for the final referral."""
        await self._require_referral(referral_id)
        await self.repository.patch_referral(
            referral_id, has_asked_for_final_referral=asked
        )
        return referral_id

    async def delete_referral(self, referral_id: str) -> str:
        await self._require_referral(referral_id)
        await self.repository.delete_referral(referral_id)
        return referral_id

    async def list_referrals(self, owner_id: str) -> list[Referral]:
        """Return the owner's referrals, newest first."""
        referrals = await self.repository.list_referrals(owner_id)
        return sorted(referrals, key=lambda referral: referral.created_at, reverse=True)

    async def list_company_referrals(self, owner_id: str, company_id: str) -> list[Referral]:
        """Return the owner's referrals at one company, newest first."""
        referrals = await self.repository.list_company_referrals(company_id, owner_id)
        return sorted(referrals, key=lambda referral: referral.created_at, reverse=True)

    async def _require_company(self, company_id: str) -> Company:
        company = await self.repository.get_company(company_id)
        if company is None:
            raise NotFoundError("Company", company_id)
        return company

    async def _require_referral(self, referral_id: str) -> Referral:
        referral = await self.repository.get_referral(referral_id)
        if referral is None:
            raise NotFoundError("Referral", referral_id)
        return referral
