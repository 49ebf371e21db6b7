"""Outreach message templates."""

from __future__ import annotations

from typing import Any

from src.board.errors import NotFoundError
from src.network.service import check_editable
from src.store.models import MessageTemplate, new_id
from src.store.repository import BoardRepository
from src.utils.logging import get_logger

logger = get_logger("network.templates")

DEFAULT_TEMPLATE_TITLE = "Default Connection Request"
DEFAULT_TEMPLATE_CONTENT = (
    "Hi [Name], I noticed you work at [Company]. I'm looking to explore "
    "opportunities there and would appreciate your insights. Would you be "
    "open to a quick chat?"
)
DEFAULT_TEMPLATE_TAGS = ["connection|0", "networking|1"]

TEMPLATE_FIELDS = frozenset({"title", "content", "is_default", "tags", "order"})


class TemplateService:
    """Keeps each user's outreach templates in display order."""

    def __init__(self, repository: BoardRepository):
        self.repository = repository

    async def list_templates(self, owner_id: str) -> list[MessageTemplate]:
        templates = await self.repository.list_templates(owner_id)
        return sorted(templates, key=lambda template: template.order)

    async def create_template(
        self,
        owner_id: str,
        title: str,
        content: str,
        tags: list[str] | None = None,
        is_default: bool = False,
    ) -> str:
        """Append a template after the owner's last one."""
        existing = await self.repository.list_templates(owner_id)
        max_order = max((template.order for template in existing), default=-1)

        template = MessageTemplate(
            id=new_id(),
            owner_id=owner_id,
            title=title,
            content=content,
            order=max_order + 1,
            is_default=is_default,
            tags=list(tags or []),
        )
        await self.repository.insert_template(template)
        return template.id

    async def update_template(self, template_id: str, **changes: Any) -> str:
        """Patch a template's title, content, tags, default flag or order.

        Raises:
            NotFoundError: If the template does not exist.
            InvalidOperationError: If another field is given.
        """
        check_editable(changes, TEMPLATE_FIELDS)
        await self._require(template_id)
        if "tags" in changes:
            changes["tags"] = list(changes["tags"] or [])
        if changes:
            await self.repository.patch_template(template_id, **changes)
        return template_id

    async def delete_template(self, template_id: str) -> str:
        """Delete a template; the others keep their order."""
        await self._require(template_id)
        await self.repository.delete_template(template_id)
        return template_id

    async def ensure_default_template(self, owner_id: str) -> bool:
        """Create the default connection request if the owner has no templates.

        Safe to call repeatedly; always returns True.
        """
        if not await self.repository.list_templates(owner_id):
            await self.create_template(
                owner_id,
                DEFAULT_TEMPLATE_TITLE,
                DEFAULT_TEMPLATE_CONTENT,
                tags=DEFAULT_TEMPLATE_TAGS,
                is_default=True,
            )
            logger.info("Seeded default message template for %s", owner_id)
        return True

    async def _require(self, template_id: str) -> MessageTemplate:
        template = await self.repository.get_template(template_id)
        if template is None:
            raise NotFoundError("Template", template_id)
        return template
