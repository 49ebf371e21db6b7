"""Companies, referral contacts and outreach templates.

Public API:
- NetworkService: companies and referrals
- TemplateService: ordered message templates with an idempotent default
"""

from src.network.service import NetworkService
from src.network.templates import TemplateService

__all__ = ["NetworkService", "TemplateService"]
