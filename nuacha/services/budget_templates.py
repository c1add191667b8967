"""
Budget Template Service
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import select, update, and_
from sqlalchemy.ext.asyncio import AsyncSession

from nuacha.core.exceptions import NotFoundError
from nuacha.models.budget import BudgetTemplate
from nuacha.services.family_access import check_family_link

logger = logging.getLogger(__name__)

# Columns an update may clear; None for any other field means "leave as is"
NULLABLE_FIELDS = {"description", "family_id"}


class BudgetTemplateService:
    """Planned budgets; soft-deleted, at most one default per user"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_templates(self, user_id: str) -> List[BudgetTemplate]:
        stmt = select(BudgetTemplate).where(
            and_(
                BudgetTemplate.user_id == user_id,
                BudgetTemplate.is_active == True
            )
        ).order_by(BudgetTemplate.created_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_default_template(self, user_id: str) -> Optional[BudgetTemplate]:
        """The default template, else the newest active one"""
        templates = await self.list_templates(user_id)
        for template in templates:
            if template.is_default:
                return template
        return templates[0] if templates else None

    async def get_template(self, user_id: str, template_id: str) -> BudgetTemplate:
        stmt = select(BudgetTemplate).where(
            and_(
                BudgetTemplate.id == template_id,
                BudgetTemplate.user_id == user_id,
                BudgetTemplate.is_active == True
            )
        )
        result = await self.db.execute(stmt)
        template = result.scalar_one_or_none()
        if template is None:
            raise NotFoundError("Budget template not found")
        return template

    async def _unset_defaults(self, user_id: str, exclude_id: Optional[str] = None) -> None:
        stmt = update(BudgetTemplate).where(
            and_(
                BudgetTemplate.user_id == user_id,
                BudgetTemplate.is_default == True
            )
        )
        if exclude_id:
            stmt = stmt.where(BudgetTemplate.id != exclude_id)
        await self.db.execute(stmt.values(is_default=False))

    async def create_template(self, user_id: str, template_data: Dict) -> BudgetTemplate:
        await check_family_link(self.db, user_id, template_data.get("family_id"))

        if template_data.get("is_default"):
            await self._unset_defaults(user_id)

        template = BudgetTemplate(user_id=user_id, **template_data)
        self.db.add(template)
        await self.db.commit()
        await self.db.refresh(template)
        return template

    async def update_template(self, user_id: str, template_id: str, updates: Dict) -> BudgetTemplate:
        template = await self.get_template(user_id, template_id)
        updates = {
            key: value for key, value in updates.items()
            if value is not None or key in NULLABLE_FIELDS
        }
        if "family_id" in updates:
            await check_family_link(self.db, user_id, updates["family_id"])

        if updates.get("is_default"):
            await self._unset_defaults(user_id, exclude_id=template_id)

        for key, value in updates.items():
            setattr(template, key, value)

        await self.db.commit()
        await self.db.refresh(template)
        return template

    async def delete_template(self, user_id: str, template_id: str) -> None:
        template = await self.get_template(user_id, template_id)
        template.is_active = False
        template.is_default = False
        await self.db.commit()
        logger.info("Deactivated budget template %s", template_id)
