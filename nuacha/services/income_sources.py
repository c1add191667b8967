"""
Income Source Service
"""

import logging
from typing import Dict, List

from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from nuacha.core.exceptions import NotFoundError
from nuacha.models.budget import IncomeSource
from nuacha.services.family_access import check_family_link

logger = logging.getLogger(__name__)

# Columns an update may clear; None for any other field means "leave as is"
NULLABLE_FIELDS = {"notes", "family_id"}


class IncomeSourceService:
    """Income sources are never deleted, only deactivated"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_sources(self, user_id: str) -> List[IncomeSource]:
        stmt = select(IncomeSource).where(
            and_(
                IncomeSource.user_id == user_id,
                IncomeSource.is_active == True
            )
        ).order_by(IncomeSource.created_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_source(self, user_id: str, source_id: str) -> IncomeSource:
        stmt = select(IncomeSource).where(
            and_(
                IncomeSource.id == source_id,
                IncomeSource.user_id == user_id
            )
        )
        result = await self.db.execute(stmt)
        source = result.scalar_one_or_none()
        if source is None:
            raise NotFoundError("Income source not found")
        return source

    async def create_source(self, user_id: str, source_data: Dict) -> IncomeSource:
        await check_family_link(self.db, user_id, source_data.get("family_id"))
        source = IncomeSource(user_id=user_id, **source_data)
        self.db.add(source)
        await self.db.commit()
        await self.db.refresh(source)
        return source

    async def update_source(self, user_id: str, source_id: str, updates: Dict) -> IncomeSource:
        source = await self.get_source(user_id, source_id)
        updates = {
            key: value for key, value in updates.items()
            if value is not None or key in NULLABLE_FIELDS
        }
        if "family_id" in updates:
            await check_family_link(self.db, user_id, updates["family_id"])

        for key, value in updates.items():
            setattr(source, key, value)
        await self.db.commit()
        await self.db.refresh(source)
        return source

    async def deactivate_source(self, user_id: str, source_id: str) -> None:
        source = await self.get_source(user_id, source_id)
        source.is_active = False
        await self.db.commit()
        logger.info("Deactivated income source %s", source_id)
