"""
Family ownership checks shared by the services
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from nuacha.core.exceptions import NotFoundError, PermissionDeniedError
from nuacha.models.family import Family


async def get_owned_family(db: AsyncSession, user_id: str, family_id: str) -> Family:
    family = await db.get(Family, family_id)
    if family is None:
        raise NotFoundError("Family not found")
    if family.user_id != user_id:
        raise PermissionDeniedError("You do not have permission to use this family")
    return family


async def check_family_link(db: AsyncSession, user_id: str, family_id: Optional[str]) -> None:
    """Rows may be linked to no family, or to one the user owns"""
    if family_id is not None:
        await get_owned_family(db, user_id, family_id)
