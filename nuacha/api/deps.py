"""
FastAPI Dependencies
"""

from typing import AsyncGenerator
from fastapi import Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from nuacha.core.database import async_session
from nuacha.models.user import User

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Database session dependency"""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()

async def get_current_user(
    user_id: str = Query(..., description="User ID"),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Resolve the calling user; unknown or inactive users are rejected"""
    user = await db.get(User, user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user
