"""
Family and Expense Category API Endpoints
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_
from typing import List

from nuacha.api.deps import get_db, get_current_user
from nuacha.models.user import User
from nuacha.models.family import Family
from nuacha.models.category import Category
from nuacha.schemas.user import FamilyCreate, FamilyResponse
from nuacha.schemas.category import CategoryCreate, CategoryResponse

router = APIRouter()

async def get_owned_family(family_id: str, user: User, db: AsyncSession) -> Family:
    stmt = select(Family).where(
        and_(
            Family.id == family_id,
            Family.user_id == user.id
        )
    )
    result = await db.execute(stmt)
    family = result.scalar_one_or_none()

    if not family:
        raise HTTPException(status_code=404, detail="Family not found")

    return family

@router.post("/", response_model=FamilyResponse)
async def create_family(
    family: FamilyCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a family"""
    db_family = Family(user_id=user.id, **family.dict())
    db.add(db_family)
    await db.commit()
    await db.refresh(db_family)
    return db_family

@router.get("/", response_model=List[FamilyResponse])
async def get_families(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get the user's families"""
    stmt = select(Family).where(Family.user_id == user.id).order_by(Family.created_at.asc())
    result = await db.execute(stmt)
    return result.scalars().all()

@router.get("/{family_id}/categories", response_model=List[CategoryResponse])
async def get_family_categories(
    family_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get a family's expense categories"""
    await get_owned_family(family_id, user, db)
    stmt = select(Category).where(Category.family_id == family_id).order_by(Category.name.asc())
    result = await db.execute(stmt)
    return result.scalars().all()

@router.post("/{family_id}/categories", response_model=CategoryResponse)
async def create_family_category(
    family_id: str,
    category: CategoryCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Add an expense category to a family"""
    await get_owned_family(family_id, user, db)

    if category.parent_id is not None:
        parent = await db.get(Category, category.parent_id)
        if not parent or parent.family_id != family_id:
            raise HTTPException(status_code=404, detail="Parent category not found")

    db_category = Category(family_id=family_id, **category.dict())
    db.add(db_category)
    await db.commit()
    await db.refresh(db_category)
    return db_category
