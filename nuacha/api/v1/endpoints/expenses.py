"""
Expense API Endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, desc
from typing import List, Optional
from datetime import date

from nuacha.api.deps import get_db, get_current_user
from nuacha.api.v1.endpoints.families import get_owned_family
from nuacha.models.user import User
from nuacha.models.family import Family
from nuacha.models.category import BudgetCategory
from nuacha.models.expense import Expense
from nuacha.schemas.expense import ExpenseCreate, ExpenseResponse, ExpenseMatchResponse
from nuacha.services.expense_matching import match_expense_to_category

router = APIRouter()

@router.post("/", response_model=ExpenseResponse)
async def create_expense(
    expense: ExpenseCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Record an expense for one of the user's families
    """
    await get_owned_family(expense.family_id, user, db)

    db_expense = Expense(**expense.dict())
    db.add(db_expense)
    await db.commit()
    await db.refresh(db_expense)

    return db_expense

@router.get("/", response_model=List[ExpenseResponse])
async def get_expenses(
    family_id: str = Query(..., description="Family ID"),
    start: Optional[date] = Query(None, description="First day to include"),
    end: Optional[date] = Query(None, description="Last day to include"),
    limit: int = Query(100, le=500),
    offset: int = Query(0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get a family's expenses, newest first
    """
    await get_owned_family(family_id, user, db)

    query = select(Expense).where(Expense.family_id == family_id)
    if start:
        query = query.where(Expense.date >= start)
    if end:
        query = query.where(Expense.date <= end)

    query = query.order_by(desc(Expense.date)).offset(offset).limit(limit)

    result = await db.execute(query)
    return result.scalars().all()

@router.get("/{expense_id}/match", response_model=ExpenseMatchResponse)
async def match_expense(
    expense_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Resolve the budget category an expense counts towards
    """
    stmt = select(Expense).join(Family, Family.id == Expense.family_id).where(
        and_(
            Expense.id == expense_id,
            Family.user_id == user.id
        )
    )
    result = await db.execute(stmt)
    expense = result.scalar_one_or_none()

    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")

    stmt = select(BudgetCategory).where(
        and_(
            BudgetCategory.user_id == user.id,
            BudgetCategory.is_active == True
        )
    ).order_by(BudgetCategory.sort_order.asc())
    result = await db.execute(stmt)
    category = match_expense_to_category(expense, result.scalars().all())

    return ExpenseMatchResponse(
        expense_id=expense.id,
        budget_category_id=category.id if category else None,
        budget_category_name=category.name if category else None,
        group_type=category.group_type if category else None,
        matched=category is not None
    )
