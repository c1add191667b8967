"""
Budget API Endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_
from typing import List, Optional
from datetime import date

from nuacha.api.deps import get_db, get_current_user
from nuacha.core.budget_utils import format_ttd
from nuacha.data.unpaid_labor import FAMILY_TYPES, get_unpaid_labor_for_family_type, get_total_unpaid_labor_value
from nuacha.models.user import User
from nuacha.models.category import BudgetCategory
from nuacha.schemas.budget import (
    BudgetAllocationCreate,
    BudgetAllocationResponse,
    BudgetAllocationUpdate,
    IncomeSourceCreate,
    IncomeSourceResponse,
    IncomeSourceUpdate,
    BudgetCategoryCreate,
    BudgetCategoryResponse,
    BudgetCategoryUpdate,
    BudgetTemplateCreate,
    BudgetTemplateResponse,
    BudgetTemplateUpdate,
    BudgetSummaryResponse,
    BudgetVarianceResponse,
    UnpaidLaborCategoryResponse,
    UnpaidLaborResponse
)
from nuacha.services.budget_calculator import BudgetCalculator
from nuacha.services.budget_rules import BudgetRuleService
from nuacha.services.budget_templates import BudgetTemplateService
from nuacha.services.income_sources import IncomeSourceService

router = APIRouter()

@router.get("/summary", response_model=BudgetSummaryResponse)
async def get_budget_summary(
    month: Optional[date] = Query(None, description="Any day in the month, defaults to today"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Income, spending per group and variance against the active rule
    """
    calculator = BudgetCalculator(db)
    summary = await calculator.calculate_summary(user.id, month or date.today())

    return BudgetSummaryResponse(**summary)

@router.get("/variance", response_model=BudgetVarianceResponse)
async def get_budget_variance(
    start: date = Query(..., description="First day of the period"),
    end: Optional[date] = Query(None, description="Last day, defaults to the end of the month"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Planned (default template) vs actual amounts
    """
    calculator = BudgetCalculator(db)
    variance = await calculator.calculate_variance(user.id, start, end)

    if variance is None:
        raise HTTPException(status_code=404, detail="No budget template found")

    return BudgetVarianceResponse(**variance)

@router.get("/unpaid-labor", response_model=UnpaidLaborResponse)
async def get_unpaid_labor(
    family_type: str = Query(..., description="One of: " + ", ".join(FAMILY_TYPES))
):
    """
    Unpaid household labor categories for a family type
    """
    categories = get_unpaid_labor_for_family_type(family_type)
    total = get_total_unpaid_labor_value(family_type)

    return UnpaidLaborResponse(
        family_type=family_type,
        categories=[UnpaidLaborCategoryResponse(**category._asdict()) for category in categories],
        total_value=total,
        total_formatted=format_ttd(total)
    )

# Allocation rules
@router.get("/rules", response_model=List[BudgetAllocationResponse])
async def get_rules(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get all allocation rules, newest first"""
    return await BudgetRuleService(db).list_rules(user.id)

@router.get("/rules/active", response_model=Optional[BudgetAllocationResponse])
async def get_active_rule(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get the default allocation rule, if any"""
    return await BudgetRuleService(db).get_active_rule(user.id)

@router.post("/rules", response_model=BudgetAllocationResponse)
async def create_rule(
    rule: BudgetAllocationCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create an allocation rule"""
    return await BudgetRuleService(db).create_rule(user.id, rule.dict())

@router.patch("/rules/{rule_id}", response_model=BudgetAllocationResponse)
async def update_rule(
    rule_id: str,
    updates: BudgetAllocationUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update an allocation rule"""
    return await BudgetRuleService(db).update_rule(user.id, rule_id, updates.dict(exclude_unset=True))

@router.delete("/rules/{rule_id}")
async def delete_rule(
    rule_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Delete an allocation rule"""
    await BudgetRuleService(db).delete_rule(user.id, rule_id)
    return {"message": "Budget rule deleted successfully"}

# Income sources
@router.post("/income", response_model=IncomeSourceResponse)
async def add_income_source(
    source: IncomeSourceCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Add income source"""
    return await IncomeSourceService(db).create_source(user.id, source.dict())

@router.get("/income", response_model=List[IncomeSourceResponse])
async def get_income_sources(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get active income sources"""
    return await IncomeSourceService(db).list_sources(user.id)

@router.patch("/income/{source_id}", response_model=IncomeSourceResponse)
async def update_income_source(
    source_id: str,
    updates: IncomeSourceUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update income source"""
    return await IncomeSourceService(db).update_source(
        user.id, source_id, updates.dict(exclude_unset=True)
    )

@router.delete("/income/{source_id}")
async def delete_income_source(
    source_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Deactivate income source"""
    await IncomeSourceService(db).deactivate_source(user.id, source_id)
    return {"message": "Income source removed successfully"}

# Budget categories
@router.get("/categories", response_model=List[BudgetCategoryResponse])
async def get_budget_categories(
    include_inactive: bool = Query(False, description="Include deactivated categories"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get budget categories in display order"""
    query = select(BudgetCategory).where(BudgetCategory.user_id == user.id)
    if not include_inactive:
        query = query.where(BudgetCategory.is_active == True)
    query = query.order_by(BudgetCategory.group_type.asc(), BudgetCategory.sort_order.asc())

    result = await db.execute(query)
    return result.scalars().all()

@router.post("/categories", response_model=BudgetCategoryResponse)
async def create_budget_category(
    category: BudgetCategoryCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a budget category"""
    db_category = BudgetCategory(user_id=user.id, **category.dict())
    db.add(db_category)
    await db.commit()
    await db.refresh(db_category)
    return db_category

@router.patch("/categories/{category_id}", response_model=BudgetCategoryResponse)
async def update_budget_category(
    category_id: str,
    updates: BudgetCategoryUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Rename, regroup, reorder or deactivate a budget category"""
    stmt = select(BudgetCategory).where(
        and_(
            BudgetCategory.id == category_id,
            BudgetCategory.user_id == user.id
        )
    )
    result = await db.execute(stmt)
    category = result.scalar_one_or_none()

    if not category:
        raise HTTPException(status_code=404, detail="Budget category not found")

    for key, value in updates.dict(exclude_unset=True).items():
        setattr(category, key, value)

    await db.commit()
    await db.refresh(category)
    return category

# Budget templates
@router.get("/templates", response_model=List[BudgetTemplateResponse])
async def get_templates(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get active budget templates"""
    return await BudgetTemplateService(db).list_templates(user.id)

@router.post("/templates", response_model=BudgetTemplateResponse)
async def create_template(
    template: BudgetTemplateCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a budget template"""
    return await BudgetTemplateService(db).create_template(user.id, template.dict())

@router.patch("/templates/{template_id}", response_model=BudgetTemplateResponse)
async def update_template(
    template_id: str,
    updates: BudgetTemplateUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update a budget template"""
    return await BudgetTemplateService(db).update_template(
        user.id, template_id, updates.dict(exclude_unset=True)
    )

@router.delete("/templates/{template_id}")
async def delete_template(
    template_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Deactivate a budget template"""
    await BudgetTemplateService(db).delete_template(user.id, template_id)
    return {"message": "Budget template deleted"}
