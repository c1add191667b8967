"""
Category Sync and Cleanup API Endpoints

Sync and comprehensive cleanup always answer 200 with a ``success`` flag and
a message meant to be shown to the user as-is.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional

from nuacha.api.deps import get_db, get_current_user
from nuacha.api.v1.endpoints.families import get_owned_family
from nuacha.models.user import User
from nuacha.models.family import Family
from nuacha.schemas.category import (
    SyncStatusResponse,
    SyncRequest,
    BulkSyncRequest,
    SyncResponse,
    BulkSyncResponse,
    ValidationReport,
    DuplicateCleanupResponse,
    OrphanFixResponse,
    EnsureBudgetCategoriesResponse,
    ComprehensiveCleanupResponse
)
from nuacha.services.category_cleanup import CategoryCleanup
from nuacha.services.category_sync import CategorySynchronizer

router = APIRouter()

@router.get("/sync-status", response_model=SyncStatusResponse)
async def get_sync_status(
    family_id: str = Query(..., description="Family ID"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Whether a family still needs the 12-category structure
    """
    await get_owned_family(family_id, user, db)
    synchronizer = CategorySynchronizer(db)
    return SyncStatusResponse(family_id=family_id, needs_sync=await synchronizer.needs_sync(family_id))

@router.post("/sync", response_model=SyncResponse)
async def sync_family_categories(
    request: SyncRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Sync one family's categories with the user's budget categories
    """
    synchronizer = CategorySynchronizer(db)
    result = await synchronizer.sync_categories_for_family(user.id, request.family_id)
    return SyncResponse(**result)

@router.post("/sync-all", response_model=BulkSyncResponse)
async def sync_all_family_categories(
    request: Optional[BulkSyncRequest] = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Sync several families; without a body every family of the user is synced
    """
    if request is not None:
        family_ids = request.family_ids
    else:
        result = await db.execute(select(Family.id).where(Family.user_id == user.id))
        family_ids = list(result.scalars().all())

    synchronizer = CategorySynchronizer(db)
    result = await synchronizer.sync_categories_for_all_families(user.id, family_ids)
    return BulkSyncResponse(**result)

@router.post("/validate", response_model=ValidationReport)
async def validate_categories(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    List duplicate categories without changing anything
    """
    return ValidationReport(**await CategoryCleanup(db).validate_categories(user.id))

@router.post("/cleanup/duplicates", response_model=DuplicateCleanupResponse)
async def cleanup_duplicates(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Merge duplicate family and budget categories
    """
    return DuplicateCleanupResponse(**await CategoryCleanup(db).run_category_cleanup(user.id))

@router.post("/cleanup/orphans", response_model=OrphanFixResponse)
async def fix_orphaned_references(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Map expenses without a valid budget category
    """
    return OrphanFixResponse(**await CategoryCleanup(db).fix_orphaned_references(user.id))

@router.post("/cleanup/ensure-budget-categories", response_model=EnsureBudgetCategoriesResponse)
async def ensure_budget_categories(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Create any missing default budget categories
    """
    return EnsureBudgetCategoriesResponse(**await CategoryCleanup(db).ensure_budget_categories(user.id))

@router.post("/cleanup/comprehensive", response_model=ComprehensiveCleanupResponse)
async def run_comprehensive_cleanup(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Deduplicate, reclassify, ensure budget categories and map expenses
    """
    return ComprehensiveCleanupResponse(**await CategoryCleanup(db).run_comprehensive_cleanup(user.id))
