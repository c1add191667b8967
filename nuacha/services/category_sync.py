"""
Category Synchronizer
Brings families onto the canonical 12-category structure and attaches
their expenses to the matching budget categories.
"""

import logging
from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nuacha.config import settings
from nuacha.core.exceptions import describe_failure
from nuacha.data.category_seeds import needs_sync
from nuacha.models.category import Category
from nuacha.services import category_maintenance

logger = logging.getLogger(__name__)


class CategorySynchronizer:
    """
    Runs the three sync stages for one family or many.

    For one family the stages share a transaction: either all of them are
    committed or none are. Bulk sync commits family by family, so a failing
    family is skipped without undoing the others.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def needs_sync(self, family_id: str) -> bool:
        stmt = select(Category.name).where(Category.family_id == family_id)
        result = await self.db.execute(stmt)
        return needs_sync(result.scalars().all())

    async def _sync_family(self, user_id: str, family_id: str) -> Dict:
        seeded = await category_maintenance.seed_recommended_expense_categories(self.db, family_id)
        counts = await category_maintenance.sync_expense_to_budget_categories(self.db, user_id, family_id)
        counts["categories_seeded"] = seeded
        return counts

    async def sync_categories_for_family(self, user_id: str, family_id: str) -> Dict:
        try:
            defaults_created = await category_maintenance.ensure_budget_defaults(self.db, user_id)
            counts = await self._sync_family(user_id, family_id)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.exception("Error syncing categories for family %s", family_id)
            return {
                "success": False,
                "message": "Failed to sync categories",
                "description": describe_failure(
                    e,
                    "You do not have permission to sync categories for this family.",
                    "Database permission error. Please check that you own this family."
                ),
                "error": str(e)
            }

        logger.info("Synced categories for family %s: %s", family_id, counts)
        return {
            "success": True,
            "message": "Categories synced successfully",
            "description": "The new 12-category structure is now available for this family.",
            "budget_categories_created": defaults_created + counts["budget_categories_created"],
            "categories_seeded": counts["categories_seeded"],
            "expenses_mapped": counts["expenses_mapped"],
            "refresh_after_ms": settings.SYNC_REFRESH_DELAY_MS
        }

    async def sync_categories_for_all_families(self, user_id: str, family_ids: List[str]) -> Dict:
        if not family_ids:
            return {
                "success": False,
                "message": "No families found to sync",
                "success_count": 0,
                "error_count": 0,
                "failed_family_ids": []
            }

        try:
            await category_maintenance.ensure_budget_defaults(self.db, user_id)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.exception("Error ensuring budget defaults for user %s", user_id)
            return {
                "success": False,
                "message": "Failed to sync categories",
                "description": describe_failure(
                    e, "You do not have permission to sync categories for one or more families."
                ),
                "success_count": 0,
                "error_count": len(family_ids),
                "failed_family_ids": list(family_ids),
                "error": str(e)
            }

        success_count = 0
        failed: List[str] = []
        for family_id in family_ids:
            try:
                await self._sync_family(user_id, family_id)
                await self.db.commit()
                success_count += 1
            except Exception:
                await self.db.rollback()
                logger.exception("Error syncing family %s", family_id)
                failed.append(family_id)

        if success_count == 0:
            return {
                "success": False,
                "message": "Failed to sync any families",
                "description": "Please check that you have permission to modify these families.",
                "success_count": 0,
                "error_count": len(failed),
                "failed_family_ids": failed
            }

        if failed:
            description = f"{len(failed)} families had errors and were skipped."
        else:
            description = "The new category structure is now available."

        return {
            "success": True,
            "message": f"Categories synced for {success_count} families",
            "description": description,
            "success_count": success_count,
            "error_count": len(failed),
            "failed_family_ids": failed,
            "refresh_after_ms": settings.SYNC_REFRESH_DELAY_MS
        }
