"""
Category Cleanup Service
Runs the category maintenance procedures one at a time or as a chain.
"""

import logging
from typing import Dict

from sqlalchemy.ext.asyncio import AsyncSession

from nuacha.config import settings
from nuacha.core.exceptions import describe_failure
from nuacha.services import category_maintenance

logger = logging.getLogger(__name__)


class CategoryCleanup:
    """
    Individual steps commit on success and roll back and re-raise on
    failure. The comprehensive chain runs every stage in one transaction
    and reports failures as a message instead of raising.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def validate_categories(self, user_id: str) -> Dict:
        issues = await category_maintenance.validate_categories(self.db, user_id)
        if issues:
            message = f"Found {len(issues)} category issues"
        else:
            message = "No category validation issues found"
        return {"issues": issues, "message": message}

    async def run_category_cleanup(self, user_id: str) -> Dict:
        try:
            result = await category_maintenance.cleanup_duplicate_categories_advanced(self.db, user_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.exception("Error running category cleanup for user %s", user_id)
            raise
        result["refresh_after_ms"] = settings.CLEANUP_REFRESH_DELAY_MS if result["duplicates_removed"] else 0
        return result

    async def fix_orphaned_references(self, user_id: str) -> Dict:
        try:
            mapped = await category_maintenance.map_all_expenses_to_budget_categories(self.db, user_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.exception("Error fixing orphaned references for user %s", user_id)
            raise
        return {"expenses_mapped": mapped, "message": "Fixed orphaned category references"}

    async def ensure_budget_categories(self, user_id: str) -> Dict:
        try:
            created = await category_maintenance.ensure_user_budget_categories(self.db, user_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.exception("Error ensuring budget categories for user %s", user_id)
            raise
        return {"budget_categories_created": created, "message": "Budget categories ensured"}

    async def run_comprehensive_cleanup(self, user_id: str) -> Dict:
        """
        Deduplicate, reclassify, ensure budget categories and map orphaned
        expenses, in that order. The first failing stage aborts the chain.
        """
        try:
            cleanup = await category_maintenance.cleanup_duplicate_categories_advanced(self.db, user_id)
            logger.debug("Cleanup result: %s", cleanup)

            reclassify = await category_maintenance.reclassify_categories(self.db, user_id)
            logger.debug("Reclassify result: %s", reclassify)

            created = await category_maintenance.ensure_user_budget_categories(self.db, user_id)
            mapped = await category_maintenance.map_all_expenses_to_budget_categories(self.db, user_id)

            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.exception("Error during comprehensive cleanup for user %s", user_id)
            return {
                "success": False,
                "message": "Failed to clean up categories",
                "description": describe_failure(
                    e,
                    "You do not have permission to clean up categories.",
                    "Database permission error. Please check your access rights."
                ),
                "error": str(e)
            }

        duplicates_removed = cleanup["duplicates_removed"]
        categories_reclassified = reclassify["categories_reclassified"]

        return {
            "success": True,
            "message": "Categories cleaned up successfully!",
            "description": (
                f"Removed {duplicates_removed} duplicates, reclassified {categories_reclassified} "
                "categories, and mapped expenses to budget categories."
            ),
            "duplicates_removed": duplicates_removed,
            "categories_reclassified": categories_reclassified,
            "budget_categories_created": created,
            "expenses_mapped": mapped,
            "refresh_after_ms": settings.CLEANUP_REFRESH_DELAY_MS
        }
