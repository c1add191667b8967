"""
Budget Rule Service
Allocation rules (needs/wants/savings splits) with a single default per user
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import select, update, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from nuacha.core.budget_utils import allocation_sum_error
from nuacha.core.exceptions import NotFoundError, ValidationError
from nuacha.models.budget import BudgetAllocation

logger = logging.getLogger(__name__)

CONCURRENT_DEFAULT_MESSAGE = "Another rule was made the default at the same time, please try again"
DEFAULT_INDEX_NAME = "uq_budget_allocations_default_per_user"


def _is_default_conflict(error: IntegrityError) -> bool:
    """Unique violation on the one-default-per-user index"""
    text = str(error.orig)
    # SQLite names the columns instead of the index
    return DEFAULT_INDEX_NAME in text or "UNIQUE constraint failed: budget_allocations.user_id" in text


class BudgetRuleService:
    """
    CRUD over allocation rules.

    Making a rule the default clears the flag on the user's other rules in the
    same transaction; the partial unique index on the table rejects the
    loser if two requests race.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_rules(self, user_id: str) -> List[BudgetAllocation]:
        stmt = select(BudgetAllocation).where(
            BudgetAllocation.user_id == user_id
        ).order_by(BudgetAllocation.created_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_active_rule(self, user_id: str) -> Optional[BudgetAllocation]:
        stmt = select(BudgetAllocation).where(
            and_(
                BudgetAllocation.user_id == user_id,
                BudgetAllocation.is_default == True
            )
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def get_rule(self, user_id: str, rule_id: str) -> BudgetAllocation:
        stmt = select(BudgetAllocation).where(
            and_(
                BudgetAllocation.id == rule_id,
                BudgetAllocation.user_id == user_id
            )
        )
        result = await self.db.execute(stmt)
        rule = result.scalar_one_or_none()
        if rule is None:
            raise NotFoundError("Budget rule not found")
        return rule

    async def _unset_defaults(self, user_id: str, exclude_id: Optional[str] = None) -> None:
        stmt = update(BudgetAllocation).where(
            and_(
                BudgetAllocation.user_id == user_id,
                BudgetAllocation.is_default == True
            )
        )
        if exclude_id:
            stmt = stmt.where(BudgetAllocation.id != exclude_id)
        await self.db.execute(stmt.values(is_default=False))

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if not _is_default_conflict(e):
                raise
            logger.warning("Concurrent default rule change rejected")
            raise ValidationError(CONCURRENT_DEFAULT_MESSAGE)

    async def create_rule(self, user_id: str, rule_data: Dict) -> BudgetAllocation:
        if rule_data.get("is_default"):
            await self._unset_defaults(user_id)

        rule = BudgetAllocation(user_id=user_id, **rule_data)
        self.db.add(rule)
        await self._commit()
        await self.db.refresh(rule)

        logger.info("Created budget rule %s for user %s", rule.id, user_id)
        return rule

    async def update_rule(self, user_id: str, rule_id: str, updates: Dict) -> BudgetAllocation:
        rule = await self.get_rule(user_id, rule_id)
        # Every rule column is required, so None means "leave as is"
        updates = {key: value for key, value in updates.items() if value is not None}

        error = allocation_sum_error(
            updates.get("needs_pct", rule.needs_pct),
            updates.get("wants_pct", rule.wants_pct),
            updates.get("savings_pct", rule.savings_pct)
        )
        if error:
            raise ValidationError(error)

        # Clear the other defaults before this row is flushed as default
        if updates.get("is_default"):
            await self._unset_defaults(user_id, exclude_id=rule_id)

        for key, value in updates.items():
            setattr(rule, key, value)

        await self._commit()
        await self.db.refresh(rule)
        return rule

    async def delete_rule(self, user_id: str, rule_id: str) -> None:
        rule = await self.get_rule(user_id, rule_id)
        await self.db.delete(rule)
        await self.db.commit()
        logger.info("Deleted budget rule %s for user %s", rule_id, user_id)
