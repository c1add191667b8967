"""
Category Maintenance Procedures
Server-side implementations of the category upkeep routines: ensuring
default budget categories, seeding the canonical taxonomy, mapping
expenses to budget categories, removing duplicates and reclassifying
groups.

None of these commit. Callers own the transaction so a multi-step
sequence can be applied or rolled back as a whole.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import select, update, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from nuacha.core.database import generate_uuid
from nuacha.core.exceptions import NotFoundError, PermissionDeniedError
from nuacha.data.category_seeds import (
    CATEGORY_SEEDS,
    DEFAULT_BUDGET_CATEGORIES,
    SEED_COLOR,
    CategorySeed,
    determine_group_from_name,
    seed_names,
)
from nuacha.models.category import BudgetCategory, Category
from nuacha.models.expense import Expense
from nuacha.models.family import Family

logger = logging.getLogger(__name__)

SYNC_SORT_ORDER_START = 50


def _name_key(name: str) -> str:
    return name.strip().lower()


async def _family_ids_for_user(
    db: AsyncSession, user_id: str, family_id: Optional[str] = None
) -> List[str]:
    stmt = select(Family.id).where(Family.user_id == user_id)
    if family_id:
        stmt = stmt.where(Family.id == family_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def _family_categories(db: AsyncSession, family_ids: Sequence[str]) -> List[Category]:
    if not family_ids:
        return []
    stmt = select(Category).where(
        Category.family_id.in_(family_ids)
    ).order_by(Category.created_at.asc(), Category.id.asc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def _budget_categories(
    db: AsyncSession, user_id: str, active_only: bool = False
) -> List[BudgetCategory]:
    stmt = select(BudgetCategory).where(BudgetCategory.user_id == user_id)
    if active_only:
        stmt = stmt.where(BudgetCategory.is_active == True)
    stmt = stmt.order_by(BudgetCategory.sort_order.asc(), BudgetCategory.created_at.asc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


def _duplicate_groups(rows: Iterable, key: Callable[[object], Hashable]) -> List[List]:
    """Group rows by key and return only groups with more than one row"""
    groups: Dict[Hashable, List] = {}
    for row in rows:
        groups.setdefault(key(row), []).append(row)
    return [group for group in groups.values() if len(group) > 1]


# Budget categories

async def ensure_user_budget_categories(db: AsyncSession, user_id: str) -> int:
    """
    Create any default budget category the user is missing.

    Names are compared case-insensitively, so running this repeatedly is a
    no-op. Returns the number of categories created.
    """
    existing = {_name_key(category.name) for category in await _budget_categories(db, user_id)}

    created = 0
    for name, group, sort_order in DEFAULT_BUDGET_CATEGORIES:
        if _name_key(name) in existing:
            continue
        db.add(BudgetCategory(
            id=generate_uuid(),
            user_id=user_id,
            name=name,
            group_type=group,
            sort_order=sort_order,
            is_active=True
        ))
        created += 1

    await db.flush()
    if created:
        logger.info("Created %d default budget categories for user %s", created, user_id)
    return created


async def ensure_budget_defaults(db: AsyncSession, user_id: str) -> int:
    """Seed default budget categories only for users who have none at all"""
    stmt = select(func.count(BudgetCategory.id)).where(BudgetCategory.user_id == user_id)
    result = await db.execute(stmt)
    if result.scalar():
        return 0
    return await ensure_user_budget_categories(db, user_id)


async def ensure_budget_category(
    db: AsyncSession,
    user_id: str,
    name: str,
    group: str,
    sort_order: int = 100
) -> Tuple[BudgetCategory, bool]:
    """
    Get or create a budget category by case-insensitive name.

    An existing category in the wrong group is moved to ``group``.
    Returns the category and whether it was created.
    """
    stmt = select(BudgetCategory).where(
        and_(
            BudgetCategory.user_id == user_id,
            func.lower(BudgetCategory.name) == _name_key(name)
        )
    ).limit(1)
    result = await db.execute(stmt)
    category = result.scalar_one_or_none()

    if category is not None:
        if category.group_type != group:
            logger.debug("Moving budget category %r from %s to %s", name, category.group_type, group)
            category.group_type = group
        return category, False

    category = BudgetCategory(
        id=generate_uuid(),
        user_id=user_id,
        name=name,
        group_type=group,
        sort_order=sort_order,
        is_active=True
    )
    db.add(category)
    await db.flush()
    return category, True


# Expense categories

async def seed_recommended_expense_categories(db: AsyncSession, family_id: str) -> int:
    """
    Add the canonical category tree to a family.

    Existing categories are matched by case-insensitive name under the same
    parent. Returns the number of categories created.
    """
    family = await db.get(Family, family_id)
    if family is None:
        raise NotFoundError("Family not found")

    index = {
        (category.parent_id, _name_key(category.name)): category.id
        for category in await _family_categories(db, [family_id])
    }
    created = 0

    def seed_tree(seeds: Sequence[CategorySeed], parent_id: Optional[str]) -> None:
        nonlocal created
        for seed in seeds:
            key = (parent_id, _name_key(seed.name))
            category_id = index.get(key)
            if category_id is None:
                category_id = generate_uuid()
                db.add(Category(
                    id=category_id,
                    family_id=family_id,
                    parent_id=parent_id,
                    name=seed.name,
                    color=SEED_COLOR
                ))
                index[key] = category_id
                created += 1
            if seed.children:
                seed_tree(seed.children, category_id)

    seed_tree(CATEGORY_SEEDS, None)
    await db.flush()

    logger.info("Seeded %d categories for family %s", created, family_id)
    return created


async def sync_expense_to_budget_categories(db: AsyncSession, user_id: str, family_id: str) -> Dict:
    """
    Align a family's categories with the user's budget categories.

    Every family category name and every canonical name gets a budget
    category in the group its name implies, then the family's expenses are
    mapped onto them.
    """
    await ensure_budget_defaults(db, user_id)

    stmt = select(Family).where(and_(Family.id == family_id, Family.user_id == user_id))
    result = await db.execute(stmt)
    if result.scalar_one_or_none() is None:
        raise PermissionDeniedError("You do not have permission to sync categories for this family")

    names: Dict[str, str] = {}
    for category in await _family_categories(db, [family_id]):
        names.setdefault(_name_key(category.name), category.name)
    for name in seed_names():
        names.setdefault(_name_key(name), name)

    created = 0
    for sort_order, name in enumerate(names.values(), start=SYNC_SORT_ORDER_START):
        _, was_created = await ensure_budget_category(
            db, user_id, name, determine_group_from_name(name), sort_order
        )
        created += int(was_created)

    mapped = await map_all_expenses_to_budget_categories(db, user_id, family_id=family_id)

    return {
        "budget_categories_created": created,
        "expenses_mapped": mapped
    }


async def map_all_expenses_to_budget_categories(
    db: AsyncSession, user_id: str, family_id: Optional[str] = None
) -> int:
    """
    Attach expenses to budget categories by name.

    Only expenses with no budget category, or one that no longer exists or is
    inactive, are touched. The name comes from the expense's family category
    (falling back to its parent) or, on legacy rows, from the category field
    itself. Returns the number of expenses mapped.
    """
    family_ids = await _family_ids_for_user(db, user_id, family_id)
    if not family_ids:
        return 0

    active = await _budget_categories(db, user_id, active_only=True)
    active_ids = {category.id for category in active}
    by_name: Dict[str, BudgetCategory] = {}
    for category in active:
        by_name.setdefault(_name_key(category.name), category)

    family_categories = {category.id: category for category in await _family_categories(db, family_ids)}

    result = await db.execute(select(Expense).where(Expense.family_id.in_(family_ids)))
    expenses = result.scalars().all()

    mapped = 0
    for expense in expenses:
        if expense.budget_category_id in active_ids:
            continue

        candidates = [expense.category]
        category = family_categories.get(expense.category)
        if category is not None and category.family_id == expense.family_id:
            candidates = [category.name]
            parent = family_categories.get(category.parent_id)
            if parent is not None:
                candidates.append(parent.name)

        for name in candidates:
            target = by_name.get(_name_key(name or ""))
            if target is not None:
                expense.budget_category_id = target.id
                mapped += 1
                break

    await db.flush()
    logger.info("Mapped %d expenses to budget categories for user %s", mapped, user_id)
    return mapped


# Cleanup

async def cleanup_duplicate_categories_advanced(db: AsyncSession, user_id: str) -> Dict:
    """
    Merge duplicate categories.

    Family categories are duplicates when they share family, parent and
    case-insensitive name; budget categories when they share owner and
    case-insensitive name. The oldest row survives and expenses and child
    categories are repointed to it before the rest are deleted.
    """
    removed = 0
    family_ids = await _family_ids_for_user(db, user_id)

    # Merging parents can turn their children into duplicates, so repeat
    while True:
        groups = _duplicate_groups(
            await _family_categories(db, family_ids),
            key=lambda c: (c.family_id, c.parent_id, _name_key(c.name))
        )
        if not groups:
            break
        for keeper, *duplicates in groups:
            duplicate_ids = [duplicate.id for duplicate in duplicates]
            await db.execute(
                update(Expense)
                .where(and_(Expense.family_id == keeper.family_id, Expense.category.in_(duplicate_ids)))
                .values(category=keeper.id)
            )
            await db.execute(
                update(Category)
                .where(Category.parent_id.in_(duplicate_ids))
                .values(parent_id=keeper.id)
            )
            for duplicate in duplicates:
                await db.delete(duplicate)
            removed += len(duplicates)
        await db.flush()

    budget_rows = sorted(
        await _budget_categories(db, user_id),
        key=lambda c: (not c.is_active, c.created_at or datetime.min, c.id)
    )
    for keeper, *duplicates in _duplicate_groups(budget_rows, key=lambda c: _name_key(c.name)):
        duplicate_ids = [duplicate.id for duplicate in duplicates]
        await db.execute(
            update(Expense)
            .where(Expense.budget_category_id.in_(duplicate_ids))
            .values(budget_category_id=keeper.id)
        )
        for duplicate in duplicates:
            await db.delete(duplicate)
        removed += len(duplicates)
    await db.flush()

    if removed:
        message = f"Removed {removed} duplicate categories"
    else:
        message = "No duplicate categories found"
    logger.info("Duplicate cleanup for user %s: %s", user_id, message)

    return {"duplicates_removed": removed, "message": message}


async def reclassify_categories(db: AsyncSession, user_id: str) -> Dict:
    """Move budget categories whose group disagrees with their name"""
    reclassified = 0
    for category in await _budget_categories(db, user_id):
        group = determine_group_from_name(category.name)
        if category.group_type != group:
            logger.debug("Reclassifying %r: %s -> %s", category.name, category.group_type, group)
            category.group_type = group
            reclassified += 1
    await db.flush()

    return {
        "categories_reclassified": reclassified,
        "message": f"Reclassified {reclassified} categories"
    }


async def validate_categories(db: AsyncSession, user_id: str) -> List[Dict]:
    """Report duplicate categories without changing anything"""
    issues = []

    family_ids = await _family_ids_for_user(db, user_id)
    family_groups = _duplicate_groups(
        await _family_categories(db, family_ids),
        key=lambda c: (c.family_id, c.parent_id, _name_key(c.name))
    )
    budget_groups = _duplicate_groups(
        await _budget_categories(db, user_id),
        key=lambda c: _name_key(c.name)
    )

    for scope, groups in (("family", family_groups), ("budget", budget_groups)):
        for group in groups:
            issues.append({
                "type": "duplicate",
                "scope": scope,
                "message": f'Found {len(group)} categories with name "{group[0].name}"',
                "category_ids": [category.id for category in group]
            })

    return issues
