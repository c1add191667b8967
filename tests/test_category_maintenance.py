from datetime import datetime, timedelta

import pytest
from sqlalchemy import func, select

from nuacha.core.exceptions import NotFoundError, PermissionDeniedError
from nuacha.data.category_seeds import DEFAULT_BUDGET_CATEGORIES, iter_seeds, seed_names
from nuacha.models import BudgetCategory, Category, Expense
from nuacha.services import category_maintenance

async def count(session, model, *criteria):
    result = await session.execute(select(func.count(model.id)).where(*criteria))
    return result.scalar()

def all_budget_names():
    names = {name.lower() for name in seed_names()}
    names.update(name.lower() for name, _, _ in DEFAULT_BUDGET_CATEGORIES)
    return names

def test_ensure_user_budget_categories_is_idempotent(run_db, factory):
    async def scenario(session):
        user = await factory.user(session)
        await factory.budget_category(session, user, "GROCERIES & HOUSEHOLD SUPPLIES", "needs")

        created = await category_maintenance.ensure_user_budget_categories(session, user.id)
        assert created == len(DEFAULT_BUDGET_CATEGORIES) - 1

        again = await category_maintenance.ensure_user_budget_categories(session, user.id)
        assert again == 0
        assert await count(session, BudgetCategory, BudgetCategory.user_id == user.id) == len(DEFAULT_BUDGET_CATEGORIES)

    run_db(scenario)

def test_ensure_budget_defaults_skips_users_with_categories(run_db, factory):
    async def scenario(session):
        user = await factory.user(session)
        await factory.budget_category(session, user, "Rent", "needs")
        assert await category_maintenance.ensure_budget_defaults(session, user.id) == 0

    run_db(scenario)

def test_ensure_budget_category_fixes_group(run_db, factory):
    async def scenario(session):
        user = await factory.user(session)
        existing = await factory.budget_category(session, user, "Rent", "wants")

        category, created = await category_maintenance.ensure_budget_category(session, user.id, "rent", "needs")
        assert created == False
        assert category.id == existing.id
        assert category.group_type == "needs"

    run_db(scenario)

def test_seed_recommended_expense_categories(run_db, factory):
    async def scenario(session):
        user = await factory.user(session)
        family = await factory.family(session, user)
        # An existing top-level category is reused, not duplicated
        await factory.category(session, family, "housing & utilities")

        total = len(list(iter_seeds()))
        created = await category_maintenance.seed_recommended_expense_categories(session, family.id)
        assert created == total - 1
        assert await count(session, Category, Category.family_id == family.id) == total

        assert await category_maintenance.seed_recommended_expense_categories(session, family.id) == 0

    run_db(scenario)

def test_seed_unknown_family(run_db):
    async def scenario(session):
        with pytest.raises(NotFoundError):
            await category_maintenance.seed_recommended_expense_categories(session, "missing")

    run_db(scenario)

def test_sync_creates_budget_categories_and_maps_expenses(run_db, factory):
    async def scenario(session):
        user = await factory.user(session)
        family = await factory.family(session, user)
        streaming = await factory.category(session, family, "Netflix")
        by_id = await factory.expense(session, family, 45, streaming.id)
        by_name = await factory.expense(session, family, 300, "Groceries")

        result = await category_maintenance.sync_expense_to_budget_categories(session, user.id, family.id)
        assert result["expenses_mapped"] == 2

        names = all_budget_names() | {"netflix"}
        assert await count(session, BudgetCategory, BudgetCategory.user_id == user.id) == len(names)

        netflix = await session.get(BudgetCategory, by_id.budget_category_id)
        assert netflix.name == "Netflix"
        assert netflix.group_type == "wants"
        groceries = await session.get(BudgetCategory, by_name.budget_category_id)
        assert groceries.name == "Groceries"
        assert groceries.group_type == "needs"

    run_db(scenario)

def test_sync_rejects_other_users_family(run_db, factory):
    async def scenario(session):
        owner = await factory.user(session, email="owner@example.com")
        other = await factory.user(session, email="other@example.com")
        family = await factory.family(session, owner)

        with pytest.raises(PermissionDeniedError):
            await category_maintenance.sync_expense_to_budget_categories(session, other.id, family.id)

    run_db(scenario)

def test_map_falls_back_to_parent_name(run_db, factory):
    async def scenario(session):
        user = await factory.user(session)
        family = await factory.family(session, user)
        parent = await factory.category(session, family, "Groceries")
        child = await factory.category(session, family, "Corner shop", parent=parent)
        budget = await factory.budget_category(session, user, "Groceries", "needs")
        expense = await factory.expense(session, family, 80, child.id)

        assert await category_maintenance.map_all_expenses_to_budget_categories(session, user.id) == 1
        assert expense.budget_category_id == budget.id

    run_db(scenario)

def test_map_skips_expenses_with_active_budget_category(run_db, factory):
    async def scenario(session):
        user = await factory.user(session)
        family = await factory.family(session, user)
        dining = await factory.budget_category(session, user, "Dining out", "wants")
        await factory.budget_category(session, user, "Groceries", "needs")
        retired = await factory.budget_category(session, user, "Old groceries", "needs", is_active=False)
        linked = await factory.expense(session, family, 20, "Groceries", budget_category=dining)
        stale = await factory.expense(session, family, 30, "Groceries", budget_category=retired)

        assert await category_maintenance.map_all_expenses_to_budget_categories(session, user.id) == 1
        assert linked.budget_category_id == dining.id
        assert stale.budget_category_id != retired.id

    run_db(scenario)

def test_cleanup_merges_duplicates_and_repoints(run_db, factory):
    async def scenario(session):
        user = await factory.user(session)
        family = await factory.family(session, user)
        earlier = datetime.utcnow() - timedelta(days=2)
        keeper = await factory.category(session, family, "Groceries", created_at=earlier)
        duplicate = await factory.category(session, family, "groceries")
        organic = await factory.category(session, family, "Organic", parent=keeper, created_at=earlier)
        orphan_child = await factory.category(session, family, "organic", parent=duplicate)
        expense = await factory.expense(session, family, 10, duplicate.id)
        child_expense = await factory.expense(session, family, 12, orphan_child.id)

        budget_keeper = await factory.budget_category(session, user, "Rent", "needs", created_at=earlier)
        budget_duplicate = await factory.budget_category(session, user, "RENT", "needs")
        rent_expense = await factory.expense(session, family, 900, "Rent", budget_category=budget_duplicate)

        result = await category_maintenance.cleanup_duplicate_categories_advanced(session, user.id)
        assert result["duplicates_removed"] == 3
        assert result["message"] == "Removed 3 duplicate categories"

        await session.commit()
        for row in (expense, child_expense, rent_expense):
            await session.refresh(row)
        assert expense.category == keeper.id
        assert child_expense.category == organic.id
        assert rent_expense.budget_category_id == budget_keeper.id
        assert await count(session, Category, Category.family_id == family.id) == 2
        assert await count(session, BudgetCategory, BudgetCategory.user_id == user.id) == 1

        again = await category_maintenance.cleanup_duplicate_categories_advanced(session, user.id)
        assert again == {"duplicates_removed": 0, "message": "No duplicate categories found"}

    run_db(scenario)

def test_reclassify_categories(run_db, factory):
    async def scenario(session):
        user = await factory.user(session)
        await factory.budget_category(session, user, "Dining Out", "needs")
        await factory.budget_category(session, user, "Electricity", "needs")
        await factory.budget_category(session, user, "Retirement fund", "wants")

        result = await category_maintenance.reclassify_categories(session, user.id)
        assert result["categories_reclassified"] == 2

    run_db(scenario)

def test_validate_categories_reports_without_changes(run_db, factory):
    async def scenario(session):
        user = await factory.user(session)
        family = await factory.family(session, user)
        await factory.category(session, family, "Fuel")
        await factory.category(session, family, "fuel")
        await factory.budget_category(session, user, "Fuel", "needs")

        issues = await category_maintenance.validate_categories(session, user.id)
        assert len(issues) == 1
        assert issues[0]["scope"] == "family"
        assert len(issues[0]["category_ids"]) == 2
        assert await count(session, Category, Category.family_id == family.id) == 2

    run_db(scenario)
