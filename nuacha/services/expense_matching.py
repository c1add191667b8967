"""
Expense to budget category matching
"""

from typing import Any, Iterable, Optional


def _field(obj: Any, *names: str) -> Any:
    """Read the first present field from a mapping or an object"""
    for name in names:
        if isinstance(obj, dict):
            value = obj.get(name)
        else:
            value = getattr(obj, name, None)
        if value:
            return value
    return None


def match_expense_to_category(expense: Any, categories: Iterable[Any]) -> Optional[Any]:
    """
    Find the category an expense belongs to.

    Tried in order:
    1. ``expense.category`` as a category id
    2. ``expense.budget_category_id`` (or ``budgetCategoryId``) as a category id
    3. ``expense.category`` as a category name (exact match)

    Expenses and categories may be ORM rows, pydantic models or plain dicts.
    Names are not unique across families, so the name tier can pick the
    wrong family's category.
    """
    categories = list(categories)
    category_ref = _field(expense, "category")
    budget_category_id = _field(expense, "budget_category_id", "budgetCategoryId")

    if category_ref:
        for category in categories:
            if _field(category, "id") == category_ref:
                return category

    if budget_category_id:
        for category in categories:
            if _field(category, "id") == budget_category_id:
                return category

    if category_ref:
        for category in categories:
            if _field(category, "name") == category_ref:
                return category

    return None
