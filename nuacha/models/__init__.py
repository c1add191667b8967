"""Database models initialization."""

# Import all models to ensure they're registered with SQLAlchemy
from .user import User
from .family import Family
from .category import Category, BudgetCategory
from .expense import Expense
from .budget import IncomeSource, BudgetAllocation, BudgetTemplate

__all__ = [
    "User",
    "Family",
    "Category",
    "BudgetCategory",
    "Expense",
    "IncomeSource",
    "BudgetAllocation",
    "BudgetTemplate"
]
