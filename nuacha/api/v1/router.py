"""
API v1 Router
"""

from fastapi import APIRouter
from nuacha.api.v1.endpoints import users, families, expenses, budget, categories, receipts

api_router = APIRouter()

api_router.include_router(
    users.router,
    prefix="/users",
    tags=["users"]
)

api_router.include_router(
    families.router,
    prefix="/families",
    tags=["families"]
)

api_router.include_router(
    expenses.router,
    prefix="/expenses",
    tags=["expenses"]
)

api_router.include_router(
    budget.router,
    prefix="/budget",
    tags=["budget"]
)

api_router.include_router(
    categories.router,
    prefix="/categories",
    tags=["categories"]
)

api_router.include_router(
    receipts.router,
    tags=["receipts"]
)
