import asyncio
import os
import tempfile

import pytest

# Settings are read at import time, so point the app at a throwaway database first
_db_dir = tempfile.mkdtemp(prefix="nuacha-tests-")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(_db_dir, "api.db")
os.environ["CREATE_TABLES_ON_STARTUP"] = "true"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import date, datetime

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from nuacha.core.database import Base
from nuacha.models import BudgetCategory, Category, Expense, Family, User


@pytest.fixture
def run_db():
    """
    Run ``scenario(session)`` against a fresh in-memory database and return
    its result. Each call gets its own event loop and schema.
    """
    def run(scenario):
        async def main():
            engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            session_factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
            try:
                async with session_factory() as session:
                    return await scenario(session)
            finally:
                await engine.dispose()

        return asyncio.run(main())

    return run


class Factory:
    """Row builders for service tests; every helper commits"""

    @staticmethod
    async def user(session, email="someone@example.com", full_name="Test User"):
        user = User(email=email, full_name=full_name)
        session.add(user)
        await session.commit()
        return user

    @staticmethod
    async def family(session, user, name="Home"):
        family = Family(user_id=user.id, name=name)
        session.add(family)
        await session.commit()
        return family

    @staticmethod
    async def category(session, family, name, parent=None, created_at=None):
        category = Category(
            family_id=family.id,
            parent_id=parent.id if parent else None,
            name=name,
            created_at=created_at or datetime.utcnow()
        )
        session.add(category)
        await session.commit()
        return category

    @staticmethod
    async def budget_category(session, user, name, group_type, created_at=None, is_active=True):
        category = BudgetCategory(
            user_id=user.id,
            name=name,
            group_type=group_type,
            is_active=is_active,
            created_at=created_at or datetime.utcnow()
        )
        session.add(category)
        await session.commit()
        return category

    @staticmethod
    async def expense(session, family, amount, category, on=None, budget_category=None):
        expense = Expense(
            family_id=family.id,
            amount=amount,
            category=category,
            date=on or date.today(),
            budget_category_id=budget_category.id if budget_category else None
        )
        session.add(expense)
        await session.commit()
        return expense


@pytest.fixture
def factory():
    return Factory
