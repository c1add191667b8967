import pytest

from nuacha.core.exceptions import NotFoundError, PermissionDeniedError
from nuacha.services.budget_calculator import BudgetCalculator
from nuacha.services.income_sources import IncomeSourceService

def test_income_sources_soft_delete(run_db, factory):
    async def scenario(session):
        user = await factory.user(session)
        service = IncomeSourceService(session)
        salary = await service.create_source(user.id, {"name": "Salary", "frequency": "monthly", "amount_ttd": 6000})
        side = await service.create_source(user.id, {"name": "Tutoring", "frequency": "weekly", "amount_ttd": 500})

        updated = await service.update_source(user.id, side.id, {"amount_ttd": 1000})
        assert updated.amount_ttd == 1000
        assert await BudgetCalculator(session).get_monthly_income(user.id) == pytest.approx(6000 + 4330)

        await service.deactivate_source(user.id, side.id)
        assert [s.id for s in await service.list_sources(user.id)] == [salary.id]
        assert await BudgetCalculator(session).get_monthly_income(user.id) == pytest.approx(6000)

        # Deactivated sources can still be looked up
        assert (await service.get_source(user.id, side.id)).is_active == False

    run_db(scenario)

def test_other_users_source_is_not_found(run_db, factory):
    async def scenario(session):
        owner = await factory.user(session, email="owner@example.com")
        other = await factory.user(session, email="other@example.com")
        source = await IncomeSourceService(session).create_source(owner.id, {"name": "Salary", "amount_ttd": 100})

        with pytest.raises(NotFoundError):
            await IncomeSourceService(session).deactivate_source(other.id, source.id)

    run_db(scenario)

def test_update_ignores_null_for_required_fields(run_db, factory):
    async def scenario(session):
        user = await factory.user(session)
        service = IncomeSourceService(session)
        source = await service.create_source(user.id, {"name": "Salary", "amount_ttd": 100, "notes": "March"})

        updated = await service.update_source(user.id, source.id, {"name": None, "amount_ttd": None, "notes": None})
        assert updated.name == "Salary"
        assert updated.amount_ttd == 100
        # Notes are optional and can be cleared
        assert updated.notes is None

    run_db(scenario)

def test_family_must_belong_to_user(run_db, factory):
    async def scenario(session):
        owner = await factory.user(session, email="owner@example.com")
        other = await factory.user(session, email="other@example.com")
        family = await factory.family(session, owner)
        service = IncomeSourceService(session)

        linked = await service.create_source(owner.id, {"name": "Salary", "amount_ttd": 100, "family_id": family.id})
        assert linked.family_id == family.id

        with pytest.raises(PermissionDeniedError):
            await service.create_source(other.id, {"name": "Salary", "amount_ttd": 100, "family_id": family.id})
        with pytest.raises(NotFoundError):
            await service.create_source(other.id, {"name": "Salary", "amount_ttd": 100, "family_id": "missing"})

        own = await service.create_source(other.id, {"name": "Salary", "amount_ttd": 100})
        with pytest.raises(PermissionDeniedError):
            await service.update_source(other.id, own.id, {"family_id": family.id})

        assert len(await service.list_sources(other.id)) == 1

    run_db(scenario)
