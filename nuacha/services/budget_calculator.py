"""
Budget Calculator Service
Aggregates income, actual expenses and planned template amounts per budget
group and compares them with the active allocation rule
"""

from datetime import date
from typing import Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_
from nuacha.config import settings
from nuacha.core.budget_utils import (
    to_monthly,
    first_day_of_month,
    last_day_of_month,
    calculate_variance_pct,
    get_variance_status,
)
from nuacha.data.category_seeds import BUDGET_GROUPS
from nuacha.models.budget import IncomeSource
from nuacha.models.category import BudgetCategory
from nuacha.models.expense import Expense
from nuacha.models.family import Family
from nuacha.services.budget_rules import BudgetRuleService
from nuacha.services.budget_templates import BudgetTemplateService

def _category_key(name: str) -> str:
    """Template keys are lower_snake_case category names"""
    return "_".join(name.lower().split())

def _percentage(part: float, whole: float) -> float:
    return (part / whole) * 100 if whole > 0 else 0.0

def _comparison(planned: float, actual: float) -> Dict:
    return {
        'planned': round(planned, 2),
        'actual': round(actual, 2),
        'variance': round(actual - planned, 2),
        'percentage_used': round(_percentage(actual, planned), 1),
        'status': get_variance_status(calculate_variance_pct(actual, planned))
    }

class BudgetCalculator:
    """
    Computes the budget summary and the planned-vs-actual variance
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_monthly_income(self, user_id: str) -> float:
        """
        Total of all active income sources converted to monthly amounts
        """
        stmt = select(IncomeSource).where(
            and_(
                IncomeSource.user_id == user_id,
                IncomeSource.is_active == True
            )
        )
        result = await self.db.execute(stmt)
        return sum(
            to_monthly(source.amount_ttd, source.frequency)
            for source in result.scalars().all()
        )

    async def get_budget_categories(self, user_id: str) -> List[BudgetCategory]:
        stmt = select(BudgetCategory).where(
            and_(
                BudgetCategory.user_id == user_id,
                BudgetCategory.is_active == True
            )
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_expenses(self, user_id: str, start: date, end: date) -> List[Expense]:
        """
        Expenses of all the user's families dated within [start, end]
        """
        family_ids = select(Family.id).where(Family.user_id == user_id)
        stmt = select(Expense).where(
            and_(
                Expense.family_id.in_(family_ids),
                Expense.date >= start,
                Expense.date <= end
            )
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_expenses_by_category(self, user_id: str, start: date, end: date) -> Dict[str, float]:
        """
        Sum expenses per budget category id; unmapped expenses are left out
        """
        totals: Dict[str, float] = {}
        for expense in await self.get_expenses(user_id, start, end):
            if expense.budget_category_id:
                totals[expense.budget_category_id] = totals.get(expense.budget_category_id, 0.0) + expense.amount
        return totals

    @staticmethod
    def group_totals(expenses_by_category: Dict[str, float], categories: List[BudgetCategory]) -> Dict[str, float]:
        groups = {group: 0.0 for group in BUDGET_GROUPS}
        category_groups = {category.id: category.group_type for category in categories}
        for category_id, amount in expenses_by_category.items():
            group = category_groups.get(category_id)
            if group in groups:
                groups[group] += amount
        return groups

    async def calculate_summary(self, user_id: str, month: date) -> Dict:
        """
        Budget summary for the month containing ``month``

        Percentages are of total monthly income. Variance is the actual
        percentage minus the rule's target percentage for each group.
        """
        start = first_day_of_month(month)
        end = last_day_of_month(month)

        total_income = await self.get_monthly_income(user_id)
        categories = await self.get_budget_categories(user_id)
        expenses_by_category = await self.get_expenses_by_category(user_id, start, end)
        expenses_by_group = self.group_totals(expenses_by_category, categories)

        rule = await BudgetRuleService(self.db).get_active_rule(user_id)
        if rule:
            rule_name = rule.rule_name
            targets = {'needs': rule.needs_pct, 'wants': rule.wants_pct, 'savings': rule.savings_pct}
        else:
            rule_name = None
            targets = {
                'needs': settings.DEFAULT_NEEDS_PCT,
                'wants': settings.DEFAULT_WANTS_PCT,
                'savings': settings.DEFAULT_SAVINGS_PCT
            }

        template = await BudgetTemplateService(self.db).get_default_template(user_id)
        template_data = (template.template_data or {}) if template else {}
        planned = self._planned_by_group(template_data) if template else None

        by_group = {}
        rule_comparison = {}
        for group in BUDGET_GROUPS:
            actual_pct = _percentage(expenses_by_group[group], total_income)
            by_group[group] = {
                'total': round(expenses_by_group[group], 2),
                'percentage': round(actual_pct, 2),
                'planned': round(planned[group], 2) if planned else None
            }
            rule_comparison[group] = {
                'actual': round(actual_pct, 2),
                'target': targets[group],
                'variance': round(actual_pct - targets[group], 2)
            }

        total_expenses = sum(expenses_by_group.values())

        unpaid_labor_value = None
        if template_data.get('include_unpaid_labor'):
            unpaid_labor_value = round(sum((template_data.get('unpaid_labor') or {}).values()), 2)

        return {
            'month': start,
            'rule_name': rule_name,
            'total_income': round(total_income, 2),
            'total_expenses': round(total_expenses, 2),
            'total_planned_expenses': round(sum(planned.values()), 2) if planned else None,
            'by_group': by_group,
            'surplus': round(total_income - total_expenses, 2),
            'rule_comparison': rule_comparison,
            'unpaid_labor_value': unpaid_labor_value
        }

    @staticmethod
    def _planned_by_group(template_data: Dict) -> Dict[str, float]:
        return {
            group: sum(float(amount) for amount in (template_data.get(group) or {}).values())
            for group in BUDGET_GROUPS
        }

    async def calculate_variance(self, user_id: str, start: date, end: Optional[date] = None) -> Optional[Dict]:
        """
        Planned (default template) vs actual for income, groups, categories
        and the overall surplus. Returns None when the user has no template.
        """
        template = await BudgetTemplateService(self.db).get_default_template(user_id)
        if not template:
            return None

        end = end or last_day_of_month(start)
        template_data = template.template_data or {}

        actual_income = await self.get_monthly_income(user_id)
        categories = await self.get_budget_categories(user_id)
        expenses_by_category = await self.get_expenses_by_category(user_id, start, end)
        expenses_by_group = self.group_totals(expenses_by_category, categories)
        total_actual_expenses = sum(expenses_by_category.values())

        planned_by_group = self._planned_by_group(template_data)
        planned_income = template.total_monthly_income or 0.0
        total_planned_expenses = sum(planned_by_group.values())

        by_category = {}
        for category in categories:
            planned_amount = float((template_data.get(category.group_type) or {}).get(_category_key(category.name), 0))
            actual_amount = expenses_by_category.get(category.id, 0.0)
            if planned_amount > 0 or actual_amount > 0:
                by_category[category.id] = _comparison(planned_amount, actual_amount)

        return {
            'template_id': template.id,
            'start': start,
            'end': end,
            'total_income': _comparison(planned_income, actual_income),
            'by_group': {
                group: _comparison(planned_by_group[group], expenses_by_group[group])
                for group in BUDGET_GROUPS
            },
            'by_category': by_category,
            'overall_surplus': _comparison(
                planned_income - total_planned_expenses,
                actual_income - total_actual_expenses
            )
        }
