"""
Unpaid household labor catalogue

Monthly TTD values used to put a price on the work a household does for
itself, filtered by family type.
"""

from typing import List, NamedTuple, Optional, Tuple

FAMILY_TYPES = ("single-mother", "two-parent", "elderly-care", "multi-generational")


class UnpaidLaborCategory(NamedTuple):
    id: str
    name: str
    description: str
    default_value: float
    family_types: Tuple[str, ...]
    related_expense_category: Optional[str] = None


UNPAID_LABOR_CATEGORIES: Tuple[UnpaidLaborCategory, ...] = (
    UnpaidLaborCategory(
        "meal-management", "Meal Management",
        "Cooking, meal planning, kitchen cleanup",
        2400, ("single-mother", "two-parent", "multi-generational"), "Groceries",
    ),
    UnpaidLaborCategory(
        "childcare-coordination", "Care Coordination",
        "Childcare (nanny/daycare/babysitting/after-school)",
        5000, ("single-mother", "two-parent"), "Childcare",
    ),
    UnpaidLaborCategory(
        "administrative-work", "Household Admin",
        "Scheduling repairs, bills, budgeting, supervising workers, making appointments",
        800, ("single-mother", "two-parent", "elderly-care", "multi-generational"),
        "Administrative services",
    ),
    UnpaidLaborCategory(
        "transportation-services", "School Transportation",
        "School transportation (bus fees)",
        800, ("single-mother", "two-parent"), "Public transportation",
    ),
    UnpaidLaborCategory(
        "educational-support", "Tutoring & Homework Help",
        "Reading, writing, test prep (SCA, CSEC)",
        1600, ("single-mother", "two-parent"), "Extracurricular activities",
    ),
    UnpaidLaborCategory(
        "emotional-mental-load", "Emotional Support / Mental Load",
        "Being a sounding board, nurturing relationships, managing invisible labor",
        1000, ("single-mother", "two-parent", "elderly-care", "multi-generational"),
        "Mental health services",
    ),
    UnpaidLaborCategory(
        "event-coordination", "Event Coordination",
        "Planning celebrations, managing family events",
        400, ("single-mother", "two-parent", "multi-generational"), "Events & tickets",
    ),
    UnpaidLaborCategory(
        "shopping-errands", "Shopping & Errands",
        "Grocery shopping, pharmacy, post office",
        800, ("single-mother", "two-parent", "elderly-care", "multi-generational"), "Groceries",
    ),
    UnpaidLaborCategory(
        "cleaning-housekeeping", "Cleaning & Housekeeping",
        "Cleaning & Housekeeping (routine)",
        1200, ("single-mother", "two-parent", "multi-generational"), "Housekeeper",
    ),
    UnpaidLaborCategory(
        "laundry", "Laundry", "Laundry",
        400, ("single-mother", "two-parent", "multi-generational"), "Laundry",
    ),
    UnpaidLaborCategory(
        "pet-care", "Pet Care",
        "Pet food & supplies / Vet visits & vaccinations",
        650, ("single-mother", "two-parent", "multi-generational"), "Pet food & supplies",
    ),
    UnpaidLaborCategory(
        "deep-cleaning", "Deep Cleaning", "Deep cleaning / one-off cleans",
        500, ("single-mother", "two-parent", "multi-generational"), "Housekeeper",
    ),
    UnpaidLaborCategory(
        "elderly-care-coordination", "Elderly Care Coordination",
        "Medical coordination, mobility assistance, daily care",
        3000, ("elderly-care", "multi-generational"), "Elderly Care / Support",
    ),
)


def get_unpaid_labor_for_family_type(family_type: str) -> List[UnpaidLaborCategory]:
    return [
        category for category in UNPAID_LABOR_CATEGORIES
        if family_type in category.family_types
    ]


def get_total_unpaid_labor_value(family_type: str) -> float:
    return sum(category.default_value for category in get_unpaid_labor_for_family_type(family_type))
