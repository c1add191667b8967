"""
Canonical 12-category taxonomy

Expense categories are seeded per family from CATEGORY_SEEDS; budget
categories are created per user from DEFAULT_BUDGET_CATEGORIES.
"""

import re
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Tuple

NEEDS = "needs"
WANTS = "wants"
SAVINGS = "savings"
BUDGET_GROUPS = (NEEDS, WANTS, SAVINGS)

SEED_COLOR = "#5A7684"


class CategorySeed(NamedTuple):
    name: str
    group: str
    children: Tuple["CategorySeed", ...] = ()


def _seed(name: str, group: str, *children: Tuple[str, str]) -> CategorySeed:
    return CategorySeed(name, group, tuple(CategorySeed(n, g) for n, g in children))


CATEGORY_SEEDS: Tuple[CategorySeed, ...] = (
    _seed(
        "Housing & Utilities", NEEDS,
        ("Rent / Mortgage", NEEDS),
        ("Electricity", NEEDS),
        ("Water & Sewer", NEEDS),
        ("Gas", NEEDS),
        ("Internet / Wi-Fi", NEEDS),
        ("Mobile Phone Service", NEEDS),
        ("Home Phone Service", NEEDS),
        ("Cable / Streaming services", WANTS),
        ("Garbage collection", NEEDS),
    ),
    _seed(
        "Caregiving & Medical", NEEDS,
        ("Day nurse", NEEDS),
        ("Night nurse", NEEDS),
        ("Doctor visits", NEEDS),
        ("Specialist visits", NEEDS),
        ("Medical tests", NEEDS),
        ("Medication", NEEDS),
        ("Medical supplies", NEEDS),
        ("Elderly Care / Support", NEEDS),
    ),
    _seed(
        "Household Operations", NEEDS,
        ("Housekeeper", WANTS),
        ("Garden services", WANTS),
        ("Pool maintenance", WANTS),
        ("Pest control", NEEDS),
        ("Laundry", NEEDS),
        ("Household repairs", NEEDS),
        ("Appliance repairs", NEEDS),
    ),
    _seed(
        "Groceries & Household Supplies", NEEDS,
        ("Groceries", NEEDS),
        ("Special Dietary Needs (Formula, Baby Food)", NEEDS),
        ("Pet food & supplies", NEEDS),
        ("Toiletries", NEEDS),
        ("Paper goods", NEEDS),
    ),
    _seed(
        "Transportation", NEEDS,
        ("Fuel", NEEDS),
        ("Taxi / rideshare", NEEDS),
        ("Public transportation", NEEDS),
        ("Vehicle maintenance", NEEDS),
        ("Vehicle insurance", NEEDS),
        ("Vehicle loan payment", NEEDS),
    ),
    _seed(
        "Insurance & Financial", NEEDS,
        ("Health insurance", NEEDS),
        ("Dental insurance", NEEDS),
        ("Life insurance", NEEDS),
        ("Home insurance", NEEDS),
        ("Other insurance", NEEDS),
        ("Loan repayments", NEEDS),
        ("Student loan payments", NEEDS),
        ("Property taxes", NEEDS),
        ("Savings", SAVINGS),
        ("Investments", SAVINGS),
    ),
    _seed(
        "Personal Care & Wellness", WANTS,
        ("Vision care (glasses, contacts, exams)", NEEDS),
        ("Haircuts & grooming", WANTS),
        ("Spa & massage", WANTS),
        ("Gym membership", WANTS),
        ("Vitamins & supplements", WANTS),
    ),
    _seed(
        "Education & Child Expenses", NEEDS,
        ("School fees", NEEDS),
        ("School lunches / meal programs", NEEDS),
        ("School transportation (bus fees)", NEEDS),
        ("Books & stationery", NEEDS),
        ("Extracurricular activities", WANTS),
        ("School uniforms", NEEDS),
        ("Childcare", NEEDS),
    ),
    _seed(
        "Entertainment & Leisure", WANTS,
        ("Dining out", WANTS),
        ("Subscriptions", WANTS),
        ("Events & tickets", WANTS),
        ("Hobbies & crafts", WANTS),
    ),
    _seed(
        "Gifts & Special Occasions", WANTS,
        ("Birthday gifts", WANTS),
        ("Holiday gifts", WANTS),
        ("Anniversaries", WANTS),
        ("Weddings & celebrations", WANTS),
    ),
    _seed(
        "Travel & Holidays", WANTS,
        ("Flights & transportation", WANTS),
        ("Accommodation", WANTS),
        ("Travel insurance", WANTS),
        ("Activities & tours", WANTS),
    ),
    _seed(
        "Miscellaneous", NEEDS,
        ("Emergency expenses", NEEDS),
        ("Donations & charity", WANTS),
        ("Legal fees", NEEDS),
        ("Bank fees", NEEDS),
        ("Unplanned purchases", WANTS),
    ),
)

# A family that has any of these has already been synced
SYNC_MARKER_NAMES = (
    "Education & Child Expenses",
    "Housing & Utilities",
    "Caregiving & Medical",
)

DEFAULT_BUDGET_CATEGORIES: List[Tuple[str, str, int]] = [
    (seed.name, seed.group, index)
    for index, seed in enumerate(CATEGORY_SEEDS, start=1)
] + [
    ("Savings", SAVINGS, len(CATEGORY_SEEDS) + 1),
    ("Investments", SAVINGS, len(CATEGORY_SEEDS) + 2),
]

_NEEDS_PATTERN = re.compile(
    r"rent|mortgage|electricity|water|sewer|gas|internet|wifi|phone|mobile|garbage|"
    r"day nurse|night nurse|doctor|specialist|medical|medication|medicine|pest control|"
    r"laundry|household repairs|appliance repairs|groceries|pet food|toiletries|paper goods|"
    r"fuel|taxi|rideshare|public transportation|vehicle maintenance|vehicle insurance|"
    r"vehicle loan|health insurance|dental insurance|life insurance|home insurance|"
    r"loan repayments|student loan|property tax|emergency|legal fees|bank fees|school fees|"
    r"school lunch|school transport|books|stationery|school uniforms|childcare|vision care|"
    r"glasses|contacts|elderly care|special dietary|formula|baby food"
)
_SAVINGS_PATTERN = re.compile(r"saving|investment|retire|debt")


def iter_seeds(seeds: Iterable[CategorySeed] = CATEGORY_SEEDS) -> Iterator[CategorySeed]:
    """Walk the seed tree depth-first, parents before children"""
    for seed in seeds:
        yield seed
        yield from iter_seeds(seed.children)


def seed_names() -> List[str]:
    return [seed.name for seed in iter_seeds()]


_CANONICAL_GROUPS: Dict[str, str] = {seed.name.lower(): seed.group for seed in iter_seeds()}


def canonical_group(name: str) -> Optional[str]:
    return _CANONICAL_GROUPS.get(name.strip().lower())


def determine_group_from_name(name: str) -> str:
    """
    Decide the budget group for a category name.

    Canonical names keep the group they are seeded with; anything else is
    classified by keyword, defaulting to wants.
    """
    group = canonical_group(name)
    if group:
        return group

    lowered = name.lower()
    if _NEEDS_PATTERN.search(lowered):
        return NEEDS
    if _SAVINGS_PATTERN.search(lowered):
        return SAVINGS
    return WANTS


def needs_sync(category_names: Iterable[str]) -> bool:
    """
    True when a family has categories but none from the canonical structure.

    Detection is a substring match against the marker names, so renaming all
    three markers makes a synced family look unsynced again.
    """
    names = list(category_names)
    if not names:
        return False
    return not any(marker in name for name in names for marker in SYNC_MARKER_NAMES)
