"""
Budget arithmetic helpers
"""

from datetime import date, datetime
from typing import Optional, Union

FREQUENCIES = ("weekly", "fortnightly", "monthly", "yearly")

# Monthly multipliers for each income frequency
_MONTHLY_FACTORS = {
    "weekly": 4.33,
    "fortnightly": 2.165,
    "monthly": 1.0,
    "yearly": 1 / 12,
}

def to_monthly(amount: float, frequency: str) -> float:
    """
    Convert an amount paid at ``frequency`` to its monthly equivalent.
    Unknown frequencies are treated as monthly.
    """
    return amount * _MONTHLY_FACTORS.get(frequency, 1.0)

def calculate_variance_pct(actual: float, target: float) -> float:
    """Percentage variance of actual from target"""
    if target == 0:
        return 0.0
    return ((actual - target) / target) * 100

def get_variance_status(variance: float) -> str:
    if variance > 5:
        return "over"
    if variance < -5:
        return "under"
    return "on-track"

def format_ttd(amount: float) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}TT${abs(amount):,.2f}"

def first_day_of_month(value: Union[date, datetime]) -> date:
    return date(value.year, value.month, 1)

def last_day_of_month(value: Union[date, datetime]) -> date:
    if value.month == 12:
        return date(value.year, 12, 31)
    return date.fromordinal(date(value.year, value.month + 1, 1).toordinal() - 1)

PERCENT_TOLERANCE = 0.01

def allocation_sum_error(needs_pct: float, wants_pct: float, savings_pct: float) -> Optional[str]:
    """Error message when an allocation split does not add up to 100%"""
    total = needs_pct + wants_pct + savings_pct
    if abs(total - 100) > PERCENT_TOLERANCE:
        return f"Needs, wants and savings must add up to 100% (got {total:g}%)"
    return None
