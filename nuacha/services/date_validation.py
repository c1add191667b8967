"""
Receipt Date Validation
Scores how plausible a date read from a receipt is and substitutes a
fallback when no usable date was found.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

DateInput = Union[date, datetime, str, None]

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
# Formats tried after plain YYYY-MM-DD
_FALLBACK_FORMATS = ("%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M:%S.%f", "%d/%m/%Y", "%m/%d/%Y", "%d-%m-%Y")


@dataclass
class DateValidationResult:
    is_valid: bool
    confidence: float
    fallback_used: bool
    corrected_date: Optional[datetime] = None
    issues: List[str] = field(default_factory=list)


def parse_local_date(value: str) -> Optional[datetime]:
    """Parse a receipt date string as a naive local datetime"""
    value = value.strip()
    match = _ISO_DATE.match(value)
    if match:
        year, month, day = (int(part) for part in match.groups())
        try:
            return datetime(year, month, day)
        except ValueError:
            return None

    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    return parsed.replace(tzinfo=None)


def _years_before(moment: datetime, years: int) -> datetime:
    try:
        return moment.replace(year=moment.year - years)
    except ValueError:
        # 29 February
        return moment.replace(year=moment.year - years, day=28)


def _one_month_after(moment: datetime) -> datetime:
    year, month = (moment.year + 1, 1) if moment.month == 12 else (moment.year, moment.month + 1)
    day = moment.day
    while True:
        try:
            return moment.replace(year=year, month=month, day=day)
        except ValueError:
            day -= 1


def validate_and_correct_ocr_date(
    date_input: DateInput,
    image_timestamp: Optional[datetime] = None,
    now: Optional[datetime] = None
) -> DateValidationResult:
    """
    Validate a date extracted by OCR.

    Missing dates fall back to the image timestamp (or now) with confidence
    0.3, unparseable ones with 0.2. Otherwise confidence starts at 1.0 and is
    reduced for dates more than five years old (-0.3), more than a month in
    the future (-0.4) or more than 30 days away from the image timestamp
    (-0.2), then clamped to [0.1, 1.0]. The date is always accepted.
    """
    now = now or datetime.now()
    fallback_date = image_timestamp or now

    if not date_input:
        logger.info("No receipt date provided, using fallback")
        return DateValidationResult(
            is_valid=True,
            confidence=0.3,
            fallback_used=True,
            corrected_date=fallback_date,
            issues=["No date detected in receipt, using current date"]
        )

    if isinstance(date_input, datetime):
        working_date = date_input.replace(tzinfo=None)
    elif isinstance(date_input, date):
        working_date = datetime(date_input.year, date_input.month, date_input.day)
    else:
        working_date = parse_local_date(date_input)

    if working_date is None:
        logger.info("Invalid receipt date %r, using fallback", date_input)
        return DateValidationResult(
            is_valid=True,
            confidence=0.2,
            fallback_used=True,
            corrected_date=fallback_date,
            issues=["Invalid date format detected, using current date"]
        )

    issues = []
    confidence = 1.0
    today = datetime(now.year, now.month, now.day)

    if working_date < _years_before(today, 5):
        issues.append("Date seems too old (more than 5 years ago)")
        confidence -= 0.3

    if working_date > _one_month_after(today):
        issues.append("Date is in the future")
        confidence -= 0.4

    if image_timestamp is not None:
        difference = abs(working_date - image_timestamp.replace(tzinfo=None))
        if difference > timedelta(days=30):
            issues.append("Date differs significantly from when image was taken")
            confidence -= 0.2

    confidence = round(max(0.1, min(1.0, confidence)), 2)

    logger.debug(
        "Date validation result: %s, confidence: %s, issues: %d",
        working_date.isoformat(), confidence, len(issues)
    )

    return DateValidationResult(
        is_valid=True,
        confidence=confidence,
        fallback_used=False,
        corrected_date=working_date,
        issues=issues
    )
