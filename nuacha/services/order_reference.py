"""
Order reference numbers for subscription and download purchases
Format: NU-YYMMDD-XXXXX
"""

import re
import secrets
from datetime import datetime
from typing import Optional

ORDER_PREFIX = "NU"
# Excludes I, O, 0 and 1
ORDER_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ORDER_SUFFIX_LENGTH = 5

_ORDER_REFERENCE = re.compile(r"^NU-\d{6}-[A-Z0-9]{5}$")

def generate_order_reference(now: Optional[datetime] = None) -> str:
    """Generate a reference such as NU-251213-AB7XK"""
    now = now or datetime.now()
    suffix = "".join(secrets.choice(ORDER_ALPHABET) for _ in range(ORDER_SUFFIX_LENGTH))
    return f"{ORDER_PREFIX}-{now.strftime('%y%m%d')}-{suffix}"

def is_valid_order_reference(reference: str) -> bool:
    return bool(_ORDER_REFERENCE.match(reference))
