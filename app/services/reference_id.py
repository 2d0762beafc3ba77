from __future__ import annotations

import secrets
from datetime import datetime, timezone
from typing import Callable, Optional, Union

from app.models.enums import ReportCategory

# Upper-case letters and digits without look-alikes (0/O, 1/I/L).
REFERENCE_ALPHABET = 'ABCDEFGHJKMNPQRSTUVWXYZ23456789'
REFERENCE_CODE_LENGTH = 8

CATEGORY_PREFIXES: dict[ReportCategory, str] = {
    ReportCategory.FRAUD: 'FR',
    ReportCategory.PHISHING: 'PH',
    ReportCategory.HARASSMENT: 'HR',
    ReportCategory.DEEPFAKE: 'DF',
}

ReferenceFactory = Callable[[ReportCategory], str]


def _random_code(length: int = REFERENCE_CODE_LENGTH) -> str:
    return ''.join(secrets.choice(REFERENCE_ALPHABET) for _ in range(length))


def generate_reference_id(
    category: Union[ReportCategory, str],
    now: Optional[datetime] = None,
) -> str:
    current = now or datetime.now(timezone.utc)
    prefix = CATEGORY_PREFIXES[ReportCategory(category)]
    return f"{prefix}-{current.year:04d}-{_random_code()}"


def is_reference_id(value: str) -> bool:
    parts = value.split('-')
    if len(parts) != 3:
        return False
    prefix, year, code = parts
    return (
        prefix in CATEGORY_PREFIXES.values()
        and len(year) == 4
        and year.isdigit()
        and len(code) == REFERENCE_CODE_LENGTH
        and all(char in REFERENCE_ALPHABET for char in code)
    )
