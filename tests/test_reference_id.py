from datetime import datetime, timezone

import pytest

from app.models.enums import ReportCategory
from app.services.reference_id import (
    REFERENCE_ALPHABET,
    generate_reference_id,
    is_reference_id,
)


@pytest.mark.parametrize(
    'category, prefix',
    [
        (ReportCategory.FRAUD, 'FR'),
        (ReportCategory.PHISHING, 'PH'),
        (ReportCategory.HARASSMENT, 'HR'),
        (ReportCategory.DEEPFAKE, 'DF'),
    ],
)
def test_reference_id_uses_category_prefix_and_year(category, prefix):
    now = datetime(2025, 3, 14, tzinfo=timezone.utc)
    reference = generate_reference_id(category, now=now)
    assert reference.startswith(f"{prefix}-2025-")
    assert is_reference_id(reference)


def test_reference_code_avoids_ambiguous_characters():
    for _ in range(50):
        code = generate_reference_id('fraud').split('-')[2]
        assert len(code) == 8
        assert all(char in REFERENCE_ALPHABET for char in code)
        assert not set(code) & set('01ILO')


@pytest.mark.parametrize(
    'value',
    ['', 'FR-2025', 'XX-2025-ABCDEFGH', 'FR-25-ABCDEFGH', 'FR-2025-ABCDEFG', 'FR-2025-ABCDEFG0', 'fr-2025-abcdefgh'],
)
def test_is_reference_id_rejects_malformed_values(value):
    assert not is_reference_id(value)
