"""Generated sample transactions for accounts that start empty.

Roughly every other day over the last ``days`` days gets one transaction;
about 15% of them are income. Pass ``seed`` for reproducible output.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

import numpy as np

try:
    from .models import CATEGORIES, TransactionDraft, TransactionType
except ImportError:
    from models import CATEGORIES, TransactionDraft, TransactionType

EXPENSE_DESCRIPTIONS: Dict[str, Sequence[str]] = {
    'food': ('Grocery shopping', 'Restaurant dinner', 'Coffee', 'Lunch', 'Food delivery'),
    'transport': ('Gas', 'Uber ride', 'Public transport', 'Parking', 'Car maintenance'),
    'shopping': ('Clothing', 'Electronics', 'Home decor', 'Online shopping', 'Gifts'),
    'entertainment': ('Movie tickets', 'Concert', 'Streaming service', 'Gaming', 'Books'),
    'bills': ('Internet bill', 'Phone bill', 'Electricity', 'Water bill', 'Rent'),
    'health': ('Gym membership', 'Pharmacy', 'Doctor visit', 'Health insurance', 'Supplements'),
    'education': ('Online course', 'Books', 'Tuition', 'Certification', 'Workshop'),
    'travel': ('Flight tickets', 'Hotel', 'Vacation', 'Travel insurance', 'Tour package'),
    'savings': ('Emergency fund', 'Investment', 'Retirement', 'Fixed deposit', 'Mutual fund'),
    'other': ('Miscellaneous', 'Donation', 'Gift', 'Subscription', 'Other expense'),
}

INCOME_DESCRIPTIONS: Sequence[str] = (
    'Salary', 'Freelance work', 'Bonus', 'Investment return', 'Side project',
)

DAILY_PROBABILITY = 0.5
INCOME_PROBABILITY = 0.15


def generate_sample_transactions(
    today: Optional[date] = None,
    days: int = 90,
    seed: Optional[int] = None,
) -> List[TransactionDraft]:
    """Build sample drafts for the ``days`` days ending at ``today``, newest first."""
    today = today or date.today()
    rng = np.random.default_rng(seed)
    drafts: List[TransactionDraft] = []

    for offset in range(days):
        if rng.random() <= DAILY_PROBABILITY:
            continue
        day = today - timedelta(days=offset)
        category = CATEGORIES[int(rng.integers(len(CATEGORIES)))]
        is_income = rng.random() < INCOME_PROBABILITY
        if is_income:
            amount = int(rng.integers(1000, 4000))
            description = INCOME_DESCRIPTIONS[int(rng.integers(len(INCOME_DESCRIPTIONS)))]
        else:
            amount = int(rng.integers(10, 210))
            options = EXPENSE_DESCRIPTIONS[category.id]
            description = options[int(rng.integers(len(options)))]
        drafts.append(TransactionDraft(
            amount=amount,
            category=category.id,
            description=description,
            date=day,
            type=TransactionType.INCOME if is_income else TransactionType.EXPENSE,
        ))

    return drafts
