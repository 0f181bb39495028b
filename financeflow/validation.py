"""Form validation for the authentication, onboarding, transaction and settings screens.

Every validator either returns clean values or raises
:class:`~financeflow.exceptions.ValidationError` with one message per failing
field. Nothing here talks to the backend.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Any, Dict, Iterable, Optional, Tuple

try:
    from .exceptions import ValidationError
    from .formatting import CURRENCY_SYMBOL
    from .models import TransactionDraft, TransactionType
except ImportError:
    from exceptions import ValidationError
    from formatting import CURRENCY_SYMBOL
    from models import TransactionDraft, TransactionType

MIN_PASSWORD_LENGTH = 6


def _parse_number(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).replace(CURRENCY_SYMBOL, '').replace(',', '').strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _is_blank(value: Any) -> bool:
    return value is None or not str(value).strip()


def validate_credentials(email: str, password: str) -> Tuple[str, str]:
    if _is_blank(email) or not password:
        raise ValidationError({'form': 'Please fill in all fields'})
    return email.strip(), password


def validate_signup(name: str, email: str, password: str) -> Tuple[str, str, str]:
    errors: Dict[str, str] = {}
    if _is_blank(name):
        errors['name'] = 'Please enter your name'
    if _is_blank(email) or '@' not in email:
        errors['email'] = 'Please enter a valid email'
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        errors['password'] = f'Password must be at least {MIN_PASSWORD_LENGTH} characters'
    if errors:
        raise ValidationError(errors)
    return name.strip(), email.strip(), password


def validate_reset_email(email: str) -> str:
    if _is_blank(email):
        raise ValidationError({'email': 'Please enter your email'})
    return email.strip()


def validate_transaction(
    amount: Any,
    category: Optional[str],
    description: Optional[str],
    txn_date: Any = None,
    txn_type: Any = TransactionType.EXPENSE,
) -> TransactionDraft:
    """Validate the add/edit transaction form and build a draft.

    Checks run in the form's order and every failing field is reported.
    """
    errors: Dict[str, str] = {}

    number = _parse_number(amount)
    if number is None or number <= 0:
        errors['amount'] = 'Please enter a valid amount'

    if _is_blank(category):
        errors['category'] = 'Please select a category'

    if _is_blank(description):
        errors['description'] = 'Please enter a description'

    try:
        parsed_type = TransactionType.parse(txn_type)
    except ValueError:
        errors['type'] = 'Please choose expense or income'
        parsed_type = TransactionType.EXPENSE

    parsed_date: Optional[date] = None
    if txn_date is None or txn_date == '':
        parsed_date = date.today()
    elif isinstance(txn_date, date):
        parsed_date = txn_date
    else:
        try:
            parsed_date = date.fromisoformat(str(txn_date).strip())
        except ValueError:
            errors['date'] = 'Please enter a valid date'

    if errors:
        raise ValidationError(errors)

    return TransactionDraft(
        amount=number,
        category=str(category).strip(),
        description=str(description).strip(),
        date=parsed_date,
        type=parsed_type,
    )


def validate_onboarding_budget(budget: Any) -> float:
    number = _parse_number(budget)
    if number is None or number <= 0:
        raise ValidationError({'budget': 'Please enter a valid budget amount'})
    return number


def validate_profile(name: str, monthly_budget: Any) -> Tuple[str, float]:
    if _is_blank(name):
        raise ValidationError({'name': 'Name is required'})
    number = _parse_number(monthly_budget)
    if number is None or number < 0:
        raise ValidationError({'monthly_budget': 'Please enter a valid budget'})
    return name.strip(), number


def normalize_category_selection(selected: Iterable[str], all_ids: Iterable[str]) -> Tuple[str, ...]:
    """An empty selection means "track everything"."""
    chosen = tuple(dict.fromkeys(str(item) for item in selected if item))
    return chosen if chosen else tuple(all_ids)
