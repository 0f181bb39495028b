"""CSV and JSON exports of the user's data.

Both functions return the file content as a string together with a
suggested file name; the screens hand them to ``st.download_button``.
"""

from __future__ import annotations

import csv
import json
from datetime import date, datetime, timezone
from typing import Optional, Sequence, Tuple

import pandas as pd

try:
    from .models import Transaction, UserProfile, find_category
except ImportError:
    from models import Transaction, UserProfile, find_category

CSV_COLUMNS = ['Date', 'Type', 'Category', 'Description', 'Amount']


def _category_name(category_id: str) -> str:
    category = find_category(category_id)
    # Unknown ids are exported verbatim so no information is lost.
    return category.name if category is not None else category_id


def _format_amount(amount: float) -> str:
    return str(int(amount)) if float(amount).is_integer() else str(amount)


def transactions_to_csv(
    transactions: Sequence[Transaction],
    today: Optional[date] = None,
) -> Tuple[str, str]:
    """Export the given (already filtered and ordered) transactions as CSV."""
    today = today or date.today()
    rows = [
        {
            'Date': txn.date.isoformat(),
            'Type': txn.type.value,
            'Category': _category_name(txn.category),
            'Description': txn.description,
            'Amount': _format_amount(txn.amount),
        }
        for txn in transactions
    ]
    frame = pd.DataFrame(rows, columns=CSV_COLUMNS)
    content = frame.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator='\n')
    return content, f"expenses_{today.isoformat()}.csv"


def snapshot_to_json(
    user: Optional[UserProfile],
    transactions: Sequence[Transaction],
    exported_at: Optional[datetime] = None,
) -> Tuple[str, str]:
    """Export the profile and every transaction with an export timestamp."""
    exported_at = exported_at or datetime.now(timezone.utc)
    payload = {
        'user': user.to_dict() if user is not None else None,
        'expenses': [txn.to_dict() for txn in transactions],
        'exportDate': exported_at.isoformat(),
    }
    content = json.dumps(payload, indent=2, ensure_ascii=False)
    return content, f"financeflow_data_{exported_at.date().isoformat()}.json"
