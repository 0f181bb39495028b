"""Domain records for FinanceFlow.

Transactions, categories and user profiles are immutable dataclasses. State
changes always produce a new instance (``dataclasses.replace``) so the store
can swap whole snapshots without aliasing.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple


class TransactionType(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"

    @classmethod
    def parse(cls, value: Any) -> "TransactionType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown transaction type: {value!r}") from None


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    icon: str
    color: str


CATEGORIES: Tuple[Category, ...] = (
    Category("food", "Food & Dining", "🍔", "#FF6B6B"),
    Category("transport", "Transport", "🚗", "#4ECDC4"),
    Category("shopping", "Shopping", "🛍️", "#95E1D3"),
    Category("entertainment", "Entertainment", "🎬", "#FFE66D"),
    Category("bills", "Bills & Utilities", "💡", "#A8E6CF"),
    Category("health", "Health", "⚕️", "#FF8B94"),
    Category("education", "Education", "📚", "#B4A7D6"),
    Category("travel", "Travel", "✈️", "#FFD3B6"),
    Category("savings", "Savings", "💰", "#A8DADC"),
    Category("other", "Other", "📦", "#C7CEEA"),
)

CATEGORY_IDS: Tuple[str, ...] = tuple(cat.id for cat in CATEGORIES)
_CATEGORY_INDEX: Dict[str, Category] = {cat.id: cat for cat in CATEGORIES}

UNKNOWN_CATEGORY_LABEL = "unknown"


def find_category(category_id: Optional[str]) -> Optional[Category]:
    """Look up a fixed category by id. Returns ``None`` when there is no match."""
    if category_id is None:
        return None
    return _CATEGORY_INDEX.get(str(category_id))


def category_label(category_id: Optional[str]) -> str:
    category = find_category(category_id)
    if category is None:
        return UNKNOWN_CATEGORY_LABEL
    return category.name


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


def _coerce_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


@dataclass(frozen=True)
class TransactionDraft:
    """A transaction that has not been assigned an id by the backend yet."""

    amount: float
    category: str
    description: str
    date: date
    type: TransactionType = TransactionType.EXPENSE

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", float(self.amount))
        object.__setattr__(self, "date", _coerce_date(self.date))
        object.__setattr__(self, "type", TransactionType.parse(self.type))

    def with_id(self, transaction_id: str) -> "Transaction":
        return Transaction(
            id=transaction_id,
            amount=self.amount,
            category=self.category,
            description=self.description,
            date=self.date,
            type=self.type,
        )


@dataclass(frozen=True)
class Transaction:
    id: str
    amount: float
    category: str
    description: str
    date: date
    type: TransactionType = TransactionType.EXPENSE

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", str(self.id))
        object.__setattr__(self, "amount", float(self.amount))
        object.__setattr__(self, "date", _coerce_date(self.date))
        object.__setattr__(self, "type", TransactionType.parse(self.type))

    @property
    def is_expense(self) -> bool:
        return self.type is TransactionType.EXPENSE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "amount": self.amount,
            "category": self.category,
            "description": self.description,
            "date": self.date.isoformat(),
            "type": self.type.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        return cls(
            id=data["id"],
            amount=data["amount"],
            category=data.get("category") or "",
            description=data.get("description") or "",
            date=data["date"],
            type=data.get("type", TransactionType.EXPENSE),
        )

    def apply(self, **changes: Any) -> "Transaction":
        """Return a copy with ``changes`` applied; ``id`` is immutable."""
        changes.pop("id", None)
        return replace(self, **changes)


def sort_newest_first(transactions: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    # Stable on equal dates, so insertion order breaks ties.
    return tuple(sorted(transactions, key=lambda txn: txn.date, reverse=True))


# ---------------------------------------------------------------------------
# Users and sessions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UserProfile:
    id: str
    name: str
    email: str
    monthly_budget: float = 0.0
    selected_categories: Tuple[str, ...] = field(default_factory=tuple)
    onboarding_complete: bool = False
    avatar: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "monthly_budget", float(self.monthly_budget or 0.0))
        object.__setattr__(self, "selected_categories", tuple(self.selected_categories or ()))
        object.__setattr__(self, "onboarding_complete", bool(self.onboarding_complete))

    @property
    def has_budget(self) -> bool:
        return self.monthly_budget > 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["selected_categories"] = list(self.selected_categories)
        return data

    def apply(self, **changes: Any) -> "UserProfile":
        changes.pop("id", None)
        return replace(self, **changes)


@dataclass(frozen=True)
class Session:
    user: UserProfile
    access_token: str
    expires_at: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or datetime.now(timezone.utc)) >= self.expires_at
