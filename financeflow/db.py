from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

try:
    from .config import DB_PATH
    from .logging_setup import get_logger
    from .models import Transaction, TransactionDraft, UserProfile
except ImportError:
    from config import DB_PATH
    from logging_setup import get_logger
    from models import Transaction, TransactionDraft, UserProfile

logger = get_logger(__name__)

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    name TEXT NOT NULL,
    monthly_budget REAL NOT NULL DEFAULT 0,
    selected_categories TEXT NOT NULL DEFAULT '[]',
    onboarding_complete INTEGER NOT NULL DEFAULT 0,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS sessions (
    token TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id),
    created_at TEXT,
    expires_at TEXT
);

CREATE TABLE IF NOT EXISTS transactions (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id),
    amount REAL NOT NULL,
    category TEXT,
    description TEXT,
    date TEXT NOT NULL,
    type TEXT NOT NULL,
    created_at TEXT
);

CREATE INDEX IF NOT EXISTS ix_txn_user_date ON transactions (user_id, date);
CREATE INDEX IF NOT EXISTS ix_sessions_user ON sessions (user_id);
"""

USER_COLUMNS = (
    "id, email, name, monthly_budget, selected_categories, onboarding_complete, avatar"
)
TRANSACTION_COLUMNS = "id, amount, category, description, date, type"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@contextmanager
def connect(db_path: Optional[Path] = None) -> Iterator[sqlite3.Connection]:
    target = Path(db_path or DB_PATH)
    target.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(target))
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: Optional[Path] = None) -> None:
    with connect(db_path) as conn:
        conn.executescript(SCHEMA_SQL)
        conn.commit()
        # Run migrations to add new columns if they don't exist
        _migrate_database(conn)


def _migrate_database(conn: sqlite3.Connection) -> None:
    """Add new columns to existing database if they don't exist."""
    cursor = conn.cursor()
    cursor.execute("PRAGMA table_info(users)")
    existing_columns = [row[1] for row in cursor.fetchall()]

    new_columns = [
        ('avatar', 'TEXT'),
    ]

    for column_name, column_type in new_columns:
        if column_name not in existing_columns:
            cursor.execute(f"ALTER TABLE users ADD COLUMN {column_name} {column_type}")
            logger.info("Added column %s to users table", column_name)

    conn.commit()


# ---------------------------------------------------------------------------
# Row conversion
# ---------------------------------------------------------------------------


def _row_to_user(row: sqlite3.Row) -> UserProfile:
    try:
        selected = json.loads(row['selected_categories'] or '[]')
    except json.JSONDecodeError:
        selected = []
    if not isinstance(selected, list):
        selected = []
    return UserProfile(
        id=row['id'],
        name=row['name'],
        email=row['email'],
        monthly_budget=row['monthly_budget'] or 0.0,
        selected_categories=tuple(str(item) for item in selected),
        onboarding_complete=bool(row['onboarding_complete']),
        avatar=row['avatar'],
    )


def _row_to_transaction(row: sqlite3.Row) -> Transaction:
    return Transaction(
        id=row['id'],
        amount=row['amount'],
        category=row['category'] or '',
        description=row['description'] or '',
        date=row['date'],
        type=row['type'],
    )


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


def insert_user(
    user_id: str,
    email: str,
    password_hash: str,
    name: str,
    db_path: Optional[Path] = None,
) -> UserProfile:
    with connect(db_path) as conn:
        conn.execute(
            "INSERT INTO users (id, email, password_hash, name, created_at) VALUES (?, ?, ?, ?, ?)",
            (user_id, email, password_hash, name, _now_iso()),
        )
        conn.commit()
    user = fetch_user(user_id, db_path)
    if user is None:
        raise sqlite3.DatabaseError(f"User {user_id} was not stored")
    return user


def fetch_user(user_id: str, db_path: Optional[Path] = None) -> Optional[UserProfile]:
    with connect(db_path) as conn:
        row = conn.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)).fetchone()
    return _row_to_user(row) if row else None


def fetch_credentials(email: str, db_path: Optional[Path] = None) -> Optional[Tuple[str, str]]:
    """Return ``(user_id, password_hash)`` for an email, matched case-insensitively."""
    with connect(db_path) as conn:
        row = conn.execute(
            "SELECT id, password_hash FROM users WHERE lower(email) = lower(?)",
            (email.strip(),),
        ).fetchone()
    return (row['id'], row['password_hash']) if row else None


def update_user(
    user_id: str,
    name: Optional[str] = None,
    monthly_budget: Optional[float] = None,
    selected_categories: Optional[Sequence[str]] = None,
    onboarding_complete: Optional[bool] = None,
    avatar: Optional[str] = None,
    db_path: Optional[Path] = None,
) -> bool:
    """Update a user profile in the database.

    Returns True if a row was updated, False otherwise.
    """
    updates = []
    params: List[Any] = []

    if name is not None:
        updates.append("name = ?")
        params.append(name)

    if monthly_budget is not None:
        updates.append("monthly_budget = ?")
        params.append(float(monthly_budget))

    if selected_categories is not None:
        updates.append("selected_categories = ?")
        params.append(json.dumps(list(selected_categories)))

    if onboarding_complete is not None:
        updates.append("onboarding_complete = ?")
        params.append(1 if onboarding_complete else 0)

    if avatar is not None:
        updates.append("avatar = ?")
        params.append(avatar)

    if not updates:
        return False

    params.append(user_id)
    sql = f"UPDATE users SET {', '.join(updates)} WHERE id = ?"

    with connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(sql, params)
        conn.commit()
        return cursor.rowcount > 0


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


def insert_session(token: str, user_id: str, expires_at: datetime, db_path: Optional[Path] = None) -> None:
    with connect(db_path) as conn:
        conn.execute(
            "INSERT INTO sessions (token, user_id, created_at, expires_at) VALUES (?, ?, ?, ?)",
            (token, user_id, _now_iso(), expires_at.isoformat()),
        )
        conn.commit()


def fetch_session(token: str, db_path: Optional[Path] = None) -> Optional[Dict[str, Any]]:
    with connect(db_path) as conn:
        row = conn.execute(
            "SELECT token, user_id, expires_at FROM sessions WHERE token = ?", (token,)
        ).fetchone()
    if not row:
        return None
    return {
        'token': row['token'],
        'user_id': row['user_id'],
        'expires_at': datetime.fromisoformat(row['expires_at']) if row['expires_at'] else None,
    }


def delete_session(token: str, db_path: Optional[Path] = None) -> None:
    with connect(db_path) as conn:
        conn.execute("DELETE FROM sessions WHERE token = ?", (token,))
        conn.commit()


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


def insert_transactions(
    user_id: str,
    rows: Sequence[Tuple[str, TransactionDraft]],
    db_path: Optional[Path] = None,
) -> int:
    """Insert ``(id, draft)`` pairs for a user. Returns the inserted count."""
    if not rows:
        return 0
    created_at = _now_iso()
    records = [
        (
            txn_id,
            user_id,
            draft.amount,
            draft.category,
            draft.description,
            draft.date.isoformat(),
            draft.type.value,
            created_at,
        )
        for txn_id, draft in rows
    ]
    insert_sql = (
        "INSERT INTO transactions (id, user_id, amount, category, description, date, type, created_at) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, ?)"
    )
    with connect(db_path) as conn:
        before_changes = conn.total_changes
        conn.executemany(insert_sql, records)
        conn.commit()
        return conn.total_changes - before_changes


def fetch_transactions(user_id: str, db_path: Optional[Path] = None) -> List[Transaction]:
    """All transactions of a user, newest date first (insertion order breaks ties)."""
    sql = (
        f"SELECT {TRANSACTION_COLUMNS} FROM transactions WHERE user_id = ? "
        "ORDER BY date DESC, rowid DESC"
    )
    with connect(db_path) as conn:
        rows = conn.execute(sql, (user_id,)).fetchall()
    return [_row_to_transaction(row) for row in rows]


def fetch_transaction(user_id: str, transaction_id: str, db_path: Optional[Path] = None) -> Optional[Transaction]:
    with connect(db_path) as conn:
        row = conn.execute(
            f"SELECT {TRANSACTION_COLUMNS} FROM transactions WHERE user_id = ? AND id = ?",
            (user_id, transaction_id),
        ).fetchone()
    return _row_to_transaction(row) if row else None


def update_transaction(
    user_id: str,
    transaction_id: str,
    amount: Optional[float] = None,
    category: Optional[str] = None,
    description: Optional[str] = None,
    transaction_date: Optional[str] = None,
    txn_type: Optional[str] = None,
    db_path: Optional[Path] = None,
) -> bool:
    """Update a transaction in the database.

    Returns True if update was successful, False otherwise.
    """
    updates = []
    params: List[Any] = []

    if amount is not None:
        updates.append("amount = ?")
        params.append(float(amount))

    if category is not None:
        updates.append("category = ?")
        params.append(category)

    if description is not None:
        updates.append("description = ?")
        params.append(description)

    if transaction_date is not None:
        updates.append("date = ?")
        params.append(transaction_date)

    if txn_type is not None:
        updates.append("type = ?")
        params.append(txn_type)

    if not updates:
        return False

    params.extend([user_id, transaction_id])
    sql = f"UPDATE transactions SET {', '.join(updates)} WHERE user_id = ? AND id = ?"

    with connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(sql, params)
        conn.commit()
        return cursor.rowcount > 0


def delete_transaction(user_id: str, transaction_id: str, db_path: Optional[Path] = None) -> bool:
    with connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(
            "DELETE FROM transactions WHERE user_id = ? AND id = ?", (user_id, transaction_id)
        )
        conn.commit()
        return cursor.rowcount > 0


def clear_transactions(user_id: str, db_path: Optional[Path] = None) -> int:
    """Delete every transaction of a user. Returns the number of rows removed."""
    with connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("DELETE FROM transactions WHERE user_id = ?", (user_id,))
        conn.commit()
        return cursor.rowcount
