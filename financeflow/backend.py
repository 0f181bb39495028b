"""Backend collaborators: authentication, profiles and transaction rows.

``Backend`` is the single persistence interface the rest of the app talks to.
Two implementations satisfy it:

* :class:`SQLiteBackend` keeps users, sessions and transactions in a local
  SQLite file. The active session token lives in a per-client token store
  (``st.session_state`` in the app), never in a file shared by every client.
* :class:`MockBackend` keeps everything in memory and ships a demo account. Its
  authentication calls sleep for a fixed delay to mimic network latency.

Both notify ``on_auth_state_change`` handlers with the new session, or ``None``
when the session ends (explicit sign-out or expiry).
"""

from __future__ import annotations

import abc
import secrets
import sqlite3
import time
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, MutableMapping, Optional, Sequence, Tuple

from werkzeug.security import check_password_hash, generate_password_hash

try:
    from . import config, db
    from .exceptions import AuthenticationError, BackendError, NotFoundError
    from .logging_setup import get_logger
    from .models import Session, Transaction, TransactionDraft, UserProfile, sort_newest_first
except ImportError:
    import config
    import db
    from exceptions import AuthenticationError, BackendError, NotFoundError
    from logging_setup import get_logger
    from models import Session, Transaction, TransactionDraft, UserProfile, sort_newest_first

logger = get_logger(__name__)

AuthHandler = Callable[[Optional[Session]], None]
Unsubscribe = Callable[[], None]

PROFILE_FIELDS = {'name', 'monthly_budget', 'selected_categories', 'onboarding_complete', 'avatar'}
TRANSACTION_FIELDS = {'amount', 'category', 'description', 'date', 'type'}
MIN_PASSWORD_LENGTH = 6
SESSION_TOKEN_KEY = "financeflow_session_token"


def _new_id() -> str:
    return str(uuid.uuid4())


def _check_fields(changes: Dict[str, Any], allowed: set) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise ValueError(f"Unsupported fields: {', '.join(sorted(unknown))}")


class Backend(abc.ABC):
    """Remote collaborator contract used by the session controller."""

    def __init__(self) -> None:
        self._auth_handlers: List[AuthHandler] = []

    # Auth --------------------------------------------------------------------

    @abc.abstractmethod
    def sign_in(self, email: str, password: str) -> Session:
        ...

    @abc.abstractmethod
    def sign_up(self, email: str, password: str, name: str) -> Session:
        ...

    @abc.abstractmethod
    def sign_out(self) -> None:
        ...

    @abc.abstractmethod
    def get_session(self) -> Optional[Session]:
        ...

    @abc.abstractmethod
    def request_password_reset(self, email: str) -> None:
        ...

    def on_auth_state_change(self, handler: AuthHandler) -> Unsubscribe:
        self._auth_handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._auth_handlers:
                self._auth_handlers.remove(handler)

        return unsubscribe

    def _notify(self, session: Optional[Session]) -> None:
        for handler in list(self._auth_handlers):
            handler(session)

    # Profiles ------------------------------------------------------------------

    @abc.abstractmethod
    def get_profile(self, user_id: str) -> UserProfile:
        ...

    @abc.abstractmethod
    def update_profile(self, user_id: str, **changes: Any) -> UserProfile:
        ...

    # Transactions ----------------------------------------------------------

    @abc.abstractmethod
    def list_transactions(self, user_id: str) -> List[Transaction]:
        ...

    @abc.abstractmethod
    def get_transaction(self, user_id: str, transaction_id: str) -> Optional[Transaction]:
        ...

    @abc.abstractmethod
    def insert_transactions(self, user_id: str, drafts: Sequence[TransactionDraft]) -> List[Transaction]:
        ...

    def insert_transaction(self, user_id: str, draft: TransactionDraft) -> Transaction:
        return self.insert_transactions(user_id, [draft])[0]

    @abc.abstractmethod
    def update_transaction(self, user_id: str, transaction_id: str, **changes: Any) -> Transaction:
        ...

    @abc.abstractmethod
    def delete_transaction(self, user_id: str, transaction_id: str) -> None:
        ...

    @abc.abstractmethod
    def delete_all_transactions(self, user_id: str) -> int:
        ...


# ---------------------------------------------------------------------------
# SQLite
# ---------------------------------------------------------------------------


class SQLiteBackend(Backend):
    """Local persistence backed by :mod:`financeflow.db`.

    ``token_store`` is a mapping owned by one client. Only a token this
    client was issued is ever restored from it; the default is a private
    dict, so a new backend starts signed out.
    """

    def __init__(
        self,
        db_path: Optional[Path] = None,
        token_store: Optional[MutableMapping[str, Any]] = None,
        session_ttl: Optional[timedelta] = None,
    ) -> None:
        super().__init__()
        self.db_path = Path(db_path or config.DB_PATH)
        self.token_store: MutableMapping[str, Any] = {} if token_store is None else token_store
        self.session_ttl = session_ttl or timedelta(hours=config.SESSION_TTL_HOURS)
        self._expires_at: Optional[datetime] = None
        try:
            db.init_db(self.db_path)
        except sqlite3.Error as exc:
            raise BackendError(f"Could not initialise database: {exc}") from exc

    def _call(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, db_path=self.db_path, **kwargs)
        except sqlite3.Error as exc:
            logger.error("Database call %s failed: %s", func.__name__, exc)
            raise BackendError(str(exc)) from exc

    def _authorized(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        self._check_session()
        return self._call(func, *args, **kwargs)

    # Session token -------------------------------------------------------------

    @property
    def _token(self) -> Optional[str]:
        return self.token_store.get(SESSION_TOKEN_KEY)

    def _forget_token(self) -> None:
        self.token_store.pop(SESSION_TOKEN_KEY, None)
        self._expires_at = None

    def _expire(self, token: str) -> None:
        self._call(db.delete_session, token)
        self._forget_token()
        self._notify(None)

    def _check_session(self) -> None:
        """Raise and signal sign-out when the active session has run out."""
        token = self._token
        if token is None or self._expires_at is None:
            return
        if datetime.now(timezone.utc) < self._expires_at:
            return
        logger.info("Session expired during use")
        self._expire(token)
        raise AuthenticationError("Your session has expired. Please sign in again")

    # Auth --------------------------------------------------------------------

    def _open_session(self, user: UserProfile) -> Session:
        token = secrets.token_urlsafe(32)
        expires_at = datetime.now(timezone.utc) + self.session_ttl
        self._call(db.insert_session, token, user.id, expires_at)
        self.token_store[SESSION_TOKEN_KEY] = token
        self._expires_at = expires_at
        session = Session(user=user, access_token=token, expires_at=expires_at)
        self._notify(session)
        return session

    def sign_in(self, email: str, password: str) -> Session:
        credentials = self._call(db.fetch_credentials, email)
        if credentials is None or not check_password_hash(credentials[1], password):
            logger.info("Rejected sign-in for %s", email)
            raise AuthenticationError("Invalid login credentials")
        user = self._call(db.fetch_user, credentials[0])
        logger.info("User %s signed in", user.id)
        return self._open_session(user)

    def sign_up(self, email: str, password: str, name: str) -> Session:
        email = email.strip()
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthenticationError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters")
        if self._call(db.fetch_credentials, email) is not None:
            raise AuthenticationError("User already registered")
        try:
            user = db.insert_user(
                _new_id(), email, generate_password_hash(password), name.strip(), db_path=self.db_path,
            )
        except sqlite3.IntegrityError as exc:
            # Another sign-up took the email between the check and the insert.
            raise AuthenticationError("User already registered") from exc
        except sqlite3.Error as exc:
            logger.error("Database call insert_user failed: %s", exc)
            raise BackendError(str(exc)) from exc
        logger.info("Registered user %s", user.id)
        return self._open_session(user)

    def sign_out(self) -> None:
        token = self._token
        self._forget_token()
        try:
            if token:
                self._call(db.delete_session, token)
        finally:
            self._notify(None)

    def get_session(self) -> Optional[Session]:
        token = self._token
        if not token:
            return None
        record = self._call(db.fetch_session, token)
        user = self._call(db.fetch_user, record['user_id']) if record else None
        if record is None or user is None:
            self._forget_token()
            return None
        session = Session(user=user, access_token=token, expires_at=record['expires_at'])
        if session.is_expired():
            logger.info("Session for user %s expired", user.id)
            self._expire(token)
            return None
        self._expires_at = record['expires_at']
        return session

    def request_password_reset(self, email: str) -> None:
        # No outbound mail here; the request is only recorded in the log.
        known = self._call(db.fetch_credentials, email) is not None
        logger.info("Password reset requested for %s (known=%s)", email, known)

    # Profiles ------------------------------------------------------------------

    def get_profile(self, user_id: str) -> UserProfile:
        user = self._authorized(db.fetch_user, user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def update_profile(self, user_id: str, **changes: Any) -> UserProfile:
        _check_fields(changes, PROFILE_FIELDS)
        if changes:
            self._authorized(db.update_user, user_id, **changes)
        return self.get_profile(user_id)

    # Transactions ----------------------------------------------------------

    def list_transactions(self, user_id: str) -> List[Transaction]:
        return self._authorized(db.fetch_transactions, user_id)

    def get_transaction(self, user_id: str, transaction_id: str) -> Optional[Transaction]:
        return self._authorized(db.fetch_transaction, user_id, transaction_id)

    def insert_transactions(self, user_id: str, drafts: Sequence[TransactionDraft]) -> List[Transaction]:
        rows: List[Tuple[str, TransactionDraft]] = [(_new_id(), draft) for draft in drafts]
        self._authorized(db.insert_transactions, user_id, rows)
        return [draft.with_id(txn_id) for txn_id, draft in rows]

    def update_transaction(self, user_id: str, transaction_id: str, **changes: Any) -> Transaction:
        _check_fields(changes, TRANSACTION_FIELDS)
        current = self.get_transaction(user_id, transaction_id)
        if current is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        updated = current.apply(**changes)
        if changes:
            self._authorized(
                db.update_transaction,
                user_id,
                transaction_id,
                amount=updated.amount,
                category=updated.category,
                description=updated.description,
                transaction_date=updated.date.isoformat(),
                txn_type=updated.type.value,
            )
        return updated

    def delete_transaction(self, user_id: str, transaction_id: str) -> None:
        if not self._authorized(db.delete_transaction, user_id, transaction_id):
            raise NotFoundError(f"Transaction {transaction_id} not found")

    def delete_all_transactions(self, user_id: str) -> int:
        return self._authorized(db.clear_transactions, user_id)


# ---------------------------------------------------------------------------
# In-memory mock
# ---------------------------------------------------------------------------


class MockBackend(Backend):
    """In-memory backend for demos and tests."""

    def __init__(self, auth_delay: Optional[float] = None, seed_demo_user: bool = True) -> None:
        super().__init__()
        self.auth_delay = config.MOCK_AUTH_DELAY if auth_delay is None else auth_delay
        self._users: Dict[str, UserProfile] = {}
        self._passwords: Dict[str, str] = {}
        self._transactions: Dict[str, List[Transaction]] = {}
        self._session: Optional[Session] = None
        if seed_demo_user:
            demo = self._register(config.DEMO_EMAIL, config.DEMO_PASSWORD, "Demo User")
            self._users[demo.id] = demo.apply(onboarding_complete=True, monthly_budget=50000.0)

    def _simulate_latency(self) -> None:
        if self.auth_delay > 0:
            time.sleep(self.auth_delay)

    def _register(self, email: str, password: str, name: str) -> UserProfile:
        user = UserProfile(id=_new_id(), name=name, email=email)
        self._users[user.id] = user
        self._passwords[user.id] = generate_password_hash(password)
        self._transactions[user.id] = []
        return user

    def _find_user_id(self, email: str) -> Optional[str]:
        wanted = email.strip().lower()
        for user in self._users.values():
            if user.email.lower() == wanted:
                return user.id
        return None

    def _open_session(self, user_id: str) -> Session:
        self._session = Session(user=self._users[user_id], access_token=secrets.token_urlsafe(16))
        self._notify(self._session)
        return self._session

    def sign_in(self, email: str, password: str) -> Session:
        self._simulate_latency()
        user_id = self._find_user_id(email)
        if user_id is None or not check_password_hash(self._passwords[user_id], password):
            raise AuthenticationError("Invalid login credentials")
        return self._open_session(user_id)

    def sign_up(self, email: str, password: str, name: str) -> Session:
        self._simulate_latency()
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthenticationError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters")
        if self._find_user_id(email) is not None:
            raise AuthenticationError("User already registered")
        user = self._register(email.strip(), password, name.strip())
        return self._open_session(user.id)

    def sign_out(self) -> None:
        self._session = None
        self._notify(None)

    def get_session(self) -> Optional[Session]:
        if self._session is None:
            return None
        return Session(
            user=self._users[self._session.user.id],
            access_token=self._session.access_token,
            expires_at=self._session.expires_at,
        )

    def expire_session(self) -> None:
        """Drop the active session as if the server had revoked it."""
        if self._session is not None:
            self._session = None
            self._notify(None)

    def request_password_reset(self, email: str) -> None:
        self._simulate_latency()
        logger.info("Password reset requested for %s", email)

    def get_profile(self, user_id: str) -> UserProfile:
        if user_id not in self._users:
            raise NotFoundError(f"User {user_id} not found")
        return self._users[user_id]

    def update_profile(self, user_id: str, **changes: Any) -> UserProfile:
        _check_fields(changes, PROFILE_FIELDS)
        if 'selected_categories' in changes:
            changes['selected_categories'] = tuple(changes['selected_categories'])
        user = self.get_profile(user_id).apply(**changes)
        self._users[user_id] = user
        return user

    def _rows(self, user_id: str) -> List[Transaction]:
        if user_id not in self._transactions:
            raise NotFoundError(f"User {user_id} not found")
        return self._transactions[user_id]

    def list_transactions(self, user_id: str) -> List[Transaction]:
        return list(sort_newest_first(reversed(self._rows(user_id))))

    def get_transaction(self, user_id: str, transaction_id: str) -> Optional[Transaction]:
        for txn in self._rows(user_id):
            if txn.id == transaction_id:
                return txn
        return None

    def insert_transactions(self, user_id: str, drafts: Sequence[TransactionDraft]) -> List[Transaction]:
        rows = self._rows(user_id)
        created = [draft.with_id(_new_id()) for draft in drafts]
        rows.extend(created)
        return created

    def update_transaction(self, user_id: str, transaction_id: str, **changes: Any) -> Transaction:
        _check_fields(changes, TRANSACTION_FIELDS)
        rows = self._rows(user_id)
        for index, txn in enumerate(rows):
            if txn.id == transaction_id:
                rows[index] = txn.apply(**changes)
                return rows[index]
        raise NotFoundError(f"Transaction {transaction_id} not found")

    def delete_transaction(self, user_id: str, transaction_id: str) -> None:
        rows = self._rows(user_id)
        for index, txn in enumerate(rows):
            if txn.id == transaction_id:
                del rows[index]
                return
        raise NotFoundError(f"Transaction {transaction_id} not found")

    def delete_all_transactions(self, user_id: str) -> int:
        rows = self._rows(user_id)
        removed = len(rows)
        rows.clear()
        return removed


def create_backend(
    kind: Optional[str] = None,
    token_store: Optional[MutableMapping[str, Any]] = None,
) -> Backend:
    """Build the backend selected by ``FINANCEFLOW_BACKEND``.

    ``token_store`` keeps the SQLite session token for one client. The mock
    backend holds its session on the instance itself.
    """
    kind = (kind or config.BACKEND).strip().lower()
    if kind == 'mock':
        return MockBackend()
    if kind == 'sqlite':
        return SQLiteBackend(token_store=token_store)
    raise ValueError(f"Unknown backend: {kind!r}")
