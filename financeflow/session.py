"""Session controller: user commands in, backend calls out, actions into the store.

Screens never touch the backend or the store directly. They call one of the
controller's commands, which validates input locally, performs the backend
call, and dispatches the resulting action. A failed call stores its message
on ``AppState.error`` and re-raises; nothing else in the state changes.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Optional, Tuple

try:
    from . import config
    from . import preferences as prefs
    from .backend import Backend
    from .exceptions import FinanceFlowError, InvalidTransition, ValidationError
    from .exporting import snapshot_to_json, transactions_to_csv
    from .logging_setup import get_logger
    from .models import CATEGORY_IDS, Session, Transaction
    from .navigation import ONBOARDING_SEQUENCE, Screen, onboarding_next, onboarding_previous
    from .sample_data import generate_sample_transactions
    from .selectors import filter_transactions
    from .store import (
        AppState,
        ErrorCleared,
        Navigated,
        OnboardingCompleted,
        ProfileUpdated,
        RequestFailed,
        RequestFinished,
        RequestStarted,
        SignedIn,
        SignedOut,
        Store,
        ThemeChanged,
        TransactionAdded,
        TransactionDeleted,
        TransactionsLoaded,
        TransactionUpdated,
    )
    from . import validation
except ImportError:
    import config
    import preferences as prefs
    import validation
    from backend import Backend
    from exceptions import FinanceFlowError, InvalidTransition, ValidationError
    from exporting import snapshot_to_json, transactions_to_csv
    from logging_setup import get_logger
    from models import CATEGORY_IDS, Session, Transaction
    from navigation import ONBOARDING_SEQUENCE, Screen, onboarding_next, onboarding_previous
    from sample_data import generate_sample_transactions
    from selectors import filter_transactions
    from store import (
        AppState,
        ErrorCleared,
        Navigated,
        OnboardingCompleted,
        ProfileUpdated,
        RequestFailed,
        RequestFinished,
        RequestStarted,
        SignedIn,
        SignedOut,
        Store,
        ThemeChanged,
        TransactionAdded,
        TransactionDeleted,
        TransactionsLoaded,
        TransactionUpdated,
    )

logger = get_logger(__name__)


class SessionController:
    """Commands available to the screens."""

    def __init__(
        self,
        store: Store,
        backend: Backend,
        *,
        preferences_path: Optional[Path] = None,
        seed_sample_data: Optional[bool] = None,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self.store = store
        self.backend = backend
        self.preferences_path = preferences_path
        self.seed_sample_data = config.SEED_SAMPLE_DATA if seed_sample_data is None else seed_sample_data
        self._today = today or date.today
        self._unsubscribe = backend.on_auth_state_change(self._on_auth_state_change)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def state(self) -> AppState:
        return self.store.state

    def _require_user(self):
        user = self.state.user
        if user is None:
            raise FinanceFlowError("Not signed in")
        return user

    @contextmanager
    def _request(self, failure_message: Optional[str] = None) -> Iterator[None]:
        """Wrap a backend call: raise ``is_loading`` and record failures."""
        self.store.dispatch(RequestStarted())
        try:
            yield
        except FinanceFlowError as exc:
            logger.warning("Request failed: %s", exc)
            self.store.dispatch(RequestFailed(failure_message or str(exc)))
            raise
        finally:
            # Success paths that dispatch nothing still have to clear the flag.
            if self.state.is_loading:
                self.store.dispatch(RequestFinished())

    def _on_auth_state_change(self, session: Optional[Session]) -> None:
        if session is None and self.state.user is not None:
            logger.info("Session ended externally; returning to login")
            self.store.dispatch(SignedOut())

    def _sign_in_with(self, session: Session) -> AppState:
        transactions = tuple(self.backend.list_transactions(session.user.id))
        return self.store.dispatch(SignedIn(user=session.user, transactions=transactions))

    def clear_error(self) -> None:
        if self.state.error:
            self.store.dispatch(ErrorCleared())

    def close(self) -> None:
        self._unsubscribe()

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def restore_session(self) -> bool:
        """Resume a remembered session. Returns True when one was found."""
        with self._request():
            session = self.backend.get_session()
            if session is None:
                return False
            self._sign_in_with(session)
        logger.info("Restored session for user %s", session.user.id)
        return True

    def login(self, email: str, password: str) -> AppState:
        try:
            email, password = validation.validate_credentials(email, password)
        except ValidationError as exc:
            self.store.dispatch(RequestFailed(str(exc)))
            raise
        with self._request():
            session = self.backend.sign_in(email, password)
            state = self._sign_in_with(session)
        return state

    def signup(self, name: str, email: str, password: str) -> AppState:
        try:
            name, email, password = validation.validate_signup(name, email, password)
        except ValidationError as exc:
            self.store.dispatch(RequestFailed(str(exc)))
            raise
        with self._request():
            session = self.backend.sign_up(email, password, name)
            state = self.store.dispatch(SignedIn(user=session.user, transactions=()))
        return state

    def logout(self) -> AppState:
        user = self.state.user
        try:
            self.backend.sign_out()
        finally:
            # The handler usually dispatched SignedOut already; make sure regardless.
            if self.state.user is not None or self.state.screen is not Screen.LOGIN:
                self.store.dispatch(SignedOut())
        logger.info("User %s signed out", user.id if user else None)
        return self.state

    def request_password_reset(self, email: str) -> None:
        email = validation.validate_reset_email(email)
        with self._request():
            self.backend.request_password_reset(email)

    # ------------------------------------------------------------------
    # Navigation and onboarding
    # ------------------------------------------------------------------

    def navigate(self, screen: Screen) -> AppState:
        return self.store.dispatch(Navigated(Screen(screen)))

    def begin_onboarding(self) -> AppState:
        return self.navigate(onboarding_next(Screen.ONBOARDING_WELCOME))

    def onboarding_back(self) -> AppState:
        current = self.state.screen
        if current not in ONBOARDING_SEQUENCE:
            raise InvalidTransition(current.value, 'previous onboarding step')
        previous = onboarding_previous(current)
        if previous is None:
            raise InvalidTransition(current.value, 'previous onboarding step')
        return self.navigate(previous)

    def submit_onboarding_budget(self, budget: Any) -> AppState:
        """Hold the budget in state and move to the categories step.

        The budget is persisted together with the categories when onboarding
        completes.
        """
        if self.state.screen is not Screen.ONBOARDING_BUDGET:
            raise InvalidTransition(self.state.screen.value, Screen.ONBOARDING_CATEGORIES.value)
        amount = validation.validate_onboarding_budget(budget)
        user = self._require_user()
        self.store.dispatch(ProfileUpdated(user.apply(monthly_budget=amount)))
        return self.navigate(Screen.ONBOARDING_CATEGORIES)

    def complete_onboarding(self, selected: Iterable[str] = ()) -> AppState:
        if self.state.screen is not Screen.ONBOARDING_CATEGORIES:
            raise InvalidTransition(self.state.screen.value, Screen.DASHBOARD.value)
        user = self._require_user()
        categories = validation.normalize_category_selection(selected, CATEGORY_IDS)
        with self._request():
            saved = self.backend.update_profile(
                user.id,
                monthly_budget=user.monthly_budget,
                selected_categories=categories,
                onboarding_complete=True,
            )
            self.store.dispatch(OnboardingCompleted(saved))
            if self.seed_sample_data and not self.state.transactions:
                drafts = generate_sample_transactions(self._today())
                self.backend.insert_transactions(saved.id, drafts)
                logger.info("Seeded %d sample transactions for user %s", len(drafts), saved.id)
                self.refresh_transactions()
        return self.state

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def refresh_transactions(self) -> Tuple[Transaction, ...]:
        user = self._require_user()
        with self._request():
            rows = tuple(self.backend.list_transactions(user.id))
            self.store.dispatch(TransactionsLoaded(rows))
        return rows

    def add_transaction(
        self,
        amount: Any,
        category: str,
        description: str,
        txn_date: Any = None,
        txn_type: Any = 'expense',
    ) -> Transaction:
        draft = validation.validate_transaction(amount, category, description, txn_date, txn_type)
        user = self._require_user()
        with self._request():
            created = self.backend.insert_transaction(user.id, draft)
            self.store.dispatch(TransactionAdded(created))
        logger.info("Added %s transaction %s", created.type.value, created.id)
        return created

    def update_transaction(
        self,
        transaction_id: str,
        amount: Any,
        category: str,
        description: str,
        txn_date: Any = None,
        txn_type: Any = 'expense',
    ) -> Transaction:
        draft = validation.validate_transaction(amount, category, description, txn_date, txn_type)
        user = self._require_user()
        with self._request():
            updated = self.backend.update_transaction(
                user.id,
                transaction_id,
                amount=draft.amount,
                category=draft.category,
                description=draft.description,
                date=draft.date,
                type=draft.type,
            )
            self.store.dispatch(TransactionUpdated(updated))
        return updated

    def delete_transaction(self, transaction_id: str) -> None:
        user = self._require_user()
        with self._request():
            self.backend.delete_transaction(user.id, transaction_id)
            self.store.dispatch(TransactionDeleted(transaction_id))
        logger.info("Deleted transaction %s", transaction_id)

    def clear_transactions(self) -> int:
        user = self._require_user()
        with self._request():
            removed = self.backend.delete_all_transactions(user.id)
        self.refresh_transactions()
        logger.info("Cleared %d transactions for user %s", removed, user.id)
        return removed

    # ------------------------------------------------------------------
    # Profile and preferences
    # ------------------------------------------------------------------

    def update_profile(self, name: str, monthly_budget: Any) -> AppState:
        name, budget = validation.validate_profile(name, monthly_budget)
        user = self._require_user()
        with self._request():
            saved = self.backend.update_profile(user.id, name=name, monthly_budget=budget)
            self.store.dispatch(ProfileUpdated(saved))
        return self.state

    def load_theme(self) -> str:
        theme = prefs.load_theme(self.preferences_path)
        if theme != self.state.theme:
            self.store.dispatch(ThemeChanged(theme))
        return theme

    def toggle_theme(self) -> str:
        theme = 'dark' if self.state.theme == 'light' else 'light'
        prefs.save_theme(theme, self.preferences_path)
        self.store.dispatch(ThemeChanged(theme))
        return theme

    # ------------------------------------------------------------------
    # Exports
    # ------------------------------------------------------------------

    def export_csv(self, query: str = '', category: Optional[str] = None, txn_type: Optional[str] = None) -> Tuple[str, str]:
        view = filter_transactions(self.state.transactions, query, category, txn_type)
        return transactions_to_csv(view.transactions, today=self._today())

    def export_json(self, exported_at: Optional[datetime] = None) -> Tuple[str, str]:
        return snapshot_to_json(self.state.user, self.state.transactions, exported_at)
