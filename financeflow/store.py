"""Application state container.

State lives in one immutable :class:`AppState`. Every change is an action
object passed to :meth:`Store.dispatch`; the pure :func:`reduce` function
computes the next state, the store swaps it in and notifies subscribers.
There is exactly one writer, so dispatches apply in the order they are made.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Tuple

try:
    from . import navigation as nav
    from .logging_setup import get_logger
    from .models import Transaction, UserProfile, sort_newest_first
    from .navigation import Screen
except ImportError:
    import navigation as nav
    from logging_setup import get_logger
    from models import Transaction, UserProfile, sort_newest_first
    from navigation import Screen

logger = get_logger(__name__)


@dataclass(frozen=True)
class AppState:
    screen: Screen = nav.INITIAL_SCREEN
    user: Optional[UserProfile] = None
    transactions: Tuple[Transaction, ...] = field(default_factory=tuple)
    theme: str = 'light'
    is_loading: bool = False
    error: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def onboarding_complete(self) -> bool:
        return self.user is not None and self.user.onboarding_complete


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RequestStarted:
    pass


@dataclass(frozen=True)
class RequestFailed:
    message: str


@dataclass(frozen=True)
class RequestFinished:
    pass


@dataclass(frozen=True)
class ErrorCleared:
    pass


@dataclass(frozen=True)
class SignedIn:
    """Sign-in, sign-up or a restored session."""

    user: UserProfile
    transactions: Tuple[Transaction, ...] = ()


@dataclass(frozen=True)
class SignedOut:
    pass


@dataclass(frozen=True)
class Navigated:
    screen: Screen


@dataclass(frozen=True)
class ProfileUpdated:
    user: UserProfile


@dataclass(frozen=True)
class OnboardingCompleted:
    user: UserProfile


@dataclass(frozen=True)
class TransactionsLoaded:
    transactions: Tuple[Transaction, ...]


@dataclass(frozen=True)
class TransactionAdded:
    transaction: Transaction


@dataclass(frozen=True)
class TransactionUpdated:
    transaction: Transaction


@dataclass(frozen=True)
class TransactionDeleted:
    transaction_id: str


@dataclass(frozen=True)
class ThemeChanged:
    theme: str


# ---------------------------------------------------------------------------
# Reducer
# ---------------------------------------------------------------------------


def reduce(state: AppState, action: object) -> AppState:
    """Return the state that results from applying ``action`` to ``state``.

    Raises :class:`~financeflow.exceptions.InvalidTransition` for a
    ``Navigated`` action the navigation rules reject.
    """
    if isinstance(action, RequestStarted):
        return replace(state, is_loading=True, error=None)

    if isinstance(action, RequestFailed):
        return replace(state, is_loading=False, error=action.message)

    if isinstance(action, RequestFinished):
        return replace(state, is_loading=False)

    if isinstance(action, ErrorCleared):
        return replace(state, error=None)

    if isinstance(action, SignedIn):
        return replace(
            state,
            user=action.user,
            transactions=tuple(action.transactions),
            screen=nav.landing_screen(action.user.onboarding_complete),
            is_loading=False,
            error=None,
        )

    if isinstance(action, SignedOut):
        # Theme is a device preference and survives sign-out.
        return AppState(theme=state.theme)

    if isinstance(action, Navigated):
        screen = nav.transition(
            state.screen,
            action.screen,
            authenticated=state.is_authenticated,
            onboarding_complete=state.onboarding_complete,
        )
        return replace(state, screen=screen, error=None)

    if isinstance(action, ProfileUpdated):
        return replace(state, user=action.user, is_loading=False, error=None)

    if isinstance(action, OnboardingCompleted):
        return replace(state, user=action.user, screen=Screen.DASHBOARD, is_loading=False, error=None)

    if isinstance(action, TransactionsLoaded):
        return replace(state, transactions=tuple(action.transactions), is_loading=False, error=None)

    if isinstance(action, TransactionAdded):
        return replace(
            state,
            transactions=sort_newest_first((action.transaction,) + state.transactions),
            is_loading=False,
            error=None,
        )

    if isinstance(action, TransactionUpdated):
        updated = tuple(
            action.transaction if txn.id == action.transaction.id else txn
            for txn in state.transactions
        )
        return replace(state, transactions=sort_newest_first(updated), is_loading=False, error=None)

    if isinstance(action, TransactionDeleted):
        remaining = tuple(txn for txn in state.transactions if txn.id != action.transaction_id)
        return replace(state, transactions=remaining, is_loading=False, error=None)

    if isinstance(action, ThemeChanged):
        return replace(state, theme=action.theme)

    raise TypeError(f"Unknown action: {action!r}")


Listener = Callable[[AppState], None]


class Store:
    """Holds the current :class:`AppState` and applies actions to it."""

    def __init__(self, initial: Optional[AppState] = None):
        self._state = initial or AppState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, action: object) -> AppState:
        new_state = reduce(self._state, action)
        logger.debug("Dispatched %s (screen=%s)", type(action).__name__, new_state.screen.value)
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)
        return new_state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
