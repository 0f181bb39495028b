"""Error types raised across FinanceFlow."""

from __future__ import annotations

from typing import Dict, Optional


class FinanceFlowError(Exception):
    """Base class for all recoverable application errors."""


class ValidationError(FinanceFlowError):
    """Malformed or missing form input.

    ``errors`` maps a form field name to the message shown next to it. The
    exception message is the first field message so a screen can show a
    single banner when it does not render per-field errors.
    """

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        first = next(iter(self.errors.values()), "Invalid input")
        super().__init__(first)

    def message_for(self, field: str) -> Optional[str]:
        return self.errors.get(field)


class AuthenticationError(FinanceFlowError):
    """Sign-in or sign-up was rejected by the backend."""


class BackendError(FinanceFlowError):
    """A storage call failed."""


class NotFoundError(BackendError):
    """The requested record does not exist for this user."""


class InvalidTransition(FinanceFlowError):
    """A screen change that the navigation state machine does not allow."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot navigate from '{current}' to '{target}'")
