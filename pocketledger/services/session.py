"""
Session

Tracks which account is active. Credential checks happen elsewhere;
by the time `login()` is called the user is already authenticated.

Every core operation resolves its account through `require_account()`,
so calling the core with nobody logged in fails with
NotAuthenticatedError rather than acting on stale state.
"""

from typing import Optional

from pocketledger.exceptions import NotAuthenticatedError
from pocketledger.models.account import Account


class Session:
    """One active account per process run."""

    def __init__(self, account: Optional[Account] = None):
        self._account = account

    def login(self, account: Account) -> None:
        self._account = account

    def logout(self) -> Optional[Account]:
        """End the session, returning the account that was active."""
        account, self._account = self._account, None
        return account

    @property
    def is_authenticated(self) -> bool:
        return self._account is not None

    @property
    def current_account(self) -> Optional[Account]:
        return self._account

    def require_account(self) -> Account:
        """
        Raises:
            NotAuthenticatedError: nobody is logged in
        """
        if self._account is None:
            raise NotAuthenticatedError()
        return self._account
