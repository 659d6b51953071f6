"""
Budget Tracker

Per-category spending limits, with usage and remaining amounts derived
from the ledger's expense records.

DESIGN DECISION: "No limit set" is a distinct answer, not zero.
`remaining()` returns the NO_LIMIT sentinel for unbudgeted categories,
and `usage_ratio()` refuses to answer for them.

Lowering a limit below what was already spent is destructive. The
tracker exposes `would_underrun_spend()` so the caller can ask the user
first, and `edit_limit()` refuses such an edit unless `confirmed=True`.
"""

from typing import Union

import structlog

from pocketledger.exceptions import BudgetNotFoundError, UnconfirmedBudgetEditError
from pocketledger.models.account import BudgetChange
from pocketledger.models.ledger import Ledger
from pocketledger.models.record import RecordKind
from pocketledger.validation import validate_amount, validate_category


logger = structlog.get_logger(__name__)


class NoLimitType:
    """Sentinel for categories without a budget."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_LIMIT"


NO_LIMIT = NoLimitType()


def _key(category: str) -> str:
    """Lookup key for a category: surrounding whitespace is not significant."""
    return category.strip() if isinstance(category, str) else category


class BudgetTracker:
    """
    View over an account's budget mapping and ledger.

    The tracker mutates the mapping it is given in place, so an Account
    and its tracker always agree.
    """

    def __init__(self, budgets: dict[str, float], ledger: Ledger):
        self._budgets = budgets
        self._ledger = ledger

    # -------------------------------------------------------------------------
    # Mutators
    # -------------------------------------------------------------------------

    def set_limit(self, category: str, limit: float) -> float:
        """
        Set a limit, overwriting any existing one unconditionally.

        Raises:
            InvalidCategoryError: empty/whitespace category
            InvalidAmountError: limit <= 0, NaN or infinite
        """
        limit = validate_amount(limit)
        category = validate_category(category)

        self._budgets[category] = limit
        logger.debug("budget_set", category=category, limit=limit)
        return limit

    def edit_limit(
        self,
        category: str,
        new_limit: float,
        confirmed: bool = False,
    ) -> BudgetChange:
        """
        Change an existing limit.

        Raises:
            BudgetNotFoundError: no limit exists for the category
            UnconfirmedBudgetEditError: new limit is under current spend
                and `confirmed` is False
        """
        new_limit = validate_amount(new_limit)
        category = validate_category(category)

        if category not in self._budgets:
            raise BudgetNotFoundError(category)

        spent = self.spent(category)
        below_spend = new_limit < spent
        if below_spend and not confirmed:
            raise UnconfirmedBudgetEditError(category, new_limit, spent)

        old_limit = self._budgets[category]
        self._budgets[category] = new_limit
        logger.debug(
            "budget_edited",
            category=category,
            old_limit=old_limit,
            new_limit=new_limit,
        )
        return BudgetChange(
            category=category,
            old_limit=old_limit,
            new_limit=new_limit,
            spent=spent,
            below_spend=below_spend,
        )

    def remove_limit(self, category: str) -> float:
        """
        Remove a limit and return the removed value.

        Raises:
            BudgetNotFoundError: no limit exists for the category
        """
        category = _key(category)
        if category not in self._budgets:
            raise BudgetNotFoundError(category)
        return self._budgets.pop(category)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def would_underrun_spend(self, category: str, new_limit: float) -> bool:
        """True if `new_limit` is below what was already spent in the category."""
        return new_limit < self.spent(category)

    def has_limit(self, category: str) -> bool:
        return _key(category) in self._budgets

    def spent(self, category: str) -> float:
        return self._ledger.amount_by_category(RecordKind.EXPENSE, _key(category))

    def remaining(self, category: str) -> Union[float, NoLimitType]:
        """
        Limit minus spend; negative means over budget.

        Returns NO_LIMIT when the category has no budget.
        """
        category = _key(category)
        limit = self._budgets.get(category)
        if limit is None:
            return NO_LIMIT
        return limit - self.spent(category)

    def usage_ratio(self, category: str) -> float:
        """
        Spend divided by limit.

        Raises:
            BudgetNotFoundError: the category has no budget
        """
        category = _key(category)
        limit = self._budgets.get(category)
        if not limit:
            raise BudgetNotFoundError(category)
        return self.spent(category) / limit

    def __contains__(self, category: str) -> bool:
        return self.has_limit(category)
