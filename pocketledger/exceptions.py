"""
Core Error Taxonomy

Every failure the ledger core can report is a subclass of LedgerError.
Failures are deterministic input-validation problems, never transient
faults: callers report them to the user and leave state untouched.

Each error carries a one-line `user_message` that the command interface
can show as-is. No stack traces or internal state are exposed there.
"""

from typing import Optional


class LedgerError(Exception):
    """Base exception for all core ledger failures."""

    default_message = "Operation failed"

    def __init__(self, message: Optional[str] = None):
        self.user_message = message or self.default_message
        super().__init__(self.user_message)


class InvalidAmountError(LedgerError):
    """Amount is non-positive, NaN or infinite."""

    default_message = "Amount must be a positive number"

    def __init__(self, amount: object = None, message: Optional[str] = None):
        self.amount = amount
        super().__init__(message)


class InvalidCategoryError(LedgerError):
    """Category is empty or whitespace-only."""

    default_message = "Category cannot be empty"


class InsufficientFundsError(LedgerError):
    """Expense amount exceeds the current balance."""

    def __init__(self, balance: float, required: float):
        self.balance = balance
        self.required = required
        super().__init__(
            f"Insufficient funds: balance {balance:.2f}, required {required:.2f}"
        )


class BudgetNotFoundError(LedgerError):
    """No budget limit is set for the category."""

    def __init__(self, category: str):
        self.category = category
        super().__init__(f"No budget found for category '{category}'")


class UnconfirmedBudgetEditError(LedgerError):
    """A budget edit would drop the limit below current spend and was not confirmed."""

    def __init__(self, category: str, new_limit: float, spent: float):
        self.category = category
        self.new_limit = new_limit
        self.spent = spent
        super().__init__(
            f"New limit {new_limit:.2f} for '{category}' is below "
            f"the amount already spent ({spent:.2f}); confirmation required"
        )


class CategoryNotFoundError(LedgerError):
    """Category appears in no record and has no budget."""

    def __init__(self, category: str):
        self.category = category
        super().__init__(f"Category '{category}' not found")


class SameCategoryError(LedgerError):
    """Rename target equals the source category."""

    default_message = "New category is the same as the old one"


class InsufficientCategoriesError(LedgerError):
    """Merge was given fewer than two source categories."""

    default_message = "At least 2 categories are required for a merge"


class NoCategoriesFoundError(LedgerError):
    """None of the categories given to merge exist."""

    def __init__(self, categories: list[str]):
        self.categories = categories
        super().__init__("None of the given categories were found")


class NotAuthenticatedError(LedgerError):
    """Operation attempted without an active account."""

    default_message = "Not logged in"
