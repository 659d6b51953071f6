"""
Shared Semantic Validation

The command interface hands the core values that are already the right
primitive type. What remains is semantic validation:
- amounts must be positive and finite
- categories must be non-empty after trimming

IMPORTANT: Validation NEVER silently fixes issues.
A bad value raises; only surrounding whitespace is trimmed from categories.
"""

import math

from pocketledger.exceptions import InvalidAmountError, InvalidCategoryError


def is_valid_amount(amount: float) -> bool:
    """True for positive, finite numbers."""
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return False
    return value > 0 and not math.isnan(value) and not math.isinf(value)


def is_valid_category(category: str) -> bool:
    return isinstance(category, str) and bool(category.strip())


def validate_amount(amount: float) -> float:
    """
    Check an amount and return it as a float.

    Raises:
        InvalidAmountError: If amount is <= 0, NaN or infinite
    """
    if not is_valid_amount(amount):
        raise InvalidAmountError(amount)
    return float(amount)


def validate_category(category: str) -> str:
    """
    Check a category label and return it trimmed.

    Raises:
        InvalidCategoryError: If category is empty or whitespace-only
    """
    if not is_valid_category(category):
        raise InvalidCategoryError()
    return category.strip()

