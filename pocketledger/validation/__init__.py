"""Validation package."""

from pocketledger.validation.validator import (
    is_valid_amount,
    is_valid_category,
    validate_amount,
    validate_category,
)

__all__ = [
    "is_valid_amount",
    "is_valid_category",
    "validate_amount",
    "validate_category",
]
