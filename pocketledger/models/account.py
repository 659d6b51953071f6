"""
Account Aggregate

The Account is the unit of persistence and the unit every operation acts
on. It exclusively owns:
- one Ledger (records + cached balance)
- one budget mapping (category -> positive limit)
- one ordered list of Alerts

Records and alerts hold no back-reference to their account.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pocketledger.models.alert import Alert
from pocketledger.models.ledger import Ledger


class Account(BaseModel):
    """
    A single user's ledger, budgets and alerts.

    An absent budget entry means "no limit set", never "zero limit".
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    account_id: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Owner login / storage key"
    )
    created_at: datetime = Field(
        default_factory=datetime.now,
        description="When the account was created"
    )
    updated_at: datetime = Field(
        default_factory=datetime.now,
        description="Last successful mutation"
    )
    ledger: Ledger = Field(default_factory=Ledger)
    budgets: dict[str, float] = Field(
        default_factory=dict,
        description="Category -> spending limit"
    )
    alerts: list[Alert] = Field(default_factory=list)

    @field_validator("budgets")
    @classmethod
    def validate_limits(cls, v: dict[str, float]) -> dict[str, float]:
        """Stored limits must be positive."""
        for category, limit in v.items():
            if limit <= 0:
                raise ValueError(f"Budget limit for '{category}' must be positive")
        return v

    def touch(self) -> None:
        self.updated_at = datetime.now()

    def has_category(self, category: str) -> bool:
        """Does the category appear in any record or budget?"""
        return category in self.budgets or self.ledger.has_category(category)

    def all_categories(self) -> list[str]:
        """Categories from records and budgets, sorted."""
        return sorted(self.ledger.categories() | set(self.budgets))


class RenameResult(BaseModel):
    """Outcome of renaming a category."""

    old_category: str
    new_category: str
    renamed_records: int = Field(ge=0)
    failed_records: int = Field(default=0, ge=0)
    budget_moved: bool = False
    moved_limit: Optional[float] = None


class MergeResult(BaseModel):
    """Outcome of merging several categories into one."""

    new_category: str
    merged_categories: list[str] = Field(default_factory=list)
    not_found: list[str] = Field(
        default_factory=list,
        description="Inputs with no records and no budget (skipped)"
    )
    merged_records: int = Field(default=0, ge=0)
    failed_records: int = Field(default=0, ge=0)
    total_income: float = 0.0
    total_expense: float = 0.0
    merged_limit: Optional[float] = Field(
        default=None,
        description="Summed budget written to the new category, if any"
    )


class BudgetChange(BaseModel):
    """Outcome of editing a budget limit."""

    category: str
    old_limit: float
    new_limit: float
    spent: float
    below_spend: bool = Field(
        default=False,
        description="The new limit is under current spend (confirmed edit)"
    )
