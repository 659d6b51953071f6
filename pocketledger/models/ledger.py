"""
Ledger Model

An ordered, append-only log of income/expense records plus a cached
running balance.

INVARIANT: `balance` equals the sum of income amounts minus the sum of
expense amounts applied through the Ledger's own mutators. It is kept
up to date by every mutator and never recomputed per query. Totals and
per-category sums, by contrast, are O(n) scans on demand.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from pocketledger.exceptions import InsufficientFundsError
from pocketledger.models.record import Record, RecordKind
from pocketledger.validation import validate_amount, validate_category


class Ledger(BaseModel):
    """Records in insertion order plus the cached balance."""

    records: list[Record] = Field(
        default_factory=list,
        description="Records in order of application"
    )
    balance: float = Field(
        default=0.0,
        description="Cached income minus expenses"
    )

    # -------------------------------------------------------------------------
    # Mutators
    # -------------------------------------------------------------------------

    def record_income(
        self,
        amount: float,
        category: str,
        occurred_at: Optional[datetime] = None,
    ) -> Record:
        """
        Append an income record and raise the balance.

        Raises:
            InvalidAmountError: amount <= 0, NaN or infinite
            InvalidCategoryError: empty/whitespace category
        """
        amount = validate_amount(amount)
        category = validate_category(category)

        return self._append(RecordKind.INCOME, amount, category, occurred_at)

    def record_expense(
        self,
        amount: float,
        category: str,
        occurred_at: Optional[datetime] = None,
    ) -> Record:
        """
        Append an expense record and lower the balance.

        Spending exactly the whole balance is allowed.

        Raises:
            InvalidAmountError: amount <= 0, NaN or infinite
            InvalidCategoryError: empty/whitespace category
            InsufficientFundsError: balance < amount
        """
        amount = validate_amount(amount)
        category = validate_category(category)

        if self.balance < amount:
            raise InsufficientFundsError(balance=self.balance, required=amount)

        return self._append(RecordKind.EXPENSE, amount, category, occurred_at)

    def _append(
        self,
        kind: RecordKind,
        amount: float,
        category: str,
        occurred_at: Optional[datetime],
    ) -> Record:
        fields = {"kind": kind, "amount": amount, "category": category}
        if occurred_at is not None:
            fields["occurred_at"] = occurred_at
        record = Record(**fields)

        self.records.append(record)
        self.balance += record.signed_amount
        return record

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def total_income(self) -> float:
        return self._sum(RecordKind.INCOME)

    def total_expense(self) -> float:
        return self._sum(RecordKind.EXPENSE)

    def amount_by_category(self, kind: RecordKind, category: str) -> float:
        """Sum of `kind` amounts with an exact (case-sensitive) category match."""
        return self._sum(kind, category)

    def recent_records(self, n: int) -> list[Record]:
        """The last `n` records in insertion order (not sorted by date)."""
        if n <= 0:
            return []
        return list(self.records[-n:])

    def last_record(self) -> Optional[Record]:
        return self.records[-1] if self.records else None

    def has_category(self, category: str) -> bool:
        return any(record.category == category for record in self.records)

    def categories(self) -> set[str]:
        return {record.category for record in self.records}

    def recomputed_balance(self) -> float:
        """Balance rebuilt from scratch; used to check the cached value."""
        return self.total_income() - self.total_expense()

    @property
    def is_empty(self) -> bool:
        return not self.records

    def _sum(self, kind: RecordKind, category: Optional[str] = None) -> float:
        return sum(
            (
                record.amount
                for record in self.records
                if record.kind == kind
                and (category is None or record.category == category)
            ),
            0.0,
        )
