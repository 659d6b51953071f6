"""
Ledger Record Model

A Record is one income or expense entry. Records are immutable once
created, with one exception: the category label may be rewritten by the
category rewriter (rename/merge). Category is therefore a plain field
with assignment validation, owned by the Ledger.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class RecordKind(str, Enum):
    """Direction of a ledger record."""
    INCOME = "income"
    EXPENSE = "expense"


class Record(BaseModel):
    """
    A single ledger entry.

    `occurred_at` is when the money moved. It can be earlier than the
    insertion order suggests when historical records are loaded.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique record identifier"
    )
    kind: RecordKind = Field(
        ...,
        description="Income or expense"
    )
    amount: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Positive, finite amount"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Category label (case-sensitive)"
    )
    occurred_at: datetime = Field(
        default_factory=datetime.now,
        description="When the income/expense happened"
    )

    @property
    def signed_amount(self) -> float:
        """Amount as it affects the balance."""
        return self.amount if self.kind == RecordKind.INCOME else -self.amount
