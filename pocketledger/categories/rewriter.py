"""
Category Rewriter

Bulk rename/merge of category labels across ledger records and budgets.

Both operations validate everything up front and fail without touching
state. Once validation passes, records are rewritten one at a time: a
record that cannot be rewritten is logged and counted, and the rest
carry on. The returned counts are authoritative.

Neither operation changes any amount, so the ledger balance and the
income/expense totals are preserved exactly.
"""

from typing import Iterable

import structlog

from pocketledger.exceptions import (
    CategoryNotFoundError,
    InsufficientCategoriesError,
    NoCategoriesFoundError,
    SameCategoryError,
)
from pocketledger.models.account import Account, MergeResult, RenameResult
from pocketledger.models.record import RecordKind
from pocketledger.validation import is_valid_category, validate_category


logger = structlog.get_logger(__name__)


class CategoryRewriter:
    """Rewrites category labels inside one account."""

    def __init__(self, account: Account):
        self._account = account

    def rename(self, old_category: str, new_category: str) -> RenameResult:
        """
        Rename a category in every record and move its budget.

        A budget on the old category replaces (is not added to) any
        budget already set on the new one.

        Raises:
            InvalidCategoryError: either name is empty
            SameCategoryError: old and new are equal
            CategoryNotFoundError: old category has no records and no budget
        """
        old_category = validate_category(old_category)
        new_category = validate_category(new_category)

        if old_category == new_category:
            raise SameCategoryError()

        if not self._account.has_category(old_category):
            raise CategoryNotFoundError(old_category)

        renamed, failed = self._rewrite_records({old_category}, new_category)

        budgets = self._account.budgets
        moved_limit = budgets.pop(old_category, None)
        if moved_limit is not None:
            budgets[new_category] = moved_limit

        logger.info(
            "category_renamed",
            old_category=old_category,
            new_category=new_category,
            renamed_records=renamed,
            failed_records=failed,
            budget_moved=moved_limit is not None,
        )

        return RenameResult(
            old_category=old_category,
            new_category=new_category,
            renamed_records=renamed,
            failed_records=failed,
            budget_moved=moved_limit is not None,
            moved_limit=moved_limit,
        )

    def merge(self, categories: Iterable[str], new_category: str) -> MergeResult:
        """
        Merge several categories into `new_category`.

        Budgets of the merged categories are summed into one budget on
        `new_category`. A budget that `new_category` already had is
        discarded unless it is itself one of the merged sources.

        Raises:
            InvalidCategoryError: new_category is empty
            InsufficientCategoriesError: fewer than 2 source categories
            NoCategoriesFoundError: none of the sources exist
        """
        new_category = validate_category(new_category)

        sources = list(categories or [])
        if len(sources) < 2:
            raise InsufficientCategoriesError()

        found: list[str] = []
        not_found: list[str] = []
        for raw in dict.fromkeys(sources):
            if not is_valid_category(raw):
                not_found.append(str(raw))
                continue
            category = raw.strip()
            if category in found:
                continue
            if self._account.has_category(category):
                found.append(category)
            else:
                not_found.append(raw)

        if not found:
            raise NoCategoriesFoundError(sources)

        if not_found:
            logger.warning("merge_categories_not_found", categories=not_found)

        ledger = self._account.ledger
        total_income = sum(
            (ledger.amount_by_category(RecordKind.INCOME, c) for c in found), 0.0
        )
        total_expense = sum(
            (ledger.amount_by_category(RecordKind.EXPENSE, c) for c in found), 0.0
        )

        budgets = self._account.budgets
        merged_limit = 0.0
        for category in found:
            merged_limit += budgets.pop(category, 0.0)
        budgets.pop(new_category, None)
        if merged_limit > 0:
            budgets[new_category] = merged_limit

        merged, failed = self._rewrite_records(set(found), new_category)

        logger.info(
            "categories_merged",
            sources=found,
            new_category=new_category,
            merged_records=merged,
            failed_records=failed,
            merged_limit=merged_limit,
        )

        return MergeResult(
            new_category=new_category,
            merged_categories=found,
            not_found=not_found,
            merged_records=merged,
            failed_records=failed,
            total_income=total_income,
            total_expense=total_expense,
            merged_limit=merged_limit if merged_limit > 0 else None,
        )

    def _rewrite_records(self, sources: set[str], new_category: str) -> tuple[int, int]:
        """Relabel matching records one by one; returns (rewritten, failed)."""
        rewritten = 0
        failed = 0
        for record in self._account.ledger.records:
            if record.category not in sources:
                continue
            try:
                record.category = new_category
            except ValueError as e:
                failed += 1
                logger.error(
                    "record_rewrite_failed",
                    record_id=str(record.id),
                    category=record.category,
                    error=str(e),
                )
            else:
                rewritten += 1
        return rewritten, failed
