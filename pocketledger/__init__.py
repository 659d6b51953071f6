"""
PocketLedger - Source Package

A personal income/expense ledger with per-category budgets and
threshold alerts for a single logged-in user.

DESIGN PRINCIPLES:
1. The cached balance always equals income minus expenses
2. Fail early, fail visibly - no silent corrections
3. Alerts are derived from state, never entered by hand
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "PocketLedger Team"
