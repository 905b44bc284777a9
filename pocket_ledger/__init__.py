"""
Pocket Ledger - Source Package

A single-user personal ledger: income and expense entries tagged by
category, filtered by date window and summarised per category.

DESIGN PRINCIPLES:
1. Every amount is exact (Decimal end to end)
2. Fail early, fail visibly on writes
3. Reads degrade to an empty report instead of crashing
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
