"""
Financial Planning Engine - Source Package

The decision logic behind a personal goal/finance tracker: recurring
ledger totals, funding targets, a months-vs-payment financing solver,
month-by-month reconciliation and a 12-month balance projection.

DESIGN PRINCIPLES:
1. Pure calculations over already-loaded records
2. Fail early, fail visibly on invalid input
3. A validated month is a frozen snapshot
4. "Now" is always injected, never read ad hoc
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Financial Planning Engine Team"
