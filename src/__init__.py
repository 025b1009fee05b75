"""
Transaction Splits - Source Package

Splits one financial transaction into several sub-transactions whose
amounts must reconcile against the original.

DESIGN PRINCIPLES:
1. The base amount is captured once and never changes during a session
2. Every edit recomputes the remainder immediately
3. Nothing is committed until every validation check passes
4. A commit is all-or-nothing
5. The remote store is swappable
"""

__version__ = "1.0.0"
__author__ = "Transaction Splits Team"
