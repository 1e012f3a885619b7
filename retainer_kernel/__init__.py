"""
Retainer Kernel

Period-budget reconciliation for retainer billing agreements:
- Calendar month enumeration over an editable date range
- Monthly labor/overhead budget ledgers with template seeding
- Atomic extend-then-shrink reconciliation on date edits
- Month-scoped and lifetime budget/spend aggregates
"""

__version__ = "0.1.0"
