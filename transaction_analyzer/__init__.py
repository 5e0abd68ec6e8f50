"""
Transaction Analyzer - Source Package

Reads bank transaction CSV exports and produces per-currency
financial analytics: monthly and yearly income/expenses, balance
history, transaction type and counterparty breakdowns.

DESIGN PRINCIPLES:
1. Fail early, fail visibly (one bad field rejects the whole file)
2. No silent corrections
3. Never mix currencies
4. Every step must be auditable
"""

__version__ = "1.0.0"
__author__ = "Transaction Analyzer Team"
