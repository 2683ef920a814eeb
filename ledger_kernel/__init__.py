"""
Ledger Kernel - double-entry posting engine for a microfinance back office.

- Balanced journal entries against a chart of accounts
- Atomic posting with cached account balances
- Period close, backdate approval and reversal
- Liquidity, income statement, balance sheet and budget variance reports
"""

__version__ = "0.1.0"
