"""
WePay Group Ledger

Group expense sharing backend: groups log shared expenses and query the
pairwise debts derived from them. All amounts use Decimal arithmetic and
balances are always derived from the expense ledger, never stored.
"""

__version__ = "1.0.0"
