"""
Balance Engine

Derives who owes whom from a group's expense ledger. Every expense is split
evenly between the entries of its split list and each non-payer is charged
one share towards the payer. Debts accumulate per (debtor, creditor) pair
in ledger order and are never netted against the opposite direction.

Balances are computed fresh on every call; nothing here is stored.
"""

from decimal import Decimal
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from .errors import InvalidExpense
from .models import Expense, Group, Member


BalanceGraph = Dict[str, Dict[str, Decimal]]


def expense_share(expense: Expense) -> Decimal:
    """
    Amount charged to each entry of the expense's split list

    Plain division: no rounding and no remainder redistribution.

    Raises:
        InvalidExpense: If the split list is empty
    """
    if not expense.split_between:
        raise InvalidExpense(f"Expense {expense.id} has no members to split between")
    return expense.amount / Decimal(len(expense.split_between))


def apply_expense(balances: BalanceGraph, expense: Expense) -> BalanceGraph:
    """Add one expense's shares to ``balances`` in place and return it"""
    share = expense_share(expense)
    creditor = expense.paid_by

    for debtor in expense.split_between:
        if debtor == creditor:
            # The payer's own share is never recorded
            continue
        owed = balances.setdefault(debtor, {})
        owed[creditor] = owed.get(creditor, Decimal('0')) + share

    return balances


def compute_balances(expenses: Iterable[Expense]) -> BalanceGraph:
    """
    Build the debt graph ``{debtor_id: {creditor_id: amount}}``

    Expenses are applied in the order given, so the result is exactly
    reproducible for a fixed ledger.
    """
    balances: BalanceGraph = {}
    for expense in expenses:
        apply_expense(balances, expense)
    return balances


@dataclass
class BalanceReport:
    """Balances of one group plus its name and members for display"""
    group_id: str
    group_name: str
    members: List[Member]
    balances: BalanceGraph = field(default_factory=dict)

    def amount_owed(self, debtor_id: str, creditor_id: str) -> Decimal:
        """What ``debtor_id`` owes ``creditor_id`` (zero if nothing recorded)"""
        return self.balances.get(debtor_id, {}).get(creditor_id, Decimal('0'))

    def owed_by(self, debtor_id: str) -> Dict[str, Decimal]:
        """Creditors of ``debtor_id`` and the amount owed to each"""
        return dict(self.balances.get(debtor_id, {}))

    def owed_to(self, creditor_id: str) -> Dict[str, Decimal]:
        """Debtors of ``creditor_id`` and the amount each owes"""
        return {
            debtor: owed[creditor_id]
            for debtor, owed in self.balances.items()
            if creditor_id in owed
        }

    def to_dict(self) -> Dict:
        return {
            'group': self.group_name,
            'members': [member.to_dict() for member in self.members],
            'balances': {
                debtor: {creditor: str(amount) for creditor, amount in owed.items()}
                for debtor, owed in self.balances.items()
            }
        }


class BalanceEngine:
    """Stateless engine turning a group's ledger into a BalanceReport"""

    def group_balances(self, group: Group) -> BalanceReport:
        return BalanceReport(
            group_id=group.id,
            group_name=group.name,
            members=list(group.members),
            balances=compute_balances(group.expenses)
        )
