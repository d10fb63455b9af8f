#!/usr/bin/env python3
"""
Example: Splitting a weekend trip between three friends

Logs a few expenses against an in-memory ledger, shows that a repeated
submission is rejected, and prints who owes whom.
"""

import os
import sys
from datetime import datetime, timezone, timedelta

# Add the project root to the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from wepay.storage import InMemoryStorage
from wepay.models import Member
from wepay.ledger import LedgerStore
from wepay.errors import DuplicateExpense


def main():
    print("WePay - Weekend Trip Example")
    print("=" * 40)

    store = LedgerStore(InMemoryStorage())
    group = store.create_group("Weekend trip", [
        Member(id="alice", name="Alice"),
        Member(id="bob", name="Bob"),
        Member(id="carol", name="Carol"),
    ])
    print(f"\nCreated group '{group.name}' ({group.id})")

    yesterday = datetime.now(timezone.utc) - timedelta(days=1)
    store.append_expense(group.id, "Cabin", "240.00", "alice",
                         ["alice", "bob", "carol"], category="lodging",
                         created_at=yesterday)
    store.append_expense(group.id, "Groceries", "65.40", "bob",
                         ["alice", "bob", "carol"], category="food")
    store.append_expense(group.id, "Fuel", "50.00", "carol",
                         ["alice", "carol"], category="transport")

    try:
        store.append_expense(group.id, "Fuel", "50.00", "carol", ["alice", "carol"])
    except DuplicateExpense as e:
        print(f"Second 'Fuel' submission rejected: {e}")

    report = store.get_balances(group.id)
    names = {member.id: member.name for member in report.members}

    print(f"\nBalances for {report.group_name}:")
    for debtor, owed in report.balances.items():
        for creditor, amount in owed.items():
            print(f"   {names[debtor]} owes {names[creditor]} {amount:.2f}")


if __name__ == "__main__":
    main()
