"""
Test suite for the group ledger store

Tests group creation, validated expense appends, duplicate rejection and
balance queries against both storage backends.
"""

import threading
import pytest
from decimal import Decimal
from datetime import datetime, timezone, timedelta

from wepay.storage import InMemoryStorage, SQLiteStorage
from wepay.models import Member
from wepay.ledger import LedgerStore
from wepay.errors import (
    DuplicateExpense, GroupNotFound, InvalidExpense, InvalidGroup, NotFound
)


class TestGroupCreation:
    """Test creating and loading groups"""

    def setup_method(self):
        self.store = LedgerStore(InMemoryStorage())

    def test_create_group_with_member_objects(self):
        group = self.store.create_group(
            "Flatmates", [Member(id="A", name="Alice"), Member(id="B", name="Bob")]
        )

        assert group.name == "Flatmates"
        assert group.member_ids == ["A", "B"]
        assert group.expenses == []

        loaded = self.store.get_group(group.id)
        assert loaded.name == "Flatmates"
        assert loaded.get_member("B").name == "Bob"

    def test_create_group_generates_missing_ids(self):
        group = self.store.create_group("Trip", [("Alice", None), "Bob"])

        assert len(group.members) == 2
        assert all(member.id for member in group.members)
        assert group.members[0].name == "Alice"
        assert group.members[1].name == "Bob"

    def test_blank_name_rejected(self):
        with pytest.raises(InvalidGroup, match="name is required"):
            self.store.create_group("  ", [Member(id="A", name="Alice")])

    def test_duplicate_member_ids_rejected(self):
        with pytest.raises(InvalidGroup, match="unique"):
            self.store.create_group(
                "Trip", [Member(id="A", name="Alice"), Member(id="A", name="Al")]
            )

    def test_unknown_group(self):
        with pytest.raises(GroupNotFound, match="not found"):
            self.store.get_group("missing")

    def test_not_found_is_a_value_error(self):
        with pytest.raises(ValueError):
            self.store.get_balances("missing")

    def test_list_groups_in_creation_order(self):
        first = self.store.create_group("First", [])
        second = self.store.create_group("Second", [])

        assert [g.id for g in self.store.list_groups()] == [first.id, second.id]


class TestAppendExpense:
    """Test expense appends and their validation"""

    def setup_method(self):
        self.storage = InMemoryStorage()
        self.store = LedgerStore(self.storage)
        self.group = self.store.create_group("Trip", [
            Member(id="A", name="Alice"),
            Member(id="B", name="Bob"),
            Member(id="C", name="Carol"),
        ])

    def append(self, **overrides):
        kwargs = dict(
            group_id=self.group.id,
            description="Lunch",
            amount="30",
            paid_by="A",
            split_between=["A", "B", "C"],
            category="food"
        )
        kwargs.update(overrides)
        return self.store.append_expense(**kwargs)

    def stored_expense_count(self):
        return len(self.store.get_expenses(self.group.id))

    def test_append_persists_expense(self):
        updated = self.append()

        assert len(updated.expenses) == 1
        expense = self.store.get_expenses(self.group.id)[0]
        assert expense.description == "Lunch"
        assert expense.amount == Decimal('30')
        assert expense.category == "food"
        assert expense.paid_by == "A"
        assert expense.split_between == ("A", "B", "C")
        assert expense.created_at.tzinfo is not None

    def test_amount_accepts_float_and_int(self):
        self.append(description="Coffee", amount=4.2)
        self.append(description="Taxi", amount=12)

        amounts = [e.amount for e in self.store.get_expenses(self.group.id)]
        assert amounts == [Decimal('4.2'), Decimal('12')]

    def test_expenses_kept_in_append_order(self):
        for description in ("one", "two", "three"):
            self.append(description=description)

        descriptions = [e.description for e in self.store.get_expenses(self.group.id)]
        assert descriptions == ["one", "two", "three"]

    def test_unknown_group(self):
        with pytest.raises(GroupNotFound):
            self.append(group_id="missing")

    @pytest.mark.parametrize("amount", ["0", "-5", 0, -1.5, "abc", "NaN", "Infinity", None, True])
    def test_invalid_amount_rejected(self, amount):
        with pytest.raises(InvalidExpense):
            self.append(amount=amount)
        assert self.stored_expense_count() == 0

    def test_empty_split_rejected_and_ledger_unchanged(self):
        with pytest.raises(InvalidExpense, match="at least one member"):
            self.append(split_between=[])
        assert self.stored_expense_count() == 0

    def test_unknown_payer_rejected(self):
        with pytest.raises(InvalidExpense, match="Payer Z"):
            self.append(paid_by="Z")
        assert self.stored_expense_count() == 0

    def test_unknown_split_member_rejected(self):
        with pytest.raises(InvalidExpense, match="Members X, Y"):
            self.append(split_between=["A", "Y", "X"])
        assert self.stored_expense_count() == 0

    def test_overflowing_amount_rejected_and_balances_still_work(self):
        self.append(description="Hotel", amount="90")

        with pytest.raises(InvalidExpense, match="out of range"):
            self.append(description="Yacht", amount="1e9999999")

        assert self.stored_expense_count() == 1
        report = self.store.get_balances(self.group.id)
        assert report.amount_owed("B", "A") == Decimal('30')

    def test_unknown_group_does_not_register_lock(self):
        for i in range(50):
            with pytest.raises(GroupNotFound):
                self.append(group_id=f"missing-{i}")

        assert self.store._group_locks == {}

        self.append()
        assert list(self.store._group_locks) == [self.group.id]

    def test_blank_description_rejected(self):
        with pytest.raises(InvalidExpense, match="description"):
            self.append(description="")

    def test_duplicate_same_day_rejected(self):
        first = self.append()
        original_id = first.expenses[0].id

        with pytest.raises(DuplicateExpense) as exc_info:
            self.append(split_between=["A", "B"])

        assert exc_info.value.existing_expense_id == original_id
        assert self.stored_expense_count() == 1

    def test_same_content_next_day_accepted(self):
        """An identical expense logged yesterday does not block today's"""
        yesterday = datetime.now(timezone.utc) - timedelta(days=1)
        self.append(created_at=yesterday)

        self.append()
        assert self.stored_expense_count() == 2

    def test_duplicate_window_timezone(self):
        """The configured zone decides where the day starts"""
        store = LedgerStore(self.storage, duplicate_timezone=timezone.utc)
        earlier_today = datetime.now(timezone.utc).replace(hour=0, minute=0, second=1)
        store.append_expense(self.group.id, "Breakfast", "9", "B", ["A", "B"],
                             created_at=earlier_today)

        with pytest.raises(DuplicateExpense):
            store.append_expense(self.group.id, "Breakfast", "9", "B", ["B"])

    def test_concurrent_identical_appends_accept_one(self):
        """Check-then-append is atomic per group"""
        results = []
        barrier = threading.Barrier(8)

        def submit():
            barrier.wait()
            try:
                self.append(description="Groceries", amount="48.50")
                results.append("ok")
            except DuplicateExpense:
                results.append("duplicate")

        threads = [threading.Thread(target=submit) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count("ok") == 1
        assert results.count("duplicate") == 7
        assert self.stored_expense_count() == 1


class TestBalanceQueries:
    """Test balances computed through the store"""

    def setup_method(self):
        self.store = LedgerStore(InMemoryStorage())
        self.group = self.store.create_group("Trip", [
            Member(id="A", name="Alice"),
            Member(id="B", name="Bob"),
            Member(id="C", name="Carol"),
        ])

    def test_balance_example(self):
        self.store.append_expense(self.group.id, "Hotel", "90", "A", ["A", "B", "C"])

        report = self.store.get_balances(self.group.id)

        assert report.group_name == "Trip"
        assert report.balances["B"]["A"] == Decimal('30')
        assert report.balances["C"]["A"] == Decimal('30')
        assert "A" not in report.balances

    def test_balances_follow_each_append(self):
        """Balances are recomputed from the ledger on every query"""
        self.store.append_expense(self.group.id, "Hotel", "90", "A", ["A", "B", "C"])
        before = self.store.get_balances(self.group.id)

        self.store.append_expense(self.group.id, "Dinner", "60", "A", ["A", "B"])
        after = self.store.get_balances(self.group.id)

        assert before.amount_owed("B", "A") == Decimal('30')
        assert after.amount_owed("B", "A") == Decimal('60')
        assert after.amount_owed("C", "A") == Decimal('30')

    def test_balances_for_unknown_group(self):
        with pytest.raises(NotFound):
            self.store.get_balances("missing")


class TestSQLiteBackedLedger:
    """Test that ledgers survive a reopen of the SQLite file"""

    def test_reopen_preserves_groups_and_expenses(self, tmp_path):
        db_path = tmp_path / "wepay.db"

        storage = SQLiteStorage(db_path)
        store = LedgerStore(storage)
        group = store.create_group("Trip", [Member(id="A", name="Alice"),
                                            Member(id="B", name="Bob")])
        store.append_expense(group.id, "Fuel", "50.10", "B", ["A", "B"])
        storage.close()

        reopened = LedgerStore(SQLiteStorage(db_path))
        expenses = reopened.get_expenses(group.id)

        assert len(expenses) == 1
        assert expenses[0].amount == Decimal('50.10')
        assert reopened.get_balances(group.id).amount_owed("A", "B") == Decimal('25.05')

        with pytest.raises(DuplicateExpense):
            reopened.append_expense(group.id, "Fuel", "50.10", "B", ["A"])
