"""
Group Ledger Store

Owns groups and their expense ledgers on top of a storage backend. Appends
are validated, checked for same-day duplicates and written while holding a
per-group lock, so a duplicate check and the append that follows it can
never interleave with another append to the same group.
"""

from datetime import datetime, timezone, tzinfo
from typing import Dict, Iterable, List, Optional, Tuple, Union
import threading
import uuid

from .balances import BalanceEngine, BalanceReport
from .duplicates import find_duplicate_expense
from .errors import DuplicateExpense, GroupNotFound, InvalidExpense, InvalidGroup
from .logging_config import get_logger, log_action
from .models import Expense, Group, Member
from .storage import StorageInterface


logger = get_logger("wepay.ledger")

MemberSpec = Union[Member, Tuple[str, str], str]


class LedgerStore:
    """
    Group and expense store used by the request layer

    Balances are derived from the stored ledger on every query, never
    stored separately.
    """

    def __init__(self, storage: StorageInterface, engine: Optional[BalanceEngine] = None,
                 duplicate_timezone: Optional[tzinfo] = None):
        self.storage = storage
        self.engine = engine or BalanceEngine()
        self.duplicate_timezone = duplicate_timezone
        self.table_name = "groups"
        self._group_locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, group_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._group_locks.get(group_id)
            if lock is None:
                lock = self._group_locks[group_id] = threading.Lock()
            return lock

    def create_group(self, name: str, members: Iterable[MemberSpec]) -> Group:
        """
        Create a new group

        Args:
            name: Display name of the group
            members: Member objects, (name, id) pairs or bare names; bare
                names get a generated id

        Returns:
            The stored Group

        Raises:
            InvalidGroup: If the name is blank or member ids repeat
        """
        if not name or not name.strip():
            raise InvalidGroup("Group name is required")

        resolved = [self._resolve_member(spec) for spec in members]
        ids = [member.id for member in resolved]
        if len(set(ids)) != len(ids):
            raise InvalidGroup("Member ids must be unique within a group")

        now = datetime.now(timezone.utc)
        group = Group(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            name=name.strip(),
            members=resolved
        )
        self._save_group(group)

        log_action(
            logger, "info", f"Group '{group.name}' created",
            action="group_created", group_id=group.id,
            extra={"member_count": len(resolved)}
        )
        return group

    def get_group(self, group_id: str) -> Group:
        """
        Load a group with its full ledger

        Raises:
            GroupNotFound: If no group has this id
        """
        group = self._load_group(group_id)
        if group is None:
            raise GroupNotFound(group_id)
        return group

    def list_groups(self) -> List[Group]:
        """All groups in creation order"""
        return [Group.from_dict(data) for data in self.storage.load_all(self.table_name)]

    def get_expenses(self, group_id: str) -> List[Expense]:
        """A group's expenses in append order"""
        return list(self.get_group(group_id).expenses)

    def append_expense(
        self,
        group_id: str,
        description: str,
        amount,
        paid_by: str,
        split_between: List[str],
        category: str = "",
        created_at: Optional[datetime] = None
    ) -> Group:
        """
        Append an expense to a group's ledger

        Args:
            group_id: Group receiving the expense
            description: What was paid for
            amount: Positive amount (Decimal, int, float or numeric string)
            paid_by: Member id of the payer
            split_between: Member ids sharing the cost; repeats count as
                separate shares
            category: Free-form tag
            created_at: Creation time (defaults to now)

        Returns:
            The updated Group

        Raises:
            GroupNotFound: If the group does not exist
            InvalidExpense: If the expense is malformed
            DuplicateExpense: If the same expense was already logged today
        """
        # Groups are never deleted, so only known ids ever get a lock
        if not self.storage.exists(self.table_name, group_id):
            raise GroupNotFound(group_id)

        with self._lock_for(group_id):
            group = self.get_group(group_id)

            try:
                expense = self._build_expense(
                    group, description, amount, paid_by, split_between, category, created_at
                )
            except InvalidExpense as e:
                log_action(
                    logger, "warning", f"Expense rejected: {e}",
                    action="expense_rejected", group_id=group_id
                )
                raise

            duplicate = find_duplicate_expense(
                expense, group.expenses, tz=self.duplicate_timezone
            )
            if duplicate is not None:
                log_action(
                    logger, "warning", "Duplicate expense detected",
                    action="expense_duplicate", group_id=group_id,
                    expense_id=duplicate.id
                )
                raise DuplicateExpense(existing_expense_id=duplicate.id)

            group.expenses.append(expense)
            group.updated_at = datetime.now(timezone.utc)
            with self.storage.atomic():
                self._save_group(group)

        log_action(
            logger, "info", f"Expense '{expense.description}' appended",
            action="expense_appended", group_id=group_id, expense_id=expense.id,
            extra={
                "amount": str(expense.amount),
                "paid_by": expense.paid_by,
                "split_count": len(expense.split_between)
            }
        )
        return group

    def get_balances(self, group_id: str) -> BalanceReport:
        """
        Compute the group's debt graph from its current ledger

        Raises:
            GroupNotFound: If the group does not exist
        """
        return self.engine.group_balances(self.get_group(group_id))

    def _build_expense(self, group: Group, description: str, amount, paid_by: str,
                       split_between: List[str], category: str,
                       created_at: Optional[datetime]) -> Expense:
        if not description or not description.strip():
            raise InvalidExpense("Expense description is required")
        if not split_between:
            raise InvalidExpense("Expense must be split between at least one member")
        if not group.has_member(paid_by):
            raise InvalidExpense(f"Payer {paid_by} is not a member of group {group.id}")

        unknown = [m for m in split_between if not group.has_member(m)]
        if unknown:
            raise InvalidExpense(
                f"Members {', '.join(sorted(set(unknown)))} are not in group {group.id}"
            )

        return Expense.create(
            description=description,
            amount=amount,
            paid_by=paid_by,
            split_between=split_between,
            category=category,
            created_at=created_at
        )

    @staticmethod
    def _resolve_member(spec: MemberSpec) -> Member:
        if isinstance(spec, Member):
            return spec
        if isinstance(spec, tuple):
            name, member_id = spec
            return Member(id=member_id or str(uuid.uuid4()), name=name)
        return Member(id=str(uuid.uuid4()), name=spec)

    def _save_group(self, group: Group) -> None:
        self.storage.save(self.table_name, group.id, group.to_dict())

    def _load_group(self, group_id: str) -> Optional[Group]:
        data = self.storage.load(self.table_name, group_id)
        if data:
            return Group.from_dict(data)
        return None
