"""
Group Ledger Domain Model

Groups own an append-only list of expenses. Expenses are immutable once
created; balances are never stored on the model and are always derived
from the expense list.
"""

from decimal import Decimal, InvalidOperation
from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import uuid

from .errors import InvalidExpense
from .storage import StorageRecord


# Amounts must stay well inside the decimal context so shares and running
# totals can never overflow or underflow to zero
MAX_AMOUNT_EXPONENT = 14
MIN_AMOUNT_EXPONENT = -12


def parse_amount(value: Any) -> Decimal:
    """
    Convert a user supplied amount to a positive Decimal

    Floats go through str() so 0.1 becomes Decimal('0.1') rather than its
    binary expansion.

    Raises:
        InvalidExpense: If the value is not a finite number greater than zero,
            or its magnitude is outside the supported range
    """
    if isinstance(value, bool):
        raise InvalidExpense(f"Invalid amount: {value!r}")
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise InvalidExpense(f"Invalid amount: {value!r}")
    if not value.is_finite():
        raise InvalidExpense(f"Invalid amount: {value!r}")
    if value <= Decimal('0'):
        raise InvalidExpense("Expense amount must be positive")
    if not MIN_AMOUNT_EXPONENT <= value.adjusted() <= MAX_AMOUNT_EXPONENT:
        raise InvalidExpense(f"Expense amount out of range: {value}")
    return value


@dataclass(frozen=True)
class Member:
    """A participant identity within a group"""
    id: str
    name: str

    def to_dict(self) -> Dict[str, str]:
        return {'id': self.id, 'name': self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Member':
        return cls(id=data['id'], name=data.get('name', ''))


@dataclass(frozen=True)
class Expense:
    """
    A single payment: ``amount`` paid by ``paid_by`` and split evenly
    between every entry of ``split_between``.
    """
    id: str
    description: str
    amount: Decimal
    category: str
    paid_by: str
    split_between: Tuple[str, ...]
    created_at: datetime

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))
        if not isinstance(self.split_between, tuple):
            object.__setattr__(self, 'split_between', tuple(self.split_between))

    @classmethod
    def create(
        cls,
        description: str,
        amount: Any,
        paid_by: str,
        split_between: List[str],
        category: str = "",
        created_at: Optional[datetime] = None
    ) -> 'Expense':
        """Build a new expense with a fresh id, stamped now unless told otherwise"""
        return cls(
            id=str(uuid.uuid4()),
            description=description,
            amount=parse_amount(amount),
            category=category or "",
            paid_by=paid_by,
            split_between=tuple(split_between),
            created_at=created_at or datetime.now(timezone.utc)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'description': self.description,
            'amount': str(self.amount),
            'category': self.category,
            'paid_by': self.paid_by,
            'split_between': list(self.split_between),
            'created_at': self.created_at.isoformat()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Expense':
        return cls(
            id=data['id'],
            description=data['description'],
            amount=Decimal(data['amount']),
            category=data.get('category', ''),
            paid_by=data['paid_by'],
            split_between=tuple(data['split_between']),
            created_at=datetime.fromisoformat(data['created_at'])
        )


@dataclass
class Group(StorageRecord):
    """A named set of members with their shared expense ledger"""
    name: str
    members: List[Member] = field(default_factory=list)
    expenses: List[Expense] = field(default_factory=list)

    @property
    def member_ids(self) -> List[str]:
        return [member.id for member in self.members]

    def has_member(self, member_id: str) -> bool:
        return any(member.id == member_id for member in self.members)

    def get_member(self, member_id: str) -> Optional[Member]:
        for member in self.members:
            if member.id == member_id:
                return member
        return None

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result['members'] = [member.to_dict() for member in self.members]
        result['expenses'] = [expense.to_dict() for expense in self.expenses]
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Group':
        data = dict(data)
        data['members'] = [Member.from_dict(m) for m in data.get('members', [])]
        data['expenses'] = [Expense.from_dict(e) for e in data.get('expenses', [])]
        return super().from_dict(data)
