"""
Group, expense and balance endpoints
"""

from fastapi import APIRouter, HTTPException, Depends, status

from .system import WePaySystem, get_system
from .schemas import CreateGroupRequest, AddExpenseRequest
from ..errors import DuplicateExpense, GroupNotFound, WePayError
from ..models import Expense, Group


router = APIRouter()


def expense_to_response(expense: Expense) -> dict:
    return expense.to_dict()


def group_to_response(group: Group) -> dict:
    return {
        "id": group.id,
        "name": group.name,
        "members": [member.to_dict() for member in group.members],
        "expenses": [expense_to_response(e) for e in group.expenses],
        "created_at": group.created_at.isoformat(),
        "updated_at": group.updated_at.isoformat()
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_group(
    request: CreateGroupRequest,
    system: WePaySystem = Depends(get_system)
):
    """Create a new group"""
    try:
        group = system.ledger.create_group(
            name=request.name,
            members=[(m.name, m.id) for m in request.members]
        )
    except WePayError as e:
        raise HTTPException(status_code=400, detail=str(e))
    
    return group_to_response(group)


@router.get("")
async def list_groups(system: WePaySystem = Depends(get_system)):
    """List all groups"""
    groups = system.ledger.list_groups()
    return {
        "groups": [
            {"id": g.id, "name": g.name, "member_count": len(g.members)}
            for g in groups
        ]
    }


@router.get("/{group_id}")
async def get_group(
    group_id: str,
    system: WePaySystem = Depends(get_system)
):
    """Get a group with its members and expenses"""
    try:
        group = system.ledger.get_group(group_id)
    except GroupNotFound:
        raise HTTPException(status_code=404, detail="Group not found")
    
    return group_to_response(group)


@router.post("/{group_id}/expenses")
async def add_expense(
    group_id: str,
    request: AddExpenseRequest,
    system: WePaySystem = Depends(get_system)
):
    """Add an expense, rejecting same-day duplicates"""
    try:
        group = system.ledger.append_expense(
            group_id=group_id,
            description=request.description,
            amount=request.amount,
            paid_by=request.paid_by,
            split_between=request.split_between,
            category=request.category
        )
    except GroupNotFound:
        raise HTTPException(status_code=404, detail="Group not found")
    except DuplicateExpense:
        raise HTTPException(status_code=409, detail="Duplicate expense detected")
    except WePayError as e:
        raise HTTPException(status_code=400, detail=str(e))
    
    return group_to_response(group)


@router.get("/{group_id}/expenses")
async def get_group_expenses(
    group_id: str,
    system: WePaySystem = Depends(get_system)
):
    """Get a group's expenses in the order they were logged"""
    try:
        expenses = system.ledger.get_expenses(group_id)
    except GroupNotFound:
        raise HTTPException(status_code=404, detail="Group not found")
    
    return {"expenses": [expense_to_response(e) for e in expenses]}


@router.get("/{group_id}/balances")
async def get_group_balances(
    group_id: str,
    system: WePaySystem = Depends(get_system)
):
    """Get who owes whom within a group"""
    try:
        report = system.ledger.get_balances(group_id)
    except GroupNotFound:
        raise HTTPException(status_code=404, detail="Group not found")
    
    return report.to_dict()
