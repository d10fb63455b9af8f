"""
Error Taxonomy

Every error raised by the ledger derives from ValueError, so callers that
already treat ValueError as "bad input" keep working.
"""

from typing import Optional


class WePayError(ValueError):
    """Base class for all ledger errors"""
    pass


class NotFound(WePayError):
    """A referenced entity does not exist"""
    pass


class GroupNotFound(NotFound):
    """Raised when a group id is unknown"""
    
    def __init__(self, group_id: str):
        self.group_id = group_id
        super().__init__(f"Group {group_id} not found")


class DuplicateExpense(WePayError):
    """Raised when an identical expense was already logged today"""
    
    def __init__(self, message: str = "Duplicate expense detected",
                 existing_expense_id: Optional[str] = None):
        self.existing_expense_id = existing_expense_id
        super().__init__(message)


class InvalidExpense(WePayError):
    """Raised when an expense is rejected before touching the ledger"""
    pass


class InvalidGroup(WePayError):
    """Raised when a group cannot be created as requested"""
    pass
