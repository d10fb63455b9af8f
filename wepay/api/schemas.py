"""
Pydantic schemas for API requests
"""

from typing import List, Optional, Union
from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr


class MemberModel(BaseModel):
    name: str
    id: Optional[str] = Field(None, description="Member id; generated when omitted")


class CreateGroupRequest(BaseModel):
    name: str
    members: List[MemberModel] = Field(default_factory=list)


class AddExpenseRequest(BaseModel):
    description: str
    amount: Union[StrictInt, StrictFloat, StrictStr] = Field(..., description="Positive amount; strings keep exact decimals")
    category: str = ""
    paid_by: str = Field(..., description="Member id of the payer")
    split_between: List[str] = Field(..., description="Member ids sharing the expense")
