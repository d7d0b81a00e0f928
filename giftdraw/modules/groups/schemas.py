from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class GroupCreate(BaseModel):
    name: str


class GroupJoin(BaseModel):
    code: str


class GroupResponse(BaseModel):
    id: str
    name: str
    code: str
    created_by: str
    is_drawn: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GroupMemberResponse(BaseModel):
    # No assigned_to: a member may only read their own assignment
    id: str
    user_id: str
    user_name: str
    user_email: Optional[str] = None

    class Config:
        from_attributes = True


class GroupDetailResponse(GroupResponse):
    members: List[GroupMemberResponse]
    is_owner: bool
    can_draw: bool
