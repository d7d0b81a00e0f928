from pydantic import BaseModel
from typing import Optional


class DrawRequest(BaseModel):
    # Re-drawing throws away the current assignments for good
    confirm_redraw: bool = False


class DrawResponse(BaseModel):
    group_id: str
    participants: int
    is_drawn: bool = True
    redraw: bool = False
    message: str


class AssignmentResponse(BaseModel):
    group_id: str
    is_drawn: bool
    assigned_name: Optional[str] = None
