from pydantic import BaseModel
from typing import Optional


class ProfileResponse(BaseModel):
    id: str
    user_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None

    class Config:
        from_attributes = True
