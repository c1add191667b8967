"""
User and family Pydantic schemas
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class UserBase(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    full_name: Optional[str] = None

class UserCreate(UserBase):
    pass

class UserResponse(UserBase):
    id: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class FamilyBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    color: str = "#5A7684"

class FamilyCreate(FamilyBase):
    pass

class FamilyResponse(FamilyBase):
    id: str
    user_id: str
    created_at: datetime

    class Config:
        from_attributes = True
