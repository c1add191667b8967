from pydantic import BaseModel, Field
from datetime import date as Date, datetime
from typing import Optional, List

class ExpenseBase(BaseModel):
    amount: float = Field(..., gt=0)
    description: str = ""
    place: str = ""
    date: Date
    category: str = Field(..., min_length=1, description="Category id, or a category name on legacy records")
    budget_category_id: Optional[str] = None

class ExpenseCreate(ExpenseBase):
    family_id: str

class ExpenseResponse(ExpenseBase):
    id: str
    family_id: str
    created_at: datetime
    
    class Config:
        from_attributes = True

class ExpenseMatchResponse(BaseModel):
    expense_id: str
    budget_category_id: Optional[str] = None
    budget_category_name: Optional[str] = None
    group_type: Optional[str] = None
    matched: bool

# Receipts and orders

class DateValidationRequest(BaseModel):
    date: Optional[str] = None
    image_timestamp: Optional[datetime] = None

class DateValidationResponse(BaseModel):
    is_valid: bool
    confidence: float
    fallback_used: bool
    corrected_date: Optional[datetime] = None
    issues: List[str] = []

class OrderReferenceResponse(BaseModel):
    reference: str
