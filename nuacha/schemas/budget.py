from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import date, datetime
from typing import Optional, List, Dict, Literal

from nuacha.core.budget_utils import allocation_sum_error

def _not_null(value):
    """Update fields may be omitted but not set to null"""
    if value is None:
        raise ValueError("may be omitted but not null")
    return value

GroupType = Literal["needs", "wants", "savings"]
FrequencyType = Literal["weekly", "fortnightly", "monthly", "yearly"]

# Allocation rules

class BudgetAllocationBase(BaseModel):
    rule_name: str = Field(..., min_length=1, max_length=100)
    needs_pct: float = Field(..., ge=0, le=100)
    wants_pct: float = Field(..., ge=0, le=100)
    savings_pct: float = Field(..., ge=0, le=100)
    is_default: bool = False

class BudgetAllocationCreate(BudgetAllocationBase):
    @model_validator(mode="after")
    def check_total(self):
        error = allocation_sum_error(self.needs_pct, self.wants_pct, self.savings_pct)
        if error:
            raise ValueError(error)
        return self

class BudgetAllocationUpdate(BaseModel):
    rule_name: Optional[str] = Field(None, min_length=1, max_length=100)
    needs_pct: Optional[float] = Field(None, ge=0, le=100)
    wants_pct: Optional[float] = Field(None, ge=0, le=100)
    savings_pct: Optional[float] = Field(None, ge=0, le=100)
    is_default: Optional[bool] = None

    @field_validator("rule_name", "needs_pct", "wants_pct", "savings_pct", "is_default", mode="before")
    @classmethod
    def check_not_null(cls, value):
        return _not_null(value)

class BudgetAllocationResponse(BudgetAllocationBase):
    id: str
    user_id: str
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True

# Income sources

class IncomeSourceBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    frequency: FrequencyType = "monthly"
    amount_ttd: float = Field(..., gt=0)
    notes: Optional[str] = None
    family_id: Optional[str] = None

class IncomeSourceCreate(IncomeSourceBase):
    pass

class IncomeSourceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    frequency: Optional[FrequencyType] = None
    amount_ttd: Optional[float] = Field(None, gt=0)
    notes: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name", "frequency", "amount_ttd", "is_active", mode="before")
    @classmethod
    def check_not_null(cls, value):
        return _not_null(value)

class IncomeSourceResponse(IncomeSourceBase):
    id: str
    user_id: str
    is_active: bool
    created_at: datetime
    
    class Config:
        from_attributes = True

# Budget categories

class BudgetCategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    group_type: GroupType
    sort_order: int = 100

class BudgetCategoryCreate(BudgetCategoryBase):
    pass

class BudgetCategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    group_type: Optional[GroupType] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None

    @field_validator("name", "group_type", "sort_order", "is_active", mode="before")
    @classmethod
    def check_not_null(cls, value):
        return _not_null(value)

class BudgetCategoryResponse(BudgetCategoryBase):
    id: str
    user_id: str
    is_active: bool
    created_at: datetime
    
    class Config:
        from_attributes = True

# Budget templates

class BudgetTemplateData(BaseModel):
    about_you: Optional[Dict] = None
    income: Dict[str, float] = {}
    needs: Dict[str, float] = {}
    wants: Dict[str, float] = {}
    savings: Dict[str, float] = {}
    unpaid_labor: Dict[str, float] = {}
    include_unpaid_labor: bool = False
    notes: Optional[str] = None

class BudgetTemplateBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    total_monthly_income: float = Field(0.0, ge=0)
    template_data: BudgetTemplateData = Field(default_factory=BudgetTemplateData)
    family_id: Optional[str] = None
    is_default: bool = False

class BudgetTemplateCreate(BudgetTemplateBase):
    pass

class BudgetTemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    total_monthly_income: Optional[float] = Field(None, ge=0)
    template_data: Optional[BudgetTemplateData] = None
    is_default: Optional[bool] = None

    @field_validator("name", "total_monthly_income", "template_data", "is_default", mode="before")
    @classmethod
    def check_not_null(cls, value):
        return _not_null(value)

class BudgetTemplateResponse(BudgetTemplateBase):
    id: str
    user_id: str
    is_active: bool
    created_at: datetime
    
    class Config:
        from_attributes = True

# Summary and variance

class GroupTotal(BaseModel):
    total: float
    percentage: float
    planned: Optional[float] = None

class RuleComparison(BaseModel):
    actual: float
    target: float
    variance: float

class BudgetSummaryResponse(BaseModel):
    month: date
    rule_name: Optional[str] = None
    total_income: float
    total_expenses: float
    total_planned_expenses: Optional[float] = None
    by_group: Dict[GroupType, GroupTotal]
    surplus: float
    rule_comparison: Dict[GroupType, RuleComparison]
    unpaid_labor_value: Optional[float] = None

class BudgetComparison(BaseModel):
    planned: float
    actual: float
    variance: float
    percentage_used: float
    status: str

class BudgetVarianceResponse(BaseModel):
    template_id: str
    start: date
    end: date
    total_income: BudgetComparison
    by_group: Dict[GroupType, BudgetComparison]
    by_category: Dict[str, BudgetComparison]
    overall_surplus: BudgetComparison

# Unpaid labor

class UnpaidLaborCategoryResponse(BaseModel):
    id: str
    name: str
    description: str
    default_value: float
    family_types: List[str]
    related_expense_category: Optional[str] = None

class UnpaidLaborResponse(BaseModel):
    family_type: str
    categories: List[UnpaidLaborCategoryResponse]
    total_value: float
    total_formatted: str
