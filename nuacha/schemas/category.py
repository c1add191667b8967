from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List

class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    color: str = "#5A7684"
    parent_id: Optional[str] = None

class CategoryCreate(CategoryBase):
    pass

class CategoryResponse(CategoryBase):
    id: str
    family_id: str
    created_at: datetime
    
    class Config:
        from_attributes = True

# Sync

class SyncStatusResponse(BaseModel):
    family_id: str
    needs_sync: bool

class SyncRequest(BaseModel):
    family_id: str

class BulkSyncRequest(BaseModel):
    family_ids: List[str]

class SyncResponse(BaseModel):
    success: bool
    message: str
    description: Optional[str] = None
    budget_categories_created: int = 0
    categories_seeded: int = 0
    expenses_mapped: int = 0
    refresh_after_ms: int = 0

class BulkSyncResponse(BaseModel):
    success: bool
    message: str
    description: Optional[str] = None
    success_count: int
    error_count: int
    failed_family_ids: List[str] = []
    refresh_after_ms: int = 0

# Cleanup

class CategoryIssue(BaseModel):
    type: str
    scope: str
    message: str
    category_ids: List[str]

class ValidationReport(BaseModel):
    issues: List[CategoryIssue]
    message: str

class DuplicateCleanupResponse(BaseModel):
    duplicates_removed: int
    message: str
    refresh_after_ms: int = 0

class OrphanFixResponse(BaseModel):
    expenses_mapped: int
    message: str

class EnsureBudgetCategoriesResponse(BaseModel):
    budget_categories_created: int
    message: str

class ComprehensiveCleanupResponse(BaseModel):
    success: bool
    message: str
    description: Optional[str] = None
    duplicates_removed: int = 0
    categories_reclassified: int = 0
    budget_categories_created: int = 0
    expenses_mapped: int = 0
    refresh_after_ms: int = 0
