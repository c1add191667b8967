from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from nuacha.core.database import Base, generate_uuid

class Category(Base):
    """Free-form expense category scoped to a family"""
    __tablename__ = "categories"
    
    id = Column(String(36), primary_key=True, default=generate_uuid)
    family_id = Column(String(36), ForeignKey("families.id"), nullable=False, index=True)
    parent_id = Column(String(36), ForeignKey("categories.id"), nullable=True)
    
    name = Column(String(100), nullable=False)
    color = Column(String(20), default="#5A7684")
    
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    family = relationship("Family", back_populates="categories")

class BudgetCategory(Base):
    """User-owned category tagged needs/wants/savings"""
    __tablename__ = "budget_categories"
    
    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    
    group_type = Column(String(10), nullable=False)  # needs, wants, savings
    name = Column(String(100), nullable=False)
    sort_order = Column(Integer, default=100)
    
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
