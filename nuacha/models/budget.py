from sqlalchemy import Column, String, Float, Boolean, ForeignKey, DateTime, Text, JSON, Index, text
from datetime import datetime
from nuacha.core.database import Base, generate_uuid

class IncomeSource(Base):
    __tablename__ = "income_sources"
    
    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    family_id = Column(String(36), ForeignKey("families.id"), nullable=True)
    
    name = Column(String(100), nullable=False)
    frequency = Column(String(20), default="monthly")  # weekly, fortnightly, monthly, yearly
    amount_ttd = Column(Float, nullable=False)
    notes = Column(Text, nullable=True)
    
    # Income sources are soft-deleted
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

class BudgetAllocation(Base):
    """Needs/wants/savings percentage split"""
    __tablename__ = "budget_allocations"
    
    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    
    rule_name = Column(String(100), nullable=False)
    needs_pct = Column(Float, nullable=False)
    wants_pct = Column(Float, nullable=False)
    savings_pct = Column(Float, nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # At most one default rule per user
    __table_args__ = (
        Index(
            "uq_budget_allocations_default_per_user",
            "user_id",
            unique=True,
            postgresql_where=text("is_default"),
            sqlite_where=text("is_default"),
        ),
    )

class BudgetTemplate(Base):
    """Planned monthly amounts per budget group"""
    __tablename__ = "budget_templates"
    
    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    family_id = Column(String(36), ForeignKey("families.id"), nullable=True)
    
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    total_monthly_income = Column(Float, default=0.0)
    template_data = Column(JSON, default=dict)
    
    is_active = Column(Boolean, default=True)
    is_default = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    __table_args__ = (
        Index(
            "uq_budget_templates_default_per_user",
            "user_id",
            unique=True,
            postgresql_where=text("is_default"),
            sqlite_where=text("is_default"),
        ),
    )
