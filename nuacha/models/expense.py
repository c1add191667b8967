from sqlalchemy import Column, String, Float, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from nuacha.core.database import Base, generate_uuid

class Expense(Base):
    __tablename__ = "expenses"
    
    id = Column(String(36), primary_key=True, default=generate_uuid)
    family_id = Column(String(36), ForeignKey("families.id"), nullable=False, index=True)
    
    amount = Column(Float, nullable=False)
    description = Column(String(300), default="")
    place = Column(String(200), default="")
    date = Column(Date, nullable=False, index=True)
    
    # Category UUID, or a category name on legacy records
    category = Column(String(100), nullable=False)
    # Matched by name only, so no foreign key
    budget_category_id = Column(String(36), nullable=True, index=True)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    family = relationship("Family", back_populates="expenses")
