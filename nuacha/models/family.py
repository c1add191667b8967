from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from nuacha.core.database import Base, generate_uuid

class Family(Base):
    __tablename__ = "families"
    
    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    
    name = Column(String(100), nullable=False)
    color = Column(String(20), default="#5A7684")
    
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    user = relationship("User", back_populates="families")
    categories = relationship("Category", back_populates="family", cascade="all, delete-orphan")
    expenses = relationship("Expense", back_populates="family", cascade="all, delete-orphan")
