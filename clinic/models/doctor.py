from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base

class Doctor(Base):
    __tablename__ = "doctors"
    
    id = Column(Integer, primary_key=True, index=True)
    
    # Account
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    
    # Profile
    name = Column(String(100), nullable=False, index=True)
    specialty = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=True)
    
    # Ordered "HH:MM" slots the doctor accepts bookings for
    available_times = Column(JSON, nullable=False, default=list)
    
    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    
    # Relationships
    appointments = relationship(
        "Appointment",
        back_populates="doctor",
        cascade="all, delete",
    )
    
    def __repr__(self):
        return f"<Doctor(id={self.id}, name='{self.name}', specialty='{self.specialty}')>"
