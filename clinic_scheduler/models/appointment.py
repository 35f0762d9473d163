from sqlalchemy import Column, Integer, String, DateTime, Time, Text, Enum as SQLEnum, UniqueConstraint
from sqlalchemy.sql import func

from ..core.database import Base
from ..scheduling.appointments import AppointmentStatus
from ..scheduling.blocks import UnavailabilityReason

class AppointmentRecord(Base):
    __tablename__ = "appointments"
    
    id = Column(String(36), primary_key=True)
    
    # Participants
    physician_id = Column(String(36), nullable=False, index=True)
    patient_id = Column(String(36), nullable=False, index=True)
    
    # Booked interval, half-open [start_time, end_time)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    status = Column(SQLEnum(AppointmentStatus), nullable=False, default=AppointmentStatus.SCHEDULED)
    reason_for_visit = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    clinical_document_id = Column(String(36), nullable=True)
    cancellation_reason = Column(String(255), nullable=True)
    
    # Tracking
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, server_default=func.now())
    modified_at = Column(DateTime, nullable=True)
    
    def __repr__(self):
        return f"<AppointmentRecord(id={self.id}, physician_id={self.physician_id}, start='{self.start_time}', status='{self.status}')>"

class AvailabilityWindowRecord(Base):
    __tablename__ = "availability_windows"
    __table_args__ = (
        UniqueConstraint("physician_id", "day_of_week", "start_time", name="uq_availability_window_start"),
    )
    
    id = Column(Integer, primary_key=True, index=True)
    physician_id = Column(String(36), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # 0 = Monday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    
    def __repr__(self):
        return f"<AvailabilityWindowRecord(physician_id={self.physician_id}, day='{self.day_of_week}', {self.start_time}-{self.end_time})>"

class UnavailableBlockRecord(Base):
    __tablename__ = "unavailable_blocks"
    
    id = Column(String(36), primary_key=True)
    physician_id = Column(String(36), nullable=True, index=True)  # NULL = facility-wide
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    reason = Column(SQLEnum(UnavailabilityReason), nullable=False, default=UnavailabilityReason.OTHER)
    description = Column(Text, nullable=True)
    
    def __repr__(self):
        return f"<UnavailableBlockRecord(id={self.id}, physician_id={self.physician_id}, reason='{self.reason}')>"
