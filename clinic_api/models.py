from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

# Service lines double as user roles; each is an independent booking space
SERVICE_TYPES = ("doctor", "esthetician")
DEFAULT_SERVICE_TYPE = "doctor"

APPOINTMENT_STATUSES = ("scheduled", "completed", "cancelled")
DEFAULT_APPOINTMENT_STATUS = "scheduled"
CANCELLED = "cancelled"

SLOT_CONSTRAINT_NAME = "unique_time_slot_per_day_per_service"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), default=DEFAULT_SERVICE_TYPE, nullable=False)  # doctor, esthetician
    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    reports = relationship("PhysicianReport", back_populates="author")


class Patient(Base):
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(50), nullable=True)
    dob = Column(String(10), nullable=True)  # YYYY-MM-DD
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    appointments = relationship("Appointment", back_populates="patient")

    @property
    def display_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip() or "Unknown"


class Appointment(Base):
    """
    A booking in one service line's calendar.

    date/start_time/end_time are canonical strings (YYYY-MM-DD, HH:MM:SS) so
    that ordering and overlap checks are lexical wall-clock comparisons.
    The slot constraint covers cancelled rows too: creating over a cancelled
    slot must delete the cancelled row first.
    """

    __tablename__ = "appointments"
    __table_args__ = (
        UniqueConstraint("date", "start_time", "service_type", name=SLOT_CONSTRAINT_NAME),
        Index("idx_appointments_date_service", "date", "service_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    date = Column(String(10), nullable=False)
    start_time = Column(String(8), nullable=False)
    end_time = Column(String(8), nullable=False)
    service_type = Column(String(20), default=DEFAULT_SERVICE_TYPE, nullable=False)
    status = Column(String(20), default=DEFAULT_APPOINTMENT_STATUS, nullable=False)
    appointment_type = Column(String(50), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    patient = relationship("Patient", back_populates="appointments")
    report = relationship(
        "PhysicianReport", back_populates="appointment", uselist=False, cascade="all, delete-orphan"
    )


class PhysicianReport(Base):
    __tablename__ = "physician_reports"

    id = Column(Integer, primary_key=True, index=True)
    appointment_id = Column(
        Integer, ForeignKey("appointments.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    patient_name = Column(String(255), nullable=False)
    date_of_birth = Column(String(10), nullable=True)
    reason_for_visit = Column(Text, nullable=True)
    chief_complaint = Column(Text, nullable=True)
    history_of_present_illness = Column(Text, nullable=True)
    physical_examination = Column(Text, nullable=True)
    diagnosis = Column(Text, nullable=True)
    treatment_plan = Column(Text, nullable=True)
    medications_prescribed = Column(Text, nullable=True)
    follow_up_instructions = Column(Text, nullable=True)
    additional_notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    appointment = relationship("Appointment", back_populates="report")
    author = relationship("User", back_populates="reports")
