"""Appointment repository - Database operations for appointments"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, Patient
from .conflicts import SlotOccupant


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def search_appointments(
        db: Session,
        date: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        patient_id: Optional[int] = None,
        status: Optional[str] = None,
        service_type: Optional[str] = None,
    ) -> list[Appointment]:
        """List appointments with their patients, ordered by date then start time"""
        query = db.query(Appointment).join(Patient).options(joinedload(Appointment.patient))

        if date:
            query = query.filter(Appointment.date == date)

        if start_date and end_date:
            query = query.filter(Appointment.date.between(start_date, end_date))

        if patient_id is not None:
            query = query.filter(Appointment.patient_id == patient_id)

        if status:
            query = query.filter(Appointment.status == status)

        if service_type:
            query = query.filter(Appointment.service_type == service_type)

        return query.order_by(Appointment.date, Appointment.start_time).all()

    @staticmethod
    def get_appointment_by_id(db: Session, appointment_id: int) -> Optional[Appointment]:
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.patient))
            .filter(Appointment.id == appointment_id)
            .first()
        )

    @staticmethod
    def get_slot_occupants(db: Session, date: str, service_type: str) -> list[SlotOccupant]:
        """All appointments (cancelled included) booked on date for service_type"""
        rows = (
            db.query(
                Appointment.id,
                Appointment.start_time,
                Appointment.end_time,
                Appointment.status,
                Patient.first_name,
                Patient.last_name,
            )
            .outerjoin(Patient, Appointment.patient_id == Patient.id)
            .filter(Appointment.date == date, Appointment.service_type == service_type)
            .order_by(Appointment.start_time)
            .all()
        )
        return [
            SlotOccupant(
                id=row.id,
                start_time=row.start_time,
                end_time=row.end_time,
                status=row.status,
                first_name=row.first_name,
                last_name=row.last_name,
            )
            for row in rows
        ]

    @staticmethod
    def patient_exists(db: Session, patient_id: int) -> bool:
        return db.query(Patient.id).filter(Patient.id == patient_id).first() is not None

    @staticmethod
    def add_appointment(db: Session, **appointment_data) -> Appointment:
        """Stage a new appointment; the caller commits"""
        appointment = Appointment(**appointment_data)
        db.add(appointment)
        return appointment

    @staticmethod
    def delete_by_id(db: Session, appointment_id: int) -> None:
        """Stage a hard delete; the caller commits"""
        appointment = db.get(Appointment, appointment_id)
        if appointment is not None:
            db.delete(appointment)
            # Flush so the freed slot is gone before the replacement row is inserted
            db.flush()

    @staticmethod
    def apply_updates(appointment: Appointment, **updates) -> Appointment:
        """Set exactly the given fields, including explicit None"""
        for key, value in updates.items():
            setattr(appointment, key, value)
        return appointment
