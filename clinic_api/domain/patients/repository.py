"""Patient repository - Database operations for patients"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Appointment, Patient


class PatientRepository:
    """Repository for patient database operations"""

    @staticmethod
    def search_patients(db: Session, search: Optional[str] = None) -> list[Patient]:
        """Case-insensitive match on first name, last name or phone"""
        query = db.query(Patient)

        if search:
            term = f"%{search}%"
            query = query.filter(
                or_(
                    Patient.first_name.ilike(term),
                    Patient.last_name.ilike(term),
                    Patient.phone.ilike(term),
                )
            )

        return query.order_by(Patient.last_name, Patient.first_name).all()

    @staticmethod
    def get_patient_by_id(db: Session, patient_id: int) -> Optional[Patient]:
        return db.query(Patient).filter(Patient.id == patient_id).first()

    @staticmethod
    def add_patient(db: Session, **patient_data) -> Patient:
        """Stage a new patient; the caller commits"""
        patient = Patient(**patient_data)
        db.add(patient)
        return patient

    @staticmethod
    def replace_fields(patient: Patient, **fields) -> Patient:
        for key, value in fields.items():
            setattr(patient, key, value)
        return patient

    @staticmethod
    def count_appointments(db: Session, patient_id: int) -> int:
        return db.query(Appointment).filter(Appointment.patient_id == patient_id).count()
