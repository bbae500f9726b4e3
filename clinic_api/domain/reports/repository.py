"""Physician report repository - Database operations for reports"""

from typing import Optional

from sqlalchemy.orm import Session, contains_eager

from ...models import Appointment, PhysicianReport


class ReportRepository:
    """Repository for physician report database operations"""

    @staticmethod
    def _joined(db: Session):
        return (
            db.query(PhysicianReport)
            .join(PhysicianReport.appointment)
            .join(Appointment.patient)
            .options(contains_eager(PhysicianReport.appointment).contains_eager(Appointment.patient))
        )

    @classmethod
    def search_reports(
        cls,
        db: Session,
        appointment_id: Optional[int] = None,
        patient_id: Optional[int] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> list[PhysicianReport]:
        """Reports with their appointment and patient, newest first"""
        query = cls._joined(db)

        if appointment_id is not None:
            query = query.filter(PhysicianReport.appointment_id == appointment_id)

        if patient_id is not None:
            query = query.filter(Appointment.patient_id == patient_id)

        if start_date and end_date:
            query = query.filter(Appointment.date.between(start_date, end_date))

        return query.order_by(PhysicianReport.created_at.desc(), PhysicianReport.id.desc()).all()

    @classmethod
    def get_report_by_id(cls, db: Session, report_id: int) -> Optional[PhysicianReport]:
        return cls._joined(db).filter(PhysicianReport.id == report_id).first()

    @classmethod
    def get_report_by_appointment(cls, db: Session, appointment_id: int) -> Optional[PhysicianReport]:
        return cls._joined(db).filter(PhysicianReport.appointment_id == appointment_id).first()

    @staticmethod
    def appointment_exists(db: Session, appointment_id: int) -> bool:
        return db.query(Appointment.id).filter(Appointment.id == appointment_id).first() is not None

    @staticmethod
    def report_id_for_appointment(db: Session, appointment_id: int) -> Optional[int]:
        row = (
            db.query(PhysicianReport.id)
            .filter(PhysicianReport.appointment_id == appointment_id)
            .first()
        )
        return row.id if row else None

    @staticmethod
    def add_report(db: Session, **report_data) -> PhysicianReport:
        """Stage a new report; the caller commits"""
        report = PhysicianReport(**report_data)
        db.add(report)
        return report

    @staticmethod
    def apply_updates(report: PhysicianReport, **updates) -> PhysicianReport:
        for key, value in updates.items():
            setattr(report, key, value)
        return report
