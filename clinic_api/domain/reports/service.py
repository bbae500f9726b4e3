"""Physician report service - One clinical report per appointment"""

import logging
from typing import Optional

from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import Conflict, Internal, NotFound, ValidationError, translate_storage_error
from ...models import PhysicianReport, User
from ..appointments.time_normalizer import InvalidFormat, normalize_date, normalize_time
from .repository import ReportRepository
from .schemas import ReportCreate, ReportUpdate

logger = logging.getLogger(__name__)

DUPLICATE_REPORT_MESSAGE = "Report already exists for this appointment. Use PUT to update."


def _safe(normalizer, value):
    if value is None:
        return None
    try:
        return normalizer(value)
    except InvalidFormat:
        return str(value)


def format_report(report: PhysicianReport) -> dict:
    appointment = report.appointment
    patient = appointment.patient if appointment else None
    body = {
        column.name: getattr(report, column.name) for column in PhysicianReport.__table__.columns
    }
    body.update(
        {
            "appointment_date": _safe(normalize_date, appointment.date) if appointment else None,
            "appointment_time": _safe(normalize_time, appointment.start_time) if appointment else None,
            "appointment_type": appointment.appointment_type if appointment else None,
            "appointment_status": appointment.status if appointment else None,
            "appointment_notes": appointment.notes if appointment else None,
            "first_name": patient.first_name if patient else None,
            "last_name": patient.last_name if patient else None,
            "phone": patient.phone if patient else None,
            "dob": patient.dob if patient else None,
            "patient_notes": patient.notes if patient else None,
        }
    )
    return body


class ReportService:
    """Service layer for physician reports"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ReportRepository()

    def list_reports(
        self,
        appointment_id: Optional[int] = None,
        patient_id: Optional[int] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> list[dict]:
        if start_date and end_date:
            try:
                start_date, end_date = normalize_date(start_date), normalize_date(end_date)
            except InvalidFormat as e:
                raise ValidationError(str(e)) from e

        reports = self.repo.search_reports(
            self.db,
            appointment_id=appointment_id,
            patient_id=patient_id,
            start_date=start_date,
            end_date=end_date,
        )
        return [format_report(r) for r in reports]

    def get_report(self, report_id: int) -> dict:
        report = self.repo.get_report_by_id(self.db, report_id)
        if not report:
            raise NotFound("Report not found")
        return format_report(report)

    def get_report_for_appointment(self, appointment_id: int) -> dict:
        report = self.repo.get_report_by_appointment(self.db, appointment_id)
        if not report:
            raise NotFound("Report not found")
        return format_report(report)

    def create_report(self, data: ReportCreate, user: User) -> dict:
        if not data.appointment_id or not data.patient_name:
            raise ValidationError("appointment_id and patient_name are required")

        if not self.repo.appointment_exists(self.db, data.appointment_id):
            raise NotFound("Appointment not found")

        if self.repo.report_id_for_appointment(self.db, data.appointment_id) is not None:
            raise Conflict(DUPLICATE_REPORT_MESSAGE)

        report = self.repo.add_report(
            self.db,
            appointment_id=data.appointment_id,
            patient_name=data.patient_name,
            created_by=user.id,
            **data.clinical_fields(),
        )
        self._commit(f"create report for appointment {data.appointment_id}")
        logger.info(f"📝 Report {report.id} created for appointment {data.appointment_id} by {user.username}")
        return self.get_report(report.id)

    def update_report(self, report_id: int, data: ReportUpdate) -> dict:
        report = self.repo.get_report_by_id(self.db, report_id)
        if not report:
            raise NotFound("Report not found")

        self._replace_content(report, data)
        self._commit(f"update report {report_id}")
        logger.info(f"✅ Report {report_id} updated")
        return self.get_report(report_id)

    def save_report_for_appointment(self, appointment_id: int, data: ReportUpdate, user: User) -> dict:
        """Update the appointment's report, creating it when there is none yet"""
        if not self.repo.appointment_exists(self.db, appointment_id):
            raise NotFound("Appointment not found")

        report = self.repo.get_report_by_appointment(self.db, appointment_id)
        if report:
            self._replace_content(report, data)
            self._commit(f"update report for appointment {appointment_id}")
            logger.info(f"✅ Report {report.id} updated via appointment {appointment_id}")
            return self.get_report(report.id)

        if not data.patient_name:
            raise ValidationError("patient_name is required")

        report = self.repo.add_report(
            self.db,
            appointment_id=appointment_id,
            patient_name=data.patient_name,
            created_by=user.id,
            **data.clinical_fields(),
        )
        self._commit(f"create report for appointment {appointment_id}")
        logger.info(f"📝 Report {report.id} created via appointment {appointment_id}")
        return self.get_report(report.id)

    def delete_report(self, report_id: int) -> dict:
        report = self.db.get(PhysicianReport, report_id)
        if not report:
            raise NotFound("Report not found")

        self.db.delete(report)
        self._commit(f"delete report {report_id}")
        logger.info(f"🗑️ Report {report_id} deleted")
        return {"message": "Report deleted successfully"}

    def _replace_content(self, report: PhysicianReport, data: ReportUpdate) -> None:
        updates = data.clinical_fields()
        if data.patient_name:
            updates["patient_name"] = data.patient_name
        self.repo.apply_updates(report, **updates)

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except (IntegrityError, DataError) as e:
            self.db.rollback()
            raise translate_storage_error(
                e,
                duplicate_message="Report already exists for this appointment",
                foreign_key_message="Appointment not found",
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"❌ Failed to {action}")
            raise Internal(f"Failed to {action}: {e}") from e
