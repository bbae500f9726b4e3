"""Appointment service - Slot normalization, conflict checks and writes"""

import logging
from typing import Optional

from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import Conflict, Internal, NotFound, ValidationError, translate_storage_error
from ...models import CANCELLED, DEFAULT_APPOINTMENT_STATUS, DEFAULT_SERVICE_TYPE, Appointment, User
from .conflicts import SlotClassification, SlotStatus, classify, find_overlap
from .repository import AppointmentRepository
from .schemas import AppointmentCreate, AppointmentUpdate
from .time_normalizer import InvalidFormat, normalize_date, normalize_time

logger = logging.getLogger(__name__)

REQUIRED_CREATE_FIELDS = ("patient_id", "date", "start_time", "end_time", "appointment_type")
NON_NULLABLE_FIELDS = (
    "patient_id",
    "date",
    "start_time",
    "end_time",
    "appointment_type",
    "status",
    "service_type",
)
SLOT_FIELDS = ("date", "start_time", "end_time")

INVALID_PATIENT_MESSAGE = "Invalid patient ID. The patient does not exist in the database."


def _canonical(normalizer, value):
    """Normalize a stored value for output, passing through anything unparseable"""
    if value is None:
        return None
    try:
        return normalizer(value)
    except InvalidFormat:
        logger.warning(f"⚠️ Stored value {value!r} is not a canonical date/time")
        return str(value)


def _isoformat(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def format_appointment(appointment: Appointment) -> dict:
    """
    Shape a stored appointment for the API.

    Dates and times go back through the normalizer so that whatever the
    driver returned (strings, date/time objects) leaves as canonical strings.
    """
    patient = appointment.patient
    return {
        "id": appointment.id,
        "patient_id": appointment.patient_id,
        "date": _canonical(normalize_date, appointment.date),
        "start_time": _canonical(normalize_time, appointment.start_time),
        "end_time": _canonical(normalize_time, appointment.end_time),
        "service_type": appointment.service_type,
        "status": appointment.status,
        "appointment_type": appointment.appointment_type,
        "notes": appointment.notes,
        "created_at": _isoformat(appointment.created_at),
        "updated_at": _isoformat(appointment.updated_at),
        "first_name": patient.first_name if patient else None,
        "last_name": patient.last_name if patient else None,
        "phone": patient.phone if patient else None,
        "dob": _canonical(normalize_date, patient.dob) if patient else None,
        "patient_notes": patient.notes if patient else None,
    }


def _normalize_field(normalizer, field: str, value) -> str:
    try:
        return normalizer(value)
    except InvalidFormat as e:
        raise ValidationError(str(e), details=[f"{field}: {e}"]) from e


def _require_ordered(start_time: str, end_time: str) -> None:
    if end_time <= start_time:
        raise ValidationError(
            f"end_time ({end_time}) must be after start_time ({start_time})"
        )


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_appointments(
        self,
        date: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        patient_id: Optional[int] = None,
        status: Optional[str] = None,
        service_type: Optional[str] = None,
    ) -> list[dict]:
        """List appointments matching the given filters"""
        if date:
            date = _normalize_field(normalize_date, "date", date)
        if start_date and end_date:
            start_date = _normalize_field(normalize_date, "start_date", start_date)
            end_date = _normalize_field(normalize_date, "end_date", end_date)

        appointments = self.repo.search_appointments(
            self.db,
            date=date,
            start_date=start_date,
            end_date=end_date,
            patient_id=patient_id,
            status=status,
            service_type=service_type,
        )
        return [format_appointment(a) for a in appointments]

    def get_appointment(self, appointment_id: int) -> dict:
        return format_appointment(self._get_or_404(appointment_id))

    def _get_or_404(self, appointment_id: int) -> Appointment:
        appointment = self.repo.get_appointment_by_id(self.db, appointment_id)
        if not appointment:
            raise NotFound("Appointment not found")
        return appointment

    # ------------------------------------------------------------------
    # Conflict classification
    # ------------------------------------------------------------------

    def classify_slot(
        self,
        date: str,
        start_time: str,
        end_time: str,
        service_type: str,
        exclude_id: Optional[int] = None,
    ) -> SlotClassification:
        """Classify a canonical candidate slot against what is booked for its service type"""
        occupants = self.repo.get_slot_occupants(self.db, date, service_type)
        return classify(start_time, end_time, occupants, exclude_id=exclude_id)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_appointment(self, data: AppointmentCreate, user: Optional[User] = None) -> dict:
        """Create an appointment, reclaiming a cancelled slot at the same start if present"""
        # Use authenticated user's role as default if service_type not provided
        service_type = data.service_type or (user.role if user else None) or DEFAULT_SERVICE_TYPE
        logger.info(
            f"📥 Received appointment data: patient_id={data.patient_id}, date={data.date!r}, "
            f"start_time={data.start_time!r}, end_time={data.end_time!r}, "
            f"appointment_type={data.appointment_type!r}, service_type={service_type}"
        )

        missing = [f for f in REQUIRED_CREATE_FIELDS if getattr(data, f) in (None, "")]
        if missing:
            raise ValidationError(
                "patient_id, date, start_time, end_time, and appointment_type are required",
                details=[f"{f} is required" for f in missing],
            )

        date = _normalize_field(normalize_date, "date", data.date)
        start_time = _normalize_field(normalize_time, "start_time", data.start_time)
        end_time = _normalize_field(normalize_time, "end_time", data.end_time)
        _require_ordered(start_time, end_time)
        if date != data.date or start_time != data.start_time or end_time != data.end_time:
            logger.debug(f"🔄 Normalized slot to {date} {start_time}-{end_time}")

        if not self.repo.patient_exists(self.db, data.patient_id):
            raise NotFound("Patient not found")

        classification = self.classify_slot(date, start_time, end_time, service_type)
        if classification.is_rejected:
            logger.warning(
                f"⚠️ Slot conflict ({classification.kind.value}) for {date} {start_time}-{end_time} "
                f"[{service_type}] with appointment {classification.existing_id}"
            )
            raise Conflict(classification.message)

        try:
            if classification.kind == SlotStatus.RECLAIMABLE:
                logger.info(
                    f"♻️ Deleting cancelled appointment {classification.existing_id} to free up slot"
                )
                self.repo.delete_by_id(self.db, classification.existing_id)

            appointment = self.repo.add_appointment(
                self.db,
                patient_id=data.patient_id,
                date=date,
                start_time=start_time,
                end_time=end_time,
                appointment_type=data.appointment_type,
                notes=data.notes or None,
                status=data.status or DEFAULT_APPOINTMENT_STATUS,
                service_type=service_type,
            )
            self.db.commit()
        except (IntegrityError, DataError) as e:
            self.db.rollback()
            raise translate_storage_error(e, foreign_key_message=INVALID_PATIENT_MESSAGE) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(
                f"❌ Failed to create appointment for patient {data.patient_id} "
                f"at {date} {start_time}-{end_time} [{service_type}]"
            )
            raise Internal(f"Failed to create appointment: {e}") from e

        logger.info(
            f"✅ Appointment {appointment.id} created for patient {data.patient_id} "
            f"on {date} {start_time}-{end_time} [{service_type}]"
        )
        return self.get_appointment(appointment.id)

    def update_appointment(self, appointment_id: int, data: AppointmentUpdate) -> dict:
        """Apply a partial update, re-checking overlaps when the slot moves"""
        appointment = self._get_or_404(appointment_id)
        supplied = data.supplied()
        logger.info(f"📥 Received update for appointment {appointment_id}: {supplied}")

        if not supplied:
            raise ValidationError("No fields to update")

        nulled = [f for f in NON_NULLABLE_FIELDS if f in supplied and supplied[f] is None]
        if nulled:
            raise ValidationError(
                f"{', '.join(nulled)} cannot be null", details=[f"{f} cannot be null" for f in nulled]
            )

        updates = dict(supplied)
        if "date" in updates:
            updates["date"] = _normalize_field(normalize_date, "date", updates["date"])
        if "start_time" in updates:
            updates["start_time"] = _normalize_field(normalize_time, "start_time", updates["start_time"])
        if "end_time" in updates:
            updates["end_time"] = _normalize_field(normalize_time, "end_time", updates["end_time"])

        if self._moves_into_active_slot(appointment, updates):
            date = updates.get("date") or normalize_date(appointment.date)
            start_time = updates.get("start_time") or normalize_time(appointment.start_time)
            end_time = updates.get("end_time") or normalize_time(appointment.end_time)
            service_type = updates.get("service_type") or appointment.service_type
            _require_ordered(start_time, end_time)

            occupants = self.repo.get_slot_occupants(self.db, date, service_type)
            overlap = find_overlap(start_time, end_time, occupants, exclude_id=appointment.id)
            if overlap is not None:
                logger.warning(
                    f"⚠️ Update of appointment {appointment_id} overlaps appointment "
                    f"{overlap.existing_id} on {date} [{service_type}]"
                )
                raise Conflict(overlap.message)

        if "patient_id" in updates and not self.repo.patient_exists(self.db, updates["patient_id"]):
            raise NotFound("Patient not found")

        try:
            self.repo.apply_updates(appointment, **updates)
            self.db.commit()
        except (IntegrityError, DataError) as e:
            self.db.rollback()
            raise translate_storage_error(
                e,
                duplicate_message="This time slot is already booked. Please choose another time.",
                foreign_key_message=INVALID_PATIENT_MESSAGE,
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"❌ Failed to update appointment {appointment_id} with {updates}")
            raise Internal(f"Failed to update appointment: {e}") from e

        logger.info(f"✅ Appointment {appointment_id} updated: {sorted(updates)}")
        return self.get_appointment(appointment_id)

    @staticmethod
    def _moves_into_active_slot(appointment: Appointment, updates: dict) -> bool:
        """
        Whether the update needs an overlap check.

        Moving the slot (date/start/end) always does. Changing the service line
        or reviving a cancelled appointment lands it among rows it was never
        checked against, so those do too.
        """
        if any(f in updates for f in SLOT_FIELDS):
            return True
        final_status = updates.get("status", appointment.status)
        if final_status == CANCELLED:
            return False
        if "service_type" in updates and updates["service_type"] != appointment.service_type:
            return True
        return appointment.status == CANCELLED and "status" in updates

    def delete_appointment(self, appointment_id: int, hard_delete: bool = False) -> dict:
        """Cancel an appointment, or remove it entirely when hard_delete is set"""
        appointment = self._get_or_404(appointment_id)

        try:
            if hard_delete:
                snapshot = format_appointment(appointment)
                self.db.delete(appointment)
                self.db.commit()
                logger.info(f"🗑️ Appointment {appointment_id} deleted")
                return {"message": "Appointment deleted successfully", "appointment": snapshot}

            appointment.status = CANCELLED
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"❌ Failed to delete appointment {appointment_id} (hard={hard_delete})")
            raise Internal(f"Failed to delete appointment: {e}") from e

        logger.info(f"🚫 Appointment {appointment_id} cancelled")
        return {
            "message": "Appointment cancelled successfully",
            "appointment": self.get_appointment(appointment_id),
        }
