"""Patient service - Business logic for patient records"""

import logging
from typing import Optional

from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import Internal, NotFound, ValidationError, translate_storage_error
from ...models import Patient
from .repository import PatientRepository
from .schemas import PatientBase, PatientCreate, PatientUpdate

logger = logging.getLogger(__name__)

DUPLICATE_PATIENT_MESSAGE = "A patient with this information already exists."
HAS_APPOINTMENTS_MESSAGE = "Cannot delete patient with existing appointments. Cancel appointments first."


def _editable_fields(data: PatientBase) -> dict:
    if not data.first_name or not data.last_name:
        raise ValidationError("First name and last name are required")
    return {
        "first_name": data.first_name,
        "last_name": data.last_name,
        "phone": data.phone or None,
        "dob": data.dob or None,
        "notes": data.notes or None,
    }


class PatientService:
    """Service layer for patient business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PatientRepository()

    def list_patients(self, search: Optional[str] = None) -> list[Patient]:
        return self.repo.search_patients(self.db, search=search)

    def get_patient(self, patient_id: int) -> Patient:
        patient = self.repo.get_patient_by_id(self.db, patient_id)
        if not patient:
            raise NotFound("Patient not found")
        return patient

    def create_patient(self, data: PatientCreate) -> Patient:
        fields = _editable_fields(data)
        patient = self.repo.add_patient(self.db, **fields)
        self._commit(f"create patient {fields['first_name']} {fields['last_name']}")
        self.db.refresh(patient)
        logger.info(f"✅ Patient {patient.id} created: {patient.display_name}")
        return patient

    def update_patient(self, patient_id: int, data: PatientUpdate) -> Patient:
        """Replace every editable field of the patient"""
        fields = _editable_fields(data)
        patient = self.get_patient(patient_id)
        self.repo.replace_fields(patient, **fields)
        self._commit(f"update patient {patient_id}")
        self.db.refresh(patient)
        logger.info(f"✅ Patient {patient_id} updated")
        return patient

    def delete_patient(self, patient_id: int) -> dict:
        patient = self.get_patient(patient_id)

        # Appointments keep a required reference to their patient
        if self.repo.count_appointments(self.db, patient_id) > 0:
            logger.warning(f"⚠️ Refusing to delete patient {patient_id}: appointments exist")
            raise ValidationError(HAS_APPOINTMENTS_MESSAGE)

        snapshot = {
            "id": patient.id,
            "first_name": patient.first_name,
            "last_name": patient.last_name,
            "phone": patient.phone,
            "dob": patient.dob,
            "notes": patient.notes,
            "created_at": patient.created_at,
            "updated_at": patient.updated_at,
        }
        self.db.delete(patient)
        self._commit(f"delete patient {patient_id}", foreign_key_message=HAS_APPOINTMENTS_MESSAGE)
        logger.info(f"🗑️ Patient {patient_id} deleted")
        return {"message": "Patient deleted successfully", "patient": snapshot}

    def _commit(self, action: str, foreign_key_message: Optional[str] = None) -> None:
        try:
            self.db.commit()
        except (IntegrityError, DataError) as e:
            self.db.rollback()
            raise translate_storage_error(
                e, duplicate_message=DUPLICATE_PATIENT_MESSAGE, foreign_key_message=foreign_key_message
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"❌ Failed to {action}")
            raise Internal(f"Failed to {action}: {e}") from e
