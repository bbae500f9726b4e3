"""Physician report schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ..appointments.time_normalizer import normalize_date

CLINICAL_FIELDS = (
    "date_of_birth",
    "reason_for_visit",
    "chief_complaint",
    "history_of_present_illness",
    "physical_examination",
    "diagnosis",
    "treatment_plan",
    "medications_prescribed",
    "follow_up_instructions",
    "additional_notes",
)


class ReportContent(BaseModel):
    patient_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    reason_for_visit: Optional[str] = None
    chief_complaint: Optional[str] = None
    history_of_present_illness: Optional[str] = None
    physical_examination: Optional[str] = None
    diagnosis: Optional[str] = None
    treatment_plan: Optional[str] = None
    medications_prescribed: Optional[str] = None
    follow_up_instructions: Optional[str] = None
    additional_notes: Optional[str] = None

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v):
        if v:
            return normalize_date(v)
        return None

    def clinical_fields(self) -> dict:
        """Every clinical field, blanks cleared to None"""
        return {name: getattr(self, name) or None for name in CLINICAL_FIELDS}


class ReportCreate(ReportContent):
    appointment_id: Optional[int] = None


class ReportUpdate(ReportContent):
    """patient_name is kept when omitted; the clinical fields are replaced"""


class ReportResponse(BaseModel):
    """A report joined with its appointment and patient"""

    id: int
    appointment_id: int
    patient_name: str
    date_of_birth: Optional[str] = None
    reason_for_visit: Optional[str] = None
    chief_complaint: Optional[str] = None
    history_of_present_illness: Optional[str] = None
    physical_examination: Optional[str] = None
    diagnosis: Optional[str] = None
    treatment_plan: Optional[str] = None
    medications_prescribed: Optional[str] = None
    follow_up_instructions: Optional[str] = None
    additional_notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    appointment_date: Optional[str] = None
    appointment_time: Optional[str] = None
    appointment_type: Optional[str] = None
    appointment_status: Optional[str] = None
    appointment_notes: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    dob: Optional[str] = None
    patient_notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
