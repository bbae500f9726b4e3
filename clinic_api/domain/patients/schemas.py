"""Patient domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ..appointments.time_normalizer import normalize_date


class PatientBase(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    dob: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("dob")
    @classmethod
    def validate_dob(cls, v):
        if v:
            return normalize_date(v)
        return None


class PatientCreate(PatientBase):
    """Schema for registering a patient"""


class PatientUpdate(PatientBase):
    """Full replacement: omitted optional fields are cleared"""


class PatientResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    phone: Optional[str] = None
    dob: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PatientDeleteResponse(BaseModel):
    message: str
    patient: PatientResponse
