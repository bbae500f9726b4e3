"""Appointment domain schemas - Pydantic models for validation"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

ServiceType = Literal["doctor", "esthetician"]
AppointmentStatus = Literal["scheduled", "completed", "cancelled"]


class AppointmentCreate(BaseModel):
    """
    Schema for creating an appointment.

    Required fields are checked by the service so a missing field produces the
    single combined message clients already rely on.
    """

    patient_id: Optional[int] = None
    date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    appointment_type: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    service_type: Optional[ServiceType] = None


class AppointmentUpdate(BaseModel):
    """
    Schema for a partial update.

    Only keys present in the request body end up in model_fields_set, so an
    omitted field is left alone while an explicit null is seen as a change.
    """

    patient_id: Optional[int] = None
    date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    appointment_type: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    service_type: Optional[ServiceType] = None

    def supplied(self) -> dict:
        """Fields explicitly present in the request, nulls included"""
        return {name: getattr(self, name) for name in self.model_fields_set}


class AppointmentResponse(BaseModel):
    """Appointment joined with the patient's display fields"""

    id: int
    patient_id: int
    date: str
    start_time: str
    end_time: str
    service_type: str
    status: str
    appointment_type: str
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    dob: Optional[str] = None
    patient_notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class AppointmentDeleteResponse(BaseModel):
    message: str
    appointment: AppointmentResponse
