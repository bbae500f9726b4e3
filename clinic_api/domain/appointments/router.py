"""Appointment router - FastAPI endpoints for appointment operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import (
    AppointmentCreate,
    AppointmentDeleteResponse,
    AppointmentResponse,
    AppointmentUpdate,
    AppointmentStatus,
    ServiceType,
)
from .service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/appointments", tags=["Appointments"])


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


@router.get("", response_model=list[AppointmentResponse])
async def list_appointments(
    date: Optional[str] = Query(None, description="Exact date (YYYY-MM-DD)"),
    start_date: Optional[str] = Query(None, description="Range start, used with end_date"),
    end_date: Optional[str] = Query(None, description="Range end, used with start_date"),
    patient_id: Optional[int] = Query(None),
    status: Optional[AppointmentStatus] = Query(None),
    service_type: Optional[ServiceType] = Query(None),
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Get appointments with optional filters, ordered by date and start time"""
    return service.list_appointments(
        date=date,
        start_date=start_date,
        end_date=end_date,
        patient_id=patient_id,
        status=status,
        service_type=service_type,
    )


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Get a single appointment with patient details"""
    return service.get_appointment(appointment_id)


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    data: AppointmentCreate,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Book an appointment; service_type defaults to the caller's role"""
    return service.create_appointment(data, current_user)


@router.put("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: int,
    data: AppointmentUpdate,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Update only the fields present in the request body"""
    return service.update_appointment(appointment_id, data)


@router.delete("/{appointment_id}", response_model=AppointmentDeleteResponse)
async def delete_appointment(
    appointment_id: int,
    hard_delete: bool = Query(False, description="Remove the row instead of cancelling it"),
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Cancel an appointment (default) or delete it permanently"""
    return service.delete_appointment(appointment_id, hard_delete=hard_delete)
