"""Physician report router - FastAPI endpoints for clinical reports"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...schemas import MessageResponse
from .schemas import ReportCreate, ReportResponse, ReportUpdate
from .service import ReportService

router = APIRouter(prefix="/api/reports", tags=["Reports"])


def get_report_service(db: Session = Depends(get_db)) -> ReportService:
    """Dependency injection for ReportService"""
    return ReportService(db)


@router.get("", response_model=list[ReportResponse])
async def list_reports(
    appointment_id: Optional[int] = Query(None),
    patient_id: Optional[int] = Query(None),
    start_date: Optional[str] = Query(None, description="Appointment date range start"),
    end_date: Optional[str] = Query(None, description="Appointment date range end"),
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    """Get reports joined with their appointment and patient, newest first"""
    return service.list_reports(
        appointment_id=appointment_id,
        patient_id=patient_id,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/appointment/{appointment_id}", response_model=ReportResponse)
async def get_report_for_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    return service.get_report_for_appointment(appointment_id)


@router.put("/appointment/{appointment_id}", response_model=ReportResponse)
async def save_report_for_appointment(
    appointment_id: int,
    data: ReportUpdate,
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    """Create or update the report attached to an appointment"""
    return service.save_report_for_appointment(appointment_id, data, current_user)


@router.get("/{report_id}", response_model=ReportResponse)
async def get_report(
    report_id: int,
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    return service.get_report(report_id)


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def create_report(
    data: ReportCreate,
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    return service.create_report(data, current_user)


@router.put("/{report_id}", response_model=ReportResponse)
async def update_report(
    report_id: int,
    data: ReportUpdate,
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    """Update a report; patient_name is kept when omitted"""
    return service.update_report(report_id, data)


@router.delete("/{report_id}", response_model=MessageResponse)
async def delete_report(
    report_id: int,
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    return service.delete_report(report_id)
