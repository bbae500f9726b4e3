"""Patient router - FastAPI endpoints for patient records"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import PatientCreate, PatientDeleteResponse, PatientResponse, PatientUpdate
from .service import PatientService

router = APIRouter(prefix="/api/patients", tags=["Patients"])


def get_patient_service(db: Session = Depends(get_db)) -> PatientService:
    """Dependency injection for PatientService"""
    return PatientService(db)


@router.get("", response_model=list[PatientResponse])
async def list_patients(
    search: Optional[str] = Query(None, description="Matches first name, last name or phone"),
    current_user: User = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    """Get all patients, ordered by last then first name"""
    return service.list_patients(search=search)


@router.get("/{patient_id}", response_model=PatientResponse)
async def get_patient(
    patient_id: int,
    current_user: User = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    return service.get_patient(patient_id)


@router.post("", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
async def create_patient(
    data: PatientCreate,
    current_user: User = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    return service.create_patient(data)


@router.put("/{patient_id}", response_model=PatientResponse)
async def update_patient(
    patient_id: int,
    data: PatientUpdate,
    current_user: User = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    """Replace a patient's details"""
    return service.update_patient(patient_id, data)


@router.delete("/{patient_id}", response_model=PatientDeleteResponse)
async def delete_patient(
    patient_id: int,
    current_user: User = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    """Delete a patient who has no appointments"""
    return service.delete_patient(patient_id)
