from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional

from ...core.config import Settings, get_settings
from ...core.database import get_db
from ...core.security import AuthenticationError, BadRequestError, UserRole
from ...api.deps import (
    authorize_as, get_admin, get_patient, rate_limit_check, raise_for_result
)
from ...models import Patient
from ...services.patient_service import PatientService, status_for_condition
from ...schemas.appointment import AppointmentResponse
from ...schemas.auth import Login, MessageResponse, TokenResponse
from ...schemas.patient import PatientRegister, PatientResponse

router = APIRouter(prefix="/patients", tags=["Patients"])

@router.post("", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
async def register_patient(
    patient_data: PatientRegister,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Register a new patient."""
    result = raise_for_result(PatientService(db, settings).register(patient_data))
    return result.value

@router.post("/login", response_model=TokenResponse)
async def patient_login(
    login_data: Login,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    _: None = Depends(rate_limit_check)
):
    """Authenticate a patient and return an access token."""
    result = raise_for_result(
        PatientService(db, settings).login(login_data.email, login_data.password)
    )
    return TokenResponse(token=result.value)

@router.get("/me", response_model=PatientResponse)
async def get_patient_details(
    patient: Patient = Depends(get_patient)
):
    """Profile of the patient the token belongs to."""
    return patient

@router.get("/me/appointments/filter", response_model=List[AppointmentResponse])
async def filter_patient_appointments(
    condition: Optional[str] = None,
    doctor: Optional[str] = None,
    patient: Patient = Depends(get_patient),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """The caller's appointments filtered by condition (past/future) and doctor name."""
    appointment_status = None
    if condition is not None:
        appointment_status = status_for_condition(condition)
        if appointment_status is None:
            raise BadRequestError(f"Invalid condition: {condition}")

    appointments = PatientService(db, settings).filter_appointments(
        patient.id, appointment_status, doctor
    )
    return [AppointmentResponse.from_appointment(a) for a in appointments]

@router.get("/{patient_id}/appointments", response_model=List[AppointmentResponse])
async def get_patient_appointments(
    patient_id: int,
    caller=Depends(authorize_as),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Appointments of a patient. Patients may only read their own."""
    role, account = caller
    if role == UserRole.PATIENT and account.id != patient_id:
        raise AuthenticationError("Unauthorized: Patient ID mismatch.")

    appointments = PatientService(db, settings).get_appointments(patient_id)
    return [AppointmentResponse.from_appointment(a) for a in appointments]

@router.delete("/{patient_id}", response_model=MessageResponse)
async def delete_patient(
    patient_id: int,
    _: object = Depends(get_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Delete a patient without appointments (admin only)."""
    raise_for_result(PatientService(db, settings).delete(patient_id))
    return {"message": "Patient deleted successfully."}
