from datetime import date
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from ...core.database import get_db
from ...core.security import BadRequestError, ConflictError
from ...api.deps import get_doctor_id, get_patient_id, raise_for_result
from ...services.appointment_service import AppointmentService
from ...services.appointment_validator import AppointmentValidator
from ...services.availability import day_bounds
from ...services.outcomes import BookingCheck
from ...schemas.appointment import AppointmentCreate, AppointmentResponse, AppointmentUpdate
from ...schemas.auth import MessageResponse

router = APIRouter(prefix="/appointments", tags=["Appointments"])

@router.get("", response_model=List[AppointmentResponse])
async def get_doctor_appointments(
    day: date = Query(..., alias="date"),
    patient_name: Optional[str] = None,
    doctor_id: int = Depends(get_doctor_id),
    db: Session = Depends(get_db)
):
    """The calling doctor's appointments on a date, optionally filtered by patient name."""
    start, end = day_bounds(day)
    appointments = AppointmentService(db).list_for_doctor(doctor_id, start, end, patient_name)
    return [AppointmentResponse.from_appointment(a) for a in appointments]

@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    appointment_data: AppointmentCreate,
    patient_id: int = Depends(get_patient_id),
    db: Session = Depends(get_db)
):
    """Book an appointment for the calling patient."""
    check = AppointmentValidator(db).validate(
        appointment_data.doctor_id, appointment_data.appointment_time
    )
    if check is BookingCheck.DOCTOR_NOT_FOUND:
        raise BadRequestError("Invalid doctor ID.")
    if check is BookingCheck.SLOT_TAKEN:
        raise ConflictError("Requested time slot is not available.")

    result = raise_for_result(AppointmentService(db).book(
        appointment_data.doctor_id, patient_id, appointment_data.appointment_time
    ))
    return AppointmentResponse.from_appointment(result.value)

@router.put("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: int,
    appointment_data: AppointmentUpdate,
    patient_id: int = Depends(get_patient_id),
    db: Session = Depends(get_db)
):
    """Reschedule an appointment owned by the calling patient."""
    result = raise_for_result(AppointmentService(db).update(
        appointment_id,
        patient_id,
        appointment_data.doctor_id,
        appointment_data.appointment_time,
        appointment_data.status,
    ))
    return AppointmentResponse.from_appointment(result.value)

@router.delete("/{appointment_id}", response_model=MessageResponse)
async def cancel_appointment(
    appointment_id: int,
    patient_id: int = Depends(get_patient_id),
    db: Session = Depends(get_db)
):
    """Cancel an appointment owned by the calling patient."""
    raise_for_result(AppointmentService(db).cancel(appointment_id, patient_id))
    return {"message": "Appointment cancelled successfully."}
