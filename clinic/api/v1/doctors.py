from datetime import date
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from ...core.config import Settings, get_settings
from ...core.database import get_db
from ...core.security import BadRequestError
from ...api.deps import authorize_as, get_admin, rate_limit_check, raise_for_result
from ...models import Doctor
from ...services.availability import AvailabilityCalculator, doctor_template
from ...services.doctor_service import DoctorService
from ...schemas.auth import Login, MessageResponse, TokenResponse
from ...schemas.doctor import AvailabilityResponse, DoctorCreate, DoctorResponse, DoctorUpdate

router = APIRouter(prefix="/doctors", tags=["Doctors"])

@router.post("/login", response_model=TokenResponse)
async def doctor_login(
    login_data: Login,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    _: None = Depends(rate_limit_check)
):
    """Authenticate a doctor and return an access token."""
    doctor_service = DoctorService(db, settings)
    result = raise_for_result(doctor_service.login(login_data.email, login_data.password))
    return TokenResponse(token=result.value)

@router.get("", response_model=List[DoctorResponse])
async def list_doctors(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """List all doctors."""
    return DoctorService(db, settings).get_doctors()

@router.get("/filter", response_model=List[DoctorResponse])
async def filter_doctors(
    name: Optional[str] = None,
    specialty: Optional[str] = None,
    time: Optional[str] = Query(None, description="AM or PM"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Filter doctors by name, specialty and morning/afternoon availability."""
    if time is not None and time.upper() not in ("AM", "PM"):
        raise BadRequestError("Time period must be AM or PM.")
    return DoctorService(db, settings).filter_doctors(name, specialty, time)

@router.get("/{doctor_id}/availability", response_model=AvailabilityResponse)
async def doctor_availability(
    doctor_id: int,
    day: date = Query(..., alias="date"),
    _=Depends(authorize_as),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Free slots of a doctor on a date."""
    template = settings.SLOT_TEMPLATE
    doctor = db.get(Doctor, doctor_id)
    if doctor is not None:
        template = doctor_template(template, doctor.available_times)

    available = AvailabilityCalculator(db).availability(doctor_id, day, template)
    return AvailabilityResponse(
        doctor_id=doctor_id,
        date=day.isoformat(),
        available_times=available
    )

@router.post("", response_model=DoctorResponse, status_code=status.HTTP_201_CREATED)
async def create_doctor(
    doctor_data: DoctorCreate,
    _: object = Depends(get_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Register a doctor (admin only)."""
    result = raise_for_result(DoctorService(db, settings).create(doctor_data))
    return result.value

@router.put("/{doctor_id}", response_model=DoctorResponse)
async def update_doctor(
    doctor_id: int,
    doctor_data: DoctorUpdate,
    _: object = Depends(get_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Update a doctor's profile (admin only)."""
    result = raise_for_result(DoctorService(db, settings).update(doctor_id, doctor_data))
    return result.value

@router.delete("/{doctor_id}", response_model=MessageResponse)
async def delete_doctor(
    doctor_id: int,
    _: object = Depends(get_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Delete a doctor and the doctor's appointments (admin only)."""
    raise_for_result(DoctorService(db, settings).delete(doctor_id))
    return {"message": "Doctor deleted successfully."}
