from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Iterable, List, Optional
import logging

from ..core.config import Settings
from ..core.security import get_password_hash, verify_password
from ..models import Doctor
from ..schemas.doctor import DoctorCreate, DoctorUpdate
from .availability import parse_slot
from .outcomes import Outcome, ServiceResult
from .token_service import TokenService

logger = logging.getLogger(__name__)

NOON = parse_slot("12:00")

def is_available_in_period(doctor: Doctor, period: str) -> bool:
    """True if any configured slot falls in the half day: AM is strictly before noon."""
    morning = period.upper() == "AM"
    for slot in doctor.available_times or []:
        before_noon = parse_slot(slot) < NOON
        if before_noon == morning:
            return True
    return False

def filter_by_period(doctors: Iterable[Doctor], period: str) -> List[Doctor]:
    return [doctor for doctor in doctors if is_available_in_period(doctor, period)]

class DoctorService:
    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    def login(self, email: str, password: str) -> ServiceResult:
        """Validate doctor credentials and issue a token."""
        doctor = self.db.query(Doctor).filter(Doctor.email == email).first()
        if not doctor:
            return ServiceResult.failure(Outcome.INVALID_CREDENTIALS, "Invalid email.")
        if not verify_password(password, doctor.password_hash):
            return ServiceResult.failure(Outcome.INVALID_CREDENTIALS, "Invalid password.")

        return ServiceResult.success(TokenService(self.db, self.settings).issue(doctor.email))

    def get_doctors(self) -> List[Doctor]:
        return self.db.query(Doctor).order_by(Doctor.id).all()

    def create(self, doctor_data: DoctorCreate) -> ServiceResult:
        """Register a doctor; the email must be unused."""
        if self.db.query(Doctor).filter(Doctor.email == doctor_data.email).first():
            return ServiceResult.failure(Outcome.CONFLICT, "Doctor already exists with this email.")

        doctor = Doctor(
            name=doctor_data.name,
            email=doctor_data.email,
            phone=doctor_data.phone,
            specialty=doctor_data.specialty,
            available_times=list(doctor_data.available_times),
            password_hash=get_password_hash(doctor_data.password),
        )
        self.db.add(doctor)
        return self._commit(doctor, "Failed to register doctor.")

    def update(self, doctor_id: int, doctor_data: DoctorUpdate) -> ServiceResult:
        doctor = self.db.get(Doctor, doctor_id)
        if doctor is None:
            return ServiceResult.failure(Outcome.NOT_FOUND, "Doctor not found.")

        taken = self.db.query(Doctor).filter(
            Doctor.email == doctor_data.email,
            Doctor.id != doctor_id,
        ).first()
        if taken:
            return ServiceResult.failure(Outcome.CONFLICT, "Doctor already exists with this email.")

        doctor.name = doctor_data.name
        doctor.email = doctor_data.email
        doctor.phone = doctor_data.phone
        doctor.specialty = doctor_data.specialty
        doctor.available_times = list(doctor_data.available_times)
        if doctor_data.password:
            doctor.password_hash = get_password_hash(doctor_data.password)
        return self._commit(doctor, "Failed to update doctor.")

    def delete(self, doctor_id: int) -> ServiceResult:
        """Delete a doctor together with all of the doctor's appointments."""
        doctor = self.db.get(Doctor, doctor_id)
        if doctor is None:
            return ServiceResult.failure(Outcome.NOT_FOUND, "Doctor not found.")

        self.db.delete(doctor)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete doctor {doctor_id}: {str(e)}")
            return ServiceResult.failure(Outcome.PERSISTENCE_ERROR, "Failed to delete doctor.")

        logger.info(f"Deleted doctor {doctor_id} and their appointments")
        return ServiceResult.success()

    # Filtering

    def _by_name(self, name: str):
        return self.db.query(Doctor).filter(Doctor.name.ilike(f"%{name}%"))

    def _by_specialty(self, specialty: str):
        return self.db.query(Doctor).filter(func.lower(Doctor.specialty) == specialty.lower())

    def _by_name_and_specialty(self, name: str, specialty: str):
        return self._by_name(name).filter(func.lower(Doctor.specialty) == specialty.lower())

    def filter_doctors(
        self,
        name: Optional[str] = None,
        specialty: Optional[str] = None,
        period: Optional[str] = None
    ) -> List[Doctor]:
        """Search doctors by any combination of name, specialty and AM/PM availability."""
        if name and specialty and period:
            return filter_by_period(self._by_name_and_specialty(name, specialty).all(), period)
        elif name and specialty:
            return self._by_name_and_specialty(name, specialty).all()
        elif name and period:
            return filter_by_period(self._by_name(name).all(), period)
        elif specialty and period:
            return filter_by_period(self._by_specialty(specialty).all(), period)
        elif name:
            return self._by_name(name).all()
        elif specialty:
            return self._by_specialty(specialty).all()
        elif period:
            return filter_by_period(self.get_doctors(), period)
        else:
            return self.get_doctors()

    def _commit(self, doctor: Doctor, failure_message: str) -> ServiceResult:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return ServiceResult.failure(Outcome.CONFLICT, "Doctor already exists with this email.")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"{failure_message} {str(e)}")
            return ServiceResult.failure(Outcome.PERSISTENCE_ERROR, failure_message)

        self.db.refresh(doctor)
        return ServiceResult.success(doctor)
