from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from ..core.config import Settings
from ..core.security import get_password_hash, verify_password
from ..models import Appointment, AppointmentStatus, Doctor, Patient
from ..schemas.patient import PatientRegister
from .outcomes import Outcome, ServiceResult
from .token_service import TokenService

logger = logging.getLogger(__name__)

# Appointment filter conditions and the status each one selects
CONDITION_STATUS = {
    "future": AppointmentStatus.SCHEDULED,
    "past": AppointmentStatus.COMPLETED,
}

def status_for_condition(condition: str) -> Optional[AppointmentStatus]:
    """Map "past"/"future" (any case) to a status, None for anything else."""
    return CONDITION_STATUS.get(condition.lower())

class PatientService:
    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    def exists(self, email: str, phone: str) -> bool:
        """True if a patient already uses this email or phone number."""
        return self.db.query(Patient).filter(
            or_(Patient.email == email, Patient.phone == phone)
        ).first() is not None

    def register(self, patient_data: PatientRegister) -> ServiceResult:
        if self.exists(patient_data.email, patient_data.phone):
            return ServiceResult.failure(Outcome.CONFLICT, "Patient already exists with this email or phone.")

        patient = Patient(
            name=patient_data.name,
            email=patient_data.email,
            phone=patient_data.phone,
            address=patient_data.address,
            password_hash=get_password_hash(patient_data.password),
        )
        self.db.add(patient)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return ServiceResult.failure(Outcome.CONFLICT, "Patient already exists with this email or phone.")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to register patient: {str(e)}")
            return ServiceResult.failure(Outcome.PERSISTENCE_ERROR, "Failed to register patient.")

        self.db.refresh(patient)
        return ServiceResult.success(patient)

    def login(self, email: str, password: str) -> ServiceResult:
        patient = self.db.query(Patient).filter(Patient.email == email).first()
        if not patient:
            return ServiceResult.failure(Outcome.INVALID_CREDENTIALS, "Invalid email.")
        if not verify_password(password, patient.password_hash):
            return ServiceResult.failure(Outcome.INVALID_CREDENTIALS, "Invalid password.")

        return ServiceResult.success(TokenService(self.db, self.settings).issue(patient.email))

    def get_appointments(self, patient_id: int) -> List[Appointment]:
        return self.db.query(Appointment).filter(
            Appointment.patient_id == patient_id
        ).order_by(Appointment.appointment_time).all()

    def filter_appointments(
        self,
        patient_id: int,
        status: Optional[AppointmentStatus] = None,
        doctor_name: Optional[str] = None
    ) -> List[Appointment]:
        """A patient's appointments, optionally narrowed by status and doctor name."""
        query = self.db.query(Appointment).filter(Appointment.patient_id == patient_id)
        if status is not None:
            query = query.filter(Appointment.status == int(status))
        if doctor_name:
            query = query.join(Appointment.doctor).filter(Doctor.name.ilike(f"%{doctor_name}%"))
        return query.order_by(Appointment.appointment_time).all()

    def delete(self, patient_id: int) -> ServiceResult:
        """Delete a patient. Appointments are not cascaded; patients with appointments are kept."""
        patient = self.db.get(Patient, patient_id)
        if patient is None:
            return ServiceResult.failure(Outcome.NOT_FOUND, "Patient not found.")

        has_appointments = self.db.query(Appointment.id).filter(
            Appointment.patient_id == patient_id
        ).first() is not None
        if has_appointments:
            return ServiceResult.failure(Outcome.CONFLICT, "Patient has appointments and cannot be deleted.")

        self.db.delete(patient)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete patient {patient_id}: {str(e)}")
            return ServiceResult.failure(Outcome.PERSISTENCE_ERROR, "Failed to delete patient.")
        return ServiceResult.success()
