from datetime import datetime
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from ..models import Appointment, AppointmentStatus, Doctor, Patient
from .appointment_validator import AppointmentValidator
from .outcomes import Outcome, ServiceResult

logger = logging.getLogger(__name__)

class AppointmentService:
    """Owns every write to appointments: book, update, cancel and status changes."""

    def __init__(self, db: Session):
        self.db = db
        self.validator = AppointmentValidator(db)

    def book(self, doctor_id: int, patient_id: int, appointment_time: datetime) -> ServiceResult:
        """Insert a new appointment. The caller has already run ``AppointmentValidator.validate``."""
        appointment = Appointment(
            doctor_id=doctor_id,
            patient_id=patient_id,
            status=AppointmentStatus.SCHEDULED,
        )
        appointment.reschedule(appointment_time)

        self.db.add(appointment)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return ServiceResult.failure(Outcome.SLOT_CONFLICT, "Requested time slot is already booked.")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to book appointment for doctor {doctor_id}: {str(e)}")
            return ServiceResult.failure(Outcome.PERSISTENCE_ERROR, "Failed to book appointment.")

        self.db.refresh(appointment)
        logger.info(f"Booked appointment {appointment.id} for doctor {doctor_id} at {appointment_time}")
        return ServiceResult.success(appointment)

    def update(
        self,
        appointment_id: int,
        patient_id: int,
        doctor_id: int,
        appointment_time: datetime,
        status: Optional[AppointmentStatus] = None
    ) -> ServiceResult:
        """Move an appointment owned by ``patient_id`` to a new doctor and time.

        The status is overwritten only when one is given.
        """
        appointment = self.db.get(Appointment, appointment_id)
        if appointment is None:
            return ServiceResult.failure(Outcome.NOT_FOUND, "Appointment not found.")

        if appointment.patient_id != patient_id:
            return ServiceResult.failure(Outcome.OWNERSHIP_MISMATCH, "Unauthorized: Patient ID mismatch.")

        # Lock the doctor row so concurrent updates for one doctor run the overlap check in turn
        doctor = self.db.query(Doctor).filter(Doctor.id == doctor_id).with_for_update().first()
        if doctor is None:
            self.db.rollback()
            return ServiceResult.failure(Outcome.NOT_FOUND, "Doctor not found.")

        if self.validator.has_overlap(doctor_id, appointment_time, exclude_id=appointment.id):
            self.db.rollback()
            return ServiceResult.failure(Outcome.SLOT_CONFLICT, "Doctor not available at this time.")

        appointment.doctor_id = doctor_id
        appointment.reschedule(appointment_time)
        if status is not None:
            appointment.status = status

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return ServiceResult.failure(Outcome.SLOT_CONFLICT, "Doctor not available at this time.")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to update appointment {appointment_id}: {str(e)}")
            return ServiceResult.failure(Outcome.PERSISTENCE_ERROR, "Failed to update appointment.")

        self.db.refresh(appointment)
        return ServiceResult.success(appointment)

    def cancel(self, appointment_id: int, patient_id: int) -> ServiceResult:
        """Delete an appointment owned by ``patient_id``."""
        appointment = self.db.get(Appointment, appointment_id)
        if appointment is None:
            return ServiceResult.failure(Outcome.NOT_FOUND, "Appointment not found.")

        if appointment.patient_id != patient_id:
            return ServiceResult.failure(Outcome.OWNERSHIP_MISMATCH, "Unauthorized: Patient ID mismatch.")

        self.db.delete(appointment)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to cancel appointment {appointment_id}: {str(e)}")
            return ServiceResult.failure(Outcome.PERSISTENCE_ERROR, "Failed to cancel appointment.")

        logger.info(f"Cancelled appointment {appointment_id}")
        return ServiceResult.success()

    def list_for_doctor(
        self,
        doctor_id: int,
        start: datetime,
        end: datetime,
        patient_name: Optional[str] = None
    ) -> List[Appointment]:
        """Appointments of a doctor between two instants, optionally filtered by patient name."""
        query = self.db.query(Appointment).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_time >= start,
            Appointment.appointment_time <= end,
        )
        if patient_name:
            query = query.join(Appointment.patient).filter(
                Patient.name.ilike(f"%{patient_name}%")
            )
        return query.order_by(Appointment.appointment_time).all()

    def set_status(self, appointment_id: int, status: AppointmentStatus, commit: bool = True) -> ServiceResult:
        """Overwrite an appointment's status. Authorization is the caller's job.

        With ``commit=False`` the change stays in the open transaction for the
        caller to commit or roll back.
        """
        try:
            updated = self.db.query(Appointment).filter(
                Appointment.id == appointment_id
            ).update({"status": int(status)})

            if not updated:
                self.db.rollback()
                return ServiceResult.failure(Outcome.NOT_FOUND, "Appointment not found.")

            if commit:
                self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to set status of appointment {appointment_id}: {str(e)}")
            return ServiceResult.failure(Outcome.PERSISTENCE_ERROR, "Failed to update appointment status.")
        return ServiceResult.success()
