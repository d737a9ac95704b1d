from pymongo.errors import PyMongoError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from ..core.documents import PrescriptionStore
from ..models import Appointment, AppointmentStatus
from ..schemas.prescription import PrescriptionCreate
from .appointment_service import AppointmentService
from .outcomes import Outcome, ServiceResult

logger = logging.getLogger(__name__)

class PrescriptionService:
    def __init__(self, db: Session, store: PrescriptionStore):
        self.db = db
        self.store = store

    def save(self, doctor_id: int, prescription: PrescriptionCreate) -> ServiceResult:
        """Record a prescription for one of the doctor's appointments and mark it completed."""
        appointment = self.db.get(Appointment, prescription.appointment_id)
        if appointment is None:
            return ServiceResult.failure(Outcome.NOT_FOUND, "Appointment not found.")
        if appointment.doctor_id != doctor_id:
            return ServiceResult.failure(
                Outcome.OWNERSHIP_MISMATCH,
                "Unauthorized: appointment belongs to another doctor."
            )

        # The status change stays uncommitted until the document is stored
        result = AppointmentService(self.db).set_status(appointment.id, AppointmentStatus.COMPLETED, commit=False)
        if not result.ok:
            return result

        try:
            prescription_id = self.store.save(prescription.model_dump())
        except PyMongoError as e:
            self.db.rollback()
            logger.error(f"Failed to save prescription for appointment {appointment.id}: {str(e)}")
            return ServiceResult.failure(Outcome.PERSISTENCE_ERROR, "Failed to save prescription.")

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            self.store.delete(prescription_id)
            logger.error(f"Failed to complete appointment {appointment.id}: {str(e)}")
            return ServiceResult.failure(Outcome.PERSISTENCE_ERROR, "Failed to save prescription.")

        return ServiceResult.success(prescription_id)

    def get_by_appointment_id(self, appointment_id: int) -> ServiceResult:
        try:
            prescriptions = self.store.get_by_appointment_id(appointment_id)
        except PyMongoError as e:
            logger.error(f"Failed to load prescriptions for appointment {appointment_id}: {str(e)}")
            return ServiceResult.failure(Outcome.PERSISTENCE_ERROR, "Failed to load prescriptions.")

        if not prescriptions:
            return ServiceResult.failure(Outcome.NOT_FOUND, "No prescription found for this appointment.")
        return ServiceResult.success(prescriptions)
