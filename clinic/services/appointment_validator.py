from datetime import datetime, timedelta
from sqlalchemy.orm import Session
from typing import Optional

from ..models import Appointment, Doctor
from .availability import format_slot
from .outcomes import BookingCheck

# Appointments of one doctor must start at least this far apart
OVERLAP_WINDOW = timedelta(minutes=30)

class AppointmentValidator:
    def __init__(self, db: Session):
        self.db = db

    def validate(self, doctor_id: int, appointment_time: datetime) -> BookingCheck:
        """Check that the requested start falls on one of the doctor's configured slots.

        This is a configuration check only; booked-slot conflicts are caught by
        the overlap check on update and the unique constraint on insert.
        """
        doctor = self.db.get(Doctor, doctor_id)
        if doctor is None:
            return BookingCheck.DOCTOR_NOT_FOUND

        # Slots are whole minutes; 09:00:30 is not the 09:00 slot
        if appointment_time.second or appointment_time.microsecond:
            return BookingCheck.SLOT_TAKEN

        slot = format_slot(appointment_time.time())
        if slot in (doctor.available_times or []):
            return BookingCheck.VALID
        return BookingCheck.SLOT_TAKEN

    def has_overlap(
        self,
        doctor_id: int,
        appointment_time: datetime,
        exclude_id: Optional[int] = None
    ) -> bool:
        """True if another appointment of the doctor starts within the overlap window."""
        query = self.db.query(Appointment.id).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_time >= appointment_time - OVERLAP_WINDOW,
            Appointment.appointment_time <= appointment_time + OVERLAP_WINDOW,
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)
        return query.first() is not None
