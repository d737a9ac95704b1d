from datetime import date, datetime, time
from sqlalchemy.orm import Session
from typing import Iterable, List

from ..models import Appointment

SLOT_FORMAT = "%H:%M"

def parse_slot(slot: str) -> time:
    """Parse an "HH:MM" slot string."""
    return datetime.strptime(slot, SLOT_FORMAT).time()

def format_slot(value: time) -> str:
    return value.strftime(SLOT_FORMAT)

def day_bounds(day: date):
    """Return the first and last instant of a calendar day."""
    return (
        datetime.combine(day, time.min),
        datetime.combine(day, time(23, 59, 59)),
    )

def doctor_template(template: Iterable[str], available_times: Iterable[str]) -> List[str]:
    """Restrict the clinic-wide template to the slots a doctor has configured."""
    configured = set(available_times or [])
    return [slot for slot in template if slot in configured]

class AvailabilityCalculator:
    def __init__(self, db: Session):
        self.db = db

    def availability(self, doctor_id: int, day: date, template: Iterable[str]) -> List[str]:
        """Free slots on ``day``: template slots not taken by a booked appointment, in template order.

        The doctor id is not validated here.
        """
        start, end = day_bounds(day)
        booked = self.db.query(Appointment.appointment_time).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_time >= start,
            Appointment.appointment_time <= end,
        ).all()
        booked_slots = {row.appointment_time.time() for row in booked}

        return [slot for slot in template if parse_slot(slot) not in booked_slots]
