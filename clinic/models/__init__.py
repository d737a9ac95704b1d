from .admin import Admin
from .appointment import Appointment, AppointmentStatus, APPOINTMENT_DURATION
from .doctor import Doctor
from .patient import Patient

__all__ = [
    "Admin",
    "Appointment",
    "AppointmentStatus",
    "APPOINTMENT_DURATION",
    "Doctor",
    "Patient",
]
