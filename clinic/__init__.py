"""
Clinic Appointment Backend

A FastAPI-based clinic management service with role-based access for admins,
doctors and patients, appointment scheduling and prescription records.
"""

__version__ = "1.0.0"
