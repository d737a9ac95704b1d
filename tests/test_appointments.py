from datetime import datetime

from clinic.models import Appointment, AppointmentStatus


class TestBookAppointment:

    def test_book_success(self, client, db_session, make_doctor, make_patient, auth_headers):
        """A patient books a configured slot."""
        doctor = make_doctor(available_times=["09:00", "14:00"])
        patient = make_patient(email="pat@example.com")

        response = client.post(
            "/api/v1/appointments",
            json={"doctor_id": doctor.id, "appointment_time": "2024-01-10T09:00:00"},
            headers=auth_headers("pat@example.com"),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["doctor_id"] == doctor.id
        assert data["patient_id"] == patient.id
        assert data["end_time"] == "2024-01-10T10:00:00"
        assert data["status"] == 0

    def test_book_unknown_doctor(self, client, db_session, make_patient, auth_headers):
        """Booking with a nonexistent doctor is a bad request and inserts nothing."""
        make_patient(email="pat@example.com")

        response = client.post(
            "/api/v1/appointments",
            json={"doctor_id": 99, "appointment_time": "2024-01-10T09:00:00"},
            headers=auth_headers("pat@example.com"),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid doctor ID."
        assert db_session.query(Appointment).count() == 0

    def test_book_unconfigured_slot(self, client, db_session, make_doctor, make_patient, auth_headers):
        """Slots outside the doctor's configuration are never booked."""
        doctor = make_doctor(available_times=["09:00"])
        make_patient(email="pat@example.com")

        response = client.post(
            "/api/v1/appointments",
            json={"doctor_id": doctor.id, "appointment_time": "2024-01-10T10:00:00"},
            headers=auth_headers("pat@example.com"),
        )

        assert response.status_code == 409
        assert db_session.query(Appointment).count() == 0

    def test_book_seconds_past_slot(self, client, db_session, make_doctor, make_patient, auth_headers):
        """09:00:30 is not the 09:00 slot, so it cannot shadow a 09:00 booking."""
        doctor = make_doctor(available_times=["08:00", "09:00", "14:00"])
        make_patient(email="first@example.com")
        make_patient(email="second@example.com")

        first = client.post(
            "/api/v1/appointments",
            json={"doctor_id": doctor.id, "appointment_time": "2024-01-10T09:00:30"},
            headers=auth_headers("first@example.com"),
        )
        second = client.post(
            "/api/v1/appointments",
            json={"doctor_id": doctor.id, "appointment_time": "2024-01-10T09:00:00"},
            headers=auth_headers("second@example.com"),
        )
        availability = client.get(
            f"/api/v1/doctors/{doctor.id}/availability",
            params={"date": "2024-01-10", "user": "patient"},
            headers=auth_headers("first@example.com"),
        )

        assert first.status_code == 409
        assert second.status_code == 201
        assert db_session.query(Appointment).count() == 1
        assert availability.json()["available_times"] == ["08:00", "14:00"]

    def test_book_taken_instant(self, client, make_doctor, make_patient, make_appointment, auth_headers):
        """A second booking at the same doctor and instant conflicts."""
        doctor = make_doctor(available_times=["09:00"])
        make_appointment(doctor, make_patient(), datetime(2024, 1, 10, 9, 0))
        make_patient(email="pat@example.com")

        response = client.post(
            "/api/v1/appointments",
            json={"doctor_id": doctor.id, "appointment_time": "2024-01-10T09:00:00"},
            headers=auth_headers("pat@example.com"),
        )

        assert response.status_code == 409

    def test_book_requires_patient(self, client, make_doctor, auth_headers):
        """Doctors cannot book through the patient route."""
        doctor = make_doctor(email="house@clinic.com")

        response = client.post(
            "/api/v1/appointments",
            json={"doctor_id": doctor.id, "appointment_time": "2024-01-10T09:00:00"},
            headers=auth_headers("house@clinic.com"),
        )

        assert response.status_code == 401


class TestUpdateAppointment:

    def test_update_success(self, client, make_doctor, make_patient, make_appointment, auth_headers):
        """The owner reschedules an appointment."""
        doctor = make_doctor()
        patient = make_patient(email="pat@example.com")
        appointment = make_appointment(doctor, patient, datetime(2024, 1, 10, 9, 0))

        response = client.put(
            f"/api/v1/appointments/{appointment.id}",
            json={"doctor_id": doctor.id, "appointment_time": "2024-01-10T14:00:00", "status": 0},
            headers=auth_headers("pat@example.com"),
        )

        assert response.status_code == 200
        assert response.json()["appointment_time"] == "2024-01-10T14:00:00"

    def test_update_without_status_keeps_status(self, client, make_doctor, make_patient, make_appointment,
                                                auth_headers):
        """Leaving out the status does not reopen a completed appointment."""
        doctor = make_doctor()
        patient = make_patient(email="pat@example.com")
        appointment = make_appointment(doctor, patient, datetime(2024, 1, 10, 9, 0), status=AppointmentStatus.COMPLETED)

        response = client.put(
            f"/api/v1/appointments/{appointment.id}",
            json={"doctor_id": doctor.id, "appointment_time": "2024-01-10T14:00:00"},
            headers=auth_headers("pat@example.com"),
        )

        assert response.status_code == 200
        assert response.json()["status"] == AppointmentStatus.COMPLETED

    def test_update_overlap(self, client, make_doctor, make_patient, make_appointment, auth_headers):
        """Moving within thirty minutes of another booking conflicts."""
        doctor = make_doctor()
        patient = make_patient(email="pat@example.com")
        make_appointment(doctor, make_patient(), datetime(2024, 1, 10, 14, 0))
        appointment = make_appointment(doctor, patient, datetime(2024, 1, 10, 9, 0))

        response = client.put(
            f"/api/v1/appointments/{appointment.id}",
            json={"doctor_id": doctor.id, "appointment_time": "2024-01-10T14:20:00", "status": 0},
            headers=auth_headers("pat@example.com"),
        )

        assert response.status_code == 409
        assert response.json()["message"] == "Doctor not available at this time."

    def test_update_not_owner(self, client, make_doctor, make_patient, make_appointment, auth_headers):
        """Other patients cannot reschedule."""
        doctor = make_doctor()
        appointment = make_appointment(doctor, make_patient(), datetime(2024, 1, 10, 9, 0))
        make_patient(email="other@example.com")

        response = client.put(
            f"/api/v1/appointments/{appointment.id}",
            json={"doctor_id": doctor.id, "appointment_time": "2024-01-11T09:00:00", "status": 0},
            headers=auth_headers("other@example.com"),
        )

        assert response.status_code == 401

    def test_update_missing(self, client, make_doctor, make_patient, auth_headers):
        """Unknown appointments are not found."""
        doctor = make_doctor()
        make_patient(email="pat@example.com")

        response = client.put(
            "/api/v1/appointments/404",
            json={"doctor_id": doctor.id, "appointment_time": "2024-01-11T09:00:00", "status": 0},
            headers=auth_headers("pat@example.com"),
        )

        assert response.status_code == 404


class TestCancelAppointment:

    def test_cancel_success(self, client, db_session, make_doctor, make_patient, make_appointment, auth_headers):
        """The owner cancels an appointment."""
        patient = make_patient(email="pat@example.com")
        appointment = make_appointment(make_doctor(), patient, datetime(2024, 1, 10, 9, 0))
        appointment_id = appointment.id

        response = client.delete(f"/api/v1/appointments/{appointment_id}", headers=auth_headers("pat@example.com"))

        assert response.status_code == 200
        db_session.expire_all()
        assert db_session.get(Appointment, appointment_id) is None

    def test_cancel_other_patients_appointment(self, client, db_session, make_doctor, make_patient,
                                                make_appointment, auth_headers):
        """Patient P cannot cancel patient Q's appointment, which stays queryable."""
        owner = make_patient()
        make_patient(email="intruder@example.com")
        appointment = make_appointment(make_doctor(), owner, datetime(2024, 1, 10, 9, 0))

        response = client.delete(f"/api/v1/appointments/{appointment.id}", headers=auth_headers("intruder@example.com"))

        assert response.status_code == 401
        assert response.json()["message"] == "Unauthorized: Patient ID mismatch."
        db_session.expire_all()
        assert db_session.get(Appointment, appointment.id) is not None

    def test_cancel_missing(self, client, make_patient, auth_headers):
        """Unknown appointments are not found."""
        make_patient(email="pat@example.com")

        response = client.delete("/api/v1/appointments/404", headers=auth_headers("pat@example.com"))

        assert response.status_code == 404


class TestDoctorAppointments:

    def test_list_for_day(self, client, make_doctor, make_patient, make_appointment, auth_headers):
        """A doctor lists the day's appointments, optionally by patient name."""
        doctor = make_doctor(email="house@clinic.com")
        make_appointment(doctor, make_patient(name="Alice Walker"), datetime(2024, 1, 10, 9, 0))
        make_appointment(doctor, make_patient(name="Bob Stone"), datetime(2024, 1, 10, 14, 0))
        make_appointment(doctor, make_patient(name="Carl Walker"), datetime(2024, 1, 11, 9, 0))
        headers = auth_headers("house@clinic.com")

        everyone = client.get("/api/v1/appointments", params={"date": "2024-01-10"}, headers=headers)
        walkers = client.get(
            "/api/v1/appointments", params={"date": "2024-01-10", "patient_name": "WALKER"}, headers=headers
        )

        assert [a["patient_name"] for a in everyone.json()] == ["Alice Walker", "Bob Stone"]
        assert [a["patient_name"] for a in walkers.json()] == ["Alice Walker"]

    def test_invalid_date(self, client, make_doctor, auth_headers):
        """Malformed dates are a bad request."""
        make_doctor(email="house@clinic.com")

        response = client.get(
            "/api/v1/appointments", params={"date": "10-01-2024"}, headers=auth_headers("house@clinic.com")
        )

        assert response.status_code == 400
