import uuid
from datetime import date, timedelta
from unittest import mock

from django.db import DatabaseError
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from .models import Clinic, Doctor, Gender, Order, Patient, SurgeryType


class BookingAPITests(APITestCase):
    def setUp(self):
        self.clinic = Clinic.objects.create(
            name="Test Clinic", surgery_type=SurgeryType.SYSTEM_TWO
        )
        self.doctor = Doctor.objects.create(
            first_name="John",
            last_name="Doe",
            gender=Gender.MALE,
            email="doctor@clinic.com",
            date_of_birth=date(1970, 1, 1),
            created=timezone.now(),
        )
        self.patient = Patient.objects.create(
            first_name="Jane",
            last_name="Smith",
            gender=Gender.FEMALE,
            email="jane@example.com",
            date_of_birth=date(1990, 1, 1),
            clinic=self.clinic,
            created=timezone.now(),
        )
        self.start = (timezone.now() + timedelta(days=1)).replace(microsecond=0)

    def _book(self, start, minutes=30, **overrides):
        data = {
            "startTime": start.isoformat(),
            "endTime": (start + timedelta(minutes=minutes)).isoformat(),
            "patientId": self.patient.id,
            "doctorId": self.doctor.id,
        }
        data.update(overrides)
        return self.client.post("/api/booking", data, format="json")

    def test_add_booking(self):
        """A free slot is booked and the clinic's surgery type is recorded"""
        response = self._book(self.start)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        order = Order.objects.get(id=response.data["id"])
        self.assertEqual(order.patient, self.patient)
        self.assertEqual(order.doctor, self.doctor)
        self.assertEqual(order.surgery_type, SurgeryType.SYSTEM_TWO)

    def test_add_booking_in_the_past(self):
        response = self._book(timezone.now() - timedelta(hours=1))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "Unable to add a booking in the past")
        self.assertFalse(Order.objects.exists())

    def test_no_double_booking(self):
        """Overlapping bookings are rejected, adjacent ones are accepted"""
        self.assertEqual(self._book(self.start).status_code, status.HTTP_200_OK)

        response = self._book(self.start + timedelta(minutes=15))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            response.data["error"], "This timeslot is not currently available"
        )

        response = self._book(self.start + timedelta(minutes=30))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Order.objects.count(), 2)

    def test_add_booking_unknown_doctor(self):
        response = self._book(self.start, doctorId=self.doctor.id + 100)

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_add_booking_malformed_body(self):
        response = self.client.post(
            "/api/booking", {"startTime": "not-a-date"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("doctorId", response.data)

    def test_cancel_booking(self):
        booking_id = self._book(self.start).data["id"]

        response = self.client.delete(f"/api/booking/{booking_id}")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(Order.objects.get(id=booking_id).is_cancelled)

    def test_cancel_unknown_booking(self):
        response = self.client.delete(f"/api/booking/{uuid.uuid4()}")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "Unable to find appointment")

    def test_cancel_booking_database_failure(self):
        service = mock.Mock()
        service.cancel_booking.side_effect = DatabaseError("disk I/O error")

        with mock.patch("booking_app.views.get_booking_service", return_value=service):
            response = self.client.delete(f"/api/booking/{uuid.uuid4()}")

        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.data["error"], "Unable to delete booking")

    def test_next_appointment(self):
        later_id = self._book(self.start + timedelta(days=1)).data["id"]
        first_id = self._book(self.start).data["id"]

        response = self.client.get(f"/api/booking/patient/{self.patient.id}/next")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["id"], first_id)
        self.assertNotEqual(response.data["id"], later_id)
        self.assertEqual(response.data["doctorId"], self.doctor.id)
        self.assertIn("startTime", response.data)
        self.assertIn("endTime", response.data)

    def test_add_booking_out_of_range_ids(self):
        for field in ["patientId", "doctorId"]:
            with self.subTest(field=field):
                response = self._book(self.start, **{field: 10**30})

                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertIn(field, response.data)
        self.assertFalse(Order.objects.exists())

    def test_next_appointment_out_of_range_patient_id(self):
        response = self.client.get(
            "/api/booking/patient/1000000000000000000000000000000/next"
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_next_appointment_skips_cancelled(self):
        booking_id = self._book(self.start).data["id"]
        self.client.delete(f"/api/booking/{booking_id}")

        response = self.client.get(f"/api/booking/patient/{self.patient.id}/next")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class DoctorAndPatientAPITests(APITestCase):
    def setUp(self):
        self.clinic = Clinic.objects.create(
            name="Test Clinic", surgery_type=SurgeryType.SYSTEM_ONE
        )

    def test_add_and_list_doctors(self):
        self.assertEqual(self.client.get("/api/doctor").data, {"doctors": []})

        response = self.client.post(
            "/api/doctor",
            {
                "firstName": "John",
                "lastName": "Doe",
                "gender": Gender.MALE.value,
                "email": "john@clinic.com",
                "dateOfBirth": "1970-01-01",
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        doctors = self.client.get("/api/doctor").data["doctors"]
        self.assertEqual(len(doctors), 1)
        self.assertEqual(doctors[0]["id"], response.data["id"])
        self.assertEqual(doctors[0]["firstName"], "John")
        self.assertEqual(doctors[0]["gender"], Gender.MALE.value)
        self.assertEqual(doctors[0]["dateOfBirth"], "1970-01-01")

    def test_add_doctor_reports_first_validation_error(self):
        response = self.client.post(
            "/api/doctor",
            {
                "firstName": "",
                "lastName": "",
                "gender": Gender.OTHER.value,
                "email": "john@clinic.com",
                "dateOfBirth": "1970-01-01",
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "FirstName must be populated")
        self.assertFalse(Doctor.objects.exists())

    def test_add_patient(self):
        payload = {
            "firstName": "Jane",
            "lastName": "Smith",
            "gender": Gender.FEMALE.value,
            "email": "jane@example.com",
            "dateOfBirth": "1990-01-01",
            "clinicId": self.clinic.id,
        }

        response = self.client.post("/api/patient", payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.post("/api/patient", payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            response.data["error"], "A patient with that email address already exists"
        )

        patients = self.client.get("/api/patient").data["patients"]
        self.assertEqual(len(patients), 1)
        self.assertEqual(patients[0]["clinicId"], self.clinic.id)

    def test_add_patient_unknown_clinic(self):
        response = self.client.post(
            "/api/patient",
            {
                "firstName": "Jane",
                "lastName": "Smith",
                "email": "jane@example.com",
                "dateOfBirth": "1990-01-01",
                "clinicId": self.clinic.id + 100,
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            response.data["error"], "A clinic with that ID could not be found"
        )

    def test_list_clinics(self):
        response = self.client.get("/api/clinic")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            response.data["clinics"],
            [{"id": self.clinic.id, "name": "Test Clinic", "surgeryType": 0}],
        )

    def test_add_patient_out_of_range_clinic_id(self):
        response = self.client.post(
            "/api/patient",
            {
                "firstName": "Jane",
                "lastName": "Smith",
                "email": "jane@example.com",
                "dateOfBirth": "1990-01-01",
                "clinicId": 10**30,
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("clinicId", response.data)
        self.assertFalse(Patient.objects.exists())

    def test_add_doctor_rejects_malformed_email(self):
        response = self.client.post(
            "/api/doctor",
            {
                "firstName": "John",
                "lastName": "Doe",
                "gender": Gender.MALE.value,
                "email": "john@-clinic.com",
                "dateOfBirth": "1970-01-01",
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "Email must be a valid email address")
