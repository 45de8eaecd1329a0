"""
Test coverage for the doctor, patient and booking services without API calls
"""

import uuid
from datetime import date, datetime, timedelta, timezone as dt_timezone
from unittest import mock

from django.db import connection
from django.test import TestCase

from .clock import FixedDateTimeProvider
from .dto import AddDoctorRequest, AddPatientRequest, NewBookingRequest
from .exceptions import (
    BookingNotFoundError,
    DoctorNotFoundError,
    InvalidBookingRangeError,
    NoUpcomingBookingError,
    PastBookingError,
    PatientNotFoundError,
    RequestValidationError,
    SlotUnavailableError,
)
from .models import Clinic, Doctor, Gender, Order, Patient, SurgeryType
from .services import BookingService, DoctorService, PatientService
from .validators import ValidationResult


class DoctorServiceTests(TestCase):
    def setUp(self):
        self.clock = FixedDateTimeProvider(datetime(1985, 10, 26, tzinfo=dt_timezone.utc))
        self.validator = mock.Mock()
        self.validator.validate_request.return_value = ValidationResult()
        self.service = DoctorService(validator=self.validator, clock=self.clock)
        self.request = AddDoctorRequest(
            first_name="Emmett",
            last_name="Brown",
            gender=Gender.MALE,
            email="doc@example.com",
            date_of_birth=date(1920, 1, 1),
        )

    def _make_order(self, doctor, start, end, **kwargs):
        clinic = Clinic.objects.create(name="Clinic", surgery_type=SurgeryType.SYSTEM_TWO)
        patient = Patient.objects.create(
            first_name="Marty",
            last_name="McFly",
            email=f"{uuid.uuid4().hex}@example.com",
            date_of_birth=date(1968, 6, 12),
            clinic=clinic,
            created=self.clock.utc_now(),
        )
        return Order.objects.create(
            start_time=start,
            end_time=end,
            doctor=doctor,
            patient=patient,
            surgery_type=clinic.surgery_type,
            **kwargs,
        )

    def test_add_doctor_validates_request(self):
        self.service.add_doctor(self.request)

        self.validator.validate_request.assert_called_once_with(self.request)

    def test_add_doctor_validator_fails_raises_first_error(self):
        self.validator.validate_request.return_value = ValidationResult(
            ["first problem", "second problem"]
        )

        with self.assertRaises(RequestValidationError) as ctx:
            self.service.add_doctor(self.request)

        self.assertIsInstance(ctx.exception, ValueError)
        self.assertEqual(str(ctx.exception), "first problem")
        self.assertEqual(ctx.exception.errors, ["first problem", "second problem"])
        self.assertFalse(Doctor.objects.exists())

    def test_add_doctor_persists_doctor_with_generated_id(self):
        doctor = self.service.add_doctor(self.request)

        self.assertEqual(Doctor.objects.count(), 1)
        stored = Doctor.objects.get()
        self.assertEqual(stored.id, doctor.id)
        self.assertEqual(stored.first_name, "Emmett")
        self.assertEqual(stored.last_name, "Brown")
        self.assertEqual(stored.gender, Gender.MALE.value)
        self.assertEqual(stored.email, "doc@example.com")
        self.assertEqual(stored.date_of_birth, date(1920, 1, 1))
        self.assertEqual(stored.created, self.clock.utc_now())
        self.assertFalse(stored.orders.exists())

    def test_get_all_doctors_no_doctors_returns_empty_list(self):
        self.assertEqual(self.service.get_all_doctors(), [])

    def test_get_all_doctors_returns_mapped_doctor_list(self):
        doctor = self.service.add_doctor(self.request)

        res = self.service.get_all_doctors()

        self.assertEqual(
            res,
            [
                {
                    "id": doctor.id,
                    "first_name": "Emmett",
                    "last_name": "Brown",
                    "gender": Gender.MALE,
                    "date_of_birth": date(1920, 1, 1),
                    "email": "doc@example.com",
                }
            ],
        )
        self.assertIsInstance(res[0]["gender"], Gender)
        self.assertEqual(self.service.get_all_doctors(), res)

    def test_doctor_busy_if_range_is_booked(self):
        doctor = self.service.add_doctor(self.request)
        now = datetime(2030, 1, 1, 10, 0, tzinfo=dt_timezone.utc)
        self._make_order(doctor, now, now + timedelta(minutes=30))

        self.assertTrue(
            self.service.is_doctor_busy_during_range(
                doctor, now, now + timedelta(minutes=30)
            )
        )

    def test_doctor_free_if_range_starts_when_booking_ends(self):
        doctor = self.service.add_doctor(self.request)
        now = datetime(2030, 1, 1, 10, 0, tzinfo=dt_timezone.utc)
        self._make_order(doctor, now, now + timedelta(minutes=30))

        self.assertFalse(
            self.service.is_doctor_busy_during_range(
                doctor, now + timedelta(minutes=30), now + timedelta(minutes=60)
            )
        )

    def test_doctor_busy_for_partial_and_contained_overlap(self):
        doctor = self.service.add_doctor(self.request)
        now = datetime(2030, 1, 1, 10, 0, tzinfo=dt_timezone.utc)
        self._make_order(doctor, now, now + timedelta(minutes=30))

        ranges = [
            (now - timedelta(minutes=15), now + timedelta(minutes=15)),
            (now + timedelta(minutes=5), now + timedelta(minutes=25)),
            (now - timedelta(minutes=30), now + timedelta(hours=1)),
        ]
        for start, end in ranges:
            with self.subTest(start=start, end=end):
                self.assertTrue(self.service.is_doctor_busy_during_range(doctor, start, end))

        # Range ending exactly when the booking starts
        self.assertFalse(
            self.service.is_doctor_busy_during_range(doctor, now - timedelta(minutes=30), now)
        )

    def test_cancelled_orders_do_not_make_doctor_busy(self):
        doctor = self.service.add_doctor(self.request)
        now = datetime(2030, 1, 1, 10, 0, tzinfo=dt_timezone.utc)
        self._make_order(doctor, now, now + timedelta(minutes=30), is_cancelled=True)

        self.assertFalse(
            self.service.is_doctor_busy_during_range(
                doctor, now, now + timedelta(minutes=30)
            )
        )

    def test_other_doctors_orders_are_ignored(self):
        doctor = self.service.add_doctor(self.request)
        other = Doctor.objects.create(
            first_name="Other",
            last_name="Doctor",
            gender=Gender.FEMALE,
            email="other@example.com",
            date_of_birth=date(1970, 1, 1),
            created=self.clock.utc_now(),
        )
        now = datetime(2030, 1, 1, 10, 0, tzinfo=dt_timezone.utc)
        self._make_order(other, now, now + timedelta(minutes=30))

        self.assertFalse(
            self.service.is_doctor_busy_during_range(
                doctor.id, now, now + timedelta(minutes=30)
            )
        )


class PatientServiceTests(TestCase):
    def setUp(self):
        self.clock = FixedDateTimeProvider(datetime(2024, 2, 1, 9, 0, tzinfo=dt_timezone.utc))
        self.clinic = Clinic.objects.create(name="Clinic", surgery_type=SurgeryType.SYSTEM_ONE)
        self.service = PatientService(clock=self.clock)
        self.request = AddPatientRequest(
            first_name="Jane",
            last_name="Doe",
            gender=Gender.FEMALE,
            email="jane@example.com",
            date_of_birth=date(1990, 1, 1),
            clinic_id=self.clinic.id,
        )

    def test_add_patient_persists_patient(self):
        patient = self.service.add_patient(self.request)

        stored = Patient.objects.get(id=patient.id)
        self.assertEqual(stored.clinic, self.clinic)
        self.assertEqual(stored.gender, Gender.FEMALE.value)
        self.assertEqual(stored.created, self.clock.utc_now())

    def test_add_patient_validates_inside_the_insert_transaction(self):
        depths = []

        def validate(request):
            depths.append(len(connection.savepoint_ids))
            return ValidationResult()

        validator = mock.Mock()
        validator.validate_request.side_effect = validate
        service = PatientService(validator=validator, clock=self.clock)
        outer_depth = len(connection.savepoint_ids)

        service.add_patient(self.request)

        self.assertEqual(depths, [outer_depth + 1])

    def test_add_patient_duplicate_email_is_rejected(self):
        self.service.add_patient(self.request)

        with self.assertRaises(RequestValidationError) as ctx:
            self.service.add_patient(self.request)

        self.assertEqual(
            str(ctx.exception), "A patient with that email address already exists"
        )
        self.assertEqual(Patient.objects.count(), 1)

    def test_get_all_patients(self):
        self.assertEqual(self.service.get_all_patients(), [])
        patient = self.service.add_patient(self.request)

        res = self.service.get_all_patients()

        self.assertEqual(len(res), 1)
        self.assertEqual(res[0]["id"], patient.id)
        self.assertEqual(res[0]["clinic_id"], self.clinic.id)
        self.assertEqual(res[0]["gender"], Gender.FEMALE)


class BookingServiceTests(TestCase):
    def setUp(self):
        self.now = datetime(2024, 1, 1, 9, 0, tzinfo=dt_timezone.utc)
        self.clock = FixedDateTimeProvider(self.now)
        self.service = BookingService(clock=self.clock)

        self.clinic = Clinic.objects.create(
            name="Main Clinic", surgery_type=SurgeryType.SYSTEM_TWO
        )
        self.doctor = Doctor.objects.create(
            first_name="John",
            last_name="Smith",
            gender=Gender.MALE,
            email="dr.smith@example.com",
            date_of_birth=date(1970, 1, 1),
            created=self.now,
        )
        self.patient = Patient.objects.create(
            first_name="Jane",
            last_name="Doe",
            gender=Gender.FEMALE,
            email="jane@example.com",
            date_of_birth=date(1990, 1, 1),
            clinic=self.clinic,
            created=self.now,
        )

    def _request(self, start_offset, minutes=30, **kwargs):
        start = self.now + start_offset
        values = {
            "start_time": start,
            "end_time": start + timedelta(minutes=minutes),
            "patient_id": self.patient.id,
            "doctor_id": self.doctor.id,
        }
        values.update(kwargs)
        return NewBookingRequest(**values)

    def test_add_booking_creates_order(self):
        order = self.service.add_booking(self._request(timedelta(hours=1)))

        stored = Order.objects.get(id=order.id)
        self.assertIsInstance(stored.id, uuid.UUID)
        self.assertEqual(stored.doctor, self.doctor)
        self.assertEqual(stored.patient, self.patient)
        self.assertEqual(stored.start_time, self.now + timedelta(hours=1))
        self.assertEqual(stored.end_time, self.now + timedelta(hours=1, minutes=30))
        self.assertFalse(stored.is_cancelled)

    def test_add_booking_copies_surgery_type_from_clinic(self):
        order = self.service.add_booking(self._request(timedelta(hours=1)))

        self.clinic.surgery_type = SurgeryType.SYSTEM_ONE
        self.clinic.save()

        order.refresh_from_db()
        self.assertEqual(order.surgery_type, SurgeryType.SYSTEM_TWO)

    def test_add_booking_in_the_past_is_rejected(self):
        with self.assertRaises(PastBookingError):
            self.service.add_booking(self._request(-timedelta(minutes=1)))
        self.assertFalse(Order.objects.exists())

    def test_add_booking_starting_now_is_accepted(self):
        self.service.add_booking(self._request(timedelta(0)))
        self.assertEqual(Order.objects.count(), 1)

    def test_add_booking_with_empty_range_is_rejected(self):
        with self.assertRaises(InvalidBookingRangeError):
            self.service.add_booking(self._request(timedelta(hours=1), minutes=0))

    def test_add_booking_unknown_patient_or_doctor(self):
        with self.assertRaises(PatientNotFoundError):
            self.service.add_booking(
                self._request(timedelta(hours=1), patient_id=self.patient.id + 100)
            )
        with self.assertRaises(DoctorNotFoundError):
            self.service.add_booking(
                self._request(timedelta(hours=1), doctor_id=self.doctor.id + 100)
            )

    def test_no_double_booking(self):
        self.service.add_booking(self._request(timedelta(hours=1)))

        # Overlaps the first booking by 15 minutes
        with self.assertRaises(SlotUnavailableError):
            self.service.add_booking(self._request(timedelta(hours=1, minutes=15)))

        # Starts exactly when the first booking ends
        self.service.add_booking(self._request(timedelta(hours=1, minutes=30)))

        self.assertEqual(Order.objects.count(), 2)

    def test_cancelled_booking_frees_the_slot(self):
        order = self.service.add_booking(self._request(timedelta(hours=1)))
        self.service.cancel_booking(order.id)

        self.service.add_booking(self._request(timedelta(hours=1)))

        self.assertEqual(Order.objects.active().count(), 1)

    def test_cancel_booking_sets_flag(self):
        order = self.service.add_booking(self._request(timedelta(hours=1)))

        self.service.cancel_booking(order.id)

        order.refresh_from_db()
        self.assertTrue(order.is_cancelled)
        # Cancelled orders are kept
        self.assertEqual(Order.objects.count(), 1)

    def test_cancel_unknown_booking(self):
        with self.assertRaises(BookingNotFoundError):
            self.service.cancel_booking(uuid.uuid4())

    def test_next_appointment_is_earliest_upcoming_active_booking(self):
        later = self.service.add_booking(self._request(timedelta(days=2)))
        cancelled = self.service.add_booking(self._request(timedelta(hours=2)))
        self.service.cancel_booking(cancelled.id)
        earliest = self.service.add_booking(self._request(timedelta(days=1)))
        Order.objects.create(
            start_time=self.now - timedelta(days=1),
            end_time=self.now - timedelta(days=1) + timedelta(minutes=30),
            doctor=self.doctor,
            patient=self.patient,
            surgery_type=self.clinic.surgery_type,
        )

        self.assertEqual(self.service.get_next_appointment(self.patient.id), earliest)
        self.assertNotEqual(earliest, later)

    def test_next_appointment_none_upcoming(self):
        with self.assertRaises(NoUpcomingBookingError):
            self.service.get_next_appointment(self.patient.id)

    def test_next_appointment_out_of_range_patient_id(self):
        for patient_id in [0, 10**30]:
            with self.subTest(patient_id=patient_id):
                with self.assertRaises(NoUpcomingBookingError):
                    self.service.get_next_appointment(patient_id)
