"""
Doctor, patient and booking services.

Each service takes its collaborators (request validator, clock, other
services) in the constructor so tests can swap them out. Every write
runs inside a single ``transaction.atomic()`` block.
"""

import logging
import uuid

from django.db import transaction

from .clock import DateTimeProvider
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
from .models import MAX_ID, Doctor, Gender, Order, Patient
from .validators import AddDoctorRequestValidator, AddPatientRequestValidator

logger = logging.getLogger(__name__)


class DoctorService:
    def __init__(self, validator=None, clock=None):
        self.validator = validator or AddDoctorRequestValidator()
        self.clock = clock or DateTimeProvider()

    def add_doctor(self, request) -> Doctor:
        with transaction.atomic():
            # The duplicate-email read shares the insert transaction
            result = self.validator.validate_request(request)
            if not result.passed_validation:
                logger.debug("Rejected doctor request: %s", result.errors)
                raise RequestValidationError(result.errors)

            doctor = Doctor.objects.create(
                first_name=request.first_name,
                last_name=request.last_name,
                gender=Gender(request.gender).value,
                email=request.email,
                date_of_birth=request.date_of_birth,
                created=self.clock.utc_now(),
            )

        logger.info("Added doctor %s", doctor.id)
        return doctor

    def get_all_doctors(self) -> list[dict]:
        return [
            {
                "id": d.id,
                "first_name": d.first_name,
                "last_name": d.last_name,
                "gender": Gender(d.gender),
                "date_of_birth": d.date_of_birth,
                "email": d.email,
            }
            for d in Doctor.objects.order_by("id")
        ]

    def is_doctor_busy_during_range(self, doctor, start, end) -> bool:
        """True when ``doctor`` has an active booking overlapping [start, end).

        A range that begins exactly when a booking ends does not overlap it.
        """
        return Order.objects.active().filter(doctor=doctor).overlapping(start, end).exists()


class PatientService:
    def __init__(self, validator=None, clock=None):
        self.validator = validator or AddPatientRequestValidator()
        self.clock = clock or DateTimeProvider()

    def add_patient(self, request) -> Patient:
        with transaction.atomic():
            # The duplicate-email read shares the insert transaction
            result = self.validator.validate_request(request)
            if not result.passed_validation:
                logger.debug("Rejected patient request: %s", result.errors)
                raise RequestValidationError(result.errors)

            patient = Patient.objects.create(
                first_name=request.first_name,
                last_name=request.last_name,
                gender=Gender(request.gender).value,
                email=request.email,
                date_of_birth=request.date_of_birth,
                clinic_id=request.clinic_id,
                created=self.clock.utc_now(),
            )

        logger.info("Added patient %s to clinic %s", patient.id, patient.clinic_id)
        return patient

    def get_all_patients(self) -> list[dict]:
        return [
            {
                "id": p.id,
                "first_name": p.first_name,
                "last_name": p.last_name,
                "gender": Gender(p.gender),
                "date_of_birth": p.date_of_birth,
                "email": p.email,
                "clinic_id": p.clinic_id,
            }
            for p in Patient.objects.order_by("id")
        ]


class BookingService:
    def __init__(self, doctor_service=None, clock=None):
        self.clock = clock or DateTimeProvider()
        self.doctor_service = doctor_service or DoctorService(clock=self.clock)

    def add_booking(self, request) -> Order:
        """
        Book ``request.doctor_id`` for ``request.patient_id``.

        Raises:
            PastBookingError: the start time is before now.
            InvalidBookingRangeError: the end time is not after the start time.
            PatientNotFoundError / DoctorNotFoundError: unknown references.
            SlotUnavailableError: the doctor is busy during the range.
        """
        if request.start_time < self.clock.utc_now():
            raise PastBookingError()
        if request.end_time <= request.start_time:
            raise InvalidBookingRangeError()

        patient = (
            Patient.objects.select_related("clinic")
            .filter(id=request.patient_id)
            .first()
        )
        if patient is None:
            raise PatientNotFoundError()

        with transaction.atomic():
            # Lock the doctor row so concurrent bookings for the same
            # doctor serialize on the availability check.
            doctor = (
                Doctor.objects.select_for_update().filter(id=request.doctor_id).first()
            )
            if doctor is None:
                raise DoctorNotFoundError()

            if self.doctor_service.is_doctor_busy_during_range(
                doctor, request.start_time, request.end_time
            ):
                logger.info(
                    "Doctor %s is busy between %s and %s",
                    doctor.id,
                    request.start_time,
                    request.end_time,
                )
                raise SlotUnavailableError()

            order = Order.objects.create(
                id=uuid.uuid4(),
                start_time=request.start_time,
                end_time=request.end_time,
                doctor=doctor,
                patient=patient,
                surgery_type=patient.clinic.surgery_type,
            )

        logger.info("Booked order %s for patient %s", order.id, patient.id)
        return order

    def cancel_booking(self, booking_id) -> Order:
        with transaction.atomic():
            order = Order.objects.select_for_update().filter(id=booking_id).first()
            if order is None:
                raise BookingNotFoundError()

            order.is_cancelled = True
            order.save(update_fields=["is_cancelled"])

        logger.info("Cancelled order %s", order.id)
        return order

    def get_next_appointment(self, patient_id) -> Order:
        if not 0 < patient_id <= MAX_ID:
            raise NoUpcomingBookingError()

        order = (
            Order.objects.active()
            .filter(patient_id=patient_id, start_time__gt=self.clock.utc_now())
            .order_by("start_time")
            .first()
        )
        if order is None:
            raise NoUpcomingBookingError()
        return order
