"""
Test coverage for the add-patient and add-doctor request validators
"""

from dataclasses import replace
from datetime import date, datetime, timezone as dt_timezone

from django.test import TestCase

from .dto import AddDoctorRequest, AddPatientRequest
from .models import Clinic, Doctor, Gender, Patient, SurgeryType
from .validators import (
    AddDoctorRequestValidator,
    AddPatientRequestValidator,
    is_valid_email,
)

CREATED = datetime(2020, 1, 1, tzinfo=dt_timezone.utc)

VALID_EMAILS = [
    "user@domain.com",
    "user@domain-domain.com",
    "user@domain.net",
    "user@1.net",
    "user@domain.co.uk",
    "user.name@domain.com",
    "user.name@domain-domain.com",
    "user.name@domain.net",
    "user.name@1.net",
    "user.name@domain.co.uk",
    "user+100@domain.com",
    "user+100@domain-domain.com",
    "user+100@domain.net",
    "user+100@1.net",
    "user+100@domain.co.uk",
]

INVALID_EMAILS = [
    "user@",
    "@",
    "user",
    None,
    "",
    "user@domain",
    "@domain.com",
    "user@@domain.com",
    "user@domain..com",
    "user name@domain.com",
    "a@-b.com",
    "user@localhost",
]


class AddPatientRequestValidatorTests(TestCase):
    def setUp(self):
        self.clinic = Clinic.objects.create(
            name="Main Clinic", surgery_type=SurgeryType.SYSTEM_ONE
        )
        self.validator = AddPatientRequestValidator()
        self.request = AddPatientRequest(
            first_name="Jane",
            last_name="Doe",
            gender=Gender.FEMALE,
            email="jane.doe@example.com",
            date_of_birth=date(1990, 1, 1),
            clinic_id=self.clinic.id,
        )

    def test_all_checks_pass(self):
        res = self.validator.validate_request(self.request)

        self.assertTrue(res.passed_validation)
        self.assertEqual(res.errors, [])

    def test_first_name_null_or_empty(self):
        for first_name in ["", None]:
            with self.subTest(first_name=first_name):
                res = self.validator.validate_request(
                    replace(self.request, first_name=first_name)
                )
                self.assertFalse(res.passed_validation)
                self.assertIn("FirstName must be populated", res.errors)

    def test_last_name_null_or_empty(self):
        for last_name in ["", None]:
            with self.subTest(last_name=last_name):
                res = self.validator.validate_request(
                    replace(self.request, last_name=last_name)
                )
                self.assertFalse(res.passed_validation)
                self.assertIn("LastName must be populated", res.errors)

    def test_email_null_or_empty(self):
        for email in ["", None]:
            with self.subTest(email=email):
                res = self.validator.validate_request(
                    replace(self.request, email=email)
                )
                self.assertFalse(res.passed_validation)
                self.assertIn("Email must be populated", res.errors)

    def test_invalid_email(self):
        for email in INVALID_EMAILS:
            with self.subTest(email=email):
                res = self.validator.validate_request(
                    replace(self.request, email=email)
                )
                self.assertFalse(res.passed_validation)
                self.assertIn("Email must be a valid email address", res.errors)

    def test_valid_email(self):
        for email in VALID_EMAILS:
            with self.subTest(email=email):
                res = self.validator.validate_request(
                    replace(self.request, email=email)
                )
                self.assertTrue(res.passed_validation, res.errors)

    def test_patient_with_email_already_exists(self):
        Patient.objects.create(
            first_name="John",
            last_name="Smith",
            email="jane.doe@example.com",
            date_of_birth=date(1980, 5, 5),
            clinic=self.clinic,
            created=CREATED,
        )

        res = self.validator.validate_request(self.request)

        self.assertFalse(res.passed_validation)
        self.assertIn("A patient with that email address already exists", res.errors)

    def test_duplicate_email_check_ignores_case(self):
        Patient.objects.create(
            first_name="John",
            last_name="Smith",
            email="Jane.Doe@Example.com",
            date_of_birth=date(1980, 5, 5),
            clinic=self.clinic,
            created=CREATED,
        )

        res = self.validator.validate_request(self.request)

        self.assertIn("A patient with that email address already exists", res.errors)

    def test_clinic_does_not_exist(self):
        for clinic_id in [self.clinic.id + 100, None, 0, 10**30]:
            with self.subTest(clinic_id=clinic_id):
                res = self.validator.validate_request(
                    replace(self.request, clinic_id=clinic_id)
                )
                self.assertFalse(res.passed_validation)
                self.assertEqual(
                    res.errors, ["A clinic with that ID could not be found"]
                )

    def test_errors_accumulate_in_order(self):
        request = AddPatientRequest(
            first_name="",
            last_name=None,
            gender=Gender.OTHER,
            email="",
            date_of_birth=date(1990, 1, 1),
            clinic_id=None,
        )

        res = self.validator.validate_request(request)

        self.assertEqual(
            res.errors,
            [
                "FirstName must be populated",
                "LastName must be populated",
                "Email must be populated",
                "Email must be a valid email address",
                "A clinic with that ID could not be found",
            ],
        )


class AddDoctorRequestValidatorTests(TestCase):
    def setUp(self):
        self.validator = AddDoctorRequestValidator()
        self.request = AddDoctorRequest(
            first_name="John",
            last_name="Smith",
            gender=Gender.MALE,
            email="dr.smith@example.com",
            date_of_birth=date(1970, 3, 3),
        )

    def test_all_checks_pass(self):
        self.assertTrue(self.validator.validate_request(self.request).passed_validation)

    def test_missing_names(self):
        res = self.validator.validate_request(
            replace(self.request, first_name=None, last_name="")
        )

        self.assertEqual(
            res.errors, ["FirstName must be populated", "LastName must be populated"]
        )

    def test_doctor_with_email_already_exists(self):
        Doctor.objects.create(
            first_name="Other",
            last_name="Doctor",
            gender=Gender.FEMALE,
            email="dr.smith@example.com",
            date_of_birth=date(1975, 1, 1),
            created=CREATED,
        )

        res = self.validator.validate_request(self.request)

        self.assertFalse(res.passed_validation)
        self.assertIn("A doctor with that email address already exists", res.errors)


class EmailShapeTests(TestCase):
    def test_is_valid_email(self):
        for email in VALID_EMAILS:
            self.assertTrue(is_valid_email(email), email)
        for email in INVALID_EMAILS:
            self.assertFalse(is_valid_email(email), email)
