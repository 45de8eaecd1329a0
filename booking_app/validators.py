from dataclasses import dataclass, field
from typing import List

from django.core.exceptions import ValidationError
from django.core.validators import validate_email

from .models import MAX_ID, Clinic, Doctor, Patient


@dataclass
class ValidationResult:
    errors: List[str] = field(default_factory=list)

    @property
    def passed_validation(self) -> bool:
        return not self.errors


def is_valid_email(email) -> bool:
    if not email:
        return False
    try:
        validate_email(email)
    except ValidationError:
        return False
    # validate_email also allows bare "localhost"
    return "." in email.rpartition("@")[2]


def _is_valid_id(value) -> bool:
    return value is not None and 0 < value <= MAX_ID


def _person_errors(request) -> List[str]:
    """Checks shared by doctor and patient requests: names and email shape."""
    errors = []
    if not request.first_name:
        errors.append("FirstName must be populated")
    if not request.last_name:
        errors.append("LastName must be populated")
    if not request.email:
        errors.append("Email must be populated")
    if not is_valid_email(request.email):
        errors.append("Email must be a valid email address")
    return errors


class AddPatientRequestValidator:
    def validate_request(self, request) -> ValidationResult:
        errors = _person_errors(request)

        if request.email and Patient.objects.filter(email__iexact=request.email).exists():
            errors.append("A patient with that email address already exists")

        if not _is_valid_id(request.clinic_id) or not Clinic.objects.filter(id=request.clinic_id).exists():
            errors.append("A clinic with that ID could not be found")

        return ValidationResult(errors)


class AddDoctorRequestValidator:
    def validate_request(self, request) -> ValidationResult:
        errors = _person_errors(request)

        if request.email and Doctor.objects.filter(email__iexact=request.email).exists():
            errors.append("A doctor with that email address already exists")

        return ValidationResult(errors)
