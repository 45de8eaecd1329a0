from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass
class AddDoctorRequest:
    first_name: Optional[str]
    last_name: Optional[str]
    gender: int
    email: Optional[str]
    date_of_birth: date


@dataclass
class AddPatientRequest:
    first_name: Optional[str]
    last_name: Optional[str]
    gender: int
    email: Optional[str]
    date_of_birth: date
    clinic_id: Optional[int]


@dataclass
class NewBookingRequest:
    start_time: datetime
    end_time: datetime
    patient_id: int
    doctor_id: int
