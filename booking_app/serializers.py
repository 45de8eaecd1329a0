from rest_framework import serializers

from .dto import AddDoctorRequest, AddPatientRequest, NewBookingRequest
from .models import MAX_ID, Clinic, Gender, Order


def _optional_text(source=None):
    # Presence and emptiness are reported by the request validators
    kwargs = {"source": source} if source else {}
    return serializers.CharField(
        default=None, allow_null=True, allow_blank=True, **kwargs
    )


def _entity_id(source, **kwargs):
    return serializers.IntegerField(
        source=source, min_value=1, max_value=MAX_ID, **kwargs
    )


class ClinicSerializer(serializers.ModelSerializer):
    surgeryType = serializers.IntegerField(source="surgery_type", read_only=True)

    class Meta:
        model = Clinic
        fields = ["id", "name", "surgeryType"]


class DoctorSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    firstName = serializers.CharField(source="first_name")
    lastName = serializers.CharField(source="last_name")
    gender = serializers.ChoiceField(choices=Gender.choices)
    dateOfBirth = serializers.DateField(source="date_of_birth")
    email = serializers.CharField()


class PatientSerializer(DoctorSerializer):
    clinicId = serializers.IntegerField(source="clinic_id")


class AddDoctorSerializer(serializers.Serializer):
    firstName = _optional_text("first_name")
    lastName = _optional_text("last_name")
    gender = serializers.ChoiceField(choices=Gender.choices)
    email = _optional_text()
    dateOfBirth = serializers.DateField(source="date_of_birth")

    def to_request(self):
        return AddDoctorRequest(**self.validated_data)


class AddPatientSerializer(AddDoctorSerializer):
    gender = serializers.ChoiceField(choices=Gender.choices, default=Gender.OTHER)
    clinicId = _entity_id("clinic_id", default=None, allow_null=True)

    def to_request(self):
        return AddPatientRequest(**self.validated_data)


class NewBookingSerializer(serializers.Serializer):
    startTime = serializers.DateTimeField(source="start_time")
    endTime = serializers.DateTimeField(source="end_time")
    patientId = _entity_id("patient_id")
    doctorId = _entity_id("doctor_id")

    def to_request(self):
        return NewBookingRequest(**self.validated_data)


class NextAppointmentSerializer(serializers.ModelSerializer):
    doctorId = serializers.IntegerField(source="doctor_id", read_only=True)
    startTime = serializers.DateTimeField(source="start_time", read_only=True)
    endTime = serializers.DateTimeField(source="end_time", read_only=True)

    class Meta:
        model = Order
        fields = ["id", "doctorId", "startTime", "endTime"]
