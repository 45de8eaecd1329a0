import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .exceptions import (
    BookingError,
    BookingNotFoundError,
    NotFoundError,
    RequestValidationError,
)
from .models import Clinic
from .serializers import (
    AddDoctorSerializer,
    AddPatientSerializer,
    ClinicSerializer,
    DoctorSerializer,
    NewBookingSerializer,
    NextAppointmentSerializer,
    PatientSerializer,
)
from .services import BookingService, DoctorService, PatientService

logger = logging.getLogger(__name__)


def get_doctor_service():
    return DoctorService()


def get_patient_service():
    return PatientService()


def get_booking_service():
    return BookingService()


def _error(message, status_code=status.HTTP_400_BAD_REQUEST):
    return Response({"error": message}, status=status_code)


# Doctor Views
@api_view(["GET", "POST"])
@permission_classes([AllowAny])
def doctors(request):
    service = get_doctor_service()
    if request.method == "GET":
        data = DoctorSerializer(service.get_all_doctors(), many=True).data
        return Response({"doctors": data})

    serializer = AddDoctorSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        doctor = service.add_doctor(serializer.to_request())
    except RequestValidationError as e:
        return _error(str(e))

    return Response({"id": doctor.id}, status=status.HTTP_201_CREATED)


# Patient Views
@api_view(["GET", "POST"])
@permission_classes([AllowAny])
def patients(request):
    service = get_patient_service()
    if request.method == "GET":
        data = PatientSerializer(service.get_all_patients(), many=True).data
        return Response({"patients": data})

    serializer = AddPatientSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        patient = service.add_patient(serializer.to_request())
    except RequestValidationError as e:
        return _error(str(e))

    return Response({"id": patient.id}, status=status.HTTP_201_CREATED)


# Clinic Views - read only, clinics are maintained through the admin
@api_view(["GET"])
@permission_classes([AllowAny])
def clinics(request):
    data = ClinicSerializer(Clinic.objects.order_by("id"), many=True).data
    return Response({"clinics": data})


# Booking Views
@api_view(["POST"])
@permission_classes([AllowAny])
def add_booking(request):
    serializer = NewBookingSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        order = get_booking_service().add_booking(serializer.to_request())
    except NotFoundError as e:
        return _error(e.message, status.HTTP_404_NOT_FOUND)
    except BookingError as e:
        return _error(e.message)

    return Response({"id": str(order.id)}, status=status.HTTP_200_OK)


@api_view(["DELETE"])
@permission_classes([AllowAny])
def cancel_booking(request, booking_id):
    try:
        get_booking_service().cancel_booking(booking_id)
    except BookingNotFoundError as e:
        return _error(e.message)
    except DatabaseError:
        logger.exception("Failed to cancel booking %s", booking_id)
        return _error("Unable to delete booking", status.HTTP_502_BAD_GATEWAY)

    return Response(status=status.HTTP_200_OK)


@api_view(["GET"])
@permission_classes([AllowAny])
def next_appointment(request, patient_id):
    try:
        order = get_booking_service().get_next_appointment(patient_id)
    except NotFoundError as e:
        return _error(e.message, status.HTTP_404_NOT_FOUND)

    return Response(NextAppointmentSerializer(order).data)
