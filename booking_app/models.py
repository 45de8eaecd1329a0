import uuid

from django.db import models

# Largest value a BigAutoField primary key can hold
MAX_ID = 2**63 - 1


class Gender(models.IntegerChoices):
    MALE = 0, "Male"
    FEMALE = 1, "Female"
    OTHER = 2, "Other"


class SurgeryType(models.IntegerChoices):
    SYSTEM_ONE = 0, "System One"
    SYSTEM_TWO = 1, "System Two"


class Clinic(models.Model):
    name = models.CharField(max_length=200)
    surgery_type = models.IntegerField(
        choices=SurgeryType.choices, default=SurgeryType.SYSTEM_ONE
    )

    def __str__(self):
        return self.name


class Doctor(models.Model):
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    gender = models.IntegerField(choices=Gender.choices)
    email = models.EmailField()
    date_of_birth = models.DateField()
    created = models.DateTimeField()

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"Dr. {self.first_name} {self.last_name}"


class Patient(models.Model):
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    gender = models.IntegerField(choices=Gender.choices, default=Gender.OTHER)
    # Uniqueness is checked by AddPatientRequestValidator, not the database
    email = models.EmailField()
    date_of_birth = models.DateField()
    clinic = models.ForeignKey(
        Clinic, on_delete=models.PROTECT, related_name="patients"
    )
    created = models.DateTimeField()

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.first_name} {self.last_name}"


class OrderQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_cancelled=False)

    def overlapping(self, start, end):
        """Orders whose [start_time, end_time) intersects [start, end)"""
        return self.filter(start_time__lt=end, end_time__gt=start)


class Order(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    doctor = models.ForeignKey(Doctor, on_delete=models.CASCADE, related_name="orders")
    patient = models.ForeignKey(
        Patient, on_delete=models.CASCADE, related_name="orders"
    )
    surgery_type = models.IntegerField(choices=SurgeryType.choices)
    is_cancelled = models.BooleanField(default=False)

    objects = OrderQuerySet.as_manager()

    class Meta:
        ordering = ["start_time"]

    def __str__(self):
        return f"{self.patient} with {self.doctor} at {self.start_time}"
