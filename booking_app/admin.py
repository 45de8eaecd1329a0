from django.contrib import admin
from .models import Clinic, Doctor, Patient, Order


class OrderInline(admin.TabularInline):
    model = Order
    extra = 0
    fields = ["patient", "start_time", "end_time", "surgery_type", "is_cancelled"]
    readonly_fields = ["surgery_type"]


@admin.register(Clinic)
class ClinicAdmin(admin.ModelAdmin):
    list_display = ["name", "surgery_type"]
    list_filter = ["surgery_type"]
    search_fields = ["name"]


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ["first_name", "last_name", "email", "gender", "created"]
    search_fields = ["first_name", "last_name", "email"]
    inlines = [OrderInline]


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ["first_name", "last_name", "email", "clinic", "date_of_birth"]
    list_filter = ["clinic"]
    search_fields = ["first_name", "last_name", "email"]


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "patient",
        "doctor",
        "start_time",
        "end_time",
        "surgery_type",
        "is_cancelled",
    ]
    list_filter = ["is_cancelled", "surgery_type", "doctor"]
    search_fields = [
        "patient__first_name",
        "patient__last_name",
        "doctor__first_name",
        "doctor__last_name",
    ]
    date_hierarchy = "start_time"
