from django.urls import path
from . import views

urlpatterns = [
    # Doctors and patients
    path('doctor', views.doctors, name='doctor-list'),
    path('patient', views.patients, name='patient-list'),
    path('clinic', views.clinics, name='clinic-list'),

    # Bookings
    path('booking', views.add_booking, name='booking-add'),
    path('booking/<uuid:booking_id>', views.cancel_booking, name='booking-cancel'),
    path('booking/patient/<int:patient_id>/next', views.next_appointment, name='booking-next'),
]
