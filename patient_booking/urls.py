"""
URL configuration for the patient booking project.

The booking API lives under ``/api/``; the Django admin is kept for
maintaining clinics, which the API never creates.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('booking_app.urls')),
]
