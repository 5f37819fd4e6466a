"""
URL configuration for program_schedule project.
"""
from django.urls import path, include

urlpatterns = [
    path('api/', include('scheduling.urls')),
]
