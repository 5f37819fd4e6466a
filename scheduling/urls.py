"""
URL routing for the scheduling API.
"""

from django.urls import path
from .views import (
    AgendaView,
    CalendarView,
    OccurrenceExpandView,
    WeekdaysView,
)

urlpatterns = [
    path('occurrences/expand/', OccurrenceExpandView.as_view(), name='occurrence-expand'),
    path('agenda/', AgendaView.as_view(), name='agenda'),
    path('calendar/', CalendarView.as_view(), name='calendar'),
    path('weekdays/', WeekdaysView.as_view(), name='weekdays'),
]
