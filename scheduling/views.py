"""Views for the scheduling API."""

from zoneinfo import ZoneInfo

from django.conf import settings
from django.utils import timezone

from rest_framework import serializers
from rest_framework.response import Response
from rest_framework.views import APIView

from .exceptions import InvalidDateRange
from .serializers import (
    AgendaEntrySerializer,
    AgendaQuerySerializer,
    CalendarEventSerializer,
    CalendarQuerySerializer,
    OccurrenceSerializer,
    SessionDescriptorSerializer,
    WeekdayQuerySerializer,
    build_descriptor,
    build_scheduled_sessions,
)
from . import services
from .formatting import format_weekday_spec
from .weekdays import encode_weekdays, parse_weekdays, validate_weekdays


class OccurrenceExpandView(APIView):
    """
    Expand a session into its concrete occurrences.

    POST /api/occurrences/expand/
    """

    def post(self, request):
        """Expand the session described in the request body."""
        serializer = SessionDescriptorSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        descriptor = build_descriptor(serializer.validated_data)
        try:
            occurrences = services.expand_occurrences(
                descriptor,
                serializer.validated_data['excluded_dates'],
                zone=settings.SCHEDULE_REFERENCE_TIMEZONE
            )
        except InvalidDateRange as exc:
            raise serializers.ValidationError({'start_date': [str(exc)]})

        response_serializer = OccurrenceSerializer(occurrences, many=True)
        return Response(response_serializer.data)


class AgendaView(APIView):
    """
    List one day's occurrences across many sessions.

    POST /api/agenda/ - `date` defaults to today in the reference timezone
    """

    def post(self, request):
        """Build the agenda for the requested date."""
        serializer = AgendaQuerySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        zone = settings.SCHEDULE_REFERENCE_TIMEZONE
        day = serializer.validated_data['date'] or timezone.localdate(timezone=ZoneInfo(zone))
        entries = services.build_agenda(
            build_scheduled_sessions(serializer.validated_data['sessions']),
            day=day,
            zone=zone
        )

        return Response({
            'date': day.isoformat(),
            'sessions': AgendaEntrySerializer(entries, many=True).data,
        })


class CalendarView(APIView):
    """
    List calendar events for a date window.

    POST /api/calendar/
    """

    def post(self, request):
        """Build calendar events between `start` and `end`, inclusive."""
        serializer = CalendarQuerySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        events = services.build_calendar(
            build_scheduled_sessions(serializer.validated_data['sessions']),
            serializer.validated_data['start'],
            serializer.validated_data['end'],
            zone=settings.SCHEDULE_REFERENCE_TIMEZONE
        )

        return Response(CalendarEventSerializer(events, many=True).data)


class WeekdaysView(APIView):
    """
    Parse a weekday spec.

    GET /api/weekdays/?days=X&locale=es
    """

    def get(self, request):
        """Describe the parsed weekday spec."""
        query_serializer = WeekdayQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)

        spec = query_serializer.validated_data['days']
        days = sorted(parse_weekdays(spec))

        return Response({
            'days': days,
            'label': format_weekday_spec(spec, locale=query_serializer.validated_data['locale']),
            'canonical': encode_weekdays(days),
            'valid': validate_weekdays(spec),
        })
