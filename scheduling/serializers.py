"""
Serializers for the scheduling API.
"""

from django.conf import settings
from rest_framework import serializers

from .exclusions import is_canonical_date
from .types import ScheduledSession, SessionDescriptor
from .weekdays import WEEKDAY_LABELS, weekday_label


class CanonicalDateField(serializers.CharField):
    """A `YYYY-MM-DD` date kept as a string, rejected in any other form."""

    default_error_messages = {
        'invalid_date': 'Invalid date format. Use YYYY-MM-DD.',
    }

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        if not is_canonical_date(value):
            self.fail('invalid_date')
        return value


class SessionDescriptorSerializer(serializers.Serializer):
    """
    Serializer for a session description (input).

    Dates and times stay strings: the expander decides how lenient to be,
    so a malformed time degrades to midnight instead of failing here.
    """

    start_date = serializers.CharField()
    end_date = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    start_time = serializers.CharField(required=False, allow_blank=True, default='')
    end_time = serializers.CharField(required=False, allow_blank=True, default='')
    days_of_week = serializers.CharField(required=False, allow_blank=True, allow_null=True, default='')
    cancel = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    excluded_dates = serializers.ListField(
        child=CanonicalDateField(),
        required=False,
        default=list
    )


def build_descriptor(data) -> SessionDescriptor:
    """Build a SessionDescriptor from validated session data."""
    return SessionDescriptor(
        start_date=data['start_date'],
        end_date=data.get('end_date'),
        start_time=data.get('start_time') or '',
        end_time=data.get('end_time') or '',
        weekday_spec=data.get('days_of_week') or '',
        inline_cancellations=data.get('cancel'),
    )


class ScheduledSessionSerializer(SessionDescriptorSerializer):
    """Serializer for a session taking part in an agenda or calendar."""

    session_id = serializers.CharField()
    title = serializers.CharField(required=False, allow_blank=True, default='')


def build_scheduled_sessions(items):
    """Build ScheduledSession instances from validated session data."""
    return [
        ScheduledSession(
            session_id=item['session_id'],
            title=item.get('title', ''),
            descriptor=build_descriptor(item),
            excluded_dates=frozenset(item.get('excluded_dates', [])),
        )
        for item in items
    ]


class AgendaQuerySerializer(serializers.Serializer):
    """Serializer for an agenda request."""

    sessions = ScheduledSessionSerializer(many=True)
    date = serializers.DateField(required=False, allow_null=True, default=None)


class CalendarQuerySerializer(serializers.Serializer):
    """Serializer for a calendar window request."""

    sessions = ScheduledSessionSerializer(many=True)
    start = serializers.DateField()
    end = serializers.DateField()

    def validate(self, data):
        """Ensure start is not after end."""
        if data['start'] > data['end']:
            raise serializers.ValidationError(
                "Start date must be on or before end date."
            )
        return data


class WeekdayQuerySerializer(serializers.Serializer):
    """Serializer for weekday spec query parameters."""

    days = serializers.CharField(required=False, allow_blank=True, default='')
    locale = serializers.ChoiceField(
        choices=sorted(WEEKDAY_LABELS),
        required=False
    )

    def validate(self, data):
        data.setdefault('locale', settings.SCHEDULE_WEEKDAY_LOCALE)
        return data


class OccurrenceSerializer(serializers.Serializer):
    """Serializer for displaying an Occurrence (output)."""

    date = serializers.DateField()
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()
    weekday = serializers.IntegerField()
    weekday_label = serializers.SerializerMethodField()

    def get_weekday_label(self, occurrence):
        locale = self.context.get('locale', settings.SCHEDULE_WEEKDAY_LOCALE)
        return weekday_label(occurrence.weekday, locale)


class AgendaEntrySerializer(serializers.Serializer):
    """Serializer for displaying an agenda row (output)."""

    session_id = serializers.CharField()
    title = serializers.CharField()
    date = serializers.DateField(source='occurrence.date')
    start_time = serializers.CharField(source='start_label')
    end_time = serializers.CharField(source='end_label')
    start_datetime = serializers.DateTimeField(source='occurrence.start')
    end_datetime = serializers.DateTimeField(source='occurrence.end')
    status = serializers.CharField()


class CalendarEventSerializer(serializers.Serializer):
    """Serializer for displaying a calendar event (output)."""

    id = serializers.CharField()
    session_id = serializers.CharField()
    title = serializers.CharField()
    start = serializers.DateTimeField(source='occurrence.start')
    end = serializers.DateTimeField(source='occurrence.end')
    occurrence = serializers.CharField(source='occurrence.compact_date')
