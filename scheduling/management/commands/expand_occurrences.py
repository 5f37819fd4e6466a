"""
Management command to list the occurrences a session produces.

Useful for checking a session row's dates, weekdays and cancellations
before they reach the calendar or reminder jobs.
"""

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from scheduling import services
from scheduling.exceptions import InvalidDateRange
from scheduling.exclusions import is_canonical_date
from scheduling.formatting import format_clock_time
from scheduling.types import SessionDescriptor
from scheduling.weekdays import WEEKDAY_LABELS, weekday_label


class Command(BaseCommand):
    help = 'Expand a session description into its concrete occurrences'

    def add_arguments(self, parser):
        parser.add_argument('--start-date', required=True, help='First date (YYYY-MM-DD)')
        parser.add_argument('--end-date', default=None, help='Last date (default: start date)')
        parser.add_argument('--start-time', default='', help='Start time (HH:MM)')
        parser.add_argument('--end-time', default='', help='End time (HH:MM)')
        parser.add_argument('--days', default='', help='Weekday spec, e.g. "mon,wed" (default: every day)')
        parser.add_argument('--cancel', default=None, help='Inline cancel list (comma-separated dates)')
        parser.add_argument(
            '--exclude',
            action='append',
            default=[],
            help='Excluded date (YYYY-MM-DD); may be repeated'
        )
        parser.add_argument(
            '--locale',
            default=settings.SCHEDULE_WEEKDAY_LOCALE,
            choices=sorted(WEEKDAY_LABELS),
            help='Weekday label locale (es or en)'
        )

    def handle(self, *args, **options):
        for excluded_date in options['exclude']:
            if not is_canonical_date(excluded_date):
                raise CommandError(f'Invalid excluded date {excluded_date!r}. Use YYYY-MM-DD')

        descriptor = SessionDescriptor(
            start_date=options['start_date'],
            end_date=options['end_date'],
            start_time=options['start_time'],
            end_time=options['end_time'],
            weekday_spec=options['days'],
            inline_cancellations=options['cancel'],
        )

        try:
            occurrences = services.expand_occurrences(
                descriptor,
                options['exclude'],
                zone=settings.SCHEDULE_REFERENCE_TIMEZONE
            )
        except InvalidDateRange as exc:
            raise CommandError(str(exc))

        for occurrence in occurrences:
            self.stdout.write(
                f'{occurrence.ymd} {weekday_label(occurrence.weekday, options["locale"])} '
                f'{format_clock_time(occurrence.start.strftime("%H:%M"))} - '
                f'{format_clock_time(occurrence.end.strftime("%H:%M"))}'
            )

        self.stdout.write(
            self.style.SUCCESS(
                f'Successfully expanded {len(occurrences)} occurrence(s)'
            )
        )
