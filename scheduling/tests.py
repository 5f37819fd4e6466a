"""
Tests for the scheduling app.

Tests cover:
- Weekday parsing, validation, formatting and encoding
- Exclusion sets and inline cancel lists
- Occurrence expansion (weekday filters, exclusions, timezones, leniency)
- Schedule formatting
- Agenda and calendar builders
- API endpoints
- Management commands
"""

from datetime import date, datetime, timedelta
from io import StringIO
from zoneinfo import ZoneInfo

from django.core.management import CommandError, call_command
from django.test import SimpleTestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APISimpleTestCase

from .exceptions import InvalidDateRange
from .exclusions import (
    ExclusionSet,
    add_cancellation,
    is_canonical_date,
    parse_inline_cancellations,
    remove_cancellation,
)
from .formatting import format_clock_time, format_weekday_spec
from .services import (
    build_agenda,
    build_calendar,
    expand_occurrences,
    occurrence_status,
    occurrences_between,
    occurrences_on,
    upcoming_occurrences,
)
from .types import Occurrence, ScheduledSession, SessionDescriptor
from .weekdays import (
    encode_weekdays,
    format_weekdays,
    parse_weekdays,
    validate_weekdays,
    weekday_label,
)


EASTERN = ZoneInfo('America/New_York')


def eastern(*args):
    return datetime(*args, tzinfo=EASTERN)


def dates_of(occurrences):
    return [occurrence.ymd for occurrence in occurrences]


class WeekdayParsingTests(SimpleTestCase):
    """Test parse_weekdays and validate_weekdays."""

    def test_multi_locale_tokens_are_equivalent(self):
        """Test English, abbreviated, Spanish and digit tokens for Monday."""
        for spec in ["Monday", "mon", "lunes", "1", "M", "LUN"]:
            self.assertEqual(parse_weekdays(spec), frozenset({1}), spec)

    def test_zero_and_seven_mean_sunday(self):
        """Test both digit forms of Sunday."""
        self.assertEqual(parse_weekdays("0"), frozenset({7}))
        self.assertEqual(parse_weekdays("7"), frozenset({7}))
        self.assertEqual(parse_weekdays("0 7 domingo sun"), frozenset({7}))

    def test_separators(self):
        """Test splitting on whitespace, commas, semicolons, pipes and slashes."""
        days = parse_weekdays("mon, wed;fri|sat/sun  tu")
        self.assertEqual(days, frozenset({1, 2, 3, 5, 6, 7}))

    def test_spanish_with_and_without_accents(self):
        """Test accented and unaccented Spanish names."""
        self.assertEqual(parse_weekdays("Miércoles sábado"), frozenset({3, 6}))
        self.assertEqual(parse_weekdays("miercoles,sabado"), frozenset({3, 6}))
        self.assertEqual(parse_weekdays("mié sáb"), frozenset({3, 6}))

    def test_decomposed_accents(self):
        """Test accents typed as combining characters."""
        self.assertEqual(parse_weekdays("mie\u0301rcoles"), frozenset({3}))

    def test_unrecognized_tokens_are_dropped(self):
        """Test that unknown tokens do not raise or match."""
        self.assertEqual(parse_weekdays("mon, funday, 9"), frozenset({1}))
        self.assertEqual(parse_weekdays("xyz"), frozenset())

    def test_empty_input(self):
        """Test empty and missing specs."""
        self.assertEqual(parse_weekdays(""), frozenset())
        self.assertEqual(parse_weekdays(None), frozenset())

    def test_parsing_is_idempotent(self):
        """Test repeated parses agree."""
        spec = "tue, thursday; sáb"
        self.assertEqual(parse_weekdays(spec), parse_weekdays(spec))

    def test_validate(self):
        """Test validation of weekday specs."""
        self.assertTrue(validate_weekdays("mon"))
        self.assertTrue(validate_weekdays("foo, viernes"))
        self.assertFalse(validate_weekdays(""))
        self.assertFalse(validate_weekdays("   "))
        self.assertFalse(validate_weekdays("foo bar"))
        self.assertFalse(validate_weekdays(None))


class WeekdayFormattingTests(SimpleTestCase):
    """Test format_weekdays and encode_weekdays."""

    def test_format_is_monday_first(self):
        """Test labels come out in canonical order."""
        self.assertEqual(format_weekdays({5, 1, 3}), "Lun, Mié, Vie")
        self.assertEqual(format_weekdays([7, 6], locale='en'), "Sat, Sun")

    def test_format_empty(self):
        """Test an empty set renders as an empty string."""
        self.assertEqual(format_weekdays(set()), "")

    def test_format_unknown_locale(self):
        """Test an unsupported locale raises ValueError."""
        with self.assertRaises(ValueError):
            format_weekdays({1}, locale='fr')

    def test_encode_keeps_order(self):
        """Test encoding to full English names."""
        self.assertEqual(encode_weekdays([3, 1]), "wednesday,monday")
        self.assertEqual(encode_weekdays([]), "")

    def test_encode_rejects_out_of_range(self):
        """Test numbers outside 1..7 are rejected."""
        with self.assertRaises(ValueError):
            encode_weekdays([1, 8])
        with self.assertRaises(ValueError):
            encode_weekdays([0])

    def test_round_trip_canonical_labels(self):
        """Test encode -> parse -> format yields the Monday-first labels."""
        self.assertEqual(format_weekdays(parse_weekdays(encode_weekdays([7, 1, 4]))), "Lun, Jue, Dom")
        self.assertEqual(format_weekdays(parse_weekdays(encode_weekdays([6, 2]))), "Mar, Sáb")
        self.assertEqual(
            format_weekdays(parse_weekdays(encode_weekdays([1, 2, 3, 4, 5, 6, 7]))),
            "Lun, Mar, Mié, Jue, Vie, Sáb, Dom"
        )


class ExclusionSetTests(SimpleTestCase):
    """Test exclusion sets and inline cancel lists."""

    def test_parse_comma_separated(self):
        """Test tokens are stripped and empties dropped."""
        self.assertEqual(
            parse_inline_cancellations(" 2024-01-08 , 2024-01-15,,"),
            ["2024-01-08", "2024-01-15"]
        )

    def test_parse_json_array(self):
        """Test the JSON array form of the cancel list."""
        self.assertEqual(
            parse_inline_cancellations('["2024-01-08", "2024-01-15"]'),
            ["2024-01-08", "2024-01-15"]
        )

    def test_parse_broken_json_falls_back_to_commas(self):
        """Test an unparseable JSON list is split on commas."""
        self.assertEqual(parse_inline_cancellations("[2024-01-08"), ["[2024-01-08"])

    def test_parse_empty(self):
        """Test a missing cancel list yields no tokens."""
        self.assertEqual(parse_inline_cancellations(None), [])
        self.assertEqual(parse_inline_cancellations(""), [])

    def test_union_of_sources(self):
        """Test both sources suppress dates."""
        excluded = ExclusionSet.from_sources("2024-01-08", ["2024-01-10"])

        self.assertTrue(excluded.is_excluded(date(2024, 1, 8)))
        self.assertTrue(excluded.is_excluded("2024-01-10"))
        self.assertFalse(excluded.is_excluded(date(2024, 1, 9)))
        self.assertIn(date(2024, 1, 10), excluded)
        self.assertEqual(len(excluded), 2)

    def test_external_dates_may_be_date_objects(self):
        """Test date objects are compared in canonical form."""
        excluded = ExclusionSet(external=[date(2024, 1, 8)])
        self.assertTrue(excluded.is_excluded("2024-01-08"))

    def test_malformed_tokens_never_match(self):
        """Test a slash-formatted date does not suppress anything."""
        excluded = ExclusionSet.from_sources("2024/01/08")
        self.assertFalse(excluded.is_excluded(date(2024, 1, 8)))

    def test_is_canonical_date(self):
        """Test only real YYYY-MM-DD dates are canonical."""
        self.assertTrue(is_canonical_date("2024-01-08"))
        self.assertFalse(is_canonical_date("2024/01/08"))
        self.assertFalse(is_canonical_date("2024-1-8"))
        self.assertFalse(is_canonical_date("2024-02-30"))
        self.assertFalse(is_canonical_date(None))

    def test_add_cancellation(self):
        """Test adding dates to the cancel list."""
        self.assertEqual(add_cancellation(None, "2024-01-08"), "2024-01-08")
        self.assertEqual(
            add_cancellation('["2024-01-08"]', "2024-01-15"),
            "2024-01-08,2024-01-15"
        )
        self.assertEqual(add_cancellation("2024-01-08", "2024-01-08"), "2024-01-08")

    def test_add_cancellation_rejects_bad_format(self):
        """Test adding a non-canonical date raises ValueError."""
        with self.assertRaises(ValueError):
            add_cancellation("", "01/08/2024")

    def test_remove_cancellation(self):
        """Test removing dates from the cancel list."""
        self.assertEqual(
            remove_cancellation("2024-01-08,2024-01-15", "2024-01-08"),
            "2024-01-15"
        )
        self.assertEqual(remove_cancellation("2024-01-15", "2024-01-08"), "2024-01-15")


class ExpandOccurrencesTests(SimpleTestCase):
    """Test the occurrence expander."""

    def test_unrestricted_weekdays_include_every_date(self):
        """Test an empty weekday spec means every day."""
        descriptor = SessionDescriptor(
            start_date="2024-01-01",
            end_date="2024-01-07",
            start_time="16:00",
            end_time="17:00"
        )
        occurrences = expand_occurrences(descriptor)

        self.assertEqual(len(occurrences), 7)
        self.assertEqual(occurrences[0].ymd, "2024-01-01")
        self.assertEqual(occurrences[-1].ymd, "2024-01-07")

    def test_unrecognized_weekday_spec_is_unrestricted(self):
        """Test a spec with no known tokens keeps every day."""
        descriptor = SessionDescriptor(start_date="2024-01-01", end_date="2024-01-03", weekday_spec="xyz")
        self.assertEqual(len(expand_occurrences(descriptor)), 3)

    def test_weekday_filtering(self):
        """Test only Mondays and Wednesdays are kept."""
        descriptor = SessionDescriptor(
            start_date="2024-01-01",
            end_date="2024-01-14",
            weekday_spec="monday,wednesday"
        )

        self.assertEqual(
            dates_of(expand_occurrences(descriptor)),
            ["2024-01-01", "2024-01-03", "2024-01-08", "2024-01-10"]
        )

    def test_exclusion_suppression(self):
        """Test an external exclusion removes its date."""
        descriptor = SessionDescriptor(
            start_date="2024-01-01",
            end_date="2024-01-14",
            weekday_spec="monday,wednesday"
        )

        self.assertEqual(
            dates_of(expand_occurrences(descriptor, {"2024-01-08"})),
            ["2024-01-01", "2024-01-03", "2024-01-10"]
        )

    def test_inline_cancellation_parity(self):
        """Test the inline cancel list behaves like an external exclusion."""
        base = dict(
            start_date="2024-01-01",
            end_date="2024-01-14",
            start_time="16:00",
            end_time="17:00",
            weekday_spec="monday,wednesday"
        )
        external = expand_occurrences(SessionDescriptor(**base), {"2024-01-08"})
        inline = expand_occurrences(SessionDescriptor(inline_cancellations="2024-01-08", **base))

        self.assertEqual(inline, external)

    def test_both_exclusion_sources_merge(self):
        """Test inline and external exclusions are combined."""
        descriptor = SessionDescriptor(
            start_date="2024-01-01",
            end_date="2024-01-14",
            weekday_spec="monday,wednesday",
            inline_cancellations="2024-01-01"
        )
        self.assertEqual(
            dates_of(expand_occurrences(descriptor, ExclusionSet(external=["2024-01-10"]))),
            ["2024-01-03", "2024-01-08"]
        )

    def test_single_day_default(self):
        """Test a missing end date means a single-day session."""
        descriptor = SessionDescriptor(start_date="2024-03-05", start_time="09:00", end_time="10:00")
        self.assertEqual(dates_of(expand_occurrences(descriptor)), ["2024-03-05"])

        blank_end = SessionDescriptor(start_date="2024-03-05", end_date="")
        self.assertEqual(dates_of(expand_occurrences(blank_end)), ["2024-03-05"])

    def test_single_day_respects_weekday_filter(self):
        """Test 2024-03-05 (a Tuesday) is dropped by a Monday filter."""
        descriptor = SessionDescriptor(start_date="2024-03-05", weekday_spec="mon")
        self.assertEqual(expand_occurrences(descriptor), [])

    def test_malformed_start_date_is_fatal(self):
        """Test an unparseable start date raises InvalidDateRange."""
        for bad in ["not-a-date", "2024-02-30", "", None]:
            with self.assertRaises(InvalidDateRange):
                expand_occurrences(SessionDescriptor(start_date=bad, end_date="2024-03-01"))

    def test_malformed_end_date_yields_nothing(self):
        """Test an unparseable end date gives an empty result."""
        descriptor = SessionDescriptor(start_date="2024-01-01", end_date="soon")
        self.assertEqual(expand_occurrences(descriptor), [])

    def test_end_before_start_is_empty(self):
        """Test a reversed date range returns no occurrences and no error."""
        descriptor = SessionDescriptor(start_date="2024-01-10", end_date="2024-01-01")
        self.assertEqual(expand_occurrences(descriptor), [])

    def test_malformed_time_degrades_to_midnight(self):
        """Test a garbage start time falls back to 00:00."""
        descriptor = SessionDescriptor(
            start_date="2024-01-01",
            start_time="garbage",
            end_time="17:00"
        )
        occurrences = expand_occurrences(descriptor)

        self.assertEqual(len(occurrences), 1)
        self.assertEqual(occurrences[0].start, eastern(2024, 1, 1, 0, 0))
        self.assertEqual(occurrences[0].end, eastern(2024, 1, 1, 17, 0))

    def test_time_formats(self):
        """Test hour-only, seconds and out-of-range times."""
        descriptor = SessionDescriptor(start_date="2024-01-01", start_time="9", end_time="15:30:00")
        occurrence = expand_occurrences(descriptor)[0]
        self.assertEqual((occurrence.start.hour, occurrence.start.minute), (9, 0))
        self.assertEqual((occurrence.end.hour, occurrence.end.minute), (15, 30))

        out_of_range = SessionDescriptor(start_date="2024-01-01", start_time="25:00", end_time="10:75")
        occurrence = expand_occurrences(out_of_range)[0]
        self.assertEqual(occurrence.start, eastern(2024, 1, 1, 0, 0))
        self.assertEqual(occurrence.end, eastern(2024, 1, 1, 0, 0))

    def test_instants_use_reference_timezone(self):
        """Test winter and summer offsets for US Eastern."""
        winter = expand_occurrences(SessionDescriptor(start_date="2024-01-01", start_time="16:00"))[0]
        summer = expand_occurrences(SessionDescriptor(start_date="2024-07-01", start_time="16:00"))[0]

        self.assertEqual(winter.start.utcoffset(), timedelta(hours=-5))
        self.assertEqual(summer.start.utcoffset(), timedelta(hours=-4))

    def test_explicit_zone(self):
        """Test instants are built in the zone passed in."""
        occurrence = expand_occurrences(
            SessionDescriptor(start_date="2024-01-01", start_time="16:00"),
            zone="UTC"
        )[0]
        self.assertEqual(occurrence.start, datetime(2024, 1, 1, 16, 0, tzinfo=ZoneInfo("UTC")))

    def test_spring_forward_keeps_wall_clock(self):
        """Test iteration across the March DST change keeps 16:00 local."""
        descriptor = SessionDescriptor(start_date="2024-03-09", end_date="2024-03-11", start_time="16:00")
        occurrences = expand_occurrences(descriptor)

        self.assertEqual(dates_of(occurrences), ["2024-03-09", "2024-03-10", "2024-03-11"])
        self.assertTrue(all(occurrence.start.hour == 16 for occurrence in occurrences))
        self.assertEqual(
            [occurrence.start.utcoffset() for occurrence in occurrences],
            [timedelta(hours=-5), timedelta(hours=-4), timedelta(hours=-4)]
        )

    def test_fall_back_keeps_wall_clock(self):
        """Test iteration across the November DST change keeps local time."""
        descriptor = SessionDescriptor(start_date="2024-11-02", end_date="2024-11-04", start_time="08:15")
        occurrences = expand_occurrences(descriptor)

        self.assertEqual(len(occurrences), 3)
        self.assertTrue(all((o.start.hour, o.start.minute) == (8, 15) for o in occurrences))
        self.assertEqual(occurrences[1].start - occurrences[0].start, timedelta(hours=25))

    def test_time_inside_dst_gap(self):
        """Test 02:30 on the spring-forward date lands on 03:30."""
        occurrence = expand_occurrences(SessionDescriptor(start_date="2024-03-10", start_time="02:30"))[0]
        self.assertEqual((occurrence.start.hour, occurrence.start.minute), (3, 30))

    def test_reversed_time_window_is_kept(self):
        """Test end before start stays on the same date, no rollover."""
        descriptor = SessionDescriptor(start_date="2024-01-01", start_time="17:00", end_time="16:00")
        occurrence = expand_occurrences(descriptor)[0]

        self.assertEqual(occurrence.end.date(), occurrence.start.date())
        self.assertEqual(occurrence.duration, timedelta(hours=-1))

    def test_range_ending_on_max_date(self):
        """Test a range ending 9999-12-31 expands without overflowing."""
        descriptor = SessionDescriptor(start_date="9999-12-25", end_date="9999-12-31", weekday_spec="mon")
        self.assertEqual(dates_of(expand_occurrences(descriptor)), ["9999-12-27"])

        every_day = SessionDescriptor(start_date="9999-12-29", end_date="9999-12-31")
        self.assertEqual(
            dates_of(expand_occurrences(every_day)),
            ["9999-12-29", "9999-12-30", "9999-12-31"]
        )

    def test_evening_on_max_date(self):
        """Test an evening start on 9999-12-31 keeps its wall time."""
        descriptor = SessionDescriptor(start_date="9999-12-31", start_time="20:00", end_time="21:30")
        occurrences = expand_occurrences(descriptor)

        self.assertEqual(len(occurrences), 1)
        self.assertEqual(occurrences[0].date, date(9999, 12, 31))
        self.assertEqual((occurrences[0].start.hour, occurrences[0].start.minute), (20, 0))
        self.assertEqual(occurrences[0].duration, timedelta(hours=1, minutes=30))

    def test_ordering(self):
        """Test results are ordered by date regardless of input order."""
        descriptor = SessionDescriptor(
            start_date="2024-01-01",
            end_date="2024-01-31",
            weekday_spec="sun sat fri",
            inline_cancellations="2024-01-20,2024-01-05"
        )
        occurrences = expand_occurrences(descriptor, ["2024-01-28", "2024-01-12"])
        days = [occurrence.date for occurrence in occurrences]

        self.assertEqual(days, sorted(days))
        self.assertNotIn(date(2024, 1, 20), days)
        self.assertNotIn(date(2024, 1, 12), days)

    def test_iso_datetime_and_date_inputs(self):
        """Test datetime strings are read as reference-zone dates."""
        utc_late = SessionDescriptor(start_date="2024-01-01T03:00:00Z")
        self.assertEqual(dates_of(expand_occurrences(utc_late)), ["2023-12-31"])

        date_objects = SessionDescriptor(start_date=date(2024, 1, 1), end_date=date(2024, 1, 2))
        self.assertEqual(dates_of(expand_occurrences(date_objects)), ["2024-01-01", "2024-01-02"])

    def test_occurrence_helpers(self):
        """Test the derived date and weekday helpers."""
        occurrence = expand_occurrences(SessionDescriptor(start_date="2024-01-01"))[0]

        self.assertEqual(occurrence.ymd, "2024-01-01")
        self.assertEqual(occurrence.compact_date, "20240101")
        self.assertEqual(occurrence.weekday, 1)
        self.assertEqual(weekday_label(occurrence.weekday), "Lun")
        self.assertEqual(weekday_label(occurrence.weekday, "en"), "Mon")


class ScheduleFormattingTests(SimpleTestCase):
    """Test clock and weekday formatting."""

    def test_format_clock_time(self):
        """Test 24-hour times become 12-hour labels."""
        self.assertEqual(format_clock_time("15:30"), "3:30 PM")
        self.assertEqual(format_clock_time("00:05"), "12:05 AM")
        self.assertEqual(format_clock_time("12:00"), "12:00 PM")
        self.assertEqual(format_clock_time("09:00"), "9:00 AM")
        self.assertEqual(format_clock_time("15:30:00"), "3:30 PM")

    def test_format_clock_time_returns_malformed_input(self):
        """Test malformed times come back unchanged."""
        self.assertEqual(format_clock_time("garbage"), "garbage")
        self.assertEqual(format_clock_time("25:00"), "25:00")
        self.assertEqual(format_clock_time(""), "")

    def test_format_weekday_spec(self):
        """Test weekday specs render as short labels."""
        self.assertEqual(format_weekday_spec("viernes, lunes"), "Lun, Vie")
        self.assertEqual(format_weekday_spec("fri mon", locale='en'), "Mon, Fri")
        self.assertEqual(format_weekday_spec(""), "")


class OccurrenceConsumerTests(SimpleTestCase):
    """Test filters and status used by the agenda and calendar."""

    def setUp(self):
        self.occurrence = Occurrence(
            date=date(2024, 1, 1),
            start=eastern(2024, 1, 1, 16, 0),
            end=eastern(2024, 1, 1, 17, 0)
        )

    def test_status(self):
        """Test active bounds are inclusive."""
        self.assertEqual(occurrence_status(self.occurrence, eastern(2024, 1, 1, 16, 30)), 'active')
        self.assertEqual(occurrence_status(self.occurrence, eastern(2024, 1, 1, 16, 0)), 'active')
        self.assertEqual(occurrence_status(self.occurrence, eastern(2024, 1, 1, 17, 0)), 'active')
        self.assertEqual(occurrence_status(self.occurrence, eastern(2024, 1, 1, 15, 0)), 'upcoming')
        self.assertEqual(occurrence_status(self.occurrence, eastern(2024, 1, 1, 18, 0)), 'completed')

    def test_filters(self):
        """Test the date and upcoming filters."""
        occurrences = expand_occurrences(
            SessionDescriptor(start_date="2024-01-01", end_date="2024-01-07", start_time="16:00")
        )

        self.assertEqual(dates_of(occurrences_on(occurrences, date(2024, 1, 3))), ["2024-01-03"])
        self.assertEqual(
            dates_of(occurrences_between(occurrences, date(2024, 1, 6), date(2024, 1, 10))),
            ["2024-01-06", "2024-01-07"]
        )
        self.assertEqual(
            dates_of(upcoming_occurrences(occurrences, eastern(2024, 1, 6, 12, 0))),
            ["2024-01-06", "2024-01-07"]
        )


class AgendaAndCalendarTests(SimpleTestCase):
    """Test build_agenda and build_calendar."""

    def setUp(self):
        self.practice = ScheduledSession(
            session_id="a",
            title="Volleyball Pinecrest",
            descriptor=SessionDescriptor(
                start_date="2024-01-01",
                end_date="2024-01-14",
                start_time="17:00",
                end_time="18:00",
                weekday_spec="mon,wed"
            )
        )
        self.camp = ScheduledSession(
            session_id="b",
            title="Tennis Camp",
            descriptor=SessionDescriptor(
                start_date="2024-01-01",
                end_date="2024-01-07",
                start_time="15:30",
                end_time="16:30"
            )
        )
        self.broken = ScheduledSession(
            session_id="c",
            descriptor=SessionDescriptor(start_date="nope")
        )

    def test_agenda_sorted_with_status(self):
        """Test entries are sorted by start and labeled."""
        with self.assertLogs('scheduling.services', level='WARNING') as logs:
            entries = build_agenda(
                [self.practice, self.broken, self.camp],
                day=date(2024, 1, 3),
                now=eastern(2024, 1, 3, 16, 0)
            )

        self.assertEqual([entry.session_id for entry in entries], ["b", "a"])
        self.assertEqual(entries[0].status, 'active')
        self.assertEqual(entries[1].status, 'upcoming')
        self.assertEqual((entries[0].start_label, entries[0].end_label), ("3:30 PM", "4:30 PM"))
        self.assertIn("Skipping session c", logs.output[0])

    def test_agenda_honors_session_exclusions(self):
        """Test a session's excluded dates drop it from the agenda."""
        practice = ScheduledSession(
            session_id="a",
            descriptor=self.practice.descriptor,
            excluded_dates=frozenset({"2024-01-03"})
        )
        entries = build_agenda([practice, self.camp], day=date(2024, 1, 3), now=eastern(2024, 1, 4))

        self.assertEqual([entry.session_id for entry in entries], ["b"])
        self.assertEqual(entries[0].status, 'completed')

    def test_calendar_window_ids(self):
        """Test calendar events carry session-and-date ids."""
        events = build_calendar([self.practice], date(2024, 1, 7), date(2024, 1, 13))
        self.assertEqual([event.id for event in events], ["a-20240108", "a-20240110"])

    def test_calendar_rejects_reversed_window(self):
        """Test a window ending before it starts raises ValueError."""
        with self.assertRaises(ValueError):
            build_calendar([self.practice], date(2024, 1, 13), date(2024, 1, 7))

    def test_calendar_window_at_max_date(self):
        """Test a calendar window touching 9999-12-31 builds its events."""
        session = ScheduledSession(
            session_id="last",
            descriptor=SessionDescriptor(
                start_date="9999-12-25",
                end_date="9999-12-31",
                start_time="20:00",
                weekday_spec="mon fri"
            )
        )
        events = build_calendar([session], date(9999, 12, 27), date(9999, 12, 31))
        self.assertEqual([event.id for event in events], ["last-99991227", "last-99991231"])


class OccurrenceAPITests(APISimpleTestCase):
    """Test the expand endpoint."""

    def setUp(self):
        self.client = APIClient()

    def test_expand(self):
        """Test expanding a session with weekday and exclusion filters."""
        data = {
            "start_date": "2024-01-01",
            "end_date": "2024-01-14",
            "start_time": "16:00",
            "end_time": "17:00",
            "days_of_week": "monday,wednesday",
            "excluded_dates": ["2024-01-08"]
        }

        response = self.client.post('/api/occurrences/expand/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [item['date'] for item in response.data],
            ["2024-01-01", "2024-01-03", "2024-01-10"]
        )
        self.assertEqual(response.data[0]['start'], "2024-01-01T16:00:00-05:00")
        self.assertEqual(response.data[0]['weekday_label'], "Lun")

    def test_expand_inline_cancel(self):
        """Test the inline cancel list suppresses a date."""
        data = {"start_date": "2024-01-01", "end_date": "2024-01-03", "cancel": "2024-01-02"}

        response = self.client.post('/api/occurrences/expand/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['date'] for item in response.data], ["2024-01-01", "2024-01-03"])

    def test_expand_invalid_start_date(self):
        """Test an unparseable start date returns 400."""
        response = self.client.post('/api/occurrences/expand/', {"start_date": "not-a-date"}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('start_date', response.data)

    def test_expand_rejects_non_canonical_exclusion(self):
        """Test a slash-formatted excluded date returns 400."""
        data = {"start_date": "2024-01-01", "excluded_dates": ["2024/01/01"]}

        response = self.client.post('/api/occurrences/expand/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('excluded_dates', response.data)

    def test_expand_malformed_time(self):
        """Test a garbage start time falls back to midnight."""
        data = {"start_date": "2024-01-01", "start_time": "garbage", "end_time": "17:00"}

        response = self.client.post('/api/occurrences/expand/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['start'], "2024-01-01T00:00:00-05:00")


class AgendaCalendarAPITests(APISimpleTestCase):
    """Test the agenda and calendar endpoints."""

    def setUp(self):
        self.client = APIClient()
        self.sessions = [
            {
                "session_id": "a",
                "title": "Volleyball",
                "start_date": "2024-01-01",
                "end_date": "2024-01-14",
                "start_time": "17:00",
                "end_time": "18:00",
                "days_of_week": "mon,wed"
            },
            {
                "session_id": "b",
                "title": "Tennis",
                "start_date": "2024-01-01",
                "end_date": "2024-01-07",
                "start_time": "15:30",
                "end_time": "16:30"
            },
        ]

    def test_agenda_for_date(self):
        """Test the agenda for an explicit date."""
        response = self.client.post(
            '/api/agenda/',
            {"sessions": self.sessions, "date": "2024-01-03"},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['date'], "2024-01-03")
        self.assertEqual([item['session_id'] for item in response.data['sessions']], ["b", "a"])
        self.assertEqual(response.data['sessions'][0]['start_time'], "3:30 PM")
        self.assertEqual(response.data['sessions'][0]['status'], 'completed')

    def test_agenda_defaults_to_today(self):
        """Test the agenda date defaults to today in the reference zone."""
        today = timezone.localdate(timezone=EASTERN)
        session = {
            "session_id": "daily",
            "start_date": (today - timedelta(days=1)).isoformat(),
            "end_date": (today + timedelta(days=1)).isoformat(),
            "start_time": "10:00",
            "end_time": "11:00"
        }

        response = self.client.post('/api/agenda/', {"sessions": [session]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['date'], today.isoformat())
        self.assertEqual(len(response.data['sessions']), 1)

    def test_calendar(self):
        """Test calendar events for a two-day window."""
        response = self.client.post(
            '/api/calendar/',
            {"sessions": self.sessions, "start": "2024-01-07", "end": "2024-01-08"},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['id'] for item in response.data], ["b-20240107", "a-20240108"])
        self.assertEqual(response.data[1]['occurrence'], "20240108")

    def test_calendar_reversed_window(self):
        """Test a reversed calendar window returns 400."""
        response = self.client.post(
            '/api/calendar/',
            {"sessions": self.sessions, "start": "2024-01-08", "end": "2024-01-07"},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class WeekdaysAPITests(APISimpleTestCase):
    """Test the weekday spec endpoint."""

    def setUp(self):
        self.client = APIClient()

    def test_parse_spec(self):
        """Test parsing a Spanish weekday spec."""
        response = self.client.get('/api/weekdays/', {'days': 'viernes, lunes'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['days'], [1, 5])
        self.assertEqual(response.data['label'], "Lun, Vie")
        self.assertEqual(response.data['canonical'], "monday,friday")
        self.assertTrue(response.data['valid'])

    def test_english_locale(self):
        """Test English labels."""
        response = self.client.get('/api/weekdays/', {'days': 'fri mon', 'locale': 'en'})
        self.assertEqual(response.data['label'], "Mon, Fri")

    def test_unrecognized_spec(self):
        """Test a spec with no known weekdays."""
        response = self.client.get('/api/weekdays/', {'days': 'xyz'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['days'], [])
        self.assertEqual(response.data['canonical'], "")
        self.assertFalse(response.data['valid'])

    def test_unknown_locale(self):
        """Test an unsupported locale returns 400."""
        response = self.client.get('/api/weekdays/', {'days': 'mon', 'locale': 'fr'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ManagementCommandTests(SimpleTestCase):
    """Test management commands."""

    def test_expand_occurrences_command(self):
        """Test the expand_occurrences management command."""
        out = StringIO()
        call_command(
            'expand_occurrences',
            '--start-date=2024-01-01',
            '--end-date=2024-01-14',
            '--days=mon,wed',
            '--start-time=16:00',
            '--end-time=17:00',
            '--exclude=2024-01-08',
            stdout=out
        )

        output = out.getvalue()
        self.assertIn('2024-01-01 Lun 4:00 PM - 5:00 PM', output)
        self.assertNotIn('2024-01-08', output)
        self.assertIn('Successfully expanded 3 occurrence(s)', output)

    def test_english_labels(self):
        """Test the command with English weekday labels."""
        out = StringIO()
        call_command('expand_occurrences', '--start-date=2024-01-01', '--locale=en', stdout=out)
        self.assertIn('2024-01-01 Mon 12:00 AM - 12:00 AM', out.getvalue())

    def test_invalid_start_date(self):
        """Test an unparseable start date raises CommandError."""
        with self.assertRaises(CommandError):
            call_command('expand_occurrences', '--start-date=not-a-date', stdout=StringIO())

    def test_invalid_exclusion(self):
        """Test a non-canonical excluded date raises CommandError."""
        with self.assertRaises(CommandError):
            call_command(
                'expand_occurrences',
                '--start-date=2024-01-01',
                '--exclude=01/01/2024',
                stdout=StringIO()
            )
