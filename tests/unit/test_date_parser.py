"""
Unit tests for the date/time parser.

All expectations are relative to FIXED_NOW = Monday 2026-10-19 09:00.
"""
from datetime import date, datetime

import pytest

from taskparse.parsers.date_parser import DateTimeParser, format_display_text, format_time


def _only(tags):
    assert len(tags) == 1, tags
    return tags[0]


class TestRelativeDays:
    def test_tomorrow(self, date_parser):
        tag = _only(date_parser.parse("Pay rent tomorrow"))
        assert tag.type == "date"
        assert tag.value == date(2026, 10, 20)
        assert tag.display_text == "Tomorrow"
        assert tag.original_text == "tomorrow"
        assert tag.icon_name == "Calendar"
        assert tag.color == "#3b82f6"

    def test_today(self, date_parser):
        tag = _only(date_parser.parse("today: inbox zero"))
        assert tag.value == date(2026, 10, 19)
        assert tag.display_text == "Today"

    def test_tonight_has_time(self, date_parser):
        tag = _only(date_parser.parse("movie tonight"))
        assert tag.type == "time"
        assert tag.value == datetime(2026, 10, 19, 20, 0)

    def test_day_after_tomorrow(self, date_parser):
        tag = _only(date_parser.parse("dentist day after tomorrow"))
        assert tag.value == date(2026, 10, 21)
        assert tag.original_text == "day after tomorrow"

    def test_eod(self, date_parser):
        tag = _only(date_parser.parse("send invoice by EOD"))
        assert tag.value == datetime(2026, 10, 19, 17, 0)


class TestWeekdays:
    def test_next_monday_is_following_week(self, date_parser):
        tag = _only(date_parser.parse("review next Monday"))
        assert tag.value == date(2026, 10, 26)
        assert tag.original_text == "next Monday"

    def test_bare_weekday_is_next_occurrence(self, date_parser):
        tag = _only(date_parser.parse("call plumber Friday"))
        assert tag.value == date(2026, 10, 23)
        assert tag.display_text == "Friday"

    def test_bare_weekday_same_day_rolls_a_week(self, date_parser):
        assert _only(date_parser.parse("gym monday")).value == date(2026, 10, 26)

    def test_this_weekday_same_day_is_today(self, date_parser):
        assert _only(date_parser.parse("this monday")).value == date(2026, 10, 19)

    def test_next_friday(self, date_parser):
        assert _only(date_parser.parse("next friday")).value == date(2026, 10, 30)

    def test_abbreviation_needs_modifier(self, date_parser):
        assert date_parser.parse("wed") == []
        assert _only(date_parser.parse("on wed")).value == date(2026, 10, 21)


class TestPeriodsAndOffsets:
    def test_in_three_days(self, date_parser):
        tag = _only(date_parser.parse("renew passport in 3 days"))
        assert tag.value == date(2026, 10, 22)
        assert tag.original_text == "in 3 days"

    def test_in_two_weeks_words(self, date_parser):
        assert _only(date_parser.parse("in two weeks")).value == date(2026, 11, 2)

    def test_in_a_month(self, date_parser):
        assert _only(date_parser.parse("in a month")).value == date(2026, 11, 19)

    def test_in_hours_gives_time(self, date_parser):
        tag = _only(date_parser.parse("check oven in 2 hours"))
        assert tag.type == "time"
        assert tag.value == datetime(2026, 10, 19, 11, 0)

    def test_from_now(self, date_parser):
        assert _only(date_parser.parse("5 days from now")).value == date(2026, 10, 24)

    def test_next_week(self, date_parser):
        assert _only(date_parser.parse("next week")).value == date(2026, 10, 26)

    def test_this_weekend(self, date_parser):
        assert _only(date_parser.parse("hike this weekend")).value == date(2026, 10, 24)

    def test_next_weekend(self, date_parser):
        assert _only(date_parser.parse("next weekend")).value == date(2026, 10, 31)


class TestAbsoluteDates:
    def test_iso(self, date_parser):
        tag = _only(date_parser.parse("deploy 2026-10-25"))
        assert tag.value == date(2026, 10, 25)
        assert tag.confidence == pytest.approx(0.95)

    def test_us_numeric(self, date_parser):
        assert _only(date_parser.parse("due 10/25")).value == date(2026, 10, 25)

    def test_us_numeric_with_year(self, date_parser):
        assert _only(date_parser.parse("due 1/5/2027")).value == date(2027, 1, 5)

    def test_month_name(self, date_parser):
        tag = _only(date_parser.parse("party on Dec 5th"))
        assert tag.value == date(2026, 12, 5)
        assert tag.display_text == "Dec 5"

    def test_past_month_day_rolls_forward(self, date_parser):
        tag = _only(date_parser.parse("taxes March 5"))
        assert tag.value == date(2027, 3, 5)
        assert tag.display_text == "Mar 5, 2027"

    def test_day_month(self, date_parser):
        assert _only(date_parser.parse("5 November")).value == date(2026, 11, 5)

    def test_explicit_year(self, date_parser):
        assert _only(date_parser.parse("March 5, 2028")).value == date(2028, 3, 5)

    def test_invalid_date_not_tagged(self, date_parser):
        assert date_parser.parse("13/45") == []

    def test_leap_day_rolls_to_next_leap_year(self, date_parser):
        tag = _only(date_parser.parse("anniversary 2/29"))
        assert tag.value == date(2028, 2, 29)
        assert tag.display_text == "Feb 29, 2028"

    def test_impossible_month_day_not_tagged(self, date_parser):
        assert date_parser.parse("due 2/30") == []


class TestOrdinalWeekday:
    def test_third_friday_of_next_month(self, date_parser):
        tag = _only(date_parser.parse("book club the third friday of next month"))
        assert tag.value == date(2026, 11, 20)
        assert tag.confidence == pytest.approx(0.85)

    def test_last_monday_of_month_name(self, date_parser):
        assert _only(date_parser.parse("last monday of november")).value == date(2026, 11, 30)

    def test_first_tuesday_this_month(self, date_parser):
        assert _only(date_parser.parse("first tuesday of this month")).value == date(2026, 10, 6)


class TestTimes:
    def test_time_attached_after_date(self, date_parser):
        tag = _only(date_parser.parse("Call mom tomorrow at 5pm"))
        assert tag.type == "time"
        assert tag.value == datetime(2026, 10, 20, 17, 0)
        assert tag.original_text == "tomorrow at 5pm"
        assert tag.display_text == "Tomorrow at 5:00 PM"
        assert tag.icon_name == "Clock"

    def test_time_attached_before_date(self, date_parser):
        tag = _only(date_parser.parse("5:30 pm tomorrow"))
        assert tag.value == datetime(2026, 10, 20, 17, 30)

    def test_weekday_and_time(self, date_parser):
        tag = _only(date_parser.parse("Friday 3pm standup"))
        assert tag.value == datetime(2026, 10, 23, 15, 0)
        assert tag.display_text == "Friday at 3:00 PM"

    def test_standalone_future_time_is_today(self, date_parser):
        tag = _only(date_parser.parse("lunch at noon"))
        assert tag.value == datetime(2026, 10, 19, 12, 0)

    def test_standalone_past_time_is_tomorrow(self, date_parser):
        tag = _only(date_parser.parse("wake up 7am"))
        assert tag.value == datetime(2026, 10, 20, 7, 0)

    def test_24h(self, date_parser):
        assert _only(date_parser.parse("sync 17:45")).value == datetime(2026, 10, 19, 17, 45)

    def test_at_bare_hour_reads_afternoon(self, date_parser):
        assert _only(date_parser.parse("meet at 5")).value == datetime(2026, 10, 19, 17, 0)

    def test_bare_hour_after_tonight_is_evening(self, date_parser):
        tag = _only(date_parser.parse("dinner tonight at 9"))
        assert tag.value == datetime(2026, 10, 19, 21, 0)
        assert tag.original_text == "tonight at 9"
        assert tag.display_text == "Today at 9:00 PM"

    def test_bare_hour_after_plain_day_keeps_morning(self, date_parser):
        assert _only(date_parser.parse("tomorrow at 9")).value == datetime(2026, 10, 20, 9, 0)

    def test_unrelated_time_and_date_stay_separate(self, date_parser):
        tags = date_parser.parse("tomorrow buy milk then gym at 6pm")
        assert [t.type for t in tags] == ["date", "time"]


class TestVagueLanguage:
    @pytest.mark.parametrize("text", ["do it soon", "sometime", "finish later", "eventually", "May"])
    def test_no_tag(self, date_parser, text):
        assert date_parser.parse(text) == []


class TestConfidence:
    def test_explicit_datetime_beats_relative_day(self, date_parser):
        relative = _only(date_parser.parse("tomorrow")).confidence
        explicit = _only(date_parser.parse("2026-10-25 at 5:30pm")).confidence
        assert explicit > relative

    def test_relative_day(self, date_parser):
        assert _only(date_parser.parse("tomorrow")).confidence == pytest.approx(0.75)

    def test_past_penalty(self, date_parser):
        assert _only(date_parser.parse("yesterday")).confidence == pytest.approx(0.70)


class TestClock:
    def test_clock_is_injectable(self):
        parser = DateTimeParser(clock=lambda: datetime(2027, 1, 1, 8, 0))
        assert _only(parser.parse("tomorrow")).value == date(2027, 1, 2)

    def test_deterministic_up_to_ids(self, date_parser):
        first = date_parser.parse("next friday at 3pm")
        second = date_parser.parse("next friday at 3pm")
        assert first == second
        assert first[0].id != second[0].id


class TestFormatting:
    def test_format_time(self):
        assert format_time(datetime(2026, 1, 1, 0, 5)) == "12:05 AM"
        assert format_time(datetime(2026, 1, 1, 12, 0)) == "12:00 PM"

    def test_display_within_week_uses_weekday(self, fixed_now):
        assert format_display_text(date(2026, 10, 24), fixed_now) == "Saturday"

    def test_display_far_date(self, fixed_now):
        assert format_display_text(date(2026, 12, 1), fixed_now) == "Dec 1"
