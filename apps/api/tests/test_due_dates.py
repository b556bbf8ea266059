"""Tests for due-date extraction from task titles, against a frozen local clock."""

from datetime import datetime, timedelta, timezone

import pytest

from app.modules.tasks.due_dates import parse_due_date

EST = timezone(timedelta(hours=-5))
# Thursday morning
NOW = datetime(2026, 1, 15, 10, 0, 42, tzinfo=EST)


def _at(year, month, day, hour=9, minute=0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=EST)


class TestTimes:
    def test_time_only_later_today(self):
        result = parse_due_date("Call Nick at 6:00PM", now=NOW)
        assert result.cleaned_title == "Call Nick"
        assert result.due_at == _at(2026, 1, 15, 18)

    def test_time_only_already_passed_rolls_to_tomorrow(self):
        evening = NOW.replace(hour=19)
        result = parse_due_date("Call Nick at 6:00PM", now=evening)
        assert result.cleaned_title == "Call Nick"
        assert result.due_at == _at(2026, 1, 16, 18)

    def test_bare_24h_time(self):
        result = parse_due_date("Standup 9:30", now=NOW)
        assert result.cleaned_title == "Standup"
        assert result.due_at == _at(2026, 1, 16, 9, 30)

    def test_out_of_range_hour_is_ignored(self):
        result = parse_due_date("Call at 13pm", now=NOW)
        assert result.cleaned_title == "Call at 13pm"
        assert result.due_at is None


class TestRelativeDays:
    def test_tomorrow_with_time(self):
        result = parse_due_date("Meeting tomorrow 2pm", now=NOW)
        assert result.cleaned_title == "Meeting"
        assert result.due_at == _at(2026, 1, 16, 14)
        assert result.due_at - NOW.replace(hour=14, minute=0, second=0) == timedelta(days=1)

    def test_tmr_defaults_to_nine(self):
        result = parse_due_date("tmr: send comps", now=NOW)
        assert result.due_at == _at(2026, 1, 16)

    def test_today_later_time(self):
        result = parse_due_date("today 3pm call title co", now=NOW)
        assert result.cleaned_title == "call title co"
        assert result.due_at == _at(2026, 1, 15, 15)

    def test_today_past_default_is_clamped_to_next_hour(self):
        result = parse_due_date("  Pay rent today  ", now=NOW)
        assert result.cleaned_title == "Pay rent"
        assert result.due_at == datetime(2026, 1, 15, 11, 0, 0, tzinfo=EST)

    def test_title_that_is_only_a_date_keeps_original(self):
        result = parse_due_date("tomorrow", now=NOW)
        assert result.cleaned_title == "tomorrow"
        assert result.due_at == _at(2026, 1, 16)


class TestWeekdays:
    def test_next_occurrence(self):
        assert parse_due_date("Send docs fri", now=NOW).due_at == _at(2026, 1, 16)

    def test_same_weekday_means_next_week(self):
        result = parse_due_date("Review Thursday", now=NOW)
        assert result.cleaned_title == "Review"
        assert result.due_at == _at(2026, 1, 22)

    def test_leftmost_weekday_wins(self):
        assert parse_due_date("Showing tue or mon", now=NOW).due_at == _at(2026, 1, 20)


class TestExplicitDates:
    def test_slash_date(self):
        result = parse_due_date("Inspection 1/20", now=NOW)
        assert result.cleaned_title == "Inspection"
        assert result.due_at == _at(2026, 1, 20)

    def test_past_slash_date_rolls_to_next_year(self):
        assert parse_due_date("Closing 1/10", now=NOW).due_at == _at(2027, 1, 10)

    def test_last_years_date_rolls_forward_one_year(self):
        autumn = datetime(2026, 10, 19, 10, 0, tzinfo=EST)
        result = parse_due_date("Closing 12/25/2025", now=autumn)
        assert result.cleaned_title == "Closing"
        assert result.due_at == _at(2026, 12, 25)

    def test_explicit_past_year_gives_no_date(self):
        result = parse_due_date("Closing 1/10/2020", now=NOW)
        assert result.cleaned_title == "Closing 1/10/2020"
        assert result.due_at is None

    def test_two_digit_year_and_24h_time(self):
        result = parse_due_date("Wire 3/5/27 at 14:30", now=NOW)
        assert result.cleaned_title == "Wire"
        assert result.due_at == _at(2027, 3, 5, 14, 30)

    def test_calendar_invalid_date_leaves_title_untouched(self):
        result = parse_due_date("Sign 2/30 at 3pm", now=NOW)
        assert result.cleaned_title == "Sign 2/30 at 3pm"
        assert result.due_at is None

    def test_month_name_with_ordinal_year_and_time(self):
        result = parse_due_date("Walkthrough feb 1st, 2026 2pm", now=NOW)
        assert result.cleaned_title == "Walkthrough"
        assert result.due_at == _at(2026, 2, 1, 14)

    def test_time_after_day_is_not_a_year(self):
        result = parse_due_date("Call jan 26 10am", now=NOW)
        assert result.cleaned_title == "Call"
        assert result.due_at == _at(2026, 1, 26, 10)
        assert result.due_at_iso == "2026-01-26T15:00:00.000Z"

    def test_trailing_dash_is_stripped(self):
        result = parse_due_date("Follow up - March 3", now=NOW)
        assert result.cleaned_title == "Follow up"
        assert result.due_at == _at(2026, 3, 3)


class TestNoMatch:
    @pytest.mark.parametrize("title", ["just a plain title", "Call the seller", "Unit 12 walkthrough"])
    def test_plain_titles_are_untouched(self, title):
        result = parse_due_date(title, now=NOW)
        assert result.cleaned_title == title
        assert result.due_at is None
        assert result.due_at_iso is None

    def test_whitespace_is_trimmed_even_without_date(self):
        assert parse_due_date("   just a plain title  ", now=NOW).cleaned_title == "just a plain title"

    def test_empty_title(self):
        assert parse_due_date("   ", now=NOW).cleaned_title == ""
