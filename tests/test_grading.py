"""
Unit tests for violation activity and grading
"""
from datetime import datetime

import pytest

from clearwater.grading import (
    GRADE_LABELS,
    compute_grade,
    format_date,
    is_active,
    parse_date,
    years_before,
)

from conftest import NOW, make_violation


def health(begin="2023-01-01", status="R", end="2023-03-31"):
    return make_violation(is_health_based=True, begin_date=begin, status=status, end_date=end)


def non_health(status="O", begin="2010-01-01", end=""):
    return make_violation(is_health_based=False, begin_date=begin, status=status, end_date=end)


class TestParseDate:

    @pytest.mark.parametrize("text,expected", [
        ("2021-03-04", datetime(2021, 3, 4)),
        ("2021-03-04T10:00:00", datetime(2021, 3, 4, 10)),
        ("2021-03-04T10:00:00Z", datetime(2021, 3, 4, 10)),
        ("03/04/2021", datetime(2021, 3, 4)),
        ("04-MAR-21", datetime(2021, 3, 4)),
        ("04-Mar-2021", datetime(2021, 3, 4)),
    ])
    def test_formats(self, text, expected):
        assert parse_date(text) == expected

    @pytest.mark.parametrize("text", [None, "", "   ", "not a date", "2021-13-45"])
    def test_unparseable(self, text):
        assert parse_date(text) is None

    def test_format_date(self):
        assert format_date("2021-01-05") == "Jan 5, 2021"
        assert format_date("") == "-"


class TestIsActive:

    @pytest.mark.parametrize("status", ["R", "K", "r", " k "])
    def test_resolved_statuses_win_over_dates(self, status):
        assert is_active(status, "", NOW) is False
        assert is_active(status, "2099-01-01", NOW) is False

    def test_open_status_wins_over_dates(self):
        assert is_active("O", "2000-01-01", NOW) is True

    def test_blank_end_date_is_active(self):
        assert is_active("", "", NOW) is True
        assert is_active(None, None, NOW) is True

    def test_unparseable_end_date_fails_open(self):
        assert is_active("", "sometime", NOW) is True

    def test_end_date_relative_to_now(self):
        assert is_active("", "2024-12-31", NOW) is True
        assert is_active("X", "2024-01-01", NOW) is False

    def test_deterministic_with_fixed_clock(self):
        results = {is_active("", "2024-06-15T12:00:01", NOW) for _ in range(5)}
        assert results == {True}
        assert is_active("", "2024-06-15T12:00:00", NOW) is False


class TestYearsBefore:

    def test_calendar_subtraction(self):
        assert years_before(NOW, 5) == datetime(2019, 6, 15)

    def test_leap_day(self):
        assert years_before(datetime(2024, 2, 29, 8), 5) == datetime(2019, 3, 1)


class TestComputeGrade:

    def test_no_violations(self):
        g = compute_grade([], NOW)
        assert g.letter == "A"
        assert (g.score.active_health, g.score.recent_health, g.score.active) == (0, 0, 0)
        assert g.label == GRADE_LABELS["A"]

    def test_active_health_dominates_volume(self):
        vs = [health(status="O")] + [non_health(status="R") for _ in range(10)]
        g = compute_grade(vs, NOW)
        assert g.letter == "F"
        assert g.score.active_health == 1
        assert g.score.active == 1

    @pytest.mark.parametrize("count,letter", [(5, "D"), (6, "D"), (4, "C"), (2, "C"), (1, "B")])
    def test_recent_health_thresholds(self, count, letter):
        g = compute_grade([health() for _ in range(count)], NOW)
        assert g.letter == letter
        assert g.score.recent_health == count
        assert g.score.active_health == 0

    def test_active_non_health_volume(self):
        assert compute_grade([non_health() for _ in range(4)], NOW).letter == "C"
        assert compute_grade([non_health() for _ in range(3)], NOW).letter == "A"

    def test_recent_health_beats_active_volume(self):
        vs = [health()] + [non_health() for _ in range(10)]
        g = compute_grade(vs, NOW)
        assert g.letter == "B"
        assert g.score.active == 10

    def test_five_year_boundary(self):
        on_boundary = health(begin="2019-06-15")
        just_before = health(begin="2019-06-14")
        assert compute_grade([on_boundary], NOW).score.recent_health == 1
        assert compute_grade([just_before], NOW).score.recent_health == 0

    def test_old_and_undated_health_not_recent(self):
        vs = [health(begin="2001-01-01"), health(begin=""), health(begin="garbage")]
        g = compute_grade(vs, NOW)
        assert g.letter == "A"
        assert g.score.recent_health == 0

    def test_health_with_unparseable_end_date_is_active(self):
        g = compute_grade([health(status="", end="??")], NOW)
        assert g.letter == "F"

    def test_to_dict(self):
        d = compute_grade([health()], NOW).to_dict()
        assert d == {"grade": "B", "label": GRADE_LABELS["B"],
                     "score": {"activeHealth": 0, "recentHealth": 1, "active": 0}}
