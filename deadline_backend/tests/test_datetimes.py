import datetime as dt

import pytest

from deadlines.datetimes import Datetime, TimeDiff, normalize_due_text


class TestDatetime:
    def test_to_string_is_zero_padded(self):
        assert Datetime(2025, 3, 7, 9, 5).to_string() == "2025-03-07 09:05"
        assert str(Datetime(12, 1, 1)) == "0012-01-01 00:00"

    def test_parse_round_trips_format(self):
        d = Datetime.parse("2025-01-05 09:00")
        assert d == Datetime(2025, 1, 5, 9, 0)
        assert Datetime.parse("  2025-01-05 09:00\n") == d

    @pytest.mark.parametrize(
        "text",
        ["", "2025-01-05", "2025-1-5 9:00", "2025/01/05 09:00", "2025-13-01 00:00", "2025-01-05 24:00", "soon"],
    )
    def test_parse_rejects_malformed(self, text):
        with pytest.raises(ValueError):
            Datetime.parse(text)

    def test_constructor_validates_ranges(self):
        with pytest.raises(ValueError):
            Datetime(2025, 0, 1)
        with pytest.raises(ValueError):
            Datetime(2025, 1, 32)
        with pytest.raises(ValueError):
            Datetime(2025, 1, 1, 12, 60)

    def test_from_datetime(self):
        assert Datetime.from_datetime(dt.datetime(2025, 6, 30, 23, 59, 59)) == Datetime(2025, 6, 30, 23, 59)

    def test_total_minutes_uses_fixed_month_and_year_lengths(self):
        base = Datetime(2025, 1, 1).to_total_minutes()
        assert Datetime(2025, 2, 1).to_total_minutes() - base == 30 * 24 * 60
        assert Datetime(2026, 1, 1).to_total_minutes() - base == 365 * 24 * 60

    def test_ordering(self):
        a = Datetime(2025, 1, 5, 9, 0)
        b = Datetime(2025, 1, 10, 9, 0)
        assert a < b
        assert b > a
        assert a <= Datetime(2025, 1, 5, 9, 0)
        assert sorted([b, a]) == [a, b]

    def test_moments_equal_in_thirty_day_model_compare_equal(self):
        a = Datetime(2025, 1, 31, 12, 0)
        b = Datetime(2025, 2, 1, 12, 0)
        assert a.to_total_minutes() == b.to_total_minutes()
        assert a == b
        assert a <= b and b <= a
        assert not a < b
        assert not a > b
        assert not b > a
        assert hash(a) == hash(b)
        assert a != Datetime(2025, 2, 1, 12, 1)

    def test_immutable(self):
        d = Datetime(2025, 1, 1)
        with pytest.raises(AttributeError):
            d.year = 2030  # type: ignore[misc]


class TestTimeDiff:
    def test_month_boundary_uses_thirty_day_months(self):
        diff = Datetime(2025, 3, 1, 0, 0).time_diff(Datetime(2025, 2, 28, 0, 0))
        # February counts as 30 days, so this is 3 days rather than 1
        assert diff == TimeDiff(days=3, hours=0, minutes=0, is_negative=False)
        assert diff.to_days() == 3.0

    def test_decomposition_is_normalized(self):
        diff = Datetime(2025, 1, 2, 13, 45).time_diff(Datetime(2025, 1, 1, 10, 0))
        assert diff == TimeDiff(days=1, hours=3, minutes=45, is_negative=False)
        assert diff.to_minutes() == 1 * 1440 + 3 * 60 + 45
        assert diff.to_hours() == pytest.approx(27.75)

    def test_negative_sign_is_carried_separately(self):
        diff = Datetime(2025, 1, 1, 10, 0).time_diff(Datetime(2025, 1, 2, 13, 45))
        assert (diff.days, diff.hours, diff.minutes) == (1, 3, 45)
        assert diff.is_negative is True
        assert diff.to_minutes() == -(1 * 1440 + 3 * 60 + 45)
        assert diff.to_hours() == pytest.approx(-27.75)
        assert diff.to_days() == pytest.approx(-(1 + 3 / 24 + 45 / 1440))

    def test_zero_difference(self):
        d = Datetime(2025, 1, 1)
        assert d.time_diff(d) == TimeDiff(0, 0, 0, False)

    def test_to_string(self):
        assert TimeDiff(2, 5, 7, True).to_string() == "-2d 5h 7m"
        assert str(TimeDiff(0, 1, 0)) == "0d 1h 0m"


def test_normalize_due_text():
    assert normalize_due_text(" 2025-01-05 09:00 ") == "2025-01-05 09:00"
