from datetime import timedelta

import pytest

from devicecfg.util.duration_util import DurationRangeError, format_duration, parse_duration


class TestParseDuration:
    @pytest.mark.parametrize(
        "text, seconds",
        [
            ("10s", 10),
            ("500ms", 0.5),
            ("1m30s", 90),
            ("1.5h", 5400),
            ("2h45m", 9900),
            ("-2s", -2),
            ("15", 15),
            ("0.25", 0.25),
        ],
    )
    def test_when_text_is_valid_then_returns_timedelta(self, text, seconds):
        assert parse_duration(text) == timedelta(seconds=seconds)

    def test_when_number_given_then_it_is_seconds(self):
        assert parse_duration(3) == timedelta(seconds=3)
        assert parse_duration(0.1) == timedelta(milliseconds=100)

    def test_when_timedelta_given_then_returned_unchanged(self):
        value = timedelta(minutes=2)

        assert parse_duration(value) is value

    @pytest.mark.parametrize(
        "value", ["", "abc", "5x", "10s junk", "s", True, None, [1], float("inf"), "999999999999h", 1e300]
    )
    def test_when_value_is_invalid_then_raises_value_error(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)

    @pytest.mark.parametrize("value", ["999999999999h", 1e300, "-1e300"])
    def test_when_value_exceeds_timedelta_then_raises_range_error(self, value):
        with pytest.raises(DurationRangeError):
            parse_duration(value)


class TestFormatDuration:
    @pytest.mark.parametrize(
        "value, text",
        [
            (timedelta(0), "0s"),
            (timedelta(seconds=10), "10s"),
            (timedelta(seconds=90), "1m30s"),
            (timedelta(milliseconds=500), "500ms"),
            (timedelta(hours=1, seconds=5), "1h5s"),
            (timedelta(seconds=-3), "-3s"),
            (timedelta(microseconds=500), "500us"),
            (timedelta(microseconds=1500), "1ms500us"),
        ],
    )
    def test_when_formatted_then_compact_form_is_returned(self, value, text):
        assert format_duration(value) == text

    def test_when_sub_millisecond_value_formatted_then_it_parses_back(self):
        value = parse_duration("2s250us")

        assert format_duration(value) == "2s250us"
        assert parse_duration(format_duration(value)) == value
