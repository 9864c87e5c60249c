"""
Tests for the query parameter sanitizer.

Tests cover:
- Numeric coercion, flooring and clamping of limits
- String trimming and length caps
- Strict calendar-date validation
- Closed period/platform enumerations
- LIKE metacharacter escaping
- validate_params on untyped and hostile input
"""

import math

import pytest

from commentlens.services.analytics.params import (
    LIMIT_MAX,
    LIMIT_MIN,
    QueryParams,
    contains_pattern,
    escape_like_pattern,
    sanitize_date,
    sanitize_number,
    sanitize_period,
    sanitize_platform,
    sanitize_string,
    validate_params,
)


class TestSanitizeNumber:
    """Limits are always an int in [1, 500] or absent."""

    @pytest.mark.parametrize("raw, expected", [
        (10, 10),
        (0, 1),
        (-7, 1),
        (501, 500),
        (10 ** 12, 500),
        (2.9, 2),
        (0.5, 1),
        ("25", 25),
        (" 40 ", 40),
        ("3.7", 3),
        (float("inf"), 500),
        (float("-inf"), 1),
    ])
    def test_coerces_and_clamps(self, raw, expected):
        assert sanitize_number(raw) == expected

    @pytest.mark.parametrize("raw", [
        None, True, False, float("nan"), "nan", "abc", "", "   ", [], {}, object(),
    ])
    def test_rejects_non_numbers(self, raw):
        assert sanitize_number(raw) is None

    @pytest.mark.parametrize("raw", [
        -1e308, -3, 0, 0.1, 1, 7.5, 499.99, 500, 500.5, 1e308, "9" * 400, "-12", "1e3",
    ])
    def test_result_always_in_bounds(self, raw):
        result = sanitize_number(raw)
        assert isinstance(result, int)
        assert LIMIT_MIN <= result <= LIMIT_MAX

    def test_custom_bounds(self):
        assert sanitize_number(99, min_value=5, max_value=50) == 50
        assert sanitize_number(1, min_value=5, max_value=50) == 5


class TestSanitizeString:

    def test_trims(self):
        assert sanitize_string("  hello  ") == "hello"

    def test_truncates_to_max_length(self):
        assert sanitize_string("x" * 300) == "x" * 200
        assert sanitize_string("abcdef", max_length=3) == "abc"

    @pytest.mark.parametrize("raw", [None, 42, ["a"], {"a": 1}, "", "    "])
    def test_non_strings_and_blank_are_absent(self, raw):
        assert sanitize_string(raw) is None


class TestSanitizeDate:

    def test_valid_date_unchanged(self):
        assert sanitize_date("2025-02-28") == "2025-02-28"

    def test_leap_day(self):
        assert sanitize_date("2024-02-29") == "2024-02-29"
        assert sanitize_date("2025-02-29") is None

    @pytest.mark.parametrize("raw", [
        "2025-02-30", "2025-13-01", "2025-00-10", "2025-1-5", "25-01-01",
        "2025/01/01", "2025-01-01T00:00:00", " 2025-01-01", "2025-01-01\n",
        "yesterday", "", None, 20250101,
    ])
    def test_rejects_anything_else(self, raw):
        assert sanitize_date(raw) is None


class TestEnumerations:

    @pytest.mark.parametrize("raw", ["week", "month"])
    def test_periods(self, raw):
        assert sanitize_period(raw) == raw

    @pytest.mark.parametrize("raw", ["day", "Week", "year", "week; DROP TABLE comments", None, 7])
    def test_rejects_other_periods(self, raw):
        assert sanitize_period(raw) is None

    def test_platforms(self):
        assert sanitize_platform("youtube") == "youtube"
        assert sanitize_platform("instagram") == "instagram"
        assert sanitize_platform("tiktok") is None
        assert sanitize_platform("YouTube") is None


class TestEscapeLikePattern:

    @pytest.mark.parametrize("raw, expected", [
        ("50%", "50\\%"),
        ("snake_case", "snake\\_case"),
        ("back\\slash", "back\\\\slash"),
        ("%_\\", "\\%\\_\\\\"),
        ("plain", "plain"),
    ])
    def test_escapes_metacharacters(self, raw, expected):
        assert escape_like_pattern(raw) == expected

    def test_contains_pattern_wraps_escaped_text(self):
        assert contains_pattern("50%") == "%50\\%%"


class TestValidateParams:

    def test_reads_camel_case_keys(self):
        params = validate_params({
            "keyword": "  tutorial ",
            "videoId": "abc123",
            "videoTitle": "My Vlog",
            "platform": "instagram",
            "limit": "15",
            "startDate": "2025-01-01",
            "endDate": "2025-01-31",
            "period": "month",
        })
        assert params == QueryParams(
            keyword="tutorial",
            video_id="abc123",
            video_title="My Vlog",
            platform="instagram",
            limit=15,
            start_date="2025-01-01",
            end_date="2025-01-31",
            period="month",
        )

    def test_video_id_capped_at_50(self):
        assert len(validate_params({"videoId": "v" * 80}).video_id) == 50

    def test_invalid_fields_are_dropped(self):
        params = validate_params({
            "keyword": 12,
            "limit": math.nan,
            "startDate": "2025-02-30",
            "period": "fortnight",
            "platform": "tiktok",
            "unexpected": "ignored",
        })
        assert params == QueryParams()
        assert params.to_dict() == {}

    @pytest.mark.parametrize("raw", [None, "params", 42, ["keyword"], ("a", "b")])
    def test_non_mapping_gives_empty_params(self, raw):
        assert validate_params(raw) == QueryParams()

    def test_to_dict_omits_absent_fields(self):
        assert validate_params({"limit": 5}).to_dict() == {"limit": 5}
