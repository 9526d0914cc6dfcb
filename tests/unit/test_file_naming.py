"""
File name normalization tests.

Covers sanitizing rules, idempotence, the timestamp prefix and the
rejection of names with nothing usable left.
"""

import re
from datetime import datetime, timezone, timedelta

import pytest

from exceptions import ValidationError
from services.file_naming import normalize_file_name, sanitize_file_name, strip_client_path, TIMESTAMP_FORMAT
from tests.factories.model_factories import random_csv_name

FIXED_NOW = datetime(2024, 5, 1, 9, 30, 0, tzinfo=timezone.utc)


class TestSanitizeFileName:

    @pytest.mark.parametrize("raw, expected", [
        ("My Report.csv", "My-Report.csv"),
        ("  padded  name .csv ", "padded-name-.csv"),
        ("tabs\tand\nnewlines.csv", "tabs-and-newlines.csv"),
        ("weird!@#$%^&*()chars.csv", "weirdchars.csv"),
        ("many---hyphens.csv", "many-hyphens.csv"),
        ("a - b.csv", "a-b.csv"),
        ("under_score.CSV", "under_score.CSV"),
    ])
    def test_rules(self, raw, expected):
        assert sanitize_file_name(raw) == expected

    @pytest.mark.parametrize("raw", [
        "C:\\fakepath\\data.csv",
        "/home/user/data.csv",
        "nested/dir\\data.csv",
    ])
    def test_client_directories_dropped(self, raw):
        assert sanitize_file_name(raw) == "data.csv"

    @pytest.mark.parametrize("raw", [
        "My Report.csv",
        "  x  y  z .csv",
        "ünïcödé name.csv",
        "a--b -- c.csv",
        "C:\\dir\\file name.csv",
    ])
    def test_idempotent(self, raw):
        once = sanitize_file_name(raw)
        assert sanitize_file_name(once) == once

    def test_unicode_letters_removed(self):
        assert sanitize_file_name("résumé.csv") == "rsum.csv"


class TestNormalizeFileName:

    def test_example_report(self):
        assert normalize_file_name("My Report.csv", now=FIXED_NOW) == "20240501093000-my-report.csv"

    def test_format_matches_pattern(self):
        key = normalize_file_name(random_csv_name())
        assert re.fullmatch(r"\d{14}-[a-z0-9_.\-]+", key)

    def test_lower_cased(self):
        key = normalize_file_name("UPPER.CSV", now=FIXED_NOW)
        assert key == key.lower()
        assert key.endswith("-upper.csv")

    def test_suffix_stable_prefix_varies(self):
        later = FIXED_NOW + timedelta(seconds=1)
        first = normalize_file_name("Data File.csv", now=FIXED_NOW)
        second = normalize_file_name("Data File.csv", now=later)
        assert first != second
        assert first.split("-", 1)[1] == second.split("-", 1)[1]

    @pytest.mark.parametrize("raw", ["My Report.csv", "UPPER case.CSV", "C:\\fakepath\\a  b.csv"])
    def test_normalizing_a_key_again_only_adds_a_prefix(self, raw):
        later = FIXED_NOW + timedelta(hours=1)
        once = normalize_file_name(raw, now=FIXED_NOW)
        twice = normalize_file_name(once, now=later)

        prefix, rest = twice.split("-", 1)
        assert prefix == later.strftime(TIMESTAMP_FORMAT)
        assert rest == once
        assert normalize_file_name(twice, now=later).split("-", 1)[1] == twice

    def test_normalizing_twice_random_names(self):
        for _ in range(20):
            once = normalize_file_name(random_csv_name())
            assert normalize_file_name(once).split("-", 1)[1] == once

    def test_same_second_same_key(self):
        assert normalize_file_name("a.csv", now=FIXED_NOW) == normalize_file_name("a.csv", now=FIXED_NOW)

    def test_aware_time_converted_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        local = datetime(2024, 5, 1, 11, 30, 0, tzinfo=plus_two)
        assert normalize_file_name("a.csv", now=local).startswith("20240501093000-")

    def test_naive_time_used_as_is(self):
        naive = datetime(2024, 5, 1, 9, 30, 0)
        assert normalize_file_name("a.csv", now=naive).startswith(naive.strftime(TIMESTAMP_FORMAT))

    @pytest.mark.parametrize("raw", ["", "   ", "!!!", "---", "...", "C:\\fakepath\\"])
    def test_nothing_usable_rejected(self, raw):
        with pytest.raises(ValidationError):
            normalize_file_name(raw, now=FIXED_NOW)


class TestStripClientPath:

    @pytest.mark.parametrize("raw, expected", [
        ("C:\\fakepath\\My Report.csv", "My Report.csv"),
        ("a/b/c.csv", "c.csv"),
        ("plain.csv", "plain.csv"),
        ("dir/", ""),
    ])
    def test_directory_part_dropped(self, raw, expected):
        assert strip_client_path(raw) == expected
