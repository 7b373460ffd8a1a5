"""Tests for utils/dates.py - watch-date normalization."""

import logging
from datetime import date

import pytest

from utils import dates
from utils.dates import (
    SENTINEL_DATE,
    lookup_month,
    normalize_date,
    parse_watch_date,
    register_month_names,
)


class TestNormalizeLocales:
    """Each supported display language normalizes to the same canonical date."""

    @pytest.mark.parametrize("raw,locale", [
        ("April 23, 2024", "en"),
        ("23 April 2024", "en-GB"),
        ("23. April 2024", "de"),
        ("Dienstag, 23. April 2024", "de"),
        ("23 de abril de 2024", "es-ES"),
        ("23 de abril de 2024", "es-419"),
        ("23 avril 2024", "fr"),
        ("23 de abril de 2024", "pt-BR"),
        ("23 de abril de 2024", "pt-PT"),
        ("2024年4月23日", "zh-CN"),
        ("2024年4月23日", "zh-TW"),
        ("2024年4月23日", "ja"),
        ("2024-04-23", None),
    ])
    def test_round_trip(self, raw, locale):
        assert normalize_date(raw, locale) == "2024-04-23"

    @pytest.mark.parametrize("raw,expected", [
        ("5. März 2024", "2024-03-05"),
        ("1 de setiembre de 2023", "2023-09-01"),
        ("14 février 2024", "2024-02-14"),
        ("14 fevrier 2024", "2024-02-14"),
        ("2 de março de 2024", "2024-03-02"),
        ("31. Dezember 2023", "2023-12-31"),
    ])
    def test_non_english_month_names(self, raw, expected):
        assert normalize_date(raw) == expected

    @pytest.mark.parametrize("raw,locale,expected", [
        ("23 de abr. de 2024", "pt-BR", "2024-04-23"),
        ("23 de abr. de 2024", "es-ES", "2024-04-23"),
        ("1 de set. de 2023", "pt-BR", "2023-09-01"),
        ("5 dic. 2023", "es-419", "2023-12-05"),
        ("3 févr. 2024", "fr", "2024-02-03"),
        ("3 fevr. 2024", "fr", "2024-02-03"),
        ("7. Okt. 2023", "de", "2023-10-07"),
        ("7 mag 2024", "it", "2024-05-07"),
    ])
    def test_abbreviated_month_names(self, raw, locale, expected):
        assert normalize_date(raw, locale) == expected

    def test_month_names_match_without_locale(self):
        """Tables are unioned, so the display language is optional."""
        assert normalize_date("23. Mai 2024") == "2024-05-23"
        assert normalize_date("23 de mayo de 2024") == "2024-05-23"


class TestParseOrder:
    """Tests for the fallback sequence."""

    def test_numeric_day_first_for_non_english_locale(self):
        assert parse_watch_date("05/04/2024", "de") == date(2024, 4, 5)

    def test_numeric_month_first_for_english(self):
        assert parse_watch_date("05/04/2024", "en") == date(2024, 5, 4)

    def test_number_runs_day_month_year(self):
        assert parse_watch_date("Watched 23/04/24 evening") == date(2024, 4, 23)

    def test_number_runs_invalid_date(self):
        assert parse_watch_date("Watched 99/99/99 evening") is None

    def test_non_breaking_spaces(self):
        assert parse_watch_date("23\u00a0avril\u00a02024") == date(2024, 4, 23)

    def test_empty(self):
        assert parse_watch_date("") is None
        assert parse_watch_date(None) is None
        assert parse_watch_date("   ") is None


class TestSentinel:
    """Unparseable input degrades to the sentinel date."""

    def test_sentinel_returned_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger='prime_to_simkl'):
            result = normalize_date("yesterday")

        assert result == SENTINEL_DATE.isoformat() == "2023-01-01"
        assert "Could not parse date" in caplog.text

    def test_sentinel_in_output_format(self):
        assert normalize_date("", output_format="%d/%m/%Y") == "01/01/2023"


class TestOutputFormat:
    """Tests for the configurable output format."""

    def test_simkl_format(self):
        assert normalize_date("April 23, 2024", "en", output_format="%d/%m/%Y") == "23/04/2024"


class TestMonthTables:
    """Tests for month-name registration and lookup."""

    @pytest.fixture
    def isolated_tables(self, monkeypatch):
        monkeypatch.setattr(dates, 'LOCALE_MONTHS', {k: dict(v) for k, v in dates.LOCALE_MONTHS.items()})
        monkeypatch.setattr(dates, 'MONTH_NAMES', dict(dates.MONTH_NAMES))

    def test_lookup_case_insensitive(self):
        assert lookup_month("APRIL") == 3
        assert lookup_month("Dezember") == 11
        assert lookup_month("十二月") == 11

    def test_lookup_strips_abbreviation_dot(self):
        assert lookup_month("Sep.") == 8

    def test_unknown_month(self):
        assert lookup_month("smarch") is None

    def test_register_requires_twelve(self, isolated_tables):
        with pytest.raises(ValueError):
            register_month_names('xx', ['one', 'two'])

    def test_first_registration_wins_in_union(self, isolated_tables):
        """A colliding name keeps its first index in the union table."""
        names = ['april'] + [f'xx{i}' for i in range(1, 12)]
        register_month_names('xx', names)

        assert lookup_month('april') == 3
        assert lookup_month('april', 'xx') == 0
        assert lookup_month('xx5') == 5

    def test_registered_locale_is_parseable(self, isolated_tables):
        register_month_names('nl', [
            'januari', 'februari', 'maart', 'april', 'mei', 'juni',
            'juli', 'augustus', 'september', 'oktober', 'november', 'december',
        ])
        assert parse_watch_date("23 maart 2024", "nl") == date(2024, 3, 23)
