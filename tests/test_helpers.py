"""Tests for utils/helpers.py"""

import pytest

from utils.helpers import (
    split_title_year,
    format_last_episode,
    extract_year,
    id_to_str,
)


class TestSplitTitleYear:
    """Tests for split_title_year function"""

    def test_title_with_year(self):
        assert split_title_year("Inception (2010)") == ("Inception", "2010")

    def test_title_without_year(self):
        assert split_title_year("The Boys") == ("The Boys", "")

    def test_only_trailing_year_removed(self):
        assert split_title_year("1917 (2019)") == ("1917", "2019")

    def test_parenthesised_text_kept(self):
        assert split_title_year("Dune (Part Two)") == ("Dune (Part Two)", "")

    def test_year_in_middle_kept(self):
        assert split_title_year("Blade Runner (1982) Final Cut") == ("Blade Runner (1982) Final Cut", "")

    def test_trailing_whitespace(self):
        assert split_title_year("  Heat (1995)  ") == ("Heat", "1995")

    def test_empty(self):
        assert split_title_year("") == ("", "")
        assert split_title_year(None) == ("", "")


class TestFormatLastEpisode:
    """Tests for format_last_episode function"""

    @pytest.mark.parametrize("label,expected", [
        ("Episode 7", "s1e7"),
        ("Folge 12", "s1e12"),
        ("Ep. 03: The Return", "s1e3"),
        ("第5話", "s1e5"),
    ])
    def test_first_number_used(self, label, expected):
        assert format_last_episode(label) == expected

    def test_no_number(self):
        assert format_last_episode("Pilot") == ""

    def test_none(self):
        assert format_last_episode(None) == ""
        assert format_last_episode("") == ""


class TestExtractYear:
    """Tests for extract_year function"""

    def test_date_string(self):
        assert extract_year("2010-07-16") == "2010"

    def test_integer(self):
        assert extract_year(2010) == "2010"

    def test_no_year(self):
        assert extract_year("") == ""
        assert extract_year(None) == ""
        assert extract_year("TBA") == ""


class TestIdToStr:
    """Tests for id_to_str function"""

    def test_int_id(self):
        assert id_to_str(27205) == "27205"

    def test_string_id(self):
        assert id_to_str(" tt1375666 ") == "tt1375666"

    def test_empty_values(self):
        assert id_to_str(None) == ""
        assert id_to_str(0) == ""
        assert id_to_str("") == ""
        assert id_to_str(False) == ""
