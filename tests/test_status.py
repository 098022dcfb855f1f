"""Tests for player status normalization."""

import pytest

from fantasy_sync.normalize import normalize_player_status


class TestNormalizePlayerStatus:
    """Every input maps onto exactly one canonical status."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("Out", "injured"),
            ("OUT", "injured"),
            ("IR", "injured"),
            ("Injured Reserve", "injured"),
            ("injured", "injured"),
            ("BYE", "bye"),
            ("On Bye", "bye"),
            ("Suspended", "suspended"),
            ("Suspended - Conduct", "suspended"),
            ("Questionable", "active"),
            ("Q", "active"),
            ("D", "active"),
            ("Active", "active"),
            ("NORMAL", "active"),
        ],
    )
    def test_known_values(self, value, expected):
        assert normalize_player_status(value) == expected

    @pytest.mark.parametrize("value", [None, "", "   ", 0, 12, [], {}, True])
    def test_missing_or_non_string_is_active(self, value):
        assert normalize_player_status(value) == "active"

    def test_unrecognised_text_is_active(self):
        assert normalize_player_status("probable") == "active"

    @pytest.mark.parametrize("code", ["O", "PUP", "NFI", "SUS", "SUSP"])
    def test_bare_codes_without_keyword_are_active(self, code):
        assert normalize_player_status(code) == "active"

    def test_surrounding_whitespace_ignored(self):
        assert normalize_player_status("  ir  ") == "injured"
