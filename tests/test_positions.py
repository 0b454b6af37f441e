"""Tests for position normalization."""

import pytest

from gridiron_data.core.types import ALLOWED_POSITIONS
from gridiron_data.services.positions import normalize_position


class TestAbbreviation:
    @pytest.mark.parametrize("code", ALLOWED_POSITIONS)
    def test_allowed_codes_are_fixed_points(self, code):
        assert normalize_position(code) == code

    def test_place_kicker_maps_to_kicker(self):
        assert normalize_position("PK") == "K"

    def test_dst_synonym(self):
        assert normalize_position("DST") == "D/ST"

    def test_case_and_whitespace_are_ignored(self):
        assert normalize_position(" wr ") == "WR"

    def test_unknown_code_without_display_name(self):
        assert normalize_position("OT") is None
        assert normalize_position(None) is None


class TestDisplayNameFallback:
    def test_defense_special_teams_marker(self):
        assert normalize_position(None, "Defense/Special Teams") == "D/ST"

    def test_prefix_match(self):
        assert normalize_position("", "TE - Tight End") == "TE"

    def test_abbreviation_wins_over_display_name(self):
        assert normalize_position("QB", "Wide Receiver") == "QB"

    def test_no_match(self):
        assert normalize_position("OT", "Offensive Tackle") is None
