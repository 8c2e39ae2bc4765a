"""Tests for branch colour assignment."""

import pytest

from gitscope.git_graph.colors import LANE_COLORS, BranchColorRegistry, get_lane_color, hash_branch_name


class TestHashBranchName:
    def test_known_values(self):
        assert hash_branch_name("") == 0
        assert hash_branch_name("a") == 97
        assert hash_branch_name("ab") == 97 * 31 + 98
        assert hash_branch_name("main") == 3343801

    def test_wraps_to_32_bits(self):
        h = hash_branch_name("a-very-long-feature-branch-name/with/parts")
        assert 0 <= h <= 2**31

    def test_non_bmp_characters_hash_as_surrogate_pairs(self):
        # U+1F600 is two UTF-16 code units: 0xD83D 0xDE00
        assert hash_branch_name("\U0001f600") == 0xD83D * 31 + 0xDE00


class TestBranchColorRegistry:
    def test_color_is_hash_mod_palette(self):
        registry = BranchColorRegistry(palette_size=12)

        assert registry.color_for("main") == 3343801 % 12

    def test_first_assignment_is_kept(self):
        registry = BranchColorRegistry(palette_size=5)
        first = registry.color_for("feature")

        assert registry.color_for("feature") == first
        assert registry.snapshot() == {"feature": first}
        assert len(registry) == 1

    def test_reset(self):
        registry = BranchColorRegistry()
        registry.color_for("main")
        registry.reset()

        assert "main" not in registry
        assert len(registry) == 0

    def test_invalid_palette_size(self):
        with pytest.raises(ValueError):
            BranchColorRegistry(palette_size=0)


class TestLaneColors:
    def test_palette_wraps(self):
        assert len(LANE_COLORS) == 12
        assert get_lane_color(0) == get_lane_color(12)
        assert get_lane_color(3).name() == "#9c27b0"
