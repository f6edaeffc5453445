"""Tests for the heuristic version comparator."""

import itertools

import pytest

from versioning.version_compare import compare, is_newer

CORPUS = [
    "1.0",
    "1.0.0",
    "1.0.1",
    "1.2.0-SNAPSHOT",
    "1.2.0",
    "1.9.0",
    "1.10.0",
    "2.0.0-RC1",
    "2.0.0-rc2",
    "2.0.0",
    "31.1-jre",
    "5.9.3",
    "1.0-beta",
    "20230101",
]


class TestCompare:
    """compare() ordering rules."""

    @pytest.mark.parametrize("version", CORPUS)
    def test_reflexive(self, version):
        assert compare(version, version) == 0

    def test_antisymmetric(self):
        for a, b in itertools.combinations(CORPUS, 2):
            assert compare(a, b) == -compare(b, a), (a, b)

    def test_snapshot_sorts_below_release(self):
        assert compare("1.2.0-SNAPSHOT", "1.2.0") < 0
        assert compare("1.2.0", "1.2.0-snapshot") > 0

    def test_numeric_not_lexicographic(self):
        assert compare("1.10.0", "1.9.0") > 0
        assert compare("2", "10") < 0

    def test_padding_with_zero(self):
        assert compare("1.0", "1.0.0") == 0
        assert compare("1", "1.0.1") < 0

    def test_non_numeric_parts_compare_case_insensitively(self):
        assert compare("2.0.0-RC1", "2.0.0-rc1") == 0
        assert compare("2.0.0-rc1", "2.0.0-RC2") < 0

    def test_mixed_numeric_and_text_parts_do_not_raise(self):
        # "jre" vs "0" padding falls through to text comparison
        assert compare("31.1-jre", "31.1") == 1
        assert compare("1.0-beta", "1.0.1") in (-1, 1)

    def test_result_is_sign_only(self):
        assert compare("1.0.100", "1.0.1") == 1
        assert compare("1.0.1", "1.0.100") == -1


class TestIsNewer:
    """is_newer() is strict."""

    def test_strictly_greater(self):
        assert is_newer("2.0.0", "1.9.9")
        assert not is_newer("1.9.9", "2.0.0")

    def test_equal_is_not_newer(self):
        assert not is_newer("1.0.0", "1.0")
