"""Tests for version parsing and ordering."""

import pytest

from browser_updater.services.version import Ordering, Version, compare, parse_version


class TestVersion:
    """Tests for the Version value type."""

    def test_parses_dotted_numeric(self) -> None:
        """Dotted numeric strings parse into components."""
        v = Version("114.0.5735.199")
        assert v.components == (114, 0, 5735, 199)
        assert str(v) == "114.0.5735.199"

    def test_ignores_vendor_suffix(self) -> None:
        """Only the leading numeric run is significant."""
        assert Version("115.3.1esr") == Version("115.3.1")
        assert str(Version(" v120.0b1")) == "120.0"

    def test_missing_trailing_components_are_zero(self) -> None:
        """1.2 and 1.2.0 are the same version."""
        assert Version("1.2") == Version("1.2.0")
        assert hash(Version("1.2")) == hash(Version("1.2.0"))

    def test_numeric_not_lexicographic(self) -> None:
        """Components compare as integers."""
        assert Version("100.0") > Version("99.9")
        assert Version("114.0.10") > Version("114.0.9")

    def test_rejects_garbage(self) -> None:
        """Strings without a leading number are not versions."""
        with pytest.raises(ValueError, match="Not a version"):
            Version("latest")

    def test_is_immutable(self) -> None:
        """Attributes cannot be reassigned."""
        v = Version("1.0")
        with pytest.raises(AttributeError):
            v._text = "2.0"  # type: ignore[misc]


class TestParseVersion:
    """Tests for parse_version."""

    @pytest.mark.parametrize("text", [None, "", "   ", "n/a", "unknown"])
    def test_unparsable_is_none(self, text: str | None) -> None:
        """Empty or malformed input yields None instead of raising."""
        assert parse_version(text) is None

    def test_probe_output_with_whitespace(self) -> None:
        """Probe output with surrounding whitespace parses."""
        assert parse_version("  114.0.5735.199\r\n") == Version("114.0.5735.199")


class TestCompare:
    """Tests for compare."""

    def test_basic_ordering(self) -> None:
        """compare reports the three orderings."""
        assert compare(Version("100.0"), Version("114.0")) is Ordering.LESS_THAN
        assert compare(Version("114.0"), Version("100.0")) is Ordering.GREATER_THAN
        assert compare(Version("114.0"), Version("114.0")) is Ordering.EQUAL

    def test_missing_sorts_below_any_version(self) -> None:
        """An absent installed version is older than any installer."""
        assert compare(None, Version("0.0.1")) is Ordering.LESS_THAN
        assert compare(Version("0.0.1"), None) is Ordering.GREATER_THAN
        assert compare(None, None) is Ordering.EQUAL

    def test_antisymmetric_and_transitive(self) -> None:
        """Ordering is antisymmetric and transitive over a sample."""
        versions = [
            None,
            Version("1"),
            Version("1.0.1"),
            Version("1.10"),
            Version("2.0"),
            Version("114.0.5735.199"),
        ]
        for a in versions:
            assert compare(a, a) is Ordering.EQUAL
            for b in versions:
                assert compare(a, b).value == -compare(b, a).value
                for c in versions:
                    if (
                        compare(a, b) is Ordering.LESS_THAN
                        and compare(b, c) is Ordering.LESS_THAN
                    ):
                        assert compare(a, c) is Ordering.LESS_THAN
