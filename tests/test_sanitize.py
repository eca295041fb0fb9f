"""Tests for text sanitization of uploaded entity fields."""

from segment_insights.utils.sanitize import sanitize_date, sanitize_email, sanitize_text


class TestSanitizeText:
    """Tests for sanitize_text function."""

    def test_sanitize_none(self) -> None:
        """Missing names stay missing."""
        assert sanitize_text(None) is None

    def test_sanitize_basic(self) -> None:
        assert sanitize_text("Ann Smith") == "Ann Smith"

    def test_sanitize_strips_whitespace(self) -> None:
        assert sanitize_text("  Ann Smith  ") == "Ann Smith"

    def test_sanitize_removes_control_chars(self) -> None:
        """Control characters pasted from spreadsheets are removed."""
        assert sanitize_text("Ann\x00 Smith\x1f") == "Ann Smith"

    def test_sanitize_line_breaks_become_spaces(self) -> None:
        """Multi-line cells collapse to one line."""
        assert sanitize_text("Ann\r\nSmith") == "Ann Smith"
        assert sanitize_text("Ann\t\t Smith") == "Ann Smith"

    def test_sanitize_removes_high_control_chars(self) -> None:
        assert sanitize_text("Ann\x7f Smith\x9f") == "Ann Smith"

    def test_sanitize_truncates_long_name(self) -> None:
        """Names over the limit are cut and marked."""
        result = sanitize_text("A" * 250, max_length=200)
        assert len(result) == 203
        assert result.endswith("...")

    def test_sanitize_exact_max_length(self) -> None:
        assert sanitize_text("Ann", max_length=3) == "Ann"

    def test_sanitize_preserves_unicode(self) -> None:
        assert sanitize_text("José Müller 李") == "José Müller 李"

    def test_sanitize_non_string(self) -> None:
        """Numeric names from loose uploads are stringified."""
        assert sanitize_text(12345) == "12345"

    def test_sanitize_blank_is_missing(self) -> None:
        assert sanitize_text("   ") is None
        assert sanitize_text("\x00\r\n") is None


class TestSanitizeEmail:
    """Tests for sanitize_email function."""

    def test_lowercased_and_trimmed(self) -> None:
        """Emails key timelines, so case and padding are dropped."""
        assert sanitize_email("  Ann.Smith@Example.COM ") == "ann.smith@example.com"

    def test_inner_spaces_removed(self) -> None:
        assert sanitize_email("ann @example.com") == "ann@example.com"

    def test_missing(self) -> None:
        assert sanitize_email(None) is None
        assert sanitize_email("  ") is None


class TestSanitizeDate:
    """Tests for sanitize_date function."""

    def test_kept_as_text(self) -> None:
        assert sanitize_date(" 2024-03-01 ") == "2024-03-01"

    def test_blank_is_missing(self) -> None:
        assert sanitize_date("") is None
        assert sanitize_date(None) is None
