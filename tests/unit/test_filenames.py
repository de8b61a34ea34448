"""Tests for filename sanitization."""

import pytest

from portal.core.filenames import remove_invisible_characters, sanitize_filename


class TestRemoveInvisibleCharacters:
    """Control characters stripped from strings."""

    def test_removes_raw_control_characters(self):
        """NUL, other C0 controls and DEL are removed."""
        assert remove_invisible_characters("na\x00m\x1be\x7f") == "name"

    def test_keeps_tab_newline_carriage_return(self):
        """Whitespace controls survive."""
        assert remove_invisible_characters("a\tb\nc\rd") == "a\tb\nc\rd"

    def test_removes_percent_encoded_controls(self):
        """%00 and %1F are removed when url_encoded is set."""
        assert remove_invisible_characters("a%00b%1Fc") == "abc"

    def test_percent_encoded_kept_when_disabled(self):
        """url_encoded=False leaves percent sequences alone."""
        assert remove_invisible_characters("a%00b", url_encoded=False) == "a%00b"

    def test_repeats_until_stable(self):
        """Removing one sequence cannot assemble another."""
        assert remove_invisible_characters("a%%1f1fb") == "ab"


class TestSanitizeFilename:
    """User-supplied file names made safe."""

    def test_plain_name_unchanged(self):
        """Ordinary names pass through."""
        assert sanitize_filename("report-2024_v2.pdf") == "report-2024_v2.pdf"

    def test_strips_directory_traversal(self):
        """Traversal and separators are removed."""
        assert sanitize_filename("../../etc/passwd") == "etcpasswd"

    def test_relative_path_keeps_separators(self):
        """relative_path=True keeps "/" but still drops "../"."""
        assert sanitize_filename("../images/cat.png", relative_path=True) == (
            "images/cat.png"
        )

    def test_nested_traversal_removed_until_stable(self):
        """Removing "../" once cannot leave a new "../" behind."""
        assert sanitize_filename("..././x", relative_path=True) == "x"

    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("<script>a.png", "scripta.png"),
            ("a'b\"c.txt", "abc.txt"),
            ("name$var&x=1;y?.txt", "namevarx1y.txt"),
            ("{x}[y]#.txt", "xy.txt"),
            ("<!--x-->.txt", "x.txt"),
        ],
    )
    def test_strips_markup_and_metacharacters(self, filename, expected):
        """Markup, shell and URL metacharacters are removed."""
        assert sanitize_filename(filename) == expected

    def test_strips_percent_encodings(self):
        """Common percent-encoded metacharacters are removed."""
        assert sanitize_filename("file%20name%3c%3e.txt") == "filename.txt"

    def test_strips_raw_control_characters(self):
        """Control characters are removed from the name."""
        assert sanitize_filename("na\x00me.txt") == "name.txt"

    def test_unescapes_backslashes(self):
        """Backslash escapes are unescaped."""
        assert sanitize_filename("a\\b.txt") == "ab.txt"
        assert sanitize_filename("a\\\\b.txt") == "a\\b.txt"

    def test_may_return_empty(self):
        """A name made only of removed characters becomes empty."""
        assert sanitize_filename("../<>") == ""
