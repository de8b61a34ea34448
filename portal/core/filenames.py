"""Filename sanitization for user-supplied file names.

Security: Strips directory traversal sequences, markup, shell and URL
metacharacters (and their common percent-encodings) so a name taken from
user input can be used as a file name.
"""

import re

# Substrings removed repeatedly until the name stops changing
_BAD_SUBSTRINGS: tuple[str, ...] = (
    "../",
    "<!--",
    "-->",
    "<",
    ">",
    "'",
    '"',
    "&",
    "$",
    "#",
    "{",
    "}",
    "[",
    "]",
    "=",
    ";",
    "?",
    "%20",
    "%22",
    "%3c",
    "%253c",
    "%3e",
    "%0e",
    "%28",
    "%29",
    "%2528",
    "%26",
    "%24",
    "%3f",
    "%3b",
    "%3d",
)

# Path separators, only removed when relative paths are not allowed
_PATH_SUBSTRINGS: tuple[str, ...] = ("./", "/")

# Control characters except tab, newline and carriage return
_INVISIBLE_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]+")

# Percent-encoded control characters
_INVISIBLE_URL_RE = re.compile(r"%0[0-8bcef]|%1[0-9a-f]|%7f", re.IGNORECASE)

_BACKSLASH_ESCAPE_RE = re.compile(r"\\(.?)", re.DOTALL)


def remove_invisible_characters(value: str, url_encoded: bool = True) -> str:
    """Remove control characters that could hide inside a string.

    Args:
        value: Input string.
        url_encoded: Also remove percent-encoded control characters.

    Returns:
        The string without invisible characters.
    """
    patterns = [_INVISIBLE_RE]
    if url_encoded:
        patterns.append(_INVISIBLE_URL_RE)

    while True:
        cleaned = value
        for pattern in patterns:
            cleaned = pattern.sub("", cleaned)
        if cleaned == value:
            return cleaned
        value = cleaned


def sanitize_filename(filename: str, relative_path: bool = False) -> str:
    """Sanitize a user-supplied file name.

    Args:
        filename: Input file name.
        relative_path: Keep "/" and "./" so relative paths survive.

    Returns:
        The sanitized name (may be empty).
    """
    bad = _BAD_SUBSTRINGS if relative_path else _BAD_SUBSTRINGS + _PATH_SUBSTRINGS

    value = remove_invisible_characters(filename, url_encoded=False)
    while True:
        previous = value
        for substring in bad:
            value = value.replace(substring, "")
        if value == previous:
            break

    # Unescape backslash escapes: "\x" -> "x", "\\" -> "\"
    return _BACKSLASH_ESCAPE_RE.sub(r"\1", value)
