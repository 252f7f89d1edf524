"""String escaping and quoting for embedding text in SQL literals.

The escaped character set matches MySQL's ``real_escape_string``:
NUL, line feed, carriage return, Ctrl-Z, double quote, single quote
and backslash. None of these functions need a database connection.
"""

import re

DEFAULT_QUOTE_CHAR = '"'

REPLACEMENT_CHARACTER = "\ufffd"

_ESCAPE_RE = re.compile(r"[\x00\x0a\x0d\x1a\x22\x27\x5c]")
_ESCAPE_LIKE_RE = re.compile(r"[\x00\x0a\x0d\x1a\x22\x25\x27\x5c\x5f]")
_SUPPLEMENTARY_RE = re.compile("[\U00010000-\U0010ffff]")
_WHITESPACE_RE = re.compile(r"\s+")
# Whitespace, Unicode separators and control characters removed by mb_trim()
_TRIM_CHARS = "".join(
    chr(c)
    for c in (
        list(range(0x00, 0x21))
        + list(range(0x7F, 0xA1))
        + [0x1680, 0x180E, 0x2028, 0x2029, 0x202F, 0x205F, 0x3000, 0xFEFF]
        + list(range(0x2000, 0x200C))
    )
)


def escape(text: str) -> str:
    """Backslash-escape the characters that cannot appear raw in a SQL literal.

    Note that ``%`` and ``_`` are left alone; use escape_like() for
    values embedded in LIKE patterns.

    Args:
        text: The string to escape.

    Returns:
        The escaped string, without surrounding quotes.
    """
    return _ESCAPE_RE.sub(lambda m: "\\" + m.group(0), text)


def escape_like(text: str) -> str:
    """Escape a string for use inside a LIKE pattern (adds ``%`` and ``_``)."""
    return _ESCAPE_LIKE_RE.sub(lambda m: "\\" + m.group(0), text)


def quote(text: str, quote_char: str = DEFAULT_QUOTE_CHAR) -> str:
    """Escape a string and wrap it in the quote character.

    Args:
        text: The string to quote.
        quote_char: Character placed on both sides of the escaped value.

    Returns:
        The quoted and escaped literal.
    """
    return f"{quote_char}{escape(text)}{quote_char}"


def strip_4byte(text: str) -> str:
    """Replace supplementary-plane code points with U+FFFD.

    MySQL ``utf8`` (utf8mb3) columns only accept up to 3-byte UTF-8
    sequences, so emoji and other 4-byte characters are replaced.
    """
    return _SUPPLEMENTARY_RE.sub(REPLACEMENT_CHARACTER, text)


def pack(text: str) -> str:
    """Collapse runs of whitespace to a single space and trim both ends."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def mb_trim(text: str) -> str:
    """Trim Unicode whitespace, separator and control characters from both ends."""
    return text.strip(_TRIM_CHARS)
