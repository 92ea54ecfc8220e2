"""
Reading matching with positional wildcards.

A search mode says where an implicit wildcard may absorb extra
characters around a pattern when it is compared against a text.
"""

from enum import Enum

LIKE_ESCAPE = "\\"


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so that ``text`` only matches itself."""
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


class SearchMode(Enum):
    """Where a pattern may sit inside the text it is compared with."""
    EXACT = "exact"
    # Anything may precede the pattern: the pattern is a suffix of the text
    LEFT_VARIABLE = "left"
    # Anything may follow the pattern: the pattern is a prefix of the text
    RIGHT_VARIABLE = "right"
    # Both boundaries float: the pattern is a substring of the text
    VARIABLE = "variable"

    def matches(self, pattern: str, text: str) -> bool:
        """
        Compare a pattern against a text under this mode.

        Args:
            pattern: The reading to look for.
            text: The reading to look in.

        Returns:
            True if ``pattern`` sits in ``text`` where this mode allows.
        """
        if self is SearchMode.EXACT:
            return pattern == text
        if self is SearchMode.LEFT_VARIABLE:
            return text.endswith(pattern)
        if self is SearchMode.RIGHT_VARIABLE:
            return text.startswith(pattern)
        return pattern in text

    def like_pattern(self, pattern: str) -> str:
        """
        SQL LIKE pattern for this mode.

        Wildcard characters in ``pattern`` are escaped with LIKE_ESCAPE, so
        the expression must be built with ``.like(..., escape=LIKE_ESCAPE)``.
        """
        pattern = escape_like(pattern)
        if self is SearchMode.EXACT:
            return pattern
        if self is SearchMode.LEFT_VARIABLE:
            return f"%{pattern}"
        if self is SearchMode.RIGHT_VARIABLE:
            return f"{pattern}%"
        return f"%{pattern}%"


def matches(mode: SearchMode, text_a: str, text_b: str) -> bool:
    """Check whether ``text_a`` matches ``text_b`` under ``mode``."""
    return mode.matches(text_a, text_b)


def select_mode(reading: str, kanji_form: str = "", literal: str = "") -> SearchMode:
    """
    Choose the match mode implied by a declared reading.

    A leading ``-`` opens the left boundary. A trailing ``-`` opens the
    right one, as does a kanji form that already starts with the literal.

    Args:
        reading: Declared kanji reading, possibly with ``-`` markers.
        kanji_form: Kanji orthography of the word being compared.
        literal: The kanji under search.

    Returns:
        The SearchMode to compare with. ``VARIABLE`` is never chosen here.
    """
    if reading.startswith('-'):
        return SearchMode.LEFT_VARIABLE
    if reading.endswith('-') or (literal and kanji_form.startswith(literal)):
        return SearchMode.RIGHT_VARIABLE
    return SearchMode.EXACT
