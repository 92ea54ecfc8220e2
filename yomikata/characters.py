"""
Character classification for Yomikata.

Provides script classification of single characters and strings,
composition predicates, kana conversion and segmentation of text into
runs of one character type.

Every predicate is table driven: a character belongs to a script if its
codepoint falls into one of the inclusive ranges below. A string
predicate named ``is_*`` holds if it holds for every character (so the
empty string satisfies all of them), a ``has_*`` predicate if it holds
for at least one.
"""

from enum import Enum
from typing import Callable, List, Tuple

# ============================================================================
# Codepoint Range Tables
# ============================================================================

Ranges = Tuple[Tuple[int, int], ...]

HIRAGANA_RANGES: Ranges = ((0x3040, 0x309F),)

KATAKANA_RANGES: Ranges = ((0x30A0, 0x30FF),)

KANJI_RANGES: Ranges = (
    (0x3400, 0x4DBF),    # CJK Unified Ideographs Extension A
    (0x4E00, 0x9FFF),    # CJK Unified Ideographs
    (0xF900, 0xFAFF),    # CJK Compatibility Ideographs
    (0xFF10, 0xFF19),    # Full-width digits
    (0x20000, 0x2A6DF),  # CJK Unified Ideographs Extension B
    (0x29E8A, 0x29E8A),
)

ROMAN_LETTER_RANGES: Ranges = (
    (0xFF01, 0xFF5A),    # Full-width ASCII
    (0x2000, 0x206F),    # General punctuation
    (0x20000, 0x2A6DF),
    (0x2010, 0x2010),
    (0x2212, 0x2212),
)

SYMBOL_RANGES: Ranges = (
    (0x3000, 0x303F),    # CJK symbols and punctuation
    (0x0370, 0x03FF),    # Greek
    (0x25A0, 0x25FF),    # Geometric shapes
    (0xFF00, 0xFFEF),    # Half-width and full-width forms
    (0x002D, 0x002D),    # -
    (0x3005, 0x3005),    # 々
    (0x00D7, 0x00D7),    # ×
)

# ゃ ゅ ょ
SMALL_HIRAGANA = frozenset("ゃゅょ")

# ャ ュ ョ
SMALL_KATAKANA = frozenset("ャュョ")

# Katakana that have a hiragana counterpart 0x60 codepoints below
_KATAKANA_TO_HIRAGANA = {c: c - 0x60 for c in range(0x30A1, 0x30F7)}


class CharType(Enum):
    """Script class of a character or a whole string."""
    KANA = "kana"
    # Kanji ideographs, but for single characters also full-width roman letters
    KANJI_LIKE = "kanji"
    OTHER = "other"


def _in_ranges(char: str, ranges: Ranges) -> bool:
    code = ord(char)
    for low, high in ranges:
        if low <= code <= high:
            return True
    return False


def _all(text: str, pred: Callable[[str], bool]) -> bool:
    return all(pred(c) for c in text)


def _any(text: str, pred: Callable[[str], bool]) -> bool:
    return any(pred(c) for c in text)


# ============================================================================
# Single Character Predicates
# ============================================================================

def is_hiragana_char(char: str) -> bool:
    return _in_ranges(char, HIRAGANA_RANGES)


def is_katakana_char(char: str) -> bool:
    return _in_ranges(char, KATAKANA_RANGES)


def is_kana_char(char: str) -> bool:
    return is_hiragana_char(char) or is_katakana_char(char)


def is_kanji_char(char: str) -> bool:
    return _in_ranges(char, KANJI_RANGES)


def is_roman_letter_char(char: str) -> bool:
    """Full-width roman letters and a few typographic characters."""
    return _in_ranges(char, ROMAN_LETTER_RANGES)


def is_symbol_char(char: str) -> bool:
    return _in_ranges(char, SYMBOL_RANGES)


def is_japanese_char(char: str) -> bool:
    return (
        is_kana_char(char)
        or is_kanji_char(char)
        or is_symbol_char(char)
        or is_roman_letter_char(char)
    )


def char_type(char: str) -> CharType:
    """
    Classify a single character.

    Full-width roman letters are reported as ``KANJI_LIKE`` even though
    ``is_kanji_char`` rejects them. Ranking downstream relies on this.

    Args:
        char: A single character.

    Returns:
        The character's CharType.
    """
    if is_kana_char(char):
        return CharType.KANA
    if is_kanji_char(char) or is_roman_letter_char(char):
        return CharType.KANJI_LIKE
    return CharType.OTHER


# ============================================================================
# String Predicates
# ============================================================================

def is_hiragana(text: str) -> bool:
    """Check if text consists entirely of hiragana."""
    return _all(text, is_hiragana_char)


def is_katakana(text: str) -> bool:
    """Check if text consists entirely of katakana."""
    return _all(text, is_katakana_char)


def is_kana(text: str) -> bool:
    """Check if text consists entirely of kana (hiragana or katakana)."""
    return _all(text, is_kana_char)


def has_kana(text: str) -> bool:
    return _any(text, is_kana_char)


def is_kanji(text: str) -> bool:
    """Check if text consists entirely of kanji."""
    return _all(text, is_kanji_char)


def has_kanji(text: str) -> bool:
    return _any(text, is_kanji_char)


def kanji_count(text: str) -> int:
    """Count kanji characters in text."""
    return sum(1 for c in text if is_kanji_char(c))


def is_symbol(text: str) -> bool:
    return _all(text, is_symbol_char)


def has_symbol(text: str) -> bool:
    return _any(text, is_symbol_char)


def is_roman_letter(text: str) -> bool:
    return _all(text, is_roman_letter_char)


def is_japanese(text: str) -> bool:
    """Check if text is built from kana, kanji, CJK symbols and full-width letters only."""
    return _all(text, is_japanese_char)


def has_japanese(text: str) -> bool:
    return _any(text, is_japanese_char)


def is_small_hiragana(text: str) -> bool:
    return _all(text, SMALL_HIRAGANA.__contains__)


def is_small_katakana(text: str) -> bool:
    return _all(text, SMALL_KATAKANA.__contains__)


def is_small_kana(text: str) -> bool:
    """Check if text is made of small ya/yu/yo kana of a single script."""
    return is_small_hiragana(text) or is_small_katakana(text)


def text_type(text: str) -> CharType:
    """
    Classify a whole string.

    Unlike ``char_type`` this only looks at real kanji, so full-width
    roman letters make a string ``OTHER``.
    """
    if is_kanji(text):
        return CharType.KANJI_LIKE
    if is_kana(text):
        return CharType.KANA
    return CharType.OTHER


def is_of_type(char: str, ct: CharType) -> bool:
    return char_type(char) == ct


# ============================================================================
# Conversion and Segmentation
# ============================================================================

def as_hiragana(text: str) -> str:
    """
    Convert katakana to hiragana.

    Characters without a hiragana counterpart (ー, ヷ, ...) are kept.
    """
    return text.translate(_KATAKANA_TO_HIRAGANA)


def words_with_char_type(text: str, ct: CharType) -> List[str]:
    """
    Split text into maximal runs of characters of one type.

    Runs of any other type are skipped.

    Args:
        text: Text to split.
        ct: Character type to collect.

    Returns:
        The runs in order of appearance.

    Example:
        >>> words_with_char_type("これは漢字です", CharType.KANJI_LIKE)
        ['漢字']
    """
    runs = []
    current = []
    for char in text:
        if char_type(char) == ct:
            current.append(char)
        elif current:
            runs.append(''.join(current))
            current = []
    if current:
        runs.append(''.join(current))
    return runs
