"""
Kanji module for Yomikata.

Kanji records as stored in the dictionary, and helpers for the reading
notation used in them: ``-`` marks an open word boundary and ``.``
separates the part of a kun reading written with the kanji from its
okurigana (``た.べる`` is read たべる and written 食べる).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from yomikata.characters import as_hiragana


class ReadingType(Enum):
    KUNYOMI = "kun"
    ONYOMI = "on"


# ============================================================================
# Reading Notation
# ============================================================================

def literal_reading(reading: str) -> str:
    """
    The part of a reading pronounced by the kanji itself.

    >>> literal_reading("た.べる")
    'た'
    """
    return reading.replace('-', '').split('.')[0]


def okurigana(reading: str) -> str:
    """The kana following the kanji in a kun reading, or ''."""
    parts = reading.replace('-', '').split('.', 1)
    return parts[1] if len(parts) > 1 else ''


def format_reading(reading: str) -> str:
    """
    The full pronunciation of a reading without notation markers.

    >>> format_reading("-た.べる")
    'たべる'
    """
    return reading.replace('-', '').replace('.', '')


def reading_length(reading: str) -> int:
    """Character length of a reading once its markers are stripped."""
    return len(format_reading(reading))


def kanji_form(literal: str, reading: str) -> str:
    """How a word using ``reading`` is written: the literal plus okurigana."""
    return literal + okurigana(reading)


# ============================================================================
# Kanji Records
# ============================================================================

@dataclass
class KanjiRecord:
    """A kanji with its readings and the example words linked to them."""
    id: int
    literal: str
    kunyomi: List[str] = field(default_factory=list)
    onyomi: List[str] = field(default_factory=list)
    # Sequence ids of dictionary entries exemplifying the readings
    kun_dicts: List[int] = field(default_factory=list)
    on_dicts: List[int] = field(default_factory=list)
    meanings: List[str] = field(default_factory=list)
    grade: Optional[int] = None
    stroke_count: Optional[int] = None
    frequency: Optional[int] = None
    jlpt: Optional[int] = None  # JLPT level (1-5, lower is harder)

    def readings(self, reading_type: ReadingType) -> List[str]:
        if reading_type is ReadingType.KUNYOMI:
            return self.kunyomi
        return self.onyomi

    def reading_type(self, reading: str) -> Optional[ReadingType]:
        """
        Which of this kanji's reading lists ``reading`` belongs to.

        Kun readings must match literally, notation included. On readings
        are compared in hiragana so that both にち and ニチ are found.

        Returns:
            The ReadingType, or None if the kanji has no such reading.
        """
        if reading in self.kunyomi:
            return ReadingType.KUNYOMI
        reading_hira = as_hiragana(reading)
        for on in self.onyomi:
            if as_hiragana(on) == reading_hira:
                return ReadingType.ONYOMI
        return None

    def has_reading(self, reading: str) -> bool:
        return self.reading_type(reading) is not None
