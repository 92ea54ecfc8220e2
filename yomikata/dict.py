"""
Dictionary entries for Yomikata.

A lexical item is the group of rows sharing a sequence id: its kanji
orthographies and its kana readings.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple


@dataclass
class DictEntry:
    """One reading row of a dictionary entry."""
    id: int
    sequence: int
    reading: str
    kanji: bool  # True if reading is the kanji orthography
    no_kanji: bool = False
    priorities: List[str] = field(default_factory=list)
    jlpt_lvl: Optional[int] = None
    is_main: bool = False

    def has_priority(self) -> bool:
        return bool(self.priorities)


def group_by_sequence(entries: Iterable[DictEntry]) -> Dict[int, List[DictEntry]]:
    """
    Group rows by sequence id.

    Groups keep the order in which their sequence first appears, rows keep
    their order within a group.
    """
    groups: Dict[int, List[DictEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.sequence, []).append(entry)
    return groups


def split_forms(rows: Iterable[DictEntry]) -> Tuple[Optional[DictEntry], Optional[DictEntry]]:
    """
    Pick the kanji-form and kana-form row of one lexical item.

    Returns:
        Tuple of (first kanji row, first kana row), either may be None.
    """
    kanji_row = None
    kana_row = None
    for row in rows:
        if row.kanji:
            if kanji_row is None:
                kanji_row = row
        elif kana_row is None:
            kana_row = row
    return kanji_row, kana_row
