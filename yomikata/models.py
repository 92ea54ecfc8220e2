"""
Pydantic models for search requests and results.

Usage:
    from yomikata.models import SearchQuery, KanjiReading

    query = SearchQuery(
        query="食 た.べる",
        form=KanjiReading.parse("食 た.べる"),
    )
"""

from typing import List, Optional, Union

from pydantic import BaseModel, Field

from yomikata.characters import is_kanji
from yomikata.dict import DictEntry
from yomikata.errors import EncodingError, UndefinedQuery
from yomikata.kanji import KanjiRecord
from yomikata.settings import DEFAULT_LANGUAGE


class UserSettings(BaseModel):
    """Per-user search settings."""
    user_lang: str = Field(DEFAULT_LANGUAGE, description="Language of the senses to show")
    show_english: bool = Field(True, description="Also show English senses")


class KanjiReading(BaseModel):
    """A kanji literal together with one of its declared readings."""
    literal: str = Field(..., description="The kanji under search")
    reading: str = Field(..., description="Declared reading, e.g. 'た.べる' or '-べる'")

    @classmethod
    def parse(cls, raw: Union[str, bytes]) -> "KanjiReading":
        """
        Parse a raw ``"<literal> <reading>"`` query.

        Raises:
            EncodingError: If ``raw`` is not valid UTF-8 text.
            UndefinedQuery: If the literal or the reading is missing.
        """
        try:
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            else:
                raw.encode("utf-8")
        except UnicodeError as exc:
            raise EncodingError(f"Malformed query text: {exc}") from exc

        parts = raw.split()
        if len(parts) != 2:
            raise UndefinedQuery(f"Expected '<kanji> <reading>', got {raw!r}")

        literal, reading = parts
        if len(literal) != 1 or not is_kanji(literal):
            raise UndefinedQuery(f"Not a kanji literal: {literal!r}")
        return cls(literal=literal, reading=reading)


class SearchQuery(BaseModel):
    """A parsed search request."""
    query: str = Field(..., description="Raw query text")
    form: Optional[KanjiReading] = Field(None, description="Kanji reading form of the query")
    settings: UserSettings = Field(default_factory=UserSettings)
    part_of_speech: List[str] = Field(default_factory=list, description="POS tags to filter by")
    page: int = Field(0, ge=0, description="Zero based result page")

    def get_part_of_speech_tags(self) -> Optional[List[str]]:
        return self.part_of_speech or None


class Sense(BaseModel):
    """One gloss of a dictionary entry."""
    sequence: int
    language: str
    gloss: str
    part_of_speech: List[str] = Field(default_factory=list)


class WordRecord(BaseModel):
    """A fully loaded dictionary word."""
    sequence: int = Field(..., description="JMdict sequence number")
    kana: DictEntry = Field(..., description="Kana reading row")
    kanji: Optional[DictEntry] = Field(None, description="Kanji orthography row")
    senses: List[Sense] = Field(default_factory=list)

    def get_reading(self) -> DictEntry:
        """The main reading: kanji form if there is one, else kana."""
        return self.kanji if self.kanji is not None else self.kana

    @property
    def priorities(self) -> List[str]:
        prios = list(self.kana.priorities)
        if self.kanji is not None:
            prios += [p for p in self.kanji.priorities if p not in prios]
        return prios

    @property
    def jlpt_lvl(self) -> Optional[int]:
        if self.kanji is not None and self.kanji.jlpt_lvl is not None:
            return self.kanji.jlpt_lvl
        return self.kana.jlpt_lvl


class ResultData(BaseModel):
    """Result of a search."""
    words: List[WordRecord] = Field(default_factory=list)
    kanji: List[KanjiRecord] = Field(default_factory=list)
    count: int = Field(0, description="Number of words before paging")
