"""
Word searches for Yomikata.

``Search.by_reading`` looks up the words using one reading of a kanji.
It widens the lookup when the first pass finds little and falls back to
a plain word search when the reading can't be searched by kanji at all:

    narrow (first pass, left/right variable)
      -> wide (variable, all rows) if <= NARROW_RESULT_THRESHOLD results
      -> alternative word search if nothing was found

A search that exhausts its fallbacks returns an empty result, never an
error. Storage errors propagate unchanged.
"""

import asyncio
import logging
from typing import List, Optional, Protocol, Sequence

from yomikata import order
from yomikata.characters import is_kanji_char, kanji_count
from yomikata.db.store import DictionaryStore
from yomikata.errors import NotFound, UndefinedQuery
from yomikata.kanji import KanjiRecord, literal_reading
from yomikata.matching import SearchMode
from yomikata.models import ResultData, SearchQuery, WordRecord
from yomikata.order import SearchOrder
from yomikata.settings import KANJI_INFO_WORDS, NARROW_RESULT_THRESHOLD, PAGE_SIZE
from yomikata.tokenizer import Tokenizer

logger = logging.getLogger(__name__)


class WordSearcher(Protocol):
    async def search(self, query: SearchQuery) -> ResultData:
        ...


# ============================================================================
# Kanji Info
# ============================================================================

def get_kanji_words(words: Sequence[WordRecord]) -> List[str]:
    """Kanji forms of the first KANJI_INFO_WORDS words that have one."""
    return [w.kanji.reading for w in words if w.kanji is not None][:KANJI_INFO_WORDS]


def remove_dups(kanji: Sequence[KanjiRecord]) -> List[KanjiRecord]:
    seen = set()
    result = []
    for k in kanji:
        if k.id not in seen:
            seen.add(k.id)
            result.append(k)
    return result


async def load_word_kanji_info(
    store: DictionaryStore,
    query_text: str,
    words: Sequence[WordRecord],
) -> List[KanjiRecord]:
    """
    Load the kanji used by a result list.

    If no word has a kanji form, the kanji of the raw query are shown
    instead. Results are deduplicated before they are capped. The cap is
    the number of words, or the kanji count of the first kanji word if
    that is larger.

    Args:
        store: Dictionary store.
        query_text: The raw query.
        words: The result words.

    Returns:
        Kanji records in order of appearance.
    """
    kanji_words = get_kanji_words(words)

    if kanji_words:
        found = await asyncio.gather(*(
            store.find_by_literals([c for c in reading if is_kanji_char(c)])
            for reading in kanji_words
        ))
        retrieved = [k for records in found for k in records]
        limit = max(kanji_count(kanji_words[0]), len(words))
    else:
        # Absent literals are skipped here
        retrieved = await store.find_by_literals([c for c in query_text if is_kanji_char(c)])
        limit = len(retrieved)

    return remove_dups(retrieved)[:limit]


# ============================================================================
# Word Search
# ============================================================================

class WordSearch:
    """Plain text search over all readings."""

    def __init__(self, store: DictionaryStore, tokenizer: Optional[Tokenizer] = None):
        self.store = store
        self.tokenizer = tokenizer

    async def search(self, query: SearchQuery) -> ResultData:
        text = query.query.strip()
        if not text:
            return ResultData()

        seq_ids = await self.store.find_sequence_ids_by_text(text, SearchMode.EXACT)
        if len(seq_ids) < PAGE_SIZE:
            more = await self.store.find_sequence_ids_by_text(text, SearchMode.RIGHT_VARIABLE)
            seq_ids += [s for s in more if s not in seq_ids]

        words = await self.store.load_words_by_sequence_ids(
            seq_ids,
            query.settings.user_lang,
            query.settings.show_english,
            query.get_part_of_speech_tags(),
        )
        SearchOrder(query, self.tokenizer).sort(words, order.word_search)

        count = len(words)
        start = query.page * PAGE_SIZE
        words = words[start:start + PAGE_SIZE]
        kanji = await load_word_kanji_info(self.store, query.query, words)
        return ResultData(words=words, kanji=kanji, count=count)


# ============================================================================
# Kanji Reading Search
# ============================================================================

class Search:
    """One search request."""

    def __init__(
        self,
        store: DictionaryStore,
        query: SearchQuery,
        tokenizer: Optional[Tokenizer] = None,
        word_search: Optional[WordSearcher] = None,
    ):
        self.store = store
        self.query = query
        self.tokenizer = tokenizer
        if word_search is None:
            word_search = WordSearch(store, tokenizer)
        self.word_search = word_search

    async def by_reading(self) -> ResultData:
        """
        Run a kanji reading search.

        Raises:
            UndefinedQuery: If the query has no kanji reading form.
            StorageError: If the store fails.
        """
        reading = self.query.form
        if reading is None:
            raise UndefinedQuery("Query has no kanji reading")

        try:
            kanji = await self.store.find_by_literal(reading.literal)
        except NotFound:
            logger.debug(f"{reading.literal} not in dictionary, alternative search")
            return await self.alternative_reading_search()

        reading_type = kanji.reading_type(reading.reading)
        if reading_type is None:
            logger.debug(f"{reading.literal} has no reading {reading.reading}, alternative search")
            return await self.alternative_reading_search()

        if reading.reading.startswith('-'):
            mode = SearchMode.LEFT_VARIABLE
        else:
            mode = SearchMode.RIGHT_VARIABLE

        seq_ids = await self.store.find_readings(kanji, reading, reading_type, mode, True)

        # Do 2nd search if 1st didn't return enough
        if len(seq_ids) <= NARROW_RESULT_THRESHOLD:
            logger.debug(f"Narrow search found {len(seq_ids)}, widening")
            seq_ids = await self.store.find_readings(
                kanji, reading, reading_type, SearchMode.VARIABLE, False
            )

        if not seq_ids:
            return await self.alternative_reading_search()

        words = await self.store.load_words_by_sequence_ids(
            seq_ids,
            self.query.settings.user_lang,
            self.query.settings.show_english,
            self.query.get_part_of_speech_tags(),
        )
        SearchOrder(self.query, self.tokenizer).sort(words, order.kanji_reading_search)

        count = len(words)
        return ResultData(words=words[:PAGE_SIZE], count=count)

    async def alternative_reading_search(self) -> ResultData:
        """Search the reading as plain text, without the kanji literal."""
        reading = self.query.form
        query = self.query.model_copy(update={
            "query": literal_reading(reading.reading),
            "form": None,
        })
        return await self.word_search.search(query)
