"""
Yomikata: kanji reading search core for a Japanese dictionary.

Classifies Japanese text, matches readings against dictionary entries,
links every kanji reading to example words and runs kanji reading
searches with fallback and ranking.
"""

from typing import Callable, Optional

__version__ = "0.1.0"


async def search_by_kanji_reading(store, query, tokenizer=None):
    """
    Search the words using one reading of a kanji.

    Args:
        store: A DictionaryStore.
        query: SearchQuery with a kanji reading form.
        tokenizer: Optional tokenizer for ranking.

    Returns:
        ResultData with at most one page of words and the total count.

    Example:
        >>> from yomikata.db.store import SqlDictionaryStore
        >>> from yomikata.models import SearchQuery, KanjiReading
        >>> query = SearchQuery(query="食 た.べる", form=KanjiReading.parse("食 た.べる"))
        >>> result = await search_by_kanji_reading(SqlDictionaryStore(), query)
    """
    from yomikata.search import Search

    return await Search(store, query, tokenizer=tokenizer).by_reading()


async def rebuild_reading_links(store, tokenizer=None, progress: Optional[Callable] = None):
    """
    Rebuild the kun and on reading links of all kanji.

    Must not run concurrently with another rebuild.

    Returns:
        LinkStats with the number of kanji that received links.
    """
    from yomikata.gen_readings import ReadingLinkBuilder

    return await ReadingLinkBuilder(store, tokenizer=tokenizer, progress=progress).update_links()
