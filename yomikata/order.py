"""
Result ordering for Yomikata searches.

An order function scores one word for a query; ``SearchOrder`` sorts
words by descending score, keeping the store order on ties.
"""

from typing import Callable, List, Optional

from yomikata.characters import as_hiragana
from yomikata.kanji import format_reading
from yomikata.models import SearchQuery, WordRecord
from yomikata.tokenizer import Tokenizer

OrderFn = Callable[[WordRecord, SearchQuery, Optional[Tokenizer]], int]


class SearchOrder:
    """Ranks result lists for one query."""

    def __init__(self, query: SearchQuery, tokenizer: Optional[Tokenizer] = None):
        self.query = query
        self.tokenizer = tokenizer

    def sort(self, words: List[WordRecord], order_fn: OrderFn) -> None:
        """Sort ``words`` in place, best first."""
        words.sort(key=lambda w: order_fn(w, self.query, self.tokenizer), reverse=True)


def _common_score(word: WordRecord) -> int:
    score = 0
    if word.priorities:
        score += 10
    if word.jlpt_lvl is not None:
        # N5 words are the most basic
        score += word.jlpt_lvl
    return score


def kanji_reading_search(word: WordRecord, query: SearchQuery, tokenizer: Optional[Tokenizer] = None) -> int:
    """Score a word found for a kanji reading query."""
    score = _common_score(word)
    form = query.form
    if form is None:
        return score

    if word.kanji is not None:
        if word.kanji.reading.startswith(form.literal):
            score += 20
        elif form.literal in word.kanji.reading:
            score += 5
        if tokenizer is not None and len(tokenizer.tokenize(word.kanji.reading)) == 1:
            score += 3

    reading = as_hiragana(format_reading(form.reading))
    kana = as_hiragana(word.kana.reading)
    if kana == reading:
        score += 15
    elif kana.startswith(reading):
        score += 5
    return score


def word_search(word: WordRecord, query: SearchQuery, tokenizer: Optional[Tokenizer] = None) -> int:
    """Score a word found for a plain text query."""
    score = _common_score(word)
    text = query.query
    readings = [word.kana.reading]
    if word.kanji is not None:
        readings.append(word.kanji.reading)

    if text in readings:
        score += 30
    elif any(r.startswith(text) for r in readings):
        score += 10
    # Prefer short words among prefix matches
    score -= min(len(r) for r in readings) - len(text)
    return score
