"""
Reading link generation for Yomikata.

For every kanji, find the dictionary words that best exemplify each of
its kun and on readings and store their sequence ids on the kanji
(``kun_dicts`` / ``on_dicts``). This is a batch maintenance job: links
are cleared and rebuilt from scratch, so running it twice over the same
dictionary yields the same links.

Usage:
    from yomikata.gen_readings import ReadingLinkBuilder

    stats = await ReadingLinkBuilder(store).update_links()
"""

import asyncio
import logging
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Callable, Dict, List, Optional, Sequence

from yomikata.characters import as_hiragana
from yomikata.db.store import DictionaryStore
from yomikata.dict import DictEntry, group_by_sequence, split_forms
from yomikata.kanji import KanjiRecord, ReadingType, format_reading, reading_length
from yomikata.matching import SearchMode, select_mode
from yomikata.models import KanjiReading
from yomikata.settings import KUN_LINK_LIMIT, KUN_UPDATE_BATCH, ON_BATCH_SIZE, ON_LINK_LIMIT
from yomikata.tokenizer import Tokenizer

logger = logging.getLogger(__name__)

# Dictionary rows per sequence id, shared by all kanji of one rebuild
DictCache = Dict[int, List[DictEntry]]

ProgressCallback = Callable[[str, int, int], None]


@dataclass
class Candidate:
    """A word exemplifying a reading: its kanji form and kana form rows."""
    kanji: DictEntry
    kana: DictEntry

    @property
    def sequence(self) -> int:
        return self.kanji.sequence


@dataclass
class LinkStats:
    kun_linked: int = 0
    on_linked: int = 0


# ============================================================================
# Candidate Ordering
# ============================================================================

@dataclass
class RankContext:
    # Readings of the kanji without notation, in declared order
    readings: List[str]
    tokenizer: Optional[Tokenizer] = None


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def by_own_reading(a: Candidate, b: Candidate, ctx: RankContext) -> int:
    """Words read exactly like a declared reading first, in declared order."""
    # Compares with the whole reading, okurigana included, not only its stem
    a_own = a.kana.reading in ctx.readings
    b_own = b.kana.reading in ctx.readings
    if a_own and b_own:
        return _cmp(ctx.readings.index(a.kana.reading), ctx.readings.index(b.kana.reading))
    return _cmp(b_own, a_own)


def _arity_rank(tokens: int) -> int:
    if tokens == 1:
        return 0
    if tokens > 1:
        return 1
    return 2


def by_token_count(a: Candidate, b: Candidate, ctx: RankContext) -> int:
    """One morpheme beats several, several beat none."""
    if ctx.tokenizer is None:
        return 0
    a_rank = _arity_rank(len(ctx.tokenizer.tokenize(a.kanji.reading)))
    b_rank = _arity_rank(len(ctx.tokenizer.tokenize(b.kanji.reading)))
    return _cmp(a_rank, b_rank)


def by_priority(a: Candidate, b: Candidate, ctx: RankContext) -> int:
    """Words with any priority marker first."""
    return _cmp(b.kanji.has_priority(), a.kanji.has_priority())


def by_jlpt(a: Candidate, b: Candidate, ctx: RankContext) -> int:
    """Words with a JLPT level first, more basic levels (N5) before N1."""
    a_lvl = a.kanji.jlpt_lvl
    b_lvl = b.kanji.jlpt_lvl
    if a_lvl is None or b_lvl is None:
        return _cmp(a_lvl is None, b_lvl is None)
    return _cmp(b_lvl, a_lvl)


LinkCriterion = Callable[[Candidate, Candidate, RankContext], int]

# First decisive criterion wins
DEFAULT_LINK_ORDER: Sequence[LinkCriterion] = (
    by_own_reading,
    by_token_count,
    by_priority,
    by_jlpt,
)


def rank_candidates(
    candidates: List[Candidate],
    ctx: RankContext,
    limit: int,
    criteria: Sequence[LinkCriterion] = DEFAULT_LINK_ORDER,
) -> List[Candidate]:
    """
    Order and truncate candidates if there are more than ``limit``.

    Lists within the limit are returned unchanged. Sorting is stable, so
    candidates no criterion separates keep their relative order.
    """
    if len(candidates) <= limit:
        return candidates

    def compare(a: Candidate, b: Candidate) -> int:
        for criterion in criteria:
            result = criterion(a, b, ctx)
            if result:
                return result
        return 0

    return sorted(candidates, key=cmp_to_key(compare))[:limit]


# ============================================================================
# Matching
# ============================================================================

def matches_kanji(literal: str, kun: str, kana_reading: str, kanji_reading: str) -> bool:
    """
    Check if a word's kana reading fits a kun reading of ``literal``.

    Args:
        literal: The kanji.
        kun: Declared kun reading, e.g. 'た.べる'.
        kana_reading: Kana form of the word.
        kanji_reading: Kanji form of the word.
    """
    mode = select_mode(kun, kanji_reading, literal)
    return mode.matches(format_reading(kun), kana_reading)


# ============================================================================
# Builder
# ============================================================================

class ReadingLinkBuilder:
    """
    Rebuilds reading links for all kanji.

    Only one rebuild may run at a time. Each call to ``update_links``
    owns its dictionary cache.
    """

    def __init__(
        self,
        store: DictionaryStore,
        tokenizer: Optional[Tokenizer] = None,
        criteria: Sequence[LinkCriterion] = DEFAULT_LINK_ORDER,
        progress: Optional[ProgressCallback] = None,
    ):
        self.store = store
        self.tokenizer = tokenizer
        self.criteria = criteria
        self.progress = progress

    def _report(self, stage: str, done: int, total: int) -> None:
        if self.progress is not None:
            self.progress(stage, done, total)

    async def update_links(self) -> LinkStats:
        """Clear all links, then regenerate kun and on links."""
        await self.store.clear_all_links()

        all_kanji = await self.store.all_kanji()
        cache: DictCache = {}
        stats = LinkStats()

        stats.kun_linked = await self._update_kun_links(all_kanji, cache)
        stats.on_linked = await self._update_on_links(all_kanji, cache)

        logger.info(
            f"Reading links rebuilt: {stats.kun_linked} kanji with kun links, "
            f"{stats.on_linked} with on links"
        )
        return stats

    async def _update_kun_links(self, all_kanji: List[KanjiRecord], cache: DictCache) -> int:
        with_kun = [k for k in all_kanji if k.kunyomi]
        links = []
        for pos, k in enumerate(with_kun):
            dict_ids = await self.find_kun_readings(k.literal, k.kunyomi, cache)
            if dict_ids:
                links.append((k.id, dict_ids))
            self._report("kun", pos + 1, len(with_kun))
            if pos % 500 == 0:
                logger.info(f"Generating kun readings... {pos * 100 // len(with_kun)}%")

        for start in range(0, len(links), KUN_UPDATE_BATCH):
            batch = links[start:start + KUN_UPDATE_BATCH]
            logger.info(f"Inserting kun readings: {start}/{len(links)}")
            await asyncio.gather(*(self.store.update_kun_links(k_id, ids) for k_id, ids in batch))
        return len(links)

    async def _update_on_links(self, all_kanji: List[KanjiRecord], cache: DictCache) -> int:
        with_on = [k for k in all_kanji if k.onyomi]
        linked = 0
        for start in range(0, len(with_on), ON_BATCH_SIZE):
            batch = with_on[start:start + ON_BATCH_SIZE]
            logger.info(f"Updating on readings: {start}/{len(with_on)}")
            results = await asyncio.gather(*(self.update_on_readings(k, cache) for k in batch))
            linked += sum(1 for r in results if r)
            self._report("on", start + len(batch), len(with_on))
        return linked

    async def _resolve(self, seq_ids: Sequence[int], cache: DictCache) -> List[List[DictEntry]]:
        """Rows per sequence, fetching only sequences not cached yet."""
        missing = [seq for seq in seq_ids if seq not in cache]
        if missing:
            fetched = group_by_sequence(await self.store.find_entries_by_sequence_ids(missing))
            for seq in missing:
                cache[seq] = fetched.get(seq, [])
        return [cache[seq] for seq in seq_ids]

    async def find_kun_readings(
        self,
        literal: str,
        kun_readings: List[str],
        cache: DictCache,
    ) -> List[int]:
        """
        Sequence ids of the words exemplifying a kanji's kun readings.

        Args:
            literal: The kanji.
            kun_readings: Its declared kun readings.
            cache: Rows per sequence for this rebuild.

        Returns:
            At most KUN_LINK_LIMIT sequence ids.
        """
        seq_ids = await self.store.find_kanji_form_sequences(literal)
        groups = await self._resolve(seq_ids, cache)

        candidates = []
        for rows in groups:
            kanji_row, kana_row = split_forms(rows)
            if kanji_row is None or kana_row is None:
                continue
            for kun in kun_readings:
                if (matches_kanji(literal, kun, kana_row.reading, kanji_row.reading)
                        and reading_length(kun) <= len(kana_row.reading)):
                    candidates.append(Candidate(kanji_row, kana_row))
                    break

        ctx = RankContext([format_reading(k) for k in kun_readings], self.tokenizer)
        candidates = rank_candidates(candidates, ctx, KUN_LINK_LIMIT, self.criteria)
        return [c.sequence for c in candidates]

    async def find_on_readings(self, kanji: KanjiRecord, cache: DictCache) -> List[int]:
        """
        Sequence ids of the words exemplifying a kanji's on readings.

        Only exact matches count. Returns at most ON_LINK_LIMIT ids.
        """
        found = await asyncio.gather(*(
            self.store.find_readings(
                kanji,
                KanjiReading(literal=kanji.literal, reading=on),
                ReadingType.ONYOMI,
                SearchMode.EXACT,
                True,
            )
            for on in kanji.onyomi
        ))

        seq_ids = []
        for ids in found:
            for seq in ids:
                if seq not in seq_ids:
                    seq_ids.append(seq)

        if len(seq_ids) <= ON_LINK_LIMIT:
            return seq_ids

        candidates = []
        for rows in await self._resolve(seq_ids, cache):
            kanji_row, kana_row = split_forms(rows)
            if kanji_row is not None and kana_row is not None:
                candidates.append(Candidate(kanji_row, kana_row))

        ctx = RankContext([as_hiragana(on) for on in kanji.onyomi], self.tokenizer)
        candidates = rank_candidates(candidates, ctx, ON_LINK_LIMIT, self.criteria)
        return [c.sequence for c in candidates]

    async def update_on_readings(self, kanji: KanjiRecord, cache: DictCache) -> bool:
        """Find and store on links for one kanji. Returns True if any were stored."""
        dict_ids = await self.find_on_readings(kanji, cache)
        if not dict_ids:
            return False
        await self.store.update_on_links(kanji.id, dict_ids)
        return True
