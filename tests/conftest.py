"""
Shared fixtures: a small dictionary, an in-memory store over it and the
same data in a temporary SQLite database.
"""

import copy
from typing import List, Sequence

import pytest
import pytest_asyncio

from yomikata.db.connection import dispose, get_session_factory, init_db
from yomikata.db.models import DictReading, Kanji, Sense as SenseRow
from yomikata.db.store import SqlDictionaryStore, build_words, reading_patterns
from yomikata.dict import DictEntry
from yomikata.errors import NotFound
from yomikata.kanji import KanjiRecord
from yomikata.models import Sense

# (id, literal, kunyomi, onyomi)
KANJI = [
    (1, "食", ["く.う", "た.べる", "は.む"], ["ショク", "ジキ"]),
    (2, "日", ["ひ", "-び", "-か"], ["ニチ", "ジツ"]),
    (3, "本", ["もと"], ["ホン"]),
    (4, "語", ["かた.る", "かた.らう"], ["ゴ"]),
]

# (sequence, kanji form, kana form, priorities, jlpt level)
WORDS = [
    (1000, "食べる", "たべる", ["ichi1"], 5),
    (1001, "食う", "くう", [], None),
    (1002, "食べ物", "たべもの", ["ichi1"], 5),
    (1003, "食事", "しょくじ", ["news1"], 4),
    (1004, "食む", "はむ", [], None),
    (1005, "食", "しょく", [], 1),
    (2000, "日", "ひ", ["ichi1"], 5),
    (2001, "日本", "にほん", ["ichi1"], 5),
    (2002, "毎日", "まいにち", ["ichi1"], 5),
    (2003, "日", "にち", [], None),
    (3000, "本", "ほん", ["ichi1"], 5),
    (4000, "語る", "かたる", [], 3),
]

# (sequence, language, gloss, part of speech)
SENSES = [
    (1000, "eng", "to eat", ["v1", "vt"]),
    (1000, "ger", "essen", ["v1", "vt"]),
    (1001, "eng", "to eat (vulgar)", ["v5u", "vt"]),
    (1002, "eng", "food", ["n"]),
    (1003, "eng", "meal", ["n", "vs"]),
    (1004, "eng", "to graze", ["v5m"]),
    (1005, "eng", "food; eating", ["n"]),
    (2000, "eng", "day; sun", ["n"]),
    (2001, "eng", "Japan", ["n"]),
    (2002, "eng", "every day", ["n", "adv"]),
    (2003, "eng", "Sunday (abbr.)", ["n"]),
    (3000, "eng", "book", ["n"]),
    (4000, "eng", "to talk about", ["v5r", "vt"]),
]


def sample_kanji() -> List[KanjiRecord]:
    return [KanjiRecord(id=i, literal=lit, kunyomi=list(kun), onyomi=list(on)) for i, lit, kun, on in KANJI]


def sample_entries() -> List[DictEntry]:
    entries = []
    row_id = 1
    for seq, kanji_form, kana_form, prios, jlpt in WORDS:
        entries.append(DictEntry(row_id, seq, kanji_form, True, priorities=prios, jlpt_lvl=jlpt, is_main=True))
        entries.append(DictEntry(row_id + 1, seq, kana_form, False, priorities=prios, jlpt_lvl=jlpt, is_main=True))
        row_id += 2
    return entries


def sample_senses() -> List[Sense]:
    return [Sense(sequence=s, language=l, gloss=g, part_of_speech=p) for s, l, g, p in SENSES]


class MemoryStore:
    """DictionaryStore over in-memory lists."""

    def __init__(self, kanji: List[KanjiRecord], entries: List[DictEntry], senses: List[Sense]):
        self.kanji = {k.id: copy.deepcopy(k) for k in kanji}
        self.entries = sorted(entries, key=lambda e: e.id)
        self.senses = senses
        self.fetched_sequences: List[int] = []
        self.cleared = 0

    def _sorted_kanji(self) -> List[KanjiRecord]:
        return [copy.deepcopy(self.kanji[i]) for i in sorted(self.kanji)]

    async def find_by_literal(self, literal: str) -> KanjiRecord:
        for k in self._sorted_kanji():
            if k.literal == literal:
                return k
        raise NotFound("kanji", literal)

    async def find_by_literals(self, literals: Sequence[str]) -> List[KanjiRecord]:
        by_literal = {}
        for k in self._sorted_kanji():
            by_literal.setdefault(k.literal, k)
        return [by_literal[lit] for lit in literals if lit in by_literal]

    async def all_kanji(self) -> List[KanjiRecord]:
        return self._sorted_kanji()

    async def find_readings(self, kanji, reading, reading_type, mode, first_pass_only) -> List[int]:
        kanji_pattern, kana_pattern = reading_patterns(kanji.literal, reading.reading)
        rows = [e for e in self.entries if e.is_main or not first_pass_only]
        kanji_seqs = {e.sequence for e in rows if e.kanji and mode.matches(kanji_pattern, e.reading)}
        kana_seqs = {e.sequence for e in rows if not e.kanji and mode.matches(kana_pattern, e.reading)}
        return sorted(kanji_seqs & kana_seqs)

    async def find_kanji_form_sequences(self, literal: str) -> List[int]:
        return sorted({e.sequence for e in self.entries if e.kanji and e.reading.startswith(literal)})

    async def find_entries_by_sequence_ids(self, ids: Sequence[int]) -> List[DictEntry]:
        self.fetched_sequences.extend(ids)
        wanted = set(ids)
        return [e for e in self.entries if e.sequence in wanted]

    async def find_sequence_ids_by_text(self, text, mode) -> List[int]:
        return sorted({e.sequence for e in self.entries if mode.matches(text, e.reading)})

    async def load_words_by_sequence_ids(self, ids, language, show_english, pos_filter=None):
        languages = {language}
        if show_english:
            languages.add("eng")
        wanted = set(ids)
        entries = [e for e in self.entries if e.sequence in wanted]
        senses = [s for s in self.senses if s.sequence in wanted and s.language in languages]
        return build_words(list(ids), entries, senses, pos_filter)

    async def update_kun_links(self, kanji_id: int, dict_ids: Sequence[int]) -> None:
        self.kanji[kanji_id].kun_dicts = list(dict_ids)

    async def update_on_links(self, kanji_id: int, dict_ids: Sequence[int]) -> None:
        self.kanji[kanji_id].on_dicts = list(dict_ids)

    async def clear_all_links(self) -> None:
        self.cleared += 1
        for k in self.kanji.values():
            k.kun_dicts = []
            k.on_dicts = []

    def links(self):
        return {k.literal: (k.kun_dicts, k.on_dicts) for k in self.kanji.values()}


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore(sample_kanji(), sample_entries(), sample_senses())


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'yomikata.db'}"


async def seed(session_factory, kanji: List[KanjiRecord], entries: List[DictEntry], senses: List[Sense]):
    async with session_factory() as session:
        session.add_all([
            Kanji(id=k.id, literal=k.literal, meaning=[], stroke_count=0,
                  kunyomi=k.kunyomi, onyomi=k.onyomi)
            for k in kanji
        ])
        session.add_all([
            DictReading(id=e.id, sequence=e.sequence, reading=e.reading, kanji=e.kanji,
                        no_kanji=e.no_kanji, priorities=e.priorities, jlpt_lvl=e.jlpt_lvl,
                        is_main=e.is_main)
            for e in entries
        ])
        session.add_all([
            SenseRow(sequence=s.sequence, language=s.language, gloss=s.gloss,
                     part_of_speech=s.part_of_speech)
            for s in senses
        ])
        await session.commit()


@pytest_asyncio.fixture
async def sql_store(db_url):
    await init_db(db_url)
    session_factory = get_session_factory(db_url)
    await seed(session_factory, sample_kanji(), sample_entries(), sample_senses())
    yield SqlDictionaryStore(session_factory)
    await dispose(db_url)
