"""
Dictionary store for Yomikata.

``DictionaryStore`` is the contract the search and link building code
depends on. ``SqlDictionaryStore`` implements it over SQLAlchemy's
asyncio extension. SQLAlchemy failures leave the store as StorageError.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from sqlalchemy import and_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import aliased

from yomikata.characters import as_hiragana
from yomikata.db.connection import get_session_factory
from yomikata.db.models import DictReading, Kanji, Sense
from yomikata.dict import DictEntry, group_by_sequence, split_forms
from yomikata.errors import NotFound, StorageError
from yomikata.kanji import KanjiRecord, ReadingType, kanji_form, literal_reading, okurigana
from yomikata.matching import LIKE_ESCAPE, SearchMode
from yomikata.models import KanjiReading, WordRecord

logger = logging.getLogger(__name__)

# Bound parameters per IN (...) clause
_IN_CHUNK = 500

ENGLISH = "eng"


class DictionaryStore(Protocol):
    async def find_by_literal(self, literal: str) -> KanjiRecord:
        ...

    async def find_by_literals(self, literals: Sequence[str]) -> List[KanjiRecord]:
        ...

    async def all_kanji(self) -> List[KanjiRecord]:
        ...

    async def find_readings(
        self,
        kanji: KanjiRecord,
        reading: KanjiReading,
        reading_type: ReadingType,
        mode: SearchMode,
        first_pass_only: bool,
    ) -> List[int]:
        ...

    async def find_kanji_form_sequences(self, literal: str) -> List[int]:
        ...

    async def find_entries_by_sequence_ids(self, ids: Sequence[int]) -> List[DictEntry]:
        ...

    async def find_sequence_ids_by_text(self, text: str, mode: SearchMode) -> List[int]:
        ...

    async def load_words_by_sequence_ids(
        self,
        ids: Sequence[int],
        language: str,
        show_english: bool,
        pos_filter: Optional[Sequence[str]] = None,
    ) -> List[WordRecord]:
        ...

    async def update_kun_links(self, kanji_id: int, dict_ids: Sequence[int]) -> None:
        ...

    async def update_on_links(self, kanji_id: int, dict_ids: Sequence[int]) -> None:
        ...

    async def clear_all_links(self) -> None:
        ...


def reading_patterns(literal: str, reading: str) -> tuple:
    """
    The kanji form and kana form a word using ``reading`` contains.

    >>> reading_patterns("食", "た.べる")
    ('食べる', 'たべる')
    """
    return kanji_form(literal, reading), as_hiragana(literal_reading(reading)) + okurigana(reading)


def _chunks(ids: Sequence[int], size: int = _IN_CHUNK) -> Iterable[Sequence[int]]:
    for i in range(0, len(ids), size):
        yield ids[i:i + size]


def build_words(
    ids: Sequence[int],
    entries: Iterable[DictEntry],
    senses: Iterable,
    pos_filter: Optional[Sequence[str]] = None,
) -> List[WordRecord]:
    """
    Assemble word records in the order of ``ids``.

    Words without a kana row, or without any sense once the POS filter
    is applied, are dropped.
    """
    groups = group_by_sequence(entries)
    senses_by_seq: Dict[int, list] = {}
    for sense in senses:
        senses_by_seq.setdefault(sense.sequence, []).append(sense)

    words = []
    seen = set()
    for seq in ids:
        if seq in seen or seq not in groups:
            continue
        seen.add(seq)

        kanji_row, kana_row = split_forms(groups[seq])
        if kana_row is None:
            continue

        word_senses = senses_by_seq.get(seq, [])
        if pos_filter:
            word_senses = [s for s in word_senses if any(p in pos_filter for p in s.part_of_speech)]
        if not word_senses:
            continue

        words.append(WordRecord(sequence=seq, kana=kana_row, kanji=kanji_row, senses=word_senses))
    return words


class SqlDictionaryStore:
    """DictionaryStore backed by a relational database."""

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        if session_factory is None:
            session_factory = get_session_factory()
        self.session_factory = session_factory

    @asynccontextmanager
    async def _session(self):
        try:
            async with self.session_factory() as session:
                yield session
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    # ------------------------------------------------------------------
    # Kanji
    # ------------------------------------------------------------------

    async def find_by_literal(self, literal: str) -> KanjiRecord:
        async with self._session() as session:
            row = (await session.execute(
                select(Kanji).where(Kanji.literal == literal).order_by(Kanji.id).limit(1)
            )).scalar_one_or_none()
        if row is None:
            raise NotFound("kanji", literal)
        return row.to_record()

    async def find_by_literals(self, literals: Sequence[str]) -> List[KanjiRecord]:
        if not literals:
            return []
        async with self._session() as session:
            rows = (await session.execute(
                select(Kanji).where(Kanji.literal.in_(set(literals))).order_by(Kanji.id)
            )).scalars().all()
        by_literal = {}
        for row in rows:
            by_literal.setdefault(row.literal, row.to_record())
        return [by_literal[lit] for lit in literals if lit in by_literal]

    async def all_kanji(self) -> List[KanjiRecord]:
        async with self._session() as session:
            rows = (await session.execute(select(Kanji).order_by(Kanji.id))).scalars().all()
        return [row.to_record() for row in rows]

    # ------------------------------------------------------------------
    # Dictionary lookups
    # ------------------------------------------------------------------

    async def find_readings(
        self,
        kanji: KanjiRecord,
        reading: KanjiReading,
        reading_type: ReadingType,
        mode: SearchMode,
        first_pass_only: bool,
    ) -> List[int]:
        """
        Sequence ids of words using ``reading`` of ``kanji``.

        A word qualifies if one of its kanji rows contains the literal
        (plus okurigana) and one of its kana rows contains the reading,
        both positioned as ``mode`` requires. With ``first_pass_only``
        only main rows are considered.
        """
        kanji_pattern, kana_pattern = reading_patterns(kanji.literal, reading.reading)
        kanji_row = aliased(DictReading)
        kana_row = aliased(DictReading)

        conditions = [
            kanji_row.kanji.is_(True),
            kanji_row.reading.like(mode.like_pattern(kanji_pattern), escape=LIKE_ESCAPE),
            kana_row.kanji.is_(False),
            kana_row.reading.like(mode.like_pattern(kana_pattern), escape=LIKE_ESCAPE),
        ]
        if first_pass_only:
            conditions += [kanji_row.is_main.is_(True), kana_row.is_main.is_(True)]

        stmt = (
            select(kanji_row.sequence)
            .join(kana_row, kana_row.sequence == kanji_row.sequence)
            .where(and_(*conditions))
            .distinct()
            .order_by(kanji_row.sequence)
        )
        async with self._session() as session:
            seq_ids = list((await session.execute(stmt)).scalars().all())

        logger.debug(
            f"find_readings {kanji.literal} {reading.reading} ({reading_type.value}, "
            f"{mode.value}, first_pass={first_pass_only}): {len(seq_ids)}"
        )
        return seq_ids

    async def find_kanji_form_sequences(self, literal: str) -> List[int]:
        """Sequences having a kanji form that starts with ``literal``."""
        stmt = (
            select(DictReading.sequence)
            .where(and_(
                DictReading.kanji.is_(True),
                DictReading.reading.like(SearchMode.RIGHT_VARIABLE.like_pattern(literal), escape=LIKE_ESCAPE),
            ))
            .distinct()
            .order_by(DictReading.sequence)
        )
        async with self._session() as session:
            return list((await session.execute(stmt)).scalars().all())

    async def find_entries_by_sequence_ids(self, ids: Sequence[int]) -> List[DictEntry]:
        """All rows of the given sequences, ordered by row id."""
        ids = list(ids)
        if not ids:
            return []
        rows = []
        async with self._session() as session:
            for chunk in _chunks(ids):
                rows += (await session.execute(
                    select(DictReading).where(DictReading.sequence.in_(chunk))
                )).scalars().all()
        rows.sort(key=lambda r: r.id)
        return [row.to_entry() for row in rows]

    async def find_sequence_ids_by_text(self, text: str, mode: SearchMode) -> List[int]:
        stmt = (
            select(DictReading.sequence)
            .where(DictReading.reading.like(mode.like_pattern(text), escape=LIKE_ESCAPE))
            .distinct()
            .order_by(DictReading.sequence)
        )
        async with self._session() as session:
            return list((await session.execute(stmt)).scalars().all())

    async def _load_senses(self, ids: List[int], languages: List[str]) -> list:
        senses = []
        async with self._session() as session:
            for chunk in _chunks(ids):
                senses += (await session.execute(
                    select(Sense)
                    .where(and_(Sense.sequence.in_(chunk), Sense.language.in_(languages)))
                    .order_by(Sense.id)
                )).scalars().all()
        return [s.to_model() for s in senses]

    async def load_words_by_sequence_ids(
        self,
        ids: Sequence[int],
        language: str,
        show_english: bool,
        pos_filter: Optional[Sequence[str]] = None,
    ) -> List[WordRecord]:
        """
        Load full word records, keeping the order of ``ids``.

        Args:
            ids: Sequence ids to load.
            language: User language for senses.
            show_english: Also include English senses.
            pos_filter: If given, keep only senses with one of these POS tags.
        """
        ids = list(ids)
        if not ids:
            return []
        languages = [language]
        if show_english and language != ENGLISH:
            languages.append(ENGLISH)

        entries, senses = await asyncio.gather(
            self.find_entries_by_sequence_ids(ids),
            self._load_senses(ids, languages),
        )
        return build_words(ids, entries, senses, pos_filter)

    # ------------------------------------------------------------------
    # Link maintenance
    # ------------------------------------------------------------------

    async def _update_kanji(self, kanji_id: int, **values) -> None:
        async with self._session() as session:
            await session.execute(update(Kanji).where(Kanji.id == kanji_id).values(**values))
            await session.commit()

    async def update_kun_links(self, kanji_id: int, dict_ids: Sequence[int]) -> None:
        await self._update_kanji(kanji_id, kun_dicts=list(dict_ids))

    async def update_on_links(self, kanji_id: int, dict_ids: Sequence[int]) -> None:
        await self._update_kanji(kanji_id, on_dicts=list(dict_ids))

    async def clear_all_links(self) -> None:
        async with self._session() as session:
            await session.execute(update(Kanji).values(kun_dicts=None, on_dicts=None))
            await session.commit()
