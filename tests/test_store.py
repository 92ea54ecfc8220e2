"""
Tests for the SQL dictionary store against a temporary SQLite database.
"""

import pytest

from conftest import sample_senses
from yomikata import rebuild_reading_links, search_by_kanji_reading
from yomikata.db.connection import dispose, get_session_factory
from yomikata.db.store import SqlDictionaryStore, build_words, reading_patterns
from yomikata.dict import DictEntry
from yomikata.errors import NotFound, StorageError
from yomikata.kanji import ReadingType
from yomikata.matching import SearchMode
from yomikata.models import KanjiReading, SearchQuery


class TestReadingPatterns:

    def test_kun(self):
        assert reading_patterns("食", "た.べる") == ("食べる", "たべる")

    def test_on_is_hiragana(self):
        assert reading_patterns("日", "ニチ") == ("日", "にち")

    def test_suffix(self):
        assert reading_patterns("日", "-び") == ("日", "び")


class TestKanjiLookups:

    @pytest.mark.asyncio
    async def test_find_by_literal(self, sql_store):
        kanji = await sql_store.find_by_literal("食")
        assert kanji.id == 1
        assert kanji.kunyomi == ["く.う", "た.べる", "は.む"]
        assert kanji.kun_dicts == []

    @pytest.mark.asyncio
    async def test_not_found(self, sql_store):
        with pytest.raises(NotFound):
            await sql_store.find_by_literal("鬱")

    @pytest.mark.asyncio
    async def test_find_by_literals_keeps_order(self, sql_store):
        found = await sql_store.find_by_literals(["語", "人", "日"])
        assert [k.literal for k in found] == ["語", "日"]
        assert await sql_store.find_by_literals([]) == []

    @pytest.mark.asyncio
    async def test_all_kanji(self, sql_store):
        assert [k.literal for k in await sql_store.all_kanji()] == ["食", "日", "本", "語"]


class TestDictionaryLookups:

    async def _readings(self, store, literal, reading, mode, first_pass_only=True):
        kanji = await store.find_by_literal(literal)
        form = KanjiReading(literal=literal, reading=reading)
        return await store.find_readings(kanji, form, kanji.reading_type(reading), mode, first_pass_only)

    @pytest.mark.asyncio
    async def test_find_readings_exact(self, sql_store):
        assert await self._readings(sql_store, "日", "ニチ", SearchMode.EXACT) == [2003]
        assert await self._readings(sql_store, "本", "ホン", SearchMode.EXACT) == [3000]

    @pytest.mark.asyncio
    async def test_find_readings_right_variable(self, sql_store):
        assert await self._readings(sql_store, "食", "た.べる", SearchMode.RIGHT_VARIABLE) == [1000]

    @pytest.mark.asyncio
    async def test_find_readings_variable(self, sql_store):
        assert await self._readings(sql_store, "日", "ニチ", SearchMode.VARIABLE, False) == [2002, 2003]

    @pytest.mark.asyncio
    async def test_find_kanji_form_sequences(self, sql_store):
        assert await sql_store.find_kanji_form_sequences("日") == [2000, 2001, 2003]

    @pytest.mark.asyncio
    async def test_find_entries(self, sql_store):
        rows = await sql_store.find_entries_by_sequence_ids([2001, 9999])
        assert [(r.reading, r.kanji) for r in rows] == [("日本", True), ("にほん", False)]
        assert await sql_store.find_entries_by_sequence_ids([]) == []

    @pytest.mark.asyncio
    async def test_find_sequence_ids_by_text(self, sql_store):
        assert await sql_store.find_sequence_ids_by_text("日", SearchMode.EXACT) == [2000, 2003]
        assert await sql_store.find_sequence_ids_by_text("日", SearchMode.LEFT_VARIABLE) == [2000, 2002, 2003]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["_", "%", "%%", "\\"])
    async def test_wildcards_are_literal(self, sql_store, text):
        for mode in SearchMode:
            assert await sql_store.find_sequence_ids_by_text(text, mode) == []
        assert await sql_store.find_kanji_form_sequences(text) == []

    @pytest.mark.asyncio
    async def test_underscore_in_reading_pattern(self, sql_store):
        kanji = await sql_store.find_by_literal("日")
        form = KanjiReading(literal="日", reading="_")
        assert await sql_store.find_readings(kanji, form, ReadingType.KUNYOMI, SearchMode.VARIABLE, False) == []


class TestLoadWords:

    @pytest.mark.asyncio
    async def test_keeps_id_order(self, sql_store):
        words = await sql_store.load_words_by_sequence_ids([3000, 1000, 3000], "eng", True)
        assert [w.sequence for w in words] == [3000, 1000]
        assert words[1].kanji.reading == "食べる"
        assert words[1].kana.reading == "たべる"

    @pytest.mark.asyncio
    async def test_languages(self, sql_store):
        both = await sql_store.load_words_by_sequence_ids([1000], "ger", True)
        assert sorted(s.language for s in both[0].senses) == ["eng", "ger"]

        german = await sql_store.load_words_by_sequence_ids([1000], "ger", False)
        assert [s.gloss for s in german[0].senses] == ["essen"]

    @pytest.mark.asyncio
    async def test_words_without_senses_dropped(self, sql_store):
        assert await sql_store.load_words_by_sequence_ids([3000], "fre", False) == []

    @pytest.mark.asyncio
    async def test_pos_filter(self, sql_store):
        words = await sql_store.load_words_by_sequence_ids([1000, 1002, 1003], "eng", True, ["n"])
        assert [w.sequence for w in words] == [1002, 1003]


class TestBuildWords:

    def test_kana_only_word(self):
        entries = [DictEntry(1, 3000, "ほん", False)]
        words = build_words([3000], entries, sample_senses())
        assert words[0].kanji is None
        assert words[0].get_reading().reading == "ほん"

    def test_missing_kana_row(self):
        entries = [DictEntry(1, 3000, "本", True)]
        assert build_words([3000], entries, sample_senses()) == []


class TestLinks:

    @pytest.mark.asyncio
    async def test_rebuild(self, sql_store):
        stats = await rebuild_reading_links(sql_store)
        links = {k.literal: (k.kun_dicts, k.on_dicts) for k in await sql_store.all_kanji()}

        assert links == {
            "食": ([1000, 1001, 1004], [1005]),
            "日": ([2000], [2003]),
            "本": ([], [3000]),
            "語": ([4000], []),
        }
        assert (stats.kun_linked, stats.on_linked) == (3, 3)

    @pytest.mark.asyncio
    async def test_rebuild_twice(self, sql_store):
        await rebuild_reading_links(sql_store)
        first = [(k.kun_dicts, k.on_dicts) for k in await sql_store.all_kanji()]
        await rebuild_reading_links(sql_store)
        second = [(k.kun_dicts, k.on_dicts) for k in await sql_store.all_kanji()]
        assert first == second

    @pytest.mark.asyncio
    async def test_clear(self, sql_store):
        await sql_store.update_kun_links(3, [3000])
        assert (await sql_store.find_by_literal("本")).kun_dicts == [3000]

        await sql_store.clear_all_links()
        assert all(not k.kun_dicts and not k.on_dicts for k in await sql_store.all_kanji())


class TestSqlSearch:

    @pytest.mark.asyncio
    async def test_search(self, sql_store):
        query = SearchQuery(query="日 ニチ", form=KanjiReading.parse("日 ニチ"))
        result = await search_by_kanji_reading(sql_store, query)
        assert [w.sequence for w in result.words] == [2003, 2002]
        assert result.count == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["本 %", "本 _"])
    async def test_wildcard_reading_finds_nothing(self, sql_store, text):
        query = SearchQuery(query=text, form=KanjiReading.parse(text))
        result = await search_by_kanji_reading(sql_store, query)
        assert result.words == []
        assert result.count == 0

    @pytest.mark.asyncio
    async def test_missing_schema_is_storage_error(self, tmp_path):
        db_url = f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}"
        store = SqlDictionaryStore(get_session_factory(db_url))
        try:
            with pytest.raises(StorageError):
                await store.find_by_literal("食")
        finally:
            await dispose(db_url)

