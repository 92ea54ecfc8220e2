"""
Command line interface for yomikata.

Usage:
    python -m yomikata.cli 食 た.べる            # search words by kanji reading
    python -m yomikata.cli --json 食 た.べる     # result as JSON
    python -m yomikata.cli init-db               # create the schema
    python -m yomikata.cli rebuild-links         # regenerate reading links
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from yomikata import __version__, rebuild_reading_links, search_by_kanji_reading
from yomikata.db.connection import dispose, get_db_url, get_session_factory, init_db
from yomikata.db.store import SqlDictionaryStore
from yomikata.errors import YomikataError
from yomikata.models import KanjiReading, ResultData, SearchQuery, UserSettings
from yomikata.settings import DEBUG, DEFAULT_LANGUAGE, ensure_data_dirs
from yomikata.tokenizer import load_tokenizer


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if (verbose or DEBUG) else logging.INFO
    logging.basicConfig(level=level, format='%(asctime)s - %(levelname)s - %(message)s')


def format_result_text(result: ResultData) -> str:
    """Format a search result as text."""
    lines = []
    for word in result.words:
        if word.kanji is not None:
            head = f"* {word.kanji.reading} 【{word.kana.reading}】"
        else:
            head = f"* {word.kana.reading}"
        lines.append(head)
        for i, sense in enumerate(word.senses, 1):
            pos = f"[{','.join(sense.part_of_speech)}] " if sense.part_of_speech else ""
            lines.append(f"  {i}. {pos}{sense.gloss}")
    lines.append(f"({len(result.words)} of {result.count})")
    return '\n'.join(lines)


async def _search(db_url: str, query: SearchQuery) -> ResultData:
    store = SqlDictionaryStore(get_session_factory(db_url))
    try:
        return await search_by_kanji_reading(store, query, tokenizer=load_tokenizer())
    finally:
        await dispose(db_url)


async def _rebuild(db_url: str):
    store = SqlDictionaryStore(get_session_factory(db_url))
    try:
        return await rebuild_reading_links(store, tokenizer=load_tokenizer())
    finally:
        await dispose(db_url)


async def _init_db(db_url: str) -> None:
    try:
        await init_db(db_url)
    finally:
        await dispose(db_url)


def main_init_db(args: list) -> int:
    """CLI entry point for init-db subcommand."""
    parser = argparse.ArgumentParser(
        description='Create the yomikata database schema',
        prog='yomikata init-db',
    )
    parser.add_argument('-d', '--database', metavar='URL', help='SQLAlchemy database URL')
    parsed = parser.parse_args(args)

    setup_logging()
    db_url = parsed.database or get_db_url()
    if parsed.database is None:
        ensure_data_dirs()
    try:
        asyncio.run(_init_db(db_url))
    except YomikataError as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1
    return 0


def main_rebuild_links(args: list) -> int:
    """CLI entry point for rebuild-links subcommand."""
    parser = argparse.ArgumentParser(
        description='Regenerate the kun/on reading links of all kanji',
        prog='yomikata rebuild-links',
    )
    parser.add_argument('-d', '--database', metavar='URL', help='SQLAlchemy database URL')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    parsed = parser.parse_args(args)

    setup_logging(parsed.verbose)
    db_url = parsed.database or get_db_url()
    try:
        stats = asyncio.run(_rebuild(db_url))
    except YomikataError as e:
        print(f'Error rebuilding links: {e}', file=sys.stderr)
        return 1

    print(f"Kun links: {stats.kun_linked} kanji")
    print(f"On links:  {stats.on_linked} kanji")
    return 0


def main(args: Optional[list] = None) -> int:
    """Main CLI entry point."""
    args_list = args if args is not None else sys.argv[1:]

    if args_list and args_list[0] == 'init-db':
        return main_init_db(args_list[1:])
    if args_list and args_list[0] == 'rebuild-links':
        return main_rebuild_links(args_list[1:])

    parser = argparse.ArgumentParser(
        description='Search Japanese words by kanji reading',
        prog='yomikata',
        epilog='Subcommands:\n  yomikata init-db        Create the database schema\n  yomikata rebuild-links  Regenerate reading links',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('query', nargs='*', help='Kanji and reading, e.g. 食 た.べる')
    parser.add_argument('-j', '--json', action='store_true', help='Print the result as JSON')
    parser.add_argument('-l', '--lang', default=DEFAULT_LANGUAGE, metavar='LANG',
                        help=f'Sense language (default: {DEFAULT_LANGUAGE})')
    parser.add_argument('--no-english', action='store_true', help="Don't add English senses")
    parser.add_argument('-p', '--pos', action='append', default=[], metavar='TAG',
                        help='Only words with this part of speech (repeatable)')
    parser.add_argument('-d', '--database', metavar='URL', help='SQLAlchemy database URL')
    parser.add_argument('-V', '--version', action='store_true', help='Show version information')

    parsed = parser.parse_args(args_list)

    if parsed.version:
        print(f'yomikata {__version__}')
        return 0

    text = ' '.join(parsed.query)
    if not text:
        parser.print_help()
        return 1

    try:
        query = SearchQuery(
            query=text,
            form=KanjiReading.parse(text),
            settings=UserSettings(user_lang=parsed.lang, show_english=not parsed.no_english),
            part_of_speech=parsed.pos,
        )
        result = asyncio.run(_search(parsed.database or get_db_url(), query))
    except YomikataError as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1

    if parsed.json:
        print(json.dumps(result.model_dump(mode='json'), ensure_ascii=False, indent=2))
    else:
        print(format_result_text(result))
    return 0


if __name__ == '__main__':
    sys.exit(main())
