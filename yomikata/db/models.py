"""
SQLAlchemy ORM models for the Yomikata database.

List valued columns (readings, priorities, link lists) are stored as JSON
so that the schema works on both SQLite and PostgreSQL.
"""

from typing import List, Optional

from sqlalchemy import JSON, Boolean, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from yomikata.dict import DictEntry
from yomikata.kanji import KanjiRecord
from yomikata.models import Sense as SenseModel


class Base(DeclarativeBase):
    pass


class Kanji(Base):
    __tablename__ = "kanji"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    literal: Mapped[str] = mapped_column(String(1), nullable=False, index=True)
    meaning: Mapped[List[str]] = mapped_column(JSON, default=list)
    grade: Mapped[Optional[int]] = mapped_column(Integer)
    stroke_count: Mapped[int] = mapped_column(Integer, default=0)
    frequency: Mapped[Optional[int]] = mapped_column(Integer)
    jlpt: Mapped[Optional[int]] = mapped_column(Integer)
    onyomi: Mapped[Optional[List[str]]] = mapped_column(JSON)
    kunyomi: Mapped[Optional[List[str]]] = mapped_column(JSON)
    kun_dicts: Mapped[Optional[List[int]]] = mapped_column(JSON)
    on_dicts: Mapped[Optional[List[int]]] = mapped_column(JSON)

    def to_record(self) -> KanjiRecord:
        return KanjiRecord(
            id=self.id,
            literal=self.literal,
            kunyomi=list(self.kunyomi or []),
            onyomi=list(self.onyomi or []),
            kun_dicts=list(self.kun_dicts or []),
            on_dicts=list(self.on_dicts or []),
            meanings=list(self.meaning or []),
            grade=self.grade,
            stroke_count=self.stroke_count,
            frequency=self.frequency,
            jlpt=self.jlpt,
        )


class DictReading(Base):
    """One reading row (kanji or kana) of a JMdict entry."""
    __tablename__ = "dict"
    __table_args__ = (
        Index("index_reading_dict", "reading"),
        Index("index_seq_dict", "sequence"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    reading: Mapped[str] = mapped_column(Text, nullable=False)
    kanji: Mapped[bool] = mapped_column(Boolean, nullable=False)
    no_kanji: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    priorities: Mapped[Optional[List[str]]] = mapped_column(JSON)
    jlpt_lvl: Mapped[Optional[int]] = mapped_column(Integer)
    is_main: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def to_entry(self) -> DictEntry:
        return DictEntry(
            id=self.id,
            sequence=self.sequence,
            reading=self.reading,
            kanji=self.kanji,
            no_kanji=self.no_kanji,
            priorities=list(self.priorities or []),
            jlpt_lvl=self.jlpt_lvl,
            is_main=self.is_main,
        )


class Sense(Base):
    __tablename__ = "sense"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    language: Mapped[str] = mapped_column(String(8), nullable=False, index=True)
    gloss_pos: Mapped[int] = mapped_column(Integer, default=0)
    gloss: Mapped[str] = mapped_column(Text, nullable=False)
    part_of_speech: Mapped[Optional[List[str]]] = mapped_column(JSON)

    def to_model(self) -> SenseModel:
        return SenseModel(
            sequence=self.sequence,
            language=self.language,
            gloss=self.gloss,
            part_of_speech=list(self.part_of_speech or []),
        )
