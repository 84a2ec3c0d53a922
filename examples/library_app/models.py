"""
Data models for the TripleORM library example.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List

from tripleorm.core import BooleanField, CascadeType, DateTimeField, Entity, Relation, StringField
from tripleorm.hooks import post_persist, post_remove, post_update, pre_persist
from tripleorm.query import SLOW_QUERY_HINT, NamedQuery
from tripleorm.rdf import Namespace

LIB = Namespace("http://example.org/library/")


class AuditListener:
    """
    Records which books were written, updated and removed.
    """

    def __init__(self, log: List[str]) -> None:
        self.log = log

    @post_persist
    def persisted(self, book: Any) -> None:
        self.log.append(f"persisted {book.title}")

    @post_update
    def updated(self, book: Any) -> None:
        self.log.append(f"updated {book.title}")

    @post_remove
    def removed(self, book: Any) -> None:
        self.log.append(f"removed {book.title}")


class Writer(Entity):
    name = StringField(LIB.term("name"), nullable=False, max_length=120)
    country = StringField(LIB.term("country"))

    class Meta:
        rdf_type = LIB.Writer
        namespace = "http://example.org/library/"


class Genre(Entity):
    name = StringField(LIB.term("name"), nullable=False, max_length=80)

    class Meta:
        rdf_type = LIB.Genre
        namespace = "http://example.org/library/"
        named_graph = "http://example.org/library/graphs/genres"


class Book(Entity):
    title = StringField(LIB.term("title"), nullable=False, max_length=200)
    published = BooleanField(LIB.term("published"))
    added_at = DateTimeField(LIB.term("addedAt"))
    author = Relation(Writer, LIB.term("author"), cascade=[CascadeType.PERSIST, CascadeType.MERGE])
    genres = Relation(Genre, LIB.term("genre"), many=True, cascade=[CascadeType.ALL])

    class Meta:
        rdf_type = LIB.Book
        namespace = "http://example.org/library/"
        listeners = (AuditListener,)
        named_queries = (
            NamedQuery(
                "library.published_titles",
                "SELECT ?title WHERE { ?book a <http://example.org/library/Book> . "
                "?book <http://example.org/library/published> true . "
                "?book <http://example.org/library/title> ?title }",
                hints={SLOW_QUERY_HINT: 50},
            ),
            NamedQuery(
                "library.books_by_author",
                "SELECT ?book WHERE { ?book <http://example.org/library/author> $author }",
            ),
        )

    @pre_persist
    def stamp(self) -> None:
        if self.added_at is None:
            self.added_at = datetime.now(timezone.utc)
