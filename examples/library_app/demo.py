"""
Library example showcasing cascades, listeners and named queries.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from tripleorm.persistence import Session

from .models import AuditListener, Book, Genre, Writer


def bootstrap_session(dsn: str = "memory://", audit_log: Optional[List[str]] = None) -> Session:
    log = audit_log if audit_log is not None else []

    def listener_factory(listener_type: type) -> Any:
        if listener_type is AuditListener:
            return AuditListener(log)
        return listener_type()

    return Session.from_dsn(dsn, listener_factory=listener_factory)


def seed_sample_data(session: Session) -> Dict[str, List[Dict[str, Any]]]:
    writers = [
        Writer(name="Octavia Butler", country="USA"),
        Writer(name="Haruki Murakami", country="Japan"),
    ]
    genres = [
        Genre(name="Sci-Fi"),
        Genre(name="Magical Realism"),
        Genre(name="Fantasy"),
    ]
    books = [
        Book(title="Kindred", published=True, author=writers[0], genres=[genres[0]]),
        Book(title="Kafka on the Shore", published=True, author=writers[1], genres=[genres[1], genres[2]]),
        Book(title="Parable of the Talents", published=False, author=writers[0], genres=[genres[0]]),
    ]
    with session.transaction():
        for book in books:
            session.persist(book)

    return {
        "writers": [w.to_dict() for w in writers],
        "genres": [g.to_dict() for g in genres],
        "books": [b.to_dict() for b in books],
    }


def fetch_books_with_authors(session: Session) -> List[Dict[str, Any]]:
    query = session.create_native_query(
        "SELECT ?book WHERE { ?book a <http://example.org/library/Book> . "
        "?book <http://example.org/library/published> true }",
        Book,
    )
    result: List[Dict[str, Any]] = []
    for book in query.get_result_list():
        result.append(
            {
                "title": book.title,
                "author": book.author.name if book.author else None,
                "genres": sorted(g.name for g in book.genres),
            }
        )
    return sorted(result, key=lambda entry: entry["title"])


def run_demo(dsn: str = "memory://") -> List[Dict[str, Any]]:
    session = bootstrap_session(dsn)
    try:
        seed_sample_data(session)
        return fetch_books_with_authors(session)
    finally:
        session.close()


if __name__ == "__main__":
    feed = run_demo("sqlite:///library_demo.db")
    for entry in feed:
        print(f"{entry['title']} by {entry['author']} [{', '.join(entry['genres'])}]")
