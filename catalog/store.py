"""
In-memory book collection backed by a single JSON file.

BookStore owns the list of books. Every public method runs under one
re-entrant lock, so the check-then-act sequence of borrow and return
cannot interleave with another request. Each mutation rewrites the whole
file; a failed write is logged and absorbed, leaving the in-memory state
authoritative until the next successful write.
"""
import os
from dataclasses import dataclass
from threading import RLock
from typing import List, Optional
from uuid import UUID, uuid4

from fastapi import Request
from pydantic import TypeAdapter, ValidationError

from catalog import config
from catalog.errors import (
    ConflictError,
    ErrorKind,
    LibraryError,
    NotFoundError,
    UnavailableError,
)
from catalog.logging_config import get_logger
from catalog.models import Book, BorrowedBookInfo, BorrowRecord, utc_now


logger = get_logger("store")

_books_adapter = TypeAdapter(List[Book])


def default_books() -> List[Book]:
    """The catalogue used when no usable data file exists."""
    return [
        Book(
            title="1984",
            author="George Orwell",
            year_of_publication=1949,
            isbn="978-0451524935",
            total_copies=5,
            available_copies=5,
        ),
        Book(
            title="To Kill a Mockingbird",
            author="Harper Lee",
            year_of_publication=1960,
            isbn="978-0061120084",
            total_copies=3,
            available_copies=3,
        ),
        Book(
            title="The Great Gatsby",
            author="F. Scott Fitzgerald",
            year_of_publication=1925,
            isbn="978-0743273565",
            total_copies=7,
            available_copies=7,
        ),
    ]


@dataclass(frozen=True)
class OperationResult:
    """
    Outcome of a borrow or return.

    Truthy exactly when the operation succeeded, so callers can write
    ``if store.borrow(...)``. A failure keeps the LibraryError that
    describes it; kind and message are read from that error.
    """

    success: bool
    error: Optional[LibraryError] = None

    def __bool__(self) -> bool:
        return self.success

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error else None

    @property
    def message(self) -> Optional[str]:
        return self.error.message if self.error else None

    @classmethod
    def ok(cls) -> "OperationResult":
        return cls(success=True)

    @classmethod
    def failed(cls, error: LibraryError) -> "OperationResult":
        return cls(success=False, error=error)


class BookStore:
    def __init__(self, file_path: Optional[str] = None):
        self.file_path = file_path or config.DATA_FILE
        self._books: List[Book] = []
        self._lock = RLock()
        self.last_save_error: Optional[str] = None
        self.reload()

    # ------------------------------------------------------------------ #
    # Persistence
    # ------------------------------------------------------------------ #

    def reload(self) -> None:
        """
        Load the collection from the data file.

        A missing, unreadable, malformed or empty file seeds the default
        catalogue, which is written back immediately. Available copies read
        from the file are discarded and recomputed from borrow history.
        """
        with self._lock:
            books = self._read_file()
            if not books:
                logger.info("Seeding default catalogue into %s", self.file_path)
                books = default_books()
                self._books = books
                self._recompute_all()
                self._save()
                return

            self._books = books
            self._recompute_all()
            logger.info("Loaded %d books from %s", len(books), self.file_path)

    def _read_file(self) -> List[Book]:
        if not os.path.exists(self.file_path):
            return []
        try:
            with open(self.file_path, "r", encoding="utf-8") as fh:
                raw = fh.read()
        except (OSError, UnicodeDecodeError):
            logger.warning("Could not read %s", self.file_path, exc_info=True)
            return []
        if not raw.strip():
            return []
        try:
            return _books_adapter.validate_json(raw)
        except ValidationError as exc:
            logger.warning(
                "Ignoring unparsable data file %s: %d error(s)",
                self.file_path,
                exc.error_count(),
            )
            return []

    def _save(self) -> None:
        payload = _books_adapter.dump_json(self._books, by_alias=True, indent=2)
        try:
            with open(self.file_path, "wb") as fh:
                fh.write(payload)
        except OSError as exc:
            self.last_save_error = str(exc)
            logger.warning(
                "Failed to save books to %s; in-memory state kept",
                self.file_path,
                exc_info=True,
            )
            return
        self.last_save_error = None

    def _recompute_all(self) -> None:
        for book in self._books:
            book.recompute_available_copies()

    @property
    def storage_healthy(self) -> bool:
        return self.last_save_error is None

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def _find(self, book_id: UUID) -> Optional[Book]:
        for book in self._books:
            if book.id == book_id:
                return book
        return None

    def get_all(self) -> List[Book]:
        with self._lock:
            return [book.model_copy(deep=True) for book in self._books]

    def get_by_id(self, book_id: UUID) -> Optional[Book]:
        with self._lock:
            book = self._find(book_id)
            logger.debug("Lookup %s -> %s", book_id, "hit" if book else "miss")
            return book.model_copy(deep=True) if book else None

    def search(self, term: Optional[str]) -> List[Book]:
        if term is None or not term.strip():
            return self.get_all()
        with self._lock:
            results = [b.model_copy(deep=True) for b in self._books if b.matches(term)]
        logger.debug("Search %r -> %d result(s)", term, len(results))
        return results

    def list_borrowed(self, active_only: bool = False) -> List[BorrowedBookInfo]:
        """Every borrow record of every book, in book order then record order."""
        with self._lock:
            infos = [info for book in self._books for info in book.borrowed_info()]
        if active_only:
            infos = [info for info in infos if info.return_date is None]
        return infos

    def book_history(self, book_id: UUID) -> Optional[List[BorrowedBookInfo]]:
        with self._lock:
            book = self._find(book_id)
            return book.borrowed_info() if book else None

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    def add(self, book: Book) -> Book:
        """
        Store a new book under a freshly generated id.

        Any id, availability or history supplied by the caller is replaced.
        """
        with self._lock:
            stored = book.model_copy(deep=True)
            stored.id = uuid4()
            while self._find(stored.id) is not None:
                stored.id = uuid4()
            stored.borrow_history = []
            stored.recompute_available_copies()
            self._books.append(stored)
            self._save()
            logger.info("Added book %s (%s)", stored.id, stored.title)
            return stored.model_copy(deep=True)

    def borrow(self, book_id: UUID, user_name: str) -> OperationResult:
        with self._lock:
            book = self._find(book_id)
            if book is None:
                return OperationResult.failed(NotFoundError("Book", book_id))
            if book.available_copies <= 0:
                return OperationResult.failed(
                    UnavailableError(f"No copies of '{book.title}' are available")
                )

            record = BorrowRecord(user=user_name, borrow_date=utc_now())
            book.borrow_history.append(record)
            book.recompute_available_copies()
            self._save()
            logger.info("Book %s borrowed by %s (record %s)", book.id, user_name, record.id)
            return OperationResult.ok()

    def return_by_book_id(self, book_id: UUID) -> OperationResult:
        """Close the most recently added open borrow record of a book."""
        with self._lock:
            book = self._find(book_id)
            if book is None:
                return OperationResult.failed(NotFoundError("Book", book_id))

            record = book.latest_open_record()
            if record is None:
                return OperationResult.failed(
                    ConflictError(f"No copies of '{book.title}' are currently borrowed")
                )

            record.close()
            book.recompute_available_copies()
            self._save()
            logger.info("Book %s returned (record %s)", book.id, record.id)
            return OperationResult.ok()

    def return_by_record_id(self, record_id: UUID) -> OperationResult:
        with self._lock:
            for book in self._books:
                record = book.find_open_record(record_id)
                if record is None:
                    continue
                record.close()
                book.recompute_available_copies()
                self._save()
                logger.info("Borrow record %s of book %s returned", record_id, book.id)
                return OperationResult.ok()

        return OperationResult.failed(
            NotFoundError("Open borrow record", record_id)
        )


def get_store(request: Request) -> BookStore:
    """
    Dependency function that provides the application's BookStore.

    The store is created by the application lifespan handler and kept on
    app.state, so each app instance owns exactly one store. Tests replace
    this dependency through app.dependency_overrides.
    """
    return request.app.state.store
