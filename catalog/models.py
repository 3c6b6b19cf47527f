from uuid import UUID, uuid4
from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """
    Base model whose JSON field names are camelCase.

    Internal Working:
    - alias_generator maps snake_case attributes to camelCase keys
    - populate_by_name=True lets Python code construct models with either name
    - FastAPI serializes response models by alias, so clients and the
      JSON file both see camelCase
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BorrowRecord(CamelModel):
    """
    One borrowing of one copy of a book.

    Business Logic:
    - borrow_date is set when the record is created and never changes
    - return_date is None while the copy is out, and is set exactly once
    """

    id: UUID = Field(default_factory=uuid4)
    user: str = ""
    borrow_date: datetime = Field(default_factory=utc_now)
    return_date: Optional[datetime] = None

    @computed_field(alias="isReturned")
    @property
    def is_returned(self) -> bool:
        return self.return_date is not None

    def close(self, when: Optional[datetime] = None) -> None:
        self.return_date = when or utc_now()


class BorrowedBookInfo(CamelModel):
    """
    Flattened read-only view of one borrow record and the book it belongs to.

    Produced on demand from Book.borrow_history, never persisted.
    """

    book_id: UUID
    book_title: str
    book_author: str
    borrow_record_id: UUID
    user_name: str
    borrow_date: datetime
    return_date: Optional[datetime] = None


class Book(CamelModel):
    """
    A catalogue entry and its full borrow history.

    Business Logic:
    - total_copies is the physical capacity, fixed at creation
    - available_copies is derived from borrow_history and must be
      recomputed after every change to the history
    - borrow_history is append-only; records are closed in place
    """

    id: UUID = Field(default_factory=uuid4)
    title: str = ""
    author: str = ""
    year_of_publication: Optional[int] = None
    isbn: Optional[str] = None
    total_copies: int = 0
    available_copies: int = 0
    borrow_history: List[BorrowRecord] = Field(default_factory=list)

    def open_records(self) -> List[BorrowRecord]:
        return [r for r in self.borrow_history if r.return_date is None]

    def recompute_available_copies(self) -> int:
        self.available_copies = self.total_copies - len(self.open_records())
        return self.available_copies

    def latest_open_record(self) -> Optional[BorrowRecord]:
        """Return the most recently added record that is still out."""
        for record in reversed(self.borrow_history):
            if record.return_date is None:
                return record
        return None

    def find_open_record(self, record_id: UUID) -> Optional[BorrowRecord]:
        for record in self.borrow_history:
            if record.id == record_id and record.return_date is None:
                return record
        return None

    def matches(self, term: str) -> bool:
        """Case-insensitive substring match on title, author or ISBN."""
        term = term.lower()
        return (
            term in self.title.lower()
            or term in self.author.lower()
            or term in (self.isbn or "").lower()
        )

    def borrowed_info(self) -> List[BorrowedBookInfo]:
        return [
            BorrowedBookInfo(
                book_id=self.id,
                book_title=self.title,
                book_author=self.author,
                borrow_record_id=record.id,
                user_name=record.user,
                borrow_date=record.borrow_date,
                return_date=record.return_date,
            )
            for record in self.borrow_history
        ]
