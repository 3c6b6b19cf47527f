from typing import Optional, Union
from pydantic import BaseModel

from catalog.models import Book, CamelModel


class AddBookRequest(CamelModel):
    """
    Schema for adding a new book.

    Fields are deliberately loose (nullable text, year as text or number)
    so that catalog.validation can reject bad input with a readable
    message instead of a parsing error.
    """

    title: Optional[str] = None
    author: Optional[str] = None
    isbn: Optional[str] = None
    year_of_publication: Optional[Union[int, str]] = None
    total_copies: int = 0

    def to_book(self) -> Book:
        """
        Build the Book to store.

        Call only after validation: the year is parsed with int().
        """
        year = self.year_of_publication
        if year is not None and str(year).strip():
            year = int(str(year).strip())
        else:
            year = None

        isbn = self.isbn.strip() if self.isbn and self.isbn.strip() else None

        return Book(
            title=(self.title or "").strip(),
            author=(self.author or "").strip(),
            year_of_publication=year,
            isbn=isbn,
            total_copies=self.total_copies,
            available_copies=self.total_copies,
        )


class BorrowRequest(CamelModel):
    """Schema for borrowing a book; the book id comes from the URL path."""

    user_name: Optional[str] = None


class SearchRequest(CamelModel):
    search_term: Optional[str] = None


class MessageResponse(BaseModel):
    """Plain acknowledgement for operations without an entity body."""

    message: str


class HealthResponse(BaseModel):
    status: str
    service: str
    storage: str
