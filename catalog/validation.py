"""
Request validation for the catalogue API.

Every validator checks its fields in a fixed order and stops at the first
failure, so a result carries exactly one message. Validators never raise;
callers decide how to surface a failed ValidationResult.
"""
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple

from catalog.errors import CatalogValidationError, ErrorKind
from catalog.schemas import AddBookRequest, BorrowRequest, SearchRequest


MIN_TITLE_LENGTH = 1
MAX_TITLE_LENGTH = 256
MIN_AUTHOR_LENGTH = 1
MAX_AUTHOR_LENGTH = 256
MAX_ISBN_LENGTH = 20
MAX_USER_NAME_LENGTH = 256
MAX_SEARCH_TERM_LENGTH = 100
MIN_TOTAL_COPIES = 1
MAX_TOTAL_COPIES = 999
MIN_YEAR = 1000

_ISBN_SEPARATORS = re.compile(r"[\s\-]")
_ISBN_10 = re.compile(r"^\d{10}$")
_ISBN_13 = re.compile(r"^(978|979)\d{10}$")
_YEAR = re.compile(r"^[+-]?[0-9]+$")


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of a validation check.

    A successful result has no message and no kind. A failed one names the
    offending field in member_names.
    """

    is_valid: bool = True
    error_message: Optional[str] = None
    kind: Optional[ErrorKind] = None
    member_names: Tuple[str, ...] = ()

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls()

    @classmethod
    def failure(
        cls, message: str, kind: ErrorKind, *member_names: str
    ) -> "ValidationResult":
        return cls(
            is_valid=False,
            error_message=message,
            kind=kind,
            member_names=member_names,
        )

    def raise_for_error(self) -> None:
        """Raise CatalogValidationError if this result is a failure."""
        if not self.is_valid:
            field = self.member_names[0] if self.member_names else None
            raise CatalogValidationError(self.error_message, self.kind, field)


def is_valid_isbn(isbn: Optional[str]) -> bool:
    """
    Check ISBN-10 / ISBN-13 shape after removing hyphens and whitespace.

    Only the digit layout is checked, not the check digit. A blank value
    counts as valid because the field is optional.
    """
    if isbn is None or not isbn.strip():
        return True

    clean = _ISBN_SEPARATORS.sub("", isbn.strip())

    if len(clean) == 10:
        return bool(_ISBN_10.match(clean))
    if len(clean) == 13:
        return bool(_ISBN_13.match(clean))
    return False


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _check_text(
    value: Optional[str], label: str, field: str, min_length: int, max_length: int
) -> Optional[ValidationResult]:
    if _is_blank(value):
        return ValidationResult.failure(f"{label} is required", ErrorKind.REQUIRED, field)
    if len(value) < min_length or len(value) > max_length:
        return ValidationResult.failure(
            f"{label} must be {min_length}-{max_length} characters",
            ErrorKind.OUT_OF_RANGE,
            field,
        )
    return None


def validate_add_book_request(request: Optional[AddBookRequest]) -> ValidationResult:
    """
    Validate a request to add a book.

    Order: presence, title, author, ISBN, year of publication, total copies.
    """
    if request is None:
        return ValidationResult.failure(
            "Book data is required", ErrorKind.REQUIRED, "request"
        )

    failed = _check_text(
        request.title, "Title", "title", MIN_TITLE_LENGTH, MAX_TITLE_LENGTH
    )
    if failed:
        return failed

    failed = _check_text(
        request.author, "Author", "author", MIN_AUTHOR_LENGTH, MAX_AUTHOR_LENGTH
    )
    if failed:
        return failed

    if not _is_blank(request.isbn):
        if len(request.isbn) > MAX_ISBN_LENGTH:
            return ValidationResult.failure(
                f"ISBN must not exceed {MAX_ISBN_LENGTH} characters",
                ErrorKind.OUT_OF_RANGE,
                "isbn",
            )
        if not is_valid_isbn(request.isbn):
            return ValidationResult.failure(
                "ISBN format is invalid. Use ISBN-10 or ISBN-13",
                ErrorKind.FORMAT_INVALID,
                "isbn",
            )

    year_text = request.year_of_publication
    if year_text is not None and str(year_text).strip():
        year_text = str(year_text).strip()
        if not _YEAR.match(year_text):
            return ValidationResult.failure(
                "Year of Publication must be a valid number",
                ErrorKind.FORMAT_INVALID,
                "yearOfPublication",
            )
        year = int(year_text)

        current_year = datetime.now(timezone.utc).year
        if year < MIN_YEAR or year > current_year:
            return ValidationResult.failure(
                f"Year of Publication must be between {MIN_YEAR} and {current_year}",
                ErrorKind.OUT_OF_RANGE,
                "yearOfPublication",
            )

    if request.total_copies < MIN_TOTAL_COPIES or request.total_copies > MAX_TOTAL_COPIES:
        return ValidationResult.failure(
            f"Total Copies must be between {MIN_TOTAL_COPIES} and {MAX_TOTAL_COPIES}",
            ErrorKind.OUT_OF_RANGE,
            "totalCopies",
        )

    return ValidationResult.success()


def validate_borrow_request(request: Optional[BorrowRequest]) -> ValidationResult:
    if request is None:
        return ValidationResult.failure(
            "Request data is required", ErrorKind.REQUIRED, "request"
        )

    failed = _check_text(
        request.user_name, "User name", "userName", 1, MAX_USER_NAME_LENGTH
    )
    return failed or ValidationResult.success()


def validate_search_request(request: Optional[SearchRequest]) -> ValidationResult:
    """A missing or blank term is valid; search is optional."""
    if request is None or _is_blank(request.search_term):
        return ValidationResult.success()

    if len(request.search_term) > MAX_SEARCH_TERM_LENGTH:
        return ValidationResult.failure(
            f"Search term must not exceed {MAX_SEARCH_TERM_LENGTH} characters",
            ErrorKind.OUT_OF_RANGE,
            "searchTerm",
        )

    return ValidationResult.success()
