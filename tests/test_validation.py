from catalog.errors import CatalogValidationError, ErrorKind
from catalog.schemas import AddBookRequest, BorrowRequest, SearchRequest
from catalog.validation import (
    is_valid_isbn,
    validate_add_book_request,
    validate_borrow_request,
    validate_search_request,
)

from datetime import datetime, timezone
import pytest


def add_request(**overrides):
    fields = {"title": "T", "author": "A", "total_copies": 5}
    fields.update(overrides)
    return AddBookRequest(**fields)


def test_valid_add_request():
    result = validate_add_book_request(add_request())
    assert result.is_valid
    assert result.error_message is None
    assert result.kind is None


def test_add_request_missing():
    result = validate_add_book_request(None)
    assert not result.is_valid
    assert "required" in result.error_message
    assert result.kind == ErrorKind.REQUIRED


@pytest.mark.parametrize("title", ["", "   "])
def test_add_request_blank_title(title):
    result = validate_add_book_request(add_request(title=title))
    assert not result.is_valid
    assert "Title" in result.error_message
    assert result.kind == ErrorKind.REQUIRED
    assert result.member_names == ("title",)


def test_add_request_title_too_long():
    result = validate_add_book_request(add_request(title="x" * 257))
    assert not result.is_valid
    assert "Title" in result.error_message
    assert result.kind == ErrorKind.OUT_OF_RANGE

    assert validate_add_book_request(add_request(title="x" * 256)).is_valid


def test_add_request_author_rules():
    blank = validate_add_book_request(add_request(author=""))
    assert "Author" in blank.error_message

    too_long = validate_add_book_request(add_request(author="y" * 257))
    assert "Author" in too_long.error_message
    assert too_long.kind == ErrorKind.OUT_OF_RANGE


@pytest.mark.parametrize(
    "isbn",
    ["978-0451524935", "9780451524935", "979 1234567890", "0-306-40615-2", "0306406152", "", None],
)
def test_add_request_accepts_isbn(isbn):
    assert validate_add_book_request(add_request(isbn=isbn)).is_valid


@pytest.mark.parametrize(
    "isbn",
    ["123", "9771234567890", "12345678901", "978045152493X", "abcdefghij"],
)
def test_add_request_rejects_isbn_format(isbn):
    result = validate_add_book_request(add_request(isbn=isbn))
    assert not result.is_valid
    assert "ISBN" in result.error_message
    assert result.kind == ErrorKind.FORMAT_INVALID


def test_add_request_isbn_too_long():
    result = validate_add_book_request(add_request(isbn="978-0-4515-2493-5-----"))
    assert not result.is_valid
    assert "ISBN" in result.error_message
    assert "20" in result.error_message
    assert result.kind == ErrorKind.OUT_OF_RANGE


@pytest.mark.parametrize("year", ["1949", 1949, " 2001 ", "", None])
def test_add_request_accepts_year(year):
    assert validate_add_book_request(add_request(year_of_publication=year)).is_valid


def test_add_request_year_not_a_number():
    result = validate_add_book_request(add_request(year_of_publication="19x9"))
    assert not result.is_valid
    assert "valid number" in result.error_message
    assert result.kind == ErrorKind.FORMAT_INVALID


def test_add_request_year_out_of_range():
    next_year = datetime.now(timezone.utc).year + 1

    too_old = validate_add_book_request(add_request(year_of_publication="999"))
    assert not too_old.is_valid
    assert too_old.kind == ErrorKind.OUT_OF_RANGE

    future = validate_add_book_request(add_request(year_of_publication=str(next_year)))
    assert not future.is_valid
    assert str(next_year - 1) in future.error_message


@pytest.mark.parametrize("copies", [0, -1, 1000])
def test_add_request_total_copies_out_of_range(copies):
    result = validate_add_book_request(add_request(total_copies=copies))
    assert not result.is_valid
    assert "1" in result.error_message
    assert "999" in result.error_message
    assert result.kind == ErrorKind.OUT_OF_RANGE


@pytest.mark.parametrize("copies", [1, 999])
def test_add_request_total_copies_bounds(copies):
    assert validate_add_book_request(add_request(total_copies=copies)).is_valid


def test_add_request_first_failure_wins():
    """
    Several fields are invalid; only the earliest check is reported.
    """
    result = validate_add_book_request(
        add_request(title="", author="", isbn="bad", total_copies=0)
    )
    assert "Title" in result.error_message
    assert "Author" not in result.error_message

    result = validate_add_book_request(add_request(isbn="bad", total_copies=0))
    assert "ISBN" in result.error_message


def test_add_request_camel_case_payload():
    request = AddBookRequest.model_validate(
        {"title": "T", "author": "A", "yearOfPublication": "1990", "totalCopies": 2}
    )
    assert validate_add_book_request(request).is_valid
    assert request.to_book().year_of_publication == 1990


def test_borrow_request_rules():
    assert validate_borrow_request(BorrowRequest(user_name="Alice")).is_valid

    missing = validate_borrow_request(None)
    assert not missing.is_valid
    assert missing.kind == ErrorKind.REQUIRED

    blank = validate_borrow_request(BorrowRequest(user_name="  "))
    assert "User name" in blank.error_message

    too_long = validate_borrow_request(BorrowRequest(user_name="z" * 257))
    assert too_long.kind == ErrorKind.OUT_OF_RANGE


def test_search_request_rules():
    assert validate_search_request(None).is_valid
    assert validate_search_request(SearchRequest()).is_valid
    assert validate_search_request(SearchRequest(search_term="")).is_valid
    assert validate_search_request(SearchRequest(search_term="x" * 100)).is_valid

    result = validate_search_request(SearchRequest(search_term="x" * 101))
    assert not result.is_valid
    assert "100" in result.error_message


def test_raise_for_error():
    validate_borrow_request(BorrowRequest(user_name="Alice")).raise_for_error()

    with pytest.raises(CatalogValidationError) as exc_info:
        validate_borrow_request(BorrowRequest(user_name="")).raise_for_error()

    assert exc_info.value.kind == ErrorKind.REQUIRED
    assert exc_info.value.details == {"field": "userName"}


def test_is_valid_isbn():
    assert is_valid_isbn("978-0-06-112008-4")
    assert is_valid_isbn("   ")
    assert not is_valid_isbn("978-0-06-112008")


@pytest.mark.parametrize("year", ["1_999", "١٩٩٩", "１９９９", "19 99", "0x7cf"])
def test_add_request_year_needs_ascii_digits(year):
    """Underscores and non-ASCII digits that int() would accept are rejected."""
    result = validate_add_book_request(add_request(year_of_publication=year))

    assert not result.is_valid
    assert result.kind == ErrorKind.FORMAT_INVALID
    assert result.member_names == ("yearOfPublication",)
    assert "valid number" in result.error_message


def test_add_request_year_with_sign():
    assert validate_add_book_request(add_request(year_of_publication="+1999")).is_valid

    negative = validate_add_book_request(add_request(year_of_publication="-1999"))
    assert negative.kind == ErrorKind.OUT_OF_RANGE
