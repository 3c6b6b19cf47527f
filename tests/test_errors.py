from catalog.errors import (
    CatalogValidationError,
    ConflictError,
    ErrorKind,
    LibraryError,
    NotFoundError,
    OperationFailedError,
    UnavailableError,
)

import uuid
import pytest


def test_library_error_requires_kind():
    with pytest.raises(TypeError):
        LibraryError("something went wrong")

    error = LibraryError("something went wrong", ErrorKind.FORMAT_INVALID)
    assert error.kind == ErrorKind.FORMAT_INVALID
    assert error.status_code is None
    assert error.details == {}


def test_subclasses_carry_their_kind():
    book_id = uuid.uuid4()
    not_found = NotFoundError("Book", book_id)

    assert not_found.kind == ErrorKind.NOT_FOUND
    assert not_found.details == {"resource": "Book", "id": str(book_id)}
    assert UnavailableError("none left").kind == ErrorKind.UNAVAILABLE
    assert ConflictError("nothing out").kind == ErrorKind.CONFLICT

    invalid = CatalogValidationError("Title is required", ErrorKind.REQUIRED, "title")
    assert invalid.kind == ErrorKind.REQUIRED
    assert invalid.details == {"field": "title"}


def test_operation_failed_keeps_cause_kind():
    """
    Test wrapping a store failure for the API.

    Verifies:
    - The status code is always 400
    - kind and details come from the cause
    - The cause is chained
    """
    cause = NotFoundError("Book", "abc")

    error = OperationFailedError("Book not available or not found", cause)

    assert error.status_code == 400
    assert error.kind == ErrorKind.NOT_FOUND
    assert error.details["reason"] == cause.message
    assert error.details["resource"] == "Book"
    assert error.__cause__ is cause
