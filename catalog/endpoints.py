from catalog import config
from catalog import schemas
from catalog.errors import ErrorKind, LibraryError, NotFoundError, OperationFailedError
from catalog.logging_config import get_logger, setup_logging
from catalog.models import Book, BorrowedBookInfo
from catalog.store import BookStore, get_store
from catalog.validation import (
    validate_add_book_request,
    validate_borrow_request,
    validate_search_request,
)

from uuid import UUID
from typing import List, Optional
from contextlib import asynccontextmanager
from fastapi import APIRouter, Body, Depends, FastAPI, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


setup_logging(config.LOG_LEVEL)
logger = get_logger("endpoints")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the application's BookStore on startup."""
    app.state.store = BookStore(config.DATA_FILE)
    yield


app = FastAPI(
    title="Library Catalogue API",
    description="Book catalogue with borrow and return tracking, persisted to a JSON file",
    version="1.0.0",
    lifespan=lifespan,
)

router = APIRouter(prefix="/api/book", tags=["books"])


@app.exception_handler(LibraryError)
async def library_error_handler(request: Request, exc: LibraryError):
    """
    Translate catalogue exceptions into JSON error responses.

    An error that fixes its own status code keeps it. Otherwise NOT_FOUND
    becomes 404 and every other kind is a client error (400).
    """
    status_code = exc.status_code or (
        status.HTTP_404_NOT_FOUND
        if exc.kind == ErrorKind.NOT_FOUND
        else status.HTTP_400_BAD_REQUEST
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error_code": exc.kind.value},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """
    Report unparsable bodies, path ids and query values as 400.

    Internal Working:
    1. FastAPI raises RequestValidationError before the handler runs
    2. Only the first error is reported, like catalog.validation does
    3. Its location (minus "body"/"path"/"query") names the field
    """
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(
        str(part) for part in first.get("loc", ()) if part not in ("body", "path", "query")
    )
    message = first.get("msg", "Invalid request")
    detail = f"{field}: {message}" if field else f"Request body: {message}"
    logger.debug("Rejected request to %s: %s", request.url.path, detail)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": detail, "error_code": ErrorKind.FORMAT_INVALID.value},
    )


@app.get("/health", response_model=schemas.HealthResponse)
async def health_check(store: BookStore = Depends(get_store)):
    """
    Health check endpoint for monitoring and load balancers.

    storage is "degraded" while the last write to the data file failed;
    the service keeps answering from memory in that state.
    """
    if not store.storage_healthy:
        logger.warning("Health check with degraded storage: %s", store.last_save_error)
    return {
        "status": "healthy",
        "service": "library-catalog",
        "storage": "ok" if store.storage_healthy else "degraded",
    }


@router.get("", response_model=List[Book])
async def list_books(store: BookStore = Depends(get_store)):
    """
    List all books in insertion order.

    Returns:
        Every book with its borrow history
    """
    return store.get_all()


@router.get("/search", response_model=List[Book])
async def search_books(
    search_term: Optional[str] = Query(None, alias="searchTerm"),
    store: BookStore = Depends(get_store),
):
    """
    Search books by title, author or ISBN.

    Internal Working:
    1. The term is checked against the 100 character limit
    2. A blank or missing term returns the whole catalogue
    3. Otherwise a case-insensitive substring match is applied

    Args:
        search_term: Optional text from the searchTerm query parameter
        store: Book store (injected)

    Returns:
        Matching books, possibly an empty list

    Raises:
        CatalogValidationError: 400 if the term is too long
    """
    validate_search_request(schemas.SearchRequest(search_term=search_term)).raise_for_error()
    return store.search(search_term)


@router.get("/borrowed", response_model=List[BorrowedBookInfo])
async def list_borrowed(
    active_only: bool = Query(False, alias="activeOnly"),
    store: BookStore = Depends(get_store),
):
    """
    List borrow records across all books, returned ones included.

    Args:
        active_only: If True, only records that are still out
        store: Book store (injected)

    Returns:
        One flattened entry per borrow record
    """
    return store.list_borrowed(active_only=active_only)


@router.post("/return-record/{borrow_record_id}", response_model=schemas.MessageResponse)
async def return_borrow_record(borrow_record_id: UUID, store: BookStore = Depends(get_store)):
    """
    Close one specific borrow record, wherever it lives.

    Raises:
        OperationFailedError: 400 if the record does not exist or was already returned
    """
    result = store.return_by_record_id(borrow_record_id)
    if not result:
        raise OperationFailedError(
            "Borrow record not found or already returned", result.error
        )
    return {"message": "Book returned successfully"}


@router.get("/{book_id}", response_model=Book)
async def get_book(book_id: UUID, store: BookStore = Depends(get_store)):
    """
    Get a specific book by ID with its borrow history.

    Raises:
        NotFoundError: 404 if book not found
    """
    book = store.get_by_id(book_id)
    if book is None:
        raise NotFoundError("Book", book_id)
    return book


@router.get("/{book_id}/history", response_model=List[BorrowedBookInfo])
async def get_book_history(book_id: UUID, store: BookStore = Depends(get_store)):
    """
    Get the borrow history of a single book as flattened entries.

    Raises:
        NotFoundError: 404 if book not found
    """
    history = store.book_history(book_id)
    if history is None:
        raise NotFoundError("Book", book_id)
    return history


@router.post("", response_model=Book, status_code=status.HTTP_201_CREATED)
async def add_book(
    request: Request,
    response: Response,
    book_request: Optional[schemas.AddBookRequest] = Body(None),
    store: BookStore = Depends(get_store),
):
    """
    Add a new book to the catalogue.

    Internal Working:
    1. The body is checked field by field; the first failure is returned
    2. The request is turned into a Book with all copies available
    3. The store assigns a fresh id and writes the data file
    4. The Location header points at the new book

    Args:
        book_request: Book data from the request body (may be missing)
        store: Book store (injected)

    Returns:
        The created book with generated id

    Raises:
        CatalogValidationError: 400 with the first validation message
    """
    validate_add_book_request(book_request).raise_for_error()

    book = store.add(book_request.to_book())
    response.headers["Location"] = str(request.url_for("get_book", book_id=str(book.id)))
    return book


@router.post("/{book_id}/borrow", response_model=schemas.MessageResponse)
async def borrow_book(
    book_id: UUID,
    borrow_request: Optional[schemas.BorrowRequest] = Body(None),
    store: BookStore = Depends(get_store),
):
    """
    Borrow one copy of a book.

    Business Logic:
    1. The borrower name must be present and at most 256 characters
    2. The book must exist and have at least one available copy
    3. A new open borrow record is appended and availability recomputed

    A missing book and a book with no free copies both answer 400; the
    error_code (NOT_FOUND or UNAVAILABLE) tells them apart.

    Raises:
        CatalogValidationError: 400 if the request is invalid
        OperationFailedError: 400 if the book is missing or unavailable
    """
    validate_borrow_request(borrow_request).raise_for_error()

    result = store.borrow(book_id, borrow_request.user_name)
    if not result:
        raise OperationFailedError(
            f"Book not available or not found: {result.message}", result.error
        )
    return {"message": "Book borrowed successfully"}


@router.post("/{book_id}/return", response_model=schemas.MessageResponse)
async def return_book(book_id: UUID, store: BookStore = Depends(get_store)):
    """
    Return the most recently borrowed copy of a book.

    Raises:
        OperationFailedError: 400 if the book is missing or nothing is borrowed
    """
    result = store.return_by_book_id(book_id)
    if not result:
        raise OperationFailedError(result.message, result.error)
    return {"message": "Book returned successfully"}


app.include_router(router)
