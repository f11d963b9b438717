import json
import logging
import time
from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict
from starlette.exceptions import HTTPException as StarletteHTTPException

from book import Book
from config import settings
from library import BookNotFoundError, InsufficientStockError, Library

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


class IndentedJSONResponse(JSONResponse):
    """JSON response pretty-printed with four-space indentation."""

    def render(self, content: Any) -> bytes:
        return json.dumps(content, ensure_ascii=False, allow_nan=False, indent=4).encode("utf-8")


# --- Models ---
class BookModel(BaseModel):
    id: str
    title: str
    author: str
    quantity: int


class BookCreateModel(BaseModel):
    # Strict types: a string quantity or a numeric title is a malformed body, not something to coerce
    model_config = ConfigDict(strict=True)

    id: str = ""
    title: str = ""
    author: str = ""
    quantity: int = 0


class HealthModel(BaseModel):
    status: str
    timestamp: str
    total_books: int


# --- Dependencies ---
def get_library(request: Request) -> Library:
    """The store owned by the running app."""
    return request.app.state.library


router = APIRouter()


@router.get("/books", response_model=List[BookModel])
def list_books(library: Library = Depends(get_library)):
    """List every book in insertion order."""
    return [BookModel(**b.to_dict()) for b in library.list_books()]


@router.get("/books/{book_id}", response_model=BookModel)
def get_book(book_id: str, library: Library = Depends(get_library)):
    """Get a single book by its ID."""
    try:
        book = library.find_book(book_id)
    except BookNotFoundError:
        raise HTTPException(status_code=404, detail="Book not found.")
    return BookModel(**book.to_dict())


@router.post("/books", response_model=BookModel, status_code=status.HTTP_201_CREATED)
def add_book(payload: BookCreateModel, library: Library = Depends(get_library)):
    """Add a book exactly as given."""
    book = library.add_book(Book.from_dict(payload.model_dump()))
    return BookModel(**book.to_dict())


@router.patch("/checkout", response_model=BookModel)
def checkout_book(book_id: Optional[str] = Query(default=None, alias="id"), library: Library = Depends(get_library)):
    """Take one copy out of the inventory."""
    if book_id is None:
        raise HTTPException(status_code=400, detail="Missing id query parameter")
    try:
        book = library.checkout_book(book_id)
    except BookNotFoundError:
        raise HTTPException(status_code=404, detail="Book not found")
    except InsufficientStockError:
        raise HTTPException(status_code=400, detail="No more books left")
    return BookModel(**book.to_dict())


@router.patch("/return", response_model=BookModel)
def return_book(book_id: Optional[str] = Query(default=None, alias="id"), library: Library = Depends(get_library)):
    """Put one copy back into the inventory."""
    if book_id is None:
        raise HTTPException(status_code=400, detail="Missing id query parameter")
    try:
        book = library.return_book(book_id)
    except BookNotFoundError:
        raise HTTPException(status_code=404, detail="Book not found")
    return BookModel(**book.to_dict())


# --- Health check ---
@router.get("/health", response_model=HealthModel)
def health_check(library: Library = Depends(get_library)):
    return HealthModel(
        status="healthy",
        timestamp=datetime.now().isoformat(),
        total_books=len(library),
    )


# --- Error handlers ---
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return IndentedJSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # A body that cannot be bound to a book aborts the request with no body written
    logger.info(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
    return Response(status_code=status.HTTP_400_BAD_REQUEST)


# --- Request logging middleware ---
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
    return response


def create_app(library: Optional[Library] = None) -> FastAPI:
    """Build the API around a store. A fresh, seeded Library is created when none is given."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        default_response_class=IndentedJSONResponse,
    )
    app.state.library = library if library is not None else Library()

    app.middleware("http")(log_requests)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.include_router(router)
    return app


app = create_app()
