import logging
from threading import RLock
from typing import Iterable, List, Optional

from book import Book
from config import settings

logger = logging.getLogger(__name__)


SEED_BOOKS = (
    {"id": "1", "title": "In Search of Lost Time", "author": "Marcel Proust", "quantity": 2},
    {"id": "2", "title": "The Great Gatsby", "author": "F. Scott Fitzgerald", "quantity": 5},
    {"id": "3", "title": "War and Peace", "author": "Leo Tolstoy", "quantity": 6},
)


class LibraryError(Exception):
    """Base class for inventory failures reported back to the caller."""


class BookNotFoundError(LibraryError, LookupError):
    def __init__(self, book_id: str) -> None:
        super().__init__(f"Book with ID {book_id} not found.")
        self.book_id = book_id


class InsufficientStockError(LibraryError, ValueError):
    def __init__(self, book_id: str) -> None:
        super().__init__(f"No copies of book {book_id} left to check out.")
        self.book_id = book_id


def seed_books() -> List[Book]:
    """Fresh copies of the records every new process starts with."""
    return [Book.from_dict(data) for data in SEED_BOOKS]


class Library:
    """Owns the book collection and the checkout/return quantity rules.

    Records are kept in insertion order and mutated in place, so a Book handed
    out by find_book() reflects every later checkout or return. All access goes
    through one lock; FastAPI runs sync endpoints on a thread pool.
    """

    def __init__(self, books: Optional[Iterable[Book]] = None, seed: Optional[bool] = None) -> None:
        if seed is None:
            seed = settings.seed_books
        self._lock = RLock()
        if books is not None:
            self.books: List[Book] = list(books)
        elif seed:
            self.books = seed_books()
        else:
            self.books = []

    def __len__(self) -> int:
        with self._lock:
            return len(self.books)

    # ------------------------- Queries ------------------------- #
    def list_books(self) -> List[Book]:
        with self._lock:
            return list(self.books)

    def find_book(self, book_id: str) -> Book:
        """Return the first stored book with this exact ID.

        Raises BookNotFoundError when nothing matches.
        """
        with self._lock:
            for book in self.books:
                if book.id == book_id:
                    return book
        logger.debug(f"Lookup miss for book id={book_id!r}")
        raise BookNotFoundError(book_id)

    # ------------------------- Mutations ------------------------- #
    def add_book(self, book: Book) -> Book:
        """Append a book as given. Duplicate IDs are accepted; lookups keep returning the first."""
        with self._lock:
            self.books.append(book)
        logger.info(f"Added book id={book.id!r} title={book.title!r} quantity={book.quantity}")
        return book

    def checkout_book(self, book_id: str) -> Book:
        with self._lock:
            book = self.find_book(book_id)
            if book.quantity <= 0:
                logger.warning(f"Checkout rejected, no copies left: id={book_id!r}")
                raise InsufficientStockError(book_id)
            book.quantity -= 1
            logger.info(f"Checked out book id={book_id!r}, {book.quantity} left")
        return book

    def return_book(self, book_id: str) -> Book:
        # No upper bound: a return is accepted even without a matching checkout
        with self._lock:
            book = self.find_book(book_id)
            book.quantity += 1
            logger.info(f"Returned book id={book_id!r}, {book.quantity} left")
        return book
