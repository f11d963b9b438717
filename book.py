from __future__ import annotations


class Book:
    """Represents a single title held in the inventory."""

    def __init__(self, id: str, title: str = "", author: str = "", quantity: int = 0) -> None:
        self.id = id
        self.title = title
        self.author = author
        self.quantity = quantity

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} (ID: {self.id}, {self.quantity} left)"

    def __repr__(self) -> str:
        return (
            f"Book(id={self.id!r}, title={self.title!r}, "
            f"author={self.author!r}, quantity={self.quantity!r})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Book):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "quantity": self.quantity,
        }

    @staticmethod
    def from_dict(data: dict) -> "Book":
        # Missing fields take their zero values, same as the JSON binding
        return Book(
            id=data.get("id", ""),
            title=data.get("title", ""),
            author=data.get("author", ""),
            quantity=data.get("quantity", 0),
        )
