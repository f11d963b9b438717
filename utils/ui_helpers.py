import os
import json
from typing import List, Any, Dict
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"

BOOK_FIELDS = ("id", "title", "author", "quantity")

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def print_list_result(books: List[Dict[str, Any]]) -> None:
    """Print the book list in the current output mode.
    - plain: 'ID - Title by Author (N left)' lines, or 'No books in library.'
    - json: JSON array of book objects ('[]' when empty)
    - rich: Rich table
    """
    mode = get_output_mode()

    if mode == "json":
        payload = [{k: b.get(k) for k in BOOK_FIELDS} for b in books]
        print(json.dumps(payload, ensure_ascii=False))
        return

    if not books:
        print("No books in library.")
        return

    if mode == "rich":
        table = Table(title="📚 Books", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("Quantity", style="green", justify="right")
        for b in books:
            table.add_row(str(b.get("id", "")), b.get("title", ""), b.get("author", ""), str(b.get("quantity", 0)))
        _console.print(table)
    else:
        for b in books:
            print(f"{b.get('id', '')} - {b.get('title', '')} by {b.get('author', '')} ({b.get('quantity', 0)} left)")


def print_book_result(book: Dict[str, Any], heading: str = "Book") -> None:
    """Print one book in the current output mode."""
    mode = get_output_mode()

    if mode == "json":
        payload = {k: book.get(k) for k in BOOK_FIELDS}
        print(json.dumps(payload, ensure_ascii=False))
    elif mode == "rich":
        content = (
            f"[bold]ID:[/] {book.get('id', '')}\n"
            f"[bold]Title:[/] {book.get('title', '')}\n"
            f"[bold]Author:[/] {book.get('author', '')}\n"
            f"[bold]Quantity:[/] {book.get('quantity', 0)}"
        )
        _console.print(Panel.fit(content, title=f"📖 {heading}", border_style="green"))
    else:
        print(heading)
        print(f"ID: {book.get('id', '')}")
        print(f"Title: {book.get('title', '')}")
        print(f"Author: {book.get('author', '')}")
        print(f"Quantity: {book.get('quantity', 0)}")


def print_error(message: str) -> None:
    mode = get_output_mode()
    if mode == "json":
        print(json.dumps({"error": message}, ensure_ascii=False))
    elif mode == "rich":
        _console.print(f"[bold red]Error:[/] {message}")
    else:
        print(f"Error: {message}")


def print_health_result(health: Dict[str, Any]) -> None:
    mode = get_output_mode()
    if mode == "json":
        print(json.dumps(health, ensure_ascii=False))
    elif mode == "rich":
        content = f"[bold]Status:[/] {health.get('status')}\n[bold]Total Books:[/] {health.get('total_books', 0)}"
        _console.print(Panel.fit(content, title="❤️ Health", border_style="blue"))
    else:
        print(f"Status: {health.get('status')}")
        print(f"Total Books: {health.get('total_books', 0)}")
