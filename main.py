import logging
import subprocess
import sys
from functools import wraps
from typing import Optional

import httpx
import typer
from rich.console import Console

from config import settings
from utils.http_client import APIError, configure_http_client, get_http_client
from utils.ui_helpers import (
    print_book_result,
    print_error,
    print_health_result,
    print_list_result,
    set_output_mode,
)

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

console = Console()

app = typer.Typer(help="Book inventory CLI")


def handle_api_errors(func):
    """Turn service and connection failures into a message and exit code 1."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except APIError as e:
            print_error(e.message)
            raise typer.Exit(code=1)
        except httpx.TransportError as e:
            logger.debug(f"Transport failure: {e!r}")
            print_error(f"Could not reach the inventory service at {get_http_client().base_url}. Is `serve` running?")
            raise typer.Exit(code=1)
    return wrapper


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
    url: Optional[str] = typer.Option(
        None,
        "--url",
        help="Base URL of the inventory service (default: from API_BASE_URL)",
    ),
):
    """Global CLI options (output mode, service URL)."""
    if output:
        set_output_mode(output)
    if url:
        configure_http_client(url)


@app.command("list")
@handle_api_errors
def cli_list():
    """List every book."""
    books = get_http_client().list_books()
    print_list_result(books)


@app.command("get")
@handle_api_errors
def cli_get(book_id: str):
    """Show one book by ID."""
    book = get_http_client().get_book(book_id)
    print_book_result(book, heading="Book Found")


@app.command("add")
@handle_api_errors
def cli_add(
    book_id: str,
    title: str,
    author: str,
    quantity: int = typer.Option(0, "--quantity", "-q", help="Copies available"),
):
    """Add a book to the inventory."""
    book = get_http_client().add_book(book_id, title, author, quantity)
    print_book_result(book, heading="Book Added")


@app.command("checkout")
@handle_api_errors
def cli_checkout(book_id: str):
    """Check out one copy of a book."""
    book = get_http_client().checkout_book(book_id)
    print_book_result(book, heading="Checked Out")


@app.command("return")
@handle_api_errors
def cli_return(book_id: str):
    """Return one copy of a book."""
    book = get_http_client().return_book(book_id)
    print_book_result(book, heading="Returned")


@app.command("health")
@handle_api_errors
def cli_health():
    """Check that the service is up."""
    print_health_result(get_http_client().health())


@app.command("serve")
def cli_serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind host (default: API_HOST)"),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port (default: API_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
):
    """Start the HTTP API with uvicorn."""
    host = host or settings.api_host
    port = int(port or settings.api_port)
    url = f"http://{host}:{port}/books"
    console.print(f"[green]Starting inventory API on [link={url}]{url}[/link][/]")

    args = [
        sys.executable,
        "-m", "uvicorn",
        "api:app",
        "--host", host,
        "--port", str(port),
        "--log-level", settings.log_level.lower(),
    ]
    if reload:
        args.append("--reload")
    try:
        subprocess.run(args)
    except FileNotFoundError:
        console.print("[bold red]Error:[/] `uvicorn` could not be started. Make sure it is installed.")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
