import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from config import settings

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Non-2xx answer from the inventory service."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class InventoryClient:
    """Synchronous client for the book inventory HTTP API."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 client: Optional[httpx.Client] = None) -> None:
        if client is not None:
            self._client = client
        else:
            self._client = httpx.Client(
                base_url=base_url or settings.api_base_url,
                timeout=httpx.Timeout(timeout or settings.api_timeout),
                limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
            )
        self.base_url = str(self._client.base_url).rstrip("/")

    def list_books(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/books")

    def get_book(self, book_id: str) -> Dict[str, Any]:
        # Ids are free text; "?" and "#" must not end the path early
        return self._request("GET", f"/books/{quote(book_id, safe='')}")

    def add_book(self, book_id: str, title: str, author: str, quantity: int = 0) -> Dict[str, Any]:
        payload = {"id": book_id, "title": title, "author": author, "quantity": quantity}
        return self._request("POST", "/books", json=payload)

    def checkout_book(self, book_id: str) -> Dict[str, Any]:
        return self._request("PATCH", "/checkout", params={"id": book_id})

    def return_book(self, book_id: str) -> Dict[str, Any]:
        return self._request("PATCH", "/return", params={"id": book_id})

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health")

    def _request(self, method: str, url: str, **kwargs) -> Any:
        response = self._client.request(method, url, **kwargs)
        logger.debug(f"{method} {url} -> {response.status_code}")
        if response.is_success:
            return response.json()
        raise APIError(response.status_code, self._error_message(response))

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        # Malformed-body rejections come back with no body at all
        if not response.content:
            return f"Request failed with status {response.status_code}"
        try:
            data = response.json()
        except ValueError:
            return response.text
        if isinstance(data, dict) and "message" in data:
            return str(data["message"])
        return response.text

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


# Global client instance
_global_client: Optional[InventoryClient] = None


def get_http_client() -> InventoryClient:
    """Get or create the global inventory client."""
    global _global_client
    if _global_client is None:
        _global_client = InventoryClient()
    return _global_client


def configure_http_client(base_url: str) -> InventoryClient:
    """Point the global client at another service URL."""
    global _global_client
    cleanup_http_client()
    _global_client = InventoryClient(base_url=base_url.rstrip("/"))
    return _global_client


def cleanup_http_client() -> None:
    """Close the global inventory client."""
    global _global_client
    if _global_client:
        _global_client.close()
        _global_client = None
