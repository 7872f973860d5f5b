"""
Async HTTP client for the Electric Cars API.

Each endpoint is one coroutine returning the decoded JSON envelope (or raw
bytes for exports). Error responses raise ``ClientError`` with the server's
message.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from app.config import API_BASE_URL, DEFAULT_USER_ID
from app.utils.logger import get_logger

logger = get_logger(__name__)


class ClientError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return body["message"]
    return f"HTTP {response.status_code}"


class ElectricCarsClient:
    """
    Wraps every REST endpoint.

    Pass ``client`` to reuse an existing ``httpx.AsyncClient`` (its base URL
    must already point at the ``/api`` root); otherwise one is created and
    closed by this object.
    """

    def __init__(self, base_url: str = API_BASE_URL, client: Optional[httpx.AsyncClient] = None):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> ElectricCarsClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise ClientError(f"Request failed: {e}") from e

        if response.is_error:
            message = _error_message(response)
            logger.error(f"{method} {url} returned {response.status_code}: {message}")
            raise ClientError(message, status_code=response.status_code)
        return response

    async def _json(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        response = await self._request(method, url, **kwargs)
        return response.json()

    # --- Electric cars ---

    async def get_all(self, page: int = 1, limit: int = 50) -> Dict[str, Any]:
        return await self._json("GET", "/electric-cars", params={"page": page, "limit": limit})

    async def get_by_id(self, car_id: int) -> Dict[str, Any]:
        return await self._json("GET", f"/electric-cars/{car_id}")

    async def delete(self, car_id: int) -> Dict[str, Any]:
        return await self._json("DELETE", f"/electric-cars/{car_id}")

    async def search(self, query: str) -> Dict[str, Any]:
        return await self._json("GET", "/electric-cars/search/query", params={"q": query})

    async def filter(self, filters: List[Dict[str, Any]]) -> Dict[str, Any]:
        return await self._json("POST", "/electric-cars/filter", json={"filters": filters})

    async def export_csv(self) -> bytes:
        response = await self._request("GET", "/electric-cars/export/csv")
        return response.content

    async def export_excel(self) -> bytes:
        response = await self._request("GET", "/electric-cars/export/excel")
        return response.content

    # --- Favorites ---

    async def get_favorites(self, user_id: str = DEFAULT_USER_ID) -> Dict[str, Any]:
        return await self._json("GET", "/favorites", params={"userId": user_id})

    async def add_favorite(self, car_id: int, user_id: str = DEFAULT_USER_ID) -> Dict[str, Any]:
        return await self._json("POST", f"/favorites/{car_id}", params={"userId": user_id})

    async def remove_favorite(self, car_id: int, user_id: str = DEFAULT_USER_ID) -> Dict[str, Any]:
        return await self._json("DELETE", f"/favorites/{car_id}", params={"userId": user_id})

    async def check_favorite(self, car_id: int, user_id: str = DEFAULT_USER_ID) -> bool:
        body = await self._json("GET", f"/favorites/check/{car_id}", params={"userId": user_id})
        return bool(body.get("isFavorite"))

    async def health(self) -> Dict[str, Any]:
        return await self._json("GET", "/health")
