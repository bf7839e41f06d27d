"""
DishManager Client — REST API Client
=====================================

What:  Thin async wrapper over the /api/dishes endpoints.
How:   httpx.AsyncClient; responses are unwrapped from the
       {success, message, data} envelope into DishSchema objects.

Failure model:
    Any non-2xx response (or an envelope with success=false) raises ApiError
    carrying the status code and the server's message. Transport failures
    (connection refused, timeout) raise ApiError with status_code 0.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from dishmanager.schemas.dish import DishCreate, DishSchema, DishUpdate

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A REST call did not succeed."""

    def __init__(self, status_code: int, message: str, error: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        self.error = error
        super().__init__(message)

    def __str__(self) -> str:
        if self.status_code:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message


class DishApiClient:
    """
    Usage:
        async with DishApiClient("http://localhost:5000/api") as api:
            dishes = await api.list_dishes()
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5000/api",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> "DishApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, str(e))
            raise ApiError(0, f"Request failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.is_error or not body.get("success", False):
            raise ApiError(
                response.status_code,
                body.get("message") or response.reason_phrase or "Request failed",
                body.get("error"),
            )
        return body

    @staticmethod
    def _dish_path(dish_id: str) -> str:
        return f"dishes/{quote(dish_id, safe='')}"

    # ── Endpoints ─────────────────────────────────────────────────────────

    async def health(self) -> Dict[str, Any]:
        return await self._request("GET", "health")

    async def list_dishes(self) -> List[DishSchema]:
        body = await self._request("GET", "dishes")
        return [DishSchema.model_validate(item) for item in body.get("data", [])]

    async def create_dish(
        self,
        dish_id: str,
        dish_name: str,
        image_url: str,
        is_published: bool = False,
    ) -> DishSchema:
        payload = DishCreate(
            dish_id=dish_id,
            dish_name=dish_name,
            image_url=image_url,
            is_published=is_published,
        )
        body = await self._request("POST", "dishes", json=payload.model_dump(by_alias=True))
        return DishSchema.model_validate(body["data"])

    async def update_dish(self, dish_id: str, **fields: Any) -> DishSchema:
        """Send only the supplied fields (dish_name, image_url, is_published)."""
        payload = DishUpdate(**fields).model_dump(by_alias=True, exclude_unset=True)
        body = await self._request("PUT", self._dish_path(dish_id), json=payload)
        return DishSchema.model_validate(body["data"])

    async def delete_dish(self, dish_id: str) -> None:
        await self._request("DELETE", self._dish_path(dish_id))

    async def toggle_publish(self, dish_id: str) -> DishSchema:
        body = await self._request("PUT", f"{self._dish_path(dish_id)}/toggle")
        return DishSchema.model_validate(body["data"])
