"""HTTP client for the family tree store.

Async-first, built on httpx. Every call is a single request/response; there
are no automatic retries. Failures surface as:

- NetworkError: the request never got a usable response (a transport
  failure or an undecodable body)
- ApiError: a response arrived with a non-success status (or a body that
  does not match the expected shape)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from family_tree.config import DEFAULT_API_URL, load_settings
from family_tree.models import (
    FamilyGraph,
    ParentOfInput,
    ParentOfRelationship,
    Person,
    PersonInput,
    UnionInput,
    UnionRelationship,
)

from .base import TreeStore
from .errors import ApiError, NetworkError

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

ENDPOINTS = {
    "node": "/v1/node",
    "person": "/v1/person",
    "union": "/v1/union",
    "parent_of": "/v1/parent_of",
    "graph": "/v1/graph",
}


@dataclass
class ClientConfig:
    """Configuration for the store client."""

    base_url: str = DEFAULT_API_URL
    timeout: float = 30.0
    user_agent: str = "FamilyTree/0.1"

    @classmethod
    def from_env(cls) -> ClientConfig:
        settings = load_settings()
        return cls(base_url=settings["api_url"], timeout=settings["timeout"])


def _person_path(person_id: str, suffix: str = "") -> str:
    return f"{ENDPOINTS['person']}/{quote(person_id, safe='')}{suffix}"


class FamilyTreeClient(TreeStore):
    """Store client over the family tree REST API.

    Example:
        async with FamilyTreeClient(ClientConfig(base_url="http://localhost:3666")) as client:
            graph = await client.get_graph()
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or ClientConfig.from_env()
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    async def __aenter__(self) -> FamilyTreeClient:
        self._http = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            transport=self._transport,
            headers={
                "User-Agent": self.config.user_agent,
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._http:
            await self._http.aclose()
            self._http = None

    async def _request(self, method: str, path: str, payload: dict | None = None) -> Any:
        """Send one request and decode the JSON body (None when empty)."""
        if not self._http:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        try:
            response = await self._http.request(method, path, json=payload)
        except httpx.RequestError as e:
            logger.warning("store.network_error", method=method, path=path, error=str(e))
            raise NetworkError(f"Network error: {e}") from e

        if not response.is_success:
            reason = response.reason_phrase
            logger.warning("store.api_error", method=method, path=path, status=response.status_code)
            raise ApiError(f"API request failed: {reason}", response.status_code, reason)

        logger.debug("store.response", method=method, path=path, status=response.status_code)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(
                "API returned invalid JSON", response.status_code, response.reason_phrase
            ) from e

    @staticmethod
    def _parse(model: type[M], data: Any) -> M:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ApiError(f"Unexpected {model.__name__} payload: {e}", 200, "OK") from e

    # =========================================================================
    # Reads
    # =========================================================================

    async def list_persons(self) -> list[Person]:
        data = await self._request("GET", ENDPOINTS["node"]) or {}
        if not isinstance(data, dict):
            raise ApiError("Unexpected persons payload", 200, "OK")
        return [self._parse(Person, item) for item in data.get("persons") or []]

    async def get_graph(self) -> FamilyGraph:
        data = await self._request("GET", ENDPOINTS["graph"])
        return self._parse(FamilyGraph, data or {})

    # =========================================================================
    # Mutations
    # =========================================================================

    async def create_person(self, fields: PersonInput) -> Person:
        data = await self._request("POST", ENDPOINTS["person"], fields.to_payload())
        return self._parse(Person, data)

    async def update_person(self, person_id: str, fields: PersonInput) -> Person:
        data = await self._request("PUT", _person_path(person_id), fields.to_payload())
        return self._parse(Person, data)

    async def delete_person(self, person_id: str) -> None:
        await self._request("DELETE", _person_path(person_id))

    async def create_union(self, fields: UnionInput) -> UnionRelationship:
        data = await self._request("POST", ENDPOINTS["union"], fields.to_payload())
        return self._parse(UnionRelationship, data)

    async def create_parent_of(self, fields: ParentOfInput) -> ParentOfRelationship:
        data = await self._request("POST", ENDPOINTS["parent_of"], fields.to_payload())
        return self._parse(ParentOfRelationship, data)

    async def set_person_position(self, person_id: str, x: float, y: float) -> Person:
        data = await self._request("PUT", _person_path(person_id, "/position"), {"x": x, "y": y})
        return self._parse(Person, data)

    async def clear_person_position(self, person_id: str) -> Person:
        data = await self._request("DELETE", _person_path(person_id, "/position"))
        return self._parse(Person, data)
