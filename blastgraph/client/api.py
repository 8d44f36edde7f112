"""Async HTTP client for the blastgraph API."""

from __future__ import annotations

import os
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from blastgraph.models.graph import GraphResponse
from blastgraph.utils.exceptions import NotFoundError, UpstreamDataError, ValidationError
from blastgraph.utils.logging import get_logger

logger = get_logger(__name__)

GRAPH_PATH = "/api/v1/graph"


def get_base_url() -> str:
    """Backend API base URL (no trailing slash)."""
    return (os.environ.get("BLASTGRAPH_API_URL") or "http://localhost:8000").rstrip("/")


def _json_body(resp: httpx.Response) -> dict[str, Any]:
    try:
        body = resp.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _error_message(resp: httpx.Response) -> str:
    return str(_json_body(resp).get("error") or resp.reason_phrase or f"HTTP {resp.status_code}")


class GraphApiClient:
    """Thin wrapper over ``httpx.AsyncClient`` that speaks GraphResponse.

    ``transport`` lets tests plug in ``httpx.MockTransport`` or an ASGI app.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url or get_base_url(),
            timeout=timeout,
            transport=transport,
        )

    async def fetch_graph(
        self,
        organization_id: str,
        focus_kind: str,
        focus_id: str,
        hops: int,
    ) -> GraphResponse:
        """GET /api/v1/graph. Maps 404, 400 and other failures onto the error taxonomy."""
        params: dict[str, Any] = {
            "organizationId": organization_id,
            "focusKind": focus_kind,
            "focusId": focus_id,
            "hops": hops,
        }
        try:
            resp = await self._client.get(GRAPH_PATH, params=params)
        except httpx.HTTPError as exc:
            logger.warning("graph_request_failed", error=str(exc))
            raise UpstreamDataError(f"Graph request failed: {exc}") from exc

        if resp.status_code == 404:
            raise NotFoundError(_error_message(resp))
        if resp.status_code == 400:
            raise ValidationError(_error_message(resp), details=_json_body(resp).get("details"))
        if resp.is_error:
            raise UpstreamDataError(_error_message(resp), status_code=resp.status_code)

        try:
            return GraphResponse.model_validate(resp.json())
        except (ValueError, PydanticValidationError) as exc:
            raise UpstreamDataError("Malformed graph response", status_code=resp.status_code) from exc

    async def health(self) -> dict[str, Any]:
        resp = await self._client.get("/api/v1/health", timeout=5)
        resp.raise_for_status()
        return resp.json()

    async def aclose(self) -> None:
        await self._client.aclose()
