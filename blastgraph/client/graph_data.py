"""Client-side orchestration of graph fetches and layouts.

``GraphDataHook`` debounces parameter changes, keeps at most one request in
flight, and pairs each response with a layout from the LRU cache. A request
that gets superseded is cancelled and its outcome dropped; it never turns
into state or an error.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, replace

from blastgraph.client.api import GraphApiClient
from blastgraph.config import Settings
from blastgraph.models.graph import GraphLayout, GraphResponse
from blastgraph.services.layout_cache import LayoutCache
from blastgraph.services.layout_service import DEFAULT_LAYOUT_CONFIG, LayoutConfig, compute_layout
from blastgraph.utils.exceptions import (
    NotFoundError,
    RequestCancelledError,
    UpstreamDataError,
    ValidationError,
)
from blastgraph.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.3

NOT_FOUND_MESSAGE = "Focus not found. Try a different search."
GENERIC_ERROR_MESSAGE = "Unable to load graph"


@dataclass(frozen=True)
class GraphQuery:
    organization_id: str
    focus_kind: str
    focus_id: str
    hops: int

    @property
    def is_complete(self) -> bool:
        return bool(self.organization_id and self.focus_kind and self.focus_id)


@dataclass(frozen=True)
class GraphDataState:
    data: GraphResponse | None = None
    layout: GraphLayout | None = None
    is_loading: bool = False
    error: str | None = None

    @property
    def is_truncated(self) -> bool:
        return self.data.truncated if self.data is not None else False


def describe_error(exc: Exception) -> str:
    """Collapse any failure into one human-readable message."""
    if isinstance(exc, NotFoundError):
        return NOT_FOUND_MESSAGE
    if isinstance(exc, ValidationError):
        return "Request failed (400)"
    status = getattr(exc, "status_code", None)
    if isinstance(exc, UpstreamDataError) and status is not None:
        return f"Request failed ({status})"
    return GENERIC_ERROR_MESSAGE


class GraphDataHook:
    """Debounced, single-flight graph loader bound to one event loop."""

    def __init__(
        self,
        client: GraphApiClient,
        layout_cache: LayoutCache | None = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        layout_config: LayoutConfig = DEFAULT_LAYOUT_CONFIG,
        on_change: Callable[[GraphDataState], None] | None = None,
    ) -> None:
        self._client = client
        self._layout_cache = layout_cache if layout_cache is not None else LayoutCache()
        self._debounce = debounce_seconds
        self._layout_config = layout_config
        self._on_change = on_change

        self._query: GraphQuery | None = None
        self._state = GraphDataState()
        self._timer: asyncio.TimerHandle | None = None
        self._inflight: asyncio.Task[None] | None = None
        self._generation = 0
        self._closed = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        on_change: Callable[[GraphDataState], None] | None = None,
    ) -> GraphDataHook:
        return cls(
            GraphApiClient(base_url=settings.BLASTGRAPH_API_URL),
            layout_cache=LayoutCache(settings.LAYOUT_CACHE_SIZE),
            debounce_seconds=settings.GRAPH_DEBOUNCE_SECONDS,
            on_change=on_change,
        )

    # -- state --------------------------------------------------------------

    @property
    def state(self) -> GraphDataState:
        return self._state

    @property
    def data(self) -> GraphResponse | None:
        return self._state.data

    @property
    def layout(self) -> GraphLayout | None:
        return self._state.layout

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def error(self) -> str | None:
        return self._state.error

    @property
    def is_truncated(self) -> bool:
        return self._state.is_truncated

    def _update(self, **changes: object) -> None:
        self._state = replace(self._state, **changes)
        if self._on_change is not None:
            self._on_change(self._state)

    # -- scheduling ---------------------------------------------------------

    def set_params(self, organization_id: str, focus_kind: str, focus_id: str, hops: int) -> None:
        """Record new parameters and restart the debounce timer."""
        if self._closed:
            raise RuntimeError("GraphDataHook is closed")
        self._query = GraphQuery(organization_id, focus_kind, focus_id, hops)
        self._cancel_timer()
        self._timer = asyncio.get_running_loop().call_later(self._debounce, self._on_timer)

    def refetch(self) -> None:
        """Fetch the current parameters now, skipping the debounce."""
        self._cancel_timer()
        self._start_fetch()

    def _on_timer(self) -> None:
        self._timer = None
        self._start_fetch()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _start_fetch(self) -> None:
        if self._closed:
            return
        query = self._query
        if query is None or not query.is_complete:
            self._abort_inflight()
            self._update(data=None, layout=None, error=None, is_loading=False)
            return

        self._abort_inflight()
        self._generation += 1
        self._update(is_loading=True, error=None)
        self._inflight = asyncio.get_running_loop().create_task(self._load(query, self._generation))

    def _abort_inflight(self) -> None:
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
        self._inflight = None

    # -- fetch --------------------------------------------------------------

    def _layout_for(self, response: GraphResponse) -> GraphLayout:
        cached = self._layout_cache.get(response.query_hash)
        if cached is not None:
            logger.debug("layout_cache_hit", query_hash=response.query_hash)
            return cached
        logger.debug("layout_cache_miss", query_hash=response.query_hash)
        layout = compute_layout(response.nodes, response.query_hash, self._layout_config)
        self._layout_cache.set(response.query_hash, layout)
        return layout

    async def _load(self, query: GraphQuery, generation: int) -> None:
        try:
            response = await self._client.fetch_graph(
                query.organization_id, query.focus_kind, query.focus_id, query.hops
            )
            if generation != self._generation:
                raise RequestCancelledError("superseded")
        except asyncio.CancelledError:
            logger.debug("graph_request_cancelled", generation=generation)
            raise
        except RequestCancelledError:
            logger.debug("graph_request_superseded", generation=generation)
            return
        except Exception as exc:
            if generation != self._generation:
                return
            logger.warning("graph_load_failed", error=str(exc), error_type=type(exc).__name__)
            self._update(error=describe_error(exc), is_loading=False)
            return

        self._update(data=response, layout=self._layout_for(response), is_loading=False)

    # -- lifecycle ----------------------------------------------------------

    async def wait_idle(self) -> None:
        """Wait until no debounce timer is pending and no request is in flight."""
        loop = asyncio.get_running_loop()
        while True:
            if self._timer is not None:
                await asyncio.sleep(max(0.0, self._timer.when() - loop.time()))
                await asyncio.sleep(0)
                continue
            task = self._inflight
            if task is None or task.done():
                return
            await asyncio.wait({task})

    async def aclose(self) -> None:
        """Clear the timer, cancel any in-flight request and close the client."""
        self._closed = True
        self._cancel_timer()
        task = self._inflight
        self._abort_inflight()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
        await self._client.aclose()
