"""Owner of the current template set and its occurrence index.

The store is driven from a single event loop. Each template change rebuilds
the index wholesale; navigation never touches it. Remote refreshes are
single-outstanding: a newer request cancels the one in flight and results of
superseded requests are discarded.
"""

from __future__ import annotations

import asyncio
import datetime
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..calendar.expander import expand, horizon_months_ahead, horizon_years_ahead
from ..calendar.index import OccurrenceIndex
from ..calendar.models import EventTemplate
from ..core.clock import now_local
from .adapter import templates_from_payload
from .remote_fetcher import GENERIC_FETCH_ERROR, CatalogFetchError

logger = logging.getLogger(__name__)


class HorizonMode(str, Enum):
    MONTHS_AHEAD = "months_ahead"
    YEARS_AHEAD = "years_ahead"


@dataclass(frozen=True)
class HorizonPolicy:
    """How far ahead occurrences are generated.

    Attributes:
        mode: Whether ``amount`` counts months or years from today
        amount: Number of months or years
        repetitions: Repetition count for single-run templates (None = until horizon)
    """

    mode: HorizonMode = HorizonMode.MONTHS_AHEAD
    amount: int = 12
    repetitions: Optional[int] = None

    def horizon_end(self, today: datetime.date) -> datetime.datetime:
        if self.mode == HorizonMode.YEARS_AHEAD:
            return horizon_years_ahead(today, self.amount)
        return horizon_months_ahead(today, self.amount)


@dataclass(frozen=True)
class StoreStatus:
    """Snapshot of the store for health checks and the retry UI."""

    loading: bool
    error_message: Optional[str]
    template_count: int
    occurrence_count: int
    last_loaded_at: Optional[datetime.datetime]


def build_index(
    templates: Sequence[EventTemplate], policy: HorizonPolicy, today: datetime.date
) -> OccurrenceIndex:
    """Expand templates with the policy's horizon and index the result."""
    occurrences = expand(templates, policy.horizon_end(today), repetitions=policy.repetitions)
    return OccurrenceIndex(occurrences)


class TemplateStore:
    """Holds templates and the index derived from them."""

    def __init__(
        self,
        fetcher: Any = None,
        policy: Optional[HorizonPolicy] = None,
        catalog_url: Optional[str] = None,
        time_provider: Callable[[], datetime.datetime] = now_local,
        offload_expansion: bool = True,
    ) -> None:
        """Initialize the store.

        Args:
            fetcher: Object with ``async fetch_events(url) -> list``; required for refresh()
            policy: Horizon policy used for every rebuild
            catalog_url: URL passed to the fetcher
            time_provider: Returns the current local time
            offload_expansion: Run expansion in the default executor during refresh()
        """
        self.fetcher = fetcher
        self.policy = policy or HorizonPolicy()
        self.catalog_url = catalog_url
        self.time_provider = time_provider
        self.offload_expansion = offload_expansion

        self._templates: tuple[EventTemplate, ...] = ()
        self._index = OccurrenceIndex(())
        self._generation = 0
        self._inflight: Optional[asyncio.Task[bool]] = None
        self._error_message: Optional[str] = None
        self._last_loaded_at: Optional[datetime.datetime] = None

    @property
    def templates(self) -> tuple[EventTemplate, ...]:
        return self._templates

    @property
    def index(self) -> OccurrenceIndex:
        return self._index

    @property
    def loading(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    @property
    def error_message(self) -> Optional[str]:
        return self._error_message

    def snapshot(self) -> StoreStatus:
        return StoreStatus(
            loading=self.loading,
            error_message=self._error_message,
            template_count=len(self._templates),
            occurrence_count=len(self._index),
            last_loaded_at=self._last_loaded_at,
        )

    def _install(self, templates: Sequence[EventTemplate], index: OccurrenceIndex) -> None:
        self._templates = tuple(templates)
        self._index = index
        self._error_message = None
        self._last_loaded_at = self.time_provider()
        logger.info(
            "Installed %d templates -> %d occurrences", len(self._templates), len(self._index)
        )

    def load_static(self, templates: Sequence[EventTemplate]) -> OccurrenceIndex:
        """Replace the template set synchronously and rebuild the index.

        Any in-flight remote refresh is cancelled so it cannot overwrite
        the new templates.
        """
        self._generation += 1
        self._cancel_inflight()
        index = build_index(templates, self.policy, self.time_provider().date())
        self._install(templates, index)
        return index

    def _cancel_inflight(self) -> None:
        if self._inflight is not None and not self._inflight.done():
            logger.debug("Cancelling superseded catalog fetch")
            self._inflight.cancel()
        self._inflight = None

    async def refresh(self) -> bool:
        """Fetch remote templates and rebuild the index.

        Returns:
            True if this request's result was installed, False if it failed
            or was superseded by a newer request.
        """
        if self.fetcher is None or not self.catalog_url:
            raise RuntimeError("TemplateStore.refresh() requires a fetcher and catalog_url")

        self._generation += 1
        generation = self._generation
        self._cancel_inflight()

        task = asyncio.ensure_future(self._load_remote(generation))
        self._inflight = task
        try:
            return await task
        except asyncio.CancelledError:
            if task.cancelled() and generation != self._generation:
                logger.debug("Catalog fetch %d superseded", generation)
                return False
            task.cancel()
            raise
        finally:
            if self._inflight is task and task.done():
                self._inflight = None

    async def retry(self) -> bool:
        """Re-run the fetch after a failure (the UI retry control)."""
        return await self.refresh()

    async def _load_remote(self, generation: int) -> bool:
        try:
            payload = await self.fetcher.fetch_events(self.catalog_url)
        except CatalogFetchError as exc:
            if generation != self._generation:
                return False
            logger.error("Catalog fetch failed: %s", exc)
            self._error_message = exc.user_message
            return False
        except Exception:
            if generation != self._generation:
                return False
            logger.exception("Unexpected error fetching catalog")
            self._error_message = GENERIC_FETCH_ERROR
            return False

        if generation != self._generation:
            logger.debug("Discarding late catalog response %d", generation)
            return False

        templates = templates_from_payload(payload)
        today = self.time_provider().date()
        if self.offload_expansion:
            loop = asyncio.get_running_loop()
            index = await loop.run_in_executor(None, build_index, templates, self.policy, today)
        else:
            index = build_index(templates, self.policy, today)

        if generation != self._generation:
            logger.debug("Discarding late catalog response %d after expansion", generation)
            return False

        self._install(templates, index)
        return True
