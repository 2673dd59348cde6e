"""Network-level helpers installed on a page before navigation.

``ResourceFilter`` drops resource classes that do not affect layout
(media, fonts) so pages settle faster. ``NetworkIdleMonitor`` counts
in-flight requests and waits for a quiet window, which Playwright's
built-in ``networkidle`` state does not let us tune.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Collection
from typing import Any

logger = logging.getLogger(__name__)


class ResourceFilter:
    """Route handler that aborts requests of the blocked resource types.

    Args:
        blocked_types: Playwright resource types to abort (e.g. ``media``, ``font``).
    """

    def __init__(self, blocked_types: Collection[str]) -> None:
        self.blocked_types = frozenset(t.lower() for t in blocked_types)
        self.blocked_count = 0

    def should_block(self, resource_type: str) -> bool:
        return resource_type.lower() in self.blocked_types

    async def handle(self, route: Any) -> None:
        """Abort or continue *route* based on its request's resource type."""
        request = route.request
        if self.should_block(request.resource_type):
            self.blocked_count += 1
            logger.debug("Blocked %s request: %s", request.resource_type, request.url)
            await route.abort()
        else:
            await route.continue_()


class NetworkIdleMonitor:
    """Tracks in-flight requests on a page.

    Attach before navigation so the first document request is counted.

    Args:
        clock: Monotonic time source in seconds (injectable for tests).
        poll_interval: Seconds between idle checks.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, poll_interval: float = 0.05) -> None:
        self._clock = clock
        self._poll_interval = poll_interval
        self._inflight: set[Any] = set()
        self._last_activity = clock()

    @property
    def inflight(self) -> int:
        return len(self._inflight)

    def attach(self, page: Any) -> None:
        page.on("request", self._on_request)
        page.on("requestfinished", self._on_settled)
        page.on("requestfailed", self._on_settled)

    def _on_request(self, request: Any) -> None:
        self._inflight.add(request)
        self._last_activity = self._clock()

    def _on_settled(self, request: Any) -> None:
        self._inflight.discard(request)
        self._last_activity = self._clock()

    def is_idle(self, idle_ms: int) -> bool:
        """True when nothing is in flight and nothing has changed for *idle_ms*."""
        # Rounded to the microsecond so float clock noise cannot shave the window.
        quiet_ms = round((self._clock() - self._last_activity) * 1000, 3)
        return not self._inflight and quiet_ms >= idle_ms

    async def wait_for_idle(self, *, idle_ms: int, timeout_ms: int) -> None:
        """Block until :meth:`is_idle` holds.

        Raises:
            TimeoutError: If the page is still busy after *timeout_ms*.
        """

        async def _poll() -> None:
            while not self.is_idle(idle_ms):
                await asyncio.sleep(self._poll_interval)

        await asyncio.wait_for(_poll(), timeout=timeout_ms / 1000)
