"""PageFetcher: loads the next page over HTTP and publishes the outcome.

``loading``, ``data`` and ``error`` are Observables, so a view can react
to them directly and append the new page to its item list. ``fetch_next``
is a zero-argument callable that starts the request in the background,
which makes a PageFetcher usable as the controller's fetch callback as is.

A failed request leaves ``loading`` at ``ERROR``. Retrying is up to the
caller.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

import httpx

from scrollfetch.observable import Observable
from scrollfetch.watch import WatchHandle, watch

logger = logging.getLogger("scrollfetch.fetcher")


class LoadingState(str, Enum):
    NEUTRAL = "NEUTRAL"
    FETCHING = "FETCHING"
    FETCHED = "FETCHED"
    ERROR = "ERROR"


class PageFetcher:
    def __init__(
        self,
        endpoint: str,
        *,
        client: httpx.Client | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.endpoint = endpoint
        self._client = client
        self._timeout = timeout
        self.loading: Observable[LoadingState] = Observable(LoadingState.NEUTRAL)
        self.data: Observable[Any] = Observable(None)
        self.error: Observable[Exception | None] = Observable(None)

    def fetch(self, handle: WatchHandle | None = None) -> LoadingState:
        """GET the endpoint and publish the result. Runs on the calling thread."""
        self.loading.set(LoadingState.FETCHING)
        try:
            response = self._get()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Fetching %s failed: %s", self.endpoint, exc)
            return self._publish_error(exc, handle)

        if response.status_code != 200:
            logger.warning("Fetching %s returned HTTP %d", self.endpoint, response.status_code)
            return self._publish_error(
                httpx.HTTPStatusError(
                    f"unexpected status {response.status_code}",
                    request=response.request,
                    response=response,
                ),
                handle,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("Response from %s is not JSON: %s", self.endpoint, exc)
            return self._publish_error(exc, handle)

        if handle is not None and handle.disposed:
            return self.loading.peek()
        self.data.set(payload)
        self.error.set(None)
        self.loading.set(LoadingState.FETCHED)
        return LoadingState.FETCHED

    def fetch_next(self) -> WatchHandle:
        """Start ``fetch()`` in a daemon thread."""
        return watch(self.fetch)

    def __call__(self) -> WatchHandle:
        return self.fetch_next()

    def _get(self) -> httpx.Response:
        if self._client is not None:
            return self._client.get(self.endpoint, timeout=self._timeout)
        with httpx.Client(timeout=self._timeout) as client:
            return client.get(self.endpoint)

    def _publish_error(self, exc: Exception, handle: WatchHandle | None) -> LoadingState:
        if handle is not None and handle.disposed:
            return self.loading.peek()
        self.error.set(exc)
        self.loading.set(LoadingState.ERROR)
        return LoadingState.ERROR

    def __repr__(self) -> str:
        return f"PageFetcher({self.endpoint!r}, {self.loading.peek().value})"
