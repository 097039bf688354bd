"""MarketClient: download queued publisher requests over HTTP.

Holds one publisher and the requests queued against it. get_data()
downloads sequentially with httpx.Client; get_data_async() downloads
concurrently with httpx.AsyncClient inside an asyncio.TaskGroup, so the
first failure cancels the downloads still in flight. Payloads are kept
raw until transform_data() maps them into MarketSeries.
"""

from __future__ import annotations

import asyncio
from typing import Any, TextIO

import httpx
import structlog

from market_data.config import HttpConfig
from market_data.errors import DownloadedDataError, HttpError, MarketError
from market_data.publishers.base import Publisher
from market_data.types import MarketSeries

log = structlog.get_logger()

_ERROR_BODY_LIMIT = 200


class MarketClient:
    """Downloads and transforms series for one publisher.

    ``transport`` is passed to the underlying httpx clients; tests pass an
    ``httpx.MockTransport`` here.
    """

    def __init__(
        self,
        publisher: Publisher,
        *,
        http_config: HttpConfig | None = None,
        transport: Any = None,
    ) -> None:
        self.publisher = publisher
        self._http = http_config if http_config is not None else HttpConfig()
        self._transport = transport
        self._requests: list[Any] = []
        self._payloads: list[str] = []

    def add_request(self, request: Any) -> MarketClient:
        """Queue a publisher request. Returns self for chaining."""
        self._requests.append(request)
        return self

    @property
    def requests(self) -> list[Any]:
        return list(self._requests)

    @property
    def payloads(self) -> list[str]:
        """Raw payloads from the last download, in request order."""
        return list(self._payloads)

    def create_endpoints(self) -> list[str]:
        """Full query URLs for every queued request."""
        return [self.publisher.create_endpoint(r) for r in self._requests]

    def _client_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "timeout": self._http.timeout_seconds,
            "headers": {"User-Agent": self._http.user_agent},
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return kwargs

    def get_data(self) -> MarketClient:
        """Download every queued request. Raises HttpError on any failure."""
        endpoints = self.create_endpoints()
        with httpx.Client(**self._client_kwargs()) as client:
            payloads = [self._fetch(client, url) for url in endpoints]
        self._payloads = payloads
        return self

    async def get_data_async(self) -> MarketClient:
        """Download every queued request concurrently.

        The first HttpError cancels the remaining downloads and is raised;
        any further failures collected by the task group are logged.
        """
        endpoints = self.create_endpoints()
        try:
            async with httpx.AsyncClient(**self._client_kwargs()) as client:
                async with asyncio.TaskGroup() as group:
                    tasks = [
                        group.create_task(self._fetch_async(client, url))
                        for url in endpoints
                    ]
        except ExceptionGroup as eg:
            failures, unexpected = eg.split(HttpError)
            if failures is None or unexpected is not None:
                raise
            first, *rest = _leaves(failures)
            for extra in rest:
                log.warning(
                    "series_download_failed",
                    publisher=self.publisher.name,
                    error=str(extra),
                )
            raise first from None
        self._payloads = [task.result() for task in tasks]
        return self

    def _fetch(self, client: httpx.Client, url: str) -> str:
        try:
            response = client.get(url)
        except httpx.HTTPError as e:
            raise HttpError(None, f"got error: {e}") from e
        return self._check(response)

    async def _fetch_async(self, client: httpx.AsyncClient, url: str) -> str:
        try:
            response = await client.get(url)
        except httpx.HTTPError as e:
            raise HttpError(None, f"got error: {e}") from e
        return self._check(response)

    def _check(self, response: httpx.Response) -> str:
        if not response.is_success:
            raise HttpError(
                response.status_code,
                response.text[:_ERROR_BODY_LIMIT],
            )
        log.info(
            "series_downloaded",
            publisher=self.publisher.name,
            status=response.status_code,
            size=len(response.content),
        )
        return response.text

    def to_writer(self, stream: TextIO) -> None:
        """Write the raw downloaded payloads, one per line."""
        if not self._payloads:
            raise DownloadedDataError("No data downloaded")
        for payload in self._payloads:
            stream.write(payload)
            stream.write("\n")

    def transform_data(self) -> list[MarketSeries | MarketError]:
        """Map each downloaded payload into a MarketSeries.

        One entry per request. A payload that fails to transform yields
        its MarketError in place, so the other series remain usable.
        """
        if len(self._payloads) != len(self._requests):
            raise DownloadedDataError("No data downloaded for the queued requests")
        results: list[MarketSeries | MarketError] = []
        for request, payload in zip(self._requests, self._payloads):
            try:
                series = self.publisher.transform_data(payload, request)
            except MarketError as e:
                log.warning(
                    "series_transform_failed",
                    publisher=self.publisher.name,
                    error=str(e),
                )
                results.append(e)
                continue
            log.info(
                "series_transformed",
                publisher=self.publisher.name,
                symbol=series.symbol,
                interval=str(series.interval),
                bar_count=len(series.bars),
            )
            results.append(series)
        return results


def _leaves(group: BaseExceptionGroup) -> list[BaseException]:
    """Flatten a possibly nested exception group, in raise order."""
    leaves: list[BaseException] = []
    for exc in group.exceptions:
        if isinstance(exc, BaseExceptionGroup):
            leaves.extend(_leaves(exc))
        else:
            leaves.append(exc)
    return leaves
