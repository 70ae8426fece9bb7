"""HTTP access to the external marine feeds.

Every call is a single GET with bounded connect/read timeouts. Anything short
of a 2xx response with a JSON body is reported as :class:`FetchFailed`;
there are no retries and nothing is cached.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

import httpx

from .config import USER_AGENT, Cfg
from .errors import FetchFailed

FEED_NAMES = ("tide", "current", "forecast", "temp")

logger = logging.getLogger(__name__)
# httpx logs full request URLs at INFO, which would include the `key` credential
logging.getLogger("httpx").setLevel(logging.WARNING)


def _extract_detail(resp: httpx.Response) -> str:
    text = resp.text.strip()
    if not text:
        text = resp.reason_phrase or ""
    return f"HTTP {resp.status_code}: {text[:200]}" if text else f"HTTP {resp.status_code}"


class FeedClient:
    def __init__(self, cfg: Cfg, transport: Optional[httpx.BaseTransport] = None) -> None:
        self.cfg = cfg
        timeout = httpx.Timeout(cfg.READ_TIMEOUT_S, connect=cfg.CONNECT_TIMEOUT_S)
        self.http_client = httpx.Client(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            transport=transport,
        )

    def close(self) -> None:
        self.http_client.close()

    def fetch(self, url: str, params: Optional[dict[str, Any]] = None, name: Optional[str] = None) -> Any:
        """GET ``url`` and return the decoded JSON tree."""

        t0 = time.perf_counter()
        try:
            try:
                resp = self.http_client.get(url, params=params)
            except httpx.HTTPError as exc:
                raise FetchFailed(url, exc) from exc
            if not resp.is_success:
                raise FetchFailed(url, _extract_detail(resp))
            try:
                return resp.json()
            except ValueError as exc:
                raise FetchFailed(url, f"invalid JSON body: {exc}") from exc
        except FetchFailed as exc:
            logger.warning("[ext] %s failed: %s", name or url, exc)
            raise
        finally:
            elapsed_ms = (time.perf_counter() - t0) * 1000
            logger.info("[ext] %s took %d ms", name or url, elapsed_ms)

    def feed_url(self, name: str) -> str:
        return f"{self.cfg.API_BASE}/{name}"

    def fetch_feed(self, name: str, lat: float, lon: float) -> Any:
        if name not in FEED_NAMES:
            raise ValueError(f"Unknown feed '{name}'. Allowed: {list(FEED_NAMES)}")
        params = {"lat": lat, "lon": lon, "key": self.cfg.API_KEY}
        return self.fetch(self.feed_url(name), params=params, name=name)
