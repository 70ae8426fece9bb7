"""Exception types raised by the context engine."""

from __future__ import annotations

from typing import Any


class ConfigError(ValueError):
    """Raised when an environment setting cannot be interpreted."""


class FetchFailed(RuntimeError):
    """A feed could not be fetched or decoded.

    Covers transport errors, timeouts, non-success status codes and bodies
    that are not valid JSON. Always fatal to the enclosing resolution.
    """

    def __init__(self, url: str, cause: Any = None) -> None:
        self.url = url
        self.cause = cause
        detail = f"{url}: {cause}" if cause is not None else url
        super().__init__(f"Feed fetch failed ({detail})")
