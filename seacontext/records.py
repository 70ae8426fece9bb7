"""Read-only accessor over untyped feed payloads.

Feed responses are decoded JSON trees whose keys are not always clean
(zero-width characters, stray punctuation, inconsistent case). ``Record``
wraps one node of such a tree and hands out scalars as text, treating
anything missing or of the wrong type as absent.
"""

from __future__ import annotations

import math
import re
from typing import Any, Iterator, Optional

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


def normalize_key(key: Any) -> str:
    """Strip every non-alphanumeric character and lower-case."""
    if key is None:
        return ""
    return _NON_ALNUM.sub("", str(key)).lower()


def _as_text(value: Any) -> Optional[str]:
    # bool is an int subclass; JSON booleans are not field values here
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return None


class Record:
    __slots__ = ("raw",)

    def __init__(self, raw: Any = None) -> None:
        self.raw = raw if raw is not None else {}

    def __repr__(self) -> str:
        return f"Record({self.raw!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Record):
            return self.raw == other.raw
        return NotImplemented

    @property
    def is_empty(self) -> bool:
        return not self.raw

    def _fields(self) -> dict:
        return self.raw if isinstance(self.raw, dict) else {}

    def child(self, key: str) -> "Record":
        return Record(self._fields().get(key))

    def text(self, key: str) -> Optional[str]:
        """Exact-key lookup."""
        return _as_text(self._fields().get(key))

    def loose(self, key: str) -> Optional[str]:
        """Lookup ignoring case and non-alphanumeric characters in key names."""
        want = normalize_key(key)
        for name, value in self._fields().items():
            if normalize_key(name) == want:
                return _as_text(value)
        return None

    def number(self, key: str) -> Optional[float]:
        value = self.text(key)
        if value is None:
            return None
        try:
            number = float(value.strip())
        except ValueError:
            return None
        return number if math.isfinite(number) else None

    def items(self) -> Iterator["Record"]:
        """Iterate the elements when this node is an array."""
        if isinstance(self.raw, list):
            for element in self.raw:
                yield Record(element)


def as_records(payload: Any) -> list[Record]:
    """Wrap an array payload; anything else becomes an empty list."""
    if isinstance(payload, Record):
        payload = payload.raw
    if not isinstance(payload, list):
        return []
    return [element if isinstance(element, Record) else Record(element) for element in payload]
