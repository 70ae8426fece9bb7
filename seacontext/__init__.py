"""
Marine context resolution engine.

Public API:
- resolver.ContextResolver (resolve, resolve_visibility)
- models.Context / NextTide / NextSun / TideEvent
- errors.FetchFailed
"""

from .config import Cfg
from .errors import ConfigError, FetchFailed
from .feeds import FeedClient
from .models import Context, NextSun, NextTide, TideEvent
from .resolver import ContextResolver

__all__ = [
    "Cfg",
    "ConfigError",
    "Context",
    "ContextResolver",
    "FeedClient",
    "FetchFailed",
    "NextSun",
    "NextTide",
    "TideEvent",
]
