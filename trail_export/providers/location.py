"""User location lookup with a time-boxed cache.

``LocationProvider`` is the contract for whatever actually locates the
user (a browser bridge, a GPS daemon, a fixed test position).
``LocationCache`` sits in front of it and reuses the last successful
fix for ``ttl_s`` seconds.

Cache policy:
    1. ``get(use_cache=True)`` returns the cached fix while
       ``now - captured_at < ttl_s`` without calling the provider.
    2. Otherwise the provider is called exactly once.  On success the
       fix and its timestamp replace the cache entry in one assignment.
    3. On failure a classified ``LocationUnavailableError`` propagates
       and the existing entry is left untouched.  A cancelled lookup
       also leaves it untouched (old value or empty, never partial).

Callers always receive a copy of the cached ``UserLocation``.
"""

from __future__ import annotations

import abc
import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import replace
from typing import TYPE_CHECKING

from trail_export.core.exceptions import LocationErrorKind, LocationUnavailableError
from trail_export.models.location import UserLocation

if TYPE_CHECKING:
    from trail_export.core.config import ExportConfig

logger = logging.getLogger("trail_export.providers.location")

DEFAULT_TTL_S = 300.0
DEFAULT_TIMEOUT_S = 10.0


class LocationProvider(abc.ABC):
    """Source of the user's current position."""

    @abc.abstractmethod
    async def locate(
        self,
        *,
        high_accuracy: bool = True,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        maximum_age_s: float = DEFAULT_TTL_S,
    ) -> UserLocation:
        """Return the user's current position.

        The provider owns the timeout: it must give up after
        ``timeout_s`` seconds.

        Args:
            high_accuracy: Request the most precise fix available.
            timeout_s: Maximum time to wait for a fix.
            maximum_age_s: Oldest acceptable fix the platform may reuse.

        Raises:
            LocationUnavailableError: Classified lookup failure.
        """


class LocationCache:
    """Caches the last successful ``LocationProvider`` fix.

    Args:
        provider: Where fixes come from.
        ttl_s: How long a fix is reused.
        timeout_s: Timeout handed to the provider.
        high_accuracy: Accuracy hint handed to the provider.
        clock: Epoch-seconds clock (injectable for tests).
    """

    def __init__(
        self,
        provider: LocationProvider,
        *,
        ttl_s: float = DEFAULT_TTL_S,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        high_accuracy: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._provider = provider
        self._ttl_s = ttl_s
        self._timeout_s = timeout_s
        self._high_accuracy = high_accuracy
        self._clock = clock
        self._entry: UserLocation | None = None

    @classmethod
    def from_config(cls, provider: LocationProvider, config: ExportConfig) -> LocationCache:
        """Build a cache using the location settings of ``config``."""
        return cls(
            provider,
            ttl_s=config.location_cache_ttl_s,
            timeout_s=config.location_timeout_s,
            high_accuracy=config.location_high_accuracy,
        )

    @property
    def ttl_s(self) -> float:
        return self._ttl_s

    @property
    def cached(self) -> UserLocation | None:
        """Copy of the cached fix regardless of age, or ``None``."""
        return replace(self._entry) if self._entry is not None else None

    async def get(self, use_cache: bool = True) -> UserLocation:
        """Return the user's position, from cache when fresh.

        Args:
            use_cache: ``False`` forces a provider call.

        Raises:
            LocationUnavailableError: If the provider fails or reports
                an out-of-range position.
        """
        entry = self._entry
        if use_cache and entry is not None and self._clock() - entry.captured_at < self._ttl_s:
            logger.debug("Location cache hit | age=%.1fs", self._clock() - entry.captured_at)
            return replace(entry)

        fix = await self._locate()
        if not fix.is_valid():
            msg = f"Provider returned an out-of-range position ({fix.latitude}, {fix.longitude})"
            raise LocationUnavailableError(LocationErrorKind.POSITION_UNAVAILABLE, msg)

        entry = replace(fix, captured_at=self._clock())
        self._entry = entry
        logger.info(
            "Location refreshed | lat=%.5f | lon=%.5f | accuracy=%.0f m",
            entry.latitude,
            entry.longitude,
            entry.accuracy,
        )
        return replace(entry)

    def clear(self) -> None:
        """Forget the cached fix."""
        self._entry = None

    async def _locate(self) -> UserLocation:
        """Call the provider once and classify its failures."""
        try:
            return await self._provider.locate(
                high_accuracy=self._high_accuracy,
                timeout_s=self._timeout_s,
                maximum_age_s=self._ttl_s,
            )
        except LocationUnavailableError as exc:
            logger.warning("Location lookup failed | kind=%s | %s", exc.kind.value, exc.message)
            raise
        except asyncio.CancelledError:
            raise
        except TimeoutError as exc:
            logger.warning("Location lookup timed out after %.1fs", self._timeout_s)
            raise LocationUnavailableError(LocationErrorKind.TIMEOUT) from exc
        except PermissionError as exc:
            logger.warning("Location permission denied: %s", exc)
            raise LocationUnavailableError(LocationErrorKind.PERMISSION_DENIED) from exc
        except Exception as exc:
            logger.warning("Location lookup failed with unexpected error: %s", exc)
            raise LocationUnavailableError(LocationErrorKind.UNKNOWN, str(exc)) from exc
