"""Effective configuration resolver with a short TTL cache.

Enforcement resolves the effective configuration of a config name on every
request. Resolved snapshots are cached per process for at most
``ttl_seconds``, which bounds how long another process can serve a stale
configuration after an edit. Edits made through this process invalidate
the entry immediately through the RateLimitConfigChanged event.

Missing configurations are cached too, so an unknown name cannot turn
every request into a database round-trip.
"""

from collections.abc import Callable
from time import monotonic

from src.domain.events.rate_limit_events import RateLimitConfigChanged
from src.domain.value_objects.effective_config import EffectiveRateLimitConfig
from src.infrastructure.persistence.database import Database
from src.infrastructure.persistence.repositories import RateLimitConfigRepository


class EffectiveConfigResolver:
    """Loads and caches environment-resolved configurations.

    Args:
        database: Source of configuration rows.
        environment: Environment name used for ``resolve_effective``.
        ttl_seconds: Cache lifetime; 0 disables caching.
        clock: Monotonic seconds (injectable for tests).
    """

    def __init__(
        self,
        *,
        database: Database,
        environment: str,
        ttl_seconds: float = 5.0,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        self._database = database
        self._environment = environment
        self._ttl = ttl_seconds
        self._clock = clock
        self._cache: dict[str, tuple[float, EffectiveRateLimitConfig | None]] = {}

    @property
    def environment(self) -> str:
        return self._environment

    async def resolve(self, name: str) -> EffectiveRateLimitConfig | None:
        """Effective configuration for ``name``, or None when it does not exist."""
        now = self._clock()
        cached = self._cache.get(name)
        if cached is not None and cached[0] > now:
            return cached[1]

        async with self._database.get_session() as session:
            config = await RateLimitConfigRepository(session).find_by_name(name)
        effective = (
            config.resolve_effective(self._environment) if config is not None else None
        )
        if self._ttl > 0:
            self._cache[name] = (now + self._ttl, effective)
        return effective

    def invalidate(self, name: str | None = None) -> None:
        """Drop one cached entry, or all of them."""
        if name is None:
            self._cache.clear()
        else:
            self._cache.pop(name, None)

    async def handle_rate_limit_config_changed(
        self, event: RateLimitConfigChanged
    ) -> None:
        self.invalidate(event.config_name)
