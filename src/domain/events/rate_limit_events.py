"""Rate limit domain events.

Enforcement events (one per checked request):
- RateLimitCheckAllowed: request passed the check
- RateLimitCheckDenied: request throttled (window, spacing, block, fail-closed)
- RateLimitStoreFailure: counter store unavailable, policy applied
- RateLimitRequestCompleted: downstream response finished for a checked request

Administrative events:
- RateLimitConfigChanged: configuration created, updated, toggled or deleted
- RateLimitKeyReset: one key or a whole config namespace was reset

Handlers:
- LoggingEventHandler: all events (structured logging)
- UsageSampleRecorder: CheckDenied, RequestCompleted (analytics rollup)
- EffectiveConfigResolver: ConfigChanged (cache invalidation)
"""

from dataclasses import dataclass

from src.domain.events.base_event import DomainEvent


# ═══════════════════════════════════════════════════════════════
# Enforcement
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True, kw_only=True)
class RateLimitCheckAllowed(DomainEvent):
    """Request allowed by a rate limit check.

    Attributes:
        config_name: Configuration applied.
        key: Derived bucket key.
        current_count: Count after this request.
        max_allowed: Effective max.
        source: Dimension that supplied the max.
    """

    config_name: str
    key: str
    current_count: int
    max_allowed: int
    source: str


@dataclass(frozen=True, kw_only=True)
class RateLimitCheckDenied(DomainEvent):
    """Request denied by a rate limit check.

    Attributes:
        config_name: Configuration applied.
        key: Derived bucket key.
        outcome: limited, spaced, blocked or store_failed_closed.
        current_count: Count after this request.
        max_allowed: Effective max.
        retry_after: Seconds until the caller may retry.
        ip_address: Client address.
        path: Request path.
    """

    config_name: str
    key: str
    outcome: str
    current_count: int
    max_allowed: int
    retry_after: int
    ip_address: str | None = None
    path: str | None = None


@dataclass(frozen=True, kw_only=True)
class RateLimitStoreFailure(DomainEvent):
    """Counter store failed during a check; the failure policy decided.

    Attributes:
        config_name: Configuration applied.
        failure_mode: open (allowed) or closed (denied).
        error: Store error message.
    """

    config_name: str
    failure_mode: str
    error: str


@dataclass(frozen=True, kw_only=True)
class RateLimitRequestCompleted(DomainEvent):
    """Downstream response finished for a request that passed the check.

    Attributes:
        config_name: Configuration applied.
        key: Derived bucket key.
        status_code: Response status code.
        decremented: Whether a skip flag removed the request from the count.
    """

    config_name: str
    key: str
    status_code: int
    decremented: bool = False


# ═══════════════════════════════════════════════════════════════
# Administration
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True, kw_only=True)
class RateLimitConfigChanged(DomainEvent):
    """A configuration was created, updated, toggled or deleted.

    Attributes:
        config_name: Configuration name.
        action: created, updated, toggled or deleted.
        changed_by: Admin subject.
        changed_fields: Wire names of changed fields.
    """

    config_name: str
    action: str
    changed_by: str
    changed_fields: tuple[str, ...] = ()


@dataclass(frozen=True, kw_only=True)
class RateLimitKeyReset(DomainEvent):
    """Counters were cleared by an admin or by config deletion.

    Attributes:
        config_name: Configuration whose namespace was touched.
        key: Reset key, or None when the whole namespace was cleared.
        keys_removed: Number of store keys deleted.
        reset_by: Admin subject (None for automatic resets).
    """

    config_name: str
    key: str | None
    keys_removed: int
    reset_by: str | None = None
