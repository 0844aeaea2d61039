"""
Namespace-aware cache-aside service in front of a key-value store.

The cache is best-effort: any failure of the backing store degrades to a
miss (``None``), ``False`` or ``0`` and is logged, never raised. Failures of
caller-supplied fetchers in :meth:`CacheService.get_or_set` propagate.
Unknown namespaces are programmer errors and raise
:class:`~shared.errors.UnknownNamespaceError` before the store is touched.
"""

import json
import contextlib
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, TYPE_CHECKING

from shared.errors import CacheConfigurationError
from shared.logging import get_logger
from .namespaces import CacheNamespace, DEFAULT_TTL, NAMESPACE_ABBREVIATIONS
from .store import KeyValueStore

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector
    from ..config import CacheSettings


DEFAULT_KEY_PREFIX = "stellar:"

# Redis KEYS treats these as pattern syntax
GLOB_CHARACTERS = frozenset("*?[]\\")


def has_non_string_keys(value: Any) -> bool:
    """True if any mapping nested in ``value`` has a key JSON would stringify."""
    if isinstance(value, dict):
        return any(
            not isinstance(key, str) or has_non_string_keys(item)
            for key, item in value.items()
        )
    if isinstance(value, (list, tuple)):
        return any(has_non_string_keys(item) for item in value)
    return False


@dataclass(frozen=True)
class StoreResult:
    """Outcome of a single backing-store call."""

    ok: bool
    value: Any = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, value: Any) -> "StoreResult":
        return cls(ok=True, value=value)

    @classmethod
    def degraded(cls, error: BaseException) -> "StoreResult":
        return cls(ok=False, error=error)


class CacheService:
    """Namespace-partitioned, TTL-governed cache over a :class:`KeyValueStore`."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        ttl_overrides: Optional[Mapping[Any, int]] = None,
        metrics: Optional["MetricsCollector"] = None,
    ):
        if GLOB_CHARACTERS.intersection(key_prefix):
            raise CacheConfigurationError(
                "Key prefix must not contain glob characters",
                {"key_prefix": key_prefix},
            )

        self.store = store
        self.metrics = metrics
        self.logger = get_logger("cache.service")
        self._key_prefix = key_prefix
        self._ttls = MappingProxyType({**DEFAULT_TTL, **self._normalize_overrides(ttl_overrides)})

        # Process-local hit/miss counters
        self._hits = 0
        self._misses = 0

    @classmethod
    def from_settings(
        cls,
        store: KeyValueStore,
        settings: "CacheSettings",
        metrics: Optional["MetricsCollector"] = None,
    ) -> "CacheService":
        return cls(
            store,
            key_prefix=settings.key_prefix,
            ttl_overrides=settings.ttl_overrides,
            metrics=metrics,
        )

    @staticmethod
    def _normalize_overrides(ttl_overrides: Optional[Mapping[Any, int]]) -> Dict[CacheNamespace, int]:
        overrides: Dict[CacheNamespace, int] = {}
        for namespace, ttl in (ttl_overrides or {}).items():
            if isinstance(ttl, bool) or not isinstance(ttl, int) or ttl <= 0:
                raise CacheConfigurationError(
                    "TTL overrides must be positive integers",
                    {"namespace": str(namespace), "ttl": ttl},
                )
            ns = CacheNamespace.coerce(namespace)
            if ns in overrides:
                raise CacheConfigurationError(
                    "Duplicate TTL override for namespace",
                    {"namespace": ns.value},
                )
            overrides[ns] = ttl
        return overrides

    @property
    def key_prefix(self) -> str:
        return self._key_prefix

    @property
    def ttls(self) -> Mapping[CacheNamespace, int]:
        """Effective TTL per namespace (defaults with overrides applied)."""
        return self._ttls

    # Keys and TTLs

    def build_key(self, namespace: Any, identifier: str) -> str:
        """Build a fully-qualified key: ``{prefix}{abbreviation}:{identifier}``."""
        ns = CacheNamespace.coerce(namespace)
        return f"{self._key_prefix}{NAMESPACE_ABBREVIATIONS[ns]}:{identifier}"

    def namespace_pattern(self, namespace: Any) -> str:
        """Glob matching every key of a namespace."""
        return self.build_key(namespace, "*")

    def ttl_for(self, namespace: Any, ttl_seconds: Optional[int] = None) -> int:
        """Resolve a TTL: explicit argument, then override, then default."""
        ns = CacheNamespace.coerce(namespace)
        if ttl_seconds is not None:
            return ttl_seconds
        return self._ttls[ns]

    # Store access

    async def _call_store(
        self,
        operation: str,
        namespace: CacheNamespace,
        call: Callable[[], Awaitable[Any]],
        identifier: Optional[str] = None,
    ) -> StoreResult:
        timer = (
            self.metrics.time_operation("cache_operation_duration_seconds", operation=operation)
            if self.metrics
            else contextlib.nullcontext()
        )
        try:
            with timer:
                return StoreResult.success(await call())
        except Exception as e:
            self._report_failure(operation, namespace, e, identifier)
            return StoreResult.degraded(e)

    def _report_failure(
        self,
        operation: str,
        namespace: CacheNamespace,
        error: BaseException,
        identifier: Optional[str] = None,
    ) -> None:
        self.logger.warning(
            "Cache operation failed",
            operation=operation,
            namespace=namespace.value,
            identifier=identifier,
            error=str(error),
            error_type=type(error).__name__,
        )
        if self.metrics:
            self.metrics.increment_counter(
                "cache_errors_total", operation=operation, namespace=namespace.value
            )

    def _record_hit(self, namespace: CacheNamespace) -> None:
        self._hits += 1
        if self.metrics:
            self.metrics.increment_counter("cache_hits_total", namespace=namespace.value)

    def _record_miss(self, namespace: CacheNamespace) -> None:
        self._misses += 1
        if self.metrics:
            self.metrics.increment_counter("cache_misses_total", namespace=namespace.value)

    # Core operations

    async def get(self, namespace: Any, identifier: str) -> Optional[Any]:
        """Return the cached value, or ``None`` on a miss or store failure.

        A degraded read counts as a miss.
        """
        ns = CacheNamespace.coerce(namespace)
        key = self.build_key(ns, identifier)

        result = await self._call_store("get", ns, lambda: self.store.get(key), identifier)
        if not result.ok or result.value is None:
            self._record_miss(ns)
            return None

        try:
            value = json.loads(result.value)
        except (TypeError, ValueError) as e:
            self._report_failure("decode", ns, e, identifier)
            self._record_miss(ns)
            return None

        self._record_hit(ns)
        return value

    async def set(
        self,
        namespace: Any,
        identifier: str,
        value: Any,
        ttl_seconds: Optional[int] = None,
    ) -> bool:
        """Store ``value`` as JSON; ``False`` if it could not be written.

        Mappings must have string keys; ``json`` would silently turn other
        keys into strings. Tuples are stored as JSON arrays and read back as
        lists.
        """
        ns = CacheNamespace.coerce(namespace)
        key = self.build_key(ns, identifier)
        expiry = self.ttl_for(ns, ttl_seconds)

        try:
            if has_non_string_keys(value):
                raise TypeError("Cached mappings must have string keys")
            serialized = json.dumps(value)
        except (TypeError, ValueError) as e:
            self._report_failure("encode", ns, e, identifier)
            return False

        result = await self._call_store(
            "set", ns, lambda: self.store.set(key, serialized, expiry), identifier
        )
        return result.ok

    async def delete(self, namespace: Any, identifier: str) -> bool:
        """Remove one entry; ``True`` only if a key was actually removed."""
        ns = CacheNamespace.coerce(namespace)
        key = self.build_key(ns, identifier)

        result = await self._call_store("delete", ns, lambda: self.store.delete(key), identifier)
        return result.ok and bool(result.value)

    async def invalidate_namespace(self, namespace: Any) -> int:
        """Delete every key in a namespace and return how many were removed.

        Best-effort: keys written between listing and deletion may survive,
        and a cancelled call may leave part of the namespace deleted.
        """
        ns = CacheNamespace.coerce(namespace)
        pattern = self.namespace_pattern(ns)

        listed = await self._call_store("keys", ns, lambda: self.store.keys(pattern))
        if not listed.ok or not listed.value:
            return 0

        keys = list(listed.value)
        deleted = await self._call_store("delete", ns, lambda: self.store.delete(*keys))
        if not deleted.ok:
            return 0

        count = int(deleted.value or 0)
        self.logger.info(
            "Invalidated cache namespace",
            namespace=ns.value,
            pattern=pattern,
            keys_deleted=count,
        )
        if self.metrics:
            self.metrics.increment_counter(
                "cache_invalidated_keys_total", amount=count, namespace=ns.value
            )
        return count

    async def get_or_set(
        self,
        namespace: Any,
        identifier: str,
        fetcher: Callable[[], Awaitable[Any]],
        ttl_seconds: Optional[int] = None,
    ) -> Optional[Any]:
        """Cache-aside read.

        Returns the cached value when present. Otherwise awaits ``fetcher()``
        once, caches a non-``None`` result and returns it. ``None`` results
        are never cached. Exceptions raised by ``fetcher`` propagate.
        """
        cached = await self.get(namespace, identifier)
        if cached is not None:
            return cached

        value = await fetcher()
        if value is None:
            return None

        await self.set(namespace, identifier, value, ttl_seconds)
        return value

    # Observability

    def get_stats(self) -> Dict[str, Any]:
        """Return process-local hit/miss counters and the hit rate."""
        total = self._hits + self._misses
        return {
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": 0.0 if total == 0 else self._hits / total,
        }

    def reset_stats(self) -> None:
        self._hits = 0
        self._misses = 0

    async def health_check(self) -> bool:
        """Check that the backing store answers; stores without ``ping`` count as healthy."""
        ping = getattr(self.store, "ping", None)
        if ping is None:
            return True
        try:
            return bool(await ping())
        except Exception as e:
            self.logger.warning("Cache health check failed", error=str(e))
            return False
