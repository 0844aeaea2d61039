"""
Cache service package for the Stellar backend.

Provides a namespace-partitioned, TTL-governed cache-aside layer in front of
a shared key-value store (Redis in production):

- app.cache: Namespaces, backing-store adapters and the CacheService.
- app.config: Settings loaded from CACHE_* environment variables.
- app.admin: Operator CLI for invalidating and inspecting cached data.

Guidelines:
- The cache is best-effort; a failing store degrades to cache misses.
- Counters are process-local; aggregate across processes via Prometheus.
"""
