"""
Shared utilities for the Stellar cache layer.

This package aggregates common building blocks consumed by the service:

- config: Base configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types
- test_helpers: In-memory store and sample data for tests

Do not import from service_* packages into shared/.
"""
