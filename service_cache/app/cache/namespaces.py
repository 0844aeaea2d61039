"""
Cache namespaces, their key abbreviations and default TTLs.

Abbreviations are part of every stored key. Changing one orphans all data
already cached under the old abbreviation for that namespace.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from shared.errors import UnknownNamespaceError


class CacheNamespace(str, Enum):
    """Closed set of cache key partitions."""

    TRANSACTIONS = "transactions"
    USERS = "users"
    INVOICES = "invoices"
    ESCROWS = "escrows"
    GENERAL = "general"

    @classmethod
    def coerce(cls, value: Any) -> "CacheNamespace":
        """Resolve a member, member value or member name to a namespace.

        Raises:
            UnknownNamespaceError: if ``value`` names no known namespace.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        raise UnknownNamespaceError(value)


NAMESPACE_ABBREVIATIONS: Mapping[CacheNamespace, str] = MappingProxyType({
    CacheNamespace.TRANSACTIONS: "txn",
    CacheNamespace.USERS: "usr",
    CacheNamespace.INVOICES: "inv",
    CacheNamespace.ESCROWS: "esc",
    CacheNamespace.GENERAL: "gen",
})

# Seconds
DEFAULT_TTL: Mapping[CacheNamespace, int] = MappingProxyType({
    CacheNamespace.TRANSACTIONS: 60,    # transactions change frequently
    CacheNamespace.USERS: 300,          # user profiles change rarely
    CacheNamespace.INVOICES: 120,
    CacheNamespace.ESCROWS: 120,
    CacheNamespace.GENERAL: 60,
})


def abbreviation(namespace: Any) -> str:
    """Return the key abbreviation for a namespace."""
    return NAMESPACE_ABBREVIATIONS[CacheNamespace.coerce(namespace)]
