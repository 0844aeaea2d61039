"""
Shared error handling for the Stellar cache layer.
"""

from typing import Dict, Any, Optional


class CacheLayerException(Exception):
    """Base exception for the cache layer."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a serializable error payload."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class BackingStoreError(CacheLayerException):
    """Key-value store infrastructure errors."""

    def __init__(self, code: str = "BACKING_STORE_ERROR", message: str = "Backing store error", details: Optional[Dict[str, Any]] = None):
        super().__init__(code, message, details)


class UnknownNamespaceError(CacheLayerException, ValueError):
    """A namespace outside the known cache namespaces was used."""

    def __init__(self, namespace: Any, details: Optional[Dict[str, Any]] = None):
        self.namespace = namespace
        super().__init__("UNKNOWN_NAMESPACE", f"Unknown cache namespace: {namespace!r}", details)


class CacheConfigurationError(CacheLayerException):
    """Invalid cache configuration."""

    def __init__(self, message: str = "Invalid cache configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)
