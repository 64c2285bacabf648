"""
Shared error handling for the document registry client.
"""

from typing import Dict, Any, Optional


class RegistryClientError(Exception):
    """Base exception for the registry client."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain error payload."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidArgument(RegistryClientError):
    """Malformed input detected before any I/O."""

    def __init__(self, message: str = "Invalid argument", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_ARGUMENT", message, details)


class SerializationError(RegistryClientError):
    """Document payload could not be encoded."""

    def __init__(self, message: str = "Serialization failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("SERIALIZATION_ERROR", message, details)


class TransportError(RegistryClientError):
    """Connection, timeout or I/O failure while talking to the registry."""

    def __init__(self, message: str = "Transport error", details: Optional[Dict[str, Any]] = None):
        super().__init__("TRANSPORT_ERROR", message, details)


class SubmissionRejected(RegistryClientError):
    """Registry answered with a non-success status."""

    def __init__(self, http_status: int, server_message: str, details: Optional[Dict[str, Any]] = None):
        self.http_status = http_status
        self.server_message = server_message
        details = dict(details or {})
        details.setdefault("http_status", http_status)
        super().__init__("SUBMISSION_REJECTED", f"API error: {server_message}", details)
