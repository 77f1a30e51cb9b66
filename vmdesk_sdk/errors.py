#!/usr/bin/env python3
"""
VMDesk SDK - Error Classes
==========================

Unified error hierarchy for the VMDesk SDK.
Both transports (local binding, remote HTTP) surface failures through these
types, so UI code can tell "the exchange failed" apart from "the peer said no".

Example:
    from vmdesk_sdk import VMDeskError, TransportError, ActionError

    try:
        await api.vm_start("h1", "web-01")
    except ActionError as e:
        print(f"Peer refused {e.action}: {e}")
    except TransportError as e:
        print(f"Could not reach peer ({e.category}): {e}")
    except VMDeskError as e:
        print(f"SDK error: {e}")
"""

from typing import Optional, Dict, Any


# ============================================================================
# Base Error
# ============================================================================

class VMDeskError(Exception):
    """
    Base exception for all VMDesk SDK errors.

    All SDK-specific exceptions inherit from this class,
    allowing callers to catch all SDK errors with a single except clause.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | details={self.details}"
        return self.message


# ============================================================================
# Transport Errors
# ============================================================================

class TransportError(VMDeskError):
    """
    The exchange with the remote peer itself failed.

    Raised when:
    - The peer is unreachable (connection refused, DNS failure)
    - The request timed out
    - The peer answered with a non-2xx HTTP status
    - The response body is not a valid action envelope

    ``category`` is one of ``network``, ``timeout``, ``http`` or ``decode``.
    """

    def __init__(
        self,
        message: str,
        category: str = "network",
        status_code: Optional[int] = None,
        reason: Optional[str] = None,
        action: Optional[str] = None,
        url: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, kwargs)
        self.category = category
        self.status_code = status_code
        self.reason = reason
        self.action = action
        self.url = url
        self.details["category"] = category
        if status_code is not None:
            self.details["status_code"] = status_code
        if action is not None:
            self.details["action"] = action


class AuthenticationError(TransportError):
    """
    The peer rejected the credential (HTTP 401).
    """

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("category", "http")
        kwargs.setdefault("status_code", 401)
        super().__init__(message, **kwargs)


class VerificationError(TransportError):
    """
    Remote endpoint verification failed during connect.

    Only raised by ``ConnectionManager.connect_remote`` when the peer answered
    the verification call but did not identify itself with a version string.
    The registry is always rolled back to local mode before this is raised.
    """

    def __init__(self, message: str, base_url: Optional[str] = None, **kwargs):
        kwargs.setdefault("category", "verification")
        super().__init__(message, url=base_url, **kwargs)
        self.details["base_url"] = base_url


# ============================================================================
# Action Errors
# ============================================================================

class ActionError(VMDeskError):
    """
    The peer understood the request but reported a domain-level failure.

    ``message`` is the peer-supplied ``msg`` field, or a generic fallback
    when the peer supplied none.
    """

    DEFAULT_MESSAGE = "remote call failed"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[int] = None,
        action: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message or self.DEFAULT_MESSAGE, kwargs)
        self.code = code
        self.action = action

    def __str__(self) -> str:
        # The peer message is shown verbatim to users.
        return self.message


# ============================================================================
# Configuration & Binding Errors
# ============================================================================

class ConfigurationError(VMDeskError):
    """
    Configuration is invalid.

    Raised for malformed remote endpoints, an inconsistent operation table,
    or an unknown operation name.
    """

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, kwargs)
        self.field = field
        if field is not None:
            self.details["field"] = field


class LocalBindingError(VMDeskError):
    """
    Local mode is active but the operation cannot be bound.

    Raised when no local binding was supplied, or the binding does not
    expose a callable for the requested operation.
    """

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs):
        super().__init__(message, kwargs)
        self.operation = operation
        self.details["operation"] = operation


# ============================================================================
# Exports
# ============================================================================

__all__ = [
    # Base
    "VMDeskError",

    # Transport
    "TransportError",
    "AuthenticationError",
    "VerificationError",

    # Peer-reported
    "ActionError",

    # Configuration & local binding
    "ConfigurationError",
    "LocalBindingError",
]
