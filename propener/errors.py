"""Exceptions shared across pro."""

from __future__ import annotations


class ProError(RuntimeError):
    """Base exception for all errors reported to the user."""


class ProviderError(ProError):
    """Base exception for outcomes of a pull/merge request lookup."""


class RequestNotFound(ProviderError):
    """Raised when no open request exists for the branch."""


class Unauthorized(ProviderError):
    """Raised when the provider rejects the access token."""


class TokenExpired(Unauthorized):
    """Raised when the provider reports the access token as expired."""


class TransportError(ProviderError):
    """Raised for any other lookup failure (network, HTTP status, payload)."""
