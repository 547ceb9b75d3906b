"""pro - Pull Request Opener."""

from propener.errors import (
    ProError,
    ProviderError,
    RequestNotFound,
    TokenExpired,
    TransportError,
    Unauthorized,
)
from propener.remote_url import RemoteDescriptor, UrlParseError, parse_remote_url
from propener.repository import Branch, Repository, find_repository

__version__ = "0.1.5"

__all__ = [
    "__version__",
    "ProError",
    "ProviderError",
    "RequestNotFound",
    "TokenExpired",
    "TransportError",
    "Unauthorized",
    "RemoteDescriptor",
    "UrlParseError",
    "parse_remote_url",
    "Branch",
    "Repository",
    "find_repository",
]
