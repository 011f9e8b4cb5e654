# Reverse DNS Management Module
# Provides abstract reverse DNS provider interface and implementations

from .base import (
    RemoteCreateError,
    RemoteListError,
    RemoteMutationError,
    ReverseDNSProvider,
    ReverseDNSProviderError,
    TransportError,
)
from .registry import (
    get_provider,
    get_provider_from_env,
    list_providers,
    register_provider,
)

__all__ = [
    "RemoteCreateError",
    "RemoteListError",
    "RemoteMutationError",
    "ReverseDNSProvider",
    "ReverseDNSProviderError",
    "TransportError",
    "get_provider",
    "get_provider_from_env",
    "list_providers",
    "register_provider",
]
