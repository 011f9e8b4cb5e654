"""
Reverse DNS Provider Registry

Factory for creating reverse DNS provider instances based on configuration.
"""

import logging
import os
from typing import Any, Optional, Type

from .base import ReverseDNSProvider, ReverseDNSProviderConfig

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "bound"

# Provider registry
_providers: dict[str, Type[ReverseDNSProvider]] = {}


def register_provider(name: str, provider_class: Type[ReverseDNSProvider]) -> None:
    """Register a reverse DNS provider class"""
    _providers[name.lower()] = provider_class
    logger.debug(f"Registered reverse DNS provider: {name}")


def list_providers() -> dict[str, str]:
    """Get registered provider names with their descriptions"""
    return {
        name: provider_class.provider_description
        for name, provider_class in sorted(_providers.items())
    }


def get_provider(provider_name: str, **kwargs: Any) -> Optional[ReverseDNSProvider]:
    """
    Get a configured reverse DNS provider instance.

    Args:
        provider_name: Provider type (e.g., "bound")
        **kwargs: Provider-specific configuration overrides

    Returns:
        Configured ReverseDNSProvider instance or None

    Raises:
        ValueError: If required provider settings are missing
    """
    provider_name = provider_name.lower()

    if provider_name not in _providers:
        logger.error(f"Unknown reverse DNS provider: {provider_name}")
        logger.info(f"Available providers: {list(_providers.keys())}")
        return None

    provider_class = _providers[provider_name]

    # Create provider-specific config
    if provider_name == "bound":
        from .bound import BoundConfig

        bound_config = BoundConfig.from_env()

        # Override with kwargs
        for key, value in kwargs.items():
            if hasattr(bound_config, key):
                setattr(bound_config, key, value)

        bound_config.validate()
        return provider_class(bound_config)

    # Generic provider
    generic_config = ReverseDNSProviderConfig(
        dry_run=ReverseDNSProviderConfig.dry_run_from_env()
    )

    for key, value in kwargs.items():
        if hasattr(generic_config, key):
            setattr(generic_config, key, value)

    return provider_class(generic_config)


def get_provider_from_env() -> Optional[ReverseDNSProvider]:
    """
    Create reverse DNS provider from environment variables.

    Environment variables:
        RDNS_PROVIDER: Provider name (default: bound)

    Provider-specific variables are handled by each provider.
    """
    provider_name = os.environ.get("RDNS_PROVIDER", DEFAULT_PROVIDER)

    logger.info(f"Creating reverse DNS provider: {provider_name}")

    return get_provider(provider_name)


# Auto-register built-in providers
def _register_builtin_providers() -> None:
    """Register all built-in providers"""
    from .bound import BoundProvider

    register_provider("bound", BoundProvider)


_register_builtin_providers()
