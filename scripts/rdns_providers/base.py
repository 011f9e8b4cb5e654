"""
Abstract Reverse DNS Provider Interface

Provides the base class for reverse DNS providers and the error types
raised when a remote directory cannot be converged.
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from utils.ip import IPAddress

logger = logging.getLogger(__name__)


# =============================================================================
# Errors
# =============================================================================


class ReverseDNSProviderError(Exception):
    """Reverse DNS provider error"""


class RemoteListError(ReverseDNSProviderError):
    """Listing zones or records reported failure"""


class RemoteCreateError(ReverseDNSProviderError):
    """Creating a zone or record failed or returned no usable id"""


class RemoteMutationError(ReverseDNSProviderError):
    """Updating or deleting a record reported failure"""


class TransportError(Exception):
    """Connectivity or protocol failure talking to a remote API"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


# =============================================================================
# Provider
# =============================================================================


@dataclass
class ReverseDNSProviderConfig:
    """Base configuration for reverse DNS providers"""

    # Dry run mode - don't make actual changes
    dry_run: bool = False

    @staticmethod
    def dry_run_from_env() -> bool:
        return os.environ.get("RDNS_DRY_RUN", "false").lower() == "true"


def normalize_hostname(hostname: Optional[str]) -> Optional[str]:
    """
    Normalize a PTR target to its canonical form.

    Blank hostnames mean "no record wanted" and return None. Otherwise the
    hostname is returned with exactly one trailing dot.
    """
    if hostname is None:
        return None
    stripped = hostname.strip().rstrip(".")
    if not stripped:
        return None
    return f"{stripped}."


class ReverseDNSProvider(ABC):
    """
    Abstract base class for reverse DNS providers.

    A provider keeps the PTR record for a single IP in line with the
    hostname requested by the caller. Calls are synchronous and hold no
    state between invocations.
    """

    provider_name: ClassVar[str] = ""
    provider_description: ClassVar[str] = ""

    def __init__(
        self,
        config: ReverseDNSProviderConfig,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.logger = logger or logging.getLogger(
            f"{__name__}.{self.__class__.__name__}"
        )

    @abstractmethod
    def update(
        self, ip_address: Union[str, IPAddress], hostname: Optional[str]
    ) -> None:
        """
        Converge the PTR record for an IP.

        Args:
            ip_address: IPv4 or IPv6 address
            hostname: Desired PTR target, or None to remove the record

        Raises:
            ReverseDNSProviderError: On any fatal remote condition
        """
        pass

    @abstractmethod
    def get_ptr(self, ip_address: Union[str, IPAddress]) -> Optional[str]:
        """
        Get the current PTR target for an IP.

        Returns:
            Hostname with trailing dot, or None if no record exists
        """
        pass

    @abstractmethod
    def verify_credentials(self) -> bool:
        """Check that the remote API accepts our credentials"""
        pass

    def remove(self, ip_address: Union[str, IPAddress]) -> None:
        """Delete the PTR record for an IP if one exists"""
        self.update(ip_address, None)
