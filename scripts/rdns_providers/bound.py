"""
Bound Reverse DNS Provider Implementation

Uses the Bound RPC API for PTR (reverse DNS) record management.
Bound is a self hosted web interface on top of BIND. Reverse zones are
created on demand and PTR records are located by name within the zone.
"""

import logging
import os
import traceback
from dataclasses import dataclass
from typing import Any, Optional, Union

import requests

from utils.ip import IPAddress, derive, parse_ip

from .base import (
    RemoteCreateError,
    RemoteListError,
    RemoteMutationError,
    ReverseDNSProvider,
    ReverseDNSProviderConfig,
    ReverseDNSProviderError,
    TransportError,
    normalize_hostname,
)

logger = logging.getLogger(__name__)

BOUND_PTR_RECORD_TYPE = "Bound::BuiltinRecordTypes::PTR"
BOUND_API_PATH = "/api/v1"

# Number of traceback frames logged for transport failures
TRACE_FRAMES = 5

RemoteID = Union[int, str]


@dataclass
class BoundConfig(ReverseDNSProviderConfig):
    """Bound-specific configuration"""

    # API host name
    host: str = ""

    # API port (defaults to 443/80 depending on ssl)
    port: Optional[int] = None

    # Use HTTPS
    ssl: bool = True

    # API key sent as X-Auth-Token
    api_key: str = ""

    # Request timeout in seconds
    timeout: int = 30

    # Record type class identifying PTR records
    ptr_record_type: str = BOUND_PTR_RECORD_TYPE

    # API path prefix
    api_path: str = BOUND_API_PATH

    @property
    def base_url(self) -> str:
        scheme = "https" if self.ssl else "http"
        port = self.port or (443 if self.ssl else 80)
        return f"{scheme}://{self.host}:{port}{self.api_path}"

    def validate(self) -> None:
        """Raise ValueError if required settings are missing"""
        if not self.host:
            raise ValueError("BOUND_HOST not set")
        if not self.api_key:
            raise ValueError("BOUND_API_KEY not set")

    @classmethod
    def from_env(cls) -> "BoundConfig":
        """Create config from environment variables"""
        port_env = os.environ.get("BOUND_PORT", "")
        return cls(
            host=os.environ.get("BOUND_HOST", ""),
            port=int(port_env) if port_env else None,
            ssl=os.environ.get("BOUND_SSL", "true").lower() == "true",
            api_key=os.environ.get("BOUND_API_KEY", ""),
            timeout=int(os.environ.get("BOUND_TIMEOUT", "30")),
            ptr_record_type=os.environ.get(
                "BOUND_PTR_RECORD_TYPE", BOUND_PTR_RECORD_TYPE
            ),
            dry_run=cls.dry_run_from_env(),
        )


@dataclass
class APIResult:
    """Outcome of a single Bound API call"""

    ok: bool
    data: Any = None
    error: Optional[str] = None

    @property
    def id(self) -> Optional[RemoteID]:
        """Identifier of the returned object, if the payload carries one"""
        if self.ok and isinstance(self.data, dict):
            return self.data.get("id")
        return None


def _error_message(status: Any, data: Any) -> str:
    """Build a readable message from a failed API response"""
    if isinstance(data, dict):
        if data.get("message"):
            return str(data["message"])
        if data.get("errors"):
            return f"{status}: {data['errors']}"
        if data.get("code"):
            return f"{status}: {data['code']}"
    return str(status or "unknown error")


class BoundClient:
    """
    Bound RPC API client.

    Every call is a POST to {base_url}/{controller}/{action} with JSON
    parameters. Responses carry a "status" and a "data" payload; a status
    other than "success" is returned as a failed APIResult. Connectivity
    and protocol failures raise TransportError.
    """

    def __init__(
        self, config: BoundConfig, session: Optional[requests.Session] = None
    ):
        self.config = config
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self._session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create configured requests session"""
        session = requests.Session()
        session.headers.update(
            {
                "X-Auth-Token": self.config.api_key,
                "Content-Type": "application/json",
            }
        )
        return session

    def _api_request(
        self,
        controller: str,
        action: str,
        params: Optional[dict[str, Any]] = None,
    ) -> APIResult:
        """Make API request to Bound"""
        url = f"{self.config.base_url}/{controller}/{action}"

        try:
            response = self._session.request(
                method="POST",
                url=url,
                json=params or {},
                timeout=self.config.timeout,
            )
        except requests.RequestException as e:
            self.logger.error(f"Bound API request failed: {e}")
            raise TransportError(f"Request failed: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(
                f"Invalid JSON from {controller}/{action} "
                f"(HTTP {response.status_code})",
                response.status_code,
            ) from e

        if not isinstance(body, dict):
            raise TransportError(
                f"Unexpected response from {controller}/{action}",
                response.status_code,
            )

        status = body.get("status")
        data = body.get("data")

        if status == "success":
            return APIResult(ok=True, data=data)

        error_msg = _error_message(status, data)
        self.logger.error(f"Bound API error on {controller}/{action}: {error_msg}")
        return APIResult(ok=False, data=data, error=error_msg)

    # ==========================================================================
    # Zones
    # ==========================================================================

    def zones_list(self) -> APIResult:
        return self._api_request("zones", "list")

    def zones_create(self, name: str) -> APIResult:
        return self._api_request("zones", "create", {"name": name})

    # ==========================================================================
    # Records
    # ==========================================================================

    def records_list(self, zone_id: RemoteID) -> APIResult:
        return self._api_request("records", "list", {"zone": {"id": zone_id}})

    def records_create(
        self,
        zone_id: RemoteID,
        name: str,
        record_type: str,
        form_data: dict[str, Any],
    ) -> APIResult:
        return self._api_request(
            "records",
            "create",
            {
                "zone": {"id": zone_id},
                "name": name,
                "type": record_type,
                "form_data": form_data,
            },
        )

    def records_update(
        self, record_id: RemoteID, form_data: dict[str, Any]
    ) -> APIResult:
        return self._api_request(
            "records",
            "update",
            {"record": {"id": record_id}, "form_data": form_data},
        )

    def records_destroy(self, record_id: RemoteID) -> APIResult:
        return self._api_request("records", "destroy", {"record": {"id": record_id}})

    def verify_credentials(self) -> bool:
        """Verify API key is valid"""
        try:
            result = self.zones_list()
        except TransportError:
            return False
        if result.ok:
            self.logger.info("Bound API key verified")
        return result.ok


def _list_payload(result: APIResult, what: str) -> list[dict[str, Any]]:
    """Get the items of a list response, rejecting unexpected shapes"""
    if result.data is None:
        return []
    if not isinstance(result.data, list) or not all(
        isinstance(item, dict) for item in result.data
    ):
        raise RemoteListError(
            f"Unexpected payload listing {what}: {type(result.data).__name__}"
        )
    return result.data


def _record_type(record: dict[str, Any]) -> Optional[str]:
    """Extract the type class of a Bound record"""
    record_type = record.get("type")
    if isinstance(record_type, dict):
        return record_type.get("class")
    return record_type


def _record_value(record: dict[str, Any]) -> Optional[str]:
    """Extract the PTR target of a Bound record"""
    form_data = record.get("form_data")
    if isinstance(form_data, dict) and form_data.get("name"):
        return form_data["name"]
    return record.get("value")


class BoundProvider(ReverseDNSProvider):
    """
    Bound reverse DNS provider implementation.

    For each update:
    - Derives the reverse zone and record name from the IP
    - Finds the zone by name, creating it if missing
    - Finds the PTR record by name and converges it (create/update/delete)

    Zone and record ids are always looked up by name; nothing is cached.
    """

    provider_name = "Bound"
    provider_description = (
        "Bound is a self hosted web interface on top of BIND and can provide "
        "support for publishing reverse DNS records."
    )

    def __init__(
        self,
        config: BoundConfig,
        client: Optional[BoundClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(config, logger)
        self.bound_config = config
        self.client = client or BoundClient(config)

    def _transport_failure(
        self, e: TransportError, action: str
    ) -> ReverseDNSProviderError:
        """Log a transport failure and build the error raised to the caller"""
        frames = traceback.format_tb(e.__traceback__)[-TRACE_FRAMES:]
        self.logger.error(f"Bound API transport error while {action}: {e}")
        self.logger.error("".join(frames).rstrip())
        return ReverseDNSProviderError(
            f"Could not communicate with Bound API while {action}"
        )

    # ==========================================================================
    # Public operations
    # ==========================================================================

    def update(
        self, ip_address: Union[str, IPAddress], hostname: Optional[str]
    ) -> None:
        """
        Converge the PTR record for an IP.

        Args:
            ip_address: IPv4 or IPv6 address
            hostname: Desired PTR target, or None to remove the record

        Raises:
            ValueError: If ip_address is not a valid address
            ReverseDNSProviderError: On any remote failure
        """
        address = parse_ip(ip_address)
        zone_name, record_name = derive(address)

        self.logger.info(f"Updating PTR for {address}: {hostname or '(none)'}")

        try:
            zone_id = self._resolve_or_create_zone(zone_name)

            if zone_id is None:
                # Dry run with a zone that does not exist yet
                target = normalize_hostname(hostname)
                if target:
                    self.logger.info(
                        f"[DRY RUN] Would create PTR {record_name} -> {target}"
                    )
                return

            self._converge(zone_id, record_name, hostname)

        except TransportError as e:
            raise self._transport_failure(e, f"updating {address}") from e

    def get_ptr(self, ip_address: Union[str, IPAddress]) -> Optional[str]:
        """Get current PTR target for IP without changing anything"""
        address = parse_ip(ip_address)
        zone_name, record_name = derive(address)

        try:
            zone_id = self._find_zone(zone_name)
            if zone_id is None:
                return None
            record = self._find_record(zone_id, record_name)
        except TransportError as e:
            raise self._transport_failure(e, f"looking up {address}") from e

        if record is None:
            return None
        return normalize_hostname(_record_value(record))

    def verify_credentials(self) -> bool:
        return self.client.verify_credentials()

    def resolve_or_create_zone(self, zone_name: str) -> Optional[RemoteID]:
        """
        Get zone id for a reverse zone, creating the zone if missing.

        Returns:
            Zone id, or None in dry run mode when the zone would be created

        Raises:
            RemoteListError: If zones cannot be listed
            RemoteCreateError: If the zone cannot be created
            ReverseDNSProviderError: If the API cannot be reached
        """
        try:
            return self._resolve_or_create_zone(zone_name)
        except TransportError as e:
            raise self._transport_failure(e, f"resolving zone {zone_name}") from e

    def converge(
        self, zone_id: RemoteID, record_name: str, hostname: Optional[str]
    ) -> Optional[RemoteID]:
        """
        Converge a PTR record to the desired hostname.

        Args:
            zone_id: Zone identifier
            record_name: Record name within the zone
            hostname: Desired PTR target, or None/blank for no record

        Returns:
            Record id if a record exists afterwards, otherwise None

        Raises:
            RemoteListError: If records cannot be listed
            RemoteCreateError: If the record cannot be created
            RemoteMutationError: If the record cannot be updated or deleted
            ReverseDNSProviderError: If the API cannot be reached
        """
        try:
            return self._converge(zone_id, record_name, hostname)
        except TransportError as e:
            raise self._transport_failure(
                e, f"converging PTR {record_name} in zone {zone_id}"
            ) from e

    # ==========================================================================
    # Zone resolution
    # ==========================================================================

    def _find_zone(self, zone_name: str) -> Optional[RemoteID]:
        """Get zone id by name, or None if the zone does not exist"""
        result = self.client.zones_list()
        if not result.ok:
            raise RemoteListError(f"Could not list zones: {result.error}")

        for zone in _list_payload(result, "zones"):
            if zone.get("name") == zone_name:
                self.logger.debug(f"Found zone {zone_name} ({zone.get('id')})")
                return zone.get("id")

        return None

    def _resolve_or_create_zone(self, zone_name: str) -> Optional[RemoteID]:
        """Resolve zone id without translating transport failures"""
        zone_id = self._find_zone(zone_name)
        if zone_id is not None:
            return zone_id

        if self.config.dry_run:
            self.logger.info(f"[DRY RUN] Would create zone {zone_name}")
            return None

        self.logger.info(f"Creating zone {zone_name}")
        result = self.client.zones_create(zone_name)

        if not result or result.id is None:
            error = result.error if result else None
            self.logger.error(f"✗ Failed to create zone {zone_name}")
            raise RemoteCreateError(
                f"Could not create zone {zone_name}: {error or 'no zone id returned'}"
            )

        self.logger.info(f"✓ Created zone {zone_name} ({result.id})")
        return result.id

    # ==========================================================================
    # Record reconciliation
    # ==========================================================================

    def _find_record(
        self, zone_id: RemoteID, record_name: str
    ) -> Optional[dict[str, Any]]:
        """Get the PTR record with the given name in a zone"""
        result = self.client.records_list(zone_id)
        if not result.ok:
            raise RemoteListError(
                f"Could not list records in zone {zone_id}: {result.error}"
            )

        matches = [
            record
            for record in _list_payload(result, f"records in zone {zone_id}")
            if record.get("name") == record_name
            and _record_type(record) == self.bound_config.ptr_record_type
        ]

        if len(matches) > 1:
            self.logger.warning(
                f"Found {len(matches)} PTR records named {record_name} "
                f"in zone {zone_id}, using the first"
            )

        return matches[0] if matches else None

    def _converge(
        self, zone_id: RemoteID, record_name: str, hostname: Optional[str]
    ) -> Optional[RemoteID]:
        """Converge without translating transport failures"""
        target = normalize_hostname(hostname)
        existing = self._find_record(zone_id, record_name)

        if existing is not None:
            record_id = existing.get("id")

            if target is None:
                return self._delete_record(record_id, record_name)

            current = normalize_hostname(_record_value(existing))
            if current == target:
                self.logger.debug(f"PTR {record_name} unchanged ({target})")
                return record_id

            self._update_record(record_id, record_name, current, target)
            return record_id

        if target is None:
            self.logger.debug(f"No PTR {record_name} in zone {zone_id}, nothing to do")
            return None

        return self._create_record(zone_id, record_name, target)

    def _create_record(
        self, zone_id: RemoteID, record_name: str, target: str
    ) -> Optional[RemoteID]:
        self.logger.info(f"Creating PTR {record_name} -> {target}")

        if self.config.dry_run:
            self.logger.info("[DRY RUN] Would create record")
            return None

        result = self.client.records_create(
            zone_id,
            record_name,
            self.bound_config.ptr_record_type,
            {"name": target},
        )

        if not result or result.id is None:
            error = result.error if result else None
            self.logger.error(f"✗ Failed to create PTR {record_name}")
            raise RemoteCreateError(
                f"Could not create PTR {record_name} in zone {zone_id}: "
                f"{error or 'no record id returned'}"
            )

        self.logger.info(f"✓ Created PTR {record_name} ({result.id})")
        return result.id

    def _update_record(
        self,
        record_id: RemoteID,
        record_name: str,
        current: Optional[str],
        target: str,
    ) -> None:
        self.logger.info(f"Updating PTR {record_name}: {current} -> {target}")

        if self.config.dry_run:
            self.logger.info("[DRY RUN] Would update record")
            return

        result = self.client.records_update(record_id, {"name": target})
        if not result or not result.ok:
            self.logger.error(f"✗ Failed to update PTR {record_name}")
            raise RemoteMutationError(
                f"Could not update PTR {record_name} ({record_id}): "
                f"{result.error if result else 'no response'}"
            )

        self.logger.info(f"✓ Updated PTR {record_name}")

    def _delete_record(self, record_id: RemoteID, record_name: str) -> None:
        self.logger.info(f"Deleting PTR {record_name}")

        if self.config.dry_run:
            self.logger.info("[DRY RUN] Would delete record")
            return None

        result = self.client.records_destroy(record_id)
        if not result or not result.ok:
            self.logger.error(f"✗ Failed to delete PTR {record_name}")
            raise RemoteMutationError(
                f"Could not delete PTR {record_name} ({record_id}): "
                f"{result.error if result else 'no response'}"
            )

        self.logger.info(f"✓ Deleted PTR {record_name}")
        return None
