"""IP Address Utilities.

Provides parsing of caller-supplied IP addresses and derivation of the
reverse zone / record name pair used to store PTR records.
"""

from __future__ import annotations

import ipaddress
import logging
from typing import Optional, Union

import dns.exception
import dns.resolver

logger = logging.getLogger(__name__)

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

# Number of nibbles in the ip6.arpa record label (host half of the address)
IPV6_RECORD_NIBBLES = 16


def parse_ip(value: Union[str, IPAddress]) -> IPAddress:
    """
    Parse an IPv4 or IPv6 address.

    Args:
        value: Address string or ipaddress object

    Returns:
        IPv4Address or IPv6Address

    Raises:
        ValueError: If value is not a valid address
    """
    if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return value
    return ipaddress.ip_address(str(value).strip())


def is_valid_ip(value: str) -> bool:
    """Check whether value is a valid IPv4 or IPv6 address"""
    try:
        parse_ip(value)
    except ValueError:
        return False
    return True


def derive(ip: Union[str, IPAddress]) -> tuple[str, str]:
    """
    Derive (zone_name, record_name) for an IP address.

    IPv4 uses the in-addr.arpa convention: the last octet is the record
    name and the remaining reversed octets form the zone.

        192.0.2.5 -> ("2.0.192.in-addr.arpa", "5")

    IPv6 uses the ip6.arpa convention: the first 16 reversed nibbles are
    the record name and the remaining 16 nibbles form the zone.

    Args:
        ip: Address string or ipaddress object

    Returns:
        Tuple of (zone_name, record_name)
    """
    address = parse_ip(ip)
    pointer = address.reverse_pointer

    if address.version == 4:
        record_name, zone_name = pointer.split(".", 1)
    else:
        labels = pointer.split(".")
        record_name = ".".join(labels[:IPV6_RECORD_NIBBLES])
        zone_name = ".".join(labels[IPV6_RECORD_NIBBLES:])

    logger.debug(f"Derived reverse names for {address}: {record_name} in {zone_name}")
    return zone_name, record_name


def lookup_ptr(
    ip: Union[str, IPAddress], nameserver: Optional[str] = None
) -> Optional[str]:
    """
    Resolve the live PTR record for an IP via DNS.

    Args:
        ip: Address string or ipaddress object
        nameserver: Query this server instead of the system resolver

    Returns:
        PTR target with trailing dot, or None if not published
    """
    address = parse_ip(ip)
    resolver = dns.resolver.Resolver()
    if nameserver:
        resolver.nameservers = [nameserver]
    resolver.timeout = 5
    resolver.lifetime = 10

    try:
        answers = resolver.resolve_address(str(address))
        return str(answers[0])
    except (
        dns.resolver.NXDOMAIN,
        dns.resolver.NoAnswer,
        dns.resolver.NoNameservers,
        dns.exception.Timeout,
    ) as e:
        logger.debug(f"PTR lookup for {address} returned nothing: {e}")
        return None
