"""
Local address enumeration for the dashboard footer.
"""

import ipaddress
import logging
import socket
from typing import Iterable, List, Optional

import psutil

logger = logging.getLogger(__name__)

LOOPBACK_ADDRESSES = frozenset({"127.0.0.1/8", "::1/128"})
LINK_LOCAL_PREFIX = "fe80:"


def filter_addresses(addresses: Iterable[str]) -> List[str]:
    """Drop empty, loopback and link-local addresses, keeping order."""
    ret = []
    for addr in addresses:
        if not addr or addr in LOOPBACK_ADDRESSES or addr.startswith(LINK_LOCAL_PREFIX):
            continue
        ret.append(addr)
    return ret


def _prefix_length(family: int, netmask: Optional[str]) -> Optional[int]:
    """Convert a netmask as reported by psutil into a prefix length."""
    if not netmask:
        return None
    try:
        if family == socket.AF_INET6:
            return bin(int(ipaddress.IPv6Address(netmask))).count('1')
        return ipaddress.IPv4Network(f"0.0.0.0/{netmask}").prefixlen
    except ValueError:
        return None


def _format_address(family: int, address: str, netmask: Optional[str]) -> str:
    # psutil reports link-local IPv6 addresses with a "%iface" scope suffix
    address = address.split('%', 1)[0]
    prefix = _prefix_length(family, netmask)
    if prefix is None:
        return address
    return f"{address}/{prefix}"


def list_interface_addresses() -> List[str]:
    """Every IPv4/IPv6 address of every interface, as "addr/prefixlen"."""
    ret = []
    for _iface, addrs in psutil.net_if_addrs().items():
        for addr in addrs:
            if addr.family not in (socket.AF_INET, socket.AF_INET6):
                continue
            ret.append(_format_address(addr.family, addr.address, addr.netmask))
    return ret


def get_ip_addresses() -> List[str]:
    """
    Return the addresses worth showing on the console.

    If enumeration fails the error text is returned in place of the list so
    that it shows up on the dashboard.
    """
    try:
        addresses = list_interface_addresses()
    except (OSError, psutil.Error) as e:
        logger.debug(f"Cannot enumerate interface addresses: {e}")
        return [str(e)]

    return filter_addresses(addresses)
