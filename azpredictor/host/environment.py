"""Process environment: network adapters, clock, OS description."""
from __future__ import annotations

import logging
import platform
from datetime import datetime, timezone
from typing import Iterable

import psutil

from azpredictor.models import NetworkInterface, OperationalStatus

logger = logging.getLogger(__name__)

_MAC_SEPARATORS = (":", "-", ".")


def format_physical_address(address: str | None) -> str:
    """Uppercase hex without separators; "" for missing or all-zero addresses.

    psutil reports "00:15:5d:0a:1b:2c" (":" or "-" depending on platform);
    the hashed machine id has always been computed over "00155D0A1B2C".
    Loopback adapters report all zeros and count as having no address.
    """
    if not address:
        return ""
    text = address.strip()
    for sep in _MAC_SEPARATORS:
        text = text.replace(sep, "")
    text = text.upper()
    if not text or set(text) == {"0"}:
        return ""
    return text


def select_mac_address(interfaces: Iterable[NetworkInterface] | None) -> str:
    """Physical address of the first adapter that is up and has one."""
    if not interfaces:
        return ""
    for nic in interfaces:
        if nic is None:
            continue
        if nic.operational_status == OperationalStatus.UP and nic.physical_address.strip():
            return nic.physical_address
    return ""


class ProcessEnvironment:
    """Reads host facts through psutil and the standard library."""

    def list_network_interfaces(self) -> list[NetworkInterface]:
        try:
            stats = psutil.net_if_stats()
            addrs = psutil.net_if_addrs()
        except (OSError, RuntimeError) as e:
            logger.debug("Failed to enumerate network interfaces: %s", e)
            return []

        interfaces = []
        for name, nic_addrs in addrs.items():
            physical = ""
            for addr in nic_addrs:
                if addr.family == psutil.AF_LINK:
                    physical = format_physical_address(addr.address)
                    break
            nic_stats = stats.get(name)
            if nic_stats is None:
                status = OperationalStatus.UNKNOWN
            elif nic_stats.isup:
                status = OperationalStatus.UP
            else:
                status = OperationalStatus.DOWN
            interfaces.append(NetworkInterface(
                name=name,
                operational_status=status,
                physical_address=physical,
            ))
        return interfaces

    def current_utc_millisecond(self) -> int:
        return datetime.now(timezone.utc).microsecond // 1000

    def os_version(self) -> str:
        return platform.platform()
