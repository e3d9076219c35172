"""Per-event telemetry properties built from an IdentityContext.

A telemetry client attaches these to every event it sends. Building them
never raises: each field falls back to its default on failure.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from azpredictor.models import DEFAULT_VERSION

logger = logging.getLogger(__name__)


@dataclass
class ContextProperties:
    """Anonymous. No raw account id or MAC address ever lands here."""

    UserId: str = ""
    HashMacAddress: str = ""
    Cohort: int = -1
    IsInternal: bool = False
    AzVersion: str = str(DEFAULT_VERSION)
    PowerShellVersion: str = str(DEFAULT_VERSION)
    ModuleVersion: str = str(DEFAULT_VERSION)
    OS: str = ""


# property name -> IdentityContext attribute, stringified where the value is a Version
_FIELDS = (
    ("UserId", "hash_user_id", False),
    ("HashMacAddress", "mac_address_hash", False),
    ("Cohort", "cohort", False),
    ("IsInternal", "is_internal", False),
    ("AzVersion", "az_version", True),
    ("PowerShellVersion", "powershell_version", True),
    ("ModuleVersion", "module_version", True),
    ("OS", "os_version", False),
)


def build_context_properties(context) -> ContextProperties:
    """Read every identity field from context into a ContextProperties."""
    props = ContextProperties()
    for name, attr, stringify in _FIELDS:
        try:
            value = getattr(context, attr)
            setattr(props, name, str(value) if stringify else value)
        except Exception as e:
            logger.debug("Failed to read %s for telemetry: %s", attr, e)
    return props


def context_properties_dict(context) -> dict:
    return asdict(build_context_properties(context))
