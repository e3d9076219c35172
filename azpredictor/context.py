"""IdentityContext: cached identity and version facts for one host session.

All reads are best-effort. A failing PowerShell query, an unparseable
version or a missing network adapter falls back to a default value and is
logged at DEBUG; nothing here raises into the host application.

Lazy fields are computed on first access and never recomputed. There is no
locking: a host that reads one context from several threads must serialize
those reads itself.
"""
from __future__ import annotations

import logging
from importlib import metadata
from typing import Any

from azpredictor import __version__
from azpredictor.host.commands import (
    ACCOUNT_ID_SCRIPT,
    AZ_MODULE_SCRIPT,
    AZ_PREVIEW_MODULE_SCRIPT,
    HOST_VERSION_SCRIPT,
    CommandExecutionError,
    CommandExecutor,
    PowerShellExecutor,
)
from azpredictor.host.environment import ProcessEnvironment, select_mac_address
from azpredictor.models import DEFAULT_VERSION, ContextSnapshot, Version
from azpredictor.telemetry.cohort import (
    DEFAULT_COHORT_COUNT,
    assign_cohort,
    validate_cohort_count,
)
from azpredictor.telemetry.hashing import hash_string, normalize_digest
from azpredictor.telemetry.versions import resolve_latest_version, resolve_single_version

logger = logging.getLogger(__name__)

INTERNAL_USER_SUFFIX = "@microsoft.com"
DISTRIBUTION_NAME = "azpredictor-context"


class IdentityContext:
    """Identity context of the current Azure PowerShell session.

    Args:
        executor: runs PowerShell scripts; defaults to a PowerShellExecutor
        environment: supplies network adapters, clock and OS description
        cohort_count: number of cohorts, must be > 0
    """

    def __init__(self, executor: CommandExecutor | None = None,
                 environment: ProcessEnvironment | None = None,
                 cohort_count: int = DEFAULT_COHORT_COUNT):
        self.cohort_count = validate_cohort_count(cohort_count)
        self._executor = executor
        self._owns_executor = executor is None
        self._closed = False
        self._environment = environment or ProcessEnvironment()

        # Refreshed by update_context()
        self._az_version: Version = DEFAULT_VERSION
        self._raw_user_id = ""
        self._hash_user_id = ""
        self._is_internal = False

        # Computed once
        self._cohort: int | None = None
        self._mac_address_hash: str | None = None
        self._powershell_version: Version | None = None
        self._module_version: Version | None = None

    # ── Session fields ───────────────────────────────────────────────

    @property
    def az_version(self) -> Version:
        return self._az_version

    @property
    def raw_user_id(self) -> str:
        return self._raw_user_id

    @property
    def hash_user_id(self) -> str:
        return self._hash_user_id

    @property
    def is_internal(self) -> bool:
        return self._is_internal

    def update_context(self) -> None:
        """Refresh az_version, raw_user_id, hash_user_id and is_internal.

        Everything is computed before any field is assigned.
        """
        az_version = self._query_az_version()
        raw_user_id = self._query_user_account_id()
        hash_user_id = hash_string(raw_user_id)
        is_internal = self._is_internal or raw_user_id.lower().endswith(INTERNAL_USER_SUFFIX)

        self._az_version = az_version
        self._raw_user_id = raw_user_id
        self._hash_user_id = hash_user_id
        self._is_internal = is_internal

    # ── Lazy fields ──────────────────────────────────────────────────

    @property
    def mac_address_hash(self) -> str:
        if self._mac_address_hash is None:
            self._mac_address_hash = ""
            try:
                mac_address = select_mac_address(self._environment.list_network_interfaces())
            except Exception as e:
                logger.debug("Failed to read MAC address: %s", e)
                mac_address = ""
            if mac_address.strip():
                self._mac_address_hash = normalize_digest(hash_string(mac_address))
        return self._mac_address_hash

    @property
    def cohort(self) -> int:
        if self._cohort is None:
            try:
                millisecond = self._environment.current_utc_millisecond()
            except Exception as e:
                logger.debug("Failed to read clock: %s", e)
                millisecond = 0
            self._cohort = assign_cohort(self.mac_address_hash, self.cohort_count, millisecond)
        return self._cohort

    @property
    def powershell_version(self) -> Version:
        if self._powershell_version is None:
            outputs = self._execute(HOST_VERSION_SCRIPT)
            raw = outputs[0] if outputs else None
            self._powershell_version = resolve_single_version(
                None if raw is None else str(raw))
        return self._powershell_version

    @property
    def module_version(self) -> Version:
        if self._module_version is None:
            try:
                raw = metadata.version(DISTRIBUTION_NAME)
            except metadata.PackageNotFoundError:
                raw = __version__
            self._module_version = resolve_single_version(raw)
        return self._module_version

    @property
    def os_version(self) -> str:
        try:
            return self._environment.os_version()
        except Exception as e:
            logger.debug("Failed to read OS version: %s", e)
            return ""

    def snapshot(self) -> ContextSnapshot:
        """Copy of every field, computing lazy fields as needed."""
        return ContextSnapshot(
            az_version=self.az_version,
            powershell_version=self.powershell_version,
            module_version=self.module_version,
            hash_user_id=self.hash_user_id,
            mac_address_hash=self.mac_address_hash,
            cohort=self.cohort,
            is_internal=self.is_internal,
            os_version=self.os_version,
        )

    # ── Lifecycle ────────────────────────────────────────────────────

    def close(self) -> None:
        """Release the executor if this context created it. Idempotent."""
        self._closed = True
        if self._executor is not None and self._owns_executor:
            self._executor.close()
        self._executor = None

    def __enter__(self) -> IdentityContext:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ── Queries ──────────────────────────────────────────────────────

    @property
    def executor(self) -> CommandExecutor:
        if self._closed:
            raise CommandExecutionError("Identity context is closed")
        if self._executor is None:
            self._executor = PowerShellExecutor()
            self._owns_executor = True
        return self._executor

    def _execute(self, script: str) -> list[Any]:
        """Run script, returning [] on any failure."""
        try:
            return list(self.executor.execute(script) or [])
        except Exception as e:
            logger.debug("Query %r failed: %s", script, e)
            return []

    def _query_user_account_id(self) -> str:
        """Signed-in account id, or "" when not logged in."""
        outputs = self._execute(ACCOUNT_ID_SCRIPT)
        if not outputs or outputs[0] is None:
            return ""
        return str(outputs[0])

    def _query_az_version(self) -> Version:
        """Latest installed Az version, trying AzPreview when Az is absent."""
        outputs = self._execute(AZ_MODULE_SCRIPT)
        if not outputs:
            outputs = self._execute(AZ_PREVIEW_MODULE_SCRIPT)
        if not outputs:
            return DEFAULT_VERSION
        try:
            candidates = [_descriptor_version(o) for o in outputs]
        except (KeyError, AttributeError, TypeError) as e:
            logger.debug("Malformed module descriptor: %s", e)
            return DEFAULT_VERSION
        return resolve_latest_version(candidates)


def _descriptor_version(descriptor: Any) -> str:
    """Version string of a Get-Module result (dict or object)."""
    if isinstance(descriptor, dict):
        value = descriptor["Version"]
    else:
        value = descriptor.Version
    if value is None:
        raise TypeError("Module descriptor has no Version")
    return str(value)
