from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum

# Sentinel for an absent build/revision component. Compares lower than any
# present component, so 1.2 < 1.2.0 < 1.2.0.0.
MISSING_COMPONENT = -1


class OperationalStatus(str, Enum):
    UP = "up"
    DOWN = "down"
    UNKNOWN = "unknown"


@dataclass(frozen=True, order=True)
class Version:
    """A major.minor[.build[.revision]] version.

    Ordering is component-wise left to right. build and revision are
    MISSING_COMPONENT when the version string did not carry them.
    """
    major: int
    minor: int
    build: int = MISSING_COMPONENT
    revision: int = MISSING_COMPONENT

    def __post_init__(self) -> None:
        if self.major < 0 or self.minor < 0:
            raise ValueError(f"Version components must be non-negative: {self.major}.{self.minor}")
        if self.build < MISSING_COMPONENT or self.revision < MISSING_COMPONENT:
            raise ValueError("Version components must be non-negative")
        if self.build == MISSING_COMPONENT and self.revision != MISSING_COMPONENT:
            raise ValueError("Version revision requires a build component")

    @property
    def components(self) -> tuple[int, ...]:
        parts = [self.major, self.minor]
        if self.build != MISSING_COMPONENT:
            parts.append(self.build)
            if self.revision != MISSING_COMPONENT:
                parts.append(self.revision)
        return tuple(parts)

    def __str__(self) -> str:
        return ".".join(str(p) for p in self.components)


DEFAULT_VERSION = Version(0, 0, 0, 0)


@dataclass(frozen=True)
class NetworkInterface:
    """A network adapter as reported by the process environment.

    physical_address is uppercase hex without separators ("00155D0A1B2C"),
    empty when the adapter has no hardware address.
    """
    name: str
    operational_status: OperationalStatus
    physical_address: str = ""


@dataclass(frozen=True)
class ContextSnapshot:
    """Point-in-time copy of every IdentityContext field."""
    az_version: Version
    powershell_version: Version
    module_version: Version
    hash_user_id: str
    mac_address_hash: str
    cohort: int
    is_internal: bool
    os_version: str

    def to_dict(self) -> dict:
        """JSON-friendly dict. Versions are rendered as strings."""
        out = asdict(self)
        out["az_version"] = str(self.az_version)
        out["powershell_version"] = str(self.powershell_version)
        out["module_version"] = str(self.module_version)
        return out
