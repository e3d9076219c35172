"""Version parsing for module and host version strings.

Strings come from Get-Module / Get-Host output and may carry a pre-release
suffix ("1.2.3-preview"). Only the part before the first "-" is parsed.
"""
from __future__ import annotations

import logging
from typing import Iterable

from azpredictor.models import DEFAULT_VERSION, Version

logger = logging.getLogger(__name__)

PRERELEASE_SEPARATOR = "-"


def parse_version(raw: str) -> Version:
    """Parse "major.minor[.build[.revision]]", ignoring any "-suffix".

    Raises ValueError on anything else.
    """
    if raw is None:
        raise ValueError("Version string is None")
    text = str(raw).strip()
    position = text.find(PRERELEASE_SEPARATOR)
    if position != -1:
        text = text[:position]

    parts = text.split(".")
    if not 2 <= len(parts) <= 4:
        raise ValueError(f"Invalid version format: {raw!r}")
    for part in parts:
        # ASCII digits only
        if not (part.isascii() and part.isdigit()):
            raise ValueError(f"Invalid version component {part!r} in {raw!r}")
    return Version(*(int(p) for p in parts))


def resolve_single_version(raw: str | None) -> Version:
    """Parse one version string, DEFAULT_VERSION on failure."""
    try:
        return parse_version(raw)
    except ValueError as e:
        logger.debug("Unparseable version: %s", e)
        return DEFAULT_VERSION


def resolve_latest_version(candidates: Iterable[str]) -> Version:
    """Return the highest version among candidates.

    A single unparseable candidate fails the whole resolution and
    DEFAULT_VERSION is returned, as is the case for no candidates.
    """
    latest = DEFAULT_VERSION
    try:
        for candidate in candidates:
            current = parse_version(candidate)
            if current > latest:
                latest = current
    except ValueError as e:
        logger.debug("Version resolution failed: %s", e)
        return DEFAULT_VERSION
    return latest
