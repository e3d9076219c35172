"""Cohort assignment for staged rollout and A/B measurement.

A machine's cohort is the last hex digit of its hashed MAC address modulo
the cohort count, so the same machine always lands in the same bucket.

Machines without a usable MAC hash fall back to a pseudorandom bucket seeded
with the current UTC millisecond-of-second. That gives only ~1000 distinct
seeds and correlates with wall-clock time; existing cohort data was collected
this way, so the fallback is kept as-is.
"""
from __future__ import annotations

import logging
import random
import string

logger = logging.getLogger(__name__)

DEFAULT_COHORT_COUNT = 10

# Upper bound (exclusive) of the fallback draw: a non-negative signed 32-bit int.
_FALLBACK_DRAW_LIMIT = 2**31 - 1


def validate_cohort_count(cohort_count: int) -> int:
    """Return cohort_count, raising ValueError unless it is a positive int."""
    if isinstance(cohort_count, bool) or not isinstance(cohort_count, int) or cohort_count <= 0:
        raise ValueError(f"cohort_count must be a positive integer, got {cohort_count!r}")
    return cohort_count


def cohort_from_digest(hashed_mac: str, cohort_count: int) -> int | None:
    """Cohort derived from the digest's last hex digit, or None if unusable."""
    if not hashed_mac or not hashed_mac.strip():
        return None
    last_char = hashed_mac[-1]
    if last_char not in string.hexdigits:
        logger.debug("Last character of MAC hash is not a hex digit: %r", last_char)
        return None
    return int(last_char, 16) % cohort_count


def fallback_cohort(cohort_count: int, millisecond: int) -> int:
    """Pseudorandom cohort seeded by the millisecond-of-second."""
    return random.Random(millisecond).randrange(_FALLBACK_DRAW_LIMIT) % cohort_count


def assign_cohort(hashed_mac: str, cohort_count: int, millisecond: int) -> int:
    """Assign a cohort in [0, cohort_count).

    Args:
        hashed_mac: normalized MAC address hash, may be empty
        cohort_count: number of buckets, must be > 0
        millisecond: current UTC millisecond-of-second, used only by the fallback
    """
    validate_cohort_count(cohort_count)
    cohort = cohort_from_digest(hashed_mac, cohort_count)
    if cohort is not None:
        return cohort
    return fallback_cohort(cohort_count, millisecond)
