"""Telemetry identity subsystem.

ARCHITECTURAL INVARIANT: Nothing in this package raises into the host
application. Hashing, cohort assignment and version resolution degrade to a
well-defined default (empty string, DEFAULT_VERSION, a fallback cohort) so a
missing datum never breaks the user's primary workflow.

This package only COMPUTES values. It performs no network calls and no
process execution; those belong to azpredictor.host.
"""
