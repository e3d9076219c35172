"""Rich terminal output for an identity context snapshot."""
from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from azpredictor.models import DEFAULT_VERSION, ContextSnapshot, Version

console = Console()

_EMPTY = "[dim](none)[/dim]"


def _version_cell(version: Version) -> str:
    if version == DEFAULT_VERSION:
        return f"[dim]{version}[/dim]"
    return str(version)


def _text_cell(value: str) -> str:
    return value if value else _EMPTY


def build_table(snapshot: ContextSnapshot, cohort_count: int) -> Table:
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("field", style="bold")
    table.add_column("value")

    table.add_row("Az version", _version_cell(snapshot.az_version))
    table.add_row("PowerShell version", _version_cell(snapshot.powershell_version))
    table.add_row("Module version", _version_cell(snapshot.module_version))
    table.add_row("OS", _text_cell(snapshot.os_version))
    table.add_row("User id hash", _text_cell(snapshot.hash_user_id))
    table.add_row("MAC address hash", _text_cell(snapshot.mac_address_hash))
    table.add_row("Cohort", f"{snapshot.cohort} [dim]of {cohort_count}[/dim]")
    table.add_row("Internal user", "[yellow]yes[/yellow]" if snapshot.is_internal else "no")
    return table


def render(snapshot: ContextSnapshot, cohort_count: int,
           telemetry_on: bool = True, out: Console | None = None) -> None:
    """Render the snapshot as a panel."""
    out = out or console
    subtitle = "telemetry on" if telemetry_on else "[red]telemetry off[/red]"
    out.print(Panel(
        build_table(snapshot, cohort_count),
        title="[bold]Azure PowerShell predictor context[/bold]",
        subtitle=subtitle,
        expand=False,
    ))
