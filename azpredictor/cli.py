"""Click CLI entry point for azpredictor."""
from __future__ import annotations

import json
import logging
import sys

import click

from azpredictor import __version__
from azpredictor.config import (
    cohort_count as configured_cohort_count,
    get_config_path,
    load_config,
    save_config,
    telemetry_enabled,
)
from azpredictor.context import IdentityContext


def _setup_logging(verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(name)s: %(message)s",
    )


@click.group()
@click.version_option(version=__version__, prog_name="azpredictor")
def cli() -> None:
    """Identity and version context for Azure PowerShell predictors."""
    pass


@cli.command()
@click.option("--json-output", "--json", "json_output", is_flag=True,
              help="JSON to stdout instead of Rich")
@click.option("--refresh/--no-refresh", default=True,
              help="Query PowerShell for the Az version and signed-in account")
@click.option("--verbose", is_flag=True, help="Log swallowed failures to stderr")
def show(json_output: bool, refresh: bool, verbose: bool) -> None:
    """Show the identity context of this machine and session."""
    _setup_logging(verbose)

    cfg = load_config()
    count = configured_cohort_count(cfg)
    with IdentityContext(cohort_count=count) as context:
        if refresh:
            context.update_context()
        snapshot = context.snapshot()

    if json_output:
        click.echo(json.dumps(snapshot.to_dict(), indent=2))
    else:
        from azpredictor.output.terminal import render
        render(snapshot, count, telemetry_on=telemetry_enabled(cfg))


@cli.command("hash")
@click.argument("value")
@click.option("--normalize", is_flag=True,
              help="Lowercase hex without separators (machine id format)")
def hash_cmd(value: str, normalize: bool) -> None:
    """Print the SHA-256 identifier hash of VALUE."""
    from azpredictor.telemetry.hashing import hash_string, normalize_digest

    digest = hash_string(value)
    click.echo(normalize_digest(digest) if normalize else digest)


@cli.command()
@click.option("--hashed-mac", default=None,
              help="Assign from this digest instead of this machine's MAC hash")
@click.option("--cohort-count", type=click.IntRange(min=1), default=None,
              help="Override the configured cohort count")
def cohort(hashed_mac: str | None, cohort_count: int | None) -> None:
    """Print the cohort of this machine (or of a given MAC hash)."""
    count = cohort_count or configured_cohort_count()
    if hashed_mac is not None:
        from azpredictor.host.environment import ProcessEnvironment
        from azpredictor.telemetry.cohort import assign_cohort
        millisecond = ProcessEnvironment().current_utc_millisecond()
        click.echo(assign_cohort(hashed_mac, count, millisecond))
        return
    with IdentityContext(cohort_count=count) as context:
        click.echo(context.cohort)


@cli.command()
@click.option("--verbose", is_flag=True, help="Log swallowed failures to stderr")
def properties(verbose: bool) -> None:
    """Print the telemetry properties attached to each event, as JSON."""
    _setup_logging(verbose)
    cfg = load_config()
    if not telemetry_enabled(cfg):
        return

    from azpredictor.telemetry.properties import context_properties_dict
    with IdentityContext(cohort_count=configured_cohort_count(cfg)) as context:
        context.update_context()
        props = context_properties_dict(context)
    click.echo(json.dumps(props, indent=2))


@cli.group()
def config() -> None:
    """Manage azpredictor configuration."""
    pass


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str) -> None:
    """Set a configuration value. Supports: telemetry (on/off), cohort_count."""
    config_path = get_config_path()
    if key == "telemetry":
        if value not in ("on", "off"):
            click.echo("Value must be 'on' or 'off'", err=True)
            sys.exit(1)
        cfg = load_config(config_path)
        cfg["telemetry"] = (value == "on")
        save_config(cfg, config_path)
        click.echo(f"Telemetry {'enabled' if value == 'on' else 'disabled'}.")
    elif key == "cohort_count":
        try:
            count = int(value)
        except ValueError:
            count = 0
        if count <= 0:
            click.echo("Value must be a positive integer", err=True)
            sys.exit(1)
        cfg = load_config(config_path)
        cfg["cohort_count"] = count
        save_config(cfg, config_path)
        click.echo(f"Cohort count set to {count}.")
    else:
        click.echo(f"Unknown config key: {key}", err=True)
        sys.exit(1)


@config.command("get")
@click.argument("key")
def config_get(key: str) -> None:
    """Get a configuration value."""
    cfg = load_config()
    if key == "telemetry":
        status = "on" if telemetry_enabled(cfg) else "off"
        click.echo(f"telemetry: {status}")
    elif key == "cohort_count":
        click.echo(f"cohort_count: {configured_cohort_count(cfg)}")
    else:
        click.echo(f"Unknown config key: {key}", err=True)
        sys.exit(1)


def main() -> None:
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
