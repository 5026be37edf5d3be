"""
ngbuilder — CLI entrypoint.

Usage:
    ngbuilder --help
    ngbuilder build [TARGET...]
    ngbuilder analyze TARGET
    ngbuilder config check
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from ngbuilder import __version__
from ngbuilder.core.observability.logging_config import setup_cli_logging


@click.group()
@click.version_option(version=__version__, prog_name="ngbuilder")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to ngbuilder.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """ngbuilder — assemble AngularJS modules into ordered builds."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_cli_logging(debug=debug, verbose=verbose, quiet=quiet)


# ── Output helpers ──────────────────────────────────────────────


def _print_diagnostics(target, quiet: bool) -> None:
    warnings = [d for d in target.diagnostics if d.level == "warning"]
    if not warnings or quiet:
        return
    for diag in warnings:
        click.secho(f"   ⚠️  {diag.message}", fg="yellow")
        if diag.path:
            click.echo(f"      File: {diag.path}")


def _print_error(target) -> None:
    err = target.error
    click.secho(f"❌ {target.name}: {err.message}", fg="red", bold=True)
    if err.path:
        click.echo(f"   File: {err.path}")
    if err.__class__.__name__ == "BuildWarningError":
        click.echo("   Use --force to continue past warnings.")


# ── build ───────────────────────────────────────────────────────


@cli.command()
@click.argument("targets", nargs=-1)
@click.option(
    "--debug-build/--release",
    "debug_build",
    default=None,
    help="Build a loader script of individual files, or a single bundle.",
)
@click.option("--force", is_flag=True, default=None, help="Continue past warnings.")
@click.option("--no-validate", is_flag=True, help="Skip validation of unwrapped code.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def build(
    ctx: click.Context,
    targets: tuple[str, ...],
    debug_build: bool | None,
    force: bool | None,
    no_validate: bool,
    as_json: bool,
) -> None:
    """Build TARGETS (default: every target in ngbuilder.yml)."""
    from ngbuilder.core.use_cases.build import run_build

    result = run_build(
        config_path=ctx.obj.get("config_path"),
        targets=list(targets) or None,
        debug=debug_build,
        force=force or None,
        validate=False if no_validate else None,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    quiet = ctx.obj.get("quiet", False)
    for target in result.targets:
        _print_diagnostics(target, quiet)
        if target.ok:
            if not quiet:
                output = target.output
                click.secho(f"✅ {target.name}", fg="green", bold=True, nl=False)
                click.echo(
                    f"  {target.mode} → {target.dest}"
                    f"  ({len(output.modules)} modules, {len(output.files)} files, "
                    f"{target.bytes_written} bytes)"
                )
        else:
            _print_error(target)

    if not result.ok:
        sys.exit(1)


# ── analyze ─────────────────────────────────────────────────────


@cli.command()
@click.argument("target")
@click.option("--debug-build/--release", "debug_build", default=None)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def analyze(ctx: click.Context, target: str, debug_build: bool | None, as_json: bool) -> None:
    """Show the module registry and load order of TARGET without writing it."""
    from ngbuilder.core.use_cases.build import run_build

    result = run_build(
        config_path=ctx.obj.get("config_path"),
        targets=[target],
        debug=debug_build,
        force=True,
        validate=False,
        write=False,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    info = result.targets[0]
    click.secho(f"\n📋 {info.name}", fg="cyan", bold=True)

    click.secho(f"   Modules: {len(info.registry)}", fg="white", bold=True)
    for entry in info.registry:
        if entry["external"]:
            click.echo(f"     • {entry['name']}  (external)")
            continue
        deps = ", ".join(entry["dependencies"]) or "—"
        where = entry["declared_in"] or "(not declared)"
        click.echo(f"     • {entry['name']}  → {where}  [requires: {deps}]")
        for path in entry["appended_in"]:
            click.echo(f"         + {path}")

    if info.output:
        click.echo()
        click.secho("   Load order:", fg="white", bold=True)
        for i, path in enumerate(info.output.files, 1):
            click.echo(f"     {i:>3}. {path}")

    _print_diagnostics(info, quiet=False)
    if not info.ok:
        _print_error(info)
        sys.exit(1)
    click.echo()


# ── config ──────────────────────────────────────────────────────


@cli.group()
def config() -> None:
    """Builder configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate ngbuilder.yml."""
    from ngbuilder.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.config is not None  # guaranteed when valid
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Targets: {', '.join(result.config.targets) or '—'}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
