"""CLI entry point — Click group with global options."""

from __future__ import annotations

import logging

import click

from sourceguard import __version__
from sourceguard.cli.base import AuditGroup


@click.group(cls=AuditGroup)
@click.version_option(version=__version__, prog_name="sourceguard")
@click.option(
    "--config",
    "-c",
    type=click.Path(dir_okay=False),
    help="Path to a YAML config file.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """sourceguard — static audits for Next.js and Supabase code."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _register_commands() -> None:
    from sourceguard.cli.audit import all_checks, authz, conventions, secrets, types

    main.add_command(authz)
    main.add_command(conventions)
    main.add_command(secrets)
    main.add_command(types)
    main.add_command(all_checks)


_register_commands()
