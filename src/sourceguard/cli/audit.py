"""CLI commands: one per audit, plus ``all``.

Each command is also installed as its own console script, so it must work
without the ``sourceguard`` group around it.
"""

from __future__ import annotations

import json
import os
import sys
from collections.abc import Sequence

import click
import yaml
from rich.console import Console
from rich.markup import escape

from sourceguard.cli.base import EXIT_FATAL, AuditCommand
from sourceguard.config import AuditConfig
from sourceguard.report import get_exit_code, print_report, report_to_dict
from sourceguard.scanner.checks import CHECKERS
from sourceguard.scanner.engine import AuditEngine, Checker
from sourceguard.scanner.errors import AuditError

console = Console(soft_wrap=True)
err_console = Console(stderr=True)


def run_audits(
    ctx: click.Context,
    checkers: Sequence[Checker],
    directory: str | None,
    exclude: Sequence[str],
    output_format: str,
) -> int:
    """Run each checker over ``directory`` and return the combined exit code."""
    obj = ctx.find_root().obj or {}
    text = output_format == "text"

    try:
        config = AuditConfig.load(obj.get("config_path"))
    except (OSError, ValueError, yaml.YAMLError) as e:
        err_console.print(f"[red]Invalid configuration:[/red] {escape(str(e))}")
        return EXIT_FATAL
    config.exclude.extend(exclude)

    target = directory or os.getcwd()
    engine = AuditEngine(config)
    codes: list[int] = []
    reports: list[dict] = []

    for checker in checkers:
        if text:
            err_console.print(
                f"[bold]{escape(checker.title)}[/bold] scanning "
                f"[cyan]{escape(target)}[/cyan]"
            )
        try:
            report = engine.scan(target, checker)
        except AuditError as e:
            err_console.print(f"[red]Scan failed:[/red] {escape(str(e))}")
            return EXIT_FATAL

        code = get_exit_code(report)
        codes.append(code)

        if not text:
            reports.append(report_to_dict(report))
            continue

        print_report(report, console=console)
        if code:
            _print_advice(checker, report.summary.critical + report.summary.high)

    if not text:
        payload = reports[0] if len(reports) == 1 else reports
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))

    return max(codes, default=0)


def _print_advice(checker: Checker, important: int) -> None:
    err_console.print(f"[yellow]{important} important issue(s) found.[/yellow]")
    if not checker.advice:
        return
    err_console.print("\nRecommended actions:")
    for number, line in enumerate(checker.advice, start=1):
        err_console.print(f"{number}. {escape(line)}")
    err_console.print()


def _audit_command(checker: Checker) -> click.Command:
    @click.command(
        cls=AuditCommand,
        name=checker.name,
        help=f"Run the {checker.title.removesuffix(' Report')}.",
    )
    @click.argument("directory", required=False, type=click.Path())
    @click.option(
        "--exclude",
        "-e",
        multiple=True,
        help="Extra path substrings to exclude from the scan.",
    )
    @click.option(
        "--format",
        "output_format",
        type=click.Choice(["text", "json"]),
        default="text",
        show_default=True,
        help="Report format.",
    )
    @click.pass_context
    def command(
        ctx: click.Context,
        directory: str | None,
        exclude: tuple[str, ...],
        output_format: str,
    ) -> None:
        sys.exit(run_audits(ctx, [checker], directory, exclude, output_format))

    return command


authz = _audit_command(CHECKERS["authz"])
conventions = _audit_command(CHECKERS["conventions"])
secrets = _audit_command(CHECKERS["secrets"])
types = _audit_command(CHECKERS["types"])


@click.command(cls=AuditCommand, name="all")
@click.argument("directory", required=False, type=click.Path())
@click.option(
    "--exclude",
    "-e",
    multiple=True,
    help="Extra path substrings to exclude from the scan.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Report format.",
)
@click.pass_context
def all_checks(
    ctx: click.Context,
    directory: str | None,
    exclude: tuple[str, ...],
    output_format: str,
) -> None:
    """Run every audit; exit with the most severe result."""
    sys.exit(
        run_audits(ctx, list(CHECKERS.values()), directory, exclude, output_format)
    )
