"""Click command classes shared by the group and the standalone scripts.

Usage errors exit with ``EXIT_FATAL`` instead of click's default 2, which
would read as "critical issue found".
"""

from __future__ import annotations

import click

# Distinct from the 0/1/2 severity codes: the audit could not complete
EXIT_FATAL = 3


class AuditCommand(click.Command):
    def make_context(self, *args, **kwargs) -> click.Context:
        try:
            return super().make_context(*args, **kwargs)
        except click.UsageError as e:
            e.exit_code = EXIT_FATAL
            raise


class AuditGroup(click.Group):
    command_class = AuditCommand

    def make_context(self, *args, **kwargs) -> click.Context:
        try:
            return super().make_context(*args, **kwargs)
        except click.UsageError as e:
            e.exit_code = EXIT_FATAL
            raise

    def invoke(self, ctx: click.Context):
        # Unknown subcommands are reported from here
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            e.exit_code = EXIT_FATAL
            raise
