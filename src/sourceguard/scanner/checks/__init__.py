"""Registry of the available audits."""

from __future__ import annotations

from sourceguard.scanner.checks.authorization import check_authorization
from sourceguard.scanner.checks.conventions import COMPONENT_EXTENSIONS, check_conventions
from sourceguard.scanner.checks.secrets import check_secrets
from sourceguard.scanner.checks.type_safety import check_type_safety
from sourceguard.scanner.engine import Checker


def _is_action_or_route(path: str) -> bool:
    path = "/" + path.replace("\\", "/")
    return "/actions/" in path or "/api/" in path


AUTHORIZATION = Checker(
    name="authz",
    title="Authorization Guard Report",
    check=check_authorization,
    extensions=(".ts", ".tsx"),
    path_filter=_is_action_or_route,
    advice=(
        "Call getCurrentUser() in every server action",
        "Check the caller's role before privileged operations",
        "Never take the role from sign-up form input",
        "Verify teacher role wherever the admin client is used",
    ),
)

CONVENTIONS = Checker(
    name="conventions",
    title="Next.js Best Practices Report",
    check=check_conventions,
    extensions=COMPONENT_EXTENSIONS,
    advice=(
        "Use 'use client' only where client hooks are needed",
        "Optimize images with next/image",
        "Submit forms through server actions",
        "Remove duplicate data fetching",
    ),
)

SECRETS = Checker(
    name="secrets",
    title="Security Scanner Report",
    check=check_secrets,
    extensions=(".ts", ".tsx", ".js", ".jsx"),
    include_hidden=True,
    advice=(
        "Add .env files to .gitignore",
        "Purge secrets from git history (git filter-repo or BFG)",
        "Rotate every exposed key",
        "Move hardcoded secrets into environment variables",
    ),
)

TYPE_SAFETY = Checker(
    name="types",
    title="Type Safety Guardian Report",
    check=check_type_safety,
    extensions=(".ts", ".tsx"),
    advice=(
        "Replace 'as any' with real types",
        "Remove @ts-ignore and fix the root cause",
        "Type Supabase queries explicitly",
        "Validate FormData values",
    ),
)

CHECKERS: dict[str, Checker] = {
    c.name: c for c in (AUTHORIZATION, CONVENTIONS, SECRETS, TYPE_SAFETY)
}
