"""Secret scanner — credentials in source and env files, server-only imports.

Matched secrets are cut to a short preview so the report never reprints a
full key.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath

from sourceguard.scanner.files import is_env_file
from sourceguard.scanner.models import Issue, ScannedFile, Severity
from sourceguard.scanner.rules import (
    Rule,
    first_line_matching,
    has_directive,
    iter_matches,
    line_number_at,
    truncate,
)

SECRET_RULES: list[Rule] = [
    Rule(
        name="supabase_url",
        regex=re.compile(r"https://[a-z0-9]+\.supabase\.co", re.IGNORECASE),
        severity=Severity.MEDIUM,
        category="Supabase URL exposure",
        message="Supabase project URL is exposed",
    ),
    Rule(
        name="jwt_token",
        regex=re.compile(
            r"eyJ[A-Za-z0-9_=\-]+\.[A-Za-z0-9_=\-]+\.?[A-Za-z0-9_.+/=\-]*"
        ),
        severity=Severity.CRITICAL,
        category="JWT token exposure",
        message="JWT token is exposed",
    ),
    Rule(
        name="api_key",
        regex=re.compile(
            r"""(?:api[_-]?key|apikey|key)["\s:=]+([a-zA-Z0-9_-]{32,})""",
            re.IGNORECASE,
        ),
        severity=Severity.CRITICAL,
        category="API key exposure",
        message="API key is hardcoded",
    ),
    Rule(
        name="password",
        regex=re.compile(r"""password\s*[:=]\s*["']([^"']{4,})["']""", re.IGNORECASE),
        severity=Severity.HIGH,
        category="hardcoded password",
        message="Password is hardcoded",
    ),
    Rule(
        name="private_key",
        regex=re.compile(r"-----BEGIN (RSA |EC )?PRIVATE KEY-----", re.IGNORECASE),
        severity=Severity.CRITICAL,
        category="private key exposure",
        message="Private key is exposed",
    ),
    Rule(
        name="aws_access_key",
        regex=re.compile(r"AKIA[0-9A-Z]{16}"),
        severity=Severity.CRITICAL,
        category="AWS access key exposure",
        message="AWS access key ID is exposed",
    ),
    Rule(
        name="hardcoded_token",
        regex=re.compile(r"""token\s*[:=]\s*["']([a-zA-Z0-9_-]{20,})["']""", re.IGNORECASE),
        severity=Severity.HIGH,
        category="hardcoded token",
        message="Token is hardcoded",
    ),
]

# Checked only in env files, first match each
ENV_KEY_RULES: list[Rule] = [
    Rule(
        name="service_role_key",
        regex=re.compile(r"SUPABASE_SERVICE_ROLE_KEY\s*=\s*(.+)"),
        severity=Severity.CRITICAL,
        category="Supabase key exposure",
        message="Supabase service role key is exposed in an env file",
    ),
    Rule(
        name="anon_key",
        regex=re.compile(r"NEXT_PUBLIC_SUPABASE_ANON_KEY\s*=\s*(.+)"),
        severity=Severity.HIGH,
        category="Supabase key exposure",
        message="Supabase anon key is exposed in an env file",
    ),
]

SERVER_ONLY_IMPORTS: list[Rule] = [
    Rule(
        name="server_client_import",
        regex=re.compile(r"""from ['"]@/lib/supabase/server['"]"""),
        severity=Severity.HIGH,
        category="client/server code mixing",
        message="Client component imports a server-only module",
    ),
    Rule(
        name="admin_client_import",
        regex=re.compile(r"""from ['"]@/lib/supabase/admin['"]"""),
        severity=Severity.HIGH,
        category="client/server code mixing",
        message="Client component imports a server-only module",
    ),
    Rule(
        name="server_create_client",
        regex=re.compile(r"createClient.*from.*server"),
        severity=Severity.HIGH,
        category="client/server code mixing",
        message="Client component imports a server-only module",
    ),
]

# JWT fragments in ordinary source are lower confidence than in env files
_DOWNGRADE_OUTSIDE_ENV = {"jwt_token": Severity.MEDIUM}

_ENV_KEY_SUGGESTION = (
    "Add this file to .gitignore, purge it from git history, "
    "and rotate the key in the Supabase dashboard."
)
_ENV_SUGGESTION = "Add env files to .gitignore and purge them from git history."
_SOURCE_SUGGESTION = "Move the hardcoded secret into an environment variable."
_BOUNDARY_SUGGESTION = "Use lib/supabase/client.ts, or make this a Server Component."


def is_env_path(path: str) -> bool:
    name = PurePosixPath(path.replace("\\", "/")).name
    return is_env_file(name) or name.endswith(".env")


def _check_env_keys(file: ScannedFile) -> list[Issue]:
    issues: list[Issue] = []
    for rule in ENV_KEY_RULES:
        match = rule.regex.search(file.content)
        if not match:
            continue
        line_num = line_number_at(file.content, match.start())
        issues.append(
            Issue(
                severity=rule.severity,
                category=rule.category,
                message=rule.message,
                file=file.path,
                line=line_num,
                code=truncate(match.group(0)),
                suggestion=_ENV_KEY_SUGGESTION,
            )
        )
    return issues


def scan_file_for_secrets(file: ScannedFile) -> list[Issue]:
    env_file = is_env_path(file.path)
    issues = _check_env_keys(file) if env_file else []

    for rule in SECRET_RULES:
        severity = rule.severity
        if not env_file:
            severity = _DOWNGRADE_OUTSIDE_ENV.get(rule.name, severity)

        for match, line_num, _ in iter_matches(file, rule):
            issues.append(
                Issue(
                    severity=severity,
                    category=rule.category,
                    message=rule.message,
                    file=file.path,
                    line=line_num,
                    code=truncate(match.group(0)),
                    suggestion=_ENV_SUGGESTION if env_file else _SOURCE_SUGGESTION,
                )
            )
    return issues


def check_client_server_boundary(file: ScannedFile) -> list[Issue]:
    """Flag client components importing server-only Supabase factories."""
    if not has_directive(file.content, "use client"):
        return []

    issues: list[Issue] = []
    for rule in SERVER_ONLY_IMPORTS:
        if not rule.regex.search(file.content):
            continue
        line_num = first_line_matching(file, lambda line: bool(rule.regex.search(line)))
        issues.append(
            Issue(
                severity=rule.severity,
                category=rule.category,
                message=rule.message,
                file=file.path,
                line=line_num or None,
                code=truncate(file.line(line_num).strip()) if line_num else None,
                suggestion=_BOUNDARY_SUGGESTION,
            )
        )
    return issues


def check_secrets(file: ScannedFile) -> list[Issue]:
    return [*scan_file_for_secrets(file), *check_client_server_boundary(file)]
