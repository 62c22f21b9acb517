"""Authorization guard — permission checks in server actions and API routes.

Function bodies are located textually: a body runs from its declaration to
the next ``export`` in the file. Nested functions, comments, or string
literals containing ``export`` cut a body short; that is accepted for a
linting tool.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePosixPath

from sourceguard.scanner.models import Issue, ScannedFile, Severity
from sourceguard.scanner.rules import (
    first_line_matching,
    has_directive,
    line_number_at,
    truncate,
)

# An optional return annotation may sit between the parameters and the body
_SERVER_ACTION = re.compile(
    r"export\s+async\s+function\s+(\w+)\s*\([^)]*\)\s*(?::[^{]*)?{"
)

_CURRENT_USER_MARKERS = ("getCurrentUser()", "getCurrentUser (")
_ROLE_MARKERS = (".role", "is_teacher", "role === 'teacher'", "role === 'student'")
_OWNERSHIP_MARKERS = ("created_by", "user_id", ".id === user.id")
_ADMIN_MARKERS = ("createAdminClient", "from('users').insert")

_ROLE_FROM_FORM = re.compile(r"""role\s*=\s*formData\.get\(['"]role['"]\)""")
_ROLE_DIRECT_INSERT = re.compile(r"role:\s*role[,\s}]")
_REGISTRATION_STEMS = {"auth", "signup", "register"}
_REGISTRATION_WORDS = re.compile(r"signup|signUp|register")

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")
_API_AUTH_MARKERS = ("getCurrentUser", "auth.getUser", "getSession")


@dataclass(frozen=True)
class ServerAction:
    """An exported async function in a ``'use server'`` module."""

    name: str
    file: str
    line: int
    has_current_user: bool
    has_role_check: bool
    has_ownership_check: bool
    uses_admin_client: bool


def _mentions(body: str, markers: tuple[str, ...]) -> bool:
    return any(m in body for m in markers)


def find_server_actions(file: ScannedFile) -> list[ServerAction]:
    """Locate exported async functions and the guards their bodies contain."""
    if not has_directive(file.content, "use server"):
        return []

    actions: list[ServerAction] = []
    for match in _SERVER_ACTION.finditer(file.content):
        start = match.start()
        next_export = file.content.find("export", start + 1)
        body = file.content[start:] if next_export == -1 else file.content[start:next_export]

        actions.append(
            ServerAction(
                name=match.group(1),
                file=file.path,
                line=line_number_at(file.content, start),
                has_current_user=_mentions(body, _CURRENT_USER_MARKERS),
                has_role_check=_mentions(body, _ROLE_MARKERS),
                has_ownership_check=_mentions(body, _OWNERSHIP_MARKERS),
                uses_admin_client=_mentions(body, _ADMIN_MARKERS),
            )
        )
    return actions


def analyze_server_action(action: ServerAction) -> list[Issue]:
    issues: list[Issue] = []

    if not action.has_current_user:
        issues.append(
            Issue(
                severity=Severity.HIGH,
                category="missing authentication check",
                message=f"Server action '{action.name}' never calls getCurrentUser()",
                file=action.file,
                line=action.line,
                suggestion=(
                    "const user = await getCurrentUser()\n"
                    "if (!user) return { error: 'Login required' }"
                ),
            )
        )

    if action.uses_admin_client and not action.has_role_check:
        issues.append(
            Issue(
                severity=Severity.CRITICAL,
                category="unverified elevated-privilege access",
                message=(
                    f"Server action '{action.name}' uses the admin client "
                    "without checking the caller's role"
                ),
                file=action.file,
                line=action.line,
                suggestion="if (user.role !== 'teacher') return { error: 'Forbidden' }",
            )
        )

    lowered = action.name.lower()
    if (
        ("delete" in lowered or "update" in lowered)
        and not action.has_ownership_check
        and not action.has_role_check
    ):
        issues.append(
            Issue(
                severity=Severity.MEDIUM,
                category="missing ownership check",
                message=f"Server action '{action.name}' does not verify resource ownership",
                file=action.file,
                line=action.line,
                suggestion="Compare created_by or user_id with the current user first.",
            )
        )

    return issues


def _is_registration_file(file: ScannedFile) -> bool:
    stem = PurePosixPath(file.path.replace("\\", "/")).name.split(".", 1)[0]
    return stem in _REGISTRATION_STEMS and bool(_REGISTRATION_WORDS.search(file.content))


def check_role_escalation(file: ScannedFile) -> list[Issue]:
    """Flag sign-up code that stores a role taken straight from form input."""
    if not _is_registration_file(file):
        return []
    if not (_ROLE_FROM_FORM.search(file.content) and _ROLE_DIRECT_INSERT.search(file.content)):
        return []

    # The pattern may end on a newline, so check line text plus terminator
    line_num = first_line_matching(file, lambda line: bool(_ROLE_DIRECT_INSERT.search(line + "\n")))
    return [
        Issue(
            severity=Severity.CRITICAL,
            category="privilege-escalation risk",
            message="Sign-up stores the role submitted by the client unchanged",
            file=file.path,
            line=line_num or None,
            code=truncate(file.line(line_num).strip()) if line_num else None,
            suggestion=(
                "Always assign role: 'student' at sign-up and create teacher "
                "accounts from a separate admin flow."
            ),
        )
    ]


def check_api_routes(file: ScannedFile) -> list[Issue]:
    """Flag route handlers that never resolve the requesting user."""
    if "app/api/" not in file.relative_path:
        return []

    issues: list[Issue] = []
    for method in HTTP_METHODS:
        declaration = re.search(
            rf"export\s+async\s+function\s+{method}\b", file.content
        )
        if not declaration:
            continue

        start = declaration.start()
        next_handler = file.content.find("export async function", start + 1)
        body = file.content[start:] if next_handler == -1 else file.content[start:next_handler]

        if not _mentions(body, _API_AUTH_MARKERS):
            issues.append(
                Issue(
                    severity=Severity.HIGH,
                    category="missing request authentication",
                    message=f"API route {method} handler does not authenticate the request",
                    file=file.path,
                    line=line_number_at(file.content, start),
                    suggestion="Resolve the current user at the top of the handler.",
                )
            )
    return issues


def check_authorization(file: ScannedFile) -> list[Issue]:
    issues: list[Issue] = []
    for action in find_server_actions(file):
        issues.extend(analyze_server_action(action))
    issues.extend(check_role_escalation(file))
    issues.extend(check_api_routes(file))
    return issues
