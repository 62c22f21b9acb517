"""Next.js conventions — client directives, images, fetching, and forms."""

from __future__ import annotations

import re
from collections import Counter

from sourceguard.scanner.models import Issue, ScannedFile, Severity
from sourceguard.scanner.rules import (
    Rule,
    first_line_matching,
    has_directive,
    iter_rule_issues,
)

COMPONENT_EXTENSIONS = (".tsx", ".jsx")

CLIENT_HOOKS = (
    "useState",
    "useEffect",
    "useReducer",
    "useCallback",
    "useMemo",
    "useRef",
)
_INTERACTION_ATTRS = ("onClick", "onChange")

IMAGE_RULES: list[Rule] = [
    Rule(
        name="img_tag",
        regex=re.compile(r"<img\s+[^>]*src="),
        severity=Severity.MEDIUM,
        category="unoptimized image",
        message="Use the Image component from next/image instead of <img>",
        suggestion="import Image from 'next/image'",
    ),
]

_AWAITED_CALL = re.compile(r"await\s+(\w+)\(")
_MAX_FETCH_CALLS = 2

_NETWORK_CALLS = ("fetch(", "axios")


def check_component_directives(file: ScannedFile) -> list[Issue]:
    if not file.path.endswith(COMPONENT_EXTENSIONS):
        return []

    issues: list[Issue] = []
    has_use_client = has_directive(file.content, "use client")
    uses_hooks = any(hook in file.content for hook in CLIENT_HOOKS)

    if uses_hooks and not has_use_client:
        line_num = first_line_matching(
            file, lambda line: any(hook in line for hook in CLIENT_HOOKS)
        )
        issues.append(
            Issue(
                severity=Severity.HIGH,
                category="missing client directive",
                message="Component uses client hooks without a 'use client' directive",
                file=file.path,
                line=line_num or None,
                suggestion="Add 'use client' at the top of the file.",
            )
        )

    if (
        has_use_client
        and not uses_hooks
        and not any(attr in file.content for attr in _INTERACTION_ATTRS)
    ):
        issues.append(
            Issue(
                severity=Severity.LOW,
                category="unnecessary client rendering",
                message="File declares 'use client' but uses no client-only features",
                file=file.path,
                line=1,
                suggestion="Make this a Server Component.",
            )
        )

    return issues


def check_image_optimization(file: ScannedFile) -> list[Issue]:
    return list(iter_rule_issues(file, IMAGE_RULES))


def check_data_fetching(file: ScannedFile) -> list[Issue]:
    """Flag getters awaited more than twice in one file."""
    counts = Counter(m.group(1) for m in _AWAITED_CALL.finditer(file.content))
    return [
        Issue(
            severity=Severity.LOW,
            category="duplicate data fetching",
            message=f"'{name}' is called {count} times",
            file=file.path,
            suggestion="Fetch the data once and pass it down.",
        )
        for name, count in counts.items()
        if count > _MAX_FETCH_CALLS and name.startswith("get")
    ]


def check_form_submission(file: ScannedFile) -> list[Issue]:
    """Flag forms that post through fetch/axios instead of a server action."""
    content = file.content
    if "<form" not in content or "onSubmit" not in content:
        return []

    start = content.index("<form")
    end = content.find("</form>", start)
    section = content[start:] if end == -1 else content[start : end + len("</form>")]
    if not any(call in section for call in _NETWORK_CALLS):
        return []

    line_num = first_line_matching(file, lambda line: "<form" in line)
    return [
        Issue(
            severity=Severity.MEDIUM,
            category="server action not used",
            message="Form calls an API directly instead of using a server action",
            file=file.path,
            line=line_num or None,
            suggestion="Pass a server action instead: <form action={serverAction}>",
        )
    ]


def check_conventions(file: ScannedFile) -> list[Issue]:
    return [
        *check_component_directives(file),
        *check_image_optimization(file),
        *check_data_fetching(file),
        *check_form_submission(file),
    ]
