"""Type-safety guardian — escapes from the TypeScript type checker."""

from __future__ import annotations

import re

from sourceguard.scanner.models import Issue, ScannedFile, Severity
from sourceguard.scanner.rules import Rule, iter_rule_issues

_ROW_TYPE_IDIOMS = (".returns<", "as Database", "as any")
_INPUT_GUARD_IDIOMS = ("as string", "as number", "?.", "??", "||")

ESCAPE_RULES: list[Rule] = [
    Rule(
        name="as_any",
        regex=re.compile(r"\bas\s+any\b"),
        severity=Severity.MEDIUM,
        category="type escape (as any)",
        message="'as any' bypasses type checking",
        suggestion="Use a proper type, e.g. the generated Database types.",
    ),
]

DIRECTIVE_RULES: list[Rule] = [
    Rule(
        name="ts_ignore",
        regex=re.compile(r"@ts-ignore"),
        severity=Severity.MEDIUM,
        category="suppressed type check",
        message="@ts-ignore suppresses a type error",
        suggestion="Fix the underlying type error.",
    ),
    Rule(
        name="ts_expect_error",
        regex=re.compile(r"@ts-expect-error"),
        severity=Severity.LOW,
        category="expected type error",
        message="@ts-expect-error marks an expected type error",
        suggestion="Check whether the type error still exists.",
    ),
]

QUERY_RULES: list[Rule] = [
    Rule(
        name="untyped_table_query",
        regex=re.compile(r"""\.from\(['"](\w+)['"]\)"""),
        severity=Severity.LOW,
        category="missing explicit row type",
        message="Query on table '{1}' has no explicit row type",
        suggestion=".returns<Database['public']['Tables']['{1}']['Row']>()",
        exempt=lambda line: any(idiom in line for idiom in _ROW_TYPE_IDIOMS),
    ),
]

FORM_DATA_RULES: list[Rule] = [
    Rule(
        name="unvalidated_form_field",
        regex=re.compile(r"""formData\.get\(['"](\w+)['"]\)"""),
        severity=Severity.LOW,
        category="missing input validation",
        message="formData.get('{1}') is used without a type check",
        suggestion="Add 'as string' or a null check.",
        exempt=lambda line: any(idiom in line for idiom in _INPUT_GUARD_IDIOMS),
    ),
]

ASSERTION_RULES: list[Rule] = [
    Rule(
        name="double_cast",
        regex=re.compile(r"\bas\s+unknown\s+as\b"),
        severity=Severity.MEDIUM,
        category="unsafe type assertion",
        message="'as unknown as' forces an unrelated type",
        suggestion="Use a type guard instead.",
    ),
    Rule(
        name="as_never",
        regex=re.compile(r"\bas\s+never\b"),
        severity=Severity.MEDIUM,
        category="unsafe type assertion",
        message="'as never' asserts an impossible type",
        suggestion="Use a type guard instead.",
    ),
]


def check_type_safety(file: ScannedFile) -> list[Issue]:
    issues = list(iter_rule_issues(file, ESCAPE_RULES, with_code=True))
    issues.extend(iter_rule_issues(file, DIRECTIVE_RULES))
    issues.extend(iter_rule_issues(file, QUERY_RULES))
    if "FormData" in file.content:
        issues.extend(iter_rule_issues(file, FORM_DATA_RULES))
    issues.extend(iter_rule_issues(file, ASSERTION_RULES))
    return issues
