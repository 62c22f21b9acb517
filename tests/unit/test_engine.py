"""Tests for the audit engine pipeline."""

from __future__ import annotations

from pathlib import Path

import pytest

from sourceguard.config import AuditConfig
from sourceguard.report import get_exit_code
from sourceguard.scanner.checks import CHECKERS
from sourceguard.scanner.engine import AuditEngine, Checker, run_checker
from sourceguard.scanner.errors import TraversalError
from sourceguard.scanner.models import Issue, ScannedFile, Severity

PROJECT = {
    "app/actions/links.ts": (
        "'use server'\n"
        "export async function listLinks() {\n"
        "  return supabase.from('links').select('*') as any\n"
        "}\n"
    ),
    "app/api/messages/route.ts": (
        "export async function GET() {\n  return Response.json([])\n}\n"
    ),
    "components/counter.tsx": "const [n] = useState(0)\n",
    "lib/util.ts": "export const x = 1\n",
    ".env.local": "SUPABASE_SERVICE_ROLE_KEY=secret\n",
    "node_modules/pkg/index.ts": "const y = z as any\n",
}


@pytest.fixture
def project(make_tree) -> Path:
    return make_tree(PROJECT)


def _files(report) -> set[str]:
    return {Path(i.file).name for i in report.issues if i.file}


@pytest.mark.parametrize("name", sorted(CHECKERS))
def test_empty_directory_is_clean(tmp_path: Path, name: str):
    report = AuditEngine().scan(tmp_path, CHECKERS[name])
    assert report.summary.total == 0
    assert get_exit_code(report) == 0


def test_authz_only_sees_actions_and_routes(project: Path):
    engine = AuditEngine()
    paths = engine.collect(project, CHECKERS["authz"])
    assert {Path(p).name for p in paths} == {"links.ts", "route.ts"}

    report = engine.scan(project, CHECKERS["authz"])
    assert [i.category for i in report.issues] == [
        "missing authentication check",
        "missing request authentication",
    ]
    assert get_exit_code(report) == 1


def test_secrets_include_env_files(project: Path):
    report = AuditEngine().scan(project, CHECKERS["secrets"])
    assert _files(report) == {".env.local"}
    assert report.summary.critical == 1
    assert get_exit_code(report) == 2


def test_types_skip_excluded_dependencies(project: Path):
    report = AuditEngine().scan(project, CHECKERS["types"])
    assert "index.ts" not in _files(report)
    assert report.summary.medium == 1


def test_conventions_only_component_files(project: Path):
    report = AuditEngine().scan(project, CHECKERS["conventions"])
    assert [(i.severity, Path(i.file).name) for i in report.issues] == [
        (Severity.HIGH, "counter.tsx")
    ]


def test_config_exclude_and_extensions(project: Path):
    config = AuditConfig(exclude=["app/api"], extensions={"types": (".tsx",)})
    engine = AuditEngine(config)
    authz = engine.collect(project, CHECKERS["authz"])
    assert {Path(p).name for p in authz} == {"links.ts"}
    types = engine.collect(project, CHECKERS["types"])
    assert {Path(p).name for p in types} == {"counter.tsx", ".env.local"}


def test_config_can_disable_hidden_files(project: Path):
    engine = AuditEngine(AuditConfig(include_hidden=False))
    paths = engine.collect(project, CHECKERS["secrets"])
    # env files stay eligible regardless
    assert ".env.local" in {Path(p).name for p in paths}


def test_scan_is_repeatable(project: Path):
    engine = AuditEngine()
    for checker in CHECKERS.values():
        first = engine.scan(project, checker)
        second = engine.scan(project, checker)
        assert first.issues == second.issues


def test_missing_directory_raises(tmp_path: Path):
    with pytest.raises(TraversalError):
        AuditEngine().scan(tmp_path / "nope", CHECKERS["types"])


def test_failing_rule_drops_only_that_file():
    def check(file: ScannedFile) -> list[Issue]:
        if "boom" in file.content:
            raise ValueError("bad input")
        return [Issue(Severity.LOW, "seen", file.path, file=file.path)]

    checker = Checker(name="t", title="T", check=check, extensions=(".ts",))
    files = [
        ScannedFile(path="a.ts", content="ok"),
        ScannedFile(path="b.ts", content="boom"),
        ScannedFile(path="c.ts", content="ok"),
    ]
    assert [i.file for i in run_checker(checker, files)] == ["a.ts", "c.ts"]


def test_path_conventions_use_paths_below_root(make_tree):
    root = make_tree(
        {
            "app/api/proj/lib/util.ts": "export async function GET() { return 1 }\n",
            "app/api/proj/app/api/items/route.ts": (
                "export async function GET() { return 1 }\n"
            ),
        }
    )
    project = root / "app" / "api" / "proj"
    engine = AuditEngine()
    paths = engine.collect(project, CHECKERS["authz"])
    assert {Path(p).name for p in paths} == {"route.ts"}

    report = engine.scan(project, CHECKERS["authz"])
    assert [(Path(i.file).name, i.category) for i in report.issues] == [
        ("route.ts", "missing request authentication")
    ]
