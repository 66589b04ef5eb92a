"""Tests for unused, missing and circular dependency issues."""

from __future__ import annotations

from depscope.extraction import analyze_file
from depscope.issues import circular_issues, find_missing, find_unused
from depscope.manifests import load_manifests
from depscope.models import (
    Cycle,
    DependencyEdge,
    EdgeKind,
    FileAnalysis,
    IssueKind,
    ManifestDependencySet,
    Severity,
    SourceFile,
)
from depscope.resolution import resolve_file


def _file(
    path: str, *imports: tuple[str, str], language: str = "javascript"
) -> FileAnalysis:
    """Build an analysis with one external edge per (package, specifier)."""
    return FileAnalysis(
        path=path,
        language=language,
        dependencies=[
            DependencyEdge(
                source=path,
                target=package,
                kind=EdgeKind.EXTERNAL,
                line=line,
                specifiers=(specifier,),
            )
            for line, (package, specifier) in enumerate(imports, start=1)
        ],
    )


def _manifest(source: str = "package.json", **deps: str) -> ManifestDependencySet:
    return ManifestDependencySet(source=source, dependencies=dict(deps))


class TestFindUnused:
    """Tests for find_unused."""

    def test_declared_but_never_imported(self) -> None:
        manifest = _manifest(react="^18", **{"left-pad": "^1"})
        analyses = [_file("a.js", ("react", "react"))]
        issues = find_unused([manifest], analyses)
        assert [i.target for i in issues] == ["left-pad"]
        assert issues[0].kind == IssueKind.UNUSED
        assert issues[0].severity == Severity.LOW
        assert issues[0].locations == ["package.json"]

    def test_subpath_import_counts_as_use(self) -> None:
        manifest = _manifest(lodash="^4")
        analyses = [_file("a.js", ("lodash", "lodash/fp"))]
        assert find_unused([manifest], analyses) == []

    def test_scoped_subpath_counts_as_use(self) -> None:
        manifest = _manifest(**{"@babel/core": "^7"})
        analyses = [_file("a.js", ("@babel/core", "@babel/core/lib/x"))]
        assert find_unused([manifest], analyses) == []

    def test_dev_dependencies_checked(self) -> None:
        manifest = ManifestDependencySet(
            source="package.json", dev_dependencies={"jest": "^29"}
        )
        assert [i.target for i in find_unused([manifest], [])] == ["jest"]

    def test_name_in_several_manifests_reported_once(self) -> None:
        first = _manifest("package.json", **{"left-pad": "^1"})
        second = _manifest("web/package.json", **{"left-pad": "^1"})
        issues = find_unused([first, second], [])
        assert len(issues) == 1
        assert issues[0].locations == ["package.json", "web/package.json"]

    def test_python_names_folded(self) -> None:
        manifest = _manifest("requirements.txt", **{"Typing-Extensions": "*"})
        analyses = [
            _file(
                "a.py",
                ("typing_extensions", "typing_extensions"),
                language="python",
            )
        ]
        assert find_unused([manifest], analyses) == []

    def test_no_manifests(self) -> None:
        assert find_unused([], [_file("a.js", ("react", "react"))]) == []


class TestFindMissing:
    """Tests for find_missing."""

    def test_imported_but_not_declared(self) -> None:
        analyses = [_file("src/a.js", ("react", "react"), ("left-pad", "left-pad"))]
        issues = find_missing(analyses, [_manifest(react="^18")])
        assert len(issues) == 1
        assert issues[0].target == "left-pad"
        assert issues[0].kind == IssueKind.MISSING
        assert issues[0].severity == Severity.HIGH
        assert issues[0].locations == ["src/a.js:2"]

    def test_one_issue_per_package(self) -> None:
        analyses = [
            _file("a.js", ("left-pad", "left-pad")),
            _file("b.js", ("left-pad", "left-pad/index")),
        ]
        issues = find_missing(analyses, [])
        assert len(issues) == 1
        assert issues[0].locations == ["a.js:1", "b.js:1"]
        assert "2 place(s)" in issues[0].detail

    def test_files_without_external_edges(self) -> None:
        analyses = [
            FileAnalysis(
                path="a.js",
                language="javascript",
                dependencies=[
                    DependencyEdge(
                        source="a.js", target="b.js", kind=EdgeKind.INTERNAL
                    ),
                    DependencyEdge(
                        source="a.js", target="./gone", kind=EdgeKind.MISSING
                    ),
                ],
            )
        ]
        assert find_missing(analyses, []) == []

    def test_ecosystems_without_manifests_ignored(self) -> None:
        analyses = [
            _file("A.java", ("com.google", "com.google.gson.Gson"), language="java"),
            _file("main.go", ("github.com/x/y", "github.com/x/y"), language="go"),
        ]
        assert find_missing(analyses, []) == []

    def test_python_declared_in_requirements(self) -> None:
        analyses = [_file("app.py", ("requests", "requests"), language="python")]
        manifest = _manifest("requirements.txt", requests=">=2")
        assert find_missing(analyses, [manifest]) == []

    def test_python_names_folded(self) -> None:
        analyses = [
            _file("app.py", ("ruamel_yaml", "ruamel_yaml"), language="python")
        ]
        manifest = _manifest("requirements.txt", **{"ruamel-yaml": "*"})
        assert find_missing(analyses, [manifest]) == []

    def test_dev_dependency_counts_as_declared(self) -> None:
        manifest = ManifestDependencySet(
            source="package.json", dev_dependencies={"jest": "^29"}
        )
        assert find_missing([_file("a.test.js", ("jest", "jest"))], [manifest]) == []


class TestCargoCrateNames:
    """Tests for hyphenated crate names used with underscores in Rust code."""

    _CARGO = '[package]\nname = "svc"\n\n[dependencies]\ntokio-util = "0.7"\n'

    def test_hyphenated_crate_is_used_and_declared(self) -> None:
        manifests, _errors = load_manifests([("Cargo.toml", self._CARGO)])
        analysis = analyze_file(
            SourceFile(
                path="src/main.rs",
                language="rust",
                content="use tokio_util::codec::Framed;\n",
            )
        )
        analysis.dependencies = resolve_file(
            analysis.path, analysis.imports, "rust", {analysis.path}
        )
        assert find_unused(manifests, [analysis]) == []
        assert find_missing([analysis], manifests) == []

    def test_undeclared_crate_still_missing(self) -> None:
        analyses = [_file("src/lib.rs", ("serde_json", "serde_json"), language="rust")]
        manifest = _manifest("Cargo.toml", **{"tokio-util": "0.7"})
        issues = find_missing(analyses, [manifest])
        assert [i.target for i in issues] == ["serde_json"]

    def test_javascript_names_not_folded(self) -> None:
        analyses = [_file("a.js", ("left_pad", "left_pad"))]
        manifest = _manifest(**{"left-pad": "^1"})
        assert [i.target for i in find_missing(analyses, [manifest])] == ["left_pad"]


class TestCircularIssues:
    """Tests for circular_issues."""

    def test_one_issue_per_cycle(self) -> None:
        cycles = [
            Cycle(files=("a", "b"), severity=Severity.MEDIUM),
            Cycle(files=("a", "b", "c", "d"), severity=Severity.HIGH),
        ]
        issues = circular_issues(cycles)
        assert [i.target for i in issues] == ["a -> b -> a", "a -> b -> c -> d -> a"]
        assert [i.severity for i in issues] == [Severity.MEDIUM, Severity.HIGH]
        assert issues[1].locations == ["a", "b", "c", "d"]
        assert all(i.kind == IssueKind.CIRCULAR for i in issues)

    def test_no_cycles(self) -> None:
        assert circular_issues([]) == []
