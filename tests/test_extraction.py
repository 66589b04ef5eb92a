"""Tests for heuristic import and export extraction."""

from __future__ import annotations

from depscope.extraction import (
    EXTRACTORS,
    ImportMatch,
    NullExtractor,
    analyze_file,
    extractor_for,
)
from depscope.models import ImportCategory, SourceFile


def _specifiers(language: str, content: str) -> list[str]:
    return [m.specifier for m in extractor_for(language).extract_imports(content)]


class _RaisingExtractor(NullExtractor):
    def extract_imports(self, content: str) -> list[ImportMatch]:
        raise ValueError("unterminated template")


class TestJavaScriptImports:
    """Tests for ES module and CommonJS import detection."""

    def test_import_from(self) -> None:
        assert _specifiers("javascript", "import App from './app';") == ["./app"]

    def test_named_and_namespace_imports(self) -> None:
        code = (
            "import { a, b } from 'lib-a';\n"
            "import * as ns from \"lib-b\";\n"
            "import type { T } from './types';\n"
        )
        assert _specifiers("typescript", code) == ["lib-a", "lib-b", "./types"]

    def test_side_effect_import(self) -> None:
        assert _specifiers("javascript", "import './polyfills';") == ["./polyfills"]

    def test_require_and_dynamic_import(self) -> None:
        code = "const x = require('x');\nconst y = await import('./y');\n"
        assert _specifiers("javascript", code) == ["x", "./y"]

    def test_reexport(self) -> None:
        assert _specifiers("javascript", "export * from './core';") == ["./core"]

    def test_multiline_import_closing_line(self) -> None:
        code = "import {\n  a,\n  b,\n} from './many';\n"
        assert _specifiers("javascript", code) == ["./many"]

    def test_line_numbers(self) -> None:
        code = "// header\n\nimport a from 'a';\n"
        matches = extractor_for("javascript").extract_imports(code)
        assert matches == [ImportMatch(line=3, specifier="a", raw="a")]


class TestJavaScriptExports:
    """Tests for export detection."""

    def test_declarations(self) -> None:
        code = (
            "export default class App {}\n"
            "export const VERSION = 1;\n"
            "export async function load() {}\n"
        )
        exports = extractor_for("javascript").extract_exports(code)
        assert [(e.name, e.kind) for e in exports] == [
            ("App", "default"),
            ("VERSION", "variable"),
            ("load", "function"),
        ]

    def test_export_list_uses_alias(self) -> None:
        exports = extractor_for("javascript").extract_exports("export { a as b, c };")
        assert [e.name for e in exports] == ["b", "c"]

    def test_module_exports(self) -> None:
        exports = extractor_for("javascript").extract_exports("module.exports = api;")
        assert [e.name for e in exports] == ["api"]


class TestPythonImports:
    """Tests for Python import detection."""

    def test_plain_and_aliased_imports(self) -> None:
        code = "import os\nimport requests.adapters as ra, json\n"
        assert _specifiers("python", code) == ["os", "requests.adapters", "json"]

    def test_from_import(self) -> None:
        code = "from pkg.sub import x  # trailing comment\n"
        assert _specifiers("python", code) == ["pkg.sub"]

    def test_relative_module(self) -> None:
        code = "from .models import User\nfrom ..core.utils import thing\n"
        assert _specifiers("python", code) == ["./models", "../core/utils"]

    def test_sibling_modules_from_dot(self) -> None:
        code = "from . import models, views as v\n"
        assert _specifiers("python", code) == ["./models", "./views"]

    def test_star_from_dot_ignored(self) -> None:
        assert _specifiers("python", "from . import *\n") == []

    def test_semicolon_separated_statements(self) -> None:
        code = "import os; import sys\nx = 1; from pkg import y; import json\n"
        assert _specifiers("python", code) == ["os", "sys", "pkg", "json"]

    def test_exports_are_top_level_only(self) -> None:
        code = (
            "class Greeter:\n"
            "    def greet(self):\n"
            "        pass\n"
            "\n"
            "def main():\n"
            "    pass\n"
        )
        exports = extractor_for("python").extract_exports(code)
        assert [(e.name, e.kind) for e in exports] == [
            ("Greeter", "class"),
            ("main", "function"),
        ]

    def test_dunder_all(self) -> None:
        exports = extractor_for("python").extract_exports("__all__ = ['a', \"b\"]\n")
        assert [e.name for e in exports] == ["a", "b"]


class TestOtherLanguages:
    """Tests for the remaining language strategies."""

    def test_go_single_and_block(self) -> None:
        code = (
            "package main\n"
            "\n"
            "import (\n"
            '    "fmt"\n'
            '    cobra "github.com/spf13/cobra"\n'
            ")\n"
            'import "os"\n'
        )
        matches = extractor_for("go").extract_imports(code)
        assert [(m.line, m.specifier) for m in matches] == [
            (4, "fmt"),
            (5, "github.com/spf13/cobra"),
            (7, "os"),
        ]

    def test_java(self) -> None:
        code = "import java.util.List;\nimport static org.junit.Assert.*;\n"
        assert _specifiers("java", code) == ["java.util.List", "org.junit.Assert.*"]

    def test_csharp(self) -> None:
        assert _specifiers("csharp", "using System.Text;\n") == ["System.Text"]

    def test_rust(self) -> None:
        code = "use std::collections::HashMap;\npub use serde::Deserialize;\n"
        code += "extern crate log;\n"
        assert _specifiers("rust", code) == [
            "std::collections::HashMap",
            "serde::Deserialize",
            "log",
        ]

    def test_php_paths_become_relative(self) -> None:
        code = "<?php\nuse App\\Models\\User;\nrequire_once 'config.php';\n"
        assert _specifiers("php", code) == ["App\\Models\\User", "./config.php"]

    def test_ruby(self) -> None:
        code = "require 'json'\nrequire_relative 'lib/helper'\nload '../tasks.rb'\n"
        assert _specifiers("ruby", code) == ["json", "./lib/helper", "../tasks.rb"]


class TestExtractorFor:
    """Tests for strategy selection."""

    def test_unknown_language_gets_null_extractor(self) -> None:
        assert isinstance(extractor_for("cobol"), NullExtractor)

    def test_every_registered_language_has_strategy(self) -> None:
        for language in EXTRACTORS:
            assert not isinstance(extractor_for(language), NullExtractor)

    def test_custom_registry(self) -> None:
        custom = {"javascript": NullExtractor()}
        assert extractor_for("javascript", custom).extract_imports(
            "import a from 'a';"
        ) == []


class TestAnalyzeFile:
    """Tests for analyze_file."""

    def test_classifies_imports(self) -> None:
        source = SourceFile(
            path="src/a.js",
            language="javascript",
            content="import b from './b';\nimport fs from 'fs';\nimport r from 'r';\n",
        )
        analysis = analyze_file(source)
        assert analysis.parsed
        assert [(i.specifier, i.category) for i in analysis.imports] == [
            ("./b", ImportCategory.RELATIVE),
            ("fs", ImportCategory.BUILTIN),
            ("r", ImportCategory.EXTERNAL),
        ]
        assert all(i.file == "src/a.js" for i in analysis.imports)

    def test_unknown_language_is_empty_not_error(self) -> None:
        source = SourceFile(path="a.cob", language="cobol", content="import x")
        analysis = analyze_file(source)
        assert analysis.parsed
        assert analysis.imports == []
        assert analysis.exports == []

    def test_invalid_utf8_marks_unparsed(self) -> None:
        source = SourceFile(
            path="bad.js", language="javascript", content=b"\xff\xfeimport x"
        )
        analysis = analyze_file(source)
        assert not analysis.parsed
        assert analysis.error is not None
        assert "utf-8" in analysis.error
        assert analysis.imports == []

    def test_binary_content_marks_unparsed(self) -> None:
        source = SourceFile(path="blob.js", language="javascript", content="a\x00b")
        analysis = analyze_file(source)
        assert not analysis.parsed
        assert analysis.error == "binary content"

    def test_extractor_value_error_marks_unparsed(self) -> None:
        source = SourceFile(path="a.js", language="javascript", content="x")
        analysis = analyze_file(source, {"javascript": _RaisingExtractor()})
        assert not analysis.parsed
        assert analysis.error == "unterminated template"
        assert analysis.imports == []

    def test_bytes_content_decoded(self) -> None:
        source = SourceFile(
            path="a.js", language="javascript", content=b"require('left-pad')\n"
        )
        analysis = analyze_file(source)
        assert [i.specifier for i in analysis.imports] == ["left-pad"]

    def test_size_and_line_count(self) -> None:
        source = SourceFile(path="a.py", language="python", content="import os\nx = 1")
        analysis = analyze_file(source)
        assert analysis.line_count == 2
        assert analysis.size == len("import os\nx = 1")
