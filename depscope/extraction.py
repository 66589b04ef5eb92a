"""Heuristic import and export extraction.

Each supported language has a strategy that scans raw text line by line
with regular expressions. This is deliberately not a parser: it is fast
and works on any repository, at the cost of occasionally over- or
under-reporting on unusual syntax (multi-line import lists, imports inside
strings or docstrings, computed ``require`` paths). Unknown languages get
an extractor that finds nothing.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import ClassVar, NamedTuple, Protocol

from depscope.models import Export, FileAnalysis, Import, SourceFile
from depscope.resolution import categorize


class ExtractionError(ValueError):
    """Raised by an extractor when a file's content cannot be scanned."""


class ImportMatch(NamedTuple):
    """An import found in text, before classification."""

    line: int
    specifier: str
    raw: str


class ImportExtractor(Protocol):
    """Strategy interface for per-language extraction."""

    def extract_imports(self, content: str) -> list[ImportMatch]: ...

    def extract_exports(self, content: str) -> list[Export]: ...


class NullExtractor:
    """Fallback for unsupported languages: finds nothing."""

    def extract_imports(self, content: str) -> list[ImportMatch]:
        return []

    def extract_exports(self, content: str) -> list[Export]:
        return []


def _export_kind(line: str) -> str:
    """Guess the kind of an exported symbol from its source line."""
    if "default" in line:
        return "default"
    if "class" in line:
        return "class"
    if "function" in line or "def " in line:
        return "function"
    if any(kw in line for kw in ("const", "let", "var")):
        return "variable"
    return "unknown"


def _to_relative(path: str) -> str:
    """Prefix a bare file path with ./ so it resolves against its file."""
    if path.startswith((".", "/")):
        return path
    return f"./{path}"


class RegexExtractor:
    """Line-oriented extractor driven by class-level pattern lists.

    Every pattern's first group is the captured specifier (for imports) or
    symbol name (for exports). Subclasses override ``normalize`` to map
    language-specific forms onto path-like specifiers.
    """

    IMPORT_PATTERNS: ClassVar[tuple[re.Pattern[str], ...]] = ()
    EXPORT_PATTERNS: ClassVar[tuple[re.Pattern[str], ...]] = ()

    def normalize(self, pattern_idx: int, captured: str) -> list[str]:
        return [captured.strip()]

    def extract_imports(self, content: str) -> list[ImportMatch]:
        matches: list[ImportMatch] = []
        for lineno, line in enumerate(content.splitlines(), start=1):
            for idx, pattern in enumerate(self.IMPORT_PATTERNS):
                for m in pattern.finditer(line):
                    raw = m.group(1)
                    if not raw:
                        continue
                    for specifier in self.normalize(idx, raw):
                        if specifier:
                            matches.append(
                                ImportMatch(lineno, specifier, raw.strip())
                            )
        return matches

    def export_names(self, captured: str) -> list[str]:
        return [captured.strip()]

    def extract_exports(self, content: str) -> list[Export]:
        exports: list[Export] = []
        for lineno, line in enumerate(content.splitlines(), start=1):
            for pattern in self.EXPORT_PATTERNS:
                for m in pattern.finditer(line):
                    kind = _export_kind(line)
                    for name in self.export_names(m.group(1)):
                        if name:
                            exports.append(
                                Export(name=name, line=lineno, kind=kind)
                            )
        return exports


_Q = "['\"`]"
_NQ = "[^'\"`]"


class JavaScriptExtractor(RegexExtractor):
    """ES modules, CommonJS and dynamic imports."""

    IMPORT_PATTERNS = (
        re.compile(rf"\bimport\s+.*?\s+from\s+{_Q}({_NQ}+){_Q}"),
        re.compile(rf"^\s*import\s+{_Q}({_NQ}+){_Q}"),
        re.compile(rf"\brequire\s*\(\s*{_Q}({_NQ}+){_Q}\s*\)"),
        re.compile(rf"\bimport\s*\(\s*{_Q}({_NQ}+){_Q}\s*\)"),
        re.compile(rf"^\s*export\s+.*?\s+from\s+{_Q}({_NQ}+){_Q}"),
        # Closing line of a multi-line import list
        re.compile(rf"^\s*\}}\s*from\s+{_Q}({_NQ}+){_Q}"),
    )
    EXPORT_PATTERNS = (
        re.compile(
            r"\bexport\s+(?:default\s+)?(?:async\s+)?"
            r"(?:class|function\*?|const|let|var)\s+(\w+)"
        ),
        re.compile(r"\bexport\s+\{\s*([^}]+)\s*\}"),
        re.compile(r"\bmodule\.exports\s*=\s*(\w+)"),
    )

    def export_names(self, captured: str) -> list[str]:
        names = []
        for part in captured.split(","):
            # "a as b" exports b
            name = part.strip().split()[-1] if part.strip() else ""
            names.append(name)
        return names


class PythonExtractor(RegexExtractor):
    """``import a.b`` and ``from x import y``, including relative forms."""

    IMPORT_PATTERNS = (
        re.compile(r"(?:^|;)\s*from\s+([.\w]+\s+import\s+[^#;]+)"),
        re.compile(r"(?:^|;)\s*import\s+([^#;]+)"),
    )
    EXPORT_PATTERNS = (
        re.compile(r"^(?:async\s+)?def\s+([A-Za-z]\w*)"),
        re.compile(r"^class\s+([A-Za-z]\w*)"),
        re.compile(r"^__all__\s*=\s*[\[(]([^\])]+)[\])]"),
    )

    def normalize(self, pattern_idx: int, captured: str) -> list[str]:
        if pattern_idx == 1:
            return [_strip_alias(name) for name in captured.split(",")]
        module, _, names = captured.partition(" import ")
        module = module.strip()
        if module and not module.strip("."):
            # "from . import a, b" refers to sibling modules a and b
            return [
                _dotted_to_path(module + _strip_alias(name))
                for name in names.strip().strip("()\\").split(",")
                if _strip_alias(name) and _strip_alias(name) != "*"
            ]
        return [_dotted_to_path(module)]

    def export_names(self, captured: str) -> list[str]:
        return [name.strip().strip("'\"") for name in captured.split(",")]


def _strip_alias(name: str) -> str:
    """Turn ``mod as m`` into ``mod``."""
    return name.strip().strip("()\\").split(" as ")[0].strip()


def _dotted_to_path(module: str) -> str:
    """Map a dotted relative module (``..pkg.mod``) onto a path specifier."""
    dots = len(module) - len(module.lstrip("."))
    if dots == 0:
        return module
    rest = module[dots:].replace(".", "/")
    prefix = "./" if dots == 1 else "../" * (dots - 1)
    return prefix + rest if rest else prefix.rstrip("/")


class JavaExtractor(RegexExtractor):
    IMPORT_PATTERNS = (re.compile(r"^\s*import\s+(?:static\s+)?([\w.*]+)\s*;"),)


class CSharpExtractor(RegexExtractor):
    IMPORT_PATTERNS = (re.compile(r"^\s*using\s+(?:static\s+)?([\w.]+)\s*;"),)


class GoExtractor(RegexExtractor):
    """Single-line imports and ``import ( ... )`` blocks."""

    _SINGLE = re.compile(rf"^\s*import\s+(?:\w+\s+)?{_Q}({_NQ}+){_Q}")
    _QUOTED = re.compile(rf"{_Q}({_NQ}+){_Q}")

    def extract_imports(self, content: str) -> list[ImportMatch]:
        matches: list[ImportMatch] = []
        in_block = False
        for lineno, line in enumerate(content.splitlines(), start=1):
            stripped = line.strip()
            if re.match(r"^import\s*\($", stripped):
                in_block = True
                continue
            if in_block:
                if stripped.startswith(")"):
                    in_block = False
                    continue
                m = self._QUOTED.search(stripped)
            else:
                m = self._SINGLE.match(stripped)
            if m:
                matches.append(ImportMatch(lineno, m.group(1), m.group(1)))
        return matches


class RustExtractor(RegexExtractor):
    IMPORT_PATTERNS = (
        re.compile(r"^\s*(?:pub(?:\([\w\s]+\))?\s+)?use\s+([^;]+);"),
        re.compile(r"^\s*extern\s+crate\s+(\w+)"),
    )


class PhpExtractor(RegexExtractor):
    IMPORT_PATTERNS = (
        re.compile(r"^\s*use\s+([\w\\]+)"),
        re.compile(
            r"^\s*(?:require|include)(?:_once)?\s*\(?\s*['\"]([^'\"]+)['\"]"
        ),
    )

    def normalize(self, pattern_idx: int, captured: str) -> list[str]:
        if pattern_idx == 1:
            return [_to_relative(captured.strip())]
        return [captured.strip().lstrip("\\")]


class RubyExtractor(RegexExtractor):
    IMPORT_PATTERNS = (
        re.compile(r"^\s*require\s+['\"]([^'\"]+)['\"]"),
        re.compile(r"^\s*require_relative\s+['\"]([^'\"]+)['\"]"),
        re.compile(r"^\s*load\s+['\"]([^'\"]+)['\"]"),
    )

    def normalize(self, pattern_idx: int, captured: str) -> list[str]:
        if pattern_idx == 0:
            return [captured.strip()]
        return [_to_relative(captured.strip())]


EXTRACTORS: Mapping[str, ImportExtractor] = {
    "javascript": JavaScriptExtractor(),
    "typescript": JavaScriptExtractor(),
    "python": PythonExtractor(),
    "java": JavaExtractor(),
    "csharp": CSharpExtractor(),
    "go": GoExtractor(),
    "rust": RustExtractor(),
    "php": PhpExtractor(),
    "ruby": RubyExtractor(),
}

_NULL_EXTRACTOR = NullExtractor()


def extractor_for(
    language: str, extractors: Mapping[str, ImportExtractor] | None = None
) -> ImportExtractor:
    """Return the extraction strategy for a language, or a null one."""
    registry = EXTRACTORS if extractors is None else extractors
    return registry.get(language, _NULL_EXTRACTOR)


def decode_content(content: str | bytes) -> str:
    """Decode file content as UTF-8 text.

    Raises:
        UnicodeDecodeError: If bytes are not valid UTF-8.
        ExtractionError: If the content looks binary.
    """
    if isinstance(content, bytes):
        text = content.decode("utf-8")
    else:
        text = content
    if "\x00" in text:
        raise ExtractionError("binary content")
    return text.removeprefix("\ufeff")


def analyze_file(
    source: SourceFile,
    extractors: Mapping[str, ImportExtractor] | None = None,
) -> FileAnalysis:
    """Extract and classify the imports and exports of one file.

    A file whose content cannot be decoded or scanned is returned marked
    unparsed, with the reason and no imports, so that it still becomes a
    graph node.

    Args:
        source: The file to scan.
        extractors: Optional language-to-strategy mapping overriding the
            built-in registry.

    Returns:
        FileAnalysis with imports and exports filled in. Dependencies are
        left empty for the resolver.
    """
    analysis = FileAnalysis(
        path=source.path,
        language=source.language,
        size=source.size,
        line_count=source.line_count,
    )
    extractor = extractor_for(source.language, extractors)
    try:
        text = decode_content(source.content)
        matches = extractor.extract_imports(text)
        exports = extractor.extract_exports(text)
    except UnicodeDecodeError as exc:
        analysis.parsed = False
        analysis.error = f"could not decode as utf-8: {exc.reason}"
        return analysis
    except ValueError as exc:
        analysis.parsed = False
        analysis.error = str(exc)
        return analysis

    analysis.imports = [
        Import(
            file=source.path,
            specifier=m.specifier,
            line=m.line,
            category=categorize(m.specifier, source.language),
            raw=m.raw,
        )
        for m in matches
    ]
    analysis.exports = exports
    return analysis
