"""Import classification and relative path resolution."""

from __future__ import annotations

import posixpath
import sys
from collections.abc import Collection, Iterable

from depscope.models import DependencyEdge, EdgeKind, Import, ImportCategory

RESOLVE_EXTENSIONS: tuple[str, ...] = (
    ".js",
    ".jsx",
    ".ts",
    ".tsx",
    ".mjs",
    ".cjs",
    ".json",
    ".py",
    ".rb",
    ".php",
)

NODE_BUILTINS: frozenset[str] = frozenset(
    {
        "assert",
        "async_hooks",
        "buffer",
        "child_process",
        "cluster",
        "console",
        "constants",
        "crypto",
        "dgram",
        "dns",
        "domain",
        "events",
        "fs",
        "http",
        "http2",
        "https",
        "inspector",
        "module",
        "net",
        "os",
        "path",
        "perf_hooks",
        "process",
        "punycode",
        "querystring",
        "readline",
        "repl",
        "stream",
        "string_decoder",
        "timers",
        "tls",
        "tty",
        "url",
        "util",
        "v8",
        "vm",
        "worker_threads",
        "zlib",
        # Browser globals sometimes imported by bundler setups
        "window",
        "document",
        "navigator",
        "location",
        "history",
    }
)

RUBY_BUILTINS: frozenset[str] = frozenset(
    {
        "benchmark",
        "csv",
        "date",
        "digest",
        "erb",
        "fileutils",
        "json",
        "logger",
        "net",
        "open3",
        "openssl",
        "optparse",
        "pathname",
        "pp",
        "securerandom",
        "set",
        "socket",
        "stringio",
        "tempfile",
        "time",
        "uri",
        "yaml",
        "zlib",
    }
)

RUST_BUILTINS: frozenset[str] = frozenset(
    {"std", "core", "alloc", "crate", "self", "super"}
)

_JAVA_BUILTIN_PREFIXES: tuple[str, ...] = ("java.", "javax.", "jdk.", "sun.")


def is_relative(specifier: str) -> bool:
    """Whether a specifier is relative to the importing file."""
    return specifier.startswith(("./", "../")) or specifier in (".", "..")


def is_builtin(specifier: str, language: str) -> bool:
    """Check a non-relative specifier against the runtime's allow-list.

    Args:
        specifier: The import specifier as normalized by the extractor.
        language: Language name of the importing file.

    Returns:
        True if the host platform provides the module.
    """
    if language in ("javascript", "typescript"):
        if specifier.startswith("node:"):
            return True
        return specifier.split("/", 1)[0] in NODE_BUILTINS
    if language == "python":
        return specifier.split(".", 1)[0] in sys.stdlib_module_names
    if language == "java":
        return specifier.startswith(_JAVA_BUILTIN_PREFIXES)
    if language == "csharp":
        return specifier == "System" or specifier.startswith("System.")
    if language == "go":
        return "." not in specifier.split("/", 1)[0]
    if language == "rust":
        return specifier.split("::", 1)[0] in RUST_BUILTINS
    if language == "ruby":
        return specifier.split("/", 1)[0] in RUBY_BUILTINS
    return False


def categorize(specifier: str, language: str) -> ImportCategory:
    """Classify an import specifier."""
    if is_relative(specifier):
        return ImportCategory.RELATIVE
    if specifier.startswith("/"):
        return ImportCategory.ABSOLUTE
    if is_builtin(specifier, language):
        return ImportCategory.BUILTIN
    return ImportCategory.EXTERNAL


def package_name(specifier: str, language: str) -> str:
    """Reduce an external specifier to the package that provides it.

    ``@scope/pkg/sub`` becomes ``@scope/pkg``, ``lodash/fp`` becomes
    ``lodash`` and ``requests.adapters`` becomes ``requests``.
    """
    if language == "python":
        return specifier.split(".", 1)[0]
    if language == "rust":
        return specifier.split("::", 1)[0]
    if language in ("java", "csharp", "php"):
        return specifier
    parts = specifier.split("/")
    if language == "go":
        if "." in parts[0]:
            return "/".join(parts[:3])
        return specifier
    if specifier.startswith("@") and len(parts) > 1:
        return "/".join(parts[:2])
    return parts[0]


def candidate_paths(directory: str, specifier: str) -> list[str]:
    """List the file paths a specifier may refer to, in priority order.

    Tries the literal path, then each known extension appended, then a
    directory index file for each extension. Paths that escape the
    repository root produce no candidates.

    Args:
        directory: Posix directory of the importing file ("" for root).
        specifier: Relative specifier, or a root-relative path.

    Returns:
        Normalized posix candidate paths.
    """
    base = posixpath.normpath(posixpath.join(directory, specifier))
    if base == ".." or base.startswith("../") or base.startswith("/"):
        return []
    prefix = "" if base == "." else base
    candidates = [base] if prefix else []
    candidates.extend(base + ext for ext in RESOLVE_EXTENSIONS if prefix)
    candidates.extend(
        posixpath.join(prefix, f"index{ext}") for ext in RESOLVE_EXTENSIONS
    )
    candidates.append(posixpath.join(prefix, "__init__.py"))
    return candidates


def resolve(imp: Import, known_paths: Collection[str]) -> str | None:
    """Resolve a relative or absolute import to a file in the analyzed set.

    Args:
        imp: The import to resolve.
        known_paths: Every file path in the analyzed set.

    Returns:
        The first matching path, or None if nothing matches.
    """
    if imp.category == ImportCategory.ABSOLUTE:
        candidates = candidate_paths("", imp.specifier.lstrip("/"))
    else:
        candidates = candidate_paths(posixpath.dirname(imp.file), imp.specifier)
    for candidate in candidates:
        if candidate in known_paths:
            return candidate
    return None


def _resolve_python_module(imp: Import, known_paths: Collection[str]) -> str | None:
    """Find a local module for an absolute dotted Python import."""
    module_path = imp.specifier.replace(".", "/")
    for directory in (posixpath.dirname(imp.file), ""):
        for candidate in (
            posixpath.join(directory, module_path + ".py"),
            posixpath.join(directory, module_path, "__init__.py"),
        ):
            if candidate in known_paths:
                return candidate
    return None


def resolve_file(
    path: str,
    imports: Iterable[Import],
    language: str,
    known_paths: Collection[str],
) -> list[DependencyEdge]:
    """Turn one file's imports into dependency edges.

    Resolved relative/absolute imports become internal edges, unresolved
    ones become missing edges carrying the original specifier, and
    external imports become external edges targeting the package name.
    Builtins produce no edge. Repeated imports of the same target collapse
    into one edge listing every specifier.

    Args:
        path: Path of the importing file.
        imports: The file's imports, in source order.
        language: Language name of the file.
        known_paths: Every file path in the analyzed set.

    Returns:
        Edges in order of first occurrence.
    """
    grouped: dict[tuple[EdgeKind, str], list[Import]] = {}
    for imp in imports:
        if imp.category == ImportCategory.BUILTIN:
            continue
        if imp.category in (ImportCategory.RELATIVE, ImportCategory.ABSOLUTE):
            target = resolve(imp, known_paths)
            key = (
                (EdgeKind.INTERNAL, target)
                if target is not None
                else (EdgeKind.MISSING, imp.specifier)
            )
        else:
            local = None
            if language == "python":
                local = _resolve_python_module(imp, known_paths)
            if local is not None:
                key = (EdgeKind.INTERNAL, local)
            else:
                key = (EdgeKind.EXTERNAL, package_name(imp.specifier, language))
        grouped.setdefault(key, []).append(imp)

    edges: list[DependencyEdge] = []
    for (kind, target), group in grouped.items():
        specifiers = tuple(dict.fromkeys(imp.specifier for imp in group))
        edges.append(
            DependencyEdge(
                source=path,
                target=target,
                kind=kind,
                line=group[0].line,
                specifiers=specifiers,
            )
        )
    return edges
