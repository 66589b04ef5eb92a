"""Language registry: file extensions and manifest names."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass


@dataclass(frozen=True)
class LanguageSpec:
    """A supported source language and the extensions that identify it."""

    name: str
    extensions: tuple[str, ...]


LANGUAGES: dict[str, LanguageSpec] = {
    "javascript": LanguageSpec(
        name="javascript", extensions=(".js", ".jsx", ".mjs", ".cjs")
    ),
    "typescript": LanguageSpec(name="typescript", extensions=(".ts", ".tsx")),
    "python": LanguageSpec(name="python", extensions=(".py",)),
    "java": LanguageSpec(name="java", extensions=(".java",)),
    "csharp": LanguageSpec(name="csharp", extensions=(".cs",)),
    "go": LanguageSpec(name="go", extensions=(".go",)),
    "rust": LanguageSpec(name="rust", extensions=(".rs",)),
    "php": LanguageSpec(name="php", extensions=(".php",)),
    "ruby": LanguageSpec(name="ruby", extensions=(".rb",)),
}

EXTENSION_MAP: dict[str, str] = {
    ext: spec.name for spec in LANGUAGES.values() for ext in spec.extensions
}

MANIFEST_NAMES: frozenset[str] = frozenset(
    {"package.json", "requirements.txt", "Cargo.toml"}
)


def language_for_extension(ext: str) -> LanguageSpec | None:
    """Look up a language by file extension.

    Args:
        ext: File extension including the dot (e.g., ".ts").

    Returns:
        The LanguageSpec, or None if unsupported.
    """
    lang_name = EXTENSION_MAP.get(ext.lower())
    if lang_name is None:
        return None
    return LANGUAGES.get(lang_name)


def language_for_path(path: str) -> LanguageSpec | None:
    """Look up a language from a file path's extension."""
    return language_for_extension(posixpath.splitext(path)[1])


def is_manifest(path: str) -> bool:
    """Whether the file at path is a package manifest we can read."""
    return posixpath.basename(path) in MANIFEST_NAMES
