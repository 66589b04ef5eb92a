"""Package manifest ingestion.

Manifests arrive either as already-parsed mappings shaped like a
``package.json`` (``dependencies``, ``devDependencies`` and friends) or as
raw ``(path, text)`` pairs that are parsed here. A manifest that cannot be
read is skipped with a recorded reason; it never aborts an analysis.
"""

from __future__ import annotations

import json
import posixpath
import re
import tomllib
from collections.abc import Iterable, Mapping
from typing import Any

from depscope.models import ManifestDependencySet, ManifestError

HIGH_DEPENDENCY_COUNT = 50
RISKY_PACKAGES: tuple[str, ...] = ("eval", "vm2", "node-serialize")

_SECTIONS: dict[str, str] = {
    "dependencies": "dependencies",
    "devDependencies": "dev_dependencies",
    "peerDependencies": "peer_dependencies",
    "optionalDependencies": "optional_dependencies",
}

_REQUIREMENT = re.compile(r"^([A-Za-z0-9][A-Za-z0-9._-]*)(?:\[[^\]]*\])?\s*(.*)$")


class ManifestFormatError(ValueError):
    """Raised when a manifest is not shaped like a dependency manifest."""


def _risk_factors(manifest: ManifestDependencySet) -> list[str]:
    factors: list[str] = []
    if len(manifest.dependencies) > HIGH_DEPENDENCY_COUNT:
        factors.append("High dependency count")
    for name in manifest.dependencies:
        if any(risky in name for risky in RISKY_PACKAGES):
            factors.append(f"Potentially risky dependency: {name}")
    return factors


def _version_map(value: Any, section: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ManifestFormatError(f"'{section}' must be a mapping")
    return {str(name): str(version) for name, version in value.items()}


def manifest_from_mapping(
    data: Any, source: str = "package.json"
) -> ManifestDependencySet:
    """Build a dependency set from a parsed ``package.json``-style object.

    Args:
        data: The parsed manifest.
        source: Where the manifest came from, for reporting.

    Returns:
        The declared dependencies with risk factors filled in.

    Raises:
        ManifestFormatError: If data or one of its dependency sections is
            not a mapping.
    """
    if not isinstance(data, Mapping):
        raise ManifestFormatError("manifest must be a mapping")
    sections = {
        attr: _version_map(data.get(key), key) for key, attr in _SECTIONS.items()
    }
    manifest = ManifestDependencySet(
        source=source,
        name=str(data.get("name") or "unnamed"),
        version=str(data.get("version") or "0.0.0"),
        **sections,
    )
    manifest.risk_factors = _risk_factors(manifest)
    return manifest


def parse_requirements(text: str) -> dict[str, str]:
    """Parse a pip ``requirements.txt`` into name to version spec.

    Comments, blank lines and option lines (``-r``, ``--index-url``) are
    skipped. A requirement without a version spec maps to ``*``.
    """
    deps: dict[str, str] = {}
    for line in text.splitlines():
        line = line.split("#", 1)[0].strip()
        if not line or line.startswith("-"):
            continue
        m = _REQUIREMENT.match(line)
        if m:
            spec = m.group(2).split(";", 1)[0].strip()
            deps[m.group(1)] = spec or "*"
    return deps


def _cargo_versions(table: Any) -> dict[str, str]:
    if not isinstance(table, Mapping):
        return {}
    versions: dict[str, str] = {}
    for name, spec in table.items():
        if isinstance(spec, Mapping):
            versions[name] = str(spec.get("version", "*"))
        else:
            versions[name] = str(spec)
    return versions


def parse_manifest(path: str, text: str) -> ManifestDependencySet:
    """Parse a manifest file by name.

    Args:
        path: The manifest path; its basename selects the format.
        text: The file contents.

    Returns:
        The parsed dependency set.

    Raises:
        ManifestFormatError: For unknown manifest names or bad structure.
        json.JSONDecodeError: For invalid ``package.json``.
        tomllib.TOMLDecodeError: For invalid ``Cargo.toml``.
    """
    name = posixpath.basename(path)
    if name == "package.json":
        return manifest_from_mapping(json.loads(text), source=path)
    if name == "requirements.txt":
        manifest = ManifestDependencySet(
            source=path, dependencies=parse_requirements(text)
        )
        manifest.risk_factors = _risk_factors(manifest)
        return manifest
    if name == "Cargo.toml":
        data = tomllib.loads(text)
        package = data.get("package", {})
        if not isinstance(package, Mapping):
            package = {}
        manifest = ManifestDependencySet(
            source=path,
            name=str(package.get("name", "unnamed")),
            version=str(package.get("version", "0.0.0")),
            dependencies=_cargo_versions(data.get("dependencies")),
            dev_dependencies=_cargo_versions(data.get("dev-dependencies")),
        )
        manifest.risk_factors = _risk_factors(manifest)
        return manifest
    raise ManifestFormatError(f"unsupported manifest: {name}")


def load_manifests(
    raw: Iterable[Any],
) -> tuple[list[ManifestDependencySet], list[ManifestError]]:
    """Normalize manifests of any accepted shape, skipping bad ones.

    Args:
        raw: Parsed mappings, ManifestDependencySet instances, or
            ``(path, text)`` pairs.

    Returns:
        Tuple of (valid manifests, errors for skipped manifests).
    """
    manifests: list[ManifestDependencySet] = []
    errors: list[ManifestError] = []
    for position, item in enumerate(raw):
        if isinstance(item, ManifestDependencySet):
            manifests.append(item)
            continue
        if isinstance(item, tuple) and len(item) == 2:
            source, text = str(item[0]), item[1]
        else:
            source, text = f"manifest[{position}]", None
        try:
            if text is None:
                manifests.append(manifest_from_mapping(item, source=source))
            else:
                manifests.append(parse_manifest(source, str(text)))
        except (
            ManifestFormatError,
            json.JSONDecodeError,
            tomllib.TOMLDecodeError,
        ) as exc:
            errors.append(ManifestError(source=source, reason=str(exc)))
    return manifests, errors
