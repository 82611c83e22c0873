"""Locating and reading the package manifest."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST_NAME = "package.json"


class ManifestError(RuntimeError):
    """Raised when the manifest cannot be located or parsed."""


def find_nearest_manifest(
    start_dir: Path,
    stop_dir: Path,
    *,
    name: str = DEFAULT_MANIFEST_NAME,
) -> Path | None:
    """Walk upward from ``start_dir`` and return the first manifest found.

    The walk ends after ``stop_dir`` or at the filesystem root, whichever
    comes first.
    """
    start = start_dir.resolve()
    stop = stop_dir.resolve()
    for directory in (start, *start.parents):
        candidate = directory / name
        if candidate.is_file():
            return candidate
        if directory == stop:
            break
    return None


def locate_manifest(
    build_dir: Path,
    *,
    override: Path | None = None,
    cwd: Path | None = None,
    name: str = DEFAULT_MANIFEST_NAME,
) -> Path:
    """Resolve which manifest file to rewrite."""
    cwd = (cwd or Path.cwd()).resolve()

    if override is not None:
        path = override if override.is_absolute() else cwd / override
        if not path.is_file():
            raise ManifestError(f"{name} not found at override path: {path}")
        return path.resolve()

    build_path = build_dir if build_dir.is_absolute() else cwd / build_dir
    found = find_nearest_manifest(build_path, cwd, name=name)
    if found is not None:
        logger.debug("Using manifest found near build directory: %s", found)
        return found

    fallback = cwd / name
    if not fallback.is_file():
        raise ManifestError(f"Could not locate any {name} (tried {build_path.resolve()} -> {cwd})")
    return fallback


def load_manifest(path: Path) -> dict[str, Any]:
    """Parse the manifest, requiring a JSON object at the top level."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError(f"Unable to read manifest {path}: {exc}") from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestError(f"Manifest {path} is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ManifestError(f"Manifest {path} must contain a JSON object.")
    return data
