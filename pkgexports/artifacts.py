"""Discovery and grouping of compiled build artifacts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Sequence

from .config import ExportsConfig

logger = logging.getLogger(__name__)


class BuildDirectoryError(RuntimeError):
    """Raised when the build directory is missing or not a directory."""


class ArtifactKind(str, Enum):
    """Extension class of a build artifact."""

    RUNTIME = "runtime"
    DECLARATION = "declaration"


@dataclass(frozen=True, slots=True)
class Artifact:
    """A runtime or declaration file found under the build directory."""

    path: Path
    relative_path: str
    kind: ArtifactKind
    module_path: str
    extension: str

    @property
    def basename(self) -> str:
        return self.module_path.rsplit("/", 1)[-1]


@dataclass(slots=True)
class ModuleGroup:
    """Artifacts that share one logical module path."""

    module_path: str
    runtime: Artifact | None = None
    declaration: Artifact | None = None

    @property
    def basename(self) -> str:
        return self.module_path.rsplit("/", 1)[-1]

    @property
    def artifacts(self) -> list[Artifact]:
        return [item for item in (self.runtime, self.declaration) if item is not None]


def _extension_table(config: ExportsConfig) -> list[tuple[str, ArtifactKind]]:
    table = [(ext, ArtifactKind.RUNTIME) for ext in config.runtime_extensions]
    table.extend((ext, ArtifactKind.DECLARATION) for ext in config.declaration_extensions)
    # Longest suffix first so ".d.ts" is recognized before ".ts".
    table.sort(key=lambda entry: len(entry[0]), reverse=True)
    return table


def _match_extension(name: str, table: list[tuple[str, ArtifactKind]]) -> tuple[str, ArtifactKind] | None:
    for ext, kind in table:
        if name.endswith(ext) and len(name) > len(ext):
            return ext, kind
    return None


def ensure_build_directory(build_dir: Path) -> None:
    if not build_dir.exists() or not build_dir.is_dir():
        raise BuildDirectoryError(f"Build directory not found or not a directory: {build_dir}")


def collect_artifacts(build_dir: Path, config: ExportsConfig | None = None) -> list[Artifact]:
    """Return every runtime and declaration file beneath ``build_dir``.

    Extensions match case-sensitively. Dotfiles and anything inside a dot
    directory are ignored.
    """
    config = config or ExportsConfig()
    ensure_build_directory(build_dir)

    table = _extension_table(config)
    root = build_dir.resolve()
    artifacts: list[Artifact] = []
    for candidate in sorted(root.rglob("*")):
        relative_parts = candidate.relative_to(root).parts
        if any(part.startswith(".") for part in relative_parts) or not candidate.is_file():
            continue
        matched = _match_extension(candidate.name, table)
        if matched is None:
            continue
        ext, kind = matched
        relative = "/".join(relative_parts)
        artifacts.append(
            Artifact(
                path=candidate,
                relative_path=relative,
                kind=kind,
                module_path=relative[: -len(ext)],
                extension=ext,
            )
        )

    logger.debug("Collected %d artifact(s) under %s", len(artifacts), root)
    return artifacts


def group_artifacts(
    artifacts: Iterable[Artifact],
    *,
    preference: Sequence[str] | None = None,
) -> list[ModuleGroup]:
    """Group artifacts by module path, sorted by module path.

    ``preference`` orders extensions when two files of the same kind share a
    module path (``a.js`` and ``a.mjs``); earlier entries win.
    """
    order = {ext: rank for rank, ext in enumerate(preference or [])}
    groups: dict[str, ModuleGroup] = {}

    for artifact in artifacts:
        group = groups.setdefault(artifact.module_path, ModuleGroup(artifact.module_path))
        slot = "runtime" if artifact.kind is ArtifactKind.RUNTIME else "declaration"
        current: Artifact | None = getattr(group, slot)
        if current is None:
            setattr(group, slot, artifact)
            continue

        keep, drop = current, artifact
        if _rank(artifact, order) < _rank(current, order):
            keep, drop = artifact, current
        setattr(group, slot, keep)
        logger.warning(
            "Multiple %s files for %s; using %s and ignoring %s",
            artifact.kind.value,
            artifact.module_path,
            keep.relative_path,
            drop.relative_path,
        )

    return [groups[key] for key in sorted(groups)]


def _rank(artifact: Artifact, order: dict[str, int]) -> tuple[int, str]:
    return (order.get(artifact.extension, len(order)), artifact.relative_path)
