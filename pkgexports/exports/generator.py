"""Build the exports map from filtered module groups."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from ..artifacts import Artifact, ModuleGroup
from .models import ExportDescriptor, ExportsMap


class ExportsGenerator:
    """Generate export descriptors relative to the manifest directory."""

    def __init__(self, manifest_dir: Path) -> None:
        self.manifest_dir = manifest_dir.resolve()

    def build(self, groups: Iterable[ModuleGroup]) -> ExportsMap:
        exports: ExportsMap = {}
        for group in sorted(groups, key=lambda item: item.module_path):
            exports[export_key(group.module_path)] = self._to_descriptor(group)
        return exports

    def _to_descriptor(self, group: ModuleGroup) -> ExportDescriptor:
        entry: str | None = None
        if group.runtime is not None:
            entry = self.reference(group.runtime)
        types = self.reference(group.declaration) if group.declaration is not None else None
        return ExportDescriptor(import_=entry, require=entry, types=types)

    def reference(self, artifact: Artifact) -> str:
        return relative_reference(self.manifest_dir, artifact.path)


def export_key(module_path: str) -> str:
    return f"./{module_path.replace(os.sep, '/')}"


def relative_reference(base_dir: Path, target: Path) -> str:
    """Return ``target`` relative to ``base_dir`` as a ``./``-prefixed POSIX path.

    ``target`` may sit outside ``base_dir``; ascending segments keep the
    prefix (``./../dist/index.js``).
    """
    relative = os.path.relpath(target, base_dir).replace(os.sep, "/")
    return f"./{relative}"
