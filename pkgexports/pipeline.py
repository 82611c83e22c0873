"""End-to-end exports regeneration: collect, group, filter, synthesize, persist."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .artifacts import collect_artifacts, ensure_build_directory, group_artifacts
from .config import ExportsConfig
from .exports import ExportsGenerator, ExportsMap, merge_exports, render_manifest, write_manifest
from .filters import ExclusionReason, ExclusionRules, filter_groups
from .manifest import load_manifest, locate_manifest

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ExportsResult:
    """Outcome of a single generation run."""

    manifest_path: Path
    build_dir: Path
    exports: ExportsMap
    manifest: dict[str, Any]
    excluded: dict[str, ExclusionReason] = field(default_factory=dict)
    changed: bool = False
    written: bool = False

    @property
    def keys(self) -> list[str]:
        return list(self.exports)

    @property
    def skipped_by_placeholder(self) -> list[str]:
        return [path for path, reason in self.excluded.items() if reason is ExclusionReason.PLACEHOLDER]


def build_exports_map(
    build_dir: Path,
    manifest_dir: Path,
    config: ExportsConfig,
) -> tuple[ExportsMap, dict[str, ExclusionReason]]:
    """Compute the exports map without touching the manifest."""
    artifacts = collect_artifacts(build_dir, config)
    groups = group_artifacts(
        artifacts,
        preference=[*config.runtime_extensions, *config.declaration_extensions],
    )
    filtered = filter_groups(groups, ExclusionRules.from_config(config))
    exports = ExportsGenerator(manifest_dir).build(filtered.kept)
    return exports, filtered.excluded


def generate_exports(
    build_dir: Path,
    *,
    config: ExportsConfig | None = None,
    manifest_path: Path | None = None,
    cwd: Path | None = None,
    write: bool = True,
) -> ExportsResult:
    """Regenerate the ``exports`` field of the manifest for ``build_dir``.

    The manifest is written at most once, after the full map has been
    computed. ``write=False`` leaves the file untouched (dry run / check).
    """
    config = config or ExportsConfig()
    cwd = (cwd or Path.cwd()).resolve()
    build_path = build_dir if build_dir.is_absolute() else cwd / build_dir

    ensure_build_directory(build_path)

    target = locate_manifest(build_path, override=manifest_path, cwd=cwd, name=config.manifest_name)
    current = load_manifest(target)
    exports, excluded = build_exports_map(build_path, target.parent, config)

    updated = merge_exports(current, exports)
    # Rendered text, so a key-order difference counts as a change.
    changed = render_manifest(current, indent=config.indent) != render_manifest(updated, indent=config.indent)
    result = ExportsResult(
        manifest_path=target,
        build_dir=build_path.resolve(),
        exports=exports,
        manifest=updated,
        excluded=excluded,
        changed=changed,
    )

    if write:
        write_manifest(updated, target, indent=config.indent)
        result.written = True
        logger.info("Updated %s with %d export(s)", target, len(exports))
    return result
