"""Exclusion rules applied to module groups before export generation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from .artifacts import Artifact, ModuleGroup
from .config import ExportsConfig

logger = logging.getLogger(__name__)


class ExclusionReason(str, Enum):
    NAME = "name"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True, slots=True)
class ExclusionRules:
    """Basenames to drop plus an optional content marker."""

    names: frozenset[str] = frozenset()
    placeholder: str | None = None

    @classmethod
    def from_config(cls, config: ExportsConfig) -> "ExclusionRules":
        return cls(names=frozenset(config.exclude), placeholder=config.placeholder or None)


@dataclass(slots=True)
class FilterResult:
    kept: list[ModuleGroup] = field(default_factory=list)
    excluded: dict[str, ExclusionReason] = field(default_factory=dict)


def filter_groups(groups: Iterable[ModuleGroup], rules: ExclusionRules) -> FilterResult:
    """Split groups into kept and excluded ones.

    A group is dropped when its basename is listed in ``rules.names`` or when
    any of its files contains ``rules.placeholder``. Both checks stand on
    their own, so each group is judged without regard to the others.
    """
    result = FilterResult()
    for group in groups:
        reason = _exclusion_reason(group, rules)
        if reason is None:
            result.kept.append(group)
        else:
            result.excluded[group.module_path] = reason
    return result


def _exclusion_reason(group: ModuleGroup, rules: ExclusionRules) -> ExclusionReason | None:
    if group.basename in rules.names:
        logger.debug("Excluding %s by name", group.module_path)
        return ExclusionReason.NAME

    if rules.placeholder:
        for artifact in group.artifacts:
            if _contains_marker(artifact, rules.placeholder):
                logger.warning(
                    "Skipping %s (found placeholder %r in %s)",
                    group.module_path,
                    rules.placeholder,
                    artifact.relative_path,
                )
                return ExclusionReason.PLACEHOLDER
    return None


def _contains_marker(artifact: Artifact, marker: str) -> bool:
    text = artifact.path.read_text(encoding="utf-8", errors="replace")
    return marker in text
