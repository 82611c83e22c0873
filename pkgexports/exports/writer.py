"""Persistence helpers for the package manifest."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Mapping

from .models import ExportsMap, exports_to_json

EXPORTS_FIELD = "exports"

# Paired surrogates decode to a single code point, so any left over are lone.
_LONE_SURROGATE = re.compile(r"[\ud800-\udfff]")


def merge_exports(manifest: Mapping[str, Any], exports: ExportsMap) -> dict[str, Any]:
    """Return a copy of ``manifest`` whose ``exports`` field is ``exports``.

    The field is replaced wholesale; other keys keep their values and order.
    """
    merged = dict(manifest)
    merged[EXPORTS_FIELD] = exports_to_json(exports)
    return merged


def render_manifest(manifest: Mapping[str, Any], *, indent: int = 2) -> str:
    """Render the manifest as UTF-8-safe JSON text.

    Lone surrogates cannot be encoded as UTF-8; they are written as
    ``\\uXXXX`` escapes the way ``JSON.stringify`` does.
    """
    text = json.dumps(manifest, ensure_ascii=False, indent=indent) + "\n"
    return _LONE_SURROGATE.sub(lambda match: f"\\u{ord(match.group()):04x}", text)


def write_manifest(manifest: Mapping[str, Any], destination: Path, *, indent: int = 2) -> Path:
    """Serialize the manifest to ``destination`` with a trailing newline.

    The text is fully rendered and encoded before the file is opened.
    """
    payload = render_manifest(manifest, indent=indent).encode("utf-8")
    with destination.open("wb") as handle:
        handle.write(payload)
    return destination
