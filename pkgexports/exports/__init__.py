"""Exports map data structures and helpers."""

from .generator import ExportsGenerator, export_key, relative_reference
from .models import ExportDescriptor, ExportsMap, exports_to_json
from .writer import merge_exports, render_manifest, write_manifest

__all__ = [
    "ExportDescriptor",
    "ExportsGenerator",
    "ExportsMap",
    "export_key",
    "exports_to_json",
    "merge_exports",
    "relative_reference",
    "render_manifest",
    "write_manifest",
]
