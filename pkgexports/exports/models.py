"""Pydantic models describing exports map entries."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExportDescriptor(BaseModel):
    """Conditional export entry for a single subpath."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    import_: Optional[str] = Field(default=None, alias="import")
    require: Optional[str] = Field(default=None)
    types: Optional[str] = Field(default=None)

    def to_json(self) -> dict[str, Any]:
        """Manifest form: aliased keys, absent references omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


ExportsMap = dict[str, ExportDescriptor]


def exports_to_json(exports: ExportsMap) -> dict[str, dict[str, Any]]:
    return {key: descriptor.to_json() for key, descriptor in exports.items()}
