"""
CMS entry store — the capability the composition pipeline fetches from.

The store hands back raw entries (untyped mappings). This module also owns the
boundary validation that turns raw entries into ConfigEntry / DataEntry.
Transport, auth and pagination belong to concrete stores, not to the core.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from composer.kernel.types import ConfigEntry, DataEntry, Warning

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Storage protocol
# ---------------------------------------------------------------------------


class EntryStore:
    """
    Abstract entry store interface.
    Implement against the CMS delivery API for production, or in-memory for tests.
    """

    async def fetch_entries_by_type(self, content_type: str) -> list[dict[str, Any]]:
        """Return every entry of a content type (complete listing)."""
        raise NotImplementedError


class FetchFailed(Exception):
    """Raised by MemoryEntryStore for content types marked as failing."""

    pass


class MemoryEntryStore(EntryStore):
    """In-memory entry store for testing and demos."""

    def __init__(self, entries: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self.entries: dict[str, list[dict[str, Any]]] = {k: list(v) for k, v in (entries or {}).items()}
        self.failing: set[str] = set()
        self.calls: list[str] = []

    async def fetch_entries_by_type(self, content_type: str) -> list[dict[str, Any]]:
        self.calls.append(content_type)
        if content_type in self.failing:
            raise FetchFailed(f"fetch failed for content type '{content_type}'")
        return list(self.entries.get(content_type, []))

    def put(self, content_type: str, entry: dict[str, Any]) -> None:
        self.entries.setdefault(content_type, []).append(entry)


# ---------------------------------------------------------------------------
# Raw entry validation
# ---------------------------------------------------------------------------


class RawEntry(BaseModel):
    """
    A raw CMS entry: either {"id", "fields"} or the delivery shape
    {"sys": {"id"}, "fields"}.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)
    fields: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _lift_sys_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and "id" not in data:
            sys = data.get("sys")
            if isinstance(sys, dict) and "id" in sys:
                return {**data, "id": sys["id"]}
        return data


def to_config_entry(raw: Any, warnings: list[Warning] | None = None) -> ConfigEntry | None:
    entry = _validate(raw, warnings)
    if entry is None:
        return None
    f = entry.fields
    shape = f.get("shape", f.get("data"))
    return ConfigEntry(
        id=entry.id,
        internal_name=_str(f.get("internalName")),
        type=_str(f.get("type")),
        shape=dict(shape) if isinstance(shape, dict) else {},
    )


def to_data_entry(raw: Any, warnings: list[Warning] | None = None) -> DataEntry | None:
    entry = _validate(raw, warnings)
    if entry is None:
        return None
    f = entry.fields
    content = f.get("content", f.get("data"))
    # legacy layout wraps the block list: {"data": [...]}
    if isinstance(content, dict) and isinstance(content.get("data"), list):
        content = content["data"]
    config_id = f.get("configId")
    return DataEntry(
        id=entry.id,
        config_id=config_id if isinstance(config_id, str) else None,
        internal_name=_str(f.get("internalName")),
        type=_str(f.get("type")),
        content=list(content) if isinstance(content, list) else [],
    )


def to_config_entries(raws: Iterable[Any], warnings: list[Warning] | None = None) -> list[ConfigEntry]:
    return [c for c in (to_config_entry(r, warnings) for r in raws) if c is not None]


def to_data_entries(raws: Iterable[Any], warnings: list[Warning] | None = None) -> list[DataEntry]:
    return [d for d in (to_data_entry(r, warnings) for r in raws) if d is not None]


def _validate(raw: Any, warnings: list[Warning] | None) -> RawEntry | None:
    try:
        return RawEntry.model_validate(raw)
    except ValidationError as e:
        logger.warning("entry_store: skipping invalid entry %r: %s", repr(raw)[:200], e.error_count())
        if warnings is not None:
            warnings.append(
                Warning(
                    code="INVALID_ENTRY",
                    message="Raw entry failed validation",
                    details={"errors": [{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()]},
                )
            )
        return None


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""
