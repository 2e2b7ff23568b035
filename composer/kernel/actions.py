"""
Composer Kernel — Preview Action Construction

Factory functions for well-formed preview actions.
Used by PreviewList to wrap user intents before feeding them to the preview
reducer, and by tests to build actions concisely.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from composer.kernel.types import PreviewAction, PreviewItem

PREVIEW_ACTION_TYPES: set[str] = {
    "preview.move",
    "preview.update",
    "preview.delete",
    "preview.insert",
    "preview.begin_edit",
    "preview.set_draft",
    "preview.commit",
    "preview.cancel_edit",
    "preview.select",
}


def move(from_index: int, to_index: int) -> PreviewAction:
    return PreviewAction("preview.move", {"from": from_index, "to": to_index})


def update(item_id: str, content: str) -> PreviewAction:
    return PreviewAction("preview.update", {"id": item_id, "content": content})


def delete(item_id: str) -> PreviewAction:
    return PreviewAction("preview.delete", {"id": item_id})


def insert(
    item_id: str,
    type: str,
    *,
    content: str | None = None,
    existing: bool = False,
    properties: dict[str, Any] | None = None,
) -> PreviewAction:
    """
    item_id must be freshly generated by the caller; the reducer stays
    deterministic. Without explicit content the picker's default label is used.
    """
    if content is None:
        content = f"Existing {type} entry" if existing else f"New {type} component"
    payload: dict[str, Any] = {"id": item_id, "type": type, "content": content}
    if properties is not None:
        payload["properties"] = properties
    return PreviewAction("preview.insert", payload)


def begin_edit(item_id: str) -> PreviewAction:
    return PreviewAction("preview.begin_edit", {"id": item_id})


def set_draft(content: str) -> PreviewAction:
    return PreviewAction("preview.set_draft", {"content": content})


def commit() -> PreviewAction:
    return PreviewAction("preview.commit")


def cancel_edit() -> PreviewAction:
    return PreviewAction("preview.cancel_edit")


def select(record_id: str | None, items: Iterable[PreviewItem]) -> PreviewAction:
    return PreviewAction("preview.select", {"record_id": record_id, "items": list(items)})
