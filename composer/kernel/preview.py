"""
Composer Kernel — Preview List

The editor's in-memory, order-significant list of components.

Pure reducer: (PreviewState, PreviewAction) → PreviewResult
No side effects. No IO. Deterministic. Invalid ids or indices are not errors:
the action comes back applied=False with a reason and the state untouched.

States:
  idle              no pending edit
  editing(item_id)  one item's content is being composed in `draft`

PreviewList wraps the reducer around a single owned state. Each operation
runs under a lock, so no operation observes a partially applied one.
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable, Iterable
from dataclasses import replace
from typing import Any

from composer.kernel import actions
from composer.kernel.templates import TemplateCatalog
from composer.kernel.types import (
    PreviewAction,
    PreviewItem,
    PreviewResult,
    PreviewState,
    ResolvedNode,
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def empty_preview(record_id: str | None = None) -> PreviewState:
    return PreviewState(record_id=record_id)


def reduce(state: PreviewState, action: PreviewAction) -> PreviewResult:
    """
    Apply one action to a preview state.
    The input state is frozen and never modified; mutations return a new one.
    """
    handler = _HANDLERS.get(action.type)
    if handler is None:
        return _reject(state, f"UNKNOWN_ACTION: {action.type}")
    return handler(state, action.payload)


def replay(actions_: Iterable[PreviewAction], initial: PreviewState | None = None) -> PreviewState:
    """Fold actions over a state, skipping the ones that do not apply."""
    state = initial or empty_preview()
    for action in actions_:
        state = reduce(state, action).state
    return state


def items_from_node(node: ResolvedNode) -> list[PreviewItem]:
    """Seed preview items from a resolved record's children, in order."""
    items: list[PreviewItem] = []
    for index, child in enumerate(node.children):
        props = child.props
        items.append(
            PreviewItem(
                id=str(index + 1),
                type=child.type_tag,
                content=_content_of(props),
                editable=bool(props.get("editable", True)),
                properties=dict(props),
            )
        )
    return items


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _reject(state: PreviewState, reason: str) -> PreviewResult:
    return PreviewResult(state=state, applied=False, reason=reason)


def _ok(state: PreviewState) -> PreviewResult:
    return PreviewResult(state=state, applied=True)


def _idle(state: PreviewState, **changes: Any) -> PreviewState:
    return replace(state, mode="idle", editing_id=None, draft="", **changes)


def _content_of(props: dict[str, Any]) -> str:
    for key in ("content", "title", "text", "label"):
        value = props.get(key)
        if isinstance(value, str):
            return value
    return ""


def _is_index(value: Any, length: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < length


# ---------------------------------------------------------------------------
# Action handlers
# ---------------------------------------------------------------------------


def _handle_move(state: PreviewState, p: dict[str, Any]) -> PreviewResult:
    from_index, to_index = p.get("from"), p.get("to")
    n = len(state.items)
    if not _is_index(from_index, n) or not _is_index(to_index, n):
        return _reject(state, f"INDEX_OUT_OF_RANGE: move({from_index}, {to_index}) on {n} items")
    if from_index == to_index:
        return _ok(state)

    items = list(state.items)
    moved = items.pop(from_index)
    items.insert(to_index, moved)
    return _ok(replace(state, items=tuple(items)))


def _handle_update(state: PreviewState, p: dict[str, Any]) -> PreviewResult:
    item_id = p.get("id")
    index = state.index_of(item_id)
    if index is None:
        return _reject(state, f"ITEM_NOT_FOUND: {item_id}")

    items = list(state.items)
    items[index] = replace(items[index], content=p.get("content", ""))
    if state.mode == "editing" and state.editing_id == item_id:
        return _ok(_idle(state, items=tuple(items)))
    return _ok(replace(state, items=tuple(items)))


def _handle_delete(state: PreviewState, p: dict[str, Any]) -> PreviewResult:
    item_id = p.get("id")
    if state.index_of(item_id) is None:
        return _reject(state, f"ITEM_NOT_FOUND: {item_id}")

    items = tuple(item for item in state.items if item.id != item_id)
    if state.mode == "editing" and state.editing_id == item_id:
        return _ok(_idle(state, items=items))
    return _ok(replace(state, items=items))


def _handle_insert(state: PreviewState, p: dict[str, Any]) -> PreviewResult:
    item_id = p.get("id")
    if not item_id:
        return _reject(state, "MISSING_ID: preview.insert requires 'id'")
    if state.index_of(item_id) is not None:
        return _reject(state, f"ITEM_ALREADY_EXISTS: {item_id}")

    item = PreviewItem(
        id=item_id,
        type=p.get("type", ""),
        content=p.get("content", ""),
        editable=True,
        properties=p.get("properties"),
    )
    return _ok(replace(state, items=state.items + (item,)))


def _handle_begin_edit(state: PreviewState, p: dict[str, Any]) -> PreviewResult:
    item = state.get(p.get("id"))
    if item is None:
        return _reject(state, f"ITEM_NOT_FOUND: {p.get('id')}")
    if not item.editable:
        return _reject(state, f"NOT_EDITABLE: {item.id}")
    return _ok(replace(state, mode="editing", editing_id=item.id, draft=item.content))


def _handle_set_draft(state: PreviewState, p: dict[str, Any]) -> PreviewResult:
    if state.mode != "editing":
        return _reject(state, "NOT_EDITING")
    return _ok(replace(state, draft=p.get("content", "")))


def _handle_commit(state: PreviewState, p: dict[str, Any]) -> PreviewResult:
    if state.mode != "editing" or state.editing_id is None:
        return _reject(state, "NOT_EDITING")
    return _handle_update(state, {"id": state.editing_id, "content": state.draft})


def _handle_cancel_edit(state: PreviewState, p: dict[str, Any]) -> PreviewResult:
    if state.mode != "editing":
        return _reject(state, "NOT_EDITING")
    return _ok(_idle(state))


def _handle_select(state: PreviewState, p: dict[str, Any]) -> PreviewResult:
    items = tuple(p.get("items", ()))
    return _ok(PreviewState(items=items, record_id=p.get("record_id")))


_HANDLERS: dict[str, Callable[[PreviewState, dict[str, Any]], PreviewResult]] = {
    "preview.move": _handle_move,
    "preview.update": _handle_update,
    "preview.delete": _handle_delete,
    "preview.insert": _handle_insert,
    "preview.begin_edit": _handle_begin_edit,
    "preview.set_draft": _handle_set_draft,
    "preview.commit": _handle_commit,
    "preview.cancel_edit": _handle_cancel_edit,
    "preview.select": _handle_select,
}


# ---------------------------------------------------------------------------
# Owned list
# ---------------------------------------------------------------------------


class PreviewList:
    """
    The authoring surface for one editing session.

    Not shared across sessions. The UI layer calls these methods; nothing
    here knows about drag events or widgets.
    """

    def __init__(
        self,
        items: Iterable[PreviewItem] = (),
        *,
        record_id: str | None = None,
        id_factory: Callable[[], str] | None = None,
        catalog: TemplateCatalog | None = None,
    ) -> None:
        self._state = PreviewState(items=tuple(items), record_id=record_id)
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._catalog = catalog or TemplateCatalog()
        self._lock = threading.Lock()

    @classmethod
    def from_node(cls, node: ResolvedNode, **kwargs: Any) -> PreviewList:
        return cls(items_from_node(node), record_id=node.source_id, **kwargs)

    @classmethod
    def from_list(cls, rows: Iterable[dict[str, Any]], **kwargs: Any) -> PreviewList:
        """Restore a list saved with to_list()."""
        return cls((PreviewItem.from_dict(row) for row in rows), **kwargs)

    # -- state -------------------------------------------------------------

    @property
    def state(self) -> PreviewState:
        return self._state

    @property
    def items(self) -> list[PreviewItem]:
        return list(self._state.items)

    @property
    def mode(self) -> str:
        return self._state.mode

    @property
    def editing_id(self) -> str | None:
        return self._state.editing_id

    def __len__(self) -> int:
        return len(self._state.items)

    def apply(self, action: PreviewAction) -> PreviewResult:
        with self._lock:
            result = reduce(self._state, action)
            self._state = result.state
            return result

    # -- operations --------------------------------------------------------

    def move(self, from_index: int, to_index: int) -> bool:
        return self.apply(actions.move(from_index, to_index)).applied

    def update(self, item_id: str, content: str) -> bool:
        return self.apply(actions.update(item_id, content)).applied

    def delete(self, item_id: str) -> bool:
        return self.apply(actions.delete(item_id)).applied

    def insert(
        self,
        type: str,
        *,
        content: str | None = None,
        existing: bool = False,
        properties: dict[str, Any] | None = None,
    ) -> PreviewItem:
        """Append a new editable item with a freshly generated id and return it."""
        with self._lock:
            item_id = self._id_factory()
            while self._state.index_of(item_id) is not None:
                item_id = self._id_factory()
            action = actions.insert(item_id, type, content=content, existing=existing, properties=properties)
            self._state = reduce(self._state, action).state
            return self._state.items[-1]

    def begin_edit(self, item_id: str) -> bool:
        return self.apply(actions.begin_edit(item_id)).applied

    def set_draft(self, content: str) -> bool:
        return self.apply(actions.set_draft(content)).applied

    def commit(self) -> bool:
        return self.apply(actions.commit()).applied

    def cancel_edit(self) -> bool:
        return self.apply(actions.cancel_edit()).applied

    def select(self, record_id: str | None, items: Iterable[PreviewItem]) -> None:
        """Switch context: replace the whole list and drop any in-flight edit."""
        self.apply(actions.select(record_id, items))

    def select_node(self, node: ResolvedNode) -> None:
        self.select(node.source_id, items_from_node(node))

    def select_template(self, template_id: str) -> bool:
        template = self._catalog.get(template_id)
        if template is None:
            return False
        self.select(template.id, template.components)
        return True

    def to_list(self) -> list[dict[str, Any]]:
        return [item.to_dict() for item in self._state.items]
