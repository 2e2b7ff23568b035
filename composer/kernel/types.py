"""
Composer Kernel — Shared Types

Data classes used across linker, resolver, dispatcher, and the preview list.
These are the contracts that bind the kernel together.

Two CMS collections feed the kernel:
- configuration entries carry layout metadata (`shape`: template, slug, title)
- data entries carry content (`content`: ordered component blocks)

A data entry points at its configuration through `config_id`. The join of the
two is a LinkedRecord; resolving a LinkedRecord gives a ResolvedNode tree;
dispatching a ResolvedNode gives a RenderInstruction tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_MAX_DEPTH = 16

UNKNOWN_TYPE = "unknown"

NodeKind = Literal["page", "component"]

PreviewMode = Literal["idle", "editing"]

WARNING_CODES: set[str] = {
    "MISSING_REFERENCE",
    "DUPLICATE_CONFIG_ID",
    "DUPLICATE_CONFIG_REFERENCE",
    "MALFORMED_BLOCK",
    "UNKNOWN_DISCRIMINATOR",
    "INVALID_PROPS",
    "RECURSION_LIMIT",
    "INVALID_ENTRY",
    "FETCH_FAILED",
}


# ---------------------------------------------------------------------------
# CMS records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConfigEntry:
    """Layout metadata for a page or component collection. Immutable."""

    id: str
    internal_name: str = ""
    type: str = ""
    shape: dict[str, Any] = field(default_factory=dict)

    @property
    def template(self) -> str | None:
        template = self.shape.get("template")
        if isinstance(template, str) and template.strip():
            return template
        return None

    @property
    def slug(self) -> str | None:
        slug = self.shape.get("slug")
        if slug is None:
            # legacy layout nests page metadata one level down
            inner = self.shape.get("data")
            if isinstance(inner, dict):
                slug = inner.get("slug")
        return slug if isinstance(slug, str) else None


@dataclass(frozen=True)
class DataEntry:
    """Content values for a configuration entry. `config_id` may dangle."""

    id: str
    config_id: str | None = None
    internal_name: str = ""
    type: str = ""
    content: list[Any] = field(default_factory=list)


@dataclass(frozen=True)
class LinkedRecord:
    """Join of a data entry with its configuration. data.config_id == config.id."""

    config: ConfigEntry
    data: DataEntry


@dataclass(frozen=True)
class ComponentBlock:
    """
    A content block after normalization.

    Stored form is a single-key mapping:
        {"hero": {"props": {...}, "config": {...}}}
    """

    discriminator: str
    props: dict[str, Any] = field(default_factory=dict)
    nested_config: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        value: dict[str, Any] = {"props": self.props}
        if self.nested_config is not None:
            value["config"] = self.nested_config
        return {self.discriminator: value}


# ---------------------------------------------------------------------------
# Resolution / dispatch output
# ---------------------------------------------------------------------------


@dataclass
class ResolvedNode:
    """Normalized, renderer-ready tree node. Pages carry a template."""

    kind: NodeKind
    type_tag: str
    props: dict[str, Any] = field(default_factory=dict)
    children: list[ResolvedNode] = field(default_factory=list)
    template: str | None = None
    source_id: str | None = None

    @property
    def is_unknown(self) -> bool:
        return self.type_tag == UNKNOWN_TYPE

    def depth(self) -> int:
        """Longest edge count from this node to a leaf."""
        if not self.children:
            return 0
        return 1 + max(child.depth() for child in self.children)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "kind": self.kind,
            "typeTag": self.type_tag,
            "props": self.props,
            "children": [c.to_dict() for c in self.children],
        }
        if self.template is not None:
            d["template"] = self.template
        return d


@dataclass
class RenderInstruction:
    """What the render tree receives: a variant name, its props, its children."""

    variant: str
    props: dict[str, Any] = field(default_factory=dict)
    children: list[RenderInstruction] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "variant": self.variant,
            "props": self.props,
            "children": [c.to_dict() for c in self.children],
        }


# ---------------------------------------------------------------------------
# Warnings and results
# ---------------------------------------------------------------------------


@dataclass
class Warning:
    """A non-fatal issue encountered while linking, resolving, or dispatching."""

    code: str
    message: str
    details: dict[str, Any] | None = None


@dataclass
class LinkResult:
    records: list[LinkedRecord]
    warnings: list[Warning] = field(default_factory=list)


@dataclass
class ResolveResult:
    node: ResolvedNode
    warnings: list[Warning] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Preview list
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PreviewItem:
    """One component in the editor preview. Order in the list is render order."""

    id: str
    type: str
    content: str
    editable: bool = True
    properties: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "content": self.content,
            "editable": self.editable,
        }
        if self.properties is not None:
            d["properties"] = self.properties
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PreviewItem:
        return cls(
            id=str(d["id"]),
            type=d.get("type", UNKNOWN_TYPE),
            content=d.get("content", ""),
            editable=bool(d.get("editable", True)),
            properties=d.get("properties"),
        )


@dataclass(frozen=True)
class PreviewState:
    """
    Snapshot of an editing session.

    mode is "idle" or "editing"; while editing, editing_id names the item
    whose content is being composed and draft holds the uncommitted text.
    """

    items: tuple[PreviewItem, ...] = ()
    mode: PreviewMode = "idle"
    editing_id: str | None = None
    draft: str = ""
    record_id: str | None = None

    def ids(self) -> list[str]:
        return [item.id for item in self.items]

    def index_of(self, item_id: str) -> int | None:
        for i, item in enumerate(self.items):
            if item.id == item_id:
                return i
        return None

    def get(self, item_id: str) -> PreviewItem | None:
        index = self.index_of(item_id)
        return None if index is None else self.items[index]


@dataclass(frozen=True)
class PreviewAction:
    """A user intent fed to the preview reducer. The reducer reads type and payload."""

    type: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class PreviewResult:
    """
    Result of applying one action to a preview state.
    The reducer never throws; it always returns one of these.
    """

    state: PreviewState
    applied: bool
    reason: str | None = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def canonical(discriminator: str | None) -> str:
    """Lookup key for a discriminator: stripped and lower-cased."""
    if not isinstance(discriminator, str):
        return ""
    return discriminator.strip().lower()
