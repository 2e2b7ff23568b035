"""
Composer Kernel — Resolver

Pure function: LinkedRecord → ResolvedNode
No side effects. No IO. Deterministic.

A record whose configuration shape carries a template is a page; otherwise it
is a plain component collection. Each stored block is a single-key mapping
naming its component type:

    {"hero": {"props": {"title": "Welcome"}, "config": {...}}}

Blocks are normalized into ComponentBlock and become child nodes in source
order. A block whose config holds `ref` expands another record (looked up by
config id); a block whose config holds `template` or `content` expands
inline. Expansion depth is bounded: the root is depth 0 and a node at
depth >= max_depth that would expand further becomes an "unknown" node.

Malformed blocks never raise:
  - more than one key → the first key in insertion order is used
  - zero keys, or not a mapping → "unknown" node
  - a value without props/config keys → the whole value is the props
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from composer.kernel.types import (
    DEFAULT_MAX_DEPTH,
    UNKNOWN_TYPE,
    ComponentBlock,
    LinkedRecord,
    ResolvedNode,
    ResolveResult,
    Warning,
)

logger = logging.getLogger(__name__)

# Shape keys that describe structure rather than props
_STRUCTURAL_KEYS = frozenset({"template", "content", "ref"})


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def resolve(
    record: LinkedRecord,
    *,
    lookup: Mapping[str, LinkedRecord] | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> ResolvedNode:
    """Resolve a linked record into a node tree."""
    return resolve_with_report(record, lookup=lookup, max_depth=max_depth).node


def resolve_with_report(
    record: LinkedRecord,
    *,
    lookup: Mapping[str, LinkedRecord] | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> ResolveResult:
    """
    Resolve a linked record and collect warnings.

    lookup maps config id → LinkedRecord and is only needed when blocks
    reference other records through `config.ref`.
    """
    if max_depth < 1:
        raise ValueError(f"max_depth must be >= 1, got {max_depth}")

    ctx = _Context(lookup=lookup or {}, max_depth=max_depth)
    node = _resolve_record(record, 0, ctx)
    return ResolveResult(node=node, warnings=ctx.warnings)


def normalize_block(raw: Any, warnings: list[Warning] | None = None) -> ComponentBlock | None:
    """
    Turn a stored single-key block into a ComponentBlock.
    Returns None when no discriminator can be recovered.
    """
    if not isinstance(raw, Mapping) or not raw:
        _warn(warnings, "MALFORMED_BLOCK", "Block is empty or not a mapping", {"block": _preview(raw)})
        return None

    keys = list(raw.keys())
    key = keys[0]
    if len(keys) > 1:
        _warn(
            warnings,
            "MALFORMED_BLOCK",
            f"Block has {len(keys)} top-level keys; using '{key}'",
            {"used": key, "ignored": keys[1:]},
        )

    if not isinstance(key, str) or not key.strip():
        _warn(warnings, "MALFORMED_BLOCK", "Block discriminator is not a string", {"key": _preview(key)})
        return None

    value = raw[key]
    props: Any
    config: Any = None

    if isinstance(value, Mapping):
        if "props" in value or "config" in value:
            props = value.get("props") or {}
            config = value.get("config")
        else:
            props = value
    elif value is None:
        props = {}
    else:
        props = {"value": value}

    if not isinstance(props, Mapping):
        props = {"value": props}

    return ComponentBlock(
        discriminator=key,
        props=dict(props),
        nested_config=dict(config) if isinstance(config, Mapping) else None,
    )


def shape_props(shape: Mapping[str, Any]) -> dict[str, Any]:
    """
    Props carried by a configuration shape (title, slug, ...).
    Structural keys are dropped; a legacy nested `data` mapping is flattened
    underneath top-level keys.
    """
    props: dict[str, Any] = {}
    inner = shape.get("data")
    if isinstance(inner, Mapping):
        props.update(inner)
    for key, value in shape.items():
        if key in _STRUCTURAL_KEYS or (key == "data" and isinstance(value, Mapping)):
            continue
        props[key] = value
    return props


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


@dataclass
class _Context:
    lookup: Mapping[str, LinkedRecord]
    max_depth: int
    warnings: list[Warning] = field(default_factory=list)


def _warn(warnings: list[Warning] | None, code: str, message: str, details: dict[str, Any] | None = None) -> None:
    logger.warning("resolver: %s: %s", code, message)
    if warnings is not None:
        warnings.append(Warning(code=code, message=message, details=details))


def _preview(value: Any) -> str:
    return repr(value)[:200]


def _template_of(shape: Mapping[str, Any]) -> str | None:
    template = shape.get("template")
    if isinstance(template, str) and template.strip():
        return template
    return None


def _unknown(reason: str, original: str | None = None, depth: int = 0) -> ResolvedNode:
    props: dict[str, Any] = {"reason": reason}
    if original is not None:
        props["original"] = original
    if reason == "recursion_limit":
        props["depth"] = depth
    return ResolvedNode(kind="component", type_tag=UNKNOWN_TYPE, props=props)


def _resolve_record(record: LinkedRecord, depth: int, ctx: _Context) -> ResolvedNode:
    config = record.config
    template = config.template
    return ResolvedNode(
        kind="page" if template else "component",
        type_tag=config.type,
        props=shape_props(config.shape),
        children=_resolve_blocks(record.data.content, depth + 1, ctx),
        template=template,
        source_id=record.data.id,
    )


def _resolve_blocks(blocks: Any, depth: int, ctx: _Context) -> list[ResolvedNode]:
    if blocks is None:
        return []
    if not isinstance(blocks, list | tuple):
        _warn(ctx.warnings, "MALFORMED_BLOCK", "Block content is not a list", {"content": _preview(blocks)})
        return []
    return [_resolve_block(raw, depth, ctx) for raw in blocks]


def _resolve_block(raw: Any, depth: int, ctx: _Context) -> ResolvedNode:
    block = normalize_block(raw, ctx.warnings)
    if block is None:
        return _unknown("malformed_block")

    nested = block.nested_config or {}
    ref = nested.get("ref")
    expands = ref is not None or _template_of(nested) is not None or "content" in nested

    if not expands:
        return ResolvedNode(kind="component", type_tag=block.discriminator, props=block.props)

    if depth >= ctx.max_depth:
        _warn(
            ctx.warnings,
            "RECURSION_LIMIT",
            f"Block '{block.discriminator}' at depth {depth} exceeds max depth {ctx.max_depth}",
            {"discriminator": block.discriminator, "depth": depth},
        )
        return _unknown("recursion_limit", block.discriminator, depth)

    if ref is not None:
        target = ctx.lookup.get(ref) if isinstance(ref, str) else None
        if target is None:
            _warn(
                ctx.warnings,
                "MISSING_REFERENCE",
                f"Block '{block.discriminator}' references unknown config '{ref}'",
                {"discriminator": block.discriminator, "ref": ref},
            )
            return ResolvedNode(kind="component", type_tag=block.discriminator, props=block.props)

        inner = _resolve_record(target, depth, ctx)
        inner.type_tag = block.discriminator
        inner.props = {**inner.props, **block.props}
        return inner

    template = _template_of(nested)
    return ResolvedNode(
        kind="page" if template else "component",
        type_tag=block.discriminator,
        props={**shape_props(nested), **block.props},
        children=_resolve_blocks(nested.get("content"), depth + 1, ctx),
        template=template,
    )
