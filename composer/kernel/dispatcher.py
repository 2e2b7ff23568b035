"""
Composer Kernel — Dispatcher

Pure function: ResolvedNode → RenderInstruction
No side effects. No IO.

Two tables, looked up by canonical (stripped, lower-cased) discriminator:
  - page templates   keyed by node.template
  - component types  keyed by node.type_tag

Dispatch is total. A template miss falls back to the generic page; a
component miss, an "unknown" node, or props that fail the variant's model
fall back to the unknown variant. Children are dispatched recursively in
order.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from composer.kernel.types import RenderInstruction, ResolvedNode, Warning, canonical
from composer.kernel.variants import (
    COMPONENT_VARIANTS,
    DEFAULT_TEMPLATE,
    PAGE_VARIANTS,
    UNKNOWN_VARIANT,
    Variant,
)

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Variant registry for pages and components.

    Tables are copied at construction, so registering on one dispatcher never
    affects another.
    """

    def __init__(
        self,
        templates: Mapping[str, Variant] | None = None,
        components: Mapping[str, Variant] | None = None,
        default_template: str = DEFAULT_TEMPLATE,
        unknown: Variant = UNKNOWN_VARIANT,
    ) -> None:
        self._templates = {canonical(k): v for k, v in (templates or PAGE_VARIANTS).items()}
        self._components = {canonical(k): v for k, v in (components or COMPONENT_VARIANTS).items()}
        self._unknown = unknown
        default_key = canonical(default_template)
        if default_key not in self._templates:
            raise ValueError(f"default template '{default_template}' is not registered")
        self._default_template = default_key

    # -- registry ----------------------------------------------------------

    def register_template(self, discriminator: str, variant: Variant) -> None:
        self._templates[canonical(discriminator)] = variant

    def register_component(self, discriminator: str, variant: Variant) -> None:
        self._components[canonical(discriminator)] = variant

    def template_variant(self, template: str | None) -> Variant | None:
        return self._templates.get(canonical(template))

    def component_variant(self, type_tag: str | None) -> Variant | None:
        return self._components.get(canonical(type_tag))

    # -- dispatch ----------------------------------------------------------

    def dispatch(self, node: ResolvedNode) -> RenderInstruction:
        return self.dispatch_with_report(node)[0]

    def dispatch_with_report(self, node: ResolvedNode) -> tuple[RenderInstruction, list[Warning]]:
        warnings: list[Warning] = []
        return self._dispatch(node, warnings), warnings

    def _dispatch(self, node: ResolvedNode, warnings: list[Warning]) -> RenderInstruction:
        children = [self._dispatch(child, warnings) for child in node.children]

        if node.is_unknown:
            return RenderInstruction(self._unknown.name, dict(node.props), children)

        variant = self._select(node, warnings)
        if variant is self._unknown:
            return RenderInstruction(variant.name, _unknown_props(node), children)

        try:
            props = variant.build_props(node.props)
        except ValidationError as e:
            errors = [{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()]
            logger.warning("dispatcher: invalid props for %s (%s): %s", variant.name, node.type_tag, errors)
            warnings.append(
                Warning(
                    code="INVALID_PROPS",
                    message=f"Props for '{node.type_tag}' do not fit variant '{variant.name}'",
                    details={"variant": variant.name, "errors": errors},
                )
            )
            return RenderInstruction(
                self._unknown.name,
                {**_unknown_props(node), "errors": errors},
                children,
            )

        return RenderInstruction(variant.name, props, children)

    def _select(self, node: ResolvedNode, warnings: list[Warning]) -> Variant:
        if node.kind == "page":
            variant = self._templates.get(canonical(node.template))
            if variant is None:
                _warn_unknown(warnings, "template", node.template)
                variant = self._templates[self._default_template]
            return variant

        variant = self._components.get(canonical(node.type_tag))
        if variant is None:
            _warn_unknown(warnings, "component", node.type_tag)
            return self._unknown
        return variant


def dispatch(node: ResolvedNode) -> RenderInstruction:
    """Dispatch with the built-in variant tables."""
    return Dispatcher().dispatch(node)


def _unknown_props(node: ResolvedNode) -> dict[str, Any]:
    return {"typeTag": node.type_tag, **node.props}


def _warn_unknown(warnings: list[Warning], table: str, discriminator: str | None) -> None:
    logger.warning("dispatcher: no %s variant for %r, using fallback", table, discriminator)
    warnings.append(
        Warning(
            code="UNKNOWN_DISCRIMINATOR",
            message=f"No {table} variant registered for '{discriminator}'",
            details={"table": table, "discriminator": discriminator},
        )
    )
