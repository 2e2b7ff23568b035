"""
Starter page templates offered by the editor before any CMS record is chosen.
"""

from __future__ import annotations

from dataclasses import dataclass

from composer.kernel.types import PreviewItem


@dataclass(frozen=True)
class StarterTemplate:
    id: str
    name: str
    components: tuple[PreviewItem, ...]


def _items(*rows: tuple[str, str, bool]) -> tuple[PreviewItem, ...]:
    return tuple(
        PreviewItem(id=str(i + 1), type=type_, content=content, editable=editable)
        for i, (type_, content, editable) in enumerate(rows)
    )


STARTER_TEMPLATES: tuple[StarterTemplate, ...] = (
    StarterTemplate(
        id="1",
        name="Home Page",
        components=_items(
            ("hero", "This is home hero", True),
            ("Carousel", "This is carusel.", True),
            ("card", "This is Card", True),
            ("form", "This is form", True),
            ("image", "This is image ", False),
        ),
    ),
    StarterTemplate(
        id="2",
        name="Insights",
        components=_items(
            ("hero", "This is Insight hero", True),
            ("Card", "insight card...", True),
            ("image", "insight  Image", False),
            ("form", "insight form", True),
        ),
    ),
    StarterTemplate(
        id="3",
        name="Pressrelease",
        components=_items(
            ("hero", "This is pressrelease hero", True),
            ("image", "Product Image", False),
            ("card", "Product description...", True),
            ("form", "subscribe", True),
        ),
    ),
    StarterTemplate(
        id="4",
        name="Generic",
        components=_items(
            ("hero", "This is generic hero", True),
            ("card", "Get in touch with us...", True),
            ("form", "Contact Form", False),
            ("image", "Address: 123 Main St", True),
        ),
    ),
)


class TemplateCatalog:
    """Lookup over starter templates, by id."""

    def __init__(self, templates: tuple[StarterTemplate, ...] = STARTER_TEMPLATES) -> None:
        self._templates = {t.id: t for t in templates}

    def get(self, template_id: str) -> StarterTemplate | None:
        return self._templates.get(template_id)

    def list_templates(self) -> list[StarterTemplate]:
        return list(self._templates.values())
