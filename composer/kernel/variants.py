"""
Composer Kernel — Render Variants

The closed set of renderer variants the dispatcher can select, with the props
each one actually reads. Props models allow extra keys: only the fields a
variant needs are checked, and only when the node is dispatched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# ---------------------------------------------------------------------------
# Props models
# ---------------------------------------------------------------------------


class _Props(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, alias_generator=to_camel)


class PageProps(_Props):
    title: str | None = None
    slug: str | None = None


class HeroProps(_Props):
    title: str | None = None
    subtitle: str | None = None
    background_image: str | None = None
    cta_text: str | None = None
    cta_url: str | None = None


class CardProps(_Props):
    title: str | None = None
    description: str | None = None
    image_url: str | None = None
    link_url: str | None = None


class ImageProps(_Props):
    src: str | None = None
    alt: str | None = None
    caption: str | None = None


class ButtonProps(_Props):
    label: str | None = None
    url: str | None = None


class FormField(_Props):
    name: str
    type: str = "text"
    label: str | None = None
    required: bool = False


class FormProps(_Props):
    fields: list[FormField] = []
    submit_url: str | None = None


class CarouselImage(_Props):
    src: str
    alt: str = ""
    caption: str | None = None


class CarouselProps(_Props):
    images: list[CarouselImage] = []


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Variant:
    """A renderer variant: its name and the props model it validates against."""

    name: str
    props_model: type[BaseModel] | None = None

    def build_props(self, props: dict[str, Any]) -> dict[str, Any]:
        """
        Check props against this variant's model and return them as stored.
        Raises pydantic.ValidationError.
        """
        if self.props_model is not None:
            self.props_model.model_validate(props)
        return dict(props)


UNKNOWN_VARIANT = Variant("unknown")

DEFAULT_TEMPLATE = "generic"

PAGE_VARIANTS: dict[str, Variant] = {
    "home": Variant("page.home", PageProps),
    "insights": Variant("page.insights", PageProps),
    "pressrelease": Variant("page.pressrelease", PageProps),
    "generic": Variant("page.generic", PageProps),
}

COMPONENT_VARIANTS: dict[str, Variant] = {
    "hero": Variant("component.hero", HeroProps),
    "card": Variant("component.card", CardProps),
    "image": Variant("component.image", ImageProps),
    "button": Variant("component.button", ButtonProps),
    "form": Variant("component.form", FormProps),
    "carousel": Variant("component.carousel", CarouselProps),
}
