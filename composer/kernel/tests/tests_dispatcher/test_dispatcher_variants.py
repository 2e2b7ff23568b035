"""
Composer Dispatcher -- Variant Selection Tests

Covers:
  - Each built-in page template and component type maps to its variant
  - Discriminator casing is canonicalized (lower-case, stripped) in both tables
  - Dispatch is total: unknown templates → generic page, unknown types → unknown
  - Props are validated per variant; failures fall back to unknown
  - Children are dispatched recursively and in order
  - Registries are per-dispatcher and extensible
"""

import pytest

from composer.kernel.dispatcher import Dispatcher, dispatch
from composer.kernel.resolver import resolve
from composer.kernel.tests.builders import make_record
from composer.kernel.types import ResolvedNode
from composer.kernel.variants import CardProps, Variant

# ============================================================================
# Helpers
# ============================================================================


def page(template, children=None, **props):
    return ResolvedNode(kind="page", type_tag="Page", template=template, props=props, children=children or [])


def component(type_tag, **props):
    return ResolvedNode(kind="component", type_tag=type_tag, props=props)


# ============================================================================
# 1. Built-in tables
# ============================================================================


class TestBuiltInVariants:
    @pytest.mark.parametrize("template", ["home", "insights", "pressrelease", "generic"])
    def test_page_templates(self, template):
        assert dispatch(page(template)).variant == f"page.{template}"

    @pytest.mark.parametrize("type_tag", ["hero", "card", "image", "button", "form", "carousel"])
    def test_component_types(self, type_tag):
        assert dispatch(component(type_tag)).variant == f"component.{type_tag}"

    def test_home_page_scenario_end_to_end(self):
        record = make_record("c1", [{"hero": {"props": {"title": "Welcome"}}}], template="home")
        instruction = dispatch(resolve(record))
        assert instruction.to_dict() == {
            "variant": "page.home",
            "props": {},
            "children": [{"variant": "component.hero", "props": {"title": "Welcome"}, "children": []}],
        }


# ============================================================================
# 2. Casing
# ============================================================================


class TestCanonicalCasing:
    @pytest.mark.parametrize("tag", ["card", "Card", "CARD", " card "])
    def test_component_casing(self, tag):
        assert dispatch(component(tag)).variant == "component.card"

    @pytest.mark.parametrize("template", ["Home", "HOME", "home"])
    def test_template_casing(self, template):
        assert dispatch(page(template)).variant == "page.home"

    def test_carousel_as_stored_by_editor(self):
        # the editor stores "Carousel" while pages use "carousel"
        assert dispatch(component("Carousel")).variant == dispatch(component("carousel")).variant

    def test_resolved_node_keeps_stored_tag(self):
        node = resolve(make_record("c1", [{"Hero": {"props": {}}}]))
        assert node.children[0].type_tag == "Hero"
        assert dispatch(node).children[0].variant == "component.hero"


# ============================================================================
# 3. Fallbacks
# ============================================================================


class TestTotalDispatch:
    @pytest.mark.parametrize("tag", ["", "banner", "héro", "card2", "💥", "x" * 500])
    def test_unknown_component_falls_back(self, tag):
        instruction = dispatch(component(tag, title="t"))
        assert instruction is not None
        assert instruction.variant == "unknown"
        assert instruction.props == {"typeTag": tag, "title": "t"}

    @pytest.mark.parametrize("template", ["landing", "", "Blog"])
    def test_unknown_template_falls_back_to_generic(self, template):
        assert dispatch(page(template)).variant == "page.generic"

    def test_page_without_template_string(self):
        assert dispatch(page(None)).variant == "page.generic"

    def test_unknown_node_passes_reason_through(self):
        node = ResolvedNode(kind="component", type_tag="unknown", props={"reason": "recursion_limit"})
        instruction = dispatch(node)
        assert instruction.variant == "unknown"
        assert instruction.props == {"reason": "recursion_limit"}

    def test_unknown_discriminator_reported(self):
        _, warnings = Dispatcher().dispatch_with_report(page("landing", [component("banner")]))
        assert [w.code for w in warnings] == ["UNKNOWN_DISCRIMINATOR", "UNKNOWN_DISCRIMINATOR"]
        assert {w.details["table"] for w in warnings} == {"template", "component"}


# ============================================================================
# 4. Props validation
# ============================================================================


class TestPropsValidation:
    def test_camel_case_props_kept(self):
        instruction = dispatch(component("hero", title="Hi", ctaText="Go", ctaUrl="/go"))
        assert instruction.props == {"title": "Hi", "ctaText": "Go", "ctaUrl": "/go"}

    def test_extra_props_pass_through(self):
        assert dispatch(component("card", title="A", badge="new")).props == {"title": "A", "badge": "new"}

    def test_nested_models_validated(self):
        instruction = dispatch(component("form", fields=[{"name": "email", "label": "Email"}], submitUrl="/s"))
        assert instruction.variant == "component.form"
        assert instruction.props["fields"] == [{"name": "email", "label": "Email"}]

    def test_invalid_props_fall_back_to_unknown(self):
        dispatcher = Dispatcher()
        instruction, warnings = dispatcher.dispatch_with_report(component("carousel", images="not-a-list"))
        assert instruction.variant == "unknown"
        assert instruction.props["typeTag"] == "carousel"
        assert instruction.props["errors"][0]["loc"] == ["images"]
        assert [w.code for w in warnings] == ["INVALID_PROPS"]

    def test_invalid_child_does_not_break_page(self):
        node = page("home", [component("hero", title="ok"), component("form", fields=[{"label": "no name"}])])
        instruction = dispatch(node)
        assert instruction.variant == "page.home"
        assert [c.variant for c in instruction.children] == ["component.hero", "unknown"]


# ============================================================================
# 5. Registry
# ============================================================================


class TestRegistry:
    def test_register_component(self):
        dispatcher = Dispatcher()
        dispatcher.register_component("Banner", Variant("component.banner"))
        assert dispatcher.dispatch(component("banner")).variant == "component.banner"

    def test_registration_is_local(self):
        Dispatcher().register_component("banner", Variant("component.banner"))
        assert dispatch(component("banner")).variant == "unknown"

    def test_register_template_with_model(self):
        dispatcher = Dispatcher()
        dispatcher.register_template("Landing", Variant("page.landing", CardProps))
        assert dispatcher.dispatch(page("landing", title="L")).variant == "page.landing"

    def test_custom_default_template_must_exist(self):
        with pytest.raises(ValueError):
            Dispatcher(default_template="missing")

    def test_lookup_helpers(self):
        dispatcher = Dispatcher()
        assert dispatcher.component_variant("IMAGE").name == "component.image"
        assert dispatcher.template_variant("nope") is None

    def test_children_order_preserved(self):
        node = page("generic", [component(t) for t in ["form", "hero", "card", "zzz", "image"]])
        assert [c.variant for c in dispatch(node).children] == [
            "component.form",
            "component.hero",
            "component.card",
            "unknown",
            "component.image",
        ]
