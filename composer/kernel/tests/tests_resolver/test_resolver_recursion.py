"""
Composer Resolver -- Recursion Tests

Blocks expand further when their config carries `ref` (another record, by
config id) or `template`/`content` (inline). Expansion is bounded by
max_depth; past the bound the branch ends in an "unknown" node and the rest
of the tree still resolves.

Covers:
  - Inline nested page and nested collection
  - Cross-record reference expansion and prop override
  - Self-referencing record stays finite, depth never exceeds the limit
  - Mutual references (A → B → A)
  - Missing reference degrades to a leaf
  - Invalid max_depth is rejected
"""

import pytest

from composer.kernel.linker import index_records
from composer.kernel.resolver import resolve, resolve_with_report
from composer.kernel.tests.builders import make_record
from composer.kernel.types import UNKNOWN_TYPE

# ============================================================================
# Helpers
# ============================================================================


def self_referencing(config_id="a"):
    return make_record(config_id, [{"section": {"props": {}, "config": {"ref": config_id}}}])


def deepest_unknown(node):
    while node.children:
        node = node.children[0]
    return node


# ============================================================================
# 1. Inline expansion
# ============================================================================


class TestInlineExpansion:
    def test_nested_template_becomes_page_node(self):
        block = {
            "landing": {
                "props": {"title": "Inner"},
                "config": {"template": "insights", "content": [{"hero": {"props": {"title": "Nested"}}}]},
            }
        }
        node = resolve(make_record("c1", [block], template="home"))

        inner = node.children[0]
        assert inner.kind == "page"
        assert inner.template == "insights"
        assert inner.type_tag == "landing"
        assert inner.props == {"title": "Inner"}
        assert inner.children[0].type_tag == "hero"
        assert inner.children[0].props == {"title": "Nested"}

    def test_nested_content_without_template_is_collection(self):
        block = {"group": {"props": {}, "config": {"content": [{"card": {}}, {"image": {}}]}}}
        inner = resolve(make_record("c1", [block])).children[0]
        assert inner.kind == "component"
        assert [c.type_tag for c in inner.children] == ["card", "image"]

    def test_config_without_structure_is_a_leaf(self):
        block = {"hero": {"props": {"title": "x"}, "config": {"theme": "dark"}}}
        child = resolve(make_record("c1", [block])).children[0]
        assert child.children == []
        assert child.kind == "component"


# ============================================================================
# 2. References
# ============================================================================


class TestReferences:
    def test_ref_expands_target_record(self):
        footer = make_record("footer", [{"button": {"props": {"label": "Top"}}}], title="Footer")
        page = make_record("page", [{"footer": {"props": {"title": "Site footer"}, "config": {"ref": "footer"}}}], template="home")

        node = resolve(page, lookup=index_records([page, footer]))

        child = node.children[0]
        assert child.type_tag == "footer"
        assert child.props == {"title": "Site footer"}
        assert child.source_id == "d_footer"
        assert child.children[0].type_tag == "button"

    def test_missing_ref_degrades_to_leaf(self):
        page = make_record("page", [{"footer": {"props": {"x": 1}, "config": {"ref": "gone"}}}])
        result = resolve_with_report(page, lookup=index_records([page]))
        child = result.node.children[0]
        assert child.type_tag == "footer"
        assert child.props == {"x": 1}
        assert child.children == []
        assert [w.code for w in result.warnings] == ["MISSING_REFERENCE"]

    def test_ref_without_lookup_degrades_to_leaf(self):
        child = resolve(self_referencing()).children[0]
        assert child.type_tag == "section"
        assert child.children == []


# ============================================================================
# 3. Recursion bound
# ============================================================================


class TestRecursionBound:
    def test_self_reference_is_finite(self):
        record = self_referencing()
        result = resolve_with_report(record, lookup=index_records([record]))

        assert result.node.depth() <= 16
        leaf = deepest_unknown(result.node)
        assert leaf.type_tag == UNKNOWN_TYPE
        assert leaf.props["reason"] == "recursion_limit"
        assert leaf.props["original"] == "section"
        assert sum(1 for w in result.warnings if w.code == "RECURSION_LIMIT") == 1

    @pytest.mark.parametrize("limit", [1, 2, 5, 16, 40])
    def test_depth_never_exceeds_limit(self, limit):
        record = self_referencing()
        node = resolve(record, lookup=index_records([record]), max_depth=limit)
        assert node.depth() == limit
        assert deepest_unknown(node).props["depth"] == limit

    def test_mutual_references(self):
        a = make_record("a", [{"to_b": {"config": {"ref": "b"}}}])
        b = make_record("b", [{"to_a": {"config": {"ref": "a"}}}])
        node = resolve(a, lookup=index_records([a, b]), max_depth=6)
        assert node.depth() == 6
        assert deepest_unknown(node).type_tag == UNKNOWN_TYPE

    def test_rest_of_tree_resolves_past_a_cycle(self):
        a = make_record("a", [{"hero": {"props": {"title": "ok"}}}, {"loop": {"config": {"ref": "a"}}}, {"card": {}}])
        node = resolve(a, lookup=index_records([a]), max_depth=3)
        assert node.children[0].props == {"title": "ok"}
        assert node.children[2].type_tag == "card"

    def test_inline_nesting_is_bounded_too(self):
        block = {"leaf": {}}
        for _ in range(10):
            block = {"wrap": {"config": {"content": [block]}}}
        node = resolve(make_record("c1", [block]), max_depth=4)
        assert node.depth() == 4
        assert deepest_unknown(node).props["reason"] == "recursion_limit"

    @pytest.mark.parametrize("bad", [0, -1])
    def test_invalid_max_depth(self, bad):
        with pytest.raises(ValueError):
            resolve(make_record("c1", []), max_depth=bad)
