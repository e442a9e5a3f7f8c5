"""Tests for tree flattening and text helpers."""

from skilldex.ingestion.tree import build_content, flatten_resources
from skilldex.models.resource import ResourceMetadata, ResourceNode
from skilldex.utils.text import slugify, truncate_text


def _node(name: str, children=None, **metadata) -> ResourceNode:
    return ResourceNode(
        id=f"/{name}",
        name=name,
        path=f"/{name}",
        metadata=ResourceMetadata(**metadata),
        children=children or [],
    )


class TestFlattenResources:
    def test_pre_order(self):
        """Parents come before descendants and every node appears once."""
        tree = [
            _node("a", [_node("b", [_node("c")]), _node("d")]),
            _node("e"),
        ]
        flat = flatten_resources(tree)

        assert [r.name for r in flat] == ["a", "b", "c", "d", "e"]
        assert [r.child_count for r in flat] == [2, 1, 0, 0, 0]

    def test_parsed_content_is_kept(self):
        flat = flatten_resources([_node("a", content="# A\n\nbody")])
        assert flat[0].content == "# A\n\nbody"

    def test_content_rendered_from_metadata(self):
        """Nodes without content render name, description, metadata and children."""
        node = _node(
            "parent",
            [_node("child", description="Child text")],
            description="Parent text",
            quality_score=80,
        )
        content = build_content(node)

        assert content.startswith("# parent\n\nParent text")
        assert "quality_score: 80" in content
        assert "## child" in content
        assert "Child text" in content


class TestTruncateText:
    def test_short_text_unchanged(self):
        assert truncate_text("short", 200) == "short"
        assert truncate_text(None) is None

    def test_sentence_boundary(self):
        """A sentence end past 50 chars is preferred."""
        text = "A" * 60 + ". " + "b " * 100
        assert truncate_text(text, 200) == "A" * 60 + "."

    def test_word_boundary(self):
        text = "word " * 50
        result = truncate_text(text, 200)
        assert result == ("word " * 40)[:199] + "..."

    def test_hard_cut(self):
        assert truncate_text("x" * 300, 200) == "x" * 200 + "..."


class TestSlugify:
    def test_non_alphanumerics_replaced(self):
        assert slugify("  Triage Steps (v2) ") == "triage-steps--v2-"

    def test_custom_separator(self):
        assert slugify("a.b", separator="_") == "a_b"
