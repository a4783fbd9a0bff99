"""Tests for the tree model, parsing and serialization."""

import pytest
from clipblocks.nodes import Node, NodeType, inner_html, parse_html, to_html


class TestParseHtml:
    def test_parses_elements_and_text(self):
        root = parse_html('<p class="x">Hi <b>there</b></p>')

        assert root.node_type == NodeType.FRAGMENT
        assert len(root.children) == 1
        paragraph = root.children[0]
        assert paragraph.tag_name == "p"
        assert paragraph.attributes == {"class": "x"}
        assert paragraph.children[0].is_text
        assert paragraph.children[0].text == "Hi "
        assert paragraph.children[1].is_element("b")

    def test_keeps_comments(self):
        root = parse_html("<!--[if !supportLists]-->x")

        assert root.children[0].is_comment
        assert root.children[0].text == "[if !supportLists]"
        assert root.children[1].text == "x"

    def test_drops_doctype(self):
        root = parse_html("<!DOCTYPE html><p>x</p>")

        assert [child.tag_name for child in root.children] == ["p"]

    def test_empty_input(self):
        assert parse_html("").children == []

    def test_malformed_markup_still_parses(self):
        root = parse_html("<p><b>unclosed")

        assert root.text_content() == "unclosed"

    def test_decodes_entities(self):
        root = parse_html("a&amp;b&nbsp;c")

        assert root.text_content() == "a&b\xa0c"

    def test_closes_unclosed_paragraphs(self):
        root = parse_html("<p>one<p>two")

        assert to_html(root) == "<p>one</p><p>two</p>"

    def test_closes_unclosed_list_items(self):
        root = parse_html("<ul><li>a<li>b</ul>")

        assert to_html(root) == "<ul><li>a</li><li>b</li></ul>"

    def test_bare_text_stays_text(self):
        root = parse_html("plain text")

        assert len(root.children) == 1
        assert root.children[0].is_text
        assert root.children[0].text == "plain text"

    def test_document_wrappers_are_dropped(self):
        root = parse_html("<html><head><title>T</title></head><body><p>x</p></body></html>")

        assert [child.tag_name for child in root.children] == ["title", "p"]


class TestDeepNesting:
    DEPTH = 1200

    def test_parse_and_serialize(self):
        markup = "<div>" * self.DEPTH + "deep" + "</div>" * self.DEPTH

        root = parse_html(markup)

        assert to_html(root) == markup
        assert inner_html(root.children[0]).startswith("<div><div>")

    def test_text_helpers(self):
        root = parse_html("<span>" * self.DEPTH + "deep" + "</span>" * self.DEPTH)

        assert root.text_content() == "deep"
        assert root.has_content()
        assert len(list(root.iter_descendants())) == self.DEPTH + 1


class TestSerialization:
    def test_round_trips_simple_markup(self):
        markup = '<p class="x">Hi <strong>there</strong></p>'

        assert to_html(parse_html(markup)) == markup

    def test_void_elements_have_no_closing_tag(self):
        assert to_html(Node.element("img", {"src": "a.png", "alt": ""})) == '<img src="a.png" alt="">'
        assert to_html(Node.element("br")) == "<br>"

    def test_escapes_text_and_attributes(self):
        assert to_html(Node.text_node("a < b & c")) == "a &lt; b &amp; c"
        link = Node.element("a", {"href": 'x"y'}, [Node.text_node("l")])
        assert to_html(link) == '<a href="x&quot;y">l</a>'

    def test_comments(self):
        assert to_html(Node.comment(" note ")) == "<!-- note -->"

    def test_inner_html(self):
        root = parse_html("<p>a<em>b</em></p>")

        assert inner_html(root.children[0]) == "a<em>b</em>"


class TestNodeHelpers:
    @pytest.mark.parametrize("markup,expected", [
        ("<p> </p>", False),
        ("<p>\xa0</p>", False),
        ("<p><br></p>", False),
        ("<p><img src='a.png'></p>", True),
        ("<p>x</p>", True),
        ("<p><!--x--></p>", False),
    ])
    def test_has_content(self, markup, expected):
        assert parse_html(markup).children[0].has_content() is expected

    def test_clone_does_not_share_children(self):
        original = Node.element("p", children=[Node.text_node("a")])
        copy = original.clone()
        copy.children.append(Node.text_node("b"))
        copy.attributes["class"] = "x"

        assert len(original.children) == 1
        assert original.attributes == {}

    def test_clone_with_overrides(self):
        original = Node.element("b", {"style": "x"}, [Node.text_node("a")])
        renamed = original.clone(tag_name="strong")

        assert renamed.tag_name == "strong"
        assert renamed.attributes == {"style": "x"}
        assert original.tag_name == "b"

    def test_is_element_with_tags(self):
        node = Node.element("UL")

        assert node.tag_name == "ul"
        assert node.is_element()
        assert node.is_element("ul", "ol")
        assert not node.is_element("p")
        assert not Node.text_node("x").is_element()

    def test_element_children_skip_text(self):
        root = parse_html("<p>a<b>b</b>c<i>d</i></p>").children[0]

        assert [child.tag_name for child in root.element_children] == ["b", "i"]

    def test_iter_descendants_in_document_order(self):
        root = parse_html("<div><p>a</p><ul><li>b</li></ul></div>")
        tags = [node.tag_name for node in root.iter_descendants() if node.is_element()]

        assert tags == ["div", "p", "ul", "li"]
