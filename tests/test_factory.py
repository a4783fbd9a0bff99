"""Tests for the block factory."""

import pytest
from clipblocks.blocks import BlockRecord
from clipblocks.factory import (
    BlockTransform,
    create_blocks_from_markup,
    render_block,
    render_blocks,
)
from clipblocks.nodes import parse_html


class TestCreateBlocksFromMarkup:
    def test_paragraph(self):
        blocks = create_blocks_from_markup("<p>Hello <strong>world</strong></p>")

        assert blocks == [
            BlockRecord(
                "core/paragraph",
                {"content": "Hello <strong>world</strong>"},
                ("Hello <strong>world</strong>",),
            )
        ]

    def test_heading(self):
        (block,) = create_blocks_from_markup("<h3>Title</h3>")

        assert block.block_type == "core/heading"
        assert block.attributes == {"level": 3, "content": "Title"}

    def test_unordered_list(self):
        (block,) = create_blocks_from_markup("<ul><li>a</li><li>b</li></ul>")

        assert block.block_type == "core/list"
        assert block.attributes == {"ordered": False, "values": "<li>a</li><li>b</li>"}
        assert block.inner_content == ("<li>a</li><li>b</li>",)

    def test_ordered_list_with_type(self):
        (block,) = create_blocks_from_markup('<ol type="a"><li>x</li></ol>')

        assert block.attributes == {"ordered": True, "values": "<li>x</li>", "type": "a"}

    def test_image(self):
        (block,) = create_blocks_from_markup('<img src="a.png" alt="A">')

        assert block.block_type == "core/image"
        assert block.attributes == {"url": "a.png", "alt": "A"}
        assert block.inner_content == ('<img src="a.png" alt="A">',)

    def test_figure_with_caption(self):
        (block,) = create_blocks_from_markup(
            '<figure><img src="a.png" alt="A"><figcaption>The <em>cap</em></figcaption></figure>'
        )

        assert block.block_type == "core/image"
        assert block.attributes == {"url": "a.png", "alt": "A", "caption": "The <em>cap</em>"}

    def test_paragraph_holding_only_an_image(self):
        (block,) = create_blocks_from_markup('<p> <img src="a.png"> </p>')

        assert block.block_type == "core/image"
        assert block.attributes == {"url": "a.png", "alt": ""}
        assert block.inner_content == ('<img src="a.png">',)

    def test_paragraph_with_image_and_text_stays_paragraph(self):
        (block,) = create_blocks_from_markup('<p>see <img src="a.png"></p>')

        assert block.block_type == "core/paragraph"

    def test_quote(self):
        (block,) = create_blocks_from_markup("<blockquote><p>q</p></blockquote>")

        assert block.block_type == "core/quote"
        assert block.attributes == {"value": "<p>q</p>"}

    def test_code_and_preformatted(self):
        code, pre = create_blocks_from_markup("<pre><code>x = 1</code></pre><pre>plain</pre>")

        assert code.block_type == "core/code"
        assert code.attributes == {"content": "x = 1"}
        assert pre.block_type == "core/preformatted"
        assert pre.attributes == {"content": "plain"}

    def test_separator(self):
        (block,) = create_blocks_from_markup("<hr>")

        assert block.block_type == "core/separator"
        assert block.attributes == {}

    def test_table(self):
        (block,) = create_blocks_from_markup("<table><tr><td>a</td></tr></table>")

        assert block.block_type == "core/table"
        assert block.attributes == {"content": "<tbody><tr><td>a</td></tr></tbody>"}

    def test_unknown_structure_falls_back_to_html(self):
        (block,) = create_blocks_from_markup("<div>odd</div>")

        assert block.block_type == "core/html"
        assert block.attributes == {"content": "<div>odd</div>"}
        assert block.inner_content == ("<div>odd</div>",)

    def test_stray_text_falls_back_to_html(self):
        (block,) = create_blocks_from_markup("loose")

        assert block.block_type == "core/html"
        assert block.text_content() == "loose"

    def test_order_matches_document_order(self):
        blocks = create_blocks_from_markup(
            "<h1>a</h1><p>b</p><ul><li>c</li></ul><hr><blockquote><p>d</p></blockquote>"
        )

        assert [block.block_type for block in blocks] == [
            "core/heading",
            "core/paragraph",
            "core/list",
            "core/separator",
            "core/quote",
        ]

    def test_one_block_per_top_level_node(self):
        blocks = create_blocks_from_markup("\n<!--x--><p>a</p>\n<section>b</section>\n")

        assert [block.block_type for block in blocks] == ["core/paragraph", "core/html"]

    def test_accepts_parsed_tree(self):
        blocks = create_blocks_from_markup(parse_html("<p>a</p>"))

        assert blocks[0].block_type == "core/paragraph"

    def test_empty_markup(self):
        assert create_blocks_from_markup("") == []

    def test_custom_transforms(self):
        shout = BlockTransform(
            block_type="test/shout",
            is_match=lambda node: node.is_element("p"),
            attributes=lambda node: {},
        )

        (block,) = create_blocks_from_markup("<p>hey</p>", transforms=[shout])

        assert block.block_type == "test/shout"
        assert block.inner_content == ("hey",)


class TestRenderBlock:
    def test_wraps_by_block_type(self):
        paragraph, heading, listing = create_blocks_from_markup(
            "<p>a</p><h2>b</h2><ol><li>c</li></ol>"
        )

        assert render_block(paragraph) == "<p>a</p>"
        assert render_block(heading) == "<h2>b</h2>"
        assert render_block(listing) == "<ol><li>c</li></ol>"

    def test_outer_markup_blocks_render_as_is(self):
        image, html = create_blocks_from_markup('<img src="a.png"><div>x</div>')

        assert render_block(image) == '<img src="a.png">'
        assert render_block(html) == "<div>x</div>"

    def test_code_block(self):
        (code,) = create_blocks_from_markup("<pre><code>x</code></pre>")

        assert render_block(code) == "<pre><code>x</code></pre>"

    def test_render_blocks_joins_lines(self):
        blocks = create_blocks_from_markup("<p>a</p><p>b</p>")

        assert render_blocks(blocks) == "<p>a</p>\n<p>b</p>"


class TestBlockRecord:
    def test_attributes_are_read_only(self):
        record = BlockRecord("core/paragraph", {"content": "a"}, ("a",))

        with pytest.raises(TypeError):
            record.attributes["content"] = "b"

        assert record.attributes["content"] == "a"

    def test_source_dict_is_copied(self):
        attributes = {"content": "a"}
        record = BlockRecord("core/paragraph", attributes)

        attributes["content"] = "b"

        assert record.attributes["content"] == "a"

    def test_records_are_not_hashable(self):
        record = BlockRecord("core/separator")

        with pytest.raises(TypeError):
            hash(record)

    def test_compares_by_value(self):
        left = BlockRecord("core/paragraph", {"content": "a"}, ["a"])
        right = BlockRecord("core/paragraph", {"content": "a"}, ("a",))

        assert left == right
        assert left.to_dict()["attributes"] == {"content": "a"}
