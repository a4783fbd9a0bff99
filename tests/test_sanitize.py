"""Tests for the plain-text fallback."""

from clipblocks.blocks import BlockRecord
from clipblocks.config import PolicyConfig
from clipblocks.sanitize import plain_text_blocks, sanitize_text


class TestSanitizeText:
    def test_empty_input(self):
        assert sanitize_text("") == ""
        assert sanitize_text("   \n") == ""

    def test_plain_text_whitespace(self):
        assert sanitize_text("a   b\n\n\n\nc") == "a b\n\nc"

    def test_paragraphs_become_blank_lines(self):
        assert sanitize_text("<p>One</p><p>Two</p>") == "One\n\nTwo"

    def test_drops_scripts_and_styles(self):
        result = sanitize_text("<style>p{}</style><p>Keep</p><script>alert(1)</script>")

        assert result == "Keep"

    def test_line_break(self):
        assert sanitize_text("a<br>b") == "a\nb"

    def test_decodes_entities(self):
        assert sanitize_text("<p>Fish &amp; chips &lt;3</p>") == "Fish & chips <3"

    def test_comments_removed(self):
        assert sanitize_text("<p>a<!-- hidden -->b</p>") == "ab"

    def test_divs_break_lines(self):
        assert sanitize_text("<div>one</div><div>two</div>") == "one\n\ntwo"

    def test_deeply_nested_markup(self):
        assert sanitize_text("<div>" * 1200 + "deep" + "</div>" * 1200) == "deep"

    def test_custom_line_break_tags(self):
        policy = PolicyConfig.from_dict({"line_break_tags": ["span"]})

        assert sanitize_text("<span>one</span><span>two</span>", policy) == "one\n\ntwo"


class TestPlainTextBlocks:
    def test_one_paragraph_block_per_paragraph(self):
        blocks = plain_text_blocks("<p>One</p><p>a<br>b &lt;</p>")

        assert blocks == [
            BlockRecord("core/paragraph", {"content": "One"}, ("One",)),
            BlockRecord("core/paragraph", {"content": "a<br>b &lt;"}, ("a<br>b &lt;",)),
        ]

    def test_empty_input(self):
        assert plain_text_blocks("") == []

