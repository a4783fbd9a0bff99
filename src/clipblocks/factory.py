"""Block factory: map normalised top-level markup to block records."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .blocks import BlockRecord
from .nodes import Node, inner_html, parse_html, to_html

logger = logging.getLogger(__name__)

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
FALLBACK_BLOCK = "core/html"


@dataclass(frozen=True)
class BlockTransform:
    """Raw-markup transform for one block type."""
    block_type: str
    is_match: Callable[[Node], bool]
    attributes: Callable[[Node], dict]
    # Void elements and wrapper-less blocks keep their outer markup
    outer: bool = False

    def build(self, node: Node) -> BlockRecord:
        content = to_html(node) if self.outer else inner_html(node)
        return BlockRecord(
            block_type=self.block_type,
            attributes=self.attributes(node),
            inner_content=(content,),
        )


def _first_descendant(node: Node, tag: str) -> Optional[Node]:
    for descendant in node.iter_descendants():
        if descendant.is_element(tag):
            return descendant
    return None


def _only_child_element(node: Node, tag: str) -> Optional[Node]:
    """The single ``tag`` child of ``node`` if nothing else visible sits beside it."""
    elements = node.element_children
    if len(elements) != 1 or not elements[0].is_element(tag):
        return None
    if any(child.is_text and child.text.strip() for child in node.children):
        return None
    return elements[0]


def _image_attributes(node: Node) -> dict:
    image = node if node.is_element("img") else _first_descendant(node, "img")
    attributes = {
        "url": image.attributes.get("src", ""),
        "alt": image.attributes.get("alt", ""),
    }
    caption = _first_descendant(node, "figcaption")
    if caption is not None and caption.has_content():
        attributes["caption"] = inner_html(caption)
    return attributes


def _list_attributes(node: Node) -> dict:
    attributes = {"ordered": node.tag_name == "ol", "values": inner_html(node)}
    if node.attributes.get("type"):
        attributes["type"] = node.attributes["type"]
    return attributes


class _ImageParagraph(BlockTransform):
    """A paragraph holding nothing but an image becomes an image block."""

    def build(self, node: Node) -> BlockRecord:
        return IMAGE_TRANSFORM.build(_only_child_element(node, "img"))


IMAGE_TRANSFORM = BlockTransform(
    block_type="core/image",
    is_match=lambda node: node.is_element("img") or (
        node.is_element("figure") and _first_descendant(node, "img") is not None
    ),
    attributes=_image_attributes,
    outer=True,
)

BLOCK_TRANSFORMS: list[BlockTransform] = [
    _ImageParagraph(
        block_type="core/image",
        is_match=lambda node: node.is_element("p") and _only_child_element(node, "img") is not None,
        attributes=_image_attributes,
    ),
    BlockTransform(
        block_type="core/paragraph",
        is_match=lambda node: node.is_element("p"),
        attributes=lambda node: {"content": inner_html(node)},
    ),
    BlockTransform(
        block_type="core/heading",
        is_match=lambda node: node.is_element(*HEADING_TAGS),
        attributes=lambda node: {"level": int(node.tag_name[1]), "content": inner_html(node)},
    ),
    BlockTransform(
        block_type="core/list",
        is_match=lambda node: node.is_element("ul", "ol"),
        attributes=_list_attributes,
    ),
    IMAGE_TRANSFORM,
    BlockTransform(
        block_type="core/quote",
        is_match=lambda node: node.is_element("blockquote"),
        attributes=lambda node: {"value": inner_html(node)},
    ),
    BlockTransform(
        block_type="core/code",
        is_match=lambda node: node.is_element("pre") and _only_child_element(node, "code") is not None,
        attributes=lambda node: {"content": inner_html(_only_child_element(node, "code"))},
    ),
    BlockTransform(
        block_type="core/preformatted",
        is_match=lambda node: node.is_element("pre"),
        attributes=lambda node: {"content": inner_html(node)},
    ),
    BlockTransform(
        block_type="core/separator",
        is_match=lambda node: node.is_element("hr"),
        attributes=lambda node: {},
        outer=True,
    ),
    BlockTransform(
        block_type="core/table",
        is_match=lambda node: node.is_element("table"),
        attributes=lambda node: {"content": inner_html(node)},
    ),
]

FALLBACK_TRANSFORM = BlockTransform(
    block_type=FALLBACK_BLOCK,
    is_match=lambda node: True,
    attributes=lambda node: {"content": to_html(node)},
    outer=True,
)

# Wrapper tags used to render a block back to plain HTML
_RENDER_WRAPPERS = {
    "core/paragraph": lambda block: "p",
    "core/heading": lambda block: f"h{block.attributes.get('level', 2)}",
    "core/list": lambda block: "ol" if block.attributes.get("ordered") else "ul",
    "core/quote": lambda block: "blockquote",
    "core/code": lambda block: "pre",
    "core/preformatted": lambda block: "pre",
    "core/table": lambda block: "table",
}


def create_blocks_from_markup(
    markup: Union[str, Node],
    transforms: Optional[list[BlockTransform]] = None,
) -> list[BlockRecord]:
    """Convert normalised markup into block records, one per top-level node.

    Whitespace-only text and comments at the top level produce nothing.
    Anything no transform recognizes becomes a ``core/html`` block, so no
    content is dropped. Output order is document order.
    """
    root = parse_html(markup) if isinstance(markup, str) else markup
    nodes = root.children if root.is_fragment else [root]
    transforms = BLOCK_TRANSFORMS if transforms is None else transforms

    blocks = []
    for node in nodes:
        if node.is_whitespace or node.is_comment:
            continue
        transform = next((t for t in transforms if t.is_match(node)), FALLBACK_TRANSFORM)
        if transform is FALLBACK_TRANSFORM:
            logger.debug("No block transform for %r, using %s", node.tag_name or "#text", FALLBACK_BLOCK)
        blocks.append(transform.build(node))
    return blocks


def render_block(block: BlockRecord) -> str:
    """Render a block record back to plain HTML."""
    inner = "".join(
        render_block(part) if isinstance(part, BlockRecord) else part
        for part in block.inner_content
    )
    wrapper = _RENDER_WRAPPERS.get(block.block_type)
    if wrapper is None:
        return inner
    tag = wrapper(block)
    return f"<{tag}>{inner}</{tag}>"


def render_blocks(blocks: list[BlockRecord]) -> str:
    return "\n".join(render_block(block) for block in blocks)
