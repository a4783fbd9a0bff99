"""Tree model for pasted markup.

Clipboard HTML is parsed once with BeautifulSoup and converted into plain
``Node`` trees. Filters work on these trees and never touch the parser
objects, so every stage is a pure function from tree to tree.
"""

from dataclasses import dataclass, field
from enum import Enum
from html import escape
from itertools import chain
from typing import Optional

from bs4 import BeautifulSoup
from bs4.element import CData, Comment, NavigableString, PreformattedString, Tag

VOID_ELEMENTS = frozenset([
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
])

# Void elements that carry no visible content of their own
BREAK_ELEMENTS = frozenset(["br", "wbr"])


class NodeType(Enum):
    """Kind of tree node."""
    ELEMENT = "element"
    TEXT = "text"
    COMMENT = "comment"
    FRAGMENT = "fragment"


@dataclass
class Node:
    """One element, text run, comment or document fragment."""
    node_type: NodeType
    tag_name: Optional[str] = None
    attributes: dict[str, str] = field(default_factory=dict)
    children: list["Node"] = field(default_factory=list)
    text: str = ""

    @classmethod
    def element(
        cls,
        tag_name: str,
        attributes: Optional[dict[str, str]] = None,
        children: Optional[list["Node"]] = None,
    ) -> "Node":
        return cls(
            node_type=NodeType.ELEMENT,
            tag_name=tag_name.lower(),
            attributes=dict(attributes or {}),
            children=list(children or []),
        )

    @classmethod
    def text_node(cls, text: str) -> "Node":
        return cls(node_type=NodeType.TEXT, text=text)

    @classmethod
    def comment(cls, text: str) -> "Node":
        return cls(node_type=NodeType.COMMENT, text=text)

    @classmethod
    def fragment(cls, children: Optional[list["Node"]] = None) -> "Node":
        return cls(node_type=NodeType.FRAGMENT, children=list(children or []))

    def clone(self, **kwargs) -> "Node":
        """Create a shallow copy with optional field overrides."""
        return Node(
            node_type=kwargs.get("node_type", self.node_type),
            tag_name=kwargs.get("tag_name", self.tag_name),
            attributes=kwargs.get("attributes", self.attributes.copy()),
            children=kwargs.get("children", list(self.children)),
            text=kwargs.get("text", self.text),
        )

    def is_element(self, *tags: str) -> bool:
        """True for elements, restricted to ``tags`` when any are given."""
        if self.node_type != NodeType.ELEMENT:
            return False
        return not tags or self.tag_name in tags

    @property
    def is_text(self) -> bool:
        return self.node_type == NodeType.TEXT

    @property
    def is_comment(self) -> bool:
        return self.node_type == NodeType.COMMENT

    @property
    def is_fragment(self) -> bool:
        return self.node_type == NodeType.FRAGMENT

    @property
    def is_void(self) -> bool:
        return self.is_element() and self.tag_name in VOID_ELEMENTS

    @property
    def is_whitespace(self) -> bool:
        """True for text nodes holding nothing but whitespace."""
        return self.is_text and not self.text.strip()

    @property
    def element_children(self) -> list["Node"]:
        return [child for child in self.children if child.is_element()]

    def text_content(self) -> str:
        """Concatenated text of this node and its descendants, comments excluded."""
        if self.is_text:
            return self.text
        return "".join(node.text for node in self.iter_descendants() if node.is_text)

    def has_content(self) -> bool:
        """True if the subtree shows anything: visible text or an embedded element."""
        for node in chain([self], self.iter_descendants()):
            if node.is_text and node.text.strip():
                return True
            if node.is_void and node.tag_name not in BREAK_ELEMENTS:
                return True
        return False

    def iter_descendants(self):
        """Yield every node below this one in document order."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


def same_nodes(left: list[Node], right: list[Node]) -> bool:
    """True if both lists hold the very same node objects, in order."""
    return len(left) == len(right) and all(a is b for a, b in zip(left, right))


def parse_html(markup: str) -> Node:
    """Parse an HTML string into a fragment node.

    Parsing follows the browser algorithm (html5lib), so implicitly closed
    elements such as ``<p>one<p>two`` come out as siblings. The document
    wrappers are dropped: the fragment holds the head and body content in
    source order. Never raises on malformed input.
    """
    soup = BeautifulSoup(markup or "", "html5lib", multi_valued_attributes=None)
    return Node.fragment(_convert_tree(_document_content(soup)))


def _document_content(soup: BeautifulSoup) -> list:
    items = []
    for child in soup.children:
        if not isinstance(child, Tag) or child.name != "html":
            items.append(child)
            continue
        for part in child.children:
            if isinstance(part, Tag) and part.name in ("head", "body"):
                items.extend(part.children)
            else:
                items.append(part)
    return items


def _convert_tree(items: list) -> list[Node]:
    """Convert parser objects into nodes without recursing per nesting level."""
    top: list[Node] = []
    stack = [(iter(items), top)]
    while stack:
        pending, siblings = stack[-1]
        item = next(pending, None)
        if item is None:
            stack.pop()
            continue
        node = _convert(item)
        if node is None:
            continue
        siblings.append(node)
        if node.is_element():
            stack.append((iter(item.children), node.children))
    return top


def _convert(item) -> Optional[Node]:
    """Convert one parser object, leaving element children to the caller."""
    if isinstance(item, Comment):
        return Node.comment(str(item))
    if isinstance(item, CData):
        return Node.text_node(str(item))
    if isinstance(item, PreformattedString):
        # Doctype, declarations and processing instructions carry no content
        return None
    if isinstance(item, NavigableString):
        return Node.text_node(str(item))
    if isinstance(item, Tag):
        attributes = {
            str(name).lower(): "" if value is None else str(value)
            for name, value in item.attrs.items()
        }
        return Node.element(item.name, attributes)
    return None


def to_html(node: Node) -> str:
    """Serialize a node (and its subtree) back to HTML."""
    parts: list[str] = []
    # Closing tags are pushed as plain strings between the nodes
    stack: list = [node]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
        elif item.is_text:
            parts.append(escape(item.text, quote=False))
        elif item.is_comment:
            parts.append(f"<!--{item.text}-->")
        elif item.is_fragment:
            stack.extend(reversed(item.children))
        else:
            attrs = "".join(
                f' {name}="{escape(value)}"' for name, value in item.attributes.items()
            )
            parts.append(f"<{item.tag_name}{attrs}>")
            if item.tag_name not in VOID_ELEMENTS:
                stack.append(f"</{item.tag_name}>")
                stack.extend(reversed(item.children))
    return "".join(parts)


def inner_html(node: Node) -> str:
    """Serialize only the children of a node."""
    return "".join(to_html(child) for child in node.children)
