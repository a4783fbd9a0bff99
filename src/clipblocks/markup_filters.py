"""Markup cleanup filters applied during the structural pass."""

from typing import Callable, Optional
from urllib.parse import urljoin, urlparse

from .config import PolicyConfig
from .filters import Filter, FilterResult
from .nodes import Node, same_nodes
from .normalise import normalise_children

# Presentational tags and the semantic element that replaces them
FORMATTING_RENAMES = {
    "b": "strong",
    "i": "em",
    "s": "del",
    "strike": "del",
}

FORMATTING_TAGS = frozenset(["strong", "em", "del", "ins", "sub", "sup", "code"])

BOLD_WEIGHTS = frozenset(["bold", "bolder", "600", "700", "800", "900"])
NORMAL_WEIGHTS = frozenset(["normal", "400"])


def parse_style(style: str) -> dict[str, str]:
    """Parse an inline style attribute into lower-cased declarations."""
    declarations = {}
    for declaration in style.split(";"):
        if ":" not in declaration:
            continue
        prop, value = declaration.split(":", 1)
        declarations[prop.strip().lower()] = value.strip().lower()
    return declarations


class ImageCorrector(Filter):
    """Normalize images: broken sources, relative sources, trackers and wrappers."""

    def __init__(self, policy: Optional[PolicyConfig] = None):
        self._policy = policy or PolicyConfig.default()

    @property
    def name(self) -> str:
        return "ImageCorrector"

    @property
    def slug(self) -> str:
        return "image-corrector"

    def apply(self, node: Node) -> FilterResult:
        if node.is_element("picture"):
            images = [child for child in node.element_children if child.is_element("img")]
            if images:
                return FilterResult.replace(images[0])
            return FilterResult.keep()

        if not node.is_element("img"):
            return FilterResult.keep()

        if self._is_tracker(node):
            return FilterResult.remove()

        src = node.attributes.get("src", "").strip()
        if src.lower().startswith("file:"):
            # Local files from the source machine cannot be resolved here
            attributes = {k: v for k, v in node.attributes.items() if k != "src"}
            return FilterResult.modify(node.clone(attributes=attributes))

        if src and self._policy.base_url and not urlparse(src).scheme:
            resolved = urljoin(self._policy.base_url, src)
            if resolved != src:
                attributes = dict(node.attributes, src=resolved)
                return FilterResult.modify(node.clone(attributes=attributes))

        return FilterResult.keep()

    def _is_tracker(self, node: Node) -> bool:
        size = str(self._policy.tracker_size)
        return node.attributes.get("width") == size or node.attributes.get("height") == size


class FormattingTransformer(Filter):
    """Convert presentational markup into strong/em/del.

    Must run before attributes are stripped, because span formatting lives
    in the style attribute.
    """

    @property
    def name(self) -> str:
        return "FormattingTransformer"

    @property
    def slug(self) -> str:
        return "formatting-transformer"

    def apply(self, node: Node) -> FilterResult:
        if not node.is_element():
            return FilterResult.keep()

        style = parse_style(node.attributes.get("style", ""))

        if node.tag_name in ("b", "strong") and style.get("font-weight") in NORMAL_WEIGHTS:
            # Google Docs wraps whole documents in <b style="font-weight:normal">
            return FilterResult.replace(*node.children)

        if node.tag_name == "span":
            return self._transform_span(node, style)

        tag_name = FORMATTING_RENAMES.get(node.tag_name, node.tag_name)
        if tag_name in FORMATTING_TAGS and not node.has_content():
            return FilterResult.replace(*node.children)
        if tag_name != node.tag_name:
            return FilterResult.modify(node.clone(tag_name=tag_name))
        return FilterResult.keep()

    @staticmethod
    def _transform_span(node: Node, style: dict[str, str]) -> FilterResult:
        bold = style.get("font-weight") in BOLD_WEIGHTS
        italic = style.get("font-style") == "italic"
        if not (bold or italic) or not node.has_content():
            return FilterResult.keep()

        children = node.children
        if italic:
            children = [Node.element("em", children=children)]
        if bold:
            children = [Node.element("strong", children=children)]
        return FilterResult.modify(node.clone(children=children))


class StripAttributes(Filter):
    """Drop every attribute that the policy does not allow for the tag."""

    def __init__(self, policy: Optional[PolicyConfig] = None):
        self._policy = policy or PolicyConfig.default()

    @property
    def name(self) -> str:
        return "StripAttributes"

    @property
    def slug(self) -> str:
        return "strip-attributes"

    def apply(self, node: Node) -> FilterResult:
        if not node.is_element() or not node.attributes:
            return FilterResult.keep()

        allowed = self._policy.allowed_attributes.get(node.tag_name, frozenset())
        attributes = {k: v for k, v in node.attributes.items() if k in allowed}
        if attributes == node.attributes:
            return FilterResult.keep()
        return FilterResult.modify(node.clone(attributes=attributes))


class CommentRemover(Filter):
    """Delete comment nodes, including conditional comments."""

    @property
    def name(self) -> str:
        return "CommentRemover"

    @property
    def slug(self) -> str:
        return "comment-remover"

    def apply(self, node: Node) -> FilterResult:
        if node.is_comment:
            return FilterResult.remove()
        return FilterResult.keep()


class NoiseRemover(Filter):
    """Delete non-content elements (scripts, styles, document head) with their subtree."""

    def __init__(self, policy: Optional[PolicyConfig] = None):
        self._policy = policy or PolicyConfig.default()

    @property
    def name(self) -> str:
        return "NoiseRemover"

    @property
    def slug(self) -> str:
        return "noise-remover"

    def apply(self, node: Node) -> FilterResult:
        if node.is_element() and node.tag_name in self._policy.noise_tags:
            return FilterResult.remove()
        return FilterResult.keep()


class Unwrapper(Filter):
    """Replace elements matching ``predicate`` with their own children.

    When ``line_break`` matches an unwrapped element, a <br> is appended
    after its children so its last line stays separate from the next one.
    """

    def __init__(
        self,
        predicate: Callable[[Node], bool],
        slug: str = "unwrapper",
        line_break: Optional[Callable[[Node], bool]] = None,
    ):
        self._predicate = predicate
        self._slug = slug
        self._line_break = line_break

    @property
    def name(self) -> str:
        return "Unwrapper"

    @property
    def slug(self) -> str:
        return self._slug

    def apply(self, node: Node) -> FilterResult:
        if not node.is_element() or not self._predicate(node):
            return FilterResult.keep()
        if self._line_break is not None and self._line_break(node):
            return FilterResult.replace(*node.children, Node.element("br"))
        return FilterResult.replace(*node.children)


class BlockquoteNormaliser(Filter):
    """Make blockquote contents block-shaped: loose text becomes paragraphs."""

    def __init__(self, policy: Optional[PolicyConfig] = None):
        self._policy = policy or PolicyConfig.default()

    @property
    def name(self) -> str:
        return "BlockquoteNormaliser"

    @property
    def slug(self) -> str:
        return "blockquote-normaliser"

    def apply(self, node: Node) -> FilterResult:
        if not node.is_element("blockquote"):
            return FilterResult.keep()

        children = normalise_children(node.children, self._policy)
        if not children:
            return FilterResult.remove()
        if same_nodes(children, node.children):
            return FilterResult.keep()
        return FilterResult.modify(node.clone(children=children))
