"""Whitelist predicates, the inline-content classifier and block normalisation."""

from typing import Optional

from .config import PolicyConfig
from .nodes import Node


def _policy(policy: Optional[PolicyConfig]) -> PolicyConfig:
    return policy if policy is not None else PolicyConfig.default()


def is_inline(node: Node, policy: Optional[PolicyConfig] = None) -> bool:
    """True for text, comments and inline-whitelisted elements."""
    if node.is_text or node.is_comment:
        return True
    return node.is_element() and node.tag_name in _policy(policy).inline_tags


def is_phrasing(node: Node, policy: Optional[PolicyConfig] = None) -> bool:
    """True if the node and its whole subtree are inline."""
    policy = _policy(policy)
    return is_inline(node, policy) and all(
        is_inline(descendant, policy) for descendant in node.iter_descendants()
    )


def is_not_whitelisted(node: Node, policy: Optional[PolicyConfig] = None) -> bool:
    return node.is_element() and node.tag_name not in _policy(policy).whitelist


def is_invalid_inline(node: Node, policy: Optional[PolicyConfig] = None) -> bool:
    """True for inline elements that wrap non-inline descendants."""
    policy = _policy(policy)
    if not node.is_element() or not is_inline(node, policy):
        return False
    return any(
        descendant.is_element() and not is_inline(descendant, policy)
        for descendant in node.iter_descendants()
    )


def ends_inline_run(node: Node, policy: Optional[PolicyConfig] = None) -> bool:
    """True for line-breaking wrappers (div, section, ...) whose content ends in text.

    Unwrapping such an element needs a <br> after its children, or its last
    line runs into whatever follows.
    """
    policy = _policy(policy)
    if not node.is_element() or node.tag_name not in policy.line_break_tags:
        return False
    last = _last_significant([child for child in node.children if not child.is_comment])
    return last is not None and is_inline(last, policy) and not last.is_element("br")


def has_double_br(nodes: list[Node]) -> bool:
    """True if two <br> elements follow each other, whitespace aside."""
    previous_br = False
    for node in nodes:
        if node.is_whitespace or node.is_comment:
            continue
        is_br = node.is_element("br")
        if is_br and previous_br:
            return True
        previous_br = is_br
    return False


def is_inline_content(root: Node, policy: Optional[PolicyConfig] = None) -> bool:
    """Decide whether processed markup is a single run of phrasing content.

    Content is inline when every top-level node is text or an inline
    element holding only inline content, and (when the policy says so) no
    double line break splits it into paragraphs.
    """
    policy = _policy(policy)
    nodes = root.children if root.is_fragment else [root]
    if policy.double_br_is_block and has_double_br(nodes):
        return False
    return all(is_phrasing(node, policy) for node in nodes)


def normalise_blocks(root: Node, policy: Optional[PolicyConfig] = None) -> Node:
    """Return a fragment whose top-level nodes are all block containers.

    Loose text and inline elements are gathered into paragraphs, a double
    <br> starts a new paragraph, and empty paragraphs are dropped.
    """
    nodes = root.children if root.is_fragment else [root]
    return Node.fragment(normalise_children(nodes, policy))


def normalise_children(nodes: list[Node], policy: Optional[PolicyConfig] = None) -> list[Node]:
    policy = _policy(policy)
    blocks: list[Node] = []
    run: list[Node] = []

    def flush():
        content = trim_breaks(run)
        if any(node.has_content() for node in content):
            blocks.append(Node.element("p", children=content))
        run.clear()

    for node in nodes:
        if node.is_comment:
            continue
        if node.is_element("br"):
            last = _last_significant(run)
            if last is not None and last.is_element("br"):
                flush()
            else:
                run.append(node)
        elif node.is_element("p"):
            flush()
            if node.has_content():
                blocks.append(node)
        elif is_inline(node, policy):
            run.append(node)
        else:
            flush()
            blocks.append(node)

    flush()
    return blocks


def _last_significant(nodes: list[Node]) -> Optional[Node]:
    for node in reversed(nodes):
        if not node.is_whitespace:
            return node
    return None


def trim_breaks(nodes: list[Node]) -> list[Node]:
    """Strip whitespace text and <br> from both ends of a paragraph run."""
    start, end = 0, len(nodes)
    while start < end and (nodes[start].is_whitespace or nodes[start].is_element("br")):
        start += 1
    while end > start and (nodes[end - 1].is_whitespace or nodes[end - 1].is_element("br")):
        end -= 1
    return nodes[start:end]
