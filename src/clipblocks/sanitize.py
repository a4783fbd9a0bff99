"""Plain-text fallback for pastes the block pipeline could not process.

Reduces clipboard HTML to readable text, keeping paragraph structure, and
wraps each paragraph in a ``core/paragraph`` block.
"""

import re
from html import escape
from typing import Optional

from .blocks import BlockRecord
from .config import PolicyConfig
from .nodes import Node, parse_html


def sanitize_text(text: str, policy: Optional[PolicyConfig] = None) -> str:
    """Sanitize pasted text/HTML into clean readable text.

    - Strips HTML tags if present
    - Drops script, style and other noise elements with their content
    - Normalizes whitespace
    - Preserves paragraph structure
    """
    if not text or not text.strip():
        return ""

    if _looks_like_html(text):
        policy = policy or PolicyConfig.default()
        parts: list[str] = []
        _collect_text(parse_html(text), policy, parts)
        text = "".join(parts)

    return _normalize_whitespace(text)


def plain_text_blocks(text: str, policy: Optional[PolicyConfig] = None) -> list[BlockRecord]:
    """Turn pasted content into one paragraph block per text paragraph."""
    blocks = []
    for paragraph in sanitize_text(text, policy).split("\n\n"):
        content = escape(paragraph, quote=False).replace("\n", "<br>")
        blocks.append(BlockRecord("core/paragraph", {"content": content}, (content,)))
    return [block for block in blocks if block.inner_content[0]]


def _looks_like_html(text: str) -> bool:
    """Heuristic: does this text contain HTML tags?"""
    return bool(re.search(r"<[a-zA-Z!/][^>]*>", text))


def _collect_text(root: Node, policy: PolicyConfig, parts: list[str]) -> None:
    # Pending line breaks are pushed as plain strings between the nodes
    stack: list = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, str):
            parts.append(node)
            continue
        if node.is_text:
            parts.append(node.text)
            continue
        if node.is_comment or (node.is_element() and node.tag_name in policy.noise_tags):
            continue
        if node.is_element("br"):
            parts.append("\n")
            continue

        breaks = node.is_element() and (
            node.tag_name in policy.line_break_tags
            or (node.tag_name in policy.block_tags and not node.is_void)
        )
        if breaks:
            parts.append("\n")
            stack.append("\n")
        stack.extend(reversed(node.children))


def _normalize_whitespace(text: str) -> str:
    """Normalize whitespace while preserving paragraph breaks."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")

    # Collapse runs of whitespace within lines (but not newlines)
    lines = [" ".join(line.split()) for line in text.split("\n")]

    # Collapse 3+ blank lines to 2 (one blank line between paragraphs)
    text = "\n".join(lines)
    text = re.sub(r"\n{3,}", "\n\n", text)

    return text.strip()
