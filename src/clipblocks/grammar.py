"""Parser and serializer for the block-delimited markup format.

Blocks are delimited by HTML comments::

    <!-- wp:paragraph {"align":"center"} -->
    <p>Hello</p>
    <!-- /wp:paragraph -->

    <!-- wp:separator /-->

Markup in this format was produced by the editor itself, so it is parsed
directly into block records and never sanitized.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Mapping, Optional, Union

from .blocks import BlockRecord

logger = logging.getLogger(__name__)

DELIMITER_MARKER = "<!-- wp:"
DEFAULT_NAMESPACE = "core"
FREEFORM_BLOCK = "core/freeform"

DELIMITER = re.compile(
    r"<!--\s+(?P<closer>/)?wp:(?P<name>[a-z][a-z0-9_-]*(?:/[a-z][a-z0-9_-]*)?)"
    r"\s+(?:(?P<attrs>\{.*?\})\s+)?(?P<void>/)?-->",
    re.DOTALL,
)


def has_block_delimiters(markup: str) -> bool:
    return DELIMITER_MARKER in markup


def qualify_name(name: str) -> str:
    """Add the default namespace to bare block names."""
    return name if "/" in name else f"{DEFAULT_NAMESPACE}/{name}"


def _parse_attributes(raw: Optional[str], name: str) -> dict:
    if not raw:
        return {}
    try:
        attributes = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Invalid attributes for block %s: %s", name, exc)
        return {}
    if not isinstance(attributes, dict):
        logger.warning("Attributes for block %s are not an object", name)
        return {}
    return attributes


@dataclass
class _OpenBlock:
    name: str
    attributes: dict
    parts: list[Union[str, BlockRecord]] = field(default_factory=list)

    def close(self) -> BlockRecord:
        return BlockRecord(self.name, self.attributes, tuple(self.parts))


def parse_with_grammar(document: str) -> list[BlockRecord]:
    """Parse delimited markup into block records in document order.

    Markup outside any block becomes a ``core/freeform`` block. Unclosed
    blocks are closed at the end of input and a closer that matches no open
    block is kept as markup.
    """
    output: list[BlockRecord] = []
    stack: list[_OpenBlock] = []

    def emit(block: BlockRecord) -> None:
        if stack:
            stack[-1].parts.append(block)
        else:
            output.append(block)

    def add_markup(markup: str) -> None:
        if not markup:
            return
        if stack:
            stack[-1].parts.append(markup)
        elif markup.strip():
            freeform = markup.strip()
            output.append(BlockRecord(FREEFORM_BLOCK, {"content": freeform}, (freeform,)))

    offset = 0
    for match in DELIMITER.finditer(document):
        add_markup(document[offset:match.start()])
        offset = match.end()
        name = qualify_name(match.group("name"))

        if match.group("closer"):
            open_names = [block.name for block in stack]
            if name not in open_names:
                add_markup(match.group(0))
                continue
            while stack:
                block = stack.pop()
                emit(block.close())
                if block.name == name:
                    break
        elif match.group("void"):
            emit(BlockRecord(name, _parse_attributes(match.group("attrs"), name)))
        else:
            stack.append(_OpenBlock(name, _parse_attributes(match.group("attrs"), name)))

    add_markup(document[offset:])
    while stack:
        emit(stack.pop().close())
    return output


def _serialize_attributes(attributes: Mapping) -> str:
    encoded = json.dumps(dict(attributes), ensure_ascii=False, separators=(",", ":"))
    # Keep the JSON from terminating or nesting the surrounding comment
    return (
        encoded.replace("--", "\\u002d\\u002d")
        .replace("<", "\\u003c")
        .replace(">", "\\u003e")
    )


def serialize_block(block: BlockRecord) -> str:
    inner = "".join(
        serialize_block(part) if isinstance(part, BlockRecord) else part
        for part in block.inner_content
    )
    if block.block_type == FREEFORM_BLOCK:
        return inner

    name = block.block_type
    if name.startswith(f"{DEFAULT_NAMESPACE}/"):
        name = name[len(DEFAULT_NAMESPACE) + 1:]
    opener = f"wp:{name} {_serialize_attributes(block.attributes)} " if block.attributes else f"wp:{name} "

    if not block.inner_content:
        return f"<!-- {opener}/-->"
    return f"<!-- {opener}-->{inner}<!-- /wp:{name} -->"


def serialize_blocks(blocks: list[BlockRecord]) -> str:
    """Serialize block records into the delimited format."""
    return "\n\n".join(serialize_block(block) for block in blocks)
