"""Block records produced by the paste pipeline."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Union

from .nodes import parse_html


@dataclass(frozen=True)
class BlockRecord:
    """One typed content block.

    ``inner_content`` interleaves raw markup fragments and nested blocks in
    source order. Records are read-only: ``attributes`` is exposed as a
    read-only mapping. They compare by value but are not hashable, since
    attribute values may be nested JSON.
    """
    block_type: str
    attributes: Mapping[str, Any] = field(default_factory=dict)
    inner_content: tuple[Union[str, "BlockRecord"], ...] = ()

    __hash__ = None

    def __post_init__(self):
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))
        object.__setattr__(self, "inner_content", tuple(self.inner_content))

    @property
    def inner_blocks(self) -> list["BlockRecord"]:
        return [part for part in self.inner_content if isinstance(part, BlockRecord)]

    def text_content(self) -> str:
        """Visible text of the block, nested blocks included."""
        parts = []
        for part in self.inner_content:
            if isinstance(part, BlockRecord):
                parts.append(part.text_content())
            else:
                parts.append(parse_html(part).text_content())
        return "".join(parts)

    def to_dict(self) -> dict:
        """JSON-ready representation."""
        return {
            "block_type": self.block_type,
            "attributes": dict(self.attributes),
            "inner_content": [
                part.to_dict() if isinstance(part, BlockRecord) else part
                for part in self.inner_content
            ],
        }
