"""Convert pasted HTML into sanitized inline markup or typed content blocks."""

from .blocks import BlockRecord
from .config import PolicyConfig
from .factory import create_blocks_from_markup
from .filters import Filter, FilterAction, FilterChain, FilterError, FilterResult, deep_filter
from .grammar import parse_with_grammar, serialize_blocks
from .nodes import Node, NodeType, parse_html, to_html
from .normalise import is_inline_content
from .paste import DiagnosticReporter, LoggingReporter, NullReporter, paste_handler

__all__ = [
    "BlockRecord",
    "PolicyConfig",
    "create_blocks_from_markup",
    "Filter",
    "FilterAction",
    "FilterChain",
    "FilterError",
    "FilterResult",
    "deep_filter",
    "parse_with_grammar",
    "serialize_blocks",
    "Node",
    "NodeType",
    "parse_html",
    "to_html",
    "is_inline_content",
    "DiagnosticReporter",
    "LoggingReporter",
    "NullReporter",
    "paste_handler",
]
