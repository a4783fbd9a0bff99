"""Paste entry point: clipboard HTML in, inline HTML or block records out."""

import logging
import re
from abc import ABC, abstractmethod
from functools import partial
from typing import Iterable, Optional, Union

from .blocks import BlockRecord
from .config import PolicyConfig
from .factory import create_blocks_from_markup
from .filters import FilterChain
from .grammar import has_block_delimiters, parse_with_grammar
from .list_filters import ListMerger, MsListConverter
from .markup_filters import (
    BlockquoteNormaliser,
    CommentRemover,
    FormattingTransformer,
    ImageCorrector,
    NoiseRemover,
    StripAttributes,
    Unwrapper,
)
from .nodes import Node, inner_html, parse_html
from .normalise import (
    ends_inline_run,
    is_inline_content,
    is_invalid_inline,
    is_not_whitelisted,
    normalise_blocks,
    trim_breaks,
)

logger = logging.getLogger(__name__)

META_TAG = re.compile(r"<meta[^>]*>", re.IGNORECASE)


class DiagnosticReporter(ABC):
    """Receives the processed markup at the pipeline's checkpoints."""

    @abstractmethod
    def report(self, stage: str, html: str) -> None:
        pass


class LoggingReporter(DiagnosticReporter):
    """Write checkpoints to a logger at DEBUG level, for bug reports."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self._log = log or logger

    def report(self, stage: str, html: str) -> None:
        self._log.debug("Processed %s HTML:\n\n%s", stage, html)


class NullReporter(DiagnosticReporter):
    def report(self, stage: str, html: str) -> None:
        pass


def context_filters() -> FilterChain:
    """Filters that read attributes the structural pass strips."""
    return FilterChain([MsListConverter()])


def structural_filters(policy: PolicyConfig) -> FilterChain:
    return FilterChain([
        ListMerger(),
        ImageCorrector(policy),
        # Add semantic formatting before attributes are stripped
        FormattingTransformer(),
        StripAttributes(policy),
        CommentRemover(),
        NoiseRemover(policy),
        Unwrapper(
            partial(is_not_whitelisted, policy=policy),
            slug="unwrap-not-whitelisted",
            line_break=partial(ends_inline_run, policy=policy),
        ),
        BlockquoteNormaliser(policy),
    ])


def block_filters(policy: PolicyConfig) -> FilterChain:
    """Filters only run when the paste becomes blocks."""
    return FilterChain([
        Unwrapper(partial(is_invalid_inline, policy=policy), slug="unwrap-invalid-inline"),
    ])


def paste_handler(
    content: str,
    inline: bool = False,
    *,
    policy: Optional[PolicyConfig] = None,
    reporter: Optional[DiagnosticReporter] = None,
    disabled: Iterable[str] = (),
) -> Union[str, list[BlockRecord]]:
    """Convert pasted HTML into inline HTML or a list of block records.

    Args:
        content: Raw clipboard HTML.
        inline: True when pasting into an existing text field; the result
                is then always a string.
        policy: Whitelist and heuristic policy. Defaults to the loaded config.
        reporter: Receives processed markup at the inline and block
                  checkpoints. Defaults to logging at DEBUG.
        disabled: Filter slugs to skip.

    Returns:
        The sanitized HTML string for inline content, otherwise the block
        records in document order.

    Raises:
        FilterError: A filter failed; the paste should fall back to plain text.
    """
    policy = policy or PolicyConfig.default()
    reporter = reporter or LoggingReporter()
    disabled = set(disabled)

    html = META_TAG.sub("", content or "")
    if not html.strip():
        return "" if inline else []

    # Block delimiters detected.
    if not inline and has_block_delimiters(html):
        logger.debug("Block delimiters found, parsing with grammar")
        return parse_with_grammar(html)

    # Context dependent filters. Needs to run before we remove nodes.
    tree = context_filters().without(disabled).execute(parse_html(html))
    tree = structural_filters(policy).without(disabled).execute(tree)

    if inline or is_inline_content(tree, policy):
        # Breaks left at the edges by unwrapped wrappers mean nothing inline
        processed = inner_html(Node.fragment(trim_breaks(tree.children)))
        reporter.report("inline", processed)
        return processed

    tree = block_filters(policy).without(disabled).execute(tree)
    tree = normalise_blocks(tree, policy)

    reporter.report("blocks", inner_html(tree))
    return create_blocks_from_markup(tree)
