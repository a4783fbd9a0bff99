"""Base filter classes and the depth-first filter runner."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Sequence

from .nodes import Node


class FilterAction(Enum):
    """What a filter decided about the node it was given."""
    KEEP = "keep"
    MODIFY = "modify"
    REPLACE = "replace"
    REMOVE = "remove"


@dataclass
class FilterResult:
    """Result from applying a filter to a single node.

    KEEP and MODIFY let the remaining filters see the (possibly rewritten)
    node. REPLACE splices ``nodes`` into the parent and ends the chain for
    that position. REMOVE drops the node and its subtree.
    """
    action: FilterAction
    nodes: list[Node] = field(default_factory=list)

    @classmethod
    def keep(cls) -> "FilterResult":
        return cls(action=FilterAction.KEEP)

    @classmethod
    def modify(cls, node: Node) -> "FilterResult":
        return cls(action=FilterAction.MODIFY, nodes=[node])

    @classmethod
    def replace(cls, *nodes: Node) -> "FilterResult":
        return cls(action=FilterAction.REPLACE, nodes=list(nodes))

    @classmethod
    def remove(cls) -> "FilterResult":
        return cls(action=FilterAction.REMOVE)


class FilterError(RuntimeError):
    """A filter raised while rewriting a tree. Aborts the whole paste."""

    def __init__(self, slug: str, cause: BaseException):
        super().__init__(f"filter '{slug}' failed: {cause}")
        self.slug = slug
        self.cause = cause


class Filter(ABC):
    """Base class for tree filters."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable filter name."""
        pass

    @property
    @abstractmethod
    def slug(self) -> str:
        """Canonical slug for --disable flags (e.g., 'strip-attributes')."""
        pass

    @abstractmethod
    def apply(self, node: Node) -> FilterResult:
        """Inspect one node whose children are already filtered."""
        pass


def deep_filter(root: Node, filters: Sequence[Filter]) -> Node:
    """Apply ``filters`` to every node of ``root``, children before parents.

    The input tree is left untouched. If the root itself is removed or
    replaced, the result is a fragment holding whatever replaced it.
    """
    nodes = _filter_tree(root, filters)
    if len(nodes) == 1 and (nodes[0].is_fragment or not root.is_fragment):
        return nodes[0]
    return Node.fragment(nodes)


def _filter_tree(root: Node, filters: Sequence[Filter]) -> list[Node]:
    # One frame per open node: (node, unvisited children, filtered children)
    stack = [(root, iter(root.children), [])]
    while True:
        node, pending, filtered = stack[-1]
        child = next(pending, None)
        if child is not None:
            stack.append((child, iter(child.children), []))
            continue

        stack.pop()
        current = node
        if node.is_element() or node.is_fragment:
            current = node.clone(children=filtered)
        result = _apply_filters(current, filters)
        if not stack:
            return result
        stack[-1][2].extend(result)


def _apply_filters(node: Node, filters: Sequence[Filter]) -> list[Node]:
    current = node
    for flt in filters:
        try:
            result = flt.apply(current)
        except Exception as exc:
            raise FilterError(flt.slug, exc) from exc

        if result.action == FilterAction.KEEP:
            continue
        if result.action == FilterAction.MODIFY:
            current = result.nodes[0]
            continue
        if result.action == FilterAction.REPLACE:
            return list(result.nodes)
        return []

    return [current]


class FilterChain:
    """Ordered list of filters applied in a single depth-first pass."""

    def __init__(self, filters: Optional[list[Filter]] = None):
        self.filters = filters or []

    def add(self, flt: Filter) -> None:
        self.filters.append(flt)

    @property
    def slugs(self) -> list[str]:
        return [flt.slug for flt in self.filters]

    def without(self, slugs: Iterable[str]) -> "FilterChain":
        """Return a copy of the chain minus the filters named by ``slugs``."""
        skip = set(slugs)
        return FilterChain([flt for flt in self.filters if flt.slug not in skip])

    def execute(self, root: Node) -> Node:
        return deep_filter(root, self.filters)
