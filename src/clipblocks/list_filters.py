"""List filters: word-processor list conversion and adjacent list merging.

Both filters need to see siblings, so they run on the parent node and
rewrite its children list.
"""

import re
from typing import Optional

from .filters import Filter, FilterResult
from .nodes import Node, same_nodes

LIST_TAGS = ("ul", "ol")

# Word writes list paragraphs as <p style="mso-list:l0 level2 lfo1">
MSO_LIST_LEVEL = re.compile(r"mso-list\s*:[^;]+level([0-9]+)", re.IGNORECASE)

# First marker character that identifies an ordered list, per the <ol type> values
ORDERED_MARKERS = "1iIaA"


def _previous_element_index(nodes: list[Node]) -> Optional[int]:
    """Index of the last element in ``nodes``, skipping whitespace and comments."""
    for index in range(len(nodes) - 1, -1, -1):
        node = nodes[index]
        if node.is_whitespace or node.is_comment:
            continue
        return index if node.is_element() else None
    return None


def _last_element(node: Node, *tags: str) -> Optional[int]:
    """Index of the last element child of ``node`` (any of ``tags`` when given)."""
    for index in range(len(node.children) - 1, -1, -1):
        child = node.children[index]
        if child.is_element():
            return index if child.is_element(*tags) else None
    return None


class MsListConverter(Filter):
    """Turn word-processor list paragraphs into real ol/ul elements.

    Runs before any attribute stripping: the list level lives in the
    paragraph's inline style.
    """

    @property
    def name(self) -> str:
        return "MsListConverter"

    @property
    def slug(self) -> str:
        return "ms-list-converter"

    def apply(self, node: Node) -> FilterResult:
        if not any(self._list_level(child) is not None for child in node.children):
            return FilterResult.keep()

        children: list[Node] = []
        for child in node.children:
            level = self._list_level(child)
            if level is None:
                children.append(child)
                continue

            index = _previous_element_index(children)
            if index is None or not children[index].is_element(*LIST_TAGS):
                children.append(self._new_list(child))
                index = len(children) - 1

            container = children[index]
            item = Node.element("li", children=self._item_content(child))
            children[index] = self._nest(container, item, level, container.tag_name)

        return FilterResult.modify(node.clone(children=children))

    @staticmethod
    def _list_level(node: Node) -> Optional[int]:
        """Zero-based list level of a Word list paragraph, None for anything else."""
        if not node.is_element("p"):
            return None
        style = node.attributes.get("style", "")
        if "mso-list" not in style.lower():
            return None
        match = MSO_LIST_LEVEL.search(style)
        if not match:
            return None
        return max(int(match.group(1)) - 1, 0)

    @staticmethod
    def _new_list(paragraph: Node) -> Node:
        marker = paragraph.text_content().strip()[:1]
        if marker and marker in ORDERED_MARKERS:
            return Node.element("ol", {"type": marker})
        return Node.element("ul")

    @staticmethod
    def _item_content(paragraph: Node) -> list[Node]:
        """Paragraph children minus the leading bullet/number marker element."""
        children = list(paragraph.children)
        for index, child in enumerate(children):
            if child.is_element():
                del children[index]
                break
            if child.is_text and child.text.strip():
                break
        return children

    def _nest(self, container: Node, item: Node, depth: int, list_tag: str) -> Node:
        """Return ``container`` with ``item`` appended ``depth`` levels down."""
        if depth == 0:
            return container.clone(children=container.children + [item])

        li_index = _last_element(container, "li")
        if li_index is None:
            return container.clone(children=container.children + [item])

        li = container.children[li_index]
        nested_index = _last_element(li, *LIST_TAGS)
        if nested_index is None:
            nested = self._nest(Node.element(list_tag), item, depth - 1, list_tag)
            li = li.clone(children=li.children + [nested])
        else:
            nested = self._nest(li.children[nested_index], item, depth - 1, list_tag)
            li_children = list(li.children)
            li_children[nested_index] = nested
            li = li.clone(children=li_children)

        children = list(container.children)
        children[li_index] = li
        return container.clone(children=children)


class ListMerger(Filter):
    """Merge adjacent lists of the same type and repair lists nested directly in lists."""

    @property
    def name(self) -> str:
        return "ListMerger"

    @property
    def slug(self) -> str:
        return "list-merger"

    def apply(self, node: Node) -> FilterResult:
        if node.is_element(*LIST_TAGS) and not node.has_content():
            return FilterResult.remove()

        children = self._merge_siblings(node.children)
        if node.is_element(*LIST_TAGS):
            children = self._adopt_nested_lists(children)

        if same_nodes(children, node.children):
            return FilterResult.keep()
        return FilterResult.modify(node.clone(children=children))

    @staticmethod
    def _merge_siblings(nodes: list[Node]) -> list[Node]:
        merged: list[Node] = []
        for child in nodes:
            if child.is_element(*LIST_TAGS):
                index = _previous_element_index(merged)
                if index is not None and merged[index].tag_name == child.tag_name:
                    previous = merged[index]
                    del merged[index:]
                    merged.append(previous.clone(children=previous.children + child.children))
                    continue
            merged.append(child)
        return merged

    def _adopt_nested_lists(self, nodes: list[Node]) -> list[Node]:
        """Move lists sitting directly inside a list into the preceding item."""
        adopted: list[Node] = []
        for child in nodes:
            if not child.is_element(*LIST_TAGS):
                adopted.append(child)
                continue

            index = _previous_element_index(adopted)
            if index is None or not adopted[index].is_element("li"):
                adopted.append(Node.element("li", children=[child]))
                continue

            li = adopted[index]
            adopted[index] = li.clone(children=self._merge_siblings(li.children + [child]))
        return adopted
