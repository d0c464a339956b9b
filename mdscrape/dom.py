"""Document tree model for rendered pages.

The renderer serializes the live DOM into plain JSON (see
``renderer.PAGE_SNAPSHOT_SCRIPT``); this module turns that payload into
:class:`Element` / :class:`TextNode` trees. :func:`snapshot_from_html`
produces the same payload from static HTML, which is what the tests and
offline conversions use.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import (
    CData,
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
    Tag,
)

from .document import PageMetadata

_NON_TEXT_STRINGS = (Comment, CData, Declaration, Doctype, ProcessingInstruction)
_HIDDEN_STYLE = re.compile(
    r"(?<![\w-])(?:display\s*:\s*none|visibility\s*:\s*hidden)", re.IGNORECASE
)


@dataclass(slots=True)
class TextNode:
    text: str


@dataclass(slots=True)
class Element:
    """An element with its attributes, children and computed visibility."""

    tag: str
    attrs: Dict[str, str] = field(default_factory=dict)
    children: List["Node"] = field(default_factory=list)
    hidden: bool = False

    def get(self, name: str) -> Optional[str]:
        return self.attrs.get(name)

    @property
    def element_children(self) -> List["Element"]:
        return [child for child in self.children if isinstance(child, Element)]

    @property
    def text_content(self) -> str:
        """Concatenated text of all descendant text nodes, like DOM ``textContent``."""
        parts: List[str] = []
        stack: List["Node"] = list(reversed(self.children))
        while stack:
            node = stack.pop()
            if isinstance(node, TextNode):
                parts.append(node.text)
            else:
                stack.extend(reversed(node.children))
        return "".join(parts)

    def iter(self) -> Iterator["Element"]:
        """Yield this element and its descendants in document order."""
        stack = [self]
        while stack:
            element = stack.pop()
            yield element
            stack.extend(reversed(element.element_children))

    def matches(self, selector: str) -> bool:
        """Match a simple ``tag``, ``#id`` or ``.class`` selector."""
        if selector.startswith("#"):
            return self.attrs.get("id") == selector[1:]
        if selector.startswith("."):
            return selector[1:] in self.attrs.get("class", "").split()
        return self.tag == selector.lower()

    def select_first(self, selector: str) -> Optional["Element"]:
        for element in self.iter():
            if element.matches(selector):
                return element
        return None


Node = Union[Element, TextNode]


@dataclass(slots=True)
class PageSnapshot:
    """Everything the pipeline needs from one rendered page."""

    url: str
    tree: Element
    title: str = ""
    description: str = ""
    canonical: str = ""
    links: List[str] = field(default_factory=list)

    @property
    def metadata(self) -> PageMetadata:
        return PageMetadata(
            title=self.title,
            description=self.description,
            canonical=self.canonical or self.url,
        )

    @classmethod
    def from_dict(cls, data: Any) -> "PageSnapshot":
        if not isinstance(data, dict):
            raise ValueError("Page snapshot must be a JSON object")
        tree = node_from_snapshot(data.get("tree"))
        if not isinstance(tree, Element):
            tree = Element(tag="body")
        url = str(data.get("url") or "")
        return cls(
            url=url,
            tree=tree,
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            canonical=str(data.get("canonical") or url),
            links=[str(link) for link in data.get("links") or [] if link],
        )


def _decode_node(data: Dict[str, Any]) -> Node:
    if data.get("type") == "text":
        return TextNode(text=str(data.get("text") or ""))
    return Element(
        tag=str(data.get("tag") or "").lower(),
        attrs={str(k): str(v) for k, v in (data.get("attrs") or {}).items()},
        hidden=bool(data.get("hidden")),
    )


def node_from_snapshot(data: Any) -> Optional[Node]:
    """Decode one serialized node and its subtree; non-object children are dropped."""
    if not isinstance(data, dict):
        return None
    root = _decode_node(data)
    stack = [(root, data)]
    while stack:
        node, raw = stack.pop()
        if not isinstance(node, Element):
            continue
        for raw_child in raw.get("children") or []:
            if isinstance(raw_child, dict):
                child = _decode_node(raw_child)
                node.children.append(child)
                stack.append((child, raw_child))
    return root


def find_main_content(root: Element, selectors: Sequence[str]) -> Element:
    """First element matching a selector, in selector order; ``root`` otherwise."""
    for selector in selectors:
        match = root.select_first(selector)
        if match is not None:
            return match
    return root


# ---------------------------------------------------------------------------
# Static HTML
# ---------------------------------------------------------------------------


def _attr_value(value: Any) -> str:
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def _is_hidden(attrs: Dict[str, str]) -> bool:
    if "hidden" in attrs:
        return True
    return bool(_HIDDEN_STYLE.search(attrs.get("style", "")))


def _serialize_element(tag: Tag, name: Optional[str] = None) -> Dict[str, Any]:
    attrs = {key: _attr_value(value) for key, value in tag.attrs.items()}
    return {
        "type": "element",
        "tag": (name or tag.name).lower(),
        "attrs": attrs,
        "hidden": _is_hidden(attrs),
        "children": [],
    }


def _serialize_tag(tag: Tag, name: Optional[str] = None) -> Dict[str, Any]:
    root = _serialize_element(tag, name)
    stack = [(tag, root)]
    while stack:
        current, serialized = stack.pop()
        for child in current.children:
            if isinstance(child, Tag):
                serialized_child = _serialize_element(child)
                serialized["children"].append(serialized_child)
                stack.append((child, serialized_child))
            elif isinstance(child, NavigableString) and not isinstance(
                child, _NON_TEXT_STRINGS
            ):
                serialized["children"].append({"type": "text", "text": str(child)})
    return root


def snapshot_from_html(html: str, url: str) -> Dict[str, Any]:
    """Build the snapshot payload for static ``html`` served at ``url``.

    Visibility is approximated from the ``hidden`` attribute and inline
    ``style``; no stylesheets are evaluated.
    """
    soup = BeautifulSoup(html, "html.parser")

    description = ""
    meta = soup.find("meta", attrs={"name": "description"})
    if isinstance(meta, Tag):
        description = _attr_value(meta.get("content") or "")

    canonical = url
    link = soup.find("link", rel="canonical")
    if isinstance(link, Tag) and link.get("href"):
        canonical = urljoin(url, _attr_value(link["href"]))

    title = soup.title.get_text() if soup.title else ""

    body = soup.body
    tree = _serialize_tag(body) if body is not None else _serialize_tag(soup, "body")

    links = [
        urljoin(url, _attr_value(anchor["href"]).strip())
        for anchor in soup.find_all("a", href=True)
    ]

    return {
        "url": url,
        "title": title,
        "description": description,
        "canonical": canonical,
        "tree": tree,
        "links": links,
    }


def parse_html(html: str, url: str = "") -> Element:
    """Parse static HTML into an :class:`Element` tree rooted at ``body``."""
    snapshot = PageSnapshot.from_dict(snapshot_from_html(html, url))
    return snapshot.tree
