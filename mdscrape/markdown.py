"""Convert a rendered document tree into Markdown.

Each element kind has one rule in :attr:`MarkdownConverter.RULES`; kinds
without a rule fall back to their children, or to their cleaned text when
they have none.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional

from .dom import Element, Node, TextNode
from .urls import is_followable, resolve_url

TABLE_PLACEHOLDER = "[table omitted]"

_WHITESPACE = re.compile(r"\s+")
_NEWLINES = re.compile(r"\n+")


def clean_text(text: Optional[str]) -> str:
    """Trim and collapse whitespace runs to single spaces."""
    if not text:
        return ""
    text = _WHITESPACE.sub(" ", text.strip())
    return _NEWLINES.sub("\n", text)


class MarkdownConverter:
    """Element-to-Markdown visitor bound to one page address.

    Containers are expanded with an explicit stack, so nesting depth is not
    bounded by the interpreter recursion limit.
    """

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url

    def convert(self, node: Optional[Node]) -> str:
        if node is None:
            return ""
        if isinstance(node, TextNode):
            return clean_text(node.text)
        if node.hidden:
            return ""
        rule = self.RULES.get(node.tag)
        if rule is not None and rule is not MarkdownConverter._children:
            return rule(self, node)
        if node.children:
            return self._children(node)
        return clean_text(node.text_content)

    def _skip(self, element: Element) -> str:
        return ""

    def _heading(self, element: Element) -> str:
        level = int(element.tag[1])
        return f"{'#' * level} {clean_text(element.text_content)}\n\n"

    def _paragraph(self, element: Element) -> str:
        text = clean_text(element.text_content)
        return f"{text}\n\n" if text else ""

    def _unordered_list(self, element: Element) -> str:
        items = [
            f"* {clean_text(child.text_content)}\n"
            for child in element.element_children
            if child.tag == "li"
        ]
        return "".join(items) + "\n" if items else ""

    def _ordered_list(self, element: Element) -> str:
        # Numbering follows the item's position among all element children.
        items = [
            f"{position}. {clean_text(child.text_content)}\n"
            for position, child in enumerate(element.element_children, 1)
            if child.tag == "li"
        ]
        return "".join(items) + "\n" if items else ""

    def _link(self, element: Element) -> str:
        text = clean_text(element.text_content)
        href = element.get("href")
        if is_followable(href):
            return f"[{text}]({resolve_url(href, self.base_url)})"
        return text

    def _image(self, element: Element) -> str:
        src = element.get("src")
        if not src:
            return ""
        alt = element.get("alt") or ""
        return f"![{alt}]({resolve_url(src, self.base_url)})"

    def _code(self, element: Element) -> str:
        return f"```\n{element.text_content}\n```\n\n"

    def _blockquote(self, element: Element) -> str:
        quote = clean_text(element.text_content)
        return "\n".join(f"> {line}" for line in quote.split("\n")) + "\n\n"

    def _rule(self, element: Element) -> str:
        return "---\n\n"

    def _line_break(self, element: Element) -> str:
        return "\n"

    def _table(self, element: Element) -> str:
        return f"{TABLE_PLACEHOLDER}\n\n"

    def _children(self, element: Element) -> str:
        parts: List[str] = []
        stack: List[Node] = list(reversed(element.children))
        while stack:
            node = stack.pop()
            if isinstance(node, TextNode):
                text = clean_text(node.text)
                if text:
                    parts.append(text + " ")
                continue
            if node.hidden:
                continue
            rule = self.RULES.get(node.tag)
            if rule is None or rule is MarkdownConverter._children:
                # Unknown leaves convert to their text, which is empty.
                stack.extend(reversed(node.children))
            else:
                parts.append(rule(self, node))
        return "".join(parts)

    RULES: Dict[str, Callable[["MarkdownConverter", Element], str]] = {
        "script": _skip,
        "style": _skip,
        "noscript": _skip,
        "svg": _skip,
        "nav": _skip,
        "footer": _skip,
        "iframe": _skip,
        "h1": _heading,
        "h2": _heading,
        "h3": _heading,
        "h4": _heading,
        "h5": _heading,
        "h6": _heading,
        "p": _paragraph,
        "ul": _unordered_list,
        "ol": _ordered_list,
        "a": _link,
        "img": _image,
        "code": _code,
        "pre": _code,
        "blockquote": _blockquote,
        "hr": _rule,
        "br": _line_break,
        "table": _table,
        "div": _children,
        "section": _children,
        "article": _children,
        "main": _children,
        "aside": _children,
        "header": _children,
        "span": _children,
    }


def element_to_markdown(root: Optional[Element], base_url: str) -> str:
    """Convert ``root`` to Markdown, resolving links against ``base_url``."""
    return MarkdownConverter(base_url).convert(root)
