from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence

from .models import FieldRule, ParsedNode


def resolve(node: ParsedNode, path: Sequence[str]) -> List[ParsedNode]:
    """All descendants reached by following `path` one child tag at a time, in document order."""
    nodes = [node]
    for segment in path:
        nodes = [child for n in nodes for child in n.find_all(segment)]
        if not nodes:
            break
    return nodes


def unwrap(value: Any) -> Any:
    # attributed leaves (<guid isPermaLink="false">x</guid>) collapse to their text
    if isinstance(value, dict) and isinstance(value.get("_"), str):
        return value["_"]
    return value


def copy_fields(node: ParsedNode, dest: Dict[str, Any], rules: Iterable[FieldRule]) -> List[str]:
    """
    Apply a table of field rules to `node`, writing into `dest`.

    Without keep_array only the first match is taken. Later rules overwrite earlier
    ones for the same destination key. Returns the keys written, in order.
    """
    written: List[str] = []
    for rule in rules:
        matches = resolve(node, rule.path)
        if not matches:
            continue
        if rule.keep_array:
            value: Any = [m.to_value() for m in matches]
        else:
            value = unwrap(matches[0].to_value())
        dest[rule.dest] = value
        written.append(rule.dest)
    return written


def first_present(source: Dict[str, Any], keys: Sequence[str]) -> Optional[Any]:
    for key in keys:
        value = source.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return None


def get_link(links: Iterable[ParsedNode], rels: Sequence[Optional[str]]) -> Optional[str]:
    """href of the first <link> whose rel is in `rels` (None matches a missing rel)."""
    for link in links:
        href = link.attr("href")
        if href and link.attr("rel") in rels:
            return href
    return None


def get_text(node: Optional[ParsedNode]) -> Optional[str]:
    """Text of a node, or its inner markup when it holds child elements. None when empty."""
    if node is None:
        return None
    if node.children:
        markup = node.inner_markup().strip()
        return markup or None
    if node.text is None or not node.text.strip():
        return None
    return node.text


def get_content(node: Optional[ParsedNode]) -> Optional[str]:
    """
    Content of an Atom <content>/<summary> or RSS description node.

    Inline xhtml is serialized back to markup; escaped html and plain text come
    through as text.
    """
    if node is None:
        return None
    if node.attr("type") == "xhtml" or node.children:
        markup = node.inner_markup().strip()
        return markup or None
    if not node.text or not node.text.strip():
        return None
    return node.text
