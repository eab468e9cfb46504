from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from . import fields
from .models import ParsedNode
from .normalizer import copy_fields, get_text

logger = logging.getLogger(__name__)


def uses_itunes(root: ParsedNode, channel: Optional[ParsedNode]) -> bool:
    if root.attr("xmlns:itunes"):
        return True
    if channel is None:
        return False
    return any(c.prefix == "itunes" for c in channel.children)


def _image_href(node: ParsedNode) -> Optional[str]:
    image = node.find("itunes:image")
    if image is None:
        return None
    href = (image.attr("href") or "").strip()
    return href or None


def normalize_keywords(nodes: Sequence[ParsedNode], as_array: bool = True) -> Optional[Union[List[str], str]]:
    """
    Keywords may come as one comma-delimited tag or as one tag per keyword, with the
    value either in the text or in a `text` attribute. Both shapes give the same result.
    """
    words: List[str] = []
    for node in nodes:
        raw = node.attr("text") or node.text or ""
        words.extend(w.strip() for w in raw.split(",") if w.strip())
    if not words:
        return None
    return words if as_array else ",".join(words)


def _categories(channel: ParsedNode) -> List[Dict[str, Any]]:
    out = []
    for category in channel.find_all("itunes:category"):
        name = category.attr("text")
        if not name:
            continue
        subs = [
            {"name": s.attr("text")}
            for s in category.find_all("itunes:category")
            if s.attr("text")
        ]
        out.append({"name": name, "subs": subs or None})
    return out


def _owner(channel: ParsedNode) -> Dict[str, str]:
    node = channel.find("itunes:owner")
    if node is None:
        return {}
    owner = {}
    for key in ("name", "email"):
        value = get_text(node.find(f"itunes:{key}"))
        if value:
            owner[key] = value
    return owner


def decorate_itunes(
    feed: Dict[str, Any],
    channel: ParsedNode,
    item_nodes: Sequence[ParsedNode],
    *,
    keywords_as_array: bool = True,
) -> None:
    """
    Add podcast metadata under `itunes` on the feed and on each item.

    Absent data is left out; an `itunes` dict with nothing in it is not added at all.
    `feed["items"]` must line up with `item_nodes`.
    """
    itunes: Dict[str, Any] = {}

    owner = _owner(channel)
    if owner:
        itunes["owner"] = owner

    image = _image_href(channel)
    if image:
        itunes["image"] = image

    categories = _categories(channel)
    if categories:
        itunes["categories"] = [c["name"] for c in categories]
        itunes["categoriesWithSubs"] = categories

    keywords = normalize_keywords(channel.find_all("itunes:keywords"), keywords_as_array)
    if keywords:
        itunes["keywords"] = keywords

    copy_fields(channel, itunes, fields.PODCAST_FEED)
    if itunes:
        feed["itunes"] = itunes

    for item, node in zip(feed.get("items", []), item_nodes):
        entry: Dict[str, Any] = {}
        copy_fields(node, entry, fields.PODCAST_ITEM)

        keywords = normalize_keywords(node.find_all("itunes:keywords"), keywords_as_array)
        if keywords:
            entry["keywords"] = keywords

        image = _image_href(node)
        if image:
            entry["image"] = image

        if entry:
            item["itunes"] = entry

    logger.debug("Decorated feed with iTunes metadata (%d feed keys)", len(itunes))
