from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from . import fields
from .models import FeedDialect, ParsedNode
from .normalizer import copy_fields, first_present, get_content, get_link, get_text
from .processor import get_enclosure, set_content, set_iso_date

_IMAGE_KEYS = ("url", "link", "title", "width", "height")
_ALTERNATE = (None, "alternate")


class DialectExtractor(ABC):
    """
    One strategy per feed dialect.

    `extract_feed` returns feed-level keys only; items come from `extract_items`.
    `channel` and `item_nodes` expose the nodes that feed- and item-scope rules
    (decorators, custom fields) run against.
    """

    dialect: FeedDialect

    @abstractmethod
    def channel(self, root: ParsedNode) -> Optional[ParsedNode]:  # pragma: no cover - interface
        ...

    @abstractmethod
    def item_nodes(self, root: ParsedNode) -> List[ParsedNode]:  # pragma: no cover - interface
        ...

    @abstractmethod
    def extract_feed(self, root: ParsedNode) -> Dict[str, Any]:  # pragma: no cover - interface
        ...

    @abstractmethod
    def extract_item(self, node: ParsedNode) -> Dict[str, Any]:  # pragma: no cover - interface
        ...

    def extract_items(self, root: ParsedNode) -> List[Dict[str, Any]]:
        return [self.extract_item(n) for n in self.item_nodes(root)]


class RSSExtractor(DialectExtractor):
    date_keys: Sequence[str] = fields.RSS2_DATE_KEYS

    def channel(self, root: ParsedNode) -> Optional[ParsedNode]:
        return root.find("channel")

    def extract_feed(self, root: ParsedNode) -> Dict[str, Any]:
        feed: Dict[str, Any] = {}
        channel = self.channel(root)
        if channel is None:
            return feed

        copy_fields(channel, feed, fields.RSS_FEED)

        atom_links = channel.find_all("atom:link")
        feed_url = get_link(atom_links, ("self",))
        if feed_url is None:
            feed_url = next((l.attr("href") for l in atom_links if l.attr("href")), None)
        if feed_url:
            feed["feedUrl"] = feed_url

        image = channel.find("image")
        if image is not None and image.child_text("url"):
            feed["image"] = {
                k: image.child_text(k) for k in _IMAGE_KEYS if image.child_text(k) is not None
            }
        return feed

    def extract_item(self, node: ParsedNode) -> Dict[str, Any]:
        item: Dict[str, Any] = {}
        copy_fields(node, item, fields.RSS_ITEM)

        date = first_present(item, self.date_keys)
        if date is not None:
            item["date"] = date

        enclosure = get_enclosure(node)
        if enclosure:
            item["enclosure"] = enclosure

        # full content from content:encoded beats the description teaser
        content = first_present(item, ("content:encoded",))
        if content is None:
            content = get_content(node.find("description"))
        set_content(item, content)

        guid = get_text(node.find("guid"))
        if guid:
            item["guid"] = guid

        about = node.attr("rdf:about")
        if about:
            item["rdf:about"] = about

        # <category domain="..."> keeps its {"$": ..., "_": ...} shape
        categories = [c.to_value() for c in node.find_all("category") if c.text or c.attrs]
        if categories:
            item["categories"] = categories

        set_iso_date(item)
        return item


class RSS2Extractor(RSSExtractor):
    """RSS 2.0 and the 0.9x versions it grew out of."""

    dialect = FeedDialect.RSS2

    def item_nodes(self, root: ParsedNode) -> List[ParsedNode]:
        channel = self.channel(root)
        if channel is None:
            return []
        return channel.find_all("item")


class RSS1Extractor(RSSExtractor):
    """RSS 1.0 (RDF): items are siblings of the channel, dates usually come from dc:date."""

    dialect = FeedDialect.RSS1
    date_keys = fields.RSS1_DATE_KEYS

    def item_nodes(self, root: ParsedNode) -> List[ParsedNode]:
        items = root.find_all("item")
        if items:
            return items
        # an <rss> document coerced to RSS 1.0 through default_rss
        channel = self.channel(root)
        return channel.find_all("item") if channel is not None else []


def _atom_tag(node: ParsedNode, name: str) -> str:
    # <atom:feed> documents prefix every Atom child the same way
    return f"{node.prefix}:{name}" if node.prefix else name


def _find(node: ParsedNode, name: str) -> Optional[ParsedNode]:
    return node.find(_atom_tag(node, name))


def _find_all(node: ParsedNode, name: str) -> List[ParsedNode]:
    return node.find_all(_atom_tag(node, name))


class AtomExtractor(DialectExtractor):
    dialect = FeedDialect.ATOM

    def channel(self, root: ParsedNode) -> Optional[ParsedNode]:
        return root

    def item_nodes(self, root: ParsedNode) -> List[ParsedNode]:
        return _find_all(root, "entry")

    @staticmethod
    def _author_name(node: ParsedNode) -> Optional[str]:
        author = _find(node, "author")
        if author is None:
            return None
        return get_text(_find(author, "name"))

    def extract_feed(self, root: ParsedNode) -> Dict[str, Any]:
        feed: Dict[str, Any] = {}

        title = get_text(_find(root, "title"))
        if title:
            feed["title"] = title

        subtitle = get_text(_find(root, "subtitle"))
        if subtitle:
            feed["description"] = subtitle

        links = _find_all(root, "link")
        link = get_link(links, _ALTERNATE)
        if link:
            feed["link"] = link
        feed_url = get_link(links, ("self",))
        if feed_url:
            feed["feedUrl"] = feed_url

        updated = get_text(_find(root, "updated"))
        if updated:
            feed["lastBuildDate"] = updated

        creator = self._author_name(root)
        if creator:
            feed["creator"] = creator
        return feed

    def extract_item(self, node: ParsedNode) -> Dict[str, Any]:
        item: Dict[str, Any] = {}

        title = get_text(_find(node, "title"))
        if title:
            item["title"] = title

        link = get_link(_find_all(node, "link"), _ALTERNATE)
        if link:
            item["link"] = link

        for key in ("published", "updated"):
            raw = get_text(_find(node, key))
            if raw:
                item[key] = raw
        date = first_present(item, ("published", "updated"))
        if date is not None:
            item["date"] = date

        creator = self._author_name(node)
        if creator:
            item["creator"] = creator
            item["author"] = creator

        summary = get_content(_find(node, "summary"))
        if summary:
            item["summary"] = summary
        content = get_content(_find(node, "content"))
        set_content(item, content or summary)

        entry_id = get_text(_find(node, "id"))
        if entry_id:
            item["id"] = entry_id
            item["guid"] = entry_id

        categories = [c.attr("term") for c in _find_all(node, "category") if c.attr("term")]
        if categories:
            item["categories"] = categories

        set_iso_date(item)
        return item


_EXTRACTORS: Dict[FeedDialect, DialectExtractor] = {
    FeedDialect.RSS1: RSS1Extractor(),
    FeedDialect.RSS2: RSS2Extractor(),
    FeedDialect.ATOM: AtomExtractor(),
}


def extractor_for(dialect: FeedDialect) -> DialectExtractor:
    try:
        return _EXTRACTORS[dialect]
    except KeyError:
        raise ValueError(f"No extractor for dialect {dialect.value}") from None
