"""
Canonical field tables.

Each table is applied in order; a later rule wins over an earlier one writing the
same key, so the plain RSS tag outranks its Dublin Core counterpart.
"""
from __future__ import annotations

from .custom_fields import compile_rules

RSS_FEED = compile_rules([
    ("author", "creator"),
    ("dc:publisher", "publisher"),
    ("dc:creator", "creator"),
    ("dc:source", "source"),
    ("dc:title", "title"),
    ("dc:type", "type"),
    "title",
    "description",
    "author",
    "pubDate",
    "webMaster",
    "managingEditor",
    "generator",
    "link",
    "language",
    "copyright",
    "lastBuildDate",
    "docs",
    "ttl",
    "rating",
    "skipHours",
    "skipDays",
])

RSS_ITEM = compile_rules([
    ("author", "creator"),
    ("dc:creator", "creator"),
    ("dc:title", "title"),
    "title",
    "link",
    "pubDate",
    "author",
    "summary",
    "content:encoded",
    "dc:creator",
    "dc:date",
    "comments",
])

# raw tags that may carry an RSS item's date, by priority
RSS2_DATE_KEYS = ("pubDate", "dc:date")
RSS1_DATE_KEYS = ("dc:date", "pubDate")


def _itunes(names):
    return compile_rules([(f"itunes:{n}", n) for n in names])


PODCAST_FEED = _itunes([
    "author",
    "subtitle",
    "summary",
    "explicit",
])

PODCAST_ITEM = _itunes([
    "author",
    "subtitle",
    "summary",
    "explicit",
    "duration",
    "episode",
    "season",
    "episodeType",
])
