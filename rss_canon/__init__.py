"""
rss_canon

Normalizes RSS 0.9x/1.0/2.0 and Atom documents into one predictable dict schema.

Core ideas:
- Input: feed XML text (fetching it is up to the caller)
- Process: tree → detect dialect → extract → normalize items → decorate → custom fields
- Output: dict with title/description/link/items; every item carries title, link, date,
  isoDate, creator, content, contentSnippet, guid where the source has them

Example
-------
from rss_canon import FeedParser

parser = FeedParser(
    custom_fields={
        "feed": ["language"],
        "item": [("media:content", "media", {"keep_array": True})],
    },
    default_rss=2.0,
)

feed = parser.parse_string(xml_text)

for item in feed["items"]:
    print(item.get("isoDate"), item.get("title"), item.get("link"))
"""
from .config import CustomFields, ParserOptions
from .core import FeedParser
from .exceptions import (
    ConfigurationError,
    FeedNotRecognizedError,
    FeedParseError,
    StructuralParseError,
)
from .models import FeedDialect, FieldRule

__all__ = [
    "FeedParser",
    "ParserOptions",
    "CustomFields",
    "FieldRule",
    "FeedDialect",
    "FeedParseError",
    "StructuralParseError",
    "FeedNotRecognizedError",
    "ConfigurationError",
]
