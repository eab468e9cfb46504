from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bs4 import BeautifulSoup
from feedparser.datetimes import _parse_date

from .models import ParsedNode

logger = logging.getLogger(__name__)

_BLOCK_TAG = re.compile(
    r"<(/?)(h[1-6]|br|p|ul|ol|li|blockquote|section|table|tr|div)\b",
    re.IGNORECASE,
)
_WHITESPACE = re.compile(r"\s+")


def to_iso_date(value: Any) -> Optional[str]:
    """
    Convert a raw feed date string to UTC ISO-8601 with millisecond precision.

    Accepts whatever feedparser's date handlers accept (RFC 822, W3C-DTF, ISO 8601, ...).
    Returns None for anything that does not parse.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    parsed = _parse_date(value.strip())
    if parsed is None:
        return None
    try:
        dt = datetime(*parsed[:6], tzinfo=timezone.utc)
    except (ValueError, OverflowError):
        return None
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def set_iso_date(item: Dict[str, Any]) -> None:
    date = item.get("date")
    if date is None:
        return
    iso = to_iso_date(date)
    if iso is None:
        logger.debug("Ignoring unparseable date %r", date)
        return
    item["isoDate"] = iso


def get_snippet(content: Any) -> Optional[str]:
    """
    Plain-text rendition of an HTML fragment: tags stripped, entities decoded,
    whitespace collapsed. None when nothing is left.
    """
    if not isinstance(content, str):
        return None
    text = content
    if "<" in text or "&" in text:
        # block boundaries must not glue neighbouring words together
        text = _BLOCK_TAG.sub(r" <\1\2", text)
        text = BeautifulSoup(text, "html.parser").get_text()
    text = _WHITESPACE.sub(" ", text).strip()
    return text or None


def set_content(item: Dict[str, Any], content: Optional[str]) -> None:
    if content is None:
        return
    item["content"] = content
    snippet = get_snippet(content)
    if snippet is not None:
        item["contentSnippet"] = snippet


def get_enclosure(node: ParsedNode) -> Optional[Dict[str, str]]:
    """
    Enclosure attributes of an RSS item.

    Falls back to the first <media:content> carrying a url when there is no <enclosure>.
    """
    enclosure = node.find("enclosure")
    if enclosure is not None and enclosure.attrs:
        return dict(enclosure.attrs)

    for media in node.find_all("media:content"):
        url = media.attr("url")
        if not url:
            continue
        out = {"url": url}
        if media.attr("type"):
            out["type"] = media.attr("type")
        if media.attr("fileSize"):
            out["length"] = media.attr("fileSize")
        return out
    return None
