from __future__ import annotations

import asyncio
import concurrent.futures as _fut
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .config import ParserOptions
from .custom_fields import inject
from .decorators import decorate_itunes, uses_itunes
from .detector import detect_dialect
from .dialects import extractor_for
from .exceptions import FeedNotRecognizedError
from .models import FeedDialect
from .tree import build_tree

logger = logging.getLogger(__name__)

NOT_RECOGNIZED_MESSAGE = "Feed not recognized as RSS 1 or 2."

Document = Union[str, bytes]


class FeedParser:
    """
    High-level API: turn an RSS/Atom document into one canonical feed dict.

    Pipeline: tree → detect dialect → extract feed and items → decorate (iTunes)
    → custom fields (feed scope once, item scope per item)

    The parser only holds its validated options, so one instance can serve
    concurrent calls.
    """

    def __init__(
        self,
        *,
        custom_fields: Optional[Mapping[str, Sequence[Any]]] = None,
        default_rss: Optional[float] = None,
        tree_options: Optional[Mapping[str, Any]] = None,
        keywords_as_array: bool = True,
        options: Optional[ParserOptions] = None,
    ) -> None:
        if options is None:
            options = ParserOptions(
                custom_fields=custom_fields,
                default_rss=default_rss,
                tree_options=tree_options or {},
                keywords_as_array=keywords_as_array,
            )
        self.options = options

    def parse_string(self, xml: Document) -> Dict[str, Any]:
        root = build_tree(xml, self.options.tree_options)

        dialect = detect_dialect(root, self.options.default_rss)
        if dialect is FeedDialect.UNRECOGNIZED:
            raise FeedNotRecognizedError(NOT_RECOGNIZED_MESSAGE)

        extractor = extractor_for(dialect)
        channel = extractor.channel(root)
        item_nodes = extractor.item_nodes(root)

        feed = extractor.extract_feed(root)
        feed["items"] = extractor.extract_items(root)

        if dialect is not FeedDialect.ATOM and channel is not None and uses_itunes(root, channel):
            decorate_itunes(
                feed,
                channel,
                item_nodes,
                keywords_as_array=self.options.keywords_as_array,
            )

        rules = self.options.custom_fields
        if channel is not None:
            inject(channel, feed, rules.feed)
        for item, node in zip(feed["items"], item_nodes):
            inject(node, item, rules.item)

        logger.debug("Parsed %s feed with %d items", dialect.value, len(feed["items"]))
        return feed

    async def parse_string_async(self, xml: Document) -> Dict[str, Any]:
        """Run `parse_string` off the event loop as one unit of work."""
        return await asyncio.to_thread(self.parse_string, xml)

    def parse_many(self, documents: Iterable[Document], *, max_workers: int = 4) -> List[Dict[str, Any]]:
        """
        Parse independent documents, returning feeds in input order.

        The first failing document raises; there are no partial results.
        """
        docs = list(documents)
        max_workers = max(1, int(max_workers or 1))
        if max_workers == 1 or len(docs) <= 1:
            return [self.parse_string(d) for d in docs]

        with _fut.ThreadPoolExecutor(max_workers=max_workers) as ex:
            futures = [ex.submit(self.parse_string, d) for d in docs]
            return [fu.result() for fu in futures]
