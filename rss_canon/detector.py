from __future__ import annotations

import logging
import re
from typing import Optional

from .exceptions import ConfigurationError
from .models import FeedDialect, ParsedNode

logger = logging.getLogger(__name__)

ATOM_NAMESPACES = {
    "http://www.w3.org/2005/Atom",
    "http://purl.org/atom/ns#",
}
RSS1_NAMESPACE = "http://purl.org/rss/1.0/"
RDF_NAMESPACE = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"

_RSS_0_9X = re.compile(r"^0\.9")


def dialect_for_version(version: float) -> FeedDialect:
    """
    Map a configured RSS version hint onto a dialect.

    0.9x and 2 read as the RSS 2.0-or-lower family, 1 as RSS 1.0.
    """
    if isinstance(version, bool) or not isinstance(version, (int, float)):
        raise ConfigurationError(f"default RSS version not recognized: {version!r}")
    if 0.9 <= version < 1:
        return FeedDialect.RSS2
    if version == 1:
        return FeedDialect.RSS1
    if version == 2:
        return FeedDialect.RSS2
    raise ConfigurationError(f"default RSS version not recognized: {version!r}")


def _namespace(root: ParsedNode) -> Optional[str]:
    if root.prefix:
        return root.attr(f"xmlns:{root.prefix}")
    return root.attr("xmlns")


def detect_dialect(root: ParsedNode, default_rss: Optional[float] = None) -> FeedDialect:
    """
    Classify a parsed document.

    Explicit markers always win; `default_rss` only settles an <rss> root whose
    version attribute is missing or ambiguous.
    """
    name = root.local_name
    ns = _namespace(root)

    if name == "feed" and (ns is None or ns in ATOM_NAMESPACES):
        dialect = FeedDialect.ATOM
    elif root.tag == "rss":
        version = (root.attr("version") or "").strip()
        if version.startswith("2") or _RSS_0_9X.match(version):
            dialect = FeedDialect.RSS2
        elif default_rss is not None:
            dialect = dialect_for_version(default_rss)
            logger.debug("Ambiguous RSS version %r, using default_rss=%s", version, default_rss)
        else:
            dialect = FeedDialect.UNRECOGNIZED
    elif name == "RDF" and (root.tag == "rdf:RDF" or ns == RDF_NAMESPACE):
        dialect = FeedDialect.RSS1
    elif root.attr("xmlns") == RSS1_NAMESPACE:
        dialect = FeedDialect.RSS1
    else:
        dialect = FeedDialect.UNRECOGNIZED

    logger.debug("Detected dialect %s for root <%s>", dialect.value, root.tag)
    return dialect
