from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from lxml import etree

from .exceptions import ConfigurationError, StructuralParseError
from .models import ParsedNode

logger = logging.getLogger(__name__)

_XML_NS = "http://www.w3.org/XML/1998/namespace"
_BOM = b"\xef\xbb\xbf"
_DECLARED_ENCODING = re.compile(
    r"""^(<\?xml[^>]*?encoding\s*=\s*)(["'])[^"']*\2""", re.IGNORECASE
)

_PARSER_DEFAULTS: Dict[str, Any] = {"resolve_entities": False, "no_network": True}


def split_options(options: Optional[Mapping[str, Any]]) -> Tuple[Dict[str, Any], Any]:
    """Return (lxml XMLParser kwargs, empty tag value) for the given tree options."""
    kwargs = dict(_PARSER_DEFAULTS)
    empty_value: Any = ""
    for key, value in (options or {}).items():
        if key == "empty_tag":
            empty_value = value
        else:
            kwargs[key] = value
    return kwargs, empty_value


def make_parser(options: Optional[Mapping[str, Any]] = None) -> etree.XMLParser:
    """
    Build a fresh lxml parser from tree options.

    lxml parsers must not be shared between threads, so callers build one per parse.
    Raises ConfigurationError when lxml rejects an option.
    """
    kwargs, _ = split_options(options)
    try:
        return etree.XMLParser(**kwargs)
    except TypeError as e:
        raise ConfigurationError(f"Invalid tree options: {e}") from e


def _prepare(xml: Union[str, bytes]) -> bytes:
    if isinstance(xml, bytes):
        data = xml[len(_BOM):] if xml.startswith(_BOM) else xml
        return data.lstrip()
    text = xml.lstrip("\ufeff \t\r\n")
    # lxml refuses str input with an encoding declaration; we hand it UTF-8 bytes instead
    text = _DECLARED_ENCODING.sub(r"\1\2utf-8\2", text, count=1)
    return text.encode("utf-8")


def _qualified(name: str, prefixes: Mapping[str, str]) -> str:
    if not name.startswith("{"):
        return name
    uri, local = name[1:].split("}", 1)
    if uri == _XML_NS:
        return f"xml:{local}"
    prefix = prefixes.get(uri)
    return f"{prefix}:{local}" if prefix else local


def _convert(el: Any, parent_nsmap: Mapping[Optional[str], str], empty_value: Any) -> ParsedNode:
    nsmap = el.nsmap
    attrs: Dict[str, str] = {}
    for prefix, uri in nsmap.items():
        if prefix not in parent_nsmap or parent_nsmap[prefix] != uri:
            attrs[f"xmlns:{prefix}" if prefix else "xmlns"] = uri

    prefixes = {uri: prefix for prefix, uri in nsmap.items() if prefix}
    for name, value in el.attrib.items():
        attrs[_qualified(name, prefixes)] = value

    head = el.text or ""
    kids: List[List[Any]] = []
    for child in el:
        tail = child.tail or ""
        if isinstance(child.tag, str):
            kids.append([_convert(child, nsmap, empty_value), tail])
        elif kids:
            # comment or processing instruction: keep its tail text, drop the node
            kids[-1][1] += tail
        else:
            head += tail

    children = tuple(replace(node, tail=tail or None) for node, tail in kids)
    text: Optional[str] = head + "".join(tail for _, tail in kids)
    if children and not text.strip():
        text = None
    elif not text:
        text = None

    local = etree.QName(el).localname
    return ParsedNode(
        tag=f"{el.prefix}:{local}" if el.prefix else local,
        attrs=attrs,
        children=children,
        text=text,
        head=head or None,
        empty_value=empty_value,
    )


def build_tree(xml: Union[str, bytes], options: Optional[Mapping[str, Any]] = None) -> ParsedNode:
    """
    Tokenize XML text into a ParsedNode tree.

    `options` is forwarded verbatim to lxml's XMLParser, except `empty_tag`, the
    value reported for empty elements (default "").
    Raises StructuralParseError on malformed input.
    """
    if not xml or not xml.strip():
        raise StructuralParseError("Unable to parse XML.")

    _, empty_value = split_options(options)
    parser = make_parser(options)
    try:
        root = etree.fromstring(_prepare(xml), parser=parser)
    except etree.XMLSyntaxError as e:
        raise StructuralParseError(f"Unable to parse XML: {e}") from e

    # recover=True can hand back no root at all
    if root is None:
        raise StructuralParseError("Unable to parse XML.")

    tree = _convert(root, {}, empty_value)
    logger.debug("Parsed XML tree with root <%s> and %d children", tree.tag, len(tree.children))
    return tree
