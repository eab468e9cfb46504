from __future__ import annotations

import html
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple


class FeedDialect(Enum):
    RSS1 = "rss1"
    RSS2 = "rss2"
    ATOM = "atom"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class FieldRule:
    """
    A resolved extraction rule: copy the tag(s) at `source` into `dest`.

    `source` may be a nested path separated by "/" (e.g. "media:group/media:title").
    """
    source: str
    dest: str
    keep_array: bool = False
    path: Tuple[str, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", tuple(p for p in self.source.split("/") if p))


@dataclass(frozen=True)
class ParsedNode:
    """
    One element of the parsed document.

    Names keep their source prefixes ("dc:creator", "rdf:about"). The tree is
    produced once by `rss_canon.tree.build_tree` and only read afterwards.

    WARNING: `to_value()` shapes are part of the output contract for custom fields.
    """
    tag: str
    attrs: Mapping[str, str] = field(default_factory=dict)
    children: Tuple["ParsedNode", ...] = ()
    text: Optional[str] = None
    head: Optional[str] = None
    tail: Optional[str] = None
    empty_value: Any = ""

    @property
    def prefix(self) -> Optional[str]:
        if ":" in self.tag:
            return self.tag.split(":", 1)[0]
        return None

    @property
    def local_name(self) -> str:
        return self.tag.split(":", 1)[-1]

    def find_all(self, name: str) -> List["ParsedNode"]:
        return [c for c in self.children if c.tag == name]

    def find(self, name: str) -> Optional["ParsedNode"]:
        for c in self.children:
            if c.tag == name:
                return c
        return None

    def attr(self, name: str) -> Optional[str]:
        return self.attrs.get(name)

    def child_text(self, name: str) -> Optional[str]:
        node = self.find(name)
        if node is None:
            return None
        return node.text

    def to_value(self) -> Any:
        if not self.attrs and not self.children:
            return self.text if self.text is not None else self.empty_value

        out: Dict[str, Any] = {}
        if self.attrs:
            out["$"] = dict(self.attrs)
        if self.text is not None:
            out["_"] = self.text
        for child in self.children:
            out.setdefault(child.tag, []).append(child.to_value())
        return out

    def to_markup(self) -> str:
        attrs = "".join(
            f' {k}="{html.escape(v, quote=True)}"' for k, v in self.attrs.items()
        )
        inner = self.inner_markup()
        if not inner:
            return f"<{self.tag}{attrs}/>"
        return f"<{self.tag}{attrs}>{inner}</{self.tag}>"

    def inner_markup(self) -> str:
        parts = [html.escape(self.head, quote=False)] if self.head else []
        for c in self.children:
            parts.append(c.to_markup())
            if c.tail:
                parts.append(html.escape(c.tail, quote=False))
        return "".join(parts)
