from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from .custom_fields import compile_rules
from .detector import dialect_for_version
from .exceptions import ConfigurationError
from .models import FieldRule
from .tree import make_parser

# JSON-style keys accepted by ParserOptions.from_dict
_ALIASES = {
    "customFields": "custom_fields",
    "defaultRSS": "default_rss",
    "treeOptions": "tree_options",
    "keywordsAsArray": "keywords_as_array",
}


@dataclass(frozen=True)
class CustomFields:
    feed: Tuple[FieldRule, ...] = ()
    item: Tuple[FieldRule, ...] = ()

    @classmethod
    def build(cls, declared: Any) -> "CustomFields":
        """Compile {"feed": [...], "item": [...]} into resolved rules."""
        if declared is None:
            return cls()
        if isinstance(declared, CustomFields):
            return declared
        if not isinstance(declared, Mapping):
            raise ConfigurationError(f"custom_fields must be a mapping, got {type(declared).__name__}")
        unknown = set(declared) - {"feed", "item"}
        if unknown:
            raise ConfigurationError(f"Unknown custom_fields scopes: {sorted(unknown)}")
        return cls(feed=compile_rules(declared.get("feed")), item=compile_rules(declared.get("item")))


@dataclass(frozen=True)
class ParserOptions:
    """
    Everything a FeedParser needs, validated once at construction.

    custom_fields: {"feed": [...], "item": [...]} rules, see `custom_fields.compile_rule`
    default_rss: version used when an <rss> root has no usable version attribute
    tree_options: forwarded to lxml's XMLParser (plus `empty_tag`)
    keywords_as_array: iTunes keywords as a list (True) or a comma-joined string
    """
    custom_fields: CustomFields = field(default_factory=CustomFields)
    default_rss: Optional[float] = None
    tree_options: Mapping[str, Any] = field(default_factory=dict)
    keywords_as_array: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "custom_fields", CustomFields.build(self.custom_fields))
        if self.default_rss is not None:
            dialect_for_version(self.default_rss)
        if not isinstance(self.tree_options, Mapping):
            raise ConfigurationError("tree_options must be a mapping")
        tree_options = MappingProxyType(dict(self.tree_options))
        make_parser(tree_options)
        object.__setattr__(self, "tree_options", tree_options)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ParserOptions":
        """Build options from a plain mapping, accepting camelCase keys as well."""
        kwargs = {}
        for key, value in (data or {}).items():
            name = _ALIASES.get(key, key)
            if name not in cls.__dataclass_fields__:
                raise ConfigurationError(f"Unknown parser option: {key}")
            kwargs[name] = value
        return cls(**kwargs)
