from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .exceptions import ConfigurationError
from .models import FieldRule, ParsedNode
from .normalizer import copy_fields

logger = logging.getLogger(__name__)

_KEEP_ARRAY_KEYS = ("keep_array", "keepArray")


def _keep_array(options: Any) -> bool:
    if options is None:
        return False
    if not isinstance(options, Mapping):
        raise ConfigurationError(f"Custom field options must be a mapping, got {options!r}")
    unknown = set(options) - set(_KEEP_ARRAY_KEYS)
    if unknown:
        raise ConfigurationError(f"Unknown custom field options: {sorted(unknown)}")
    return any(bool(options.get(k)) for k in _KEEP_ARRAY_KEYS)


def compile_rule(rule: Any) -> FieldRule:
    """
    Resolve one caller-declared rule.

    Accepted shapes:
    - "tag"                              copy <tag> under "tag"
    - ("tag", "key")                     copy <tag> under "key"
    - ("tag", "key", {"keep_array": True})  always a list, even for one match
    - FieldRule                          used as-is
    """
    if isinstance(rule, FieldRule):
        return rule
    if isinstance(rule, str):
        if not rule.strip("/"):
            raise ConfigurationError("Custom field name must not be empty")
        return FieldRule(source=rule, dest=rule)
    if isinstance(rule, (list, tuple)) and 1 <= len(rule) <= 3:
        source = rule[0]
        dest = rule[1] if len(rule) > 1 else source
        options = rule[2] if len(rule) > 2 else None
        if not isinstance(source, str) or not source.strip("/"):
            raise ConfigurationError(f"Invalid custom field source: {source!r}")
        if not isinstance(dest, str) or not dest:
            raise ConfigurationError(f"Invalid custom field destination: {dest!r}")
        return FieldRule(source=source, dest=dest, keep_array=_keep_array(options))
    raise ConfigurationError(f"Invalid custom field rule: {rule!r}")


def compile_rules(rules: Optional[Iterable[Any]]) -> Tuple[FieldRule, ...]:
    if rules is None:
        return ()
    if isinstance(rules, (str, bytes)):
        raise ConfigurationError("Custom fields must be a list of rules, not a string")
    return tuple(compile_rule(s) for s in rules)


def inject(node: ParsedNode, dest: Dict[str, Any], rules: Tuple[FieldRule, ...]) -> None:
    """
    Apply custom field rules on top of an already normalized feed or item.

    Rules matching nothing leave `dest` untouched.
    """
    if not rules:
        return
    before = {r.dest: dest[r.dest] for r in rules if r.dest in dest}
    written = copy_fields(node, dest, rules)
    for key in written:
        if key in before and before[key] != dest[key]:
            logger.debug("Custom field %r replaced value from normalized output", key)
