"""Filter rule matching.

A record matches a rule list when every rule matches (an empty list matches
everything). Within one rule a string pattern is a glob, a list pattern is
a set of regular expression alternatives of which any one must match.
"""

import re
from fnmatch import fnmatchcase
from typing import Any, Iterable, List, Union

from autostore.config import FilterRule
from .properties import MISSING, resolve_property


def coerce_value(value: Any) -> str:
    """Render a property value as the string patterns are matched against."""
    if value is None or value is MISSING:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def glob_match(value: str, pattern: str, nocase: bool = False) -> bool:
    """Match a glob; a leading '!' negates the pattern.

    Values are titles and index values, not paths: '*' also matches '/'
    and braces are literal. '?' and '[...]' classes work as in fnmatch.
    """
    negated = False
    while pattern.startswith("!"):
        negated = not negated
        pattern = pattern[1:]
    if nocase:
        value, pattern = value.lower(), pattern.lower()
    return fnmatchcase(value, pattern) != negated


def regex_match(value: str, sources: Iterable[str], nocase: bool = False) -> bool:
    """True if any of the regular expressions matches the value."""
    flags = re.IGNORECASE if nocase else 0
    return any(re.search(source, value, flags) for source in sources)


def _as_list(pattern: Union[str, List[str]]) -> List[str]:
    return [pattern] if isinstance(pattern, str) else list(pattern)


def rule_matches(rule: FilterRule, record: Any) -> bool:
    """Evaluate a single filter rule against a record."""
    raw_value = resolve_property(rule.name, record)
    if raw_value is MISSING and rule.options.missing == "fail":
        return False

    value = coerce_value(raw_value)
    patterns = _as_list(rule.pattern)
    nocase = rule.options.nocase

    if not patterns:
        # An empty alternatives list fails closed, negated or not
        return False

    if rule.syntax == "glob":
        result = any(glob_match(value, pattern, nocase) for pattern in patterns)
    else:
        result = regex_match(value, patterns, nocase)

    return not result if rule.options.negate else result


def matches(rules: Iterable[FilterRule], record: Any) -> bool:
    """True if every rule matches the record."""
    return all(rule_matches(rule, record) for rule in rules)
