"""
Pattern match engine for gf-style rules.
Applies literal-token and regex patterns to a text blob and returns
per-pattern deduplicated matches in first-occurrence order.
"""

from typing import Iterable, List, Sequence, Union

from openhunt.models import (
    LiteralPattern, PatternMatch, PatternSpec, compile_pattern
)


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    ordered = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


def _strip_separator(value: str) -> str:
    if value[:1] in ('?', '&'):
        return value[1:]
    return value


def match_pattern(text: str, spec: PatternSpec) -> List[str]:
    if spec.compiled is None:
        return []

    found = (m.group(0) for m in spec.compiled.finditer(text))
    if isinstance(spec, LiteralPattern):
        found = (_strip_separator(m) for m in found)

    return _unique(found)


def find_matches(text: str, patterns: Sequence[Union[str, PatternSpec]]) -> List[PatternMatch]:
    results: List[PatternMatch] = []

    if not text or not patterns:
        return results

    for pattern in patterns:
        spec = compile_pattern(pattern) if isinstance(pattern, str) else pattern
        if spec.compiled is None:
            continue

        matches = match_pattern(text, spec)
        if matches:
            results.append(PatternMatch(pattern=spec.source, matches=matches))

    return results
