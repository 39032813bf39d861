"""
Rule scan runner.
Resolves selected rule names through the registry and runs every pattern of
every rule over the input text. Duplicate values across patterns or rules
are kept, one entry per pattern that produced them.
"""

from typing import Dict, Iterable, List, Optional, Sequence

from openhunt.analyzers.pattern_engine import find_matches
from openhunt.core.config import Config, get_default_config
from openhunt.core.logger import logger, set_silent
from openhunt.models import MatchResult, Rule, RuleCategory
from openhunt.services.rule_registry import RuleRegistry, filter_by_category


def extract_all(text: str, selected_rules: Sequence[Rule]) -> List[MatchResult]:
    results: List[MatchResult] = []
    for rule in selected_rules:
        per_pattern = find_matches(text, rule.patterns)
        if per_pattern:
            results.append(MatchResult(
                rule_name=rule.name,
                category=rule.category.value,
                per_pattern=per_pattern
            ))
    return results


class GfRunner:

    def __init__(
        self,
        config: Optional[Config] = None,
        registry: Optional[RuleRegistry] = None,
        silent_mode: bool = False
    ):
        self.config = config or get_default_config()
        self.registry = registry or RuleRegistry(self.config.registry.patterns_path)
        self.silent_mode = silent_mode

        if silent_mode:
            set_silent(True)

    def select_rules(
        self,
        rule_names: Optional[Iterable[str]] = None,
        categories: Optional[Iterable[str]] = None
    ) -> List[Rule]:
        if rule_names:
            return self.registry.resolve(rule_names)

        rules = self.registry.load()
        if categories:
            wanted = set(categories)
            return [rule for rule in rules if rule.category.value in wanted]
        return rules

    def run(
        self,
        text: str,
        rule_names: Optional[Iterable[str]] = None,
        categories: Optional[Iterable[str]] = None
    ) -> List[MatchResult]:
        rules = self.select_rules(rule_names, categories)

        if not self.silent_mode:
            logger.info(f"Scanning {len(text)} characters with {len(rules)} rules")

        results = extract_all(text, rules)

        if not self.silent_mode:
            total = sum(r.total_matches for r in results)
            logger.info(f"Rules with matches: {len(results)}/{len(rules)}, total matches: {total}")

        return results

    def rules_by_category(self) -> Dict[RuleCategory, List[Rule]]:
        rules = self.registry.load()
        return {category: filter_by_category(rules, category) for category in self.registry.list_categories()}

    @staticmethod
    def count_by_category(results: Iterable[MatchResult]) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for result in results:
            counts[result.category] = counts.get(result.category, 0) + result.total_matches
        return counts
