"""
Rule registry for the gf-style pattern extractor.
Loads the categorized rule table from JSON once and serves it to callers.
A missing or malformed table yields an empty rule set, never an exception.
"""

import json
from pathlib import Path
from typing import Iterable, List, Optional, Union

from openhunt.core.logger import logger
from openhunt.models import Rule, RuleCategory


DEFAULT_PATTERNS_PATH = Path(__file__).resolve().parent.parent / "data" / "patterns.json"

CATEGORY_ORDER = [
    RuleCategory.VULNERABILITY,
    RuleCategory.SECRETS,
    RuleCategory.DEBUG,
    RuleCategory.INTERESTING,
]


def list_categories() -> List[RuleCategory]:
    return list(CATEGORY_ORDER)


def filter_by_category(rules: Iterable[Rule], category: Union[RuleCategory, str]) -> List[Rule]:
    if isinstance(category, str):
        try:
            category = RuleCategory(category)
        except ValueError:
            return []
    return [rule for rule in rules if rule.category == category]


class RuleRegistry:

    def __init__(self, patterns_path: Optional[Union[str, Path]] = None):
        self.patterns_path = Path(patterns_path) if patterns_path else DEFAULT_PATTERNS_PATH
        self._rules: Optional[List[Rule]] = None

    def _read_rules(self) -> List[Rule]:
        with open(self.patterns_path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        entries = data["patterns"]
        if not isinstance(entries, list):
            raise ValueError("'patterns' must be a list")

        return [Rule.from_dict(entry) for entry in entries]

    def load(self) -> List[Rule]:
        if self._rules is not None:
            return list(self._rules)

        try:
            rules = self._read_rules()
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.debug(f"Could not load rules from {self.patterns_path}: {e}")
            return []

        self._rules = rules
        logger.debug(f"Loaded {len(rules)} rules from {self.patterns_path}")
        return list(rules)

    def list_categories(self) -> List[RuleCategory]:
        return list_categories()

    def by_category(self, category: Union[RuleCategory, str]) -> List[Rule]:
        return filter_by_category(self.load(), category)

    def get(self, name: str) -> Optional[Rule]:
        for rule in self.load():
            if rule.name == name:
                return rule
        return None

    def resolve(self, names: Iterable[str]) -> List[Rule]:
        """Rules for the selected names, in selection order; unknown names are dropped."""
        by_name = {rule.name: rule for rule in self.load()}
        return [by_name[name] for name in names if name in by_name]

    def grouped(self) -> List[tuple]:
        rules = self.load()
        return [(category, filter_by_category(rules, category)) for category in CATEGORY_ORDER]
