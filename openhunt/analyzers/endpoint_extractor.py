"""
Free-form multi-category extractor for JavaScript bundles and source text.
Pulls API endpoints, URLs, secrets, domains, emails and query parameters,
deduplicated per category with a short context window for review.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Pattern, Sequence, Union

from openhunt.core.config import ExtractorConfig
from openhunt.models import ExtractedItem


QUOTE_TRIM_PATTERN = re.compile(r"""^['"`]|['"`]$""")


@dataclass
class ExtractionCategory:
    id: str
    name: str
    description: str
    patterns: List[Pattern] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "patterns": [p.pattern for p in self.patterns]
        }


TLDS = (
    'com|org|net|io|dev|app|co|ai|xyz|info|biz|us|uk|de|fr|jp|cn|ru|br|in|au|ca|nl|se|no|fi|dk|pl|es|it|ch|at|be|cz|'
    'hu|ro|bg|hr|sk|si|lt|lv|ee|ie|pt|gr|cy|mt|lu|is|li|mc|ad|sm|va|by|ua|kz|ge|am|az|md|kg|tj|tm|uz|mn|af|pk|bd|'
    'lk|np|bt|mv|mm|th|vn|la|kh|sg|my|id|ph|tw|hk|mo|kr|nz'
)


EXTRACTION_CATEGORIES: List[ExtractionCategory] = [
    ExtractionCategory(
        id='endpoints',
        name='API Endpoints',
        description='REST API routes and paths',
        patterns=[
            re.compile(r"""['"`]/api/[a-zA-Z0-9/_\-{}:?&=.]+['"`]"""),
            re.compile(r"""['"`]/v[0-9]+/[a-zA-Z0-9/_\-{}:?&=.]+['"`]"""),
            re.compile(r"""['"`]/graphql['"`]""", re.IGNORECASE),
            re.compile(r"""['"`]/rest/[a-zA-Z0-9/_\-{}:?&=.]+['"`]"""),
            re.compile(r"""fetch\s*\(\s*['"`]([^'"`]+)['"`]"""),
            re.compile(r"""axios\.[a-z]+\s*\(\s*['"`]([^'"`]+)['"`]"""),
            re.compile(r"""\.get\s*\(\s*['"`]([^'"`]+)['"`]"""),
            re.compile(r"""\.post\s*\(\s*['"`]([^'"`]+)['"`]"""),
            re.compile(r"""\.put\s*\(\s*['"`]([^'"`]+)['"`]"""),
            re.compile(r"""\.delete\s*\(\s*['"`]([^'"`]+)['"`]"""),
            re.compile(r"""\.patch\s*\(\s*['"`]([^'"`]+)['"`]"""),
            re.compile(r"""['"`]/[a-zA-Z0-9]+/[a-zA-Z0-9/_\-{}:]+['"`]"""),
        ]
    ),
    ExtractionCategory(
        id='urls',
        name='Full URLs',
        description='Complete HTTP/HTTPS URLs',
        patterns=[
            re.compile(r"""https?://[a-zA-Z0-9][a-zA-Z0-9-]*\.[a-zA-Z]{2,}[^\s'"`<>)}\]\\]*""", re.IGNORECASE),
            re.compile(r"""['"`](https?://[^'"`\s]+)['"`]"""),
        ]
    ),
    ExtractionCategory(
        id='secrets',
        name='Potential Secrets',
        description='API keys, tokens, credentials',
        patterns=[
            re.compile(
                r"""['"`](?:sk|pk|api|key|token|secret|password|auth|bearer|access)[_-]?[a-zA-Z0-9]{16,}['"`]""",
                re.IGNORECASE
            ),
            re.compile(r"""['"`]AKIA[0-9A-Z]{16}['"`]"""),
            re.compile(r"""['"`]ghp_[a-zA-Z0-9]{36}['"`]"""),
            re.compile(r"""['"`]gho_[a-zA-Z0-9]{36}['"`]"""),
            re.compile(r"""['"`]ghu_[a-zA-Z0-9]{36}['"`]"""),
            re.compile(r"""['"`]ghs_[a-zA-Z0-9]{36}['"`]"""),
            re.compile(r"""['"`]ghr_[a-zA-Z0-9]{36}['"`]"""),
            re.compile(r"""['"`]glpat-[a-zA-Z0-9\-_]{20,}['"`]"""),
            re.compile(r"""['"`]xox[baprs]-[a-zA-Z0-9\-]+['"`]"""),
            re.compile(r"""['"`]sk-[a-zA-Z0-9]{32,}['"`]"""),
            re.compile(r"""['"`]AIza[0-9A-Za-z\-_]{35}['"`]"""),
            re.compile(r"""['"`][0-9a-f]{32}['"`]"""),
            re.compile(r"""['"`][A-Za-z0-9+/]{40,}={0,2}['"`]"""),
            re.compile(r"""api[_-]?key\s*[:=]\s*['"`]([^'"`]+)['"`]""", re.IGNORECASE),
            re.compile(r"""secret\s*[:=]\s*['"`]([^'"`]+)['"`]""", re.IGNORECASE),
            re.compile(r"""password\s*[:=]\s*['"`]([^'"`]+)['"`]""", re.IGNORECASE),
            re.compile(r"""token\s*[:=]\s*['"`]([^'"`]+)['"`]""", re.IGNORECASE),
        ]
    ),
    ExtractionCategory(
        id='domains',
        name='Domains & Subdomains',
        description='Domain names found in code',
        patterns=[
            re.compile(r'[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.(?:' + TLDS + r')', re.IGNORECASE),
            re.compile(r"""['"`]([a-z0-9]+(?:\.[a-z0-9]+)*\.[a-z]{2,})['"`]""", re.IGNORECASE),
        ]
    ),
    ExtractionCategory(
        id='emails',
        name='Email Addresses',
        description='Email addresses in code',
        patterns=[
            re.compile(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}'),
        ]
    ),
    ExtractionCategory(
        id='params',
        name='Query Parameters',
        description='URL query parameters',
        patterns=[
            re.compile(r"""[?&]([a-zA-Z_][a-zA-Z0-9_]*=[^&#\s'"`<>]*)"""),
            re.compile(r"""params\[['"`]([a-zA-Z_][a-zA-Z0-9_]*)['"`]\]"""),
            re.compile(r'query\.([a-zA-Z_][a-zA-Z0-9_]*)'),
            re.compile(r"""searchParams\.get\(['"`]([^'"`]+)['"`]\)"""),
            re.compile(r"""getParam\(['"`]([^'"`]+)['"`]\)"""),
        ]
    ),
]

CATEGORY_IDS = [c.id for c in EXTRACTION_CATEGORIES]


def get_category(category_id: str) -> Optional[ExtractionCategory]:
    for category in EXTRACTION_CATEGORIES:
        if category.id == category_id:
            return category
    return None


def resolve_categories(selected: Iterable[str]) -> List[ExtractionCategory]:
    """Selected ids in canonical order; unknown ids are dropped."""
    wanted = set(selected)
    return [c for c in EXTRACTION_CATEGORIES if c.id in wanted]


def _normalize_categories(categories: Sequence[Union[str, ExtractionCategory]]) -> List[ExtractionCategory]:
    """Ids are resolved one by one; built-in categories run in canonical order, custom ones after."""
    selected: List[ExtractionCategory] = []
    for category in categories:
        if isinstance(category, str):
            category = get_category(category)
        if isinstance(category, ExtractionCategory) and category not in selected:
            selected.append(category)

    rank = {c.id: i for i, c in enumerate(EXTRACTION_CATEGORIES)}
    return sorted(selected, key=lambda c: rank.get(c.id, len(rank)))


def clean_value(value: str) -> str:
    return QUOTE_TRIM_PATTERN.sub('', value).strip()


def context_window(text: str, start: int, end: int, chars: int = 30) -> str:
    lo = max(0, start - chars)
    hi = min(len(text), end + chars)
    return text[lo:hi].replace('\n', ' ').strip()


def extract_from_text(
    text: str,
    categories: Sequence[Union[str, ExtractionCategory]],
    config: Optional[ExtractorConfig] = None
) -> List[ExtractedItem]:
    config = config or ExtractorConfig()
    results: List[ExtractedItem] = []
    seen = set()

    if not text or not text.strip() or not categories:
        return results

    selected = _normalize_categories(categories)

    for category in selected:
        for pattern in category.patterns:
            for match in pattern.finditer(text):
                value = match.group(1) if pattern.groups and match.group(1) else match.group(0)
                cleaned = clean_value(value)

                if len(cleaned) < config.min_length:
                    continue
                if len(cleaned) > config.max_length:
                    continue

                key = (category.id, cleaned)
                if key in seen:
                    continue
                seen.add(key)

                context = context_window(text, match.start(), match.end(), config.context_chars)
                results.append(ExtractedItem(
                    value=cleaned,
                    category=category.id,
                    context=context if context != cleaned else None
                ))

    return results


def group_by_category(items: Iterable[ExtractedItem]) -> Dict[str, List[ExtractedItem]]:
    grouped: Dict[str, List[ExtractedItem]] = {}
    for item in items:
        grouped.setdefault(item.category, []).append(item)
    return grouped
