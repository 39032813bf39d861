"""
Copy and export payloads for scan results and download batches.
"""

import json
import os
from datetime import datetime
from typing import Dict, Iterable, List

from openhunt import __version__
from openhunt.analyzers.endpoint_extractor import group_by_category
from openhunt.core.logger import logger
from openhunt.models import DownloadResult, DownloadSummary, ExtractedItem, MatchResult


def _unique(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))


def unique_matches(results: Iterable[MatchResult]) -> List[str]:
    return _unique(
        value
        for result in results
        for pattern in result.per_pattern
        for value in pattern.matches
    )


def rule_matches(result: MatchResult) -> List[str]:
    return [value for pattern in result.per_pattern for value in pattern.matches]


def matches_as_text(results: Iterable[MatchResult]) -> str:
    return '\n'.join(unique_matches(results))


def unique_values(items: Iterable[ExtractedItem]) -> List[str]:
    return _unique(item.value for item in items)


def category_values(items: Iterable[ExtractedItem], category: str) -> List[str]:
    return _unique(item.value for item in items if item.category == category)


def items_as_json(items: Iterable[ExtractedItem]) -> str:
    output: Dict[str, List[str]] = {}
    for category, grouped in group_by_category(items).items():
        output[category] = _unique(i.value for i in grouped)
    return json.dumps(output, indent=2)


def successful_filenames(results: Iterable[DownloadResult]) -> str:
    return '\n'.join(r.filename or '' for r in results if r.success)


def failed_urls(results: Iterable[DownloadResult]) -> str:
    return '\n'.join(r.url for r in results if not r.success)


def write_export(filepath: str, payload: str) -> str:
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(filepath, 'w', encoding='utf-8') as f:
        f.write(payload)
    logger.info(f"Exported to {filepath}")
    return filepath


def summary_report(summary: DownloadSummary, output_dir: str) -> dict:
    return {
        'meta': {
            'tool': 'OpenHunt',
            'version': __version__,
            'generated_at': datetime.now().isoformat(),
            'output_dir': output_dir
        },
        'summary': {
            'total': summary.total,
            'successful': summary.successful,
            'failed': summary.failed,
            'stopped': summary.stopped
        },
        'results': [r.to_dict() for r in summary.results]
    }
