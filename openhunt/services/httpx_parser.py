"""
Parser for httpx probe output (JSON lines or a single JSON document).
"""

import json
from typing import Any, Dict, List


def parse_httpx_output(content: str) -> List[Dict[str, Any]]:
    results: List[Dict[str, Any]] = []

    for line in content.strip().split('\n'):
        if not line.strip():
            continue
        try:
            parsed = json.loads(line)
        except ValueError:
            continue
        if isinstance(parsed, list):
            results.extend(item for item in parsed if isinstance(item, dict))
        elif isinstance(parsed, dict):
            results.append(parsed)

    if results:
        return results

    try:
        parsed = json.loads(content)
    except ValueError:
        return []

    if isinstance(parsed, list):
        return [item for item in parsed if isinstance(item, dict)]
    if isinstance(parsed, dict):
        return [parsed]
    return []


def summarize_httpx(records: List[Dict[str, Any]]) -> Dict[str, Any]:
    status_codes: Dict[str, int] = {}
    technologies: Dict[str, int] = {}
    hosts = set()

    for record in records:
        code = record.get('status_code', record.get('status-code'))
        if code is not None:
            status_codes[str(code)] = status_codes.get(str(code), 0) + 1

        techs = record.get('tech') or record.get('technologies') or []
        if isinstance(techs, str):
            techs = [techs]
        for tech in techs:
            if isinstance(tech, str):
                technologies[tech] = technologies.get(tech, 0) + 1

        host = record.get('host') or record.get('input') or record.get('url')
        if isinstance(host, str) and host:
            hosts.add(host)

    return {
        'total': len(records),
        'unique_hosts': len(hosts),
        'status_codes': dict(sorted(status_codes.items())),
        'technologies': dict(sorted(technologies.items(), key=lambda x: -x[1]))
    }


def records_as_text(records: List[Dict[str, Any]]) -> str:
    """Flatten records into one blob so the extractors can scan probe output."""
    return '\n'.join(json.dumps(record, ensure_ascii=False) for record in records)
