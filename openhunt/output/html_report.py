"""
HTML report for rule scans and endpoint extraction.
"""

import os
from datetime import datetime
from typing import List, Optional

from jinja2 import Environment, BaseLoader

from openhunt.analyzers.endpoint_extractor import EXTRACTION_CATEGORIES, group_by_category
from openhunt.models import ExtractedItem, MatchResult


HTML_TEMPLATE = r'''<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>OpenHunt Report - {{ source }}</title>
<style>
  body { background: #0d1117; color: #c9d1d9; font-family: -apple-system, "Segoe UI", sans-serif; margin: 0; padding: 24px; }
  h1 { color: #58a6ff; font-size: 22px; margin-bottom: 4px; }
  h2 { color: #e6edf3; font-size: 16px; border-bottom: 1px solid #30363d; padding-bottom: 6px; margin-top: 28px; }
  h3 { font-size: 13px; color: #8b949e; margin: 14px 0 6px; }
  .meta { color: #8b949e; font-size: 12px; }
  .stats { display: flex; gap: 12px; margin-top: 16px; }
  .stat { background: #161b22; border: 1px solid #30363d; border-radius: 6px; padding: 10px 16px; }
  .stat b { display: block; font-size: 20px; color: #e6edf3; }
  .cat-vulnerability { color: #f85149; } .cat-secrets { color: #d29922; }
  .cat-debug { color: #a371f7; } .cat-interesting { color: #39c5cf; }
  table { width: 100%; border-collapse: collapse; font-size: 12px; }
  td { border-bottom: 1px solid #21262d; padding: 4px 8px; vertical-align: top; }
  code { font-family: "SFMono-Regular", Consolas, monospace; word-break: break-all; }
  .ctx { color: #8b949e; }
</style>
</head>
<body>
<h1>OpenHunt Report</h1>
<div class="meta">Source: {{ source }} &middot; Generated: {{ scan_time }}</div>

<div class="stats">
  <div class="stat"><b>{{ stats.rules_matched }}</b>rules matched</div>
  <div class="stat"><b>{{ stats.rule_matches }}</b>rule matches</div>
  <div class="stat"><b>{{ stats.extracted }}</b>extracted items</div>
</div>

{% if match_results %}
<h2>Pattern Matches</h2>
{% for result in match_results %}
<h3><span class="cat-{{ result.category }}">[{{ result.category }}]</span> {{ result.rule_name }}</h3>
<table>
  {% for pm in result.per_pattern %}
  {% for value in pm.matches %}
  <tr><td width="25%"><code>{{ pm.pattern }}</code></td><td><code>{{ value }}</code></td></tr>
  {% endfor %}
  {% endfor %}
</table>
{% endfor %}
{% endif %}

{% if extracted %}
<h2>Extracted Items</h2>
{% for category in categories %}
{% if extracted[category.id] %}
<h3>{{ category.name }} ({{ extracted[category.id]|length }})</h3>
<table>
  {% for item in extracted[category.id] %}
  <tr><td width="40%"><code>{{ item.value }}</code></td><td class="ctx"><code>{{ item.context or '' }}</code></td></tr>
  {% endfor %}
</table>
{% endif %}
{% endfor %}
{% endif %}
</body>
</html>
'''


class HTMLReportGenerator:

    def __init__(self):
        self.env = Environment(loader=BaseLoader(), autoescape=True)
        self.template = self.env.from_string(HTML_TEMPLATE)

    def render(
        self,
        source: str,
        match_results: Optional[List[MatchResult]] = None,
        extracted: Optional[List[ExtractedItem]] = None
    ) -> str:
        match_results = match_results or []
        extracted = extracted or []

        stats = {
            'rules_matched': len(match_results),
            'rule_matches': sum(r.total_matches for r in match_results),
            'extracted': len(extracted)
        }

        return self.template.render(
            source=source,
            scan_time=datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
            stats=stats,
            match_results=match_results,
            extracted=group_by_category(extracted),
            categories=EXTRACTION_CATEGORIES
        )

    def generate(
        self,
        source: str,
        output_dir: str,
        match_results: Optional[List[MatchResult]] = None,
        extracted: Optional[List[ExtractedItem]] = None
    ) -> str:
        html_content = self.render(source, match_results, extracted)

        os.makedirs(output_dir, exist_ok=True)
        safe_source = source.replace('/', '_').replace(':', '_').replace('.', '_')
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        report_path = os.path.join(output_dir, f"{safe_source}_{timestamp}_report.html")

        with open(report_path, 'w', encoding='utf-8') as f:
            f.write(html_content)

        return report_path
