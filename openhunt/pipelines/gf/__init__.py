"""
Rule scan pipeline.
Runs selected gf-style rules over a text blob and reports per-rule matches.
"""

from .runner import GfRunner, extract_all

__all__ = ["GfRunner", "extract_all"]
