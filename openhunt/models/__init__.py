"""
Data models shared by the pattern engine, the extractors and the downloader.
Defines rule definitions, match results and download records.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any, Pattern, Tuple, Union
from enum import Enum
import re


REGEX_MARKERS = ('[', '(', '*', '+', '\\')


class RuleCategory(Enum):
    VULNERABILITY = "vulnerability"
    SECRETS = "secrets"
    DEBUG = "debug"
    INTERESTING = "interesting"


class BatchState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    STOPPED = "stopped"


@dataclass(frozen=True)
class LiteralPattern:
    """Parameter-name style token, matched with its attached value blob."""
    token: str
    compiled: Optional[Pattern] = field(default=None, compare=False, repr=False)

    @property
    def source(self) -> str:
        return self.token


@dataclass(frozen=True)
class RegexPattern:
    expr: str
    compiled: Optional[Pattern] = field(default=None, compare=False, repr=False)

    @property
    def source(self) -> str:
        return self.expr


PatternSpec = Union[LiteralPattern, RegexPattern]


def is_regex_like(pattern: str) -> bool:
    return any(marker in pattern for marker in REGEX_MARKERS)


def compile_pattern(pattern: str) -> PatternSpec:
    """
    Classify a raw pattern string and compile it once.
    An invalid expression yields a pattern with compiled=None, which the
    match engine skips.
    """
    if is_regex_like(pattern):
        try:
            compiled = re.compile(pattern, re.IGNORECASE)
        except re.error:
            compiled = None
        return RegexPattern(expr=pattern, compiled=compiled)

    escaped = re.escape(pattern)
    try:
        compiled = re.compile(
            r'(?:[?&]|(?<![A-Za-z0-9_]))' + escaped + r'[^&\s"\'<>]*',
            re.IGNORECASE
        )
    except re.error:
        compiled = None
    return LiteralPattern(token=pattern, compiled=compiled)


@dataclass(frozen=True)
class Rule:
    name: str
    description: str
    category: RuleCategory
    patterns: Tuple[PatternSpec, ...] = ()

    @property
    def raw_patterns(self) -> List[str]:
        return [p.source for p in self.patterns]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "patterns": self.raw_patterns
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Rule":
        patterns = data["patterns"]
        if not isinstance(patterns, list) or not all(isinstance(p, str) for p in patterns):
            raise ValueError(f"Rule {data.get('name')!r} has malformed patterns")
        return cls(
            name=str(data["name"]),
            description=str(data.get("description", "")),
            category=RuleCategory(data["category"]),
            patterns=tuple(compile_pattern(p) for p in patterns)
        )


@dataclass
class PatternMatch:
    pattern: str
    matches: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "pattern": self.pattern,
            "matches": list(self.matches)
        }


@dataclass
class MatchResult:
    rule_name: str
    category: str
    per_pattern: List[PatternMatch] = field(default_factory=list)

    @property
    def total_matches(self) -> int:
        return sum(len(p.matches) for p in self.per_pattern)

    def to_dict(self) -> dict:
        return {
            "rule_name": self.rule_name,
            "category": self.category,
            "per_pattern": [p.to_dict() for p in self.per_pattern]
        }


@dataclass
class ExtractedItem:
    value: str
    category: str
    context: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "value": self.value,
            "category": self.category
        }
        if self.context is not None:
            data["context"] = self.context
        return data


@dataclass
class WorkspaceFile:
    name: str
    path: str
    relative_path: str

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "path": self.path,
            "relative_path": self.relative_path
        }


@dataclass
class DownloadResult:
    url: str
    success: bool
    filename: Optional[str] = None
    size: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "success": self.success,
            "filename": self.filename,
            "size": self.size,
            "error": self.error
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DownloadResult":
        return cls(**data)


@dataclass
class DownloadProgress:
    completed: int
    total: int
    result: DownloadResult

    def to_dict(self) -> dict:
        return {
            "completed": self.completed,
            "total": self.total,
            "result": self.result.to_dict()
        }


@dataclass
class DownloadSummary:
    total: int
    successful: int
    failed: int
    stopped: bool = False
    results: List[DownloadResult] = field(default_factory=list)

    @classmethod
    def from_results(cls, total: int, results: List[DownloadResult], stopped: bool = False) -> "DownloadSummary":
        successful = sum(1 for r in results if r.success)
        return cls(
            total=total,
            successful=successful,
            failed=len(results) - successful,
            stopped=stopped,
            results=list(results)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "stopped": self.stopped,
            "results": [r.to_dict() for r in self.results]
        }
