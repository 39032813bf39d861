"""
Configuration for the extractors, the rule registry and the downloader.
Defaults can be overridden through OPENHUNT_* environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional


DEFAULT_USER_AGENT = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36'

MIN_CONCURRENCY = 1
MAX_CONCURRENCY = 50


@dataclass
class DownloaderConfig:
    concurrency: int = 10
    timeout: float = 60.0
    poll_interval: float = 0.1
    user_agent: str = DEFAULT_USER_AGENT
    extensions: str = ".js"

    def clamp_concurrency(self, value: Optional[int] = None) -> int:
        value = self.concurrency if value is None else value
        return max(MIN_CONCURRENCY, min(MAX_CONCURRENCY, int(value)))


@dataclass
class ExtractorConfig:
    min_length: int = 3
    max_length: int = 500
    context_chars: int = 30


@dataclass
class RegistryConfig:
    patterns_path: Optional[str] = None


@dataclass
class WorkspaceConfig:
    max_files: int = 500
    include_extensions: List[str] = field(default_factory=lambda: [
        'js', 'ts', 'jsx', 'tsx', 'json', 'html', 'css', 'scss', 'py', 'rb',
        'go', 'rs', 'java', 'php', 'xml', 'yml', 'yaml', 'md', 'txt', 'sh',
        'bash', 'zsh', 'env', 'config', 'conf'
    ])
    exclude_dirs: List[str] = field(default_factory=lambda: [
        'node_modules', '.git', 'dist', 'build', '.vscode', 'coverage'
    ])
    exclude_globs: List[str] = field(default_factory=lambda: [
        '*.min.js', '*.min.css', 'package-lock.json', 'yarn.lock', 'bun.lock'
    ])


@dataclass
class Config:
    downloader: DownloaderConfig = field(default_factory=DownloaderConfig)
    extractor: ExtractorConfig = field(default_factory=ExtractorConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    workspace: WorkspaceConfig = field(default_factory=WorkspaceConfig)
    output_dir: str = "hunt_output"


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


def get_default_config() -> Config:
    config = Config()

    config.downloader.concurrency = config.downloader.clamp_concurrency(
        _env_int("OPENHUNT_CONCURRENCY", config.downloader.concurrency)
    )
    config.downloader.timeout = _env_float("OPENHUNT_TIMEOUT", config.downloader.timeout)
    config.downloader.extensions = os.environ.get("OPENHUNT_EXTENSIONS", config.downloader.extensions)
    config.registry.patterns_path = os.environ.get("OPENHUNT_PATTERNS_FILE") or None
    config.output_dir = os.environ.get("OPENHUNT_OUTPUT_DIR", config.output_dir)

    return config
