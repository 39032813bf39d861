"""
Workspace file access for the extractors.
Lists scannable source files under a root and concatenates several files
into one text blob with per-file separators.
"""

import fnmatch
import os
from pathlib import Path
from typing import Iterable, List, Optional

from openhunt.core.config import WorkspaceConfig
from openhunt.core.logger import logger
from openhunt.models import WorkspaceFile


def _is_excluded(filename: str, config: WorkspaceConfig) -> bool:
    return any(fnmatch.fnmatch(filename, glob) for glob in config.exclude_globs)


def _is_included(filename: str, config: WorkspaceConfig) -> bool:
    suffix = filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''
    return suffix in config.include_extensions


def list_workspace_files(root: str, config: Optional[WorkspaceConfig] = None) -> List[WorkspaceFile]:
    config = config or WorkspaceConfig()
    root_path = Path(root)
    files: List[WorkspaceFile] = []

    if not root_path.is_dir():
        return files

    for dirpath, dirnames, filenames in os.walk(root_path):
        dirnames[:] = sorted(d for d in dirnames if d not in config.exclude_dirs)

        for filename in sorted(filenames):
            if not _is_included(filename, config) or _is_excluded(filename, config):
                continue

            full_path = os.path.join(dirpath, filename)
            files.append(WorkspaceFile(
                name=filename,
                path=full_path,
                relative_path=os.path.relpath(full_path, root_path)
            ))

            if len(files) >= config.max_files:
                break

        if len(files) >= config.max_files:
            break

    return sorted(files, key=lambda f: f.relative_path)


def read_text_file(path: str) -> str:
    with open(path, 'r', encoding='utf-8', errors='replace') as f:
        return f.read()


def read_multiple_files(paths: Iterable[str]) -> str:
    combined = ''
    for file_path in paths:
        try:
            content = read_text_file(file_path)
        except OSError as e:
            logger.error(f"Failed to read {file_path}: {e}")
            continue
        combined += f"\n\n// === {os.path.basename(file_path)} ===\n\n"
        combined += content
    return combined.strip()
