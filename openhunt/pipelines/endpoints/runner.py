"""
Endpoint extraction runner.
Scans text from files, a whole workspace directory or a single remote URL
with the free-form category extractor.
"""

import asyncio
from typing import Dict, Iterable, List, Optional, Tuple

import aiohttp

from openhunt.analyzers.endpoint_extractor import (
    CATEGORY_IDS, extract_from_text, group_by_category
)
from openhunt.core.config import Config, get_default_config
from openhunt.core.logger import logger, set_silent
from openhunt.models import ExtractedItem
from openhunt.services.workspace import list_workspace_files, read_multiple_files


class EndpointRunner:

    def __init__(self, config: Optional[Config] = None, silent_mode: bool = False):
        self.config = config or get_default_config()
        self.silent_mode = silent_mode

        if silent_mode:
            set_silent(True)

    def run(self, text: str, categories: Optional[Iterable[str]] = None) -> List[ExtractedItem]:
        selected = list(categories) if categories else list(CATEGORY_IDS)
        items = extract_from_text(text, selected, self.config.extractor)

        if not self.silent_mode:
            counts = {cat: len(found) for cat, found in group_by_category(items).items()}
            logger.info(f"Extracted {len(items)} unique items: {counts}")

        return items

    def run_files(self, paths: Iterable[str], categories: Optional[Iterable[str]] = None) -> List[ExtractedItem]:
        paths = list(paths)
        if not self.silent_mode:
            logger.info(f"Reading {len(paths)} files")
        return self.run(read_multiple_files(paths), categories)

    def run_directory(self, root: str, categories: Optional[Iterable[str]] = None) -> List[ExtractedItem]:
        files = list_workspace_files(root, self.config.workspace)
        if not self.silent_mode:
            logger.info(f"Found {len(files)} workspace files under {root}")
        return self.run_files([f.path for f in files], categories)

    async def fetch_text(self, url: str) -> Tuple[Optional[str], Optional[str]]:
        headers = {'User-Agent': self.config.downloader.user_agent}
        timeout = aiohttp.ClientTimeout(total=self.config.downloader.timeout)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, headers=headers) as response:
                    if not 200 <= response.status < 300:
                        return None, f"HTTP {response.status}"
                    return await response.text(errors='replace'), None
        except asyncio.TimeoutError:
            return None, "Timeout"
        except aiohttp.ClientError as e:
            return None, f"Client error: {str(e)[:80]}"

    def run_url(self, url: str, categories: Optional[Iterable[str]] = None) -> Tuple[List[ExtractedItem], Optional[str]]:
        content, error = asyncio.run(self.fetch_text(url))
        if error:
            if not self.silent_mode:
                logger.warning(f"Could not fetch {url}: {error}")
            return [], error
        return self.run(content, categories), None

    @staticmethod
    def grouped(items: Iterable[ExtractedItem]) -> Dict[str, List[ExtractedItem]]:
        return group_by_category(items)
