"""
JavaScript batch download runner.
Drains a shared URL queue with a fixed pool of asyncio workers, saves each
response under a collision-free name and streams a progress event per URL.
"""

import asyncio
import inspect
import os
import re
from typing import Awaitable, Callable, List, Optional, Sequence, Union
from urllib.parse import urlsplit

import aiohttp

from openhunt.core.config import Config, get_default_config
from openhunt.core.logger import logger, set_silent
from openhunt.models import BatchState, DownloadProgress, DownloadResult, DownloadSummary
from openhunt.pipelines.downloader.controller import BatchController


ILLEGAL_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')

ProgressCallback = Callable[[DownloadProgress], Union[None, Awaitable[None]]]


def derive_filename(url: str) -> str:
    filename = urlsplit(url).path.rsplit('/', 1)[-1] or 'unknown'
    if not filename.endswith('.js'):
        filename += '.js'
    return ILLEGAL_FILENAME_CHARS.sub('_', filename)


def unique_destination(output_dir: str, filename: str) -> str:
    final_path = os.path.join(output_dir, filename)
    base, ext = os.path.splitext(filename)
    counter = 1
    while os.path.exists(final_path):
        final_path = os.path.join(output_dir, f"{base}_{counter}{ext}")
        counter += 1
    return final_path


def _describe(error: BaseException) -> str:
    return str(error) or error.__class__.__name__


class JsDownloadRunner:

    def __init__(self, config: Optional[Config] = None, silent_mode: bool = False):
        self.config = config or get_default_config()
        self.silent_mode = silent_mode

        if silent_mode:
            set_silent(True)

    async def download_file(self, url: str, output_dir: str, session: aiohttp.ClientSession) -> DownloadResult:
        headers = {'User-Agent': self.config.downloader.user_agent}

        try:
            async with session.get(url, headers=headers) as response:
                if not 200 <= response.status < 300:
                    return DownloadResult(url=url, success=False, error=f"HTTP {response.status}")
                content = await response.text(errors='replace')

            destination = unique_destination(output_dir, derive_filename(url))
            with open(destination, 'w', encoding='utf-8') as f:
                f.write(content)

            return DownloadResult(
                url=url,
                success=True,
                filename=os.path.basename(destination),
                size=len(content)
            )
        except asyncio.TimeoutError:
            return DownloadResult(url=url, success=False, error="Timeout")
        except Exception as e:
            return DownloadResult(url=url, success=False, error=_describe(e))

    async def _emit(self, on_progress: Optional[ProgressCallback], progress: DownloadProgress):
        if on_progress is None:
            return
        try:
            outcome = on_progress(progress)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            logger.error(f"Progress callback failed: {_describe(e)}")

    async def _worker(
        self,
        queue: asyncio.Queue,
        output_dir: str,
        session: aiohttp.ClientSession,
        controller: BatchController,
        results: List[DownloadResult],
        total: int,
        on_progress: Optional[ProgressCallback]
    ):
        while not controller.is_stopped:
            await controller.wait_while_paused()
            if controller.is_stopped:
                break

            try:
                url = queue.get_nowait()
            except asyncio.QueueEmpty:
                break

            result = await self.download_file(url, output_dir, session)
            results.append(result)

            if not self.silent_mode:
                if result.success:
                    logger.debug(f"[{len(results)}/{total}] {url} -> {result.filename}")
                else:
                    logger.warning(f"[{len(results)}/{total}] {url} failed: {result.error}")

            await self._emit(on_progress, DownloadProgress(
                completed=len(results),
                total=total,
                result=result
            ))

    async def run_batch(
        self,
        urls: Sequence[str],
        output_dir: str,
        concurrency: Optional[int] = None,
        controller: Optional[BatchController] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> List[DownloadResult]:
        controller = controller or BatchController(self.config.downloader.poll_interval)
        # a controller begun by the caller keeps any pause/stop sent before the workers start
        if controller.state in (BatchState.IDLE, BatchState.COMPLETED):
            controller.begin()

        results: List[DownloadResult] = []
        if not urls:
            controller.finish()
            return results

        try:
            os.makedirs(output_dir, exist_ok=True)
        except OSError as e:
            logger.error(f"Cannot create output directory {output_dir}: {e}")

        queue: asyncio.Queue = asyncio.Queue()
        for url in urls:
            queue.put_nowait(url)

        workers_count = min(self.config.downloader.clamp_concurrency(concurrency), len(urls))

        if not self.silent_mode:
            logger.info(f"Downloading {len(urls)} files into {output_dir} with {workers_count} workers")

        timeout = aiohttp.ClientTimeout(total=self.config.downloader.timeout)
        connector = aiohttp.TCPConnector(limit=workers_count)

        async with aiohttp.ClientSession(connector=connector, timeout=timeout) as session:
            workers = [
                self._worker(queue, output_dir, session, controller, results, len(urls), on_progress)
                for _ in range(workers_count)
            ]
            await asyncio.gather(*workers)

        controller.finish()

        if not self.silent_mode:
            successful = sum(1 for r in results if r.success)
            logger.info(f"Download {controller.state.value}: {successful}/{len(urls)} successful")

        return results

    def run(
        self,
        urls: Sequence[str],
        output_dir: str,
        concurrency: Optional[int] = None,
        controller: Optional[BatchController] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> DownloadSummary:
        controller = controller or BatchController(self.config.downloader.poll_interval)
        results = asyncio.run(self.run_batch(urls, output_dir, concurrency, controller, on_progress))
        return DownloadSummary.from_results(len(urls), results, stopped=controller.is_stopped)
