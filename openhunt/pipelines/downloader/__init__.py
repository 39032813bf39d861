"""
JavaScript batch downloader.
Fetches URL lists into a directory with a bounded worker pool and
pause/resume/stop control.
"""

from .controller import BatchController
from .runner import JsDownloadRunner, derive_filename, unique_destination
from .url_filter import parse_url_list, parse_extensions, filter_urls_by_extension

__all__ = [
    "BatchController",
    "JsDownloadRunner",
    "derive_filename",
    "unique_destination",
    "parse_url_list",
    "parse_extensions",
    "filter_urls_by_extension",
]
