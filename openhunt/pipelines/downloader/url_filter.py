"""
URL list helpers for the downloader: scheme filtering and extension allow-lists.
"""

from typing import Iterable, List, Optional


def parse_url_list(text: str) -> List[str]:
    urls = []
    for line in text.split('\n'):
        line = line.strip()
        if line and (line.startswith('http://') or line.startswith('https://')):
            urls.append(line)
    return urls


def load_url_file(filepath: str) -> List[str]:
    with open(filepath, 'r', encoding='utf-8', errors='replace') as f:
        return parse_url_list(f.read())


def parse_extensions(extensions: Optional[str]) -> List[str]:
    if not extensions:
        return []
    parsed = []
    for ext in extensions.split(','):
        ext = ext.strip().lower()
        if not ext:
            continue
        parsed.append(ext if ext.startswith('.') else f'.{ext}')
    return parsed


def filter_urls_by_extension(urls: Iterable[str], extensions: Iterable[str]) -> List[str]:
    ext_list = [e.lower() for e in extensions]
    urls = list(urls)
    if not ext_list:
        return urls
    filtered = []
    for url in urls:
        url_path = url.split('?')[0].lower()
        if any(url_path.endswith(ext) for ext in ext_list):
            filtered.append(url)
    return filtered
