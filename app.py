"""
OpenHunt Web Interface
Flask-based host for the pattern extractor, the endpoint extractor and the JS downloader.
"""

import os
import asyncio
import threading
from flask import Flask, render_template_string, request, jsonify

from openhunt.core.config import get_default_config
from openhunt.core.logger import logger, set_silent
from openhunt.analyzers.endpoint_extractor import EXTRACTION_CATEGORIES
from openhunt.models import DownloadProgress, DownloadSummary
from openhunt.output import exporter
from openhunt.pipelines.gf import GfRunner
from openhunt.pipelines.endpoints import EndpointRunner
from openhunt.pipelines.downloader import (
    BatchController, JsDownloadRunner, filter_urls_by_extension, parse_extensions
)
from openhunt.services.httpx_parser import parse_httpx_output, summarize_httpx
from openhunt.services.workspace import list_workspace_files, read_multiple_files, read_text_file

app = Flask(__name__)
app.secret_key = os.environ.get('SESSION_SECRET', 'openhunt-dev-key')

config = get_default_config()
WORKSPACE_ROOT = os.environ.get('OPENHUNT_WORKSPACE', os.getcwd())

gf_runner = GfRunner(config=config, silent_mode=True)
endpoint_runner = EndpointRunner(config=config, silent_mode=True)


class DownloadJob:
    """The single batch the UI is allowed to run at a time."""

    def __init__(self):
        self.controller = BatchController(config.downloader.poll_interval)
        self.lock = threading.Lock()
        self.start_lock = threading.Lock()
        self.thread = None
        self.total = 0
        self.completed = 0
        self.events = []
        self.summary = None
        self.error = None

    def is_running(self) -> bool:
        return self.thread is not None and self.thread.is_alive()

    def on_progress(self, progress: DownloadProgress):
        with self.lock:
            self.completed = progress.completed
            self.events.append(progress.to_dict())

    def try_start(self, urls, output_dir, concurrency) -> bool:
        with self.start_lock:
            if self.is_running():
                return False
            self.start(urls, output_dir, concurrency)
            return True

    def start(self, urls, output_dir, concurrency):
        self.total = len(urls)
        self.completed = 0
        self.events = []
        self.summary = None
        self.error = None
        self.controller = BatchController(config.downloader.poll_interval)
        self.controller.begin()
        self.thread = threading.Thread(
            target=self._run, args=(urls, output_dir, concurrency), daemon=True
        )
        self.thread.start()

    def _run(self, urls, output_dir, concurrency):
        runner = JsDownloadRunner(config=config, silent_mode=True)
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            results = loop.run_until_complete(runner.run_batch(
                urls, output_dir, concurrency, self.controller, self.on_progress
            ))
            self.summary = DownloadSummary.from_results(len(urls), results, stopped=self.controller.is_stopped)
        except Exception as e:
            logger.error(f"Download batch failed: {e}")
            self.error = str(e)
        finally:
            loop.close()

    def status(self, since: int = 0) -> dict:
        since = max(0, since)
        with self.lock:
            events = self.events[since:]
        return {
            'state': self.controller.state.value,
            'completed': self.completed,
            'total': self.total,
            'events': events,
            'next': since + len(events),
            'summary': self.summary.to_dict() if self.summary else None,
            'error': self.error
        }


download_job = DownloadJob()


MAIN_TEMPLATE = r'''<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>OpenHunt</title>
<style>
  body { background: #0d1117; color: #c9d1d9; font-family: -apple-system, "Segoe UI", sans-serif; margin: 0; padding: 24px; }
  h1 { color: #58a6ff; } h2 { font-size: 15px; color: #e6edf3; margin-top: 24px; }
  code { background: #161b22; padding: 2px 6px; border-radius: 4px; }
  li { margin: 4px 0; font-size: 13px; }
</style>
</head>
<body>
<h1>OpenHunt</h1>
<p>{{ rule_count }} gf rules loaded &middot; workspace: <code>{{ workspace }}</code></p>
<h2>Rule categories</h2>
<ul>
{% for category, rules in grouped %}
  <li><b>{{ category.value }}</b>: {{ rules|map(attribute='name')|join(', ') }}</li>
{% endfor %}
</ul>
<h2>Extraction categories</h2>
<ul>
{% for category in extraction_categories %}
  <li><b>{{ category.id }}</b>: {{ category.description }}</li>
{% endfor %}
</ul>
<h2>API</h2>
<ul>
  <li><code>GET /api/patterns</code>, <code>POST /api/extract</code>, <code>POST /api/endpoints</code></li>
  <li><code>GET /api/workspace-files</code>, <code>POST /api/read-files</code>, <code>POST /api/fetch-url</code>, <code>POST /api/httpx</code></li>
  <li><code>POST /api/download</code>, <code>GET /api/download/status</code>, <code>POST /api/download/pause|resume|stop</code></li>
</ul>
</body>
</html>
'''


@app.route('/')
def index():
    grouped = gf_runner.registry.grouped()
    return render_template_string(
        MAIN_TEMPLATE,
        rule_count=len(gf_runner.registry.load()),
        workspace=WORKSPACE_ROOT,
        grouped=grouped,
        extraction_categories=EXTRACTION_CATEGORIES
    )


@app.route('/api/patterns', methods=['GET'])
def api_patterns():
    try:
        rules = gf_runner.registry.load()
        return jsonify({
            'success': True,
            'categories': [c.value for c in gf_runner.registry.list_categories()],
            'data': [rule.to_dict() for rule in rules]
        })
    except Exception as e:
        return jsonify({'success': False, 'error': str(e)})


@app.route('/api/extract', methods=['POST'])
def api_extract():
    try:
        data = request.get_json() or {}
        text = data.get('text', '')
        selected = data.get('selectedPatterns') or []

        if not text.strip():
            return jsonify({'success': False, 'error': 'No text to scan'})

        results = gf_runner.run(text, rule_names=selected)

        return jsonify({
            'success': True,
            'data': [r.to_dict() for r in results],
            'unique': exporter.unique_matches(results)
        })

    except Exception as e:
        return jsonify({'success': False, 'error': str(e)})


@app.route('/api/endpoints', methods=['POST'])
def api_endpoints():
    try:
        data = request.get_json() or {}
        text = data.get('text', '')
        categories = data.get('categories') or None

        if not text.strip():
            return jsonify({'success': False, 'error': 'No text to scan'})

        items = endpoint_runner.run(text, categories)
        grouped = EndpointRunner.grouped(items)

        return jsonify({
            'success': True,
            'data': [item.to_dict() for item in items],
            'by_category': {cat: [i.to_dict() for i in found] for cat, found in grouped.items()}
        })

    except Exception as e:
        return jsonify({'success': False, 'error': str(e)})


@app.route('/api/workspace-files', methods=['GET'])
def api_workspace_files():
    try:
        root = request.args.get('root', WORKSPACE_ROOT)
        files = list_workspace_files(root, config.workspace)
        return jsonify({'success': True, 'files': [f.to_dict() for f in files]})
    except Exception as e:
        return jsonify({'success': False, 'error': str(e)})


@app.route('/api/read-files', methods=['POST'])
def api_read_files():
    try:
        data = request.get_json() or {}
        paths = data.get('paths') or []

        if not paths:
            return jsonify({'success': False, 'error': 'No files selected'})

        return jsonify({
            'success': True,
            'data': read_multiple_files(paths),
            'fileCount': len(paths)
        })

    except Exception as e:
        return jsonify({'success': False, 'error': str(e)})


@app.route('/api/fetch-url', methods=['POST'])
def api_fetch_url():
    try:
        data = request.get_json() or {}
        url = data.get('url', '').strip()

        if not url.startswith(('http://', 'https://')):
            return jsonify({'success': False, 'error': 'Only http(s) URLs are supported'})

        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            content, error = loop.run_until_complete(endpoint_runner.fetch_text(url))
        finally:
            loop.close()

        if error:
            return jsonify({'success': False, 'error': error})

        return jsonify({'success': True, 'data': content, 'url': url})

    except Exception as e:
        return jsonify({'success': False, 'error': str(e)})


@app.route('/api/httpx', methods=['POST'])
def api_httpx():
    try:
        data = request.get_json() or {}
        if data.get('path'):
            content = read_text_file(data['path'])
        else:
            content = data.get('content', '')

        records = parse_httpx_output(content)
        return jsonify({'success': True, 'data': records, 'summary': summarize_httpx(records)})

    except Exception as e:
        return jsonify({'success': False, 'error': str(e)})


@app.route('/api/download', methods=['POST'])
def api_download():
    try:
        data = request.get_json() or {}
        urls = [u.strip() for u in data.get('urls') or [] if u.strip().startswith(('http://', 'https://'))]
        output_dir = (data.get('outputDir') or '').strip()
        concurrency = config.downloader.clamp_concurrency(data.get('concurrency') or config.downloader.concurrency)

        extensions = data.get('extensions', config.downloader.extensions)
        urls = filter_urls_by_extension(urls, parse_extensions(extensions))

        if not urls:
            return jsonify({'success': False, 'error': 'No URLs to download'})
        if not output_dir:
            return jsonify({'success': False, 'error': 'Please select output directory'})
        if not download_job.try_start(urls, output_dir, concurrency):
            return jsonify({'success': False, 'error': 'A download is already in progress'})

        return jsonify({'success': True, 'total': len(urls), 'concurrency': concurrency})

    except Exception as e:
        return jsonify({'success': False, 'error': str(e)})


@app.route('/api/download/status', methods=['GET'])
def api_download_status():
    try:
        since = int(request.args.get('since', 0))
        return jsonify({'success': True, **download_job.status(since)})
    except Exception as e:
        return jsonify({'success': False, 'error': str(e)})


@app.route('/api/download/<action>', methods=['POST'])
def api_download_control(action):
    controller = download_job.controller
    if action == 'pause':
        controller.pause()
    elif action == 'resume':
        controller.resume()
    elif action == 'stop':
        controller.stop()
    else:
        return jsonify({'success': False, 'error': f'Unknown action: {action}'})
    return jsonify({'success': True, 'state': controller.state.value})


if __name__ == '__main__':
    set_silent(False)
    app.run(host='127.0.0.1', port=6789, debug=False)
