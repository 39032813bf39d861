"""Tests for the Flask web interface."""

import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

import app as webapp
from openhunt.models import DownloadResult
from openhunt.pipelines.endpoints import EndpointRunner


@pytest.fixture
def client():
    webapp.app.config['TESTING'] = True
    with webapp.app.test_client() as client:
        yield client


class TestIndex:

    def test_index_lists_rules(self, client):
        response = client.get('/')
        assert response.status_code == 200
        assert b'vulnerability' in response.data
        assert b'endpoints' in response.data


class TestScanRoutes:
    """Pattern, endpoint and file routes."""

    def test_patterns(self, client):
        data = client.get('/api/patterns').get_json()
        assert data['success']
        assert data['categories'] == ['vulnerability', 'secrets', 'debug', 'interesting']
        assert 'xss' in [r['name'] for r in data['data']]

    def test_extract(self, client):
        data = client.post('/api/extract', json={
            'text': 'https://x.test/?q=shoes',
            'selectedPatterns': ['xss']
        }).get_json()
        assert data['success']
        assert data['data'][0]['rule_name'] == 'xss'
        assert 'q=shoes' in data['unique']

    def test_extract_requires_text(self, client):
        data = client.post('/api/extract', json={'text': '  '}).get_json()
        assert not data['success']
        assert data['error']

    def test_endpoints(self, client):
        data = client.post('/api/endpoints', json={
            'text': "fetch('/api/users/123?token=abc')",
            'categories': ['endpoints', 'params']
        }).get_json()
        assert data['success']
        assert [i['value'] for i in data['by_category']['params']] == ['token=abc']

    def test_workspace_files_and_read(self, client, tmp_path):
        (tmp_path / 'a.js').write_text('one', encoding='utf-8')
        (tmp_path / 'b.js').write_text('two', encoding='utf-8')

        listing = client.get('/api/workspace-files', query_string={'root': str(tmp_path)}).get_json()
        assert [f['name'] for f in listing['files']] == ['a.js', 'b.js']

        paths = [f['path'] for f in listing['files']]
        data = client.post('/api/read-files', json={'paths': paths}).get_json()
        assert data['success']
        assert data['fileCount'] == 2
        assert '// === b.js ===' in data['data']

    def test_httpx(self, client):
        data = client.post('/api/httpx', json={
            'content': '{"host": "a.test", "status_code": 200}'
        }).get_json()
        assert data['success']
        assert data['summary']['status_codes'] == {'200': 1}

    def test_fetch_url_rejects_other_schemes(self, client):
        data = client.post('/api/fetch-url', json={'url': 'file:///etc/passwd'}).get_json()
        assert not data['success']


class TestDownloadRoutes:
    """Background download control."""

    def test_requires_urls(self, client, tmp_path):
        data = client.post('/api/download', json={'urls': [], 'outputDir': str(tmp_path)}).get_json()
        assert not data['success']

    def test_requires_output_dir(self, client):
        data = client.post('/api/download', json={'urls': ['https://a.test/app.js']}).get_json()
        assert not data['success']

    def test_unknown_action(self, client):
        data = client.post('/api/download/rewind').get_json()
        assert not data['success']

    def test_pause_resume_stop(self, client):
        webapp.download_job.controller.begin()
        assert client.post('/api/download/pause').get_json()['state'] == 'paused'
        assert client.post('/api/download/resume').get_json()['state'] == 'running'
        assert client.post('/api/download/stop').get_json()['state'] == 'stopped'

    def test_background_download(self, client, tmp_path, monkeypatch):
        async def fake_download(self, url, output_dir, session):
            return DownloadResult(url=url, success=True, filename='app.js', size=3)

        monkeypatch.setattr(webapp.JsDownloadRunner, 'download_file', fake_download)

        data = client.post('/api/download', json={
            'urls': ['https://a.test/app.js', 'https://a.test/lib.js', 'https://a.test/x.css'],
            'outputDir': str(tmp_path),
            'concurrency': 2
        }).get_json()
        assert data['success']
        assert data['total'] == 2

        webapp.download_job.thread.join(timeout=5)
        status = client.get('/api/download/status').get_json()
        assert status['state'] == 'completed'
        assert status['completed'] == 2
        assert status['summary']['successful'] == 2
        assert len(status['events']) == 2

        later = client.get('/api/download/status', query_string={'since': 2}).get_json()
        assert later['events'] == []

    def test_stop_right_after_start(self, client, tmp_path, monkeypatch):
        started = []

        async def slow_download(self, url, output_dir, session):
            started.append(url)
            await asyncio.sleep(0.01)
            return DownloadResult(url=url, success=True, filename='app.js', size=3)

        monkeypatch.setattr(webapp.JsDownloadRunner, 'download_file', slow_download)

        urls = [f'https://a.test/f{i}.js' for i in range(20)]
        data = client.post('/api/download', json={
            'urls': urls, 'outputDir': str(tmp_path), 'concurrency': 1
        }).get_json()
        assert data['success']
        assert client.post('/api/download/stop').get_json()['state'] == 'stopped'

        webapp.download_job.thread.join(timeout=5)
        status = client.get('/api/download/status').get_json()
        assert status['state'] == 'stopped'
        assert status['summary']['stopped']
        assert len(started) < len(urls)

    def test_second_start_rejected_while_running(self, client, tmp_path, monkeypatch):
        async def slow_download(self, url, output_dir, session):
            await asyncio.sleep(0.05)
            return DownloadResult(url=url, success=True, filename='app.js', size=3)

        monkeypatch.setattr(webapp.JsDownloadRunner, 'download_file', slow_download)
        payload = {'urls': [f'https://a.test/f{i}.js' for i in range(5)], 'outputDir': str(tmp_path), 'concurrency': 1}

        assert client.post('/api/download', json=payload).get_json()['success']
        second = client.post('/api/download', json=payload).get_json()
        assert not second['success']

        client.post('/api/download/stop')
        webapp.download_job.thread.join(timeout=5)

    def test_negative_cursor_clamped(self, client):
        job = webapp.DownloadJob()
        job.events = [{'completed': 1}, {'completed': 2}]
        status = job.status(-1)
        assert status['events'] == job.events
        assert status['next'] == 2

        data = client.get('/api/download/status', query_string={'since': -5}).get_json()
        assert data['success']
        assert data['next'] == len(data['events'])


class TestFetchText:
    """Single URL fetch used by the fetch-url route."""

    async def test_fetch_text(self):
        async def handler(request):
            return web.Response(text="fetch('/api/a')")

        async def missing(request):
            return web.Response(status=500)

        server_app = web.Application()
        server_app.router.add_get('/app.js', handler)
        server_app.router.add_get('/broken.js', missing)
        server = test_utils.TestServer(server_app)
        await server.start_server()
        try:
            runner = EndpointRunner(silent_mode=True)
            content, error = await runner.fetch_text(str(server.make_url('/app.js')))
            assert error is None
            assert content == "fetch('/api/a')"

            content, error = await runner.fetch_text(str(server.make_url('/broken.js')))
            assert content is None
            assert error == 'HTTP 500'
        finally:
            await server.close()
