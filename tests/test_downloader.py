"""Tests for the batch JS downloader and its controller."""

import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from openhunt.models import BatchState, DownloadResult
from openhunt.pipelines.downloader import (
    BatchController,
    JsDownloadRunner,
    derive_filename,
    unique_destination,
)


class FakeDownloadRunner(JsDownloadRunner):
    """Records in-flight downloads instead of touching the network."""

    def __init__(self, delay=0.01):
        super().__init__(silent_mode=True)
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0
        self.started = []

    async def download_file(self, url, output_dir, session):
        self.started.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(self.delay)
        self.in_flight -= 1
        return DownloadResult(url=url, success=True, filename=derive_filename(url), size=1)


def make_urls(count):
    return [f"https://cdn.test/static/file{i}.js" for i in range(count)]


class TestFilenames:
    """Filename derivation and collision handling."""

    @pytest.mark.parametrize("url,expected", [
        ("https://cdn.test/static/app.js", "app.js"),
        ("https://cdn.test/static/app.js?v=123", "app.js"),
        ("https://cdn.test/bundle", "bundle.js"),
        ("https://cdn.test/", "unknown.js"),
        ("https://cdn.test/?x=1", "unknown.js"),
        ("https://cdn.test/a:b*c.js", "a_b_c.js"),
        ("https://cdn.test/static/app.js?v=a/b", "app.js"),
        ("https://cdn.test/static/app.js#x/y", "app.js"),
        ("https://cdn.test", "unknown.js"),
    ])
    def test_derive_filename(self, url, expected):
        assert derive_filename(url) == expected

    def test_unique_destination(self, tmp_path):
        assert unique_destination(str(tmp_path), "app.js") == str(tmp_path / "app.js")
        (tmp_path / "app.js").write_text("x")
        assert unique_destination(str(tmp_path), "app.js") == str(tmp_path / "app_1.js")
        (tmp_path / "app_1.js").write_text("x")
        assert unique_destination(str(tmp_path), "app.js") == str(tmp_path / "app_2.js")


class TestBatchController:
    """State transitions of the pause/resume/stop flags."""

    def test_initial_state(self):
        controller = BatchController()
        assert controller.state == BatchState.IDLE
        assert not controller.is_paused
        assert not controller.is_stopped

    def test_pause_and_resume(self):
        controller = BatchController()
        controller.begin()
        controller.pause()
        assert controller.state == BatchState.PAUSED
        assert controller.is_active
        controller.resume()
        assert controller.state == BatchState.RUNNING

    def test_stop_clears_pause(self):
        controller = BatchController()
        controller.begin()
        controller.pause()
        controller.stop()
        assert controller.state == BatchState.STOPPED
        assert not controller.is_paused
        assert not controller.is_active

    def test_pause_ignored_after_stop(self):
        controller = BatchController()
        controller.begin()
        controller.stop()
        controller.pause()
        assert not controller.is_paused
        assert controller.state == BatchState.STOPPED

    def test_finish(self):
        controller = BatchController()
        controller.begin()
        controller.finish()
        assert controller.state == BatchState.COMPLETED

    def test_begin_resets_flags(self):
        controller = BatchController()
        controller.begin()
        controller.stop()
        controller.begin()
        assert not controller.is_stopped
        assert controller.state == BatchState.RUNNING

    async def test_wait_while_paused_returns_on_stop(self):
        controller = BatchController(poll_interval=0.01)
        controller.begin()
        controller.pause()
        waiter = asyncio.ensure_future(controller.wait_while_paused())
        await asyncio.sleep(0.03)
        assert not waiter.done()
        controller.stop()
        await asyncio.wait_for(waiter, timeout=1)


class TestSchedulerSemantics:
    """Worker pool behaviour without network access."""

    async def test_empty_batch(self, tmp_path):
        controller = BatchController()
        results = await FakeDownloadRunner().run_batch([], str(tmp_path), 5, controller)
        assert results == []
        assert controller.state == BatchState.COMPLETED

    @pytest.mark.parametrize("concurrency,expected", [(1, 1), (3, 3), (50, 4)])
    async def test_concurrency_bound(self, tmp_path, concurrency, expected):
        runner = FakeDownloadRunner()
        results = await runner.run_batch(make_urls(4), str(tmp_path), concurrency)
        assert len(results) == 4
        assert runner.max_in_flight == expected

    async def test_concurrency_clamped(self, tmp_path):
        runner = FakeDownloadRunner()
        await runner.run_batch(make_urls(3), str(tmp_path), 0)
        assert runner.max_in_flight == 1

    async def test_each_url_fetched_once(self, tmp_path):
        runner = FakeDownloadRunner()
        urls = make_urls(12)
        results = await runner.run_batch(urls, str(tmp_path), 5)
        assert sorted(runner.started) == sorted(urls)
        assert sorted(r.url for r in results) == sorted(urls)

    async def test_sequential_order_with_single_worker(self, tmp_path):
        runner = FakeDownloadRunner()
        urls = make_urls(5)
        results = await runner.run_batch(urls, str(tmp_path), 1)
        assert [r.url for r in results] == urls

    async def test_progress_events(self, tmp_path):
        events = []
        await FakeDownloadRunner().run_batch(make_urls(4), str(tmp_path), 2, on_progress=events.append)
        assert [e.completed for e in events] == [1, 2, 3, 4]
        assert all(e.total == 4 for e in events)

    async def test_async_progress_callback(self, tmp_path):
        events = []

        async def on_progress(progress):
            events.append(progress.completed)

        await FakeDownloadRunner().run_batch(make_urls(2), str(tmp_path), 1, on_progress=on_progress)
        assert events == [1, 2]

    async def test_failing_callback_does_not_abort(self, tmp_path):
        def on_progress(progress):
            raise RuntimeError("ui gone")

        results = await FakeDownloadRunner().run_batch(make_urls(3), str(tmp_path), 1, on_progress=on_progress)
        assert len(results) == 3

    async def test_stop_leaves_remaining_urls(self, tmp_path):
        controller = BatchController(poll_interval=0.01)

        def on_progress(progress):
            if progress.completed == 2:
                controller.stop()

        runner = FakeDownloadRunner()
        results = await runner.run_batch(make_urls(6), str(tmp_path), 1, controller, on_progress)
        assert len(results) == 2
        assert len(runner.started) == 2
        assert controller.state == BatchState.STOPPED

    async def test_pause_holds_workers_until_resume(self, tmp_path):
        controller = BatchController(poll_interval=0.01)
        seen = []

        def on_progress(progress):
            seen.append(progress.completed)
            if progress.completed == 1:
                controller.pause()

        runner = FakeDownloadRunner()
        task = asyncio.ensure_future(
            runner.run_batch(make_urls(3), str(tmp_path), 1, controller, on_progress)
        )
        await asyncio.sleep(0.2)
        assert seen == [1]
        assert controller.state == BatchState.PAUSED

        controller.resume()
        results = await asyncio.wait_for(task, timeout=2)
        assert len(results) == 3
        assert controller.state == BatchState.COMPLETED

    async def test_stop_while_paused(self, tmp_path):
        controller = BatchController(poll_interval=0.01)

        def on_progress(progress):
            controller.pause()

        task = asyncio.ensure_future(
            FakeDownloadRunner().run_batch(make_urls(4), str(tmp_path), 1, controller, on_progress)
        )
        await asyncio.sleep(0.1)
        controller.stop()
        results = await asyncio.wait_for(task, timeout=2)
        assert len(results) == 1
        assert controller.state == BatchState.STOPPED

    async def test_stop_before_start_is_kept(self, tmp_path):
        controller = BatchController(poll_interval=0.01)
        controller.begin()
        controller.stop()

        runner = FakeDownloadRunner()
        results = await runner.run_batch(make_urls(5), str(tmp_path), 1, controller)
        assert results == []
        assert runner.started == []
        assert controller.state == BatchState.STOPPED

    async def test_pause_before_start_is_kept(self, tmp_path):
        controller = BatchController(poll_interval=0.01)
        controller.begin()
        controller.pause()

        runner = FakeDownloadRunner()
        task = asyncio.ensure_future(runner.run_batch(make_urls(2), str(tmp_path), 1, controller))
        await asyncio.sleep(0.1)
        assert runner.started == []

        controller.resume()
        results = await asyncio.wait_for(task, timeout=2)
        assert len(results) == 2
        assert controller.state == BatchState.COMPLETED

    async def test_finished_controller_can_be_reused(self, tmp_path):
        controller = BatchController()
        runner = FakeDownloadRunner()
        await runner.run_batch(make_urls(1), str(tmp_path), 1, controller)
        results = await runner.run_batch(make_urls(2), str(tmp_path), 1, controller)
        assert len(results) == 2
        assert controller.state == BatchState.COMPLETED

    def test_sync_run_summary(self, tmp_path):
        summary = FakeDownloadRunner().run(make_urls(3), str(tmp_path), 2)
        assert summary.total == 3
        assert summary.successful == 3
        assert summary.failed == 0
        assert not summary.stopped


class TestHttpDownloads:
    """Real HTTP round trips against a local aiohttp server."""

    @pytest.fixture
    async def server(self):
        async def script(request):
            return web.Response(text=f"console.log('{request.match_info['name']}');")

        async def missing(request):
            return web.Response(status=404, text="not found")

        app = web.Application()
        app.router.add_get("/missing.js", missing)
        app.router.add_get("/{folder}/{name}", script)
        server = test_utils.TestServer(app)
        await server.start_server()
        yield server
        await server.close()

    async def test_success_and_failure(self, server, tmp_path):
        urls = [str(server.make_url("/js/app.js")), str(server.make_url("/missing.js"))]
        results = await JsDownloadRunner(silent_mode=True).run_batch(urls, str(tmp_path), 2)
        by_url = {r.url: r for r in results}

        ok = by_url[urls[0]]
        assert ok.success
        assert ok.filename == "app.js"
        content = (tmp_path / "app.js").read_text(encoding="utf-8")
        assert content == "console.log('app.js');"
        assert ok.size == len(content)

        failed = by_url[urls[1]]
        assert not failed.success
        assert failed.error == "HTTP 404"
        assert not (tmp_path / "missing.js").exists()

    async def test_name_collisions_get_suffixes(self, server, tmp_path):
        urls = [str(server.make_url("/a/app.js")), str(server.make_url("/b/app.js"))]
        results = await JsDownloadRunner(silent_mode=True).run_batch(urls, str(tmp_path), 1)
        assert [r.filename for r in results] == ["app.js", "app_1.js"]
        assert (tmp_path / "app.js").exists()
        assert (tmp_path / "app_1.js").exists()

    async def test_concurrent_collisions_stay_distinct(self, server, tmp_path):
        urls = [str(server.make_url(f"/d{i}/app.js")) for i in range(6)]
        results = await JsDownloadRunner(silent_mode=True).run_batch(urls, str(tmp_path), 6)
        filenames = [r.filename for r in results]
        assert all(r.success for r in results)
        assert len(set(filenames)) == 6
        assert len(list(tmp_path.iterdir())) == 6

    async def test_output_dir_created(self, server, tmp_path):
        target = tmp_path / "nested" / "out"
        results = await JsDownloadRunner(silent_mode=True).run_batch(
            [str(server.make_url("/js/lib.js"))], str(target), 1
        )
        assert results[0].success
        assert (target / "lib.js").exists()

    async def test_connection_error_reported(self, tmp_path):
        server = test_utils.TestServer(web.Application())
        await server.start_server()
        url = str(server.make_url("/gone.js"))
        await server.close()

        results = await JsDownloadRunner(silent_mode=True).run_batch([url], str(tmp_path), 1)
        assert not results[0].success
        assert results[0].error

    async def test_write_failure_is_per_url(self, server, tmp_path):
        target = tmp_path / "not_a_dir"
        target.write_text("occupied", encoding="utf-8")
        urls = [str(server.make_url(f"/js/f{i}.js")) for i in range(3)]

        results = await JsDownloadRunner(silent_mode=True).run_batch(urls, str(target), 2)

        assert len(results) == len(urls)
        assert all(not r.success for r in results)
        assert all(r.error for r in results)
