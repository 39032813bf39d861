"""
Pause/resume/stop control for one download batch.
Flags are plain booleans so a UI thread can flip them while the batch runs
on an event loop in another thread.
"""

import asyncio

from openhunt.models import BatchState


class BatchController:

    def __init__(self, poll_interval: float = 0.1):
        self.poll_interval = poll_interval
        self._paused = False
        self._stopped = False
        self.state = BatchState.IDLE

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    @property
    def is_active(self) -> bool:
        return self.state in (BatchState.RUNNING, BatchState.PAUSED)

    def reset(self):
        self._paused = False
        self._stopped = False
        self.state = BatchState.IDLE

    def begin(self):
        self._paused = False
        self._stopped = False
        self.state = BatchState.RUNNING

    def pause(self):
        if self._stopped:
            return
        self._paused = True
        if self.state == BatchState.RUNNING:
            self.state = BatchState.PAUSED

    def resume(self):
        if self._stopped:
            return
        self._paused = False
        if self.state == BatchState.PAUSED:
            self.state = BatchState.RUNNING

    def stop(self):
        self._stopped = True
        self._paused = False
        if self.state in (BatchState.RUNNING, BatchState.PAUSED):
            self.state = BatchState.STOPPED

    def finish(self):
        if self._stopped:
            self.state = BatchState.STOPPED
        else:
            self.state = BatchState.COMPLETED

    async def wait_while_paused(self):
        while self._paused and not self._stopped:
            await asyncio.sleep(self.poll_interval)
