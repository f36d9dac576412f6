"""
Single-threaded event loop for the preload runtime

Background threads (the mpv socket reader, the yt-dlp worker) never touch
preload state. They hand callbacks to `call_soon`, and the main thread runs
them one at a time in `run`.
"""

import queue
import threading
from typing import Any, Callable, Optional

from ..utils.logger import get_logger


class EventLoop:
    """FIFO of callbacks drained by whichever thread calls run()"""

    def __init__(self):
        self._queue: "queue.Queue[Optional[tuple]]" = queue.Queue()
        self._stopped = threading.Event()
        self.logger = get_logger(__name__)

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> None:
        """Schedule callback(*args); safe to call from any thread"""
        if self._stopped.is_set():
            self.logger.debug(f"Loop stopped, dropping {getattr(callback, '__name__', callback)}")
            return
        self._queue.put((callback, args))

    def stop(self) -> None:
        """Ask run() to return after the callback currently executing"""
        self._stopped.set()
        self._queue.put(None)

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    def run_pending(self) -> int:
        """Run every callback queued right now without blocking; returns count run"""
        ran = 0
        while not self._stopped.is_set():
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                break
            if item is None:
                break
            self._dispatch(*item)
            ran += 1
        return ran

    def run(self, poll_interval: float = 0.5) -> None:
        """Run callbacks until stop() is called"""
        while not self._stopped.is_set():
            try:
                item = self._queue.get(timeout=poll_interval)
            except queue.Empty:
                continue
            if item is None:
                break
            self._dispatch(*item)

    def _dispatch(self, callback: Callable[..., Any], args: tuple) -> None:
        try:
            callback(*args)
        except Exception as e:
            name = getattr(callback, '__name__', repr(callback))
            self.logger.error(f"Unhandled error in {name}: {e}", exc_info=True)
