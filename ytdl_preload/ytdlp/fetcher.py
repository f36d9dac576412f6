"""
yt-dlp fetcher: runs yt-dlp out of process to materialize one reference

Downloads run in a single worker thread so the preload core never blocks.
The worker only runs the subprocess; the result is handed back to the
runtime event loop, which is where the completion callback executes.

Command line built for every request:

    yt-dlp [--compat-options=allow-unsafe-ext] --no-part --no-playlist
           -f <format> --merge-output-format <ext> -o <destination>
           [opt1] [opt2] <url>

An empty executable setting runs the yt_dlp module of the current
interpreter, which is the copy installed as this package's dependency.
"""

import queue
import subprocess
import sys
import threading
import time
from pathlib import Path
from typing import Callable, List, Optional

from ..exceptions import FetchError
from ..preload.interfaces import FetchCallback, FetchRequest, FetchResult, Fetcher
from ..utils.helpers import format_file_size, truncate_string
from ..utils.logger import get_logger


RELAXED_EXTENSION_OPTION = "--compat-options=allow-unsafe-ext"


def escape_output_template(path: str) -> str:
    """Escape a literal path for use as a yt-dlp output template"""
    return path.replace('%', '%%')


def output_container(destination: str) -> Optional[str]:
    """Container extension of the destination path, without the dot"""
    suffix = Path(destination).suffix.lstrip('.')
    return suffix or None


def build_ytdlp_args(request: FetchRequest) -> List[str]:
    """
    Build yt-dlp arguments (without the executable) for a fetch request

    Merged video+audio downloads are forced into the destination's
    container, otherwise yt-dlp appends its own extension to the name.

    Args:
        request: Fetch request from the preload core

    Returns:
        Argument list ending with the reference URL
    """
    args = []
    if request.relaxed_extension:
        args.append(RELAXED_EXTENSION_OPTION)

    args.extend([
        "--no-part",       # Never leave .part files in the cache directory
        "--no-playlist",   # A playlist URL still means one video
        "-f", request.format_selector,
    ])

    container = output_container(request.destination)
    if container:
        args.extend(["--merge-output-format", container])

    args.extend(["-o", escape_output_template(request.destination)])
    args.extend(opt for opt in request.extra_options if opt)
    args.append(request.reference)
    return args


def ytdlp_command(executable: Optional[str] = None) -> List[str]:
    """Command prefix used to start yt-dlp"""
    if executable:
        return [executable]
    return [sys.executable, "-m", "yt_dlp"]


class YtDlpFetcher(Fetcher):
    """
    Fetcher that runs yt-dlp as a subprocess on one background thread

    The worker is a daemon thread, so exiting never waits for a download
    still in flight. The yt-dlp process itself is not cancelled.

    Args:
        dispatch: Schedules a callback on the preload execution context
                  (EventLoop.call_soon)
        executable: yt-dlp executable; None/empty uses `python -m yt_dlp`
    """

    def __init__(self, dispatch: Callable[..., None], executable: Optional[str] = None):
        self.dispatch = dispatch
        self.command = ytdlp_command(executable)
        self.logger = get_logger(__name__)
        self._requests: "queue.Queue[Optional[tuple]]" = queue.Queue()
        self._closed = threading.Event()
        self._worker = threading.Thread(target=self._work, name="ytdlp", daemon=True)
        self._worker.start()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def fetch_async(self, request: FetchRequest, callback: FetchCallback) -> None:
        if self._closed.is_set():
            self.logger.debug(f"Fetcher closed, not downloading {request.reference}")
            return
        self._requests.put((request, callback))

    def _work(self) -> None:
        while True:
            item = self._requests.get()
            if item is None or self._closed.is_set():
                return

            request, callback = item
            try:
                result = self.run_request(request)
            except Exception as e:
                result = FetchResult(success=False, error_message=f"Execution error: {e}")
            self.dispatch(callback, result)

    def run_request(self, request: FetchRequest) -> FetchResult:
        """
        Run yt-dlp for one request and wait for it (worker thread)

        A zero exit status only counts as success if the destination file
        actually exists afterwards.
        """
        try:
            self._download(request)
        except FetchError as e:
            return FetchResult(success=False, exit_status=e.exit_status, error_message=e.message)
        return FetchResult(success=True, exit_status=0)

    def _download(self, request: FetchRequest) -> None:
        cmd = self.command + build_ytdlp_args(request)
        self.logger.debug(f"Running: {' '.join(cmd)}")
        start_time = time.time()

        try:
            completed = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                errors='replace',
            )
        except OSError as e:
            raise FetchError(
                f"Could not start yt-dlp: {e}",
                details={'url': request.reference, 'original_error': e}
            )

        if completed.returncode != 0:
            raise FetchError(
                self._last_error_line(completed.stderr) or f"yt-dlp exited with status {completed.returncode}",
                exit_status=completed.returncode,
                details={'url': request.reference}
            )

        destination = Path(request.destination)
        if not destination.is_file():
            raise FetchError(
                f"yt-dlp reported success but {destination.name} was not written",
                exit_status=completed.returncode,
                details={'url': request.reference, 'path': str(destination)}
            )

        self.logger.debug(
            f"Download completed: {destination.name} "
            f"({format_file_size(destination.stat().st_size)}, {time.time() - start_time:.1f}s)"
        )

    @staticmethod
    def _last_error_line(stderr: Optional[str]) -> Optional[str]:
        if not stderr:
            return None
        lines = [line.strip() for line in stderr.splitlines() if line.strip()]
        return truncate_string(lines[-1], 300) if lines else None

    def close(self) -> None:
        """Stop accepting work; a download in flight is neither waited for nor cancelled"""
        self._closed.set()
        self._requests.put(None)
