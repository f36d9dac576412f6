"""
Preload service: runs the preload coordinator against a live mpv instance

Event wiring (mpv → coordinator):
    start-file                      → on_file_started (evict, then scan)
    property-change playlist-count  → on_length_changed
    property-change playlist-pos    → on_position_changed
    shutdown / socket closed        → cache cleanup, loop stops

Every handler runs on the EventLoop's thread; the IPC reader thread only
forwards events with call_soon.
"""

from typing import Any, Dict, Optional

from .loop import EventLoop
from ..config.settings import Settings
from ..mpv.ipc import MpvIpcClient
from ..mpv.notifier import MpvOsdNotifier
from ..mpv.playlist import MpvPlaylist
from ..preload.coordinator import PreloadCoordinator, PreloadOptions
from ..preload.interfaces import Fetcher, FileStore
from ..storage.file_store import LocalFileStore
from ..utils.logger import get_logger
from ..ytdlp.fetcher import YtDlpFetcher


OBSERVED_PROPERTIES = ("playlist-count", "playlist-pos")


class PreloadService:
    """
    Owns the event loop, the mpv connection and the coordinator

    Collaborators can be injected for testing; by default they are built
    from settings.
    """

    def __init__(
        self,
        settings: Settings,
        client: Optional[MpvIpcClient] = None,
        fetcher: Optional[Fetcher] = None,
        file_store: Optional[FileStore] = None,
        loop: Optional[EventLoop] = None
    ):
        self.settings = settings
        self.logger = get_logger(__name__)
        self.loop = loop or EventLoop()
        self.client = client or MpvIpcClient(settings.player.socket, settings.player.command_timeout)
        self.fetcher = fetcher or YtDlpFetcher(self.loop.call_soon, settings.fetcher.executable)
        self.file_store = file_store or LocalFileStore()

        self.coordinator = PreloadCoordinator(
            sequence=MpvPlaylist(self.client),
            fetcher=self.fetcher,
            file_store=self.file_store,
            notifier=MpvOsdNotifier(self.client, settings.player.osd_duration_ms),
            options=PreloadOptions.from_settings(settings),
        )
        self._stopping = False

    def start(self) -> None:
        """
        Connect to mpv and subscribe to playlist events

        Raises:
            PlayerConnectionError: If mpv is not reachable
        """
        self.client.event_handler = self._on_player_message
        self.client.on_disconnect = lambda: self.loop.call_soon(self._on_disconnect)
        self.client.connect()

        for name in OBSERVED_PROPERTIES:
            self.client.observe_property(name)

        self.logger.console_info(
            f"Preloading up to {self.coordinator.options.limit} entries into "
            f"{self.coordinator.options.cache_dir}"
        )
        self.loop.call_soon(self.coordinator.check_preload)

    def run(self) -> None:
        """Start and process events until mpv shuts down or the user interrupts"""
        try:
            self.start()
            self.loop.run()
        except KeyboardInterrupt:
            self.logger.console_info("Interrupted, cleaning up")
            self.stop()
        finally:
            self._close()

    def stop(self) -> None:
        """Clean the cache (if configured) and stop the loop"""
        if self._stopping:
            return
        self._stopping = True

        if self.settings.preload.cleanup_on_shutdown:
            self.coordinator.shutdown()
        else:
            self.coordinator.is_shut_down = True
        self.loop.stop()

    def _close(self) -> None:
        close_fetcher = getattr(self.fetcher, 'close', None)
        if close_fetcher:
            close_fetcher()
        self.client.close()

    def _on_player_message(self, message: Dict[str, Any]) -> None:
        """IPC reader thread: translate mpv events into loop callbacks"""
        event = message.get('event')

        if event == 'start-file':
            self.loop.call_soon(self.coordinator.on_file_started)
        elif event == 'property-change':
            name = message.get('name')
            if name == 'playlist-count':
                self.loop.call_soon(self.coordinator.on_length_changed)
            elif name == 'playlist-pos':
                self.loop.call_soon(self.coordinator.on_position_changed)
        elif event == 'shutdown':
            self.loop.call_soon(self.stop)

    def _on_disconnect(self) -> None:
        if not self._stopping:
            self.logger.console_info("mpv connection closed")
        self.stop()
