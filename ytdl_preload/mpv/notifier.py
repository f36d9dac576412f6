"""
User-visible status messages
"""

from .ipc import MpvIpcClient
from ..exceptions import PreloadError
from ..preload.interfaces import Notifier
from ..utils.logger import get_logger


class LogNotifier(Notifier):
    """Notifier that only writes to the console log"""

    def __init__(self):
        self.logger = get_logger(__name__)

    def info(self, message: str) -> None:
        self.logger.console_info(message)


class MpvOsdNotifier(LogNotifier):
    """Logs the message and shows it on mpv's on-screen display"""

    def __init__(self, client: MpvIpcClient, duration_ms: int = 3000):
        super().__init__()
        self.client = client
        self.duration_ms = duration_ms

    def info(self, message: str) -> None:
        super().info(message)
        try:
            self.client.command("show-text", message, self.duration_ms)
        except PreloadError as e:
            self.logger.debug(f"OSD message not shown: {e}")
