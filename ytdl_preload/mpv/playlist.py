"""
mpv playlist exposed through the Sequence interface
"""

from typing import Optional

from .ipc import MpvIpcClient
from ..preload.interfaces import Sequence


class MpvPlaylist(Sequence):
    """
    Live view of an mpv playlist

    Nothing is cached: every call reads the current state from mpv, because
    the user can reorder or edit the playlist at any moment.
    """

    def __init__(self, client: MpvIpcClient):
        self.client = client

    def length(self) -> int:
        count = self.client.get_property("playlist-count", 0)
        try:
            return max(int(count), 0)
        except (TypeError, ValueError):
            return 0

    def active_position(self) -> Optional[int]:
        position = self.client.get_property("playlist-pos")
        if position is None:
            return None
        try:
            position = int(position)
        except (TypeError, ValueError):
            return None
        return position if position >= 0 else None

    def active_path(self) -> Optional[str]:
        return self.client.get_property("path")

    def entry_at(self, index: int) -> Optional[str]:
        return self.client.get_property(f"playlist/{index}/filename")

    def insert_at(self, index: int, value: str) -> None:
        count = self.length()
        self.client.command("loadfile", value, "append")
        if index < count:
            self.client.command("playlist-move", count, index)

    def move_entry(self, from_index: int, to_index: int) -> None:
        self.client.command("playlist-move", from_index, to_index)

    def remove_at(self, index: int) -> None:
        self.client.command("playlist-remove", index)
