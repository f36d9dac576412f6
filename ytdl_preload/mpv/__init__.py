"""
mpv integration over the JSON IPC socket

Exports:
    MpvIpcClient: Persistent command/event connection
    MpvPlaylist: Sequence implementation backed by mpv's playlist
    MpvOsdNotifier / LogNotifier: Notifier implementations
"""

from .ipc import MpvIpcClient
from .playlist import MpvPlaylist
from .notifier import LogNotifier, MpvOsdNotifier

__all__ = ['MpvIpcClient', 'MpvPlaylist', 'LogNotifier', 'MpvOsdNotifier']
