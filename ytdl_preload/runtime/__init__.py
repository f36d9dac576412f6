"""
Runtime: event loop and the service that drives the preloader from mpv events
"""

from .loop import EventLoop
from .service import PreloadService

__all__ = ['EventLoop', 'PreloadService']
