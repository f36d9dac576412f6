"""
yt-dlp integration

Exports:
    YtDlpFetcher: Fetcher implementation running yt-dlp out of process
    build_ytdlp_args: Command line builder for a fetch request
"""

from .fetcher import YtDlpFetcher, build_ytdlp_args, ytdlp_command

__all__ = ['YtDlpFetcher', 'build_ytdlp_args', 'ytdlp_command']
