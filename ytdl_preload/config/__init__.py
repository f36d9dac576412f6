"""
Configuration management package for ytdl-preload

Settings are loaded from YAML files and environment variables with a default
for every value. The most common usage pattern is:

    from ytdl_preload.config import get_settings

    settings = get_settings()
"""

from .settings import get_settings, reload_settings, Settings

__all__ = [
    'get_settings',      # Factory function for singleton settings access
    'reload_settings',   # Function to reload settings from files
    'Settings',          # Settings class for direct instantiation
]
