"""
ytdl-preload: keep the next few entries of an mpv playlist downloaded

Streaming a remote URL in mpv means buffering, stalls and re-resolving the
stream every time. ytdl-preload sits next to the player, downloads the
upcoming remote entries with yt-dlp one at a time, and swaps each playlist
entry for its local file once it is ready. Files that fall behind playback
are deleted again, and the file currently playing is never touched.

## Architecture

**Preload core (`ytdl_preload/preload/`)**
- QueueFeeder scans the lookahead window after the playing entry
- Scheduler runs exactly one download at a time
- SwapCoordinator replaces the remote entry with the local file
- CacheLedger evicts the oldest files once over the limit
- KeyDeriver / TrustPolicy decide file names and yt-dlp options

**Collaborators**
- `mpv/`: JSON IPC client, playlist adapter, on-screen notifier
- `ytdlp/`: out-of-process yt-dlp fetcher
- `storage/`: local cache directory access
- `runtime/`: single-threaded event loop and the service wiring it all up

**Support**
- `config/`: YAML + environment settings with defaults for everything
- `utils/`: logging, path helpers, validation

## Quick Start
```bash
mpv --input-ipc-server=/tmp/mpvsocket --idle=yes &
ytdl-preload run --socket /tmp/mpvsocket
```
"""

__version__ = "1.0.0"
__author__ = "ytdl-preload contributors"
__license__ = "MIT"
