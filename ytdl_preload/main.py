"""
Main CLI interface for ytdl-preload

The CLI is built using Click and provides:
- run: attach to a running mpv and keep upcoming playlist entries downloaded
- clean: delete every cached preload file
- key: show the cache filename derived for a URL
- config show / config set: inspect and persist settings
- doctor: check yt-dlp, the cache directory and the mpv socket
"""

import os
import shutil
import sys
import click
import functools
from pathlib import Path

from . import __version__
from .config.settings import get_settings, reload_settings
from .exceptions import PreloadError
from .preload.keys import KeyDeriver
from .storage.file_store import LocalFileStore
from .utils.logger import configure_from_settings, get_logger, get_current_log_file
from .utils.validation import validate_preload_limit, validate_format_selector


logger = get_logger(__name__)


def handle_error(func):
    """
    Decorator to handle common CLI errors gracefully

    Maps KeyboardInterrupt to exit code 130 and any other failure to a red
    message and exit code 1.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo(click.style("\n\nOperation cancelled by user", fg='yellow'))
            sys.exit(130)  # Standard exit code for SIGINT
        except click.ClickException:
            raise
        except PreloadError as e:
            logger.error(f"Command failed: {e}")
            if e.details:
                logger.debug(f"Details: {e.details}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
        except Exception as e:
            logger.error(f"Command failed: {e}", exc_info=True)
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
    return wrapper


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', type=click.Path(), help='Path to config file')
@click.pass_context
def cli(ctx, version, verbose, config):
    """
    ytdl-preload - keep upcoming mpv playlist entries downloaded

    Watches an mpv playlist over its IPC socket, downloads the next few
    remote entries with yt-dlp and swaps them for the local files.
    """
    ctx.ensure_object(dict)

    if version:
        click.echo(f"ytdl-preload v{__version__}")
        return

    if config:
        reload_settings(config)

    configure_from_settings(verbose=verbose)
    ctx.obj['verbose'] = verbose
    if config:
        logger.info(f"Loaded config: {config}")

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.option('--socket', 'socket_path', type=click.Path(), help='mpv IPC socket (--input-ipc-server)')
@click.option('--limit', '-n', type=int, help='Entries to keep preloaded ahead of playback')
@click.option('--temp', type=click.Path(), help='Cache directory for downloaded files')
@click.option('--format', 'format_selector', help='yt-dlp format selector')
@handle_error
def run(socket_path, limit, temp, format_selector):
    """
    Preload upcoming entries of a running mpv playlist

    Start mpv with --input-ipc-server=<socket> first. Runs until mpv exits
    or Ctrl+C, then deletes the cached files.
    """
    from .runtime.service import PreloadService

    settings = get_settings()

    if limit is not None:
        is_valid, error_msg = validate_preload_limit(limit)
        if not is_valid:
            click.echo(click.style(f"Invalid limit: {error_msg}", fg='red'), err=True)
            sys.exit(1)
        settings.preload.preload_limit = limit

    if format_selector:
        is_valid, error_msg = validate_format_selector(format_selector)
        if not is_valid:
            click.echo(click.style(f"Invalid format: {error_msg}", fg='red'), err=True)
            sys.exit(1)
        settings.preload.format = format_selector

    if socket_path:
        settings.player.socket = socket_path
    if temp:
        settings.preload.temp = temp

    service = PreloadService(settings)
    service.run()

    stats = service.coordinator.status()
    click.echo(f"Preloaded {stats['completed']} file(s), {stats['failed']} failed")


@cli.command()
@click.option('--temp', type=click.Path(), help='Cache directory to clean')
@handle_error
def clean(temp):
    """Delete every preload cache file"""
    settings = get_settings()
    cache_dir = Path(temp).expanduser().absolute() if temp else settings.get_cache_directory()
    pattern = KeyDeriver(cache_dir, settings.preload.extension).pattern

    deleted = LocalFileStore().delete_by_pattern(str(cache_dir), pattern)
    click.echo(f"Removed {deleted} file(s) from {cache_dir}")


@cli.command()
@click.argument('url')
@handle_error
def key(url):
    """Show the cache file path a URL would be downloaded to"""
    settings = get_settings()
    deriver = KeyDeriver(settings.get_cache_directory(), settings.preload.extension)
    click.echo(deriver.target_path(url))


@cli.group()
def config():
    """Configuration management"""
    pass


@config.command()
@handle_error
def show():
    """Show current configuration"""
    settings = get_settings()

    click.echo("Current Configuration:\n")
    if settings.loaded_from:
        click.echo(f"Loaded from: {settings.loaded_from}\n")

    click.echo("Preload:")
    click.echo(f"   Cache directory: {settings.preload.temp}")
    click.echo(f"   Format: {settings.preload.format}")
    click.echo(f"   Limit: {settings.preload.preload_limit}")
    click.echo(f"   Extension: {settings.preload.extension}")
    click.echo(f"   Extra options: {' '.join(settings.get_passthrough_options()) or '(none)'}")
    click.echo(f"   Trusted domains: {', '.join(settings.preload.trusted_domains)}")
    click.echo(f"   Clean on shutdown: {settings.preload.cleanup_on_shutdown}")

    click.echo("\nPlayer:")
    click.echo(f"   Socket: {settings.player.socket}")
    click.echo(f"   OSD duration: {settings.player.osd_duration_ms}ms")

    click.echo("\nyt-dlp:")
    click.echo(f"   Executable: {settings.fetcher.executable or 'python -m yt_dlp'}")


@config.command(name='set')
@click.option('--limit', type=int, help='Set preload limit')
@click.option('--format', 'format_selector', help='Set yt-dlp format selector')
@click.option('--temp', type=click.Path(), help='Set cache directory')
@click.option('--socket', 'socket_path', type=click.Path(), help='Set mpv IPC socket')
@handle_error
def set_config(limit, format_selector, temp, socket_path):
    """Update configuration settings"""
    settings = get_settings()
    changes = []

    if limit is not None:
        is_valid, error_msg = validate_preload_limit(limit)
        if not is_valid:
            raise click.BadParameter(error_msg, param_hint='--limit')
        settings.preload.preload_limit = limit
        changes.append(f"Preload limit: {limit}")

    if format_selector:
        is_valid, error_msg = validate_format_selector(format_selector)
        if not is_valid:
            raise click.BadParameter(error_msg, param_hint='--format')
        settings.preload.format = format_selector
        changes.append(f"Format: {format_selector}")

    if temp:
        settings.preload.temp = temp
        changes.append(f"Cache directory: {temp}")

    if socket_path:
        settings.player.socket = socket_path
        changes.append(f"Socket: {socket_path}")

    if changes:
        path = settings.save_config()
        click.echo(f"Configuration updated ({path}):")
        for change in changes:
            click.echo(f"   • {change}")
    else:
        click.echo("No changes specified")


@cli.command()
@handle_error
def doctor():
    """Run system diagnostics"""
    click.echo("Running diagnostics...\n")
    issues = []
    settings = get_settings()

    try:
        from yt_dlp.version import __version__ as ytdlp_version
        click.echo(f"yt-dlp module: {ytdlp_version}")
    except ImportError:
        click.echo("yt-dlp module: Not installed")
        if not settings.fetcher.executable:
            issues.append("yt-dlp is required for downloading (pip install yt-dlp)")

    if settings.fetcher.executable:
        resolved = shutil.which(settings.fetcher.executable)
        if resolved:
            click.echo(f"yt-dlp executable: {resolved}")
        else:
            click.echo(f"yt-dlp executable: {settings.fetcher.executable} (not found)")
            issues.append(f"Configured yt-dlp executable not found: {settings.fetcher.executable}")

    cache_dir = settings.get_cache_directory()
    if cache_dir.is_dir():
        writable = os.access(cache_dir, os.W_OK)
        click.echo(f"Cache directory: {cache_dir}{'' if writable else ' (not writable)'}")
        if not writable:
            issues.append(f"Cache directory is not writable: {cache_dir}")
    else:
        click.echo(f"Cache directory: {cache_dir} (will be created)")

    socket_path = settings.player.socket
    if Path(socket_path).exists():
        click.echo(f"mpv socket: {socket_path}")
    else:
        click.echo(f"mpv socket: {socket_path} (not found)")
        issues.append(f"Start mpv with --input-ipc-server={socket_path}")

    for problem in settings.validate():
        issues.append(problem)

    current_log = get_current_log_file()
    click.echo(f"Logging: {current_log}" if current_log else "Logging: Console only")

    if issues:
        click.echo(f"\nFound {len(issues)} issues:")
        for issue in issues:
            click.echo(f"   • {issue}")
    else:
        click.echo("\nAll systems operational!")


if __name__ == '__main__':
    cli()
