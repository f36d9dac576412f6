"""
Exception classes for ytdl-preload.

Exception Hierarchy:
    PreloadError (base)
        ConfigError - Configuration file issues
        FetchError - yt-dlp download issues
        PlayerConnectionError - mpv IPC socket issues
        PlayerCommandError - mpv rejected a command
"""


class PreloadError(Exception):
    """
    Base exception for all ytdl-preload errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch every preload error with a single
    except clause.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g. URL, path).
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description shown to the user.
            details: Optional dictionary containing additional context. Common keys:
                     - 'url': remote reference involved in the error
                     - 'path': local cache file involved in the error
                     - 'original_error': the underlying exception when wrapping
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(PreloadError):
    """
    Raised when the configuration cannot be used.

    Missing values never raise: every setting has a default. This is
    reserved for files that exist but cannot be written or values that
    cannot be interpreted at all.
    """
    pass


class FetchError(PreloadError):
    """
    Raised when yt-dlp cannot be started or exits with an error.

    This is a NON-CRITICAL error: the scheduler converts it into a failed
    completion for that one reference and moves on to the next one.

    Attributes:
        exit_status: Process exit status, or None if the process never ran.
    """

    def __init__(
        self,
        message: str,
        exit_status: int | None = None,
        details: dict | None = None
    ) -> None:
        super().__init__(message, details)
        self.exit_status = exit_status


class PlayerConnectionError(PreloadError):
    """
    Raised when the mpv IPC socket cannot be reached or stops answering.

    CRITICAL at startup (nothing to preload for), but once running a lost
    connection simply ends the service loop.
    """
    pass


class PlayerCommandError(PreloadError):
    """
    Raised when mpv answers a command with an error status.

    Attributes:
        command: The command list that was rejected.
        error: The error string mpv returned (e.g. "property unavailable").
    """

    def __init__(self, message: str, command: list | None = None, error: str = "") -> None:
        super().__init__(message, details={'command': command, 'error': error})
        self.command = command or []
        self.error = error
