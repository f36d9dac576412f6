"""
mpv JSON IPC client

Talks to an mpv started with --input-ipc-server=<socket>. One persistent
UNIX socket connection carries both command replies and asynchronous
events, so a reader thread splits the stream: replies are matched to the
waiting caller by request_id, everything with an "event" key goes to the
registered event handler.

Commands are sent from the runtime's main thread only. The event handler
runs on the reader thread and must not call back into the client.
"""

import itertools
import json
import queue
import socket
import threading
from typing import Any, Callable, Dict, Optional

from ..exceptions import PlayerCommandError, PlayerConnectionError
from ..utils.logger import get_logger


EventHandler = Callable[[Dict[str, Any]], None]

_DISCONNECTED = object()


class MpvIpcClient:
    """
    Persistent connection to one mpv instance

    Args:
        socket_path: Path given to mpv's --input-ipc-server
        timeout: Seconds to wait for a command reply
    """

    def __init__(self, socket_path: str, timeout: float = 5.0):
        self.socket_path = socket_path
        self.timeout = timeout
        self.logger = get_logger(__name__)

        self._sock: Optional[socket.socket] = None
        self._reader: Optional[threading.Thread] = None
        self._send_lock = threading.Lock()
        self._pending_lock = threading.Lock()
        self._pending: Dict[int, "queue.Queue[Any]"] = {}
        self._request_ids = itertools.count(1)
        self._observer_ids = itertools.count(1)
        self._connected = threading.Event()

        self.event_handler: Optional[EventHandler] = None
        self.on_disconnect: Optional[Callable[[], None]] = None

    @property
    def connected(self) -> bool:
        return self._connected.is_set()

    def connect(self) -> None:
        """
        Open the socket and start the reader thread

        Raises:
            PlayerConnectionError: If mpv is not listening on the socket
        """
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.connect(self.socket_path)
        except OSError as e:
            sock.close()
            raise PlayerConnectionError(
                f"Cannot connect to mpv at {self.socket_path}: {e}",
                details={'socket': self.socket_path, 'original_error': e}
            )

        self._sock = sock
        self._connected.set()
        self._reader = threading.Thread(target=self._read_loop, name="mpv-ipc-reader", daemon=True)
        self._reader.start()
        self.logger.debug(f"Connected to mpv IPC at {self.socket_path}")

    def close(self) -> None:
        """Close the connection; pending commands fail with PlayerConnectionError"""
        sock, self._sock = self._sock, None
        if sock is None:
            return
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError as e:
            # mpv already closed its end
            self.logger.debug(f"Socket shutdown: {e}")
        sock.close()

    def command(self, *args: Any) -> Any:
        """
        Send a command and wait for its reply

        Args:
            args: Command name followed by its arguments, e.g.
                  command("playlist-remove", 3)

        Returns:
            The reply's "data" field (None for commands without data)

        Raises:
            PlayerConnectionError: Socket closed or no reply within timeout
            PlayerCommandError: mpv answered with an error status
        """
        if not self.connected or self._sock is None:
            raise PlayerConnectionError("Not connected to mpv", details={'socket': self.socket_path})

        request_id = next(self._request_ids)
        reply_slot: "queue.Queue[Any]" = queue.Queue(maxsize=1)
        with self._pending_lock:
            self._pending[request_id] = reply_slot

        payload = json.dumps({'command': list(args), 'request_id': request_id}) + "\n"
        try:
            with self._send_lock:
                self._sock.sendall(payload.encode('utf-8'))
            reply = reply_slot.get(timeout=self.timeout)
        except OSError as e:
            raise PlayerConnectionError(f"Lost connection to mpv: {e}", details={'command': list(args)})
        except queue.Empty:
            raise PlayerConnectionError(
                f"mpv did not answer {args[0]!r} within {self.timeout}s",
                details={'command': list(args)}
            )
        finally:
            with self._pending_lock:
                self._pending.pop(request_id, None)

        if reply is _DISCONNECTED:
            raise PlayerConnectionError("mpv closed the connection", details={'command': list(args)})

        error = reply.get('error', 'success')
        if error != 'success':
            raise PlayerCommandError(f"mpv rejected {args[0]!r}: {error}", command=list(args), error=error)

        return reply.get('data')

    def get_property(self, name: str, default: Any = None) -> Any:
        """Read a property, returning default if mpv reports it unavailable"""
        try:
            value = self.command("get_property", name)
        except PlayerCommandError:
            return default
        return default if value is None else value

    def observe_property(self, name: str) -> int:
        """Subscribe to property-change events for name; returns the observer id"""
        observer_id = next(self._observer_ids)
        self.command("observe_property", observer_id, name)
        return observer_id

    def _read_loop(self) -> None:
        buffer = b""
        sock = self._sock
        try:
            while sock is not None:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                buffer += chunk
                while b"\n" in buffer:
                    line, buffer = buffer.split(b"\n", 1)
                    if line.strip():
                        self._handle_line(line)
        except OSError as e:
            if self._sock is not None:
                self.logger.debug(f"mpv IPC read failed: {e}")
        finally:
            self._connected.clear()
            self._fail_pending()
            if self.on_disconnect:
                self.on_disconnect()

    def _handle_line(self, line: bytes) -> None:
        try:
            message = json.loads(line.decode('utf-8', errors='replace'))
        except ValueError:
            self.logger.debug(f"Ignoring malformed IPC line: {line[:200]!r}")
            return

        if not isinstance(message, dict):
            return

        if 'event' in message:
            if self.event_handler:
                self.event_handler(message)
            return

        request_id = message.get('request_id')
        with self._pending_lock:
            reply_slot = self._pending.get(request_id)
        if reply_slot is not None:
            reply_slot.put(message)

    def _fail_pending(self) -> None:
        with self._pending_lock:
            slots = list(self._pending.values())
        for reply_slot in slots:
            try:
                reply_slot.put_nowait(_DISCONNECTED)
            except queue.Full:
                pass
