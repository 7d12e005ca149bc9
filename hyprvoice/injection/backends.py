"""Text delivery backends for the injection chain."""

from __future__ import annotations

import logging
import os
import shutil
import socket
import sys
import threading
from abc import ABC, abstractmethod
from pathlib import Path

from hyprvoice.config.types import BACKEND_CLIPBOARD, BACKEND_WTYPE, BACKEND_YDOTOOL
from hyprvoice.injection.clipboard import Clipboard
from hyprvoice.injection.errors import BackendUnavailableError
from hyprvoice.injection.process import run_command

logger = logging.getLogger(__name__)

YDOTOOL_SOCKET_NAME = ".ydotool_socket"
SOCKET_PROBE_TIMEOUT = 0.5

# Any of these lets pyperclip reach the clipboard on Linux
LINUX_CLIPBOARD_TOOLS = ("wl-copy", "xclip", "xsel")


class Backend(ABC):
    """One way of getting text into the focused application."""

    name: str = ""

    @abstractmethod
    def available(self) -> None:
        """Check that this backend can run now.

        Raises:
            BackendUnavailableError: Naming what is missing.
        """

    @abstractmethod
    def deliver(self, text: str, timeout: float, cancel: threading.Event | None = None) -> None:
        """Deliver text, giving up after timeout seconds.

        Raises:
            InjectionError: If delivery failed, timed out, or was cancelled.
        """


def _require_binary(name: str, package: str) -> None:
    if shutil.which(name) is None:
        raise BackendUnavailableError(f"{name} not found (install {package})")


def _require_wayland_session(backend: str) -> None:
    if not os.environ.get("WAYLAND_DISPLAY"):
        raise BackendUnavailableError(f"WAYLAND_DISPLAY not set, {backend} requires a Wayland session")
    if not os.environ.get("XDG_RUNTIME_DIR"):
        raise BackendUnavailableError(f"XDG_RUNTIME_DIR not set, {backend} requires a session environment")


def find_ydotool_socket() -> Path | None:
    """Locate the ydotoold socket.

    Looks at $YDOTOOL_SOCKET, then $XDG_RUNTIME_DIR/.ydotool_socket,
    /run/user/<uid>/.ydotool_socket and /tmp/.ydotool_socket.

    Returns:
        The first existing path, or None.
    """
    env_socket = os.environ.get("YDOTOOL_SOCKET")
    if env_socket and Path(env_socket).exists():
        return Path(env_socket)

    candidates = []
    xdg = os.environ.get("XDG_RUNTIME_DIR")
    if xdg:
        candidates.append(Path(xdg) / YDOTOOL_SOCKET_NAME)
    if hasattr(os, "getuid"):
        candidates.append(Path(f"/run/user/{os.getuid()}") / YDOTOOL_SOCKET_NAME)
    candidates.append(Path("/tmp") / YDOTOOL_SOCKET_NAME)

    for path in candidates:
        if path.exists():
            return path
    return None


def probe_socket(path: Path, timeout: float = SOCKET_PROBE_TIMEOUT) -> None:
    """Connect to a unix socket to check that something is listening.

    ydotoold 1.0.4+ listens on a datagram socket; older releases use a
    stream socket, which is tried second.

    Raises:
        OSError: If neither kind of connection succeeds.
    """
    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_DGRAM) as sock:
            sock.settimeout(timeout)
            sock.connect(str(path))
        return
    except OSError:
        pass
    with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
        sock.settimeout(timeout)
        sock.connect(str(path))


class YdotoolBackend(Backend):
    """Types through the ydotool uinput daemon. Works on any compositor."""

    name = BACKEND_YDOTOOL

    def available(self) -> None:
        _require_binary("ydotool", "ydotool")

        # The daemon is only checked for when it is installed
        if shutil.which("ydotoold") is None:
            return
        socket_path = find_ydotool_socket()
        if socket_path is None:
            raise BackendUnavailableError("ydotoold socket not found, ensure ydotoold is running")
        try:
            probe_socket(socket_path)
        except OSError as e:
            raise BackendUnavailableError(f"ydotoold not responding at {socket_path}: {e}") from e

    def deliver(self, text: str, timeout: float, cancel: threading.Event | None = None) -> None:
        run_command(["ydotool", "type", "--", text], timeout, cancel)


class WtypeBackend(Backend):
    """Types through the Wayland virtual-keyboard protocol."""

    name = BACKEND_WTYPE

    def available(self) -> None:
        _require_binary("wtype", "wtype")
        _require_wayland_session("wtype")

    def deliver(self, text: str, timeout: float, cancel: threading.Event | None = None) -> None:
        run_command(["wtype", text], timeout, cancel)


class ClipboardBackend(Backend):
    """Leaves the text on the clipboard for the user to paste."""

    name = BACKEND_CLIPBOARD

    def __init__(self, clipboard: Clipboard | None = None) -> None:
        self.clipboard = clipboard if clipboard is not None else Clipboard()

    def available(self) -> None:
        if sys.platform.startswith("linux") and not any(
            shutil.which(tool) for tool in LINUX_CLIPBOARD_TOOLS
        ):
            raise BackendUnavailableError(
                "no clipboard tool found (install wl-clipboard, xclip or xsel)"
            )

    def deliver(self, text: str, timeout: float, cancel: threading.Event | None = None) -> None:
        self.clipboard.write(text, timeout)


BACKENDS: dict[str, type[Backend]] = {
    BACKEND_YDOTOOL: YdotoolBackend,
    BACKEND_WTYPE: WtypeBackend,
    BACKEND_CLIPBOARD: ClipboardBackend,
}


def create_backend(kind: str, clipboard: Clipboard | None = None) -> Backend:
    """Create the backend for a configured kind.

    Raises:
        BackendUnavailableError: If the kind is unknown.
    """
    if kind == BACKEND_CLIPBOARD:
        return ClipboardBackend(clipboard)
    try:
        return BACKENDS[kind]()
    except KeyError:
        raise BackendUnavailableError(f"unknown injection backend: {kind!r}") from None
