"""Text injection through an ordered chain of delivery backends."""

from hyprvoice.injection.errors import (
    BackendUnavailableError,
    ClipboardError,
    CommandTimeoutError,
    InjectionCancelledError,
    InjectionError,
)
from hyprvoice.injection.process import run_command
from hyprvoice.injection.clipboard import Clipboard, ClipboardSnapshot
from hyprvoice.injection.backends import (
    BACKENDS,
    Backend,
    ClipboardBackend,
    WtypeBackend,
    YdotoolBackend,
    create_backend,
    find_ydotool_socket,
)
from hyprvoice.injection.injector import ClipboardRestore, Injector

__all__ = [
    # Errors
    "BackendUnavailableError",
    "ClipboardError",
    "CommandTimeoutError",
    "InjectionCancelledError",
    "InjectionError",
    # Primitives
    "Clipboard",
    "ClipboardSnapshot",
    "run_command",
    # Backends
    "BACKENDS",
    "Backend",
    "ClipboardBackend",
    "WtypeBackend",
    "YdotoolBackend",
    "create_backend",
    "find_ydotool_socket",
    # Engine
    "ClipboardRestore",
    "Injector",
]
