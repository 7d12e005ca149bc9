"""System clipboard access bounded by timeouts.

Privacy Note:
    Clipboard contents are never logged, only sizes and status.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Callable, TypeVar

import pyperclip

from hyprvoice.injection.errors import ClipboardError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ClipboardSnapshot:
    """Clipboard contents captured before an injection."""

    content: str = ""

    @property
    def empty(self) -> bool:
        return self.content == ""


class Clipboard:
    """pyperclip wrapper whose reads and writes give up after a timeout.

    pyperclip shells out to wl-copy/xclip and can hang when no clipboard
    owner answers, so every call runs on a worker thread and the caller
    stops waiting at the deadline.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="clipboard")

    def _call(self, op: str, func: Callable[[], T], timeout: float) -> T:
        with self._lock:
            executor = self._executor
        future = executor.submit(func)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError as e:
            # The stuck worker is abandoned; later calls get a fresh one
            with self._lock:
                if self._executor is executor:
                    self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="clipboard")
            executor.shutdown(wait=False)
            logger.warning("clipboard: %s timed out after %.1fs", op, timeout)
            raise ClipboardError(f"clipboard {op} timed out after {timeout:g}s") from e
        except pyperclip.PyperclipException as e:
            logger.warning("clipboard: %s failed, error_type=%s", op, type(e).__name__)
            raise ClipboardError(f"clipboard {op} failed: {e}") from e

    def read(self, timeout: float) -> str:
        """Read the clipboard as text.

        Raises:
            ClipboardError: If the read failed or timed out.
        """
        content = self._call("read", pyperclip.paste, timeout)
        return content or ""

    def write(self, text: str, timeout: float) -> None:
        """Replace the clipboard contents.

        Raises:
            ClipboardError: If the write failed or timed out.
        """
        self._call("write", lambda: pyperclip.copy(text), timeout)
        logger.debug("clipboard: wrote %d chars", len(text))

    def snapshot(self, timeout: float) -> ClipboardSnapshot:
        """Capture the clipboard, treating any failure as an empty clipboard."""
        try:
            return ClipboardSnapshot(self.read(timeout))
        except ClipboardError as e:
            logger.info("clipboard: snapshot unavailable, treating as empty: %s", e)
            return ClipboardSnapshot()

    def close(self) -> None:
        with self._lock:
            self._executor.shutdown(wait=False)
