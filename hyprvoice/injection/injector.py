"""Injection engine: drives the backend fallback chain.

Privacy Note:
    This module NEVER logs the injected text or clipboard contents. Only
    backend names, lengths and status are logged.
"""

from __future__ import annotations

import copy
import logging
import threading
from typing import Mapping

from hyprvoice.config.types import BACKEND_CLIPBOARD, InjectionConfig
from hyprvoice.injection.backends import Backend, create_backend
from hyprvoice.injection.clipboard import Clipboard, ClipboardSnapshot
from hyprvoice.injection.errors import (
    ClipboardError,
    InjectionCancelledError,
    InjectionError,
)

logger = logging.getLogger(__name__)

# Time paste-consuming apps get before the original clipboard returns
DEFAULT_RESTORE_DELAY = 0.1


class ClipboardRestore:
    """Delayed, cancelable write of a clipboard snapshot.

    The restore runs on its own daemon thread so inject() returns without
    waiting for it. A failed restore is logged and otherwise ignored.
    """

    def __init__(
        self,
        clipboard: Clipboard,
        snapshot: ClipboardSnapshot,
        delay: float,
        timeout: float,
    ) -> None:
        self.clipboard = clipboard
        self.snapshot = snapshot
        self.delay = delay
        self.timeout = timeout
        self.restored = False

        self._lock = threading.Lock()
        self._cancelled = threading.Event()
        self._done = threading.Event()
        self._started = False
        self._thread = threading.Thread(target=self._run, name="clipboard-restore", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def _run(self) -> None:
        try:
            if self._cancelled.wait(self.delay):
                return
            with self._lock:
                if self._cancelled.is_set():
                    return
                self._started = True
            try:
                self.clipboard.write(self.snapshot.content, self.timeout)
                self.restored = True
                logger.debug("clipboard_restore: restored %d chars", len(self.snapshot.content))
            except ClipboardError as e:
                logger.warning("clipboard_restore: failed: %s", e)
        finally:
            self._done.set()

    def cancel(self) -> bool:
        """Cancel the restore if it has not begun writing.

        Returns:
            True if the snapshot will not be written.
        """
        with self._lock:
            if self._started:
                return False
            self._cancelled.set()
            return True

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for the restore to finish or be cancelled.

        Returns:
            True if it finished within the timeout.
        """
        return self._done.wait(timeout)

    @property
    def done(self) -> bool:
        return self._done.is_set()


class Injector:
    """Delivers text through an ordered chain of backends.

    Backends are tried in configured order. An unavailable or failing backend
    moves the chain on to the next one, and the first success ends it. When
    the chain contains the clipboard backend, the text is put on the
    clipboard before typing starts, so a typing failure still leaves the text
    ready to paste.

    Example:
        >>> injector = Injector(to_injection_config(config))
        >>> injector.inject("hello world")
        'wtype'
    """

    def __init__(
        self,
        config: InjectionConfig,
        clipboard: Clipboard | None = None,
        backends: Mapping[str, Backend] | None = None,
        restore_delay: float = DEFAULT_RESTORE_DELAY,
    ) -> None:
        """Initialize the injector.

        Args:
            config: Backend chain and timeouts.
            clipboard: Clipboard to use. A private one is created if None.
            backends: Backend instances by kind. Missing kinds are created
                on first use.
            restore_delay: Seconds before the original clipboard returns.
        """
        self._config = copy.deepcopy(config)
        self._owns_clipboard = clipboard is None
        self._clipboard = clipboard if clipboard is not None else Clipboard()
        self._backends: dict[str, Backend] = dict(backends or {})
        self._restore_delay = restore_delay

        self._lock = threading.Lock()
        self._inject_lock = threading.Lock()
        self._pending_restore: ClipboardRestore | None = None
        self._closed = False

    @property
    def config(self) -> InjectionConfig:
        with self._lock:
            return self._config

    def update_config(self, config: InjectionConfig) -> None:
        """Use a new chain and timeouts for subsequent injections."""
        with self._lock:
            self._config = copy.deepcopy(config)
        logger.debug("injector: config updated, backends=%s", config.backends)

    def _backend(self, kind: str) -> Backend:
        backend = self._backends.get(kind)
        if backend is None:
            backend = create_backend(kind, self._clipboard)
            self._backends[kind] = backend
        return backend

    def _take_pending_restore(self, timeout: float) -> ClipboardSnapshot | None:
        """Cancel an outstanding restore and hand back its snapshot.

        While a restore is pending the clipboard still holds the previous
        injection, so its snapshot is the user's real clipboard.
        """
        with self._lock:
            pending, self._pending_restore = self._pending_restore, None
        if pending is None or pending.done:
            return None
        if pending.cancel():
            return pending.snapshot
        pending.wait(timeout)
        return None

    def _schedule_restore(self, snapshot: ClipboardSnapshot, timeout: float) -> ClipboardRestore:
        restore = ClipboardRestore(self._clipboard, snapshot, self._restore_delay, timeout)
        with self._lock:
            self._pending_restore = restore
        restore.start()
        logger.debug("injector: clipboard restore scheduled in %.3fs", self._restore_delay)
        return restore

    def inject(self, text: str, cancel: threading.Event | None = None) -> str:
        """Deliver text to the focused application.

        Args:
            text: Text to deliver. Must be non-empty.
            cancel: Optional event that aborts the injection when set.

        Returns:
            Name of the backend that delivered the text.

        Raises:
            InjectionError: If text is empty, the chain is empty, or every
                backend failed (naming each failure).
            InjectionCancelledError: If cancel was set.
        """
        if not text:
            raise InjectionError("cannot inject empty text")

        with self._inject_lock:
            if self._closed:
                raise InjectionError("injector is closed")
            config = self.config
            if not config.backends:
                raise InjectionError("no injection backends configured")
            return self._inject(text, config, cancel)

    def _inject(self, text: str, config: InjectionConfig, cancel: threading.Event | None) -> str:
        clipboard_timeout = config.clipboard_timeout
        snapshot = ClipboardSnapshot()
        staged = False

        if cancel is not None and cancel.is_set():
            raise InjectionCancelledError("injection cancelled")

        if config.uses_clipboard:
            previous = self._take_pending_restore(clipboard_timeout)
            if config.restore_clipboard:
                snapshot = previous if previous is not None else self._clipboard.snapshot(clipboard_timeout)
            try:
                self._clipboard.write(text, clipboard_timeout)
                staged = True
            except ClipboardError as e:
                logger.warning("injector: could not stage text on clipboard: %s", e)

        failures: list[tuple[str, str]] = []
        delivered = ""
        try:
            for kind in config.backends:
                if cancel is not None and cancel.is_set():
                    raise InjectionCancelledError("injection cancelled")

                if kind == BACKEND_CLIPBOARD and staged:
                    delivered = kind
                    break

                try:
                    backend = self._backend(kind)
                    backend.available()
                    backend.deliver(text, config.timeout_for(kind), cancel)
                except InjectionCancelledError:
                    raise
                except InjectionError as e:
                    logger.info("injector: backend %s failed: %s", kind, e)
                    failures.append((kind, str(e)))
                    continue

                delivered = kind
                break
        except InjectionCancelledError:
            logger.info("injector: cancelled")
            if staged and config.restore_clipboard and not snapshot.empty:
                self._schedule_restore(snapshot, clipboard_timeout)
            raise

        if not delivered:
            logger.error("injector: all backends failed, tried=%s", [name for name, _ in failures])
            raise InjectionError("all injection backends failed", failures)

        logger.info("injector: delivered via %s, chars=%d", delivered, len(text))

        # Text left on the clipboard on purpose must stay there
        if delivered != BACKEND_CLIPBOARD and config.restore_clipboard and not snapshot.empty:
            self._schedule_restore(snapshot, clipboard_timeout)
        return delivered

    def wait_for_restore(self, timeout: float | None = None) -> bool:
        """Wait for a scheduled clipboard restore, if any.

        Returns:
            True if no restore is outstanding when this returns.
        """
        with self._lock:
            pending = self._pending_restore
        if pending is None:
            return True
        return pending.wait(timeout)

    def close(self) -> None:
        """Cancel any pending restore and release the clipboard worker."""
        with self._lock:
            self._closed = True
            pending, self._pending_restore = self._pending_restore, None
        if pending is not None and not pending.cancel():
            pending.wait(pending.timeout)
        if self._owns_clipboard:
            self._clipboard.close()
        logger.debug("injector: closed")
