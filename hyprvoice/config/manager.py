"""Live configuration ownership with file watching and hot reload."""

from __future__ import annotations

import copy
import logging
import threading
from pathlib import Path
from typing import Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from hyprvoice.config.errors import ConfigError
from hyprvoice.config.loader import get_config_path, load_or_legacy
from hyprvoice.config.types import Config
from hyprvoice.config.validate import validate

logger = logging.getLogger(__name__)

# Quiet period after the last file event before a reload runs
DEFAULT_DEBOUNCE_DELAY = 0.5


class RWLock:
    """Reader-preferring read/write lock.

    Any number of readers may hold the lock together; a writer waits until
    there are none and excludes everyone while it holds the lock.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    def acquire_read(self) -> None:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            while self._writing or self._readers > 0:
                self._cond.wait()
            self._writing = True

    def release_write(self) -> None:
        with self._cond:
            self._writing = False
            self._cond.notify_all()


class _ConfigFileHandler(FileSystemEventHandler):
    """Forwards events touching the config file to the manager."""

    def __init__(self, file_name: str, callback: Callable[[], None]) -> None:
        self._file_name = file_name
        self._callback = callback

    def _matches(self, path: str | bytes) -> bool:
        if isinstance(path, bytes):
            path = path.decode(errors="replace")
        return Path(path).name == self._file_name

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._callback()

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._callback()

    def on_moved(self, event: FileSystemEvent) -> None:
        # Editors that save via temp file then rename land here
        if not event.is_directory and self._matches(event.dest_path):
            self._callback()


class ConfigManager:
    """Owns the live configuration and keeps it in sync with the file.

    Callers read immutable snapshots with get_config(). A file watcher
    triggers debounced reloads; a reload that fails to load, is legacy, or
    does not validate is logged and skipped so the last good configuration
    stays authoritative.

    Example:
        >>> with ConfigManager() as manager:
        ...     manager.set_on_config_reload(lambda: print("reloaded"))
        ...     manager.start_watching()
        ...     config = manager.get_config()
    """

    def __init__(
        self,
        config_path: Path | None = None,
        debounce_delay: float = DEFAULT_DEBOUNCE_DELAY,
    ) -> None:
        """Load the initial configuration.

        Args:
            config_path: Config file to manage. Defaults to get_config_path().
            debounce_delay: Seconds of quiet after the last file event before
                a reload runs.

        Raises:
            ConfigNotFoundError: If the file does not exist.
            ConfigDecodeError: If the file cannot be decoded.
            ConfigValidationError: If a current-format file is invalid.
        """
        self._config_path = config_path if config_path is not None else get_config_path()
        self._debounce_delay = debounce_delay

        self._lock = RWLock()
        self._state_lock = threading.Lock()
        self._reload_lock = threading.RLock()

        self._on_reload: Callable[[], None] | None = None
        self._observer: Observer | None = None
        self._timer: threading.Timer | None = None
        self._stopped = False

        config, legacy = load_or_legacy(self._config_path)
        if not legacy:
            validate(config)
        self._config = config
        self._legacy = legacy
        logger.info("config_manager: loaded %s, legacy=%s", self._config_path, legacy)

    @property
    def config_path(self) -> Path:
        return self._config_path

    def get_config(self) -> Config:
        """Return a snapshot of the current configuration.

        The snapshot is a private copy; call again to observe a reload.
        """
        self._lock.acquire_read()
        try:
            return copy.deepcopy(self._config)
        finally:
            self._lock.release_read()

    def is_legacy(self) -> bool:
        """True until the first successful non-legacy load or reload."""
        self._lock.acquire_read()
        try:
            return self._legacy
        finally:
            self._lock.release_read()

    def set_on_config_reload(self, callback: Callable[[], None] | None) -> None:
        """Register the callback run after each successful reload."""
        with self._state_lock:
            self._on_reload = callback

    def start_watching(self) -> None:
        """Watch the config file's directory and reload on changes.

        Raises:
            ConfigError: If the manager was stopped or the watch cannot start.
        """
        with self._state_lock:
            if self._stopped:
                raise ConfigError("config manager is stopped")
            if self._observer is not None:
                return

            handler = _ConfigFileHandler(self._config_path.name, self._schedule_reload)
            observer = Observer()
            try:
                observer.schedule(handler, str(self._config_path.parent), recursive=False)
                observer.start()
            except OSError as e:
                raise ConfigError(f"failed to watch {self._config_path.parent}: {e}") from e
            self._observer = observer

        logger.info("config_manager: watching %s", self._config_path)

    def _schedule_reload(self) -> None:
        """Restart the debounce timer for a file event."""
        with self._state_lock:
            if self._stopped:
                return
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._debounce_delay, self._debounced_reload)
            self._timer.daemon = True
            self._timer.start()
        logger.debug("config_manager: change detected, reload in %.3fs", self._debounce_delay)

    def _debounced_reload(self) -> None:
        with self._state_lock:
            if self._stopped or self._timer is not threading.current_thread():
                return
            self._timer = None
        self.reload_config()

    def reload_config(self) -> bool:
        """Reload the file and publish it if it is current and valid.

        Never raises; failures keep the previous configuration. Once stop()
        has been called nothing is published and the callback does not run.

        Returns:
            True if a new configuration was published.
        """
        with self._reload_lock:
            if self._is_stopped():
                return False
            try:
                config, legacy = load_or_legacy(self._config_path)
            except ConfigError as e:
                logger.error("config_manager: reload failed, keeping previous config: %s", e)
                return False

            if legacy:
                logger.warning("config_manager: legacy config on disk, keeping previous config")
                return False

            try:
                validate(config)
            except ConfigError as e:
                logger.error("config_manager: invalid config, keeping previous config: %s", e)
                return False

            if self._is_stopped():
                return False

            self._lock.acquire_write()
            try:
                self._config = config
                self._legacy = False
            finally:
                self._lock.release_write()

            logger.info("config_manager: configuration reloaded")

            with self._state_lock:
                callback = None if self._stopped else self._on_reload

            # Runs under _reload_lock so stop() can wait for it
            if callback is not None:
                try:
                    callback()
                except Exception as e:
                    logger.error("config_manager: reload callback failed: %s", e)
        return True

    def _is_stopped(self) -> bool:
        with self._state_lock:
            return self._stopped

    def stop(self) -> None:
        """Stop watching and wait for the watcher, timer and any running reload.

        Safe to call from the reload callback.
        """
        with self._state_lock:
            self._stopped = True
            observer, self._observer = self._observer, None
            timer, self._timer = self._timer, None

        if timer is not None:
            timer.cancel()
            if timer is not threading.current_thread():
                timer.join()
        if observer is not None:
            observer.stop()
            observer.join()
        # Waits for a reload already past its debounce timer
        with self._reload_lock:
            pass
        logger.debug("config_manager: stopped")

    def __enter__(self) -> ConfigManager:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
