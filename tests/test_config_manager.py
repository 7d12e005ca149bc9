"""Tests for the live configuration manager."""

from __future__ import annotations

import threading
import time

import pytest
from watchdog.events import FileCreatedEvent, FileModifiedEvent, FileMovedEvent

from hyprvoice.config import (
    ConfigError,
    ConfigManager,
    ConfigNotFoundError,
    ConfigValidationError,
)
from hyprvoice.config import manager as manager_module
from hyprvoice.config.manager import RWLock, _ConfigFileHandler
from tests.conftest import LEGACY_CONFIG_TOML, VALID_CONFIG_TOML
from tests.helpers import wait_for


def _with_sample_rate(rate: int) -> str:
    return VALID_CONFIG_TOML + f"\n[recording]\nsample_rate = {rate}\n"


@pytest.fixture
def manager(valid_config_file):
    """ConfigManager over the valid config file with a short debounce."""
    manager = ConfigManager(valid_config_file, debounce_delay=0.05)
    yield manager
    manager.stop()


class TestInitialLoad:
    """Tests for ConfigManager construction."""

    def test_loads_valid_config(self, manager):
        """Test the initial config is loaded and not legacy."""
        assert manager.get_config().transcription.provider == "openai"
        assert manager.is_legacy() is False

    def test_missing_file_raises(self, config_path):
        """Test a missing file blocks startup."""
        with pytest.raises(ConfigNotFoundError):
            ConfigManager(config_path)

    def test_invalid_current_file_raises(self, tmp_path):
        """Test an invalid current-format file blocks startup."""
        config_file = tmp_path / "config.toml"
        config_file.write_text(VALID_CONFIG_TOML.replace('"whisper-1"', '"whisper-9"'))

        with pytest.raises(ConfigValidationError):
            ConfigManager(config_file)

    def test_legacy_file_loads_flagged(self, legacy_config_file):
        """Test a legacy file loads migrated and is reported as legacy."""
        manager = ConfigManager(legacy_config_file)

        assert manager.is_legacy() is True
        assert manager.get_config().injection.backends == ["wtype", "clipboard"]

    def test_snapshot_is_independent(self, manager):
        """Test callers cannot change the live config through a snapshot."""
        snapshot = manager.get_config()
        snapshot.injection.backends.clear()
        snapshot.recording.sample_rate = 1

        fresh = manager.get_config()
        assert fresh.injection.backends == ["ydotool", "wtype", "clipboard"]
        assert fresh.recording.sample_rate == 16000


class TestReload:
    """Tests for reload_config."""

    def test_reload_publishes_new_config(self, manager, valid_config_file):
        """Test a valid change is swapped in and announced."""
        callback = threading.Event()
        manager.set_on_config_reload(callback.set)
        valid_config_file.write_text(_with_sample_rate(48000))

        assert manager.reload_config() is True
        assert manager.get_config().recording.sample_rate == 48000
        assert callback.is_set()

    def test_invalid_reload_keeps_previous(self, manager, valid_config_file, mocker):
        """Test a config that fails validation is skipped."""
        callback = mocker.MagicMock()
        manager.set_on_config_reload(callback)
        valid_config_file.write_text(_with_sample_rate(0))

        assert manager.reload_config() is False
        assert manager.get_config().recording.sample_rate == 16000
        callback.assert_not_called()

    def test_undecodable_reload_keeps_previous(self, manager, valid_config_file):
        """Test a half-written file does not replace the live config."""
        valid_config_file.write_text("[transcription\n")

        assert manager.reload_config() is False
        assert manager.get_config().transcription.model == "whisper-1"

    def test_deleted_file_keeps_previous(self, manager, valid_config_file):
        """Test a vanished file does not replace the live config."""
        valid_config_file.unlink()

        assert manager.reload_config() is False
        assert manager.get_config().transcription.provider == "openai"

    def test_legacy_reload_keeps_previous(self, manager, valid_config_file, mocker):
        """Test a legacy file on disk is not applied by a reload."""
        callback = mocker.MagicMock()
        manager.set_on_config_reload(callback)
        valid_config_file.write_text(LEGACY_CONFIG_TOML)

        assert manager.reload_config() is False
        assert manager.get_config().injection.backends == ["ydotool", "wtype", "clipboard"]
        assert manager.is_legacy() is False
        callback.assert_not_called()

    def test_current_reload_clears_legacy(self, legacy_config_file):
        """Test replacing a legacy file with a current one clears the flag."""
        with ConfigManager(legacy_config_file) as manager:
            legacy_config_file.write_text(VALID_CONFIG_TOML)

            assert manager.reload_config() is True
            assert manager.is_legacy() is False

    def test_callback_error_is_contained(self, manager, valid_config_file):
        """Test a failing callback does not undo or break the reload."""
        def boom():
            raise RuntimeError("callback failed")

        manager.set_on_config_reload(boom)
        valid_config_file.write_text(_with_sample_rate(44100))

        assert manager.reload_config() is True
        assert manager.get_config().recording.sample_rate == 44100

    def test_callback_can_read_config(self, manager, valid_config_file):
        """Test the callback may read the config without deadlocking."""
        seen = []
        manager.set_on_config_reload(lambda: seen.append(manager.get_config().recording.sample_rate))
        valid_config_file.write_text(_with_sample_rate(22050))

        manager.reload_config()

        assert seen == [22050]


class TestDebounce:
    """Tests for debounced reloads."""

    def test_burst_collapses_to_one_reload(self, manager, mocker):
        """Test N events inside the quiet period cause one reload."""
        reload = mocker.patch.object(manager, "reload_config")

        for _ in range(10):
            manager._schedule_reload()

        assert wait_for(lambda: reload.call_count == 1)
        time.sleep(0.2)
        assert reload.call_count == 1

    def test_separate_bursts_reload_separately(self, manager, mocker):
        """Test events after the quiet period trigger another reload."""
        reload = mocker.patch.object(manager, "reload_config")

        manager._schedule_reload()
        assert wait_for(lambda: reload.call_count == 1)
        manager._schedule_reload()
        assert wait_for(lambda: reload.call_count == 2)

    def test_stop_cancels_pending_reload(self, valid_config_file, mocker):
        """Test stop() prevents a scheduled reload from running."""
        manager = ConfigManager(valid_config_file, debounce_delay=0.2)
        reload = mocker.patch.object(manager, "reload_config")

        manager._schedule_reload()
        manager.stop()
        time.sleep(0.3)

        reload.assert_not_called()


class TestStop:
    """Tests for stop() while reload work is in flight."""

    def test_stop_waits_for_running_reload(self, valid_config_file, mocker):
        """Test stop() waits out a reload already past its timer and drops its result."""
        real_validate = manager_module.validate
        validating = threading.Event()

        def slow_validate(config):
            validating.set()
            time.sleep(0.3)
            real_validate(config)

        manager = ConfigManager(valid_config_file, debounce_delay=0.01)
        mocker.patch.object(manager_module, "validate", side_effect=slow_validate)
        callback_calls = []
        manager.set_on_config_reload(lambda: callback_calls.append(1))
        valid_config_file.write_text(_with_sample_rate(48000))

        manager._schedule_reload()
        assert validating.wait(2.0)
        manager.stop()
        time.sleep(0.4)

        assert callback_calls == []
        assert manager.get_config().recording.sample_rate == 16000

    def test_reload_after_stop_is_skipped(self, manager, valid_config_file):
        """Test reload_config() publishes nothing once stopped."""
        callback = threading.Event()
        manager.set_on_config_reload(callback.set)
        valid_config_file.write_text(_with_sample_rate(48000))
        manager.stop()

        assert manager.reload_config() is False
        assert manager.get_config().recording.sample_rate == 16000
        assert not callback.is_set()

    def test_stop_from_callback(self, manager, valid_config_file):
        """Test the reload callback may stop the manager without deadlocking."""
        manager.set_on_config_reload(manager.stop)
        valid_config_file.write_text(_with_sample_rate(48000))

        assert manager.reload_config() is True
        assert manager.get_config().recording.sample_rate == 48000


class TestFileHandler:
    """Tests for config file event filtering."""

    @pytest.fixture
    def handler(self, mocker):
        callback = mocker.MagicMock()
        return _ConfigFileHandler("config.toml", callback), callback

    def test_modified_config_file(self, handler):
        handler, callback = handler

        handler.on_modified(FileModifiedEvent("/cfg/hyprvoice/config.toml"))

        callback.assert_called_once()

    def test_created_config_file(self, handler):
        handler, callback = handler

        handler.on_created(FileCreatedEvent("/cfg/hyprvoice/config.toml"))

        callback.assert_called_once()

    def test_renamed_into_place(self, handler):
        """Test editors that save via rename are noticed."""
        handler, callback = handler

        handler.on_moved(FileMovedEvent("/cfg/hyprvoice/.config.toml.swp", "/cfg/hyprvoice/config.toml"))

        callback.assert_called_once()

    def test_other_files_ignored(self, handler):
        """Test sibling files do not trigger a reload."""
        handler, callback = handler

        handler.on_modified(FileModifiedEvent("/cfg/hyprvoice/config.toml.bak"))
        handler.on_created(FileCreatedEvent("/cfg/hyprvoice/other.toml"))
        handler.on_moved(FileMovedEvent("/cfg/hyprvoice/config.toml", "/cfg/hyprvoice/config.old"))

        callback.assert_not_called()


@pytest.mark.slow
class TestWatching:
    """Tests with a real filesystem watcher."""

    def test_file_change_triggers_reload(self, manager, valid_config_file):
        """Test editing the file is picked up without a restart."""
        reloaded = threading.Event()
        manager.set_on_config_reload(reloaded.set)
        manager.start_watching()

        valid_config_file.write_text(_with_sample_rate(48000))

        assert reloaded.wait(timeout=5.0)
        assert manager.get_config().recording.sample_rate == 48000

    def test_atomic_save_triggers_reload(self, manager, valid_config_file):
        """Test save_config's write-then-rename is picked up."""
        from hyprvoice.config import save_config

        manager.start_watching()
        config = manager.get_config()
        config.recording.channels = 2

        save_config(config, valid_config_file)

        assert wait_for(lambda: manager.get_config().recording.channels == 2)

    def test_start_watching_twice_is_noop(self, manager):
        manager.start_watching()
        manager.start_watching()

    def test_start_after_stop_raises(self, manager):
        """Test a stopped manager cannot be restarted."""
        manager.stop()

        with pytest.raises(ConfigError):
            manager.start_watching()

    def test_stop_is_idempotent(self, manager):
        manager.start_watching()
        manager.stop()
        manager.stop()


class TestConcurrentAccess:
    """Tests for snapshot consistency under concurrent reloads."""

    def test_readers_never_see_partial_config(self, manager, valid_config_file):
        """Test every snapshot pairs values written together."""
        stop = threading.Event()
        mismatches = []

        def reader():
            while not stop.is_set():
                config = manager.get_config()
                if config.recording.sample_rate != config.recording.buffer_size:
                    mismatches.append(config.recording.sample_rate)

        valid_config_file.write_text(VALID_CONFIG_TOML + "\n[recording]\nsample_rate = 8192\n")
        manager.reload_config()

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for thread in threads:
            thread.start()
        try:
            for value in (16000, 22050, 44100, 48000, 8192):
                valid_config_file.write_text(
                    VALID_CONFIG_TOML + f"\n[recording]\nsample_rate = {value}\nbuffer_size = {value}\n"
                )
                assert manager.reload_config() is True
        finally:
            stop.set()
            for thread in threads:
                thread.join()

        assert mismatches == []


class TestRWLock:
    """Tests for the reader-preferring read/write lock."""

    def test_readers_share(self):
        """Test two readers can hold the lock together."""
        lock = RWLock()
        lock.acquire_read()
        acquired = threading.Event()

        def second_reader():
            lock.acquire_read()
            acquired.set()
            lock.release_read()

        thread = threading.Thread(target=second_reader)
        thread.start()

        assert acquired.wait(timeout=1.0)
        lock.release_read()
        thread.join()

    def test_writer_waits_for_readers(self):
        """Test a writer blocks until the reader releases."""
        lock = RWLock()
        lock.acquire_read()
        written = threading.Event()

        def writer():
            lock.acquire_write()
            written.set()
            lock.release_write()

        thread = threading.Thread(target=writer)
        thread.start()

        assert not written.wait(timeout=0.1)
        lock.release_read()
        assert written.wait(timeout=1.0)
        thread.join()
