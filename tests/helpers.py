"""Shared test helper classes and utilities.

This module contains classes and utilities that need to be imported
directly in test files (as opposed to pytest fixtures which are
auto-injected).
"""

from __future__ import annotations

import threading
import time
from typing import Callable

from hyprvoice.injection import (
    Backend,
    BackendUnavailableError,
    Clipboard,
    ClipboardError,
    InjectionError,
)


class FakeBackend(Backend):
    """Backend whose availability and delivery are scripted by the test.

    Attributes:
        delivered: Texts passed to deliver(), in order.
        timeouts: Timeouts passed to deliver(), in order.
    """

    def __init__(
        self,
        name: str,
        unavailable: str | None = None,
        error: InjectionError | None = None,
        on_deliver: Callable[[str], None] | None = None,
    ):
        """Initialize fake backend.

        Args:
            name: Backend kind this fake stands in for.
            unavailable: If set, available() raises with this reason.
            error: If set, deliver() raises it.
            on_deliver: Optional hook run inside deliver().
        """
        self.name = name
        self.unavailable = unavailable
        self.error = error
        self.on_deliver = on_deliver
        self.delivered: list[str] = []
        self.timeouts: list[float] = []
        self.available_calls = 0

    def available(self) -> None:
        self.available_calls += 1
        if self.unavailable:
            raise BackendUnavailableError(self.unavailable)

    def deliver(self, text: str, timeout: float, cancel: threading.Event | None = None) -> None:
        if self.on_deliver is not None:
            self.on_deliver(text)
        if self.error is not None:
            raise self.error
        self.delivered.append(text)
        self.timeouts.append(timeout)


class FakeClipboard(Clipboard):
    """In-memory clipboard with optional scripted failures.

    Attributes:
        content: Current clipboard text.
        writes: Every text written, in order.
    """

    def __init__(self, content: str = "", fail_reads: bool = False, fail_writes: bool = False):
        super().__init__()
        self.content = content
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.writes: list[str] = []
        self._write_lock = threading.Lock()

    def read(self, timeout: float) -> str:
        if self.fail_reads:
            raise ClipboardError("clipboard read failed")
        return self.content

    def write(self, text: str, timeout: float) -> None:
        if self.fail_writes:
            raise ClipboardError("clipboard write failed")
        with self._write_lock:
            self.content = text
            self.writes.append(text)


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0, interval: float = 0.02) -> bool:
    """Poll until predicate() is true or the timeout passes.

    Returns:
        The final value of predicate().
    """
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()
