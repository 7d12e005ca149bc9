"""External process execution with a hard deadline and cancellation."""

from __future__ import annotations

import logging
import subprocess
import threading
import time

from hyprvoice.injection.errors import (
    CommandTimeoutError,
    InjectionCancelledError,
    InjectionError,
)

logger = logging.getLogger(__name__)

# How often a running command checks for cancellation
POLL_INTERVAL = 0.05


def _kill(proc: subprocess.Popen) -> None:
    proc.kill()
    try:
        proc.communicate(timeout=1.0)
    except subprocess.TimeoutExpired:
        logger.warning("run_command: pid=%d did not exit after kill", proc.pid)


def run_command(
    args: list[str],
    timeout: float,
    cancel: threading.Event | None = None,
) -> str:
    """Run a command and wait for it, bounded by a deadline.

    The child is killed as soon as the deadline passes or ``cancel`` is set.

    Privacy Note:
        Arguments may carry the text being typed; only the program name is
        logged.

    Args:
        args: Program and arguments.
        timeout: Deadline in seconds.
        cancel: Optional event that aborts the command when set.

    Returns:
        The command's stdout.

    Raises:
        CommandTimeoutError: If the deadline passed.
        InjectionCancelledError: If cancel was set.
        InjectionError: If the command could not start or exited non-zero.
    """
    program = args[0]
    if cancel is not None and cancel.is_set():
        raise InjectionCancelledError(f"{program}: cancelled")

    try:
        proc = subprocess.Popen(
            args,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except OSError as e:
        raise InjectionError(f"{program}: failed to start: {e}") from e

    deadline = time.monotonic() + timeout
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            _kill(proc)
            logger.warning("run_command: %s timed out after %.1fs", program, timeout)
            raise CommandTimeoutError(f"{program}: timed out after {timeout:g}s")
        if cancel is not None and cancel.is_set():
            _kill(proc)
            logger.info("run_command: %s cancelled", program)
            raise InjectionCancelledError(f"{program}: cancelled")
        try:
            stdout, stderr = proc.communicate(timeout=min(POLL_INTERVAL, remaining))
            break
        except subprocess.TimeoutExpired:
            continue

    if proc.returncode != 0:
        detail = stderr.strip() or f"exit status {proc.returncode}"
        logger.debug("run_command: %s failed, returncode=%d", program, proc.returncode)
        raise InjectionError(f"{program}: {detail}")
    return stdout
