"""Notification module for hyprvoice.

Announces daemon events (recording, transcription, config reloads) through
desktop notifications, the log, or not at all.

Privacy Note:
    Notifications NEVER show transcription content. Only generic status
    messages are displayed.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto

from plyer import notification

from hyprvoice.config.types import MessagesConfig, NotificationsConfig

logger = logging.getLogger(__name__)

APP_NAME = "Hyprvoice"
DEFAULT_TIMEOUT = 5
ERROR_BODY_LIMIT = 100


class MessageType(Enum):
    """Events the daemon can announce."""

    RECORDING_STARTED = auto()
    TRANSCRIBING = auto()
    LLM_PROCESSING = auto()
    CONFIG_RELOADED = auto()
    OPERATION_CANCELLED = auto()
    RECORDING_ABORTED = auto()
    INJECTION_ABORTED = auto()
    INJECTION_COMPLETE = auto()


@dataclass(frozen=True)
class MessageDef:
    """Default text for one event, and its key under notifications.messages."""

    type: MessageType
    config_key: str
    default_title: str
    default_body: str
    is_error: bool = False


@dataclass(frozen=True)
class Message:
    title: str
    body: str
    is_error: bool = False


MESSAGE_DEFS: tuple[MessageDef, ...] = (
    MessageDef(MessageType.RECORDING_STARTED, "recording_started", APP_NAME, "Recording Started"),
    MessageDef(MessageType.TRANSCRIBING, "transcribing", APP_NAME, "Recording Ended... Transcribing"),
    MessageDef(MessageType.LLM_PROCESSING, "llm_processing", APP_NAME, "Processing..."),
    MessageDef(MessageType.CONFIG_RELOADED, "config_reloaded", APP_NAME, "Config Reloaded"),
    MessageDef(MessageType.OPERATION_CANCELLED, "operation_cancelled", APP_NAME, "Operation Cancelled"),
    MessageDef(MessageType.RECORDING_ABORTED, "recording_aborted", APP_NAME, "Recording Aborted", is_error=True),
    MessageDef(MessageType.INJECTION_ABORTED, "injection_aborted", APP_NAME, "Injection Aborted", is_error=True),
    MessageDef(MessageType.INJECTION_COMPLETE, "injection_complete", APP_NAME, "Text Injected"),
)


def resolve_messages(messages: MessagesConfig | None = None) -> dict[MessageType, Message]:
    """Merge user message overrides over the defaults.

    An empty title or body in the config keeps the default.
    """
    messages = messages or MessagesConfig()
    result = {}
    for definition in MESSAGE_DEFS:
        override = getattr(messages, definition.config_key)
        result[definition.type] = Message(
            title=override.title or definition.default_title,
            body=override.body or definition.default_body,
            is_error=definition.is_error,
        )
    return result


class Notifier(ABC):
    """Sends event announcements to the user."""

    def __init__(self, messages: MessagesConfig | None = None) -> None:
        self.messages = resolve_messages(messages)

    @abstractmethod
    def notify(self, title: str, body: str, is_error: bool = False) -> None:
        """Show one notification."""

    def send(self, message_type: MessageType) -> None:
        """Announce an event with its configured text."""
        message = self.messages[message_type]
        self.notify(message.title, message.body, message.is_error)

    def error(self, message: str) -> None:
        """Announce a failure. The text is trimmed to one short line."""
        safe_message = message[:ERROR_BODY_LIMIT].replace("\n", " ").replace("\r", "")
        self.notify(f"{APP_NAME} Error", safe_message, is_error=True)


class DesktopNotifier(Notifier):
    """Desktop notifications through plyer."""

    def __init__(self, messages: MessagesConfig | None = None, timeout: int = DEFAULT_TIMEOUT) -> None:
        super().__init__(messages)
        self.timeout = timeout

    def notify(self, title: str, body: str, is_error: bool = False) -> None:
        try:
            notification.notify(
                title=title,
                message=body,
                app_name=APP_NAME,
                timeout=self.timeout,
            )
            logger.debug("notification: shown, title=%s", title)
        except Exception as e:
            # plyer raises NotImplementedError without a platform backend
            logger.warning("notification: failed, error_type=%s", type(e).__name__)


class LogNotifier(Notifier):
    """Writes announcements to the log instead of the desktop."""

    def notify(self, title: str, body: str, is_error: bool = False) -> None:
        level = logging.ERROR if is_error else logging.INFO
        logger.log(level, "notification: %s: %s", title, body)


class NopNotifier(Notifier):
    def notify(self, title: str, body: str, is_error: bool = False) -> None:
        pass


def build_notifier(config: NotificationsConfig) -> Notifier:
    """Create the notifier selected by the notifications config."""
    if not config.enabled or config.type == "none":
        return NopNotifier(config.messages)
    if config.type == "log":
        return LogNotifier(config.messages)
    return DesktopNotifier(config.messages)
