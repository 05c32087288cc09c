"""User-facing notifications (toasts) emitted by the submission controller."""

import logging
from dataclasses import dataclass
from typing import Literal, Protocol

logger = logging.getLogger(__name__)

Variant = Literal["default", "destructive"]


@dataclass(frozen=True)
class Notification:
    """A short title, a longer description and a severity tag."""

    title: str
    description: str
    variant: Variant = "default"


class Notifier(Protocol):
    """Fire-and-forget sink for notifications."""

    def notify(self, notification: Notification) -> None: ...


class ConsoleNotifier:
    """Print notifications to stdout; the log gets a DEBUG copy."""

    def notify(self, notification: Notification) -> None:
        icon = "❌" if notification.variant == "destructive" else "✅"
        print(f"{icon} {notification.title}: {notification.description}")

        logger.debug(
            "Notified %s (%s): %s",
            notification.title,
            notification.variant,
            notification.description,
        )
