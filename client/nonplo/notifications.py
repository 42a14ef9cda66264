"""User-facing notifications (toasts) emitted by controllers.

Controllers take an injectable ``notifier`` callable; without one,
notifications go to the ``nonplo.notifications`` logger.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Literal

logger = logging.getLogger(__name__)

Level = Literal["success", "info", "warning", "error"]

_LOG_LEVELS = {
    "success": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass(frozen=True)
class Notification:
    level: Level
    title: str
    message: str


Notifier = Callable[[Notification], Any]


def log_notification(notification: Notification) -> None:
    logger.log(
        _LOG_LEVELS.get(notification.level, logging.INFO),
        f"{notification.title}: {notification.message}",
    )
