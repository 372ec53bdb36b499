"""Transient user notifications (toasts) raised by the client-side controllers."""
import logging
from dataclasses import dataclass
from typing import List

logger = logging.getLogger(__name__)

DEFAULT = "default"
DESTRUCTIVE = "destructive"


@dataclass
class Toast:
    title: str
    description: str = ""
    variant: str = DEFAULT


class Notifier:
    def __init__(self):
        self.toasts: List[Toast] = []

    def toast(self, title: str, description: str = "", variant: str = DEFAULT) -> Toast:
        entry = Toast(title=title, description=description, variant=variant)
        self.toasts.append(entry)
        if variant == DESTRUCTIVE:
            logger.warning("%s: %s", title, description)
        else:
            logger.info("%s: %s", title, description)
        return entry

    @property
    def last(self):
        return self.toasts[-1] if self.toasts else None

    def clear(self):
        self.toasts.clear()
