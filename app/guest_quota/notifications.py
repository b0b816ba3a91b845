"""
Notification surface used to tell visitors a free quota is exhausted.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Protocol


@dataclass
class CallToAction:
    """A labelled navigation target attached to a notification."""
    label: str
    target: str

    def to_dict(self) -> dict:
        return {"label": self.label, "target": self.target}


@dataclass
class Notification:
    """A toast-style message for the presentation layer."""
    message: str
    level: str = "error"
    action: Optional[CallToAction] = None
    position: str = "top-center"
    duration_ms: int = 5000

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "level": self.level,
            "action": self.action.to_dict() if self.action else None,
            "position": self.position,
            "duration_ms": self.duration_ms,
        }


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None:
        ...


@dataclass
class NotificationQueue:
    """Collects notifications so a request handler can return them."""
    items: List[Notification] = field(default_factory=list)

    def notify(self, notification: Notification) -> None:
        self.items.append(notification)

    def drain(self) -> List[Notification]:
        """Return queued notifications and empty the queue."""
        items, self.items = self.items, []
        return items
