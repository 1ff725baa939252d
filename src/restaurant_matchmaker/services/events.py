"""In-process subscription registry for session snapshots."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from itertools import count

_logger = logging.getLogger(__name__)

Listener = Callable[[object], None]


@dataclass
class Subscription:
    """Handle returned to observers; call ``unsubscribe`` to stop callbacks."""

    hub: "SessionEventHub"
    topic: tuple[str, str]
    token: int
    active: bool = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self.hub.remove(self.topic, self.token)


@dataclass
class SessionEventHub:
    """Fan-out of full snapshots to listeners keyed by (kind, session id).

    Each watched topic also remembers the newest snapshot version delivered
    so far. That bookkeeping lives only as long as the topic has listeners.
    """

    _listeners: dict[tuple[str, str], dict[int, Listener]] = field(
        default_factory=dict
    )
    _versions: dict[tuple[str, str], int] = field(default_factory=dict)
    _tokens: count = field(default_factory=count)

    def add(self, topic: tuple[str, str], listener: Listener) -> Subscription:
        token = next(self._tokens)
        self._listeners.setdefault(topic, {})[token] = listener
        return Subscription(hub=self, topic=topic, token=token)

    def remove(self, topic: tuple[str, str], token: int) -> None:
        listeners = self._listeners.get(topic)
        if listeners is None:
            return
        listeners.pop(token, None)
        if not listeners:
            self._listeners.pop(topic, None)
            self._versions.pop(topic, None)

    def has_listeners(self, topic: tuple[str, str]) -> bool:
        return bool(self._listeners.get(topic))

    def last_version(self, topic: tuple[str, str]) -> int:
        """Newest version delivered on a topic, or -1."""
        return self._versions.get(topic, -1)

    def advance(self, topic: tuple[str, str], version: int) -> bool:
        """Record ``version`` as delivered unless a newer one already went out."""
        if not self.has_listeners(topic) or version < self.last_version(topic):
            return False
        self._versions[topic] = version
        return True

    def publish(self, topic: tuple[str, str], snapshot: object) -> None:
        """Deliver a snapshot to every listener on a topic."""
        for token, listener in list(self._listeners.get(topic, {}).items()):
            try:
                listener(snapshot)
            except Exception:
                _logger.exception(
                    "Session listener failed", extra={"topic": topic, "token": token}
                )

    def listener_count(self) -> int:
        return sum(len(listeners) for listeners in self._listeners.values())

    def tracked_topics(self) -> int:
        return len(self._versions)
