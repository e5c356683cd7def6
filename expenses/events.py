from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

__all__ = ['EXPENSE_ADDED', 'EXPENSE_EDITED', 'EXPENSE_DELETED', 'Event', 'EventBus']

EXPENSE_ADDED = "EXPENSE_ADDED"
EXPENSE_EDITED = "EXPENSE_EDITED"
EXPENSE_DELETED = "EXPENSE_DELETED"


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event], object]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> list:
        handlers = self._subscribers.get(name)
        if not handlers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event) for handler in list(handlers)]

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)
