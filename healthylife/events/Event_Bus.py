"""Simple Event Bus / Observer implementation for provider telemetry.

Event names used so far:
  provider.rate_limited -> payload {"provider": str, "capability": str, "cooldown": float}
  provider.failed       -> payload {"provider": str, "capability": str, "error": str}
  coach.fallback        -> payload {"capability": str, "source": str, "reason": str}

Subscribers are callables taking (event_name, payload).
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Callable, Any, Dict, List

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
PROVIDER_RATE_LIMITED = "provider.rate_limited"
PROVIDER_FAILED = "provider.failed"
COACH_FALLBACK = "coach.fallback"


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[str, Any], None]]] = defaultdict(list)

    def subscribe(self, event_name: str, callback: Callable[[str, Any], None]):
        if callback not in self._subscribers[event_name]:
            self._subscribers[event_name].append(callback)

    def unsubscribe(self, event_name: str, callback: Callable[[str, Any], None]):
        try:
            self._subscribers[event_name].remove(callback)
        except (ValueError, KeyError):
            pass

    def publish(self, event_name: str, payload: Any):
        for cb in list(self._subscribers.get(event_name, [])):
            try:
                cb(event_name, payload)
            except Exception:
                # A broken subscriber must not break the request that published.
                logger.exception("Error delivering %s to %s", event_name, cb)


# A singleton-like instance (can be imported)
GLOBAL_EVENT_BUS = EventBus()


def create_event(event_name: str, payload: Any = None) -> None:
    """Publish an event on the global bus."""
    GLOBAL_EVENT_BUS.publish(event_name, payload)


__all__ = [
    'EventBus', 'GLOBAL_EVENT_BUS', 'create_event',
    'PROVIDER_RATE_LIMITED', 'PROVIDER_FAILED', 'COACH_FALLBACK'
]
