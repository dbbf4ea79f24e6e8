"""Recent provider telemetry for the web layer.

Subscribes to provider.rate_limited, provider.failed and coach.fallback on the
global bus and keeps the last MAX_EVENTS of them, each tagged with an
increasing integer ``id``. Clients poll ``/api/provider-events?since=<id>`` and
get back only newer entries plus the cursor to use next time. Every worker
process keeps its own buffer.
"""
from __future__ import annotations
import logging
from collections import deque
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Deque, Dict, Optional

from .Event_Bus import GLOBAL_EVENT_BUS, PROVIDER_RATE_LIMITED, PROVIDER_FAILED, COACH_FALLBACK

logger = logging.getLogger(__name__)

MAX_EVENTS = 300
_FIELDS = ('provider', 'capability', 'cooldown', 'error', 'source', 'reason')

_guard = Lock()
_buffer: Deque[Dict[str, Any]] = deque(maxlen=MAX_EVENTS)
_last_id = 0
_subscribed = False


def _utc_stamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='seconds').replace('+00:00', 'Z')


def _record(event_name: str, payload: Any):
    global _last_id
    fields = payload if isinstance(payload, dict) else {}
    with _guard:
        _last_id += 1
        entry = {'id': _last_id, 'type': event_name, 'ts': _utc_stamp()}
        entry.update({k: fields[k] for k in _FIELDS if k in fields})
        _buffer.append(entry)


def start():
    """Subscribe the recorder; calling it again is a no-op."""
    global _subscribed
    if _subscribed:
        return
    for name in (PROVIDER_RATE_LIMITED, PROVIDER_FAILED, COACH_FALLBACK):
        GLOBAL_EVENT_BUS.subscribe(name, _record)
    _subscribed = True
    logger.debug("provider event observers subscribed")


def clear():
    global _last_id
    with _guard:
        _buffer.clear()
        _last_id = 0


def get_events(since: Optional[int] = None, provider: Optional[str] = None) -> Dict[str, Any]:
    """Buffered events with ``id > since``, optionally for one provider only.

    ``next_cursor`` is the newest id recorded so far, whatever the filter.
    """
    with _guard:
        newer = [e for e in _buffer if since is None or e['id'] > since]
        cursor = _last_id if _buffer else (since or 0)
    if provider:
        newer = [e for e in newer if e.get('provider') == provider]
    return {'events': newer, 'next_cursor': cursor}


__all__ = ['start', 'clear', 'get_events', 'MAX_EVENTS']
