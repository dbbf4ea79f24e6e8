"""Event helper utilities.

Helpers for publishing provider-related events on the global event bus.

Quick import:
    from healthylife.events.event_helpers import (
        publish_rate_limited, publish_provider_failed, publish_fallback
    )
"""
from __future__ import annotations
from .Event_Bus import (
    create_event,
    PROVIDER_RATE_LIMITED, PROVIDER_FAILED, COACH_FALLBACK,
)

__all__ = [
    'publish_rate_limited', 'publish_provider_failed', 'publish_fallback',
    'PROVIDER_RATE_LIMITED', 'PROVIDER_FAILED', 'COACH_FALLBACK',
]


def publish_rate_limited(provider: str, capability: str, cooldown: float):
    """Publish a provider.rate_limited event."""
    create_event(PROVIDER_RATE_LIMITED, {
        'provider': provider,
        'capability': capability,
        'cooldown': cooldown,
    })


def publish_provider_failed(provider: str, capability: str, error: str):
    """Publish a provider.failed event (no cooldown was applied)."""
    create_event(PROVIDER_FAILED, {
        'provider': provider,
        'capability': capability,
        'error': error,
    })


def publish_fallback(capability: str, source: str, reason: str):
    """Publish a coach.fallback event when a local or static answer was served.

    Payload structure:
        { 'capability': 'text' | 'vision' | 'recipes', 'source': <meta.source>, 'reason': <str> }
    """
    create_event(COACH_FALLBACK, {
        'capability': capability,
        'source': source,
        'reason': reason,
    })
