"""Per-capability cooldown timestamps set after a provider rate-limits us.

State lives for the life of the process; nothing is persisted. The check and
the write are not locked: concurrent requests may let one extra remote call
through while a cooldown is being set.
"""
import time
from typing import Callable, Dict

TEXT = "text"
VISION = "vision"


class CooldownState:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._until: Dict[str, float] = {TEXT: 0.0, VISION: 0.0}

    def now(self) -> float:
        return self._clock()

    def is_cooling(self, capability: str) -> bool:
        return self.now() < self._until.get(capability, 0.0)

    def remaining(self, capability: str) -> float:
        return max(0.0, self._until.get(capability, 0.0) - self.now())

    def trip(self, capability: str, seconds: float) -> None:
        '''Suppress remote calls for ``capability`` during the next ``seconds``.'''
        self._until[capability] = self.now() + seconds

    def reset(self) -> None:
        for key in self._until:
            self._until[key] = 0.0

    def to_dict(self):
        return {cap: round(self.remaining(cap), 1) for cap in self._until}
