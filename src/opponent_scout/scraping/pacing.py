import logging
import random
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)

type Sleeper = Callable[[float], None]


class PacingPolicy:
    """Randomized waits placed before external requests.

    Every delay is drawn uniformly from ``[0, window_ms)`` so consecutive
    requests never arrive at a regular interval.
    """

    def __init__(
        self,
        *,
        opponent_ms: int = 2000,
        player_ms: int = 5000,
        source_ms: int = 1000,
        rng: random.Random | None = None,
        sleep: Sleeper = time.sleep,
    ) -> None:
        self._opponent_ms = opponent_ms
        self._player_ms = player_ms
        self._source_ms = source_ms
        self._rng = rng or random.Random()
        self._sleep = sleep

    def jitter_ms(self, window_ms: float) -> float:
        if window_ms <= 0:
            return 0.0
        return self._rng.random() * window_ms

    def wait(self, window_ms: float, reason: str) -> float:
        """Sleep for a random duration within *window_ms*; returns the delay in ms."""
        delay_ms = self.jitter_ms(window_ms)
        logger.debug("Waiting %.0f ms before %s", delay_ms, reason)
        self._sleep(delay_ms / 1000)
        return delay_ms

    def before_opponent(self, opponent: str) -> float:
        return self.wait(self._opponent_ms, f"listing players of {opponent}")

    def before_source(self, source: str, platform_id: str, *, first: bool) -> float:
        window = self._player_ms if first else self._source_ms
        return self.wait(window, f"{source} lookup for {platform_id}")
