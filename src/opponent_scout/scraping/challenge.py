"""Fetching pages that sit behind an anti-bot challenge.

A challenge interstitial looks like any slow-loading page; the only way to
tell it apart from the real content is that an expected element is missing.
The fetcher re-requests the page with a new user agent until the caller's
presence predicate holds or the attempt budget runs out.
"""

import enum
import logging
import random
import time

from opponent_scout.exceptions import ChallengeNotBypassedError
from opponent_scout.scraping.identity import IdentityGenerator, user_agent_generator
from opponent_scout.scraping.pacing import Sleeper
from opponent_scout.scraping.renderer import PageRenderer, PresencePredicate, RenderedPage, WaitUntil

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 5
BACKOFF_STEP_MS = 1000


class FetchState(enum.Enum):
    FETCHING = "fetching"
    CHECKING = "checking"
    BACKOFF = "backoff"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


class ChallengeEvasionFetcher:
    """Fetch a page until the real content shows up.

    ``max_retries`` bounds the total number of requests. After attempt *k*
    fails the check, the fetcher waits a random duration in
    ``[0, k * 1000 ms)`` before trying again with a fresh identity.

    Args:
        renderer: Page renderer used for every attempt.
        identities: Produces the user agent for each attempt.
        rng: Random source for the backoff jitter.
        sleep: Blocking sleep, in seconds.
    """

    def __init__(
        self,
        renderer: PageRenderer,
        *,
        identities: IdentityGenerator | None = None,
        rng: random.Random | None = None,
        sleep: Sleeper = time.sleep,
        wait_until: WaitUntil = "networkidle",
    ) -> None:
        self._renderer = renderer
        self._rng = rng or random.Random()
        self._identities = identities or user_agent_generator()
        self._sleep = sleep
        self._wait_until: WaitUntil = wait_until

    def backoff_ms(self, max_retries: int, remaining: int) -> float:
        window_ms = (max_retries - remaining) * BACKOFF_STEP_MS
        return self._rng.random() * window_ms

    def fetch(
        self,
        url: str,
        is_present: PresencePredicate,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> RenderedPage:
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")

        state = FetchState.FETCHING
        remaining = max_retries
        attempts = 0
        page: RenderedPage | None = None

        while True:
            if state is FetchState.FETCHING:
                attempts += 1
                remaining -= 1
                user_agent = self._identities()
                logger.debug("Attempt %d/%d for %s as %r", attempts, max_retries, url, user_agent)
                page = self._renderer.render(url, user_agent=user_agent, wait_until=self._wait_until)
                state = FetchState.CHECKING

            elif state is FetchState.CHECKING:
                assert page is not None
                if is_present(page):
                    state = FetchState.SUCCEEDED
                elif remaining > 0:
                    state = FetchState.BACKOFF
                else:
                    state = FetchState.EXHAUSTED

            elif state is FetchState.BACKOFF:
                delay_ms = self.backoff_ms(max_retries, remaining)
                logger.debug("Challenge page at %s, backing off %.0f ms (%d attempts left)", url, delay_ms, remaining)
                self._sleep(delay_ms / 1000)
                state = FetchState.FETCHING

            elif state is FetchState.SUCCEEDED:
                assert page is not None
                if attempts > 1:
                    logger.info("Got past the challenge at %s after %d attempts", url, attempts)
                return page

            else:
                logger.error("Challenge at %s not bypassed after %d attempts", url, attempts)
                raise ChallengeNotBypassedError(url, attempts)
