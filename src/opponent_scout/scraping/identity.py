"""Browser identities for requests to protected pages."""

import logging
from collections.abc import Callable

from fake_useragent import UserAgent

logger = logging.getLogger(__name__)

type IdentityGenerator = Callable[[], str]

MAX_REDRAWS = 50


def desktop_user_agents() -> IdentityGenerator:
    """Draw real desktop browser user agents from the fake-useragent dataset."""
    agents = UserAgent(platforms=["desktop"])
    return lambda: agents.random


def user_agent_generator(
    source: IdentityGenerator | None = None,
    *,
    max_redraws: int = MAX_REDRAWS,
) -> IdentityGenerator:
    """Wrap ``source`` so that it does not hand out the same user agent twice.

    Each call draws again while the agent has already been issued, up to
    ``max_redraws`` extra draws; after that the repeat is returned with a
    warning.
    """
    draw = source or desktop_user_agents()
    issued: set[str] = set()

    def generate() -> str:
        agent = draw()
        redraws = 0
        while agent in issued and redraws < max_redraws:
            agent = draw()
            redraws += 1
        if agent in issued:
            logger.warning("Reusing user agent %r after %d redraws", agent, redraws)
        issued.add(agent)
        return agent

    return generate
