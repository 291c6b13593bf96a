"""Opponent discovery from a team's schedule page on toornament.com."""

import logging
from dataclasses import dataclass

from opponent_scout.domain.player import Opponent
from opponent_scout.exceptions import ExtractionError
from opponent_scout.scraping.renderer import PageRenderer, RenderedPage

logger = logging.getLogger(__name__)

TOORNAMENT_BASE_URL = "https://www.toornament.com"
ROSTER_PATH_SUFFIX = "/players"

OWN_TEAM_SELECTOR = ".match .title .name span"
MATCH_LINK_SELECTOR = ".main-container .content .content .size-1-of-5 a"
TEAM_LABEL_SELECTOR = ".opponent .name"


@dataclass(frozen=True)
class Discovery:
    own_team: str
    opponents: dict[str, Opponent]


def read_own_team(page: RenderedPage) -> str:
    element = page.select_one(OWN_TEAM_SELECTOR)
    name = element.get_text(strip=True) if element is not None else ""
    if not name:
        raise ExtractionError("Could not find the team's own name on the schedule page", url=page.url)
    return name


def parse_opponents(page: RenderedPage, own_team: str, base_url: str = TOORNAMENT_BASE_URL) -> dict[str, Opponent]:
    """Map each distinct opponent to the roster URL of its first match.

    Each match link must carry exactly one team label other than
    *own_team*; anything else means the page layout is not what we expect.
    """
    opponents: dict[str, Opponent] = {}
    for link in page.select(MATCH_LINK_SELECTOR):
        labels = [label.get_text(strip=True) for label in link.select(TEAM_LABEL_SELECTOR)]
        others = [label for label in labels if label != own_team]
        if len(others) != 1:
            raise ExtractionError(
                f"Expected exactly one opponent name in match link, found {others!r} (labels {labels!r})",
                url=page.url,
            )
        name = others[0]
        if name in opponents:
            continue

        href = link.get("href")
        if not href:
            raise ExtractionError(f"Match link against '{name}' has no href", url=page.url)
        roster_url = f"{base_url.rstrip('/')}{str(href).rstrip('/')}{ROSTER_PATH_SUFFIX}"
        opponents[name] = Opponent(roster_url=roster_url)
    return opponents


class RosterDiscoverer:
    def __init__(self, renderer: PageRenderer, *, base_url: str = TOORNAMENT_BASE_URL) -> None:
        self._renderer = renderer
        self._base_url = base_url

    def discover(self, schedule_url: str) -> Discovery:
        page = self._renderer.render(schedule_url)
        own_team = read_own_team(page)
        logger.info("Own team name: %s", own_team)
        opponents = parse_opponents(page, own_team, self._base_url)
        logger.info("Found %d opponents: %s", len(opponents), ", ".join(opponents))
        return Discovery(own_team=own_team, opponents=opponents)
