"""FACEIT Elo through the faceitfinder.com proxy."""

import logging
import re

from bs4 import Tag

from opponent_scout.domain.player import FaceitStats, ListedPlayer, PlayerUpdate
from opponent_scout.exceptions import ExtractionError
from opponent_scout.scraping.renderer import PageRenderer, RenderedPage

logger = logging.getLogger(__name__)

FACEIT_STATS_URL = "https://faceitfinder.com/stats"

_LEVEL_ICON = re.compile(r"skill_level_(\d+)(?:_\w+)?\.png$")


def _text(tag: Tag | None, what: str, page: RenderedPage) -> str:
    if tag is None:
        raise ExtractionError(f"FACEIT stats block has no {what}", url=page.url)
    return tag.get_text(strip=True)


def parse_faceit_stats(page: RenderedPage) -> FaceitStats:
    """Read current and highest Elo from a faceitfinder stats page.

    Pages for Steam accounts without a FACEIT profile lack the ELO icon and
    produce an empty ``FaceitStats``.
    """
    marker = page.select_one('img[alt="ELO"]')
    if marker is None:
        return FaceitStats()

    block = marker.parent.parent if marker.parent is not None else None
    if block is None:
        raise ExtractionError("ELO icon is not inside a stats block", url=page.url)

    current_elo = _text(block.select_one(".stats_totals_block_main_value"), "current Elo", page)

    items = block.select(".stats_totals_block_item")
    if len(items) < 3:
        raise ExtractionError(f"FACEIT stats block has {len(items)} items, expected at least 3", url=page.url)

    level_icon = items[0].select_one(".stats_totals_block_item_value > img")
    if level_icon is None:
        raise ExtractionError("FACEIT stats block has no skill level icon", url=page.url)
    level_match = _LEVEL_ICON.search(str(level_icon.get("src", "")))
    if level_match is None:
        raise ExtractionError(f"Unrecognized skill level icon '{level_icon.get('src')}'", url=page.url)

    # Already formatted by the site as "1234 (5)"
    highest = _text(items[2].select_one(".stats_totals_block_item_value"), "highest Elo", page)

    return FaceitStats(current=f"{current_elo} ({level_match.group(1)})", highest=highest)


class FaceitFinderSource:
    def __init__(self, renderer: PageRenderer, *, base_url: str = FACEIT_STATS_URL) -> None:
        self._renderer = renderer
        self._base_url = base_url.rstrip("/")

    @property
    def name(self) -> str:
        return "faceit"

    def fetch(self, player: ListedPlayer) -> PlayerUpdate:
        page = self._renderer.render(f"{self._base_url}/{player.platform_id}")
        stats = parse_faceit_stats(page)
        if not stats.found:
            logger.debug("%s has no FACEIT profile", player.name)
        return PlayerUpdate(faceit=stats)
