"""Matchmaking ranks from csgostats.gg.

The profile page shows the current rank as a 92px wide icon and the best
rank as a 24px high icon; the icon file name is the numeric rank value.
csgostats.gg sits behind Cloudflare, so pages go through the challenge
fetcher.
"""

import logging

from opponent_scout.domain.player import ListedPlayer, PlayerUpdate
from opponent_scout.domain.rank import UNRANKED, Rank, RankTable
from opponent_scout.exceptions import ExtractionError
from opponent_scout.scraping.challenge import DEFAULT_MAX_RETRIES, ChallengeEvasionFetcher
from opponent_scout.scraping.renderer import RenderedPage, has_element

logger = logging.getLogger(__name__)

CSGOSTATS_PLAYER_URL = "https://csgostats.gg/player"
RANK_ICON_PREFIX = "https://static.csgostats.gg/images/ranks/"
PROFILE_MARKER = "#player-name"

_CURRENT_RANK_ICON = f'img[src^="{RANK_ICON_PREFIX}"][width="92"]'
_BEST_RANK_ICON = f'img[src^="{RANK_ICON_PREFIX}"][height="24"]'


def _icon_rank_value(page: RenderedPage, selector: str, table: RankTable) -> int | None:
    icon = page.select_one(selector)
    if icon is None:
        return None
    src = str(icon.get("src", ""))
    raw = src.removeprefix(RANK_ICON_PREFIX).removesuffix(".png")
    if not raw.isdigit():
        raise ExtractionError(f"Rank icon '{src}' does not encode a rank number", url=page.url)
    value = int(raw)
    if value not in table:
        raise ExtractionError(f"Rank value {value} from '{src}' is outside the rank table", url=page.url)
    return value


def parse_ranks(page: RenderedPage, table: RankTable) -> tuple[Rank, Rank]:
    """Return ``(current, best)`` ranks from a csgostats.gg profile page.

    A missing best-rank icon falls back to the current rank; a missing
    current-rank icon means unranked.
    """
    current = _icon_rank_value(page, _CURRENT_RANK_ICON, table)
    best = _icon_rank_value(page, _BEST_RANK_ICON, table)
    current_value = current or UNRANKED
    best_value = best or current_value
    return table.rank(current_value), table.rank(best_value)


class CsgostatsRankSource:
    def __init__(
        self,
        fetcher: ChallengeEvasionFetcher,
        table: RankTable,
        *,
        base_url: str = CSGOSTATS_PLAYER_URL,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        self._fetcher = fetcher
        self._table = table
        self._base_url = base_url.rstrip("/")
        self._max_retries = max_retries

    @property
    def name(self) -> str:
        return "csgostats"

    def fetch(self, player: ListedPlayer) -> PlayerUpdate:
        url = f"{self._base_url}/{player.platform_id}"
        page = self._fetcher.fetch(url, has_element(PROFILE_MARKER), max_retries=self._max_retries)
        current, best = parse_ranks(page, self._table)
        logger.debug("%s: current %s, best %s", player.name, current.label, best.label)
        return PlayerUpdate(current_rank=current, best_rank=best)
