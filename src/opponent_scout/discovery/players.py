import logging

from bs4 import Tag

from opponent_scout.domain.player import ListedPlayer
from opponent_scout.exceptions import ExtractionError
from opponent_scout.scraping.renderer import PageRenderer, RenderedPage

logger = logging.getLogger(__name__)

TEAM_COLUMN_SELECTOR = ".main-container .content .content .size-1-of-2"
PLAYER_ROW_SELECTOR = ".vertical.spacing-medium > .size-content:nth-child(odd)"


def _opponent_column(page: RenderedPage, own_team: str) -> Tag:
    # The match page shows both rosters side by side, each under an <h3> with the team name.
    for column in page.select(TEAM_COLUMN_SELECTOR):
        heading = column.select_one("h3")
        if heading is not None and heading.get_text(strip=True) != own_team:
            return column
    raise ExtractionError(f"No roster column for a team other than '{own_team}'", url=page.url)


def parse_players(page: RenderedPage, own_team: str) -> list[ListedPlayer]:
    players: list[ListedPlayer] = []
    for row in _opponent_column(page, own_team).select(PLAYER_ROW_SELECTOR):
        name_el = row.select_one(".text.bold")
        steam_el = row.select_one(".steam_player_id")
        if name_el is None or steam_el is None:
            raise ExtractionError("Player entry without a name or Steam ID", url=page.url)
        tokens = steam_el.get_text(" ", strip=True).split()
        if not tokens:
            raise ExtractionError(f"Empty Steam ID for player '{name_el.get_text(strip=True)}'", url=page.url)
        players.append(ListedPlayer(name=name_el.get_text(strip=True), platform_id=tokens[-1]))
    return players


class PlayerLister:
    def __init__(self, renderer: PageRenderer) -> None:
        self._renderer = renderer

    def list_players(self, roster_url: str, own_team: str) -> list[ListedPlayer]:
        page = self._renderer.render(roster_url)
        players = parse_players(page, own_team)
        logger.debug("Listed %d players at %s", len(players), roster_url)
        return players
