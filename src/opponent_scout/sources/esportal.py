import logging
from typing import Any

import httpx

from opponent_scout.domain.player import NO_ESPORTAL_PROFILE, EsportalResult, EsportalStats, ListedPlayer, PlayerUpdate
from opponent_scout.exceptions import ExtractionError
from opponent_scout.player_id.steam import to_account_id
from opponent_scout.scraping._retry import default_http_retry

logger = logging.getLogger(__name__)

ESPORTAL_API_URL = "https://api.esportal.com"

# Upper bounds (exclusive) of each tier, ascending.
_TIERS: tuple[tuple[int, str], ...] = (
    (1000, "Silver"),
    (1100, "Gold I"),
    (1200, "Gold II"),
    (1300, "Veteran I"),
    (1400, "Veteran II"),
    (1500, "Master I"),
    (1600, "Master II"),
    (1700, "Elite I"),
    (1800, "Elite II"),
    (1900, "Pro I"),
    (2000, "Pro II"),
)
_TOP_TIER = "Legend"


def esportal_tier(elo: float) -> str:
    for upper, tier in _TIERS:
        if elo < upper:
            return tier
    return _TOP_TIER


class EsportalSource:
    """Looks up a player's Esportal Elo by Steam account ID.

    The search endpoint answers ``null`` (or an empty list) when no Esportal
    account is linked to the Steam account.
    """

    def __init__(self, client: httpx.Client | None = None, *, base_url: str = ESPORTAL_API_URL) -> None:
        self._client = client or httpx.Client(timeout=httpx.Timeout(10.0, connect=5.0))
        self._base_url = base_url.rstrip("/")

    @property
    def name(self) -> str:
        return "esportal"

    @default_http_retry("Esportal API request")
    def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        url = f"{self._base_url}{path}"
        logger.debug("GET %s %s", url, params)
        response = self._client.get(url, params=params)
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as e:
            raise ExtractionError(f"Esportal answered {path} with a non-JSON body", url=url) from e

    def lookup(self, platform_id: str) -> EsportalResult:
        account_id = to_account_id(platform_id)
        profiles = self._get_json("/user_profile/list", {"id": account_id})
        if not profiles:
            return NO_ESPORTAL_PROFILE

        first = profiles[0] if isinstance(profiles, list) else None
        username = first.get("username") if isinstance(first, dict) else None
        if not username:
            raise ExtractionError(f"Esportal search for account {account_id} returned a profile without a username")

        profile = self._get_json("/user_profile/get", {"username": username})
        raw_elo = profile.get("elo") if isinstance(profile, dict) else None
        if raw_elo is None:
            raise ExtractionError(f"Esportal profile '{username}' has no Elo")
        try:
            elo = int(float(raw_elo))
        except (TypeError, ValueError, OverflowError) as e:
            raise ExtractionError(f"Esportal profile '{username}' has a non-numeric Elo {raw_elo!r}") from e
        return EsportalStats(elo=elo, tier=esportal_tier(elo))

    def fetch(self, player: ListedPlayer) -> PlayerUpdate:
        result = self.lookup(player.platform_id)
        if result is NO_ESPORTAL_PROFILE:
            logger.debug("%s has no Esportal profile", player.name)
        return PlayerUpdate(esportal=result)
