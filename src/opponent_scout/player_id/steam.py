"""SteamID64 to Steam account-ID conversion."""

from opponent_scout.exceptions import ExtractionError

# SteamID64 of account 0 in the public universe (individual account type).
INDIVIDUAL_BASE = 76561197960265728
_ACCOUNT_ID_MAX = 0xFFFFFFFF


def to_account_id(steam_id64: str) -> int:
    """Return the 32-bit account ID embedded in a SteamID64 string."""
    text = steam_id64.strip()
    if not text.isdigit():
        raise ExtractionError(f"'{steam_id64}' is not a SteamID64")
    account_id = int(text) - INDIVIDUAL_BASE
    if not 0 <= account_id <= _ACCOUNT_ID_MAX:
        raise ExtractionError(f"SteamID64 '{steam_id64}' is outside the individual account range")
    return account_id
