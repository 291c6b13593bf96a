from dataclasses import dataclass


@dataclass(frozen=True)
class ScoutError:
    message: str


@dataclass(frozen=True)
class ConfigError(ScoutError):
    key: str = ""
