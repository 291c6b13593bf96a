class ScoutException(Exception):
    """Base class for errors that abort a scouting run."""


class ExtractionError(ScoutException):
    """Raised when a page lacks the structure an extractor requires.

    Attributes:
        url: The page the extraction ran against, when known.
    """

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.url = url

    def __str__(self) -> str:
        if self.url:
            return f"{self.message} ({self.url})"
        return self.message


class ChallengeNotBypassedError(ScoutException):
    """Raised when every attempt at a protected page returned an anti-bot challenge."""

    def __init__(self, url: str, attempts: int) -> None:
        self.url = url
        self.attempts = attempts
        super().__init__(f"Exhausted {attempts} attempts while trying to bypass the anti-bot challenge at {url}")
