class FfmException(Exception):
    """Base class for errors raised by the draft engine."""


class ConfigError(FfmException):
    """Raised when configuration is invalid or missing."""


class ProviderError(FfmException):
    """Raised when an upstream data provider fails.

    Ranking pools, league histories and real draft results all come from
    collaborators outside this package. Their failures propagate to the caller
    as this type instead of silently degrading the simulation inputs.
    """

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class MissingPredictionSnapshotError(FfmException):
    def __init__(self, league_id: str, season: int) -> None:
        self.league_id = league_id
        self.season = season
        super().__init__(
            f"No prediction snapshot for league {league_id!r}, season {season}. "
            "Run a prediction before importing the real draft."
        )


class EmptyDraftError(FfmException):
    def __init__(self, league_id: str) -> None:
        self.league_id = league_id
        super().__init__(f"Draft for league {league_id!r} has no picks yet")
