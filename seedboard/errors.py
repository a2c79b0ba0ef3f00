"""Exceptions raised by the marketplace side of the leaderboard."""


class SeedboardError(Exception):
    """Base class for seedboard errors."""


class OpenSeaError(SeedboardError):
    """Non-success response from the OpenSea API."""

    def __init__(self, status: int, details: str = ""):
        self.status = status
        self.details = details
        super().__init__(f"OpenSea API error: {status}")


class InvalidApiKeyError(OpenSeaError):
    def __init__(self, details: str = ""):
        super().__init__(401, details)
        self.args = ("Invalid API Key",)
