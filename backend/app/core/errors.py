"""
Overpass provider errors.
The resolver turns every one of these into an empty result for its caller.
"""


class OverpassError(Exception):
    """Base class for failures talking to the Overpass provider"""
    pass


class OverpassResponseError(OverpassError):
    """Provider answered with a non-2xx status. Not retried."""

    def __init__(self, status_code: int, message: str = None):
        self.status_code = status_code
        super().__init__(message or f"Overpass API error: {status_code}")


class OverpassRateLimitError(OverpassResponseError):
    """Provider kept answering 429 until the retry budget ran out."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(
            429,
            f"Overpass API error: 429 - Rate limited after {attempts} attempts. Please try again later.",
        )


class OverpassTransportError(OverpassError):
    """Network failure or unreadable response body."""
    pass
