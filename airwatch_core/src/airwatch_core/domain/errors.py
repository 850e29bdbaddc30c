class AirWatchError(Exception):
    """Base class for errors raised by the AirWatch packages."""


class InvalidInput(AirWatchError, ValueError):
    """Malformed payload, missing required fields or an out-of-range request."""


class UnknownCity(InvalidInput):
    def __init__(self, city: str):
        super().__init__(f"City '{city}' not found in supported cities")
        self.city = city


class UpstreamUnavailable(AirWatchError):
    """An external provider is unreachable or not configured.

    Never surfaced to end users: callers catch it and substitute fallback data.
    """
