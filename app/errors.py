SNIPPET_LENGTH = 1000


class LogSearchError(Exception):
    """Base class for failures of a single log search."""


class TransportError(LogSearchError):
    """Kibana answered with a non-2xx status or could not be reached."""

    def __init__(self, reason: str, status_code: int | None = None):
        self.reason = reason
        self.status_code = status_code
        super().__init__(reason)


class EmptyResponseError(LogSearchError):
    """Kibana answered successfully but without a body."""


class ParseError(LogSearchError):
    """The response body is not JSON or matches no known envelope."""

    def __init__(self, reason: str, raw: str | None = None):
        self.reason = reason
        self.snippet = raw[:SNIPPET_LENGTH] if raw else raw
        super().__init__(reason)
