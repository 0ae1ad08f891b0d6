"""Error hierarchy for API and push-channel failure classification.

Lets tenacity retry decorators tell transient failures (retry, reconnect)
apart from permanent ones (give up, fall back to a safe default).

Example usage with tenacity:
    @retry(retry=retry_if_exception_type(TransientError), stop=stop_after_attempt(3))
    async def fetch_exercises():
        ...
"""


class TrackerError(Exception):
    """Base exception for all tracker client errors."""

    pass


class TransientError(TrackerError):
    """Temporary failure that may succeed on retry.

    Examples: connection refused, timeouts, 503 Service Unavailable,
    a push channel dropped with a non-normal close code.
    """

    pass


class RateLimitError(TransientError):
    """Rate limit exceeded (HTTP 429).

    Inherits from TransientError so tenacity will retry it.
    """

    pass


class PermanentError(TrackerError):
    """Failure that won't succeed on retry.

    Examples: 404 on an endpoint, rejected request body, validation failure.
    """

    pass


class MalformedResponseError(PermanentError):
    """Response body could not be decoded as JSON."""

    pass
