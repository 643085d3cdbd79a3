"""Errors reported by the extraction client.

Every failure of a single extraction call is an ``ExtractionError``; the
``kind`` attribute lets callers and API responses tell them apart.
"""


class ExtractionError(Exception):
    """A single extraction call failed."""

    kind = "extraction"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class GatewayError(ExtractionError):
    """Transport failure or non-success response from the model gateway."""

    kind = "gateway"


class RateLimitError(GatewayError):
    """The gateway answered 429."""

    kind = "rate_limit"


class UsageLimitError(GatewayError):
    """The gateway answered 402: the account's usage allowance is spent."""

    kind = "usage_limit"


class ParseError(ExtractionError):
    """The model's reply did not contain a JSON object."""

    kind = "parse"
