"""Domain errors raised by the Kafka Connect REST API client.

Every status-code-driven outcome is classified into one of these types before
it reaches the caller, so raw HTTP status codes never escape the client.
"""

from .types import ErrorMessage


class KafkaConnectError(Exception):
    """Base class for every error raised by the client."""


class BadRequestError(KafkaConnectError):
    """Raised when the REST API rejects a request as malformed (HTTP 400)."""

    def __init__(self, error_message: ErrorMessage):
        self.error_message = error_message
        msg = f"Bad request ({error_message.error_code}): {error_message.message}"
        super().__init__(msg)


class RebalanceInProgressError(KafkaConnectError):
    """Raised when a rebalance is needed, forthcoming, or underway (HTTP 409)."""

    def __init__(self):
        super().__init__("A rebalance may be needed, forthcoming, or underway")


class ConnectorNotFoundError(KafkaConnectError):
    """Raised when the requested connector does not exist (HTTP 404)."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Connector does not exist: {name}")


class InternalServerError(KafkaConnectError):
    """Raised when the worker could not process the request (HTTP 500)."""

    def __init__(self):
        super().__init__("The request could not be processed")


class InvalidExpandOptionError(KafkaConnectError, ValueError):
    """Raised before any request when neither expand flag is set."""

    def __init__(self):
        super().__init__(
            "You must expand either info, status, or both. If you'd rather use "
            "none of them, call connector_names() instead",
        )


class TransportError(KafkaConnectError):
    """Network or serialization failure.

    The underlying exception is always available as ``__cause__``.
    """


class OffsetDecodeError(TransportError):
    """Raised when an offset record matches neither known offset shape."""


class RetryExhaustedError(KafkaConnectError):
    """Raised when transient failures outlast the retry policy.

    Attributes:
        attempts: Number of requests that were issued.
        last_status: Status code of the last response, or None when the last
            attempt failed at the network level (see ``__cause__``).
    """

    def __init__(self, attempts: int, last_status: int | None = None):
        self.attempts = attempts
        self.last_status = last_status
        if last_status is None:
            msg = f"Retries exhausted after {attempts} attempts"
        else:
            msg = f"Retries exhausted after {attempts} attempts (last status {last_status})"
        super().__init__(msg)


class UnknownStatusError(KafkaConnectError):
    """Raised for any status code the operation does not recognize."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"Unrecognizable error for status code {status_code}")
