"""Kafka Connect REST API client package.

Provides a typed HTTP client for the Kafka Connect REST API: authenticated
transport, retry of transient failures, classification of status codes into
domain errors, and decoding of source and sink connector offsets.

Exports:
    KafkaConnectClient: HTTP client with one method per REST operation.
    RetryPolicy: Backoff configuration used by the client.
    OffsetDecoder: Decoder for the untagged offset record union.
    errors: Module containing the domain error taxonomy.
    types: Module containing Pydantic models for API payloads.
    DEFAULT_TIMEOUT: Default HTTP request timeout.
"""

from . import errors, types
from .client import KafkaConnectClient
from .offsets import OffsetDecoder
from .retry import RetryPolicy
from .transport import DEFAULT_TIMEOUT

__all__ = [
    "DEFAULT_TIMEOUT",
    "KafkaConnectClient",
    "OffsetDecoder",
    "RetryPolicy",
    "errors",
    "types",
]
