"""Classification of Kafka Connect REST API responses.

The REST API encodes most operational outcomes (rebalance, missing connector,
partial success) in the status code rather than in the body. ``classify`` maps
an (operation, status code, body) triple to either a successful outcome or one
of the domain errors in :mod:`.errors`. It performs no I/O.
"""

import json
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

import pydantic

from .errors import (
    BadRequestError,
    ConnectorNotFoundError,
    InternalServerError,
    KafkaConnectError,
    RebalanceInProgressError,
    TransportError,
    UnknownStatusError,
)
from .types import ClusterInfo, Connector, ConnectorInfo, ConnectorStatus, ErrorMessage

T = TypeVar("T")


class Operation(str, Enum):
    """Operations whose responses need classification."""

    INFO = "info"
    CONNECTOR_NAMES = "connector_names"
    LIST_EXPANDED = "list_expanded"
    CREATE = "create"
    RESTART = "restart"
    DELETE = "delete"
    CONFIG = "config"
    PAUSE = "pause"
    RESUME = "resume"
    STOP = "stop"
    OFFSETS = "offsets"


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful response carrying a decoded value."""

    value: T


@dataclass(frozen=True)
class Empty:
    """Successful response without a value."""


EMPTY = Empty()


def _parse(adapter: pydantic.TypeAdapter, body: bytes) -> Any:
    try:
        return adapter.validate_json(body)
    except pydantic.ValidationError as exc:
        msg = "Failed to decode response body"
        raise TransportError(msg) from exc


def _parse_json(body: bytes) -> Any:
    try:
        return json.loads(body)
    except ValueError as exc:
        msg = "Failed to decode response body as JSON"
        raise TransportError(msg) from exc


_CLUSTER_INFO = pydantic.TypeAdapter(ClusterInfo)
_NAMES = pydantic.TypeAdapter(list[str])
_CONNECTORS = pydantic.TypeAdapter(dict[str, Connector])
_CONNECTOR_INFO = pydantic.TypeAdapter(ConnectorInfo)
_CONNECTOR_STATUS = pydantic.TypeAdapter(ConnectorStatus)
_CONFIG = pydantic.TypeAdapter(dict[str, str])
_ERROR_MESSAGE = pydantic.TypeAdapter(ErrorMessage)


def _success(adapter: pydantic.TypeAdapter) -> Callable[[bytes, str | None], Success]:
    return lambda body, name: Success(_parse(adapter, body))


def _empty(body: bytes, name: str | None) -> Empty:
    return EMPTY


def _optional_status(body: bytes, name: str | None) -> Success:
    if not body.strip():
        return Success(None)
    return Success(_parse(_CONNECTOR_STATUS, body))


def _raw_json(body: bytes, name: str | None) -> Success:
    return Success(_parse_json(body))


def _bad_request(body: bytes, name: str | None) -> Empty:
    raise BadRequestError(_parse(_ERROR_MESSAGE, body))


def _not_found(body: bytes, name: str | None) -> Empty:
    raise ConnectorNotFoundError(name or "")


def _raising(
    error: Callable[[], KafkaConnectError],
) -> Callable[[bytes, str | None], Empty]:
    def handler(body: bytes, name: str | None) -> Empty:
        raise error()

    return handler


_rebalance = _raising(RebalanceInProgressError)
_internal = _raising(InternalServerError)

_Handler = Callable[[bytes, str | None], Success | Empty]

_ACCEPTED_EMPTY: dict[int, _Handler] = {200: _empty, 202: _empty, 204: _empty}

_TABLE: dict[Operation, dict[int, _Handler]] = {
    Operation.INFO: {200: _success(_CLUSTER_INFO)},
    Operation.CONNECTOR_NAMES: {200: _success(_NAMES)},
    Operation.LIST_EXPANDED: {200: _success(_CONNECTORS)},
    Operation.CREATE: {
        201: _success(_CONNECTOR_INFO),
        400: _bad_request,
        409: _rebalance,
        500: _internal,
    },
    Operation.RESTART: {
        200: _empty,
        202: _optional_status,
        204: _empty,
        404: _not_found,
        409: _rebalance,
        500: _internal,
    },
    Operation.DELETE: {200: _empty, 204: _empty, 409: _rebalance},
    Operation.CONFIG: {200: _success(_CONFIG)},
    Operation.PAUSE: _ACCEPTED_EMPTY,
    Operation.RESUME: _ACCEPTED_EMPTY,
    Operation.STOP: _ACCEPTED_EMPTY,
    # Decoded further by OffsetDecoder, which owns the shape knowledge.
    Operation.OFFSETS: {200: _raw_json},
}


def classify(
    operation: Operation,
    status_code: int,
    body: bytes = b"",
    name: str | None = None,
) -> Success | Empty:
    """Classify a response for ``operation``.

    Args:
        operation: The operation that produced the response.
        status_code: HTTP status code of the response.
        body: Raw response body.
        name: Connector the request targeted, reported by
            ConnectorNotFoundError.

    Returns:
        Success with the decoded body, or Empty for bodiless successes.

    Raises:
        KafkaConnectError: The domain error the status code maps to;
            UnknownStatusError for any code not listed for the operation,
            TransportError if a success body cannot be decoded.
    """
    handler = _TABLE[operation].get(status_code)
    if handler is None:
        raise UnknownStatusError(status_code)
    return handler(body, name)
