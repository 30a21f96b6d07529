"""Kafka Connect REST API client.

Composes the authenticated transport, the retry policy, the response
classifier and the offset decoder into one typed method per REST operation.
"""

import time
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from .errors import InvalidExpandOptionError, TransportError
from .offsets import OffsetDecoder
from .responses import Empty, Operation, Success, classify
from .retry import RetryingExecutor, RetryPolicy
from .transport import DEFAULT_TIMEOUT, Transport
from .types import (
    ClusterInfo,
    Connector,
    ConnectorInfo,
    ConnectorOffset,
    ConnectorStatus,
    NewConnector,
    OffsetT,
    PartitionT,
)

logger = structlog.get_logger(__name__)


def _connector_path(name: str, *segments: str) -> str:
    return "/".join(["/connectors", quote(name, safe=""), *segments])


def _flag(value: bool) -> str:
    return "true" if value else "false"


class KafkaConnectClient:
    """HTTP client for the Kafka Connect REST API.

    Every call issues one logical request: transient failures are retried
    according to the retry policy, then the final response is classified into
    a typed value or a :class:`~.errors.KafkaConnectError`.

    The client keeps no per-call state and may be shared between threads.
    Can be used as a context manager for automatic cleanup.
    """

    def __init__(
        self,
        base_url: str,
        username: str | None = None,
        password: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        retry_policy: RetryPolicy | None = None,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the REST API client.

        Args:
            base_url: Base URL of a Kafka Connect worker
                (e.g., "http://connect:8083").
            username: Basic auth user. No auth header is sent when omitted.
            password: Basic auth password.
            timeout: Request timeout in seconds (default: 30.0).
            retry_policy: Backoff configuration (default: RetryPolicy()).
            transport: Optional httpx transport, e.g. httpx.MockTransport.
            sleep: Function used to wait between retries.

        Raises:
            ValueError: If base_url is empty or timeout is not positive.
        """
        self._transport = Transport(
            base_url=base_url,
            username=username,
            password=password,
            timeout=timeout,
            transport=transport,
        )
        self._executor = RetryingExecutor(retry_policy, sleep=sleep)

    @property
    def base_url(self) -> str:
        return self._transport.base_url

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._executor.policy

    def __enter__(self):
        """Enter context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context manager and cleanup resources."""
        self.close()

    def close(self):
        """Close the thread-local HTTP client if open."""
        self._transport.close()

    def _request(
        self,
        operation: Operation,
        method: str,
        path: str,
        params: list[tuple[str, str]] | None = None,
        json: Any = None,
        name: str | None = None,
    ) -> Success | Empty:
        """Execute a request with retries and classify the final response.

        Raises:
            TransportError: If the request fails at the network level with an
                error the retry policy does not cover.
            RetryExhaustedError: If transient failures outlast the policy.
            KafkaConnectError: The domain error the response maps to.
        """
        start_time = time.time()

        def send() -> httpx.Response:
            return self._transport.execute(method, path, params=params, json=json)

        try:
            response = self._executor.execute_with_retry(send)
        except httpx.HTTPError as exc:
            logger.exception(
                "API request failed",
                operation=operation.value,
                duration_seconds=round(time.time() - start_time, 3),
            )
            msg = f"{method} {path} failed: {exc}"
            raise TransportError(msg) from exc

        logger.debug(
            "Classifying response",
            operation=operation.value,
            status_code=response.status_code,
        )
        return classify(operation, response.status_code, response.content, name=name)

    def info(self) -> ClusterInfo:
        """Fetch version information of the Kafka Connect cluster."""
        return self._request(Operation.INFO, "GET", "/").value

    def connector_names(self) -> list[str]:
        """List the names of all connectors.

        Use :meth:`connectors` to also fetch info and/or status.
        """
        return self._request(Operation.CONNECTOR_NAMES, "GET", "/connectors").value

    def connectors(
        self,
        expand_status: bool,
        expand_info: bool,
    ) -> dict[str, Connector]:
        """List all connectors with their status and/or info expanded.

        Args:
            expand_status: Include each connector's status.
            expand_info: Include each connector's info.

        Returns:
            Mapping of connector name to Connector.

        Raises:
            InvalidExpandOptionError: If neither flag is set. No request is
                sent in that case.
        """
        params = []
        if expand_status:
            params.append(("expand", "status"))
        if expand_info:
            params.append(("expand", "info"))
        if not params:
            raise InvalidExpandOptionError()
        return self._request(
            Operation.LIST_EXPANDED,
            "GET",
            "/connectors",
            params=params,
        ).value

    def create_connector(self, name: str, config: dict[str, str]) -> ConnectorInfo:
        """Create a connector.

        Raises:
            BadRequestError: If the configuration is rejected.
            RebalanceInProgressError: If the cluster is rebalancing.
            InternalServerError: If the worker failed to process the request.
        """
        body = NewConnector(name=name, config=config).model_dump()
        logger.info("Creating connector", connector=name)
        return self._request(
            Operation.CREATE,
            "POST",
            "/connectors",
            json=body,
            name=name,
        ).value

    def restart_connector(
        self,
        name: str,
        include_tasks: bool = False,
        only_failed: bool = False,
    ) -> ConnectorStatus | None:
        """Restart a connector and optionally its tasks.

        Args:
            name: Connector name.
            include_tasks: Also restart the connector's tasks.
            only_failed: Only restart instances that are FAILED.

        Returns:
            The connector status when the worker answers 202 with a body,
            None otherwise.

        Raises:
            ConnectorNotFoundError: If the connector does not exist.
            RebalanceInProgressError: If the cluster is rebalancing.
            InternalServerError: If the worker failed to process the request.
        """
        logger.info(
            "Restarting connector",
            connector=name,
            include_tasks=include_tasks,
            only_failed=only_failed,
        )
        outcome = self._request(
            Operation.RESTART,
            "POST",
            _connector_path(name, "restart"),
            params=[
                ("includeTasks", _flag(include_tasks)),
                ("onlyFailed", _flag(only_failed)),
            ],
            name=name,
        )
        if isinstance(outcome, Success):
            return outcome.value
        return None

    def delete_connector(self, name: str) -> None:
        """Delete a connector, halting its tasks.

        Raises:
            RebalanceInProgressError: If the cluster is rebalancing.
        """
        logger.info("Deleting connector", connector=name)
        self._request(Operation.DELETE, "DELETE", _connector_path(name), name=name)

    def connector_config(self, name: str) -> dict[str, str]:
        """Fetch the configuration of a connector."""
        return self._request(
            Operation.CONFIG,
            "GET",
            _connector_path(name, "config"),
            name=name,
        ).value

    def pause_connector(self, name: str) -> None:
        """Pause a connector and its tasks."""
        logger.info("Pausing connector", connector=name)
        self._request(Operation.PAUSE, "PUT", _connector_path(name, "pause"), name=name)

    def resume_connector(self, name: str) -> None:
        """Resume a paused or stopped connector."""
        logger.info("Resuming connector", connector=name)
        self._request(
            Operation.RESUME,
            "PUT",
            _connector_path(name, "resume"),
            name=name,
        )

    def stop_connector(self, name: str) -> None:
        """Stop a connector, shutting down its tasks."""
        logger.info("Stopping connector", connector=name)
        self._request(Operation.STOP, "PUT", _connector_path(name, "stop"), name=name)

    def connector_offsets(
        self,
        name: str,
        partition: Callable[[Any], PartitionT],
        offset: Callable[[Any], OffsetT],
    ) -> list[ConnectorOffset[PartitionT, OffsetT]]:
        """Fetch the committed offsets of a connector.

        Args:
            name: Connector name.
            partition: Decoder for the partition of source offset records.
            offset: Decoder for the offset of source offset records.

        Returns:
            One SourceConnectorOffset or SinkConnectorOffset per record.

        Raises:
            OffsetDecodeError: If a record matches neither offset shape.
        """
        payload = self._request(
            Operation.OFFSETS,
            "GET",
            _connector_path(name, "offsets"),
            name=name,
        ).value
        return OffsetDecoder(partition, offset).decode_many(payload)
