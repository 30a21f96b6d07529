"""Response types for the Kafka Connect REST API.

Pydantic models mirroring the JSON documents exchanged with a Kafka Connect
worker (as of Kafka Connect 3.x / Confluent Platform 7.5). Every model is
frozen: values are built fresh from each response and never mutated.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeAlias, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

PartitionT = TypeVar("PartitionT")
OffsetT = TypeVar("OffsetT")


class Status(str, Enum):
    """State a connector or task may be in.

    Values are the upper-case tokens used on the wire.
    """

    PAUSED = "PAUSED"
    RUNNING = "RUNNING"
    RESTARTING = "RESTARTING"
    FAILED = "FAILED"
    UNASSIGNED = "UNASSIGNED"
    STOPPED = "STOPPED"

    def __str__(self) -> str:
        return self.value.capitalize()


class _Model(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ClusterInfo(_Model):
    """Version information of the worker answering ``GET /``."""

    version: str
    commit: str
    kafka_cluster_id: str


class TaskInfo(_Model):
    """Identifier of a single connector task."""

    connector: str
    task: int


class ConnectorInfo(_Model):
    """Definition of a connector: its configuration and assigned tasks."""

    name: str
    config: dict[str, str]
    tasks: list[TaskInfo]
    kind: str = Field(alias="type")


class ConnectorState(_Model):
    """Runtime state of the connector instance itself."""

    state: Status
    worker_id: str
    connector: str | None = None


class TaskStatus(_Model):
    """Runtime status of a task.

    ``trace`` carries the stack trace of the failure and is only sent by the
    worker when ``state`` is FAILED.
    """

    id: int
    state: Status
    worker_id: str
    trace: str | None = None


class ConnectorStatus(_Model):
    """Runtime status of a connector and its tasks."""

    connector: ConnectorState
    name: str
    tasks: list[TaskStatus]
    kind: str = Field(alias="type")


class Connector(_Model):
    """A connector as returned by ``GET /connectors?expand=...``.

    Which of ``info`` and ``status`` is populated depends on the requested
    expansions; a connector with neither is rejected at validation time.
    """

    info: ConnectorInfo | None = None
    status: ConnectorStatus | None = None

    @model_validator(mode="after")
    def _require_info_or_status(self) -> "Connector":
        if self.info is None and self.status is None:
            msg = "connector must carry at least one of 'info' or 'status'"
            raise ValueError(msg)
        return self

    @property
    def name(self) -> str:
        """Connector name, preferring the info block over the status block."""
        if self.info is not None:
            return self.info.name
        return self.status.name  # type: ignore[union-attr]


class ErrorMessage(_Model):
    """Error payload returned with a 400 response."""

    error_code: int
    message: str


class NewConnector(_Model):
    """Request body of ``POST /connectors``."""

    name: str
    config: dict[str, str]


# ---------------------------------------------------------------------------
# Offsets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SourceConnectorOffset(Generic[PartitionT, OffsetT]):
    """Offset of a source connector.

    Source connectors define their own partition and offset shapes, so both
    are left to the caller (see :class:`~.offsets.OffsetDecoder`).
    """

    partition: PartitionT
    offset: OffsetT


class SinkConnectorOffsetPartition(_Model):
    kafka_topic: str
    kafka_partition: int


class SinkConnectorOffsetOffset(_Model):
    offset: str


class SinkConnectorOffset(_Model):
    """Offset of a sink connector, keyed by Kafka topic partition."""

    partition: SinkConnectorOffsetPartition
    offset: SinkConnectorOffsetOffset


ConnectorOffset: TypeAlias = SourceConnectorOffset[PartitionT, OffsetT] | SinkConnectorOffset
