"""Decoding of connector offsets.

``GET /connectors/{name}/offsets`` returns records in one of two shapes that
carry no discriminator field:

- source connectors: ``{"partition": <P>, "offset": <O>}`` where P and O are
  defined by the connector implementation;
- sink connectors: ``{"partition": {"kafka_topic": str, "kafka_partition": int},
  "offset": {"offset": str}}``.

Records are told apart by trial: the source shape is attempted first using the
caller's partition and offset strategies, then the fixed sink shape. Strategies
that would also accept the sink shape therefore always win; keep them strict.
"""

from collections.abc import Callable
from typing import Any, Generic

import pydantic
import structlog

from .errors import OffsetDecodeError
from .types import (
    ConnectorOffset,
    OffsetT,
    PartitionT,
    SinkConnectorOffset,
    SourceConnectorOffset,
)

logger = structlog.get_logger(__name__)

SOURCE_SHAPE = (
    "source offset {partition: <connector-defined>, offset: <connector-defined>}"
)
SINK_SHAPE = "sink offset {partition: {kafka_topic, kafka_partition}, offset: {offset}}"

# Errors a strategy may raise to signal that a value does not have its shape.
# pydantic.ValidationError is a ValueError.
_MISMATCH_ERRORS = (ValueError, TypeError, KeyError)


class OffsetDecoder(Generic[PartitionT, OffsetT]):
    """Decode raw offset records into :data:`~.types.ConnectorOffset` values.

    Args:
        partition: Callable turning the raw ``partition`` value of a source
            record into P, e.g. ``MyPartition.model_validate``.
        offset: Callable turning the raw ``offset`` value of a source record
            into O.

    Both callables must raise ``ValueError`` (pydantic ``ValidationError``
    included), ``TypeError`` or ``KeyError`` when the value does not match.
    """

    def __init__(
        self,
        partition: Callable[[Any], PartitionT],
        offset: Callable[[Any], OffsetT],
    ):
        self._partition = partition
        self._offset = offset

    def _decode_source(self, raw: Any) -> SourceConnectorOffset[PartitionT, OffsetT]:
        if not isinstance(raw, dict):
            msg = f"expected a JSON object, got {type(raw).__name__}"
            raise TypeError(msg)
        return SourceConnectorOffset(
            partition=self._partition(raw["partition"]),
            offset=self._offset(raw["offset"]),
        )

    def decode(self, raw: Any) -> ConnectorOffset[PartitionT, OffsetT]:
        """Decode a single offset record.

        Args:
            raw: One parsed JSON offset record.

        Returns:
            A SourceConnectorOffset or a SinkConnectorOffset.

        Raises:
            OffsetDecodeError: If the record matches neither shape.
        """
        try:
            return self._decode_source(raw)
        except _MISMATCH_ERRORS as exc:
            source_error = exc

        try:
            return SinkConnectorOffset.model_validate(raw)
        except pydantic.ValidationError as exc:
            sink_error = exc

        logger.debug(
            "Offset record matches no known shape",
            source_error=str(source_error),
            sink_error=str(sink_error),
        )
        msg = (
            f"Record matches neither the {SOURCE_SHAPE} "
            f"({type(source_error).__name__}: {source_error}) "
            f"nor the {SINK_SHAPE} ({sink_error.error_count()} validation errors)"
        )
        raise OffsetDecodeError(msg) from sink_error

    def decode_many(self, payload: Any) -> list[ConnectorOffset[PartitionT, OffsetT]]:
        """Decode the ``{"offsets": [...]}`` document of the offsets endpoint.

        Raises:
            OffsetDecodeError: If the envelope is malformed or any record
                matches neither shape.
        """
        if not isinstance(payload, dict) or not isinstance(
            payload.get("offsets"),
            list,
        ):
            msg = "Expected a JSON object with an 'offsets' array"
            raise OffsetDecodeError(msg)
        return [self.decode(record) for record in payload["offsets"]]
