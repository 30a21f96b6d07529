"""Tests for status code classification per operation."""

import json

import pytest

from kafka_connect_client.connectrestapi import errors, responses, types
from kafka_connect_client.connectrestapi.responses import Operation

CONNECTOR_INFO = {
    "name": "jdbc-source",
    "config": {"connector.class": "JdbcSourceConnector", "tasks.max": "2"},
    "tasks": [],
    "type": "source",
}
CONNECTOR_STATUS = {
    "name": "jdbc-source",
    "connector": {"state": "RESTARTING", "worker_id": "worker-1:8083"},
    "tasks": [{"id": 0, "state": "RESTARTING", "worker_id": "worker-1:8083"}],
    "type": "source",
}


def _body(payload) -> bytes:
    return json.dumps(payload).encode()


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


def test_create_201_returns_connector_info():
    """A created connector is decoded from the 201 body."""
    outcome = responses.classify(Operation.CREATE, 201, _body(CONNECTOR_INFO))
    assert isinstance(outcome, responses.Success)
    assert outcome.value == types.ConnectorInfo.model_validate(CONNECTOR_INFO)


def test_create_400_carries_error_message():
    """A rejected configuration raises BadRequestError with the parsed payload."""
    body = _body({"error_code": 400, "message": "Connector config is invalid"})
    with pytest.raises(errors.BadRequestError) as excinfo:
        responses.classify(Operation.CREATE, 400, body)
    assert excinfo.value.error_message == types.ErrorMessage(
        error_code=400,
        message="Connector config is invalid",
    )


def test_create_400_with_unparseable_body_is_transport_error():
    """A 400 whose body is not an ErrorMessage is a serialization failure."""
    with pytest.raises(errors.TransportError):
        responses.classify(Operation.CREATE, 400, b"<html>Bad Request</html>")


def test_create_500_is_internal_error():
    with pytest.raises(errors.InternalServerError):
        responses.classify(Operation.CREATE, 500, b"")


@pytest.mark.parametrize("status_code", [200, 202, 204, 404, 503])
def test_create_unlisted_status_is_unknown(status_code: int):
    """Codes outside the create table are never treated as success."""
    with pytest.raises(errors.UnknownStatusError) as excinfo:
        responses.classify(Operation.CREATE, status_code, _body(CONNECTOR_INFO))
    assert excinfo.value.status_code == status_code


# ---------------------------------------------------------------------------
# 409 across mutating operations
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "operation",
    [Operation.CREATE, Operation.RESTART, Operation.DELETE],
)
@pytest.mark.parametrize(
    "body",
    [b"", b"not json", _body({"error_code": 409, "message": "rebalance"})],
)
def test_conflict_is_rebalance_regardless_of_body(operation: Operation, body: bytes):
    """409 maps to RebalanceInProgressError whatever the body contains."""
    with pytest.raises(errors.RebalanceInProgressError):
        responses.classify(operation, 409, body)


# ---------------------------------------------------------------------------
# restart
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("status_code", [200, 204])
def test_restart_ok_is_empty(status_code: int):
    """A plain restart acknowledgement has no value."""
    assert responses.classify(Operation.RESTART, status_code) is responses.EMPTY


def test_restart_202_returns_status():
    """A 202 carries the status of the connector being restarted."""
    outcome = responses.classify(Operation.RESTART, 202, _body(CONNECTOR_STATUS))
    assert outcome.value.connector.state is types.Status.RESTARTING


def test_restart_202_without_body_returns_none():
    """The status of a 202 may be absent."""
    assert responses.classify(Operation.RESTART, 202, b"") == responses.Success(None)


def test_restart_404_carries_connector_name():
    with pytest.raises(errors.ConnectorNotFoundError) as excinfo:
        responses.classify(Operation.RESTART, 404, b"", name="missing")
    assert excinfo.value.name == "missing"


def test_restart_500_is_internal_error():
    with pytest.raises(errors.InternalServerError):
        responses.classify(Operation.RESTART, 500, b"")


# ---------------------------------------------------------------------------
# delete, pause, resume, stop
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("status_code", [200, 204])
def test_delete_ok_is_empty(status_code: int):
    assert responses.classify(Operation.DELETE, status_code) is responses.EMPTY


@pytest.mark.parametrize("status_code", [404, 500])
def test_delete_unlisted_status_is_unknown(status_code: int):
    """delete does not distinguish a missing connector."""
    with pytest.raises(errors.UnknownStatusError):
        responses.classify(Operation.DELETE, status_code)


@pytest.mark.parametrize("operation", [Operation.PAUSE, Operation.RESUME, Operation.STOP])
@pytest.mark.parametrize("status_code", [200, 202, 204])
def test_state_change_accepted_is_empty(operation: Operation, status_code: int):
    assert responses.classify(operation, status_code) is responses.EMPTY


@pytest.mark.parametrize("operation", [Operation.PAUSE, Operation.RESUME, Operation.STOP])
@pytest.mark.parametrize("status_code", [404, 409, 500])
def test_state_change_failure_is_unknown(operation: Operation, status_code: int):
    """Any non-success status of pause/resume/stop surfaces as unknown."""
    with pytest.raises(errors.UnknownStatusError):
        responses.classify(operation, status_code)


# ---------------------------------------------------------------------------
# reads
# ---------------------------------------------------------------------------


def test_list_expanded_returns_connectors_by_name():
    body = _body({"jdbc-source": {"status": CONNECTOR_STATUS}})
    outcome = responses.classify(Operation.LIST_EXPANDED, 200, body)
    assert outcome.value["jdbc-source"].name == "jdbc-source"


def test_list_expanded_rejects_connector_without_blocks():
    """A connector with neither info nor status is a decode failure."""
    with pytest.raises(errors.TransportError):
        responses.classify(Operation.LIST_EXPANDED, 200, _body({"ghost": {}}))


def test_config_returns_mapping():
    body = _body({"tasks.max": "1", "topics": "orders"})
    outcome = responses.classify(Operation.CONFIG, 200, body)
    assert outcome.value == {"tasks.max": "1", "topics": "orders"}


def test_offsets_returns_raw_json():
    """Offsets are left for the offset decoder."""
    outcome = responses.classify(Operation.OFFSETS, 200, _body({"offsets": []}))
    assert outcome.value == {"offsets": []}


def test_offsets_invalid_json_is_transport_error():
    with pytest.raises(errors.TransportError):
        responses.classify(Operation.OFFSETS, 200, b"{")


@pytest.mark.parametrize(
    "operation",
    [Operation.INFO, Operation.CONNECTOR_NAMES, Operation.CONFIG, Operation.OFFSETS],
)
def test_reads_non_200_is_unknown(operation: Operation):
    with pytest.raises(errors.UnknownStatusError):
        responses.classify(operation, 401, b"")
