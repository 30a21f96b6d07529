"""Retry of transient failures with bounded, jittered exponential backoff.

A Kafka Connect worker may be mid-rebalance or briefly overloaded. Requests
failing at the network level, or answered with one of the configured 5xx
status codes, are re-issued after an exponentially growing delay until a total
elapsed-time ceiling is reached. Client errors (4xx) are never retried.
"""

import random
import time
from collections.abc import Callable

import httpx
import pydantic
import structlog
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    retry_if_result,
)
from tenacity.stop import stop_base
from tenacity.wait import wait_base

from .errors import RetryExhaustedError

logger = structlog.get_logger(__name__)

DEFAULT_RETRY_STATUSES = frozenset({502, 503, 504})

# Network failures worth re-issuing. Other httpx.TransportError subclasses
# (UnsupportedProtocol, LocalProtocolError, ProxyError) fail the same way again.
TRANSIENT_ERRORS = (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)

# Keeps base ** exponent finite; any realistic max_delay is reached long before.
_MAX_EXPONENT = 64


class RetryPolicy(pydantic.BaseModel):
    """Backoff configuration.

    The delay before retry ``n`` (1-based) is drawn uniformly from
    ``[min_delay, min(max_delay, min_delay * base ** (n - 1))]``.
    """

    model_config = pydantic.ConfigDict(frozen=True)

    base: float = pydantic.Field(2.0, ge=1.0, description="Exponential base")
    min_delay: float = pydantic.Field(
        1.0,
        gt=0,
        description="Lower bound of every retry delay in seconds",
    )
    max_delay: float = pydantic.Field(
        60.0,
        gt=0,
        description="Upper bound of every retry delay in seconds",
    )
    total_duration: float = pydantic.Field(
        600.0,
        gt=0,
        description="Elapsed seconds after which retrying stops",
    )
    retry_statuses: frozenset[int] = pydantic.Field(
        DEFAULT_RETRY_STATUSES,
        description="Response status codes treated as transient",
    )
    seed: int | None = pydantic.Field(None, description="Seed for the jitter RNG")

    @pydantic.field_validator("retry_statuses")
    @classmethod
    def _server_errors_only(cls, value: frozenset[int]) -> frozenset[int]:
        invalid = sorted(code for code in value if not 500 <= code <= 599)  # noqa: PLR2004
        if invalid:
            msg = f"only 5xx status codes may be retried, got {invalid}"
            raise ValueError(msg)
        return value

    @pydantic.model_validator(mode="after")
    def _check_bounds(self) -> "RetryPolicy":
        if self.min_delay > self.max_delay:
            msg = "min_delay must not exceed max_delay"
            raise ValueError(msg)
        return self

    @classmethod
    def lightweight(cls, **overrides) -> "RetryPolicy":
        """Short-lived policy for interactive use: 0.5-5 s delays, 15 s ceiling."""
        settings = {"min_delay": 0.5, "max_delay": 5.0, "total_duration": 15.0}
        settings.update(overrides)
        return cls(**settings)

    def delay_bound(self, retry_number: int) -> float:
        """Upper bound of the delay preceding retry ``retry_number``."""
        exponent = min(max(retry_number - 1, 0), _MAX_EXPONENT)
        return min(self.max_delay, self.min_delay * self.base**exponent)


class wait_bounded_jitter(wait_base):  # noqa: N801
    """Tenacity wait strategy drawing each delay from the policy's window."""

    def __init__(self, policy: RetryPolicy, rng: random.Random):
        self._policy = policy
        self._rng = rng

    def __call__(self, retry_state: RetryCallState) -> float:
        upper = self._policy.delay_bound(retry_state.attempt_number)
        lower = self._policy.min_delay
        return lower + self._rng.random() * (upper - lower)


class stop_after_elapsed(stop_base):  # noqa: N801
    """Stop once the upcoming sleep would cross the elapsed-time ceiling.

    Elapsed time is the larger of wall-clock time since the first attempt and
    the time spent sleeping, so an injected sleep function is accounted for.
    """

    def __init__(self, total_duration: float):
        self._total_duration = total_duration

    def __call__(self, retry_state: RetryCallState) -> bool:
        elapsed = max(retry_state.seconds_since_start or 0.0, retry_state.idle_for)
        return elapsed + retry_state.upcoming_sleep > self._total_duration


def _describe_outcome(retry_state: RetryCallState) -> dict:
    outcome = retry_state.outcome
    if outcome is None:
        return {}
    if outcome.failed:
        return {"error": repr(outcome.exception())}
    return {"status_code": outcome.result().status_code}


def _log_retry(retry_state: RetryCallState) -> None:
    delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
    logger.debug(
        "Retrying request",
        attempt=retry_state.attempt_number,
        delay_seconds=round(delay, 3),
        **_describe_outcome(retry_state),
    )


def _raise_exhausted(retry_state: RetryCallState) -> None:
    outcome = retry_state.outcome
    attempts = retry_state.attempt_number
    logger.warning(
        "Retries exhausted",
        attempts=attempts,
        idle_seconds=round(retry_state.idle_for, 3),
        **_describe_outcome(retry_state),
    )
    if outcome is not None and outcome.failed:
        raise RetryExhaustedError(attempts) from outcome.exception()
    status_code = outcome.result().status_code if outcome is not None else None
    raise RetryExhaustedError(attempts, status_code)


class RetryingExecutor:
    """Run request callables under a :class:`RetryPolicy`.

    Safe to share between threads; each call gets its own tenacity controller.
    With a fixed ``policy.seed`` the sequence of delays is deterministic.
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._rng = random.Random(self.policy.seed)  # noqa: S311

    def _is_transient_response(self, response: httpx.Response) -> bool:
        return response.status_code in self.policy.retry_statuses

    def _retrying(self) -> Retrying:
        return Retrying(
            retry=(
                retry_if_exception_type(TRANSIENT_ERRORS)
                | retry_if_result(self._is_transient_response)
            ),
            wait=wait_bounded_jitter(self.policy, self._rng),
            stop=stop_after_elapsed(self.policy.total_duration),
            sleep=self._sleep,
            before_sleep=_log_retry,
            retry_error_callback=_raise_exhausted,
        )

    def execute_with_retry(
        self,
        send: Callable[[], httpx.Response],
    ) -> httpx.Response:
        """Call ``send`` until it yields a non-transient outcome.

        Args:
            send: Zero-argument callable issuing one request.

        Returns:
            The first response whose status is not transient. Non-transient
            exceptions propagate unchanged on first occurrence.

        Raises:
            RetryExhaustedError: If the elapsed-time ceiling is reached while
                failures are still transient.
        """
        return self._retrying()(send)
