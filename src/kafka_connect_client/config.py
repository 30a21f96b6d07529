"""Configuration and logging setup for the Kafka Connect client."""

import logging
import os
import pathlib

import pydantic
import structlog

from . import connectrestapi

CONFIG_ENV_VAR = "KAFKA_CONNECT_CLIENT_CONFIG_PATH"
REDACTED = "********"
SENSITIVE_LOG_KEYS = frozenset({"password", "authorization"})
logger = structlog.get_logger(__name__)


class ClientConfig(pydantic.BaseModel):
    """Configuration for a Kafka Connect client."""

    base_url: str = pydantic.Field(
        description="Base URL of a Kafka Connect worker",
        min_length=1,
    )
    username: str | None = pydantic.Field(None, description="Basic auth user")
    password: pydantic.SecretStr | None = pydantic.Field(
        None,
        description="Basic auth password",
    )
    timeout: float = pydantic.Field(
        connectrestapi.DEFAULT_TIMEOUT,
        description="Request timeout in seconds",
        gt=0,
    )
    retry: connectrestapi.RetryPolicy = pydantic.Field(
        default_factory=connectrestapi.RetryPolicy,
        description="Backoff applied to transient failures",
    )
    log_level: str = pydantic.Field("INFO", description="Logging level")


def redact_credentials(_logger, _method_name: str, event_dict: dict) -> dict:
    """structlog processor masking credential values before rendering."""
    for key in event_dict.keys() & SENSITIVE_LOG_KEYS:
        if event_dict[key] is not None:
            event_dict[key] = REDACTED
    return event_dict


def configure_logging(log_level_name: str) -> None:
    """Configure structlog for logfmt output with credentials masked."""
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            redact_credentials,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.EventRenamer("msg"),
            structlog.processors.format_exc_info,
            structlog.processors.LogfmtRenderer(
                key_order=("timestamp", "level", "msg"),
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def load_config(config_path: str | pathlib.Path) -> ClientConfig:
    """Load and validate the client configuration from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If the content is not a valid configuration.
    """
    path = pathlib.Path(config_path)
    if not path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    return ClientConfig.model_validate_json(path.read_text())


def create_client(config: ClientConfig) -> connectrestapi.KafkaConnectClient:
    """Construct a client from validated config."""
    password = config.password.get_secret_value() if config.password else None
    client = connectrestapi.KafkaConnectClient(
        base_url=config.base_url,
        username=config.username,
        password=password,
        timeout=config.timeout,
        retry_policy=config.retry,
    )
    logger.info(
        "Created REST client",
        base_url=config.base_url,
        authenticated=config.username is not None,
    )
    return client


def client_from_path(
    config_path: str | None = None,
) -> connectrestapi.KafkaConnectClient:
    """Create a client using a config path or the environment default."""
    resolved_path = config_path or os.environ.get(CONFIG_ENV_VAR, "/config.json")
    config = load_config(resolved_path)
    configure_logging(config.log_level)
    return create_client(config)
