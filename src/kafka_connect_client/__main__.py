"""Print the connector names of a Kafka Connect cluster as JSON.

Usage: ``python -m kafka_connect_client [CONFIG_PATH]``. Without an argument
the path is read from ``KAFKA_CONNECT_CLIENT_CONFIG_PATH``.
"""

import json
import sys

from .config import client_from_path


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    with client_from_path(args[0] if args else None) as client:
        print(json.dumps(client.connector_names()))
    return 0


if __name__ == "__main__":
    sys.exit(main())
