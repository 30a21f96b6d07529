"""Kafka Connect Client.

Typed client for the Kafka Connect cluster-management REST API: cluster
metadata, connector lifecycle operations, configuration, and offsets.
"""

__version__ = "0.1.0"
