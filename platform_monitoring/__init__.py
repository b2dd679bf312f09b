"""Top-level platform monitoring helpers.

Usage: from platform_monitoring import log_event, prometheus_metric

Events are logged on the ``platform_monitoring`` logger with visitor
identifiers masked; metrics are exported as Prometheus gauges.
"""
from .exporters import log_event, prometheus_metric

__all__ = ["log_event", "prometheus_metric"]
