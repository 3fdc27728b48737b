"""Prometheus textfile exporter module.

This module handles:
- Defining Prometheus gauges for the RPO check
- Updating them from an RPO summary and the check outcome
- Writing them to a node_exporter textfile collector file
"""

import logging
import time
from typing import Optional

from prometheus_client import CollectorRegistry, Gauge, write_to_textfile

from zerto_rpo.client import RPOSummary

# Configure module logger
logger = logging.getLogger(__name__)


class RPOExporter:
    """Prometheus exporter for the Zerto RPO check.

    Exposes the following metrics:
    - zerto_vpg_average_rpo_seconds: Average ActualRPO across all VPGs
    - zerto_vpg_count: Number of VPGs the average was computed over
    - zerto_check_success: Whether the last check succeeded (1=success, 0=failure)
    - zerto_check_timestamp: Unix timestamp of the last check
    - zerto_check_duration_seconds: Duration of the last check

    Attributes:
        server: ZVM server the metrics describe (exported as a label)
    """

    def __init__(self, server: str, registry: Optional[CollectorRegistry] = None):
        """Initialize the exporter.

        Args:
            server: ZVM server label value
            registry: Optional registry; a fresh CollectorRegistry is used if None
        """
        self.server = server
        self._registry = registry if registry is not None else CollectorRegistry()

        self._average_rpo = Gauge(
            'zerto_vpg_average_rpo_seconds',
            'Average ActualRPO across all VPGs in seconds',
            ['server'],
            registry=self._registry
        )

        self._vpg_count = Gauge(
            'zerto_vpg_count',
            'Number of VPGs returned by the ZVM',
            ['server'],
            registry=self._registry
        )

        self._check_success = Gauge(
            'zerto_check_success',
            'Whether the last check succeeded (1=success, 0=failure)',
            ['server'],
            registry=self._registry
        )

        self._check_timestamp = Gauge(
            'zerto_check_timestamp',
            'Unix timestamp of the last check',
            ['server'],
            registry=self._registry
        )

        self._check_duration = Gauge(
            'zerto_check_duration_seconds',
            'Duration of the last check in seconds',
            ['server'],
            registry=self._registry
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def update(self, summary: RPOSummary) -> None:
        """Set the RPO gauges from a summary.

        Args:
            summary: Average RPO and VPG count
        """
        self._average_rpo.labels(server=self.server).set(summary.average)
        self._vpg_count.labels(server=self.server).set(summary.count)
        logger.debug(f"Metrics updated: average={summary.average}, count={summary.count}")

    def set_check_result(self, success: bool, duration: float) -> None:
        """Update operational metrics after a check attempt.

        Args:
            success: Whether the check succeeded
            duration: How long the check took in seconds
        """
        self._check_success.labels(server=self.server).set(1 if success else 0)
        self._check_timestamp.labels(server=self.server).set(time.time())
        self._check_duration.labels(server=self.server).set(duration)

    def write(self, path: str) -> None:
        """Write all metrics to a textfile collector file.

        prometheus_client writes to a temporary file and renames it, so
        node_exporter never reads a partial file.

        Args:
            path: Target .prom file
        """
        write_to_textfile(path, self._registry)
        logger.info(f"Wrote metrics to {path}")
