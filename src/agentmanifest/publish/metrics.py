"""
Prometheus metrics for manifest publishing.

Low-cardinality only: the single label is the pipeline stage that failed.
No agent names, image references or addresses as labels.
"""

from __future__ import annotations

from typing import Literal

from prometheus_client import Counter, Histogram
from prometheus_client.registry import CollectorRegistry

Stage = Literal["build", "publish"]

STAGES: tuple[Stage, ...] = ("build", "publish")


class PublishMetrics:
    """
    Counters and timings for upload_manifest calls.

    Usage:
        registry = CollectorRegistry()
        metrics = PublishMetrics(registry=registry)
        # generate_latest(registry) -> bytes for a pushgateway or /metrics
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

        self._attempts = Counter(
            "agentmanifest_publish_attempts",
            "Total upload_manifest calls",
            registry=self._registry,
        )
        self._success = Counter(
            "agentmanifest_publish_success",
            "Total signed manifests published",
            registry=self._registry,
        )
        self._failures = Counter(
            "agentmanifest_publish_failures",
            "Total failed upload_manifest calls by stage",
            ["stage"],
            registry=self._registry,
        )
        self._duration = Histogram(
            "agentmanifest_publish_duration_seconds",
            "Duration of successful upload_manifest calls",
            buckets=(0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
            registry=self._registry,
        )

        # Pre-create label children so every stage is exported from the start
        for stage in STAGES:
            self._failures.labels(stage=stage)

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def record_attempt(self) -> None:
        self._attempts.inc()

    def record_success(self, duration_s: float) -> None:
        self._success.inc()
        self._duration.observe(duration_s)

    def record_failure(self, stage: Stage) -> None:
        self._failures.labels(stage=stage).inc()
