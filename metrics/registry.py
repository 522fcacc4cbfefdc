"""Metrics registry wiring the DigitalOcean collector into prometheus_client"""
import time
from typing import Dict, Iterable, List, Optional
from prometheus_client import CollectorRegistry, PlatformCollector, ProcessCollector, generate_latest
from prometheus_client.metrics_core import Metric
from collectors.base import DigitalOceanSource
from collectors.digitalocean import CollectionError, DigitalOceanCollector
from config import Config
from logging_config import get_logger, log_scrape


logger = get_logger(__name__)


class _Snapshot:
    """Already collected metric families, renderable by generate_latest"""

    def __init__(self, families: Iterable[Metric]):
        self._families = list(families)

    def collect(self):
        return iter(self._families)


class MetricsRegistry:
    """Owns the collector registries and renders scrapes"""

    def __init__(self, config: Config, source: DigitalOceanSource):
        self.config = config
        self.source = source
        self.collector = DigitalOceanCollector(source, namespace=config.namespace)

        # Registration calls describe() and rejects duplicate metric names
        self.registry = CollectorRegistry()
        self.registry.register(self.collector)

        self.runtime_registry: Optional[CollectorRegistry] = None
        if config.include_process_metrics:
            self.runtime_registry = CollectorRegistry()
            ProcessCollector(registry=self.runtime_registry)
            PlatformCollector(registry=self.runtime_registry)

        # Scrape state
        self.scrape_count = 0
        self.scrape_errors = 0
        self.last_scrape_time = 0.0
        self.last_scrape_duration = 0.0
        self.last_error: Optional[str] = None

    def render(self) -> bytes:
        """Run one scrape and return it in the Prometheus text format

        Raises CollectionError when a resource query failed, unless the
        exporter is configured to continue on error.
        """
        start_time = time.time()
        failed = False

        try:
            families: List[Metric] = list(self.registry.collect())
            self.last_error = None
        except CollectionError as e:
            failed = True
            self.scrape_errors += 1
            self.last_error = str(e)
            if not self.config.is_continue_on_error():
                self._finish_scrape(start_time, 0, failed)
                raise
            families = e.families

        if self.runtime_registry is not None:
            families.extend(self.runtime_registry.collect())

        samples_count = sum(len(family.samples) for family in families)
        self._finish_scrape(start_time, samples_count, failed)
        return generate_latest(_Snapshot(families))

    def _finish_scrape(self, start_time: float, samples_count: int, failed: bool):
        self.scrape_count += 1
        self.last_scrape_time = time.time()
        self.last_scrape_duration = self.last_scrape_time - start_time
        log_scrape(logger, samples_count, self.last_scrape_duration, failed=failed)

    def last_scrape_failed(self) -> bool:
        return self.last_error is not None

    def get_status(self) -> Dict:
        """Scrape statistics and exported metric names"""
        return {
            "metrics": [descriptor.name for descriptor in self.collector.describe_metrics()],
            "total_scrapes": self.scrape_count,
            "scrape_errors": self.scrape_errors,
            "last_scrape_time": self.last_scrape_time or None,
            "last_scrape_duration_seconds": round(self.last_scrape_duration, 3),
            "last_error": self.last_error,
        }

    def cleanup(self):
        """Release the source's connections"""
        try:
            self.source.close()
        except Exception as e:
            logger.error("Failed to close resource source", error=str(e))
