"""Prometheus collector for resources in a DigitalOcean account"""
from typing import Dict, Iterator, List, Tuple, Union
from prometheus_client.core import GaugeMetricFamily
from collectors.base import DigitalOceanSource
from metrics.models import MetricDescriptor, MetricSample, InvalidMetric
from provider.counters import (
    DropletCounter,
    FlipCounter,
    LoadBalancerCounter,
    TagCounter,
    VolumeCounter,
)
from logging_config import get_logger


logger = get_logger(__name__)

NAMESPACE = "digitalocean"


class CollectionError(Exception):
    """A resource query failed while collecting the given descriptor

    ``families`` holds the metric families that were complete before the
    failure, so callers may still choose to serve them.
    """

    def __init__(self, descriptor: MetricDescriptor, error: Exception, families=()):
        self.descriptor = descriptor
        self.error = error
        self.families = list(families)
        super().__init__(f"failed collecting DigitalOcean metric {descriptor.name}: {error}")


class DigitalOceanCollector:
    """Collects grouped resource counts from a DigitalOceanSource

    Descriptors are built once and never change. Each scrape queries the
    source for droplets, floating IPs, load balancers, tags and volumes, in
    that order, and stops at the first failing query.
    """

    def __init__(self, source: DigitalOceanSource, namespace: str = NAMESPACE):
        self.droplets = MetricDescriptor.build(
            namespace, "droplets", "count",
            "Number of Droplets by region, size, and status.",
            DropletCounter.label_names(),
        )
        self.floating_ips = MetricDescriptor.build(
            namespace, "floating_ips", "count",
            "Number of Floating IPs by region and status.",
            FlipCounter.label_names(),
        )
        self.load_balancers = MetricDescriptor.build(
            namespace, "load_balancers", "count",
            "Number of Load Balancers by region and status.",
            LoadBalancerCounter.label_names(),
        )
        self.tags = MetricDescriptor.build(
            namespace, "tags", "count",
            "Count of tagged resources by name and resource type.",
            TagCounter.label_names(),
        )
        self.volumes = MetricDescriptor.build(
            namespace, "volumes", "count",
            "Number of Volumes by region, size in GiB, and status.",
            VolumeCounter.label_names(),
        )

        self._source = source

    @property
    def descriptors(self) -> List[MetricDescriptor]:
        return [self.droplets, self.floating_ips, self.load_balancers, self.tags, self.volumes]

    def _sub_collections(self) -> List[Tuple[MetricDescriptor, str]]:
        """Descriptor and source query name for each resource kind, in scrape order"""
        return [
            (self.droplets, "droplets"),
            (self.floating_ips, "floating_ips"),
            (self.load_balancers, "load_balancers"),
            (self.tags, "tags"),
            (self.volumes, "volumes"),
        ]

    def describe_metrics(self) -> Iterator[MetricDescriptor]:
        """Yield every descriptor this collector can produce samples for"""
        yield from self.descriptors

    def collect_metrics(self) -> Iterator[Union[MetricSample, InvalidMetric]]:
        """Yield samples for every resource kind

        Samples are yielded as soon as they are produced. If a query fails,
        the failure is logged and a single InvalidMetric for the failing
        descriptor is yielded; the remaining kinds are not queried.
        """
        try:
            yield from self._collect()
        except CollectionError as e:
            logger.error(
                "Failed collecting DigitalOcean metric",
                descriptor=e.descriptor.name,
                error=str(e.error),
                error_type=type(e.error).__name__,
                event_type="collection_error"
            )
            yield InvalidMetric(e.descriptor, e.error)

    def _collect(self) -> Iterator[MetricSample]:
        for descriptor, query in self._sub_collections():
            yield from self._collect_counts(descriptor, query)

    def _collect_counts(self, descriptor: MetricDescriptor, query: str) -> Iterator[MetricSample]:
        try:
            counts: Dict = getattr(self._source, query)()
        except Exception as e:
            raise CollectionError(descriptor, e) from e

        for key, count in counts.items():
            yield MetricSample(descriptor, float(count), key.label_values())

    # prometheus_client collector protocol

    def describe(self) -> Iterator[GaugeMetricFamily]:
        """Empty metric families announced to the registry at registration"""
        for descriptor in self.describe_metrics():
            yield self._family(descriptor)

    def collect(self) -> Iterator[GaugeMetricFamily]:
        """Group the scrape's samples into gauge families

        Raises CollectionError when a query failed, carrying the families
        completed before the failure.
        """
        families: Dict[MetricDescriptor, GaugeMetricFamily] = {}

        for item in self.collect_metrics():
            if isinstance(item, InvalidMetric):
                raise CollectionError(item.descriptor, item.error, families.values())

            family = families.get(item.descriptor)
            if family is None:
                family = families[item.descriptor] = self._family(item.descriptor)
            family.add_metric(list(item.label_values), item.value)

        yield from families.values()

    @staticmethod
    def _family(descriptor: MetricDescriptor) -> GaugeMetricFamily:
        return GaugeMetricFamily(descriptor.name, descriptor.help_text, labels=list(descriptor.label_names))
