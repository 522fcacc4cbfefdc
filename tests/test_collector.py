"""Tests for the DigitalOcean collector"""
from unittest.mock import Mock, patch
import pytest
from prometheus_client import CollectorRegistry

from collectors.base import DigitalOceanSource
from collectors.digitalocean import CollectionError, DigitalOceanCollector
from metrics.models import InvalidMetric, MetricDescriptor, MetricSample
from provider.counters import (
    DropletCounter,
    FlipCounter,
    LoadBalancerCounter,
    TagCounter,
    VolumeCounter,
)
from tests.fakes import FakeSource, KINDS


def sample_results():
    return {
        "droplets": {
            DropletCounter("nyc1", "s-1vcpu", "active"): 3,
            DropletCounter("nyc1", "s-2vcpu", "active"): 1,
        },
        "floating_ips": {
            FlipCounter("ams3", "assigned"): 2,
        },
        "load_balancers": {
            LoadBalancerCounter("sfo2", "active"): 1,
            LoadBalancerCounter("sfo2", "new"): 1,
        },
        "tags": {
            TagCounter("web", "droplets"): 4,
        },
        "volumes": {
            VolumeCounter("fra1", "100", "attached"): 2,
            VolumeCounter("fra1", "10", "unattached"): 1,
        },
    }


def samples_for(items, descriptor):
    return [i for i in items if isinstance(i, MetricSample) and i.descriptor == descriptor]


class TestDescriptors:
    """Test descriptor construction and enumeration"""

    def setup_method(self):
        self.source = Mock(spec=DigitalOceanSource)
        self.collector = DigitalOceanCollector(self.source)

    def test_descriptor_metadata(self):
        """Test the fixed metric names and ordered label names"""
        expected = [
            ("digitalocean_droplets_count", ("region", "size", "status")),
            ("digitalocean_floating_ips_count", ("region", "status")),
            ("digitalocean_load_balancers_count", ("region", "status")),
            ("digitalocean_tags_count", ("name", "resource_type")),
            ("digitalocean_volumes_count", ("region", "size", "status")),
        ]

        actual = [(d.name, d.label_names) for d in self.collector.descriptors]

        assert actual == expected
        assert self.collector.droplets.help_text == "Number of Droplets by region, size, and status."
        assert self.collector.volumes.help_text == "Number of Volumes by region, size in GiB, and status."

    def test_describe_yields_all_descriptors_without_querying(self):
        """Test that enumeration covers all five kinds and never calls the source"""
        described = list(self.collector.describe_metrics())

        assert described == self.collector.descriptors
        assert len(set(described)) == 5
        assert self.source.method_calls == []

    def test_describe_is_repeatable(self):
        """Test that enumeration does not depend on prior collection"""
        first = list(self.collector.describe_metrics())
        second = list(self.collector.describe_metrics())

        assert first == second

    def test_custom_namespace(self):
        """Test that all descriptors share the configured namespace"""
        collector = DigitalOceanCollector(self.source, namespace="do")

        assert [d.name for d in collector.descriptors] == [
            "do_droplets_count",
            "do_floating_ips_count",
            "do_load_balancers_count",
            "do_tags_count",
            "do_volumes_count",
        ]

    def test_descriptors_are_immutable(self):
        """Test that descriptors cannot be changed after construction"""
        with pytest.raises(Exception):
            self.collector.droplets.name = "other"


class TestCollectMetrics:
    """Test the scrape protocol"""

    def test_droplet_samples(self):
        """Test one gauge sample per droplet key with positional labels"""
        source = FakeSource({"droplets": {
            DropletCounter("nyc1", "s-1vcpu", "active"): 3,
            DropletCounter("nyc1", "s-2vcpu", "active"): 1,
        }})
        collector = DigitalOceanCollector(source)

        samples = samples_for(list(collector.collect_metrics()), collector.droplets)

        assert sorted((s.label_values, s.value) for s in samples) == [
            (("nyc1", "s-1vcpu", "active"), 3.0),
            (("nyc1", "s-2vcpu", "active"), 1.0),
        ]

    def test_all_kinds_succeed(self):
        """Test that a full scrape emits every entry and no invalid metric"""
        results = sample_results()
        source = FakeSource(results)
        collector = DigitalOceanCollector(source)

        items = list(collector.collect_metrics())

        assert not any(isinstance(i, InvalidMetric) for i in items)
        assert len(items) == sum(len(m) for m in results.values())
        assert source.calls == KINDS

    def test_samples_match_source_entries(self):
        """Test that every key and count is reproduced exactly"""
        results = sample_results()
        collector = DigitalOceanCollector(FakeSource(results))
        items = list(collector.collect_metrics())

        for kind, descriptor in zip(KINDS, collector.descriptors):
            emitted = {s.label_values: s.value for s in samples_for(items, descriptor)}
            expected = {key.label_values(): float(count) for key, count in results[kind].items()}
            assert emitted == expected

    def test_tag_labels_follow_descriptor_order(self):
        """Test that label values are positional in descriptor order"""
        collector = DigitalOceanCollector(FakeSource({"tags": {TagCounter("web", "volumes"): 2}}))

        sample = samples_for(list(collector.collect_metrics()), collector.tags)[0]

        assert sample.labels == {"name": "web", "resource_type": "volumes"}

    @pytest.mark.parametrize("failing", range(len(KINDS)))
    def test_first_failure_aborts_scrape(self, failing):
        """Test fail-fast behaviour for a failure at each position"""
        results = sample_results()
        error = RuntimeError("boom")
        source = FakeSource(results, errors={KINDS[failing]: error})
        collector = DigitalOceanCollector(source)

        with patch("collectors.digitalocean.logger"):
            items = list(collector.collect_metrics())

        invalid = [i for i in items if isinstance(i, InvalidMetric)]
        assert len(invalid) == 1
        assert invalid[0].descriptor == collector.descriptors[failing]
        assert invalid[0].error is error
        assert items[-1] is invalid[0]

        for position, descriptor in enumerate(collector.descriptors):
            emitted = samples_for(items, descriptor)
            if position < failing:
                assert len(emitted) == len(results[KINDS[position]])
            else:
                assert emitted == []

        assert source.calls == KINDS[:failing + 1]

    def test_tags_rate_limited(self):
        """Test a tags failure after one droplet sample"""
        source = FakeSource(
            {"droplets": {DropletCounter("nyc1", "s-1vcpu", "active"): 1}},
            errors={"tags": RuntimeError("rate limited")},
        )
        collector = DigitalOceanCollector(source)

        with patch("collectors.digitalocean.logger") as mock_logger:
            items = list(collector.collect_metrics())

        assert len(items) == 2
        assert items[0].descriptor == collector.droplets
        assert items[0].label_values == ("nyc1", "s-1vcpu", "active")
        assert isinstance(items[1], InvalidMetric)
        assert items[1].descriptor == collector.tags
        assert str(items[1].error) == "rate limited"
        assert "volumes" not in source.calls

        mock_logger.error.assert_called_once()
        assert mock_logger.error.call_args.kwargs["descriptor"] == "digitalocean_tags_count"
        assert mock_logger.error.call_args.kwargs["error"] == "rate limited"

    def test_load_balancer_failure_reports_load_balancer_descriptor(self):
        """Test that the failing kind's own descriptor is reported"""
        collector = DigitalOceanCollector(FakeSource(errors={"load_balancers": RuntimeError("503")}))

        with patch("collectors.digitalocean.logger"):
            items = list(collector.collect_metrics())

        assert items == [InvalidMetric(collector.load_balancers, items[0].error)]

    def test_collect_is_idempotent(self):
        """Test that repeated scrapes of identical data yield identical samples"""
        collector = DigitalOceanCollector(FakeSource(sample_results()))

        first = sorted((s.descriptor.name, s.label_values, s.value) for s in collector.collect_metrics())
        second = sorted((s.descriptor.name, s.label_values, s.value) for s in collector.collect_metrics())

        assert first == second

    def test_empty_account(self):
        """Test that an empty account yields nothing"""
        collector = DigitalOceanCollector(FakeSource())

        assert list(collector.collect_metrics()) == []

    def test_samples_are_streamed(self):
        """Test that droplet samples are available before later kinds are queried"""
        source = FakeSource({"droplets": {DropletCounter("nyc1", "s-1vcpu", "active"): 1}})
        collector = DigitalOceanCollector(source)

        items = collector.collect_metrics()
        first = next(items)

        assert first.descriptor == collector.droplets
        assert source.calls == ["droplets"]


class TestMetricSample:
    """Test sample construction"""

    def test_label_cardinality_mismatch(self):
        """Test that label values must match the descriptor's label names"""
        descriptor = MetricDescriptor.build("digitalocean", "tags", "count", "help", ["name", "resource_type"])

        with pytest.raises(ValueError):
            MetricSample(descriptor, 1.0, ("web",))


class TestPrometheusCollector:
    """Test the prometheus_client collector hooks"""

    def test_registration_describes_without_querying(self):
        """Test that registering the collector only enumerates descriptors"""
        source = FakeSource()
        registry = CollectorRegistry()

        registry.register(DigitalOceanCollector(source))

        assert source.calls == []

    def test_duplicate_registration_rejected(self):
        """Test that descriptor names are announced to the registry"""
        registry = CollectorRegistry()
        registry.register(DigitalOceanCollector(FakeSource()))

        with pytest.raises(ValueError):
            registry.register(DigitalOceanCollector(FakeSource()))

    def test_sample_values_in_registry(self):
        """Test gauge values as seen through the registry"""
        registry = CollectorRegistry()
        registry.register(DigitalOceanCollector(FakeSource(sample_results())))

        assert registry.get_sample_value(
            "digitalocean_droplets_count",
            {"region": "nyc1", "size": "s-1vcpu", "status": "active"},
        ) == 3.0
        assert registry.get_sample_value(
            "digitalocean_tags_count",
            {"name": "web", "resource_type": "droplets"},
        ) == 4.0
        assert registry.get_sample_value(
            "digitalocean_volumes_count",
            {"region": "fra1", "size": "10", "status": "unattached"},
        ) == 1.0

    def test_families_are_gauges(self):
        """Test that every emitted family is a gauge"""
        collector = DigitalOceanCollector(FakeSource(sample_results()))

        families = list(collector.collect())

        assert [f.name for f in families] == [d.name for d in collector.descriptors]
        assert all(f.type == "gauge" for f in families)

    def test_failure_raises_with_partial_families(self):
        """Test that a failed scrape raises with the completed families attached"""
        collector = DigitalOceanCollector(FakeSource(
            sample_results(),
            errors={"tags": RuntimeError("rate limited")},
        ))

        with patch("collectors.digitalocean.logger"):
            with pytest.raises(CollectionError) as excinfo:
                list(collector.collect())

        assert excinfo.value.descriptor == collector.tags
        assert str(excinfo.value.error) == "rate limited"
        assert [f.name for f in excinfo.value.families] == [
            "digitalocean_droplets_count",
            "digitalocean_floating_ips_count",
            "digitalocean_load_balancers_count",
        ]
