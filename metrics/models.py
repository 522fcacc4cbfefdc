"""Metric descriptor and sample models"""
from dataclasses import dataclass
from typing import Tuple
from enum import Enum


class MetricType(Enum):
    """Prometheus value types emitted by the exporter"""
    COUNTER = "counter"
    GAUGE = "gauge"


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join the non-empty name parts with underscores"""
    return "_".join(part for part in (namespace, subsystem, name) if part)


@dataclass(frozen=True)
class MetricDescriptor:
    """Static metadata for one metric family"""
    name: str
    help_text: str
    label_names: Tuple[str, ...]

    @classmethod
    def build(cls, namespace: str, subsystem: str, name: str, help_text: str, label_names) -> "MetricDescriptor":
        return cls(build_fq_name(namespace, subsystem, name), help_text, tuple(label_names))


@dataclass(frozen=True)
class MetricSample:
    """Single data point for a descriptor, labels given positionally"""
    descriptor: MetricDescriptor
    value: float
    label_values: Tuple[str, ...]
    metric_type: MetricType = MetricType.GAUGE

    def __post_init__(self):
        if len(self.label_values) != len(self.descriptor.label_names):
            raise ValueError(
                f"inconsistent label cardinality for {self.descriptor.name}: "
                f"expected {len(self.descriptor.label_names)} label values "
                f"but got {len(self.label_values)}"
            )

    @property
    def labels(self) -> dict:
        """Label values keyed by the descriptor's label names"""
        return dict(zip(self.descriptor.label_names, self.label_values))


@dataclass(frozen=True)
class InvalidMetric:
    """Marks a descriptor whose values could not be collected"""
    descriptor: MetricDescriptor
    error: Exception
