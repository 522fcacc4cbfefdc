"""Composite keys used to group DigitalOcean resources into counts

Each key is an immutable value type usable as a dictionary key. Field order
is the label order of the corresponding metric family.
"""
from dataclasses import dataclass, astuple, fields
from typing import Tuple


class CounterKey:
    """Mixin exposing a key's fields as ordered label names and values"""

    @classmethod
    def label_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def label_values(self) -> Tuple[str, ...]:
        return astuple(self)


@dataclass(frozen=True)
class DropletCounter(CounterKey):
    region: str
    size: str
    status: str


@dataclass(frozen=True)
class FlipCounter(CounterKey):
    region: str
    status: str


@dataclass(frozen=True)
class LoadBalancerCounter(CounterKey):
    region: str
    status: str


@dataclass(frozen=True)
class TagCounter(CounterKey):
    name: str
    resource_type: str


@dataclass(frozen=True)
class VolumeCounter(CounterKey):
    region: str
    size: str
    status: str
