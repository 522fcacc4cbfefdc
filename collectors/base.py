"""Resource source interface consumed by the collectors"""
from abc import ABC, abstractmethod
from typing import Dict
from provider.counters import (
    DropletCounter,
    FlipCounter,
    LoadBalancerCounter,
    TagCounter,
    VolumeCounter,
)


class DigitalOceanSource(ABC):
    """Retrieves grouped resource counts for a DigitalOcean account

    Every method returns a fresh mapping from composite key to the number of
    resources sharing it, or raises when the account could not be queried.
    """

    @abstractmethod
    def droplets(self) -> Dict[DropletCounter, int]:
        """Droplet counts by region, size and status"""

    @abstractmethod
    def floating_ips(self) -> Dict[FlipCounter, int]:
        """Floating IP counts by region and status"""

    @abstractmethod
    def load_balancers(self) -> Dict[LoadBalancerCounter, int]:
        """Load balancer counts by region and status"""

    @abstractmethod
    def tags(self) -> Dict[TagCounter, int]:
        """Tagged resource counts by tag name and resource type"""

    @abstractmethod
    def volumes(self) -> Dict[VolumeCounter, int]:
        """Volume counts by region, size in GiB and status"""

    def close(self):
        """Release any resources held by the source"""
