"""DigitalOcean account source backed by the v2 REST API"""
from collections import Counter
from typing import Any, Dict
from collectors.base import DigitalOceanSource
from config import Config
from .client import DigitalOceanClient
from .counters import (
    DropletCounter,
    FlipCounter,
    LoadBalancerCounter,
    TagCounter,
    VolumeCounter,
)


def _region(resource: Dict[str, Any]) -> str:
    return (resource.get("region") or {}).get("slug", "")


class DigitalOceanService(DigitalOceanSource):
    """Tally DigitalOcean resources into grouped counts"""

    def __init__(self, client: DigitalOceanClient):
        self.client = client

    @classmethod
    def from_config(cls, config: Config, transport=None) -> "DigitalOceanService":
        """Build a service with an API client configured from settings"""
        client = DigitalOceanClient(
            token=config.digitalocean_token,
            base_url=config.digitalocean_api_url,
            timeout=config.request_timeout,
            page_size=config.page_size,
            transport=transport,
        )
        return cls(client)

    def droplets(self) -> Dict[DropletCounter, int]:
        counts = Counter()
        for droplet in self.client.list("/v2/droplets", "droplets"):
            counts[DropletCounter(
                region=_region(droplet),
                size=droplet.get("size_slug", ""),
                status=droplet.get("status", ""),
            )] += 1
        return dict(counts)

    def floating_ips(self) -> Dict[FlipCounter, int]:
        counts = Counter()
        for fip in self.client.list("/v2/floating_ips", "floating_ips"):
            status = "assigned" if fip.get("droplet") else "unassigned"
            counts[FlipCounter(region=_region(fip), status=status)] += 1
        return dict(counts)

    def load_balancers(self) -> Dict[LoadBalancerCounter, int]:
        counts = Counter()
        for lb in self.client.list("/v2/load_balancers", "load_balancers"):
            counts[LoadBalancerCounter(region=_region(lb), status=lb.get("status", ""))] += 1
        return dict(counts)

    def tags(self) -> Dict[TagCounter, int]:
        counts = Counter()
        for tag in self.client.list("/v2/tags", "tags"):
            resources = tag.get("resources") or {}
            for resource_type, summary in resources.items():
                # Skip the aggregate count and last_tagged_uri
                if not isinstance(summary, dict):
                    continue
                count = summary.get("count") or 0
                if count > 0:
                    counts[TagCounter(name=tag.get("name", ""), resource_type=resource_type)] += count
        return dict(counts)

    def volumes(self) -> Dict[VolumeCounter, int]:
        counts = Counter()
        for volume in self.client.list("/v2/volumes", "volumes"):
            status = "attached" if volume.get("droplet_ids") else "unattached"
            counts[VolumeCounter(
                region=_region(volume),
                size=str(volume.get("size_gigabytes", 0)),
                status=status,
            )] += 1
        return dict(counts)

    def close(self):
        self.client.close()
