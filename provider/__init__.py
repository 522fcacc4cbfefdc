"""DigitalOcean API access and resource tallying"""
from .counters import DropletCounter, FlipCounter, LoadBalancerCounter, TagCounter, VolumeCounter
from .client import DigitalOceanClient, DigitalOceanError, DigitalOceanAPIError, DigitalOceanTransportError

__all__ = [
    'DropletCounter',
    'FlipCounter',
    'LoadBalancerCounter',
    'TagCounter',
    'VolumeCounter',
    'DigitalOceanClient',
    'DigitalOceanError',
    'DigitalOceanAPIError',
    'DigitalOceanTransportError',
]
