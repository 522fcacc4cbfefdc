"""Minimal DigitalOcean v2 API client"""
from typing import Any, Dict, List, Optional
import httpx
from logging_config import get_logger


logger = get_logger(__name__)


class DigitalOceanError(Exception):
    """Base class for DigitalOcean API failures"""


class DigitalOceanAPIError(DigitalOceanError):
    """The API answered with a non-success status"""

    def __init__(self, status_code: int, error_id: str = "", message: str = ""):
        self.status_code = status_code
        self.error_id = error_id
        self.message = message
        detail = message or error_id or "unexpected response"
        super().__init__(f"DigitalOcean API returned {status_code}: {detail}")


class DigitalOceanTransportError(DigitalOceanError):
    """The request could not be completed"""


class DigitalOceanClient:
    """List resources from the DigitalOcean API, following pagination"""

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.digitalocean.com",
        timeout: float = 30.0,
        page_size: int = 200,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.page_size = page_size
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
                "User-Agent": "digitalocean-exporter",
            },
        )

    def list(self, path: str, key: str) -> List[Dict[str, Any]]:
        """Fetch every page of a collection and return the items under key"""
        items: List[Dict[str, Any]] = []
        url = path
        params: Optional[Dict[str, Any]] = {"page": 1, "per_page": self.page_size}

        while url:
            body = self._get(url, params)
            items.extend(body.get(key) or [])

            # The next link already carries page and per_page
            url = ((body.get("links") or {}).get("pages") or {}).get("next")
            params = None

        logger.debug("Listed resources", path=path, count=len(items), event_type="api_list")
        return items

    def _get(self, url: str, params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        try:
            response = self._client.get(url, params=params)
        except httpx.HTTPError as e:
            raise DigitalOceanTransportError(f"request to {url} failed: {e}") from e

        if response.status_code >= 400:
            error_id, message = "", ""
            try:
                payload = response.json()
                if isinstance(payload, dict):
                    error_id = payload.get("id", "")
                    message = payload.get("message", "")
            except ValueError:
                message = response.text.strip()
            raise DigitalOceanAPIError(response.status_code, error_id, message)

        try:
            return response.json()
        except ValueError as e:
            raise DigitalOceanTransportError(f"invalid JSON from {url}: {e}") from e

    def close(self):
        """Close the underlying HTTP connection pool"""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
