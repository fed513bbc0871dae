"""Read-only record store backed by an HTTP JSON endpoint."""

from typing import Any, Optional

import httpx

from dealboard.errors import StoreError
from dealboard.store.base import RecordStore


class HttpRecordStore(RecordStore):
    """
    Fetches ``GET {base_url}/{partition}``. The body must be a JSON array of
    records, or an object holding one under ``deals`` or ``data``.
    """

    DEFAULT_HEADERS = {
        "User-Agent": "dealboard/0.1",
        "Accept": "application/json",
    }

    def __init__(self, base_url: str, client: Optional[httpx.Client] = None):
        super().__init__()
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(
            timeout=30.0,
            follow_redirects=True,
            headers=self.DEFAULT_HEADERS,
        )

    def read(self, partition: str) -> list[Any]:
        url = f"{self.base_url}/{partition}"
        try:
            response = self._client.get(url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise StoreError(partition, f"HTTP {e.response.status_code} from {url}") from e
        except httpx.RequestError as e:
            raise StoreError(partition, f"request to {url} failed: {e}") from e
        except ValueError as e:
            raise StoreError(partition, f"invalid JSON from {url}: {e}") from e

        if isinstance(payload, dict):
            for key in ("deals", "data"):
                if isinstance(payload.get(key), list):
                    return payload[key]
        if isinstance(payload, list):
            return payload
        raise StoreError(partition, f"expected a JSON array from {url}, got {type(payload).__name__}")

    def close(self) -> None:
        self._client.close()
