import logging
import os
import time
from typing import Any, List, Optional

import requests
from jsonschema import ValidationError, validate

from hackernews_cli import schemas
from hackernews_cli.config import DEFAULT_BASE_URL, Settings
from hackernews_cli.errors import SchemaError, TransportError
from hackernews_cli.models import Category, Item

logger = logging.getLogger(__name__)


class RetrySession:
    def __init__(self, retries: int = 3, backoff: float = 0.5, timeout: float = 5.0):
        self.session = requests.Session()
        self.retries = retries
        self.backoff = backoff
        self.timeout = timeout

    def get(self, url: str, **kwargs) -> requests.Response:
        timeout = kwargs.pop("timeout", self.timeout)
        for attempt in range(self.retries + 1):
            try:
                resp = self.session.get(url, timeout=timeout, **kwargs)
                if resp.status_code >= 500:
                    raise requests.HTTPError(f"Server error {resp.status_code}", response=resp)
                return resp
            except (requests.Timeout, requests.ConnectionError, requests.HTTPError) as e:
                if attempt == self.retries:
                    raise
                delay = self.backoff * (2 ** attempt)
                logger.warning("GET %s failed (%s); retry %d/%d in %.2fs",
                               url, e, attempt + 1, self.retries, delay)
                time.sleep(delay)
        raise RuntimeError("Unexpected retry loop exit")

    def close(self) -> None:
        self.session.close()


class HackerNewsClient:
    """Blocking client for the HN Firebase API.

    Every failure surfaces as ``TransportError`` (network, non-success status)
    or ``SchemaError`` (body is not the expected shape). Thread-safe enough to
    be shared by the orchestrator's worker threads: it holds no mutable state
    beyond the underlying ``requests.Session``.
    """

    def __init__(self, base_url: Optional[str] = None, retries: int = 3, backoff: float = 0.5, timeout: float = 5.0):
        self.base_url = (base_url or os.getenv("HACKERNEWS_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
        self.http = RetrySession(retries=retries, backoff=backoff, timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "HackerNewsClient":
        return cls(base_url=settings.base_url, retries=settings.retries,
                   backoff=settings.backoff, timeout=settings.timeout)

    def _url(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.base_url}{path}"

    def _get_json(self, path: str) -> Any:
        url = self._url(path)
        try:
            resp = self.http.get(url)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(url, e) from e
        try:
            return resp.json()
        except ValueError as e:
            raise SchemaError(f"{url} returned a non-JSON body: {e}") from e

    # ---- list endpoints: whole id list, rank = index
    def category_ids(self, category: Category) -> List[int]:
        data = self._get_json(category.endpoint)
        try:
            validate(data, schemas.id_list_schema)
        except ValidationError as e:
            raise SchemaError(f"{category.value} list is malformed: {e.message}", data) from e
        logger.debug("fetched %d ids for %s", len(data), category.value)
        return data

    # ---- item endpoint: null (unknown or purged id) is not an Item
    def item(self, id: int) -> Item:
        data = self._get_json(f"/item/{int(id)}.json")
        if data is None:
            raise SchemaError(f"item {id} does not exist")
        if not isinstance(data, dict):
            raise SchemaError(f"item {id} returned non-object payload: {type(data).__name__}", data)
        try:
            validate(data, schemas.item_schema)
            validate(data, schemas.schema_for(data["type"]))
        except ValidationError as e:
            raise SchemaError(f"item {id} is malformed: {e.message}", data) from e
        if data["id"] != int(id):
            raise SchemaError(f"item {id} answered with id {data['id']}", data)
        return Item.from_record(data)

    def close(self) -> None:
        self.http.close()
