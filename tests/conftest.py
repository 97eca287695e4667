import threading
import time
from collections import Counter

import pytest
from hackernews_cli.client import HackerNewsClient
from hackernews_cli.models import Category, Item
from hackernews_cli.orchestrator import FetchOrchestrator


def make_record(id, type="story", **fields):
    record = {"id": id, "type": type, "time": 1_700_000_000 + id}
    if type == "story":
        record.setdefault("title", f"Story {id}")
    if type == "comment":
        record.setdefault("parent", 1)
        record.setdefault("text", f"comment {id}")
    record.update(fields)
    return record


class FakeAPI:
    """In-memory RemoteAPI that counts calls and can be slowed down or broken per id."""

    def __init__(self, records=None, lists=None, delays=None, failures=None):
        self.records = {r["id"]: r for r in (records or [])}
        self.lists = {c: list(ids) for c, ids in (lists or {}).items()}
        self.delays = dict(delays or {})
        self.failures = dict(failures or {})
        self.item_calls = Counter()
        self.category_calls = Counter()
        self.completed = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def category_ids(self, category):
        with self._lock:
            self.category_calls[category] += 1
        return list(self.lists[category])

    def item(self, id):
        with self._lock:
            self.item_calls[id] += 1
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            self.wait_for(id)
            if id in self.failures:
                raise self.failures[id]
            item = Item.from_record(self.records[id])
            with self._lock:
                self.completed.append(id)
            return item
        finally:
            with self._lock:
                self.in_flight -= 1

    def wait_for(self, id):
        time.sleep(self.delays.get(id, 0))


@pytest.fixture
def fake_api():
    records = [make_record(i) for i in range(1, 11)]
    return FakeAPI(records=records, lists={
        Category.TOP: range(1, 11),
        Category.NEW: [10, 9, 8],
        Category.SHOW: [],
        Category.ASK: [4, 5],
        Category.JOBS: [6],
    })


@pytest.fixture
def orchestrator(fake_api):
    with FetchOrchestrator(fake_api, max_workers=8) as orch:
        yield orch


@pytest.fixture
def client():
    return HackerNewsClient(base_url="https://hn.invalid/v0", retries=2, backoff=0, timeout=1.0)
