"""
Load profile of one interactive session: pick a category, read its id list,
then fan out over the first few item ids the way ``fetch_category`` does.
Run with ``locust -f perf/locustfile.py --headless --csv perf/out``.
"""
import json
import os
import random

from locust import HttpUser, between, task

from hackernews_cli.config import DEFAULT_BASE_URL
from hackernews_cli.models import Category

PAGE_SIZE = int(os.getenv("PERF_PAGE_SIZE", "10"))


class TerminalSessionUser(HttpUser):
    host = os.getenv("HACKERNEWS_BASE_URL", DEFAULT_BASE_URL)
    wait_time = between(0.5, 2.0)

    def _ids(self, category: Category):
        resp = self.client.get(category.endpoint, name=category.endpoint)
        if not resp.ok:
            return []
        try:
            ids = resp.json()
        except (ValueError, json.JSONDecodeError):
            return []
        return ids if isinstance(ids, list) else []

    @task(4)
    def browse_top(self):
        for sid in self._ids(Category.TOP)[:PAGE_SIZE]:
            self.client.get(f"/item/{sid}.json", name="/item/{id}.json")

    @task(2)
    def browse_other_category(self):
        category = random.choice([c for c in Category if c is not Category.TOP])
        for sid in self._ids(category)[:PAGE_SIZE]:
            self.client.get(f"/item/{sid}.json", name="/item/{id}.json")

    @task(1)
    def open_thread(self):
        ids = self._ids(Category.TOP)
        if not ids:
            return
        resp = self.client.get(f"/item/{random.choice(ids[:30])}.json", name="/item/{id}.json")
        story = resp.json() if resp.ok else None
        for kid in (story or {}).get("kids", [])[:PAGE_SIZE]:
            self.client.get(f"/item/{kid}.json", name="/item/{id}.json (comment)")
