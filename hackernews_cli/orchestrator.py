"""
Resolve category and id requests into Items with as few network calls as possible.

Contract:
- At most one ``category_ids`` call per category and one ``item`` call per id
  for the lifetime of the orchestrator; cached values are never refreshed.
- Cache misses of one batch are fetched concurrently on a bounded thread pool.
- Results come back in the requested order, never in completion order.
- Fail-fast: the first failing fetch aborts the batch. Items that did arrive
  are still cached; the caller only sees the error.

Cache writes happen exclusively in the calling thread, after the join, so the
stores need no locking.
"""

import logging
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from hackernews_cli.models import Category, Item, ThreadEntry
from hackernews_cli.store import CategoryIndex, ItemStore

logger = logging.getLogger(__name__)


class RemoteAPI(Protocol):
    def category_ids(self, category: Category) -> List[int]: ...

    def item(self, id: int) -> Item: ...


class FetchOrchestrator:
    def __init__(
        self,
        api: RemoteAPI,
        max_workers: int = 8,
        thread_depth: int = 3,
        thread_limit: int = 100,
        items: Optional[ItemStore] = None,
        categories: Optional[CategoryIndex] = None,
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self._api = api
        self._items = ItemStore() if items is None else items
        self._categories = CategoryIndex() if categories is None else categories
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="hn-fetch")
        self.thread_depth = thread_depth
        self.thread_limit = thread_limit

    # read-only views for diagnostics and tests
    @property
    def items(self) -> Mapping[int, Item]:
        return self._items.view()

    @property
    def categories(self) -> Mapping[Category, Tuple[int, ...]]:
        return self._categories.view()

    def fetch_category(self, category: Category, count: int) -> List[Item]:
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        ids = self._categories.get(category)
        if ids is None:
            ids = tuple(self._api.category_ids(category))
            self._categories.put(category, ids)
        else:
            logger.debug("category %s served from cache (%d ids)", category.value, len(ids))
        if count > len(ids):
            logger.debug("clamping %s request from %d to %d", category.value, count, len(ids))
        return self.fetch_items(ids[:count])

    def fetch_item(self, item_id: int) -> Item:
        return self.fetch_items([item_id])[0]

    def fetch_items(self, ids: Sequence[int]) -> List[Item]:
        missing = [i for i in dict.fromkeys(ids) if i not in self._items]
        logger.debug("batch of %d ids: %d cached, %d missing",
                     len(ids), len(set(ids)) - len(missing), len(missing))
        if missing:
            self._fetch_missing(missing)
        return [self._items.get(i) for i in ids]

    def _fetch_missing(self, ids: List[int]) -> None:
        futures: Dict[int, Future] = {i: self._executor.submit(self._api.item, i) for i in ids}
        done, pending = wait(futures.values(), return_when=FIRST_EXCEPTION)

        if pending:
            # a failure cut the join short: drop queued work, let running fetches land
            for f in pending:
                f.cancel()
            wait(pending)

        failed: List[Future] = []
        for item_id, f in futures.items():
            if f.cancelled():
                continue
            if f.exception() is None:
                self._items.put(item_id, f.result())
            else:
                failed.append(f)

        if failed:
            # report the failure that ended the join, not a later straggler
            first = next((f for f in failed if f in done), failed[0])
            logger.error("batch of %d ids aborted: %s", len(ids), first.exception())
            raise first.exception()

    def fetch_thread(
        self,
        item_id: int,
        max_depth: Optional[int] = None,
        max_items: Optional[int] = None,
    ) -> List[ThreadEntry]:
        """Fetch an item and its reply tree, in display (pre-)order.

        The tree is walked level by level with an explicit frontier, so each
        level is one concurrent batch. ``max_depth`` bounds the levels below
        the root and ``max_items`` bounds the total number of items.
        """
        max_depth = self.thread_depth if max_depth is None else max_depth
        max_items = self.thread_limit if max_items is None else max_items
        if max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")
        if max_items < 1:
            raise ValueError(f"max_items must be >= 1, got {max_items}")

        root = self.fetch_item(item_id)
        fetched: Dict[int, Item] = {root.id: root}
        frontier = [root.id]
        depth = 0
        budget = max_items - 1
        while frontier and depth < max_depth and budget > 0:
            level: List[int] = []
            queued = set()
            for parent_id in frontier:
                for kid in fetched[parent_id].kids:
                    if kid not in fetched and kid not in queued:
                        queued.add(kid)
                        level.append(kid)
            level = level[:budget]
            for it in self.fetch_items(level):
                fetched[it.id] = it
            budget -= len(level)
            frontier = level
            depth += 1

        entries: List[ThreadEntry] = []
        emitted = set()
        stack = [(0, root.id)]
        while stack:
            level_depth, current = stack.pop()
            if current in emitted:
                continue
            emitted.add(current)
            item = fetched[current]
            entries.append(ThreadEntry(level_depth, item))
            for kid in reversed(item.kids):
                if kid in fetched and kid not in emitted:
                    stack.append((level_depth + 1, kid))
        return entries

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> "FetchOrchestrator":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
