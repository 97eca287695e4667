import logging
import threading

import pytest
from conftest import FakeAPI, make_record
from hackernews_cli.errors import SchemaError, TransportError
from hackernews_cli.models import Category
from hackernews_cli.orchestrator import FetchOrchestrator


class ReverseCompletionAPI(FakeAPI):
    """Each id only finishes after the id requested after it has finished."""

    def __init__(self, ids):
        super().__init__(records=[make_record(i) for i in ids])
        self.order = list(ids)
        self.finished = {i: threading.Event() for i in ids}

    def wait_for(self, id):
        pos = self.order.index(id)
        if pos + 1 < len(self.order):
            assert self.finished[self.order[pos + 1]].wait(timeout=5)

    def item(self, id):
        try:
            return super().item(id)
        finally:
            self.finished[id].set()


# ---------------- single ids ----------------

@pytest.mark.functional
@pytest.mark.positive
def test_same_id_fetched_once_and_identical(fake_api):
    fake_api.records[42] = make_record(42, title="forty-two")
    with FetchOrchestrator(fake_api) as orch:
        first = orch.fetch_item(42)
        second = orch.fetch_item(42)
    assert fake_api.item_calls[42] == 1
    assert first is second


@pytest.mark.functional
@pytest.mark.positive
def test_cached_item_never_refreshed(orchestrator, fake_api):
    original = orchestrator.fetch_item(7)
    fake_api.records[7] = make_record(7, title="edited upstream")
    again = orchestrator.fetch_item(7)
    assert again == original
    assert again.title == "Story 7"
    assert fake_api.item_calls[7] == 1


@pytest.mark.functional
@pytest.mark.positive
def test_duplicate_ids_in_one_batch_fetched_once(orchestrator, fake_api):
    items = orchestrator.fetch_items([3, 1, 3])
    assert [it.id for it in items] == [3, 1, 3]
    assert fake_api.item_calls[3] == 1


# ---------------- categories ----------------

@pytest.mark.functional
@pytest.mark.positive
def test_category_list_fetched_once_across_counts(orchestrator, fake_api):
    assert [it.id for it in orchestrator.fetch_category(Category.TOP, 2)] == [1, 2]
    assert [it.id for it in orchestrator.fetch_category(Category.TOP, 5)] == [1, 2, 3, 4, 5]
    assert [it.id for it in orchestrator.fetch_category(Category.TOP, 1)] == [1]
    assert fake_api.category_calls[Category.TOP] == 1
    assert all(fake_api.item_calls[i] == 1 for i in range(1, 6))


@pytest.mark.functional
@pytest.mark.positive
def test_full_list_is_cached_not_just_the_slice(orchestrator):
    orchestrator.fetch_category(Category.TOP, 2)
    assert orchestrator.categories.get(Category.TOP) == tuple(range(1, 11))


@pytest.mark.functional
@pytest.mark.negative
def test_count_beyond_list_is_clamped_without_refetch(orchestrator, fake_api):
    items = orchestrator.fetch_category(Category.NEW, 50)
    assert [it.id for it in items] == [10, 9, 8]
    orchestrator.fetch_category(Category.NEW, 100)
    assert fake_api.category_calls[Category.NEW] == 1


@pytest.mark.functional
@pytest.mark.negative
def test_zero_count_and_empty_category(orchestrator, fake_api):
    assert orchestrator.fetch_category(Category.ASK, 0) == []
    assert orchestrator.fetch_category(Category.SHOW, 5) == []
    assert sum(fake_api.item_calls.values()) == 0


@pytest.mark.functional
@pytest.mark.negative
def test_negative_count_rejected(orchestrator):
    with pytest.raises(ValueError):
        orchestrator.fetch_category(Category.TOP, -1)


@pytest.mark.functional
@pytest.mark.negative
def test_category_failure_is_not_cached(fake_api):
    class FlakyLists(FakeAPI):
        def category_ids(self, category):
            if not self.category_calls[category]:
                self.category_calls[category] += 1
                raise TransportError("/topstories.json", ConnectionError("down"))
            return super().category_ids(category)

    api = FlakyLists(records=list(fake_api.records.values()), lists={Category.TOP: [1, 2]})
    with FetchOrchestrator(api) as orch:
        with pytest.raises(TransportError):
            orch.fetch_category(Category.TOP, 2)
        assert [it.id for it in orch.fetch_category(Category.TOP, 2)] == [1, 2]


# ---------------- ordering & concurrency ----------------

@pytest.mark.functional
@pytest.mark.positive
def test_results_follow_request_order_not_completion_order():
    ids = [11, 12, 13, 14, 15]
    api = ReverseCompletionAPI(ids)
    with FetchOrchestrator(api, max_workers=5) as orch:
        items = orch.fetch_items(ids)
    assert api.completed == list(reversed(ids))
    assert [it.id for it in items] == ids


@pytest.mark.functional
@pytest.mark.robustness
def test_fan_out_respects_worker_cap():
    api = FakeAPI(records=[make_record(i) for i in range(1, 13)],
                  delays={i: 0.02 for i in range(1, 13)})
    with FetchOrchestrator(api, max_workers=3) as orch:
        items = orch.fetch_items(list(range(1, 13)))
    assert len(items) == 12
    assert 1 <= api.max_in_flight <= 3


@pytest.mark.functional
@pytest.mark.negative
def test_worker_cap_must_be_positive(fake_api):
    with pytest.raises(ValueError):
        FetchOrchestrator(fake_api, max_workers=0)


# ---------------- fail-fast ----------------

@pytest.mark.functional
@pytest.mark.negative
def test_one_failure_aborts_batch_but_keeps_successes():
    failure = TransportError("https://hn.invalid/v0/item/3.json", ConnectionError("reset"))
    api = FakeAPI(records=[make_record(i) for i in range(1, 6)],
                  delays={3: 0.1}, failures={3: failure})
    with FetchOrchestrator(api) as orch:
        with pytest.raises(TransportError) as exc:
            orch.fetch_items([1, 2, 3, 4, 5])
        assert exc.value is failure
        for i in (1, 2, 4, 5):
            assert i in orch.items

        calls_before = sum(api.item_calls.values())
        assert [it.id for it in orch.fetch_items([1, 2, 4, 5])] == [1, 2, 4, 5]
        assert sum(api.item_calls.values()) == calls_before


@pytest.mark.functional
@pytest.mark.negative
def test_schema_error_propagates_from_category_request(fake_api):
    fake_api.failures[2] = SchemaError("item 2 does not exist")
    with FetchOrchestrator(fake_api) as orch:
        with pytest.raises(SchemaError, match="item 2"):
            orch.fetch_category(Category.TOP, 3)
        assert 2 not in orch.items


@pytest.mark.functional
@pytest.mark.negative
def test_first_failure_cancels_queued_fetches():
    failure = TransportError("https://hn.invalid/v0/item/1.json", ConnectionError("reset"))
    ids = list(range(1, 11))
    api = FakeAPI(records=[make_record(i) for i in ids],
                  delays={i: 0.05 for i in ids[1:]}, failures={1: failure})
    with FetchOrchestrator(api, max_workers=1) as orch:
        with pytest.raises(TransportError):
            orch.fetch_items(ids)
        attempted = {i for i in ids if api.item_calls[i]}
        assert len(attempted) < len(ids)
        for i in ids:
            assert (i in orch.items) == (i in attempted and i != 1)

        del api.failures[1]
        items = orch.fetch_items(ids)
    assert [it.id for it in items] == ids
    assert api.item_calls[1] == 2
    assert all(api.item_calls[i] == 1 for i in ids[1:])


# ---------------- cache views & logging ----------------

@pytest.mark.functional
@pytest.mark.negative
def test_cache_views_are_read_only(orchestrator):
    orchestrator.fetch_category(Category.TOP, 1)
    assert 1 in orchestrator.items
    assert orchestrator.categories.get(Category.TOP) == tuple(range(1, 11))
    assert not hasattr(orchestrator.items, "put")
    with pytest.raises(TypeError):
        orchestrator.items[99] = orchestrator.items[1]
    with pytest.raises(TypeError):
        orchestrator.categories[Category.NEW] = (1,)


@pytest.mark.functional
@pytest.mark.positive
def test_batch_log_counts_unique_cached_ids(orchestrator, caplog):
    orchestrator.fetch_item(1)
    with caplog.at_level(logging.DEBUG, logger="hackernews_cli.orchestrator"):
        orchestrator.fetch_items([1, 1, 2])
    assert "batch of 3 ids: 1 cached, 1 missing" in caplog.text


# ---------------- threads ----------------

@pytest.fixture
def thread_api():
    records = [
        make_record(1, kids=[2, 3]),
        make_record(2, type="comment", parent=1, kids=[4]),
        make_record(3, type="comment", parent=1),
        make_record(4, type="comment", parent=2, kids=[5]),
        make_record(5, type="comment", parent=4),
    ]
    return FakeAPI(records=records)


def _shape(entries):
    return [(e.depth, e.item.id) for e in entries]


@pytest.mark.functional
@pytest.mark.positive
def test_thread_is_preorder_in_kids_order(thread_api):
    with FetchOrchestrator(thread_api, thread_depth=10) as orch:
        entries = orch.fetch_thread(1)
    assert _shape(entries) == [(0, 1), (1, 2), (2, 4), (3, 5), (1, 3)]


@pytest.mark.functional
@pytest.mark.positive
def test_thread_depth_and_size_limits(thread_api):
    with FetchOrchestrator(thread_api) as orch:
        assert _shape(orch.fetch_thread(1, max_depth=2)) == [(0, 1), (1, 2), (2, 4), (1, 3)]
        assert _shape(orch.fetch_thread(1, max_depth=0)) == [(0, 1)]
        assert _shape(orch.fetch_thread(1, max_items=3)) == [(0, 1), (1, 2), (1, 3)]
    assert thread_api.item_calls[5] == 0


@pytest.mark.functional
@pytest.mark.robustness
def test_thread_survives_cycles(thread_api):
    thread_api.records[10] = make_record(10, kids=[11])
    thread_api.records[11] = make_record(11, type="comment", parent=10, kids=[10])
    with FetchOrchestrator(thread_api) as orch:
        assert _shape(orch.fetch_thread(10)) == [(0, 10), (1, 11)]


@pytest.mark.functional
@pytest.mark.robustness
def test_deep_thread_does_not_recurse():
    depth = 3000
    records = [make_record(1, kids=[2])]
    records += [make_record(i, type="comment", parent=i - 1, kids=[i + 1]) for i in range(2, depth)]
    records.append(make_record(depth, type="comment", parent=depth - 1))
    api = FakeAPI(records=records)
    with FetchOrchestrator(api) as orch:
        entries = orch.fetch_thread(1, max_depth=depth, max_items=depth)
    assert len(entries) == depth
    assert entries[-1].depth == depth - 1


@pytest.mark.functional
@pytest.mark.negative
def test_thread_bounds_rejected_before_fetching(thread_api):
    with FetchOrchestrator(thread_api) as orch:
        with pytest.raises(ValueError, match="max_items"):
            orch.fetch_thread(1, max_items=0)
        with pytest.raises(ValueError, match="max_depth"):
            orch.fetch_thread(1, max_depth=-1)
    assert sum(thread_api.item_calls.values()) == 0
