import pytest

from conftest import product_row, run
from kiranawala.core.exceptions import RemoteUnavailable
from kiranawala.core.remote import eq
from kiranawala.schemas.product import Product
from kiranawala.schemas.result import DataSource, NotFound, Ok, Unavailable
from kiranawala.services.sync_policy import EntityKind

PRODUCTS = EntityKind("products", Product)


def test_remote_read_writes_through_to_cache(sync, remote, cache):
    remote.seed("products", product_row("p1", "s1"), product_row("p2", "s1"))

    fetched = run(sync.fetch(PRODUCTS, [eq("store_id", "s1")], {"store_id": "s1"}))

    assert fetched.source == DataSource.REMOTE
    assert not fetched.degraded
    assert len(fetched.items) == 2
    assert len(cache.get_all_by_index("products", store_id="s1")) == 2


def test_remote_failure_falls_back_to_filtered_cache(sync, remote, cache, monitor):
    cache.upsert_many("products", [
        product_row("p1", "s1"),
        product_row("p2", "s1", is_available=False),
        product_row("p3", "s2"),
    ])
    remote.go_down()

    fetched = run(sync.fetch(
        PRODUCTS, [eq("store_id", "s1"), eq("is_available", True)], {"store_id": "s1"}
    ))

    assert fetched.source == DataSource.CACHE
    assert isinstance(fetched.cause, RemoteUnavailable)
    assert [p.id for p in fetched.items] == ["p1"]
    assert monitor.metrics["cache_fallbacks"] == 1


def test_empty_remote_result_is_not_a_fallback(sync, cache):
    cache.upsert("products", product_row("p1", "s1"))

    fetched = run(sync.fetch(PRODUCTS, [eq("store_id", "s1")], {"store_id": "s1"}))

    assert fetched.source == DataSource.REMOTE
    assert fetched.items == []


def test_mirror_replaces_the_cached_slice(sync, remote, cache):
    cache.upsert("products", product_row("stale", "s1"))
    remote.seed("products", product_row("p1", "s1"))

    run(sync.fetch(PRODUCTS, [eq("store_id", "s1")], {"store_id": "s1"}, mirror=True))

    assert [row["id"] for row in cache.get_all("products")] == ["p1"]


def test_fetch_one_outcomes(sync, remote, cache):
    remote.seed("products", product_row("p1", "s1"))

    assert isinstance(run(sync.fetch_one(PRODUCTS, "p1")), Ok)
    assert run(sync.fetch_one(PRODUCTS, "missing")) == NotFound("missing")

    remote.go_down()
    cached = run(sync.fetch_one(PRODUCTS, "p1"))
    assert cached.source == DataSource.CACHE
    assert isinstance(run(sync.fetch_one(PRODUCTS, "never-seen")), Unavailable)


def test_failed_write_is_raised_and_not_cached(sync, remote, cache, monitor):
    remote.fail("insert", "products")

    with pytest.raises(RemoteUnavailable):
        run(sync.insert(PRODUCTS, product_row("p1", "s1")))

    assert cache.get("products", "p1") is None
    assert monitor.metrics["remote_write_failures"] == 1


def test_successful_delete_removes_cached_row(sync, remote, cache):
    remote.seed("products", product_row("p1", "s1"))
    cache.upsert("products", product_row("p1", "s1"))

    run(sync.delete(PRODUCTS, [eq("id", "p1")], entity_id="p1"))

    assert remote.tables["products"] == []
    assert cache.get("products", "p1") is None


def test_fetch_one_is_counted_in_monitoring(sync, remote, monitor):
    remote.seed("products", product_row("p1", "s1"))

    run(sync.fetch_one(PRODUCTS, "p1"))
    run(sync.fetch_one(PRODUCTS, "missing"))
    remote.go_down()
    run(sync.fetch_one(PRODUCTS, "p1"))

    assert monitor.metrics["fetches_total"] == 3
    assert monitor.metrics["remote_hits"] == 2
    assert monitor.metrics["cache_fallbacks"] == 1
