import pytest

from conftest import run, store_row
from kiranawala.core.exceptions import RemoteUnavailable, ValidationError
from kiranawala.schemas.result import DataSource
from kiranawala.services.review_aggregator import ReviewAggregator, average_rating


@pytest.fixture
def reviews(sync, remote, cache):
    remote.seed("stores", store_row("s1", 19.0, 72.8))
    cache.upsert("stores", store_row("s1", 19.0, 72.8))
    return ReviewAggregator(sync)


def test_average_rating_defaults_when_empty():
    assert average_rating([]) == 4.5
    assert average_rating([5, 4, 3]) == 4.0


def test_saving_twice_updates_the_single_review(reviews, remote):
    first = run(reviews.add_or_update_review("s1", "c1", "Asha", 3, "ok"))
    second = run(reviews.add_or_update_review("s1", "c1", "Asha", 5, "  great now  "))

    assert second.id == first.id
    assert len(remote.tables["store_reviews"]) == 1
    assert second.rating == 5
    assert second.comment == "great now"


def test_store_rating_is_the_mean_of_reviews(reviews, remote, cache):
    run(reviews.add_or_update_review("s1", "c1", "Asha", 5))
    run(reviews.add_or_update_review("s1", "c2", "Ravi", 2))

    assert remote.tables["stores"][0]["rating"] == 3.5
    assert cache.get("stores", "s1")["rating"] == 3.5


def test_rating_falls_back_to_cached_reviews(reviews, remote, cache):
    # first select finds no existing review, the recompute select fails
    remote.fail("select", "store_reviews", after=1)

    run(reviews.add_or_update_review("s1", "c1", "Asha", 2))

    assert remote.tables["stores"][0]["rating"] == 4.5
    assert [c for c in remote.calls if c == ("update", "stores")] == []
    assert cache.get_all_by_index("store_reviews", store_id="s1")[0]["rating"] == 2

    update = run(reviews.update_store_rating("s1"))
    assert update.source == DataSource.CACHE
    assert update.rating == 2.0
    assert update.review_count == 1


def test_delete_review_recomputes_rating(reviews, remote):
    kept = run(reviews.add_or_update_review("s1", "c1", "Asha", 4))
    dropped = run(reviews.add_or_update_review("s1", "c2", "Ravi", 1))

    update = run(reviews.delete_review(dropped.id, "c2"))

    assert update.rating == 4.0
    assert [r["id"] for r in remote.tables["store_reviews"]] == [kept.id]


def test_deleting_last_review_restores_default(reviews, remote):
    review = run(reviews.add_or_update_review("s1", "c1", "Asha", 1))

    update = run(reviews.delete_review(review.id, "c1"))

    assert update.rating == 4.5
    assert update.review_count == 0


def test_store_reviews_fall_back_to_cache(reviews, remote):
    run(reviews.add_or_update_review("s1", "c1", "Asha", 4))
    remote.go_down()

    fetched = run(reviews.get_store_reviews("s1"))

    assert fetched.degraded
    assert [r.customer_id for r in fetched.items] == ["c1"]


@pytest.mark.parametrize("kwargs", [
    {"rating": 0},
    {"rating": 6},
    {"customer_id": " "},
    {"customer_name": ""},
    {"comment": "x" * 501},
])
def test_invalid_reviews_are_rejected(reviews, remote, kwargs):
    args = {"store_id": "s1", "customer_id": "c1", "customer_name": "Asha", "rating": 4, "comment": None}
    args.update(kwargs)

    with pytest.raises(ValidationError):
        run(reviews.add_or_update_review(**args))
    assert remote.tables["store_reviews"] == []


def test_review_gets_client_id_when_remote_returns_no_rows(reviews, remote, cache):
    remote.assign_ids = False

    review = run(reviews.add_or_update_review("s1", "c1", "Asha", 4))

    assert review.id
    assert remote.tables["store_reviews"][0]["id"] == review.id
    assert cache.get("store_reviews", review.id)["rating"] == 4
    assert remote.tables["stores"][0]["rating"] == 4.0


def test_existence_check_failure_aborts_the_save(reviews, remote):
    remote.seed("store_reviews", {"id": "r1", "store_id": "s1", "customer_id": "c1",
                                  "customer_name": "Asha", "rating": 3})
    remote.fail("select", "store_reviews")

    with pytest.raises(RemoteUnavailable):
        run(reviews.add_or_update_review("s1", "c1", "Asha", 5))

    rows = [r for r in remote.tables["store_reviews"] if r["customer_id"] == "c1"]
    assert len(rows) == 1
    assert rows[0]["rating"] == 3
    assert ("insert", "store_reviews") not in remote.calls


def test_blank_comment_is_stored_as_none(reviews, remote):
    review = run(reviews.add_or_update_review("s1", "c1", "Asha", 4, "   "))

    assert review.comment is None
    assert remote.tables["store_reviews"][0]["comment"] is None
