import pytest
from pydantic import ValidationError as SchemaError

from conftest import run
from kiranawala.core.exceptions import NotFoundError
from kiranawala.schemas.address import AddressCreate, AddressLabel
from kiranawala.services.address_book import AddressBook


def new_address(**overrides):
    data = {"address_line": "12 MG Road", "latitude": 19.0, "longitude": 72.8}
    data.update(overrides)
    return AddressCreate.model_validate(data)


@pytest.fixture
def book(sync):
    return AddressBook(sync)


def defaults_in(cache, owner_id):
    return [row["id"] for row in cache.get_all_by_index("addresses", owner_id=owner_id, is_default=True)]


def test_label_is_normalised():
    assert new_address(label="work").label == AddressLabel.WORK
    assert new_address(label="Grandma's").label == AddressLabel.OTHER


def test_short_address_line_is_rejected():
    with pytest.raises(SchemaError):
        new_address(address_line="ab")


def test_new_default_replaces_old_one(book, remote, cache):
    first = run(book.add_address("u1", new_address(is_default=True)))
    second = run(book.add_address("u1", new_address(address_line="7 Link Road", is_default=True)))

    assert defaults_in(cache, "u1") == [second.id]
    remote_defaults = [row["id"] for row in remote.tables["addresses"] if row["is_default"]]
    assert remote_defaults == [second.id]
    assert first.id != second.id


def test_set_default_address(book, remote, cache):
    home = run(book.add_address("u1", new_address(is_default=True)))
    work = run(book.add_address("u1", new_address(label="Work")))

    run(book.set_default_address("u1", work.id))

    assert defaults_in(cache, "u1") == [work.id]
    assert run(book.get_default_address("u1")).id == work.id
    assert not [row for row in remote.tables["addresses"] if row["id"] == home.id and row["is_default"]]


def test_set_default_for_unknown_address(book):
    with pytest.raises(NotFoundError):
        run(book.set_default_address("u1", "missing"))


def test_list_repairs_duplicate_defaults(book, remote, cache):
    remote.seed(
        "addresses",
        {"id": "a1", "owner_id": "u1", "address_line": "12 MG Road", "latitude": 19.0, "longitude": 72.8,
         "label": "Home", "is_default": True, "updated_at": "2026-01-01T00:00:00+00:00"},
        {"id": "a2", "owner_id": "u1", "address_line": "7 Link Road", "latitude": 19.0, "longitude": 72.8,
         "label": "Work", "is_default": True, "updated_at": "2026-03-01T00:00:00+00:00"},
    )

    fetched = run(book.list_addresses("u1"))

    assert [a.id for a in fetched.items if a.is_default] == ["a2"]
    assert defaults_in(cache, "u1") == ["a2"]


def test_update_and_delete(book, remote, cache):
    address = run(book.add_address("u1", new_address()))

    updated = run(book.update_address("u1", address.id, new_address(flat_number="4B")))
    assert updated.flat_number == "4B"

    run(book.delete_address("u1", address.id))
    assert cache.get("addresses", address.id) is None
    assert remote.tables["addresses"] == []
