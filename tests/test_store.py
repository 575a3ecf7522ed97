# tests/test_store.py
import math

import pytest

from app.database import DEFAULT_PRODUCTS, ProductStore
from app.errors import NotFound, ValidationFailed


def make_store(n, category="misc"):
    return ProductStore(
        {"id": str(i), "name": f"Item {i}", "price": i, "category": category}
        for i in range(1, n + 1)
    )


def test_default_seed_is_copied(store):
    assert len(store) == 3
    store.update("1", {"name": "Changed"})
    assert DEFAULT_PRODUCTS[0]["name"] == "Laptop"


def test_list_filters_category_case_insensitively(store):
    page = store.list(category="ELECTRONICS", page=1, limit=10)
    assert page["totalItems"] == 2
    assert [p["name"] for p in page["products"]] == ["Laptop", "Smartphone"]


@pytest.mark.parametrize("n,limit", [(0, 10), (1, 1), (7, 3), (10, 5), (11, 5)])
def test_total_pages_is_ceiling(n, limit):
    page = make_store(n).list(page=1, limit=limit)
    assert page["totalItems"] == n
    assert page["totalPages"] == math.ceil(n / limit)
    assert len(page["products"]) <= limit


def test_page_slicing():
    store = make_store(7)
    page = store.list(page=3, limit=3)
    assert [p["id"] for p in page["products"]] == ["7"]


def test_page_out_of_range_is_empty_with_totals():
    page = make_store(4).list(page=9, limit=2)
    assert page["products"] == []
    assert page["totalItems"] == 4
    assert page["totalPages"] == 2


def test_search_substring_case_insensitive(store):
    assert [p["name"] for p in store.search("MAKER")] == ["Coffee Maker"]
    assert store.search("zzz") == []


@pytest.mark.parametrize("name", [None, ""])
def test_search_requires_name(store, name):
    assert isinstance(store.search(name), ValidationFailed)


def test_stats_groups_lowercased_categories(store):
    store.create({"name": "Tablet", "price": 300, "category": "Electronics"})
    store.create({"name": "Mystery", "price": 1})
    stats = store.stats()
    assert stats == {
        "countsByCategory": {"electronics": 3, "kitchen": 1, "uncategorized": 1},
        "totalProducts": 5,
    }


def test_get_missing_returns_not_found(store):
    result = store.get("99")
    assert result == NotFound("Product with id 99 not found")


def test_create_assigns_unique_ids(store):
    ids = {store.create({"name": f"P{i}", "price": 1})["id"] for i in range(25)}
    assert len(ids) == 25
    assert not ids & {"1", "2", "3"}
    assert len(store) == 28


def test_create_ignores_payload_id(store):
    product = store.create({"id": "1", "name": "Clone", "price": 5})
    assert product["id"] != "1"
    assert store.get("1")["name"] == "Laptop"


def test_create_defaults_in_stock(store):
    assert store.create({"name": "Kettle", "price": 25})["inStock"] is False
    assert store.create({"name": "Kettle", "price": 25, "inStock": True})["inStock"] is True


def test_update_overlays_and_pins_id(store):
    updated = store.update("2", {"id": "42", "name": "Phone", "price": 700})
    assert updated["id"] == "2"
    assert updated["description"] == "Latest model with 128GB storage"
    assert store.get("2") == updated
    assert isinstance(store.get("42"), NotFound)


def test_update_missing(store):
    assert isinstance(store.update("99", {"name": "x", "price": 1}), NotFound)


def test_delete(store):
    assert store.delete("3") == {"message": "Product deleted successfully"}
    assert len(store) == 2
    assert isinstance(store.get("3"), NotFound)


def test_delete_missing_keeps_size(store):
    result = store.delete("99")
    assert isinstance(result, NotFound)
    assert result.status_code == 404
    assert len(store) == 3


def test_seed_rejects_duplicate_ids():
    with pytest.raises(ValueError):
        ProductStore([{"id": "1", "name": "A", "price": 1}, {"id": "1", "name": "B", "price": 2}])


def test_seed_rejects_duplicate_of_existing(store):
    with pytest.raises(ValueError):
        store.seed([{"id": "2", "name": "Again", "price": 1}])
    assert len(store) == 3


@pytest.mark.parametrize("record", [{"name": "No id", "price": 1}, {"id": 7, "name": "Int id", "price": 1}])
def test_seed_requires_string_id(record):
    with pytest.raises(ValueError):
        ProductStore([record])


def test_returned_records_are_copies(store):
    got = store.get("1")
    got["id"] = "hijacked"
    got["name"] = "Changed"
    store.list()["products"][1]["name"] = "Changed"
    store.search("coffee")[0]["price"] = -1
    created = store.create({"name": "Kettle", "price": 25})
    created["id"] = "1"

    assert store.get("1")["name"] == "Laptop"
    assert store.get("2")["name"] == "Smartphone"
    assert store.get("3")["price"] == 50
    assert isinstance(store.get("hijacked"), NotFound)
    assert len(set(store.ids())) == len(store) == 4
