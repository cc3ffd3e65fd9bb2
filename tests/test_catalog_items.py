from datetime import datetime, timezone

from storefront.integrations.contracts.catalog_items import (
    EPOCH,
    FIELD_CHAINS,
    CatalogItem,
    first_present,
    parse_float,
    parse_timestamp,
)


def test_price_prefers_default_price_then_price():
    assert CatalogItem.from_record({"defaultPrice": 150, "price": 90}).price == 150.0
    assert CatalogItem.from_record({"price": 90}).price == 90.0
    # A zero default price counts as absent, like the storefront's `a || b` lookups
    assert CatalogItem.from_record({"defaultPrice": 0, "price": 90}).price == 90.0
    assert CatalogItem.from_record({}).price == 0.0


def test_rating_chain_and_lenient_parsing():
    assert CatalogItem.from_record({"averageRating": 4.6, "rating": 3}).rating == 4.6
    assert CatalogItem.from_record({"rating": "4.2"}).rating == 4.2
    assert CatalogItem.from_record({"starRating": "4.5 stars"}).rating == 4.5
    assert CatalogItem.from_record({"rating": "n/a"}).rating == 0.0
    assert CatalogItem.from_record({}).rating == 0.0


def test_chains_are_declared_once():
    assert FIELD_CHAINS["rating"] == ("averageRating", "rating", "starRating")
    assert FIELD_CHAINS["price"] == ("defaultPrice", "price")
    assert first_present({"a": "", "b": None, "c": 0, "d": "x"}, ("a", "b", "c", "d")) == "x"
    assert first_present({}, ("a",), default=7) == 7


def test_weight_defaults_and_normalises():
    assert CatalogItem.from_record({}).weight == "100"
    assert CatalogItem.from_record({"weight": 250}).weight == "250"
    assert CatalogItem.from_record({"weight": 250.0}).weight == "250"
    assert CatalogItem.from_record({"weight": "500g"}).weight == "500g"


def test_category_object_and_plain_id():
    nested = CatalogItem.from_record({"category": {"_id": "c1", "name": "Green Tea"}})
    assert nested.category_id == "c1"
    assert nested.category_name == "Green Tea"

    plain = CatalogItem.from_record({"categoryId": "c2"})
    assert plain.category_id == "c2"
    assert plain.category_name is None


def test_availability_flags():
    item = CatalogItem.from_record(
        {"price": 80, "originalPrice": 100, "stock": 3, "badges": ["Best Seller"]}
    )
    assert item.in_stock
    assert item.on_sale
    assert item.bestseller

    plain = CatalogItem.from_record({"price": 80, "stock": 0})
    assert not plain.in_stock
    assert not plain.on_sale
    assert not plain.bestseller

    assert CatalogItem.from_record({"bestseller": True}).bestseller
    assert CatalogItem.from_record({"isBestseller": True}).bestseller
    assert CatalogItem.from_record({"tags": ["bestseller"]}).bestseller
    assert not CatalogItem.from_record({"tags": ["organic"]}).bestseller


def test_timestamps_and_sales():
    item = CatalogItem.from_record({"createdAt": "2024-03-02T10:00:00Z", "purchases": 12})
    assert item.created_at == datetime(2024, 3, 2, 10, 0, tzinfo=timezone.utc)
    assert item.sales == 12.0

    assert parse_timestamp(0) == EPOCH
    assert parse_timestamp(None) == EPOCH
    assert parse_timestamp("not a date") == EPOCH
    assert parse_timestamp(86_400_000) == datetime(1970, 1, 2, tzinfo=timezone.utc)


def test_raw_record_kept_and_identifier_stringified():
    record = {"_id": 42, "name": "Oolong", "origin": "Taiwan"}
    item = CatalogItem.from_record(record)
    assert item.id == "42"
    assert item.raw["origin"] == "Taiwan"
    assert item.raw is not record


def test_parse_float_defaults():
    assert parse_float(None) == 0.0
    assert parse_float(".5") == 0.5
    assert parse_float("abc", default=1.0) == 1.0
