import pytest

from storefront.catalog import pipeline
from storefront.catalog.criteria import FilterCriteria, SortSpec


def test_price_bracket_with_price_sort(build_items):
    items = build_items({"price": 150}, {"price": 90}, {"price": 500})
    out = pipeline.apply(items, FilterCriteria.from_params({"priceRange": "100-200"}), SortSpec.parse("price-asc"))
    assert [i.price for i in out] == [150.0]


def test_bestseller_filter_keeps_relative_order(build_items):
    items = build_items(
        {"_id": "1", "bestseller": True},
        {"_id": "2"},
        {"_id": "3", "bestseller": True},
        {"_id": "4"},
        {"_id": "5", "bestseller": True},
    )
    out = pipeline.apply(items, FilterCriteria.from_params({"availability": "bestseller"}))
    assert [i.id for i in out] == ["1", "3", "5"]


def test_bestseller_filter_reads_badges_and_tags(build_items):
    items = build_items(
        {"_id": "1", "tags": ["bestseller"]},
        {"_id": "2", "badges": ["Best Seller"]},
        {"_id": "3", "tags": ["organic"]},
    )
    out = pipeline.apply(items, FilterCriteria.from_params({"availability": "bestseller"}))
    assert [i.id for i in out] == ["1", "2"]


def test_filters_combine_with_and(build_items):
    items = build_items(
        {"_id": "a", "name": "Green Chai", "price": 150, "stock": 5, "averageRating": 4.6},
        {"_id": "b", "name": "Green Mint", "price": 150, "stock": 0, "averageRating": 4.8},
        {"_id": "c", "name": "Green Sencha", "price": 250, "stock": 5, "averageRating": 4.9},
        {"_id": "d", "name": "Black Chai", "price": 120, "stock": 5, "averageRating": 3.9},
    )
    criteria = FilterCriteria.from_params(
        {"search": "GREEN", "priceRange": "100-200", "availability": "in-stock", "rating": "4.5+"}
    )
    assert [i.id for i in pipeline.apply(items, criteria)] == ["a"]


def test_search_matches_name_description_and_short_description(build_items):
    items = build_items(
        {"_id": "1", "name": "Assam"},
        {"_id": "2", "name": "X", "description": "A malty ASSAM blend"},
        {"_id": "3", "name": "Y", "shortDescription": "assam leaf"},
        {"_id": "4", "name": "Z", "tags": ["assam"]},
    )
    out = pipeline.apply(items, FilterCriteria(search="assam"))
    assert [i.id for i in out] == ["1", "2", "3"]


def test_weight_filter_defaults_missing_weight_to_100(build_items):
    items = build_items({"_id": "1"}, {"_id": "2", "weight": 100}, {"_id": "3", "weight": "250"})
    assert [i.id for i in pipeline.apply(items, FilterCriteria(weight="100"))] == ["1", "2"]
    assert [i.id for i in pipeline.apply(items, FilterCriteria(weight="250"))] == ["3"]


def test_on_sale_and_category_filters(build_items):
    items = build_items(
        {"_id": "1", "price": 80, "originalPrice": 100, "category": {"_id": "c1", "name": "Herbal"}},
        {"_id": "2", "price": 80, "category": "c1"},
        {"_id": "3", "defaultPrice": 50, "defaultOriginalPrice": 70, "category": "c2"},
    )
    assert [i.id for i in pipeline.apply(items, FilterCriteria.from_params({"availability": "on-sale"}))] == ["1", "3"]
    assert [i.id for i in pipeline.apply(items, FilterCriteria(category="herbal"))] == ["1"]
    assert [i.id for i in pipeline.apply(items, FilterCriteria(category="c1"))] == ["1", "2"]


def test_price_bracket_boundaries(build_items):
    items = build_items({"price": 99.99}, {"price": 100}, {"price": 200}, {"price": 500})
    prices = lambda token: [i.price for i in pipeline.apply(items, FilterCriteria.from_params({"priceRange": token}))]
    assert prices("0-100") == [99.99]
    assert prices("100-200") == [100.0]
    assert prices("200-300") == [200.0]
    assert prices("500+") == [500.0]


@pytest.mark.parametrize(
    "token, expected",
    [
        ("name-asc", ["a", "b", "c"]),
        ("name-desc", ["c", "b", "a"]),
        ("price-asc", ["b", "c", "a"]),
        ("price-desc", ["a", "c", "b"]),
        ("rating-desc", ["c", "a", "b"]),
        ("newest", ["b", "a", "c"]),
        ("popular", ["a", "c", "b"]),
    ],
)
def test_sort_orders(build_items, token, expected):
    items = build_items(
        {"_id": "a", "name": "apple", "defaultPrice": 300, "rating": 4, "createdAt": "2024-01-01", "totalSales": 9},
        {"_id": "b", "name": "Banana", "price": 100, "starRating": 3, "createdAt": "2024-06-01", "totalSales": 1},
        {"_id": "c", "name": "cherry", "price": 200, "averageRating": 5, "createdAt": "2023-01-01", "purchases": 5},
    )
    assert [i.id for i in pipeline.apply(items, sort=SortSpec.parse(token))] == expected


def test_sort_is_stable_in_both_directions(build_items):
    items = build_items(
        {"_id": "1", "price": 10},
        {"_id": "2", "price": 20},
        {"_id": "3", "price": 10},
        {"_id": "4"},
        {"_id": "5", "price": 20},
    )
    asc = pipeline.apply(items, sort=SortSpec.parse("price-asc"))
    desc = pipeline.apply(items, sort=SortSpec.parse("price-desc"))
    assert [i.id for i in asc] == ["4", "1", "3", "2", "5"]
    assert [i.id for i in desc] == ["2", "5", "1", "3", "4"]
    assert [i.id for i in pipeline.apply(items, sort=SortSpec.parse("price-asc"))] == [i.id for i in asc]


def test_reapplying_the_pipeline_is_a_no_op(build_items):
    items = build_items(*[{"_id": str(i), "price": (i * 37) % 250, "stock": i % 3} for i in range(20)])
    criteria = FilterCriteria.from_params({"priceRange": "0-200", "availability": "in-stock"})
    sort = SortSpec.parse("price-desc")
    once = pipeline.apply(items, criteria, sort)
    assert pipeline.apply(once, criteria, sort) == once
    assert pipeline.apply(items, criteria, sort) == once


def test_input_is_not_mutated(build_items):
    items = build_items({"_id": "1", "price": 30}, {"_id": "2", "price": 10})
    snapshot = list(items)
    out = pipeline.apply(items, FilterCriteria(), SortSpec.parse("price-asc"))
    assert items == snapshot
    assert out is not items


def test_empty_input_and_inactive_criteria(build_items):
    assert pipeline.apply([], FilterCriteria(search="x"), SortSpec.parse("name-asc")) == []
    items = build_items({"_id": "1"}, {"_id": "2"})
    assert pipeline.apply(items, FilterCriteria(search="", weight="")) == items
    assert pipeline.apply(items, None, None) == items
