# tests/test_filters.py
import pytest
from pydantic import ValidationError
from akwaaba.filters import (
    STORAGE_KEY,
    SearchState,
    build_search_params,
    parse_search_params,
    return_url,
    to_query_string,
)
from akwaaba.schemas import PriceRange, SearchFilters

def test_parse_recognised_params():
    f = parse_search_params(
        "q=Accra&type=house&status=for-rent&currency=usd&minprice=0&maxprice=500000&page=2&foo=bar"
    )
    assert f.location == "Accra"
    assert f.type == ["house"]
    assert f.status == "for-rent"
    assert f.currency == "USD"
    assert f.price_range == PriceRange(min=None, max=500000, currency="GHS")
    assert f.page == 2

def test_parse_ignores_all_and_bad_values():
    f = parse_search_params({"type": "all", "status": "all", "bedrooms": "lots", "sort": "cheapest"})
    assert f == SearchFilters()
    assert parse_search_params({"type": "castle", "currency": "JPY"}) == SearchFilters()

@pytest.mark.parametrize("value", ["inf", "-inf", "nan", "1e999", "99999999999999999999", "-3"])
def test_parse_ignores_out_of_range_numbers(value):
    params = {"minprice": value, "maxprice": value, "bedrooms": value, "page": value}
    assert parse_search_params(params) == SearchFilters()

def test_filters_reject_out_of_range_numbers():
    with pytest.raises(ValidationError):
        SearchFilters(page=2**40)
    with pytest.raises(ValidationError):
        PriceRange(max=2**63)

def test_parse_zero_defaults_are_unset():
    f = parse_search_params("minprice=0&maxprice=0&bedrooms=0&keywords=&page=1")
    assert f.price_range is None
    assert f.bedrooms is None
    assert f.keywords is None
    assert f.page == 1

def test_parse_keywords_alias():
    assert parse_search_params("expandedKeywords=pool").keywords == "pool"

def test_build_fills_defaults():
    assert build_search_params(SearchFilters()) == {
        "minprice": "0",
        "maxprice": "0",
        "bedrooms": "0",
        "keywords": "",
        "page": "1",
    }

def test_build_uses_first_type():
    params = build_search_params(SearchFilters(type=["apartment", "house"], bedrooms=2))
    assert params["type"] == "apartment"
    assert params["bedrooms"] == "2"

@pytest.mark.parametrize("filters", [
    SearchFilters(location="East Legon", type=["apartment"], status="for-sale"),
    SearchFilters(location="Kumasi & Ejisu", status="short-let"),
    SearchFilters(type=["land"]),
])
def test_round_trip_keeps_location_type_status(filters):
    back = parse_search_params(to_query_string(filters))
    assert (back.location, back.type, back.status) == (filters.location, filters.type, filters.status)

def test_round_trip_price_range_and_currency():
    filters = SearchFilters(price_range=PriceRange(min=100000, max=900000), currency="GBP", sort="price-low-high")
    back = parse_search_params(to_query_string(filters))
    assert back.price_range == filters.price_range
    assert back.currency == "GBP"
    assert back.sort == "price-low-high"

def test_return_url():
    assert return_url("p1") == "/properties/p1"
    assert return_url("p1", "q=Accra&page=2") == "/properties/p1?return=%3Fq%3DAccra%26page%3D2"

def test_state_defaults_to_for_sale():
    state = SearchState()
    assert state.filters == SearchFilters(status="for-sale")
    assert state.url == "/search"

def test_state_prefers_url_over_storage():
    store = {STORAGE_KEY: SearchFilters(location="Tema").model_dump_json()}
    state = SearchState(query="q=Takoradi", store=store)
    assert state.filters.location == "Takoradi"

def test_state_restores_from_storage():
    store = {STORAGE_KEY: SearchFilters(location="Tema", status="for-rent").model_dump_json()}
    state = SearchState(store=store)
    assert state.filters.location == "Tema"
    assert state.filters.status == "for-rent"

def test_state_ignores_corrupt_storage():
    state = SearchState(store={STORAGE_KEY: "{not json"})
    assert state.filters.status == "for-sale"

def test_update_filter_pushes_url_and_persists():
    store = {}
    state = SearchState(store=store)
    url = state.update_filter("location", "Kumasi")
    assert url.startswith("/search?q=Kumasi&status=for-sale")
    assert state.history == [url]
    assert state.url == url
    assert "Kumasi" in store[STORAGE_KEY]

def test_update_filters_replace():
    state = SearchState()
    state.update_filters(SearchFilters(location="Accra"))
    state.update_filters(SearchFilters(location="Tema"), replace=True)
    assert len(state.history) == 1
    assert "q=Tema" in state.history[0]

def test_last_write_wins():
    state = SearchState()
    state.update_filter("status", "for-rent")
    state.update_filter("status", "sold")
    assert state.filters.status == "sold"
    assert len(state.history) == 2

def test_update_filter_rejects_unknown_key():
    with pytest.raises(ValueError):
        SearchState().update_filter("colour", "blue")

def test_clear_filters():
    store = {}
    state = SearchState(store=store)
    state.update_filter("location", "Accra")
    state.clear_filters()
    assert state.filters == SearchFilters()
    assert STORAGE_KEY not in store
    assert state.history[-1] == "/search?" + to_query_string(SearchFilters())

def test_no_persistence():
    store = {}
    state = SearchState(store=store, persist=False)
    state.update_filter("location", "Accra")
    assert store == {}

def test_sync_from_url():
    state = SearchState(query="q=Accra")
    assert state.sync_from_url("q=Accra") is False
    assert state.sync_from_url("q=Tema&type=condo") is True
    assert state.filters.type == ["condo"]
    assert state.current_url_filters().location == "Tema"
