# akwaaba/filters.py
"""Search filter state kept in step with URL query parameters.

Searches are shareable: every filter change produces a new address, and
opening an address restores the same filters. Unrecognised parameters and
values that do not parse are ignored.
"""
from typing import Any, Dict, List, Mapping, MutableMapping, Optional, Tuple, Union, get_args
from urllib.parse import parse_qsl, quote, urlencode

from pydantic import ValidationError

from .schemas import (
    MAX_QUERY_INT,
    CurrencyCode,
    ListingTier,
    PriceRange,
    PropertyStatus,
    PropertyType,
    SearchFilters,
    SortOption,
)
from .utils import logger

STORAGE_KEY = "akwaaba-search-filters"
DEFAULT_STATUS = "for-sale"

PROPERTY_TYPES = set(get_args(PropertyType))
PROPERTY_STATUSES = set(get_args(PropertyStatus))
CURRENCIES = set(get_args(CurrencyCode))
SORT_OPTIONS = set(get_args(SortOption))
TIERS = set(get_args(ListingTier))

# written on every URL so the address always carries the full search shape
URL_DEFAULTS = (
    ("minprice", "0"),
    ("maxprice", "0"),
    ("bedrooms", "0"),
    ("keywords", ""),
    ("page", "1"),
)

Params = Union[str, Mapping[str, str], List[Tuple[str, str]]]


def _as_mapping(params: Optional[Params]) -> Dict[str, str]:
    if params is None:
        return {}
    if isinstance(params, str):
        return dict(parse_qsl(params.lstrip("?"), keep_blank_values=True))
    if isinstance(params, Mapping):
        return {k: params[k] for k in params.keys()}
    return dict(params)


def _to_int(value: Optional[str]) -> Optional[int]:
    """Non-negative integer query value, or None when it does not parse or is out of range."""
    if value is None or value == "":
        return None
    try:
        number = int(float(value))
    except (ValueError, OverflowError):
        return None
    if number < 0 or number > MAX_QUERY_INT:
        return None
    return number


def parse_search_params(params: Optional[Params]) -> SearchFilters:
    """Turn query parameters (string, mapping or pairs) into `SearchFilters`."""
    p = _as_mapping(params)
    data: Dict[str, Any] = {}

    query = p.get("q")
    if query:
        data["location"] = query

    ptype = p.get("type")
    if ptype and ptype != "all" and ptype in PROPERTY_TYPES:
        data["type"] = [ptype]

    status = p.get("status")
    if status and status != "all" and status in PROPERTY_STATUSES:
        data["status"] = status

    currency = (p.get("currency") or "").upper()
    if currency in CURRENCIES:
        data["currency"] = currency

    min_price = _to_int(p.get("minprice"))
    max_price = _to_int(p.get("maxprice"))
    if min_price or max_price:
        data["price_range"] = PriceRange(min=min_price or None, max=max_price or None, currency="GHS")

    bedrooms = _to_int(p.get("bedrooms"))
    if bedrooms:
        data["bedrooms"] = bedrooms

    keywords = p.get("keywords") or p.get("expandedKeywords")
    if keywords:
        data["keywords"] = keywords

    added = p.get("addedToSite")
    if added:
        data["added_to_site"] = added

    page = _to_int(p.get("page"))
    if page and page > 0:
        data["page"] = page

    sort = p.get("sort")
    if sort in SORT_OPTIONS:
        data["sort"] = sort

    if p.get("verified") in ("1", "true"):
        data["verified_only"] = True

    tier = p.get("tier")
    if tier in TIERS:
        data["tier"] = [tier]

    return SearchFilters(**data)


def build_search_params(filters: SearchFilters) -> Dict[str, str]:
    """Encode filters as query parameters, filling in the URL defaults."""
    params: Dict[str, str] = {}
    if filters.location:
        params["q"] = filters.location
    if filters.type:
        params["type"] = filters.type[0]
    if filters.status:
        params["status"] = filters.status
    if filters.currency:
        params["currency"] = filters.currency
    if filters.price_range:
        if filters.price_range.min:
            params["minprice"] = str(filters.price_range.min)
        if filters.price_range.max:
            params["maxprice"] = str(filters.price_range.max)
    if filters.bedrooms:
        params["bedrooms"] = str(filters.bedrooms)
    if filters.added_to_site:
        params["addedToSite"] = filters.added_to_site
    if filters.keywords:
        params["keywords"] = filters.keywords
    if filters.page:
        params["page"] = str(filters.page)
    if filters.sort:
        params["sort"] = filters.sort
    if filters.verified_only:
        params["verified"] = "1"
    if filters.tier:
        params["tier"] = filters.tier[0]

    for key, default in URL_DEFAULTS:
        params.setdefault(key, default)
    return params


def to_query_string(filters: SearchFilters) -> str:
    return urlencode(build_search_params(filters))


def return_url(property_id: str, query: Optional[str] = None) -> str:
    """Link to a property page that remembers the search it came from."""
    if not query:
        return f"/properties/{property_id}"
    query = query.lstrip("?")
    return f"/properties/{property_id}?return={quote('?' + query, safe='')}"


class SearchState:
    """In-memory filters for one search page, mirrored into its address.

    `store` plays the role of browser storage: filters are saved there on
    every change and restored when a page opens without filters in its URL.
    `history` records each address pushed (or replaced) by a change.
    """

    def __init__(self, path: str = "/search", query: str = "",
                 store: Optional[MutableMapping[str, str]] = None,
                 persist: bool = True, storage_key: str = STORAGE_KEY):
        self.path = path
        self.store = store if store is not None else {}
        self.persist = persist
        self.storage_key = storage_key
        self.history: List[str] = []
        self.url = self._address(query.lstrip("?"))
        url_filters = parse_search_params(query)
        self._last_url_filters = url_filters
        self.filters = self._initial_filters(url_filters)

    def _address(self, query: str) -> str:
        return f"{self.path}?{query}" if query else self.path

    def _initial_filters(self, url_filters: SearchFilters) -> SearchFilters:
        if url_filters.model_dump(exclude_none=True):
            return url_filters
        if self.persist:
            saved = self.store.get(self.storage_key)
            if saved:
                try:
                    return SearchFilters.model_validate_json(saved)
                except ValidationError as e:
                    logger.warning("Failed to restore search filters from storage: %s", e)
        return SearchFilters(status=DEFAULT_STATUS)

    def _save(self, filters: Optional[SearchFilters]):
        if not self.persist:
            return
        if filters is None:
            self.store.pop(self.storage_key, None)
        else:
            self.store[self.storage_key] = filters.model_dump_json(exclude_none=True)

    def _navigate(self, filters: SearchFilters, replace: bool = False) -> str:
        url = self._address(to_query_string(filters))
        if replace and self.history:
            self.history[-1] = url
        else:
            self.history.append(url)
        self.url = url
        logger.debug("Search URL %s: %s", "replaced" if replace else "pushed", url)
        return url

    def update_filters(self, filters: SearchFilters, replace: bool = False) -> str:
        self.filters = filters
        self._save(filters)
        return self._navigate(filters, replace)

    def update_filter(self, key: str, value: Any, replace: bool = False) -> str:
        if key not in SearchFilters.model_fields:
            raise ValueError(f"Unknown search filter: {key}")
        data = self.filters.model_dump()
        data[key] = value
        return self.update_filters(SearchFilters.model_validate(data), replace)

    def clear_filters(self) -> str:
        self.filters = SearchFilters()
        self._save(None)
        return self._navigate(self.filters, replace=True)

    def sync_from_url(self, query: str) -> bool:
        """Adopt filters from a changed address; returns True when they changed."""
        self.url = self._address(query.lstrip("?"))
        url_filters = parse_search_params(query)
        if url_filters == self._last_url_filters:
            return False
        self._last_url_filters = url_filters
        self.filters = url_filters
        return True

    def current_url_filters(self) -> SearchFilters:
        return parse_search_params(self.url.partition("?")[2])
