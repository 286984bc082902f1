# akwaaba/currency.py
"""Price conversion and display formatting.

Stored prices are always in Ghana cedis (GHS). A rate table maps a currency
code to the number of units of that currency per 1 GHS; entries may be
`CurrencyRate` objects or bare numbers. Any currency missing from the table
(or carrying a non-positive rate) is priced with the built-in default rate.
"""
import math
import re
from typing import Dict, List, Mapping, Optional, Union

from .schemas import CurrencyRate, DiasporaAlternative, DiasporaPrice
from .utils import logger

BASE_CURRENCY = "GHS"
DIASPORA_CURRENCIES = ("USD", "GBP", "EUR")

# example rates, replaced by admin-configured or live rates when available
DEFAULT_CURRENCY_RATES: Dict[str, CurrencyRate] = {
    "GHS": CurrencyRate(code="GHS", rate=1, symbol="₵", name="Ghana Cedi"),
    "USD": CurrencyRate(code="USD", rate=0.062, symbol="$", name="US Dollar"),
    "GBP": CurrencyRate(code="GBP", rate=0.049, symbol="£", name="British Pound"),
    "EUR": CurrencyRate(code="EUR", rate=0.058, symbol="€", name="Euro"),
}

_EURO_COUNTRIES = ("FR", "DE", "IT", "ES", "NL", "AT", "BE", "FI", "IE", "LU", "PT")
COUNTRY_CURRENCIES = {"GH": "GHS", "US": "USD", "GB": "GBP", "UK": "GBP"}
COUNTRY_CURRENCIES.update({code: "EUR" for code in _EURO_COUNTRIES})

RateTable = Mapping[str, Union[CurrencyRate, float]]


def rate_info(currency: str, rates: Optional[RateTable] = None) -> CurrencyRate:
    """Resolve the rate entry for `currency`, falling back to the defaults."""
    code = (currency or BASE_CURRENCY).upper()
    default = DEFAULT_CURRENCY_RATES.get(code)
    if default is None:
        logger.warning("Unknown currency %s, displaying in %s", currency, BASE_CURRENCY)
        return DEFAULT_CURRENCY_RATES[BASE_CURRENCY]
    entry = (rates or {}).get(code)
    if isinstance(entry, CurrencyRate):
        if entry.code == code:
            return entry
        logger.warning("Rate table entry for %s holds a %s rate, using default", code, entry.code)
        return default
    if isinstance(entry, (int, float)) and not isinstance(entry, bool) and 0 < entry < math.inf:
        return default.model_copy(update={"rate": float(entry)})
    if entry is not None:
        logger.warning("Invalid rate %r for %s, using default", entry, code)
    return default


def convert_currency(amount_ghs: float, target: str, rates: Optional[RateTable] = None) -> float:
    info = rate_info(target, rates)
    if info.code == BASE_CURRENCY:
        return amount_ghs
    return amount_ghs * info.rate


def convert_to_ghs(amount: float, source: str, rates: Optional[RateTable] = None) -> float:
    info = rate_info(source, rates)
    if info.code == BASE_CURRENCY:
        return amount
    return amount / info.rate


def format_compact_number(num: float) -> str:
    """1.2M, 450K and so on."""
    if num >= 1_000_000:
        return re.sub(r"\.0$", "", f"{num / 1_000_000:.1f}") + "M"
    if num >= 1_000:
        return f"{num / 1_000:.0f}K"
    return f"{num:g}"


def format_currency(
    amount_ghs: float,
    currency: str,
    rates: Optional[RateTable] = None,
    show_decimals: bool = True,
    show_currency_code: bool = False,
    compact: bool = False,
) -> str:
    info = rate_info(currency, rates)
    converted = convert_currency(amount_ghs, info.code, rates)
    suffix = f" {info.code}" if show_currency_code else ""
    if compact and converted >= 1_000:
        return f"{info.symbol}{format_compact_number(converted)}{suffix}"
    digits = 2 if show_decimals else 0
    return f"{info.symbol}{converted:,.{digits}f}{suffix}"


def format_primary_price(price_ghs: float, currency: str = BASE_CURRENCY, rates: Optional[RateTable] = None) -> str:
    """Full price without decimals, e.g. ``₵850,000``."""
    return format_currency(price_ghs, currency, rates, show_decimals=False)


def format_price_range(min_ghs: float, max_ghs: float, currency: str, rates: Optional[RateTable] = None) -> str:
    low = format_currency(min_ghs, currency, rates, show_decimals=False, compact=True)
    high = format_currency(max_ghs, currency, rates, show_decimals=False, compact=True)
    return f"{low} - {high}"


def format_price(price: float) -> str:
    if not price:
        return "Price on request"
    return f"GH₵{price:,.0f}"


def format_price_bounds(min_price: float, max_price: float) -> str:
    if not min_price and not max_price:
        return "Price on request"
    if not min_price:
        return f"Up to {format_price(max_price)}"
    if not max_price:
        return f"From {format_price(min_price)}"
    return f"{format_price(min_price)} - {format_price(max_price)}"


def parse_currency_input(text: str, currency: str = BASE_CURRENCY, rates: Optional[RateTable] = None) -> float:
    """Parse user input such as ``$50k`` or ``₵1,200,000`` into GHS."""
    cleaned = re.sub(r"[₵$£€,\s]", "", text or "")
    multiplier = 1
    if cleaned[-1:] in ("k", "K"):
        multiplier, cleaned = 1_000, cleaned[:-1]
    elif cleaned[-1:] in ("m", "M"):
        multiplier, cleaned = 1_000_000, cleaned[:-1]
    match = re.match(r"^[-+]?(\d+\.?\d*|\.\d+)", cleaned)
    if not match:
        return 0
    amount = float(match.group(0)) * multiplier
    if not math.isfinite(amount):
        return 0
    return convert_to_ghs(amount, currency, rates)


def available_currencies(rates: Optional[RateTable] = None) -> List[CurrencyRate]:
    return [rate_info(code, rates) for code in DEFAULT_CURRENCY_RATES]


def preferred_currency(country_code: Optional[str] = None) -> str:
    return COUNTRY_CURRENCIES.get((country_code or "").upper(), BASE_CURRENCY)


def format_diaspora_price(price_ghs: float, primary: str = BASE_CURRENCY, rates: Optional[RateTable] = None) -> DiasporaPrice:
    """Full primary display price plus compact USD/GBP/EUR equivalents."""
    primary_code = rate_info(primary, rates).code
    alternatives = [
        DiasporaAlternative(
            currency=code,
            formatted=format_currency(price_ghs, code, rates, show_decimals=False, compact=True),
        )
        for code in DIASPORA_CURRENCIES
        if code != primary_code
    ]
    return DiasporaPrice(
        primary=format_primary_price(price_ghs, primary_code, rates),
        alternatives=alternatives,
    )
