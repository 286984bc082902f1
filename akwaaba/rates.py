# akwaaba/rates.py
"""Loading currency-rate tables from admin settings or a live rates API.

Every loader degrades to `DEFAULT_CURRENCY_RATES` (per currency or wholesale)
instead of raising; callers always receive a complete table.
"""
import os
from typing import Dict, Mapping, Optional

import requests
from dotenv import load_dotenv
from sqlalchemy.orm import Session

from . import crud
from .currency import DEFAULT_CURRENCY_RATES, DIASPORA_CURRENCIES
from .schemas import CurrencyRate
from .utils import logger, retry

load_dotenv()
CURRENCY_RATES_URL = os.getenv("CURRENCY_RATES_URL", "https://api.exchangerate-api.com/v4/latest/GHS")
CURRENCY_RATES_KEY = "currency_rates"
LIVE_RATES_KEY = "live_currency_rates"
RATES_TIMEOUT = 10

def _with_rate(code: str, rate) -> CurrencyRate:
    default = DEFAULT_CURRENCY_RATES[code]
    if isinstance(rate, (int, float)) and not isinstance(rate, bool) and rate > 0:
        return default.model_copy(update={"rate": float(rate)})
    logger.warning("Missing or invalid %s rate (%r), using default %s", code, rate, default.rate)
    return default

def rates_from_admin_settings(settings: Optional[Mapping]) -> Dict[str, CurrencyRate]:
    """Admin stores foreign->GHS rates (1 USD = x GHS); invert them."""
    if not settings:
        return dict(DEFAULT_CURRENCY_RATES)
    rates = {"GHS": DEFAULT_CURRENCY_RATES["GHS"]}
    for code in DIASPORA_CURRENCIES:
        to_ghs = settings.get(f"{code.lower()}_to_ghs")
        inverted = 1 / to_ghs if isinstance(to_ghs, (int, float)) and to_ghs > 0 else None
        rates[code] = _with_rate(code, inverted)
    return rates

def rates_from_exchange_payload(payload: Optional[Mapping]) -> Dict[str, CurrencyRate]:
    """Read a GHS-based payload of the form ``{"rates": {"USD": 0.06, ...}}``."""
    quoted = (payload or {}).get("rates") or {}
    rates = {"GHS": DEFAULT_CURRENCY_RATES["GHS"]}
    for code in DIASPORA_CURRENCIES:
        rates[code] = _with_rate(code, quoted.get(code))
    return rates

def rates_to_settings(rates: Mapping[str, CurrencyRate]) -> Dict[str, float]:
    return {f"{code.lower()}_to_ghs": round(1 / rates[code].rate, 6) for code in DIASPORA_CURRENCIES}

@retry(requests.RequestException, tries=3, delay=2, backoff=2)
def _get_json(url):
    resp = requests.get(url, timeout=RATES_TIMEOUT)
    resp.raise_for_status()
    return resp.json()

def fetch_live_rates(url: str = CURRENCY_RATES_URL) -> Optional[Dict[str, CurrencyRate]]:
    """Live rate table, or None when the API is unreachable or returns no rates."""
    try:
        payload = _get_json(url)
    except (requests.RequestException, ValueError) as e:
        logger.warning("Failed to fetch currency rates from %s: %s", url, e)
        return None
    if not isinstance(payload, Mapping) or not payload.get("rates"):
        logger.warning("Currency rates response from %s has no rates", url)
        return None
    rates = rates_from_exchange_payload(payload)
    logger.info(
        "Fetched live currency rates: USD=%s GBP=%s EUR=%s",
        rates["USD"].rate, rates["GBP"].rate, rates["EUR"].rate,
    )
    return rates

def fetch_currency_rates(url: str = CURRENCY_RATES_URL) -> Dict[str, CurrencyRate]:
    return fetch_live_rates(url) or dict(DEFAULT_CURRENCY_RATES)

def load_currency_rates(db: Session) -> Dict[str, CurrencyRate]:
    """Admin-configured rates win; then the last live refresh; then defaults."""
    admin = crud.get_setting(db, CURRENCY_RATES_KEY)
    if admin:
        return rates_from_admin_settings(admin)
    live = crud.get_setting(db, LIVE_RATES_KEY)
    if live:
        return rates_from_admin_settings(live)
    logger.debug("No stored currency rates, using defaults")
    return dict(DEFAULT_CURRENCY_RATES)

def store_admin_rates(db: Session, settings: Mapping) -> Dict[str, CurrencyRate]:
    crud.set_setting(db, CURRENCY_RATES_KEY, dict(settings))
    logger.info("Stored admin currency rates %s", dict(settings))
    return rates_from_admin_settings(settings)

def refresh_live_rates(db: Session, url: str = CURRENCY_RATES_URL) -> Dict[str, CurrencyRate]:
    """Store a fresh live table; on failure the last stored table is kept."""
    rates = fetch_live_rates(url)
    if rates is None:
        logger.warning("Keeping previously stored currency rates")
        return load_currency_rates(db)
    crud.set_setting(db, LIVE_RATES_KEY, rates_to_settings(rates))
    return rates
