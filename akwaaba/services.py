# akwaaba/services.py
import os
from typing import Dict, List, Optional

from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import crud
from .cards import call_action, render_card, whatsapp_action
from .currency import format_price_bounds
from .filters import parse_search_params, to_query_string
from .rates import load_currency_rates
from .schemas import ContactAction, PropertyCard, PriceRange, PropertyCreate, PropertyOut, SearchFilters, rooms_error
from .utils import env_int, logger

load_dotenv()
LISTING_TTL_DAYS = env_int("LISTING_TTL_DAYS", 30)
SEARCH_PATH = os.getenv("SEARCH_PATH", "/search")


class NotFound(LookupError):
    pass


class InvalidListing(ValueError):
    pass


def _with_agent_details(db: Session, seller: Dict) -> Dict:
    """Fill seller contact details from the agent profile when one exists."""
    agent = crud.get_agent(db, seller["id"]) if seller.get("id") else None
    if not agent:
        return seller
    merged = dict(seller)
    merged["name"] = seller.get("name") or agent.name
    merged["phone"] = seller.get("phone") or agent.phone or ""
    merged["email"] = seller.get("email") or agent.email
    merged["whatsapp"] = seller.get("whatsapp") or agent.whatsapp
    merged["company"] = seller.get("company") or agent.company
    merged["is_verified"] = bool(agent.is_verified)
    return merged


def create_listing(db: Session, payload: PropertyCreate) -> PropertyOut:
    data = payload.model_dump()
    data["seller"] = _with_agent_details(db, data["seller"])
    obj = crud.create_property(db, data, ttl_days=LISTING_TTL_DAYS)
    logger.info("Created listing %s (%s, %s)", obj.id, obj.property_type, obj.city)
    return PropertyOut.from_row(obj)


def ingest_listing(db: Session, payload: Dict) -> str:
    """Import a listing record as-is, replacing any row with the same id."""
    if "id" not in payload:
        raise ValueError("id missing")
    if payload.get("price") is not None:
        try:
            payload["price"] = float(payload["price"])
        except (TypeError, ValueError):
            raise ValueError(f"invalid price for listing {payload['id']}: {payload['price']!r}")
    listing_id = crud.upsert_property(db, payload)
    logger.info("Ingested listing %s", listing_id)
    return listing_id


def import_listings(db: Session, records: List[Dict]) -> Dict:
    """Ingest a batch of listing records; bad records are reported, not fatal."""
    imported, errors = [], []
    for record in records:
        try:
            imported.append(ingest_listing(db, dict(record)))
        except (ValueError, SQLAlchemyError) as e:
            db.rollback()
            logger.warning("Skipping listing %s: %s", record.get("id"), e)
            errors.append({"id": record.get("id"), "error": str(e)})
    logger.info("Imported %d listings, %d failed", len(imported), len(errors))
    return {"imported": imported, "errors": errors}


def get_listing(db: Session, property_id: str) -> PropertyOut:
    obj = crud.get_property(db, property_id)
    if not obj:
        raise NotFound(f"Property {property_id} not found")
    return PropertyOut.from_row(obj)


def update_listing(db: Session, property_id: str, updates: Dict) -> PropertyOut:
    current = get_listing(db, property_id)
    if "type" in updates or "specifications" in updates:
        # the rooms rule applies to the listing as it will be stored
        specs = current.specifications.model_copy(update=updates.get("specifications") or {})
        msg = rooms_error(updates.get("type", current.type), specs)
        if msg:
            raise InvalidListing(msg)
    obj = crud.update_property(db, property_id, updates)
    if not obj:
        raise NotFound(f"Property {property_id} not found")
    logger.info("Updated listing %s: %s", property_id, sorted(updates))
    return PropertyOut.from_row(obj)


def review_listing(db: Session, property_id: str, approve: bool, admin_notes: Optional[str] = None) -> PropertyOut:
    status = "approved" if approve else "rejected"
    obj = crud.set_approval(db, property_id, status, admin_notes)
    if not obj:
        raise NotFound(f"Property {property_id} not found")
    logger.info("Listing %s %s", property_id, status)
    return PropertyOut.from_row(obj)


def search_listings(db: Session, params, layout: str = "grid", limit: int = crud.DEFAULT_PAGE_SIZE,
                    approved_only: bool = True) -> Dict:
    filters = parse_search_params(params)
    return search_with_filters(db, filters, layout, limit, approved_only)


def _price_label(price_range: Optional[PriceRange]) -> str:
    if not price_range or not (price_range.min or price_range.max):
        return "Any price"
    return format_price_bounds(price_range.min or 0, price_range.max or 0)


def search_with_filters(db: Session, filters: SearchFilters, layout: str = "grid",
                        limit: int = crud.DEFAULT_PAGE_SIZE, approved_only: bool = True,
                        seller_id: Optional[str] = None) -> Dict:
    result = crud.search_properties(db, filters, limit=limit, approved_only=approved_only, seller_id=seller_id)
    rates = load_currency_rates(db)
    query = to_query_string(filters)
    cards = [
        render_card(PropertyOut.from_row(row), layout, filters.currency or "GHS", rates, query=query)
        for row in result["items"]
    ]
    logger.debug("Search %s matched %d listings", query, result["total"])
    return {
        "properties": cards,
        "pagination": {k: result[k] for k in ("page", "limit", "total", "total_pages", "has_more")},
        "price_label": _price_label(filters.price_range),
        "filters": filters,
        "search_url": f"{SEARCH_PATH}?{query}",
    }


def property_card(db: Session, property_id: str, layout: str = "grid", currency: str = "GHS",
                  query: Optional[str] = None) -> PropertyCard:
    prop = get_listing(db, property_id)
    return render_card(prop, layout, currency, load_currency_rates(db), query=query)


def contact_seller(db: Session, property_id: str, kind: str) -> ContactAction:
    prop = get_listing(db, property_id)
    action = call_action(prop) if kind == "call" else whatsapp_action(prop)
    if action.warning:
        logger.info("No seller phone for listing %s, %s unavailable", property_id, kind)
    return action


def verify_agent(db: Session, agent_id: str, verified: bool = True):
    obj = crud.update_agent(db, agent_id, {"is_verified": verified})
    if not obj:
        raise NotFound(f"Agent {agent_id} not found")
    logger.info("Agent %s verification set to %s", agent_id, verified)
    return obj
