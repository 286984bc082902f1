# akwaaba/api/routes.py
from typing import Any, Dict, List, Literal, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
from .. import crud, schemas, services
from ..audit import audit_html, audit_url, summarize
from ..currency import (
    available_currencies,
    format_diaspora_price,
    format_primary_price,
    parse_currency_input,
    preferred_currency,
)
from ..db import get_db
from ..filters import parse_search_params
from ..rates import load_currency_rates, rates_to_settings, store_admin_rates
from ..utils import logger

router = APIRouter()

Layout = Literal["grid", "list"]


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/properties")
def search_properties(
    request: Request,
    layout: Layout = Query("grid"),
    limit: int = Query(crud.DEFAULT_PAGE_SIZE, ge=1, le=crud.MAX_PAGE_SIZE),
    db: Session = Depends(get_db)
):
    # filters come straight from the query string: q, type, status, currency, minprice, ...
    return services.search_listings(db, request.query_params, layout=layout, limit=limit)


@router.post("/properties", response_model=schemas.PropertyOut, status_code=201)
def create_property(payload: schemas.PropertyCreate, db: Session = Depends(get_db)):
    if payload.id and crud.get_property(db, payload.id):
        raise HTTPException(status_code=409, detail="Property already exists")
    return services.create_listing(db, payload)


@router.get("/properties/{property_id}", response_model=schemas.PropertyOut)
def get_property(property_id: str, db: Session = Depends(get_db)):
    try:
        return services.get_listing(db, property_id)
    except services.NotFound:
        raise HTTPException(status_code=404, detail="Property not found")


@router.patch("/properties/{property_id}", response_model=schemas.PropertyOut)
def update_property(property_id: str, payload: schemas.PropertyUpdate, db: Session = Depends(get_db)):
    try:
        return services.update_listing(db, property_id, payload.model_dump(exclude_unset=True))
    except services.NotFound:
        raise HTTPException(status_code=404, detail="Property not found")
    except services.InvalidListing as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.delete("/properties/{property_id}")
def delete_property(property_id: str, db: Session = Depends(get_db)):
    ok = crud.delete_property(db, property_id)
    if not ok:
        raise HTTPException(status_code=404, detail="Property not found")
    return {"status": "deleted"}


@router.get("/properties/{property_id}/card", response_model=schemas.PropertyCard)
def property_card(
    property_id: str,
    request: Request,
    layout: Layout = Query("grid"),
    currency: schemas.CurrencyCode = Query("GHS"),
    db: Session = Depends(get_db)
):
    try:
        return services.property_card(db, property_id, layout, currency, query=request.query_params.get("return"))
    except services.NotFound:
        raise HTTPException(status_code=404, detail="Property not found")


@router.get("/properties/{property_id}/contact/{kind}", response_model=schemas.ContactAction)
def contact_seller(property_id: str, kind: Literal["call", "whatsapp"], db: Session = Depends(get_db)):
    try:
        return services.contact_seller(db, property_id, kind)
    except services.NotFound:
        raise HTTPException(status_code=404, detail="Property not found")


@router.get("/agents", response_model=List[schemas.AgentOut])
def list_agents(
    q: Optional[str] = Query(None),
    verified: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db)
):
    return crud.list_agents(db, search=q, verified_only=verified, skip=skip, limit=limit)["items"]


@router.post("/agents", response_model=schemas.AgentOut, status_code=201)
def create_agent(payload: schemas.AgentCreate, db: Session = Depends(get_db)):
    if payload.id and crud.get_agent(db, payload.id):
        raise HTTPException(status_code=409, detail="Agent already exists")
    obj = crud.create_agent(db, payload.model_dump())
    logger.info("Created agent %s", obj.id)
    return obj


@router.get("/agents/{agent_id}", response_model=schemas.AgentOut)
def get_agent(agent_id: str, db: Session = Depends(get_db)):
    obj = crud.get_agent(db, agent_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Agent not found")
    return obj


@router.patch("/agents/{agent_id}", response_model=schemas.AgentOut)
def update_agent(agent_id: str, payload: schemas.AgentUpdate, db: Session = Depends(get_db)):
    obj = crud.update_agent(db, agent_id, updates=payload.model_dump(exclude_unset=True))
    if not obj:
        raise HTTPException(status_code=404, detail="Agent not found")
    return obj


@router.delete("/agents/{agent_id}")
def delete_agent(agent_id: str, db: Session = Depends(get_db)):
    ok = crud.delete_agent(db, agent_id)
    if not ok:
        raise HTTPException(status_code=404, detail="Agent not found")
    return {"status": "deleted"}


@router.get("/agents/{agent_id}/properties")
def agent_properties(
    agent_id: str,
    request: Request,
    layout: Layout = Query("grid"),
    db: Session = Depends(get_db)
):
    if not crud.get_agent(db, agent_id):
        raise HTTPException(status_code=404, detail="Agent not found")
    filters = parse_search_params(request.query_params)
    return services.search_with_filters(db, filters, layout=layout, seller_id=agent_id)


@router.post("/admin/properties/{property_id}/approve", response_model=schemas.PropertyOut)
def approve_property(property_id: str, payload: Optional[schemas.ApprovalRequest] = None, db: Session = Depends(get_db)):
    try:
        return services.review_listing(db, property_id, approve=True, admin_notes=payload.admin_notes if payload else None)
    except services.NotFound:
        raise HTTPException(status_code=404, detail="Property not found")


@router.post("/admin/properties/{property_id}/reject", response_model=schemas.PropertyOut)
def reject_property(property_id: str, payload: Optional[schemas.ApprovalRequest] = None, db: Session = Depends(get_db)):
    try:
        return services.review_listing(db, property_id, approve=False, admin_notes=payload.admin_notes if payload else None)
    except services.NotFound:
        raise HTTPException(status_code=404, detail="Property not found")


@router.post("/admin/properties/import")
def import_properties(records: List[Dict[str, Any]], db: Session = Depends(get_db)):
    # raw records, stored as-is (upsert by id) without listing-form validation
    return services.import_listings(db, records)


@router.post("/admin/agents/{agent_id}/verify", response_model=schemas.AgentOut)
def verify_agent(agent_id: str, verified: bool = True, db: Session = Depends(get_db)):
    try:
        return services.verify_agent(db, agent_id, verified)
    except services.NotFound:
        raise HTTPException(status_code=404, detail="Agent not found")


@router.get("/admin/settings/currency-rates", response_model=schemas.AdminCurrencyRates)
def get_admin_rates(db: Session = Depends(get_db)):
    return rates_to_settings(load_currency_rates(db))


@router.put("/admin/settings/currency-rates", response_model=schemas.AdminCurrencyRates)
def put_admin_rates(payload: schemas.AdminCurrencyRates, db: Session = Depends(get_db)):
    return rates_to_settings(store_admin_rates(db, payload.model_dump()))


@router.get("/currency/rates", response_model=List[schemas.CurrencyRate])
def currency_rates(db: Session = Depends(get_db)):
    return available_currencies(load_currency_rates(db))


@router.get("/currency/format")
def format_price(
    price: float = Query(..., ge=0),
    currency: Optional[schemas.CurrencyCode] = Query(None),
    country: Optional[str] = Query(None, description="ISO country code used when no currency is given"),
    db: Session = Depends(get_db)
):
    rates = load_currency_rates(db)
    currency = currency or preferred_currency(country)
    return {
        "formatted": format_primary_price(price, currency, rates),
        "diaspora": format_diaspora_price(price, currency, rates),
    }


@router.get("/currency/parse")
def parse_price(
    text: str = Query(..., min_length=1),
    currency: schemas.CurrencyCode = Query("GHS"),
    db: Session = Depends(get_db)
):
    amount = parse_currency_input(text, currency, load_currency_rates(db))
    return {"text": text, "currency": currency, "amount_ghs": round(amount, 2)}


@router.post("/audit")
def run_audit(payload: schemas.AuditRequest):
    if payload.html:
        issues = audit_html(payload.html)
    else:
        try:
            issues = audit_url(payload.url)
        except Exception as e:
            logger.exception("Audit of %s failed: %s", payload.url, e)
            raise HTTPException(status_code=502, detail="Could not load page for audit")
    return {"issues": issues, "summary": summarize(issues)}
