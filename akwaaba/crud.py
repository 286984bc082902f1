# akwaaba/crud.py
"""CRUD operations for `Property`, `Agent` and `PlatformSetting` rows.

Properties are stored flat; the nested shapes used by the API (location,
specifications, seller, verification) are flattened here on the way in and
rebuilt by `schemas.PropertyOut.from_row` on the way out.
"""
import math
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from sqlalchemy import case, or_
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from .models import Agent, PlatformSetting, Property
from .schemas import SearchFilters

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
MAX_ADDED_DAYS = 36_500

LOCATION_COLUMNS = ("address", "city", "region", "country")
SPEC_COLUMNS = ("bedrooms", "bathrooms", "size", "size_unit")
VERIFICATION_COLUMNS = ("is_verified", "documents_uploaded", "verification_date", "admin_notes")


def _now():
    return datetime.now(timezone.utc)


def _nested(source: Dict[str, Any], columns, defaults: Dict[str, Any], partial: bool) -> Dict[str, Any]:
    """Pick `columns` out of a nested dict, filling `defaults` for missing values.

    In partial mode only keys present in `source` are returned, so stored
    sibling columns are left alone.
    """
    out = {}
    for column in columns:
        if column in source:
            value = source[column]
            out[column] = defaults[column] if value is None and column in defaults else value
        elif not partial:
            out[column] = defaults.get(column)
    return out


def flatten_property(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """Map a nested property payload onto `Property` column names."""
    row = dict(data)
    if "type" in row:
        row["property_type"] = row.pop("type")
    location = row.pop("location", None)
    if location is not None:
        row.update(_nested(location, LOCATION_COLUMNS, {"country": "Ghana"}, partial))
        if "coordinates" in location or not partial:
            coords = location.get("coordinates") or {}
            row.update(latitude=coords.get("lat"), longitude=coords.get("lng"))
    specs = row.pop("specifications", None)
    if specs is not None:
        row.update(_nested(specs, SPEC_COLUMNS, {"size_unit": "sqft"}, partial))
    verification = row.pop("verification", None)
    if verification is not None:
        row.update(_nested(verification, VERIFICATION_COLUMNS,
                           {"is_verified": False, "documents_uploaded": False}, partial))
    seller = row.get("seller")
    if seller is not None:
        row["seller_id"] = seller.get("id")
    return row


def _insert_for(db: Session):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise NotImplementedError(f"upsert not supported for {dialect}")


def upsert_property(db: Session, data: Dict[str, Any]):
    table = Property.__table__
    values = flatten_property(data)
    values.setdefault("id", str(uuid.uuid4()))
    stmt = _insert_for(db)(table).values(**values)
    # refresh every supplied column on conflict, keep created_at
    excluded = {k: stmt.excluded[k] for k in values if k not in ("id", "created_at")}
    excluded["updated_at"] = _now()
    stmt = stmt.on_conflict_do_update(index_elements=["id"], set_=excluded)
    db.execute(stmt)
    db.commit()
    return values["id"]


def create_property(db: Session, data: Dict[str, Any], ttl_days: int = 30):
    values = flatten_property(data)
    now = _now()
    values["id"] = values.get("id") or str(uuid.uuid4())
    values.setdefault("created_at", now)
    values.setdefault("updated_at", now)
    values.setdefault("expires_at", now + timedelta(days=ttl_days))
    obj = Property(**values)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def get_property(db: Session, property_id: str):
    return db.query(Property).filter(Property.id == property_id).first()


def update_property(db: Session, property_id: str, updates: Dict[str, Any]):
    obj = get_property(db, property_id)
    if not obj:
        return None
    for k, v in flatten_property(updates, partial=True).items():
        setattr(obj, k, v)
    obj.updated_at = _now()
    db.commit()
    db.refresh(obj)
    return obj


def delete_property(db: Session, property_id: str):
    obj = get_property(db, property_id)
    if not obj:
        return False
    db.delete(obj)
    db.commit()
    return True


def set_approval(db: Session, property_id: str, approval_status: str, admin_notes: Optional[str] = None):
    obj = get_property(db, property_id)
    if not obj:
        return None
    obj.approval_status = approval_status
    if admin_notes is not None:
        obj.admin_notes = admin_notes
    if approval_status == "approved":
        obj.is_verified = True
        obj.verification_date = _now()
    elif approval_status == "rejected":
        obj.is_verified = False
    db.commit()
    db.refresh(obj)
    return obj


SORT_ORDERS = {
    "newest": (Property.created_at.desc(),),
    "oldest": (Property.created_at.asc(),),
    "price-low-high": (Property.price.asc(),),
    "price-high-low": (Property.price.desc(),),
    "size-large-small": (Property.size.desc(),),
    "size-small-large": (Property.size.asc(),),
    "relevance": (case((Property.tier == "premium", 0), else_=1), Property.created_at.desc()),
}


def search_properties(db: Session, filters: SearchFilters, limit: int = DEFAULT_PAGE_SIZE,
                      approved_only: bool = True, seller_id: Optional[str] = None):
    q = db.query(Property)
    conds = []
    if approved_only:
        conds.append(Property.approval_status == "approved")
    if seller_id:
        conds.append(Property.seller_id == seller_id)
    if filters.location:
        pattern = f"%{filters.location}%"
        conds.append(or_(
            Property.title.ilike(pattern),
            Property.description.ilike(pattern),
            Property.address.ilike(pattern),
            Property.city.ilike(pattern),
            Property.region.ilike(pattern),
        ))
    if filters.type:
        conds.append(Property.property_type.in_(filters.type))
    if filters.status:
        conds.append(Property.status == filters.status)
    if filters.price_range:
        if filters.price_range.min is not None:
            conds.append(Property.price >= filters.price_range.min)
        if filters.price_range.max is not None:
            conds.append(Property.price <= filters.price_range.max)
    if filters.bedrooms:
        conds.append(Property.bedrooms >= filters.bedrooms)
    if filters.keywords:
        for word in filters.keywords.split():
            conds.append(or_(Property.title.ilike(f"%{word}%"), Property.description.ilike(f"%{word}%")))
    if filters.added_to_site and filters.added_to_site.isdecimal():
        days = min(int(filters.added_to_site), MAX_ADDED_DAYS)
        conds.append(Property.created_at >= _now() - timedelta(days=days))
    if filters.verified_only:
        conds.append(Property.is_verified.is_(True))
    if filters.tier:
        conds.append(Property.tier.in_(filters.tier))
    if conds:
        q = q.filter(*conds)

    limit = max(1, min(limit, MAX_PAGE_SIZE))
    page = filters.page or 1
    total = q.count()
    items = (
        q.order_by(*SORT_ORDERS[filters.sort or "relevance"])
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    total_pages = math.ceil(total / limit) if total else 0
    return {
        "items": items,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": total_pages,
        "has_more": page < total_pages,
    }


def create_agent(db: Session, data: Dict[str, Any]):
    values = dict(data)
    values["id"] = values.get("id") or str(uuid.uuid4())
    obj = Agent(**values)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def get_agent(db: Session, agent_id: str):
    return db.query(Agent).filter(Agent.id == agent_id).first()


def list_agents(db: Session, search: Optional[str] = None, verified_only: bool = False,
                skip: int = 0, limit: int = 50):
    q = db.query(Agent)
    if search:
        pattern = f"%{search}%"
        q = q.filter(or_(Agent.name.ilike(pattern), Agent.company.ilike(pattern)))
    if verified_only:
        q = q.filter(Agent.is_verified.is_(True))
    total = q.count()
    items = q.order_by(Agent.name.asc()).offset(skip).limit(limit).all()
    return {"total": total, "items": items}


def update_agent(db: Session, agent_id: str, updates: Dict[str, Any]):
    obj = get_agent(db, agent_id)
    if not obj:
        return None
    for k, v in updates.items():
        setattr(obj, k, v)
    obj.updated_at = _now()
    db.commit()
    db.refresh(obj)
    return obj


def delete_agent(db: Session, agent_id: str):
    obj = get_agent(db, agent_id)
    if not obj:
        return False
    db.delete(obj)
    db.commit()
    return True


def get_setting(db: Session, key: str):
    obj = db.query(PlatformSetting).filter(PlatformSetting.key == key).first()
    return obj.value if obj else None


def set_setting(db: Session, key: str, value):
    obj = db.query(PlatformSetting).filter(PlatformSetting.key == key).first()
    if obj:
        obj.value = value
    else:
        db.add(PlatformSetting(key=key, value=value))
    db.commit()
    return value
