# tests/test_api.py
import pytest
from akwaaba.cards import CONTACT_UNAVAILABLE, PLACEHOLDER_IMAGE

def _create_listing(client, payload, approve=True):
    resp = client.post("/properties", json=payload)
    assert resp.status_code == 201, resp.text
    prop = resp.json()
    if approve:
        assert client.post(f"/admin/properties/{prop['id']}/approve").status_code == 200
    return prop

def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}

def test_create_and_get_property(client, listing_payload):
    prop = _create_listing(client, listing_payload, approve=False)
    assert prop["approval_status"] == "pending"
    assert prop["expires_at"] is not None
    got = client.get(f"/properties/{prop['id']}").json()
    assert got["location"]["city"] == "Accra"
    assert got["seller"]["name"] == "Ama Mensah"

def test_invalid_listing_rejected(client, listing_payload):
    resp = client.post("/properties", json=dict(listing_payload, price=10))
    assert resp.status_code == 422

def test_duplicate_id_conflicts(client, listing_payload):
    _create_listing(client, dict(listing_payload, id="dup-1"), approve=False)
    assert client.post("/properties", json=dict(listing_payload, id="dup-1")).status_code == 409

def test_missing_property(client):
    assert client.get("/properties/nope").status_code == 404
    assert client.get("/properties/nope/card").status_code == 404
    assert client.delete("/properties/nope").status_code == 404

def test_search_only_shows_approved(client, listing_payload):
    pending = _create_listing(client, listing_payload, approve=False)
    assert client.get("/properties").json()["pagination"]["total"] == 0
    client.post(f"/admin/properties/{pending['id']}/approve", json={"admin_notes": "Documents checked"})
    body = client.get("/properties").json()
    assert body["pagination"]["total"] == 1
    assert body["properties"][0]["id"] == pending["id"]

def test_search_with_url_filters(client, listing_payload):
    _create_listing(client, listing_payload)
    _create_listing(client, dict(listing_payload, type="land", images=[], specifications={"size": 1, "size_unit": "sqm"}))
    body = client.get("/properties", params={"q": "Legon", "type": "land", "status": "for-sale", "currency": "USD", "layout": "list"}).json()
    assert body["pagination"]["total"] == 1
    card = body["properties"][0]
    assert card["layout"] == "list"
    assert card["image"] == PLACEHOLDER_IMAGE
    assert card["price"]["primary"] == "$52,700"
    assert body["filters"]["type"] == ["land"]
    assert body["search_url"].startswith("/search?q=Legon&type=land&status=for-sale&currency=USD")

def test_update_and_delete(client, listing_payload):
    prop = _create_listing(client, listing_payload)
    resp = client.patch(f"/properties/{prop['id']}", json={"price": 900000, "tier": "premium"})
    assert resp.status_code == 200
    assert resp.json()["price"] == 900000
    card = client.get(f"/properties/{prop['id']}/card").json()
    assert card["tier_badge"]["text"] == "Premium"
    assert client.delete(f"/properties/{prop['id']}").json() == {"status": "deleted"}

def test_reject_listing(client, listing_payload):
    prop = _create_listing(client, listing_payload, approve=False)
    body = client.post(f"/admin/properties/{prop['id']}/reject", json={"admin_notes": "Duplicate"}).json()
    assert body["approval_status"] == "rejected"
    assert body["verification"]["admin_notes"] == "Duplicate"

def test_contact_actions(client, listing_payload):
    prop = _create_listing(client, listing_payload)
    call = client.get(f"/properties/{prop['id']}/contact/call").json()
    assert call["url"] == "tel:+233241234567"

    silent = _create_listing(client, dict(listing_payload, seller={"name": "Kofi Boateng", "phone": ""}))
    for kind in ("call", "whatsapp"):
        action = client.get(f"/properties/{silent['id']}/contact/{kind}").json()
        assert action["url"] is None
        assert action["warning"] == CONTACT_UNAVAILABLE
    assert client.get(f"/properties/{silent['id']}/contact/sms").status_code == 422

def test_agent_profile_fills_seller_details(client, listing_payload):
    agent = client.post("/agents", json={"id": "agent-9", "name": "Efua Owusu", "phone": "020 555 0101"}).json()
    client.post(f"/admin/agents/{agent['id']}/verify")
    prop = _create_listing(client, dict(listing_payload, seller={"id": "agent-9", "name": "Efua Owusu"}))
    assert prop["seller"]["phone"] == "020 555 0101"
    assert prop["seller"]["is_verified"] is True
    listings = client.get("/agents/agent-9/properties").json()
    assert [c["id"] for c in listings["properties"]] == [prop["id"]]

def test_agent_crud(client):
    resp = client.post("/agents", json={"name": "Yaw Darko", "company": "Kumasi Estates", "specializations": ["land"]})
    assert resp.status_code == 201
    agent_id = resp.json()["id"]
    assert client.get("/agents", params={"q": "kumasi"}).json()[0]["id"] == agent_id
    assert client.patch(f"/agents/{agent_id}", json={"experience_years": 7}).json()["experience_years"] == 7
    assert client.delete(f"/agents/{agent_id}").status_code == 200
    assert client.get(f"/agents/{agent_id}").status_code == 404
    assert client.get(f"/agents/{agent_id}/properties").status_code == 404

def test_currency_endpoints(client):
    body = client.get("/currency/format", params={"price": 850000}).json()
    assert body["formatted"] == "₵850,000"
    assert body["diaspora"]["primary"] == "₵850,000"

    resp = client.put("/admin/settings/currency-rates", json={"usd_to_ghs": 16, "gbp_to_ghs": 20, "eur_to_ghs": 17.5})
    assert resp.json() == {"usd_to_ghs": 16.0, "gbp_to_ghs": 20.0, "eur_to_ghs": 17.5}
    usd = [r for r in client.get("/currency/rates").json() if r["code"] == "USD"][0]
    assert usd["rate"] == 0.0625
    assert client.get("/currency/format", params={"price": 160000, "currency": "USD"}).json()["formatted"] == "$10,000"

def test_audit_endpoint(client):
    body = client.post("/audit", json={"html": '<img src="a.jpg"><button></button>'}).json()
    assert body["summary"]["total"] == 2
    assert client.post("/audit", json={}).status_code == 422

@pytest.mark.parametrize("params", [
    {"minprice": "inf"},
    {"maxprice": "1e999"},
    {"bedrooms": "-inf"},
    {"page": "99999999999999999999"},
    {"minprice": "99999999999999999999"},
    {"addedToSite": "99999999999"},
])
def test_search_ignores_unusable_numbers(client, listing_payload, params):
    _create_listing(client, listing_payload)
    resp = client.get("/properties", params=params)
    assert resp.status_code == 200
    assert resp.json()["pagination"]["total"] == 1

def test_search_price_label(client):
    assert client.get("/properties").json()["price_label"] == "Any price"
    body = client.get("/properties", params={"minprice": 200000, "maxprice": 500000}).json()
    assert body["price_label"] == "GH₵200,000 - GH₵500,000"

def test_partial_patch_keeps_stored_details(client, listing_payload):
    prop = _create_listing(client, listing_payload)
    body = client.patch(f"/properties/{prop['id']}", json={"specifications": {"size": 3000}}).json()
    assert body["specifications"] == {"bedrooms": 3, "bathrooms": 2, "size": 3000.0, "size_unit": "sqft"}

    moved = {"address": "4 Oxford Street", "city": "Accra", "region": "Greater Accra"}
    body = client.patch(f"/properties/{prop['id']}", json={"location": moved}).json()
    assert body["location"]["address"] == "4 Oxford Street"
    assert body["location"]["coordinates"] == {"lat": 5.635, "lng": -0.154}

@pytest.mark.parametrize("changes", [
    {"title": "test"},
    {"description": "short"},
    {"title": None},
    {"specifications": {"bedrooms": 0}},
    {"type": "apartment", "specifications": {"bathrooms": 0}},
])
def test_patch_follows_listing_rules(client, listing_payload, changes):
    prop = _create_listing(client, listing_payload)
    assert client.patch(f"/properties/{prop['id']}", json=changes).status_code == 422
    assert client.get(f"/properties/{prop['id']}").json()["title"] == listing_payload["title"]

def test_patch_land_without_rooms(client, listing_payload):
    prop = _create_listing(client, listing_payload)
    body = client.patch(f"/properties/{prop['id']}", json={"type": "land", "specifications": {"bedrooms": 0}}).json()
    assert body["type"] == "land"

def test_import_listings(client):
    records = [
        {"id": "imp-1", "title": "Plot at Tema Community 25", "price": "120000", "type": "land",
         "status": "for-sale", "city": "Tema", "approval_status": "approved", "seller": {"name": "Kofi"}},
        {"id": "imp-2", "title": "Broken record", "price": "a lot"},
        {"id": "imp-3", "price": 5000},
    ]
    body = client.post("/admin/properties/import", json=records).json()
    assert body["imported"] == ["imp-1"]
    assert [e["id"] for e in body["errors"]] == ["imp-2", "imp-3"]
    assert client.get("/properties/imp-1").json()["price"] == 120000
    assert client.get("/properties", params={"q": "Tema"}).json()["pagination"]["total"] == 1

def test_currency_parse_and_country(client):
    body = client.get("/currency/parse", params={"text": "₵1,200,000"}).json()
    assert body["amount_ghs"] == 1200000
    assert client.get("/currency/parse", params={"text": "$62", "currency": "USD"}).json()["amount_ghs"] == 1000
    assert client.get("/currency/format", params={"price": 850000, "country": "GB"}).json()["formatted"] == "£41,650"
