"""Mock HubSpot CRM server for local development and end-to-end tests.

Run with: uvicorn crm_mock.server:app --port 8001
"""

from fastapi import FastAPI, HTTPException
from pathlib import Path
from typing import Any, Dict, List
import json

app = FastAPI(title="Mock HubSpot Server", version="1.0.0")
DATA_FILE = Path(__file__).resolve().parent / "stub" / "crm.json"


def load_data() -> Dict[str, Any]:
    return json.loads(DATA_FILE.read_text())


def deal_view(deal: Dict[str, Any], properties: List[str]) -> Dict[str, Any]:
    props = deal.get("properties", {})
    return {"id": deal["id"], "properties": {key: props.get(key) for key in properties}}


@app.get("/health")
def health(): return {"status": "ok"}


@app.post("/crm/v3/objects/contacts/search")
def search_contacts(body: Dict[str, Any]):
    filters = [f for group in body.get("filterGroups", []) for f in group.get("filters", [])]
    wanted = next((f["value"] for f in filters if f.get("propertyName") == "email"), None)
    matches = [c for c in load_data()["contacts"] if c["properties"].get("email") == wanted]
    return {"total": len(matches), "results": matches[: body.get("limit", 10)]}


@app.get("/crm/v4/objects/contacts/{contact_id}/associations/deals")
def contact_deals(contact_id: str):
    deal_ids = load_data()["associations"].get(contact_id, [])
    return {"results": [{"toObjectId": int(deal_id), "associationTypes": []} for deal_id in deal_ids]}


@app.post("/crm/v3/objects/deals/batch/read")
def batch_read_deals(body: Dict[str, Any]):
    deals = {d["id"]: d for d in load_data()["deals"]}
    properties = body.get("properties", [])
    results = [deal_view(deals[i["id"]], properties) for i in body.get("inputs", []) if i["id"] in deals]
    return {"status": "COMPLETE", "results": results}


@app.get("/crm/v3/objects/deals/{deal_id}")
def get_deal(deal_id: str, properties: str = ""):
    deal = next((d for d in load_data()["deals"] if d["id"] == deal_id), None)
    if deal is None:
        raise HTTPException(status_code=404, detail="Object not found")
    return deal_view(deal, [p for p in properties.split(",") if p])
