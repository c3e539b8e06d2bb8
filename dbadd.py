# dbadd.py: seed products, shipping rates and coupons from a JSON file
import asyncio
import json
import logging
import sys
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from pymongo import UpdateOne

from core.logging import setup_logging
from db import close_client, get_db
from schemas.coupon import CouponCreate
from schemas.product import ProductCreate
from schemas.shipping import ShippingRate
from services.shipping import save_shipping_rate

logger = logging.getLogger("dbadd")


def to_uuid5_key(doc: Dict[str, Any]) -> str:
    """
    Deterministic _id so importing the same file twice does not duplicate.
    Keyed on barcode when present, else name.
    """
    base = (doc.get("barcode") or doc.get("name", "")).strip().lower()
    return str(uuid.uuid5(uuid.NAMESPACE_URL, base))


def normalize_product(raw: Dict[str, Any]) -> Dict[str, Any]:
    doc = ProductCreate.model_validate(raw).to_doc()
    doc["_id"] = raw.get("_id") or to_uuid5_key(doc)
    doc.setdefault("createdAt", datetime.utcnow())
    return doc


def normalize_coupon(raw: Dict[str, Any]) -> Dict[str, Any]:
    doc = CouponCreate.model_validate(raw).to_doc()
    doc["_id"] = str(uuid.uuid5(uuid.NAMESPACE_URL, "coupon:" + doc["code"]))
    return doc


async def bulk_import(json_path: Path) -> None:
    if not json_path.exists():
        raise FileNotFoundError(f"File not found: {json_path}")

    # {"products": [...], "coupons": [...], "shipping": {...}} or a bare product list
    with json_path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, list):
        data = {"products": data}
    if not isinstance(data, dict):
        raise ValueError("Expected a list of products or an object with 'products'/'coupons'/'shipping'.")

    db = await get_db()

    products: List[Dict[str, Any]] = [normalize_product(x) for x in data.get("products", [])]
    if products:
        ops = [UpdateOne({"_id": d["_id"]}, {"$set": d}, upsert=True) for d in products]
        result = await db.products.bulk_write(ops, ordered=False)
        logger.info("products upserted: %s, modified: %s", result.upserted_count, result.modified_count)

    coupons = [normalize_coupon(x) for x in data.get("coupons", [])]
    if coupons:
        ops = [UpdateOne({"code": c["code"]}, {"$set": c}, upsert=True) for c in coupons]
        result = await db.coupons.bulk_write(ops, ordered=False)
        logger.info("coupons upserted: %s, modified: %s", result.upserted_count, result.modified_count)

    if data.get("shipping"):
        rate = await save_shipping_rate(db, ShippingRate.model_validate(data["shipping"]))
        logger.info("shipping set: inside %s, outside %s", rate.inside_dhaka, rate.outside_dhaka)


if __name__ == "__main__":
    # Usage:
    #   python dbadd.py                -> ./data.json
    #   python dbadd.py /path/to/data.json
    setup_logging()
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("data.json")
    try:
        asyncio.run(bulk_import(path))
    finally:
        close_client()
