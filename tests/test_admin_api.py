from datetime import datetime, timedelta

from tests.factories import product_doc


def order_doc(oid, status, minutes_old=0, payment="cod"):
    return {
        "_id": oid,
        "tran_id": f"TXN-{oid}",
        "status": status,
        "payment": payment,
        "total": 1060,
        "createdAt": datetime.utcnow() - timedelta(minutes=minutes_old),
        "cartItems": [{"productId": "p1", "productName": "Cotton Panjabi", "quantity": 2}],
    }


async def test_cancel_restores_stock(admin_client, db):
    await db.products.insert_one(product_doc("p1", stock=3))
    await db.orders.insert_one(order_doc("o1", "pending"))

    resp = await admin_client.put("/admin/orders/o1/status", json={"status": "cancelled"})

    assert resp.status_code == 200
    assert (await db.orders.find_one({"_id": "o1"}))["status"] == "cancelled"
    assert (await db.products.find_one({"_id": "p1"}))["stock"] == 5


async def test_illegal_transition_is_rejected(admin_client, db):
    await db.orders.insert_one(order_doc("o1", "pending"))

    resp = await admin_client.put("/admin/orders/o1/status", json={"status": "paid"})

    assert resp.status_code == 409
    assert "pending" in resp.json()["message"]
    assert (await db.orders.find_one({"_id": "o1"}))["status"] == "pending"


async def test_same_status_is_a_no_op(admin_client, db):
    await db.orders.insert_one(order_doc("o1", "pending"))
    resp = await admin_client.put("/admin/orders/o1/status", json={"status": "pending"})
    assert resp.json()["message"] == "Status unchanged"


async def test_expire_stale_payments(admin_client, db):
    await db.products.insert_one(product_doc("p1", stock=0))
    await db.orders.insert_many([
        order_doc("old", "payment_pending", minutes_old=90, payment="online"),
        order_doc("fresh", "payment_pending", minutes_old=1, payment="online"),
        order_doc("cod", "pending", minutes_old=90),
    ])

    resp = await admin_client.post("/admin/orders/expire-stale", params={"ttl_minutes": 30})

    assert resp.json() == {"expired": ["old"], "count": 1}
    assert (await db.products.find_one({"_id": "p1"}))["stock"] == 2


async def test_list_orders_filters_by_status(admin_client, db):
    await db.orders.insert_many([order_doc("o1", "pending"), order_doc("o2", "paid", payment="online")])

    resp = await admin_client.get("/admin/orders", params={"status": "paid"})

    body = resp.json()
    assert body["total"] == 1
    assert [o["id"] for o in body["orders"]] == ["o2"]


async def test_admin_routes_reject_buyers(buyer_client):
    resp = await buyer_client.get("/admin/orders")
    assert resp.status_code == 403
