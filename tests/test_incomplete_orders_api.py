import asyncio


async def test_draft_is_written_after_quiet_period(client, db, scheduler):
    for name in ("R", "Rah", "Rahim"):
        resp = await client.post("/incomplete-orders", json={"sessionId": "sess-1", "fullName": name})
        assert resp.status_code == 202

    assert await db.incomplete_orders.count_documents({}) == 0
    await asyncio.sleep(scheduler.delay * 3)

    docs = await db.incomplete_orders.find({}).to_list(None)
    assert [d["fullName"] for d in docs] == ["Rahim"]


async def test_delete_cancels_pending_write(client, db, scheduler):
    await client.post("/incomplete-orders", json={"sessionId": "sess-1", "fullName": "Rahim"})

    resp = await client.delete("/incomplete-orders/sess-1")
    await asyncio.sleep(scheduler.delay * 3)

    assert resp.json() == {"deletedCount": 0}
    assert await db.incomplete_orders.count_documents({}) == 0


async def test_admin_lists_drafts(admin_client, db):
    await db.incomplete_orders.insert_one({"sessionId": "s1", "fullName": "Karim", "phone": "017"})
    resp = await admin_client.get("/incomplete-orders")
    assert resp.status_code == 200
    assert resp.json()[0]["sessionId"] == "s1"


async def test_listing_drafts_is_admin_only(buyer_client):
    resp = await buyer_client.get("/incomplete-orders")
    assert resp.status_code == 403
