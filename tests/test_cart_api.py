from tests.factories import product_doc


async def test_add_merges_identical_variants(buyer_client, db):
    await db.products.insert_one(product_doc("p1"))

    first = await buyer_client.post("/cart/add", json={"productId": "p1", "quantity": 1, "selectedColor": "Navy"})
    again = await buyer_client.post("/cart/add", json={"productId": "p1", "quantity": 2, "selectedColor": "Navy"})
    other = await buyer_client.post("/cart/add", json={"productId": "p1", "quantity": 1, "selectedColor": "Maroon"})

    assert first.json()["id"] == again.json()["id"] != other.json()["id"]
    items = (await buyer_client.get("/cart/")).json()["items"]
    assert [(i["selectedColor"], i["quantity"]) for i in items] == [("Navy", 3), ("Maroon", 1)]


async def test_add_unknown_product(buyer_client):
    resp = await buyer_client.post("/cart/add", json={"productId": "nope", "quantity": 1})
    assert resp.status_code == 404


async def test_patch_quantity_and_selection(buyer_client, db):
    await db.products.insert_one(product_doc("p1"))
    line_id = (await buyer_client.post("/cart/add", json={"productId": "p1", "quantity": 1})).json()["id"]

    resp = await buyer_client.patch(f"/cart/{line_id}", json={"quantity": 4, "selected": False})

    assert resp.status_code == 200
    [item] = (await buyer_client.get("/cart/")).json()["items"]
    assert item["quantity"] == 4
    assert item["selected"] is False


async def test_patch_zero_quantity_removes_line(buyer_client, db):
    await db.products.insert_one(product_doc("p1"))
    line_id = (await buyer_client.post("/cart/add", json={"productId": "p1", "quantity": 1})).json()["id"]

    await buyer_client.patch(f"/cart/{line_id}", json={"quantity": 0})

    assert (await buyer_client.get("/cart/")).json()["items"] == []


async def test_delete_line(buyer_client, db):
    await db.products.insert_one(product_doc("p1"))
    line_id = (await buyer_client.post("/cart/add", json={"productId": "p1", "quantity": 1})).json()["id"]

    assert (await buyer_client.delete(f"/cart/{line_id}")).status_code == 200
    assert (await buyer_client.delete(f"/cart/{line_id}")).status_code == 404


async def test_cart_requires_login(client):
    resp = await client.get("/cart/")
    assert resp.status_code == 401
