async def place_order(client, headers, products):
    await client.post("/cart/items", json={"product_id": products["fries"].id, "quantity": 2}, headers=headers)
    response = await client.post("/orders", json={"payment_method": "cash"}, headers=headers)
    return response.json()["data"]


async def test_list_my_payments(client, customer_headers, other_headers, products):
    placed = await place_order(client, customer_headers, products)
    await place_order(client, other_headers, products)

    response = await client.get("/payments", headers=customer_headers)

    assert response.status_code == 200
    payments = response.json()["data"]
    assert len(payments) == 1
    assert payments[0]["order_number"] == placed["order_number"]
    assert payments[0]["amount"] == "10.00"
    assert payments[0]["status"] == "pending"


async def test_payment_detail(client, customer_headers, products):
    await place_order(client, customer_headers, products)
    payment_id = (await client.get("/payments", headers=customer_headers)).json()["data"][0]["id"]

    response = await client.get(f"/payments/{payment_id}", headers=customer_headers)

    assert response.status_code == 200
    assert response.json()["data"]["method"] == "cash"


async def test_payment_detail_other_user_forbidden(client, customer_headers, other_headers, products):
    await place_order(client, customer_headers, products)
    payment_id = (await client.get("/payments", headers=customer_headers)).json()["data"][0]["id"]

    response = await client.get(f"/payments/{payment_id}", headers=other_headers)

    assert response.status_code == 403


async def test_payment_detail_not_found(client, customer_headers):
    response = await client.get("/payments/999", headers=customer_headers)

    assert response.status_code == 404
