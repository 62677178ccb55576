import re
from models import Order


async def fill_cart(client, headers, products):
    """2 x Burger @ 10.50 + 1 x Soda @ 3.00 = 24.00"""
    await client.post("/cart/items", json={"product_id": products["burger"].id, "quantity": 2}, headers=headers)
    await client.post("/cart/items", json={"product_id": products["soda"].id, "quantity": 1}, headers=headers)


async def place(client, headers, **body):
    body.setdefault("payment_method", "cash")
    return await client.post("/orders", json=body, headers=headers)


async def test_place_order_success(client, customer_headers, products):
    await fill_cart(client, customer_headers, products)

    response = await place(client, customer_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Order placed successfully"
    assert re.match(r"^ORD\d{8}[A-Z0-9]{4}$", body["data"]["order_number"])
    assert re.match(r"^TX\d{8}[A-Z0-9]{4}$", body["data"]["transaction_ref"])
    assert body["data"]["total_amount"] == "24.00"
    assert body["data"]["payment_status"] == "pending"

    cart = await client.get("/cart", headers=customer_headers)
    assert cart.json()["data"]["item_count"] == 0


async def test_place_order_empty_cart(client, customer_headers):
    response = await place(client, customer_headers)

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "message": "Cart is empty. Add items before placing order."
    }


async def test_place_order_invalid_payment_method(client, customer_headers, products):
    await fill_cart(client, customer_headers, products)

    response = await place(client, customer_headers, payment_method="bitcoin")

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation failed"
    assert body["errors"][0]["field"] == "payment_method"


async def test_place_order_missing_payment_method(client, customer_headers, products):
    response = await client.post("/orders", json={}, headers=customer_headers)

    assert response.status_code == 400


async def test_place_order_requires_token(client):
    response = await client.post("/orders", json={"payment_method": "cash"})

    assert response.status_code == 401


async def test_place_order_unavailable_product(client, session, customer_headers, products):
    await fill_cart(client, customer_headers, products)
    products["soda"].status = "unavailable"
    session.commit()

    response = await place(client, customer_headers)

    assert response.status_code == 400
    assert "Soda is no longer available" in response.json()["message"]
    assert session.query(Order).count() == 0


async def test_place_order_with_saved_address(client, customer_headers, products, customer_address):
    await fill_cart(client, customer_headers, products)

    response = await place(client, customer_headers, address_id=customer_address.id)
    order_id = response.json()["data"]["order_id"]

    detail = await client.get(f"/orders/{order_id}", headers=customer_headers)
    assert detail.json()["data"]["delivery_address"] == "12 Nile St, Cairo, Giza"


async def test_place_order_with_unknown_address(client, customer_headers, products):
    await fill_cart(client, customer_headers, products)

    response = await place(client, customer_headers, address_id=999)

    assert response.status_code == 400
    assert response.json()["message"] == "Delivery address not found"


async def test_idempotency_key_replay(client, session, customer_headers, products):
    await fill_cart(client, customer_headers, products)
    headers = {**customer_headers, "Idempotency-Key": "3f2b-checkout"}

    first = await place(client, headers)
    second = await place(client, headers)

    assert first.status_code == 201
    assert second.status_code == 200
    assert second.json()["message"] == "Order already placed"
    assert second.json()["data"]["order_number"] == first.json()["data"]["order_number"]
    assert session.query(Order).count() == 1


async def test_blank_idempotency_key_treated_as_absent(client, session, customer_headers, products):
    """Two checkouts with an empty key are two separate orders, not a 500."""
    headers = {**customer_headers, "Idempotency-Key": ""}

    await fill_cart(client, customer_headers, products)
    first = await place(client, headers)
    await fill_cart(client, customer_headers, products)
    second = await place(client, headers)

    assert first.status_code == 201
    assert second.status_code == 201
    assert second.json()["data"]["order_number"] != first.json()["data"]["order_number"]
    assert session.query(Order).count() == 2
    assert session.query(Order).filter(Order.idempotency_key.is_not(None)).count() == 0


async def test_money_sent_as_two_decimal_strings(client, customer_headers, products):
    await client.post("/cart/items", json={"product_id": products["fries"].id, "quantity": 1}, headers=customer_headers)

    placed = (await place(client, customer_headers)).json()["data"]
    detail = (await client.get(f"/orders/{placed['order_id']}", headers=customer_headers)).json()["data"]

    assert placed["total_amount"] == "5.00"
    assert detail["total_amount"] == "5.00"
    assert detail["items"][0]["price_at_time"] == "5.00"
    assert detail["payment"]["amount"] == "5.00"


async def test_idempotency_key_too_long(client, customer_headers, products):
    headers = {**customer_headers, "Idempotency-Key": "k" * 65}

    response = await place(client, headers)

    assert response.status_code == 400


async def test_list_my_orders(client, customer_headers, products):
    await fill_cart(client, customer_headers, products)
    await place(client, customer_headers)

    response = await client.get("/orders", headers=customer_headers)

    assert response.status_code == 200
    orders = response.json()["data"]
    assert len(orders) == 1
    assert orders[0]["item_count"] == 2
    assert orders[0]["total_items"] == 3
    assert orders[0]["status"] == "pending"


async def test_order_detail(client, customer_headers, products):
    await fill_cart(client, customer_headers, products)
    placed = (await place(client, customer_headers)).json()["data"]

    response = await client.get(f"/orders/{placed['order_id']}", headers=customer_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["order_number"] == placed["order_number"]
    assert data["customer_name"] == "Amina Customer"
    assert {item["name"] for item in data["items"]} == {"Burger", "Soda"}
    assert data["payment"]["transaction_ref"] == placed["transaction_ref"]
    assert data["payment"]["method"] == "cash"


async def test_order_detail_other_user_forbidden(client, customer_headers, other_headers, products):
    await fill_cart(client, customer_headers, products)
    placed = (await place(client, customer_headers)).json()["data"]

    response = await client.get(f"/orders/{placed['order_id']}", headers=other_headers)

    assert response.status_code == 403
    assert response.json()["success"] is False


async def test_order_detail_admin_allowed(client, customer_headers, admin_headers, products):
    await fill_cart(client, customer_headers, products)
    placed = (await place(client, customer_headers)).json()["data"]

    response = await client.get(f"/orders/{placed['order_id']}", headers=admin_headers)

    assert response.status_code == 200


async def test_order_detail_not_found(client, customer_headers):
    response = await client.get("/orders/999", headers=customer_headers)

    assert response.status_code == 404
    assert response.json()["message"] == "Order not found"


async def test_update_status_admin(client, customer_headers, admin_headers, products):
    await fill_cart(client, customer_headers, products)
    placed = (await place(client, customer_headers)).json()["data"]

    response = await client.patch(
        f"/orders/{placed['order_id']}/status", json={"status": "preparing"}, headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "preparing"
    assert response.json()["message"] == "Order status updated to preparing"


async def test_update_status_invalid_value(client, customer_headers, admin_headers, products):
    await fill_cart(client, customer_headers, products)
    placed = (await place(client, customer_headers)).json()["data"]

    response = await client.patch(
        f"/orders/{placed['order_id']}/status", json={"status": "shipped"}, headers=admin_headers
    )

    assert response.status_code == 400


async def test_update_status_requires_admin(client, customer_headers, products):
    await fill_cart(client, customer_headers, products)
    placed = (await place(client, customer_headers)).json()["data"]

    response = await client.patch(
        f"/orders/{placed['order_id']}/status", json={"status": "completed"}, headers=customer_headers
    )

    assert response.status_code == 403
    assert response.json()["message"] == "Admin access required."
