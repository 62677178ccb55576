async def test_health_envelope(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Service is running",
        "data": {"status": "Healthy"}
    }


async def test_request_id_generated(client):
    response = await client.get("/health")

    assert response.headers.get("X-Request-ID")


async def test_client_request_id_echoed(client):
    response = await client.get("/health", headers={"X-Request-ID": "support-ticket-42"})

    assert response.headers["X-Request-ID"] == "support-ticket-42"


async def test_oversized_request_id_replaced(client):
    supplied = "x" * 200
    response = await client.get("/health", headers={"X-Request-ID": supplied})

    assert response.headers["X-Request-ID"] != supplied
