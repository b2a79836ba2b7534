def test_lists_only_active_services_ordered_by_name(client, services):
    response = client.get("/api/v1/services")

    assert response.status_code == 200
    names = [s["name"] for s in response.json()]
    assert names == ["Massagem Relaxante", "Reflexologia"]
    relaxing = response.json()[0]
    assert relaxing["duration_minutes"] == 60
    assert float(relaxing["price"]) == 150.0


def test_get_service(client, services):
    response = client.get(f"/api/v1/services/{services['reflexology'].id}")

    assert response.status_code == 200
    assert response.json()["name"] == "Reflexologia"
    assert response.json()["description"] is None


def test_inactive_or_unknown_service_is_not_found(client, services):
    assert client.get(f"/api/v1/services/{services['retired'].id}").status_code == 404
    assert client.get("/api/v1/services/9999").status_code == 404


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
