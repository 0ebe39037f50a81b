from conftest import create_booking, create_business, create_service, create_user

from boatbook.models import Service

NEW_SERVICE = {
    "name": "Sunset Cruise",
    "description": "Two hours around Pulau Redang",
    "duration_minutes": 120,
    "max_capacity": 12,
}


def test_list_services_requires_business_member(client, auth, db):
    auth.login(create_user(db, email="guest@example.com", role="customer"))
    assert client.get("/api/services").status_code == 403


def test_list_services(client, auth, owner, service):
    auth.login(owner)

    response = client.get("/api/services")

    assert response.status_code == 200
    [listed] = response.json()
    assert listed["name"] == "Perhentian Island Transfer"
    assert listed["variants"][0]["name"] == "Adult"
    assert listed["addons"][0]["price"] == 15


def test_create_service_goes_last(client, auth, owner, service):
    auth.login(owner)

    response = client.post("/api/services", json=NEW_SERVICE)

    assert response.status_code == 201
    body = response.json()
    assert body["sort_order"] == 2
    assert body["price"] == 0
    assert body["is_active"] is True


def test_create_service_validation(client, auth, owner, business):
    auth.login(owner)
    assert client.post("/api/services", json={**NEW_SERVICE, "max_capacity": 0}).status_code == 422
    assert client.post("/api/services", json={**NEW_SERVICE, "name": ""}).status_code == 422


def test_staff_cannot_create_service(client, auth, db, business):
    auth.login(create_user(db, email="crew@example.com", role="staff", business_id=business.id))
    assert client.post("/api/services", json=NEW_SERVICE).status_code == 403


def test_update_and_toggle_service(client, auth, owner, service):
    auth.login(owner)

    response = client.put(f"/api/services/{service.id}", json={**NEW_SERVICE, "name": "Island Hopping"})
    assert response.status_code == 200
    assert response.json()["name"] == "Island Hopping"

    response = client.patch(f"/api/services/{service.id}/toggle", json={"is_active": False})
    assert response.json()["is_active"] is False


def test_service_of_other_business_not_found(client, auth, db, service):
    rival = create_user(db, email="rival@example.com")
    create_business(db, rival, slug="rival-tours")
    auth.login(rival)

    response = client.get(f"/api/services/{service.id}")

    assert response.status_code == 404
    assert response.json()["detail"] == "Service not found"


def test_delete_service(client, auth, db, owner, business):
    extra = create_service(db, business, name="Fishing Trip")
    auth.login(owner)

    response = client.delete(f"/api/services/{extra.id}")

    assert response.json() == {"success": True}
    assert db.query(Service).filter(Service.id == extra.id).first() is None


def test_delete_service_with_bookings_refused(client, auth, db, owner, business, service, slot):
    create_booking(db, business, service, slot)
    auth.login(owner)

    response = client.delete(f"/api/services/{service.id}")

    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot delete service with existing bookings"


def test_variant_lifecycle(client, auth, owner, service):
    auth.login(owner)

    response = client.post(f"/api/services/{service.id}/variants", json={"name": "Child", "price": 50})
    assert response.status_code == 201
    variant = response.json()
    assert variant["sort_order"] == 2

    response = client.put(
        f"/api/services/{service.id}/variants/{variant['id']}", json={"name": "Child (3-11)", "price": 45}
    )
    assert response.json()["price"] == 45

    assert client.delete(f"/api/services/{service.id}/variants/{variant['id']}").json() == {"success": True}
    assert client.delete(f"/api/services/{service.id}/variants/{variant['id']}").status_code == 404


def test_addon_lifecycle(client, auth, owner, service):
    auth.login(owner)

    response = client.post(
        f"/api/services/{service.id}/addons", json={"name": "Life jacket upgrade", "price": 5, "is_active": False}
    )
    assert response.status_code == 201
    addon = response.json()
    assert addon["sort_order"] == 2
    assert addon["is_active"] is False

    response = client.put(
        f"/api/services/{service.id}/addons/{addon['id']}", json={"name": "Life jacket upgrade", "price": 8}
    )
    assert response.json()["price"] == 8
    assert response.json()["is_active"] is True

    assert client.delete(f"/api/services/{service.id}/addons/{addon['id']}").json() == {"success": True}


def test_variant_price_must_not_be_negative(client, auth, owner, service):
    auth.login(owner)
    response = client.post(f"/api/services/{service.id}/variants", json={"name": "Child", "price": -1})
    assert response.status_code == 422
