from sweetswirls.models.inventory import CurrentStock
from sweetswirls.services import inventory_service, location_service


def _item_payload(**overrides):
    payload = {
        "name": "Strawberry Base",
        "category": "BASE",
        "unit": "gallons",
        "parStockLevel": 8,
        "sku": "STRAWB-001",
    }
    payload.update(overrides)
    return payload


class TestItems:
    def test_create_item(self, client, auth_for, shift_lead, shop):
        resp = client.post(
            "/api/inventory/items",
            json=_item_payload(defaultLocationId=shop.id),
            headers=auth_for(shift_lead),
        )
        assert resp.status_code == 201
        data = resp.json()
        assert data["name"] == "Strawberry Base"
        assert data["parStockLevel"] == 8
        assert data["defaultLocationId"] == shop.id
        assert data["isActive"] is True

    def test_par_level_must_be_positive(self, client, auth_headers):
        resp = client.post("/api/inventory/items", json=_item_payload(parStockLevel=0), headers=auth_headers)
        assert resp.status_code == 422

    def test_unknown_location_rejected(self, client, auth_headers):
        resp = client.post(
            "/api/inventory/items", json=_item_payload(defaultLocationId="nowhere"), headers=auth_headers
        )
        assert resp.status_code == 400
        assert "not found" in resp.json()["detail"]

    def test_team_member_cannot_create(self, client, auth_for, team_member):
        resp = client.post("/api/inventory/items", json=_item_payload(), headers=auth_for(team_member))
        assert resp.status_code == 403

    def test_list_items_sorted_by_name(self, client, auth_headers, auth_for, team_member, vanilla):
        client.post("/api/inventory/items", json=_item_payload(name="Almond Crunch"), headers=auth_headers)
        resp = client.get("/api/inventory/items", headers=auth_for(team_member))
        assert resp.status_code == 200
        assert [i["name"] for i in resp.json()] == ["Almond Crunch", "Vanilla Base"]

    def test_update_item(self, client, auth_headers, vanilla):
        resp = client.put(
            f"/api/inventory/items/{vanilla.id}", json={"parStockLevel": 12, "notes": "Order Fridays"}, headers=auth_headers
        )
        assert resp.status_code == 200
        assert resp.json()["parStockLevel"] == 12
        assert resp.json()["notes"] == "Order Fridays"
        assert resp.json()["name"] == "Vanilla Base"

    def test_update_missing_item(self, client, auth_headers):
        resp = client.put("/api/inventory/items/missing", json={"name": "x"}, headers=auth_headers)
        assert resp.status_code == 404

    def test_delete_is_soft(self, client, auth_headers, db_session, vanilla):
        resp = client.delete(f"/api/inventory/items/{vanilla.id}", headers=auth_headers)
        assert resp.status_code == 204
        assert client.get("/api/inventory/items", headers=auth_headers).json() == []
        inactive = client.get("/api/inventory/items", params={"active": "false"}, headers=auth_headers).json()
        assert [i["id"] for i in inactive] == [vanilla.id]

    def test_only_admin_deletes(self, client, auth_for, production_lead, vanilla):
        resp = client.delete(f"/api/inventory/items/{vanilla.id}", headers=auth_for(production_lead))
        assert resp.status_code == 403


class TestCurrentStock:
    def test_below_par(self, client, auth_headers, db_session, vanilla, shop):
        inventory_service.set_stock(db_session, vanilla.id, shop.id, 4)
        db_session.commit()

        current = client.get("/api/inventory/current", headers=auth_headers).json()
        assert len(current) == 1
        assert current[0]["quantity"] == 4
        assert current[0]["item"]["name"] == "Vanilla Base"

        below = client.get("/api/inventory/current/below-par", headers=auth_headers).json()
        assert [s["itemId"] for s in below] == [vanilla.id]

    def test_at_par_is_not_low(self, client, auth_headers, db_session, vanilla, shop):
        inventory_service.set_stock(db_session, vanilla.id, shop.id, 10)
        db_session.commit()
        assert client.get("/api/inventory/current/below-par", headers=auth_headers).json() == []

    def test_item_stock(self, client, auth_headers, db_session, vanilla, shop):
        inventory_service.set_stock(db_session, vanilla.id, shop.id, 3)
        db_session.commit()
        resp = client.get(f"/api/inventory/items/{vanilla.id}/stock", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()[0]["locationId"] == shop.id
        assert client.get("/api/inventory/items/missing/stock", headers=auth_headers).status_code == 404

    def test_set_stock_upserts(self, db_session, vanilla, shop):
        inventory_service.set_stock(db_session, vanilla.id, shop.id, 3)
        inventory_service.set_stock(db_session, vanilla.id, shop.id, 7)
        db_session.commit()
        rows = db_session.query(CurrentStock).all()
        assert len(rows) == 1
        assert rows[0].quantity == 7

    def test_adjust_stock_starts_at_zero_and_clamps(self, db_session, vanilla, shop):
        assert inventory_service.adjust_stock(db_session, vanilla.id, shop.id, 2.5).quantity == 2.5
        assert inventory_service.adjust_stock(db_session, vanilla.id, shop.id, -4).quantity == 0

    def test_retired_items_drop_out_of_current_stock(self, client, auth_headers, db_session, vanilla, shop):
        inventory_service.set_stock(db_session, vanilla.id, shop.id, 1)
        db_session.commit()
        assert client.delete(f"/api/inventory/items/{vanilla.id}", headers=auth_headers).status_code == 204

        assert client.get("/api/inventory/current", headers=auth_headers).json() == []
        assert client.get("/api/inventory/current/below-par", headers=auth_headers).json() == []


class TestLocations:
    def test_list_and_filter(self, client, auth_headers, shop, freezer):
        names = [loc["name"] for loc in client.get("/api/locations", headers=auth_headers).json()]
        assert names == ["Freezer A", "Main Shop"]
        freezers = client.get("/api/locations", params={"type": "FREEZER"}, headers=auth_headers).json()
        assert [loc["id"] for loc in freezers] == [freezer.id]

    def test_create_requires_admin(self, client, auth_for, shift_lead):
        resp = client.post("/api/locations", json={"name": "Truck 3", "type": "TRUCK"}, headers=auth_for(shift_lead))
        assert resp.status_code == 403

    def test_create(self, client, auth_headers):
        resp = client.post("/api/locations", json={"name": "Truck 3", "type": "TRUCK"}, headers=auth_headers)
        assert resp.status_code == 201
        assert resp.json()["type"] == "TRUCK"

    def test_get_missing(self, client, auth_headers):
        assert client.get("/api/locations/missing", headers=auth_headers).status_code == 404


def test_seed_data(db_session):
    assert location_service.ensure_default_locations(db_session) == 6
    assert inventory_service.ensure_sample_items(db_session) == len(inventory_service.SAMPLE_ITEMS)
    assert inventory_service.ensure_sample_items(db_session) == 0
    vanilla = next(i for i in inventory_service.list_items(db_session) if i.name == "Vanilla Base")
    assert vanilla.notes == "Primary vanilla ice cream base"
