"""HTTP tests for the lens, lens-grid and lens-costing routers."""

import asyncio
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from optical_console.core.deps import get_lens_store, get_movement_store
from optical_console.db.database import get_async_session
from optical_console.main import app


@pytest.fixture
def client(lens_store, movement_store):
    app.dependency_overrides[get_lens_store] = lambda: lens_store
    app.dependency_overrides[get_movement_store] = lambda: movement_store
    # Not entered as a context manager: the lifespan would create tables in Postgres
    yield TestClient(app)
    app.dependency_overrides.clear()


def seed(store, sph, cyl, quantity, **attrs):
    values = {"sph": Decimal(sph), "cyl": Decimal(cyl), "quantity": quantity}
    for name in ("lens_type", "lens_thickness", "lens_colour", "lens_diameter", "lens_coating"):
        values[name] = attrs.get(name)
    return asyncio.run(store.insert(values))


class TestLensesRouter:
    def test_create_and_get(self, client):
        res = client.post("/lenses/", json={"sph": "-1.50", "cyl": "0.75", "quantity": 4, "lens_type": " CR39 "})
        assert res.status_code == 201
        body = res.json()
        assert body["lens_type"] == "CR39"
        assert body["quantity"] == 4

        res = client.get(f"/lenses/{body['id']}")
        assert res.status_code == 200
        assert res.json()["id"] == body["id"]

    def test_negative_quantity_is_422(self, client):
        res = client.post("/lenses/", json={"sph": 0, "cyl": 0, "quantity": -1})
        assert res.status_code == 422

    def test_list_filters(self, client, lens_store):
        seed(lens_store, "0.00", "0.00", 1, lens_type="CR39")
        seed(lens_store, "1.00", "0.00", 1, lens_type="Trivex")
        res = client.get("/lenses/", params={"lens_type": "CR39"})
        assert res.status_code == 200
        assert [r["lens_type"] for r in res.json()] == ["CR39"]
        assert len(client.get("/lenses/", params={"lens_type": "all"}).json()) == 2

    def test_patch_and_delete(self, client, lens_store):
        lens = seed(lens_store, "0.00", "0.00", 1)
        res = client.patch(f"/lenses/{lens.id}", json={"quantity": 9, "lens_coating": "HMC"})
        assert res.status_code == 200
        assert res.json()["quantity"] == 9
        assert res.json()["lens_coating"] == "HMC"

        assert client.patch(f"/lenses/{lens.id}", json={"quantity": None}).status_code == 400

        assert client.delete(f"/lenses/{lens.id}").status_code == 204
        assert client.get(f"/lenses/{lens.id}").status_code == 404

    def test_missing_lens(self, client):
        missing = "00000000-0000-0000-0000-000000000000"
        assert client.get(f"/lenses/{missing}").status_code == 404
        assert client.delete(f"/lenses/{missing}").status_code == 404


class TestLensGridRouter:
    def test_axes(self, client):
        body = client.get("/lens-grid/axes").json()
        assert len(body["sph"]) == 33
        assert len(body["cyl"]) == 17

    def test_overview(self, client, lens_store):
        seed(lens_store, "-6.00", "0.00", 4, lens_type="CR39")
        seed(lens_store, "-6.00", "0.00", 30, lens_type="Trivex")
        body = client.get("/lens-grid/").json()
        cell = body["rows"][0]["cells"][0]
        assert cell["total"] == 34
        assert cell["level"] == "high"
        assert body["summary"] == {"unique_skus": 2, "total_lenses": 34, "out_of_stock": 0}
        assert body["filter_options"]["lens_type"] == ["CR39", "Trivex"]

        filtered = client.get("/lens-grid/", params={"lens_type": "CR39"}).json()
        assert filtered["rows"][0]["cells"][0]["total"] == 4
        assert filtered["rows"][0]["cells"][0]["level"] == "low"
        assert filtered["filter_options"]["lens_type"] == ["CR39", "Trivex"]

    def test_bulk(self, client):
        res = client.post(
            "/lens-grid/bulk",
            json={
                "grid": {"cell__9.00__0.00": "1"},
                "ranges": [{"start_sph": "-1", "end_sph": "", "start_cyl": "0", "end_cyl": "0.25", "quantity": 3}],
            },
        )
        assert res.status_code == 200
        assert res.json()["grid"] == {"cell__9.00__0.00": "1", "cell__-1.00__0.00": 6, "cell__-1.00__0.25": 6}

    def test_bulk_rejects_non_numeric_quantity(self, client):
        res = client.post(
            "/lens-grid/bulk",
            json={"ranges": [{"start_sph": "0", "start_cyl": "0", "quantity": "lots"}]},
        )
        assert res.status_code == 422

    def test_quick_select(self, client):
        res = client.post(
            "/lens-grid/quick-select",
            json={"grid": {"cell__-2.00__1.00": 1}, "sph": "-2", "cyl": "1", "quantity": 2},
        )
        assert res.json()["grid"] == {"cell__-2.00__1.00": 3}

        res = client.post("/lens-grid/quick-select", json={"sph": "-2", "quantity": 2})
        assert res.status_code == 400

    def test_add_then_add_again(self, client, lens_store, movement_store):
        payload = {"grid": {"cell__-2.00__1.00": "10"}, "details": {"lens_type": "CR39", "reason": "New Stock"}}
        body = client.post("/lens-grid/add", json=payload).json()
        assert body["status"] == "success"
        assert body["message"] == "Successfully processed 1 lens entries."

        payload["grid"] = {"cell__-2.00__1.00": 5}
        client.post("/lens-grid/add", json=payload)
        (row,) = lens_store.rows.values()
        assert row["quantity"] == 15
        assert len(movement_store.rows) == 2

    def test_add_noop(self, client):
        body = client.post("/lens-grid/add", json={"grid": {"cell__0.00__0.00": ""}}).json()
        assert body["status"] == "noop"

    def test_remove_respects_filters(self, client, lens_store):
        cr39 = seed(lens_store, "0.00", "0.00", 2, lens_type="CR39")
        trivex = seed(lens_store, "0.00", "0.00", 1, lens_type="Trivex")
        body = client.post(
            "/lens-grid/remove",
            json={"grid": {"cell__0.00__0.00": 2}, "filters": {"lens_type": "CR39"}, "reason": "Sold"},
        ).json()
        assert body["status"] == "success"
        assert lens_store.rows[cr39.id]["quantity"] == 0
        assert lens_store.rows[trivex.id]["quantity"] == 1

    def test_remove_insufficient(self, client, lens_store):
        seed(lens_store, "0.00", "0.00", 2)
        body = client.post("/lens-grid/remove", json={"grid": {"cell__0.00__0.00": 3}}).json()
        assert body["status"] == "failure"
        assert body["rejected"][0]["error_kind"] == "InsufficientStockError"
        assert body["failure_count"] == 1

    def test_preview(self, client, lens_store):
        seed(lens_store, "-6.00", "0.00", 2)
        body = client.post("/lens-grid/preview", json={"grid": {"cell__-6.00__0.00": 1}}).json()
        cells = body["rows"][0]["cells"]
        assert cells[0]["removal_state"] == "selected"
        assert cells[1]["removal_state"] == "unavailable"

    def test_ledger(self, client, lens_store):
        client.post("/lens-grid/add", json={"grid": {"cell__0.00__0.00": 2, "cell__0.50__0.00": 1}})
        body = client.get("/lens-grid/ledger", params={"limit": 1}).json()
        assert len(body) == 1
        assert body[0]["change"] == 1


class TestLensCostingsRouter:
    @pytest.fixture
    def costings_client(self):
        async def no_session():
            yield None

        app.dependency_overrides[get_async_session] = no_session
        yield TestClient(app)
        app.dependency_overrides.clear()

    def test_other_type_needs_free_text(self, costings_client):
        res = costings_client.post("/lens-costings/", json={"lens_type": "Other", "lens_use": "Bifocal"})
        assert res.status_code == 422

    def test_unknown_lens_use(self, costings_client):
        res = costings_client.post("/lens-costings/", json={"lens_type": "CR39", "lens_use": "Reading"})
        assert res.status_code == 422
